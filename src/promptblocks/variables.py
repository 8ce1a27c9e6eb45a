"""Variable extraction and substitution for {{name}} placeholders.

All functions are pure and never raise on malformed braces: an unmatched
``{{`` simply produces no match.
"""

import re
from typing import Iterable, Mapping

from promptblocks.models.reports import VariableReport


VARIABLE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def extract_variables(text: str) -> list[str]:
    """Extract unique variable names in first-occurrence order.

    Names are trimmed; nested braces are not supported.

    Examples:
        >>> extract_variables("{{b}} and {{a}} and {{ b }}")
        ['b', 'a']
    """
    variables: list[str] = []

    for match in VARIABLE_PATTERN.finditer(text):
        name = match.group(1).strip()
        if name not in variables:
            variables.append(name)

    return variables


def get_all_variables(texts: Iterable[str]) -> list[str]:
    """Union of variables across several texts, in first-occurrence order."""
    all_variables: list[str] = []

    for text in texts:
        for name in extract_variables(text):
            if name not in all_variables:
                all_variables.append(name)

    return all_variables


def replace_variables(text: str, values: Mapping[str, str]) -> str:
    """Replace ``{{ key }}`` placeholders with literal values.

    Whitespace inside the braces is ignored. Placeholders whose key is not in
    ``values`` are left untouched. Every key is substituted in a single scan
    of the original text, so a substituted value is never expanded again and
    the result does not depend on the order of ``values``.

    Args:
        text: Text containing placeholders
        values: Variable name to replacement value

    Returns:
        Text with known placeholders replaced
    """
    if not values:
        return text

    # Longest names first so a name never shadows a longer one sharing its prefix
    names = sorted(values, key=len, reverse=True)
    alternatives = "|".join(re.escape(name) for name in names)
    pattern = re.compile(r"\{\{\s*(?P<name>" + alternatives + r")\s*\}\}")

    return pattern.sub(lambda m: values[m.group("name")], text)


def validate_variables(text: str, values: Mapping[str, str]) -> VariableReport:
    """Check that every variable used in ``text`` has a non-empty value.

    Args:
        text: Text to scan for placeholders
        values: Variable value map

    Returns:
        VariableReport with missing and unused variable names
    """
    required = extract_variables(text)
    missing = [name for name in required if name not in values or values[name] == ""]
    unused = [name for name in values if name not in required]

    return VariableReport(
        is_valid=not missing,
        missing_variables=missing,
        unused_variables=unused,
    )
