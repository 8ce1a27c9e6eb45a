"""Unit tests for CLI helpers."""

import click
import pytest

from promptblocks.cli import load_variables, parse_assignment


class TestParseAssignment:
    """Test NAME=VALUE parsing."""

    def test_simple(self):
        """Test a plain assignment."""
        assert parse_assignment("name=World") == ("name", "World")

    def test_value_may_contain_equals(self):
        """Test only the first '=' separates name from value."""
        assert parse_assignment("expr=a=b") == ("expr", "a=b")

    def test_empty_value(self):
        """Test an empty value is allowed."""
        assert parse_assignment("name=") == ("name", "")

    def test_name_trimmed(self):
        """Test whitespace around the name is ignored."""
        assert parse_assignment(" name =x") == ("name", "x")

    def test_missing_equals(self):
        """Test an assignment without '=' is rejected."""
        with pytest.raises(ValueError, match="Expected: NAME=VALUE"):
            parse_assignment("name")

    def test_blank_name(self):
        """Test an assignment with a blank name is rejected."""
        with pytest.raises(ValueError, match="Variable name is empty"):
            parse_assignment(" =x")


class TestLoadVariables:
    """Test building variable maps from files and assignments."""

    def test_assignments_only(self):
        """Test values come from assignments when there is no file."""
        assert load_variables(None, ("a=1", "b=2")) == {"a": "1", "b": "2"}

    def test_file_then_overrides(self, tmp_path):
        """Test assignments override file values and non-strings are stringified."""
        vars_file = tmp_path / "vars.yaml"
        vars_file.write_text("name: World\ncount: 3\nempty:\n")

        values = load_variables(vars_file, ("name=Ada",))

        assert values == {"name": "Ada", "count": "3", "empty": ""}

    def test_file_not_mapping(self, tmp_path):
        """Test a non-mapping variables file is rejected."""
        vars_file = tmp_path / "vars.yaml"
        vars_file.write_text("- a\n")

        with pytest.raises(click.ClickException, match="must be a mapping"):
            load_variables(vars_file, ())

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML is reported as a ClickException."""
        vars_file = tmp_path / "vars.yaml"
        vars_file.write_text("a: [b\n")

        with pytest.raises(click.ClickException, match="Invalid YAML"):
            load_variables(vars_file, ())

    def test_invalid_assignment(self):
        """Test invalid assignments become ClickExceptions."""
        with pytest.raises(click.ClickException):
            load_variables(None, ("novalue",))
