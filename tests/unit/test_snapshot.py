"""Unit tests for rendering documents to final and preview text."""

import pytest

from promptblocks.models.content import BlockElement, TextElement
from promptblocks.models.document import ContentDocument
from promptblocks.render.snapshot import make_resolver, render, render_preview


class TestRender:
    """Tests for render()."""

    def test_text_and_block_with_variables(self):
        """Test text and canonical block bodies render with substituted values."""
        doc = ContentDocument([TextElement("Hello {{name}}", order=0), BlockElement(block_id=7, order=1)])

        output = render(doc, {"name": "World", "x": "42"}, {7: "Block body {{x}}"})

        assert output == "Hello World\n\nBlock body 42"

    def test_orders_ascending(self):
        """Test fragments follow element order, not list position."""
        doc = ContentDocument([TextElement("second", order=2), TextElement("first", order=1)])

        assert render(doc) == "first\n\nsecond"

    def test_override_expands_original_text(self):
        """Test {{originalText}} in an override becomes the canonical body."""
        block = BlockElement(
            block_id=9,
            is_overridden=True,
            override_content="Before {{originalText}} after {{originalText}}",
        )

        assert render([block], {}, {9: "ORIGINAL"}) == "Before ORIGINAL after ORIGINAL"

    def test_override_without_placeholder_skips_resolver(self):
        """Test a plain override never asks for the canonical body."""
        calls = []

        def resolver(block_id):
            calls.append(block_id)
            return "unused"

        block = BlockElement(block_id=3, is_overridden=True, override_content="custom")

        assert render([block], None, resolver) == "custom"
        assert calls == []

    def test_empty_override_falls_back_to_canonical(self):
        """Test an overridden block with an empty body renders canonical text."""
        block = BlockElement(block_id=9, is_overridden=True, override_content="")

        assert render([block], {}, {9: "ORIGINAL"}) == "ORIGINAL"

    def test_unknown_block_renders_empty(self):
        """Test a block the resolver cannot supply is dropped from final output."""
        doc = [TextElement("a", order=0), BlockElement(block_id=99, order=1), TextElement("b", order=2)]

        assert render(doc, {}, {}) == "a\n\nb"

    def test_resolver_exception_degrades(self):
        """Test resolver errors render the block as empty text."""

        def resolver(block_id):
            raise RuntimeError("store offline")

        doc = [BlockElement(block_id=1, order=0), TextElement("tail", order=1)]

        assert render(doc, {}, resolver) == "tail"

    def test_substituted_blank_fragment_filtered(self):
        """Test fragments that become blank after substitution are dropped."""
        doc = [TextElement("{{gap}}", order=0), TextElement("kept", order=1)]

        assert render(doc, {"gap": "  "}) == "kept"

    def test_unknown_placeholders_left_in_place(self):
        """Test placeholders without values survive rendering."""
        assert render([TextElement("Hi {{who}}")]) == "Hi {{who}}"

    def test_none_document_raises(self):
        """Test rendering None is a programming error."""
        with pytest.raises(TypeError):
            render(None)

    def test_library_as_block_source(self, library):
        """Test a BlockLibrary can be passed directly as the block source."""
        doc = [BlockElement(block_id=1)]

        assert render(doc, {"name": "Ada"}, library) == "Hello Ada"


class TestRenderPreview:
    """Tests for render_preview()."""

    def test_keeps_empty_slots(self):
        """Test preview keeps empty fragments so their separators remain."""
        doc = [TextElement("a", order=0), BlockElement(block_id=99, order=1), TextElement("b", order=2)]

        assert render_preview(doc, {}, {}) == "a\n\n\n\nb"

    def test_matches_final_when_nothing_empty(self):
        """Test preview and final render agree when no fragment is blank."""
        doc = [TextElement("a", order=0), TextElement("b", order=1)]

        assert render_preview(doc) == render(doc)


class TestMakeResolver:
    """Tests for make_resolver()."""

    def test_none_resolves_nothing(self):
        """Test a missing source resolves every id to None."""
        assert make_resolver(None)(1) is None

    def test_mapping(self):
        """Test a mapping resolves via lookup."""
        resolver = make_resolver({1: "one"})

        assert resolver(1) == "one"
        assert resolver(2) is None

    def test_callable(self):
        """Test a callable is used as-is."""
        resolver = make_resolver(lambda block_id: f"block {block_id}")

        assert resolver(5) == "block 5"

    def test_unsupported_source(self):
        """Test non-callable sources are rejected."""
        with pytest.raises(TypeError, match="Unsupported block source"):
            make_resolver(42)
