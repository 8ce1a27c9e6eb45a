"""Unit tests for content elements and ContentDocument operations."""

import pytest

from promptblocks.models.content import BlockElement, TextElement
from promptblocks.models.document import ContentDocument
from promptblocks.services.exceptions import ElementNotFoundError


def texts(doc: ContentDocument) -> list[str]:
    return [e.content if isinstance(e, TextElement) else f"#{e.block_id}" for e in doc]


class TestElements:
    """Tests for TextElement and BlockElement."""

    def test_generated_ids_are_unique_and_prefixed(self):
        """Test synthetic ids carry the element kind."""
        first, second = TextElement("a"), TextElement("b")
        block = BlockElement(block_id=1)

        assert first.id != second.id
        assert first.id.startswith("text-")
        assert block.id.startswith("block-")

    def test_effective_override_ignores_stale_content(self):
        """Test override content is ignored when the element is not overridden."""
        block = BlockElement(block_id=1, is_overridden=False, override_content="stale")

        assert block.effective_override is None
        assert block.has_stale_override() is True

    def test_clear_override_drops_content(self):
        """Test clearing an override also clears its body."""
        block = BlockElement(block_id=1)
        block.set_override("custom")
        block.clear_override()

        assert block.is_overridden is False
        assert block.override_content is None

    def test_text_blank_detection(self):
        """Test whitespace-only text counts as blank."""
        assert TextElement("   \n").is_blank() is True
        assert TextElement(" x ").is_blank() is False


class TestAppendAndInsert:
    """Tests for order assignment on insert."""

    def test_append_to_empty_document(self):
        """Test the first appended element gets order 1."""
        doc = ContentDocument()
        element = doc.append_text("first")

        assert element.order == 1

    def test_append_uses_max_plus_one(self):
        """Test appending places the element after the highest order."""
        doc = ContentDocument([TextElement("a", order=0), TextElement("b", order=5)])
        element = doc.append_block(3)

        assert element.order == 6
        assert texts(doc) == ["a", "b", "#3"]

    def test_insert_after_uses_midpoint(self):
        """Test inserting between two elements averages their orders."""
        doc = ContentDocument([TextElement("a", order=0), TextElement("c", order=1)])
        first = doc.sorted_elements()[0]

        inserted = doc.insert_text_after(first.id, "b")

        assert inserted.order == 0.5
        assert texts(doc) == ["a", "b", "c"]

    def test_insert_after_last_appends(self):
        """Test inserting after the last element appends."""
        doc = ContentDocument([TextElement("a", order=2)])
        last = doc.sorted_elements()[-1]

        inserted = doc.insert_block_after(last.id, 4)

        assert inserted.order == 3
        assert texts(doc) == ["a", "#4"]

    def test_insert_after_unknown_appends(self):
        """Test an unknown anchor falls back to appending."""
        doc = ContentDocument([TextElement("a", order=0)])

        inserted = doc.insert_text_after("missing", "z")

        assert texts(doc) == ["a", "z"]
        assert inserted.order == 1

    def test_insert_at_start_uses_min_minus_one(self):
        """Test inserting at the start places the element before the lowest order."""
        doc = ContentDocument([TextElement("a", order=3), TextElement("b", order=4)])

        inserted = doc.insert_block_at_start(2)

        assert inserted.order == 2
        assert texts(doc) == ["#2", "a", "b"]

    def test_insert_text_at_start_of_empty_document(self):
        """Test inserting at the start of an empty document."""
        doc = ContentDocument()
        inserted = doc.insert_text_at_start("only")

        assert texts(doc) == ["only"]
        assert inserted.order == 1

    def test_repeated_midpoint_inserts_renormalize(self):
        """Test repeated inserts into one gap stay ordered past float precision."""
        doc = ContentDocument([TextElement("start", order=1), TextElement("end", order=2)])
        anchor = doc.sorted_elements()[0]

        for i in range(80):
            doc.insert_text_after(anchor.id, f"n{i}")

        contents = texts(doc)
        assert contents[0] == "start"
        assert contents[-1] == "end"
        # Newest insert sits right after the anchor
        assert contents[1] == "n79"
        assert contents[1:-1] == [f"n{i}" for i in reversed(range(80))]
        # Precision ran out along the way and the document was renumbered
        assert anchor.order == 0
        assert doc.has_duplicate_orders() is False

    def test_renormalize(self):
        """Test renormalize renumbers to consecutive integers."""
        doc = ContentDocument([TextElement("b", order=7.5), TextElement("a", order=-2)])

        doc.renormalize()

        assert [e.order for e in doc] == [0, 1]
        assert texts(doc) == ["a", "b"]


class TestMove:
    """Tests for move_up / move_down."""

    def make_doc(self):
        return ContentDocument(
            [TextElement("a", order=0), TextElement("b", order=1), TextElement("c", order=2)]
        )

    def test_move_up_swaps_orders(self):
        """Test moving up swaps order with the previous element."""
        doc = self.make_doc()
        b = doc.sorted_elements()[1]

        assert doc.move_up(b.id) is True
        assert texts(doc) == ["b", "a", "c"]
        assert b.order == 0

    def test_move_down(self):
        """Test moving down swaps order with the next element."""
        doc = self.make_doc()
        a = doc.sorted_elements()[0]

        assert doc.move_down(a.id) is True
        assert texts(doc) == ["b", "a", "c"]

    def test_move_at_boundaries_is_noop(self):
        """Test moving the first element up or the last element down does nothing."""
        doc = self.make_doc()
        first, last = doc.sorted_elements()[0], doc.sorted_elements()[-1]

        assert doc.move_up(first.id) is False
        assert doc.move_down(last.id) is False
        assert texts(doc) == ["a", "b", "c"]

    def test_move_unknown_is_noop(self):
        """Test moving an unknown id does nothing."""
        doc = self.make_doc()
        assert doc.move_up("missing") is False

    def test_move_with_duplicate_orders(self):
        """Test moving between elements sharing an order still swaps them."""
        doc = ContentDocument([TextElement("a", order=1), TextElement("b", order=1)])
        b = doc.sorted_elements()[1]

        assert doc.move_up(b.id) is True
        assert texts(doc) == ["b", "a"]
        assert doc.has_duplicate_orders() is False


class TestOverrides:
    """Tests for override mutations."""

    def test_set_and_clear_override(self):
        """Test clearing an override drops the stored body."""
        doc = ContentDocument()
        block = doc.append_block(5)

        doc.set_override(block.id, "custom")
        assert block.is_overridden is True
        assert block.override_content == "custom"

        doc.clear_override(block.id)
        assert block.is_overridden is False
        assert block.override_content is None

    def test_toggle_on_seeds_original_text(self):
        """Test toggling on without content seeds {{originalText}}."""
        doc = ContentDocument()
        block = doc.append_block(5)

        doc.toggle_override(block.id)

        assert block.is_overridden is True
        assert block.override_content == "{{originalText}}"

    def test_toggle_off_clears(self):
        """Test toggling off clears the override body."""
        doc = ContentDocument()
        block = doc.append_block(5)
        doc.toggle_override(block.id, "custom")

        doc.toggle_override(block.id)

        assert block.is_overridden is False
        assert block.override_content is None

    def test_override_on_text_element_rejected(self):
        """Test overriding a text element raises TypeError."""
        doc = ContentDocument()
        text = doc.append_text("hi")

        with pytest.raises(TypeError, match="text element"):
            doc.set_override(text.id, "x")

    def test_unknown_element_raises(self):
        """Test mutations of unknown ids raise ElementNotFoundError."""
        doc = ContentDocument()

        with pytest.raises(ElementNotFoundError) as exc_info:
            doc.clear_override("missing")
        assert exc_info.value.element_id == "missing"


class TestDeleteAndLookup:
    """Tests for delete and get."""

    def test_delete(self):
        """Test deleting removes the element and returns it."""
        doc = ContentDocument()
        a = doc.append_text("a")
        doc.append_text("b")

        removed = doc.delete(a.id)

        assert removed is a
        assert texts(doc) == ["b"]
        assert len(doc) == 1

    def test_get_unknown_raises(self):
        """Test get on an unknown id raises."""
        with pytest.raises(ElementNotFoundError):
            ContentDocument().get("nope")


class TestVariablesInUse:
    """Tests for ContentDocument.variables_in_use."""

    def test_collects_from_text_and_blocks(self):
        """Test variables come from text, overrides and canonical block bodies."""
        doc = ContentDocument()
        doc.append_text("Hi {{name}}")
        doc.append_block(7)
        overridden = doc.append_block(8)
        doc.set_override(overridden.id, "{{tone}} {{name}}")

        result = doc.variables_in_use({7: "Body {{x}}", 8: "{{ignored}}"})

        assert result == ["name", "x", "tone"]

    def test_original_text_is_not_a_variable(self):
        """Test {{originalText}} expands to the block body instead of being listed."""
        doc = ContentDocument()
        block = doc.append_block(7)
        doc.set_override(block.id, "Before {{originalText}}")

        assert doc.variables_in_use({7: "Body {{x}}"}) == ["x"]

    def test_without_block_source(self):
        """Test canonical bodies are skipped without a block source."""
        doc = ContentDocument()
        doc.append_block(7)
        doc.append_text("{{a}}")

        assert doc.variables_in_use() == ["a"]
