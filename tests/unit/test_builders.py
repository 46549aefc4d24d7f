"""Tests for notiontree.builders."""

from __future__ import annotations

import pytest

from notiontree.builders import (
    bulleted_list_item,
    callout,
    code,
    column,
    column_list,
    divider,
    heading,
    numbered_list_item,
    paragraph,
    paragraphs,
    quote,
    rich_text,
    split_rich_text_block,
    table,
    table_row,
    to_do,
    toggle,
)
from notiontree.errors import NotionTreeStructureError, NotionTreeValidationError
from notiontree.limits import MAX_RICH_TEXT_ITEMS, MAX_TEXT_LENGTH
from notiontree.nodes import BlockType, ContentNode


class TestRichText:
    def test_short_text_is_one_segment(self):
        assert rich_text("hello") == [{"type": "text", "text": {"content": "hello"}}]

    def test_empty_text_is_empty_array(self):
        assert rich_text("") == []

    def test_long_text_is_split_at_limit(self):
        segments = rich_text("a" * (MAX_TEXT_LENGTH * 2 + 5))
        assert [len(s["text"]["content"]) for s in segments] == [2000, 2000, 5]

    def test_split_preserves_content(self):
        text = "日本語" * 1000
        segments = rich_text(text)
        assert "".join(s["text"]["content"] for s in segments) == text

    def test_href_and_annotations_on_every_segment(self):
        segments = rich_text("x" * 2500, href="https://example.com", annotations={"bold": True})
        assert len(segments) == 2
        for seg in segments:
            assert seg["text"]["link"] == {"url": "https://example.com"}
            assert seg["annotations"] == {"bold": True}

    def test_multibyte_never_bisected(self):
        segments = rich_text("😀" * 5, limit=2)
        assert [s["text"]["content"] for s in segments] == ["😀😀", "😀😀", "😀"]

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            rich_text("abc", limit=0)

    def test_exactly_max_segments_accepted(self):
        segments = rich_text("x" * (MAX_TEXT_LENGTH * MAX_RICH_TEXT_ITEMS))
        assert len(segments) == MAX_RICH_TEXT_ITEMS

    def test_too_many_segments_rejected(self):
        with pytest.raises(NotionTreeValidationError) as exc_info:
            paragraph("x" * 250_000)
        assert exc_info.value.context["field"] == "rich_text"
        assert exc_info.value.context["value"] == 125


class TestSplitRichTextBlock:
    def test_long_text_becomes_several_paragraphs(self):
        parts = paragraphs("x" * 250_000)
        assert [len(p.payload["rich_text"]) for p in parts] == [100, 25]
        assert all(p.kind is BlockType.PARAGRAPH for p in parts)
        text = "".join(s["text"]["content"] for p in parts for s in p.payload["rich_text"])
        assert len(text) == 250_000

    def test_paragraphs_short_text_is_one_block(self):
        parts = paragraphs("hello", color="blue")
        assert len(parts) == 1
        assert parts[0].payload["color"] == "blue"

    def test_children_stay_on_first_part(self):
        segments = [{"type": "text", "text": {"content": str(i)}} for i in range(5)]
        node = ContentNode(
            BlockType.TOGGLE,
            {"rich_text": segments, "color": "red"},
            (paragraph("child"),),
        )
        parts = split_rich_text_block(node, max_items=2)
        assert [len(p.payload["rich_text"]) for p in parts] == [2, 2, 1]
        assert parts[0].children == (paragraph("child"),)
        assert all(p.children == () for p in parts[1:])
        assert all(p.payload["color"] == "red" for p in parts)
        assert all(p.kind is BlockType.TOGGLE for p in parts)

    def test_node_within_limit_returned_as_is(self):
        node = paragraph("short")
        assert split_rich_text_block(node) == [node]

    def test_invalid_max_items(self):
        with pytest.raises(ValueError):
            split_rich_text_block(paragraph("x"), max_items=0)


class TestTextBlocks:
    def test_paragraph(self):
        node = paragraph("hi", color="red")
        assert node.kind is BlockType.PARAGRAPH
        assert node.payload["color"] == "red"
        assert node.payload["rich_text"][0]["text"]["content"] == "hi"

    def test_paragraph_without_color_omits_key(self):
        assert "color" not in paragraph("hi").payload

    @pytest.mark.parametrize(
        "level,kind",
        [(1, BlockType.HEADING_1), (2, BlockType.HEADING_2), (3, BlockType.HEADING_3)],
    )
    def test_heading_levels(self, level, kind):
        assert heading(level, "T").kind is kind

    def test_heading_bad_level_raises(self):
        with pytest.raises(NotionTreeValidationError):
            heading(4, "T")

    def test_heading_with_children_is_toggleable(self):
        node = heading(2, "T", children=[paragraph("x")])
        assert node.payload["is_toggleable"] is True
        assert len(node.children) == 1

    def test_list_items_and_friends(self):
        assert bulleted_list_item("a").kind is BlockType.BULLETED_LIST_ITEM
        assert numbered_list_item("a").kind is BlockType.NUMBERED_LIST_ITEM
        assert quote("a").kind is BlockType.QUOTE
        assert divider().to_dict() == {"object": "block", "type": "divider", "divider": {}}

    def test_to_do_checked(self):
        assert to_do("task", checked=True).payload["checked"] is True

    def test_toggle_children(self):
        node = toggle("t", [paragraph(str(i)) for i in range(3)])
        assert [c.payload["rich_text"][0]["text"]["content"] for c in node.children] == ["0", "1", "2"]

    def test_callout_icon(self):
        assert callout("note", emoji="💡").payload["icon"] == {"type": "emoji", "emoji": "💡"}
        assert "icon" not in callout("note").payload

    def test_code_language(self):
        node = code("print(1)", language="python")
        assert node.payload["language"] == "python"
        assert not node.children


class TestTables:
    def test_table_width_from_widest_row(self):
        node = table([["a", "b", "c"], ["1"]])
        assert node.payload["table_width"] == 3
        assert all(len(row.payload["cells"]) == 3 for row in node.children)

    def test_table_accepts_row_nodes(self):
        node = table([table_row(["a", "b"]), ["c", "d"]], has_column_header=False)
        assert node.payload["has_column_header"] is False
        assert [r.kind for r in node.children] == [BlockType.TABLE_ROW, BlockType.TABLE_ROW]

    def test_table_cell_rich_text_passthrough(self):
        cell = [{"type": "text", "text": {"content": "raw"}}]
        assert table_row([cell]).payload["cells"] == [cell]

    def test_empty_table_raises(self):
        with pytest.raises(NotionTreeStructureError) as exc_info:
            table([])
        assert exc_info.value.context["reason"] == "empty_table"

    def test_non_row_node_raises(self):
        with pytest.raises(NotionTreeStructureError) as exc_info:
            table([paragraph("x")])
        assert exc_info.value.context["reason"] == "invalid_table_child"


class TestColumns:
    def test_column_list_wraps_iterables(self):
        node = column_list([[paragraph("l")], [paragraph("r1"), paragraph("r2")]])
        assert node.kind is BlockType.COLUMN_LIST
        assert [c.kind for c in node.children] == [BlockType.COLUMN, BlockType.COLUMN]
        assert len(node.children[1].children) == 2

    def test_column_list_wraps_single_block(self):
        node = column_list([column([paragraph("a")]), paragraph("b")])
        assert node.children[1].kind is BlockType.COLUMN

    def test_column_list_needs_two_columns(self):
        with pytest.raises(NotionTreeStructureError):
            column_list([[paragraph("only")]])

    def test_empty_column_raises(self):
        with pytest.raises(NotionTreeStructureError):
            column([])
