"""Tests for notiontree.tree.validate."""

from __future__ import annotations

import pytest

from notiontree.builders import column_list, paragraph, table, toggle
from notiontree.errors import ErrorCode, NotionTreeStructureError
from notiontree.nodes import BlockType, ContentNode
from notiontree.limits import LimitPolicy
from notiontree.tree.validate import validate_exclusive, validate_outbound, validate_table


class TestValidateTable:
    def test_valid_table(self):
        validate_table(table([["a", "b"]]))

    def test_empty_table(self):
        node = ContentNode(BlockType.TABLE, {"table_width": 1})
        with pytest.raises(NotionTreeStructureError) as exc_info:
            validate_table(node, "/0")
        assert exc_info.value.code == ErrorCode.STRUCTURE_ERROR
        assert exc_info.value.context["reason"] == "empty_table"
        assert exc_info.value.context["path"] == "/0"

    def test_non_row_child(self):
        node = ContentNode(BlockType.TABLE, {"table_width": 1}, (paragraph("x"),))
        with pytest.raises(NotionTreeStructureError) as exc_info:
            validate_table(node)
        assert exc_info.value.context["reason"] == "invalid_table_child"


class TestValidateOutbound:
    def test_plain_blocks_pass(self):
        validate_outbound([paragraph("a"), toggle("t", [paragraph("b")])])

    def test_nested_bad_table_found(self):
        bad = ContentNode(BlockType.TABLE, {"table_width": 1})
        with pytest.raises(NotionTreeStructureError) as exc_info:
            validate_outbound([paragraph("a"), toggle("t", [paragraph("b"), bad])])
        assert exc_info.value.context["path"] == "/1/1"

    def test_empty_slice_passes(self):
        validate_outbound([])


class TestValidateExclusive:
    def test_small_column_list_passes(self):
        validate_outbound([column_list([[paragraph("l")], [paragraph("r")]])])

    def test_nested_container_in_column_too_deep(self):
        node = column_list([[toggle("t", [paragraph("x")])], [paragraph("r")]])
        with pytest.raises(NotionTreeStructureError) as exc_info:
            validate_outbound([node])
        assert exc_info.value.context["reason"] == "oversized_exclusive"
        assert exc_info.value.context["measure"] == "depth"
        assert exc_info.value.context["value"] == 3

    def test_column_with_too_many_children(self):
        node = column_list([[paragraph(str(i)) for i in range(150)], [paragraph("r")]])
        with pytest.raises(NotionTreeStructureError) as exc_info:
            validate_exclusive(node, path="/0")
        assert exc_info.value.context["measure"] == "longest_array"
        assert exc_info.value.context["value"] == 150
        assert exc_info.value.context["path"] == "/0"

    def test_limits_are_respected(self):
        node = column_list([[paragraph("a"), paragraph("b")], [paragraph("r")]])
        validate_exclusive(node)
        with pytest.raises(NotionTreeStructureError):
            validate_exclusive(node, LimitPolicy(max_slice_count=1))
