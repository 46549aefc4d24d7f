"""Structural checks applied to a slice right before it is sent.

The Notion API rejects a ``table`` without rows and a table whose children
are not ``table_row`` blocks.  Catching these locally keeps a bad branch
from costing a round-trip and from leaving a half-built table behind.

Column lists are sent with their whole subtree, since columns cannot be
added to an existing column list.  A column list whose subtree breaks the
per-request limits can therefore never be written and is rejected here.
"""

from __future__ import annotations

from collections.abc import Sequence

from notiontree.errors import NotionTreeStructureError
from notiontree.limits import DEFAULT_LIMITS, LimitPolicy
from notiontree.nodes import BlockType, ContentNode, is_exclusive
from notiontree.tree.measure import depth, longest_array, total_count


def validate_table(node: ContentNode, path: str = "") -> None:
    """Raise if the table *node* has no rows or a non-row child."""
    if not node.children:
        raise NotionTreeStructureError(
            message="Table block has no table_row children",
            context={"block_type": node.kind.value, "path": path, "reason": "empty_table"},
        )
    for index, row in enumerate(node.children):
        if row.kind is not BlockType.TABLE_ROW:
            raise NotionTreeStructureError(
                message=(
                    f"Table children must be table_row blocks, "
                    f"got '{row.kind.value}' at position {index}"
                ),
                context={
                    "block_type": row.kind.value,
                    "path": f"{path}/{index}",
                    "reason": "invalid_table_child",
                },
            )


def validate_exclusive(
    node: ContentNode,
    limits: LimitPolicy = DEFAULT_LIMITS,
    path: str = "",
) -> None:
    """Raise if the subtree of the exclusive *node* cannot fit one request."""
    measured = {
        "depth": (depth((node,)), limits.max_depth),
        "longest_array": (longest_array(node.children), limits.max_slice_count),
        "total_count": (total_count((node,)), limits.max_call_node_total),
    }
    for name, (value, limit) in measured.items():
        if value > limit:
            raise NotionTreeStructureError(
                message=(
                    f"'{node.kind.value}' at {path or '/'} cannot be sent in one request: "
                    f"{name} {value} exceeds {limit}"
                ),
                context={
                    "block_type": node.kind.value,
                    "path": path,
                    "reason": "oversized_exclusive",
                    "measure": name,
                    "value": value,
                    "limit": limit,
                },
            )


def validate_outbound(
    nodes: Sequence[ContentNode],
    path: str = "",
    limits: LimitPolicy = DEFAULT_LIMITS,
) -> None:
    """Check every node in an outbound slice, including inlined descendants.

    Exclusive blocks are measured only at the top of the slice; nested
    ones were already bounded when the slice was planned.

    Raises
    ------
    NotionTreeStructureError
        On the first structurally invalid block found (depth-first).
    """
    for index, node in enumerate(nodes):
        node_path = f"{path}/{index}"
        if not path and is_exclusive(node.kind):
            validate_exclusive(node, limits, node_path)
        if node.kind is BlockType.TABLE:
            validate_table(node, node_path)
        elif node.children:
            validate_outbound(node.children, node_path, limits)
