"""Content nodes: the block tree consumed by the chunking protocol.

A :class:`ContentNode` is an immutable, tagged record.  Its ``kind`` comes
from the closed :class:`BlockType` enum and its nested blocks live in the
explicit ``children`` tuple rather than inside the type-specific payload.
:meth:`ContentNode.to_dict` produces the Notion wire shape::

    {
        "object": "block",
        "type": "toggle",
        "toggle": {
            "rich_text": [...],
            "children": [ {...}, {...} ]
        }
    }

and :meth:`ContentNode.from_dict` parses it back, accepting both request
payloads and block objects returned by the API.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from notiontree.errors import NotionTreeValidationError


class BlockType(str, Enum):
    """Every block tag the package knows how to submit."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    QUOTE = "quote"
    CALLOUT = "callout"
    CODE = "code"
    DIVIDER = "divider"
    BOOKMARK = "bookmark"
    EMBED = "embed"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    PDF = "pdf"
    EQUATION = "equation"
    TABLE_OF_CONTENTS = "table_of_contents"
    BREADCRUMB = "breadcrumb"
    SYNCED_BLOCK = "synced_block"
    TABLE = "table"
    TABLE_ROW = "table_row"
    COLUMN_LIST = "column_list"
    COLUMN = "column"


NESTABLE_TYPES: frozenset[BlockType] = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
    BlockType.BULLETED_LIST_ITEM,
    BlockType.NUMBERED_LIST_ITEM,
    BlockType.TO_DO,
    BlockType.TOGGLE,
    BlockType.QUOTE,
    BlockType.CALLOUT,
    BlockType.SYNCED_BLOCK,
    BlockType.TABLE,
    BlockType.COLUMN_LIST,
    BlockType.COLUMN,
})
"""Block types whose payload may carry ``children``."""

EXCLUSIVE_TYPES: frozenset[BlockType] = frozenset({BlockType.COLUMN_LIST})
"""Block types that never share an outbound slice with other types."""

# Keys present on blocks returned by the API that must not be sent back.
_RESPONSE_ONLY_KEYS = frozenset({
    "id",
    "parent",
    "created_time",
    "last_edited_time",
    "created_by",
    "last_edited_by",
    "has_children",
    "archived",
    "in_trash",
    "request_id",
})


def is_exclusive(kind: BlockType) -> bool:
    """Return ``True`` if *kind* must be isolated from ordinary block types."""
    return kind in EXCLUSIVE_TYPES


def parse_block_type(value: str | BlockType) -> BlockType:
    """Resolve *value* to a :class:`BlockType`.

    Raises
    ------
    NotionTreeValidationError
        If *value* is not a known block tag.
    """
    try:
        return BlockType(value)
    except ValueError as exc:
        raise NotionTreeValidationError(
            message=f"Unsupported block type: {value!r}",
            context={"field": "type", "value": value, "constraint": "BlockType"},
            cause=exc,
        ) from exc


@dataclass(frozen=True)
class ContentNode:
    """One block of content, possibly with nested children.

    Attributes
    ----------
    kind:
        The block tag.
    payload:
        The type-specific object (``{"rich_text": [...], "color": ...}``)
        without its ``children`` key.
    children:
        Nested blocks in reading order.  Only kinds in
        :data:`NESTABLE_TYPES` may have children.
    """

    kind: BlockType
    payload: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[ContentNode, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.kind, BlockType):
            object.__setattr__(self, "kind", parse_block_type(self.kind))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))
        if "children" in self.payload:
            raise NotionTreeValidationError(
                message="Pass nested blocks through 'children', not inside the payload",
                context={"field": "payload.children", "block_type": self.kind.value},
            )
        if self.children and self.kind not in NESTABLE_TYPES:
            raise NotionTreeValidationError(
                message=f"Block type '{self.kind.value}' does not support children",
                context={
                    "field": "children",
                    "block_type": self.kind.value,
                    "constraint": "NESTABLE_TYPES",
                },
            )

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def with_children(self, children: Iterable[ContentNode]) -> ContentNode:
        """Return a copy of this node carrying *children* instead."""
        return replace(self, children=tuple(children))

    def to_dict(self) -> dict[str, Any]:
        """Render the node (and its children) as a Notion block object."""
        body: dict[str, Any] = dict(self.payload)
        if self.children:
            body["children"] = [child.to_dict() for child in self.children]
        return {"object": "block", "type": self.kind.value, self.kind.value: body}

    @classmethod
    def from_dict(cls, block: Mapping[str, Any]) -> ContentNode:
        """Parse a Notion block object into a :class:`ContentNode`.

        Response-only keys (``id``, ``has_children``, timestamps, ...) are
        dropped so a fetched block can be re-submitted.

        Raises
        ------
        NotionTreeValidationError
            If the block has no ``type`` or an unknown one.
        """
        if not isinstance(block, Mapping) or "type" not in block:
            raise NotionTreeValidationError(
                message="Block object is missing its 'type' key",
                context={"field": "type", "value": block},
            )
        kind = parse_block_type(block["type"])
        body = dict(block.get(kind.value) or {})
        raw_children = body.pop("children", None) or []
        for key in _RESPONSE_ONLY_KEYS:
            body.pop(key, None)
        return cls(
            kind=kind,
            payload=body,
            children=tuple(cls.from_dict(child) for child in raw_children),
        )


def as_nodes(blocks: Iterable[ContentNode | Mapping[str, Any]]) -> list[ContentNode]:
    """Normalise a mixed list of nodes and raw block dicts to nodes."""
    return [
        block if isinstance(block, ContentNode) else ContentNode.from_dict(block)
        for block in blocks
    ]
