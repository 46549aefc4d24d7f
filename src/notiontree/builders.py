"""Constructors for common block shapes.

Each function returns a :class:`~notiontree.nodes.ContentNode` ready to be
handed to :class:`~notiontree.protocol.AppendSession`::

    doc = [
        heading(1, "Report"),
        paragraph("Intro"),
        toggle("Details", children=[bulleted_list_item(f"row {i}") for i in range(250)]),
        table([["a", "b"], ["1", "2"]]),
    ]

Text arguments are plain strings.  A string longer than
:data:`~notiontree.limits.MAX_TEXT_LENGTH` characters is split over several
rich_text segments.  One block holds at most
:data:`~notiontree.limits.MAX_RICH_TEXT_ITEMS` segments; longer text is
rejected by the single-block builders.  Use :func:`paragraphs`, or
:func:`split_rich_text_block` on a hand-built node, to spread it over
consecutive blocks.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from notiontree.errors import NotionTreeStructureError, NotionTreeValidationError
from notiontree.limits import MAX_RICH_TEXT_ITEMS, MAX_TEXT_LENGTH
from notiontree.nodes import BlockType, ContentNode

Cell = str | list[dict[str, Any]]

_HEADINGS = {1: BlockType.HEADING_1, 2: BlockType.HEADING_2, 3: BlockType.HEADING_3}


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------

def _segments(
    text: str,
    href: str | None,
    annotations: dict[str, Any] | None,
    limit: int,
) -> list[dict[str, Any]]:
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    segments: list[dict[str, Any]] = []
    # str slicing is per code point, so a multi-byte character is never cut.
    for start in range(0, len(text), limit):
        content: dict[str, Any] = {"content": text[start : start + limit]}
        if href:
            content["link"] = {"url": href}
        seg: dict[str, Any] = {"type": "text", "text": content}
        if annotations:
            seg["annotations"] = dict(annotations)
        segments.append(seg)
    return segments


def rich_text(
    text: str,
    *,
    href: str | None = None,
    annotations: dict[str, Any] | None = None,
    limit: int = MAX_TEXT_LENGTH,
) -> list[dict[str, Any]]:
    """Build a rich_text array for *text*.

    Parameters
    ----------
    text:
        The content.  An empty string gives an empty array.
    href:
        Optional link applied to every segment.
    annotations:
        Optional Notion annotations (``{"bold": True}``...) applied to
        every segment.
    limit:
        Maximum characters per segment.

    Raises
    ------
    NotionTreeValidationError
        If *text* needs more than :data:`MAX_RICH_TEXT_ITEMS` segments.
    ValueError
        If *limit* is less than 1.

    Examples
    --------
    >>> rich_text("hi")
    [{'type': 'text', 'text': {'content': 'hi'}}]
    >>> len(rich_text("x" * 4500))
    3
    """
    segments = _segments(text, href, annotations, limit)
    if len(segments) > MAX_RICH_TEXT_ITEMS:
        raise NotionTreeValidationError(
            message=(
                f"Text of {len(text)} characters needs {len(segments)} rich_text "
                f"segments; a block holds at most {MAX_RICH_TEXT_ITEMS}"
            ),
            context={
                "field": "rich_text",
                "value": len(segments),
                "constraint": "MAX_RICH_TEXT_ITEMS",
            },
        )
    return segments


def split_rich_text_block(
    node: ContentNode,
    max_items: int = MAX_RICH_TEXT_ITEMS,
) -> list[ContentNode]:
    """Spread an over-long ``rich_text`` array over consecutive blocks.

    Every part keeps the node's kind and other payload fields.  Children
    stay on the first part.  A node within the limit is returned alone.
    """
    if max_items < 1:
        raise ValueError(f"max_items must be >= 1, got {max_items}")

    segments = list(node.payload.get("rich_text", []))
    if len(segments) <= max_items:
        return [node]

    parts = []
    for start in range(0, len(segments), max_items):
        payload = {**node.payload, "rich_text": segments[start : start + max_items]}
        parts.append(ContentNode(node.kind, payload, node.children if start == 0 else ()))
    return parts


def _text_payload(text: str, **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"rich_text": rich_text(text)}
    payload.update({key: value for key, value in fields.items() if value is not None})
    return payload


def _cell(value: Cell) -> list[dict[str, Any]]:
    if isinstance(value, str):
        return rich_text(value)
    return list(value)


# ---------------------------------------------------------------------------
# Text blocks
# ---------------------------------------------------------------------------

def paragraph(
    text: str = "",
    children: Iterable[ContentNode] = (),
    color: str | None = None,
) -> ContentNode:
    return ContentNode(BlockType.PARAGRAPH, _text_payload(text, color=color), tuple(children))


def paragraphs(text: str, color: str | None = None) -> list[ContentNode]:
    """Build as many paragraphs as *text* needs, with no length cap."""
    payload: dict[str, Any] = {"rich_text": _segments(text, None, None, MAX_TEXT_LENGTH)}
    if color is not None:
        payload["color"] = color
    return split_rich_text_block(ContentNode(BlockType.PARAGRAPH, payload))


def heading(
    level: int,
    text: str,
    children: Iterable[ContentNode] = (),
    is_toggleable: bool | None = None,
) -> ContentNode:
    """Build a ``heading_1``..``heading_3`` block.

    Child blocks are only rendered by Notion when *is_toggleable* is set.

    Raises
    ------
    NotionTreeValidationError
        If *level* is not 1, 2 or 3.
    """
    if level not in _HEADINGS:
        raise NotionTreeValidationError(
            message=f"Heading level must be 1, 2 or 3, got {level}",
            context={"field": "level", "value": level},
        )
    children = tuple(children)
    if children and is_toggleable is None:
        is_toggleable = True
    return ContentNode(
        _HEADINGS[level],
        _text_payload(text, is_toggleable=is_toggleable),
        children,
    )


def bulleted_list_item(text: str, children: Iterable[ContentNode] = ()) -> ContentNode:
    return ContentNode(BlockType.BULLETED_LIST_ITEM, _text_payload(text), tuple(children))


def numbered_list_item(text: str, children: Iterable[ContentNode] = ()) -> ContentNode:
    return ContentNode(BlockType.NUMBERED_LIST_ITEM, _text_payload(text), tuple(children))


def to_do(
    text: str,
    checked: bool = False,
    children: Iterable[ContentNode] = (),
) -> ContentNode:
    return ContentNode(BlockType.TO_DO, _text_payload(text, checked=checked), tuple(children))


def toggle(text: str, children: Iterable[ContentNode] = ()) -> ContentNode:
    return ContentNode(BlockType.TOGGLE, _text_payload(text), tuple(children))


def quote(text: str, children: Iterable[ContentNode] = ()) -> ContentNode:
    return ContentNode(BlockType.QUOTE, _text_payload(text), tuple(children))


def callout(
    text: str,
    emoji: str | None = None,
    children: Iterable[ContentNode] = (),
) -> ContentNode:
    icon = {"type": "emoji", "emoji": emoji} if emoji else None
    return ContentNode(BlockType.CALLOUT, _text_payload(text, icon=icon), tuple(children))


def code(text: str, language: str = "plain text") -> ContentNode:
    return ContentNode(BlockType.CODE, _text_payload(text, language=language))


def divider() -> ContentNode:
    return ContentNode(BlockType.DIVIDER, {})


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def table_row(cells: Sequence[Cell]) -> ContentNode:
    """Build a ``table_row``; each cell is a string or a rich_text array."""
    return ContentNode(BlockType.TABLE_ROW, {"cells": [_cell(c) for c in cells]})


def table(
    rows: Sequence[Sequence[Cell] | ContentNode],
    has_column_header: bool = True,
    has_row_header: bool = False,
) -> ContentNode:
    """Build a ``table`` block from *rows*.

    ``table_width`` is the widest row; shorter rows are padded with empty
    cells so every row matches it.

    Parameters
    ----------
    rows:
        Row cell lists, or ready ``table_row`` nodes.
    has_column_header:
        Render the first row as a header.
    has_row_header:
        Render the first column as a header.

    Raises
    ------
    NotionTreeStructureError
        If *rows* is empty or holds a node that is not a ``table_row``.
    """
    row_nodes: list[ContentNode] = []
    for index, row in enumerate(rows):
        if isinstance(row, ContentNode):
            if row.kind is not BlockType.TABLE_ROW:
                raise NotionTreeStructureError(
                    message=f"Table child at index {index} is '{row.kind.value}', not 'table_row'",
                    context={"reason": "invalid_table_child", "index": index},
                )
            row_nodes.append(row)
        else:
            row_nodes.append(table_row(row))

    if not row_nodes:
        raise NotionTreeStructureError(
            message="A table needs at least one row",
            context={"reason": "empty_table"},
        )

    width = max(len(row.payload.get("cells", [])) for row in row_nodes)
    padded = []
    for row in row_nodes:
        cells = list(row.payload.get("cells", []))
        if len(cells) < width:
            cells.extend([] for _ in range(width - len(cells)))
            row = ContentNode(BlockType.TABLE_ROW, {**row.payload, "cells": cells})
        padded.append(row)

    return ContentNode(
        BlockType.TABLE,
        {
            "table_width": width,
            "has_column_header": has_column_header,
            "has_row_header": has_row_header,
        },
        tuple(padded),
    )


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def column(children: Iterable[ContentNode]) -> ContentNode:
    """Build a ``column`` holding *children* (at least one)."""
    children = tuple(children)
    if not children:
        raise NotionTreeStructureError(
            message="A column needs at least one child block",
            context={"reason": "empty_column"},
        )
    return ContentNode(BlockType.COLUMN, {}, children)


def column_list(columns: Iterable[ContentNode | Iterable[ContentNode]]) -> ContentNode:
    """Build a ``column_list`` from at least two columns.

    Each entry is a ``column`` node or an iterable of blocks that becomes
    one.
    """
    built: list[ContentNode] = []
    for entry in columns:
        if isinstance(entry, ContentNode):
            if entry.kind is not BlockType.COLUMN:
                entry = column([entry])
            built.append(entry)
        else:
            built.append(column(entry))

    if len(built) < 2:
        raise NotionTreeStructureError(
            message=f"A column list needs at least two columns, got {len(built)}",
            context={"reason": "too_few_columns", "count": len(built)},
        )
    return ContentNode(BlockType.COLUMN_LIST, {}, tuple(built))
