"""Pure measurements over a list of sibling content nodes.

These drive the "does it fit in one request" decisions of the partitioner
and the append protocol.  None of them mutate their input.

* :func:`depth` -- nesting levels of ``children`` below the list.
* :func:`total_count` -- container blocks, counted recursively.
* :func:`longest_array` -- the longest ``children`` array at any level.
* :func:`payload_bytes` -- UTF-8 size of the JSON request body.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from notiontree.nodes import ContentNode


def depth(nodes: Sequence[ContentNode] | None, level: int = 0) -> int:
    """Return the deepest nesting level reached below *nodes*.

    A flat list is depth ``level`` (0 by default); each level of
    ``children`` adds one.
    """
    if not nodes:
        return level

    max_depth = level
    for node in nodes:
        if node.children:
            max_depth = max(max_depth, depth(node.children, level + 1))
    return max_depth


def total_count(nodes: Sequence[ContentNode] | None) -> int:
    """Count the container nodes in *nodes*, recursively.

    A node with children contributes one plus the count inside its
    children; a leaf contributes nothing.  The result is the number of
    blocks that may need a follow-up append call, not a raw block census.
    """
    if not nodes:
        return 0

    count = 0
    for node in nodes:
        if node.children:
            count += 1 + total_count(node.children)
    return count


def longest_array(nodes: Sequence[ContentNode] | None, baseline: int = 0) -> int:
    """Return the length of the longest sibling list at any nesting level.

    Parameters
    ----------
    nodes:
        The list to inspect.  Its own length counts.
    baseline:
        Length already seen one level up; returned for empty input.
    """
    if not nodes:
        return baseline

    max_length = max(baseline, len(nodes))
    for node in nodes:
        if node.children:
            max_length = max(max_length, longest_array(node.children, max_length))
    return max_length


def node_bytes(node: ContentNode) -> int:
    """Return the UTF-8 size of *node* rendered as compact JSON."""
    encoded = json.dumps(node.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return len(encoded.encode("utf-8"))


def payload_bytes(nodes: Sequence[ContentNode] | None) -> int:
    """Return the summed UTF-8 JSON size of every node in *nodes*."""
    if not nodes:
        return 0
    return sum(node_bytes(node) for node in nodes)
