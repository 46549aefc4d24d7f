"""Split a flat list of sibling blocks into request-sized slices.

Slices respect the per-array block count and the payload byte budget of
:class:`~notiontree.limits.LimitPolicy`, and never mix exclusive block
types (column lists) with ordinary ones.  Only the top level of the list is
considered; nested children travel with their parent and are handled by
the append protocol.
"""

from __future__ import annotations

from collections.abc import Sequence

from notiontree.limits import DEFAULT_LIMITS, LimitPolicy
from notiontree.nodes import ContentNode, is_exclusive
from notiontree.tree.measure import node_bytes


def partition(
    nodes: Sequence[ContentNode],
    limits: LimitPolicy = DEFAULT_LIMITS,
) -> list[list[ContentNode]]:
    """Partition *nodes* into ordered slices.

    A new slice starts when the next node would push the slice over
    ``limits.max_payload_bytes``, when the slice already holds
    ``limits.max_slice_count`` nodes, or when the node's exclusive
    category differs from the slice's.  A node that alone exceeds the byte
    budget is emitted as a singleton slice; the server decides whether to
    accept it.

    Parameters
    ----------
    nodes:
        Sibling nodes in reading order.
    limits:
        Limits to respect.

    Returns
    -------
    list[list[ContentNode]]
        Non-empty slices whose concatenation equals *nodes*.  An empty
        input returns an empty list (not ``[[]]``).

    Examples
    --------
    >>> from notiontree.builders import paragraph
    >>> [len(s) for s in partition([paragraph("x")] * 150)]
    [100, 50]
    """
    slices: list[list[ContentNode]] = []
    current: list[ContentNode] = []
    current_bytes = 0

    for node in nodes:
        size = node_bytes(node)

        if size > limits.max_payload_bytes:
            if current:
                slices.append(current)
                current = []
                current_bytes = 0
            slices.append([node])
            continue

        if current and (
            current_bytes + size > limits.max_payload_bytes
            or len(current) >= limits.max_slice_count
            or is_exclusive(node.kind) != is_exclusive(current[0].kind)
        ):
            slices.append(current)
            current = []
            current_bytes = 0

        current.append(node)
        current_bytes += size

    if current:
        slices.append(current)

    return slices
