"""Server-imposed ceilings of the Notion API.

The module-level constants are the documented Notion limits.  They are
bundled into :class:`LimitPolicy` so that a client (or a test) can tighten
or relax them per instance without touching process-wide state.

* :data:`MAX_SLICE_COUNT` -- max blocks in one ``children`` array.
* :data:`MAX_CALL_NODE_TOTAL` -- max blocks (including nested) per request.
* :data:`MAX_DEPTH` -- max nesting levels of ``children`` per request.
* :data:`MAX_PAYLOAD_BYTES` -- max serialized request body size.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_SLICE_COUNT: int = 100

MAX_CALL_NODE_TOTAL: int = 999

MAX_DEPTH: int = 2

MAX_PAYLOAD_BYTES: int = 450_000  # 450 kB, under the documented 500 kB cap

REQUIRED_CHILD_BUFFER: int = 100
"""Blocks held back from the per-call budget for children a container
cannot exist without (table rows)."""

MAX_TEXT_LENGTH: int = 2000
"""Notion ``rich_text[].text.content`` character limit."""

MAX_RICH_TEXT_ITEMS: int = 100
"""Max segments in one ``rich_text`` array."""


@dataclass(frozen=True)
class LimitPolicy:
    """Limits applied by the partitioner and the append protocol.

    Parameters
    ----------
    max_slice_count:
        Maximum number of sibling blocks submitted in one array.
    max_call_node_total:
        Maximum number of blocks (counted as containers, see
        :func:`notiontree.tree.measure.total_count`) per outbound call.
    max_depth:
        Maximum nesting depth carried by one call.
    max_payload_bytes:
        Maximum UTF-8 JSON size of the blocks in one call.
    required_child_buffer:
        Part of ``max_call_node_total`` reserved for required children.
    """

    max_slice_count: int = MAX_SLICE_COUNT
    max_call_node_total: int = MAX_CALL_NODE_TOTAL
    max_depth: int = MAX_DEPTH
    max_payload_bytes: int = MAX_PAYLOAD_BYTES
    required_child_buffer: int = REQUIRED_CHILD_BUFFER

    def __post_init__(self) -> None:
        if self.max_slice_count < 1:
            raise ValueError(f"max_slice_count must be >= 1, got {self.max_slice_count}")
        if self.max_call_node_total < 1:
            raise ValueError(
                f"max_call_node_total must be >= 1, got {self.max_call_node_total}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_payload_bytes < 1:
            raise ValueError(f"max_payload_bytes must be >= 1, got {self.max_payload_bytes}")
        if self.required_child_buffer < 0:
            raise ValueError(
                f"required_child_buffer must be >= 0, got {self.required_child_buffer}"
            )

    @property
    def call_budget(self) -> int:
        """Blocks available per call once the required-child buffer is held back."""
        return self.max_call_node_total - self.required_child_buffer


DEFAULT_LIMITS = LimitPolicy()
