"""notiontree.tree -- measuring, partitioning and validating block trees."""

from __future__ import annotations

from .measure import depth, longest_array, node_bytes, payload_bytes, total_count
from .partition import partition
from .validate import validate_exclusive, validate_outbound, validate_table

__all__ = [
    "depth",
    "longest_array",
    "node_bytes",
    "partition",
    "payload_bytes",
    "total_count",
    "validate_exclusive",
    "validate_outbound",
    "validate_table",
]
