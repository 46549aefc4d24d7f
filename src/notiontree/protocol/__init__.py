"""notiontree.protocol -- request sequencing against the Notion API.

* :mod:`.transport` -- the transport boundary and its two adapters.
* :mod:`.append` -- recursive, limit-aware block appends.
* :mod:`.create` -- page creation with inline and appended content.
"""

from __future__ import annotations

from .append import AppendSession, SlicePlan, fits_in_one_call, plan_slice
from .create import PageCreateSession, plan_inline_children
from .transport import (
    AppendTransport,
    CallableTransport,
    ClientTransport,
    CreateTransport,
    default_get_created_id,
    default_get_results,
)

__all__ = [
    "AppendSession",
    "AppendTransport",
    "CallableTransport",
    "ClientTransport",
    "CreateTransport",
    "PageCreateSession",
    "SlicePlan",
    "default_get_created_id",
    "default_get_results",
    "fits_in_one_call",
    "plan_inline_children",
    "plan_slice",
]
