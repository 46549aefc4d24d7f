"""notiontree -- write block trees of any size to Notion.

The Notion API caps every request at 100 blocks per array, two levels of
nesting and about 1 000 blocks in total.  notiontree splits arbitrary
content trees into a sequence of calls that respect those limits and
reassembles them on the server in order.

Public re-exports
-----------------

* **Client:** :class:`AsyncNotionTreeClient`
* **Protocol:** :class:`AppendSession`, :class:`PageCreateSession` and the
  transport adapters, for callers bringing their own HTTP stack
* **Content:** :class:`ContentNode`, :class:`BlockType`
* **Configuration:** :class:`NotionTreeConfig`, :class:`LimitPolicy`
* **Errors:** Every :class:`NotionTreeError` subclass and :class:`ErrorCode`
* **Models:** Result dataclasses

Usage::

    from notiontree import AppendSession, CallableTransport
    from notiontree.builders import paragraph

    async def append(call):
        session = AppendSession(CallableTransport(append_call=call))
        return await session.append("<page_id>", [paragraph(str(i)) for i in range(250)])
"""

from __future__ import annotations

# ── Client ─────────────────────────────────────────────────────────────
from notiontree.async_client import AsyncNotionTreeClient

# ── Configuration ───────────────────────────────────────────────────────
from notiontree.config import NotionTreeConfig

# ── Errors ──────────────────────────────────────────────────────────────
from notiontree.errors import (
    ErrorCode,
    NotionTreeAuthError,
    NotionTreeConflictError,
    NotionTreeError,
    NotionTreeNetworkError,
    NotionTreeNotFoundError,
    NotionTreePermissionError,
    NotionTreeRateLimitError,
    NotionTreeRetryExhaustedError,
    NotionTreeStructureError,
    NotionTreeValidationError,
)
from notiontree.limits import DEFAULT_LIMITS, LimitPolicy

# ── Models ──────────────────────────────────────────────────────────────
from notiontree.models import AppendResult, PageCreateResult, ProtocolWarning, ResultBinding

# ── Content ─────────────────────────────────────────────────────────────
from notiontree.nodes import BlockType, ContentNode

# ── Protocol ────────────────────────────────────────────────────────────
from notiontree.protocol import (
    AppendSession,
    CallableTransport,
    ClientTransport,
    PageCreateSession,
)

__all__ = [
    "DEFAULT_LIMITS",
    "AppendResult",
    "AppendSession",
    "AsyncNotionTreeClient",
    "BlockType",
    "CallableTransport",
    "ClientTransport",
    "ContentNode",
    "ErrorCode",
    "LimitPolicy",
    "NotionTreeAuthError",
    "NotionTreeConfig",
    "NotionTreeConflictError",
    "NotionTreeError",
    "NotionTreeNetworkError",
    "NotionTreeNotFoundError",
    "NotionTreePermissionError",
    "NotionTreeRateLimitError",
    "NotionTreeRetryExhaustedError",
    "NotionTreeStructureError",
    "NotionTreeValidationError",
    "PageCreateResult",
    "PageCreateSession",
    "ProtocolWarning",
    "ResultBinding",
]
