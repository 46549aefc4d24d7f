"""notiontree.notion_api -- Notion API transport and endpoint wrappers.

* :mod:`.pacing` -- request pacing and retry policy.
* :mod:`.transport` -- HTTP transport with auth, retries and pacing.
* :mod:`.pages` -- page endpoints.
* :mod:`.blocks` -- block endpoints.
"""

from __future__ import annotations

from .blocks import AsyncBlockAPI, extract_block_ids
from .pacing import RequestPacer, RetryPolicy
from .pages import AsyncPageAPI
from .transport import AsyncNotionTransport

__all__ = [
    "AsyncBlockAPI",
    "AsyncNotionTransport",
    "AsyncPageAPI",
    "RequestPacer",
    "RetryPolicy",
    "extract_block_ids",
]
