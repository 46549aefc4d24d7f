"""Page endpoint wrappers.

:class:`AsyncPageAPI` wraps the Notion ``/pages`` endpoints and delegates
all HTTP concerns (auth, retries, rate limiting) to the transport.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport


class AsyncPageAPI:
    """Asynchronous wrapper for the Notion Pages API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport`.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def create(
        self,
        parent: dict[str, Any],
        properties: dict[str, Any],
        children: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Create a new page.

        Parameters
        ----------
        parent:
            Parent object, e.g. ``{"page_id": "..."}`` or
            ``{"database_id": "..."}``.
        properties:
            Page properties.  A page under another page needs at least
            ``{"title": [{"text": {"content": "Page title"}}]}``.
        children:
            Optional first-level blocks sent with the creation call.
        **extra:
            Further top-level body fields (``icon``, ``cover``, ...).
            ``None`` values are left out.

        Returns
        -------
        dict
            The created page object.
        """
        body: dict[str, Any] = {
            "parent": parent,
            "properties": properties,
        }
        body.update({key: value for key, value in extra.items() if value is not None})
        if children is not None:
            body["children"] = children
        return await self._transport.request("POST", "/pages", json=body)

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page by its ID."""
        return await self._transport.request("GET", f"/pages/{page_id}")
