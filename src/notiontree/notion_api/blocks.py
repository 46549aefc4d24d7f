"""Block endpoint wrappers.

:class:`AsyncBlockAPI` is a thin wrapper around the Notion ``/blocks``
endpoints.  :meth:`~AsyncBlockAPI.append_children` is the call the append
protocol drives; it sends exactly what it is given and never splits.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport


def extract_block_ids(response: dict[str, Any]) -> list[str]:
    """Extract block IDs from an ``append_children`` response.

    Parameters
    ----------
    response:
        The JSON dict returned by ``PATCH /blocks/{id}/children``.

    Returns
    -------
    list[str]
        The ``id`` of each block in ``results``, in order.
    """
    results = response.get("results", [])
    return [r["id"] for r in results if "id" in r]


class AsyncBlockAPI:
    """Asynchronous wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport`.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, block_id: str) -> dict[str, Any]:
        """Retrieve a single block by its ID."""
        return await self._transport.request("GET", f"/blocks/{block_id}")

    async def get_children(self, block_id: str) -> list[dict[str, Any]]:
        """Retrieve all children of a block or page, auto-paginating.

        Parameters
        ----------
        block_id:
            The UUID of the parent block (or page).

        Returns
        -------
        list[dict]
            All child block objects in order.
        """
        return [
            item
            async for item in self._transport.paginate(
                f"/blocks/{block_id}/children",
                method="GET",
            )
        ]

    async def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
        after: str | None = None,
    ) -> dict[str, Any]:
        """Append child blocks to a parent block or page.

        Parameters
        ----------
        block_id:
            The UUID of the parent block (or page).
        children:
            Block objects to append.  The request must already respect the
            API limits; use :class:`~notiontree.protocol.AppendSession` for
            trees of arbitrary size.
        after:
            Optional UUID of an existing child.  The new children are
            inserted immediately after it instead of at the end.

        Returns
        -------
        dict
            The API response; ``results`` lists the created blocks.
        """
        body: dict[str, Any] = {"children": children}
        if after is not None:
            body["after"] = after
        return await self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", json=body
        )
