"""Asynchronous Notion client for large block trees.

:class:`AsyncNotionTreeClient` wires the HTTP transport, the page and block
endpoint wrappers and the chunking protocol together.  Content of any size
or depth can be passed in one go; the client splits it into as many API
calls as the Notion limits require.

Usage::

    import asyncio
    from notiontree import AsyncNotionTreeClient
    from notiontree.builders import paragraph, toggle

    async def main():
        async with AsyncNotionTreeClient(token="secret_xxx") as client:
            result = await client.create_page(
                parent={"page_id": "<page_id>"},
                title="Log",
                children=[toggle("Lines", [paragraph(str(i)) for i in range(500)])],
            )
            print(result.page_id, result.call_count)

    asyncio.run(main())
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from notiontree.builders import rich_text
from notiontree.config import NotionTreeConfig
from notiontree.models import AppendResult, PageCreateResult
from notiontree.nodes import ContentNode
from notiontree.notion_api.blocks import AsyncBlockAPI
from notiontree.notion_api.pages import AsyncPageAPI
from notiontree.notion_api.transport import AsyncNotionTransport
from notiontree.protocol import AppendSession, ClientTransport, PageCreateSession

BlockInput = Iterable[ContentNode | Mapping[str, Any]]


class AsyncNotionTreeClient:
    """Asynchronous Notion client.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`NotionTreeConfig`.
    """

    def __init__(self, token: str, **kwargs: Any) -> None:
        self._config = NotionTreeConfig(token=token, **kwargs)
        self._transport = AsyncNotionTransport(self._config)
        self._pages = AsyncPageAPI(self._transport)
        self._blocks = AsyncBlockAPI(self._transport)

    @property
    def config(self) -> NotionTreeConfig:
        return self._config

    # ------------------------------------------------------------------
    # Page creation
    # ------------------------------------------------------------------

    async def create_page(
        self,
        parent: dict[str, Any] | str,
        properties: dict[str, Any] | None = None,
        children: BlockInput | None = None,
        icon: dict[str, Any] | None = None,
        cover: dict[str, Any] | None = None,
        *,
        title: str | None = None,
    ) -> PageCreateResult:
        """Create a page and fill it with *children*.

        As many leading blocks as allowed travel with the creation call; the
        rest, nested content included, is appended afterwards.

        Parameters
        ----------
        parent:
            Parent object (``{"page_id": ...}``, ``{"database_id": ...}``,
            ``{"data_source_id": ...}``) or a bare page ID.
        properties:
            Page properties.
        children:
            Page content, as :class:`ContentNode` or raw block dicts.
        icon:
            Optional page icon object.
        cover:
            Optional page cover object.
        title:
            Shortcut for a ``title`` property; merged into *properties*.

        Returns
        -------
        PageCreateResult
        """
        if isinstance(parent, str):
            parent = {"page_id": parent}
        props = dict(properties or {})
        if title is not None:
            props["title"] = {"title": rich_text(title)}

        page: dict[str, Any] = {"parent": parent, "properties": props}
        if icon is not None:
            page["icon"] = icon
        if cover is not None:
            page["cover"] = cover

        session = PageCreateSession(
            self._protocol_transport(), self._config.limits, self._config.metrics
        )
        return await session.create(page, list(children or []))

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    async def append_blocks(
        self,
        block_id: str,
        children: BlockInput,
        after: str | None = None,
    ) -> AppendResult:
        """Append *children* (any size, any depth) to a page or block.

        Parameters
        ----------
        block_id:
            ID of the page or block to append to.
        children:
            Blocks in reading order, as :class:`ContentNode` or raw dicts.
        after:
            Optional ID of an existing child to insert after.

        Returns
        -------
        AppendResult
        """
        session = AppendSession(
            self._protocol_transport(), self._config.limits, self._config.metrics
        )
        return await session.append(block_id, children, after_id=after)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def get_children(self, block_id: str) -> list[ContentNode]:
        """Fetch the direct children of a page or block as nodes.

        Nested content is not fetched.

        Raises
        ------
        NotionTreeValidationError
            If a child has a block type this package does not model
            (``child_page``, ``link_to_page``, ...).
        """
        raw = await self._blocks.get_children(block_id)
        return [ContentNode.from_dict(block) for block in raw]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncNotionTreeClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _protocol_transport(self) -> ClientTransport:
        return ClientTransport(self._blocks, self._pages)
