"""Tests for notiontree.protocol.transport adapters."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from notiontree.builders import paragraph, toggle
from notiontree.protocol.transport import (
    AppendTransport,
    CallableTransport,
    ClientTransport,
    CreateTransport,
    default_get_created_id,
    default_get_results,
)


class TestDefaultReaders:
    def test_results(self):
        assert default_get_results({"results": [{"id": "a"}]}) == [{"id": "a"}]

    def test_results_missing_or_none(self):
        assert default_get_results({}) == []
        assert default_get_results(None) == []
        assert default_get_results({"results": None}) == []

    def test_created_id(self):
        assert default_get_created_id({"id": "page-1"}) == "page-1"


class TestClientTransport:
    async def test_call_append_renders_dicts(self):
        blocks = MagicMock()
        blocks.append_children = AsyncMock(return_value={"results": []})
        transport = ClientTransport(blocks)
        await transport.call_append("c1", [toggle("t", [paragraph("a")])], "after-1")
        blocks.append_children.assert_awaited_once()
        args, kwargs = blocks.append_children.call_args
        assert args[0] == "c1"
        assert args[1][0]["toggle"]["children"][0]["type"] == "paragraph"
        assert kwargs == {"after": "after-1"}

    async def test_call_create_unpacks_payload(self):
        pages = MagicMock()
        pages.create = AsyncMock(return_value={"id": "p"})
        transport = ClientTransport(MagicMock(), pages)
        await transport.call_create(
            {"parent": {"page_id": "x"}, "properties": {"a": 1}, "children": [], "icon": {"emoji": "x"}}
        )
        pages.create.assert_awaited_once_with(
            {"page_id": "x"}, {"a": 1}, [], icon={"emoji": "x"}
        )

    async def test_call_create_without_pages_raises(self):
        transport = ClientTransport(MagicMock())
        with pytest.raises(TypeError):
            await transport.call_create({"parent": {}})

    def test_custom_readers(self):
        transport = ClientTransport(
            MagicMock(),
            get_results=lambda r: r["blocks"],
            get_created_id=lambda r: r["page"]["id"],
        )
        assert transport.get_results({"blocks": [1]}) == [1]
        assert transport.get_created_id({"page": {"id": "z"}}) == "z"

    def test_satisfies_protocols(self):
        transport = ClientTransport(MagicMock(), MagicMock())
        assert isinstance(transport, AppendTransport)
        assert isinstance(transport, CreateTransport)


class TestCallableTransport:
    def test_needs_a_callable(self):
        with pytest.raises(TypeError):
            CallableTransport()

    async def test_call_append(self):
        append_call = AsyncMock(return_value={"results": []})
        transport = CallableTransport(append_call=append_call)
        await transport.call_append("c1", [paragraph("a")])
        append_call.assert_awaited_once_with("c1", [paragraph("a").to_dict()], None)

    async def test_missing_append_call(self):
        transport = CallableTransport(create_call=AsyncMock())
        with pytest.raises(TypeError):
            await transport.call_append("c1", [])

    async def test_missing_create_call(self):
        transport = CallableTransport(append_call=AsyncMock())
        with pytest.raises(TypeError):
            await transport.call_create({})

    async def test_call_create(self):
        create_call = AsyncMock(return_value={"id": "p"})
        transport = CallableTransport(create_call=create_call)
        resp = await transport.call_create({"parent": {}})
        assert transport.get_created_id(resp) == "p"
