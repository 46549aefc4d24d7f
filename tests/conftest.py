"""Shared test fixtures for the notiontree test suite."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from notiontree.config import NotionTreeConfig
from notiontree.nodes import ContentNode


class RecordingTransport:
    """In-memory append/create transport that mimics the Notion responses.

    Every submitted block gets a fresh ID and is echoed back with its type.
    Append calls are recorded in order as ``(container_id, [block dicts],
    after_id, [returned ids])``; page creations as payload dicts.

    ``overrides`` maps a call index to a canned ``results`` list, to
    simulate a server returning something unexpected.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[dict[str, Any]], str | None, list[str]]] = []
        self.creates: list[dict[str, Any]] = []
        self.overrides: dict[int, list[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    async def call_append(self, container_id, nodes, after_id=None):
        dicts = [node.to_dict() for node in nodes]
        index = len(self.calls)
        if index in self.overrides:
            results = self.overrides[index]
        else:
            results = [
                {"object": "block", "id": f"blk-{next(self._ids)}", "type": d["type"]}
                for d in dicts
            ]
        self.calls.append((container_id, dicts, after_id, [r.get("id") for r in results]))
        return {"object": "list", "results": results}

    async def call_create(self, payload):
        self.creates.append(payload)
        return {"object": "page", "id": f"page-{next(self._ids)}"}

    def get_results(self, response):
        return response.get("results", [])

    def get_created_id(self, response):
        return response["id"]

    def submitted_counts(self) -> list[int]:
        """Top-level block count of every append call, in call order."""
        return [len(blocks) for _, blocks, _, _ in self.calls]


@pytest.fixture
def config() -> NotionTreeConfig:
    """Default test configuration with a dummy token."""
    return NotionTreeConfig(token="test_token_1234")


@pytest.fixture
def recorder() -> RecordingTransport:
    return RecordingTransport()


def reconstruct(
    transport: RecordingTransport,
    root: str,
    initial: list[ContentNode] | None = None,
) -> list[ContentNode]:
    """Rebuild the remote tree under *root* from the recorded calls.

    Blocks sent with a page creation are passed as *initial*.  ``after``
    anchors are honoured so the result reflects server-side order.
    """
    children: dict[str, list[tuple[str | None, dict[str, Any]]]] = {}
    for node in initial or []:
        children.setdefault(root, []).append((None, node.to_dict()))

    for container, blocks, after, ids in transport.calls:
        siblings = children.setdefault(container, [])
        if after is None:
            insert_at = len(siblings)
        else:
            insert_at = 1 + next(i for i, (bid, _) in enumerate(siblings) if bid == after)
        for offset, (block, block_id) in enumerate(zip(blocks, ids)):
            siblings.insert(insert_at + offset, (block_id, block))

    def _build(container: str | None) -> list[ContentNode]:
        if container is None:
            return []
        nodes = []
        for block_id, block in children.get(container, []):
            node = ContentNode.from_dict(block)
            extra = _build(block_id)
            nodes.append(node.with_children(node.children + tuple(extra)))
        return nodes

    return _build(root)


@pytest.fixture
def make_recorder():
    """Factory for fresh :class:`RecordingTransport` instances."""
    return RecordingTransport


@pytest.fixture
def rebuild():
    """The :func:`reconstruct` helper."""
    return reconstruct
