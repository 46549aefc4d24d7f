"""Transport boundary used by the append and page-creation protocols.

The protocols never talk HTTP themselves.  They need two coroutines and two
response readers:

* ``call_append(container_id, nodes, after_id)`` plus
  ``get_results(response)`` -> ordered ``[{"id": ..., "type": ...}, ...]``
* ``call_create(payload)`` plus ``get_created_id(response)`` -> page ID

Two adapters provide them:

* :class:`ClientTransport` wraps pre-bound API objects, e.g. the package's
  own :class:`~notiontree.notion_api.AsyncBlockAPI` and
  :class:`~notiontree.notion_api.AsyncPageAPI`.
* :class:`CallableTransport` wraps raw async callables, for callers that
  bring their own HTTP stack.

The default readers match the Notion response shape: append results under
``response["results"]`` and the created page's ID under ``response["id"]``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from notiontree.nodes import ContentNode

ResultsReader = Callable[[Any], Sequence[dict[str, Any]]]
CreatedIdReader = Callable[[Any], str]


def default_get_results(response: Any) -> Sequence[dict[str, Any]]:
    """Return ``response["results"]`` (an empty list when absent)."""
    if response is None:
        return []
    return response.get("results", []) or []


def default_get_created_id(response: Any) -> str:
    """Return ``response["id"]``."""
    return response["id"]


@runtime_checkable
class AppendTransport(Protocol):
    """What :class:`~notiontree.protocol.append.AppendSession` needs."""

    async def call_append(
        self,
        container_id: str,
        nodes: Sequence[ContentNode],
        after_id: str | None = None,
    ) -> Any:
        """Append *nodes* as children of *container_id*."""
        ...

    def get_results(self, response: Any) -> Sequence[dict[str, Any]]:
        """Return the created blocks in submission order."""
        ...


@runtime_checkable
class CreateTransport(AppendTransport, Protocol):
    """What :class:`~notiontree.protocol.create.PageCreateSession` needs."""

    async def call_create(self, payload: dict[str, Any]) -> Any:
        """Create a page from *payload* (``parent``, ``properties``, ...)."""
        ...

    def get_created_id(self, response: Any) -> str:
        """Return the ID of the page created by *response*."""
        ...


class ClientTransport:
    """Adapter over pre-bound block and page API objects.

    Parameters
    ----------
    blocks:
        Object exposing ``async append_children(block_id, children,
        after=None)``.
    pages:
        Object exposing ``async create(parent, properties, children=None,
        **extra)``.  Only needed for page creation.
    get_results:
        Reader for append responses.
    get_created_id:
        Reader for page-creation responses.
    """

    def __init__(
        self,
        blocks: Any,
        pages: Any | None = None,
        *,
        get_results: ResultsReader = default_get_results,
        get_created_id: CreatedIdReader = default_get_created_id,
    ) -> None:
        self._blocks = blocks
        self._pages = pages
        self._get_results = get_results
        self._get_created_id = get_created_id

    async def call_append(
        self,
        container_id: str,
        nodes: Sequence[ContentNode],
        after_id: str | None = None,
    ) -> Any:
        children = [node.to_dict() for node in nodes]
        return await self._blocks.append_children(container_id, children, after=after_id)

    async def call_create(self, payload: dict[str, Any]) -> Any:
        if self._pages is None:
            raise TypeError("ClientTransport was built without a pages API")
        body = dict(payload)
        parent = body.pop("parent")
        properties = body.pop("properties", {})
        children = body.pop("children", None)
        return await self._pages.create(parent, properties, children, **body)

    def get_results(self, response: Any) -> Sequence[dict[str, Any]]:
        return self._get_results(response)

    def get_created_id(self, response: Any) -> str:
        return self._get_created_id(response)


class CallableTransport:
    """Adapter over raw async callables.

    Parameters
    ----------
    append_call:
        ``async (container_id, children, after_id) -> response`` where
        *children* is a list of Notion block dicts.
    create_call:
        ``async (payload) -> response``.  Only needed for page creation.
    get_results:
        Reader for append responses.
    get_created_id:
        Reader for page-creation responses.
    """

    def __init__(
        self,
        append_call: Callable[[str, list[dict[str, Any]], str | None], Awaitable[Any]] | None = None,
        create_call: Callable[[dict[str, Any]], Awaitable[Any]] | None = None,
        *,
        get_results: ResultsReader = default_get_results,
        get_created_id: CreatedIdReader = default_get_created_id,
    ) -> None:
        if append_call is None and create_call is None:
            raise TypeError("CallableTransport needs an append_call or a create_call")
        self._append_call = append_call
        self._create_call = create_call
        self._get_results = get_results
        self._get_created_id = get_created_id

    async def call_append(
        self,
        container_id: str,
        nodes: Sequence[ContentNode],
        after_id: str | None = None,
    ) -> Any:
        if self._append_call is None:
            raise TypeError("CallableTransport was built without an append_call")
        return await self._append_call(
            container_id, [node.to_dict() for node in nodes], after_id
        )

    async def call_create(self, payload: dict[str, Any]) -> Any:
        if self._create_call is None:
            raise TypeError("CallableTransport was built without a create_call")
        return await self._create_call(payload)

    def get_results(self, response: Any) -> Sequence[dict[str, Any]]:
        return self._get_results(response)

    def get_created_id(self, response: Any) -> str:
        return self._get_created_id(response)
