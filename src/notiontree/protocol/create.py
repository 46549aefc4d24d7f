"""Create a page and fill it with any amount of content.

The page-creation call can carry first-level blocks itself.
:func:`plan_inline_children` picks the longest leading run of blocks that
is safe to send with it.  Everything after that run (descendants
included) is appended to the new page by
:class:`~notiontree.protocol.append.AppendSession`.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from notiontree.errors import NotionTreeStructureError
from notiontree.limits import DEFAULT_LIMITS, LimitPolicy
from notiontree.models import PageCreateResult
from notiontree.nodes import ContentNode, as_nodes
from notiontree.observability import NoopMetricsHook, get_logger
from notiontree.tree.measure import node_bytes
from notiontree.tree.validate import validate_outbound

from .append import AppendSession
from .transport import CreateTransport

log = get_logger("notiontree.create")


def _json_size(payload: Mapping[str, Any]) -> int:
    encoded = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    return len(encoded.encode("utf-8"))


def _has_grandchildren(node: ContentNode) -> bool:
    return any(child.children for child in node.children)


def plan_inline_children(
    base_payload: Mapping[str, Any],
    children: Sequence[ContentNode],
    limits: LimitPolicy = DEFAULT_LIMITS,
) -> int:
    """Return how many leading *children* can ride on the creation call.

    Blocks are taken greedily and the run stops at the first block that
    would push the body past ``limits.max_payload_bytes``, exceed
    ``limits.max_slice_count`` blocks, push the block total (each block
    plus its direct children) past ``limits.max_call_node_total``, has
    children of its own children, or has more than
    ``limits.max_slice_count`` children.

    Parameters
    ----------
    base_payload:
        The page body without ``children`` (``parent``, ``properties``,
        ``icon``, ...).
    children:
        First-level blocks in reading order.
    limits:
        Server limits.
    """
    current_size = _json_size(base_payload)
    block_total = 0

    for index, node in enumerate(children):
        size = node_bytes(node)
        node_total = 1 + len(node.children)
        if (
            current_size + size > limits.max_payload_bytes
            or index >= limits.max_slice_count
            or block_total + node_total > limits.max_call_node_total
            or _has_grandchildren(node)
            or len(node.children) > limits.max_slice_count
        ):
            return index
        current_size += size
        block_total += node_total

    return len(children)


class PageCreateSession:
    """Create a page and append its content within the API limits.

    Parameters
    ----------
    transport:
        A :class:`~notiontree.protocol.transport.CreateTransport`.
    limits:
        Server limits to respect.
    metrics:
        Optional :class:`~notiontree.observability.MetricsHook`.
    """

    def __init__(
        self,
        transport: CreateTransport,
        limits: LimitPolicy = DEFAULT_LIMITS,
        metrics: Any | None = None,
    ) -> None:
        self._transport = transport
        self._limits = limits
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self.call_count = 0

    async def create(
        self,
        page: Mapping[str, Any],
        children: Iterable[ContentNode | Mapping[str, Any]] | None = None,
    ) -> PageCreateResult:
        """Create the page described by *page* and append *children* to it.

        Parameters
        ----------
        page:
            Page body: ``parent`` (required), ``properties``, ``icon``,
            ``cover``...  A ``children`` key is used when *children* is
            not given.
        children:
            First-level blocks, as :class:`ContentNode` or raw block dicts.

        Returns
        -------
        PageCreateResult

        Raises
        ------
        NotionTreeStructureError
            If *page* has no ``parent`` or an inlined block is invalid.
            No call is made.
        Exception
            Whatever the transport raised, unchanged.
        """
        self.call_count = 0
        payload = dict(page)
        raw_children = payload.pop("children", None)
        if children is None:
            children = raw_children or []

        if not payload.get("parent"):
            raise NotionTreeStructureError(
                message="No parent page, database or data source provided; page cannot be created",
                context={"reason": "missing_parent"},
            )

        nodes = as_nodes(children)
        inline_count = plan_inline_children(payload, nodes, self._limits)
        inline, remaining = nodes[:inline_count], nodes[inline_count:]
        validate_outbound(inline, limits=self._limits)

        if inline:
            payload["children"] = [node.to_dict() for node in inline]

        self.call_count += 1
        try:
            response = await self._transport.call_create(payload)
        except Exception as exc:
            log.error(
                "Page creation failed",
                extra={"extra_fields": {"op": "create_page", "error": str(exc)}},
            )
            raise
        self._metrics.increment("notiontree.page_create_total")

        page_id = self._transport.get_created_id(response)
        result = PageCreateResult(page_id=page_id, response=response, inlined_count=inline_count)

        if remaining:
            appender = AppendSession(self._transport, self._limits, self._metrics)
            try:
                result.append = await appender.append(page_id, remaining)
            finally:
                self.call_count += appender.call_count

        log.info(
            "Page created",
            extra={
                "extra_fields": {
                    "op": "create_page",
                    "page_id": page_id,
                    "inlined": inline_count,
                    "appended": len(remaining),
                    "calls": self.call_count,
                }
            },
        )
        return result
