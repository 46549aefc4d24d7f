"""Recursive append of arbitrarily large block trees.

The Notion ``PATCH /blocks/{id}/children`` endpoint accepts at most 100
blocks per array, two levels of nesting and roughly 1 000 blocks per
request.  :class:`AppendSession` turns any tree into a sequence of calls
that stay inside those limits:

1. The sibling list is cut into slices by
   :func:`~notiontree.tree.partition.partition`.
2. Each slice is planned by :func:`plan_slice`.  A slice that fits is sent
   whole.  Otherwise every node either keeps its children inline or has
   some or all of them *deferred*.
3. The slice is sent.  The returned blocks are paired with the submitted
   nodes by position and type.
4. Deferred children are appended, recursively, to the block the server
   just created for their parent.

Calls are strictly sequential, so at most one request is in flight and
sibling order on the server matches the input order.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from notiontree.errors import ErrorCode
from notiontree.limits import DEFAULT_LIMITS, LimitPolicy
from notiontree.models import AppendResult, ProtocolWarning, ResultBinding
from notiontree.nodes import BlockType, ContentNode, as_nodes, is_exclusive
from notiontree.observability import NoopMetricsHook, get_logger
from notiontree.tree.measure import depth, longest_array, total_count
from notiontree.tree.partition import partition
from notiontree.tree.validate import validate_outbound

from .transport import AppendTransport

log = get_logger("notiontree.append")


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

@dataclass
class SlicePlan:
    """How one slice is sent.

    Attributes
    ----------
    outbound:
        The nodes to submit, with deferred children stripped.
    deferred:
        For each outbound node (same index), the children to append once
        the node exists remotely.  Empty when nothing was deferred.
    """

    outbound: list[ContentNode]
    deferred: list[tuple[ContentNode, ...]]

    @property
    def deferred_count(self) -> int:
        return sum(len(children) for children in self.deferred)


def fits_in_one_call(nodes: Sequence[ContentNode], limits: LimitPolicy) -> bool:
    """Return ``True`` if *nodes*, descendants included, fit one request."""
    return (
        total_count(nodes) <= limits.max_call_node_total
        and depth(nodes) <= limits.max_depth
        and longest_array(nodes) <= limits.max_slice_count
    )


def _subtree_fits(children: Sequence[ContentNode], used: int, limits: LimitPolicy) -> bool:
    return (
        depth(children, 1) <= limits.max_depth
        and longest_array(children) <= limits.max_slice_count
        and used + total_count(children) < limits.call_budget
    )


def _leading_run(
    children: Sequence[ContentNode],
    used: int,
    limits: LimitPolicy,
) -> tuple[int, int]:
    """Return how many leading *children* can stay inline, and their count.

    The run stops at the first child whose own subtree is too deep, holds
    an oversized array, or would exhaust the call budget.
    """
    run_total = 0
    for index, child in enumerate(children):
        if index >= limits.max_slice_count:
            return index, run_total
        child_total = total_count((child,))
        if (
            depth((child,), 1) > limits.max_depth
            or longest_array(child.children) > limits.max_slice_count
            or used + run_total + child_total >= limits.call_budget
        ):
            return index, run_total
        run_total += child_total
    return len(children), run_total


def plan_slice(nodes: Sequence[ContentNode], limits: LimitPolicy = DEFAULT_LIMITS) -> SlicePlan:
    """Decide which descendants of *nodes* travel with this call.

    A slice of ordinary blocks that fits one request is sent as-is.
    Slices of exclusive blocks (column lists) always go through per-node
    handling, where exclusive blocks keep their whole subtree inline: their
    columns cannot be rebuilt by later appends.  One whose subtree breaks
    the limits is rejected by :func:`~notiontree.tree.validate.validate_outbound`
    before anything is sent.

    For every other node with children, in order, against a running
    budget of ``limits.call_budget``:

    * the whole subtree stays inline if it is shallow enough, holds no
      oversized array and fits the remaining budget;
    * a ``table`` keeps as many leading rows as the budget and the array
      limit allow, and never fewer than one;
    * any other block keeps the longest leading run of children whose
      subtrees fit, and defers the rest.
    """
    if not nodes:
        return SlicePlan(outbound=[], deferred=[])

    if not is_exclusive(nodes[0].kind) and fits_in_one_call(nodes, limits):
        return SlicePlan(outbound=list(nodes), deferred=[() for _ in nodes])

    used = len(nodes)
    outbound: list[ContentNode] = []
    deferred: list[tuple[ContentNode, ...]] = []

    for node in nodes:
        children = node.children

        if not children:
            outbound.append(node)
            deferred.append(())
            continue

        if is_exclusive(node.kind) or _subtree_fits(children, used, limits):
            used += total_count(children)
            outbound.append(node)
            deferred.append(())
            continue

        if node.kind is BlockType.TABLE:
            keep = max(1, min(limits.call_budget - used, len(children), limits.max_slice_count))
            used += keep
        else:
            keep, run_total = _leading_run(children, used, limits)
            used += run_total

        outbound.append(node.with_children(children[:keep]))
        deferred.append(children[keep:])

    return SlicePlan(outbound=outbound, deferred=deferred)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class AppendSession:
    """Append block trees of any size and depth to a remote container.

    The call counter lives on the instance and is reset by every top-level
    :meth:`append`; run concurrent top-level appends on separate sessions.

    Parameters
    ----------
    transport:
        An :class:`~notiontree.protocol.transport.AppendTransport`.
    limits:
        Server limits to respect.
    metrics:
        Optional :class:`~notiontree.observability.MetricsHook`.
    """

    def __init__(
        self,
        transport: AppendTransport,
        limits: LimitPolicy = DEFAULT_LIMITS,
        metrics: Any | None = None,
    ) -> None:
        self._transport = transport
        self._limits = limits
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self.call_count = 0

    async def append(
        self,
        container_id: str,
        nodes: Iterable[ContentNode | Mapping[str, Any]],
        after_id: str | None = None,
    ) -> AppendResult:
        """Append *nodes* (and all their descendants) to *container_id*.

        Parameters
        ----------
        container_id:
            ID of the page or block to append to.
        nodes:
            Sibling blocks in reading order, as :class:`ContentNode` or raw
            Notion block dicts.
        after_id:
            Optional ID of an existing child of *container_id*; the new
            blocks are inserted after it, in order.

        Returns
        -------
        AppendResult
            Every response in call order plus the call count.  Empty when
            *nodes* is empty (no call is made).

        Raises
        ------
        NotionTreeStructureError
            If a slice is structurally invalid; nothing is sent for it.
        Exception
            Whatever the transport raised.  No further calls are made and
            earlier calls are not undone.
        """
        self.call_count = 0
        result = AppendResult()
        node_list = as_nodes(nodes)

        if not node_list:
            log.debug(
                "No blocks to append",
                extra={"extra_fields": {"op": "append", "container_id": container_id}},
            )
            return result

        t0 = time.monotonic()
        result.bindings = await self._append_level(container_id, node_list, after_id, result)
        result.call_count = self.call_count

        log.info(
            "Append complete",
            extra={
                "extra_fields": {
                    "op": "append",
                    "container_id": container_id,
                    "blocks": len(node_list),
                    "calls": self.call_count,
                    "warnings": len(result.warnings),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                }
            },
        )
        return result

    # -- internals ---------------------------------------------------------

    async def _append_level(
        self,
        container_id: str,
        nodes: Sequence[ContentNode],
        after_id: str | None,
        result: AppendResult,
    ) -> list[ResultBinding]:
        bindings: list[ResultBinding] = []
        anchor = after_id

        for slice_nodes in partition(nodes, self._limits):
            plan = plan_slice(slice_nodes, self._limits)
            validate_outbound(plan.outbound, limits=self._limits)

            response = await self._send(container_id, plan, anchor)
            result.responses.append(response)
            results = list(self._transport.get_results(response))

            for position, (node, deferred) in enumerate(zip(plan.outbound, plan.deferred)):
                binding = self._bind(container_id, position, node, results, deferred, result)
                if binding is None:
                    continue
                bindings.append(binding)
                if deferred:
                    await self._append_level(binding.block_id, deferred, None, result)

            # Keep later slices after the ones just inserted.
            if anchor is not None and results:
                anchor = results[-1].get("id", anchor)

        return bindings

    async def _send(self, container_id: str, plan: SlicePlan, anchor: str | None) -> Any:
        self.call_count += 1
        log.debug(
            "Submitting slice",
            extra={
                "extra_fields": {
                    "op": "append",
                    "container_id": container_id,
                    "slice_size": len(plan.outbound),
                    "deferred": plan.deferred_count,
                    "after": anchor,
                    "call": self.call_count,
                }
            },
        )
        try:
            response = await self._transport.call_append(container_id, plan.outbound, anchor)
        except Exception as exc:
            log.error(
                "Append call failed",
                extra={
                    "extra_fields": {
                        "op": "append",
                        "container_id": container_id,
                        "call": self.call_count,
                        "error": str(exc),
                    }
                },
            )
            raise

        self._metrics.increment("notiontree.append_calls_total")
        self._metrics.increment("notiontree.blocks_submitted_total", len(plan.outbound))
        if plan.deferred_count:
            self._metrics.increment("notiontree.blocks_deferred_total", plan.deferred_count)
        return response

    def _bind(
        self,
        container_id: str,
        position: int,
        node: ContentNode,
        results: Sequence[Mapping[str, Any]],
        deferred: Sequence[ContentNode],
        result: AppendResult,
    ) -> ResultBinding | None:
        """Pair *node* with the result at *position*, or record a mismatch."""
        returned = results[position] if position < len(results) else None
        returned_type = returned.get("type") if returned is not None else None

        if returned is not None and returned_type == node.kind.value and "id" in returned:
            return ResultBinding(position=position, block_id=returned["id"], kind=returned_type)

        reason = "missing result" if returned is None else "type mismatch"
        context = {
            "container_id": container_id,
            "position": position,
            "expected_type": node.kind.value,
            "returned_type": returned_type,
            "deferred_count": len(deferred),
        }
        result.warnings.append(
            ProtocolWarning(
                code=ErrorCode.PROTOCOL_MISMATCH,
                message=f"Response does not match submitted block at position {position}: {reason}",
                context=context,
            )
        )
        self._metrics.increment("notiontree.protocol_mismatch_total")
        log.warning(
            "Response does not match submitted block",
            extra={"extra_fields": {"op": "append", "reason": reason, **context}},
        )
        return None
