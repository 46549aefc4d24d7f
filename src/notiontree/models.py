"""Result types returned by the append and page-creation protocols.

All types are plain dataclasses with no behaviour beyond what is needed to
accumulate results across recursive calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ResultBinding:
    """A submitted node paired with the block the server created for it.

    Attributes
    ----------
    position:
        Index of the node within the slice it was submitted in.
    block_id:
        The server-assigned block ID.
    kind:
        The block type confirmed by the server.
    """

    position: int
    block_id: str
    kind: str


@dataclass
class ProtocolWarning:
    """A non-fatal issue met while matching a response to its request.

    Attributes
    ----------
    code:
        Machine-readable code (``"PROTOCOL_MISMATCH"``).
    message:
        Human-readable description.
    context:
        ``container_id``, ``position``, ``expected_type``, ``returned_type``
        and ``deferred_count`` (children that were not appended).
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class AppendResult:
    """Result of :meth:`AppendSession.append`.

    Attributes
    ----------
    responses:
        Every raw response, in the order the calls were made (not content
        order).
    call_count:
        Number of outbound append calls made.
    bindings:
        Top-level nodes paired with their new block IDs, in content order.
    warnings:
        Protocol mismatches; the affected nodes' deferred children were
        not appended.
    """

    responses: list[Any] = field(default_factory=list)
    call_count: int = 0
    bindings: list[ResultBinding] = field(default_factory=list)
    warnings: list[ProtocolWarning] = field(default_factory=list)

    @property
    def block_ids(self) -> list[str]:
        """IDs of the top-level blocks that were created, in order."""
        return [binding.block_id for binding in self.bindings]


@dataclass
class PageCreateResult:
    """Result of :meth:`PageCreateSession.create`.

    Attributes
    ----------
    page_id:
        ID of the newly created page.
    response:
        Raw response of the page-creation call.
    inlined_count:
        Number of first-level blocks sent with the creation call.
    append:
        Result of appending the remaining blocks, or ``None`` when the
        creation call carried everything.
    """

    page_id: str
    response: Any
    inlined_count: int = 0
    append: AppendResult | None = None

    @property
    def call_count(self) -> int:
        """Total outbound calls: the creation call plus every append call."""
        return 1 + (self.append.call_count if self.append is not None else 0)

    @property
    def responses(self) -> list[Any]:
        """The creation response followed by every append response."""
        extra = self.append.responses if self.append is not None else []
        return [self.response, *extra]

    @property
    def warnings(self) -> list[ProtocolWarning]:
        return list(self.append.warnings) if self.append is not None else []
