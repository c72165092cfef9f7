"""Shared types for offlinelink.

This module defines the operation/result types that flow through the link
chain, the pending write attempts kept in the queue, and the exception
hierarchy used by both the queue engine and the transport.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any


class OfflineLinkError(Exception):
    """Base exception for offlinelink errors."""


class ConfigurationError(OfflineLinkError):
    """Invalid or incomplete configuration (fatal, raised at construction)."""


class ExecutionError(OfflineLinkError):
    """A write operation could not be executed.

    Attributes:
        response: Structured server response, or None when the server
            was never reached.
        errors: GraphQL errors reported by the server (may be empty).
    """

    def __init__(
        self,
        message: str,
        response: Any | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.response = response
        self.errors = errors or []


class TransportError(ExecutionError):
    """The operation never reached the server (connectivity, timeout, 5xx outage)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, response=None)


class ServerError(ExecutionError):
    """The server processed the request and rejected it."""


@dataclass(frozen=True)
class Operation:
    """A GraphQL write request travelling through the link chain.

    Attributes:
        query: GraphQL document text.
        variables: Variables for the document.
        operation_name: Optional operation name.
        optimistic_response: Speculative result shown to the caller while
            the write has not been confirmed. None means the operation does
            not declare one and is never queued.
    """

    query: str
    variables: dict[str, Any] = field(default_factory=dict)
    operation_name: str | None = None
    optimistic_response: Any | None = None

    @property
    def has_optimistic_response(self) -> bool:
        return self.optimistic_response is not None

    def without_optimistic(self) -> Operation:
        """Copy of this operation that bypasses the offline queue."""
        return replace(self, optimistic_response=None)


@dataclass
class ExecutionResult:
    """Result delivered to the caller of a write.

    Attributes:
        data: Result payload.
        errors: GraphQL errors attached to the result.
        optimistic: True when data is the speculative result rather than
            a server response.
    """

    data: Any = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    optimistic: bool = False


@dataclass(frozen=True)
class PendingWrite:
    """One write operation awaiting confirmed delivery."""

    id: str
    operation: Operation

    @classmethod
    def create(cls, operation: Operation) -> PendingWrite:
        """Create a pending write with a fresh unique id."""
        return cls(id=uuid.uuid4().hex, operation=operation)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form stored in the persisted queue."""
        return {
            "mutation": self.operation.query,
            "variables": self.operation.variables,
            "operation_name": self.operation.operation_name,
            "optimistic_response": self.operation.optimistic_response,
        }

    @classmethod
    def from_dict(cls, attempt_id: str, data: dict[str, Any]) -> PendingWrite:
        """Rebuild a pending write from its persisted form."""
        return cls(
            id=attempt_id,
            operation=Operation(
                query=data["mutation"],
                variables=dict(data.get("variables") or {}),
                operation_name=data.get("operation_name"),
                optimistic_response=data.get("optimistic_response"),
            ),
        )

    def __repr__(self) -> str:
        name = self.operation.operation_name or "<anonymous>"
        return f"PendingWrite({self.id[:8]}, {name})"


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the queue as seen by observers.

    Attributes:
        mutations: Number of writes still queued.
        inflight: True while a sync cycle is replaying the queue.
    """

    mutations: int = 0
    inflight: bool = False


@dataclass
class SyncReport:
    """Outcome of one sync cycle.

    Attributes:
        succeeded: Ids accepted by the server.
        discarded: Ids rejected by the server (terminal failures).
        retained: Ids still queued after the cycle.
        skipped: True when the queue was empty and nothing ran.
    """

    succeeded: list[str] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)
    retained: list[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def complete(self) -> bool:
        """True when nothing is left to retry."""
        return not self.retained
