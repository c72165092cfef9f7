"""Test doubles shared across offlinelink tests."""

from __future__ import annotations

import asyncio
from typing import Any

from offlinelink.client.storage import MemoryStorage
from offlinelink.core.types import (
    ExecutionResult,
    Operation,
    ServerError,
    TransportError,
)

ADD_TODO = "mutation AddTodo($text: String!) { addTodo(text: $text) { id text } }"


def make_operation(
    name: str = "AddTodo",
    text: str = "milk",
    optimistic: Any | None = None,
) -> Operation:
    """Create a write operation for testing."""
    return Operation(
        query=ADD_TODO,
        variables={"text": text},
        operation_name=name,
        optimistic_response=optimistic,
    )


class FakeServer:
    """In-memory stand-in for the GraphQL transport.

    Attributes:
        online: When False, every call fails with TransportError.
        rejected: Operation names answered with a ServerError.
        unreachable: Operation names failing with TransportError.
        calls: Operations received, in order.
        gate: When set, calls wait on it before answering.
    """

    def __init__(self) -> None:
        self.online = True
        self.rejected: set[str] = set()
        self.unreachable: set[str] = set()
        self.calls: list[Operation] = []
        self.gate: asyncio.Event | None = None

    @property
    def call_names(self) -> list[str | None]:
        return [op.operation_name for op in self.calls]

    async def execute(self, operation: Operation) -> ExecutionResult:
        self.calls.append(operation)
        if self.gate is not None:
            await self.gate.wait()
        if not self.online or operation.operation_name in self.unreachable:
            raise TransportError("Network unreachable")
        if operation.operation_name in self.rejected:
            errors = [{"message": "Not allowed"}]
            raise ServerError("Server rejected operation", response={"errors": errors}, errors=errors)
        return ExecutionResult(data={"ok": operation.operation_name})


class FlakyStorage(MemoryStorage):
    """MemoryStorage whose writes fail with OSError while fail is set."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)
