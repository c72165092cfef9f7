"""GraphQL client composing links into a request chain.

This module provides:
- Link: Protocol for a step of the request chain
- Transport: Protocol for the terminal step sending operations
- GraphQLClient: Runs operations through the links, then the transport

A link receives the operation and the rest of the chain (forward) and
decides what to do with it: pass it on, short-circuit, or wrap the call.
No base class is involved, only conformance to the protocol.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from offlinelink.core.types import ExecutionResult, Operation

logger = logging.getLogger(__name__)

NextLink = Callable[[Operation], Awaitable[ExecutionResult]]


class Link(Protocol):
    """One step of the request chain."""

    async def request(self, operation: Operation, forward: NextLink) -> ExecutionResult:
        ...


class Transport(Protocol):
    """Terminal step of the chain, sending an operation to the server."""

    async def execute(self, operation: Operation) -> ExecutionResult:
        ...


class GraphQLClient:
    """Client executing GraphQL operations through a chain of links."""

    def __init__(
        self,
        transport: Transport,
        links: Sequence[Link] = (),
    ) -> None:
        """Initialize the client.

        Args:
            transport: Terminal step sending operations to the server.
            links: Links applied in order before the transport.
        """
        self._transport = transport
        self._links = list(links)
        self._chain = self._build_chain()

    def _build_chain(self) -> NextLink:
        handler: NextLink = self._transport.execute
        for link in reversed(self._links):
            handler = functools.partial(link.request, forward=handler)
        return handler

    @property
    def transport(self) -> Transport:
        return self._transport

    async def execute(self, operation: Operation) -> ExecutionResult:
        """Run an operation through the whole chain."""
        logger.debug("Executing operation %s", operation.operation_name or "<anonymous>")
        return await self._chain(operation)

    async def mutate(
        self,
        mutation: str,
        variables: dict[str, Any] | None = None,
        optimistic_response: Any | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        """Execute a write.

        Args:
            mutation: GraphQL mutation document.
            variables: Mutation variables.
            optimistic_response: Result to show immediately if the write
                cannot be confirmed; enables offline queuing.
            operation_name: Optional operation name.

        Returns:
            The server result, or the optimistic response when deferred.
        """
        return await self.execute(
            Operation(
                query=mutation,
                variables=dict(variables or {}),
                operation_name=operation_name,
                optimistic_response=optimistic_response,
            )
        )
