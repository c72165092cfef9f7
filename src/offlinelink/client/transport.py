"""HTTP transport for GraphQL operations.

This module provides:
- HTTPTransport: Sends operations to a GraphQL endpoint with httpx

Error mapping:
- httpx.RequestError (connect error, timeout, ...) -> TransportError
- HTTP status >= 500 without GraphQL errors (gateway timeout, outage)
  -> TransportError
- any other HTTP status >= 400, or a body with GraphQL errors -> ServerError
  (carries the response, so the failure is terminal by default)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from offlinelink.core.config import ServerConfig
from offlinelink.core.types import ExecutionResult, Operation, ServerError, TransportError

logger = logging.getLogger(__name__)


class HTTPTransport:
    """Async HTTP client posting GraphQL operations."""

    def __init__(
        self,
        config: ServerConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Endpoint configuration.
            client: Optional preconfigured httpx client.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout,
            headers=config.headers,
            verify=config.verify_ssl,
        )

    @property
    def config(self) -> ServerConfig:
        return self._config

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> HTTPTransport:
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.aclose()

    @staticmethod
    def _payload(operation: Operation) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": operation.query,
            "variables": operation.variables,
        }
        if operation.operation_name:
            payload["operationName"] = operation.operation_name
        return payload

    async def execute(self, operation: Operation) -> ExecutionResult:
        """Send an operation and return its result.

        Raises:
            TransportError: If no response was received.
            ServerError: If the server answered with an error.
        """
        try:
            response = await self._client.post(
                self._config.endpoint, json=self._payload(operation)
            )
        except httpx.RequestError as e:
            raise TransportError(f"Request to {self._config.endpoint} failed: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> ExecutionResult:
        """Handle a GraphQL response and raise on errors."""
        try:
            body = response.json()
        except ValueError:
            body = None

        errors: list[dict[str, Any]] = []
        if isinstance(body, dict):
            errors = list(body.get("errors") or [])

        if response.status_code >= 500 and not errors:
            # Gateway or server fault before the operation ran
            raise TransportError(
                f"Server returned {response.status_code}: {response.reason_phrase}"
            )
        if response.status_code >= 400:
            message = errors[0].get("message") if errors else response.reason_phrase
            raise ServerError(
                f"Server returned {response.status_code}: {message}",
                response=response,
                errors=errors,
            )
        if not isinstance(body, dict):
            raise ServerError("Server returned a non-JSON response", response=response)
        if errors:
            raise ServerError(
                f"Server rejected operation: {errors[0].get('message', 'Unknown error')}",
                response=response,
                errors=errors,
            )

        return ExecutionResult(data=body.get("data"), errors=[])
