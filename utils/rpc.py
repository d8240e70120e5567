"""
JSON-RPC gateway over HTTP with typed failure modes.

One call, one POST: no retries and no caching happen here. Retry policy
belongs to the caller, which needs to tell three things apart:

- RpcTransportError: the request never produced a response body
- RpcDecodeError: a body arrived but is not a valid response envelope
- a returned RpcResponse whose ``error`` is set: the remote refused the call
"""

import logging
from typing import Any, Optional

import httpx
import orjson
from pydantic import ValidationError

from utils.schemas import RpcError, RpcRequest, RpcResponse

logger = logging.getLogger(__name__)


class RpcGatewayError(RuntimeError):
    """Base class for all gateway failures."""

    def __init__(self, message: str, *, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class RpcTransportError(RpcGatewayError):
    """Connection, timeout, TLS or protocol failure below JSON-RPC."""


class RpcDecodeError(RpcGatewayError):
    """Response body does not match the expected envelope."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, method=method)
        self.status_code = status_code


class RemoteCallError(RpcGatewayError):
    """Remote error escalated to a failure by the caller."""

    def __init__(self, error: RpcError, *, method: Optional[str] = None) -> None:
        super().__init__(str(error), method=method)
        self.error = error
        self.code = error.code


class JsonRpcGateway:
    """JSON-RPC 2.0 client bound to a single endpoint URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize gateway.

        Args:
            url: JSON-RPC endpoint URL
            timeout: Per-call timeout in seconds (owned client only)
            client: Pre-built client; the caller keeps ownership of it
        """
        if not url:
            raise ValueError("RPC url must not be empty")

        self.url = url
        self.timeout = timeout
        self.client = client
        self._owns_client = client is None

    async def connect(self) -> None:
        """Create the HTTP client if none was injected."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

    async def call(
        self,
        request_id: int,
        method: str,
        params: list[Any],
        result_type: Any = Any,
    ) -> RpcResponse[Any]:
        """Issue one JSON-RPC call and decode the response envelope.

        Args:
            request_id: Correlation id for the request
            method: Remote method name
            params: Positional parameters
            result_type: Type the ``result`` member must validate against

        Returns:
            Decoded response; ``error`` is set when the remote refused the call

        Raises:
            ValueError: If method is empty
            RpcTransportError: If the HTTP exchange fails
            RpcDecodeError: If the body is not a valid response envelope
        """
        if not method:
            raise ValueError("RPC method must not be empty")

        if self.client is None:
            await self.connect()

        request = RpcRequest(id=request_id, method=method, params=params)

        try:
            http_response = await self.client.post(
                self.url,
                content=orjson.dumps(request.model_dump()),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise RpcTransportError(
                f"{method} request failed: {e!r}", method=method
            ) from e

        status_code = http_response.status_code

        try:
            payload = orjson.loads(http_response.content)
        except orjson.JSONDecodeError as e:
            raise RpcDecodeError(
                f"{method} response is not JSON (status={status_code}): {e}",
                method=method,
                status_code=status_code,
            ) from e

        try:
            response = RpcResponse[result_type].model_validate(payload)
        except ValidationError as e:
            raise RpcDecodeError(
                f"{method} response is malformed (status={status_code}): {e}",
                method=method,
                status_code=status_code,
            ) from e

        if response.id != request_id:
            logger.warning(
                "Response id mismatch: method=%s, expected=%d, got=%d",
                method, request_id, response.id,
            )

        return response

    async def close(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "JsonRpcGateway":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
