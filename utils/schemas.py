"""
Pydantic Schemas - JSON-RPC Wire Models

Defines the Pydantic schemas exchanged with the Solana JSON-RPC endpoint:
- Request envelope
- Response envelope (generic over the result type)
- Error object
- getBlock request configuration

Response decoding is strict: unknown top-level fields and mistyped scalars are
validation errors rather than being ignored or coerced.

Usage:
    from utils.schemas import SlotResponse

    response = SlotResponse.model_validate(payload)
    if response.error is None:
        slot = response.result
"""

from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    model_validator,
)

JSONRPC_VERSION = "2.0"

ResultT = TypeVar("ResultT")

Slot = Annotated[StrictInt, Field(ge=0)]


class RpcRequest(BaseModel):
    """JSON-RPC 2.0 request envelope.

    {"jsonrpc": "2.0", "id": 1, "method": "getSlot", "params": []}
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="Protocol version")
    id: int = Field(..., description="Correlation id echoed by the response")
    method: str = Field(..., min_length=1, description="Remote method name")
    params: list[Any] = Field(default_factory=list, description="Positional parameters")


class RpcError(BaseModel):
    """JSON-RPC error object.

    Only ``code`` and ``message`` are interpreted. Solana attaches a ``data``
    member to some errors; it is kept but never inspected.
    """

    code: StrictInt = Field(..., description="Error code")
    message: StrictStr = Field(..., description="Human-readable message")
    data: Any = None

    def __str__(self) -> str:
        return f"JSON-RPC error {self.code}: {self.message}"


class RpcResponse(BaseModel, Generic[ResultT]):
    """JSON-RPC 2.0 response envelope carrying either a result or an error."""

    model_config = ConfigDict(extra="forbid")

    jsonrpc: StrictStr
    id: StrictInt
    result: Optional[ResultT] = None
    error: Optional[RpcError] = None

    @model_validator(mode="after")
    def check_result_or_error(self) -> "RpcResponse[ResultT]":
        """Reject envelopes that carry both a result and an error."""
        if self.result is not None and self.error is not None:
            raise ValueError("response carries both result and error")
        return self


SlotResponse = RpcResponse[Slot]
BlockResponse = RpcResponse[Any]


class BlockRequestConfig(BaseModel):
    """Configuration object passed as the second getBlock parameter.

    Serialize with ``model_dump(by_alias=True)`` to obtain the wire form.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    encoding: str = Field(default="json")
    max_supported_transaction_version: int = Field(
        default=0, alias="maxSupportedTransactionVersion"
    )
    transaction_details: str = Field(default="full", alias="transactionDetails")
    rewards: bool = Field(default=False)
