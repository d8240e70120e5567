"""
getBlock response classification.

Maps a decoded getBlock response onto the action the fetch loop takes for it.
The decision depends only on the response itself, never on loop history.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from utils.schemas import RpcError, RpcResponse

# Solana RPC error codes
BLOCK_NOT_AVAILABLE_ERROR = -32004
BLOCK_SKIPPED_ERROR = -32007


class BlockOutcome(str, Enum):
    FETCHED = "fetched"
    NOT_AVAILABLE = "not_available"
    SKIPPED = "skipped"
    REMOTE_ERROR = "remote_error"
    NO_BLOCK = "no_block"
    NO_TRANSACTIONS = "no_transactions"


TERMINAL_OUTCOMES = frozenset({BlockOutcome.NO_BLOCK, BlockOutcome.NO_TRANSACTIONS})


@dataclass(frozen=True)
class Classification:
    outcome: BlockOutcome
    tx_count: int = 0
    error: Optional[RpcError] = None

    @property
    def terminal(self) -> bool:
        return self.outcome in TERMINAL_OUTCOMES


def is_block_not_available(response: RpcResponse[Any]) -> bool:
    """True when the slot exists but its block has not been produced yet."""
    return response.error is not None and response.error.code == BLOCK_NOT_AVAILABLE_ERROR


def classify_block_response(response: RpcResponse[Any]) -> Classification:
    """
    Classify a getBlock response.

    Args:
        response: Decoded getBlock response envelope

    Returns:
        Classification with the outcome and, for fetched blocks, the
        transaction count
    """
    error = response.error
    if error is not None:
        if error.code == BLOCK_NOT_AVAILABLE_ERROR:
            return Classification(BlockOutcome.NOT_AVAILABLE, error=error)
        if error.code == BLOCK_SKIPPED_ERROR:
            return Classification(BlockOutcome.SKIPPED, error=error)
        return Classification(BlockOutcome.REMOTE_ERROR, error=error)

    block = response.result
    if block is None:
        return Classification(BlockOutcome.NO_BLOCK)

    transactions = block.get("transactions") if isinstance(block, dict) else None
    if not isinstance(transactions, list):
        return Classification(BlockOutcome.NO_TRANSACTIONS)

    return Classification(BlockOutcome.FETCHED, tx_count=len(transactions))
