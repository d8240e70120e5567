"""
Block Harvester - Sequential Slot Fetch Loop

Follows the Solana ledger one slot at a time starting from the current slot
and reports the transaction count and fetch latency of every block.

Features:
- Starting point taken from getSlot at startup
- Fixed-delay retry (tenacity) for blocks that are not produced yet
- Skipped slots are reported and stepped over
- Graceful shutdown on SIGINT/SIGTERM

Usage:
    SOLANA_RPC_URL=https://api.mainnet-beta.solana.com python -m apps.harvester
"""

import asyncio
import logging
import signal
import sys
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_when_event_set,
    wait_fixed,
)

from apps.harvester.outcomes import (
    BlockOutcome,
    classify_block_response,
    is_block_not_available,
)
from utils.config import get_settings
from utils.logging import setup_logging
from utils.rpc import JsonRpcGateway, RemoteCallError, RpcDecodeError
from utils.schemas import BlockRequestConfig, RpcResponse, Slot

logger = logging.getLogger(__name__)

GET_SLOT_METHOD = "getSlot"
GET_BLOCK_METHOD = "getBlock"
GET_SLOT_REQUEST_ID = 1
GET_BLOCK_REQUEST_ID = 2

FETCH_RETRY_DELAY = 0.5

BLOCK_REQUEST_CONFIG = BlockRequestConfig()


@dataclass
class HarvestStats:
    start_slot: Optional[int] = None
    next_slot: Optional[int] = None
    fetched: int = 0
    skipped: int = 0
    remote_errors: int = 0
    transactions: int = 0


class BlockHarvester:
    """
    Fetch loop walking the ledger slot by slot.

    Handles:
    - Cursor initialization from the current slot
    - Per-slot retry, skip and error classification
    - Signal handling for graceful shutdown
    """

    def __init__(
        self,
        gateway: JsonRpcGateway,
        retry_delay: float = FETCH_RETRY_DELAY,
        unclassified_error_limit: int = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize harvester.

        Args:
            gateway: JSON-RPC gateway bound to the endpoint
            retry_delay: Seconds to wait before re-requesting a block that is
                not produced yet
            unclassified_error_limit: Consecutive unclassified remote errors
                tolerated before failing; 0 retries forever
            sleep: Coroutine used to wait between retries
        """
        self.gateway = gateway
        self.retry_delay = retry_delay
        self.unclassified_error_limit = unclassified_error_limit
        self.shutdown_event = asyncio.Event()
        self.stats = HarvestStats()
        self._sleep = sleep

    async def get_start_slot(self) -> int:
        """
        Fetch the current slot to start harvesting from.

        Raises:
            RemoteCallError: If the endpoint answers with an error
            RpcTransportError: If the request fails
            RpcDecodeError: If the response is malformed or empty
        """
        response = await self.gateway.call(
            GET_SLOT_REQUEST_ID, GET_SLOT_METHOD, [], Slot
        )

        if response.error is not None:
            raise RemoteCallError(response.error, method=GET_SLOT_METHOD)

        if response.result is None:
            raise RpcDecodeError(
                "getSlot response carries neither result nor error",
                method=GET_SLOT_METHOD,
            )

        return response.result

    async def _request_block(self, slot: int) -> tuple[RpcResponse[Any], float]:
        started = time.perf_counter()
        response = await self.gateway.call(
            GET_BLOCK_REQUEST_ID,
            GET_BLOCK_METHOD,
            [slot, BLOCK_REQUEST_CONFIG.model_dump(by_alias=True)],
        )
        return response, time.perf_counter() - started

    def _log_not_available(self, retry_state: RetryCallState) -> None:
        logger.debug(
            "slot: %d | not available yet, retrying in %.3fs (attempt=%d)",
            retry_state.args[0], self.retry_delay, retry_state.attempt_number,
        )

    async def fetch_block(self, slot: int) -> tuple[RpcResponse[Any], float]:
        """
        Fetch the block at a slot, waiting until the slot has been produced.

        Not-yet-produced responses are retried after a fixed delay until a
        different response arrives or shutdown is requested.

        Args:
            slot: Slot to fetch

        Returns:
            Tuple of (last response, latency of the last request in seconds)
        """
        retrying = AsyncRetrying(
            retry=retry_if_result(lambda result: is_block_not_available(result[0])),
            wait=wait_fixed(self.retry_delay),
            stop=stop_when_event_set(self.shutdown_event),
            sleep=self._sleep,
            before_sleep=self._log_not_available,
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        return await retrying(self._request_block, slot)

    async def run(self) -> HarvestStats:
        """
        Harvest blocks until the endpoint stops returning block data.

        Returns:
            Counters for the run

        Raises:
            RemoteCallError: If getSlot fails or the unclassified error limit
                is reached
            RpcTransportError: If any request fails
            RpcDecodeError: If any response is malformed
        """
        slot = await self.get_start_slot()
        self.stats.start_slot = slot
        consecutive_errors = 0

        logger.info("fetching blocks starting from slot: %d", slot)

        while not self.shutdown_event.is_set():
            response, latency = await self.fetch_block(slot)
            classification = classify_block_response(response)
            outcome = classification.outcome

            if outcome is BlockOutcome.REMOTE_ERROR:
                consecutive_errors += 1
                self.stats.remote_errors += 1
                logger.error("error: %s", classification.error)

                if 0 < self.unclassified_error_limit <= consecutive_errors:
                    raise RemoteCallError(classification.error, method=GET_BLOCK_METHOD)
                continue

            consecutive_errors = 0

            if outcome is BlockOutcome.NOT_AVAILABLE:
                # Only returned once shutdown stopped the retry loop
                continue

            if outcome is BlockOutcome.SKIPPED:
                logger.info("slot: %d | skipped", slot)
                self.stats.skipped += 1
                slot += 1
            elif outcome is BlockOutcome.NO_BLOCK:
                logger.info("no block data found for slot: %d", slot)
                break
            elif outcome is BlockOutcome.NO_TRANSACTIONS:
                logger.info("no transactions found for slot: %d", slot)
                break
            else:
                logger.info(
                    "slot: %d | tx_count: %d | latency: %.3fms",
                    slot, classification.tx_count, latency * 1000,
                )
                self.stats.fetched += 1
                self.stats.transactions += classification.tx_count
                slot += 1

        self.stats.next_slot = slot
        return self.stats

    def setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""

        def signal_handler(signum: int, frame: object) -> None:
            logger.info("Received signal %d, initiating graceful shutdown", signum)
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start(self) -> HarvestStats:
        """
        Run the harvester until the block stream ends or shutdown is requested.

        The gateway is closed on every exit path.
        """
        self.setup_signal_handlers()

        logger.info("Starting block harvester (endpoint=%s)", httpx.URL(self.gateway.url).host)

        try:
            await self.gateway.connect()
            stats = await self.run()

            logger.info(
                "Harvester stopped (start_slot=%s, next_slot=%s, fetched=%d, skipped=%d, "
                "remote_errors=%d, transactions=%d)",
                stats.start_slot, stats.next_slot, stats.fetched, stats.skipped,
                stats.remote_errors, stats.transactions,
            )
            return stats

        except Exception as e:
            logger.error("Harvester failed: %s", str(e), exc_info=True)
            raise

        finally:
            await self.gateway.close()
            logger.info("RPC gateway closed")


async def main() -> None:
    """Main entry point for the block harvester."""
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", str(e))
        sys.exit(1)

    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)
    logger.info(
        "%s %s starting (environment=%s)",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
    )

    harvester = BlockHarvester(
        gateway=JsonRpcGateway(settings.SOLANA_RPC_URL, timeout=settings.RPC_TIMEOUT),
        retry_delay=settings.fetch_retry_delay,
        unclassified_error_limit=settings.UNCLASSIFIED_ERROR_LIMIT,
    )

    try:
        await harvester.start()
    except Exception as e:
        logger.error("Harvester failed: %s", str(e))
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
