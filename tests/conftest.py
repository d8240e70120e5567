"""Shared fixtures for harvester and gateway tests."""

from typing import Any, Callable, Union

import pytest

from utils.schemas import BlockResponse, RpcError, SlotResponse

Reply = Union[Any, Exception, Callable[[], Any]]


def slot_response(slot: int) -> SlotResponse:
    return SlotResponse(jsonrpc="2.0", id=1, result=slot)


def block_response(tx_count: int) -> BlockResponse:
    transactions = [{"transaction": {"signatures": [f"sig{i}"]}} for i in range(tx_count)]
    return BlockResponse(jsonrpc="2.0", id=2, result={"blockHeight": 1, "transactions": transactions})


def block_result(result: Any) -> BlockResponse:
    return BlockResponse(jsonrpc="2.0", id=2, result=result)


def error_response(code: int, message: str = "remote failure", request_id: int = 2) -> BlockResponse:
    return BlockResponse(jsonrpc="2.0", id=request_id, error=RpcError(code=code, message=message))


class ScriptedGateway:
    """Gateway double answering calls from a fixed script.

    Each script entry is a response, an exception to raise, or a zero-argument
    callable producing either.
    """

    def __init__(self, *replies: Reply) -> None:
        self.url = "https://rpc.example.test/?api-key=secret"
        self.calls: list[tuple[int, str, list[Any]]] = []
        self.connected = False
        self.closed = False
        self._replies = list(replies)

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    async def call(self, request_id: int, method: str, params: list[Any], result_type: Any = Any) -> Any:
        self.calls.append((request_id, method, params))
        if not self._replies:
            raise AssertionError(f"unexpected {method} call with params {params}")

        reply = self._replies.pop(0)
        if callable(reply) and not isinstance(reply, Exception):
            reply = reply()
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def requested_slots(self) -> list[int]:
        return [params[0] for _, method, params in self.calls if method == "getBlock"]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
