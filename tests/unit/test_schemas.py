import pytest
from pydantic import ValidationError

from utils.schemas import (
    BlockRequestConfig,
    BlockResponse,
    RpcError,
    RpcRequest,
    SlotResponse,
)


def test_request_serializes_to_jsonrpc_envelope():
    request = RpcRequest(id=1, method="getSlot")

    assert request.model_dump() == {"jsonrpc": "2.0", "id": 1, "method": "getSlot", "params": []}


def test_request_is_immutable_and_requires_method():
    request = RpcRequest(id=1, method="getSlot")

    with pytest.raises(ValidationError):
        request.method = "getBlock"
    with pytest.raises(ValidationError):
        RpcRequest(id=1, method="")


def test_block_request_config_uses_wire_names():
    assert BlockRequestConfig().model_dump(by_alias=True) == {
        "encoding": "json",
        "maxSupportedTransactionVersion": 0,
        "transactionDetails": "full",
        "rewards": False,
    }


def test_null_result_means_no_data():
    response = BlockResponse.model_validate({"jsonrpc": "2.0", "id": 2, "result": None})

    assert response.result is None
    assert response.error is None


def test_response_with_neither_member_means_no_data():
    response = SlotResponse.model_validate({"jsonrpc": "2.0", "id": 1})

    assert response.result is None
    assert response.error is None


def test_response_rejects_unknown_top_level_fields():
    with pytest.raises(ValidationError):
        BlockResponse.model_validate({"jsonrpc": "2.0", "id": 2, "result": {}, "extra": 1})


def test_response_rejects_result_and_error_together():
    with pytest.raises(ValidationError):
        BlockResponse.model_validate(
            {"jsonrpc": "2.0", "id": 2, "result": {}, "error": {"code": -1, "message": "x"}}
        )


@pytest.mark.parametrize("slot", ["12", 1.5, -3, True])
def test_slot_response_rejects_non_slot_values(slot):
    with pytest.raises(ValidationError):
        SlotResponse.model_validate({"jsonrpc": "2.0", "id": 1, "result": slot})


def test_block_result_is_kept_opaque():
    block = {"blockhash": "abc", "transactions": [{"meta": None}], "blockTime": None}

    response = BlockResponse.model_validate({"jsonrpc": "2.0", "id": 2, "result": block})

    assert response.result == block


def test_error_keeps_data_and_ignores_unknown_members():
    error = RpcError.model_validate(
        {"code": -32004, "message": "Block not available", "data": {"slot": 9}, "hint": "retry"}
    )

    assert error.data == {"slot": 9}
    assert not hasattr(error, "hint")
    assert str(error) == "JSON-RPC error -32004: Block not available"


def test_error_requires_integer_code():
    with pytest.raises(ValidationError):
        RpcError.model_validate({"code": "-32004", "message": "Block not available"})
