import pytest

from toolbridge.core.binding import BindingError, BindingErrorKind
from toolbridge.exceptions import InvalidParamsError, InvalidRequestError, ParseError, ToolError, ToolNotFoundError
from toolbridge.protocol import ErrorCode, ErrorMapper, JsonRpcError, JsonRpcRequest
from toolbridge.protocol.jsonrpc import build_error, build_notification, build_request, dumps, parse_message


def test_request_parsing():
    request = JsonRpcRequest.from_payload({"jsonrpc": "2.0", "id": "x", "method": "tools/list"})
    notification = JsonRpcRequest.from_payload({"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert request.id == "x"
    assert request.is_notification is False
    assert notification.is_notification is True


@pytest.mark.parametrize(
    "payload",
    [
        "tools/list",
        [],
        {"jsonrpc": "2.0", "id": True, "method": "tools/list"},
        {"jsonrpc": "2.0", "id": {"a": 1}, "method": "tools/list"},
        {"id": 1, "method": "tools/list"},
        {"jsonrpc": "2.0", "id": 1, "method": ""},
    ],
)
def test_invalid_envelopes(payload):
    with pytest.raises(InvalidRequestError):
        JsonRpcRequest.from_payload(payload)


def test_parse_message():
    assert parse_message(b'{"a": 1}') == {"a": 1}
    with pytest.raises(ParseError):
        parse_message("{")
    with pytest.raises(ParseError):
        parse_message(b"\xff\xfe")


def test_builders():
    assert build_request("tools/list", 1) == {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
    assert build_notification("notifications/initialized") == {
        "jsonrpc": "2.0",
        "method": "notifications/initialized",
    }
    assert build_error(3, JsonRpcError(ErrorCode.INVALID_PARAMS, "bad")) == {
        "jsonrpc": "2.0",
        "id": 3,
        "error": {"code": -32602, "message": "bad"},
    }
    assert dumps(None) is None


def test_error_mapper_classification():
    mapper = ErrorMapper()

    missing = mapper.from_binding_error(BindingError(BindingErrorKind.MISSING_REQUIRED, "request.name", "string"))
    assert missing.code == ErrorCode.INVALID_PARAMS
    assert missing.message == "Missing required parameter 'request.name'"

    assert mapper.from_exception(ToolNotFoundError("x")).code == ErrorCode.METHOD_NOT_FOUND
    assert mapper.from_exception(InvalidParamsError("Invalid params: wrong")).code == ErrorCode.INVALID_PARAMS
    # 未經 invoker 包裝的 TypeError 不是參數問題
    assert mapper.from_exception(TypeError("wrong")).code == ErrorCode.INTERNAL_ERROR

    tool_error = mapper.from_exception(ToolError("denied", error_type="execution_failure", status=403))
    assert tool_error.code == ErrorCode.SERVER_ERROR
    assert tool_error.data == {"type": "execution_failure", "message": "denied", "details": {}, "status": 403}

    internal = mapper.from_exception(RuntimeError("secret detail"))
    assert internal.code == ErrorCode.INTERNAL_ERROR
    assert "secret detail" not in internal.message
