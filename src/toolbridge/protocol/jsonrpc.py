"""JSON-RPC 2.0 envelope model.

Only single request objects are supported; batch arrays are answered with
``Invalid Request``. A request without ``id`` (or with ``id: null``) is a
notification and never produces a response frame.
"""
from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict, Union

from toolbridge.exceptions import InvalidRequestError, ParseError

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int, float, None]
Params = Union[Dict[str, Any], List[Any], None]


class ErrorCode(enum.IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # implementation-defined range: the tool reported a failure status
    SERVER_ERROR = -32000


class JsonRpcErrorPayload(TypedDict, total=False):
    code: int
    message: str
    data: Any


class JsonRpcResponse(TypedDict, total=False):
    """Response envelope; exactly one of ``result`` / ``error`` is present."""

    jsonrpc: str
    id: RequestId
    result: Any
    error: JsonRpcErrorPayload


@dataclass(frozen=True)
class JsonRpcError:
    code: int
    message: str
    data: Any = None

    def to_dict(self) -> JsonRpcErrorPayload:
        payload: JsonRpcErrorPayload = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


@dataclass(frozen=True)
class JsonRpcRequest:
    method: str
    params: Params = None
    id: RequestId = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def from_payload(cls, payload: Any) -> "JsonRpcRequest":
        """Validate a decoded JSON value as a request envelope.

        Raises :class:`InvalidRequestError` carrying the request id whenever one
        can be recovered from the payload.
        """

        if not isinstance(payload, dict):
            kind = "batch requests are not supported" if isinstance(payload, list) else "expected a JSON object"
            raise InvalidRequestError(f"Invalid Request: {kind}")

        request_id = payload.get("id")
        if request_id is not None and (
            isinstance(request_id, bool) or not isinstance(request_id, (str, int, float))
        ):
            raise InvalidRequestError("Invalid Request: id must be a string, number or null")

        if payload.get("jsonrpc") != JSONRPC_VERSION:
            raise InvalidRequestError(
                "Invalid Request: jsonrpc must be exactly \"2.0\"", request_id=request_id
            )

        method = payload.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidRequestError(
                "Invalid Request: method must be a non-empty string", request_id=request_id
            )

        params = payload.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            raise InvalidRequestError(
                "Invalid Request: params must be an object or an array", request_id=request_id
            )

        return cls(method=method, params=params, id=request_id)


def parse_message(message: Union[str, bytes, bytearray]) -> Any:
    """Decode raw transport bytes into a JSON value."""

    try:
        if isinstance(message, (bytes, bytearray)):
            message = message.decode("utf-8")
        return json.loads(message)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"Parse error: {exc}") from exc


def build_request(method: str, request_id: RequestId, params: Params = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def build_notification(method: str, params: Params = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def build_result(request_id: RequestId, result: Any) -> JsonRpcResponse:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def build_error(request_id: RequestId, error: JsonRpcError) -> JsonRpcResponse:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}


def dumps(response: Optional[JsonRpcResponse]) -> Optional[str]:
    if response is None:
        return None
    return json.dumps(response, ensure_ascii=False)
