"""Error Mapper: classify failures into JSON-RPC error objects."""
from __future__ import annotations

from typing import Any, Dict

from toolbridge.core.binding import BindingError
from toolbridge.exceptions import (
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ToolError,
    ToolNotFoundError,
)

from .jsonrpc import ErrorCode, JsonRpcError


class ErrorMapper:
    """Maps binding errors and exceptions raised around a tool call.

    Parameter problems reach it as ``InvalidParamsError``: the invoker wraps
    ``ValueError``/``TypeError`` raised by the host call itself. Anything else
    unexpected, including resolver and serializer faults, becomes an internal
    error whose message is not leaked to the client.
    """

    def from_binding_error(self, error: BindingError) -> JsonRpcError:
        return JsonRpcError(ErrorCode.INVALID_PARAMS, error.message, error.to_data())

    def invalid_params(self, message: str, data: Dict[str, Any] | None = None) -> JsonRpcError:
        return JsonRpcError(ErrorCode.INVALID_PARAMS, message, data)

    def method_not_found(self, method: str) -> JsonRpcError:
        return JsonRpcError(ErrorCode.METHOD_NOT_FOUND, "Method not found", {"method": method})

    def tool_not_found(self, name: str) -> JsonRpcError:
        return JsonRpcError(ErrorCode.METHOD_NOT_FOUND, f"Tool not found: {name}", {"tool": name})

    def from_exception(self, exc: BaseException) -> JsonRpcError:
        if isinstance(exc, ParseError):
            return JsonRpcError(ErrorCode.PARSE_ERROR, "Parse error", {"detail": str(exc)})
        if isinstance(exc, InvalidRequestError):
            return JsonRpcError(ErrorCode.INVALID_REQUEST, str(exc))
        if isinstance(exc, ToolNotFoundError):
            return self.tool_not_found(exc.name)
        if isinstance(exc, MethodNotFoundError):
            return self.method_not_found(exc.method)
        if isinstance(exc, InvalidParamsError):
            return JsonRpcError(ErrorCode.INVALID_PARAMS, str(exc), exc.data or None)
        if isinstance(exc, ToolError):
            return JsonRpcError(ErrorCode.SERVER_ERROR, str(exc), exc.to_dict())
        return JsonRpcError(
            ErrorCode.INTERNAL_ERROR,
            "Internal error",
            {"exception": type(exc).__name__},
        )
