from .dispatcher import McpDispatcher
from .errors import ErrorMapper
from .jsonrpc import (
    JSONRPC_VERSION,
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    build_error,
    build_notification,
    build_request,
    build_result,
    parse_message,
)

__all__ = [
    "ErrorCode",
    "ErrorMapper",
    "JSONRPC_VERSION",
    "JsonRpcError",
    "JsonRpcRequest",
    "McpDispatcher",
    "build_error",
    "build_notification",
    "build_request",
    "build_result",
    "parse_message",
]
