"""MCP request dispatcher.

Handles a single JSON-RPC request at a time; any number of ``handle`` calls may
run concurrently on the same dispatcher since the only shared state is the
read-only :class:`~toolbridge.runtime.context.ServerContext`.

Methods:
- initialize
- notifications/initialized
- tools/list
- tools/call
- (optional) legacy direct calls, where ``method`` is the tool name itself
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from toolbridge.core.context import RequestContext
from toolbridge.core.models import RegisteredTool
from toolbridge.exceptions import InvalidRequestError, ParseError
from toolbridge.runtime.context import ServerContext
from toolbridge.utils.logger import logger

from .errors import ErrorMapper
from .jsonrpc import (
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    build_error,
    build_result,
    parse_message,
)

Outcome = Union[Dict[str, Any], JsonRpcError]
_Handler = Callable[[JsonRpcRequest, RequestContext], Awaitable[Outcome]]


class McpDispatcher:
    def __init__(self, context: ServerContext, *, error_mapper: Optional[ErrorMapper] = None) -> None:
        self.context = context
        self.errors = error_mapper or ErrorMapper()
        self._handlers: Dict[str, _Handler] = {
            "initialize": self._initialize,
            "notifications/initialized": self._initialized,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def handle_raw(
        self,
        message: Union[str, bytes, bytearray],
        *,
        session_id: Optional[str] = None,
        transport: Optional[str] = None,
    ) -> Optional[JsonRpcResponse]:
        """Decode transport bytes and handle them; malformed JSON yields -32700 with id null."""

        try:
            payload = parse_message(message)
        except ParseError as exc:
            logger.warning("無法解析 JSON-RPC 訊息：%s", exc)
            return build_error(None, self.errors.from_exception(exc))
        return await self.handle(payload, session_id=session_id, transport=transport)

    async def handle(
        self,
        payload: Any,
        *,
        session_id: Optional[str] = None,
        transport: Optional[str] = None,
    ) -> Optional[JsonRpcResponse]:
        """Handle one decoded request; returns ``None`` for notifications."""

        try:
            request = JsonRpcRequest.from_payload(payload)
        except InvalidRequestError as exc:
            return build_error(exc.request_id, self.errors.from_exception(exc))

        request_context = RequestContext(
            request_id=request.id,
            session_id=session_id,
            transport=transport,
        )
        logger.info("MCP 請求 %s (id=%s)", request.method, request.id)

        outcome = await self._route(request, request_context)

        if request.is_notification:
            return None
        if isinstance(outcome, JsonRpcError):
            return build_error(request.id, outcome)
        return build_result(request.id, outcome)

    async def _route(self, request: JsonRpcRequest, request_context: RequestContext) -> Outcome:
        handler = self._handlers.get(request.method)
        if handler is not None:
            return await handler(request, request_context)

        if self.context.options.legacy_method_calls:
            tool = self.context.registry.lookup(request.method)
            if tool is not None:
                arguments = self._legacy_arguments(tool, request.params)
                return await self._invoke(tool, arguments, request_context)

        return self.errors.method_not_found(request.method)

    async def _initialize(self, request: JsonRpcRequest, request_context: RequestContext) -> Outcome:
        options = self.context.options
        return {
            "protocolVersion": options.protocol_version,
            "serverInfo": {"name": options.server_name, "version": options.server_version},
            "capabilities": {"tools": {}},
        }

    async def _initialized(self, request: JsonRpcRequest, request_context: RequestContext) -> Outcome:
        return {}

    async def _list_tools(self, request: JsonRpcRequest, request_context: RequestContext) -> Outcome:
        return {"tools": self.context.registry.to_mcp_tools()}

    async def _call_tool(self, request: JsonRpcRequest, request_context: RequestContext) -> Outcome:
        params = request.params
        if not isinstance(params, dict):
            return self.errors.invalid_params("Invalid params: tools/call expects an object")

        name = params.get("name")
        if not isinstance(name, str) or not name:
            return self.errors.invalid_params(
                "Invalid params: missing tool name", {"parameter": "name"}
            )

        tool = self.context.registry.lookup(name)
        if tool is None:
            logger.warning("找不到工具 %s", name)
            return self.errors.tool_not_found(name)

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}
        return await self._invoke(tool, arguments, request_context)

    async def _invoke(
        self,
        tool: RegisteredTool,
        arguments: Mapping[str, Any],
        request_context: RequestContext,
    ) -> Outcome:
        try:
            binding = self.context.binder.bind(tool, arguments)
            if binding.error is not None:
                logger.info("工具 %s 參數綁定失敗：%s", tool.name, binding.error.message)
                return self.errors.from_binding_error(binding.error)

            call_context = replace(request_context, tool_name=tool.name)
            return await self.context.invoker.invoke(tool, binding.arguments, context=call_context)
        except Exception as exc:
            error = self.errors.from_exception(exc)
            if error.code == ErrorCode.INTERNAL_ERROR:
                logger.exception("工具 %s 執行時發生未預期錯誤", tool.name)
            else:
                logger.warning("工具 %s 執行失敗：%s", tool.name, exc)
            return error

    def _legacy_arguments(self, tool: RegisteredTool, params: Any) -> Dict[str, Any]:
        if isinstance(params, dict):
            return params
        if isinstance(params, list):
            names = [info.name for info in tool.definition.parameters]
            return dict(zip(names, params))
        return {}
