"""Invoker：取得 handler 實例、執行方法並把結果包成 MCP content。"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import HTTPException

from toolbridge.exceptions import InvalidParamsError, ToolError

from .context import RequestContext
from .metadata import HandlerResolver
from .models import RegisteredTool
from .result_serializer import ResultSerializer


class DefaultHandlerResolver:
    """每次 resolve 建立新的 handler 實例（request scope）。

    需要建構參數的 handler 可用 ``factories`` 指定建立方式。
    """

    def __init__(self, factories: Optional[Mapping[type, Callable[[], Any]]] = None) -> None:
        self._factories: Dict[type, Callable[[], Any]] = dict(factories or {})

    def resolve(self, handler: type) -> Any:
        factory = self._factories.get(handler, handler)
        return factory()

    def release(self, instance: Any) -> None:
        close = getattr(instance, "close", None)
        if callable(close):
            close()


class ToolInvoker:
    def __init__(
        self,
        resolver: Optional[HandlerResolver] = None,
        serializer: Optional[ResultSerializer] = None,
    ) -> None:
        self.resolver: HandlerResolver = resolver or DefaultHandlerResolver()
        self.serializer = serializer or ResultSerializer()

    async def invoke(
        self,
        tool: RegisteredTool,
        arguments: Mapping[str, Any],
        *,
        context: Optional[RequestContext] = None,
    ) -> Dict[str, Any]:
        """執行工具並回傳 ``{"content": [...]}``。

        主機方法拋出的 ``ValueError``/``TypeError`` 視為參數問題，轉成
        :class:`InvalidParamsError`；其他例外原樣往上傳，由 dispatcher 交給
        Error Mapper 分類。結果包裝為失敗狀態時拋出 :class:`ToolError`。
        """

        call_arguments = dict(arguments)
        for name, default in tool.fallback_arguments:
            call_arguments.setdefault(name, default)
        if tool.context_parameter:
            call_arguments[tool.context_parameter] = context or RequestContext(tool_name=tool.name)

        if tool.is_static:
            result = await self._execute(tool.method, call_arguments)
            return self.serializer.to_mcp(result)

        assert tool.handler is not None
        instance = self.resolver.resolve(tool.handler)
        try:
            bound = tool.method.__get__(instance, type(instance))
            result = await self._execute(bound, call_arguments)
        finally:
            self.resolver.release(instance)
        return self.serializer.to_mcp(result)

    async def _execute(self, func: Callable[..., Any], arguments: Dict[str, Any]) -> Any:
        """在 async 環境下執行函數，同步函數轉到 thread 以免阻塞其他請求。"""

        try:
            if inspect.iscoroutinefunction(func):
                return await func(**arguments)

            result = await asyncio.to_thread(func, **arguments)
            if inspect.isawaitable(result):
                return await result
            return result
        except HTTPException as exc:
            raise ToolError(
                str(exc.detail),
                error_type="http_error",
                status=exc.status_code,
            ) from exc
        except (ValueError, TypeError) as exc:
            raise InvalidParamsError(
                f"Invalid params: {exc}",
                data={"exception": type(exc).__name__},
            ) from exc
