"""ASGI 版本的 MCP 端點：單一 POST 路徑接收 JSON-RPC 請求。"""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from toolbridge.protocol.dispatcher import McpDispatcher
from toolbridge.protocol.jsonrpc import ErrorCode, JsonRpcError, build_error
from toolbridge.runtime.context import ServerContext
from toolbridge.utils.logger import logger

SESSION_HEADER = "mcp-session-id"


def create_router(context: ServerContext, *, path: str = "/mcp") -> APIRouter:
    dispatcher = McpDispatcher(context)
    router = APIRouter()

    @router.post(path)
    async def handle_mcp(request: Request) -> Response:
        body = await request.body()
        try:
            response = await dispatcher.handle_raw(
                body,
                session_id=request.headers.get(SESSION_HEADER),
                transport="http",
            )
        except Exception:
            logger.exception("MCP HTTP 請求處理失敗")
            response = build_error(None, JsonRpcError(ErrorCode.INTERNAL_ERROR, "Internal error"))

        if response is None:
            # notification 不回傳任何 JSON-RPC frame
            return Response(status_code=202)
        return JSONResponse(response)

    return router


def mount_mcp(app: FastAPI, context: ServerContext, *, path: str = "/mcp") -> None:
    """把 MCP 端點掛到既有的 FastAPI 應用程式上。"""

    app.include_router(create_router(context, path=path))


def create_app(context: ServerContext, *, path: str = "/mcp") -> FastAPI:
    app = FastAPI(title=f"{context.options.server_name} MCP (ASGI)")
    mount_mcp(app, context, path=path)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "tools": len(context.registry)}

    return app


def run_server(context: ServerContext, *, host: str = "0.0.0.0", port: int = 9090) -> None:
    """透過 uvicorn 啟動 ASGI MCP Server。"""

    import uvicorn

    logger.info("MCP HTTP server 啟動於 http://%s:%d", host, port)
    uvicorn.run(create_app(context), host=host, port=port)
