"""toolbridge 高階啟動 API。"""
from __future__ import annotations

import importlib
import importlib.util
import sys
from dataclasses import replace
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from fastapi import FastAPI

from toolbridge.core.metadata import ToolDefinitionSource
from toolbridge.core.registry import ToolRegistry
from toolbridge.sources.fastapi_routes import FastAPIToolSource
from toolbridge.utils.logger import configure_logging, logger

from .context import ServerContext, ServerOptions

_DEFAULT_ATTRIBUTES = ("context", "registry", "tools", "app")


def load_tool_module(module: str) -> ModuleType:
    """載入使用者模組，可以是 dotted 名稱或 .py 檔案路徑。"""

    module_path = Path(module)
    if module_path.exists() and module_path.is_file():
        resolved = module_path.resolve()
        module_name = resolved.stem
        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise ImportError(f"無法載入模組檔案：{resolved}")
        loaded = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = loaded
        spec.loader.exec_module(loaded)
        return loaded

    return importlib.import_module(module)


def build_context(target: Any, *, options: Optional[ServerOptions] = None) -> ServerContext:
    """把使用者提供的物件轉成 ServerContext。

    接受 ServerContext、ToolRegistry、FastAPI 應用程式或任何 Tool Definition Source。
    """

    if isinstance(target, ServerContext):
        return replace(target, options=options) if options is not None else target
    if isinstance(target, ToolRegistry):
        return ServerContext.create(target, options=options)
    if isinstance(target, FastAPI):
        return ServerContext.from_source(FastAPIToolSource(target), options=options)
    if isinstance(target, ToolDefinitionSource):
        return ServerContext.from_source(target, options=options)
    raise TypeError(f"無法從 {type(target).__name__} 建立 ServerContext")


def resolve_target(module: ModuleType, attr: Optional[str] = None) -> Any:
    if attr:
        if not hasattr(module, attr):
            raise AttributeError(f"模組 {module.__name__} 沒有屬性 {attr}")
        return getattr(module, attr)

    for name in _DEFAULT_ATTRIBUTES:
        if hasattr(module, name):
            return getattr(module, name)

    # 沒有明確目標時使用 @tool 的預設 collection
    from toolbridge.sources.functions import ToolCollection

    return ToolCollection.default()


def load_context(
    module: str,
    *,
    attr: Optional[str] = None,
    options: Optional[ServerOptions] = None,
) -> ServerContext:
    loaded = load_tool_module(module)
    return build_context(resolve_target(loaded, attr), options=options)


def serve(
    *,
    module: str | None = None,
    attr: str | None = None,
    context: Optional[ServerContext] = None,
    host: str = "0.0.0.0",
    port: int = 9090,
    stdio: bool = False,
    legacy_method_calls: bool = False,
) -> None:
    """啟動 toolbridge 伺服器。"""

    configure_logging()

    options = ServerOptions(legacy_method_calls=legacy_method_calls) if legacy_method_calls else None
    if context is None:
        if module is None:
            raise ValueError("必須提供 module 或 context")
        context = load_context(module, attr=attr, options=options)
    elif options is not None:
        context = build_context(context, options=options)

    logger.info("已載入 %d 個工具", len(context.registry))

    if stdio:
        from toolbridge.server.stdio import run_stdio_server

        run_stdio_server(context)
    else:
        from toolbridge.server.asgi import run_server

        run_server(context, host=host, port=port)


def run(
    *,
    module: str | None = None,
    attr: str | None = None,
    context: Optional[ServerContext] = None,
    host: str = "0.0.0.0",
    port: int = 9090,
    stdio: bool = False,
    legacy_method_calls: bool = False,
) -> None:
    """安全啟動入口，內建錯誤處理與 log。"""

    try:
        serve(
            module=module,
            attr=attr,
            context=context,
            host=host,
            port=port,
            stdio=stdio,
            legacy_method_calls=legacy_method_calls,
        )
    except Exception:
        logger.exception("toolbridge 伺服器啟動失敗")
        print("[toolbridge] 伺服器啟動失敗，請查看 logs/toolbridge.log", file=sys.stderr)
