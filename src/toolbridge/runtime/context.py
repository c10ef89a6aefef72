"""行程層級的伺服器上下文：啟動時明確建立，再交給 dispatcher 與 transport。"""
from __future__ import annotations

from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

from toolbridge.core.binding import ParameterBinder
from toolbridge.core.invoker import DefaultHandlerResolver, ToolInvoker
from toolbridge.core.metadata import HandlerResolver, ToolDefinitionSource
from toolbridge.core.registry import ToolRegistry
from toolbridge.core.schema import SchemaGenerator

PROTOCOL_VERSION = "2025-06-18"


def _package_version() -> str:
    try:
        return version("toolbridge")
    except PackageNotFoundError:
        return "0.0.0"


@dataclass(frozen=True)
class ServerOptions:
    server_name: str = "toolbridge"
    server_version: str = field(default_factory=_package_version)
    protocol_version: str = PROTOCOL_VERSION
    # 允許直接以工具名稱當作 method 呼叫（舊版 client 的格式）
    legacy_method_calls: bool = False


@dataclass(frozen=True)
class ServerContext:
    registry: ToolRegistry
    options: ServerOptions
    binder: ParameterBinder
    invoker: ToolInvoker

    @classmethod
    def create(
        cls,
        registry: ToolRegistry,
        *,
        options: Optional[ServerOptions] = None,
        resolver: Optional[HandlerResolver] = None,
        generator: Optional[SchemaGenerator] = None,
    ) -> "ServerContext":
        return cls(
            registry=registry,
            options=options or ServerOptions(),
            binder=ParameterBinder(generator),
            invoker=ToolInvoker(resolver or DefaultHandlerResolver()),
        )

    @classmethod
    def from_source(
        cls,
        source: ToolDefinitionSource,
        *,
        options: Optional[ServerOptions] = None,
        resolver: Optional[HandlerResolver] = None,
    ) -> "ServerContext":
        generator = SchemaGenerator()
        registry = ToolRegistry.from_source(source, generator=generator)
        return cls.create(registry, options=options, resolver=resolver, generator=generator)
