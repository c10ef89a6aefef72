"""toolbridge 主入口：把既有的主機方法以 MCP 工具形式曝露。"""
from toolbridge.core import (
    ActionResult,
    DefaultHandlerResolver,
    Description,
    FromBody,
    FromForm,
    FromHeader,
    FromQuery,
    FromRoute,
    ParameterBinder,
    ParameterInfo,
    ParameterSource,
    RegisteredTool,
    RequestContext,
    Required,
    SchemaGenerator,
    ToolDefinition,
    ToolInvoker,
    ToolRegistry,
)
from toolbridge.decorators import controller, http_delete, http_get, http_patch, http_post, http_put, tool
from toolbridge.exceptions import (
    DiscoveryError,
    InvalidParamsError,
    RegistryError,
    SchemaGenerationError,
    ToolBridgeError,
    ToolError,
    ToolNotFoundError,
)
from toolbridge.protocol import McpDispatcher
from toolbridge.runtime import ServerContext, ServerOptions, run, serve
from toolbridge.sources import (
    CachedToolSource,
    ControllerToolOptions,
    ControllerToolSource,
    FastAPIToolSource,
    ToolCollection,
)

__all__ = [
    "ActionResult",
    "CachedToolSource",
    "ControllerToolOptions",
    "ControllerToolSource",
    "DefaultHandlerResolver",
    "Description",
    "DiscoveryError",
    "FastAPIToolSource",
    "FromBody",
    "FromForm",
    "FromHeader",
    "FromQuery",
    "FromRoute",
    "InvalidParamsError",
    "McpDispatcher",
    "ParameterBinder",
    "ParameterInfo",
    "ParameterSource",
    "RegisteredTool",
    "RegistryError",
    "RequestContext",
    "Required",
    "SchemaGenerationError",
    "SchemaGenerator",
    "ServerContext",
    "ServerOptions",
    "ToolBridgeError",
    "ToolCollection",
    "ToolDefinition",
    "ToolError",
    "ToolInvoker",
    "ToolNotFoundError",
    "ToolRegistry",
    "controller",
    "http_delete",
    "http_get",
    "http_patch",
    "http_post",
    "http_put",
    "run",
    "serve",
    "tool",
]
