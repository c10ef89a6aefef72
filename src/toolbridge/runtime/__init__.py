from .context import PROTOCOL_VERSION, ServerContext, ServerOptions
from .serve import build_context, load_context, load_tool_module, run, serve

__all__ = [
    "PROTOCOL_VERSION",
    "ServerContext",
    "ServerOptions",
    "build_context",
    "load_context",
    "load_tool_module",
    "run",
    "serve",
]
