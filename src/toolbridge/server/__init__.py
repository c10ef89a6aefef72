from .asgi import create_app, create_router, mount_mcp, run_server
from .stdio import StdioServer, run_stdio_server

__all__ = [
    "StdioServer",
    "create_app",
    "create_router",
    "mount_mcp",
    "run_server",
    "run_stdio_server",
]
