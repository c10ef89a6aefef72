from .cached import CachedToolSource
from .controllers import ControllerToolOptions, ControllerToolSource
from .fastapi_routes import FastAPIToolSource
from .functions import ToolCollection

__all__ = [
    "CachedToolSource",
    "ControllerToolOptions",
    "ControllerToolSource",
    "FastAPIToolSource",
    "ToolCollection",
]
