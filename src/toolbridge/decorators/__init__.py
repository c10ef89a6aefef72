from .routes import controller, http_delete, http_get, http_patch, http_post, http_put
from .tool import tool

__all__ = [
    "controller",
    "http_delete",
    "http_get",
    "http_patch",
    "http_post",
    "http_put",
    "tool",
]
