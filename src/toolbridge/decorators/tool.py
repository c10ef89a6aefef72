"""`@tool` decorator 實作。"""
from __future__ import annotations

from typing import Any, Callable, Optional

from toolbridge.sources.functions import ToolCollection


def tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    collection: Optional[ToolCollection] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]] | Callable[..., Any]:
    """把函數加入 :class:`ToolCollection`，函數本身不做任何包裝。

    未提供 description 時，schema 產生階段會使用 docstring 第一段。
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        active_collection = collection or ToolCollection.default()
        active_collection.add(fn, name=name, description=description)
        return fn

    if func is not None and callable(func):
        return decorator(func)

    return decorator
