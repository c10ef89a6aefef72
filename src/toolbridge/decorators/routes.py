"""Controller 與 HTTP 動作的宣告式標記，供 :class:`ControllerToolSource` 掃描。

    @controller(route="api/[controller]")
    class OrdersController:
        @http_get("{order_id}")
        def get(self, order_id: int) -> Order: ...

        @http_post()
        async def create(self, request: CreateOrder) -> Order: ...
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

CONTROLLER_ATTR = "__toolbridge_controller__"
ACTION_ATTR = "__toolbridge_action__"

T = TypeVar("T")


@dataclass(frozen=True)
class ControllerInfo:
    route: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ActionInfo:
    http_method: str
    template: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


def controller(
    cls: type | None = None,
    *,
    route: str | None = None,
    name: str | None = None,
) -> Any:
    """標記 handler 類別；``name`` 取代預設的控制器名稱（類別名去掉 ``Controller``）。"""

    def decorator(target: type) -> type:
        setattr(target, CONTROLLER_ATTR, ControllerInfo(route=route, name=name))
        return target

    if cls is not None:
        return decorator(cls)
    return decorator


def _action(http_method: str) -> Callable[..., Callable[[T], T]]:
    def factory(
        template: str | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Callable[[T], T]:
        info = ActionInfo(http_method=http_method, template=template, name=name, description=description)

        def decorator(func: T) -> T:
            target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
            setattr(target, ACTION_ATTR, info)
            return func

        return decorator

    factory.__name__ = f"http_{http_method.lower()}"
    return factory


http_get = _action("GET")
http_post = _action("POST")
http_put = _action("PUT")
http_patch = _action("PATCH")
http_delete = _action("DELETE")
