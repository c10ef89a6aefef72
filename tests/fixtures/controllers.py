"""測試用 controller 與請求模型。"""
from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from toolbridge import (
    ActionResult,
    ControllerToolSource,
    Description,
    FromHeader,
    RequestContext,
    Required,
    controller,
    http_delete,
    http_get,
    http_post,
    http_put,
)


class Priority(enum.IntEnum):
    LOW = 1
    NORMAL = 2
    HIGH = 3


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class Mode(enum.Enum):
    FAST = 1
    SAFE = "safe"


@dataclass
class Address:
    street: str
    city: str
    zip_code: Optional[str] = None


@dataclass
class CreateOrder:
    name: str
    quantity: int = 1
    address: Optional[Address] = None
    tags: List[str] = field(default_factory=list)
    priority: Priority = Priority.NORMAL


class Entity:
    id: Annotated[int, Required()]
    created_by: str


class Customer(Entity):
    name: Annotated[str, Required(), Description("顧客名稱")]
    email: Optional[str]
    created_by: Annotated[str, Description("建立者帳號")]


@dataclass
class TreeNode:
    value: int
    children: List[TreeNode] = field(default_factory=list)
    parent: Optional[TreeNode] = None


class Product(BaseModel):
    sku: str
    price: float = Field(description="單價")
    stock: int = Field(default=0, ge=0)


@controller(route="api/[controller]")
class CalcController:
    VERSION = "1.0"

    @http_get("add", name="Calc_Add")
    def add(self, a: int, b: int) -> int:
        """兩數相加

        Args:
            a: 第一個數
            b: 第二個數
        """
        return a + b

    @http_get("divide/{numerator}")
    def divide(self, numerator: float, denominator: float = 1.0) -> float:
        return numerator / denominator

    @http_get("power")
    @staticmethod
    def power(base: int, exponent: int = 2) -> int:
        """次方"""
        return base**exponent

    @http_get("version")
    @classmethod
    def version(cls) -> str:
        return cls.VERSION

    def helper(self) -> None:
        """沒有 HTTP 動作標記，不會成為工具。"""


@controller(route="api/orders")
class OrdersController:
    def __init__(self) -> None:
        self.closed = False

    @http_post()
    async def create(
        self,
        request: CreateOrder,
        trace_id: Annotated[str, FromHeader()] = "",
    ) -> Dict[str, object]:
        """建立訂單"""
        await asyncio.sleep(0)
        return {
            "name": request.name,
            "quantity": request.quantity,
            "city": request.address.city if request.address else None,
            "priority": request.priority.name,
            "trace_id": trace_id,
        }

    @http_get("{order_id}")
    def get(self, order_id: int) -> ActionResult:
        """取得訂單"""
        if order_id <= 0:
            return ActionResult.not_found(f"Order {order_id} not found")
        return ActionResult.ok({"id": order_id})

    @http_put("{order_id}/priority")
    def set_priority(self, order_id: int, priority: Priority, color: Optional[Color] = None) -> Dict[str, object]:
        return {"id": order_id, "priority": priority.name, "color": color.value if color else None}

    @http_post("totals")
    def total(self, quantities: List[int], labels: Optional[List[str]] = None) -> int:
        return sum(quantities)

    @http_post("tree")
    def depth(self, node: TreeNode) -> int:
        if not node.children:
            return 1
        return 1 + max(self.depth(child) for child in node.children)

    @http_post("customers")
    def register_customer(self, customer: Customer) -> Dict[str, object]:
        return {"id": customer.id, "name": customer.name, "email": customer.email}

    @http_post("products")
    def add_product(self, product: Product) -> Product:
        return product

    @http_post("receipt")
    def receipt(self, order_id: int) -> JSONResponse:
        return JSONResponse({"id": order_id, "status": "created"}, status_code=201)

    @http_get("whoami")
    def whoami(self, context: RequestContext) -> Dict[str, object]:
        return {
            "tool": context.tool_name,
            "request_id": context.request_id,
            "transport": context.transport,
        }

    @http_delete("{order_id}")
    def delete(self, order_id: int) -> None:
        raise HTTPException(status_code=403, detail="Forbidden")

    def close(self) -> None:
        self.closed = True


@controller
class InternalController:
    @http_get()
    def secret(self) -> str:
        return "hidden"


tools = ControllerToolSource([CalcController, OrdersController])
