"""
toolbridge 範例：把既有的 controller 動作曝露成 MCP 工具。

    python examples/orders_host.py            # HTTP，POST http://localhost:9090/mcp
    python examples/orders_host.py --stdio    # stdio，供 Claude Desktop 等客戶端使用
"""
import os
import sys
from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Optional

# 確保可以 import 到 src 下的套件 (如果是在開發環境中執行)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from toolbridge import (  # noqa: E402
    ActionResult,
    ControllerToolSource,
    Description,
    FromHeader,
    controller,
    http_get,
    http_post,
    run,
)
from toolbridge.runtime import ServerContext  # noqa: E402

_ORDERS: Dict[int, dict] = {}


@dataclass
class OrderLine:
    sku: str
    quantity: int = 1


@dataclass
class CreateOrderRequest:
    customer: str
    lines: List[OrderLine] = field(default_factory=list)
    note: Optional[str] = None


@controller(route="api/[controller]")
class OrdersController:
    @http_post()
    def create(
        self,
        request: CreateOrderRequest,
        tenant: Annotated[str, FromHeader(), Description("租戶代碼")] = "default",
    ) -> ActionResult:
        """建立訂單

        Args:
            request: 訂單內容，至少需要 customer
        """
        order_id = len(_ORDERS) + 1
        _ORDERS[order_id] = {"id": order_id, "tenant": tenant, "customer": request.customer, "lines": request.lines}
        return ActionResult.created(_ORDERS[order_id])

    @http_get("{order_id}")
    def get(self, order_id: int) -> ActionResult:
        """依編號取得訂單"""
        order = _ORDERS.get(order_id)
        if order is None:
            return ActionResult.not_found(f"Order {order_id} not found")
        return ActionResult.ok(order)


context = ServerContext.from_source(ControllerToolSource([OrdersController]))


if __name__ == "__main__":
    run(context=context, stdio="--stdio" in sys.argv)
