from __future__ import annotations

from typing import Any, Dict


class ToolBridgeError(Exception):
    """toolbridge 的基礎例外。"""


class ToolError(ToolBridgeError):
    """工具執行回報的業務錯誤（失敗狀態的結果包裝），提供統一結構化資訊。"""

    def __init__(
        self,
        message: str,
        *,
        error_type: str = "tool_error",
        status: int | None = None,
        data: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.status = status
        self.data: Dict[str, Any] = data or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.error_type,
            "message": str(self),
            "details": self.data,
        }
        if self.status is not None:
            payload["status"] = self.status
        return payload


class ToolNotFoundError(ToolBridgeError):
    """註冊表中找不到工具時拋出。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class InvalidParamsError(ToolBridgeError):
    """參數無法綁定或工具判定參數不合法。"""

    def __init__(self, message: str, *, data: Dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.data: Dict[str, Any] = data or {}


class RegistryError(ToolBridgeError):
    """註冊表建立錯誤，例如工具名稱重複。"""


class SchemaGenerationError(ToolBridgeError):
    """無法為某個操作產生參數 schema。"""


class DiscoveryError(ToolBridgeError):
    """Tool Definition Source 掃描失敗，可重試。"""


class ParseError(ToolBridgeError):
    """收到的訊息不是合法 JSON。"""


class InvalidRequestError(ToolBridgeError):
    """JSON 合法但不符合 JSON-RPC 2.0 envelope。"""

    def __init__(self, message: str, *, request_id: str | int | None = None) -> None:
        super().__init__(message)
        self.request_id = request_id


class MethodNotFoundError(ToolBridgeError):
    """未知的 JSON-RPC method。"""

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not found: {method}")
        self.method = method
