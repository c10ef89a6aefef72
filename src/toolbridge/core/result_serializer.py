"""工具回傳值的拆封與序列化。

主機方法可能直接回傳資料，也可能回傳帶狀態碼的結果包裝（本套件的
:class:`ActionResult`，或 FastAPI/Starlette 的 ``Response``）。成功狀態取出
內層資料，失敗狀態轉成 :class:`~toolbridge.exceptions.ToolError`；最後一律
包成 MCP 的 ``content`` 結構。
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import json
import uuid
from dataclasses import dataclass
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Dict, Optional

from fastapi.responses import Response
from pydantic import BaseModel

from toolbridge.exceptions import ToolError


@dataclass(frozen=True)
class ActionResult:
    """帶 HTTP 狀態碼的結果包裝，狀態碼 >= 400 視為執行失敗。"""

    status_code: int = 200
    value: Any = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status_code < 400

    @classmethod
    def ok(cls, value: Any = None) -> "ActionResult":
        return cls(200, value)

    @classmethod
    def created(cls, value: Any = None) -> "ActionResult":
        return cls(201, value)

    @classmethod
    def no_content(cls) -> "ActionResult":
        return cls(204)

    @classmethod
    def bad_request(cls, error: str = "Bad request", value: Any = None) -> "ActionResult":
        return cls(400, value, error)

    @classmethod
    def not_found(cls, error: str = "Not found", value: Any = None) -> "ActionResult":
        return cls(404, value, error)

    @classmethod
    def problem(cls, error: str, *, status_code: int = 500, value: Any = None) -> "ActionResult":
        return cls(status_code, value, error)


def json_default(obj: Any) -> Any:
    """``json.dumps`` 的 default hook，處理常見的非 JSON 原生型別。"""

    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (dt.datetime, dt.date, dt.time)):
        return obj.isoformat()
    if isinstance(obj, (uuid.UUID, Decimal, PurePath)):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if hasattr(obj, "__dict__"):
        return {key: value for key, value in vars(obj).items() if not key.startswith("_")}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, ensure_ascii=False, default=json_default))


class ResultSerializer:
    def unwrap(self, result: Any) -> Any:
        """取出結果包裝內的資料，失敗狀態拋出 ToolError。"""

        if isinstance(result, ActionResult):
            if not result.is_success:
                raise ToolError(
                    result.error or f"Tool returned status {result.status_code}",
                    error_type="execution_failure",
                    status=result.status_code,
                    data={"value": to_jsonable(result.value)} if result.value is not None else None,
                )
            return result.value

        if isinstance(result, Response):
            payload = self._decode_response_body(result)
            if result.status_code >= 400:
                raise ToolError(
                    f"Tool returned status {result.status_code}",
                    error_type="execution_failure",
                    status=result.status_code,
                    data={"value": payload} if payload is not None else None,
                )
            return payload

        return result

    def to_text(self, payload: Any) -> str:
        return json.dumps(payload, ensure_ascii=False, default=json_default)

    def to_mcp(self, result: Any) -> Dict[str, Any]:
        payload = self.unwrap(result)
        return {"content": [{"type": "text", "text": self.to_text(payload)}]}

    def _decode_response_body(self, response: Response) -> Any:
        body = getattr(response, "body", b"")
        if not body:
            return None
        text = body.decode(response.charset or "utf-8")
        media_type = response.media_type or response.headers.get("content-type", "")
        if "json" in media_type:
            return json.loads(text)
        return text
