"""每次工具呼叫的請求上下文。"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Optional, get_origin


@dataclass(frozen=True)
class RequestContext:
    """由 transport 提供、invoker 注入工具的請求資訊。

    工具只要宣告一個型別為 ``RequestContext`` 的參數即可取得；該參數不會出現在
    tool 的 inputSchema 中。
    """

    request_id: str | int | None = None
    tool_name: Optional[str] = None
    session_id: Optional[str] = None
    transport: Optional[str] = None
    user_id: Optional[str] = None


def is_context_annotation(annotation: Any) -> bool:
    """判斷 annotation 是否代表 RequestContext，供 schema 生成與注入判斷使用。"""

    if annotation is RequestContext:
        return True

    if inspect.isclass(annotation) and get_origin(annotation) is None and issubclass(annotation, RequestContext):
        return True

    # 未解析的字串 annotation
    return isinstance(annotation, str) and annotation.endswith("RequestContext")
