"""Tool Definition Source 與 Handler Resolver 的窄介面，以及原始 metadata 的資料結構。

Source 只負責「找到哪些操作、每個參數宣告了什麼」；schema 的產生、來源推斷與
型別展開全部交給 :class:`~toolbridge.core.schema.SchemaGenerator`。
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

from toolbridge.utils.docstring_parser import DocMetadata, parse_docstring
from toolbridge.utils.introspection import resolve_type_hints

from .context import is_context_annotation
from .models import NO_DEFAULT, ParameterSource


@dataclass(frozen=True)
class RawParameter:
    name: str
    annotation: Any = Any
    default: Any = NO_DEFAULT
    source_hint: Optional[ParameterSource] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class RawOperation:
    """一個被掃描到的主機操作。

    ``handler`` 為方法所屬的類別（模組層級函式為 ``None``）；``is_static`` 為假時
    ``method`` 是未綁定的函式，呼叫前需要實例。
    """

    name: str
    method: Callable[..., Any]
    handler: Optional[type] = None
    is_static: bool = True
    description: Optional[str] = None
    route_template: Optional[str] = None
    http_method: Optional[str] = None
    parameters: Tuple[RawParameter, ...] = ()


@runtime_checkable
class ToolDefinitionSource(Protocol):
    def discover(self) -> Sequence[RawOperation]:
        """回傳目前可曝露為工具的操作，順序即 tools/list 的順序。"""


@runtime_checkable
class HandlerResolver(Protocol):
    def resolve(self, handler: type) -> Any:
        """取得 handler 的實例，生命週期限於單一請求。"""

    def release(self, instance: Any) -> None:
        """請求結束時釋放 resolve 取得的實例。"""


def read_parameters(
    func: Callable[..., Any],
    *,
    owner: type | None = None,
    skip_first: bool = False,
    documentation: DocMetadata | None = None,
) -> Tuple[RawParameter, ...]:
    """從函式簽名與 type hints 讀出原始參數 metadata。

    ``*args``/``**kwargs`` 與 RequestContext 參數屬於基礎設施，不會出現在結果中。
    """

    signature = inspect.signature(func)
    hints = resolve_type_hints(func, owner=owner)
    if documentation is None:
        documentation = parse_docstring(func)

    parameters = list(signature.parameters.values())
    if skip_first and parameters:
        parameters = parameters[1:]

    raw: list[RawParameter] = []
    for param in parameters:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = Any
        if is_context_annotation(annotation):
            continue
        raw.append(
            RawParameter(
                name=param.name,
                annotation=annotation,
                default=NO_DEFAULT if param.default is inspect.Parameter.empty else param.default,
                description=documentation.parameter(param.name) if documentation else None,
            )
        )
    return tuple(raw)
