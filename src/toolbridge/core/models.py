"""核心資料模型：參數描述、工具定義與可執行的註冊項目。"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .result_serializer import to_jsonable


class ParameterSource(str, enum.Enum):
    """參數值在原始 HTTP 操作中的來源。"""

    ROUTE = "route"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"
    FORM = "form"


class _NoDefault:
    _instance: "_NoDefault | None" = None

    def __new__(cls) -> "_NoDefault":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class ParameterInfo:
    """單一參數（或物件屬性、陣列元素）的 schema 節點。

    ``annotation`` 保存產生此節點的執行期型別（已去除 ``Annotated`` 與
    ``Optional``），綁定時依此轉換值；它不會出現在對外的 schema 中。
    ``properties`` 為 ``None`` 且 ``circular`` 為真時代表循環參照的葉節點。
    """

    name: str
    type: str
    required: bool = False
    description: Optional[str] = None
    source: Optional[ParameterSource] = None
    properties: Optional[Mapping[str, "ParameterInfo"]] = None
    items: Optional["ParameterInfo"] = None
    additional_properties: Optional["ParameterInfo"] = None
    enum: Optional[Tuple[Any, ...]] = None
    format: Optional[str] = None
    default: Any = NO_DEFAULT
    default_factory: Optional[Callable[[], Any]] = field(default=None, compare=False, repr=False)
    nullable: bool = False
    circular: bool = False
    annotation: Any = field(default=Any, compare=False, repr=False)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT or self.default_factory is not None

    @property
    def required_properties(self) -> List[str]:
        if not self.properties:
            return []
        return [name for name, prop in self.properties.items() if prop.required]

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.format:
            schema["format"] = self.format
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not NO_DEFAULT:
            schema["default"] = to_jsonable(self.default)
        if self.source is not None:
            schema["x-source"] = self.source.value
        if self.properties is not None:
            schema["properties"] = {
                name: prop.to_schema() for name, prop in self.properties.items()
            }
            required = self.required_properties
            if required:
                schema["required"] = required
        if self.additional_properties is not None:
            schema["additionalProperties"] = self.additional_properties.to_schema()
        if self.items is not None:
            schema["items"] = self.items.to_schema()
        return schema


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: Optional[str]
    parameters: Tuple[ParameterInfo, ...] = ()

    def parameter(self, name: str) -> Optional[ParameterInfo]:
        for info in self.parameters:
            if info.name == name:
                return info
        return None

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {info.name: info.to_schema() for info in self.parameters},
            "required": [info.name for info in self.parameters if info.required],
        }

    def to_mcp(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"name": self.name}
        if self.description:
            entry["description"] = self.description
        entry["inputSchema"] = self.input_schema()
        return entry


@dataclass(frozen=True)
class RegisteredTool:
    """工具定義與可執行身分的綁定，registry 建立後不再變動。

    ``is_static`` 為真時 ``method`` 可直接呼叫；否則 ``method`` 為未綁定的函式，
    需先透過 Handler Resolver 取得 ``handler`` 的實例。
    """

    definition: ToolDefinition
    method: Callable[..., Any]
    handler: Optional[type] = None
    is_static: bool = True
    context_parameter: Optional[str] = None
    # 方法簽名中有、但 schema 中沒有的參數及其預設值
    fallback_arguments: Tuple[Tuple[str, Any], ...] = ()

    @property
    def name(self) -> str:
        return self.definition.name
