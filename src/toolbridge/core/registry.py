"""Tool Registry：工具名稱到可執行描述的不可變快照。"""
from __future__ import annotations

import inspect
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from fastapi import params

from toolbridge.exceptions import RegistryError, SchemaGenerationError, ToolNotFoundError
from toolbridge.utils.introspection import resolve_type_hints
from toolbridge.utils.logger import logger

from .context import is_context_annotation
from .metadata import RawOperation, ToolDefinitionSource
from .models import RegisteredTool, ToolDefinition
from .schema import SchemaGenerator


def _call_layout(
    operation: RawOperation, definition: ToolDefinition
) -> Tuple[Optional[str], Tuple[Tuple[str, Any], ...]]:
    """找出要注入 RequestContext 的參數，以及不在 schema 中、需要補預設值的參數。"""

    signature = inspect.signature(operation.method)
    hints = resolve_type_hints(operation.method, owner=operation.handler)
    parameters = list(signature.parameters.values())
    if not operation.is_static and parameters:
        parameters = parameters[1:]

    schema_names = {info.name for info in definition.parameters}
    context_parameter: Optional[str] = None
    fallbacks: List[Tuple[str, Any]] = []
    for param in parameters:
        if param.name in schema_names:
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if context_parameter is None and is_context_annotation(hints.get(param.name, param.annotation)):
            context_parameter = param.name
            continue
        default = param.default
        if default is inspect.Parameter.empty or isinstance(default, params.Depends):
            default = None
        fallbacks.append((param.name, default))
    return context_parameter, tuple(fallbacks)


class ToolRegistry:
    """建立一次、之後只讀的工具表；並行查詢不需要加鎖。"""

    def __init__(self, tools: Mapping[str, RegisteredTool]) -> None:
        self._tools: Mapping[str, RegisteredTool] = MappingProxyType(dict(tools))

    @classmethod
    def build(cls, tools: Iterable[RegisteredTool]) -> "ToolRegistry":
        entries: Dict[str, RegisteredTool] = {}
        for tool in tools:
            if tool.name in entries:
                raise RegistryError(f"工具名稱重複：{tool.name}")
            entries[tool.name] = tool
        return cls(entries)

    @classmethod
    def from_source(
        cls,
        source: ToolDefinitionSource,
        *,
        generator: Optional[SchemaGenerator] = None,
    ) -> "ToolRegistry":
        """掃描 source 並產生 schema；單一操作產生失敗時記錄並略過，名稱重複則中止。"""

        generator = generator or SchemaGenerator()
        tools: List[RegisteredTool] = []
        for operation in source.discover():
            try:
                definition = generator.generate(operation)
            except SchemaGenerationError:
                logger.exception("略過無法產生 schema 的操作 %s", operation.name)
                continue

            context_parameter, fallbacks = _call_layout(operation, definition)
            tools.append(
                RegisteredTool(
                    definition=definition,
                    method=operation.method,
                    handler=operation.handler,
                    is_static=operation.is_static,
                    context_parameter=context_parameter,
                    fallback_arguments=fallbacks,
                )
            )
            logger.info("註冊工具 %s（%d 個參數）", definition.name, len(definition.parameters))

        return cls.build(tools)

    def list(self) -> List[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def lookup(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def get(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def names(self) -> List[str]:
        return list(self._tools)

    def to_mcp_tools(self) -> List[Dict[str, Any]]:
        return [definition.to_mcp() for definition in self.list()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[RegisteredTool]:
        return iter(self._tools.values())
