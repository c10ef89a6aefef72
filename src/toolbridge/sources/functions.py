"""以 ``@tool`` 收集模組層級函式作為工具。"""
from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from toolbridge.core.metadata import RawOperation, read_parameters
from toolbridge.exceptions import RegistryError
from toolbridge.utils.docstring_parser import parse_docstring


@dataclass(frozen=True)
class _FunctionEntry:
    name: str
    func: Callable[..., Any]
    description: Optional[str]


class ToolCollection:
    """registry 建立前的可變工具清單，本身即為 Tool Definition Source。"""

    _default_instance: "ToolCollection | None" = None
    _default_lock = Lock()

    def __init__(self) -> None:
        self._entries: Dict[str, _FunctionEntry] = {}
        self._lock = Lock()

    @classmethod
    def default(cls) -> "ToolCollection":
        """``@tool`` 未指定 collection 時使用的惰性初始化實例。"""

        if cls._default_instance is None:
            with cls._default_lock:
                if cls._default_instance is None:
                    cls._default_instance = ToolCollection()
        return cls._default_instance

    def add(
        self,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        tool_name = name or func.__name__
        with self._lock:
            if tool_name in self._entries:
                raise RegistryError(f"工具 {tool_name} 已存在")
            self._entries[tool_name] = _FunctionEntry(tool_name, func, description)

    def discover(self) -> List[RawOperation]:
        with self._lock:
            entries = list(self._entries.values())

        operations: List[RawOperation] = []
        for entry in entries:
            documentation = parse_docstring(entry.func)
            description = entry.description or (documentation.summary if documentation else None)
            operations.append(
                RawOperation(
                    name=entry.name,
                    method=entry.func,
                    description=description or None,
                    parameters=read_parameters(entry.func, documentation=documentation),
                )
            )
        return operations

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
