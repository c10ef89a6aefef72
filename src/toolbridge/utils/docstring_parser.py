"""從 docstring 擷取工具描述與參數說明。

主機端的既有方法多半已經有 docstring，與其要求使用者重複填寫描述，
不如直接解析 Google 風格的段落：

    摘要（第一段）

    Args:
        order_id (int): 訂單編號
        note: 備註，可跨行

    Returns:
        訂單內容

摘要成為 tool 的 description，``Args`` 區段成為各參數的 description。
"""
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional


@dataclass
class DocMetadata:
    """Docstring 解析後的結構化結果。"""

    raw: str
    summary: str
    parameters: Dict[str, str] = field(default_factory=dict)
    returns: Optional[str] = None
    raises: Optional[str] = None

    def parameter(self, name: str) -> Optional[str]:
        return self.parameters.get(name) or None


_SECTION_HEADERS = {
    "args": {"args", "arguments", "parameters", "params", "參數"},
    "returns": {"returns", "return", "輸出", "回傳"},
    "raises": {"raises", "exceptions", "例外"},
    "other": {"examples", "example", "note", "notes", "usage", "用法", "範例"},
}

# "name (type): desc" 與 "name: desc"
_PARAM_LINE = re.compile(r"^\*{0,2}(?P<name>[A-Za-z_]\w*)\s*(?:\([^)]*\))?\s*:\s*(?P<desc>.*)$")


def _match_section(line: str) -> str | None:
    # 區段標題不縮排；縮排的行屬於區段內容
    if not line or line[0].isspace() or ":" not in line:
        return None
    header = line.split(":", 1)[0].strip().lower()
    for section, aliases in _SECTION_HEADERS.items():
        if header in aliases:
            return section
    return None


def parse_docstring(func: Callable[..., object]) -> DocMetadata | None:
    """解析函數 docstring；沒有 docstring 時回傳 None。"""

    raw_doc = inspect.getdoc(func)
    if not raw_doc:
        return None

    summary_lines: list[str] = []
    return_lines: list[str] = []
    raise_lines: list[str] = []
    parameters: Dict[str, str] = {}

    current_section = "summary"
    current_param: str | None = None
    param_indent: int | None = None
    summary_closed = False

    for raw_line in raw_doc.splitlines():
        stripped = raw_line.strip()
        if not stripped:
            if current_section == "summary" and summary_lines:
                summary_closed = True
            continue

        matched_section = _match_section(raw_line)
        if matched_section:
            current_section = matched_section
            current_param = None
            param_indent = None
            inline = stripped.split(":", 1)[1].strip()
            if inline and current_section == "returns":
                return_lines.append(inline)
            elif inline and current_section == "raises":
                raise_lines.append(inline)
            continue

        if current_section == "summary":
            # 只取第一段作為摘要
            if not summary_closed:
                summary_lines.append(stripped)
            continue

        if current_section == "args":
            indent = len(raw_line) - len(raw_line.lstrip())
            matched = _PARAM_LINE.match(stripped)
            # 比參數名稱縮排更深的行視為上一個參數的延續
            if matched and (param_indent is None or indent <= param_indent):
                param_indent = indent if param_indent is None else param_indent
                current_param = matched.group("name")
                parameters[current_param] = matched.group("desc").strip()
            elif current_param:
                parameters[current_param] = f"{parameters[current_param]} {stripped}".strip()
            continue

        if current_section == "returns":
            return_lines.append(stripped)
        elif current_section == "raises":
            raise_lines.append(stripped)

    return DocMetadata(
        raw=raw_doc,
        summary=" ".join(summary_lines).strip(),
        parameters=parameters,
        returns=" ".join(return_lines).strip() or None,
        raises=" ".join(raise_lines).strip() or None,
    )
