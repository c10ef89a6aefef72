"""Parameter Binding Engine：把 JSON arguments 綁定成方法的實際呼叫參數。

綁定依照方法宣告的執行期型別進行（``ParameterInfo.annotation``），巢狀物件會
建構成宣告的 dataclass / pydantic model / 一般類別，而不是停留在 dict。

所有失敗都以 :class:`BindingError` 值回傳，不使用例外；每個錯誤帶有種類、
點分路徑（例如 ``request.address.city``、``items[2]``）、預期型別與原始值。
"""
from __future__ import annotations

import copy
import dataclasses
import datetime as dt
import enum
import json
import math
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from types import NoneType
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, get_args, get_origin

from pydantic import ValidationError

from toolbridge.utils.introspection import is_enum_type, is_plain_class, is_pydantic_model, type_name

from .models import ParameterInfo, RegisteredTool
from .schema import MAPPING_ORIGINS, SchemaGenerator


class BindingErrorKind(str, enum.Enum):
    MISSING_REQUIRED = "missing_required"
    TYPE_MISMATCH = "type_mismatch"
    ENUM_VIOLATION = "enum_violation"


@dataclass(frozen=True)
class BindingError:
    kind: BindingErrorKind
    path: str
    expected: str
    received: Any = None
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        if self.kind is BindingErrorKind.MISSING_REQUIRED:
            return f"Missing required parameter '{self.path}'"
        received = _describe(self.received)
        if self.kind is BindingErrorKind.ENUM_VIOLATION:
            return f"Invalid value for '{self.path}': expected one of {self.expected}, received {received}"
        message = f"Invalid value for '{self.path}': expected {self.expected}, received {received}"
        if self.detail:
            message = f"{message} ({self.detail})"
        return message

    def to_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "parameter": self.path,
            "expected": self.expected,
        }
        if self.kind is not BindingErrorKind.MISSING_REQUIRED:
            data["received"] = self.received
        return data


@dataclass(frozen=True)
class BindingResult:
    arguments: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BindingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _describe(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


_MISSING: Any = object()
# 綁定中間結果：(值, 錯誤)，錯誤為 None 表示成功
_Outcome = Tuple[Any, Optional[BindingError]]

_ZERO_VALUES: Dict[str, Any] = {
    "integer": 0,
    "number": 0.0,
    "boolean": False,
    "string": "",
}


def _expected(info: ParameterInfo) -> str:
    if info.properties is not None and info.type == "object" and info.additional_properties is None:
        return f"object ({type_name(info.annotation)})"
    if info.format:
        return f"{info.type} ({info.format})"
    return info.type


def _parse_datetime(text: str) -> dt.datetime:
    # Python 3.10 的 fromisoformat 不接受 "Z"
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return dt.datetime.fromisoformat(text)


_STRING_PARSERS = {
    dt.datetime: _parse_datetime,
    dt.date: dt.date.fromisoformat,
    dt.time: dt.time.fromisoformat,
    uuid.UUID: uuid.UUID,
}


class ParameterBinder:
    """依工具 schema 將 arguments 綁定為呼叫參數。

    參數名稱比對為完全一致（區分大小寫）；arguments 中多出的 key 會被忽略。
    """

    def __init__(self, generator: SchemaGenerator | None = None) -> None:
        self._generator = generator or SchemaGenerator()

    def bind(self, tool: RegisteredTool, arguments: Mapping[str, Any] | None) -> BindingResult:
        arguments = arguments or {}
        bound: Dict[str, Any] = {}
        for info in tool.definition.parameters:
            raw = arguments.get(info.name, _MISSING)
            value, error = self.bind_value(info, raw, info.name)
            if error is not None:
                return BindingResult(error=error)
            bound[info.name] = value
        return BindingResult(arguments=bound)

    def bind_value(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        if raw is _MISSING:
            return self._missing(info, path)
        return self._coerce(info, raw, path)

    def _missing(self, info: ParameterInfo, path: str) -> _Outcome:
        if info.required:
            return None, BindingError(BindingErrorKind.MISSING_REQUIRED, path, _expected(info))
        if info.default_factory is not None:
            try:
                return info.default_factory(), None
            except Exception as exc:
                return None, BindingError(
                    BindingErrorKind.TYPE_MISMATCH, path, _expected(info), None, f"default factory failed: {exc}"
                )
        if info.has_default:
            return copy.deepcopy(info.default), None
        return self._zero_value(info), None

    def _zero_value(self, info: ParameterInfo) -> Any:
        if info.nullable or info.enum is not None:
            return None
        if info.type == "array":
            container = get_origin(info.annotation) or info.annotation
            return container() if container in (list, set, frozenset, tuple) else []
        if info.type == "object":
            return {} if info.additional_properties is not None else None
        return _ZERO_VALUES.get(info.type)

    def _mismatch(self, info: ParameterInfo, raw: Any, path: str, detail: str | None = None) -> _Outcome:
        return None, BindingError(BindingErrorKind.TYPE_MISMATCH, path, _expected(info), raw, detail)

    def _coerce(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        annotation = info.annotation
        if raw is None:
            if info.nullable or annotation in (Any, NoneType):
                return None, None
            return self._mismatch(info, raw, path)

        if annotation is Any:
            return raw, None
        if info.circular:
            # 循環參照的葉節點在綁定時才展開一層
            info = self._generator.type_info(annotation)
        if is_enum_type(annotation):
            return self._coerce_enum(info, annotation, raw, path)
        if get_origin(annotation) is Literal:
            if raw in get_args(annotation):
                return raw, None
            return None, BindingError(
                BindingErrorKind.ENUM_VIOLATION, path, _describe(list(get_args(annotation))), raw
            )

        if info.type == "array":
            return self._coerce_array(info, raw, path)
        if info.type == "object":
            if info.additional_properties is not None:
                return self._coerce_mapping(info, raw, path)
            return self._coerce_object(info, raw, path)
        return self._coerce_scalar(info, raw, path)

    def _coerce_scalar(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        annotation = info.annotation

        if annotation is bool:
            if isinstance(raw, bool):
                return raw, None
            if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
                return raw.strip().lower() == "true", None
            return self._mismatch(info, raw, path)

        # JSON 布林值不當作數字
        if isinstance(raw, bool) and annotation in (int, float, Decimal):
            return self._mismatch(info, raw, path)

        if annotation is int:
            if isinstance(raw, int):
                return raw, None
            if isinstance(raw, float) and raw.is_integer():
                return int(raw), None
            if isinstance(raw, str):
                try:
                    return int(raw.strip()), None
                except ValueError:
                    return self._mismatch(info, raw, path)
            return self._mismatch(info, raw, path)

        if annotation is float:
            if not isinstance(raw, (int, float, str)):
                return self._mismatch(info, raw, path)
            try:
                number = float(raw.strip() if isinstance(raw, str) else raw)
            except (ValueError, OverflowError):
                return self._mismatch(info, raw, path)
            # NaN 與 Infinity 無法以 JSON 表示
            if not math.isfinite(number):
                return self._mismatch(info, raw, path, "value must be finite")
            return number, None

        if annotation is Decimal:
            if isinstance(raw, (int, float, str)):
                try:
                    number = Decimal(str(raw).strip())
                except InvalidOperation:
                    return self._mismatch(info, raw, path)
                if not number.is_finite():
                    return self._mismatch(info, raw, path, "value must be finite")
                return number, None
            return self._mismatch(info, raw, path)

        if annotation in _STRING_PARSERS:
            if not isinstance(raw, str):
                return self._mismatch(info, raw, path)
            try:
                return _STRING_PARSERS[annotation](raw), None
            except ValueError as exc:
                return self._mismatch(info, raw, path, str(exc))

        if annotation is str:
            if isinstance(raw, str):
                return raw, None
            return self._mismatch(info, raw, path)

        # 其他無法對應的型別以原值傳遞
        return raw, None

    def _coerce_enum(
        self, info: ParameterInfo, enum_type: type[enum.Enum], raw: Any, path: str
    ) -> _Outcome:
        allowed = _describe(list(info.enum or ()))
        # 比對順序：名稱完全一致、值完全一致、名稱不分大小寫
        if isinstance(raw, str) and raw in enum_type.__members__:
            return enum_type[raw], None

        if not isinstance(raw, (dict, list)):
            for member in enum_type:
                if isinstance(raw, bool) != isinstance(member.value, bool):
                    continue
                if member.value == raw:
                    return member, None

        if isinstance(raw, str):
            folded = raw.casefold()
            for name, member in enum_type.__members__.items():
                if name.casefold() == folded:
                    return member, None

        if isinstance(raw, (str, int, float)):
            return None, BindingError(BindingErrorKind.ENUM_VIOLATION, path, allowed, raw)
        return self._mismatch(info, raw, path)

    def _coerce_array(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        if not isinstance(raw, list):
            return self._mismatch(info, raw, path)
        assert info.items is not None

        values: List[Any] = []
        for index, element in enumerate(raw):
            value, error = self._coerce(info.items, element, f"{path}[{index}]")
            if error is not None:
                return None, error
            values.append(value)

        container = get_origin(info.annotation) or info.annotation
        if container in (tuple, set, frozenset):
            return container(values), None
        return values, None

    def _coerce_mapping(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        if not isinstance(raw, dict):
            return self._mismatch(info, raw, path)
        assert info.additional_properties is not None

        values: Dict[str, Any] = {}
        for key, element in raw.items():
            value, error = self._coerce(info.additional_properties, element, f"{path}.{key}")
            if error is not None:
                return None, error
            values[key] = value
        return values, None

    def _coerce_object(self, info: ParameterInfo, raw: Any, path: str) -> _Outcome:
        if not isinstance(raw, dict):
            return self._mismatch(info, raw, path)

        kwargs: Dict[str, Any] = {}
        for name, prop in (info.properties or {}).items():
            value, error = self.bind_value(prop, raw.get(name, _MISSING), f"{path}.{name}")
            if error is not None:
                return None, error
            kwargs[name] = value

        return self._construct(info, kwargs, raw, path)

    def _construct(
        self, info: ParameterInfo, kwargs: Dict[str, Any], raw: Any, path: str
    ) -> _Outcome:
        cls = info.annotation
        if cls in MAPPING_ORIGINS or not is_plain_class(cls):
            return kwargs, None

        if is_pydantic_model(cls):
            try:
                return cls(**kwargs), None
            except ValidationError as exc:
                first = exc.errors()[0] if exc.errors() else {}
                location = ".".join(str(part) for part in first.get("loc", ()))
                error_path = f"{path}.{location}" if location else path
                return None, BindingError(
                    BindingErrorKind.TYPE_MISMATCH,
                    error_path,
                    _expected(info),
                    raw,
                    first.get("msg"),
                )
            except Exception as exc:
                return self._mismatch(info, raw, path, str(exc))

        # 建構時主機驗證（__post_init__、property setter 等）拋出的例外都回報為型別不符
        if dataclasses.is_dataclass(cls):
            try:
                return cls(**kwargs), None
            except Exception as exc:
                return self._mismatch(info, raw, path, str(exc))

        try:
            instance = cls()
            for name, value in kwargs.items():
                setattr(instance, name, value)
        except Exception as exc:
            return self._mismatch(info, raw, path, str(exc))
        return instance, None
