"""Schema Generator：把原始參數 metadata 轉成遞迴的 :class:`ParameterInfo` 樹。

參數來源的推斷順序（由高到低）：

1. metadata 上的明確來源（Source 提供的 ``source_hint`` 或 ``Annotated`` 標記）
2. 名稱符合 route template 片段 → ``route``
3. 基本型別，或元素為基本型別的陣列 → ``query``
4. 其他物件型別 → ``body``

物件展開沿 ``__mro__`` 由基底類別往衍生類別走訪（base-first）；同名屬性保留
第一次出現的位置，型別與 metadata 取最衍生類別的宣告。展開中的型別記錄在
``expanding`` 集合裡，同一條遞迴路徑再次遇到時只輸出不含 properties 的葉節點。
"""
from __future__ import annotations

import collections.abc
import dataclasses
import datetime as dt
import enum
import inspect
import re
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from threading import Lock
from types import MappingProxyType, NoneType
from typing import Any, Callable, ClassVar, Dict, FrozenSet, List, Literal, Optional, Tuple, get_args, get_origin

from toolbridge.exceptions import SchemaGenerationError
from toolbridge.utils.introspection import (
    is_complex_type,
    is_enum_type,
    is_pydantic_model,
    own_annotations,
    resolve_type_hints,
    strip_annotated,
    type_name,
    unwrap_annotation,
)

from .annotations import find_description, find_source, has_required
from .metadata import RawOperation, RawParameter
from .models import NO_DEFAULT, ParameterInfo, ParameterSource, ToolDefinition

_PRIMITIVES: Dict[Any, Tuple[str, Optional[str]]] = {
    str: ("string", None),
    int: ("integer", None),
    float: ("number", None),
    Decimal: ("number", None),
    bool: ("boolean", None),
    dt.datetime: ("string", "date-time"),
    dt.date: ("string", "date"),
    dt.time: ("string", "time"),
    uuid.UUID: ("string", "uuid"),
}

ARRAY_ORIGINS = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Collection,
        collections.abc.Iterable,
    }
)
MAPPING_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})

# {id}、{id:int}、{*path}、{id?}
_ROUTE_SEGMENT = re.compile(r"\{\*{0,2}(\w+)(?::[^}]*)?\??\}")


def route_parameter_names(template: str | None) -> FrozenSet[str]:
    if not template:
        return frozenset()
    return frozenset(name.casefold() for name in _ROUTE_SEGMENT.findall(template))


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    annotation: Any
    required: bool = False
    default: Any = NO_DEFAULT
    default_factory: Optional[Callable[[], Any]] = None
    description: Optional[str] = None


def _is_classvar(annotation: Any) -> bool:
    base, _ = strip_annotated(annotation)
    return base is ClassVar or get_origin(base) is ClassVar


def _class_default(cls: type, name: str) -> Any:
    for klass in cls.__mro__:
        if name in vars(klass):
            return vars(klass)[name]
    return NO_DEFAULT


def _pydantic_properties(cls: type) -> List[PropertyDescriptor]:
    # pydantic 已依 base-first 排好欄位並處理覆寫
    properties: List[PropertyDescriptor] = []
    for name, field in cls.model_fields.items():
        metadata = tuple(field.metadata)
        required = field.is_required()
        properties.append(
            PropertyDescriptor(
                name=field.alias or name,
                annotation=field.annotation,
                required=required or has_required(metadata),
                default=NO_DEFAULT if required or field.default_factory is not None else field.default,
                default_factory=field.default_factory,
                description=field.description or find_description(metadata),
            )
        )
    return properties


def collect_properties(cls: type) -> List[PropertyDescriptor]:
    """列出物件型別的所有屬性（含繼承），順序為 base-first。"""

    if is_pydantic_model(cls):
        return _pydantic_properties(cls)

    hints = resolve_type_hints(cls)
    dataclass_fields = (
        {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else None
    )

    declared: Dict[str, Any] = {}
    marked_required: set[str] = set()
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        names = own_annotations(klass)
        if not names:
            continue
        klass_hints = hints if klass is cls else resolve_type_hints(klass)
        for name in names:
            annotation = klass_hints.get(name)
            if name.startswith("_") or annotation is None or _is_classvar(annotation):
                continue
            # 既有 key 重新賦值不改變位置
            declared[name] = annotation
            if has_required(unwrap_annotation(annotation)[1]):
                marked_required.add(name)

    properties: List[PropertyDescriptor] = []
    for name in declared:
        annotation = hints.get(name, declared[name])
        description = find_description(unwrap_annotation(annotation)[1])

        if dataclass_fields is None:
            properties.append(
                PropertyDescriptor(
                    name=name,
                    annotation=annotation,
                    required=name in marked_required,
                    default=_class_default(cls, name),
                    description=description,
                )
            )
            continue

        field = dataclass_fields.get(name)
        if field is None or not field.init:
            continue
        default = NO_DEFAULT if field.default is dataclasses.MISSING else field.default
        factory = None if field.default_factory is dataclasses.MISSING else field.default_factory
        properties.append(
            PropertyDescriptor(
                name=name,
                annotation=annotation,
                required=name in marked_required or (default is NO_DEFAULT and factory is None),
                default=default,
                default_factory=factory,
                description=description or field.metadata.get("description"),
            )
        )
    return properties


def _enum_info(cls: type[enum.Enum]) -> ParameterInfo:
    values = [member.value for member in cls]

    def _all(kind: Tuple[type, ...]) -> bool:
        return all(isinstance(v, kind) and not isinstance(v, bool) for v in values)

    if values and _all((int,)):
        return ParameterInfo(name="", type="integer", enum=tuple(values), annotation=cls)
    if values and _all((int, float)):
        return ParameterInfo(name="", type="number", enum=tuple(values), annotation=cls)
    if values and _all((str,)):
        return ParameterInfo(name="", type="string", enum=tuple(values), annotation=cls)
    # 混合型別的值改以成員名稱列舉
    return ParameterInfo(
        name="", type="string", enum=tuple(member.name for member in cls), annotation=cls
    )


def _literal_info(annotation: Any) -> ParameterInfo:
    values = get_args(annotation)
    schema_type = "string"
    if values:
        first = values[0]
        schema_type = _PRIMITIVES.get(type(first), ("string", None))[0]
    return ParameterInfo(name="", type=schema_type, enum=tuple(values), annotation=annotation)


class SchemaGenerator:
    """將型別轉成 :class:`ParameterInfo`，結果以 (型別, 展開路徑) 為 key 快取。"""

    def __init__(self) -> None:
        self._cache: Dict[Tuple[Any, FrozenSet[type]], ParameterInfo] = {}
        self._lock = Lock()

    def generate(self, operation: RawOperation) -> ToolDefinition:
        route_names = route_parameter_names(operation.route_template)
        try:
            parameters = tuple(
                self.parameter_info(raw, route_names=route_names) for raw in operation.parameters
            )
        except (TypeError, ValueError, NameError, AttributeError) as exc:
            raise SchemaGenerationError(f"無法為 {operation.name} 產生 schema：{exc}") from exc

        return ToolDefinition(
            name=operation.name,
            description=operation.description,
            parameters=parameters,
        )

    def parameter_info(
        self, raw: RawParameter, *, route_names: FrozenSet[str] = frozenset()
    ) -> ParameterInfo:
        base, metadata, _ = unwrap_annotation(raw.annotation)
        info = self.type_info(raw.annotation)
        source = self.infer_source(raw, route_names=route_names)

        # route 參數一律必填
        required = (
            source is ParameterSource.ROUTE
            or raw.default is NO_DEFAULT
            or has_required(metadata)
        )
        description = (
            raw.description
            or find_description(metadata)
            or f"Parameter {raw.name} of type {type_name(base)}"
        )
        return replace(
            info,
            name=raw.name,
            required=required,
            description=description,
            source=source,
            default=NO_DEFAULT if required else raw.default,
        )

    def infer_source(
        self, raw: RawParameter, *, route_names: FrozenSet[str] = frozenset()
    ) -> ParameterSource:
        base, metadata, _ = unwrap_annotation(raw.annotation)

        explicit = raw.source_hint or find_source(metadata)
        if explicit is not None:
            return explicit
        if raw.name.casefold() in route_names:
            return ParameterSource.ROUTE
        if self.is_simple_type(base):
            return ParameterSource.QUERY
        return ParameterSource.BODY

    def is_simple_type(self, annotation: Any) -> bool:
        base, _, _ = unwrap_annotation(annotation)
        if base in _PRIMITIVES or base in (Any, NoneType):
            return True
        if is_enum_type(base):
            return True
        origin = get_origin(base)
        if origin is Literal:
            return True
        if (origin or base) in ARRAY_ORIGINS:
            args = get_args(base)
            return self.is_simple_type(args[0]) if args else True
        return False

    def type_info(
        self, annotation: Any, expanding: FrozenSet[type] = frozenset()
    ) -> ParameterInfo:
        key = (annotation, expanding)
        try:
            cached = self._cache.get(key)
        except TypeError:
            # Annotated metadata 不可 hash 時不快取
            return self._build(annotation, expanding)

        if cached is None:
            cached = self._build(annotation, expanding)
            with self._lock:
                cached = self._cache.setdefault(key, cached)
        return cached

    def _build(self, annotation: Any, expanding: FrozenSet[type]) -> ParameterInfo:
        base, metadata, nullable = unwrap_annotation(annotation)
        info = self._build_base(base, expanding)
        description = find_description(metadata)
        if nullable or description:
            info = replace(
                info,
                nullable=nullable or info.nullable,
                description=description or info.description,
            )
        return info

    def _build_base(self, annotation: Any, expanding: FrozenSet[type]) -> ParameterInfo:
        if annotation in (Any, object, inspect.Parameter.empty):
            return ParameterInfo(name="", type="string", nullable=True, annotation=Any)
        if annotation is NoneType or annotation is None:
            return ParameterInfo(name="", type="null", nullable=True, annotation=NoneType)
        if is_enum_type(annotation):
            return _enum_info(annotation)

        origin = get_origin(annotation)
        if origin is Literal:
            return _literal_info(annotation)
        if annotation in _PRIMITIVES:
            schema_type, schema_format = _PRIMITIVES[annotation]
            return ParameterInfo(name="", type=schema_type, format=schema_format, annotation=annotation)

        args = get_args(annotation)
        if (origin or annotation) in ARRAY_ORIGINS:
            items = self.type_info(args[0] if args else Any, expanding)
            return ParameterInfo(name="", type="array", items=items, annotation=annotation)
        if (origin or annotation) in MAPPING_ORIGINS:
            values = self.type_info(args[1] if len(args) > 1 else Any, expanding)
            return ParameterInfo(
                name="",
                type="object",
                properties=MappingProxyType({}),
                additional_properties=values,
                annotation=annotation,
            )

        if is_complex_type(annotation):
            if annotation in expanding:
                return ParameterInfo(
                    name="",
                    type="object",
                    description=f"Circular reference to {annotation.__name__}",
                    circular=True,
                    annotation=annotation,
                )
            return self._object_info(annotation, expanding | {annotation})

        return ParameterInfo(name="", type="string", annotation=annotation)

    def _object_info(self, cls: type, expanding: FrozenSet[type]) -> ParameterInfo:
        properties: Dict[str, ParameterInfo] = {}
        for prop in collect_properties(cls):
            base, _, _ = unwrap_annotation(prop.annotation)
            info = self.type_info(prop.annotation, expanding)
            properties[prop.name] = replace(
                info,
                name=prop.name,
                required=prop.required,
                description=(
                    prop.description
                    or info.description
                    or f"Property {prop.name} of type {type_name(base)}"
                ),
                default=prop.default,
                default_factory=prop.default_factory,
            )
        return ParameterInfo(
            name="",
            type="object",
            properties=MappingProxyType(properties),
            annotation=cls,
        )
