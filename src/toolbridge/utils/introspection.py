from __future__ import annotations

import dataclasses
import enum
import inspect
from types import NoneType, UnionType
from typing import Annotated, Any, Callable, Dict, Tuple, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

_SCALAR_MODULES = {"builtins", "datetime", "decimal", "uuid", "pathlib"}


def strip_annotated(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """去掉 ``Annotated`` 外層，回傳 (實際型別, metadata)。"""

    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        return base, tuple(metadata)
    return annotation, ()


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """``Optional[X]`` → (X, True)；多型別 union 取第一個非 None 成員。"""

    if get_origin(annotation) not in (Union, UnionType):
        return annotation, False

    args = get_args(annotation)
    members = [arg for arg in args if arg is not NoneType]
    nullable = len(members) != len(args)
    if not members:
        return NoneType, True
    return members[0], nullable


def unwrap_annotation(annotation: Any) -> Tuple[Any, Tuple[Any, ...], bool]:
    """同時處理 ``Annotated`` 與 ``Optional``，兩者巢狀順序不拘。"""

    base, metadata = strip_annotated(annotation)
    base, nullable = unwrap_optional(base)
    base, inner_metadata = strip_annotated(base)
    return base, metadata + inner_metadata, nullable


def is_plain_class(annotation: Any) -> bool:
    # list[int] 這類 generic alias 在部分版本中也會通過 isinstance(x, type)
    return inspect.isclass(annotation) and get_origin(annotation) is None


def is_enum_type(annotation: Any) -> bool:
    return is_plain_class(annotation) and issubclass(annotation, enum.Enum)


def is_pydantic_model(annotation: Any) -> bool:
    return is_plain_class(annotation) and issubclass(annotation, BaseModel)


def own_annotations(cls: type) -> Dict[str, Any]:
    # 只取類別本身宣告的屬性，不含父類別
    return inspect.get_annotations(cls)


def is_complex_type(annotation: Any) -> bool:
    """判斷型別是否需要展開成具有 properties 的物件 schema。"""

    if not is_plain_class(annotation):
        return False
    if issubclass(annotation, enum.Enum):
        return False
    if dataclasses.is_dataclass(annotation) or is_pydantic_model(annotation):
        return True
    if annotation.__module__ in _SCALAR_MODULES:
        return False
    return any(own_annotations(klass) for klass in annotation.__mro__ if klass is not object)


def resolve_type_hints(obj: Any, *, owner: type | None = None) -> Dict[str, Any]:
    """解析 type hints（含 ``Annotated`` metadata），支援 ``from __future__ import annotations``。

    ``owner`` 為方法所屬類別，讓自我參照的 hint（例如 ``-> "Node"``）也能解析。
    """

    localns: Dict[str, Any] = {}
    if owner is not None:
        localns[owner.__name__] = owner
    if inspect.isclass(obj):
        localns[obj.__name__] = obj
    return get_type_hints(obj, localns=localns or None, include_extras=True)


def type_name(annotation: Any) -> str:
    if annotation is Any:
        return "Any"
    if annotation is NoneType:
        return "None"
    if inspect.isclass(annotation) and not get_args(annotation):
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def callable_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", repr(func))
