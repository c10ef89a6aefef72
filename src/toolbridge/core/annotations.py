"""透過 ``typing.Annotated`` 宣告參數來源與驗證資訊的標記。

    def get_order(
        self,
        order_id: Annotated[int, FromRoute()],
        trace: Annotated[str, FromHeader(), Description("追蹤代碼")] = "",
    ) -> Order: ...
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Optional

from .models import ParameterSource


@dataclass(frozen=True)
class SourceMarker:
    source: ClassVar[ParameterSource]


@dataclass(frozen=True)
class FromRoute(SourceMarker):
    source: ClassVar[ParameterSource] = ParameterSource.ROUTE


@dataclass(frozen=True)
class FromQuery(SourceMarker):
    source: ClassVar[ParameterSource] = ParameterSource.QUERY


@dataclass(frozen=True)
class FromBody(SourceMarker):
    source: ClassVar[ParameterSource] = ParameterSource.BODY


@dataclass(frozen=True)
class FromHeader(SourceMarker):
    source: ClassVar[ParameterSource] = ParameterSource.HEADER


@dataclass(frozen=True)
class FromForm(SourceMarker):
    source: ClassVar[ParameterSource] = ParameterSource.FORM


@dataclass(frozen=True)
class Description:
    text: str


@dataclass(frozen=True)
class Required:
    """將屬性標為必填（一般類別的屬性預設為選填）。"""


def find_source(metadata: Iterable[Any]) -> Optional[ParameterSource]:
    for item in metadata:
        if isinstance(item, SourceMarker):
            return item.source
    return None


def find_description(metadata: Iterable[Any]) -> Optional[str]:
    for item in metadata:
        if isinstance(item, Description):
            return item.text
    return None


def has_required(metadata: Iterable[Any]) -> bool:
    return any(isinstance(item, Required) for item in metadata)
