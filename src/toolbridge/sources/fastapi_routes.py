"""把既有 FastAPI 應用程式的路由轉成工具操作。

參數來源直接取自 FastAPI 解析好的 ``route.dependant``；``Request``、
``BackgroundTasks``、``Depends(...)`` 等基礎設施參數不在其中，因此不會出現在
schema，呼叫時以 ``None``（或其預設值）帶入。
"""
from __future__ import annotations

import inspect
from typing import Any, Dict, Iterable, List, Optional

from fastapi import FastAPI, params
from fastapi.routing import APIRoute
from pydantic.fields import FieldInfo

from toolbridge.core.metadata import RawOperation, RawParameter
from toolbridge.core.models import NO_DEFAULT, ParameterSource
from toolbridge.utils.docstring_parser import parse_docstring
from toolbridge.utils.introspection import resolve_type_hints, strip_annotated


def _parameter_sources(route: APIRoute) -> Dict[str, ParameterSource]:
    dependant = route.dependant
    sources: Dict[str, ParameterSource] = {}
    for field in dependant.path_params:
        sources[field.name] = ParameterSource.ROUTE
    for field in dependant.query_params:
        sources[field.name] = ParameterSource.QUERY
    for field in [*dependant.header_params, *dependant.cookie_params]:
        sources[field.name] = ParameterSource.HEADER
    for field in dependant.body_params:
        is_form = isinstance(field.field_info, params.Form)
        sources[field.name] = ParameterSource.FORM if is_form else ParameterSource.BODY
    return sources


def _field_default(info: FieldInfo) -> Any:
    if info.is_required():
        return NO_DEFAULT
    if info.default_factory is not None:
        return info.default_factory()
    return info.default


class FastAPIToolSource:
    def __init__(self, app: FastAPI, *, include_methods: Optional[Iterable[str]] = None) -> None:
        self._app = app
        self._include_methods = {m.upper() for m in include_methods} if include_methods else None

    def discover(self) -> List[RawOperation]:
        operations: List[RawOperation] = []
        for route in self._app.routes:
            if not isinstance(route, APIRoute) or not route.include_in_schema:
                continue
            methods = sorted(route.methods or ())
            if self._include_methods is not None and not self._include_methods.intersection(methods):
                continue
            operations.append(self._operation(route, methods))
        return operations

    def _operation(self, route: APIRoute, methods: List[str]) -> RawOperation:
        endpoint = route.endpoint
        sources = _parameter_sources(route)
        hints = resolve_type_hints(endpoint)
        documentation = parse_docstring(endpoint)

        parameters: List[RawParameter] = []
        for param in inspect.signature(endpoint).parameters.values():
            if param.name not in sources:
                continue

            annotation = hints.get(param.name, Any)
            description: Optional[str] = None
            for item in strip_annotated(annotation)[1]:
                if isinstance(item, FieldInfo) and item.description:
                    description = item.description

            default = param.default
            if default is inspect.Parameter.empty:
                default = NO_DEFAULT
            elif isinstance(default, FieldInfo):
                description = default.description or description
                default = _field_default(default)

            parameters.append(
                RawParameter(
                    name=param.name,
                    annotation=annotation,
                    default=default,
                    source_hint=sources[param.name],
                    description=description or (documentation.parameter(param.name) if documentation else None),
                )
            )

        description = route.summary or (documentation.summary if documentation else None) or route.description
        return RawOperation(
            name=route.operation_id or route.name,
            method=endpoint,
            description=description or None,
            route_template=route.path,
            http_method=methods[0] if methods else None,
            parameters=tuple(parameters),
        )
