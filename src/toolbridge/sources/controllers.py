"""掃描 controller 類別上標記 HTTP 動作的方法，轉成工具操作。

工具名稱預設為 ``<控制器名稱>_<方法名稱>``，控制器名稱是類別名稱去掉
``Controller`` 字尾；route template 由 controller route 與動作 template 組成，
``[controller]`` 與 ``[action]`` 會被替換。
"""
from __future__ import annotations

import importlib
import inspect
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from toolbridge.core.metadata import RawOperation, read_parameters
from toolbridge.decorators.routes import ACTION_ATTR, CONTROLLER_ATTR, ActionInfo, ControllerInfo
from toolbridge.exceptions import DiscoveryError
from toolbridge.utils.docstring_parser import parse_docstring
from toolbridge.utils.logger import logger

_SUFFIX = "Controller"


@dataclass(frozen=True)
class ControllerToolOptions:
    include_controller_name_in_tool_name: bool = True
    # 比對不分大小寫，可省略 Controller 字尾
    excluded_controllers: Tuple[str, ...] = ()

    def is_excluded(self, cls: type) -> bool:
        candidates = {cls.__name__.casefold(), controller_name(cls).casefold()}
        for excluded in self.excluded_controllers:
            folded = excluded.casefold()
            if folded in candidates or f"{folded}{_SUFFIX.casefold()}" in candidates:
                return True
        return False


def controller_info(cls: type) -> ControllerInfo:
    own = vars(cls).get(CONTROLLER_ATTR)
    if own is not None:
        return own
    # 繼承 route，但名稱不沿用父類別
    inherited = getattr(cls, CONTROLLER_ATTR, None)
    return ControllerInfo(route=inherited.route if inherited else None)


def controller_name(cls: type) -> str:
    info = controller_info(cls)
    if info.name:
        return info.name
    name = cls.__name__
    if name.endswith(_SUFFIX) and len(name) > len(_SUFFIX):
        return name[: -len(_SUFFIX)]
    return name


def combine_routes(controller_route: Optional[str], template: Optional[str], cls: type, action: str) -> Optional[str]:
    if template and template.startswith(("/", "~/")):
        route = template.lstrip("~").lstrip("/")
    else:
        route = "/".join(part.strip("/") for part in (controller_route, template) if part)
    route = route.replace("[controller]", controller_name(cls)).replace("[action]", action)
    return route or None


def _action_members(cls: type) -> Dict[str, Any]:
    members: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("_"):
                continue
            members[name] = member
    return members


def _action_info(member: Any) -> Tuple[Optional[ActionInfo], Any]:
    func = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
    if not inspect.isfunction(func):
        return None, func
    return getattr(func, ACTION_ATTR, None), func


class ControllerToolSource:
    def __init__(
        self,
        controllers: Iterable[type] = (),
        *,
        modules: Iterable[Union[ModuleType, str]] = (),
        options: Optional[ControllerToolOptions] = None,
    ) -> None:
        self._controllers = tuple(controllers)
        self._modules = tuple(modules)
        self.options = options or ControllerToolOptions()

    def discover(self) -> List[RawOperation]:
        operations: List[RawOperation] = []
        for cls in self._controller_types():
            if self.options.is_excluded(cls):
                logger.debug("略過排除的 controller %s", cls.__name__)
                continue
            operations.extend(self._scan(cls))
        return operations

    def _controller_types(self) -> List[type]:
        found: List[type] = list(self._controllers)
        for module in self._modules:
            if isinstance(module, str):
                try:
                    module = importlib.import_module(module)
                except ImportError as exc:
                    raise DiscoveryError(f"無法載入 controller 模組 {module}：{exc}") from exc
            for obj in vars(module).values():
                if (
                    inspect.isclass(obj)
                    and obj.__module__ == module.__name__
                    and getattr(obj, CONTROLLER_ATTR, None) is not None
                ):
                    found.append(obj)

        unique: Dict[type, None] = dict.fromkeys(found)
        return list(unique)

    def _scan(self, cls: type) -> List[RawOperation]:
        operations: List[RawOperation] = []
        info = controller_info(cls)
        for name, member in _action_members(cls).items():
            action, func = _action_info(member)
            if action is None:
                continue

            is_static = isinstance(member, (staticmethod, classmethod))
            documentation = parse_docstring(func)
            description = (
                action.description
                or (documentation.summary if documentation else None)
                or f"Action method {name} from controller {cls.__name__}"
            )
            if action.name:
                tool_name = action.name
            elif self.options.include_controller_name_in_tool_name:
                tool_name = f"{controller_name(cls)}_{name}"
            else:
                tool_name = name

            operations.append(
                RawOperation(
                    name=tool_name,
                    method=getattr(cls, name) if is_static else func,
                    handler=cls,
                    is_static=is_static,
                    description=description,
                    route_template=combine_routes(info.route, action.template, cls, name),
                    http_method=action.http_method,
                    parameters=read_parameters(
                        func,
                        owner=cls,
                        skip_first=not isinstance(member, staticmethod),
                        documentation=documentation,
                    ),
                )
            )
        return operations
