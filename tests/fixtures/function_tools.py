"""以 @tool 註冊的示範工具。"""
import asyncio
from typing import Dict

from toolbridge import ActionResult, RequestContext, ToolCollection, tool
from tests.fixtures.controllers import Mode

collection = ToolCollection()


@tool(collection=collection)
def greet(name: str, excited: bool = False) -> str:
    """向使用者打招呼

    Args:
        name: 使用者名稱
        excited: 是否加上驚嘆號
    """
    return f"Hello, {name}{'!' if excited else '.'}"


@tool(name="math.multiply", description="兩數相乘", collection=collection)
def multiply(a: float, b: float) -> float:
    return a * b


@tool(collection=collection)
async def slow_echo(message: str, delay: float = 0.0) -> Dict[str, str]:
    await asyncio.sleep(delay)
    return {"echo": message}


@tool(collection=collection)
def reject(reason: str) -> None:
    raise ValueError(reason)


@tool(collection=collection)
def validate_name(name: str) -> ActionResult:
    if not name.strip():
        return ActionResult.bad_request("name is invalid", {"field": "name"})
    return ActionResult.ok({"name": name})


@tool(collection=collection)
def tag_counts(counts: Dict[str, int]) -> int:
    return sum(counts.values())


@tool(collection=collection)
def set_mode(mode: Mode) -> str:
    return mode.name


@tool(collection=collection)
def session_info(context: RequestContext, label: str = "default") -> Dict[str, object]:
    return {"session": context.session_id, "label": label}
