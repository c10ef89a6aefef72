import json

import pytest
from fastapi.testclient import TestClient

from toolbridge import FastAPIToolSource, McpDispatcher, ParameterSource, ServerContext, SchemaGenerator
from toolbridge.server.asgi import mount_mcp
from tests.fixtures.fastapi_app import app


def _operations(**kwargs):
    return {op.name: op for op in FastAPIToolSource(app, **kwargs).discover()}


def test_routes_become_operations():
    operations = _operations()

    assert list(operations) == ["get_item", "create_item"]
    get_item = operations["get_item"]
    assert get_item.route_template == "/items/{item_id}"
    assert get_item.http_method == "GET"
    assert get_item.description == "取得單一品項"
    assert {p.name: p.source_hint for p in get_item.parameters} == {
        "item_id": ParameterSource.ROUTE,
        "q": ParameterSource.QUERY,
        "x_token": ParameterSource.HEADER,
    }


def test_field_info_defaults_and_descriptions():
    definition = SchemaGenerator().generate(_operations()["get_item"])
    schema = definition.input_schema()

    assert schema["required"] == ["item_id"]
    assert schema["properties"]["q"]["description"] == "搜尋字串"
    assert schema["properties"]["q"]["x-source"] == "query"
    assert definition.parameter("q").default is None


def test_body_model_is_expanded():
    definition = SchemaGenerator().generate(_operations()["create_item"])
    item = definition.input_schema()["properties"]["item"]

    assert item["x-source"] == "body"
    assert item["required"] == ["name", "price"]


def test_method_filter():
    assert list(_operations(include_methods=["post"])) == ["create_item"]


@pytest.mark.asyncio
async def test_route_tools_are_callable_through_dispatcher():
    dispatcher = McpDispatcher(ServerContext.from_source(FastAPIToolSource(app)))

    read = await dispatcher.handle(
        {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "get_item", "arguments": {"item_id": "5", "q": "abc"}},
        }
    )
    create = await dispatcher.handle(
        {
            "jsonrpc": "2.0",
            "id": 2,
            "method": "tools/call",
            "params": {"name": "create_item", "arguments": {"item": {"name": "pen", "price": 12}}},
        }
    )

    assert json.loads(read["result"]["content"][0]["text"]) == {"item_id": 5, "q": "abc", "token": None}
    assert json.loads(create["result"]["content"][0]["text"]) == {
        "name": "pen",
        "price": 12.0,
        "has_request": False,
    }


def test_mount_on_existing_app_keeps_original_routes():
    from fastapi import FastAPI

    host = FastAPI()

    @host.get("/ping")
    def ping() -> dict:
        return {"pong": True}

    mount_mcp(host, ServerContext.from_source(FastAPIToolSource(host)), path="/rpc")
    client = TestClient(host)

    assert client.get("/ping").json() == {"pong": True}
    listed = client.post("/rpc", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"}).json()
    assert [tool["name"] for tool in listed["result"]["tools"]] == ["ping"]
