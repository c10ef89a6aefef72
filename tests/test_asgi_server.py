import pytest
from fastapi.testclient import TestClient

from toolbridge.server.asgi import SESSION_HEADER, create_app
from tests.fixtures.contexts import controller_context, function_context


@pytest.fixture()
def client():
    return TestClient(create_app(controller_context()))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["tools"] > 0


def test_tools_call_over_http(client):
    response = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "Calc_Add", "arguments": {"a": 10, "b": 5}},
        },
    )

    assert response.status_code == 200
    assert response.json()["result"]["content"][0]["text"] == "15"


def test_notification_has_empty_body(client):
    response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 202
    assert response.content == b""


def test_malformed_body(client):
    response = client.post("/mcp", content=b"{oops", headers={"content-type": "application/json"})

    assert response.status_code == 200
    assert response.json()["id"] is None
    assert response.json()["error"]["code"] == -32700


def test_session_header_reaches_tool():
    client = TestClient(create_app(function_context()))

    response = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": "s", "method": "tools/call", "params": {"name": "session_info"}},
        headers={SESSION_HEADER: "session-42"},
    )

    assert response.json()["result"]["content"][0]["text"] == '{"session": "session-42", "label": "default"}'
