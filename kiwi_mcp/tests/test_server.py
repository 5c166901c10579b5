from unittest.mock import Mock

from kiwi_mcp import __version__
from kiwi_mcp.kiwi_fetcher import KiwiFetcherError
from kiwi_mcp.server import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    ContextServer,
)
from kiwi_mcp.tools import PlanTripTool, ToolRegistry


def make_server(payload=None):
    fetcher = Mock()
    fetcher.search.return_value = payload if payload is not None else {"data": []}
    registry = ToolRegistry()
    registry.register(PlanTripTool(fetcher))
    return ContextServer(registry), fetcher


def call(server, params, request_id=1):
    return server.handle_message(
        {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}
    )


ARGS = {
    "fly_from": "LHR",
    "fly_to": "BCN",
    "date_from": "01/06/2025",
    "date_to": "07/06/2025",
}


def test_initialize():
    server, _ = make_server()
    resp = server.handle_message(
        {
            "jsonrpc": "2.0",
            "id": 0,
            "method": "initialize",
            "params": {"clientInfo": {"name": "test-client"}},
        }
    )

    result = resp["result"]
    assert resp["id"] == 0
    assert result["protocolVersion"] == PROTOCOL_VERSION
    assert "tools" in result["capabilities"]
    assert result["serverInfo"] == {"name": "kiwi-mcp", "version": __version__}


def test_tools_list():
    server, _ = make_server()
    resp = server.handle_message({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

    tools = resp["result"]["tools"]
    assert [t["name"] for t in tools] == ["plan_trip"]
    assert tools[0]["inputSchema"]["required"] == [
        "fly_from",
        "fly_to",
        "date_from",
        "date_to",
    ]


def test_empty_resource_and_prompt_lists():
    server, _ = make_server()
    resources = server.handle_message(
        {"jsonrpc": "2.0", "id": 3, "method": "resources/list"}
    )
    prompts = server.handle_message({"jsonrpc": "2.0", "id": 4, "method": "prompts/list"})

    assert resources["result"] == {"resources": []}
    assert prompts["result"] == {"prompts": []}


def test_ping():
    server, _ = make_server()
    resp = server.handle_message({"jsonrpc": "2.0", "id": "p", "method": "ping"})
    assert resp == {"jsonrpc": "2.0", "id": "p", "result": {}}


def test_tools_call_success():
    server, fetcher = make_server({"data": []})
    resp = call(server, {"name": "plan_trip", "arguments": ARGS})

    assert resp["result"] == {
        "content": [
            {"type": "text", "text": "No flights found matching your criteria."}
        ]
    }
    fetcher.search.assert_called_once()


def test_tools_call_missing_fly_to():
    server, fetcher = make_server()
    args = dict(ARGS)
    del args["fly_to"]
    resp = call(server, {"name": "plan_trip", "arguments": args})

    assert resp["error"]["code"] == INVALID_PARAMS
    assert resp["error"]["message"] == "Missing or invalid fly_to parameter"
    fetcher.search.assert_not_called()


def test_tools_call_without_arguments():
    server, _ = make_server()
    resp = call(server, {"name": "plan_trip"})
    assert resp["error"] == {"code": INVALID_PARAMS, "message": "Missing arguments"}


def test_tools_call_fetcher_error():
    server, fetcher = make_server()
    fetcher.search.side_effect = KiwiFetcherError("Failed to parse API response: x")
    resp = call(server, {"name": "plan_trip", "arguments": ARGS})

    assert resp["error"]["code"] == INTERNAL_ERROR
    assert "Failed to parse API response" in resp["error"]["message"]


def test_tools_call_unexpected_exception():
    server, fetcher = make_server()
    fetcher.search.side_effect = KeyError("boom")
    resp = call(server, {"name": "plan_trip", "arguments": ARGS})
    assert resp["error"]["code"] == INTERNAL_ERROR


def test_unknown_tool():
    server, _ = make_server()
    resp = call(server, {"name": "book_hotel", "arguments": {}})
    assert resp["error"]["code"] == INVALID_PARAMS
    assert "book_hotel" in resp["error"]["message"]


def test_missing_tool_name():
    server, _ = make_server()
    resp = call(server, {"arguments": ARGS})
    assert resp["error"]["code"] == INVALID_PARAMS


def test_unknown_method():
    server, _ = make_server()
    resp = server.handle_message({"jsonrpc": "2.0", "id": 9, "method": "sampling/x"})
    assert resp["id"] == 9
    assert resp["error"]["code"] == METHOD_NOT_FOUND


def test_notification_gets_no_response():
    server, _ = make_server()
    assert (
        server.handle_message(
            {"jsonrpc": "2.0", "method": "notifications/initialized"}
        )
        is None
    )
