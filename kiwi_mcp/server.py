"""JSON-RPC 2.0 dispatcher for the MCP tool methods."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from . import __version__
from .kiwi_fetcher import KiwiFetcherError
from .query import QueryError
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RpcError(Exception):
    """Request-level failure reported back as a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ContextServer:
    def __init__(
        self,
        tools: ToolRegistry,
        server_info: Tuple[str, str] = ("kiwi-mcp", __version__),
    ) -> None:
        self.tools = tools
        self.server_info = server_info
        self._methods: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "initialize": self._initialize,
            "ping": lambda params: {},
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": lambda params: {"resources": []},
            "prompts/list": lambda params: {"prompts": []},
        }

    def handle_message(self, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Dispatch one request; notifications (no ``id``) get no response."""
        method = request.get("method")
        request_id = request.get("id")
        params = request.get("params")
        if not isinstance(params, dict):
            params = {}

        if request_id is None:
            logger.debug("Notification %s", method)
            return None

        handler = self._methods.get(method) if isinstance(method, str) else None
        try:
            if handler is None:
                raise RpcError(METHOD_NOT_FOUND, f"Method not found: {method}")
            result = handler(params)
        except RpcError as exc:
            return self._error(request_id, exc.code, exc.message)
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    @staticmethod
    def _error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        }

    # ──────────────────────────────────────────────────────────

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client = params.get("clientInfo")
        client_name = client.get("name") if isinstance(client, dict) else None
        logger.info("Initializing session for %s", client_name or "unknown client")
        name, version = self.server_info
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {"name": name, "version": version},
        }

    def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [tool.to_dict() for tool in self.tools.list_tools()]}

    def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise RpcError(INVALID_PARAMS, "Missing tool name")
        executor = self.tools.get(name)
        if executor is None:
            raise RpcError(INVALID_PARAMS, f"Tool not found: {name}")

        try:
            content = executor.execute(params.get("arguments"))
        except QueryError as exc:
            logger.warning("Invalid arguments for %s: %s", name, exc)
            raise RpcError(INVALID_PARAMS, str(exc)) from exc
        except KiwiFetcherError as exc:
            raise RpcError(INTERNAL_ERROR, str(exc)) from exc
        except Exception as exc:
            logger.exception("Tool %s failed", name)
            raise RpcError(INTERNAL_ERROR, str(exc)) from exc
        return {"content": [item.to_dict() for item in content]}


__all__ = [
    "ContextServer",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "METHOD_NOT_FOUND",
    "PROTOCOL_VERSION",
    "RpcError",
]
