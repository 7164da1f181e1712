from collections.abc import Callable
from typing import Any

import pytest

from delugeweb.core.client import DelugeClient
from delugeweb.core.transport import TransportBase, TransportResponse

SESSION_COOKIE = "_session_id=5c7a1fd0e34f; Expires=Fri, 01 Jan 2100 00:00:00 GMT; Path=/json"
TEMP_PATH = "/tmp/delugeweb-DfEsgR/tmpD3rujY.torrent"
HOST = ["ddf084f5f3d7945597991008949ea7b51e6b3d93", "127.0.0.1", 58846, "Online"]

RpcHandler = Callable[[list[Any]], Any]


def rpc_body(message_id: int, result: Any = None, error: Any = None) -> dict[str, Any]:
    return {"id": message_id, "result": result, "error": error}


class FakeTransport(TransportBase):
    def __init__(self):
        self.handlers: dict[str, Callable[[dict[str, Any]], TransportResponse]] = {}
        self.requests: list[dict[str, Any]] = []
        self.headers: list[dict[str, str]] = []
        self.uploads: list[dict[str, Any]] = []
        self.upload_body: Any = '{"files": ["%s"], "success": true}' % TEMP_PATH

    def on(self, method: str, result: Any = None, set_cookie: list[str] | None = None) -> None:
        def handler(payload: dict[str, Any]) -> TransportResponse:
            value = result(payload["params"]) if callable(result) else result
            return TransportResponse(status=200, body=rpc_body(payload["id"], value), set_cookie=set_cookie or [])

        self.handlers[method] = handler

    def on_error(self, method: str, message: str) -> None:
        def handler(payload: dict[str, Any]) -> TransportResponse:
            return TransportResponse(status=200, body=rpc_body(payload["id"], error={"message": message, "code": 1}))

        self.handlers[method] = handler

    def on_raw(self, method: str, handler: Callable[[dict[str, Any]], TransportResponse]) -> None:
        self.handlers[method] = handler

    @property
    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]

    def requests_for(self, method: str) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["method"] == method]

    def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> TransportResponse:
        self.requests.append(payload)
        self.headers.append(headers)
        handler = self.handlers.get(payload["method"])
        if handler is None:
            raise AssertionError(f"unexpected rpc method: {payload['method']}")
        return handler(payload)

    def post_multipart(
        self, url: str, field_name: str, file_name: str, content: bytes, headers: dict[str, str]
    ) -> TransportResponse:
        self.uploads.append(
            {"url": url, "field_name": field_name, "file_name": file_name, "content": content, "headers": headers}
        )
        return TransportResponse(status=200, body=self.upload_body)


@pytest.fixture
def transport() -> FakeTransport:
    fake = FakeTransport()
    fake.on("auth.login", True, set_cookie=[SESSION_COOKIE])
    fake.on("web.connected", True)
    fake.on("web.get_hosts", [HOST])
    fake.on("web.connect", ["core.get_config", "core.set_config"])
    return fake


@pytest.fixture
def client(transport: FakeTransport) -> DelugeClient:
    return DelugeClient(transport=transport)
