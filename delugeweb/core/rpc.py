"""JSON-RPC envelope used by the deluge-web ``/json`` endpoint.

Request:  {"method": "web.connected", "params": [], "id": 3}
Response: {"id": 3, "result": true, "error": null}
Error:    {"id": 3, "result": null, "error": {"message": "Not authenticated", "code": 1}}
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import RpcError

MAX_MESSAGE_ID = 4096


@dataclass(frozen=True)
class RpcRequest:
    method: str
    params: list[Any] = field(default_factory=list)
    id: int = 0

    def encode(self) -> dict[str, Any]:
        return {"method": self.method, "params": self.params, "id": self.id}


@dataclass(frozen=True)
class RpcResponse:
    id: int | None
    result: Any = None
    error: Any = None
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    set_cookie: list[str] = field(default_factory=list)


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error)


def decode_response(
    body: Any,
    status: int = 200,
    headers: dict[str, str] | None = None,
    set_cookie: list[str] | None = None,
    method: str | None = None,
) -> RpcResponse:
    # some proxies and older daemons answer with a bare error string
    if isinstance(body, str):
        raise RpcError(body, method=method)
    if not isinstance(body, dict):
        raise RpcError(f"unexpected response body: {body!r}", method=method)
    error = body.get("error")
    if error is not None:
        raise RpcError(_error_message(error), method=method)
    return RpcResponse(
        id=body.get("id"),
        result=body.get("result"),
        error=None,
        status=status,
        headers=dict(headers or {}),
        set_cookie=list(set_cookie or []),
    )
