from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

from .logging import get_logger
from .settings import DelugeSettings

logger = get_logger()


@dataclass
class TransportResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    set_cookie: list[str] = field(default_factory=list)


class TransportBase(Protocol):
    def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> TransportResponse:
        raise NotImplementedError("must implement 'post_json'")

    def post_multipart(
        self, url: str, field_name: str, file_name: str, content: bytes, headers: dict[str, str]
    ) -> TransportResponse:
        raise NotImplementedError("must implement 'post_multipart'")


def _get_set_cookie_headers(response: requests.Response) -> list[str]:
    # requests folds repeated headers into one comma separated value, which
    # breaks cookie 'Expires' dates, so read them from the urllib3 response
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


def _decode_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpTransport(TransportBase):
    """Single-attempt HTTP transport, failures surface as ``requests`` exceptions."""

    def __init__(self, settings: DelugeSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def _request_settings(self) -> dict[str, Any]:
        request_settings: dict[str, Any] = {
            "timeout": self._settings.timeout.total_seconds(),
            "verify": self._settings.verify_tls,
        }
        if self._settings.proxies:
            request_settings["proxies"] = self._settings.proxies
        return request_settings

    def _make_response(self, response: requests.Response, body: Any) -> TransportResponse:
        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=body,
            set_cookie=_get_set_cookie_headers(response),
        )

    def post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> TransportResponse:
        # the session would otherwise replay cookies the client did not ask for
        self._session.cookies.clear()
        with self._session.post(url, json=payload, headers=headers, **self._request_settings) as response:
            response.raise_for_status()
            logger.debug(f"received headers: {response.headers}")
            return self._make_response(response, _decode_body(response))

    def post_multipart(
        self, url: str, field_name: str, file_name: str, content: bytes, headers: dict[str, str]
    ) -> TransportResponse:
        self._session.cookies.clear()
        files = {field_name: (file_name, content, "application/x-bittorrent")}
        with self._session.post(url, files=files, headers=headers, **self._request_settings) as response:
            response.raise_for_status()
            return self._make_response(response, response.text)

    def close(self) -> None:
        self._session.close()
