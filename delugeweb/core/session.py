from datetime import datetime, timedelta
from http.cookies import CookieError, SimpleCookie
from typing import Any

import pytz
from dateutil.parser import parse as parse_date
from pydantic import BaseModel

from .rpc import MAX_MESSAGE_ID


def _utc_now() -> datetime:
    return datetime.now(pytz.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=pytz.utc)
    return value.astimezone(pytz.utc)


class SessionCookie(BaseModel):
    name: str
    value: str
    expires: datetime | None = None
    path: str | None = None

    def ttl(self, now: datetime | None = None) -> timedelta | None:
        """Remaining lifetime, ``None`` when the cookie has no expiry."""
        if self.expires is None:
            return None
        return _as_utc(self.expires) - (now or _utc_now())

    def header_value(self) -> str:
        return f"{self.name}={self.value}"

    @staticmethod
    def parse(header: str, now: datetime | None = None) -> "SessionCookie":
        jar = SimpleCookie()
        try:
            jar.load(header)
        except CookieError as e:
            raise ValueError(f"invalid Set-Cookie header: {header!r}") from e
        if not jar:
            raise ValueError(f"invalid Set-Cookie header: {header!r}")
        name, morsel = next(iter(jar.items()))
        expires = None
        if morsel["max-age"]:
            expires = (now or _utc_now()) + timedelta(seconds=int(morsel["max-age"]))
        elif morsel["expires"]:
            expires = _as_utc(parse_date(morsel["expires"]))
        return SessionCookie(
            name=name,
            value=morsel.value,
            expires=expires,
            path=morsel["path"] or None,
        )


class SessionState(BaseModel):
    """Authentication cookie and rolling message id of one deluge-web session.

    A single instance is owned by a client; every pipeline call reads and
    mutates it, so callers sharing a client across threads rely on the
    client's lock for consistent id/cookie ordering.
    """

    cookie: SessionCookie | None = None
    message_id: int = 0

    def reset(self) -> None:
        self.cookie = None
        self.message_id = 0

    def next_message_id(self) -> int:
        if self.message_id >= MAX_MESSAGE_ID:
            self.message_id = 0
        message_id = self.message_id
        self.message_id += 1
        return message_id

    def export(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @staticmethod
    def restore(snapshot: dict[str, Any] | None) -> "SessionState":
        if not snapshot or not snapshot.get("cookie"):
            return SessionState()
        return SessionState.model_validate(snapshot)
