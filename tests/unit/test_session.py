from datetime import datetime, timedelta

import orjson
import pytest
import pytz

from delugeweb.core.rpc import MAX_MESSAGE_ID
from delugeweb.core.session import SessionCookie, SessionState

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=pytz.utc)


def test_parse_cookie_with_expires():
    cookie = SessionCookie.parse("_session_id=5c7a1fd0e34f; Expires=Tue, 20 Oct 2026 12:00:00 GMT; Path=/json")
    assert cookie.name == "_session_id"
    assert cookie.value == "5c7a1fd0e34f"
    assert cookie.path == "/json"
    assert cookie.expires == datetime(2026, 10, 20, 12, 0, 0, tzinfo=pytz.utc)
    assert cookie.ttl(NOW) == timedelta(days=1)
    assert cookie.header_value() == "_session_id=5c7a1fd0e34f"


def test_parse_cookie_with_max_age():
    cookie = SessionCookie.parse("_session_id=abc; Max-Age=3600; Path=/json", now=NOW)
    assert cookie.ttl(NOW) == timedelta(hours=1)


def test_parse_session_cookie_without_expiry():
    cookie = SessionCookie.parse("_session_id=abc")
    assert cookie.expires is None
    assert cookie.ttl(NOW) is None


def test_parse_invalid_cookie():
    with pytest.raises(ValueError):
        SessionCookie.parse("")


def test_reset():
    state = SessionState(cookie=SessionCookie(name="_session_id", value="abc"), message_id=12)
    state.reset()
    assert state.cookie is None
    assert state.message_id == 0


def test_message_id_read_then_increment():
    state = SessionState()
    assert [state.next_message_id() for _ in range(3)] == [0, 1, 2]
    assert state.message_id == 3


def test_message_id_wraps_around():
    state = SessionState(message_id=MAX_MESSAGE_ID - 1)
    assert state.next_message_id() == MAX_MESSAGE_ID - 1
    assert state.next_message_id() == 0
    assert state.next_message_id() == 1


def test_export_restore_round_trip():
    cookie = SessionCookie.parse("_session_id=abc; Expires=Tue, 20 Oct 2026 12:00:00 GMT; Path=/json")
    state = SessionState(cookie=cookie, message_id=17)
    restored = SessionState.restore(orjson.loads(orjson.dumps(state.export())))
    assert set(state.export()) == {"cookie", "message_id"}
    assert restored == state
    assert restored.cookie.ttl(NOW) == cookie.ttl(NOW)


def test_restore_empty_snapshot():
    assert SessionState.restore(None) == SessionState()
    assert SessionState.restore({"cookie": None, "message_id": 5}) == SessionState()
