import pytest

from delugeweb.core.errors import RpcError
from delugeweb.core.rpc import RpcRequest, decode_response


def test_encode_request():
    request = RpcRequest(method="web.connect", params=["hostid"], id=4)
    assert request.encode() == {"method": "web.connect", "params": ["hostid"], "id": 4}


def test_decode_response():
    response = decode_response(
        {"id": 4, "result": True, "error": None},
        headers={"Content-Type": "application/json"},
        set_cookie=["_session_id=abc"],
    )
    assert response.id == 4
    assert response.result is True
    assert response.error is None
    assert response.headers == {"Content-Type": "application/json"}
    assert response.set_cookie == ["_session_id=abc"]


def test_decode_error_mapping():
    with pytest.raises(RpcError, match="Not authenticated"):
        decode_response({"id": 1, "result": None, "error": {"message": "Not authenticated", "code": 1}})


def test_decode_error_string():
    with pytest.raises(RpcError, match="boom"):
        decode_response({"id": 1, "result": None, "error": "boom"})


def test_decode_string_body():
    with pytest.raises(RpcError, match="Bad Gateway"):
        decode_response("Bad Gateway")


def test_decode_falsy_result_is_not_an_error():
    assert decode_response({"id": 1, "result": False, "error": None}).result is False
