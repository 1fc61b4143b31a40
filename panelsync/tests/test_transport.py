import asyncio

import httpx
import pytest

from panel_fixtures import KEY, NODE_ID, FakePanel
from panelsync.services.adapters.base import DecodeError, RemoteError, TransportError
from panelsync.services.http_client import PanelTransport
from panelsync.services.response import parse_response

URL = "http://panel.test/api/v1/server/SkyhtV2ray/user"


def _response(status: int, content: bytes) -> httpx.Response:
    return httpx.Response(status, content=content, request=httpx.Request("GET", URL))


def test_parse_response_returns_tree():
    assert parse_response(URL, _response(200, b'{"data": []}')) == {"data": []}


def test_parse_response_transport_error():
    with pytest.raises(TransportError, match="panel.test"):
        parse_response(URL, None, httpx.ConnectError("refused"))


def test_parse_response_remote_error_keeps_status_and_body():
    with pytest.raises(RemoteError) as ei:
        parse_response(URL, _response(500, b"token is error"))
    assert ei.value.status == 500
    assert ei.value.body == "token is error"
    assert "HTTP 500 GET" in str(ei.value)


def test_parse_response_400_is_remote_error():
    with pytest.raises(RemoteError):
        parse_response(URL, _response(400, b"{}"))


def test_parse_response_bad_json():
    with pytest.raises(DecodeError):
        parse_response(URL, _response(200, b"<html>oops</html>"))
    with pytest.raises(DecodeError):
        parse_response(URL, _response(200, b""))


def test_every_request_carries_node_id_and_token(make_config):
    panel = FakePanel({("GET", "/api/v1/server/SkyhtV2ray/config"): (200, {})})
    http = PanelTransport(make_config(), transport=panel.transport)

    r = asyncio.run(http.request("GET", "/api/v1/server/SkyhtV2ray/config", params={"local_port": "1"}))

    assert r.status_code == 200
    params = panel.requests[0].url.params
    assert params["node_id"] == str(NODE_ID)
    assert params["token"] == KEY
    assert params["local_port"] == "1"


def test_connection_errors_are_retried(make_config):
    calls = {"n": 0}

    def flaky(request):
        calls["n"] += 1
        if calls["n"] < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"ok": True})

    http = PanelTransport(make_config(), transport=httpx.MockTransport(flaky))
    r = asyncio.run(http.request("GET", "/x"))
    assert r.json() == {"ok": True}
    assert calls["n"] == 3


def test_retries_are_bounded(make_config):
    calls = {"n": 0}

    def down(request):
        calls["n"] += 1
        raise httpx.ConnectTimeout("timed out", request=request)

    http = PanelTransport(make_config(RETRY_COUNT=3), transport=httpx.MockTransport(down))
    with pytest.raises(httpx.TransportError):
        asyncio.run(http.request("GET", "/x"))
    assert calls["n"] == 4


def test_http_errors_are_not_retried(make_config):
    panel = FakePanel({("GET", "/x"): (502, "bad gateway")})
    http = PanelTransport(make_config(), transport=panel.transport)
    r = asyncio.run(http.request("GET", "/x"))
    assert r.status_code == 502
    assert len(panel.requests) == 1
