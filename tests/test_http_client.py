import json

import pytest
import requests
import responses

from streamsync.http_client import HttpClient, HttpResponse

URL = "https://api.example.com/items"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_get_returns_status_body_and_sends_headers(mocked):
    mocked.add(responses.GET, URL, body=b'{"data": []}', status=200)
    result = HttpClient().get(URL, {"Client-Id": "client-1"})
    assert result.status == 200
    assert result.body == b'{"data": []}'
    assert result.ok
    assert mocked.calls[0].request.headers["Client-Id"] == "client-1"


def test_get_without_headers(mocked):
    mocked.add(responses.GET, URL, body=b"hello")
    result = HttpClient().get(URL)
    assert result.text == "hello"


def test_post_sets_content_type_and_body(mocked):
    mocked.add(responses.POST, URL, body=b"done")
    result = HttpClient().post(URL, {}, b"a=1&b=2", "application/x-www-form-urlencoded")
    request = mocked.calls[0].request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.body == b"a=1&b=2"
    assert result.body == b"done"


def test_post_content_type_overrides_header(mocked):
    mocked.add(responses.POST, URL)
    HttpClient().post(URL, {"content-type": "text/plain"}, "x", "application/json")
    request = mocked.calls[0].request
    assert request.headers["Content-Type"] == "application/json"
    assert request.body == b"x"


def test_patch_uses_json_content_type(mocked):
    mocked.add(responses.PATCH, URL, status=204)
    send = HttpClient().patch
    result = send(URL, {"Authorization": "Bearer token"}, b'{"title":"t"}')
    request = mocked.calls[0].request
    assert request.method == "PATCH"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer token"
    assert result.status == 204


def test_put_uses_json_content_type(mocked):
    mocked.add(responses.PUT, URL, status=200)
    HttpClient().put(URL, None, b"{}")
    request = mocked.calls[0].request
    assert request.method == "PUT"
    assert request.headers["Content-Type"] == "application/json"


def test_http_error_status_sets_error(mocked):
    mocked.add(responses.GET, URL, status=404, body=b"missing")
    result = HttpClient().get(URL)
    assert result.status == 404
    assert result.body == b"missing"
    assert not result.ok
    assert result.error.startswith("404")


def test_connection_failure_reports_error(mocked):
    mocked.add(responses.GET, URL, body=requests.ConnectionError("boom"))
    result = HttpClient().get(URL)
    assert result.status == 0
    assert result.body == b""
    assert result.error == "boom"


@pytest.mark.parametrize("body", [b"[1, 2]", b"not json", b""])
def test_json_object_non_object_is_empty(body):
    assert HttpResponse(200, body).json_object() == {}


def test_json_object_parses_object():
    payload = {"data": [{"id": "1"}]}
    assert HttpResponse(200, json.dumps(payload).encode()).json_object() == payload