import json
from http import HTTPStatus

import pytest

from zalletrpc.http_compat import (
    HttpRequestMiddleware,
    JsonRpcVersion,
    detect_version,
    insert_or_replace_content_type_header,
    request_to_json_rpc_2,
    response_from_json_rpc_2,
)


# --- content-type header ---------------------------------------------------


def test_missing_content_type_is_added():
    headers = {"host": "localhost"}
    insert_or_replace_content_type_header(headers)
    assert headers == {"host": "localhost", "content-type": "application/json"}


@pytest.mark.parametrize("value", ["text/plain", "text/plain;", "text/plain; charset=utf-8"])
def test_text_plain_is_replaced(value):
    headers = {"Content-Type": value}
    insert_or_replace_content_type_header(headers)
    assert headers == {"content-type": "application/json"}


@pytest.mark.parametrize(
    "value", ["application/json", "application/x-www-form-urlencoded", "text/html"]
)
def test_other_content_types_are_kept(value):
    headers = {"content-type": value}
    insert_or_replace_content_type_header(headers)
    assert headers == {"content-type": value}


def test_non_ascii_header_bytes_are_kept():
    headers = {"content-type": b"\xfftext/plain"}
    insert_or_replace_content_type_header(headers)
    assert headers == {"content-type": b"\xfftext/plain"}


# --- version detection -----------------------------------------------------


@pytest.mark.parametrize(
    "request_obj, expected",
    [
        ({"jsonrpc": "2.0", "method": "m"}, JsonRpcVersion.TWO_POINT_ZERO),
        ({"jsonrpc": "2.0", "method": "m", "id": 1}, JsonRpcVersion.TWO_POINT_ZERO),
        ({"jsonrpc": "2.0", "method": "m", "id": "a"}, JsonRpcVersion.TWO_POINT_ZERO),
        ({"jsonrpc": "2.0", "method": "m", "id": None}, JsonRpcVersion.TWO_POINT_ZERO),
        ({"jsonrpc": "2.0", "method": "m", "id": [1]}, JsonRpcVersion.UNKNOWN),
        ({"jsonrpc": "1.0", "method": "m", "params": [], "id": 1}, JsonRpcVersion.LIGHTWALLETD),
        ({"jsonrpc": "1.0", "method": "m", "id": 1}, JsonRpcVersion.UNKNOWN),
        ({"method": "m", "params": [], "id": 1}, JsonRpcVersion.BITCOIND),
        ({"method": "m", "params": [], "id": None}, JsonRpcVersion.UNKNOWN),
        ({"method": "m", "id": 1}, JsonRpcVersion.UNKNOWN),
        ({"params": [], "id": 1}, JsonRpcVersion.UNKNOWN),
        ([{"method": "m", "params": [], "id": 1}], JsonRpcVersion.UNKNOWN),
    ],
)
def test_detect_version(request_obj, expected):
    assert detect_version(request_obj) is expected


# --- request rewriting -----------------------------------------------------


def test_bitcoind_request_gets_jsonrpc_2():
    body = b'{"method":"getinfo","params":[],"id":"curltest"}'
    version, out = request_to_json_rpc_2(body)
    assert version is JsonRpcVersion.BITCOIND
    assert json.loads(out) == {
        "jsonrpc": "2.0",
        "method": "getinfo",
        "params": [],
        "id": "curltest",
    }


def test_lightwalletd_request_gets_jsonrpc_2():
    body = b'{"jsonrpc":"1.0","method":"getinfo","params":[],"id":1}'
    version, out = request_to_json_rpc_2(body)
    assert version is JsonRpcVersion.LIGHTWALLETD
    assert json.loads(out)["jsonrpc"] == "2.0"


def test_request_params_keep_decimal_precision():
    body = b'{"method":"z_sendmany","params":[20999999.99999999],"id":1}'
    _, out = request_to_json_rpc_2(body)
    assert b"20999999.99999999" in out


@pytest.mark.parametrize(
    "body",
    [b"not json", b'{"method":"m","id":1}', b"[1, 2]", b'{"method":"m","params":NaN,"id":1}'],
)
def test_unknown_requests_pass_through(body):
    assert request_to_json_rpc_2(body) == (JsonRpcVersion.UNKNOWN, body)


# --- response rewriting ----------------------------------------------------


def test_bitcoind_success_response():
    body = b'{"jsonrpc":"2.0","result":5,"id":1}'
    status, out = response_from_json_rpc_2(JsonRpcVersion.BITCOIND, HTTPStatus.OK, body)
    assert status == HTTPStatus.OK
    assert json.loads(out) == {"result": 5, "error": None, "id": 1}


def test_lightwalletd_success_response():
    body = b'{"jsonrpc":"2.0","result":"x","id":1}'
    _, out = response_from_json_rpc_2(JsonRpcVersion.LIGHTWALLETD, HTTPStatus.OK, body)
    assert json.loads(out) == {"jsonrpc": "1.0", "result": "x", "error": None, "id": 1}


@pytest.mark.parametrize(
    "code, expected",
    [
        (-32600, HTTPStatus.BAD_REQUEST),
        (-32601, HTTPStatus.NOT_FOUND),
        (-8, HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_bitcoind_error_status(code, expected):
    body = json.dumps(
        {"jsonrpc": "2.0", "error": {"code": code, "message": "m"}, "id": 1}
    ).encode()
    status, out = response_from_json_rpc_2(JsonRpcVersion.BITCOIND, HTTPStatus.OK, body)
    assert status == expected
    assert json.loads(out)["result"] is None


def test_two_point_zero_null_result_is_kept():
    body = b'{"jsonrpc":"2.0","result":null,"id":1}'
    status, out = response_from_json_rpc_2(JsonRpcVersion.TWO_POINT_ZERO, HTTPStatus.OK, body)
    assert status == HTTPStatus.OK
    assert json.loads(out) == {"jsonrpc": "2.0", "result": None, "id": 1}


def test_two_point_zero_error_status_unchanged():
    body = b'{"jsonrpc":"2.0","error":{"code":-32601,"message":"m"},"id":1}'
    status, out = response_from_json_rpc_2(JsonRpcVersion.TWO_POINT_ZERO, HTTPStatus.OK, body)
    assert status == HTTPStatus.OK
    assert "result" not in json.loads(out)


def test_two_point_zero_without_version_is_an_error():
    body = b'{"result":1,"id":1}'
    with pytest.raises(RuntimeError):
        response_from_json_rpc_2(JsonRpcVersion.TWO_POINT_ZERO, HTTPStatus.OK, body)


def test_unparseable_response_passes_through():
    body = b'[{"jsonrpc":"2.0","result":1,"id":1}]'
    assert response_from_json_rpc_2(JsonRpcVersion.BITCOIND, HTTPStatus.OK, body) == (
        HTTPStatus.OK,
        body,
    )


# --- middleware ------------------------------------------------------------


def test_middleware_round_trip_for_bitcoind_client():
    seen = {}

    def service(headers, body):
        seen["headers"] = headers
        seen["request"] = json.loads(body)
        response = {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Method not found"},
            "id": seen["request"]["id"],
        }
        return HTTPStatus.OK, json.dumps(response).encode()

    middleware = HttpRequestMiddleware(service)
    caller_headers = {"Content-Type": "text/plain"}
    status, body = middleware(caller_headers, b'{"method":"nope","params":[],"id":7}')

    assert seen["headers"] == {"content-type": "application/json"}
    assert seen["request"]["jsonrpc"] == "2.0"
    assert caller_headers == {"Content-Type": "text/plain"}
    assert status == HTTPStatus.NOT_FOUND
    assert json.loads(body) == {
        "result": None,
        "error": {"code": -32601, "message": "Method not found"},
        "id": 7,
    }