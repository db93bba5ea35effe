"""HTTP-level compatibility fixes applied before JSON-RPC requests are parsed.

Legacy clients speak a mix of JSON-RPC 1.0, 1.1 and 2.0, and some omit the
`content-type` header. Requests are normalised to JSON-RPC 2.0 on the way in,
and responses are mapped back to the client's dialect on the way out.
"""

from __future__ import annotations

import enum
import json
from collections.abc import Callable, MutableMapping
from decimal import Decimal
from http import HTTPStatus
from typing import Any

from .errors import ErrorCode

CONTENT_TYPE = "content-type"
APPLICATION_JSON = "application/json"

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class JsonRpcVersion(enum.Enum):
    """The JSON-RPC dialect a client is speaking."""

    BITCOIND = "bitcoind"
    """A mishmash of 1.0, 1.1 and 2.0."""
    LIGHTWALLETD = "lightwalletd"
    """As BITCOIND, but also sends `"jsonrpc": "1.0"`."""
    TWO_POINT_ZERO = "2.0"
    """Strict JSON-RPC 2.0."""
    UNKNOWN = "unknown"
    """Unrecognised; the request and response are passed through untouched."""


def _header_text(value: Any) -> str:
    if isinstance(value, bytes):
        try:
            text = value.decode("ascii")
        except UnicodeDecodeError:
            return ""
    else:
        text = str(value)
    if any(not (ch == "\t" or 0x20 <= ord(ch) < 0x7F) for ch in text):
        return ""
    return text


def insert_or_replace_content_type_header(headers: MutableMapping[str, Any]) -> None:
    """Set `content-type` to `application/json` if it is missing or `text/plain...`.

    Header names are matched case-insensitively; only the first matching header
    is inspected.
    """
    keys = [key for key in headers if key.lower() == CONTENT_TYPE]
    if keys and not _header_text(headers[keys[0]]).startswith("text/plain"):
        return
    for key in keys:
        del headers[key]
    headers[CONTENT_TYPE] = APPLICATION_JSON


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON number {name}")


def _loads(body: bytes | str) -> Any:
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return json.loads(body, parse_float=Decimal, parse_constant=_reject_constant)


def _dumps(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, dict):
        items = (f"{_dumps(str(k))}:{_dumps(v)}" for k, v in value.items())
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_dumps(v) for v in value) + "]"
    raise TypeError(f"cannot serialise {type(value).__name__} as JSON")


def _parse_request(data: Any) -> dict[str, Any] | None:
    """The request's fields, with null treated as absent; None if malformed."""
    if not isinstance(data, dict):
        return None
    jsonrpc = data.get("jsonrpc")
    method = data.get("method")
    if jsonrpc is not None and not isinstance(jsonrpc, str):
        return None
    if not isinstance(method, str):
        return None
    fields: dict[str, Any] = {}
    if jsonrpc is not None:
        fields["jsonrpc"] = jsonrpc
    fields["method"] = method
    for name in ("params", "id"):
        if data.get(name) is not None:
            fields[name] = data[name]
    return fields


def _version_of(fields: dict[str, Any]) -> JsonRpcVersion:
    jsonrpc = fields.get("jsonrpc")
    has_params = "params" in fields
    has_id = "id" in fields
    request_id = fields.get("id")
    if jsonrpc == "2.0":
        if not has_id or (
            isinstance(request_id, (str, int, Decimal, float))
            and not isinstance(request_id, bool)
        ):
            return JsonRpcVersion.TWO_POINT_ZERO
        return JsonRpcVersion.UNKNOWN
    if jsonrpc == "1.0" and has_params and has_id:
        return JsonRpcVersion.LIGHTWALLETD
    if jsonrpc is None and has_params and has_id:
        return JsonRpcVersion.BITCOIND
    return JsonRpcVersion.UNKNOWN


def detect_version(request: Any) -> JsonRpcVersion:
    """The JSON-RPC dialect of an already-decoded request object."""
    fields = _parse_request(request)
    if fields is None:
        return JsonRpcVersion.UNKNOWN
    return _version_of(fields)


def request_to_json_rpc_2(body: bytes) -> tuple[JsonRpcVersion, bytes]:
    """Rewrite a request body as JSON-RPC 2.0, returning the client's dialect too.

    Bodies that cannot be understood are returned unchanged with UNKNOWN.
    """
    try:
        fields = _parse_request(_loads(body))
    except ValueError:
        fields = None
    if fields is None:
        return JsonRpcVersion.UNKNOWN, body
    version = _version_of(fields)
    if version is JsonRpcVersion.UNKNOWN:
        return version, body
    fields.pop("jsonrpc", None)
    rewritten = {"jsonrpc": "2.0", **fields}
    return version, _dumps(rewritten).encode("utf-8")


def _parse_response(data: Any) -> dict[str, Any] | None:
    if not isinstance(data, dict) or "id" not in data:
        return None
    jsonrpc = data.get("jsonrpc")
    if jsonrpc is not None and not isinstance(jsonrpc, str):
        return None
    fields: dict[str, Any] = {}
    if jsonrpc is not None:
        fields["jsonrpc"] = jsonrpc
    for name in ("result", "error"):
        if data.get(name) is not None:
            fields[name] = data[name]
    fields["id"] = data["id"]
    return fields


def _error_code(error: Any) -> int | None:
    """The code of a well-formed JSON-RPC error object, else None."""
    if not isinstance(error, dict):
        return None
    code = error.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    if not _I32_MIN <= code <= _I32_MAX:
        return None
    if not isinstance(error.get("message"), str):
        return None
    return code


def _status_for_error(code: int) -> int:
    if code == ErrorCode.INVALID_REQUEST:
        return HTTPStatus.BAD_REQUEST
    if code == ErrorCode.METHOD_NOT_FOUND:
        return HTTPStatus.NOT_FOUND
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _into_version(fields: dict[str, Any], version: JsonRpcVersion) -> dict[str, Any]:
    jsonrpc = fields.get("jsonrpc")
    result = fields.get("result")
    error = fields.get("error")
    present = {name: name in fields for name in ("result", "error")}

    if version in (JsonRpcVersion.BITCOIND, JsonRpcVersion.LIGHTWALLETD):
        jsonrpc = "1.0" if version is JsonRpcVersion.LIGHTWALLETD else None
        present = {"result": True, "error": True}
    elif version is JsonRpcVersion.TWO_POINT_ZERO:
        if jsonrpc != "2.0":
            raise RuntimeError("JSON-RPC 2.0 response is missing `\"jsonrpc\": \"2.0\"`")
        if not present["error"]:
            present["result"] = True
        elif present["result"]:
            raise RuntimeError("JSON-RPC 2.0 response has both a result and an error")

    out: dict[str, Any] = {}
    if jsonrpc is not None:
        out["jsonrpc"] = jsonrpc
    if present["result"]:
        out["result"] = result
    if present["error"]:
        out["error"] = error
    out["id"] = fields["id"]
    return out


def response_from_json_rpc_2(
    version: JsonRpcVersion, status: int, body: bytes
) -> tuple[int, bytes]:
    """Map a JSON-RPC 2.0 response back to the client's dialect.

    Returns the (possibly changed) HTTP status and body. Bodies that cannot be
    understood are returned unchanged.
    """
    try:
        fields = _parse_response(_loads(body))
    except ValueError:
        fields = None
    if fields is None:
        return status, body

    if version in (JsonRpcVersion.BITCOIND, JsonRpcVersion.LIGHTWALLETD):
        code = _error_code(fields.get("error"))
        if code is not None:
            status = _status_for_error(code)

    return status, _dumps(_into_version(fields, version)).encode("utf-8")


class HttpRequestMiddleware:
    """Wraps an HTTP JSON-RPC handler with compatibility fixes for legacy clients.

    The wrapped service is called as `service(headers, body)` and returns
    `(status, body)`; the middleware returns the same shape.
    """

    def __init__(self, service: Callable[[dict[str, Any], bytes], tuple[int, bytes]]) -> None:
        self.service = service

    def __call__(self, headers: MutableMapping[str, Any], body: bytes) -> tuple[int, bytes]:
        fixed_headers = dict(headers)
        insert_or_replace_content_type_header(fixed_headers)
        version, request_body = request_to_json_rpc_2(body)
        status, response_body = self.service(fixed_headers, request_body)
        return response_from_json_rpc_2(version, status, response_body)