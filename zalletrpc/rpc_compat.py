"""Rewrites JSON-RPC call responses so their error codes match the legacy wallet."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from .errors import ErrorCode, LegacyCode

_log = logging.getLogger(__name__)

_NO_MORE_PARAMS = "No more params"


def _raw_data_text(error: dict[str, Any]) -> str | None:
    """The error's `data` as raw JSON text with surrounding quotes trimmed."""
    if "data" not in error:
        return None
    raw = json.dumps(error["data"], separators=(",", ":"), ensure_ascii=False)
    return raw.strip('"')


def fix_rpc_response(response: dict[str, Any]) -> dict[str, Any]:
    """Return `response`, with framework parameter errors mapped to legacy codes."""
    error = response.get("error")
    if error is None:
        return response

    code = error.get("code")
    if code == ErrorCode.METHOD_NOT_FOUND:
        return response
    if code != ErrorCode.INVALID_PARAMS:
        return response

    data = _raw_data_text(error)
    if data == _NO_MORE_PARAMS:
        return response

    message = data if data is not None else error.get("message", "")
    replacement = LegacyCode.INVALID_PARAMETER.with_message(message)
    _log.debug("Replacing RPC error: %s with %s", code, replacement.to_json())
    return {"jsonrpc": "2.0", "error": replacement.to_json(), "id": response.get("id")}


class FixRpcResponseMiddleware:
    """Wraps an RPC call handler and fixes the error codes of its responses."""

    def __init__(self, service: Callable[[Any], dict[str, Any]]) -> None:
        self.service = service

    def __call__(self, request: Any) -> dict[str, Any]:
        return fix_rpc_response(self.service(request))