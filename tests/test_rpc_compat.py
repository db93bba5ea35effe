import pytest

from zalletrpc.errors import ErrorCode, LegacyCode
from zalletrpc.rpc_compat import FixRpcResponseMiddleware, fix_rpc_response


def error_response(error, request_id=1):
    return {"jsonrpc": "2.0", "error": error, "id": request_id}


def test_success_passes_through():
    response = {"jsonrpc": "2.0", "result": {"a": 1}, "id": 7}
    assert fix_rpc_response(response) == {"jsonrpc": "2.0", "result": {"a": 1}, "id": 7}


def test_method_not_found_unchanged():
    response = error_response(
        {"code": int(ErrorCode.METHOD_NOT_FOUND), "message": "Method not found"}
    )
    assert fix_rpc_response(response) == response


def test_no_more_params_unchanged():
    response = error_response(
        {"code": int(ErrorCode.INVALID_PARAMS), "message": "Invalid params", "data": "No more params"}
    )
    assert fix_rpc_response(response) == response


def test_invalid_params_with_data_uses_data_as_message():
    response = error_response(
        {"code": int(ErrorCode.INVALID_PARAMS), "message": "Invalid params", "data": "bad thing"},
        request_id="abc",
    )
    fixed = fix_rpc_response(response)
    assert fixed["error"] == {"code": int(LegacyCode.INVALID_PARAMETER), "message": "bad thing"}
    assert fixed["id"] == "abc"
    assert fixed["jsonrpc"] == "2.0"


def test_invalid_params_without_data_uses_message():
    response = error_response({"code": int(ErrorCode.INVALID_PARAMS), "message": "Invalid params"})
    fixed = fix_rpc_response(response)
    assert fixed["error"]["code"] == LegacyCode.INVALID_PARAMETER
    assert fixed["error"]["message"] == "Invalid params"


def test_non_string_data_rendered_as_json():
    response = error_response(
        {"code": int(ErrorCode.INVALID_PARAMS), "message": "Invalid params", "data": [1, 2]}
    )
    fixed = fix_rpc_response(response)
    assert fixed["error"]["message"] == "[1,2]"


@pytest.mark.parametrize(
    "code", [int(ErrorCode.INTERNAL_ERROR), int(LegacyCode.WALLET), int(ErrorCode.PARSE_ERROR)]
)
def test_other_errors_unchanged(code):
    response = error_response({"code": code, "message": "whatever"})
    assert fix_rpc_response(response) == response


def test_middleware_passes_request_and_fixes_response():
    seen = []

    def service(request):
        seen.append(request)
        return error_response(
            {"code": int(ErrorCode.INVALID_PARAMS), "message": "Invalid params", "data": "oops"},
            request_id=request["id"],
        )

    middleware = FixRpcResponseMiddleware(service)
    request = {"method": "getinfo", "id": 3}
    fixed = middleware(request)
    assert seen == [request]
    assert fixed["error"] == {"code": int(LegacyCode.INVALID_PARAMETER), "message": "oops"}
    assert fixed["id"] == 3


def test_middleware_leaves_success_alone():
    middleware = FixRpcResponseMiddleware(lambda request: {"jsonrpc": "2.0", "result": None, "id": request})
    assert middleware(5) == {"jsonrpc": "2.0", "result": None, "id": 5}