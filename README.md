# zalletrpc

Building blocks for a `zcashd`-compatible JSON-RPC wallet interface. Every
module is plain Python with no third-party dependencies.

## Modules

### `zalletrpc.errors`

- `ErrorCode`: the JSON-RPC 2.0 framework codes (`PARSE_ERROR`,
  `INVALID_REQUEST`, `METHOD_NOT_FOUND`, `INVALID_PARAMS`, `INTERNAL_ERROR`),
  each with a standard `message`.
- `LegacyCode`: the Bitcoin-style codes used by the legacy wallet (`MISC`,
  `TYPE`, `INVALID_PARAMETER`, `DATABASE`, `WALLET`, `WALLET_UNLOCK_NEEDED`
  and so on). `LegacyCode.with_message(message)` builds an `RpcError`.
- `RpcError`: an exception that carries `code`, `message` and optional
  `data`. `to_json()` returns the JSON-RPC error object. If no message is
  given, the standard message for the code is used, or `"Server error"`.

### `zalletrpc.params`

Parsers for common RPC parameters. Invalid input raises `RpcError`.

- `parse_txid(txid_str)`: 64 hex digits in display order, returned as 32
  bytes in internal (reversed) order.
- `parse_account_uuid(account)`: an account UUID string, returned as
  `uuid.UUID`.
- `parse_diversifier_index(diversifier_index)`: a non-negative integer,
  returned as its 11-byte little-endian encoding.
- `parse_as_of_height(as_of_height)`: `None` and `-1` mean the chain tip;
  other negative values, `0` and values above 2^32-1 are rejected.
- `parse_minconf(minconf, default, as_of_height)`: falls back on `default`;
  `0` is rejected when `as_of_height` is given.

### `zalletrpc.amounts`

- `parse_fixed_point(val, decimals)`: parses a decimal string (with optional
  exponent) into a fixed-point integer, or returns `None`.
- `zatoshis_from_value(value)`: a JSON number or string in ZEC to zatoshis,
  accepting the same formats as `zcashd`.
- `value_from_zatoshis(value)` and `value_from_zat_balance(value)`: zatoshis
  to a `Decimal` in ZEC that prints with exactly eight decimal places.
- `COIN` and `MAX_MONEY` constants.

### `zalletrpc.payments`

- `PrivacyPolicy`: the policy lattice with `from_str`, `meet`,
  `is_compatible_with` and the `allow_*` checks. Members are named
  `FULL_PRIVACY`, `ALLOW_REVEALED_AMOUNTS`, `ALLOW_REVEALED_RECIPIENTS`,
  `ALLOW_REVEALED_SENDERS`, `ALLOW_FULLY_TRANSPARENT`,
  `ALLOW_LINKING_ACCOUNT_ADDRESSES` and `NO_PRIVACY`; their values are the
  RPC names such as `"AllowRevealedSenders"`.
- `Pool`, `ProposalStep` and `enforce_privacy_policy(steps, privacy_policy)`,
  which raises `IncompatiblePrivacyPolicy` (with an `IncompatibilityReason`)
  when a step reveals more than the policy allows.
  `IncompatiblePrivacyPolicy.to_rpc_error()` gives the `RpcError` to report.
- `parse_memo(memo_hex)`: hex memo to 512 bytes, zero padded.
- `SendResult.from_txids(txids)` and `SendResult.to_json()`; `txid` is only
  present when exactly one transaction was sent.

### `zalletrpc.total_balance`

- `get_total_balance(wallet, minconf, include_watchonly)`: the logic of
  `z_gettotalbalance`. `wallet` is any object with a
  `get_wallet_summary(policy)` method returning a mapping of account to
  `AccountBalance` (or `None`). Returns a `TotalBalance` whose `to_json()`
  gives the `transparent`, `private` and `total` strings.
- `ConfirmationsPolicy.from_minconf(minconf)` maps the `minconf` parameter
  to a policy.

### `zalletrpc.rpc_compat`

- `fix_rpc_response(response)`: maps framework `INVALID_PARAMS` errors on a
  decoded JSON-RPC response to `LegacyCode.INVALID_PARAMETER`, leaving
  "method not found" and `"No more params"` errors untouched.
- `FixRpcResponseMiddleware(service)`: wraps a callable that handles one
  call and applies `fix_rpc_response` to its result.

### `zalletrpc.http_compat`

- `insert_or_replace_content_type_header(headers)`: sets `content-type` to
  `application/json` when missing or `text/plain...`.
- `JsonRpcVersion`, `detect_version(request)`,
  `request_to_json_rpc_2(body)` and
  `response_from_json_rpc_2(version, status, body)`: translate
  Bitcoin-style and lightwalletd-style requests to JSON-RPC 2.0 and the
  responses back, setting HTTP 400/404/500 for legacy clients' errors.
- `HttpRequestMiddleware(service)`: wraps `service(headers, body) ->
  (status, body)` with all of the above.

## Examples

```python
from zalletrpc.amounts import zatoshis_from_value, value_from_zatoshis
from zalletrpc.payments import PrivacyPolicy

zatoshis_from_value("0.5")        # 50000000
str(value_from_zatoshis(1))       # "0.00000001"

policy = PrivacyPolicy.from_str("AllowRevealedSenders")
policy.meet(PrivacyPolicy.ALLOW_REVEALED_RECIPIENTS)
# PrivacyPolicy.ALLOW_FULLY_TRANSPARENT
```

Errors are raised as `RpcError`:

```python
from zalletrpc.errors import RpcError
from zalletrpc.params import parse_as_of_height

try:
    parse_as_of_height(0)
except RpcError as err:
    print(err.to_json())
    # {'code': -8, 'message': 'Can not perform the query as of the genesis block'}
```

## What it does not do

This package has no RPC server, no HTTP listener, no wallet database, no key
store and no connection to a chain indexer. The middlewares and
`get_total_balance` work on handlers and wallet objects that the caller
supplies; there is no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```