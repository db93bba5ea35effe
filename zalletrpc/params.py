"""Parsers for parameters shared by many wallet RPC methods."""

from __future__ import annotations

import string
import uuid
from typing import Any

from .errors import ErrorCode, LegacyCode, RpcError

_U32_MAX = 0xFFFF_FFFF
_DIVERSIFIER_INDEX_BYTES = 11
_HEX_DIGITS = frozenset(string.hexdigits)


def parse_txid(txid_str: str) -> bytes:
    """Parse a transaction ID given in display (byte-reversed) hex order.

    Returns the 32 bytes of the ID in internal order.
    """
    if len(txid_str) != 64 or not set(txid_str) <= _HEX_DIGITS:
        raise LegacyCode.INVALID_PARAMETER.with_message("invalid txid")
    return bytes.fromhex(txid_str)[::-1]


def parse_account_uuid(account: Any) -> uuid.UUID:
    """Parse the `account` parameter, which must be an account UUID string."""
    if not isinstance(account, str):
        raise RpcError(ErrorCode.INVALID_PARAMS)
    try:
        return uuid.UUID(account)
    except ValueError:
        raise RpcError(ErrorCode.INVALID_PARAMS) from None


def parse_diversifier_index(diversifier_index: int) -> bytes:
    """Parse a diversifier index into its 11-byte little-endian encoding."""
    if isinstance(diversifier_index, bool) or not isinstance(diversifier_index, int):
        raise RpcError(ErrorCode.INVALID_PARAMS)
    if diversifier_index < 0:
        raise RpcError(ErrorCode.INVALID_PARAMS)
    try:
        return diversifier_index.to_bytes(_DIVERSIFIER_INDEX_BYTES, "little")
    except OverflowError:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "diversifier index is too large."
        ) from None


def parse_as_of_height(as_of_height: int | None) -> int | None:
    """Parse the `asOfHeight` parameter; `None` and -1 both mean "chain tip"."""
    if as_of_height is None or as_of_height == -1:
        return None
    if as_of_height < 0:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Can not perform the query as of a negative block height"
        )
    if as_of_height == 0:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Can not perform the query as of the genesis block"
        )
    if as_of_height > _U32_MAX:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "`as_of_height` parameter out of range"
        )
    return as_of_height


def parse_minconf(minconf: int | None, default: int, as_of_height: int | None) -> int:
    """Parse the `minconf` parameter, falling back on `default`."""
    if minconf is None:
        return default
    if minconf == 0 and as_of_height is not None:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Require a minimum of 1 confirmation when `asOfHeight` is provided"
        )
    return minconf