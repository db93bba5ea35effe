"""JSON-RPC error codes and the error object raised by RPC handlers."""

from __future__ import annotations

import enum
from typing import Any


class ErrorCode(enum.IntEnum):
    """Error codes defined by the JSON-RPC 2.0 specification."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    @property
    def message(self) -> str:
        """The standard message for this code."""
        return _STANDARD_MESSAGES[self]


_STANDARD_MESSAGES = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}

_SERVER_ERROR_MESSAGE = "Server error"


class LegacyCode(enum.IntEnum):
    """Bitcoin-style RPC error codes, as used by the legacy full-node wallet."""

    # General application defined errors
    MISC = -1
    FORBIDDEN_BY_SAFE_MODE = -2
    TYPE = -3
    INVALID_ADDRESS_OR_KEY = -5
    OUT_OF_MEMORY = -7
    INVALID_PARAMETER = -8
    DATABASE = -20
    DESERIALIZATION = -22
    VERIFY = -25
    VERIFY_REJECTED = -26
    VERIFY_ALREADY_IN_CHAIN = -27
    IN_WARMUP = -28

    # P2P client errors
    CLIENT_NOT_CONNECTED = -9
    CLIENT_IN_INITIAL_DOWNLOAD = -10
    CLIENT_NODE_ALREADY_ADDED = -23
    CLIENT_NODE_NOT_ADDED = -24
    CLIENT_NODE_NOT_CONNECTED = -29
    CLIENT_INVALID_IP_OR_SUBNET = -30

    # Wallet errors
    WALLET = -4
    WALLET_INSUFFICIENT_FUNDS = -6
    WALLET_ACCOUNTS_UNSUPPORTED = -11
    WALLET_KEYPOOL_RAN_OUT = -12
    WALLET_UNLOCK_NEEDED = -13
    WALLET_PASSPHRASE_INCORRECT = -14
    WALLET_WRONG_ENC_STATE = -15
    WALLET_ENCRYPTION_FAILED = -16
    WALLET_ALREADY_UNLOCKED = -17
    WALLET_BACKUP_REQUIRED = -18

    @classmethod
    def default(cls) -> LegacyCode:
        """The code used when nothing more specific applies."""
        return cls.MISC

    def with_message(self, message: str) -> RpcError:
        """Build an error object with this code and the given message."""
        return RpcError(self, str(message))


class RpcError(Exception):
    """A JSON-RPC error object that can be raised and serialised."""

    def __init__(self, code: int, message: str | None = None, data: Any = None) -> None:
        if message is None:
            try:
                message = ErrorCode(int(code)).message
            except ValueError:
                message = _SERVER_ERROR_MESSAGE
        super().__init__(message)
        self.code = int(code)
        self.message = message
        self.data = data

    def to_json(self) -> dict[str, Any]:
        """The error as a JSON-RPC error object."""
        obj: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            obj["data"] = self.data
        return obj

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RpcError):
            return NotImplemented
        return (self.code, self.message, self.data) == (other.code, other.message, other.data)

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r}, data={self.data!r})"

    def __str__(self) -> str:
        return self.message