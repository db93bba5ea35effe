"""JSON-RPC helpers for a zcashd-compatible Zcash wallet: error codes, parameter and amount parsing, privacy policies, balance totals and compatibility fixes."""

__version__ = "0.1.0"

__all__ = [
    "amounts",
    "errors",
    "http_compat",
    "params",
    "payments",
    "rpc_compat",
    "total_balance",
]