"""The `z_gettotalbalance` RPC method."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .amounts import MAX_MONEY, value_from_zatoshis
from .errors import LegacyCode, RpcError

PARAM_MINCONF_DESC = "Only include notes in transactions confirmed at least this many times."
PARAM_INCLUDE_WATCHONLY_DESC = "Also include balance in watchonly addresses."


@dataclass(frozen=True)
class ConfirmationsPolicy:
    """How many confirmations a note needs before it counts towards the balance."""

    min_confirmations: int = 1
    allow_zero_conf_shielding: bool = False

    def __post_init__(self) -> None:
        if self.min_confirmations < 1:
            raise ValueError("min_confirmations must be at least 1")

    @classmethod
    def from_minconf(cls, minconf: int | None) -> ConfirmationsPolicy:
        """Build the policy for a `minconf` RPC parameter."""
        if minconf is None:
            return cls(1, False)
        if minconf == 0:
            return cls(1, True)
        return cls(minconf, False)


@dataclass(frozen=True)
class AccountBalance:
    """An account's spendable totals per value pool, in zatoshis."""

    unshielded: int = 0
    sapling: int = 0
    orchard: int = 0


@dataclass(frozen=True)
class TotalBalance:
    """The total value of funds stored in the wallet, as ZEC strings."""

    transparent: str
    private: str
    total: str

    def to_json(self) -> dict[str, str]:
        """The balance as a JSON object."""
        return {"transparent": self.transparent, "private": self.private, "total": self.total}


class _Wallet(Protocol):
    def get_wallet_summary(
        self, policy: ConfirmationsPolicy
    ) -> Mapping[Any, AccountBalance] | None: ...


def _checked_add(a: int | None, b: int) -> int | None:
    if a is None:
        return None
    total = a + b
    return total if total <= MAX_MONEY else None


def get_total_balance(
    wallet: _Wallet, minconf: int | None, include_watchonly: bool | None
) -> TotalBalance:
    """Sum the wallet's transparent and shielded balances across all accounts."""
    if include_watchonly is not True:
        raise LegacyCode.MISC.with_message(
            "include_watchonly argument must be set to true (for now)"
        )

    policy = ConfirmationsPolicy.from_minconf(minconf)

    try:
        summary = wallet.get_wallet_summary(policy)
    except RpcError:
        raise
    except Exception as e:
        raise LegacyCode.DATABASE.with_message(str(e)) from e

    transparent: int | None = 0
    private: int | None = 0
    if summary is not None:
        for balance in summary.values():
            transparent = _checked_add(transparent, balance.unshielded)
            private = _checked_add(_checked_add(private, balance.sapling), balance.orchard)

    total = None
    if transparent is not None and private is not None:
        total = _checked_add(transparent, private)
    if transparent is None or private is None or total is None:
        raise LegacyCode.WALLET.with_message("balance overflow")

    return TotalBalance(
        transparent=str(value_from_zatoshis(transparent)),
        private=str(value_from_zatoshis(private)),
        total=str(value_from_zatoshis(total)),
    )