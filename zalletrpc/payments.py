"""Privacy policies and helpers shared by the payment-sending RPC methods."""

from __future__ import annotations

import enum
import string
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import LegacyCode, RpcError

MEMO_SIZE = 512
_HEX_DIGITS = frozenset(string.hexdigits)


class PrivacyPolicy(enum.Enum):
    """How much information leakage a transaction built by an RPC method may have.

    Policies form a lattice ordered by strictness; use `meet` to combine them and
    `is_compatible_with` to compare them.
    """

    FULL_PRIVACY = "FullPrivacy"
    ALLOW_REVEALED_AMOUNTS = "AllowRevealedAmounts"
    ALLOW_REVEALED_RECIPIENTS = "AllowRevealedRecipients"
    ALLOW_REVEALED_SENDERS = "AllowRevealedSenders"
    ALLOW_FULLY_TRANSPARENT = "AllowFullyTransparent"
    ALLOW_LINKING_ACCOUNT_ADDRESSES = "AllowLinkingAccountAddresses"
    NO_PRIVACY = "NoPrivacy"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, s: str) -> PrivacyPolicy | None:
        """The policy with the given name, or None if the name is unknown."""
        try:
            return cls(s)
        except ValueError:
            return None

    def meet(self, other: PrivacyPolicy) -> PrivacyPolicy:
        """The strictest policy allowing everything allowed by `self` and `other`."""
        P = PrivacyPolicy
        if self is P.FULL_PRIVACY:
            return other
        if self is P.ALLOW_REVEALED_AMOUNTS:
            return self if other is P.FULL_PRIVACY else other
        if self is P.ALLOW_REVEALED_RECIPIENTS:
            if other in (P.FULL_PRIVACY, P.ALLOW_REVEALED_AMOUNTS):
                return self
            if other is P.ALLOW_REVEALED_SENDERS:
                return P.ALLOW_FULLY_TRANSPARENT
            if other is P.ALLOW_LINKING_ACCOUNT_ADDRESSES:
                return P.NO_PRIVACY
            return other
        if self is P.ALLOW_REVEALED_SENDERS:
            if other in (P.FULL_PRIVACY, P.ALLOW_REVEALED_AMOUNTS):
                return self
            if other is P.ALLOW_REVEALED_RECIPIENTS:
                return P.ALLOW_FULLY_TRANSPARENT
            return other
        if self is P.ALLOW_FULLY_TRANSPARENT:
            if other in (
                P.FULL_PRIVACY,
                P.ALLOW_REVEALED_AMOUNTS,
                P.ALLOW_REVEALED_RECIPIENTS,
                P.ALLOW_REVEALED_SENDERS,
            ):
                return self
            if other is P.ALLOW_LINKING_ACCOUNT_ADDRESSES:
                return P.NO_PRIVACY
            return other
        if self is P.ALLOW_LINKING_ACCOUNT_ADDRESSES:
            if other in (P.FULL_PRIVACY, P.ALLOW_REVEALED_AMOUNTS, P.ALLOW_REVEALED_SENDERS):
                return self
            if other in (P.ALLOW_REVEALED_RECIPIENTS, P.ALLOW_FULLY_TRANSPARENT):
                return P.NO_PRIVACY
            return other
        return self  # NO_PRIVACY

    def is_compatible_with(self, other: PrivacyPolicy) -> bool:
        """True if this policy is identical to or less strict than `other`."""
        return self is self.meet(other)

    def allow_revealed_amounts(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.ALLOW_REVEALED_AMOUNTS)

    def allow_revealed_recipients(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.ALLOW_REVEALED_RECIPIENTS)

    def allow_revealed_senders(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.ALLOW_REVEALED_SENDERS)

    def allow_fully_transparent(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.ALLOW_FULLY_TRANSPARENT)

    def allow_linking_account_addresses(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.ALLOW_LINKING_ACCOUNT_ADDRESSES)

    def allow_no_privacy(self) -> bool:
        return self.is_compatible_with(PrivacyPolicy.NO_PRIVACY)


class Pool(enum.Enum):
    """A value pool."""

    TRANSPARENT = "transparent"
    SAPLING = "sapling"
    ORCHARD = "orchard"


class IncompatibilityReason(enum.Enum):
    """Why a proposal is not allowed by the requested privacy policy."""

    NO_PRIVACY = enum.auto()
    LINKING_ACCOUNT_ADDRESSES = enum.auto()
    FULLY_TRANSPARENT = enum.auto()
    TRANSPARENT_SENDER = enum.auto()
    TRANSPARENT_RECIPIENT = enum.auto()
    TRANSPARENT_CHANGE = enum.auto()
    TRANSPARENT_RECEIVER = enum.auto()
    REVEALING_SAPLING_AMOUNT = enum.auto()
    REVEALING_ORCHARD_AMOUNT = enum.auto()
    REVEALING_RECEIVER_AMOUNTS = enum.auto()


_R = IncompatibilityReason
_P = PrivacyPolicy

# Each reason: the problem description and the policy that would permit it.
_REASON_TEXT: dict[IncompatibilityReason, tuple[str, PrivacyPolicy]] = {
    _R.LINKING_ACCOUNT_ADDRESSES: (
        "Sending from multiple transparent addresses in one transaction would link them.",
        _P.ALLOW_LINKING_ACCOUNT_ADDRESSES,
    ),
    _R.FULLY_TRANSPARENT: (
        "This transaction would both spend transparent funds and have transparent recipients or change.",
        _P.ALLOW_FULLY_TRANSPARENT,
    ),
    _R.TRANSPARENT_SENDER: (
        "This transaction would spend transparent funds.",
        _P.ALLOW_REVEALED_SENDERS,
    ),
    _R.TRANSPARENT_RECIPIENT: (
        "This transaction would have transparent recipients.",
        _P.ALLOW_REVEALED_RECIPIENTS,
    ),
    _R.TRANSPARENT_CHANGE: (
        "This transaction would have transparent change.",
        _P.ALLOW_REVEALED_RECIPIENTS,
    ),
    _R.TRANSPARENT_RECEIVER: (
        "This transaction would send to a transparent receiver of a unified address.",
        _P.ALLOW_REVEALED_RECIPIENTS,
    ),
    _R.REVEALING_SAPLING_AMOUNT: (
        "Could not send to the Sapling shielded pool without spending non-Sapling funds, "
        "which would reveal transaction amounts.",
        _P.ALLOW_REVEALED_AMOUNTS,
    ),
    _R.REVEALING_ORCHARD_AMOUNT: (
        "Could not send to the Orchard shielded pool without spending non-Orchard funds, "
        "which would reveal transaction amounts.",
        _P.ALLOW_REVEALED_AMOUNTS,
    ),
    _R.REVEALING_RECEIVER_AMOUNTS: (
        "Could not send to a unified address without spending funds from a different pool, "
        "which would reveal transaction amounts.",
        _P.ALLOW_REVEALED_AMOUNTS,
    ),
}


def _weakening_hint(policy: PrivacyPolicy) -> str:
    return (
        "THIS MAY AFFECT YOUR PRIVACY. Resubmit with the `privacyPolicy` parameter set "
        f"to `{policy}` or weaker if you wish to allow this transaction to proceed anyway."
    )


class IncompatiblePrivacyPolicy(Exception):
    """Raised when a transaction proposal would violate the requested privacy policy."""

    def __init__(self, reason: IncompatibilityReason) -> None:
        self.reason = reason
        super().__init__(self._message())

    def _message(self) -> str:
        if self.reason is IncompatibilityReason.NO_PRIVACY:
            return (
                "This transaction would have no privacy, which is not enabled by default. "
                "THIS WILL AFFECT YOUR PRIVACY. Resubmit with the `privacyPolicy` parameter "
                "set to `NoPrivacy` if you wish to allow this transaction to proceed anyway."
            )
        problem, policy = _REASON_TEXT[self.reason]
        return f"{problem} {_weakening_hint(policy)}"

    def to_rpc_error(self) -> RpcError:
        """The JSON-RPC error reported to the caller."""
        return LegacyCode.INVALID_PARAMETER.with_message(self._message())


@dataclass(frozen=True)
class ProposalStep:
    """The parts of one step of a transaction proposal that affect privacy."""

    transparent_input_addresses: Sequence[str] = ()
    shielded_input_pools: Sequence[Pool] = ()
    payment_pools: Sequence[Pool] = ()
    change_pools: Sequence[Pool] = ()
    is_shielding: bool = False

    def spends_from(self, pool: Pool) -> bool:
        """True if this step has inputs from `pool`."""
        if pool is Pool.TRANSPARENT:
            return self.is_shielding or bool(self.transparent_input_addresses)
        return pool in self.shielded_input_pools

    def pays_to(self, pool: Pool) -> bool:
        return pool in self.payment_pools

    def has_change_in(self, pool: Pool) -> bool:
        return pool in self.change_pools


def _check_step(step: ProposalStep, policy: PrivacyPolicy) -> None:
    has_transparent_recipient = step.pays_to(Pool.TRANSPARENT)
    has_transparent_change = step.has_change_in(Pool.TRANSPARENT)
    has_sapling_recipient = step.pays_to(Pool.SAPLING) or step.has_change_in(Pool.SAPLING)
    has_orchard_recipient = step.pays_to(Pool.ORCHARD) or step.has_change_in(Pool.ORCHARD)
    transparent_out = has_transparent_recipient or has_transparent_change

    reason: IncompatibilityReason | None = None
    if step.spends_from(Pool.TRANSPARENT):
        if len(set(step.transparent_input_addresses)) > 1:
            if transparent_out:
                if not policy.allow_no_privacy():
                    reason = _R.NO_PRIVACY
            elif not policy.allow_linking_account_addresses():
                reason = _R.LINKING_ACCOUNT_ADDRESSES
        elif transparent_out:
            if not policy.allow_fully_transparent():
                reason = _R.FULLY_TRANSPARENT
        elif not policy.allow_revealed_senders():
            reason = _R.TRANSPARENT_SENDER
    elif has_transparent_recipient:
        if not policy.allow_revealed_recipients():
            reason = _R.TRANSPARENT_RECIPIENT
    elif has_transparent_change:
        if not policy.allow_revealed_recipients():
            reason = _R.TRANSPARENT_CHANGE
    elif step.spends_from(Pool.ORCHARD) and has_sapling_recipient:
        if not policy.allow_revealed_amounts():
            reason = _R.REVEALING_SAPLING_AMOUNT
    elif step.spends_from(Pool.SAPLING) and has_orchard_recipient:
        if not policy.allow_revealed_amounts():
            reason = _R.REVEALING_ORCHARD_AMOUNT

    if reason is not None:
        raise IncompatiblePrivacyPolicy(reason)


def enforce_privacy_policy(
    steps: Iterable[ProposalStep], privacy_policy: PrivacyPolicy
) -> None:
    """Raise IncompatiblePrivacyPolicy if any step reveals more than the policy allows."""
    for step in steps:
        _check_step(step, privacy_policy)


def parse_memo(memo_hex: str) -> bytes:
    """Decode a hex memo, padding it with zeros to the full memo size."""
    if len(memo_hex) % 2 or not set(memo_hex) <= _HEX_DIGITS:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Invalid parameter, expected memo data in hexadecimal format."
        )
    memo = bytes.fromhex(memo_hex)
    if len(memo) > MEMO_SIZE:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Invalid parameter, memo is longer than the maximum allowed 512 bytes."
        )
    return memo.ljust(MEMO_SIZE, b"\x00")


@dataclass(frozen=True)
class SendResult:
    """The result of sending a payment."""

    txids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def txid(self) -> str | None:
        """The single transaction ID, if the payment produced exactly one."""
        return self.txids[0] if len(self.txids) == 1 else None

    @classmethod
    def from_txids(cls, txids: Iterable[bytes]) -> SendResult:
        """Build a result from transaction IDs given as 32 bytes in internal order."""
        return cls(tuple(bytes(t)[::-1].hex() for t in txids))

    def to_json(self) -> dict[str, Any]:
        """The result as a JSON object; `txid` is omitted unless there is one txid."""
        obj: dict[str, Any] = {}
        if self.txid is not None:
            obj["txid"] = self.txid
        obj["txids"] = list(self.txids)
        return obj