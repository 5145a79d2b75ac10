"""Invariant tests for a toy share-based vault.

Run with:
    statefuzz run examples/vault_invariants.py --iterations 200 --seed 42

``BROKEN_FEE_VAULT_TEST`` is deliberately buggy (fees are taken without
being accounted for) and fails its conservation invariant.
"""

from __future__ import annotations

from statefuzz import Action, Invariant, InvariantTest, draw
from statefuzz.generators import integers, sampled_from
from statefuzz.invariants import check_share_accounting


class InsufficientBalance(Exception):
    pass


class Vault:
    """Minimal vault: users deposit assets and receive shares 1:1."""

    USERS = ("alice", "bob", "carol")

    def __init__(self, fee_bps: int = 0) -> None:
        self.fee_bps = fee_bps
        self.reset()

    def reset(self) -> None:
        self.total_assets = 0
        self.total_shares = 0
        self.deposited = 0
        self.withdrawn = 0
        self.shares = {user: 0 for user in self.USERS}

    def deposit(self, user: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("deposit amount must be positive")
        fee = amount * self.fee_bps // 10_000
        self.deposited += amount
        self.total_assets += amount - fee
        self.total_shares += amount
        self.shares[user] += amount

    def withdraw(self, user: str, shares: int) -> None:
        if shares > self.shares[user]:
            raise InsufficientBalance(f"{user} holds {self.shares[user]} shares, asked for {shares}")
        self.shares[user] -= shares
        self.total_shares -= shares
        self.total_assets -= shares
        self.withdrawn += shares


def build_vault_test(name: str, vault: Vault) -> InvariantTest:
    users = sampled_from(Vault.USERS)
    sizes = integers(1, 1_000)

    def deposit() -> None:
        vault.deposit(draw(users), draw(sizes))

    def withdraw() -> None:
        vault.withdraw(draw(users), draw(sizes))

    def conservation() -> bool:
        return vault.total_assets == vault.deposited - vault.withdrawn

    return InvariantTest(
        name=name,
        setup=vault.reset,
        actions=[Action("deposit", deposit), Action("withdraw", withdraw)],
        invariants=[
            Invariant("non-negative assets", lambda: vault.total_assets >= 0),
            Invariant(
                "share accounting",
                lambda: check_share_accounting(vault.total_shares, list(vault.shares.values())),
            ),
            Invariant("asset conservation", conservation),
        ],
    )


VAULT_TEST = build_vault_test("vault accounting", Vault())
BROKEN_FEE_VAULT_TEST = build_vault_test("fee vault accounting", Vault(fee_bps=30))

INVARIANT_TESTS = [VAULT_TEST, BROKEN_FEE_VAULT_TEST]
