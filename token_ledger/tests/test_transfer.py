from __future__ import annotations

import pytest

from token_ledger.errors import (AllowanceExceeded, AuthorizationError, ComplianceError,
                                 InsufficientBalance, InvalidAccount, InvalidAmount, Overflow,
                                 Paused, StateError)
from token_ledger.events import Approval, Burn, Mint, Transfer
from token_ledger.token import Token
from token_ledger.uint import U128_MAX

from .conftest import ALICE, BOB, CAROL, OWNER, hexa


# ---- mint ----


def test_mint_by_owner(token, sink):
    token.mint(OWNER, ALICE, 500)
    assert token.balance_of(ALICE) == 500
    assert sink.events == [Mint(to=ALICE, amount=500)]


def test_mint_by_non_owner_fails(token, sink):
    with pytest.raises(AuthorizationError):
        token.mint(ALICE, ALICE, 500)
    assert token.balance_of(ALICE) == 0
    assert sink.events == []


def test_mint_owner_check_runs_before_pause_check(token):
    token.pause(OWNER)
    with pytest.raises(AuthorizationError):
        token.mint(ALICE, ALICE, 1)
    with pytest.raises(Paused):
        token.mint(OWNER, ALICE, 1)


def test_mint_to_blacklisted_fails(token):
    token.blacklist(OWNER, ALICE)
    with pytest.raises(ComplianceError):
        token.mint(OWNER, ALICE, 1)


def test_mint_overflow(token):
    token.mint(OWNER, ALICE, U128_MAX)
    with pytest.raises(Overflow):
        token.mint(OWNER, ALICE, 1)
    assert token.balance_of(ALICE) == U128_MAX


# ---- transfer ----


def test_transfer_moves_balance(funded, sink):
    funded.transfer(ALICE, CAROL, 300)
    assert funded.balance_of(ALICE) == 700
    assert funded.balance_of(CAROL) == 300
    assert sink.events == [Transfer(sender=ALICE, to=CAROL, amount=300)]


def test_transfer_insufficient(funded, sink):
    with pytest.raises(InsufficientBalance):
        funded.transfer(BOB, CAROL, 51)
    assert funded.balance_of(BOB) == 50
    assert funded.balance_of(CAROL) == 0
    assert sink.events == []


def test_self_transfer_keeps_balance_and_emits(funded, sink):
    funded.transfer(ALICE, ALICE, 10)
    assert funded.balance_of(ALICE) == 1000
    assert sink.events == [Transfer(sender=ALICE, to=ALICE, amount=10)]


def test_zero_transfer_is_legal(funded, sink):
    funded.transfer(CAROL, ALICE, 0)
    assert funded.balance_of(ALICE) == 1000
    assert sink.events == [Transfer(sender=CAROL, to=ALICE, amount=0)]


def test_transfer_while_paused(funded):
    funded.pause(OWNER)
    with pytest.raises(Paused):
        funded.transfer(ALICE, BOB, 1)
    # reads are unaffected
    assert funded.balance_of(ALICE) == 1000
    assert funded.is_paused()
    funded.unpause(OWNER)
    funded.transfer(ALICE, BOB, 1)
    assert funded.balance_of(BOB) == 51


@pytest.mark.parametrize("who", ["sender", "recipient"])
def test_transfer_with_blacklisted_party(funded, who):
    funded.blacklist(OWNER, ALICE if who == "sender" else BOB)
    with pytest.raises(ComplianceError):
        funded.transfer(ALICE, BOB, 1)
    assert funded.balance_of(ALICE) == 1000
    assert funded.balance_of(BOB) == 50


# ---- burn ----


def test_burn(funded, sink):
    funded.burn(ALICE, 400)
    assert funded.balance_of(ALICE) == 600
    assert sink.events == [Burn(sender=ALICE, amount=400)]
    with pytest.raises(InsufficientBalance):
        funded.burn(ALICE, 601)


def test_burn_blacklisted_or_paused(funded):
    funded.blacklist(OWNER, BOB)
    with pytest.raises(ComplianceError):
        funded.burn(BOB, 1)
    funded.pause(OWNER)
    with pytest.raises(Paused):
        funded.burn(ALICE, 1)


# ---- approve / transfer_from ----


def test_approve_sets_absolute_value(funded, sink):
    funded.approve(ALICE, BOB, 100)
    funded.approve(ALICE, BOB, 40)
    assert funded.allowance(ALICE, BOB) == 40
    assert sink.events == [
        Approval(owner=ALICE, spender=BOB, amount=100),
        Approval(owner=ALICE, spender=BOB, amount=40),
    ]


def test_approve_guards(funded):
    funded.blacklist(OWNER, ALICE)
    with pytest.raises(ComplianceError):
        funded.approve(ALICE, BOB, 1)
    funded.pause(OWNER)
    with pytest.raises(Paused):
        funded.approve(BOB, ALICE, 1)


def test_transfer_from_spends_allowance(funded, sink):
    funded.approve(ALICE, BOB, 100)
    funded.transfer_from(BOB, ALICE, CAROL, 60)
    assert funded.allowance(ALICE, BOB) == 40
    assert funded.balance_of(ALICE) == 940
    assert funded.balance_of(CAROL) == 60
    assert funded.balance_of(BOB) == 50
    assert sink.events[-1] == Transfer(sender=ALICE, to=CAROL, amount=60)


def test_transfer_from_beyond_allowance(funded):
    funded.approve(ALICE, BOB, 10)
    with pytest.raises(AllowanceExceeded):
        funded.transfer_from(BOB, ALICE, CAROL, 11)
    assert funded.allowance(ALICE, BOB) == 10
    assert funded.balance_of(ALICE) == 1000


def test_transfer_from_requires_allowance_direction(funded):
    funded.approve(ALICE, BOB, 10)
    with pytest.raises(AllowanceExceeded):
        funded.transfer_from(ALICE, BOB, CAROL, 1)


def test_transfer_from_blacklisted_spender(funded):
    funded.approve(ALICE, BOB, 10)
    funded.blacklist(OWNER, BOB)
    with pytest.raises(ComplianceError):
        funded.transfer_from(BOB, ALICE, CAROL, 1)
    assert funded.allowance(ALICE, BOB) == 10


def test_transfer_from_blacklisted_recipient_keeps_allowance(funded):
    funded.approve(ALICE, BOB, 10)
    funded.blacklist(OWNER, CAROL)
    with pytest.raises(ComplianceError):
        funded.transfer_from(BOB, ALICE, CAROL, 1)
    assert funded.allowance(ALICE, BOB) == 10


def test_transfer_from_while_paused(funded):
    funded.approve(ALICE, BOB, 10)
    funded.pause(OWNER)
    with pytest.raises(Paused) as ei:
        funded.transfer_from(BOB, ALICE, CAROL, 1)
    assert isinstance(ei.value, StateError)
    assert funded.allowance(ALICE, BOB) == 10
    assert funded.balance_of(ALICE) == 1000


def test_transfer_from_blacklisted_source_keeps_allowance(funded, sink):
    funded.approve(ALICE, BOB, 10)
    funded.blacklist(OWNER, ALICE)
    with pytest.raises(ComplianceError) as ei:
        funded.transfer_from(BOB, ALICE, CAROL, 1)
    assert ei.value.data == {"account": hexa(ALICE)}
    assert funded.allowance(ALICE, BOB) == 10
    assert funded.balance_of(ALICE) == 1000
    assert funded.balance_of(CAROL) == 0
    assert sink.events == [Approval(owner=ALICE, spender=BOB, amount=10)]


# ---- input validation ----


@pytest.mark.parametrize("amount", [-1, U128_MAX + 1, True, 1.5, "10"])
def test_invalid_amounts(funded, amount):
    with pytest.raises(InvalidAmount):
        funded.transfer(ALICE, BOB, amount)


@pytest.mark.parametrize("account", [b"", "", "0xzz", "abc", 42])
def test_invalid_accounts(funded, account):
    with pytest.raises(InvalidAccount):
        funded.transfer(ALICE, account, 1)


def test_hex_accounts_are_normalized(funded):
    assert funded.balance_of(hexa(ALICE)) == 1000
    assert funded.balance_of(ALICE.hex()) == 1000
    funded.transfer(hexa(ALICE), hexa(CAROL), 5)
    assert funded.balance_of(CAROL) == 5


def test_fixed_account_size(backend, sink):
    tok = Token.deploy(OWNER, backend, sink, account_size=20)
    with pytest.raises(InvalidAccount):
        tok.balance_of(b"\x01")
    assert tok.balance_of(ALICE) == 0


def test_account_size_from_environment(monkeypatch, backend, sink):
    from token_ledger.config import load_config

    monkeypatch.setenv("TOKEN_LEDGER_ADDRESS_BYTES", "32")
    load_config.cache_clear()
    with pytest.raises(InvalidAccount):
        Token.deploy(OWNER, backend, sink)
    tok = Token.deploy(b"\x01" * 32, backend, sink)
    assert tok.account_size == 32
