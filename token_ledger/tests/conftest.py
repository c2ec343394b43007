from __future__ import annotations

import pytest

from token_ledger.config import load_config
from token_ledger.events import InMemoryEventSink
from token_ledger.host import TokenHost
from token_ledger.storage import MemoryBackend
from token_ledger.token import Token

OWNER = b"\x01" * 20
ALICE = b"\xaa" * 20
BOB = b"\xbb" * 20
CAROL = b"\xcc" * 20


def hexa(b: bytes) -> str:
    return "0x" + b.hex()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for name in (
        "TOKEN_LEDGER_STATE",
        "TOKEN_LEDGER_EVENTS",
        "TOKEN_LEDGER_LOG_LEVEL",
        "TOKEN_LEDGER_ADDRESS_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


class FailingBackend(MemoryBackend):
    """MemoryBackend whose writes to one key raise OSError."""

    def __init__(self, initial=None, *, fail_on: bytes) -> None:
        super().__init__(initial)
        self.fail_on = fail_on
        self.armed = True

    def set(self, key: bytes, value: bytes) -> None:
        if self.armed and key == self.fail_on:
            raise OSError("simulated write failure")
        super().set(key, value)


@pytest.fixture
def failing_backend():
    return FailingBackend


@pytest.fixture
def sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def token(backend, sink) -> Token:
    return Token.deploy(OWNER, backend, sink, account_size=0)


@pytest.fixture
def funded(token) -> Token:
    """ALICE holds 1000, BOB holds 50."""
    token.mint(OWNER, ALICE, 1000)
    token.mint(OWNER, BOB, 50)
    token.sink.close()
    return token


@pytest.fixture
def host(backend, sink) -> TokenHost:
    return TokenHost.deploy(OWNER, backend, sink, account_size=0)


@pytest.fixture
def funded_host(host) -> TokenHost:
    """ALICE holds 1000, BOB holds 50; the event sink is cleared."""
    assert host.call(OWNER, "mint", ALICE, 1000).ok
    assert host.call(OWNER, "mint", BOB, 50).ok
    host.sink.close()
    return host
