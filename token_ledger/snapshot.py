"""
token_ledger.snapshot

Canonical CBOR state files for a token instance.

A snapshot is the full key/value content of a backend, encoded as

    {"format": "token-ledger/1", "entries": [[key, value], ...]}

with entries sorted by key and the map encoded canonically, so two backends
with the same content always produce byte-identical snapshots. The SHA3-256 of
that encoding is the *state root*; tests and the CLI use it to compare states.

Public API
----------
- export_entries(backend) -> list[(bytes, bytes)]
- dumps(backend) -> bytes
- loads(data: bytes) -> MemoryBackend
- save(path, backend) -> None       (write to temp file, then atomic replace)
- load(path) -> MemoryBackend
- state_root(backend) -> bytes
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from typing import Any, Iterable, List, Tuple, Union

import cbor2

from .storage import MemoryBackend

log = logging.getLogger(__name__)

FORMAT = "token-ledger/1"

PathLike = Union[str, "os.PathLike[str]"]


class SnapshotError(Exception):
    """Malformed or unsupported snapshot payload."""


def export_entries(backend: Any) -> List[Tuple[bytes, bytes]]:
    """
    Sorted (key, value) pairs of `backend`.

    The backend must expose ``items()`` (MemoryBackend does). A Journal is not
    accepted: commit it first and export its base.
    """
    items = getattr(backend, "items", None)
    if items is None:
        raise SnapshotError(f"backend {type(backend).__name__} cannot be enumerated")
    return sorted((bytes(k), bytes(v)) for k, v in items())


def _encode(entries: Iterable[Tuple[bytes, bytes]]) -> bytes:
    doc = {"format": FORMAT, "entries": [[k, v] for k, v in entries]}
    return cbor2.dumps(doc, canonical=True)


def dumps(backend: Any) -> bytes:
    return _encode(export_entries(backend))


def loads(data: bytes) -> MemoryBackend:
    try:
        doc = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise SnapshotError(f"cannot decode snapshot: {e}") from e

    if not isinstance(doc, dict):
        raise SnapshotError("snapshot must be a map")
    fmt = doc.get("format")
    if fmt != FORMAT:
        raise SnapshotError(f"unsupported snapshot format: {fmt!r}")
    entries = doc.get("entries")
    if not isinstance(entries, list):
        raise SnapshotError("snapshot 'entries' must be an array")

    store = {}
    for i, pair in enumerate(entries):
        if (
            not isinstance(pair, list)
            or len(pair) != 2
            or not isinstance(pair[0], bytes)
            or not isinstance(pair[1], bytes)
            or not pair[0]
        ):
            raise SnapshotError(f"entry {i} must be [bstr key, bstr value]")
        store[pair[0]] = pair[1]
    return MemoryBackend(store)


def save(path: PathLike, backend: Any) -> None:
    """Write a snapshot next to `path` and atomically move it into place."""
    path = os.fspath(path)
    data = dumps(backend)
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".snapshot-", dir=parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    log.debug("snapshot saved path=%s bytes=%d", path, len(data))


def load(path: PathLike) -> MemoryBackend:
    path = os.fspath(path)
    with open(path, "rb") as fh:
        data = fh.read()
    backend = loads(data)
    log.debug("snapshot loaded path=%s entries=%d", path, len(backend))
    return backend


def state_root(backend: Any) -> bytes:
    """SHA3-256 over the canonical snapshot encoding."""
    return hashlib.sha3_256(dumps(backend)).digest()


__all__ = [
    "FORMAT",
    "SnapshotError",
    "export_entries",
    "dumps",
    "loads",
    "save",
    "load",
    "state_root",
]
