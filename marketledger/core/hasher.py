"""Canonical hashing helpers for event payloads and the event journal."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_payload_hash(fields: dict[str, Any]) -> str:
    """SHA-256 of an event's content fields."""
    return sha256_hex(canonical_json_bytes(fields))


def compute_record_hash(record: dict[str, Any]) -> str:
    """SHA-256 of a journal record, excluding the ``event_hash`` field itself.

    This is the seal that makes each record tamper-evident.
    """
    d = {k: v for k, v in record.items() if k != "event_hash"}
    return sha256_hex(canonical_json_bytes(d))
