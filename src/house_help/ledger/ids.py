"""Identifier generation for ledger records."""

from __future__ import annotations

import secrets
import time


def make_id(prefix: str = "id") -> str:
    """Return ``{prefix}_{hex millis}_{random hex}``."""
    millis = format(int(time.time() * 1000), "x")
    return f"{prefix}_{millis}_{secrets.token_hex(6)}"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)
