"""Wallet-address syntax check and opaque identifier helpers."""

from __future__ import annotations

import hashlib
import re
from uuid import uuid4

WALLET_MIN_LENGTH = 25
WALLET_MAX_LENGTH = 34
_ALNUM_RE = re.compile(r"^[a-zA-Z0-9]+$")


def is_valid_wallet_address(address: object) -> bool:
    """Syntax check only: 25-34 alphanumerics starting with ``1``, ``3`` or ``bc1``.

    No checksum is verified.
    """
    if not isinstance(address, str):
        return False
    if not WALLET_MIN_LENGTH <= len(address) <= WALLET_MAX_LENGTH:
        return False
    if not (address[0] in {"1", "3"} or address.startswith("bc1")):
        return False
    return bool(_ALNUM_RE.fullmatch(address))


def generate_id() -> str:
    return str(uuid4())


def calculate_hash(value: str) -> str:
    if not value:
        return ""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
