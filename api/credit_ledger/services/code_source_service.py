"""Helpers for pulling code fragments and header metadata out of source files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

from credit_ledger.errors import InvalidArgument

METADATA_SCAN_LINES = 20
_METADATA_RE = re.compile(r"\*\s*@(\w+)\s*:\s*([^*]+)")

PathLike = Union[str, Path]


def _safe_read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def read_code_from_file(path: PathLike, start_line: int, end_line: int) -> Optional[str]:
    """Lines ``start_line..end_line`` (0-based, inclusive), each newline-terminated.

    Returns None for an unreadable file or an invalid range.
    """
    if start_line < 0 or end_line < start_line:
        return None
    text = _safe_read_text(Path(path))
    if text is None:
        return None
    selected = text.splitlines()[start_line : end_line + 1]
    return "".join(f"{line}\n" for line in selected)


def read_whole_file(path: PathLike) -> Optional[str]:
    return _safe_read_text(Path(path))


def parse_code_metadata(path: PathLike) -> dict[str, str]:
    """``* @key: value`` markers found in the first lines of a file header."""
    text = _safe_read_text(Path(path))
    if text is None:
        return {}
    metadata: dict[str, str] = {}
    for line in text.splitlines()[:METADATA_SCAN_LINES]:
        match = _METADATA_RE.search(line)
        if match:
            metadata[match.group(1)] = match.group(2).strip()
    return metadata


def normalize_value(value: float, lower: float, upper: float) -> float:
    if lower >= upper:
        raise InvalidArgument("Min must be less than max")
    clamped = max(lower, min(upper, value))
    return (clamped - lower) / (upper - lower)
