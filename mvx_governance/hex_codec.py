"""
lenient hex decoding for event topics.

none of the functions here raise: malformed input degrades to an empty
byte string, zero, or an empty string so a single bad topic never aborts
an aggregation run.
"""

from __future__ import annotations

import re
from typing import Optional

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def _normalize(hex_str: Optional[str]) -> Optional[str]:
    """return the even-length hex string, or None when it is not plain hex"""
    if not isinstance(hex_str, str):
        return "" if hex_str is None else None
    # fullmatch keeps int()/fromhex leniency (0x, _, spaces) out
    if not _HEX_RE.fullmatch(hex_str):
        return None
    if len(hex_str) % 2 == 1:
        return "0" + hex_str
    return hex_str


def hex_to_bytes(hex_str: Optional[str]) -> bytes:
    """decode hex into bytes; odd length gets a leading zero nibble"""
    norm = _normalize(hex_str)
    if not norm:
        return b""
    return bytes.fromhex(norm)


def hex_to_int(hex_str: Optional[str]) -> int:
    """decode hex into an unsigned integer; empty or invalid input is 0"""
    norm = _normalize(hex_str)
    if not norm:
        return 0
    return int(norm, 16)


def hex_to_ascii(hex_str: Optional[str]) -> str:
    """decode a short hex literal to text, dropping trailing nul bytes"""
    # latin-1 maps each byte to one code point, like String.fromCharCode
    return hex_to_bytes(hex_str).decode("latin-1").rstrip("\x00")


__all__ = ["hex_to_bytes", "hex_to_int", "hex_to_ascii"]
