"""
bech32 encoding of 32-byte account identifiers into erd1... addresses.

Usage:
    from mvx_governance.bech32 import decode_address

    decode_address("00" * 32)
    # 'erd1qqqq...6gq4hu'
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from mvx_governance.hex_codec import hex_to_bytes

logger = logging.getLogger(__name__)

ADDRESS_HRP = "erd"
ADDRESS_LENGTH = 32
CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
CHECKSUM_LENGTH = 6


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool = True) -> Optional[List[int]]:
    """
    Regroup a sequence of from_bits-wide values into to_bits-wide values.

    Args:
        data: Input values, each expected to fit in from_bits
        from_bits: Width of each input value
        to_bits: Width of each output group
        pad: Zero-fill and emit a final partial group

    Returns:
        The regrouped values, or None when an input value is out of range
        or, without padding, a non-zero remainder is left over
    """
    acc = 0
    bits = 0
    ret: List[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            return None
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        return None
    return ret


def polymod(values: Iterable[int]) -> int:
    """bch checksum over gf(2) with a 30-bit register seeded to 1"""
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, generator in enumerate(GENERATORS):
            if (top >> i) & 1:
                chk ^= generator
    return chk


def hrp_expand(hrp: str) -> List[int]:
    """high bits of each hrp char, a zero separator, then the low bits"""
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def create_checksum(hrp: str, data: Sequence[int]) -> List[int]:
    values = hrp_expand(hrp) + list(data) + [0] * CHECKSUM_LENGTH
    mod = polymod(values) ^ 1
    return [(mod >> (5 * (CHECKSUM_LENGTH - 1 - p))) & 31 for p in range(CHECKSUM_LENGTH)]


def encode(hrp: str, data: Sequence[int]) -> str:
    """encode 5-bit symbols as hrp + '1' + data and checksum characters"""
    combined = list(data) + create_checksum(hrp, data)
    return hrp + "1" + "".join(CHARSET[d] for d in combined)


def decode_address(hex32: Optional[str], hrp: str = ADDRESS_HRP) -> Optional[str]:
    """
    Encode a hex account identifier as a bech32 address.

    Returns None unless the input decodes to exactly 32 bytes; callers show
    the raw hex instead.
    """
    raw = hex_to_bytes(hex32)
    if len(raw) != ADDRESS_LENGTH:
        logger.debug(
            f"Not a {ADDRESS_LENGTH}-byte identifier ({len(raw)} bytes): {hex32!r}")
        return None
    five = convert_bits(raw, 8, 5, pad=True)
    if five is None:
        return None
    return encode(hrp, five)


__all__ = [
    "ADDRESS_HRP",
    "CHARSET",
    "convert_bits",
    "polymod",
    "hrp_expand",
    "create_checksum",
    "encode",
    "decode_address",
]
