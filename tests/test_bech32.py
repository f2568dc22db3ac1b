import pytest

from conftest import ZERO_ADDRESS
from mvx_governance.bech32 import (
    CHARSET,
    convert_bits,
    create_checksum,
    decode_address,
    encode,
    hrp_expand,
    polymod,
)


def test_zero_identifier_golden_vector():
    assert decode_address("00" * 32) == ZERO_ADDRESS


def test_address_shape():
    address = decode_address("ff" * 32)
    assert address.startswith("erd1")
    assert len(address) == 62
    assert set(address[4:]) <= set(CHARSET)


@pytest.mark.parametrize("value", ["00" * 31, "00" * 33, "", None, "zz" * 32, "0x" + "00" * 31])
def test_wrong_length_or_unparsable_fails(value):
    assert decode_address(value) is None


def test_checksum_sensitive_to_every_bit():
    zero_checksum = decode_address("00" * 32)[-6:]
    for bit in range(256):
        raw = bytearray(32)
        raw[bit // 8] ^= 0x80 >> (bit % 8)
        address = decode_address(raw.hex())
        assert address[-6:] != zero_checksum, f"bit {bit} did not change the checksum"


def test_checksum_verifies():
    data = convert_bits(bytes(range(32)), 8, 5)
    checksum = create_checksum("erd", data)
    assert len(checksum) == 6
    assert polymod(hrp_expand("erd") + data + checksum) == 1


def test_encode_layout():
    data = [0, 1, 2, 31]
    out = encode("erd", data)
    assert out.startswith("erd1qpzl")
    assert len(out) == len("erd1") + len(data) + 6


def test_hrp_expand():
    assert hrp_expand("erd") == [3, 3, 3, 0, 5, 18, 4]


def test_polymod_seed():
    assert polymod([]) == 1


def test_convert_bits_pads_last_group():
    assert convert_bits([255], 8, 5) == [31, 28]
    assert len(convert_bits(bytes(32), 8, 5)) == 52


def test_convert_bits_rejects_wide_values():
    assert convert_bits([256], 8, 5) is None
    assert convert_bits([-1], 8, 5) is None


def test_convert_bits_without_padding():
    assert convert_bits([31, 28], 5, 8, pad=False) == [255]
    assert convert_bits([31, 29], 5, 8, pad=False) is None


def test_convert_bits_long_input_matches_short_chunks():
    data = bytes(range(256)) * 4
    assert convert_bits(data, 8, 5) == [v for i in range(0, len(data), 5) for v in convert_bits(data[i:i + 5], 8, 5)]
