import pytest

from conftest import text_hex
from mvx_governance.models import VoteOption
from mvx_governance.vote_options import decode_option


@pytest.mark.parametrize("literal,expected", [
    ("yes", VoteOption.YES),
    ("YES", VoteOption.YES),
    ("no", VoteOption.NO),
    ("Abstain", VoteOption.ABSTAIN),
    ("veto", VoteOption.VETO),
    ("Veto", VoteOption.VETO),
    ("NCV", VoteOption.VETO),
    ("veto_power", VoteOption.VETO),
    ("garbage", VoteOption.UNKNOWN),
    ("", VoteOption.UNKNOWN),
])
def test_decode_option(literal, expected):
    assert decode_option(text_hex(literal)) is expected


def test_trailing_nul_bytes_are_ignored():
    assert decode_option(text_hex("no") + "0000") is VoteOption.NO


@pytest.mark.parametrize("value", [None, "zz", "0x796573"])
def test_malformed_option_is_unknown(value):
    assert decode_option(value) is VoteOption.UNKNOWN
