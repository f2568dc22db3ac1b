import pytest

LEGACY_DELEGATION = "erd1qqqqqqqqqqqqqpgqxwakt2g7u9atsnr03gqcgmhcv38pt7mkd94q6shuwt"
ZERO_ADDRESS = "erd1" + "q" * 52 + "6gq4hu"


def text_hex(text):
    return text.encode("latin-1").hex()


def amount_hex(amount):
    return format(amount, "x")


@pytest.fixture
def make_vote():
    def _make(option="yes", stake=0, power=0, address="erd1directvoter", timestamp=1):
        return {
            "identifier": "vote",
            "address": address,
            "topics": ["01", text_hex(option), amount_hex(stake), amount_hex(power)],
            "timestamp": timestamp,
        }
    return _make


@pytest.fixture
def make_delegate_vote():
    def _make(option="yes", voter_hex="00" * 32, stake=0, power=0, source=LEGACY_DELEGATION, timestamp=1):
        return {
            "identifier": "delegateVote",
            "address": source,
            "topics": ["01", text_hex(option), voter_hex, amount_hex(stake), amount_hex(power)],
            "timestamp": timestamp,
        }
    return _make
