import json

import pytest

from conftest import LEGACY_DELEGATION, ZERO_ADDRESS
from mvx_governance.events import (
    DelegateVoteEvent,
    IgnoredEvent,
    VoteEvent,
    parse_event,
    parse_events,
)
from mvx_governance.models import VoteOption


def test_vote_record(make_vote):
    event = parse_event(make_vote("no", stake=1000, power=2000, address="erd1alice"))
    assert event == VoteEvent(VoteOption.NO, "erd1alice", 1000, 2000, 1)


def test_delegate_vote_record(make_delegate_vote):
    event = parse_event(make_delegate_vote("abstain", stake=5, power=7))
    assert isinstance(event, DelegateVoteEvent)
    assert event.option is VoteOption.ABSTAIN
    assert event.voter == ZERO_ADDRESS
    assert event.source_address == LEGACY_DELEGATION
    assert (event.stake, event.power) == (5, 7)


def test_delegate_voter_falls_back_to_raw_hex(make_delegate_vote):
    event = parse_event(make_delegate_vote(voter_hex="abcd"))
    assert event.voter == "abcd"


def test_unwraps_search_hits(make_vote):
    record = make_vote(power=3)
    assert parse_event({"_source": record}) == parse_event(record)


def test_unknown_identifier_is_ignored(make_vote):
    record = dict(make_vote(), identifier="proposal")
    event = parse_event(record)
    assert isinstance(event, IgnoredEvent)
    assert event.identifier == "proposal"


def test_missing_or_empty_topics_are_ignored(make_vote):
    assert parse_event(dict(make_vote(), topics=[])).reason == "no topics"
    record = make_vote()
    del record["topics"]
    assert parse_event(record).reason == "no topics"
    assert parse_event(dict(make_vote(), topics="796573")).reason == "no topics"


def test_non_mapping_records_are_ignored():
    assert parse_events([None, 3, "vote"]) == [IgnoredEvent("not a mapping")] * 3


def test_short_topics_decode_as_empty():
    event = parse_event({"identifier": "vote", "address": "erd1bob", "topics": ["01", "796573"]})
    assert event == VoteEvent(VoteOption.YES, "erd1bob", 0, 0, None)


def test_non_string_topics_decode_as_empty():
    event = parse_event({"identifier": "vote", "address": "erd1bob", "topics": ["01", None, 5, {}]})
    assert event.option is VoteOption.UNKNOWN
    assert event.power == 0


def test_missing_delegation_source():
    event = parse_event({"identifier": "delegateVote", "topics": ["01", "6e6f", "00" * 32, "01", "02"]})
    assert event.source_address is None
    assert event.power == 2


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_timestamp_is_dropped(literal):
    record = json.loads(
        '{"identifier": "vote", "address": "erd1bob", "topics": ["01", "796573", "01", "02"], '
        f'"timestamp": {literal}}}')
    event = parse_event(record)
    assert event == VoteEvent(VoteOption.YES, "erd1bob", 1, 2, None)


def test_float_timestamp_is_truncated(make_vote):
    record = make_vote()
    record["timestamp"] = 1700000000.9
    assert parse_event(record).timestamp == 1700000000
