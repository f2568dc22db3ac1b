"""
Validating parse step from raw event records to typed vote events.

Raw records come from the events index either bare
({"identifier", "address", "topics", "timestamp"}) or wrapped in an
Elasticsearch hit ({"_source": {...}}). Topic layouts are positional:

    vote:          [proposal, option, user_stake, vote_power]
    delegateVote:  [proposal, option, voter(32 bytes), user_stake, vote_power]

Records that cannot be a vote (not a mapping, no topics, other identifier)
parse to IgnoredEvent. A vote record with too few topics keeps its type;
the missing positions decode like empty hex (zero amounts, UNKNOWN option).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from mvx_governance.bech32 import decode_address
from mvx_governance.hex_codec import hex_to_int
from mvx_governance.models import VoteOption
from mvx_governance.vote_options import decode_option

VOTE = "vote"
DELEGATE_VOTE = "delegateVote"
VOTE_IDENTIFIERS = (VOTE, DELEGATE_VOTE)


@dataclass(frozen=True)
class VoteEvent:
    """direct vote; the voter is the emitting address"""
    option: VoteOption
    voter: str
    stake: int
    power: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class DelegateVoteEvent:
    """vote cast through a delegation contract on behalf of a voter"""
    option: VoteOption
    voter: str
    stake: int
    power: int
    source_address: Optional[str] = None
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class IgnoredEvent:
    reason: str
    identifier: Optional[str] = None


ParsedEvent = Union[VoteEvent, DelegateVoteEvent, IgnoredEvent]


def _topic(topics: Sequence[Any], index: int) -> str:
    if index >= len(topics):
        return ""
    value = topics[index]
    return value if isinstance(value, str) else ""


def _timestamp(source: Mapping[str, Any]) -> Optional[int]:
    value = source.get("timestamp")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def unwrap_record(record: Any) -> Optional[Mapping[str, Any]]:
    """return the event body of a bare record or an elasticsearch hit"""
    if not isinstance(record, Mapping):
        return None
    source = record.get("_source")
    if isinstance(source, Mapping):
        return source
    return record


def parse_event(record: Any) -> ParsedEvent:
    """parse one raw record; never raises"""
    source = unwrap_record(record)
    if source is None:
        return IgnoredEvent("not a mapping")

    identifier = source.get("identifier")
    if identifier not in VOTE_IDENTIFIERS:
        return IgnoredEvent("unsupported identifier", identifier if isinstance(identifier, str) else None)

    topics = source.get("topics")
    if not isinstance(topics, (list, tuple)) or not topics:
        return IgnoredEvent("no topics", identifier)

    address = source.get("address")
    address = address if isinstance(address, str) else None
    option = decode_option(_topic(topics, 1))

    if identifier == VOTE:
        return VoteEvent(
            option=option,
            voter=address or "",
            stake=hex_to_int(_topic(topics, 2)),
            power=hex_to_int(_topic(topics, 3)),
            timestamp=_timestamp(source),
        )

    voter_hex = _topic(topics, 2)
    return DelegateVoteEvent(
        option=option,
        voter=decode_address(voter_hex) or voter_hex,
        stake=hex_to_int(_topic(topics, 3)),
        power=hex_to_int(_topic(topics, 4)),
        source_address=address,
        timestamp=_timestamp(source),
    )


def parse_events(records: Iterable[Any]) -> List[ParsedEvent]:
    return [parse_event(r) for r in records]


__all__ = [
    "VOTE",
    "DELEGATE_VOTE",
    "VoteEvent",
    "DelegateVoteEvent",
    "IgnoredEvent",
    "ParsedEvent",
    "unwrap_record",
    "parse_event",
    "parse_events",
]
