"""data model for vote tallies"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class VoteOption(Enum):
    """Canonical vote options; values match the on-chain literals."""
    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"
    VETO = "veto"
    UNKNOWN = "unknown"


@dataclass
class VoterAccumulator:
    """running totals for one voter within one option"""
    address: str
    stake: int = 0
    power: int = 0
    count: int = 0

    def add(self, stake: int, power: int) -> None:
        if stake < 0 or power < 0:
            raise ValueError("stake and power must be non-negative")
        self.stake += stake
        self.power += power
        self.count += 1


@dataclass
class CategoryTotals:
    option: VoteOption
    count: int = 0
    power: int = 0


@dataclass
class DelegationSourceTotal:
    """votes cast through one delegation contract, by label"""
    label: str
    power: int = 0
    count: int = 0


def _empty_totals() -> Dict[VoteOption, CategoryTotals]:
    return {option: CategoryTotals(option) for option in VoteOption}


def _empty_voters() -> Dict[VoteOption, Dict[str, VoterAccumulator]]:
    return {option: {} for option in VoteOption}


def _empty_leaderboards() -> Dict[VoteOption, List[VoterAccumulator]]:
    return {option: [] for option in VoteOption}


@dataclass
class VoteSummary:
    """
    Tally recomputed from one snapshot batch of events.

    totals always holds all five options; voters holds the full per-voter
    maps that leaderboards were ranked from.
    """
    totals: Dict[VoteOption, CategoryTotals] = field(default_factory=_empty_totals)
    total_power: int = 0
    voters: Dict[VoteOption, Dict[str, VoterAccumulator]] = field(default_factory=_empty_voters)
    leaderboards: Dict[VoteOption, List[VoterAccumulator]] = field(default_factory=_empty_leaderboards)
    delegation_sources: List[DelegationSourceTotal] = field(default_factory=list)
    events_seen: int = 0
    events_ignored: int = 0

    @property
    def total_count(self) -> int:
        return sum(t.count for t in self.totals.values())

    def delegation_source(self, label: str) -> Optional[DelegationSourceTotal]:
        for source in self.delegation_sources:
            if source.label == label:
                return source
        return None
