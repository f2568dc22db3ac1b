"""
Bounded per-option voter leaderboards.

Ordering contract: the default key ranks by power, breaking ties by stake
and then by address (ascending). The "stake" key ranks by stake, then
power, then address. Both are total orders, so equal accumulators never
depend on insertion order. Any callable mapping a VoterAccumulator to a
sortable value can be passed as the key; smaller sorts first.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from mvx_governance.models import VoteOption, VoteSummary, VoterAccumulator

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 50

RankKey = Callable[[VoterAccumulator], Any]


def by_power(voter: VoterAccumulator) -> tuple:
    return (-voter.power, -voter.stake, voter.address)


def by_stake(voter: VoterAccumulator) -> tuple:
    return (-voter.stake, -voter.power, voter.address)


RANK_KEYS: Dict[str, RankKey] = {
    "power": by_power,
    "stake": by_stake,
}


def resolve_rank_key(name: str) -> RankKey:
    try:
        return RANK_KEYS[name]
    except KeyError:
        raise ValueError(
            f"Unknown rank key '{name}'; expected one of {sorted(RANK_KEYS)}") from None


class Ranker:
    """Extracts sorted top-N voter lists from per-option accumulators."""

    def __init__(self, key: RankKey = by_power, limit: int = DEFAULT_LEADERBOARD_SIZE):
        if limit < 0:
            raise ValueError("limit must be non-negative")
        self.key = key
        self.limit = limit

    def rank(self, voters: Iterable[VoterAccumulator], n: Optional[int] = None) -> List[VoterAccumulator]:
        size = self.limit if n is None else n
        if size < 0:
            raise ValueError("n must be non-negative")
        return sorted(voters, key=self.key)[:size]

    def top_per_category(self, summary: VoteSummary, option: VoteOption, n: Optional[int] = None) -> List[VoterAccumulator]:
        """top voters for one option, at most n (default: the ranker's limit)"""
        return self.rank(summary.voters[option].values(), n)

    def leaderboards(self, voters: Mapping[VoteOption, Mapping[str, VoterAccumulator]]) -> Dict[VoteOption, List[VoterAccumulator]]:
        boards = {option: self.rank(voters.get(option, {}).values()) for option in VoteOption}
        logger.debug(
            "Leaderboard sizes: " + ", ".join(f"{o.value}={len(b)}" for o, b in boards.items()))
        return boards


__all__ = [
    "DEFAULT_LEADERBOARD_SIZE",
    "RANK_KEYS",
    "Ranker",
    "by_power",
    "by_stake",
    "resolve_rank_key",
]
