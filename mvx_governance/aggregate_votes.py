"""
Fold a snapshot batch of governance events into a VoteSummary.

Per-voter tracking contract: both direct `vote` and `delegateVote` events
feed the per-option voter accumulators, so for every option the voters'
power sums to the option's total power. Direct votes are keyed by the
emitting address, delegated votes by the bech32-encoded voter topic (raw
hex when it is not a 32-byte identifier).

The fold only adds integers, so the order of events never changes the
result. Delegation sources are reported by power descending, then label.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterable, Mapping, Optional

from mvx_governance.events import DelegateVoteEvent, IgnoredEvent, ParsedEvent, VoteEvent, parse_event
from mvx_governance.models import CategoryTotals, DelegationSourceTotal, VoteOption, VoteSummary, VoterAccumulator
from mvx_governance.ranking import Ranker

logger = logging.getLogger(__name__)

DEFAULT_DELEGATION_LABEL = "others"

# delegation contracts that vote on behalf of their delegators
DELEGATION_LABELS: Dict[str, str] = {
    "erd1qqqqqqqqqqqqqpgqxwakt2g7u9atsnr03gqcgmhcv38pt7mkd94q6shuwt": "Legacy Delegation",
    "erd1qqqqqqqqqqqqqpgq6uzdzy54wnesfnlaycxwymrn9texlnmyah0ssrfvk6": "xoxno",
    "erd1qqqqqqqqqqqqqpgq4gzfcw7kmkjy8zsf04ce6dl0auhtzjx078sslvrf4e": "hatom",
}


def resolve_delegation_label(address: Optional[str], labels: Optional[Mapping[str, str]] = None) -> str:
    """label for a delegation contract address; unmapped addresses are 'others'"""
    table = DELEGATION_LABELS if labels is None else labels
    if not address:
        return DEFAULT_DELEGATION_LABEL
    return table.get(address, DEFAULT_DELEGATION_LABEL)


class VoteAggregator:
    """Accumulates parsed events for a single summary."""

    def __init__(self, delegation_labels: Optional[Mapping[str, str]] = None):
        self.delegation_labels = DELEGATION_LABELS if delegation_labels is None else delegation_labels
        self.totals: Dict[VoteOption, CategoryTotals] = {o: CategoryTotals(o) for o in VoteOption}
        self.voters: Dict[VoteOption, Dict[str, VoterAccumulator]] = {o: {} for o in VoteOption}
        self.delegation: Dict[str, DelegationSourceTotal] = {}
        self.total_power = 0
        self.events_seen = 0
        self.ignored: Counter = Counter()

    def add_record(self, record: Any) -> bool:
        return self.add(parse_event(record))

    def add(self, event: ParsedEvent) -> bool:
        """fold one parsed event; returns False when the event was ignored"""
        if not isinstance(event, IgnoredEvent) and (event.stake < 0 or event.power < 0):
            raise ValueError(f"Negative stake or power for voter {event.voter!r}")
        self.events_seen += 1
        if isinstance(event, IgnoredEvent):
            self.ignored[event.reason] += 1
            return False

        totals = self.totals[event.option]
        totals.count += 1
        totals.power += event.power
        self.total_power += event.power

        per_voter = self.voters[event.option]
        acc = per_voter.get(event.voter)
        if acc is None:
            acc = per_voter[event.voter] = VoterAccumulator(event.voter)
        acc.add(event.stake, event.power)

        if isinstance(event, DelegateVoteEvent):
            label = resolve_delegation_label(event.source_address, self.delegation_labels)
            source = self.delegation.get(label)
            if source is None:
                source = self.delegation[label] = DelegationSourceTotal(label)
            source.power += event.power
            source.count += 1
        return True

    def summary(self, ranker: Optional[Ranker] = None) -> VoteSummary:
        ranker = ranker or Ranker()
        sources = sorted(self.delegation.values(), key=lambda s: (-s.power, s.label))
        if self.ignored:
            logger.debug(f"Ignored events by reason: {dict(self.ignored)}")
        return VoteSummary(
            totals=self.totals,
            total_power=self.total_power,
            voters=self.voters,
            leaderboards=ranker.leaderboards(self.voters),
            delegation_sources=sources,
            events_seen=self.events_seen,
            events_ignored=sum(self.ignored.values()),
        )


def aggregate_events(
    records: Iterable[Any],
    delegation_labels: Optional[Mapping[str, str]] = None,
    ranker: Optional[Ranker] = None,
) -> VoteSummary:
    """
    Build a fresh summary from raw records or already parsed events.

    Args:
        records: Raw event records, elasticsearch hits, or parsed events
        delegation_labels: Delegation contract address -> label table
        ranker: Leaderboard ranker (default: by power, top 50)

    Returns:
        VoteSummary for exactly this batch
    """
    aggregator = VoteAggregator(delegation_labels)
    for record in records:
        if isinstance(record, (VoteEvent, DelegateVoteEvent, IgnoredEvent)):
            aggregator.add(record)
        else:
            aggregator.add_record(record)
    summary = aggregator.summary(ranker)
    logger.info(
        f"Aggregated {summary.total_count} votes from {summary.events_seen} events "
        f"({summary.events_ignored} ignored), total power {summary.total_power}")
    return summary


__all__ = [
    "DEFAULT_DELEGATION_LABEL",
    "DELEGATION_LABELS",
    "VoteAggregator",
    "aggregate_events",
    "resolve_delegation_label",
]
