import pytest

from mvx_governance.aggregate_votes import aggregate_events
from mvx_governance.models import VoteOption, VoterAccumulator
from mvx_governance.ranking import Ranker, by_power, by_stake, resolve_rank_key


def _voters(*rows):
    return [VoterAccumulator(address, stake, power, 1) for address, stake, power in rows]


def test_top_per_category_is_bounded_and_sorted(make_vote):
    records = [make_vote("yes", stake=i % 7, power=(i * 37) % 101, address=f"erd1v{i}") for i in range(120)]
    summary = aggregate_events(records)
    top = Ranker().top_per_category(summary, VoteOption.YES, 50)
    assert len(top) == 50
    powers = [v.power for v in top]
    assert powers == sorted(powers, reverse=True)
    assert top == summary.leaderboards[VoteOption.YES]


def test_fewer_voters_than_limit_returns_all(make_vote):
    summary = aggregate_events([make_vote(power=i, address=f"erd1v{i}") for i in range(3)])
    top = Ranker().top_per_category(summary, VoteOption.YES)
    assert [v.power for v in top] == [2, 1, 0]
    assert Ranker().top_per_category(summary, VoteOption.NO) == []


def test_power_ties_break_by_stake_then_address():
    voters = _voters(("erd1c", 1, 5), ("erd1b", 2, 5), ("erd1a", 1, 5), ("erd1d", 0, 9))
    ranked = Ranker().rank(voters)
    assert [v.address for v in ranked] == ["erd1d", "erd1b", "erd1a", "erd1c"]
    assert [v.address for v in Ranker().rank(list(reversed(voters)))] == [v.address for v in ranked]


def test_stake_key_orders_by_stake_then_power():
    voters = _voters(("erd1a", 10, 1), ("erd1b", 10, 3), ("erd1c", 20, 0))
    ranked = Ranker(key=by_stake).rank(voters)
    assert [v.address for v in ranked] == ["erd1c", "erd1b", "erd1a"]


def test_custom_key_callable():
    voters = _voters(("erd1a", 1, 1), ("erd1b", 2, 2))
    ranked = Ranker(key=lambda v: v.address).rank(voters)
    assert [v.address for v in ranked] == ["erd1a", "erd1b"]


def test_limit_and_override():
    voters = _voters(*[(f"erd1v{i}", 0, i) for i in range(10)])
    assert len(Ranker(limit=3).rank(voters)) == 3
    assert len(Ranker(limit=3).rank(voters, n=5)) == 5
    assert Ranker(limit=0).rank(voters) == []
    with pytest.raises(ValueError):
        Ranker(limit=-1)
    with pytest.raises(ValueError):
        Ranker().rank(voters, n=-1)


def test_resolve_rank_key():
    assert resolve_rank_key("power") is by_power
    assert resolve_rank_key("stake") is by_stake
    with pytest.raises(ValueError):
        resolve_rank_key("count")
