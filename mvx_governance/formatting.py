"""human-readable egld amounts; raw amounts use 18 decimals"""

from __future__ import annotations

from typing import Dict

from mvx_governance.models import VoteOption, VoteSummary

EGLD_DECIMALS = 18
DISPLAY_PRECISION = 4


def format_egld(amount: int, decimals: int = EGLD_DECIMALS, precision: int = DISPLAY_PRECISION) -> str:
    """format a raw amount as '1,234.5678 EGLD' (fraction truncated)"""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10 ** decimals)
    frac_str = str(frac).rjust(decimals, "0")[:precision]
    if not frac_str:
        return f"{sign}{whole:,} EGLD"
    return f"{sign}{whole:,}.{frac_str} EGLD"


def to_egld_number(amount: int, decimals: int = EGLD_DECIMALS, precision: int = DISPLAY_PRECISION) -> float:
    """raw amount as a float of egld, truncated to `precision` decimals"""
    scale = 10 ** max(0, decimals - precision)
    scaled = abs(amount) // scale
    value = scaled / (10 ** min(precision, decimals))
    return -value if amount < 0 else value


def option_shares(summary: VoteSummary) -> Dict[VoteOption, float]:
    """percentage of total power per option; all zero for an empty tally"""
    total = summary.total_power
    if total == 0:
        return {option: 0.0 for option in VoteOption}
    return {option: t.power * 100 / total for option, t in summary.totals.items()}


__all__ = ["EGLD_DECIMALS", "format_egld", "to_egld_number", "option_shares"]
