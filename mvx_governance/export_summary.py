"""
Tabular export of a VoteSummary to csv or parquet.

Raw amounts exceed int64, so they are kept as decimal strings in *_raw
columns next to float egld columns for charts and spreadsheets.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd

from mvx_governance.formatting import option_shares, to_egld_number
from mvx_governance.models import VoteOption, VoteSummary

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "parquet")

TOTALS_COLUMNS = ["option", "count", "power_raw", "power_egld", "share_pct"]
DELEGATION_COLUMNS = ["label", "count", "power_raw", "power_egld"]
LEADERBOARD_COLUMNS = ["rank", "address", "count",
                       "stake_raw", "stake_egld", "power_raw", "power_egld"]


def _stabilize(df: pd.DataFrame) -> pd.DataFrame:
    # dtypes for stability across empty and non-empty frames
    for col in df.columns:
        if col.endswith("_raw") or col in ("option", "label", "address"):
            df[col] = df[col].astype("string")
        elif col in ("count", "rank"):
            df[col] = df[col].astype("int64")
        else:
            df[col] = df[col].astype("float64")
    return df


def totals_frame(summary: VoteSummary) -> pd.DataFrame:
    shares = option_shares(summary)
    rows = [
        {
            "option": option.value,
            "count": totals.count,
            "power_raw": str(totals.power),
            "power_egld": to_egld_number(totals.power),
            "share_pct": shares[option],
        }
        for option, totals in summary.totals.items()
    ]
    return _stabilize(pd.DataFrame(rows, columns=TOTALS_COLUMNS))


def delegation_frame(summary: VoteSummary) -> pd.DataFrame:
    rows = [
        {
            "label": s.label,
            "count": s.count,
            "power_raw": str(s.power),
            "power_egld": to_egld_number(s.power),
        }
        for s in summary.delegation_sources
    ]
    return _stabilize(pd.DataFrame(rows, columns=DELEGATION_COLUMNS))


def leaderboard_frame(summary: VoteSummary, option: VoteOption) -> pd.DataFrame:
    rows = [
        {
            "rank": i,
            "address": v.address,
            "count": v.count,
            "stake_raw": str(v.stake),
            "stake_egld": to_egld_number(v.stake),
            "power_raw": str(v.power),
            "power_egld": to_egld_number(v.power),
        }
        for i, v in enumerate(summary.leaderboards[option], 1)
    ]
    return _stabilize(pd.DataFrame(rows, columns=LEADERBOARD_COLUMNS))


def _write_frame(df: pd.DataFrame, base_path: Path, fmt: str) -> Path:
    """write atomically via a temp file next to the target"""
    out_path = base_path.with_suffix(f".{fmt}")
    tmp_file = out_path.with_suffix(f".{fmt}.tmp")
    if fmt == "csv":
        df.to_csv(tmp_file, index=False)
    else:
        df.to_parquet(tmp_file, index=False, engine="pyarrow", compression="snappy")
    os.replace(tmp_file, out_path)
    return out_path


def write_summary(
    summary: VoteSummary,
    output_dir: Union[str, Path],
    formats: Iterable[str] = ("csv",),
) -> List[Path]:
    """
    Write totals, delegation sources and per-option leaderboards.

    Args:
        summary: Summary to export
        output_dir: Directory to create and write into
        formats: Any of "csv", "parquet"

    Returns:
        Paths of the written files
    """
    fmts = list(formats)
    unknown = [f for f in fmts if f not in SUPPORTED_FORMATS]
    if unknown:
        raise ValueError(f"Unsupported export formats: {unknown}")

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    frames = {
        "vote_totals": totals_frame(summary),
        "delegation_sources": delegation_frame(summary),
    }
    for option in VoteOption:
        frames[f"leaderboard_{option.value}"] = leaderboard_frame(summary, option)

    written: List[Path] = []
    for name, df in frames.items():
        for fmt in fmts:
            written.append(_write_frame(df, out_dir / name, fmt))
    logger.info(f"Wrote {len(written)} files to {out_dir}")
    return written


__all__ = [
    "SUPPORTED_FORMATS",
    "totals_frame",
    "delegation_frame",
    "leaderboard_frame",
    "write_summary",
]
