#!/usr/bin/env python3
"""
cli to tally multiversx governance votes from the public events index
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from mvx_governance.aggregate_votes import aggregate_events
from mvx_governance.export_summary import write_summary
from mvx_governance.fetch_governance_events import FetchError, GovernanceEventsClient
from mvx_governance.formatting import format_egld, option_shares
from mvx_governance.models import VoteOption, VoteSummary
from mvx_governance.ranking import RANK_KEYS, Ranker, resolve_rank_key
from mvx_governance.request_cache import RequestCache
from mvx_governance.settings import Settings, load_settings, validate_limit
from mvx_governance.tally_service import GovernanceTally

logger = logging.getLogger(__name__)

# options with a leaderboard section in the report
REPORTED_OPTIONS = (VoteOption.YES, VoteOption.NO, VoteOption.ABSTAIN, VoteOption.VETO)
REPORT_ROWS = 10


def load_hits_from_file(path: Path) -> List[Any]:
    """read a saved search response (or a bare list of records)"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return data
    hits = (data.get("hits") or {}).get("hits") if isinstance(data, dict) else None
    if not isinstance(hits, list):
        raise ValueError(f"{path} has no hits.hits list")
    return hits


def print_report(summary: VoteSummary, rows: int = REPORT_ROWS) -> None:
    shares = option_shares(summary)
    print("[TOTALS] Votes by option")
    for option in VoteOption:
        t = summary.totals[option]
        print(
            f"   {option.value.upper():<8} {t.count:>7,} votes | {format_egld(t.power):>28} | {shares[option]:5.1f}%")

    print("\n[DELEGATION] Delegated votes by source")
    if not summary.delegation_sources:
        print("   (none)")
    for source in summary.delegation_sources:
        print(f"   {source.label:<20} {source.count:>7,} votes | {format_egld(source.power):>28}")

    print(f"\n[TOTAL] Voting power: {format_egld(summary.total_power)}")
    print(f"[TOTAL] Votes: {summary.total_count:,}")
    if summary.events_ignored:
        print(f"[INFO] Ignored {summary.events_ignored} of {summary.events_seen} events")

    for option in REPORTED_OPTIONS:
        board = summary.leaderboards[option]
        print(f"\n[TOP] {option.value.upper()} - top voters ({min(rows, len(board))} of {len(board)})")
        for i, voter in enumerate(board[:rows], 1):
            print(f"   {i:>3}. {voter.address}  {format_egld(voter.power)}  (stake {format_egld(voter.stake)})")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tally MultiversX governance votes (vote and delegateVote events).",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=(
            "Examples:\n"
            "  Live tally with default settings:\n"
            "    python governance_tally.py\n\n"
            "  Offline tally from a saved search response, exported to parquet:\n"
            "    python governance_tally.py --input events.json --output-dir out --format parquet\n"
        ),
    )
    parser.add_argument("--limit", type=int, default=settings.event_limit,
                        help="Number of events to request (100-50000)")
    parser.add_argument("--es-url", dest="es_url", default=settings.es_url,
                        help="Events index search endpoint (or set env ES_URL)")
    parser.add_argument("--governance-address", dest="governance_address",
                        default=settings.governance_address,
                        help="Governance contract address (or set env GOVERNANCE_SC)")
    parser.add_argument("--input", dest="input_path", default=None,
                        help="Read events from a saved JSON search response instead of the network")
    parser.add_argument("--top", type=int, default=settings.leaderboard_size,
                        help="Leaderboard size per option")
    parser.add_argument("--rank-by", dest="rank_by", default="power", choices=sorted(RANK_KEYS),
                        help="Leaderboard ordering")
    parser.add_argument("--output-dir", dest="output_dir", default=None,
                        help="Write totals and leaderboards to this directory")
    parser.add_argument("--format", dest="fmt", default="csv", choices=["csv", "parquet", "both"],
                        help="Export format when --output-dir is set")
    parser.add_argument("--no-cache", action="store_true",
                        help="Bypass the response cache")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose logging (DEBUG)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Reduce logging output (ERROR)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"[ERROR] Invalid configuration: {e}")
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    # logging setup: default INFO; --verbose -> DEBUG; --quiet -> ERROR
    if args.verbose:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    else:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format='[%(levelname)s] %(message)s')

    try:
        limit = validate_limit(args.limit)
        ranker = Ranker(key=resolve_rank_key(args.rank_by), limit=args.top)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 2

    if args.input_path:
        try:
            hits = load_hits_from_file(Path(args.input_path))
        except (OSError, ValueError) as e:
            print(f"[ERROR] Could not read {args.input_path}: {e}")
            return 2
        summary = aggregate_events(hits, ranker=ranker)
    else:
        cache = None if args.no_cache else RequestCache(ttl_seconds=settings.cache_ttl_seconds)
        client = GovernanceEventsClient(
            es_url=args.es_url,
            governance_address=args.governance_address,
            cache=cache,
            timeout=settings.fetch_timeout,
            max_tries=settings.fetch_max_tries,
        )
        tally = GovernanceTally(client, ranker=ranker)
        try:
            summary = tally.refresh(limit)
        except FetchError as e:
            print(f"[ERROR] Error fetching data: {e}")
            return 1

    print_report(summary)

    if args.output_dir:
        formats = ["csv", "parquet"] if args.fmt == "both" else [args.fmt]
        paths = write_summary(summary, args.output_dir, formats)
        print(f"\n[SAVED] {len(paths)} files -> {args.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
