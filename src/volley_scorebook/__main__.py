from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import AppConfig, load_config
from .errors import ScorebookError
from .models import SetRecord, SetScore, parse_match_date
from .roster import RosterPlayer, build_lineup, fetch_roster, find_player, load_roster_from_file
from .service import MatchService
from .storage import JsonMatchStore

DEFAULT_CONFIG_PATH = Path("config.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Record volleyball matches set by set")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: config.yaml if present).",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="JSON file holding the matches (overrides storage.path from the config).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a new match.")
    create.add_argument("--team", required=True, help="Team id.")
    create.add_argument("--opponent", required=True, help="Name of the opposing team.")
    create.add_argument("--date", required=True, help="Match date (YYYY-MM-DD).")

    set_parser = commands.add_parser("set", help="Record the lineup and/or score of a set.")
    set_parser.add_argument("match_id")
    set_parser.add_argument("number", type=int, help="Set number (1-5).")
    _add_roster_arguments(set_parser)
    set_parser.add_argument(
        "--lineup",
        default=None,
        help="Comma separated ids or jersey numbers for rotation positions 1-6.",
    )
    set_parser.add_argument("--score", default=None, help="Final set score, e.g. 25:21.")

    sub = commands.add_parser("sub", help="Substitute a player in a set.")
    sub.add_argument("match_id")
    sub.add_argument("number", type=int, help="Set number.")
    _add_roster_arguments(sub)
    sub.add_argument("--out", dest="out_player", required=True, help="Outgoing player id or number.")
    sub.add_argument("--in", dest="in_player", required=True, help="Incoming player id or number.")
    sub.add_argument("--score", default="0:0", help="Running score at the substitution, e.g. 12:10.")

    show = commands.add_parser("show", help="Print a match as JSON.")
    show.add_argument("match_id")

    stats = commands.add_parser("stats", help="Print team statistics as JSON.")
    stats.add_argument("--team", required=True, help="Team id.")
    return parser


def _add_roster_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--roster", type=Path, default=None, help="Roster CSV file.")
    parser.add_argument("--roster-url", default=None, help="URL of a roster CSV export.")


def _load_app_config(path: Optional[Path]) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _load_roster(args: argparse.Namespace) -> List[RosterPlayer]:
    if args.roster is not None:
        return load_roster_from_file(args.roster)
    if args.roster_url:
        return fetch_roster(args.roster_url)
    raise ScorebookError("A roster is required (--roster or --roster-url).")


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run(args: argparse.Namespace, service: MatchService) -> None:
    if args.command == "create":
        match = service.create_match(args.team, args.opponent, parse_match_date(args.date))
        _print_json(match.to_dict())
    elif args.command == "set":
        lineup = None
        if args.lineup:
            keys = [item.strip() for item in args.lineup.split(",") if item.strip()]
            lineup = build_lineup(_load_roster(args), keys)
        score = SetScore.parse(args.score) if args.score else None
        result = service.record_set(
            args.match_id, SetRecord(number=args.number, lineup=lineup, score=score)
        )
        _print_json(result.to_dict())
        if result.is_decided and result.final_score is not None:
            print(
                f"Match complete: {result.status} {result.final_score.label}",
                file=sys.stderr,
            )
    elif args.command == "sub":
        incoming = find_player(_load_roster(args), args.in_player).snapshot(rotation_position=0)
        record = service.substitute(
            args.match_id,
            args.number,
            args.out_player,
            incoming,
            SetScore.parse(args.score),
        )
        _print_json(record.to_dict())
    elif args.command == "show":
        _print_json(service.get_match(args.match_id).to_dict())
    elif args.command == "stats":
        payload = service.team_statistics(args.team).to_dict()
        payload["currentStreak"] = service.team_streak(args.team).to_dict()
        _print_json(payload)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_app_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"Error: configuration could not be loaded: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = JsonMatchStore(args.store or config.storage.path, match_format=config.match_format)
    try:
        _run(args, MatchService(store))
    except ScorebookError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
