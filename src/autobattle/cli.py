import argparse
import json
import logging
import sys
from pathlib import Path

from .battle_file import load_battle
from .characters.catalog import default_catalog
from .characters.stats import derive_stats
from .core.models import Role
from .errors import AutoBattleError, DataValidationError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autobattle",
        description="Deterministic auto-battle simulator",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Simulate a battle file and print its log.")
    run.add_argument("file", type=Path, help="Path to a YAML battle file.")
    run.add_argument("--seed", type=int, default=None, help="Override the seed from the file.")
    run.add_argument("--json", action="store_true", help="Print the result as replay JSON.")
    run.add_argument("--limit", type=int, default=None, help="Print at most N log lines.")
    run.add_argument("--debug", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS)

    stats = sub.add_parser("stats", help="Show derived stats for a role.")
    stats.add_argument("role", choices=[r.value for r in Role])
    stats.add_argument("--level", type=int, default=1)
    stats.add_argument("--ascension", type=int, default=0)

    catalog = sub.add_parser("catalog", help="List the bundled characters.")
    catalog.add_argument("--role", choices=[r.value for r in Role], default=None)
    return parser


def _cmd_run(args: argparse.Namespace) -> int:
    setup = load_battle(args.file)
    result = setup.build_engine(seed=args.seed).simulate()
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    entries = result.action_log
    if args.limit is not None:
        entries = entries[: max(0, args.limit)]
    for entry in entries:
        print(f"[T{entry.turn:02d}] {entry.message}")
    if len(entries) < len(result.action_log):
        print(f"... {len(result.action_log) - len(entries)} more entries")
    print(f"Winner: {result.winner.value} after {result.turns} turn(s) (seed {result.seed})")
    print(f"Player survivors: {', '.join(result.player_survivors) or '-'}")
    print(f"Enemy survivors: {', '.join(result.enemy_survivors) or '-'}")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    s = derive_stats(Role(args.role), args.level, args.ascension)
    print(f"{args.role} Lv{args.level} A{args.ascension}: HP {s.hp} ATK {s.atk} DEF {s.defense} SPD {s.spd}")
    return 0


def _cmd_catalog(args: argparse.Namespace) -> int:
    catalog = default_catalog()
    defs = catalog.by_role(Role(args.role)) if args.role else catalog.all()
    for d in defs:
        print(f"{d.id:<10} {d.name:<12} {d.role.value:<9} {d.rarity.value:<10} {d.ability_name}")
    return 0


COMMANDS = {
    "run": _cmd_run,
    "stats": _cmd_stats,
    "catalog": _cmd_catalog,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        level = logging.DEBUG
    elif getattr(args, "json", False):
        # Keep stdout parseable.
        level = logging.WARNING
    else:
        level = logging.INFO
    configure_logging(level=level)

    try:
        return COMMANDS[args.command](args)
    except DataValidationError as e:
        print(e.to_human(), file=sys.stderr)
        return 2
    except AutoBattleError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
