"""
Catan Card Tracker CLI.

Commands:
  replay        Run a recorded game log through the tracker and print the ledger
  set-player    Remember which player "you" is
  clear-player  Forget the stored player
  debug         Turn debug audit entries on or off
  show-config   Show stored preferences
  overlay       Move the overlay to X Y
"""

import argparse
import json
import logging
import sys

from catan_tracker.config import (
    clear_current_player,
    get_config_path,
    get_current_player,
    get_debug_mode,
    get_overlay_position,
    set_current_player,
    set_debug_mode,
    set_overlay_position,
)
from catan_tracker.core.resources import RESOURCE_KINDS
from catan_tracker.core.rules_config import TrackerConfig, load_tracker_config_file
from catan_tracker.core.tracker import LedgerContradictionError, ResourceTracker
from catan_tracker.ingest.source import LogSourceError, load_log_username, load_records


def _format_counts(counter) -> str:
    return ",".join(str(v) for v in sorted(counter))


def print_ledger(tracker: ResourceTracker) -> None:
    """Print one row per player with possible steal adjustments."""
    snapshot = tracker.ledger_snapshot()
    if not snapshot:
        print("No players seen.")
        return

    width = max(len(name) for name in snapshot) + 2
    header = "Player".ljust(width) + "".join(
        f"{kind.value:>7}" for kind in RESOURCE_KINDS
    ) + f"{'total':>7}"
    pending = tracker.resolver.has_hypotheses()
    if pending:
        header += "  unresolved"
    print(header)
    print("-" * len(header))

    for player, vector in snapshot.items():
        marker = " (you)" if player == tracker.current_player else ""
        row = (player + marker).ljust(width) + "".join(
            f"{count:>7}" for count in vector
        ) + f"{vector.total():>7}"
        if pending:
            summary = tracker.player_hypothesis_summary(player)
            row += f"  +{{{_format_counts(summary.gained)}}} {{{_format_counts(summary.lost)}}}"
        print(row)

    outstanding = len(tracker.outstanding_hypotheses())
    if outstanding:
        print()
        print(f"{outstanding} possible outcomes for unresolved steals")


def print_audit(tracker: ResourceTracker, include_debug: bool) -> None:
    entries = tracker.audit_trail(include_debug=include_debug)
    if not entries:
        return
    print()
    print("Event log:")
    for entry in entries:
        print(f"  {entry['timestamp']}  {entry['message']}")


def replay_cmd(args):
    """Replay a recorded log."""
    try:
        config = load_tracker_config_file(args.config) if args.config else TrackerConfig()
    except (OSError, ValueError) as e:
        print(f"Error: could not load config {args.config}: {e}")
        sys.exit(1)
    if args.strict:
        config.strict = True

    try:
        records = load_records(args.log, entry_class=args.entry_class)
    except LogSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    tracker = ResourceTracker(config)
    username = (
        args.as_player
        or config.username
        or load_log_username(args.log)
        or get_current_player()
    )
    if username:
        tracker.set_current_player_alias(username)

    try:
        tracker.process_all(records)
    except LedgerContradictionError as e:
        print(f"Error: ledger contradiction: {e}")
        sys.exit(2)

    if args.json:
        output = {
            "players": {
                player: vector.to_dict()
                for player, vector in tracker.ledger_snapshot().items()
            },
            "current_player": tracker.current_player,
            "outstanding_hypotheses": [
                c.to_lists() for c in tracker.outstanding_hypotheses()
            ],
            "audit": tracker.audit_trail(include_debug=args.show_log or get_debug_mode()),
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))
        return

    print(f"Replayed {len(records)} records from {args.log}")
    print()
    print_ledger(tracker)
    if args.show_log:
        print_audit(tracker, include_debug=get_debug_mode())


def set_player_cmd(args):
    set_current_player(args.name)
    print(f"\"You\" will resolve to {args.name}")


def clear_player_cmd(args):
    clear_current_player()
    print(f"Stored player removed from {get_config_path()}")


def debug_cmd(args):
    enabled = args.state == "on"
    set_debug_mode(enabled)
    print(f"Debug entries {'shown' if enabled else 'hidden'}")


def show_config_cmd(args):
    print(f"Config file:     {get_config_path()}")
    print(f"Current player:  {get_current_player() or '(not set)'}")
    print(f"Debug mode:      {'on' if get_debug_mode() else 'off'}")
    position = get_overlay_position()
    print(f"Overlay:         x={position['x']} y={position['y']}")


def overlay_cmd(args):
    set_overlay_position(args.x, args.y)
    position = get_overlay_position()
    print(f"Overlay moved to x={position['x']} y={position['y']}")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Catan Card Tracker - resource ledger from the game log"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log more detail (-v info, -vv debug)",
    )

    sub = parser.add_subparsers(dest="command")

    # replay
    replay_parser = sub.add_parser("replay", help="Replay a recorded game log")
    replay_parser.add_argument("log", help="Recorded log (.yaml or .html)")
    replay_parser.add_argument("--config", help="Tracker rules YAML")
    replay_parser.add_argument("--as", dest="as_player", help="Player that \"you\" refers to")
    replay_parser.add_argument("--strict", action="store_true", help="Stop on a ledger contradiction")
    replay_parser.add_argument("--entry-class", help="CSS class of log entries in HTML logs")
    replay_parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    replay_parser.add_argument("--show-log", action="store_true", help="Print the event log")
    replay_parser.set_defaults(func=replay_cmd)

    # set-player
    set_player_parser = sub.add_parser("set-player", help="Remember which player \"you\" is")
    set_player_parser.add_argument("name")
    set_player_parser.set_defaults(func=set_player_cmd)

    # clear-player
    clear_player_parser = sub.add_parser("clear-player", help="Forget the stored player")
    clear_player_parser.set_defaults(func=clear_player_cmd)

    # debug
    debug_parser = sub.add_parser("debug", help="Show or hide debug entries")
    debug_parser.add_argument("state", choices=["on", "off"])
    debug_parser.set_defaults(func=debug_cmd)

    # show-config
    show_config_parser = sub.add_parser("show-config", help="Show stored preferences")
    show_config_parser.set_defaults(func=show_config_cmd)

    # overlay
    overlay_parser = sub.add_parser("overlay", help="Move the overlay")
    overlay_parser.add_argument("x", type=int)
    overlay_parser.add_argument("y", type=int)
    overlay_parser.set_defaults(func=overlay_cmd)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
