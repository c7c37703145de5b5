#!/usr/bin/env python3
"""
06_manage_players.py — manual edits between scans.

Subcommands:
  add NAME OCCUPATION RANK CITY     add a player by hand (isNew set)
  delete NAME                       remove one player (irreversible)
  remove-dead                       remove every dead player (irreversible)
  toggle NAME... --field F          flip isOps / wasHD / isFriendly
  notes NAME TEXT                   replace notes
  city NAME CITY                    correct the current city
  stat NAME --field F VALUE         set whacksSurvived / mhsSurvived
  recalc-cm                         re-derive wasHD from career history (upgrade only)
  stats                             print alive/new/ops/cm/friendly/MHS/dead and per-city counts

Usage:
  python 06_manage_players.py --game K3X9QZ toggle Sheogorath Loki --field isOps
  python 06_manage_players.py --game K3X9QZ remove-dead --yes
"""

from __future__ import annotations

import argparse

import registry_actions as actions
from registry_qc import city_breakdown, roster_stats
from registry_store import StoreError, add_store_args, store_from_args
from tracker_common import ConfigurationError, fail, ok, setup_logging


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("add")
    p.add_argument("name")
    p.add_argument("occupation")
    p.add_argument("rank")
    p.add_argument("city")

    p = sub.add_parser("delete")
    p.add_argument("name")

    p = sub.add_parser("remove-dead")
    p.add_argument("--yes", action="store_true", help="Confirm permanent removal.")

    p = sub.add_parser("toggle")
    p.add_argument("names", nargs="+")
    p.add_argument("--field", required=True, choices=sorted(actions.TOGGLE_FIELDS))

    p = sub.add_parser("notes")
    p.add_argument("name")
    p.add_argument("text")

    p = sub.add_parser("city")
    p.add_argument("name")
    p.add_argument("city")

    p = sub.add_parser("stat")
    p.add_argument("name")
    p.add_argument("value", type=int)
    p.add_argument("--field", required=True, choices=sorted(actions.COMBAT_FIELDS))

    sub.add_parser("recalc-cm")
    sub.add_parser("stats")
    return ap


def apply_command(args, session) -> str:
    """Mutates session.players with the command's result; returns the summary line."""
    players = session.players
    cmd = args.cmd

    if cmd == "add":
        session.players = actions.add_player(
            players, args.name, args.occupation, args.rank, args.city, session.valid_cities
        )
        return f"Added {args.name}"
    if cmd == "delete":
        session.players = actions.delete_player(players, args.name)
        session.last_scan = [n for n in session.last_scan if n != args.name]
        return f"Deleted {args.name}"
    if cmd == "remove-dead":
        if not args.yes:
            raise ValueError("remove-dead is permanent; pass --yes to confirm")
        session.players, removed = actions.remove_dead_players(players)
        return f"Permanently removed {removed} dead players"
    if cmd == "toggle":
        session.players, count = actions.bulk_toggle(players, args.names, args.field)
        return f"Updated {count} players"
    if cmd == "notes":
        session.players = actions.set_notes(players, args.name, args.text)
        return f"Updated notes for {args.name}"
    if cmd == "city":
        session.players = actions.set_city(players, args.name, args.city, session.valid_cities)
        return f"Moved {args.name} to {args.city}"
    if cmd == "stat":
        session.players = actions.set_combat_stat(players, args.name, args.field, args.value)
        return f"Set {args.field}={args.value} for {args.name}"
    if cmd == "recalc-cm":
        session.players, changed = actions.recalculate_cm_status(players)
        return f"Recalculated CM status. Updated {changed} players."
    raise ValueError(f"Unknown command: {cmd}")


def print_stats(session) -> None:
    for k, v in roster_stats(session.players).items():
        print(f"{k}: {v}")
    df = city_breakdown(session.players, session.valid_cities)
    if not df.empty:
        print()
        print(df.to_string(index=False))


def main() -> int:
    args = build_parser().parse_args()
    setup_logging(args.verbose)
    store = store_from_args(args)

    try:
        session = store.load(args.game)
        if args.cmd == "stats":
            print_stats(session)
            return 0
        summary = apply_command(args, session)
        store.save(session)
    except KeyError as e:
        fail(f"ERROR: {e.args[0] if e.args else e}")
        return 2
    except (ValueError, StoreError, ConfigurationError) as e:
        fail(f"ERROR: {e}")
        return 2

    ok(summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
