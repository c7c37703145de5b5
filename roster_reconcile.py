"""
roster_reconcile.py — apply one roster scan to the registry.

A scan is the full list of living players at one moment. Two passes:

  1) every accepted line creates or refreshes its player (career changes are
     appended to careerHistory, wasHD only ever goes up)
  2) every name in the previous scan that is missing from this one is marked
     dead. Absence is the only death signal on this path.

The caller's registry and scan set are never mutated; reconcile_roster()
returns new values plus a RosterReport. Malformed lines are skipped and
counted, they never abort the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from registry_model import Player, Registry, clone_registry
from text_tokenize import (
    LINE_INVALID_CITY,
    LINE_MISPLACED_CITY,
    RosterLine,
    classify_roster_text,
)
from tracker_common import is_hd_occupation, resolve_valid_cities, utc_now

logger = logging.getLogger(__name__)


@dataclass
class RosterReport:
    processed: int = 0
    skipped: int = 0          # every rejected line, invalid cities included
    invalid_city: int = 0     # subset of skipped
    header_skipped: bool = False
    died: List[str] = field(default_factory=list)
    new_players: List[str] = field(default_factory=list)
    career_changes: List[str] = field(default_factory=list)
    revived: List[str] = field(default_factory=list)

    @property
    def has_events(self) -> bool:
        return bool(self.died or self.new_players)

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "invalidCity": self.invalid_city,
            "died": list(self.died),
            "newPlayers": list(self.new_players),
            "careerChanges": list(self.career_changes),
            "revived": list(self.revived),
        }


def _refresh_existing(player: Player, line: RosterLine, now: datetime) -> Tuple[bool, bool]:
    """Returns (career_changed, revived)."""
    revived = player.is_dead
    player.is_dead = False
    player.death_date = None
    player.cause_of_death = None
    player.last_words = None

    currently_hd = is_hd_occupation(line.occupation)
    player.is_currently_hd = currently_hd
    if currently_hd or player.history_has_hd():
        player.was_hd = True

    changed = (
        player.current_occupation != line.occupation
        or player.current_rank != line.rank
        or player.current_city != line.city
    )
    if changed:
        player.open_career(line.occupation, line.rank, line.city, now)
    elif player.current_career() is None:
        # back from the dead in the same job: the old tenure was closed at death
        player.open_career(line.occupation, line.rank, line.city, now)

    player.is_new = False
    player.last_updated = now
    return changed, revived


def reconcile_roster(
    registry: Registry,
    last_scan: Optional[Iterable[str]],
    raw_text: Optional[str],
    valid_cities: Sequence[str],
    now: Optional[datetime] = None,
) -> Tuple[Registry, Set[str], RosterReport]:
    """
    Returns (new_registry, new_last_scan, report).

    The new scan set is exactly the names accepted from raw_text, so an empty
    or wholly unparseable paste kills everyone in last_scan. That is the
    documented contract; callers that want a guard should check
    report.processed before persisting.
    """
    cities = resolve_valid_cities(valid_cities)
    now = now or utc_now()
    previous = set(last_scan or ())

    updated = clone_registry(registry)
    report = RosterReport()
    current_scan: Set[str] = set()

    lines, report.header_skipped = classify_roster_text(raw_text, cities)

    # Pass 1: everyone present in this scan
    for line in lines:
        if not line.accepted:
            report.skipped += 1
            if line.status == LINE_INVALID_CITY:
                report.invalid_city += 1
                logger.warning(f"Invalid city {line.city!r} for player {line.name!r}")
            elif line.status == LINE_MISPLACED_CITY:
                report.invalid_city += 1
                logger.warning(f"City name found in wrong column for player {line.name!r}")
            continue

        if line.name in current_scan:
            report.skipped += 1
            logger.warning(f"Duplicate line for player {line.name!r} in one scan; keeping the first")
            continue

        report.processed += 1
        current_scan.add(line.name)

        player = updated.get(line.name)
        if player is None:
            updated[line.name] = Player.first_appearance(
                line.occupation, line.rank, line.city, now
            )
            report.new_players.append(line.name)
            continue

        changed, revived = _refresh_existing(player, line, now)
        if changed:
            report.career_changes.append(line.name)
        if revived:
            report.revived.append(line.name)

    # Pass 2: missing from this scan => dead
    for name in sorted(previous - current_scan):
        player = updated.get(name)
        if player is None or player.is_dead:
            continue
        player.mark_dead(now)
        player.last_updated = now
        report.died.append(name)

    logger.info(
        f"Roster scan: processed={report.processed} skipped={report.skipped} "
        f"invalid_city={report.invalid_city} died={len(report.died)} new={len(report.new_players)}"
    )
    return updated, current_scan, report
