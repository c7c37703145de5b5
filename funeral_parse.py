"""
funeral_parse.py — apply a funeral-parlor log to the registry.

Each obituary is one glued line (see text_tokenize.split_glued_record),
optionally followed by "<name>'s last words: ...". Outcomes per record:

  Name Change  reported, registry untouched (the player did not die)
  known name   marked dead with the parlor's date-time, cause and last words
  unknown      reported as not found, registry untouched

Lines without a date-time or without a valid city are skipped and counted.
A last-words line that was not consumed by the record right above it is
skipped as already handled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from registry_model import Registry, clone_registry
from text_tokenize import (
    NAME_CHANGE_MARKER,
    GluedRecord,
    is_last_words_line,
    iter_stripped_lines,
    last_words_for,
    split_glued_record,
)
from tracker_common import is_hd_occupation, resolve_valid_cities

logger = logging.getLogger(__name__)


@dataclass
class DeathDetail:
    name: str
    city: str
    occupation: str
    date_time: str
    when: datetime
    cause: str
    last_words: str = ""
    found: bool = False
    is_name_change: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "city": self.city,
            "occupation": self.occupation,
            "dateTime": self.date_time,
            "cause": self.cause,
            "lastWords": self.last_words,
            "found": self.found,
            "isNameChange": self.is_name_change,
        }


@dataclass
class FuneralReport:
    processed: int = 0
    not_found: int = 0
    name_changes: int = 0
    unparseable: int = 0
    skipped_last_words: int = 0
    deaths: List[DeathDetail] = field(default_factory=list)

    @property
    def died(self) -> List[str]:
        return [d.name for d in self.deaths if d.found and not d.is_name_change]

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "notFound": self.not_found,
            "nameChanges": self.name_changes,
            "unparseable": self.unparseable,
            "died": self.died,
            "deaths": [d.to_dict() for d in self.deaths],
        }


def _detail(rec: GluedRecord, last_words: str, found: bool) -> DeathDetail:
    return DeathDetail(
        name=rec.name,
        city=rec.city,
        occupation=rec.occupation,
        date_time=rec.date_time,
        when=rec.when,
        cause=NAME_CHANGE_MARKER if rec.is_name_change else rec.cause,
        last_words=last_words,
        found=found,
        is_name_change=rec.is_name_change,
    )


def apply_funeral_log(
    registry: Registry,
    raw_text: Optional[str],
    valid_cities: Sequence[str],
) -> Tuple[Registry, FuneralReport]:
    cities = resolve_valid_cities(valid_cities)
    updated = clone_registry(registry)
    report = FuneralReport()

    lines = iter_stripped_lines(raw_text)
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line:
            continue
        if is_last_words_line(line):
            report.skipped_last_words += 1
            continue

        rec, reason = split_glued_record(line, cities)
        if rec is None:
            report.unparseable += 1
            if reason == "no_datetime":
                logger.warning(f"Could not find date/time in funeral line: {line}")
            else:
                logger.warning(f"Could not find valid city in funeral line: {line}")
            continue

        next_line = lines[i] if i < len(lines) else None
        words = last_words_for(rec, next_line)
        if words is not None:
            i += 1
        words = words or ""

        player = updated.get(rec.name)

        if rec.is_name_change:
            report.name_changes += 1
            report.deaths.append(_detail(rec, words, found=player is not None))
            continue

        if player is None:
            report.not_found += 1
            report.deaths.append(_detail(rec, words, found=False))
            logger.warning(f"Funeral record for unknown player: {rec.name}")
            continue

        player.mark_dead(rec.when)
        player.cause_of_death = rec.cause or None
        player.last_words = words or None
        if is_hd_occupation(rec.occupation):
            player.was_hd = True

        report.processed += 1
        report.deaths.append(_detail(rec, words, found=True))

    logger.info(
        f"Funeral log: processed={report.processed} not_found={report.not_found} "
        f"name_changes={report.name_changes} unparseable={report.unparseable}"
    )
    return updated, report
