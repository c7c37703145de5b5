"""
survivor_stats.py — overwrite whack / MHS survival counters from a paste.

Input looks like "Sheogorath 196 2 Loki 66": a name, whacks survived, and an
optional MHS count. Values are absolute, not increments.

MHS policy:
  "overwrite"  (default) a record without an MHS token writes 0. This is how
               the game tooling has always behaved, and it zeroes any MHS
               count recorded earlier for that player.
  "preserve"   a record without an MHS token leaves mhsSurvived alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from registry_model import Registry, clone_registry
from text_tokenize import parse_survivor_tokens, tokenize_survivor_text

logger = logging.getLogger(__name__)

MHS_OVERWRITE = "overwrite"
MHS_PRESERVE = "preserve"
MHS_POLICIES = (MHS_OVERWRITE, MHS_PRESERVE)


@dataclass
class SurvivorReport:
    updated: int = 0
    not_found: int = 0
    skipped_tokens: int = 0
    not_found_names: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "updated": self.updated,
            "notFound": self.not_found,
            "skippedTokens": self.skipped_tokens,
            "notFoundNames": list(self.not_found_names),
        }


def apply_survivor_stats(
    registry: Registry,
    raw_text: Optional[str],
    mhs_policy: str = MHS_OVERWRITE,
) -> Tuple[Registry, SurvivorReport]:
    if mhs_policy not in MHS_POLICIES:
        raise ValueError(f"Unknown mhs_policy: {mhs_policy}. Must be one of {MHS_POLICIES}")

    updated = clone_registry(registry)
    report = SurvivorReport()

    records, report.skipped_tokens = parse_survivor_tokens(tokenize_survivor_text(raw_text))

    for rec in records:
        player = updated.get(rec.name)
        if player is None:
            report.not_found += 1
            report.not_found_names.append(rec.name)
            logger.warning(f"Player not found: {rec.name}")
            continue

        if rec.whacks < 0 or (rec.mhs is not None and rec.mhs < 0):
            logger.warning(f"Negative survivor count for {rec.name} clamped to 0")

        player.whacks_survived = max(0, rec.whacks)
        if rec.mhs is not None:
            player.mhs_survived = max(0, rec.mhs)
        elif mhs_policy == MHS_OVERWRITE:
            player.mhs_survived = 0
        report.updated += 1

    logger.info(f"Survivor stats: updated={report.updated} not_found={report.not_found}")
    return updated, report
