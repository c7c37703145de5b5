"""
registry_model.py — Player / CareerEntry records and the registry value.

A registry is a plain dict[str, Player] keyed by player name. Names are the
only identity: a renamed player is indistinguishable from "old player died,
new player appeared" until a human confirms a remake.

Engine operations never mutate the registry they are handed. They call
clone_registry() first and return the copy, so a caller either gets a whole
new registry or keeps the old one untouched.

Store dicts use the camelCase keys and ISO timestamps of the shared session
record (players/<name>/currentOccupation, careerHistory[i].startDate, ...).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from tracker_common import is_hd_occupation


@dataclass
class CareerEntry:
    occupation: str
    rank: str
    city: str
    start_date: datetime
    end_date: Optional[datetime] = None
    is_current: bool = True

    def close(self, when: datetime) -> None:
        self.end_date = when
        self.is_current = False

    def to_dict(self) -> dict:
        return {
            "occupation": self.occupation,
            "rank": self.rank,
            "city": self.city,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "isCurrent": self.is_current,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CareerEntry":
        return cls(
            occupation=d.get("occupation") or "",
            rank=d.get("rank") or "",
            city=d.get("city") or "",
            start_date=parse_iso(d.get("startDate")) or datetime.min,
            end_date=parse_iso(d.get("endDate")),
            is_current=bool(d.get("isCurrent", False)),
        )


@dataclass
class Player:
    current_occupation: str
    current_rank: str
    current_city: str
    first_seen: datetime
    last_updated: datetime
    is_new: bool = False
    is_dead: bool = False
    death_date: Optional[datetime] = None
    cause_of_death: Optional[str] = None
    last_words: Optional[str] = None
    was_hd: bool = False
    is_currently_hd: bool = False
    is_ops: bool = False
    is_friendly: bool = False
    whacks_survived: int = 0
    mhs_survived: int = 0
    notes: str = ""
    career_history: List[CareerEntry] = field(default_factory=list)

    @classmethod
    def first_appearance(
        cls, occupation: str, rank: str, city: str, when: datetime
    ) -> "Player":
        """A player seen for the first time: one open career entry, isNew set."""
        hd = is_hd_occupation(occupation)
        return cls(
            current_occupation=occupation,
            current_rank=rank,
            current_city=city,
            first_seen=when,
            last_updated=when,
            is_new=True,
            was_hd=hd,
            is_currently_hd=hd,
            career_history=[CareerEntry(occupation, rank, city, when)],
        )

    def current_career(self) -> Optional[CareerEntry]:
        for entry in self.career_history:
            if entry.is_current:
                return entry
        return None

    def close_current_career(self, when: datetime) -> None:
        entry = self.current_career()
        if entry is not None:
            entry.close(when)

    def open_career(self, occupation: str, rank: str, city: str, when: datetime) -> None:
        self.close_current_career(when)
        self.career_history.append(CareerEntry(occupation, rank, city, when))
        self.current_occupation = occupation
        self.current_rank = rank
        self.current_city = city

    def history_has_hd(self) -> bool:
        return any(is_hd_occupation(e.occupation) for e in self.career_history)

    def mark_dead(self, when: datetime) -> None:
        self.is_dead = True
        self.death_date = when
        self.is_currently_hd = False
        self.close_current_career(when)

    def to_dict(self) -> dict:
        return {
            "currentOccupation": self.current_occupation,
            "currentRank": self.current_rank,
            "currentCity": self.current_city,
            "firstSeen": to_iso(self.first_seen),
            "lastUpdated": to_iso(self.last_updated),
            "isNew": self.is_new,
            "isDead": self.is_dead,
            "deathDate": to_iso(self.death_date),
            "causeOfDeath": self.cause_of_death,
            "lastWords": self.last_words,
            "wasHD": self.was_hd,
            "isCurrentlyHD": self.is_currently_hd,
            "isOps": self.is_ops,
            "isFriendly": self.is_friendly,
            "whacksSurvived": self.whacks_survived,
            "mhsSurvived": self.mhs_survived,
            "notes": self.notes,
            "careerHistory": [e.to_dict() for e in self.career_history],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Player":
        first_seen = parse_iso(d.get("firstSeen")) or datetime.min
        return cls(
            current_occupation=d.get("currentOccupation") or "",
            current_rank=d.get("currentRank") or "",
            current_city=d.get("currentCity") or "",
            first_seen=first_seen,
            last_updated=parse_iso(d.get("lastUpdated")) or first_seen,
            is_new=bool(d.get("isNew", False)),
            is_dead=bool(d.get("isDead", False)),
            death_date=parse_iso(d.get("deathDate")),
            cause_of_death=d.get("causeOfDeath") or None,
            last_words=d.get("lastWords") or None,
            was_hd=bool(d.get("wasHD", False)),
            is_currently_hd=bool(d.get("isCurrentlyHD", False)),
            is_ops=bool(d.get("isOps", False)),
            is_friendly=bool(d.get("isFriendly", False)),
            whacks_survived=int(d.get("whacksSurvived") or 0),
            mhs_survived=int(d.get("mhsSurvived") or 0),
            notes=d.get("notes") or "",
            # the realtime store drops empty lists, so a missing key means []
            career_history=[CareerEntry.from_dict(e) for e in (d.get("careerHistory") or [])],
        )


Registry = Dict[str, Player]


def clone_registry(registry: Registry) -> Registry:
    return copy.deepcopy(dict(registry or {}))


def registry_to_dict(registry: Registry) -> dict:
    return {name: p.to_dict() for name, p in registry.items()}


def registry_from_dict(data: Optional[dict]) -> Registry:
    return {name: Player.from_dict(d) for name, d in (data or {}).items()}


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def parse_iso(v) -> Optional[datetime]:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v
    s = str(v).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is not None:
        # stored snapshots from other writers may carry an offset; keep everything naive UTC
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
