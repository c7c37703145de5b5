"""
remake_detect.py — pair dead players with newcomers who might be them.

Read-only: candidates are a review list, nothing is merged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from name_match import similarity
from registry_model import Registry

MIN_SIMILARITY = 0.5   # strictly greater than this to be reported


@dataclass
class RemakeCandidate:
    dead: str
    new: str
    similarity: float
    city: str

    def to_dict(self) -> dict:
        return {"dead": self.dead, "new": self.new, "similarity": self.similarity, "city": self.city}


def find_remakes(registry: Registry, threshold: float = MIN_SIMILARITY) -> List[RemakeCandidate]:
    """Dead x (new and alive) in the same city, similarity > threshold, best first."""
    dead = [(n, p) for n, p in sorted(registry.items()) if p.is_dead]
    fresh = [(n, p) for n, p in sorted(registry.items()) if p.is_new and not p.is_dead]

    out: List[RemakeCandidate] = []
    for dead_name, dead_player in dead:
        for new_name, new_player in fresh:
            if dead_player.current_city != new_player.current_city:
                continue
            score = similarity(dead_name, new_name)
            if score > threshold:
                out.append(RemakeCandidate(dead_name, new_name, score, dead_player.current_city))

    # sorted() is stable, so ties keep name order
    return sorted(out, key=lambda c: c.similarity, reverse=True)
