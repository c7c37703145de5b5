"""
text_tokenize.py — raw paste → candidate records, one helper per format.

Three formats come in from the game client, all pasted by hand:

  roster scan     one player per line: NAME OCCUPATION RANK CITY, separated by
                  tabs or by runs of 2+ spaces (single spaces as a last resort)
  survivor stats  a flat token stream: Name whacks [mhs] Name whacks ...
  funeral log     glued lines with no delimiters at all:
                    HmRCAucklandUnemployed6/27/2025 7:11:42 AMSuicide
                  optionally followed by "HmRC's last words: ..."

Nothing in here touches a registry. Functions classify and split; the callers
decide what a rejection means.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

import ftfy


# ------------------------------------------------------------
# Shared text repair
# ------------------------------------------------------------
def repair_text(raw: Optional[str]) -> str:
    """
    Encoding repair only (mojibake, curly quotes, CRLF). Never reorders or
    drops fields, so the positional parsers below see the same layout.
    """
    if not raw:
        return ""
    return ftfy.fix_text(str(raw))


def iter_stripped_lines(raw: Optional[str]) -> List[str]:
    """Lines of the trimmed blob, each trimmed. Interior blank lines are kept."""
    text = repair_text(raw).strip()
    if not text:
        return []
    return [ln.strip() for ln in text.split("\n")]


# ------------------------------------------------------------
# Roster scan lines
# ------------------------------------------------------------
ROSTER_FIELDS = 4

_RE_MULTI_SPACE = re.compile(r"\s{2,}")
_RE_ANY_SPACE = re.compile(r"\s+")

# Line classification results
LINE_OK = "ok"
LINE_STRUCTURAL = "structural"        # empty, <4 fields, empty field
LINE_INVALID_CITY = "invalid_city"    # city column not in the enumeration
LINE_MISPLACED_CITY = "misplaced_city"  # a city name sits in occupation/rank


@dataclass
class RosterLine:
    status: str
    raw: str
    name: str = ""
    occupation: str = ""
    rank: str = ""
    city: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == LINE_OK


def is_roster_header(line: str) -> bool:
    return "NAME" in line and "OCCUPATION" in line


def split_roster_line(line: str) -> List[str]:
    """
    Tab-delimited wins outright. Otherwise split on 2+ spaces, and only if that
    yields fewer than 4 fields fall back to single whitespace.
    """
    line = line.strip()
    if not line:
        return []
    if "\t" in line:
        return [p.strip() for p in line.split("\t") if p.strip()]
    parts = [p.strip() for p in _RE_MULTI_SPACE.split(line) if p.strip()]
    if len(parts) < ROSTER_FIELDS:
        parts = _RE_ANY_SPACE.split(line)
    return parts


def classify_roster_line(line: str, valid_cities: Sequence[str]) -> RosterLine:
    raw = line
    parts = split_roster_line(line)
    if len(parts) < ROSTER_FIELDS:
        return RosterLine(LINE_STRUCTURAL, raw)

    # extra columns beyond the fourth are ignored
    name, occupation, rank, city = parts[:ROSTER_FIELDS]
    if not (name and occupation and rank and city):
        return RosterLine(LINE_STRUCTURAL, raw)

    rec = RosterLine(LINE_OK, raw, name, occupation, rank, city)
    if city not in valid_cities:
        rec.status = LINE_INVALID_CITY
    elif occupation in valid_cities or rank in valid_cities:
        rec.status = LINE_MISPLACED_CITY
    return rec


def classify_roster_text(raw: Optional[str], valid_cities: Sequence[str]) -> Tuple[List[RosterLine], bool]:
    """
    Returns (classified lines, header_skipped). Only the first line may be a
    header; blank lines come back as structural rejects so they are counted.
    """
    lines = iter_stripped_lines(raw)
    header_skipped = False
    if lines and is_roster_header(lines[0]):
        lines = lines[1:]
        header_skipped = True
    return [classify_roster_line(ln, valid_cities) for ln in lines], header_skipped


# ------------------------------------------------------------
# Survivor stat tokens
# ------------------------------------------------------------
_RE_NUMERIC = re.compile(r"^[+-]?\d+(?:\.\d+)?$")


@dataclass
class SurvivorRecord:
    name: str
    whacks: int
    mhs: Optional[int] = None   # None = no MHS token supplied


def is_numeric_token(tok: str) -> bool:
    return bool(_RE_NUMERIC.match(tok or ""))


def _to_count(tok: str) -> int:
    # "12.7" counts as 12, same as the game's own integer parse
    return int(float(tok))


def tokenize_survivor_text(raw: Optional[str]) -> List[str]:
    text = repair_text(raw).strip()
    return text.split() if text else []


def parse_survivor_tokens(tokens: Iterable[str]) -> Tuple[List[SurvivorRecord], int]:
    """
    Grammar: NAME NUM [NUM]. A non-numeric token opens a record; a bare number
    with no name in front of it, or a name with no number after it, is skipped.

    Returns (records, skipped_token_count).
    """
    toks = list(tokens)
    records: List[SurvivorRecord] = []
    skipped = 0
    i = 0
    n = len(toks)
    while i < n:
        name = toks[i]
        if is_numeric_token(name):
            skipped += 1
            i += 1
            continue
        if i + 1 < n and is_numeric_token(toks[i + 1]):
            whacks = _to_count(toks[i + 1])
            if i + 2 < n and is_numeric_token(toks[i + 2]):
                records.append(SurvivorRecord(name, whacks, _to_count(toks[i + 2])))
                i += 3
            else:
                records.append(SurvivorRecord(name, whacks))
                i += 2
        else:
            skipped += 1
            i += 1
    return records, skipped


# ------------------------------------------------------------
# Funeral log lines
# ------------------------------------------------------------
RE_FUNERAL_DATETIME = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2}):(\d{2})\s+([AP]M)")
FUNERAL_DATETIME_FMT = "%m/%d/%Y %I:%M:%S %p"
LAST_WORDS_MARKER = "'s last words:"
NAME_CHANGE_MARKER = "Name Change"

# decorative markers the parlor puts around some names (**Name**)
NAME_MARKER = "**"


@dataclass
class GluedRecord:
    name: str
    city: str
    occupation: str
    date_time: str          # normalized text as found, e.g. "6/27/2025 7:11:42 AM"
    when: datetime
    cause: str
    raw_name: str = ""      # name text before marker stripping

    @property
    def is_name_change(self) -> bool:
        return NAME_CHANGE_MARKER in self.cause


def is_last_words_line(line: str) -> bool:
    return LAST_WORDS_MARKER in line


def strip_name_markers(name: str) -> str:
    return name.replace(NAME_MARKER, "").strip()


def locate_funeral_datetime(line: str) -> Optional[Tuple[int, int, str, datetime]]:
    """
    Find the M/D/YYYY h:mm:ss AM|PM run inside a glued line.

    Returns (start, end, normalized_text, datetime) or None. An occupation that
    ends in a digit can swallow into the month ("Agent16/27/2025"); when the
    greedy match is not a real date, retry one character later.
    """
    for m in RE_FUNERAL_DATETIME.finditer(line):
        for shift in (0, 1):
            start = m.start() + shift
            sub = RE_FUNERAL_DATETIME.match(line, start)
            if sub is None:
                continue
            text = " ".join(sub.group(0).split())
            try:
                when = datetime.strptime(text, FUNERAL_DATETIME_FMT)
            except ValueError:
                continue
            return start, sub.end(), text, when
    return None


def locate_city(text: str, valid_cities: Sequence[str]) -> Optional[Tuple[int, str]]:
    """
    Earliest city occurrence in text that leaves a non-empty name before it;
    longest city wins a tie. "ChicagoanBeirut..." resolves to Beirut.
    """
    best: Optional[Tuple[int, str]] = None
    for city in valid_cities:
        idx = text.find(city)
        while idx != -1 and not strip_name_markers(text[:idx]):
            idx = text.find(city, idx + 1)
        if idx == -1:
            continue
        if best is None or idx < best[0] or (idx == best[0] and len(city) > len(best[1])):
            best = (idx, city)
    return best


def split_glued_record(line: str, valid_cities: Sequence[str]) -> Tuple[Optional[GluedRecord], str]:
    """
    Split NAME CITY OCCUPATION DATETIME CAUSE with no delimiters.

    Returns (record, "") on success or (None, reason) where reason is
    "no_datetime" or "no_city".
    """
    line = line.strip()
    loc = locate_funeral_datetime(line)
    if loc is None:
        return None, "no_datetime"
    start, end, dt_text, when = loc

    before = line[:start]
    cause = line[end:].strip()

    found = locate_city(before, valid_cities)
    if found is None:
        return None, "no_city"
    idx, city = found

    raw_name = before[:idx].strip()
    occupation = before[idx + len(city):].strip()
    return GluedRecord(
        name=strip_name_markers(raw_name),
        city=city,
        occupation=occupation,
        date_time=dt_text,
        when=when,
        cause=cause,
        raw_name=raw_name,
    ), ""


def last_words_for(rec: GluedRecord, next_line: Optional[str]) -> Optional[str]:
    """Last words text if next_line is this record's "<name>'s last words:" line."""
    if not next_line:
        return None
    for candidate in (rec.name, rec.raw_name):
        if not candidate:
            continue
        marker = f"{candidate}{LAST_WORDS_MARKER}"
        pos = next_line.find(marker)
        if pos != -1:
            return next_line[pos + len(marker):].strip()
    return None
