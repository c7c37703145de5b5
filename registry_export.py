"""
registry_export.py — flatten a registry to a table and read it back.

CSV columns follow the tracker's export sheet:

  Name, Current_Occupation, Current_Rank, Current_City, First_Seen,
  Last_Updated, Is_New, Notes, Is_Ops, Was_HD, Is_Currently_HD, Is_Friendly,
  Whacks_Survived, MHS_Survived, Is_Dead, Death_Date, Cause_Of_Death,
  Last_Words, Career_History

Career_History is occupation|rank|city|start|end entries joined by ";", with
end = "current" for the open tenure. Backslash escapes "|", ";" and "\" inside
fields so the column splits back exactly. Booleans are Yes/No, timestamps ISO.

The XLSX workbook carries the same Players sheet plus a long-format
Career_History sheet (one row per tenure) for filtering in Excel.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from registry_model import CareerEntry, Player, Registry, to_iso, parse_iso

EXPORT_COLUMNS = [
    "Name", "Current_Occupation", "Current_Rank", "Current_City", "First_Seen",
    "Last_Updated", "Is_New", "Notes", "Is_Ops", "Was_HD", "Is_Currently_HD",
    "Is_Friendly", "Whacks_Survived", "MHS_Survived", "Is_Dead", "Death_Date",
    "Cause_Of_Death", "Last_Words", "Career_History",
]

CAREER_COLUMNS = ["Name", "Occupation", "Rank", "City", "Start_Date", "End_Date", "Is_Current"]

END_CURRENT = "current"

# Excel/openpyxl rejects control chars: 0x00-0x08, 0x0B-0x0C, 0x0E-0x1F
_ILLEGAL_XLSX_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")


def yes_no(v: bool) -> str:
    return "Yes" if v else "No"


def from_yes_no(v: str) -> bool:
    return str(v).strip().lower() in {"yes", "true", "1"}


# ------------------------------------------------------------
# Career history column
# ------------------------------------------------------------
def _escape(s: str) -> str:
    return (s or "").replace("\\", "\\\\").replace("|", "\\|").replace(";", "\\;")


def _split_escaped(s: str, sep: str) -> List[str]:
    """Split on sep, honouring backslash escapes. Escapes are kept for the next level."""
    parts: List[str] = []
    buf: List[str] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == "\\" and i + 1 < len(s):
            buf.append(s[i:i + 2])
            i += 2
            continue
        if ch == sep:
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    parts.append("".join(buf))
    return parts


def _unescape(s: str) -> str:
    return re.sub(r"\\(.)", r"\1", s)


def format_career_history(history: List[CareerEntry]) -> str:
    out = []
    for e in history:
        if e.is_current:
            end = END_CURRENT
        else:
            end = to_iso(e.end_date) or ""
        fields = [_escape(e.occupation), _escape(e.rank), _escape(e.city), to_iso(e.start_date) or "", end]
        out.append("|".join(fields))
    return ";".join(out)


def parse_career_history(text: str) -> List[CareerEntry]:
    text = (text or "").strip()
    if not text:
        return []
    entries: List[CareerEntry] = []
    for chunk in _split_escaped(text, ";"):
        fields = [_unescape(f) for f in _split_escaped(chunk, "|")]
        if len(fields) != 5:
            raise ValueError(f"Malformed career history entry: {chunk!r}")
        occupation, rank, city, start, end = fields
        is_current = end == END_CURRENT
        entries.append(CareerEntry(
            occupation=occupation,
            rank=rank,
            city=city,
            start_date=parse_iso(start),
            end_date=None if is_current else parse_iso(end),
            is_current=is_current,
        ))
    return entries


# ------------------------------------------------------------
# Registry <-> DataFrame
# ------------------------------------------------------------
def registry_to_frame(registry: Registry) -> pd.DataFrame:
    rows = []
    for name, p in sorted(registry.items()):
        rows.append({
            "Name": name,
            "Current_Occupation": p.current_occupation,
            "Current_Rank": p.current_rank,
            "Current_City": p.current_city,
            "First_Seen": to_iso(p.first_seen) or "",
            "Last_Updated": to_iso(p.last_updated) or "",
            "Is_New": yes_no(p.is_new),
            "Notes": p.notes,
            "Is_Ops": yes_no(p.is_ops),
            "Was_HD": yes_no(p.was_hd),
            "Is_Currently_HD": yes_no(p.is_currently_hd),
            "Is_Friendly": yes_no(p.is_friendly),
            "Whacks_Survived": p.whacks_survived,
            "MHS_Survived": p.mhs_survived,
            "Is_Dead": yes_no(p.is_dead),
            "Death_Date": to_iso(p.death_date) or "",
            "Cause_Of_Death": p.cause_of_death or "",
            "Last_Words": p.last_words or "",
            "Career_History": format_career_history(p.career_history),
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def career_frame(registry: Registry) -> pd.DataFrame:
    rows = []
    for name, p in sorted(registry.items()):
        for e in p.career_history:
            rows.append({
                "Name": name,
                "Occupation": e.occupation,
                "Rank": e.rank,
                "City": e.city,
                "Start_Date": to_iso(e.start_date) or "",
                "End_Date": to_iso(e.end_date) or "",
                "Is_Current": yes_no(e.is_current),
            })
    return pd.DataFrame(rows, columns=CAREER_COLUMNS)


def frame_to_registry(df: pd.DataFrame) -> Registry:
    missing = [c for c in EXPORT_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Export is missing columns: {missing}")

    registry: Registry = {}
    for _, r in df.fillna("").iterrows():
        name = str(r["Name"])
        if not name.strip():
            continue
        registry[name] = Player(
            current_occupation=str(r["Current_Occupation"]),
            current_rank=str(r["Current_Rank"]),
            current_city=str(r["Current_City"]),
            first_seen=parse_iso(r["First_Seen"]),
            last_updated=parse_iso(r["Last_Updated"]),
            is_new=from_yes_no(r["Is_New"]),
            notes=str(r["Notes"]),
            is_ops=from_yes_no(r["Is_Ops"]),
            was_hd=from_yes_no(r["Was_HD"]),
            is_currently_hd=from_yes_no(r["Is_Currently_HD"]),
            is_friendly=from_yes_no(r["Is_Friendly"]),
            whacks_survived=int(r["Whacks_Survived"] or 0),
            mhs_survived=int(r["MHS_Survived"] or 0),
            is_dead=from_yes_no(r["Is_Dead"]),
            death_date=parse_iso(r["Death_Date"]),
            cause_of_death=str(r["Cause_Of_Death"]) or None,
            last_words=str(r["Last_Words"]) or None,
            career_history=parse_career_history(str(r["Career_History"])),
        )
    return registry


# ------------------------------------------------------------
# Files
# ------------------------------------------------------------
def write_registry_csv(registry: Registry, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    registry_to_frame(registry).to_csv(path, index=False)
    return path


def read_registry_csv(path: Path) -> Registry:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing required file: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return frame_to_registry(df)


def sanitize_excel_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Required to write .xlsx safely (not semantic cleaning)."""
    if df.empty:
        return df
    out = df.copy()
    for col in out.columns:
        if pd.api.types.is_string_dtype(out[col]) or out[col].dtype == object:
            out[col] = out[col].apply(
                lambda v: _ILLEGAL_XLSX_RE.sub("", v) if isinstance(v, str) else v
            )
    return out


def write_registry_xlsx(registry: Registry, path: Path, stats: Optional[dict] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    sheets = {
        "Players": registry_to_frame(registry),
        "Career_History": career_frame(registry),
    }
    if stats:
        sheets["Stats"] = pd.DataFrame(
            [{"metric": k, "value": v} for k, v in stats.items()], columns=["metric", "value"]
        )

    with pd.ExcelWriter(path, engine="openpyxl") as xw:
        for sheet_name, df in sheets.items():
            sanitize_excel_strings(df).to_excel(xw, sheet_name=sheet_name, index=False)
            ws = xw.sheets[sheet_name]
            for idx, col in enumerate(df.columns, start=1):
                longest = max([len(str(col))] + [len(str(v)) for v in df[col].tolist()])
                ws.column_dimensions[get_column_letter(idx)].width = min(max(10, longest + 2), 60)
    return path
