"""Input adapters: JSON records and GEDCOM files, plus date handling."""

import json
import re
from pathlib import Path

from ged4py import GedcomReader

from kinlayout.models import (
    PARENT_CHILD,
    PARTNER,
    Person,
    Relationship,
    coerce_people,
    coerce_relationships,
)

# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1, "JANUARY": 1,
    "FEB": 2, "FEBRUARY": 2,
    "MAR": 3, "MARCH": 3,
    "APR": 4, "APRIL": 4,
    "MAY": 5,
    "JUN": 6, "JUNE": 6,
    "JUL": 7, "JULY": 7,
    "AUG": 8, "AUGUST": 8,
    "SEP": 9, "SEPT": 9, "SEPTEMBER": 9,
    "OCT": 10, "OCTOBER": 10,
    "NOV": 11, "NOVEMBER": 11,
    "DEC": 12, "DECEMBER": 12,
}  # fmt: skip

QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, group order) where order names the groups as day/month/year
DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), "ymd"),  # 1839-08-29
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), "dmy"),  # 25 NOV 1954, 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "my"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{4})$"), "y"),  # 1698
    (re.compile(r"^(\d{1,2})[-/\s](\d{1,2})[-/\s](\d{4})$"), "mdy"),  # 01-27-1920, 04 05 1911
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), "mdy"),  # April 17, 1850
]


def _month(value: str) -> int | None:
    if value.isdigit():
        month = int(value) or 1
        return month if month <= 12 else None
    return MONTH_MAP.get(value.upper().rstrip("."))


def parse_date_string(date_str: str | None) -> str | None:
    """
    Normalise a free-form genealogy date to ISO format (YYYY-MM-DD).

    Qualifiers such as ABT/BEF/CIRCA are dropped; a missing month or day
    defaults to 1. Returns None if the date cannot be parsed.
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = QUALIFIERS.sub("", s).strip()
    if not s:
        return None

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue
        parts = dict(zip(order, match.groups()))
        year = int(parts["y"])
        month = _month(parts.get("m", "1"))
        day = int(parts.get("d", "1")) or 1
        if month and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"
    return None


# ============================================================================
# JSON
# ============================================================================


def load_records(path: Path) -> tuple[list[Person], list[Relationship]]:
    """Read `{"people": [...], "relationships": [...]}` from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return (
        coerce_people(data.get("people", [])),
        coerce_relationships(data.get("relationships", [])),
    )


# ============================================================================
# GEDCOM
# ============================================================================


def xref_to_id(xref_id: str) -> str:
    """'@I_347421849@' -> 'I_347421849'"""
    return xref_id.strip("@")


def extract_name(indi) -> str | None:
    """Display name of an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return None

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_rec.value, tuple):
        return " ".join(p for p in name_rec.value if p) or None
    return str(name_rec.value).replace("/", "").strip() or None


def extract_event_date(indi, tag: str) -> str | None:
    """Raw DATE value of an event tag (BIRT, DEAT, etc.)."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    # ged4py may return DateValue objects
    return str(date_rec.value) if date_rec and date_rec.value else None


def _pedigrees(indi) -> dict[str, str]:
    """Family xref -> PEDI value for each FAMC link of an individual."""
    result = {}
    for famc in indi.sub_tags("FAMC", follow=False):
        pedi = famc.sub_tag("PEDI")
        if famc.value and pedi is not None and pedi.value:
            result[famc.value] = str(pedi.value).lower()
    return result


def parse_gedcom(filepath: Path) -> tuple[list[Person], list[Relationship]]:
    """
    Read people and relationships from a GEDCOM file.

    Each FAM record yields a partner edge between HUSB and WIFE (divorced
    when the family carries a DIV tag) and a parent_child edge from each
    spouse to each CHIL. Children linked with PEDI "adopted" get adoptive
    parent links, all others biological.
    """
    people: list[Person] = []
    relationships: list[Relationship] = []
    pedigree: dict[tuple[str, str], str] = {}

    with GedcomReader(str(filepath)) as reader:
        for order, rec in enumerate(reader.records0("INDI")):
            if rec.xref_id is None:
                continue
            person_id = xref_to_id(rec.xref_id)
            birth_date = parse_date_string(extract_event_date(rec, "BIRT"))
            people.append(
                Person(
                    id=person_id,
                    name=extract_name(rec),
                    birth_date=birth_date,
                    birth_date_unknown=birth_date is None,
                    creation_order=order,
                    is_deceased=rec.sub_tag("DEAT") is not None,
                )
            )
            for fam_xref, pedi in _pedigrees(rec).items():
                pedigree[(person_id, fam_xref)] = pedi

        for rec in reader.records0("FAM"):
            if rec.xref_id is None:
                continue
            fam_id = xref_to_id(rec.xref_id)

            spouses = []
            for tag in ("HUSB", "WIFE"):
                spouse = rec.sub_tag(tag)
                if spouse is not None and spouse.xref_id:
                    spouses.append(xref_to_id(spouse.xref_id))

            if len(spouses) == 2:
                status = "divorced" if rec.sub_tag("DIV") is not None else "current"
                relationships.append(
                    Relationship(f"{fam_id}:partner", PARTNER, *spouses, status=status)
                )

            for child in rec.sub_tags("CHIL"):
                if not child.xref_id:
                    continue
                child_id = xref_to_id(child.xref_id)
                adopted = pedigree.get((child_id, rec.xref_id)) == "adopted"
                for parent_id in spouses:
                    relationships.append(
                        Relationship(
                            f"{fam_id}:{parent_id}:{child_id}",
                            PARENT_CHILD,
                            parent_id,
                            child_id,
                            parent_type="adoptive" if adopted else "biological",
                        )
                    )

    return people, relationships
