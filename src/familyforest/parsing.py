"""Record parsing and date handling utilities."""

from datetime import date
from enum import Enum
import json
import logging
from pathlib import Path
import re
from typing import Any, TypeVar

from familyforest.graph import canonical_pair_key
from familyforest.models import (
    Gender,
    ParentChildKind,
    ParentChildRelation,
    Person,
    SpousalKind,
    SpousalRelation,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class RecordError(ValueError):
    """Raised when an input payload cannot be turned into records at all."""


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

SHORT_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

GENDER_ALIASES = {"M": Gender.MALE, "F": Gender.FEMALE, "U": Gender.UNKNOWN}


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_date_string(value: Any) -> str | None:
    """
    Parse a date value into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like:
    - "1954-11-25" and "1954-11-25T00:00:00.000Z" (API exports)
    - "1954-11" and "1954"
    - "11/25/1954"
    - "25 NOV 1954" and "November 1954"
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()

    s = str(value).strip()
    if not s:
        return None

    # Pattern 1: ISO date, optionally followed by a time part
    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$", s)
    if match:
        return _iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    # Pattern 2: "1954-11" (year and month)
    match = re.match(r"^(\d{4})-(\d{2})$", s)
    if match:
        return _iso(int(match.group(1)), int(match.group(2)), 1)

    # Pattern 3: "1954" (year only)
    match = re.match(r"^(\d{4})$", s)
    if match:
        return _iso(int(match.group(1)), 1, 1)

    # Pattern 4: "11/25/1954" (MM/DD/YYYY)
    match = re.match(r"^(\d{1,2})/(\d{1,2})/(\d{4})$", s)
    if match:
        return _iso(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    # Pattern 5: "25 NOV 1954" (day month year)
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        if month:
            return _iso(int(match.group(3)), month, int(match.group(1)))

    # Pattern 6: "November 1954" (month year)
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return _iso(int(match.group(2)), month, 1)

    logger.debug("Unparseable date %r", value)
    return None


def format_date(value: str | None) -> str:
    """Display form of an ISO date, e.g. "Mar 4, 1950"."""
    iso = parse_date_string(value)
    if iso is None:
        return "Unknown"
    d = date.fromisoformat(iso)
    return f"{SHORT_MONTHS[d.month - 1]} {d.day}, {d.year}"


def calculate_age(birth: str | None, death: str | None = None, today: date | None = None) -> str:
    birth_iso = parse_date_string(birth)
    if birth_iso is None:
        return "Unknown age"
    born = date.fromisoformat(birth_iso)
    death_iso = parse_date_string(death)
    end = date.fromisoformat(death_iso) if death_iso else (today or date.today())

    age = end.year - born.year
    if (end.month, end.day) < (born.month, born.day):
        # Birthday not reached yet in the end year
        return f"{age - 1} years old"
    return f"{age} years old (deceased)" if death_iso else f"{age} years old"


def enum_value(enum_cls: type[E], raw: Any, default: E, aliases: dict | None = None) -> E:
    if raw is None or raw == "":
        return default
    key = str(raw).strip()
    if aliases and key.upper() in aliases:
        return aliases[key.upper()]
    try:
        return enum_cls(key.lower())
    except ValueError:
        logger.warning("Unknown %s value %r; using %s", enum_cls.__name__, raw, default.value)
        return default


def _id(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def parse_person(record: dict) -> Person:
    _require_object(record, "Person")
    person_id = _id(record.get("id"))
    if person_id is None:
        raise RecordError(f"Person record without id: {record!r}")

    first_name = record.get("firstName")
    if not first_name:
        logger.warning("Person %s has no first name", person_id)
        first_name = "Unknown"

    return Person(
        id=person_id,
        first_name=str(first_name),
        last_name=record.get("lastName") or None,
        birth_date=parse_date_string(record.get("birthDate")),
        death_date=parse_date_string(record.get("deathDate")),
        gender=enum_value(Gender, record.get("gender"), Gender.UNKNOWN, GENDER_ALIASES),
        bio=record.get("bio") or None,
        image_url=record.get("imageUrl") or None,
    )


def _require_object(record: Any, what: str):
    if not isinstance(record, dict):
        raise RecordError(f"{what} record must be an object, got {type(record).__name__}")


def _endpoint(record: dict, flat_key: str, nested_key: str) -> str | None:
    if record.get(flat_key):
        return _id(record[flat_key])
    nested = record.get(nested_key)
    if nested is None:
        return None
    _require_object(nested, f"Nested '{nested_key}'")
    return _id(nested.get("id"))


def _record_list(record: dict, *keys: str) -> list:
    """Concatenate the arrays stored under keys; null counts as empty."""
    found: list = []
    for key in keys:
        value = record.get(key) or []
        if not isinstance(value, list):
            raise RecordError(
                f"'{key}' must be a list, got {type(value).__name__}"
            )
        found.extend(value)
    return found


def parse_parent_child(record: dict) -> ParentChildRelation | None:
    _require_object(record, "Parent-child")
    parent_id = _endpoint(record, "parentId", "parent")
    child_id = _endpoint(record, "childId", "child")
    if parent_id is None or child_id is None:
        logger.warning("Dropping parent-child record with a missing endpoint: %r", record)
        return None
    return ParentChildRelation(
        parent_id=parent_id,
        child_id=child_id,
        kind=enum_value(ParentChildKind, record.get("type"), ParentChildKind.BIOLOGICAL),
    )


def parse_spousal(record: dict) -> SpousalRelation | None:
    _require_object(record, "Spousal")
    spouse1_id = _endpoint(record, "spouse1Id", "spouse1")
    spouse2_id = _endpoint(record, "spouse2Id", "spouse2")
    if spouse1_id is None or spouse2_id is None:
        logger.warning("Dropping spousal record with a missing endpoint: %r", record)
        return None
    return SpousalRelation(
        spouse1_id=spouse1_id,
        spouse2_id=spouse2_id,
        kind=enum_value(SpousalKind, record.get("type"), SpousalKind.MARRIED),
        start_date=parse_date_string(record.get("startDate")),
        end_date=parse_date_string(record.get("endDate")),
    )


def _normalize_nested(
    records: list,
) -> tuple[list[Person], list[ParentChildRelation], list[SpousalRelation]]:
    """
    People as served by the API: each person carries the relations it takes
    part in, so every relation shows up once per endpoint.
    """
    people: list[Person] = []
    parent_child: dict[tuple[str, str], ParentChildRelation] = {}
    spousal: dict[str, SpousalRelation] = {}

    for record in records:
        person = parse_person(record)
        people.append(person)

        for raw in _record_list(record, "parentRelations", "childRelations"):
            rel = parse_parent_child(raw)
            if rel is not None:
                parent_child.setdefault((rel.parent_id, rel.child_id), rel)

        for raw in _record_list(record, "spouseRelations1", "spouseRelations2"):
            rel = parse_spousal(raw)
            if rel is not None:
                spousal.setdefault(canonical_pair_key(rel.spouse1_id, rel.spouse2_id), rel)

    return people, list(parent_child.values()), list(spousal.values())


def load_records(
    payload: Any,
) -> tuple[list[Person], list[ParentChildRelation], list[SpousalRelation]]:
    """
    Extract people and relations from a decoded JSON payload.

    Accepts the flat form {"people": [...], "relationships": [...], "spouses": [...]}
    or the API's list of people with nested relations.
    """
    if isinstance(payload, list):
        return _normalize_nested(payload)
    if not isinstance(payload, dict) or "people" not in payload:
        raise RecordError("Expected a list of people or an object with a 'people' key")

    people = [parse_person(r) for r in _record_list(payload, "people")]
    parent_child = [
        rel for rel in (parse_parent_child(r) for r in _record_list(payload, "relationships")) if rel
    ]
    spousal = [rel for rel in (parse_spousal(r) for r in _record_list(payload, "spouses")) if rel]
    return people, parent_child, spousal


def load_json(
    filepath: Path,
) -> tuple[list[Person], list[ParentChildRelation], list[SpousalRelation]]:
    """Read a JSON export and return its records."""
    with open(filepath, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordError(f"{filepath} is not valid JSON: {e}") from e
    return load_records(payload)
