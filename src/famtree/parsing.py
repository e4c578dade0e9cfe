"""Member record normalization and date handling utilities."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
import logging
import re

from famtree.models import DEFAULT_GENERATION, Gender, Person
from famtree.photos import PhotoResolver, resolve_photo_url

logger = logging.getLogger(__name__)


class RecordError(ValueError):
    """A raw member record that cannot become a Person."""


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

GENDER_ALIASES = {
    "male": Gender.MALE,
    "m": Gender.MALE,
    "female": Gender.FEMALE,
    "f": Gender.FEMALE,
    "other": Gender.OTHER,
    "o": Gender.OTHER,
}


def _iso(year: int, month: int | None, day: int) -> str:
    """Return YYYY-MM-DD, or "" when the parts do not form a real date."""
    if not month:
        return ""
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def normalize_date_of_birth(value) -> str:
    """
    Normalize a date of birth into ISO format (YYYY-MM-DD).
    Returns "" if the value is missing or cannot be parsed.

    Handles date/datetime objects and strings like:
    - "1954-11-25" or "1954-11-25T00:00:00.000Z"
    - "25 NOV 1954" / "25 November 1954"
    - "November 25, 1954" / "Nov. 25 1954"
    - "11/25/1954" or "11-25-1954"
    - "1954"
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return ""

    s = value.strip()
    if not s:
        return ""

    # Drop the time part of an ISO timestamp
    match = re.match(r"^(\d{4}-\d{1,2}-\d{1,2})[T ]", s)
    if match:
        s = match.group(1)

    # Pattern 0: ISO "1954-11-25"
    match = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})$", s)
    if match:
        return _iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    # Pattern 1: "25 NOV 1954" (day month year)
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        return _iso(int(match.group(3)), month, int(match.group(1)))

    # Pattern 2: "November 25, 1954" (month day, year)
    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        return _iso(int(match.group(3)), month, int(match.group(2)))

    # Pattern 3: "11/25/1954" or "11-25-1954" (MM/DD/YYYY)
    match = re.match(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$", s)
    if match:
        return _iso(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    # Pattern 4: "1954" (year only)
    match = re.match(r"^(\d{4})$", s)
    if match:
        return f"{int(match.group(1)):04d}-01-01"

    return ""


def normalize_gender(value) -> Gender:
    """Map a raw gender value onto Gender, defaulting to male."""
    if isinstance(value, Gender):
        return value
    if isinstance(value, str):
        return GENDER_ALIASES.get(value.strip().lower(), Gender.MALE)
    return Gender.MALE


def normalize_generation(value) -> int:
    """Integer generation; integral floats (0.0, "2.0") count, anything else is the default."""
    if isinstance(value, bool):
        return DEFAULT_GENERATION
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            try:
                value = float(value)
            except ValueError:
                return DEFAULT_GENERATION
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return DEFAULT_GENERATION


def extract_ref_id(ref) -> str | None:
    """Identifier of a relationship field, nested ({"_id": ...}) or bare."""
    if isinstance(ref, Mapping):
        ref = ref.get("_id") if ref.get("_id") is not None else ref.get("id")
    if ref is None or isinstance(ref, (bool, Mapping)):
        return None
    ref_id = str(ref).strip()
    return ref_id or None


def extract_record_id(record: Mapping) -> str:
    """Extract the record's own identifier from '_id' or 'id'."""
    if not isinstance(record, Mapping):
        raise RecordError(f"Not a member record: {record!r}")
    record_id = extract_ref_id({"_id": record.get("_id"), "id": record.get("id")})
    if record_id is None:
        raise RecordError(
            f"No ID found in record for {record.get('firstName')} {record.get('lastName')}"
        )
    return record_id


def normalize_record(record: Mapping, photo_resolver: PhotoResolver | None = None) -> Person:
    """Build a Person from one raw member record."""
    resolve = photo_resolver or resolve_photo_url
    person_id = extract_record_id(record)

    photo = record.get("photo")
    photo_ref = resolve(photo) if isinstance(photo, str) and photo.strip() else None

    return Person(
        id=person_id,
        first_name=str(record.get("firstName") or ""),
        last_name=str(record.get("lastName") or ""),
        gender=normalize_gender(record.get("gender")),
        date_of_birth=normalize_date_of_birth(record.get("dateOfBirth")),
        generation=normalize_generation(record.get("generation")),
        photo_ref=photo_ref,
    )


def dedupe_records(records: Iterable[Mapping]) -> list[Mapping]:
    """
    Keep the first record seen for each identifier.

    Records without an identifier are dropped. Partial or repeated backend
    responses are expected, so duplicates are only logged.
    """
    seen: set[str] = set()
    unique: list[Mapping] = []
    for record in records:
        try:
            record_id = extract_record_id(record)
        except RecordError as e:
            logger.warning("Dropping member record: %s", e)
            continue
        if record_id in seen:
            logger.warning(
                "Duplicate member detected: %s %s (ID %s), keeping first occurrence",
                record.get("firstName"),
                record.get("lastName"),
                record_id,
            )
            continue
        seen.add(record_id)
        unique.append(record)
    return unique


def normalize_records(
    records: Iterable[Mapping], photo_resolver: PhotoResolver | None = None
) -> dict[str, Person]:
    """Deduplicated mapping of person id -> Person, in first-seen order."""
    people: dict[str, Person] = {}
    for record in dedupe_records(records):
        person = normalize_record(record, photo_resolver)
        people[person.id] = person
    logger.debug("Normalized %d people", len(people))
    return people
