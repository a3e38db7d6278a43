"""
Query helpers for truck listings.

Pure functions for sorting and attribute filtering over an already
materialized list of records. Inputs are never mutated.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from utils.record_codec import parse_timestamp

DEFAULT_SORT = "-created_date"
DATE_FIELDS = {"created_date"}
UNCONSTRAINED = "all"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_sort_spec(sort_by: Optional[str]) -> Tuple[str, bool]:
    """
    Split a sort spec into its field and direction.

    "-price" -> ("price", True), "year" -> ("year", False). An empty spec
    falls back to the default newest-first order.
    """
    spec = (sort_by or DEFAULT_SORT).strip() or DEFAULT_SORT
    if spec.startswith("-"):
        return spec[1:], True
    return spec, False


def _as_text(value: Any) -> str:
    """String form of a field value for lexicographic comparison."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(item) for item in value)
    return str(value)


def _sort_key(field: str):
    if field in DATE_FIELDS:
        def date_key(record: Dict) -> datetime:
            return parse_timestamp(record.get(field)) or _EARLIEST
        return date_key

    def text_key(record: Dict) -> Tuple[str, str]:
        text = _as_text(record.get(field))
        # Case-insensitive first, exact text breaks ties
        return text.casefold(), text
    return text_key


def sort_trucks(records: Iterable[Dict], sort_by: Optional[str] = DEFAULT_SORT) -> List[Dict]:
    """
    Sort records by the field named in the sort spec.

    created_date is compared as a timestamp; every other field by its string
    form, so "-price" orders 95000 before 85000 but also "9000" before "85000".
    The sort is stable in both directions.
    """
    field, descending = parse_sort_spec(sort_by)
    return sorted(records, key=_sort_key(field), reverse=descending)


def _strict_equals(actual: Any, expected: Any) -> bool:
    # No coercion: True never equals 1 and "1" never equals 1
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    numbers = (int, float)
    if isinstance(actual, numbers) and isinstance(expected, numbers):
        return actual == expected
    return type(actual) is type(expected) and actual == expected


def matches_criteria(record: Dict, criteria: Dict[str, Any]) -> bool:
    """True if the record satisfies every constrained criterion."""
    for key, value in criteria.items():
        if value is None or value == UNCONSTRAINED:
            continue
        if key not in record or not _strict_equals(record[key], value):
            return False
    return True


def filter_trucks(records: Iterable[Dict], criteria: Optional[Dict[str, Any]] = None) -> List[Dict]:
    """Keep the records matching all criteria, preserving their order."""
    criteria = criteria or {}
    return [record for record in records if matches_criteria(record, criteria)]
