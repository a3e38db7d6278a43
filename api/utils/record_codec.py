"""
Record codec for truck listings.

Pure functions mapping the partial objects supplied by callers onto the
canonical stored record and back. The codec never rejects input; value
validation belongs to the callers.
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ALIAS_FIELDS = {"imperial_inspected": "company_inspected"}

# Fields filled when absent (or null) on every normalized record
DEFAULT_FIELDS = {
    "status": "available",
    "company_inspected": False,
    "features": list,
    "images": list,
    "inspection_notes": "",
}

CREATED_SOURCE = "admin_created"
UPDATED_SOURCE = "admin_updated"

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_truck_id() -> str:
    """Generate a new truck id: base36 millisecond timestamp plus a random suffix."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=10))
    return f"{timestamp}{suffix}"


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-01-15T10:20:30.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as written by utc_now_iso or by callers.

    Naive values are taken as UTC. Returns None for missing or unparseable values.
    """
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _fold_aliases(data: Dict[str, Any]) -> Dict[str, Any]:
    folded = dict(data)
    for alias, canonical in ALIAS_FIELDS.items():
        if alias in folded:
            value = folded.pop(alias)
            if folded.get(canonical) is None:
                folded[canonical] = value
    return folded


def _fill_defaults(record: Dict[str, Any]) -> Dict[str, Any]:
    for field, default in DEFAULT_FIELDS.items():
        if record.get(field) is None:
            record[field] = default() if callable(default) else default
    return record


def normalize_for_store(data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the full stored record from a partial input.

    Without ``existing`` this is the create path: a fresh id and created_date
    are assigned and any caller-supplied ``id`` is ignored. With ``existing``
    the input is shallow-merged over it: supplied fields overwrite, the id and
    created_date are kept and updated_date is refreshed.

    Args:
        data: Partial record supplied by the caller
        existing: Stored record being updated, if any

    Returns:
        dict: The record to store
    """
    incoming = _fold_aliases(data or {})
    incoming.pop("id", None)

    if existing is None:
        record = {"id": generate_truck_id(), **incoming}
        record["created_date"] = utc_now_iso()
        record.pop("updated_date", None)
        record["source"] = incoming.get("source") or CREATED_SOURCE
    else:
        current = denormalize_for_caller(existing)
        record = {**current, **incoming}
        record["id"] = current["id"]
        record["created_date"] = current.get("created_date") or utc_now_iso()
        record["updated_date"] = utc_now_iso()
        record["source"] = incoming.get("source") or current.get("source") or UPDATED_SOURCE

    return _fill_defaults(record)


def normalize_imported(record: Dict[str, Any]) -> Dict[str, Any]:
    """Fill defaults on a record taken from an import document, keeping its identity and timestamps."""
    normalized = _fold_aliases(record)
    if not normalized.get("created_date"):
        normalized["created_date"] = utc_now_iso()
    return _fill_defaults(normalized)


def denormalize_for_caller(stored: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a stored record with list fields guaranteed and a strict boolean inspection flag."""
    record = _fold_aliases(stored)
    record["features"] = list(record.get("features") or [])
    record["images"] = list(record.get("images") or [])
    record["company_inspected"] = record.get("company_inspected") is True
    return record
