"""Shared helpers for turning remote row values into Python values."""

import json
import math
from datetime import date, datetime, timezone

from dateutil import parser as date_parser


def parse_timestamp(value) -> datetime | None:
    """
    Parse an ISO timestamp coming from the backend.

    Naive timestamps are treated as UTC so they compare cleanly with
    ``datetime.now(timezone.utc)``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = date_parser.isoparse(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value) -> date | None:
    """Parse a date column, accepting full timestamps as well."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


def parse_json(value) -> dict | None:
    """JSONB payloads arrive either decoded or as a JSON string."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return value
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return None
    return decoded if isinstance(decoded, dict) else None


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like Math.round."""
    return int(math.floor(value + 0.5))
