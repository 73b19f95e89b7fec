"""Time utilities for UTC timestamp parsing and formatting."""

from datetime import datetime, timezone

from dateutil import parser as date_parser

# Fills in the parts a loose date leaves out: month and day default to 1, time to midnight UTC.
_PARSE_DEFAULT = datetime(2000, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_z(dt: datetime) -> str:
    """
    Convert datetime to ISO 8601 UTC string with millisecond precision and Z suffix.

    Args:
        dt: Datetime object (must be timezone-aware)

    Returns:
        ISO 8601 UTC timestamp (e.g., '2025-12-23T00:27:07.804Z')

    Raises:
        ValueError: If datetime is naive (not timezone-aware)
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
        )

    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_utc(value: str) -> datetime:
    """
    Parse a ledger date string into an aware UTC datetime.

    ISO 8601 is tried first. Anything else goes through dateutil, so the
    looser forms people type into metadata ("2024/01/01", "Jan 1, 2024",
    "2024-01") are read too. Values without an offset are read as UTC.

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date string: {value!r}")
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = date_parser.parse(text, default=_PARSE_DEFAULT)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Not a date string: {value!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
