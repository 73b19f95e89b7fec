"""Decode raw Blob metadata objects into ProjectRecords."""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from blobshowcase.errors import DecodeError
from blobshowcase.ledger.models import ObjectDetail
from blobshowcase.projects.models import ProjectRecord
from blobshowcase.utils.logging import get_logger
from blobshowcase.utils.time import parse_utc, to_utc_z, utc_now

logger = get_logger(__name__)

# content.fields.value.fields.metadata.fields.contents
CONTENTS_PATH = ("content", "fields", "value", "fields", "metadata", "fields", "contents")

DATE_KEYS = ("startDate", "expiredDate", "end_date")
EXPIRY_KEYS = ("expiredDate", "end_date")
INTEGER_KEYS = ("status", "epochs", "ownership")
BOOLEAN_KEY = "isBuild"
QUALITY_KEY = "quality"
RESERVED_KEYS = ("id", "parentId", "blobId")

NOT_A_NUMBER = math.nan

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class ContentsDecodeResult:
    """Outcome of walking a raw detail down to its contents list."""

    contents: Optional[List[Any]] = None
    missing_key: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.contents is not None


def _walk(payload: Any, path: Iterable[str]) -> List[Any]:
    node = payload
    for key in path:
        if not isinstance(node, dict) or node.get(key) is None:
            raise DecodeError(f"Missing '{key}' in metadata structure", missing_key=key)
        node = node[key]
    if not isinstance(node, list):
        raise DecodeError("Metadata contents is not a list", missing_key=CONTENTS_PATH[-1])
    return node


def decode_contents(payload: Any) -> ContentsDecodeResult:
    """
    Locate the metadata contents list inside a raw object detail.

    Returns:
        ContentsDecodeResult with either the list or the first missing key
    """
    try:
        return ContentsDecodeResult(contents=_walk(payload, CONTENTS_PATH))
    except DecodeError as e:
        return ContentsDecodeResult(missing_key=e.missing_key)


def parse_int_prefix(value: str) -> Union[int, float]:
    """
    Parse the leading base-10 integer of a string ("12abc" -> 12).

    Returns:
        The integer, or NOT_A_NUMBER when there is no leading digit
    """
    match = _INT_PREFIX.match(value) if isinstance(value, str) else None
    if not match:
        return NOT_A_NUMBER
    return int(match.group(1))


def is_not_a_number(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _coerce_date(key: str, value: str) -> tuple[str, Optional[datetime]]:
    """Return the ISO string and parsed instant, or the raw value and None."""
    try:
        parsed = parse_utc(value)
    except (TypeError, ValueError) as e:
        logger.error(f"Error parsing date {key}={value!r}: {e}")
        return value, None
    return to_utc_z(parsed), parsed


def _coerce_quality(value: str) -> Optional[float]:
    try:
        quality = float(value)
    except (TypeError, ValueError):
        logger.error(f"Error parsing quality {value!r}")
        return None
    if math.isnan(quality):
        return None
    return quality


def _as_dict(detail: Union[ObjectDetail, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(detail, ObjectDetail):
        return detail.as_raw()
    return detail if isinstance(detail, dict) else {}


def normalize_project(
    detail: Union[ObjectDetail, Dict[str, Any], None],
    index: int,
    now: Optional[datetime] = None,
) -> Optional[ProjectRecord]:
    """
    Turn one raw Blob metadata object into a ProjectRecord.

    Args:
        detail: ObjectDetail or the equivalent response dict (objectId, parentId, content)
        index: Position of the detail in the fetched sequence, used as the record id
        now: Reference instant for the expiry check (defaults to current UTC time)

    Returns:
        ProjectRecord, or None when the structure is invalid or the project has expired
    """
    raw = _as_dict(detail)
    decoded = decode_contents(raw)
    if not decoded.ok:
        logger.warning(
            f"Invalid or incomplete metadata structure for {raw.get('objectId') or '<unknown>'}: "
            f"missing '{decoded.missing_key}'"
        )
        return None

    project_data: Dict[str, Any] = {
        "id": index,
        "parentId": raw.get("parentId") or "",
        "blobId": raw.get("objectId") or "",
        BOOLEAN_KEY: False,
    }
    expiry: Dict[str, datetime] = {}

    for entry in decoded.contents:
        fields = entry.get("fields") if isinstance(entry, dict) else None
        if not isinstance(fields, dict) or not fields.get("key") or not fields.get("value"):
            continue
        if not isinstance(fields["key"], str):
            continue
        key = fields["key"]
        value = fields["value"]

        if key in RESERVED_KEYS:
            logger.warning(f"Ignoring reserved metadata key '{key}' on {project_data['blobId']}")
            continue

        if key in DATE_KEYS:
            value, parsed = _coerce_date(key, value)
            if parsed is not None and key in EXPIRY_KEYS:
                expiry[key] = parsed
        elif key in INTEGER_KEYS:
            value = parse_int_prefix(value)
        elif key == BOOLEAN_KEY:
            value = value == "true"
        elif key == QUALITY_KEY:
            value = _coerce_quality(value)
            if value is None:
                continue

        project_data[key] = value

    reference = now or utc_now()
    for key in EXPIRY_KEYS:
        if key in expiry and expiry[key] < reference:
            logger.info(
                f"Project {project_data.get('site-name')} is expired. "
                f"Expiry date: {project_data[key]}"
            )
            return None

    try:
        return ProjectRecord.model_validate(project_data)
    except ValidationError as e:
        logger.warning(f"Dropping metadata {project_data['blobId']}: {e}")
        return None


def normalize_projects(
    details: Iterable[Union[ObjectDetail, Dict[str, Any], None]],
    now: Optional[datetime] = None,
) -> List[ProjectRecord]:
    """Normalize a fetched sequence, indexing by position and dropping rejected records."""
    reference = now or utc_now()
    projects = []
    for index, detail in enumerate(details):
        project = normalize_project(detail, index, now=reference)
        if project is not None:
            projects.append(project)
    return projects
