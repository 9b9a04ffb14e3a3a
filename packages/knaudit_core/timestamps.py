"""Timestamps for the audit record.

Two sources exist: the wall clock at assembly time, or the logical date the
scheduler embedded in the run id, e.g.
``manual__2023-02-13T131127.5671880000-27f960c46`` -> ``2023-02-13T13:11:27Z``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime

from packages.knaudit_core.errors import CollectionError

Clock = Callable[[], datetime]

_RUN_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})T(\d{2}):?(\d{2}):?(\d{2})")
_RUN_DATE_FORMAT = "%Y-%m-%dT%H%M%S"
WIRE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def current_timestamp(clock: Clock = utc_now) -> str:
    """Return the clock's time in RFC 3339 UTC form, seconds precision."""
    now = clock()
    if now.tzinfo is not None:
        now = now.astimezone(UTC)
    return now.strftime(WIRE_FORMAT)


def extract_run_date(run_id: str) -> str:
    """Return the ``YYYY-MM-DDTHHMMSS`` date embedded in a run id."""
    match = _RUN_DATE.search(run_id)
    if match is None:
        raise CollectionError(f"no date found in run id '{run_id}'")
    date, hours, minutes, seconds = match.groups()
    return f"{date}T{hours}{minutes}{seconds}"


def format_run_date(value: str) -> str:
    """Reformat ``2023-02-13T131127`` as ``2023-02-13T13:11:27Z``."""
    try:
        parsed = datetime.strptime(value, _RUN_DATE_FORMAT)
    except ValueError as exc:
        raise CollectionError(f"invalid run date '{value}': {exc}") from exc
    return parsed.strftime(WIRE_FORMAT)


def run_id_timestamp(run_id: str) -> str:
    """Return the wire-format timestamp of a run id's embedded date."""
    return format_run_date(extract_run_date(run_id))
