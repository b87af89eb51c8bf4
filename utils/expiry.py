"""
Expiry evaluation for stored uploads.

All arithmetic is on integer epoch milliseconds. Expiry is never stored;
it is recomputed from the upload timestamp on every listing and sweep.
"""

import time
from datetime import datetime, timedelta, timezone

# 24 hours
RETENTION_MILLIS = 24 * 60 * 60 * 1000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold
MAX_TIMESTAMP_MILLIS = 253_402_300_799_999


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def is_expired(
    upload_timestamp_millis: int,
    now_millis: int,
    retention_millis: int = RETENTION_MILLIS
) -> bool:
    """
    Check whether an upload is past its retention window.

    Strictly greater-than: an entry exactly retention_millis old is kept.

    Args:
        upload_timestamp_millis: Upload instant from the stored name
        now_millis: Reference instant for this evaluation
        retention_millis: Retention window

    Returns:
        True if the entry may be deleted
    """
    return now_millis - upload_timestamp_millis > retention_millis


def expires_at_millis(
    upload_timestamp_millis: int,
    retention_millis: int = RETENTION_MILLIS
) -> int:
    """Last instant at which the upload is still retained."""
    return upload_timestamp_millis + retention_millis


def within_calendar_range(
    upload_timestamp_millis: int,
    retention_millis: int = RETENTION_MILLIS
) -> bool:
    """
    Check that an upload and its expiry can both be shown as dates.

    A stray "99999999999999999999_x" name decodes fine but has no calendar
    date; listing and sweep treat such entries as undecodable.
    """
    return 0 <= upload_timestamp_millis <= MAX_TIMESTAMP_MILLIS - retention_millis


def millis_to_datetime(value: int) -> datetime:
    """
    Convert epoch milliseconds to an aware UTC datetime without float rounding.

    Raises:
        ValueError: If the value is outside 0..MAX_TIMESTAMP_MILLIS
    """
    if not 0 <= value <= MAX_TIMESTAMP_MILLIS:
        raise ValueError(f"timestamp out of range: {value}")
    return EPOCH + timedelta(milliseconds=value)
