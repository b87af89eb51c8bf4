"""
Naming codec for stored uploads.

The content store has no TTL support, so the upload instant travels in the
leaf name itself: "<uploadTimestampMillis>_<originalName>".

    encode_name(1700000000000, "a.txt")  → "1700000000000_a.txt"
    decode_name("1700000000000_a.txt")   → DecodedEntry(1700000000000, "a.txt", ...)
    decode_name("README.md")             → None

Names the client supplies are not escaped: an original name that already
starts with "digits_" decodes to the outer timestamp only.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

ENCODED_NAME_PATTERN = re.compile(r"^(\d+)_(.+)$", re.DOTALL)


@dataclass(frozen=True)
class DecodedEntry:
    """Timestamp and original name recovered from a stored leaf name."""
    upload_timestamp_millis: int
    original_name: str
    path: Optional[str] = None


def encode_name(upload_timestamp_millis: int, original_name: str) -> str:
    """
    Build the stored leaf name for an upload.

    Args:
        upload_timestamp_millis: Upload instant, epoch milliseconds
        original_name: File name as sent by the client

    Returns:
        "<timestamp>_<original_name>"
    """
    if upload_timestamp_millis < 0:
        raise ValueError("upload timestamp must be non-negative")
    return f"{upload_timestamp_millis}_{original_name}"


def decode_name(encoded_name: str, path: Optional[str] = None) -> Optional[DecodedEntry]:
    """
    Parse a stored leaf name.

    Args:
        encoded_name: Leaf name from a store listing
        path: Full path of the entry, carried through untouched

    Returns:
        DecodedEntry, or None when the name is not managed by this scheme
    """
    if not encoded_name:
        return None

    match = ENCODED_NAME_PATTERN.match(encoded_name)
    if not match:
        return None

    return DecodedEntry(
        upload_timestamp_millis=int(match.group(1)),
        original_name=match.group(2),
        path=path,
    )


def build_path(namespace: str, encoded_name: str) -> str:
    """Join the namespace directory and a leaf name."""
    return f"{namespace.strip('/')}/{encoded_name}"


def clean_original_name(name: Optional[str]) -> Optional[str]:
    """
    Reduce a client-supplied file name to a single path segment.

    - "report.pdf"            → "report.pdf"
    - "C:\\Users\\me\\a.txt"  → "a.txt"
    - "../../etc/passwd"      → "passwd"
    - "   "                   → None

    Args:
        name: Raw file name from the multipart part

    Returns:
        Leaf name, or None if nothing usable remains
    """
    if not name:
        return None

    leaf = PurePosixPath(name.replace("\\", "/")).name.strip()

    if not leaf or leaf in (".", ".."):
        return None

    return leaf
