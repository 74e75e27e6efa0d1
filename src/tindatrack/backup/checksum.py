"""Snapshot checksum.

SHA-256 over the canonical JSON form of a snapshot's content (sorted
keys, compact separators, UTF-8), excluding the ``checksum`` field.
Detects truncation and corruption of an exported document; it is not an
authenticity guarantee.
"""

import hashlib
import json
from typing import Any


def canonical_json(content: Any) -> bytes:
    """Serialize *content* deterministically."""
    return json.dumps(
        content,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def compute_checksum(content: dict[str, Any]) -> str:
    """Return the hex SHA-256 digest of *content* without its ``checksum`` key.

    Example:
        >>> compute_checksum({"tables": {}}) == compute_checksum(
        ...     {"tables": {}, "checksum": "anything"}
        ... )
        True
    """
    body = {k: v for k, v in content.items() if k != "checksum"}
    return hashlib.sha256(canonical_json(body)).hexdigest()
