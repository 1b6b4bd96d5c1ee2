"""
Canonical JSON Serialization

Deterministic JSON for hashing and comparing engine output:
- Sorted keys (lexicographic)
- No whitespace
- Decimals as strings (precision preserved)
- Dates as ISO 8601

The same timeline always serializes to the same bytes, so a stored
fingerprint tells a caller whether recomputing a case changed anything.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID


def _default_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for non-standard types.

    Handles datetime/date, UUID, Decimal, Enum, dataclasses and sets.
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        default=_default_serializer,
        ensure_ascii=False,
    )


def canonical_json_bytes(obj: Any) -> bytes:
    return canonical_json(obj).encode("utf-8")


def content_hash(obj: Any) -> str:
    """Hex SHA-256 of the canonical JSON form (64 characters)."""
    return hashlib.sha256(canonical_json_bytes(obj)).hexdigest()


def content_hash_short(obj: Any, length: int = 12) -> str:
    return content_hash(obj)[:length]


def timeline_fingerprint(deadlines: Iterable[Any]) -> str:
    """
    Hash of an ordered deadline list.

    Order is significant: the same deadlines in a different order give a
    different fingerprint.
    """
    return content_hash([d.to_dict() for d in deadlines])
