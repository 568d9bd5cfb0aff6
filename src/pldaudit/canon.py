"""
Canonical Serialization and Text Normalization

Provides deterministic JSON serialization for archiving concluded forms and
the accent-insensitive text normalization used by classification and keyword
matching.

Canonical JSON follows RFC 8785 principles:
- Sorted keys (lexicographic)
- No whitespace
- UTF-8 encoding

The same object always produces the same JSON string, so an archived form
can be verified by recomputing its content hash.
"""
from __future__ import annotations

import hashlib
import json
import unicodedata
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


def _default_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for non-standard types.

    Handles:
    - datetime/date: ISO 8601 format
    - Enum: value
    - dataclass: dict
    - set/frozenset: sorted list
    """
    if isinstance(obj, datetime):
        if obj.tzinfo is not None:
            return obj.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
        return obj.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
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


def content_hash(obj: Any) -> str:
    """
    Compute SHA-256 hash of the canonical JSON representation.

    Args:
        obj: Any JSON-serializable object (including dataclasses)

    Returns:
        Hex-encoded SHA-256 hash string (64 characters)
    """
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize free text for accent- and case-insensitive comparison.

    Normalization:
    - Lowercase
    - Unicode decompose (NFD)
    - Drop combining marks (U+0300..U+036F)
    - Strip leading/trailing whitespace

    Example:
        >>> normalize_text("  Não ")
        'nao'
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    stripped = "".join(ch for ch in decomposed if not 0x300 <= ord(ch) <= 0x36F)
    return stripped.strip()
