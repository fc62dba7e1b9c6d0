# Taptik Hashing Utilities
# Content hashing and canonical JSON serialization for packages

import hashlib
import json
from typing import Any


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON-shaped value deterministically.

    Keys are sorted and separators are compact so that equal trees always
    produce identical text, whatever their insertion order.

    Args:
        value: JSON-shaped value.

    Returns:
        Canonical JSON text.

    Raises:
        ValueError: If the value contains a circular reference.
        TypeError: If the value contains something JSON cannot represent.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def json_hash(value: Any, *, algorithm: str = "sha256") -> str:
    """Hash the canonical JSON form of a value."""
    return content_hash(canonical_json(value), algorithm=algorithm)


def json_size(value: Any) -> int:
    """Size in bytes of the canonical JSON form of a value (UTF-8)."""
    return len(canonical_json(value).encode("utf-8"))
