# Taptik Utilities Module
# Content hashing and canonical serialization helpers

from taptik.utils.hashing import canonical_json, content_hash, json_hash, json_size

__all__ = [
    "canonical_json",
    "content_hash",
    "json_hash",
    "json_size",
]
