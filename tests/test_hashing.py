# Tests for taptik.utils.hashing
# Content hashing and canonical JSON

import pytest

from taptik.utils.hashing import canonical_json, content_hash, json_hash, json_size


class TestContentHash:
    """Tests for content_hash."""

    def test_string_input(self):
        h = content_hash("hello")
        assert isinstance(h, str)
        assert len(h) == 64  # SHA256 hex length

    def test_bytes_input(self):
        assert content_hash(b"hello") == content_hash("hello")

    def test_known_digest(self):
        assert content_hash("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_different_content(self):
        assert content_hash("a") != content_hash("b")

    def test_algorithm(self):
        assert len(content_hash("hello", algorithm="md5")) == 32


class TestCanonicalJson:
    """Tests for canonical_json."""

    def test_sorted_compact(self):
        assert canonical_json({"b": 1, "a": [1, {"d": None, "c": True}]}) == '{"a":[1,{"c":true,"d":null}],"b":1}'

    def test_unicode_kept(self):
        assert canonical_json({"name": "héllo"}) == '{"name":"héllo"}'

    def test_circular_reference(self):
        tree: dict = {}
        tree["self"] = tree
        with pytest.raises(ValueError):
            canonical_json(tree)

    def test_unserializable(self):
        with pytest.raises(TypeError):
            canonical_json({"when": object()})


class TestJsonHash:
    """Tests for json_hash and json_size."""

    def test_key_order_independent(self):
        assert json_hash({"a": 1, "b": 2}) == json_hash({"b": 2, "a": 1})

    def test_matches_content_hash(self):
        assert json_hash([1, 2]) == content_hash("[1,2]")

    def test_size_counts_utf8_bytes(self):
        assert json_size({"k": "é"}) == len('{"k":"é"}'.encode("utf-8"))
