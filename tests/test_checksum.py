"""Tests for the snapshot checksum."""

import hashlib

import pytest

from tindatrack.backup.checksum import canonical_json, compute_checksum


class TestCanonicalJson:
    def test_key_order_ignored(self):
        assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})

    def test_compact(self):
        assert canonical_json({"a": [1, 2]}) == b'{"a":[1,2]}'

    def test_non_ascii_kept_as_utf8(self):
        assert canonical_json({"name": "Piña"}) == '{"name":"Piña"}'.encode("utf-8")

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            canonical_json({"price": float("nan")})


class TestComputeChecksum:
    def test_is_sha256_hex(self):
        digest = compute_checksum({"tables": {}})
        assert len(digest) == 64
        assert digest == hashlib.sha256(b'{"tables":{}}').hexdigest()

    def test_checksum_field_excluded(self):
        assert compute_checksum({"tables": {}}) == compute_checksum(
            {"tables": {}, "checksum": "anything"}
        )

    def test_single_value_change_detected(self):
        a = {"tables": {"products": [{"product_id": 1, "name": "Coke"}]}}
        b = {"tables": {"products": [{"product_id": 1, "name": "Cokf"}]}}
        assert compute_checksum(a) != compute_checksum(b)

    def test_int_and_float_differ(self):
        a = {"tables": {"products": [{"unit_price": 25}]}}
        b = {"tables": {"products": [{"unit_price": 25.0}]}}
        assert compute_checksum(a) != compute_checksum(b)

    def test_row_order_matters(self):
        rows = [{"id": 1}, {"id": 2}]
        assert compute_checksum({"t": rows}) != compute_checksum({"t": rows[::-1]})

    def test_does_not_mutate_input(self):
        content = {"tables": {}, "checksum": "x"}
        compute_checksum(content)
        assert content == {"tables": {}, "checksum": "x"}
