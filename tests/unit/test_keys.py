"""Tests for the resource key scheme."""

import pytest

from edgeport.core.ir import ResourceType
from edgeport.migrate.keys import (
    KEY_PREFIXES,
    local_id_of,
    make_key,
    normalize_local_id,
    parse_key,
)


class TestNormalizeLocalId:
    """Tests for local id normalization."""

    def test_lowercases(self):
        assert normalize_local_id("SESSIONS") == "sessions"

    def test_replaces_invalid_characters(self):
        assert normalize_local_id("My-Cache") == "my_cache"
        assert normalize_local_id("a.b c/d") == "a_b_c_d"

    def test_keeps_digits_and_underscores(self):
        assert normalize_local_id("cache_2") == "cache_2"

    def test_each_character_replaced_individually(self):
        """Runs of invalid characters are not collapsed."""
        assert normalize_local_id("a--b") == "a__b"

    def test_non_ascii_letters_replaced(self):
        assert normalize_local_id("Café") == "caf_"


class TestMakeKey:
    """Tests for make_key."""

    def test_format(self):
        assert make_key(ResourceType.NAMESPACE_STORE, "SESSIONS") == "namespace-store:sessions"

    def test_idempotent(self):
        for resource_type in ResourceType:
            assert make_key(resource_type, "My-Cache") == make_key(resource_type, "My-Cache")

    def test_variants_normalizing_identically_share_a_key(self):
        assert make_key(ResourceType.NAMESPACE_STORE, "My-Cache") == make_key(
            ResourceType.NAMESPACE_STORE, "my_cache"
        )
        assert make_key(ResourceType.NAMESPACE_STORE, "MY CACHE") == make_key(
            ResourceType.NAMESPACE_STORE, "my_cache"
        )

    def test_variants_normalizing_differently_do_not_share_a_key(self):
        assert make_key(ResourceType.NAMESPACE_STORE, "MyCache") != make_key(
            ResourceType.NAMESPACE_STORE, "my_cache"
        )

    def test_normalized_key_is_a_fixed_point(self):
        key = make_key(ResourceType.RELATIONAL_DB, "Main-DB")
        assert make_key(ResourceType.RELATIONAL_DB, local_id_of(key)) == key

    def test_same_name_different_types_do_not_collide(self):
        keys = {make_key(resource_type, "data") for resource_type in ResourceType}
        assert len(keys) == len(ResourceType)

    def test_every_type_has_a_prefix(self):
        assert set(KEY_PREFIXES) == set(ResourceType)
        assert len(set(KEY_PREFIXES.values())) == len(KEY_PREFIXES)


class TestParseKey:
    """Tests for parse_key."""

    def test_splits_type_and_local_id(self):
        assert parse_key("relational-db:db") == (ResourceType.RELATIONAL_DB, "db")

    def test_inverse_of_make_key(self):
        for resource_type in ResourceType:
            key = make_key(resource_type, "Orders-Queue")
            assert parse_key(key) == (resource_type, "orders_queue")

    def test_missing_separator(self):
        with pytest.raises(ValueError, match="missing"):
            parse_key("namespace-store")

    def test_unknown_prefix(self):
        with pytest.raises(ValueError, match="unknown prefix"):
            parse_key("bucket:assets")
