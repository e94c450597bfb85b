"""Tests for the label name/ID cache."""

import pytest

from conftest import FakeMailClient
from labeller.errors import TransportError, UnknownLabelId
from labeller.fetcher import CacheState, LabelCache


def snapshot(cache):
    """Copies of the (name -> id, id -> name) mappings."""
    return dict(cache._name_to_id), dict(cache._id_to_name)


def assert_mirrored(cache):
    """Every name maps to an ID that maps back to it, and vice versa."""
    name_to_id, id_to_name = snapshot(cache)
    assert len(name_to_id) == len(id_to_name)
    for name, label_id in name_to_id.items():
        assert id_to_name[label_id] == name
    for label_id, name in id_to_name.items():
        assert name_to_id[name] == label_id


class TestLabelCacheLoading:
    """Tests for lazy loading."""

    def test_starts_uninitialized(self, client):
        """Test that nothing is fetched until the cache is used."""
        cache = LabelCache(client)
        assert cache.state is CacheState.UNINITIALIZED
        assert client.list_label_calls == 0
        assert len(cache) == 0

    def test_ensure_loaded_is_idempotent(self, client, system_labels):
        """Test that the listing is fetched exactly once."""
        cache = LabelCache(client)
        cache.ensure_loaded()
        cache.ensure_loaded()

        assert cache.state is CacheState.LOADED
        assert client.list_label_calls == 1
        assert len(cache) == len(system_labels)
        assert_mirrored(cache)

    def test_lookups_load_implicitly(self, client):
        """Test that resolving a name loads the listing first."""
        cache = LabelCache(client)
        assert cache.resolve_to_id("Work") == "Label_1"
        assert cache.resolve_to_name("Label_2") == "example-com"
        assert client.list_label_calls == 1

    def test_failed_listing_stays_uninitialized(self, client):
        """Test that a listing failure propagates and can be retried later."""
        client.fail_list_labels = True
        cache = LabelCache(client)

        with pytest.raises(TransportError):
            cache.ensure_loaded()
        assert cache.state is CacheState.UNINITIALIZED

        client.fail_list_labels = False
        cache.ensure_loaded()
        assert cache.state is CacheState.LOADED

    def test_empty_account_counts_as_loaded(self):
        """Test that an account with no labels is not listed again."""
        client = FakeMailClient()
        cache = LabelCache(client)
        cache.resolve_to_id("first")
        cache.resolve_to_id("second")
        assert client.list_label_calls == 1


class TestResolveToId:
    """Tests for name to ID resolution with create-on-miss."""

    def test_existing_label_is_not_created(self, client):
        """Test that known names are answered from the cache."""
        cache = LabelCache(client)
        assert cache.resolve_to_id("INBOX") == "INBOX"
        assert client.created == []

    def test_missing_label_is_created_once(self, client):
        """Test that resolving twice creates the label once."""
        cache = LabelCache(client)

        first = cache.resolve_to_id("bob-smith")
        second = cache.resolve_to_id("bob-smith")

        assert first == second
        assert client.created == ["bob-smith"]
        assert "bob-smith" in cache
        assert cache.resolve_to_name(first) == "bob-smith"
        assert_mirrored(cache)

    def test_names_are_case_sensitive(self, client):
        """Test that a differently cased name is a different label."""
        cache = LabelCache(client)
        cache.resolve_to_id("work")
        assert client.created == ["work"]

    def test_failed_creation_leaves_cache_unchanged(self, client):
        """Test that a rejected name is not cached."""
        client.fail_create.add("bad/label")
        cache = LabelCache(client)
        cache.ensure_loaded()
        before = snapshot(cache)

        with pytest.raises(TransportError):
            cache.resolve_to_id("bad/label")

        assert snapshot(cache) == before
        assert "bad/label" not in cache

    def test_mirror_holds_after_many_creations(self, client):
        """Test the mirror invariant across loads and creations."""
        cache = LabelCache(client)
        for name in ["a", "b", "Work", "c", "a", "example-com", "d"]:
            cache.resolve_to_id(name)
            assert_mirrored(cache)
        assert client.created == ["a", "b", "c", "d"]


class TestResolveToName:
    """Tests for ID to name resolution."""

    def test_known_id(self, client):
        """Test that a listed ID resolves to its name."""
        cache = LabelCache(client)
        assert cache.resolve_to_name("Label_1") == "Work"

    def test_unknown_id_raises_without_mutation(self, client):
        """Test that an absent ID fails and changes nothing."""
        cache = LabelCache(client)
        cache.ensure_loaded()
        before = snapshot(cache)

        with pytest.raises(UnknownLabelId) as excinfo:
            cache.resolve_to_name("Label_404")

        assert excinfo.value.label_id == "Label_404"
        assert snapshot(cache) == before
        assert client.created == []

    def test_names_sorted(self, client):
        """Test the sorted listing of known names."""
        cache = LabelCache(client)
        cache.ensure_loaded()
        assert cache.names() == ["example-com", "IMPORTANT", "INBOX", "UNREAD", "Work"]
