"""
Tests for durable fragment storage and the domain mirror.
"""

import json

from brand_onboarding.storage import (
    DOMAIN_KEY,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    mirror_domain,
)


class TestMemoryStore:
    def test_get_set_delete(self):
        storage = MemoryKeyValueStore()
        assert storage.get(DOMAIN_KEY) is None
        storage.set(DOMAIN_KEY, "acme.com")
        assert storage.get(DOMAIN_KEY) == "acme.com"
        storage.delete(DOMAIN_KEY)
        assert storage.get(DOMAIN_KEY) is None

    def test_delete_missing_key(self):
        MemoryKeyValueStore().delete("nope")


class TestJsonFileStore:
    """Test the file-backed store."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileKeyValueStore(path).set(DOMAIN_KEY, "acme.com")
        assert JsonFileKeyValueStore(path).get(DOMAIN_KEY) == "acme.com"
        assert json.loads(path.read_text()) == {DOMAIN_KEY: "acme.com"}

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileKeyValueStore(tmp_path / "missing.json").get(DOMAIN_KEY) is None

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        storage = JsonFileKeyValueStore(path)
        assert storage.get(DOMAIN_KEY) is None
        storage.set(DOMAIN_KEY, "acme.com")
        assert storage.get(DOMAIN_KEY) == "acme.com"

    def test_non_object_file_is_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text('["acme.com"]')
        assert JsonFileKeyValueStore(path).get(DOMAIN_KEY) is None

    def test_delete(self, tmp_path):
        path = tmp_path / "state.json"
        storage = JsonFileKeyValueStore(path)
        storage.set(DOMAIN_KEY, "acme.com")
        storage.set("other", "kept")
        storage.delete(DOMAIN_KEY)
        assert storage.get(DOMAIN_KEY) is None
        assert storage.get("other") == "kept"


class TestMirrorDomain:
    """Test that the committed domain is written through to storage."""

    def test_domain_written_on_profile_change(self, store, storage):
        store.subscribe(mirror_domain(storage))
        store.set_business_profile(domain="acme.com")
        assert storage.get(DOMAIN_KEY) == "acme.com"

    def test_other_actions_ignored(self, store, storage):
        store.subscribe(mirror_domain(storage))
        store.next_step()
        store.set_competitors(["a.com"])
        assert storage.get(DOMAIN_KEY) is None

    def test_clearing_domain_keeps_saved_value(self, store, storage):
        store.subscribe(mirror_domain(storage))
        store.set_business_profile(domain="acme.com")
        store.set_business_profile(domain="")
        assert storage.get(DOMAIN_KEY) == "acme.com"

    def test_domain_survives_new_store(self, storage):
        """A fresh store (reload) can read back the domain written by the old one."""
        from brand_onboarding.state import WorkflowStore

        first = WorkflowStore()
        first.subscribe(mirror_domain(storage))
        first.set_business_profile(domain="acme.com", business_name="Acme")

        second = WorkflowStore()
        assert second.state.business_profile.domain == ""
        assert storage.get(DOMAIN_KEY) == "acme.com"
