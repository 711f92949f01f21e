# ==============================================
# Tests for MetadataListSynchronizer
# ==============================================
#
# Covers load, append, remove_by_key, update_by_key and the
# write-back guarantees: non-clobber, all-or-nothing commit,
# optimistic concurrency and serialized mutations.
# ==============================================

import json
import threading
import time
from dataclasses import replace

import pytest

from admin_widgets.errors import EntityFetchError, WriteBackError
from admin_widgets.remote.entity import CUSTOMERS
from admin_widgets.sync.codec import encode_list
from admin_widgets.sync.list_sync import MetadataListSynchronizer
from admin_widgets.widgets.notes import Note

CUSTOMER_ID = "cus_01"


def make_note(note_id, content="hi"):
    return Note(id=note_id, content=content, timestamp="2024-05-01T12:00:00.000Z")


@pytest.fixture
def sync(store, notifier):
    return MetadataListSynchronizer(
        store, CUSTOMERS, "notes", Note, notifier=notifier, failure_message="Failed to save notes"
    )


def seed_notes(store, notes, **extra):
    metadata = {"a": 1, "notes": encode_list(notes), **extra}
    store.update(CUSTOMERS, CUSTOMER_ID, metadata)
    store.update_calls.clear()


class TestLoad:
    def test_absent_field_gives_empty_list(self, sync):
        entity, items = sync.load(CUSTOMER_ID)
        assert entity.id == CUSTOMER_ID
        assert items == []
        assert sync.items == []

    def test_decodes_stored_list(self, store, sync):
        notes = [make_note(1, "one"), make_note(2, "two")]
        seed_notes(store, notes)
        _, items = sync.load(CUSTOMER_ID)
        assert items == notes

    def test_malformed_json_degrades_to_empty(self, store, sync, caplog):
        store.update(CUSTOMERS, CUSTOMER_ID, {"notes": "not-json"})
        entity, items = sync.load(CUSTOMER_ID)
        assert entity is not None
        assert items == []
        assert "Error parsing notes" in caplog.text

    def test_non_array_degrades_to_empty(self, store, sync):
        store.update(CUSTOMERS, CUSTOMER_ID, {"notes": '{"id": 1}'})
        _, items = sync.load(CUSTOMER_ID)
        assert items == []

    def test_missing_entity(self, sync, caplog):
        entity, items = sync.load("cus_missing")
        assert entity is None
        assert items == []
        assert "Error fetching customers/cus_missing" in caplog.text


class TestAppend:
    def test_append_to_empty(self, store, sync):
        sync.load(CUSTOMER_ID)
        assert sync.append(make_note(1, "hi"))

        call = store.update_calls[-1]
        stored = json.loads(call["metadata"]["notes"])
        assert stored[0]["content"] == "hi"
        assert call["metadata"]["notes"].startswith('[{"id":1,"content":"hi",')
        assert len(sync.items) == 1

    def test_two_appends_accumulate_in_order(self, store, sync):
        sync.load(CUSTOMER_ID)
        assert sync.append(make_note(1, "first"))
        assert sync.append(make_note(2, "second"))

        assert [n.content for n in sync.items] == ["first", "second"]
        written = [json.loads(c["metadata"]["notes"]) for c in store.update_calls]
        assert [len(w) for w in written] == [1, 2]
        assert [n["content"] for n in written[1]] == ["first", "second"]

    def test_unrelated_metadata_not_clobbered(self, store, sync):
        sync.load(CUSTOMER_ID)
        # Written out-of-band after load
        latest = store.retrieve(CUSTOMERS, CUSTOMER_ID)
        store.update(CUSTOMERS, CUSTOMER_ID, {**latest.metadata, "b": 2})

        assert sync.append(make_note(1))
        metadata = store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata
        assert metadata["a"] == 1
        assert metadata["b"] == 2
        assert json.loads(metadata["notes"])[0]["id"] == 1

    def test_failed_update_leaves_list_untouched(self, store, sync, alerts, monkeypatch):
        seed_notes(store, [make_note(1)])
        sync.load(CUSTOMER_ID)
        before = sync.items

        def broken_update(*args, **kwargs):
            raise WriteBackError("boom")

        monkeypatch.setattr(store, "update", broken_update)
        assert not sync.append(make_note(2))
        assert sync.items == before
        assert alerts == ["Failed to save notes"]

    def test_failed_refetch_leaves_list_untouched(self, store, sync, alerts, monkeypatch):
        sync.load(CUSTOMER_ID)

        def missing(*args, **kwargs):
            raise EntityFetchError(CUSTOMERS, CUSTOMER_ID, "connection reset")

        monkeypatch.setattr(store, "retrieve", missing)
        assert not sync.append(make_note(1))
        assert sync.items == []
        assert alerts == ["Failed to save notes"]

    def test_update_returning_nothing_is_a_failure(self, store, sync, alerts, monkeypatch):
        sync.load(CUSTOMER_ID)
        monkeypatch.setattr(store, "update", lambda *args, **kwargs: None)
        assert not sync.append(make_note(1))
        assert sync.items == []
        assert alerts == ["Failed to save notes"]

    def test_notifier_may_reload(self, store, monkeypatch):
        reloads = []
        sync = MetadataListSynchronizer(store, CUSTOMERS, "notes", Note)
        sync.notifier = lambda message: reloads.append(sync.load(CUSTOMER_ID))
        sync.load(CUSTOMER_ID)
        monkeypatch.setattr(store, "update", lambda *args, **kwargs: None)

        worker = threading.Thread(target=sync.append, args=(make_note(1),), daemon=True)
        worker.start()
        worker.join(timeout=2)
        assert not worker.is_alive()
        assert len(reloads) == 1
        assert not sync.is_saving

    def test_append_without_load_fails(self, store, sync, alerts):
        assert not sync.append(make_note(1))
        assert store.update_calls == []
        assert alerts == ["Failed to save notes"]


class TestRemove:
    def test_remove_existing(self, store, sync):
        seed_notes(store, [make_note(1), make_note(2)])
        sync.load(CUSTOMER_ID)
        assert sync.remove_by_key(1)
        assert [n.id for n in sync.items] == [2]

    def test_remove_absent_key_is_idempotent(self, store, sync):
        notes = [make_note(1), make_note(2)]
        seed_notes(store, notes)
        before = store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"]
        sync.load(CUSTOMER_ID)

        assert sync.remove_by_key(999)
        assert len(store.update_calls) == 1
        assert store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"] == before
        assert sync.items == notes


class TestUpdate:
    def test_update_matching_key(self, store, sync):
        seed_notes(store, [make_note(1, "old"), make_note(2, "keep")])
        sync.load(CUSTOMER_ID)

        assert sync.update_by_key(1, lambda n: replace(n, content="new", last_edited="2024-05-02T00:00:00.000Z"))
        assert [n.content for n in sync.items] == ["new", "keep"]
        stored = json.loads(store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"])
        assert stored[0]["lastEdited"] == "2024-05-02T00:00:00.000Z"

    def test_update_non_matching_key_writes_same_list(self, store, sync):
        notes = [make_note(1)]
        seed_notes(store, notes)
        sync.load(CUSTOMER_ID)

        assert sync.update_by_key(42, lambda n: replace(n, content="never"))
        assert store.update_calls[-1]["metadata"]["notes"] == encode_list(notes)
        assert sync.items == notes


class TestConcurrency:
    def test_stale_version_rejected(self, store, sync, alerts, monkeypatch):
        sync.load(CUSTOMER_ID)
        real_retrieve = store.retrieve

        def retrieve_then_race(resource, entity_id):
            entity = real_retrieve(resource, entity_id)
            # Another writer lands between our re-fetch and our update
            store.update(resource, entity_id, {**entity.metadata, "b": 2})
            return entity

        monkeypatch.setattr(store, "retrieve", retrieve_then_race)
        assert not sync.append(make_note(1))
        assert sync.items == []
        assert alerts == ["Failed to save notes"]
        assert "notes" not in real_retrieve(CUSTOMERS, CUSTOMER_ID).metadata

    def test_field_changed_by_other_writer_is_a_conflict(self, store, sync, alerts):
        sync.load(CUSTOMER_ID)
        seed_notes(store, [make_note(7, "from another admin")])

        assert not sync.append(make_note(1))
        assert alerts == ["Failed to save notes"]
        stored = json.loads(store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"])
        assert [n["id"] for n in stored] == [7]

    def test_reload_after_conflict_allows_write(self, store, sync):
        sync.load(CUSTOMER_ID)
        seed_notes(store, [make_note(7)])
        assert not sync.append(make_note(1))

        sync.load(CUSTOMER_ID)
        assert sync.append(make_note(1))
        assert [n.id for n in sync.items] == [7, 1]

    def test_is_saving_while_in_flight(self, store, sync, monkeypatch):
        sync.load(CUSTOMER_ID)
        seen = []
        real_update = store.update

        def spy(*args, **kwargs):
            seen.append(sync.is_saving)
            return real_update(*args, **kwargs)

        monkeypatch.setattr(store, "update", spy)
        assert not sync.is_saving
        sync.append(make_note(1))
        assert seen == [True]
        assert not sync.is_saving

    def test_concurrent_appends_are_serialized(self, store, sync, monkeypatch):
        sync.load(CUSTOMER_ID)
        real_update = store.update

        def slow_update(*args, **kwargs):
            time.sleep(0.05)
            return real_update(*args, **kwargs)

        monkeypatch.setattr(store, "update", slow_update)
        results = []
        threads = [
            threading.Thread(target=lambda i=i: results.append(sync.append(make_note(i))))
            for i in (1, 2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [True, True]
        assert sorted(n.id for n in sync.items) == [1, 2]
        stored = json.loads(store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"])
        assert len(stored) == 2


class TestUnreadablePayload:
    def test_unreadable_value_kept_aside_on_next_save(self, store, sync):
        store.update(CUSTOMERS, CUSTOMER_ID, {"a": 1, "notes": "not-json"})
        sync.load(CUSTOMER_ID)

        assert sync.append(make_note(1))
        metadata = store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata
        assert metadata["notes_unreadable"] == "not-json"
        assert len(json.loads(metadata["notes"])) == 1

    def test_backup_written_only_once(self, store, sync):
        store.update(CUSTOMERS, CUSTOMER_ID, {"notes": "not-json"})
        store.update_calls.clear()
        sync.load(CUSTOMER_ID)
        sync.append(make_note(1))
        sync.append(make_note(2))
        assert "notes_unreadable" in store.update_calls[0]["metadata"]
        assert store.update_calls[-1]["metadata"]["notes_unreadable"] == "not-json"


class TestClose:
    def test_result_after_close_does_not_touch_local_state(self, store, sync):
        sync.load(CUSTOMER_ID)
        sync.close()
        assert sync.append(make_note(1))
        assert sync.items == []
        # The remote write itself still happened
        assert json.loads(store.retrieve(CUSTOMERS, CUSTOMER_ID).metadata["notes"])[0]["id"] == 1
