import json

import pytest

from scribe.datamodel import Note, NoteVersion
from scribe.storage import JsonKeyValueStore, NotesStorage


def test_load_missing_document_is_empty(kv_store):
    assert NotesStorage(kv_store).load() == []


def test_save_then_load_preserves_everything(kv_store):
    storage = NotesStorage(kv_store)
    note = Note(
        id="1",
        title="Meeting Notes",
        content="discuss budget",
        tags=["work", "work"],
        versions=[NoteVersion(content="draft", timestamp=5, description="v1")],
        created=10,
        last_edited=20,
    )
    storage.save([note])

    loaded = storage.load()
    assert loaded == [note]

    raw = json.loads(kv_store.get_item("notes"))
    assert raw[0]["lastEdited"] == 20
    assert raw[0]["versions"][0] == {"content": "draft", "timestamp": 5, "description": "v1"}


def test_load_migrates_missing_fields(kv_store, monkeypatch):
    monkeypatch.setattr("scribe.storage.now_ms", lambda: 999)
    kv_store.set_item("notes", json.dumps([{"id": "a", "title": "Old", "content": "body"}]))

    (note,) = NotesStorage(kv_store).load()
    assert note.title == "Old"
    assert note.content == "body"
    assert note.tags == []
    assert note.versions == []
    assert note.created == 999
    assert note.last_edited == 999


def test_load_keeps_present_fields(kv_store):
    record = {"id": "a", "title": "t", "content": "c", "tags": ["x"], "created": 3}
    kv_store.set_item("notes", json.dumps([record]))

    (note,) = NotesStorage(kv_store).load()
    assert note.tags == ["x"]
    assert note.created == 3
    assert note.last_edited >= 3


def test_load_corrupt_document_returns_empty_and_leaves_value(kv_store, caplog):
    kv_store.set_item("notes", "{not json")

    assert NotesStorage(kv_store).load() == []
    assert kv_store.get_item("notes") == "{not json"
    assert "Error parsing stored notes" in caplog.text


def test_load_non_array_document_returns_empty(kv_store):
    kv_store.set_item("notes", json.dumps({"foo": 1}))
    assert NotesStorage(kv_store).load() == []


def test_legacy_numeric_ids_and_unknown_fields_survive(kv_store):
    record = {"id": 1700000000000, "title": "t", "content": "c", "color": "blue"}
    kv_store.set_item("notes", json.dumps([record]))
    storage = NotesStorage(kv_store)

    (note,) = storage.load()
    assert note.id == "1700000000000"

    storage.save([note])
    assert json.loads(kv_store.get_item("notes"))[0]["color"] == "blue"


def test_storage_key_is_configurable(tmp_path):
    kv = JsonKeyValueStore(tmp_path)
    NotesStorage(kv, key="other").save([Note(id="1")])

    assert kv.get_item("notes") is None
    assert len(NotesStorage(kv, key="other").load()) == 1


def test_record_without_id_does_not_discard_the_collection(kv_store):
    records = [
        {"id": "1", "title": "Keep", "content": "good", "tags": [], "versions": []},
        {"title": "no id", "content": "legacy"},
    ]
    kv_store.set_item("notes", json.dumps(records))

    notes = NotesStorage(kv_store).load()

    assert [n.title for n in notes] == ["Keep", "no id"]
    assert notes[1].id
    assert notes[1].id != "1"
    assert notes[1].content == "legacy"


def test_invalid_field_falls_back_to_default(kv_store):
    records = [
        {"id": "1", "title": None, "content": "body", "tags": ["a"]},
        {
            "id": "2",
            "title": "t",
            "content": "c",
            "versions": [
                {"content": "ok", "timestamp": 1, "description": "v1"},
                {"timestamp": "never"},
            ],
        },
    ]
    kv_store.set_item("notes", json.dumps(records))

    first, second = NotesStorage(kv_store).load()

    assert first.title == ""
    assert first.content == "body"
    assert first.tags == ["a"]
    assert [v.description for v in second.versions] == ["v1"]


def test_repaired_load_then_save_keeps_good_notes(kv_store):
    from scribe.store import NoteStore

    records = [{"id": "1", "title": "Keep", "content": "x"}, {"title": "no id", "content": "y"}]
    kv_store.set_item("notes", json.dumps(records))

    store = NoteStore(NotesStorage(kv_store))
    store.create()

    titles = [r["title"] for r in json.loads(kv_store.get_item("notes"))]
    assert titles[:2] == ["Keep", "no id"]
    assert len(titles) == 3


def test_set_item_replaces_without_leaving_temp_files(kv_store):
    kv_store.set_item("notes", "[]")
    kv_store.set_item("notes", '[{"id": "1"}]')

    assert kv_store.get_item("notes") == '[{"id": "1"}]'
    assert [p.name for p in kv_store.data_dir.iterdir()] == ["notes.json"]


def test_failed_swap_keeps_previous_value(kv_store, monkeypatch):
    import scribe.storage as storage_module

    kv_store.set_item("notes", "[]")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(storage_module.os, "replace", broken_replace)
    with pytest.raises(OSError):
        kv_store.set_item("notes", "[1, 2")

    assert kv_store.get_item("notes") == "[]"
    assert [p.name for p in kv_store.data_dir.iterdir()] == ["notes.json"]


def test_unknown_version_fields_survive(kv_store):
    version = {"content": "c", "timestamp": 1, "description": "v1", "author": "me"}
    kv_store.set_item("notes", json.dumps([{"id": "1", "title": "t", "content": "c", "versions": [version]}]))
    storage = NotesStorage(kv_store)

    storage.save(storage.load())

    saved = json.loads(kv_store.get_item("notes"))
    assert saved[0]["versions"][0]["author"] == "me"
