import json
from unittest.mock import MagicMock, call

import pytest
from firebase_admin import firestore

from gitconsistent.errors import NotFound, describe_store_failure
from gitconsistent.services.store_service import (
    HABIT_LOGS,
    HABITS,
    USER_SETTINGS,
    FirestoreDocumentStore,
    JsonDocumentStore,
    create_store,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def json_store(tmp_path):
    return JsonDocumentStore(str(tmp_path / "db"))


def test_add_get_and_file_layout(json_store, tmp_path):
    doc_id = json_store.add(HABITS, {"userId": "u1", "name": "Read"})
    assert doc_id.startswith("habit_")
    assert json_store.get(HABITS, doc_id) == {"id": doc_id, "userId": "u1", "name": "Read"}
    assert json_store.get(HABITS, "missing") is None

    with open(tmp_path / "db" / "habits.json", encoding="utf-8") as f:
        on_disk = json.load(f)
    assert on_disk == {doc_id: {"userId": "u1", "name": "Read"}}


def test_query_filters_and_ordering(json_store):
    json_store.set(HABITS, "a", {"userId": "u1", "archived": False, "createdAt": "2024-01-01T00:00:00"})
    json_store.set(HABITS, "b", {"userId": "u1", "archived": False, "createdAt": "2024-03-01T00:00:00"})
    json_store.set(HABITS, "c", {"userId": "u1", "archived": True, "createdAt": "2024-02-01T00:00:00"})
    json_store.set(HABITS, "d", {"userId": "u2", "archived": False, "createdAt": "2024-04-01T00:00:00"})
    json_store.set(HABITS, "e", {"userId": "u1", "createdAt": "2024-05-01T00:00:00"})  # no archived field

    docs = json_store.query(
        HABITS,
        [("userId", "==", "u1"), ("archived", "==", False)],
        order_by=[("createdAt", "desc")],
    )
    assert [d["id"] for d in docs] == ["b", "a"]

    docs = json_store.query(HABITS, [("userId", "in", ["u1", "u2"])], order_by=[("createdAt", "asc")], limit=2)
    assert [d["id"] for d in docs] == ["a", "c"]


def test_sort_puts_missing_values_last(json_store):
    json_store.set(HABITS, "x", {"name": "Zed"})
    json_store.set(HABITS, "y", {})
    json_store.set(HABITS, "z", {"name": "Abe"})
    assert [d["id"] for d in json_store.query(HABITS, order_by=[("name", "asc")])] == ["z", "x", "y"]


def test_unknown_operator_rejected(json_store):
    json_store.set(HABITS, "a", {"name": "Read"})
    with pytest.raises(ValueError):
        json_store.query(HABITS, [("name", "~=", "Read")])


def test_set_merge_and_update(json_store):
    json_store.set(HABITS, "a", {"name": "Read", "archived": False})
    json_store.set(HABITS, "a", {"archived": True}, merge=True)
    assert json_store.get(HABITS, "a") == {"id": "a", "name": "Read", "archived": True}

    json_store.set(HABITS, "a", {"name": "Write"})
    assert json_store.get(HABITS, "a") == {"id": "a", "name": "Write"}

    json_store.update(HABITS, "a", {"description": "daily pages"})
    assert json_store.get(HABITS, "a")["description"] == "daily pages"
    with pytest.raises(NotFound):
        json_store.update(HABITS, "nope", {"name": "x"})


def test_batch_is_all_or_nothing(json_store):
    json_store.set(HABITS, "a", {"name": "Read"})
    with pytest.raises(NotFound):
        with json_store.batch() as batch:
            batch.delete(HABITS, "a")
            batch.update(HABITS, "missing", {"name": "x"})
        # the context manager commits on exit; the failing update aborts every op
    assert json_store.get(HABITS, "a") == {"id": "a", "name": "Read"}


def test_batch_not_committed_when_block_raises(json_store):
    with pytest.raises(RuntimeError):
        with json_store.batch() as batch:
            batch.create(HABITS, {"name": "Read"})
            raise RuntimeError("boom")
    assert json_store.query(HABITS) == []


def test_batch_commit_applies_ops(json_store):
    with json_store.batch() as batch:
        first = batch.create(HABITS, {"name": "Read"})
        batch.set(HABITS, "b", {"name": "Run"})
    assert {d["id"] for d in json_store.query(HABITS)} == {first, "b"}


def test_create_store_rejects_unknown_backend(tmp_path):
    with pytest.raises(ValueError):
        create_store({"STORE_BACKEND": "sqlite", "DB_DIR": str(tmp_path)})
    assert isinstance(create_store({"STORE_BACKEND": "json", "DB_DIR": str(tmp_path)}), JsonDocumentStore)


# -------- Firestore backend (mocked client) --------

@pytest.fixture()
def firestore_client():
    client = MagicMock(name="firestore_client")
    query = client.collection.return_value
    query.where.return_value = query
    query.order_by.return_value = query
    query.limit.return_value = query
    return client


def _snapshot(doc_id, data, exists=True):
    snap = MagicMock(id=doc_id, exists=exists)
    snap.to_dict.return_value = data
    return snap


def test_firestore_query_translation(firestore_client):
    query = firestore_client.collection.return_value
    query.stream.return_value = [_snapshot("h1", {"userId": "u1", "archived": False})]
    fs = FirestoreDocumentStore(client=firestore_client)

    docs = fs.query(
        HABITS,
        [("userId", "==", "u1"), ("archived", "==", False)],
        order_by=[("createdAt", "desc"), ("name", "asc")],
        limit=5,
    )

    assert docs == [{"id": "h1", "userId": "u1", "archived": False}]
    firestore_client.collection.assert_called_with(HABITS)
    filters = [c.kwargs["filter"] for c in query.where.call_args_list]
    assert [(f.field_path, f.op_string, f.value) for f in filters] == [
        ("userId", "==", "u1"),
        ("archived", "==", False),
    ]
    assert query.order_by.call_args_list == [
        call("createdAt", direction=firestore.Query.DESCENDING),
        call("name", direction=firestore.Query.ASCENDING),
    ]
    query.limit.assert_called_once_with(5)


def test_firestore_document_calls(firestore_client):
    doc_ref = firestore_client.collection.return_value.document.return_value
    fs = FirestoreDocumentStore(client=firestore_client)

    firestore_client.collection.return_value.add.return_value = (None, MagicMock(id="new-habit"))
    assert fs.add(HABITS, {"name": "Read"}) == "new-habit"

    fs.set(USER_SETTINGS, "alice", {"proactiveNudgesEnabled": True}, merge=True)
    doc_ref.set.assert_called_once_with({"proactiveNudgesEnabled": True}, merge=True)

    fs.update(HABITS, "h1", {"archived": True})
    doc_ref.update.assert_called_once_with({"archived": True})

    doc_ref.get.return_value = _snapshot("h1", {"name": "Read"})
    assert fs.get(HABITS, "h1") == {"id": "h1", "name": "Read"}
    doc_ref.get.return_value = _snapshot("gone", None, exists=False)
    assert fs.get(HABITS, "gone") is None

    fs.delete(HABITS, "h1")
    doc_ref.delete.assert_called_once_with()
    assert fs.server_timestamp() is firestore.SERVER_TIMESTAMP


def test_firestore_batch_commits_on_clean_exit(firestore_client):
    write_batch = firestore_client.batch.return_value
    collection = firestore_client.collection.return_value
    collection.document.return_value.id = "log-1"
    fs = FirestoreDocumentStore(client=firestore_client)

    with fs.batch() as batch:
        assert batch.create(HABIT_LOGS, {"completed": True}) == "log-1"
        batch.update(HABIT_LOGS, "log-2", {"completed": False})
        batch.delete(HABITS, "h1")

    write_batch.set.assert_called_once_with(collection.document.return_value, {"completed": True})
    write_batch.update.assert_called_once_with(collection.document.return_value, {"completed": False})
    write_batch.delete.assert_called_once_with(collection.document.return_value)
    write_batch.commit.assert_called_once_with()


def test_firestore_batch_skips_commit_on_error(firestore_client):
    fs = FirestoreDocumentStore(client=firestore_client)
    with pytest.raises(RuntimeError):
        with fs.batch() as batch:
            batch.delete(HABITS, "h1")
            raise RuntimeError("boom")
    firestore_client.batch.return_value.commit.assert_not_called()


def test_missing_index_message():
    exc = RuntimeError(
        "400 The query requires an index. You can create it here: "
        "https://console.firebase.google.com/v1/r/project/demo/firestore/indexes?create_composite=Clx"
    )
    message = describe_store_failure("load habits", exc, index_hint=True)
    assert message.startswith("Failed to load habits: Firestore requires a composite index.")
    assert "'userId' (ASC) and 'archived' (ASC)" in message
    assert describe_store_failure("load habits", exc).startswith("Failed to load habits: 400 The query requires")
