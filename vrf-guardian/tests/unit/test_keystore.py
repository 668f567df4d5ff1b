import json
import os
import stat

import pytest

from vrf_guardian.exceptions import DuplicateKey, ImportFailure, InvalidPassword, KeyNotFound, StoreFailure
from vrf_guardian.models import LifecycleState
from vrf_guardian.storage.keystore import FileKeyStore


def test_create_persists_sealed_record(store: FileKeyStore):
    record = store.create("pw")
    assert store.list_all() == [record.public_key]
    stored = store.record_for(record.public_key)
    assert stored.state is LifecycleState.ACTIVE
    assert stored.deleted_at is None
    assert stored.created_at == record.created_at
    assert stored.key_file.unseal("pw").public_key == record.public_key


def test_stored_key_file_is_private(store: FileKeyStore):
    record = store.create("pw")
    path = store.paths.key_file(record.public_key)
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_create_weak_is_never_persisted(store: FileKeyStore):
    key_file = store.create_weak("pw")
    assert store.list_all(include_archived=True) == []
    assert key_file.vrf_key["kdf"]["n"] == store.config.kdf_weak.n
    with pytest.raises(KeyNotFound):
        store.record_for(key_file.public_key)


def test_import_rejects_active_duplicate(store: FileKeyStore):
    record = store.create("pw")
    before = store.paths.index.read_text(encoding="utf-8")
    with pytest.raises(DuplicateKey):
        store.import_key(record.key_file.to_bytes(), "pw")
    assert store.paths.index.read_text(encoding="utf-8") == before


def test_import_with_wrong_password(store: FileKeyStore):
    key_file = store.create_weak("pw")
    with pytest.raises(InvalidPassword):
        store.import_key(key_file.to_bytes(), "wrong")
    assert store.list_all() == []


def test_archive_hides_key_from_active_listing(store: FileKeyStore):
    record = store.create("pw")
    store.archive(record.public_key)
    assert store.list_all() == []
    assert store.list_all(include_archived=True) == [record.public_key]
    archived = store.record_for(record.public_key)
    assert archived.is_archived
    assert archived.deleted_at is not None
    assert archived.updated_at >= archived.created_at


def test_archive_twice_reports_not_found(store: FileKeyStore):
    record = store.create("pw")
    store.archive(record.public_key)
    with pytest.raises(KeyNotFound):
        store.archive(record.public_key)


def test_archived_key_can_still_be_exported(store: FileKeyStore):
    record = store.create("pw")
    store.archive(record.public_key)
    assert store.lookup(record.public_key).public_key == record.public_key


def test_purge_removes_archived_record_and_file(store: FileKeyStore):
    record = store.create("pw")
    store.archive(record.public_key)
    store.purge(record.public_key)
    assert store.list_all(include_archived=True) == []
    assert not store.paths.key_file(record.public_key).exists()
    with pytest.raises(KeyNotFound):
        store.purge(record.public_key)


def test_import_restores_archived_record(store: FileKeyStore):
    record = store.create("pw")
    store.archive(record.public_key)
    restored = store.import_key(record.key_file.to_bytes(), "pw")
    assert restored.state is LifecycleState.ACTIVE
    assert restored.created_at == record.created_at
    assert store.list_all() == [record.public_key]
    assert store.record_for(record.public_key).deleted_at is None


def test_listing_keeps_creation_order(store: FileKeyStore):
    keys = [store.create("pw").public_key for _ in range(3)]
    assert store.list_all() == keys


def test_index_is_plain_json(store: FileKeyStore):
    record = store.create("pw")
    index = json.loads(store.paths.index.read_text(encoding="utf-8"))
    assert index["keys"][0]["public_key"] == record.public_key.to_hex()
    assert index["keys"][0]["state"] == "active"


def test_import_with_hostile_kdf_cost(store: FileKeyStore):
    document = json.loads(store.create_weak("pw").to_bytes())
    document["vrf_key"]["kdf"]["n"] = 2**40
    with pytest.raises(ImportFailure):
        store.import_key(json.dumps(document).encode("utf-8"), "pw")
    assert store.list_all(include_archived=True) == []


def test_corrupt_index_timestamp_is_a_store_failure(store: FileKeyStore):
    record = store.create("pw")
    index = json.loads(store.paths.index.read_text(encoding="utf-8"))
    index["keys"][0]["created_at"] = "yesterday-ish"
    store.paths.index.write_text(json.dumps(index), encoding="utf-8")
    with pytest.raises(StoreFailure, match="corrupt index entry"):
        store.record_for(record.public_key)
