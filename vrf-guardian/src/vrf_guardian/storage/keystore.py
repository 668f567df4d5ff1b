from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import structlog

from ..config import AppConfig
from ..crypto.keypair import VrfKeyPair
from ..crypto.public_key import PublicKey
from ..exceptions import DuplicateKey, KeyNotFound, StoreFailure
from ..models import EncryptedKeyFile, KeyRecord, LifecycleState, utcnow
from .paths import PathResolver

logger = structlog.get_logger(__name__)


class KeyStoreClient(Protocol):
    """Operations the lifecycle manager needs from a keystore."""

    def create(self, password: str) -> KeyRecord: ...

    def create_weak(self, password: str) -> EncryptedKeyFile: ...

    def import_key(self, data: bytes, password: str) -> KeyRecord: ...

    def lookup(self, public_key: PublicKey) -> EncryptedKeyFile: ...

    def archive(self, public_key: PublicKey) -> None: ...

    def purge(self, public_key: PublicKey) -> None: ...

    def list_all(self, include_archived: bool = False) -> List[PublicKey]: ...

    def record_for(self, public_key: PublicKey) -> KeyRecord: ...


def _atomic_write(path: Path, data: bytes) -> None:
    tmp = path.with_name(path.name + ".tmp")
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp, path)


class FileKeyStore:
    """Filesystem-backed keystore under ``AppConfig.store_dir``.

    Layout:
      - keys.json: index {"keys": [{public_key, state, created_at, updated_at, deleted_at}]}
      - keys/<compressed-hex>.json: the EncryptedKeyFile, mode 0o600

    Each public operation is atomic on its own: the index is replaced in one
    rename. Nothing coordinates with other processes using the same root.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.paths = PathResolver(config.store_dir)
        try:
            self.paths.ensure()
        except OSError as exc:
            raise StoreFailure(f"cannot initialise keystore at {config.store_dir}: {exc}") from exc

    # ----- Index helpers -----
    def _load_index(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.paths.index.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreFailure(f"cannot read keystore index {self.paths.index}: {exc}") from exc
        if not isinstance(data.get("keys"), list):
            raise StoreFailure(f"keystore index {self.paths.index} is malformed")
        return data

    def _save_index(self, data: Dict[str, Any]) -> None:
        try:
            _atomic_write(self.paths.index, json.dumps(data, indent=2).encode("utf-8"))
        except OSError as exc:
            raise StoreFailure(f"cannot write keystore index {self.paths.index}: {exc}") from exc

    @staticmethod
    def _find(entries: List[Dict[str, Any]], public_key: PublicKey) -> Optional[Dict[str, Any]]:
        needle = public_key.to_hex()
        for entry in entries:
            if entry.get("public_key") == needle:
                return entry
        return None

    def _read_key_file(self, public_key: PublicKey) -> EncryptedKeyFile:
        path = self.paths.key_file(public_key)
        try:
            return EncryptedKeyFile.from_bytes(path.read_bytes())
        except OSError as exc:
            raise StoreFailure(f"cannot read stored key {public_key}: {exc}") from exc

    def _persist(self, record: KeyRecord) -> None:
        try:
            _atomic_write(self.paths.key_file(record.public_key), record.key_file.to_bytes())
        except OSError as exc:
            raise StoreFailure(f"cannot write stored key {record.public_key}: {exc}") from exc
        index = self._load_index()
        keys = index["keys"]
        entry = self._find(keys, record.public_key)
        if entry is None:
            keys.append(record.to_index_entry())
        else:
            entry.update(record.to_index_entry())
        self._save_index(index)

    # ----- Public API used by KeyLifecycleManager -----
    def create(self, password: str) -> KeyRecord:
        pair = VrfKeyPair.generate()
        key_file = EncryptedKeyFile.seal(pair, password, self.config.kdf)
        now = utcnow()
        record = KeyRecord(public_key=pair.public_key, key_file=key_file, created_at=now, updated_at=now)
        self._persist(record)
        logger.info("keystore.create", public_key=str(record.public_key))
        return record

    def create_weak(self, password: str) -> EncryptedKeyFile:
        key_file = EncryptedKeyFile.seal(VrfKeyPair.generate(), password, self.config.kdf_weak)
        logger.warning("keystore.create_weak", public_key=str(key_file.public_key), persisted=False)
        return key_file

    def import_key(self, data: bytes, password: str) -> KeyRecord:
        key_file = EncryptedKeyFile.from_bytes(data)
        entry = self._find(self._load_index()["keys"], key_file.public_key)
        if entry is not None and entry.get("state") == LifecycleState.ACTIVE.value:
            raise DuplicateKey(f"the keystore already has an entry for {key_file.public_key}")

        key_file.unseal(password)

        now = utcnow()
        if entry is None:
            record = KeyRecord(public_key=key_file.public_key, key_file=key_file, created_at=now, updated_at=now)
        else:
            previous = KeyRecord.from_index_entry(entry, key_file)
            record = KeyRecord(
                public_key=key_file.public_key,
                key_file=key_file,
                created_at=previous.created_at,
                updated_at=now,
            )
        self._persist(record)
        logger.info("keystore.import", public_key=str(record.public_key), restored=entry is not None)
        return record

    def lookup(self, public_key: PublicKey) -> EncryptedKeyFile:
        return self.record_for(public_key).key_file

    def archive(self, public_key: PublicKey) -> None:
        index = self._load_index()
        entry = self._find(index["keys"], public_key)
        if entry is None or entry.get("state") != LifecycleState.ACTIVE.value:
            raise KeyNotFound(f"no active entry for {public_key}")
        now = utcnow().isoformat()
        entry.update(state=LifecycleState.ARCHIVED.value, deleted_at=now, updated_at=now)
        self._save_index(index)
        logger.info("keystore.archive", public_key=str(public_key))

    def purge(self, public_key: PublicKey) -> None:
        index = self._load_index()
        entry = self._find(index["keys"], public_key)
        if entry is None:
            raise KeyNotFound(f"no entry for {public_key}")
        index["keys"].remove(entry)
        self._save_index(index)
        try:
            self.paths.key_file(public_key).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreFailure(f"removed {public_key} from index but could not delete its key file: {exc}") from exc
        logger.info("keystore.purge", public_key=str(public_key), state=LifecycleState.PURGED.value)

    def list_all(self, include_archived: bool = False) -> List[PublicKey]:
        keys = []
        for entry in self._load_index()["keys"]:
            if not include_archived and entry.get("state") != LifecycleState.ACTIVE.value:
                continue
            keys.append(PublicKey.from_hex(entry["public_key"]))
        return keys

    def record_for(self, public_key: PublicKey) -> KeyRecord:
        entry = self._find(self._load_index()["keys"], public_key)
        if entry is None:
            raise KeyNotFound(f"no entry for {public_key}")
        key_file = self._read_key_file(public_key)
        try:
            return KeyRecord.from_index_entry(entry, key_file)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreFailure(f"corrupt index entry for {public_key}: {exc}") from exc


__all__ = ["FileKeyStore", "KeyStoreClient"]
