# Orchestrate VRF key lifecycle verbs (create, import, export, delete, list) over a keystore.
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

import structlog

from ..config import AppConfig
from ..crypto.public_key import PublicKey
from ..exceptions import DuplicateKey, ImportFailure, KeyNotFound, MalformedKey, MissingInput
from ..models import EncryptedKeyFile, KeyRecord, peek_public_key
from ..storage.file_io import ensure_vacant, read_key_file, write_key_file
from ..storage.keystore import FileKeyStore, KeyStoreClient
from .presenter import Derived, Presenter, build_presenter, derive

logger = structlog.get_logger(__name__)

PathLike = Path | str | None


def _require_password(password: str | None) -> str:
    if not password:
        raise MissingInput("must specify a non-empty password")
    return password


def _require_path(value: PathLike, message: str) -> Path:
    if value is None or not str(value).strip():
        raise MissingInput(message)
    return Path(value).expanduser()


def parse_public_key(text: str | None) -> PublicKey:
    if not text:
        raise MissingInput("must specify public key")
    try:
        return PublicKey.from_hex(text)
    except MalformedKey as exc:
        raise MalformedKey(f"failed to parse public key: {exc}") from exc


@dataclass(frozen=True, slots=True)
class CreatedKey:
    record: KeyRecord
    uncompressed: Derived
    hash: Derived
    cli_name: str = "vrf-guardian"

    @property
    def public_key(self) -> PublicKey:
        return self.record.public_key

    def guidance(self) -> str:
        key = self.public_key.to_hex()
        return (
            "Created keypair.\n\n"
            "Compressed public key (use this for interactions with the VRF service):\n"
            f"{key}\n"
            "Uncompressed public key (use this to register the key with the VRF coordinator):\n"
            f"{self.uncompressed.text}\n"
            "Hash of public key (use this to request randomness from your consuming contract):\n"
            f"{self.hash.text}\n\n"
            "The following command will export the encrypted secret key from the keystore to <save_path>:\n\n"
            f"{self.cli_name} export -f <save_path> -pk {key}\n"
        )


class KeyLifecycleManager:
    """Single-shot lifecycle verbs over a :class:`KeyStoreClient`.

    The manager keeps no state between calls. Input validation happens before
    any keystore call; keystore domain errors are annotated with operator
    guidance and re-raised.
    """

    def __init__(self, store: KeyStoreClient, *, cli_name: str = "vrf-guardian") -> None:
        self.store = store
        self.cli_name = cli_name

    @classmethod
    def from_config(cls, config: AppConfig) -> "KeyLifecycleManager":
        return cls(FileKeyStore(config), cli_name=config.cli_name)

    def create(self, password: str | None) -> CreatedKey:
        password = _require_password(password)
        record = self.store.create(password)
        key = record.public_key
        created = CreatedKey(
            record=record,
            uncompressed=derive("uncompressed representation", key, key.to_uncompressed_hex),
            hash=derive("hash of public key", key, key.hash_hex),
            cli_name=self.cli_name,
        )
        logger.info("lifecycle.create", public_key=key.to_hex())
        return created

    def create_and_export_weak(self, password: str | None, destination: PathLike) -> EncryptedKeyFile:
        """Create a cheaply-encrypted key straight into ``destination``; testing only."""
        password = _require_password(password)
        path = _require_path(destination, "must specify path to key file which does not already exist")
        ensure_vacant(path)
        key_file = self.store.create_weak(password)
        write_key_file(path, key_file)
        logger.warning("lifecycle.create_weak", public_key=key_file.public_key.to_hex(), path=str(path))
        return key_file

    def import_key(self, password: str | None, source: PathLike) -> KeyRecord:
        password = _require_password(password)
        path = _require_path(source, "must specify key file")
        data = read_key_file(path)
        try:
            record = self.store.import_key(data, password)
        except DuplicateKey as exc:
            exc.guidance = self._duplicate_guidance(data)
            logger.info("lifecycle.import_duplicate", path=str(path))
            raise
        logger.info("lifecycle.import", public_key=record.public_key.to_hex(), path=str(path))
        return record

    def _duplicate_guidance(self, data: bytes) -> str:
        lines = ["The keystore already has an entry for that public key."]
        try:
            key = peek_public_key(data).to_hex()
        except (MalformedKey, ImportFailure) as exc:
            lines.append(f"Could not extract public key from the key file: {exc}")
            return "\n".join(lines)
        lines.append(
            "If you want to import the new key anyway, delete the old key with the command\n\n"
            f"    {self.cli_name} delete -pk {key}\n\n"
            f"(but maybe back it up first, with `{self.cli_name} export -f <backup_path> -pk {key}`.)"
        )
        return "\n".join(lines)

    def export_key(self, public_key: str | None, destination: PathLike) -> EncryptedKeyFile:
        key = parse_public_key(public_key)
        path = _require_path(destination, "must specify file to export to")
        ensure_vacant(path)
        key_file = self.store.lookup(key)
        write_key_file(path, key_file)
        logger.info("lifecycle.export", public_key=key.to_hex(), path=str(path))
        return key_file

    def delete_key(self, public_key: str | None, *, hard: bool = False, confirmed: bool = False) -> bool:
        """Archive (or with ``hard`` purge) a key; returns False when not confirmed.

        Processes that already hold the key unlocked in memory keep it.
        """
        key = parse_public_key(public_key)
        if not confirmed:
            logger.info("lifecycle.delete_declined", public_key=key.to_hex())
            return False
        try:
            if hard:
                self.store.purge(key)
            else:
                self.store.archive(key)
        except KeyNotFound as exc:
            raise KeyNotFound(f"There is already no entry in the keystore for {key}") from exc
        logger.info("lifecycle.delete", public_key=key.to_hex(), hard=hard)
        return True

    def list_keys(self, *, include_archived: bool = False) -> List[Presenter]:
        keys = self.store.list_all(include_archived=include_archived)
        return [build_presenter(key, self.store) for key in keys]


__all__ = ["CreatedKey", "KeyLifecycleManager", "parse_public_key"]
