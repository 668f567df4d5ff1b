# Domain models: encrypted key files, persisted key records, lifecycle states.
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .crypto.keypair import VrfKeyPair
from .crypto.public_key import PublicKey
from .crypto.sealing import open_sealed, seal_secret
from .config import KdfConfig
from .exceptions import ImportFailure, MalformedKey


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleState(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    PURGED = "purged"


@dataclass(frozen=True, slots=True)
class EncryptedKeyFile:
    """Portable, password-protected serialisation of one VRF secret.

    The public key sits in clear next to the sealed secret so a file can be
    identified without its password.
    """

    public_key: PublicKey
    vrf_key: Mapping[str, Any]

    @classmethod
    def seal(cls, pair: VrfKeyPair, password: str, kdf_cfg: KdfConfig) -> "EncryptedKeyFile":
        public_key = pair.public_key
        payload = seal_secret(pair.secret_bytes(), password, kdf_cfg, aad=public_key.raw)
        return cls(public_key=public_key, vrf_key=payload)

    def unseal(self, password: str) -> VrfKeyPair:
        secret = open_sealed(self.vrf_key, password, aad=self.public_key.raw)
        try:
            pair = VrfKeyPair.from_secret(secret)
        except ValueError as exc:
            raise ImportFailure(f"Decrypted secret is not a valid VRF key: {exc}") from exc
        if pair.public_key != self.public_key:
            raise ImportFailure(f"Secret does not match public key {self.public_key}")
        return pair

    def as_dict(self) -> Dict[str, Any]:
        return {"public_key": self.public_key.to_hex(), "vrf_key": dict(self.vrf_key)}

    def to_bytes(self) -> bytes:
        return json.dumps(self.as_dict(), indent=2).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedKeyFile":
        document = _load_document(data)
        vrf_key = document.get("vrf_key")
        if not isinstance(vrf_key, dict):
            raise ImportFailure("Encrypted key file has no 'vrf_key' object")
        try:
            public_key = PublicKey.from_hex(document.get("public_key") or "")
        except MalformedKey as exc:
            raise ImportFailure(f"Encrypted key file carries an invalid public key: {exc}") from exc
        return cls(public_key=public_key, vrf_key=vrf_key)

    def summary(self) -> str:
        kdf = self.vrf_key.get("kdf", {})
        return (
            f"EncryptedKeyFile(public_key={self.public_key}, alg={self.vrf_key.get('alg')}, "
            f"kdf={kdf.get('algorithm')} n={kdf.get('n')})"
        )


def _load_document(data: bytes) -> Dict[str, Any]:
    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ImportFailure(f"Encrypted key file is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ImportFailure("Encrypted key file must contain a JSON object")
    return document


def peek_public_key(data: bytes) -> PublicKey:
    """Read the public key from encrypted key file bytes without decrypting."""
    return PublicKey.from_hex(_load_document(data).get("public_key") or "")


@dataclass(slots=True)
class KeyRecord:
    """A persisted key; ``deleted_at`` is set exactly when the record is archived"""

    public_key: PublicKey
    key_file: EncryptedKeyFile
    created_at: datetime
    updated_at: datetime
    state: LifecycleState = LifecycleState.ACTIVE
    deleted_at: Optional[datetime] = field(default=None)

    @property
    def is_archived(self) -> bool:
        return self.state is LifecycleState.ARCHIVED

    def to_index_entry(self) -> Dict[str, Any]:
        return {
            "public_key": self.public_key.to_hex(),
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }

    @classmethod
    def from_index_entry(cls, entry: Mapping[str, Any], key_file: EncryptedKeyFile) -> "KeyRecord":
        deleted_at = entry.get("deleted_at")
        return cls(
            public_key=PublicKey.from_hex(entry["public_key"]),
            key_file=key_file,
            created_at=datetime.fromisoformat(entry["created_at"]),
            updated_at=datetime.fromisoformat(entry["updated_at"]),
            state=LifecycleState(entry.get("state", LifecycleState.ACTIVE.value)),
            deleted_at=datetime.fromisoformat(deleted_at) if deleted_at else None,
        )


__all__ = ["EncryptedKeyFile", "KeyRecord", "LifecycleState", "peek_public_key", "utcnow"]
