"""Read-only display views of stored VRF keys.

Derived fields are computed independently per key; a failure to derive one of
them is recorded as a diagnostic on that field and never aborts a listing.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

import structlog

from ..crypto.public_key import PublicKey
from ..exceptions import DerivationFailure, StoreFailure
from ..storage.keystore import KeyStoreClient

logger = structlog.get_logger(__name__)

HEADERS = ["Compressed", "Uncompressed", "Hash", "Created", "Updated", "Deleted"]


@dataclass(frozen=True, slots=True)
class Derived:
    """Either a derived display value or a diagnostic explaining its absence"""

    value: Optional[str] = None
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    @property
    def text(self) -> str:
        return self.value if self.ok else self.diagnostic


def derive(label: str, public_key: PublicKey, compute: Callable[[], str]) -> Derived:
    try:
        return Derived(value=compute())
    except (DerivationFailure, ValueError) as exc:
        logger.info("presenter.derive_failed", field=label, public_key=public_key.to_hex(), error=str(exc))
        return Derived(diagnostic=f"error while computing {label}: {exc}")


def _friendly(when: Optional[datetime]) -> str:
    if when is None:
        return ""
    return when.isoformat(sep=" ", timespec="seconds")


@dataclass(frozen=True, slots=True)
class Presenter:
    compressed: str
    uncompressed: Derived
    hash: Derived
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def friendly_created_at(self) -> str:
        return _friendly(self.created_at)

    @property
    def friendly_updated_at(self) -> str:
        return _friendly(self.updated_at)

    @property
    def friendly_deleted_at(self) -> str:
        return _friendly(self.deleted_at)

    def to_row(self) -> List[str]:
        return [
            self.compressed,
            self.uncompressed.text,
            self.hash.text,
            self.friendly_created_at,
            self.friendly_updated_at,
            self.friendly_deleted_at,
        ]

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "compressed": self.compressed,
            "uncompressed": self.uncompressed.text,
            "hash": self.hash.text,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "deletedAt": self.deleted_at.isoformat() if self.deleted_at else None,
        }


def build_presenter(public_key: PublicKey, store: KeyStoreClient) -> Presenter:
    uncompressed = derive("uncompressed representation", public_key, public_key.to_uncompressed_hex)
    hash_ = derive("hash of public key", public_key, public_key.hash_hex)

    created_at = updated_at = deleted_at = None
    try:
        record = store.record_for(public_key)
    except StoreFailure as exc:
        logger.info("presenter.record_unavailable", public_key=public_key.to_hex(), error=str(exc))
    else:
        created_at = record.created_at
        updated_at = record.updated_at
        deleted_at = record.deleted_at

    return Presenter(
        compressed=public_key.to_hex(),
        uncompressed=uncompressed,
        hash=hash_,
        created_at=created_at,
        updated_at=updated_at,
        deleted_at=deleted_at,
    )


__all__ = ["Derived", "HEADERS", "Presenter", "build_presenter", "derive"]
