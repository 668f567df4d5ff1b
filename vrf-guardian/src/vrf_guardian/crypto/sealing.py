# Password-based sealing of VRF secret scalars (scrypt + AES-256-GCM).
from __future__ import annotations

import os
from typing import Any, Dict, Mapping

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..config import KdfConfig
from ..exceptions import ImportFailure, InvalidPassword
from ..utils import b64d, b64e
from .kdf import ScryptKdf

SEAL_VERSION = 1
SEAL_ALG = "AES-256-GCM"


def seal_secret(secret: bytes, password: str, kdf_cfg: KdfConfig, *, aad: bytes) -> Dict[str, Any]:
    """Encrypt ``secret`` under ``password``; the result is JSON-serialisable."""
    kdf = ScryptKdf(kdf_cfg)
    salt = kdf.random_salt()
    key = kdf.derive(password, salt)

    aes = AESGCM(key)
    nonce = os.urandom(12)
    ct = aes.encrypt(nonce, secret, aad)

    return {
        "v": SEAL_VERSION,
        "alg": SEAL_ALG,
        "kdf": {**kdf_cfg.as_dict(), "salt": b64e(salt)},
        "nonce": b64e(nonce),
        "ct": b64e(ct),
    }


def open_sealed(payload: Mapping[str, Any], password: str, *, aad: bytes) -> bytes:
    """Decrypt a payload produced by :func:`seal_secret`.

    KDF parameters are read from the payload itself, so keys sealed with the
    weak testing parameters open without extra configuration.
    """
    try:
        if payload.get("v") != SEAL_VERSION or payload.get("alg") != SEAL_ALG:
            raise ImportFailure(f"Unsupported key encryption: v={payload.get('v')} alg={payload.get('alg')}")
        params = dict(payload["kdf"])
        salt = b64d(params.pop("salt"))
        nonce = b64d(payload["nonce"])
        ct = b64d(payload["ct"])
        kdf_cfg = KdfConfig(salt_length=len(salt), **params)
    except (KeyError, TypeError, ValueError) as exc:
        raise ImportFailure(f"Malformed encrypted key payload: {exc}") from exc

    try:
        key = ScryptKdf(kdf_cfg).derive(password, salt)
    except (MemoryError, ValueError) as exc:
        raise ImportFailure(f"Cannot derive key with the file's scrypt parameters: {exc}") from exc
    try:
        return AESGCM(key).decrypt(nonce, ct, aad)
    except InvalidTag as exc:
        raise InvalidPassword("Could not decrypt key material: wrong password or corrupted file") from exc


__all__ = ["SEAL_ALG", "SEAL_VERSION", "open_sealed", "seal_secret"]
