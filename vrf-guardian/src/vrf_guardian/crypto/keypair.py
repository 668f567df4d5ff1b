"""secp256k1 key pairs backing VRF proofs.

Only generation and (de)serialisation of the secret scalar live here; proof
generation is the business of the service that unlocks the key.
"""
from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric import ec

from .public_key import PublicKey

SECRET_LENGTH = 32


class VrfKeyPair:
    def __init__(self, private: ec.EllipticCurvePrivateKey):
        if not isinstance(private.curve, ec.SECP256K1):
            raise ValueError("VRF keys must be on secp256k1")
        self._priv = private

    @staticmethod
    def generate() -> "VrfKeyPair":
        return VrfKeyPair(ec.generate_private_key(ec.SECP256K1()))

    @staticmethod
    def from_secret(secret: bytes) -> "VrfKeyPair":
        if len(secret) != SECRET_LENGTH:
            raise ValueError(f"Expected a {SECRET_LENGTH}-byte secret scalar")
        return VrfKeyPair(ec.derive_private_key(int.from_bytes(secret, "big"), ec.SECP256K1()))

    @property
    def public_key(self) -> PublicKey:
        return PublicKey.from_ec(self._priv.public_key())

    def secret_bytes(self) -> bytes:
        return self._priv.private_numbers().private_value.to_bytes(SECRET_LENGTH, "big")
