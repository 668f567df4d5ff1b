# Parse and format VRF public keys (compressed secp256k1 points).
from __future__ import annotations

from dataclasses import dataclass

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..exceptions import DerivationFailure, MalformedKey

COMPRESSED_LENGTH = 33
_HEX_PREFIX = "0x"


def _strip_prefix(text: str) -> str:
    text = text.strip()
    if text[:2].lower() == _HEX_PREFIX:
        return text[2:]
    return text


@dataclass(frozen=True, slots=True)
class PublicKey:
    """A VRF public key, held as its 33-byte SEC1 compressed encoding"""

    raw: bytes

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PublicKey":
        if len(raw) != COMPRESSED_LENGTH or raw[0] not in (2, 3):
            raise MalformedKey(f"Expected a {COMPRESSED_LENGTH}-byte compressed point, got {len(raw)} bytes")
        try:
            ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
        except ValueError as exc:
            raise MalformedKey(f"Not a point on secp256k1: 0x{raw.hex()}") from exc
        return cls(raw=bytes(raw))

    @classmethod
    def from_hex(cls, text: str) -> "PublicKey":
        if not isinstance(text, str) or not text.strip():
            raise MalformedKey("Public key must not be empty")
        try:
            raw = bytes.fromhex(_strip_prefix(text))
        except ValueError as exc:
            raise MalformedKey(f"Public key is not valid hex: {text!r}") from exc
        return cls.from_bytes(raw)

    @classmethod
    def from_ec(cls, key: ec.EllipticCurvePublicKey) -> "PublicKey":
        return cls(
            raw=key.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.CompressedPoint,
            )
        )

    def to_hex(self) -> str:
        return _HEX_PREFIX + self.raw.hex()

    def __str__(self) -> str:
        return self.to_hex()

    def to_ec(self) -> ec.EllipticCurvePublicKey:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), self.raw)

    def coordinates(self) -> bytes:
        """Return the 64-byte ``X || Y`` concatenation of the point."""
        try:
            point = self.to_ec().public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.UncompressedPoint,
            )
        except ValueError as exc:
            raise DerivationFailure(f"cannot decompress {self.to_hex()}: {exc}") from exc
        return point[1:]

    def to_uncompressed_hex(self) -> str:
        return _HEX_PREFIX + self.coordinates().hex()

    def hash_hex(self) -> str:
        """Keccak-256 of ``X || Y``, the key hash on-chain consumers request randomness with."""
        return _HEX_PREFIX + keccak.new(digest_bits=256, data=self.coordinates()).hexdigest()


def parse(text: str) -> PublicKey:
    return PublicKey.from_hex(text)


def format_key(key: PublicKey) -> str:
    return key.to_hex()


__all__ = ["COMPRESSED_LENGTH", "PublicKey", "format_key", "parse"]
