"""Key material primitives."""
from .keypair import VrfKeyPair
from .public_key import PublicKey
from .sealing import open_sealed, seal_secret

__all__ = ["PublicKey", "VrfKeyPair", "open_sealed", "seal_secret"]
