# Scrypt KDF with parameters carried alongside the ciphertext.
from __future__ import annotations

import os

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..config import KdfConfig


class ScryptKdf:
  def __init__(self, cfg: KdfConfig):
    self.cfg = cfg

  def random_salt(self) -> bytes:
    return os.urandom(self.cfg.salt_length)

  def derive(self, password: str, salt: bytes) -> bytes:
    kdf = Scrypt(salt=salt, length=self.cfg.length, n=self.cfg.n, r=self.cfg.r, p=self.cfg.p)
    return kdf.derive(password.encode("utf-8"))
