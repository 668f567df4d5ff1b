# Manage keystore paths and create directories as needed.
from __future__ import annotations
from pathlib import Path

from ..crypto.public_key import PublicKey


class PathResolver:
  """Compute and ensure paths for the keystore root"""
  def __init__(self, root: Path):
    self.root = root
    self.keys = self.root / "keys"
    self.index = self.root / "keys.json"

  def ensure(self) -> None:
    self.keys.mkdir(parents=True, exist_ok=True, mode=0o700)
    if not self.index.exists():
      self.index.write_text('{"keys": []}', encoding='utf-8')

  def key_file(self, public_key: PublicKey) -> Path:
    return self.keys / f"{public_key.raw.hex()}.json"
