"""Keystore and key file storage."""
from .file_io import ensure_vacant, read_key_file, write_key_file
from .keystore import FileKeyStore, KeyStoreClient

__all__ = ["FileKeyStore", "KeyStoreClient", "ensure_vacant", "read_key_file", "write_key_file"]
