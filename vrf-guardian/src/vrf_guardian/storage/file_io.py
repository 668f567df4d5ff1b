"""Whole-file reads and exclusive-create writes for encrypted key files.

``ensure_vacant`` followed by ``write_key_file`` is a best-effort guard only: a
concurrent writer can still claim the path between the two calls, in which case
the exclusive create in ``write_key_file`` reports the conflict instead.
"""
from __future__ import annotations

import os
from pathlib import Path

import structlog

from ..exceptions import FileConflict, FileReadFailure, FilesystemFailure
from ..models import EncryptedKeyFile

logger = structlog.get_logger(__name__)


def read_key_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileReadFailure(f"failed to read file {path}: {exc.strerror or exc}") from exc


def ensure_vacant(path: Path) -> None:
    try:
        path.stat()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise FilesystemFailure(f"while checking whether file {path} exists: {exc.strerror or exc}") from exc
    raise FileConflict(f"refusing to overwrite existing file {path}. Please move it or change the save path")


def write_key_file(path: Path, key_file: EncryptedKeyFile) -> None:
    data = key_file.to_bytes()
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    except FileExistsError as exc:
        raise FileConflict(f"refusing to overwrite existing file {path}. Please move it or change the save path") from exc
    except OSError as exc:
        raise FilesystemFailure(f"could not save {key_file.summary()} to {path}: {exc.strerror or exc}") from exc
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise FilesystemFailure(f"could not save {key_file.summary()} to {path}: {exc.strerror or exc}") from exc
    logger.info("key_file.written", path=str(path), public_key=str(key_file.public_key))


__all__ = ["ensure_vacant", "read_key_file", "write_key_file"]
