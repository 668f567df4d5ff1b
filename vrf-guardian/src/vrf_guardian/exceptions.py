"""Central exception hierarchy"""
from __future__ import annotations


class VrfGuardianError(Exception):
    """Base exception for all failures.

    ``guidance`` optionally carries operator-facing remediation text that the
    command layer prints after the error message.
    """

    def __init__(self, message: str = "", *, guidance: str | None = None) -> None:
        super().__init__(message)
        self.guidance = guidance


class MissingInput(VrfGuardianError):
    """Raised when a required operator input is absent or empty"""


class MalformedKey(VrfGuardianError):
    """Raised when public key text is not a valid compressed point encoding"""


class FileConflict(VrfGuardianError):
    """Raised when a destination path is already occupied"""


class FileReadFailure(VrfGuardianError):
    """Raised when a key file cannot be read"""


class FilesystemFailure(VrfGuardianError):
    """Raised for filesystem errors other than a missing or occupied path"""


class StoreFailure(VrfGuardianError):
    """Raised when the keystore cannot complete an operation"""


class DuplicateKey(StoreFailure):
    """Raised when importing a key that already has an active record"""


class ImportFailure(StoreFailure):
    """Raised when an encrypted key file cannot be imported"""


class InvalidPassword(ImportFailure):
    """Raised when decrypting key material fails due to password mismatch"""


class KeyNotFound(StoreFailure):
    """Raised when no (active) record exists for a public key"""


class DerivationFailure(VrfGuardianError):
    """Raised when a display-only field cannot be derived from a key"""


__all__ = [
    "VrfGuardianError",
    "MissingInput",
    "MalformedKey",
    "FileConflict",
    "FileReadFailure",
    "FilesystemFailure",
    "StoreFailure",
    "DuplicateKey",
    "ImportFailure",
    "InvalidPassword",
    "KeyNotFound",
    "DerivationFailure",
]
