from __future__ import annotations

from pathlib import Path

import pytest

from vrf_guardian.config import AppConfig, KdfConfig, LoggingConfig
from vrf_guardian.logging import configure_logging
from vrf_guardian.services.key_lifecycle import KeyLifecycleManager
from vrf_guardian.storage.keystore import FileKeyStore

FAST_KDF = KdfConfig(n=2**4, r=1, p=1)


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    configure_logging("critical")


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        store_dir=tmp_path / "store",
        kdf=FAST_KDF,
        kdf_weak=FAST_KDF,
        logging=LoggingConfig(level="CRITICAL"),
    )


@pytest.fixture
def store(config: AppConfig) -> FileKeyStore:
    return FileKeyStore(config)


@pytest.fixture
def manager(store: FileKeyStore) -> KeyLifecycleManager:
    return KeyLifecycleManager(store)
