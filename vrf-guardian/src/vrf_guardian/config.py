"""Configuration loading utilities for VRF Guardian."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .paths import default_store_dir, runtime_config_dir


class KdfConfig(BaseModel):
    """Parameters for deriving sealing keys with scrypt"""

    algorithm: str = "scrypt"
    length: int = 32
    salt_length: int = Field(default=16, ge=8, le=64)
    # Upper bounds apply to imported files too: 2**20 * r=8 is ~1 GiB of scrypt memory.
    n: int = Field(default=2**15, ge=2, le=2**20)
    r: int = Field(default=8, ge=1, le=16)
    p: int = Field(default=1, ge=1, le=16)

    @field_validator("n")
    @classmethod
    def _validate_cost(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError("scrypt cost parameter n must be a power of two")
        return value

    @field_validator("length")
    @classmethod
    def _validate_length(cls, value: int) -> int:
        if value not in (16, 24, 32):
            raise ValueError("derived key length must be 16, 24 or 32 bytes for AES-GCM")
        return value

    @field_validator("algorithm")
    @classmethod
    def _validate_algorithm(cls, value: str) -> str:
        if value.lower() != "scrypt":
            raise ValueError(f"Unsupported KDF algorithm: {value}")
        return value.lower()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "length": self.length,
            "n": self.n,
            "r": self.r,
            "p": self.p,
        }


def _weak_kdf() -> KdfConfig:
    # Testing only: cheap enough to brute force.
    return KdfConfig(n=2**4, r=1, p=1)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")

    def normalized_level(self) -> str:
        return self.level.upper()


class AppConfig(BaseModel):
    store_dir: Path = Field(default_factory=default_store_dir)
    kdf: KdfConfig = Field(default_factory=KdfConfig)
    kdf_weak: KdfConfig = Field(default_factory=_weak_kdf)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cli_name: str = Field(default="vrf-guardian", description="Command name used in operator guidance")

    @field_validator("store_dir")
    @classmethod
    def _expand_store_dir(cls, value: Path) -> Path:
        return Path(value).expanduser()


DEFAULT_CONFIG = AppConfig()


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
    yield Path.cwd() / ".vrf-guardian" / "config.yaml"
    yield runtime_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None) -> AppConfig:
    if path is not None and not path.is_file():
        raise ValueError(f"Configuration file not found: {path}")
    for candidate in config_search_paths(path):
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            try:
                return AppConfig.model_validate(data)
            except ValidationError as exc:
                raise ValueError(f"Invalid configuration in {candidate}: {exc}") from exc
    return AppConfig()


def dump_default_config(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(DEFAULT_CONFIG.model_dump(mode="json"), handle, sort_keys=False)


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG",
    "KdfConfig",
    "LoggingConfig",
    "config_search_paths",
    "dump_default_config",
    "load_config",
]
