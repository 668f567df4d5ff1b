"""Lifecycle services."""
from .key_lifecycle import CreatedKey, KeyLifecycleManager
from .presenter import Derived, Presenter, build_presenter

__all__ = ["CreatedKey", "Derived", "KeyLifecycleManager", "Presenter", "build_presenter"]
