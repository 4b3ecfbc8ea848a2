"""
Storage Services Package

Provides abstract interfaces and concrete implementations for fixture
loading and override persistence. JSON files on disk are the default
backends, designed to be swappable.
"""

from demobank.services.storage.interface import (
    DecodeError,
    FixtureLoaderInterface,
    OverrideStorageInterface,
    PersistError,
    ResourceMissingError,
    StorageError,
)
from demobank.services.storage.fixtures import JsonFixtureLoader, bundled_fixture_root
from demobank.services.storage.overrides import (
    InMemoryOverrideStorage,
    JsonFileOverrideStorage,
    KeyValueOverrideStorage,
    override_key,
)

__all__ = [
    # Interfaces
    "FixtureLoaderInterface",
    "OverrideStorageInterface",
    # Exceptions
    "DecodeError",
    "PersistError",
    "ResourceMissingError",
    "StorageError",
    # JSON implementations
    "InMemoryOverrideStorage",
    "JsonFileOverrideStorage",
    "JsonFixtureLoader",
    "KeyValueOverrideStorage",
    "bundled_fixture_root",
    "override_key",
]
