"""Services package."""

from demobank.services.clock import Clock
from demobank.services.data_manager import DataManager, merge_by_identity
from demobank.services.storage import (
    DecodeError,
    FixtureLoaderInterface,
    InMemoryOverrideStorage,
    JsonFileOverrideStorage,
    JsonFixtureLoader,
    OverrideStorageInterface,
    PersistError,
    ResourceMissingError,
    StorageError,
)

__all__ = [
    # Time
    "Clock",
    # Store
    "DataManager",
    "merge_by_identity",
    # Storage services
    "DecodeError",
    "FixtureLoaderInterface",
    "InMemoryOverrideStorage",
    "JsonFileOverrideStorage",
    "JsonFixtureLoader",
    "OverrideStorageInterface",
    "PersistError",
    "ResourceMissingError",
    "StorageError",
]
