"""
Abstract Storage Interface

DESIGN DECISION: Fixture loading and override persistence sit behind
abstract interfaces. This allows us to:
1. Keep fixtures on disk, in the package, or build them in tests
2. Use in-memory override storage for tests and throwaway sessions
3. Keep the DataManager decoupled from where bytes live

Both interfaces are FAIL-OPEN on reads: a missing or undecodable resource
yields an empty collection (and a log entry), never an exception.
Writes raise PersistError so the caller can report the failure.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from demobank.models.persona import Persona
from demobank.models.records import EntityKind, Record, RecordSet


class FixtureLoaderInterface(ABC):
    """Supplies the baseline collections for a persona."""

    @abstractmethod
    def load_defaults(self, persona: Persona) -> RecordSet:
        """
        Load the baseline collections for a persona.

        Args:
            persona: The persona whose fixtures to read

        Returns:
            A RecordSet. Any collection whose resource is missing or fails
            to decode is empty; the others are unaffected.
        """
        pass


class OverrideStorageInterface(ABC):
    """
    Durable record of user edits, independent of fixtures.

    Every key is namespaced by persona id AND entity kind.
    """

    @abstractmethod
    def load_overrides(self, persona_id: str, kind: EntityKind) -> list[Record]:
        """
        Load the override snapshot for (persona, kind).

        Returns:
            The stored records, or an empty list if nothing is stored or
            the stored data cannot be decoded
        """
        pass

    @abstractmethod
    def save_overrides(
        self,
        persona_id: str,
        kind: EntityKind,
        records: Sequence[Record],
    ) -> None:
        """
        Replace the snapshot for (persona, kind) with ``records``.

        Last write wins; this is a full snapshot, not an append.

        Raises:
            PersistError: If the snapshot could not be written
        """
        pass

    @abstractmethod
    def clear(self, persona_id: str, kind: EntityKind) -> None:
        """
        Remove the snapshot for (persona, kind). Missing snapshots are fine.

        Raises:
            PersistError: If the snapshot exists but could not be removed
        """
        pass

    @abstractmethod
    def load_selected_persona(self) -> Optional[str]:
        """Id of the persona selected last time, if any."""
        pass

    @abstractmethod
    def save_selected_persona(self, persona_id: str) -> None:
        """
        Remember the selected persona.

        Raises:
            PersistError: If the selection could not be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ResourceMissingError(StorageError):
    """A fixture resource does not exist."""
    pass


class DecodeError(StorageError):
    """Stored or bundled data is malformed."""
    pass


class PersistError(StorageError):
    """Could not write to the override store."""
    pass
