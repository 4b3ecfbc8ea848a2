"""
Override Storage Implementations

Overrides are the user's edits and additions. Each (persona, kind) pair
holds one JSON array - the full collection as it was after the last save.

Two backends share the encode/decode logic:
- JsonFileOverrideStorage: one file per key, written atomically
- InMemoryOverrideStorage: a dict of bytes, for tests and throwaway sessions

Keys look like "<persona_id>/<kind>", e.g. "john/invoice_accounts".
"""

import contextlib
import json
import os
import tempfile
from abc import abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from demobank.models.records import EntityKind, Record
from demobank.services.storage.interface import (
    DecodeError,
    OverrideStorageInterface,
    PersistError,
)


logger = structlog.get_logger(__name__)

SELECTED_PERSONA_KEY = "selected_persona"

_ADAPTERS = {kind: TypeAdapter(list[kind.record_type]) for kind in EntityKind}


def override_key(persona_id: str, kind: EntityKind) -> str:
    """Storage key for a (persona, kind) snapshot."""
    return f"{persona_id}/{kind.storage_key}"


class KeyValueOverrideStorage(OverrideStorageInterface):
    """
    Override storage on top of a byte-oriented key-value store.

    Subclasses implement ``_read``, ``_write`` and ``_delete``.
    """

    @abstractmethod
    def _read(self, key: str) -> Optional[bytes]:
        """Bytes stored under key, None if absent. May raise OSError."""
        pass

    @abstractmethod
    def _write(self, key: str, data: bytes) -> None:
        """Store bytes under key. Raises PersistError on failure."""
        pass

    @abstractmethod
    def _delete(self, key: str) -> None:
        """Remove key if present. Raises PersistError on failure."""
        pass

    def load_overrides(self, persona_id: str, kind: EntityKind) -> list[Record]:
        key = override_key(persona_id, kind)
        try:
            data = self._read(key)
        except OSError as e:
            logger.error("override_read_failed", key=key, error=str(e))
            return []

        if data is None:
            return []

        try:
            return self._decode(kind, data)
        except DecodeError as e:
            # Discarded for this load only; the bytes stay until the next save
            logger.warning("override_decode_failed", key=key, error=str(e))
            return []

    def save_overrides(
        self,
        persona_id: str,
        kind: EntityKind,
        records: Sequence[Record],
    ) -> None:
        key = override_key(persona_id, kind)
        data = _ADAPTERS[kind].dump_json(list(records), by_alias=True)
        self._write(key, data)
        logger.debug("overrides_saved", key=key, record_count=len(records))

    def clear(self, persona_id: str, kind: EntityKind) -> None:
        key = override_key(persona_id, kind)
        self._delete(key)
        logger.debug("overrides_cleared", key=key)

    def load_selected_persona(self) -> Optional[str]:
        try:
            data = self._read(SELECTED_PERSONA_KEY)
        except OSError as e:
            logger.error("selected_persona_read_failed", error=str(e))
            return None

        if data is None:
            return None

        try:
            value = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("selected_persona_decode_failed", error=str(e))
            return None
        return value if isinstance(value, str) else None

    def save_selected_persona(self, persona_id: str) -> None:
        self._write(SELECTED_PERSONA_KEY, json.dumps(persona_id).encode("utf-8"))

    @staticmethod
    def _decode(kind: EntityKind, data: bytes) -> list[Record]:
        try:
            return _ADAPTERS[kind].validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid {kind.storage_key} overrides ({e.error_count()} errors): {e}"
            ) from e


class JsonFileOverrideStorage(KeyValueOverrideStorage):
    """
    Override snapshots as JSON files under a root directory.

    "<root>/<persona_id>/<kind>.json" per snapshot and
    "<root>/selected_persona.json" for the persona selection.
    Writes go to a temporary file that replaces the target, so a reader
    never sees a half-written snapshot.
    """

    def __init__(self, root: Union[str, Path]):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root.joinpath(*key.split("/")).with_suffix(".json")

    def _read(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise PersistError(f"Could not write {path}: {e}") from e

    def _delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistError(f"Could not remove {path}: {e}") from e


class InMemoryOverrideStorage(KeyValueOverrideStorage):
    """
    Override storage held in a dict.

    Stores the same JSON bytes the file backend writes, so decoding
    behaves identically.
    """

    def __init__(self):
        self._data: dict[str, bytes] = {}

    def keys(self) -> list[str]:
        return sorted(self._data)

    def raw(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def put_raw(self, key: str, data: bytes) -> None:
        """Store raw bytes under a key (e.g. to simulate corrupted data)."""
        self._data[key] = data

    def _read(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def _write(self, key: str, data: bytes) -> None:
        self._data[key] = data

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)
