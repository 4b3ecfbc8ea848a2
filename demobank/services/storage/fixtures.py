"""
JSON Fixture Loader

Fixtures are the baseline data of each persona. They are read fresh on
every load and never written.

Layout under the fixture root, first match wins per collection:

    <root>/<persona_id>/<kind>.json     one document per persona and kind
    <root>/persona_<persona_name>.json  one document holding every kind

Every document has the same wrapper shape:

    {"invoices": [...], "transactions": [...],
     "invoiceAccounts": [...], "creditAccounts": [...]}

A per-kind document conventionally fills only its own array.

TRADEOFFS:
- A collection that fails to decode loads as EMPTY, it is not partially
  salvaged. One bad record hides the whole collection until it is fixed.
- Other collections are unaffected by that failure.
"""

import json
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from demobank.models.persona import Persona
from demobank.models.records import (
    CreditAccount,
    Invoice,
    InvoiceAccount,
    RecordSet,
    Transaction,
)
from demobank.services.storage.interface import (
    DecodeError,
    FixtureLoaderInterface,
    ResourceMissingError,
)


logger = structlog.get_logger(__name__)


# (RecordSet field, wrapper key, file stem, adapter)
_SECTIONS = (
    ("invoices", "invoices", "invoices", TypeAdapter(list[Invoice])),
    ("transactions", "transactions", "transactions", TypeAdapter(list[Transaction])),
    ("invoice_accounts", "invoiceAccounts", "invoice_accounts", TypeAdapter(list[InvoiceAccount])),
    ("credit_accounts", "creditAccounts", "credit_accounts", TypeAdapter(list[CreditAccount])),
)


def bundled_fixture_root() -> Traversable:
    """The fixtures shipped inside the package."""
    return resources.files("demobank").joinpath("fixtures")


class JsonFixtureLoader(FixtureLoaderInterface):
    """
    Reads persona fixtures from a directory of JSON documents.

    ``root`` may be a filesystem path or an importlib.resources traversable.
    """

    def __init__(self, root: Optional[Union[str, Path, Traversable]] = None):
        if root is None:
            root = bundled_fixture_root()
        elif isinstance(root, str):
            root = Path(root)
        self._root = root

    def load_defaults(self, persona: Persona) -> RecordSet:
        collections = {}
        for field_name, wrapper_key, stem, adapter in _SECTIONS:
            collections[field_name] = self._load_section(persona, wrapper_key, stem, adapter)
        return RecordSet(**collections)

    def _load_section(
        self,
        persona: Persona,
        wrapper_key: str,
        stem: str,
        adapter: TypeAdapter,
    ) -> list:
        try:
            resource, document = self._read_document(persona, stem)
        except ResourceMissingError as e:
            logger.warning(
                "fixture_missing",
                persona_id=persona.id,
                collection=wrapper_key,
                error=str(e),
            )
            return []
        except DecodeError as e:
            logger.error(
                "fixture_decode_failed",
                persona_id=persona.id,
                collection=wrapper_key,
                error=str(e),
            )
            return []

        raw = document.get(wrapper_key)
        if raw is None:
            return []

        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(
                "fixture_decode_failed",
                persona_id=persona.id,
                collection=wrapper_key,
                resource=resource,
                error_count=e.error_count(),
                error=str(e),
            )
            return []

    def _read_document(self, persona: Persona, stem: str) -> tuple[str, dict]:
        """
        Find and parse the document for one collection.

        Raises:
            ResourceMissingError: If neither layout has a document
            DecodeError: If the document is not a JSON object
        """
        candidates = (
            self._root.joinpath(persona.id).joinpath(f"{stem}.json"),
            self._root.joinpath(f"persona_{persona.name}.json"),
        )
        for candidate in candidates:
            if not candidate.is_file():
                continue
            try:
                document = json.loads(candidate.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise DecodeError(f"{candidate}: {e}") from e
            if not isinstance(document, dict):
                raise DecodeError(f"{candidate}: expected a JSON object")
            return str(candidate), document

        raise ResourceMissingError(
            f"No fixture for {persona.id}/{stem} under {self._root}"
        )
