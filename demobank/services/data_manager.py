"""
Data Manager

The single source of truth for the active persona's records. Every read
and every write of invoices, transactions and invoice accounts goes
through here.

Flow:
1. Load     -> fixtures for the persona, overrides for the persona
2. Merge    -> override replaces the fixture record with the same id
               (keeping its position), unknown ids are appended
3. Save     -> upsert in memory, then persist the WHOLE collection
4. Reset    -> drop the persona's overrides, back to fixtures only
5. Switch   -> other persona, other fixtures, other overrides

GUARANTEES:
- Overrides always win by identity, whatever their content
- Fixture records without an override survive every load unchanged
- Nothing is ever deleted; there is no tombstone
- No operation raises for missing or malformed data; it degrades to empty
  collections or a no-op and logs

DESIGN DECISION: The manager is an explicit object built once at startup
and handed to consumers. There is no module-level instance.
"""

import threading
from typing import Iterable, Optional, TypeVar, Union
from uuid import UUID

import structlog

from demobank.audit import StoreAuditLogger, StoreObserver
from demobank.models.persona import Persona, PersonaRegistry
from demobank.models.records import (
    CreditAccount,
    EntityKind,
    Invoice,
    InvoiceAccount,
    InvoiceCategory,
    Record,
    RecordSet,
    Transaction,
)
from demobank.services.storage.interface import (
    FixtureLoaderInterface,
    OverrideStorageInterface,
    StorageError,
)


R = TypeVar("R", Invoice, Transaction, InvoiceAccount)


def merge_by_identity(base: Iterable[R], overrides: Iterable[R]) -> list[R]:
    """
    Merge overrides onto base records by id.

    An override replaces the first base record with its id, in place;
    an override with an unknown id is appended. Base order is preserved.
    """
    merged = list(base)
    positions: dict[UUID, int] = {}
    for index, record in enumerate(merged):
        positions.setdefault(record.id, index)

    for override in overrides:
        index = positions.get(override.id)
        if index is None:
            positions[override.id] = len(merged)
            merged.append(override)
        else:
            merged[index] = override
    return merged


def _as_uuid(value: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class DataManager:
    """
    Persona-scoped store with fixture/override merge semantics.

    A re-entrant lock serializes load, save, reset and persona switches, so
    the manager may be shared between threads. Observers are notified
    outside the lock.
    """

    def __init__(
        self,
        fixture_loader: FixtureLoaderInterface,
        override_storage: OverrideStorageInterface,
        persona: Optional[Union[Persona, str]] = None,
        registry: Optional[PersonaRegistry] = None,
        audit_logger: Optional[StoreAuditLogger] = None,
        autoload: bool = True,
    ):
        """
        Args:
            fixture_loader: Source of baseline collections
            override_storage: Where user edits are persisted
            persona: Persona (or id) to start with. None restores the last
                     selected persona, falling back to the registry default.
            registry: Personas that can be switched to
            audit_logger: Event sink; a local-only logger if None
            autoload: Run the load protocol immediately
        """
        self._fixtures = fixture_loader
        self._overrides = override_storage
        self._registry = registry or PersonaRegistry()
        self._audit = audit_logger or StoreAuditLogger()
        self._logger = structlog.get_logger(__name__)
        self._lock = threading.RLock()

        self._persona = self._initial_persona(persona)
        self._collections: dict[EntityKind, list[Record]] = {
            kind: [] for kind in EntityKind
        }
        self._credit_accounts: list[CreditAccount] = []

        if autoload:
            self.load()

    # -------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------

    @property
    def persona(self) -> Persona:
        return self._persona

    @property
    def registry(self) -> PersonaRegistry:
        return self._registry

    @property
    def invoices(self) -> tuple[Invoice, ...]:
        with self._lock:
            return tuple(self._collections[EntityKind.INVOICES])

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._collections[EntityKind.TRANSACTIONS])

    @property
    def invoice_accounts(self) -> tuple[InvoiceAccount, ...]:
        with self._lock:
            return tuple(self._collections[EntityKind.INVOICE_ACCOUNTS])

    @property
    def credit_accounts(self) -> tuple[CreditAccount, ...]:
        with self._lock:
            return tuple(self._credit_accounts)

    def records(self, kind: EntityKind) -> tuple[Record, ...]:
        with self._lock:
            return tuple(self._collections[kind])

    def subscribe(self, observer: StoreObserver):
        """Register a change observer; returns an unsubscribe callable."""
        return self._audit.subscribe(observer)

    # -------------------------------------------------------------------
    # Load / reset / switch
    # -------------------------------------------------------------------

    def load(self) -> None:
        """Load fixtures for the active persona and merge its overrides."""
        with self._lock:
            persona_id = self._persona.id
            counts = self._load(with_overrides=True)
        self._audit.log_data_loaded(persona_id, counts, with_overrides=True)

    def reset(self) -> None:
        """
        Drop every override of the active persona and reload fixtures.

        Other personas keep their overrides.
        """
        with self._lock:
            persona_id = self._persona.id
            for kind in EntityKind:
                try:
                    self._overrides.clear(persona_id, kind)
                except StorageError as e:
                    self._logger.error(
                        "override_clear_failed",
                        persona_id=persona_id,
                        entity_kind=kind.value,
                        error=str(e),
                    )
            # Fixtures only, even if a clear failed above
            counts = self._load(with_overrides=False)

        self._audit.log_overrides_reset(persona_id)
        self._audit.log_data_loaded(persona_id, counts, with_overrides=False)

    def switch_persona(self, persona: Union[Persona, str]) -> bool:
        """
        Make another persona active and load its data.

        The previous persona's in-memory state is dropped; its persisted
        overrides stay where they are.

        Returns:
            True if switched, False if the persona is unknown
        """
        requested_id = persona.id if isinstance(persona, Persona) else persona
        target = self._registry.get(requested_id)
        if target is None:
            self._audit.log_persona_rejected(self._persona.id, str(requested_id))
            return False

        with self._lock:
            previous_id = self._persona.id
            self._persona = target
            try:
                self._overrides.save_selected_persona(target.id)
            except StorageError as e:
                self._logger.error(
                    "persona_selection_save_failed",
                    persona_id=target.id,
                    error=str(e),
                )
            counts = self._load(with_overrides=True)

        self._audit.log_persona_switched(target.id, previous_id)
        self._audit.log_data_loaded(target.id, counts, with_overrides=True)
        return True

    def _load(self, with_overrides: bool) -> dict[str, int]:
        """Run the load protocol (caller holds the lock); returns counts."""
        persona = self._persona
        base = self._load_defaults(persona)

        for kind in EntityKind:
            records = base.records(kind)
            if with_overrides:
                records = merge_by_identity(records, self._load_overrides(persona, kind))
            self._collections[kind] = list(records)
        self._credit_accounts = list(base.credit_accounts)

        counts = {kind.value: len(self._collections[kind]) for kind in EntityKind}
        counts["creditAccounts"] = len(self._credit_accounts)
        return counts

    def _load_defaults(self, persona: Persona) -> RecordSet:
        try:
            return self._fixtures.load_defaults(persona)
        except StorageError as e:
            self._logger.error("fixture_load_failed", persona_id=persona.id, error=str(e))
            return RecordSet()

    def _load_overrides(self, persona: Persona, kind: EntityKind) -> list[Record]:
        try:
            return self._overrides.load_overrides(persona.id, kind)
        except StorageError as e:
            self._logger.error(
                "override_load_failed",
                persona_id=persona.id,
                entity_kind=kind.value,
                error=str(e),
            )
            return []

    def _initial_persona(self, persona: Optional[Union[Persona, str]]) -> Persona:
        if persona is not None:
            requested_id = persona.id if isinstance(persona, Persona) else persona
            found = self._registry.get(requested_id)
            if found is None:
                self._logger.warning(
                    "unknown_persona",
                    persona_id=requested_id,
                    fallback=self._registry.default.id,
                )
            return found or self._registry.default

        try:
            selected = self._overrides.load_selected_persona()
        except StorageError as e:
            self._logger.error("persona_selection_load_failed", error=str(e))
            selected = None
        return (selected and self._registry.get(selected)) or self._registry.default

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------

    def save(self, record: Record) -> bool:
        """
        Upsert a record and persist its collection.

        The in-memory change is visible immediately. The full collection of
        that kind is written as the override snapshot.

        Returns:
            True if persisted, False if the write failed (the in-memory
            change is kept)

        Raises:
            TypeError: If ``record`` is not an Invoice, Transaction or
                       InvoiceAccount
        """
        kind = EntityKind.for_record(record)

        with self._lock:
            persona_id = self._persona.id
            collection = self._collections[kind]
            created = True
            for index, existing in enumerate(collection):
                if existing.id == record.id:
                    collection[index] = record
                    created = False
                    break
            else:
                collection.append(record)

            snapshot = list(collection)
            try:
                self._overrides.save_overrides(persona_id, kind, snapshot)
                error = None
            except StorageError as e:
                error = str(e)

        if error is not None:
            self._audit.log_persist_failed(persona_id, kind, record.id, error)
            return False

        self._audit.log_record_saved(persona_id, kind, record.id, created)
        return True

    def save_invoice(self, invoice: Invoice) -> bool:
        return self.save(invoice)

    def save_transaction(self, transaction: Transaction) -> bool:
        return self.save(transaction)

    def save_invoice_account(self, account: InvoiceAccount) -> bool:
        return self.save(account)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def invoices_by_category(self, category: Union[InvoiceCategory, str]) -> list[Invoice]:
        """Invoices in a category, in collection order. Unknown tags match nothing."""
        try:
            category = InvoiceCategory(category)
        except ValueError:
            self._logger.warning("unknown_invoice_category", category=str(category))
            return []

        with self._lock:
            return [
                invoice for invoice in self._collections[EntityKind.INVOICES]
                if invoice.category is category
            ]

    def transactions_for_account(self, account_id: Union[UUID, str]) -> list[Transaction]:
        """Transactions linked to an invoice account, in collection order."""
        account_id = _as_uuid(account_id)
        if account_id is None:
            return []

        with self._lock:
            return [
                transaction for transaction in self._collections[EntityKind.TRANSACTIONS]
                if transaction.account_id == account_id
            ]

    def invoice_account(self, account_id: Union[UUID, str]) -> Optional[InvoiceAccount]:
        """The invoice account with this id, or None."""
        account_id = _as_uuid(account_id)
        if account_id is None:
            return None

        with self._lock:
            for account in self._collections[EntityKind.INVOICE_ACCOUNTS]:
                if account.id == account_id:
                    return account
        return None
