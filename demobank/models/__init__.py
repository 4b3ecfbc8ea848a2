"""
Data Models Package

This package contains all Pydantic models used by the Demo Bank store.
All data flowing through the store must conform to these schemas.
"""

from demobank.models.money import Currency, Money, parse_amount
from demobank.models.records import (
    CreditAccount,
    EntityKind,
    Invoice,
    InvoiceAccount,
    InvoiceCategory,
    PaymentMethod,
    PurchaseSize,
    Record,
    RecordSet,
    Transaction,
    TransactionCategory,
)
from demobank.models.persona import (
    BILL,
    DEFAULT_PERSONAS,
    JOHN,
    KIM,
    Persona,
    PersonaRegistry,
)
from demobank.models.audit import (
    StoreEvent,
    StoreEventBuilder,
    StoreEventSeverity,
    StoreEventType,
)

__all__ = [
    # Money
    "Currency",
    "Money",
    "parse_amount",
    # Records
    "CreditAccount",
    "EntityKind",
    "Invoice",
    "InvoiceAccount",
    "InvoiceCategory",
    "PaymentMethod",
    "PurchaseSize",
    "Record",
    "RecordSet",
    "Transaction",
    "TransactionCategory",
    # Personas
    "BILL",
    "DEFAULT_PERSONAS",
    "JOHN",
    "KIM",
    "Persona",
    "PersonaRegistry",
    # Store events
    "StoreEvent",
    "StoreEventBuilder",
    "StoreEventSeverity",
    "StoreEventType",
]
