"""
Record Models for Demo Bank

The canonical records every screen reads: invoices, transactions and
invoice accounts. Each one carries a stable identity that is the ONLY merge
key between fixture data and user overrides.

DESIGN DECISION: Records are frozen. An edit is a new record with the same
id (``record.model_copy(update=...)``) handed to the DataManager, never an
in-place mutation of a fixture record.

Wire format is camelCase JSON ("dueDateOffset", "accountId") to match the
bundled fixtures; Python attributes are snake_case.
"""

from enum import Enum
from typing import Any, Optional, Union
from uuid import NAMESPACE_URL, UUID, uuid4, uuid5

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from demobank.models.money import Money


RECORD_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class InvoiceCategory(str, Enum):
    """
    Invoice grouping used by the payments screens.

    DESIGN DECISION: The category is a stored fact set by whoever authors
    the record. It is NOT recomputed from the due date.
    """
    OVERDUE = "overdue"
    DUE_SOON = "dueSoon"
    HANDLED_SCHEDULED = "handledScheduled"
    HANDLED_PAID = "handledPaid"


class TransactionCategory(str, Enum):
    """Transaction kind."""
    PURCHASE = "purchase"
    PAYMENT = "payment"
    REFUND = "refund"
    OTHER = "other"


class PurchaseSize(str, Enum):
    """Size bucket used to group purchases in lists."""
    LARGE = "large"
    SHOPPING = "shopping"
    RECENT = "recent"


class PaymentMethod(str, Enum):
    """Payment methods the prototype knows about."""
    RESURS_FAMILY = "Resurs Family"
    RESURS_GOLD = "Resurs Gold"
    BAUHAUS_INVOICE = "Bauhaus Invoice"
    NETONNET_ACCOUNT = "Netonnet Account"
    JULA_ACCOUNT = "Jula Account"
    SWISH = "Swish"


# Merchant substring -> payment method, checked in order
_MERCHANT_PAYMENT_METHODS = (
    ("bauhaus", PaymentMethod.BAUHAUS_INVOICE),
    ("netonnet", PaymentMethod.NETONNET_ACCOUNT),
    ("jula", PaymentMethod.JULA_ACCOUNT),
)

LARGE_PURCHASE_THRESHOLD = Money(minor_units=5000_00)
SHOPPING_THRESHOLD = Money(minor_units=1000_00)


# =============================================================================
# RECORDS
# =============================================================================

class Invoice(BaseModel):
    """
    An invoice shown on the payments screens.

    Day offsets are relative to the Clock anchor, so fixtures stay valid
    whatever day the app runs.
    """
    model_config = RECORD_CONFIG

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable identity, never reassigned"
    )
    merchant: str = Field(
        ...,
        description="Merchant name"
    )
    amount: Money = Field(
        ...,
        description="Amount due"
    )
    detail_amount: Optional[Money] = Field(
        default=None,
        description="Amount shown on the detail screen if it differs"
    )
    due_date_offset: int = Field(
        ...,
        description="Due date as days from the anchor"
    )
    invoice_number: str = ""
    issue_date_offset: int = Field(
        ...,
        description="Issue date as days from the anchor"
    )
    status: str = Field(
        default="",
        description="Status text"
    )
    status_override: Optional[str] = Field(
        default=None,
        description="Supersedes status when present"
    )
    category: InvoiceCategory
    is_overdue: bool = False

    # Presentation hints, carried through untouched
    color_name: str = "blue"
    icon: Optional[str] = None

    @field_validator("detail_amount", mode="before")
    @classmethod
    def empty_amount_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def effective_status(self) -> str:
        """Status to display: the override wins when set."""
        return self.status_override or self.status

    @property
    def display_amount(self) -> Money:
        return self.detail_amount or self.amount


class Transaction(BaseModel):
    """A single account movement."""
    model_config = RECORD_CONFIG

    id: UUID = Field(default_factory=uuid4)
    date_offset: int = Field(
        ...,
        description="Transaction date as days from the anchor"
    )
    description: str
    amount: Money
    amount_color_name: str = "primary"
    merchant: Optional[str] = None
    payment_method: Optional[str] = Field(
        default=None,
        description='Payment method label, e.g. "Resurs Gold"'
    )
    category: Optional[TransactionCategory] = None
    account_id: Optional[UUID] = Field(
        default=None,
        description="Invoice account this transaction belongs to"
    )

    @property
    def display_merchant(self) -> str:
        return self.merchant or self.description

    def inferred_payment_method(self) -> PaymentMethod:
        """
        Payment method for display.

        Uses the explicit label when it is a known method, otherwise infers
        one from the merchant name.
        """
        if self.payment_method:
            try:
                return PaymentMethod(self.payment_method)
            except ValueError:
                pass

        merchant = self.display_merchant.lower()
        for needle, method in _MERCHANT_PAYMENT_METHODS:
            if needle in merchant:
                return method
        return PaymentMethod.RESURS_FAMILY

    def size_bucket(self) -> PurchaseSize:
        """Bucket by absolute amount."""
        amount = Money(minor_units=abs(self.amount.minor_units), currency=self.amount.currency)
        if amount >= LARGE_PURCHASE_THRESHOLD:
            return PurchaseSize.LARGE
        if amount >= SHOPPING_THRESHOLD:
            return PurchaseSize.SHOPPING
        return PurchaseSize.RECENT


class InvoiceAccount(BaseModel):
    """
    A part-payment / invoice account (e.g. "Main Account - Netonnet").

    ``progress`` is not clamped; producers are expected to keep it in 0..1.
    """
    model_config = RECORD_CONFIG

    id: UUID = Field(default_factory=uuid4)
    title: str
    subtitle: str = ""
    amount: Money
    progress: float = 0.0
    installment_amount: Optional[Money] = None
    total_amount: Optional[Money] = None
    completed_payments: int = Field(default=0, ge=0)
    total_payments: int = Field(default=0, ge=0)
    next_due_date: str = ""
    autopay_source: str = Field(
        default="",
        description="Payment source label, also used to match merchants"
    )

    @field_validator("installment_amount", "total_amount", mode="before")
    @classmethod
    def empty_amount_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_detailed_schedule(self) -> bool:
        return (
            self.installment_amount is not None
            and self.total_amount is not None
            and self.total_payments > 0
            and bool(self.next_due_date)
        )

    @property
    def merchant_key(self) -> str:
        """Name used to attribute invoices: autopay source, else the title head."""
        if self.autopay_source:
            return self.autopay_source
        return self.title.split(" - ")[0]


class CreditAccount(BaseModel):
    """
    A credit line shown on the overview screens. Read-only fixture data.

    Fixtures carry no id for credit accounts; one is derived from the name
    so that reloading yields the same identity.
    """
    model_config = RECORD_CONFIG

    id: UUID
    name: str
    available: Money
    limit: Money

    @model_validator(mode="before")
    @classmethod
    def derive_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = {**data, "id": uuid5(NAMESPACE_URL, f"credit-account:{data.get('name', '')}")}
        return data

    @property
    def available_label(self) -> str:
        return self.available.format(code=True)

    @property
    def limit_label(self) -> str:
        return self.limit.format(code=True)


Record = Union[Invoice, Transaction, InvoiceAccount]


class EntityKind(str, Enum):
    """
    The overridable record collections.

    Values are the array keys used in fixture documents.
    """
    INVOICES = "invoices"
    TRANSACTIONS = "transactions"
    INVOICE_ACCOUNTS = "invoiceAccounts"

    @property
    def record_type(self) -> type:
        return _RECORD_TYPES[self]

    @property
    def storage_key(self) -> str:
        """snake_case name used for file names and storage keys."""
        return _STORAGE_KEYS[self]

    @classmethod
    def for_record(cls, record: Any) -> "EntityKind":
        """
        Kind of a record instance.

        Raises:
            TypeError: If the object is not a storable record
        """
        for kind, record_type in _RECORD_TYPES.items():
            if isinstance(record, record_type):
                return kind
        raise TypeError(f"Not a storable record: {type(record).__name__}")


_RECORD_TYPES = {
    EntityKind.INVOICES: Invoice,
    EntityKind.TRANSACTIONS: Transaction,
    EntityKind.INVOICE_ACCOUNTS: InvoiceAccount,
}

_STORAGE_KEYS = {
    EntityKind.INVOICES: "invoices",
    EntityKind.TRANSACTIONS: "transactions",
    EntityKind.INVOICE_ACCOUNTS: "invoice_accounts",
}


class RecordSet(BaseModel):
    """
    The collections of one persona, as loaded from fixtures.

    Mirrors the fixture document wrapper
    ``{invoices, transactions, invoiceAccounts, creditAccounts}``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    invoices: list[Invoice] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    invoice_accounts: list[InvoiceAccount] = Field(default_factory=list)
    credit_accounts: list[CreditAccount] = Field(default_factory=list)

    def records(self, kind: EntityKind) -> list:
        if kind is EntityKind.INVOICES:
            return self.invoices
        if kind is EntityKind.TRANSACTIONS:
            return self.transactions
        return self.invoice_accounts
