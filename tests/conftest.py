"""
Shared fixtures for Demo Bank tests.

Fixture documents are written to tmp_path so tests never depend on the
bundled sample data (except where that data is what's under test).
"""

import json
from pathlib import Path
from uuid import UUID

import pytest

from demobank.services.data_manager import DataManager
from demobank.services.storage import InMemoryOverrideStorage, JsonFixtureLoader


# Invoice ids (john)
INVOICE_OVERDUE_A = UUID("11111111-1111-4111-8111-000000000001")
INVOICE_DUE_SOON_B = UUID("11111111-1111-4111-8111-000000000002")
INVOICE_OVERDUE_C = UUID("11111111-1111-4111-8111-000000000003")
INVOICE_PAID_D = UUID("11111111-1111-4111-8111-000000000004")
INVOICE_SCHEDULED_E = UUID("11111111-1111-4111-8111-000000000005")
INVOICE_DUE_SOON_F = UUID("11111111-1111-4111-8111-000000000006")

# Invoice accounts (john)
ACCOUNT_BAUHAUS = UUID("22222222-2222-4222-8222-000000000001")
ACCOUNT_NETONNET = UUID("22222222-2222-4222-8222-000000000002")
ACCOUNT_UNLINKED = UUID("22222222-2222-4222-8222-000000000099")

# Transactions (john)
TX_DRILL = UUID("33333333-3333-4333-8333-000000000001")
TX_GROCERIES = UUID("33333333-3333-4333-8333-000000000002")
TX_PAYMENT = UUID("33333333-3333-4333-8333-000000000003")
TX_DANGLING = UUID("33333333-3333-4333-8333-000000000004")

# Bill
INVOICE_BILL = UUID("44444444-4444-4444-8444-000000000001")


def _invoice(invoice_id, merchant, amount, due, category, status=""):
    return {
        "id": str(invoice_id),
        "merchant": merchant,
        "amount": amount,
        "dueDateOffset": due,
        "invoiceNumber": f"INV-{str(invoice_id)[-3:]}",
        "issueDateOffset": due - 30,
        "status": status,
        "colorName": "blue",
        "isOverdue": category == "overdue",
        "category": category,
    }


JOHN_INVOICES = [
    _invoice(INVOICE_OVERDUE_A, "Bauhaus", "100 kr", -3, "overdue", "Overdue"),
    _invoice(INVOICE_DUE_SOON_B, "Netonnet", "2 499 kr", 4, "dueSoon", "Due soon"),
    _invoice(INVOICE_OVERDUE_C, "Jula", "389 kr", -1, "overdue", "Overdue"),
    _invoice(INVOICE_PAID_D, "Clas Ohlson", "799 kr", -10, "handledPaid", "Paid"),
    _invoice(INVOICE_SCHEDULED_E, "Resurs Gold", "3 150 kr", 12, "handledScheduled", "Scheduled"),
    _invoice(INVOICE_DUE_SOON_F, "Lyko", "459,50 kr", 6, "dueSoon", "Due soon"),
]

JOHN_ACCOUNTS = [
    {
        "id": str(ACCOUNT_BAUHAUS),
        "title": "Kitchen renovation",
        "subtitle": "Part payment",
        "amount": "1 245 kr",
        "progress": 0.25,
        "installmentAmount": "1 245 kr",
        "totalAmount": "14 940 kr",
        "completedPayments": 3,
        "totalPayments": 12,
        "nextDueDate": "Dec 17, 2025",
        "autopaySource": "Bauhaus Invoice",
    },
    {
        "id": str(ACCOUNT_NETONNET),
        "title": "Main Account - Netonnet",
        "subtitle": "No invoice until you make a purchase",
        "amount": "0 kr",
        "progress": 0.0,
        "installmentAmount": "",
        "totalAmount": "",
        "autopaySource": "Netonnet Account",
    },
]

JOHN_TRANSACTIONS = [
    {
        "id": str(TX_DRILL),
        "dateOffset": 0,
        "description": "Power drill",
        "amount": "-1 245 kr",
        "amountColorName": "red",
        "merchant": "Bauhaus",
        "paymentMethod": "Bauhaus Invoice",
        "category": "purchase",
        "accountId": str(ACCOUNT_BAUHAUS),
    },
    {
        "id": str(TX_GROCERIES),
        "dateOffset": -6,
        "description": "Groceries",
        "amount": "-412,50 kr",
        "amountColorName": "red",
        "merchant": "ICA Maxi",
        "category": "purchase",
    },
    {
        "id": str(TX_PAYMENT),
        "dateOffset": -4,
        "description": "Monthly payment",
        "amount": "1 245 kr",
        "amountColorName": "green",
        "category": "payment",
        "accountId": str(ACCOUNT_BAUHAUS),
    },
    {
        "id": str(TX_DANGLING),
        "dateOffset": -40,
        "description": "Old purchase",
        "amount": "-99 kr",
        "amountColorName": "red",
        "merchant": "Stadium",
        "category": "purchase",
        "accountId": str(ACCOUNT_UNLINKED),
    },
]

JOHN_CREDIT_ACCOUNTS = [
    {"name": "Resurs Gold", "available": 12000, "limit": 30000},
]

BILL_INVOICES = [
    _invoice(INVOICE_BILL, "Elgiganten", "5 990 kr", -8, "overdue", "Overdue"),
]


def write_fixture(root: Path, persona_id: str, stem: str, **arrays) -> Path:
    """Write a per-kind wrapper document; unspecified arrays are empty."""
    document = {
        "invoices": arrays.get("invoices", []),
        "transactions": arrays.get("transactions", []),
        "invoiceAccounts": arrays.get("invoiceAccounts", []),
        "creditAccounts": arrays.get("creditAccounts", []),
    }
    path = root / persona_id / f"{stem}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def fixture_root(tmp_path: Path) -> Path:
    """Fixture directory for john (per-kind files) and bill (invoices only)."""
    root = tmp_path / "fixtures"
    write_fixture(root, "john", "invoices", invoices=JOHN_INVOICES)
    write_fixture(root, "john", "transactions", transactions=JOHN_TRANSACTIONS)
    write_fixture(root, "john", "invoice_accounts", invoiceAccounts=JOHN_ACCOUNTS)
    write_fixture(root, "john", "credit_accounts", creditAccounts=JOHN_CREDIT_ACCOUNTS)
    write_fixture(root, "bill", "invoices", invoices=BILL_INVOICES)
    write_fixture(root, "bill", "transactions")
    write_fixture(root, "bill", "invoice_accounts")
    write_fixture(root, "bill", "credit_accounts")
    return root


@pytest.fixture
def fixture_loader(fixture_root: Path) -> JsonFixtureLoader:
    return JsonFixtureLoader(fixture_root)


@pytest.fixture
def override_storage() -> InMemoryOverrideStorage:
    return InMemoryOverrideStorage()


@pytest.fixture
def manager(fixture_loader, override_storage) -> DataManager:
    """A DataManager for john over the tmp fixtures and in-memory overrides."""
    return DataManager(fixture_loader, override_storage, persona="john")
