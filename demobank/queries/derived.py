"""
Derived Queries

Composite projections the screens need, built ONLY from the DataManager's
primitive queries and read-only collections.

DESIGN DECISION: The DataManager never pre-aggregates. Anything that
combines categories, sums amounts or matches merchants lives here, on the
consumer side, and is recomputed on every call.
"""

from typing import Optional

from demobank.models.money import Money
from demobank.models.records import (
    Invoice,
    InvoiceAccount,
    InvoiceCategory,
    Transaction,
    TransactionCategory,
)
from demobank.services.clock import Clock
from demobank.services.data_manager import DataManager


DUE_CATEGORIES = (InvoiceCategory.OVERDUE, InvoiceCategory.DUE_SOON)
HANDLED_CATEGORIES = (InvoiceCategory.HANDLED_SCHEDULED, InvoiceCategory.HANDLED_PAID)


class DerivedQueries:
    """
    Consumer-side views over a DataManager.

    GUARANTEES:
    - Read-only: never calls a mutating DataManager method
    - Empty results rather than errors
    """

    def __init__(self, manager: DataManager, clock: Optional[Clock] = None):
        self._manager = manager
        self._clock = clock or Clock()

    # -------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------

    def due_invoices(self) -> list[Invoice]:
        """Overdue invoices, then invoices due soon."""
        return self._by_categories(DUE_CATEGORIES)

    def handled_invoices(self) -> list[Invoice]:
        """Scheduled invoices, then paid ones."""
        return self._by_categories(HANDLED_CATEGORIES)

    def total_due(self) -> Money:
        """Sum of everything overdue or due soon."""
        return Money.sum(invoice.amount for invoice in self.due_invoices())

    def account_for_invoice(self, invoice: Invoice) -> Optional[InvoiceAccount]:
        """
        The invoice account an invoice belongs to, matched by merchant.

        Case-insensitive containment either way between the invoice merchant
        and the account's merchant key (autopay source, else title head).
        """
        merchant = invoice.merchant.lower()
        for account in self._manager.invoice_accounts:
            key = account.merchant_key.lower()
            if key and (key in merchant or merchant in key):
                return account
        return None

    def _by_categories(self, categories) -> list[Invoice]:
        invoices: list[Invoice] = []
        for category in categories:
            invoices.extend(self._manager.invoices_by_category(category))
        return invoices

    # -------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------

    def accounts_for_merchant(self, merchant: str) -> list[InvoiceAccount]:
        """Invoice accounts whose autopay source mentions the merchant."""
        needle = merchant.strip().lower()
        if not needle:
            return []
        return [
            account for account in self._manager.invoice_accounts
            if needle in account.autopay_source.lower()
        ]

    def main_account_for_merchant(self, merchant: str) -> Optional[InvoiceAccount]:
        """The merchant's "Main Account", if the persona has one."""
        for account in self.accounts_for_merchant(merchant):
            if "main account" in account.title.lower():
                return account
        return None

    def account_balance(self, account_id) -> Money:
        """Net of all transactions linked to an account."""
        return Money.sum(
            transaction.amount
            for transaction in self._manager.transactions_for_account(account_id)
        )

    def has_products(self) -> bool:
        """Whether the persona holds any credit product."""
        return bool(self._manager.credit_accounts)

    # -------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------

    def purchases(self) -> list[Transaction]:
        """Purchases with a known merchant, in collection order."""
        return [
            transaction for transaction in self._manager.transactions
            if transaction.merchant
            and transaction.category in (None, TransactionCategory.PURCHASE)
        ]

    def recent_transactions(self, within_days: int = 30) -> list[Transaction]:
        """
        Transactions dated in the last ``within_days`` days up to today,
        newest first. Ties keep collection order.
        """
        window = [
            transaction for transaction in self._manager.transactions
            if -within_days <= transaction.date_offset <= 0
        ]
        return sorted(window, key=lambda transaction: -transaction.date_offset)

    def transaction_subtitle(self, transaction: Transaction) -> str:
        """Relative date line for a transaction row, e.g. "Yesterday"."""
        return self._clock.format_relative(transaction.date_offset)
