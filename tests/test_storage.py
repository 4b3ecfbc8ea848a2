"""
Tests for fixture loading and override storage.
"""

import json
from importlib.resources.abc import Traversable
from pathlib import Path

import pytest

from demobank.models.persona import BILL, DEFAULT_PERSONAS, JOHN, KIM, Persona
from demobank.models.records import EntityKind, Invoice, InvoiceCategory, Transaction
from demobank.services.storage import (
    InMemoryOverrideStorage,
    JsonFileOverrideStorage,
    JsonFixtureLoader,
    PersistError,
    bundled_fixture_root,
    override_key,
)

from tests.conftest import (
    INVOICE_OVERDUE_A,
    JOHN_INVOICES,
    JOHN_TRANSACTIONS,
    write_fixture,
)


class TestJsonFixtureLoader:
    """Tests for reading persona fixtures."""

    def test_per_kind_layout(self, fixture_loader):
        """Test loading one document per collection."""
        defaults = fixture_loader.load_defaults(JOHN)
        assert len(defaults.invoices) == len(JOHN_INVOICES)
        assert len(defaults.transactions) == len(JOHN_TRANSACTIONS)
        assert len(defaults.invoice_accounts) == 2
        assert len(defaults.credit_accounts) == 1
        assert defaults.invoices[0].id == INVOICE_OVERDUE_A

    def test_fixture_order_is_kept(self, fixture_loader):
        defaults = fixture_loader.load_defaults(JOHN)
        assert [str(i.id) for i in defaults.invoices] == [i["id"] for i in JOHN_INVOICES]

    def test_single_document_layout(self, tmp_path):
        """Test the persona_<name>.json fallback."""
        document = {
            "invoices": JOHN_INVOICES[:2],
            "transactions": JOHN_TRANSACTIONS[:1],
            "invoiceAccounts": [],
        }
        (tmp_path / "persona_john.json").write_text(json.dumps(document), encoding="utf-8")

        defaults = JsonFixtureLoader(tmp_path).load_defaults(JOHN)
        assert len(defaults.invoices) == 2
        assert len(defaults.transactions) == 1
        assert defaults.invoice_accounts == []
        assert defaults.credit_accounts == []

    def test_per_kind_document_wins(self, tmp_path):
        """Test that the per-kind document is preferred over the combined one."""
        write_fixture(tmp_path, "john", "invoices", invoices=JOHN_INVOICES[:1])
        (tmp_path / "persona_john.json").write_text(
            json.dumps({"invoices": JOHN_INVOICES}), encoding="utf-8"
        )
        defaults = JsonFixtureLoader(tmp_path).load_defaults(JOHN)
        assert len(defaults.invoices) == 1

    def test_missing_persona_loads_empty(self, fixture_loader):
        """Test that a persona without fixtures is empty, not an error."""
        defaults = fixture_loader.load_defaults(KIM)
        assert defaults.invoices == []
        assert defaults.transactions == []
        assert defaults.invoice_accounts == []
        assert defaults.credit_accounts == []

    def test_corrupted_document_only_affects_its_collection(self, fixture_root):
        """Test that unparseable JSON empties one collection."""
        (fixture_root / "john" / "invoices.json").write_text("{not json", encoding="utf-8")

        defaults = JsonFixtureLoader(fixture_root).load_defaults(JOHN)
        assert defaults.invoices == []
        assert len(defaults.transactions) == len(JOHN_TRANSACTIONS)

    def test_schema_mismatch_empties_collection(self, fixture_root):
        """Test that one bad record hides its whole collection."""
        broken = [dict(JOHN_INVOICES[0])] + JOHN_INVOICES[1:]
        del broken[0]["merchant"]
        write_fixture(fixture_root, "john", "invoices", invoices=broken)

        defaults = JsonFixtureLoader(fixture_root).load_defaults(JOHN)
        assert defaults.invoices == []
        assert len(defaults.invoice_accounts) == 2

    def test_out_of_range_amount_empties_collection(self, fixture_root):
        """Test that an amount too large to represent fails like any bad record."""
        broken = [{**JOHN_INVOICES[0], "amount": "1e999999999 kr"}] + JOHN_INVOICES[1:]
        write_fixture(fixture_root, "john", "invoices", invoices=broken)

        defaults = JsonFixtureLoader(fixture_root).load_defaults(JOHN)
        assert defaults.invoices == []
        assert len(defaults.transactions) == len(JOHN_TRANSACTIONS)

    def test_long_text_is_accepted(self, fixture_root):
        transactions = [{**JOHN_TRANSACTIONS[0], "description": "x" * 201}] + JOHN_TRANSACTIONS[1:]
        write_fixture(fixture_root, "john", "transactions", transactions=transactions)

        defaults = JsonFixtureLoader(fixture_root).load_defaults(JOHN)
        assert len(defaults.transactions) == len(JOHN_TRANSACTIONS)
        assert defaults.transactions[0].description == "x" * 201

    def test_non_object_document(self, fixture_root):
        (fixture_root / "john" / "transactions.json").write_text("[]", encoding="utf-8")
        defaults = JsonFixtureLoader(fixture_root).load_defaults(JOHN)
        assert defaults.transactions == []
        assert len(defaults.invoices) == len(JOHN_INVOICES)

    def test_reload_yields_equal_records(self, fixture_loader):
        assert fixture_loader.load_defaults(JOHN) == fixture_loader.load_defaults(JOHN)

    def test_accepts_string_root(self, fixture_root):
        defaults = JsonFixtureLoader(str(fixture_root)).load_defaults(BILL)
        assert len(defaults.invoices) == 1


class TestBundledFixtures:
    """Tests for the sample data shipped with the package."""

    def test_root_is_a_traversable(self):
        root = bundled_fixture_root()
        assert isinstance(root, Traversable)
        assert root.joinpath("john").joinpath("invoices.json").is_file()

    @pytest.mark.parametrize("persona", DEFAULT_PERSONAS, ids=lambda p: p.id)
    def test_every_persona_has_invoices(self, persona):
        defaults = JsonFixtureLoader().load_defaults(persona)
        assert defaults.invoices

    def test_john(self):
        defaults = JsonFixtureLoader().load_defaults(JOHN)
        assert len(defaults.invoices) == 5
        assert len(defaults.transactions) == 6
        assert len(defaults.invoice_accounts) == 3
        assert {a.name for a in defaults.credit_accounts} == {"Resurs Gold", "Resurs Family"}

    def test_bill_combined_document(self):
        defaults = JsonFixtureLoader().load_defaults(BILL)
        assert len(defaults.invoices) == 3
        bauhaus = next(i for i in defaults.invoices if i.merchant == "Bauhaus")
        assert str(bauhaus.amount) == "18 200 kr"
        assert bauhaus.category is InvoiceCategory.DUE_SOON

    def test_linked_transactions_point_at_known_accounts(self):
        for persona in DEFAULT_PERSONAS:
            defaults = JsonFixtureLoader().load_defaults(persona)
            account_ids = {a.id for a in defaults.invoice_accounts}
            for transaction in defaults.transactions:
                if transaction.account_id is not None:
                    assert transaction.account_id in account_ids

    def test_unknown_persona(self):
        stranger = Persona(id="stranger", name="stranger", display_name="Stranger")
        defaults = JsonFixtureLoader().load_defaults(stranger)
        assert defaults.invoices == []


def _invoice(merchant: str = "Bauhaus", amount: str = "100 kr") -> Invoice:
    return Invoice(
        merchant=merchant,
        amount=amount,
        due_date_offset=3,
        issue_date_offset=-27,
        category=InvoiceCategory.DUE_SOON,
    )


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path):
    """Both override backends must behave the same."""
    if request.param == "memory":
        return InMemoryOverrideStorage()
    return JsonFileOverrideStorage(tmp_path / "overrides")


def _corrupt(storage, key: str, data: bytes) -> None:
    if isinstance(storage, InMemoryOverrideStorage):
        storage.put_raw(key, data)
    else:
        path = storage.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


class TestOverrideStorage:
    """Tests shared by the override backends."""

    def test_empty_by_default(self, storage):
        assert storage.load_overrides("john", EntityKind.INVOICES) == []
        assert storage.load_selected_persona() is None

    def test_save_and_load(self, storage):
        records = [_invoice("Bauhaus", "999 kr"), _invoice("Jula")]
        storage.save_overrides("john", EntityKind.INVOICES, records)

        loaded = storage.load_overrides("john", EntityKind.INVOICES)
        assert loaded == records
        assert str(loaded[0].amount) == "999 kr"

    def test_save_replaces_snapshot(self, storage):
        first, second = _invoice("A"), _invoice("B")
        storage.save_overrides("john", EntityKind.INVOICES, [first, second])
        storage.save_overrides("john", EntityKind.INVOICES, [second])
        assert storage.load_overrides("john", EntityKind.INVOICES) == [second]

    def test_namespaced_by_persona_and_kind(self, storage):
        storage.save_overrides("john", EntityKind.INVOICES, [_invoice()])
        assert storage.load_overrides("bill", EntityKind.INVOICES) == []
        assert storage.load_overrides("john", EntityKind.TRANSACTIONS) == []

    def test_clear(self, storage):
        storage.save_overrides("john", EntityKind.INVOICES, [_invoice()])
        storage.save_overrides("bill", EntityKind.INVOICES, [_invoice()])

        storage.clear("john", EntityKind.INVOICES)
        storage.clear("john", EntityKind.INVOICES)  # absent key is fine

        assert storage.load_overrides("john", EntityKind.INVOICES) == []
        assert len(storage.load_overrides("bill", EntityKind.INVOICES)) == 1

    @pytest.mark.parametrize(
        "data",
        [
            b"{not json",
            b'{"id": 1}',
            b'[{"merchant": "no amount"}]',
            b'[{"merchant": "Jula", "amount": "1e999999999 kr"}]',
        ],
    )
    def test_corrupted_snapshot_is_discarded(self, storage, data):
        """Test that undecodable overrides read as empty."""
        _corrupt(storage, override_key("john", EntityKind.INVOICES), data)
        assert storage.load_overrides("john", EntityKind.INVOICES) == []

    def test_save_after_corruption(self, storage):
        _corrupt(storage, override_key("john", EntityKind.INVOICES), b"garbage")
        invoice = _invoice()
        storage.save_overrides("john", EntityKind.INVOICES, [invoice])
        assert storage.load_overrides("john", EntityKind.INVOICES) == [invoice]

    def test_selected_persona(self, storage):
        storage.save_selected_persona("bill")
        assert storage.load_selected_persona() == "bill"
        storage.save_selected_persona("kim")
        assert storage.load_selected_persona() == "kim"

    def test_corrupted_selected_persona(self, storage):
        _corrupt(storage, "selected_persona", b"{")
        assert storage.load_selected_persona() is None

    def test_text_round_trips_verbatim(self, storage):
        invoice = _invoice(" Bauhaus ")
        storage.save_overrides("john", EntityKind.INVOICES, [invoice])
        assert storage.load_overrides("john", EntityKind.INVOICES)[0].merchant == " Bauhaus "

    def test_transactions_round_trip_account_link(self, storage):
        transaction = Transaction.model_validate(JOHN_TRANSACTIONS[0])
        storage.save_overrides("john", EntityKind.TRANSACTIONS, [transaction])
        loaded = storage.load_overrides("john", EntityKind.TRANSACTIONS)
        assert loaded[0].account_id == transaction.account_id


class TestJsonFileOverrideStorage:
    """Tests specific to the file backend."""

    def test_file_layout(self, tmp_path: Path):
        storage = JsonFileOverrideStorage(tmp_path)
        storage.save_overrides("john", EntityKind.INVOICE_ACCOUNTS, [])
        storage.save_selected_persona("john")

        assert (tmp_path / "john" / "invoice_accounts.json").is_file()
        assert (tmp_path / "selected_persona.json").is_file()

    def test_wire_format_is_camel_case(self, tmp_path: Path):
        storage = JsonFileOverrideStorage(tmp_path)
        storage.save_overrides("john", EntityKind.INVOICES, [_invoice(amount="1 245 kr")])

        document = json.loads((tmp_path / "john" / "invoices.json").read_text(encoding="utf-8"))
        assert document[0]["dueDateOffset"] == 3
        assert document[0]["amount"] == "1 245 kr"
        assert "due_date_offset" not in document[0]

    def test_no_temporary_files_left(self, tmp_path: Path):
        storage = JsonFileOverrideStorage(tmp_path)
        storage.save_overrides("john", EntityKind.INVOICES, [_invoice()])
        storage.save_overrides("john", EntityKind.INVOICES, [_invoice()])
        assert [p.name for p in (tmp_path / "john").iterdir()] == ["invoices.json"]

    def test_write_failure_raises_persist_error(self, tmp_path: Path):
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory", encoding="utf-8")
        storage = JsonFileOverrideStorage(blocked)

        with pytest.raises(PersistError):
            storage.save_overrides("john", EntityKind.INVOICES, [_invoice()])

    def test_read_failure_is_empty(self, tmp_path: Path):
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory", encoding="utf-8")
        storage = JsonFileOverrideStorage(blocked)
        assert storage.load_overrides("john", EntityKind.INVOICES) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
