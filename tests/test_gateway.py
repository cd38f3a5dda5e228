"""Tests for the bill gateway and document stores."""

import json
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from prism_bills.gateway import BillGateway
from prism_bills.models.audit import AuditEventType
from prism_bills.models.bill import AccountType, BillDocument, NewBill, RecurrenceRule
from prism_bills.orchestrator import create_app_components
from prism_bills.services.storage import (
    DocumentStoreInterface,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    StorageUnavailableError,
    StorageWriteError,
)

from tests.conftest import FIXED_NOW


STORE_KEY = "prism-bills-data"

RENT = {
    "name": "Rent",
    "amount": 1200,
    "dueDate": "2024-04-01",
    "recurring": "monthly",
    "category": "Housing",
}


class BrokenStore(DocumentStoreInterface):
    """Store whose reads and/or writes always fail."""

    def __init__(self, fail_reads=False, fail_writes=False):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.payload = None

    def read(self, key):
        if self.fail_reads:
            raise StorageUnavailableError("backend offline")
        return self.payload

    def write(self, key, payload):
        if self.fail_writes:
            raise StorageWriteError("disk full")
        self.payload = payload


def event_types(audit_logger):
    return [event.event_type for event in audit_logger.history]


class TestLoadAndSave:
    """Tests for whole-document access."""

    def test_missing_document_loads_default(self, gateway):
        document = gateway.load()
        assert document.bills == []
        assert document.accounts == []
        assert document.settings.notifications_enabled is True
        assert document.settings.reminder_days == [1, 3, 7]

    def test_corrupt_document_loads_default(self, audit_logger, clock):
        store = InMemoryDocumentStore({STORE_KEY: "{not json"})
        gateway = BillGateway(store=store, audit_logger=audit_logger, clock=clock)
        assert gateway.load().bills == []
        assert AuditEventType.STORAGE_READ_FAILED in event_types(audit_logger)

    def test_schema_violation_loads_default(self, audit_logger, clock):
        payload = json.dumps({"bills": [{"name": "No due date"}], "accounts": []})
        store = InMemoryDocumentStore({STORE_KEY: payload})
        gateway = BillGateway(store=store, audit_logger=audit_logger, clock=clock)
        assert gateway.load() == gateway.default_document()
        assert AuditEventType.STORAGE_READ_FAILED in event_types(audit_logger)

    def test_unreadable_store_loads_default(self, audit_logger, clock):
        gateway = BillGateway(
            store=BrokenStore(fail_reads=True),
            audit_logger=audit_logger,
            clock=clock,
        )
        assert gateway.get_bills() == []
        assert AuditEventType.STORAGE_READ_FAILED in event_types(audit_logger)

    def test_write_failure_is_swallowed(self, audit_logger, clock):
        """Test a failed write still returns the record and is logged."""
        gateway = BillGateway(
            store=BrokenStore(fail_writes=True),
            audit_logger=audit_logger,
            clock=clock,
        )
        bill = gateway.add_bill(RENT)
        assert bill.name == "Rent"
        assert AuditEventType.STORAGE_WRITE_FAILED in event_types(audit_logger)
        assert gateway.get_bills() == []

    def test_save_reports_success(self, gateway):
        assert gateway.save(BillDocument()) is True

    def test_document_written_with_camel_case_keys(self, gateway, store):
        gateway.add_bill(RENT)
        data = json.loads(store.read(STORE_KEY))
        assert set(data) == {"bills", "accounts", "settings"}
        stored = data["bills"][0]
        assert stored["dueDate"] == "2024-04-01"
        assert stored["accountId"] is None
        assert stored["paid"] is False
        assert stored["paidDate"] is None
        assert data["settings"] == {"notificationsEnabled": True, "reminderDays": [1, 3, 7]}


class TestBillCrud:
    """Tests for bill operations."""

    def test_add_bill_scenario(self, gateway, store):
        """Test adding Rent to an empty document and reloading it."""
        gateway.save(BillDocument())
        bill = gateway.add_bill(RENT)

        assert bill.id is not None
        assert bill.paid is False
        assert bill.paid_date is None
        assert bill.created_at == FIXED_NOW

        reloaded = BillGateway(store=store).load()
        assert len(reloaded.bills) == 1
        stored = reloaded.bills[0]
        assert stored.id == bill.id
        assert stored.name == "Rent"
        assert stored.amount == Decimal("1200")
        assert stored.due_date == date(2024, 4, 1)
        assert stored.recurring == RecurrenceRule.MONTHLY
        assert stored.category == "Housing"

    def test_add_bill_assigns_fresh_ids(self, gateway):
        first = gateway.add_bill(RENT)
        second = gateway.add_bill(NewBill.model_validate(RENT))
        assert first.id != second.id
        assert len(gateway.get_bills()) == 2

    def test_add_bill_ignores_payment_state_in_payload(self, gateway):
        bill = gateway.add_bill({**RENT, "paid": True, "id": str(uuid4())})
        assert bill.paid is False
        assert bill.paid_date is None

    def test_add_invalid_bill_writes_nothing(self, gateway):
        with pytest.raises(ValidationError):
            gateway.add_bill({"name": "", "dueDate": "2024-04-01"})
        assert gateway.get_bills() == []

    def test_get_bill(self, gateway):
        bill = gateway.add_bill(RENT)
        assert gateway.get_bill(bill.id) == bill
        assert gateway.get_bill(str(bill.id)) == bill
        assert gateway.get_bill(uuid4()) is None
        assert gateway.get_bill("not-a-uuid") is None

    def test_update_bill(self, gateway):
        bill = gateway.add_bill(RENT)
        updated = gateway.update_bill(bill.id, {"amount": "1250", "dueDate": "2024-04-02"})
        assert updated.amount == Decimal("1250")
        assert updated.due_date == date(2024, 4, 2)
        assert gateway.get_bill(bill.id) == updated

    def test_update_bill_keeps_immutable_fields(self, gateway):
        bill = gateway.add_bill(RENT)
        updated = gateway.update_bill(bill.id, {
            "id": str(uuid4()),
            "createdAt": "2020-01-01T00:00:00Z",
            "name": "Mortgage",
        })
        assert updated.id == bill.id
        assert updated.created_at == bill.created_at
        assert updated.name == "Mortgage"

    def test_update_missing_bill_returns_none(self, gateway, audit_logger):
        assert gateway.update_bill(uuid4(), {"name": "Ghost"}) is None
        assert AuditEventType.ENTITY_NOT_FOUND in event_types(audit_logger)

    def test_update_paid_keeps_invariant(self, gateway):
        bill = gateway.add_bill(RENT)
        paid = gateway.update_bill(bill.id, {"paid": True})
        assert paid.paid is True
        assert paid.paid_date == FIXED_NOW
        unpaid = gateway.update_bill(bill.id, {"paid": False})
        assert unpaid.paid is False
        assert unpaid.paid_date is None

    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("false", False),
        ("0", False),
        (1, True),
        (False, False),
    ])
    def test_update_paid_parses_loose_flags(self, gateway, raw, expected):
        """Test string and numeric paid flags are parsed, not truth-tested."""
        bill = gateway.add_bill(RENT)
        gateway.mark_bill_paid(bill.id, not expected)
        updated = gateway.update_bill(bill.id, {"paid": raw})
        assert updated.paid is expected
        assert (updated.paid_date is not None) is expected

    def test_update_paid_rejects_unparsable_flag(self, gateway):
        bill = gateway.add_bill(RENT)
        with pytest.raises(ValidationError):
            gateway.update_bill(bill.id, {"paid": "maybe"})
        assert gateway.get_bill(bill.id).paid is False

    def test_negative_amount_rejected_on_update(self, gateway):
        bill = gateway.add_bill(RENT)
        with pytest.raises(ValidationError):
            gateway.update_bill(bill.id, {"amount": "-5"})
        assert gateway.get_bill(bill.id).amount == Decimal("1200")

    def test_delete_bill(self, gateway, audit_logger):
        bill = gateway.add_bill(RENT)
        assert gateway.delete_bill(bill.id) is True
        assert gateway.get_bills() == []
        assert gateway.delete_bill(bill.id) is False
        assert AuditEventType.BILL_DELETED in event_types(audit_logger)


class TestMarkBillPaid:
    """Tests for the paid / paid_date round trip."""

    def test_round_trip(self, gateway):
        bill = gateway.add_bill(RENT)

        paid = gateway.mark_bill_paid(bill.id)
        assert paid.paid is True
        assert paid.paid_date == FIXED_NOW

        unpaid = gateway.mark_bill_paid(bill.id, False)
        assert unpaid.paid is False
        assert unpaid.paid_date is None

        for stored in gateway.get_bills():
            assert stored.paid == (stored.paid_date is not None)

    def test_marking_paid_again_restamps(self, store, audit_logger):
        times = iter([
            datetime(2024, 3, 1, tzinfo=timezone.utc),   # created
            datetime(2024, 3, 2, tzinfo=timezone.utc),   # first payment
            datetime(2024, 3, 3, tzinfo=timezone.utc),   # second payment
        ])
        gateway = BillGateway(store=store, audit_logger=audit_logger, clock=lambda: next(times))
        bill = gateway.add_bill(RENT)
        gateway.mark_bill_paid(bill.id)
        again = gateway.mark_bill_paid(bill.id)
        assert again.paid_date == datetime(2024, 3, 3, tzinfo=timezone.utc)

    def test_missing_bill(self, gateway):
        assert gateway.mark_bill_paid(uuid4()) is None

    def test_payment_status_is_audited(self, gateway, audit_logger):
        bill = gateway.add_bill(RENT)
        gateway.mark_bill_paid(bill.id)
        assert AuditEventType.PAYMENT_STATUS_UPDATED in event_types(audit_logger)


class TestAccountCrud:
    """Tests for account operations."""

    def test_add_account(self, gateway):
        account = gateway.add_account({"name": "Visa", "type": "credit", "balance": "-120.50"})
        assert account.type == AccountType.CREDIT
        assert account.balance == Decimal("-120.50")
        assert account.created_at == FIXED_NOW
        assert gateway.get_account(account.id) == account

    def test_update_account(self, gateway):
        account = gateway.add_account({"name": "Checking"})
        updated = gateway.update_account(account.id, {"balance": "900", "id": str(uuid4())})
        assert updated.id == account.id
        assert updated.balance == Decimal("900")

    def test_update_missing_account_returns_none(self, gateway):
        assert gateway.update_account(uuid4(), {"name": "Ghost"}) is None

    def test_delete_account_unlinks_bills(self, gateway, audit_logger):
        """Test deleting an account keeps its bills with accountId null."""
        checking = gateway.add_account({"name": "Checking"})
        savings = gateway.add_account({"name": "Savings", "type": "savings"})
        linked = gateway.add_bill({**RENT, "accountId": str(checking.id)})
        also_linked = gateway.add_bill({**RENT, "name": "Water", "accountId": str(checking.id)})
        other = gateway.add_bill({**RENT, "name": "Phone", "accountId": str(savings.id)})

        assert gateway.delete_account(checking.id) is True

        bills = {bill.id: bill for bill in gateway.get_bills()}
        assert len(bills) == 3
        assert bills[linked.id].account_id is None
        assert bills[also_linked.id].account_id is None
        assert bills[other.id].account_id == savings.id
        assert [a.id for a in gateway.get_accounts()] == [savings.id]
        assert AuditEventType.BILLS_UNLINKED in event_types(audit_logger)

    def test_delete_missing_account(self, gateway):
        assert gateway.delete_account(uuid4()) is False


class TestSettings:
    """Tests for settings updates."""

    def test_update_settings(self, gateway):
        settings = gateway.update_settings({"notificationsEnabled": False})
        assert settings.notifications_enabled is False
        assert settings.reminder_days == [1, 3, 7]
        assert gateway.get_settings() == settings

    def test_reminder_days_normalized(self, gateway):
        settings = gateway.update_settings({"reminder_days": [7, 1, 14, 1]})
        assert settings.reminder_days == [1, 7, 14]

    def test_unknown_keys_ignored(self, gateway):
        settings = gateway.update_settings({"theme": "dark"})
        assert settings == gateway.default_document().settings


class TestMaterializeRecurring:
    """Tests for inserting generated recurring bills."""

    def test_inserts_missing_occurrences_once(self, gateway, audit_logger):
        gateway.add_bill(RENT)
        inserted = gateway.materialize_recurring(today=date(2024, 4, 1))
        assert [b.due_date for b in inserted] == [
            date(2024, 5, 1),
            date(2024, 6, 1),
            date(2024, 7, 1),
        ]
        assert all(b.paid is False and b.paid_date is None for b in inserted)
        assert len({b.id for b in inserted}) == 3
        assert len(gateway.get_bills()) == 4
        assert AuditEventType.RECURRING_BILLS_GENERATED in event_types(audit_logger)

        assert gateway.materialize_recurring(today=date(2024, 4, 1)) == []
        assert len(gateway.get_bills()) == 4

    def test_month_end_series_is_stable_across_runs(self, gateway):
        """Test repeated runs on a bill due the 31st add nothing new."""
        gateway.add_bill({**RENT, "dueDate": "2024-01-31"})

        first = gateway.materialize_recurring(today=date(2024, 1, 31), horizon=date(2024, 4, 30))
        assert [b.due_date for b in first] == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]
        assert gateway.materialize_recurring(today=date(2024, 1, 31), horizon=date(2024, 4, 30)) == []
        assert sorted(b.due_date for b in gateway.get_bills()) == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]

    def test_later_run_extends_month_end_series(self, gateway):
        gateway.add_bill({**RENT, "dueDate": "2024-01-31"})
        gateway.materialize_recurring(today=date(2024, 1, 31), horizon=date(2024, 4, 30))
        later = gateway.materialize_recurring(today=date(2024, 4, 30), horizon=date(2024, 6, 30))
        assert [b.due_date for b in later] == [date(2024, 5, 31), date(2024, 6, 30)]

    def test_explicit_horizon(self, gateway):
        gateway.add_bill({**RENT, "recurring": "weekly"})
        inserted = gateway.materialize_recurring(today=date(2024, 4, 1), horizon=date(2024, 4, 15))
        assert [b.due_date for b in inserted] == [date(2024, 4, 8), date(2024, 4, 15)]


class TestJsonFileStore:
    """Tests for the local JSON file store."""

    def test_read_missing_returns_none(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        assert store.read(STORE_KEY) is None

    def test_write_then_read(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path / "nested")
        store.write(STORE_KEY, '{"bills": []}')
        assert store.read(STORE_KEY) == '{"bills": []}'
        assert store.path_for(STORE_KEY).exists()
        assert list(store.data_dir.glob("*.tmp")) == []

    def test_unreadable_path_raises_storage_error(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        store.path_for(STORE_KEY).mkdir()
        with pytest.raises(StorageUnavailableError):
            store.read(STORE_KEY)

    def test_failed_write_raises_storage_error(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path, write_attempts=1)
        store.path_for(STORE_KEY).mkdir()
        with pytest.raises(StorageWriteError):
            store.write(STORE_KEY, "{}")
        assert list(tmp_path.glob("*.tmp")) == []

    def test_gateway_round_trip_on_disk(self, tmp_path, audit_logger, clock):
        gateway = BillGateway(
            store=JsonFileDocumentStore(tmp_path),
            audit_logger=audit_logger,
            clock=clock,
        )
        bill = gateway.add_bill(RENT)
        fresh = BillGateway(store=JsonFileDocumentStore(tmp_path), audit_logger=audit_logger)
        assert fresh.get_bills() == [bill]


class TestAppComponents:
    """Tests for the component factory."""

    def test_in_memory_components_share_state(self):
        gateway, scheduler = create_app_components(persistent=False)
        gateway.add_bill(RENT)
        assert len(gateway.get_bills()) == 1
        assert scheduler.state.value == "idle"

    def test_persistent_components_use_data_dir(self, tmp_path):
        gateway, _ = create_app_components(data_dir=tmp_path)
        gateway.add_bill(RENT)
        assert (tmp_path / f"{STORE_KEY}.json").exists()
