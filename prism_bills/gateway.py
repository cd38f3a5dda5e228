"""
Bill Gateway

This module is the single source of truth for bills, accounts and
settings. Every mutation follows the same pattern:

    read whole document -> mutate in memory -> write whole document
    -> return the affected record

DESIGN DECISION: The gateway fails soft.
- A missing id is not an error: updates return None, deletes return False.
- A corrupt or unreadable document is logged and replaced by the empty
  default document.
- A failed write is logged and swallowed; the caller still gets the
  record it asked for.

The one cross-entity rule enforced here rather than by callers: deleting
an account unlinks every bill that referenced it (bills are never deleted).
"""

from datetime import date, datetime
from typing import Any, Callable, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, TypeAdapter, ValidationError

from prism_bills.audit import AuditLogger, get_audit_logger
from prism_bills.config import get_settings
from prism_bills.models.bill import (
    Account,
    Bill,
    BillDocument,
    NewAccount,
    NewBill,
    TrackerSettings,
    utc_now,
)
from prism_bills.recurrence import generate_all
from prism_bills.services.storage import (
    DocumentStoreInterface,
    JsonFileDocumentStore,
    StorageError,
)


IdLike = Union[UUID, str]

BILL_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
ACCOUNT_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

_paid_flag = TypeAdapter(bool)


def _as_uuid(value: IdLike) -> Optional[UUID]:
    """Parse an id; anything unparsable simply matches nothing."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _normalize_updates(
    model_cls: type[BaseModel],
    updates: dict[str, Any],
    immutable: frozenset,
) -> dict[str, Any]:
    """
    Map update keys (snake_case or stored camelCase) to field names.

    Unknown keys and immutable fields are dropped.
    """
    names = {}
    for name, field in model_cls.model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name

    normalized = {}
    for key, value in updates.items():
        name = names.get(key)
        if name is None or name in immutable:
            continue
        normalized[name] = value
    return normalized


class BillGateway:
    """
    CRUD over the single persisted bill document.

    Operations are serialized in call order: each one completes its
    read-modify-write before returning.
    """

    def __init__(
        self,
        store: Optional[DocumentStoreInterface] = None,
        store_key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            store: Document store. Defaults to the local JSON file store.
            store_key: Key of the bill document. Defaults to
                       StorageSettings.store_key.
            audit_logger: Where mutations and failures are logged.
            clock: Source of creation/payment timestamps.
        """
        self._store = store or JsonFileDocumentStore()
        self._store_key = store_key or get_settings().storage.store_key
        self._audit = audit_logger or get_audit_logger()
        self._clock = clock or utc_now

    @property
    def store_key(self) -> str:
        return self._store_key

    # -------------------------------------------------------------------------
    # Whole-document access
    # -------------------------------------------------------------------------

    def default_document(self) -> BillDocument:
        """The document used when nothing (valid) is stored."""
        reminder_days = get_settings().notifications.default_reminder_days_list
        return BillDocument(settings=TrackerSettings(reminder_days=reminder_days))

    def load(self) -> BillDocument:
        """Read the document; never raises."""
        try:
            payload = self._store.read(self._store_key)
        except StorageError as e:
            self._audit.log_storage_read_failed(self._store_key, str(e))
            return self.default_document()

        if payload is None:
            return self.default_document()

        try:
            return BillDocument.model_validate_json(payload)
        except ValidationError as e:
            self._audit.log_storage_read_failed(self._store_key, str(e))
            return self.default_document()

    def save(self, document: BillDocument) -> bool:
        """
        Write the whole document.

        Returns:
            True if written, False if the write failed (already logged)
        """
        payload = document.model_dump_json(by_alias=True, indent=2)
        try:
            self._store.write(self._store_key, payload)
        except StorageError as e:
            self._audit.log_storage_write_failed(self._store_key, str(e))
            return False
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_bills(self) -> list[Bill]:
        return self.load().bills

    def get_bill(self, bill_id: IdLike) -> Optional[Bill]:
        document = self.load()
        index = self._find_bill(document, bill_id)
        return document.bills[index] if index is not None else None

    def get_accounts(self) -> list[Account]:
        return self.load().accounts

    def get_account(self, account_id: IdLike) -> Optional[Account]:
        document = self.load()
        index = self._find_account(document, account_id)
        return document.accounts[index] if index is not None else None

    def get_settings(self) -> TrackerSettings:
        return self.load().settings

    # -------------------------------------------------------------------------
    # Bills
    # -------------------------------------------------------------------------

    def add_bill(self, bill: Union[NewBill, dict[str, Any]]) -> Bill:
        """
        Insert a new bill with a fresh id, unpaid.

        Raises:
            ValidationError: If the payload is structurally invalid
                             (nothing is written)
        """
        payload = bill if isinstance(bill, NewBill) else NewBill.model_validate(bill)
        new_bill = self._build_bill(payload)

        document = self.load()
        document.bills.append(new_bill)
        self.save(document)

        self._audit.log_bill_created(
            new_bill.id,
            new_bill.name,
            str(new_bill.amount),
            new_bill.due_date.isoformat(),
        )
        return new_bill

    def update_bill(self, bill_id: IdLike, updates: dict[str, Any]) -> Optional[Bill]:
        """
        Merge ``updates`` into a bill.

        ``id`` and ``createdAt`` cannot be changed. Changing ``paid``
        keeps ``paidDate`` consistent (set when paid, cleared when not).

        Returns:
            The updated bill, or None if no bill has this id
        """
        document = self.load()
        index = self._find_bill(document, bill_id)
        if index is None:
            self._audit.log_not_found("bill", _as_uuid(bill_id), "update_bill")
            return None

        current = document.bills[index]
        changes = _normalize_updates(Bill, updates, BILL_IMMUTABLE_FIELDS)
        if "paid" in changes:
            paid = _paid_flag.validate_python(changes["paid"])
            changes["paid"] = paid
            if paid:
                changes["paid_date"] = (
                    changes.get("paid_date") or current.paid_date or self._clock()
                )
            else:
                changes["paid_date"] = None

        updated = Bill.model_validate({**current.model_dump(), **changes})
        document.bills[index] = updated
        self.save(document)

        if updated.paid != current.paid:
            self._audit.log_payment_status(updated.id, updated.paid)
        self._audit.log_bill_updated(updated.id, sorted(changes))
        return updated

    def delete_bill(self, bill_id: IdLike) -> bool:
        """
        Remove a bill.

        Returns:
            True if a bill was removed
        """
        document = self.load()
        index = self._find_bill(document, bill_id)
        if index is None:
            self._audit.log_not_found("bill", _as_uuid(bill_id), "delete_bill")
            return False

        removed = document.bills.pop(index)
        self.save(document)
        self._audit.log_bill_deleted(removed.id)
        return True

    def mark_bill_paid(self, bill_id: IdLike, paid: bool = True) -> Optional[Bill]:
        """Mark a bill paid (stamping paidDate now) or unpaid (clearing it)."""
        return self.update_bill(bill_id, {
            "paid": paid,
            "paid_date": self._clock() if paid else None,
        })

    def materialize_recurring(
        self,
        today: date,
        horizon: Optional[date] = None,
    ) -> list[Bill]:
        """
        Insert the missing future occurrences of every recurring bill.

        All new bills are written in a single document write.

        Returns:
            The bills that were inserted (empty if nothing was missing)
        """
        document = self.load()
        payloads = generate_all(document.bills, today, horizon=horizon)
        if not payloads:
            return []

        new_bills = [self._build_bill(payload) for payload in payloads]
        document.bills.extend(new_bills)
        self.save(document)

        self._audit.log_recurring_generated(
            len(new_bills),
            horizon.isoformat() if horizon else "default",
        )
        return new_bills

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def add_account(self, account: Union[NewAccount, dict[str, Any]]) -> Account:
        """
        Insert a new account with a fresh id.

        Raises:
            ValidationError: If the payload is structurally invalid
        """
        payload = account if isinstance(account, NewAccount) else NewAccount.model_validate(account)
        new_account = Account(
            **payload.model_dump(),
            id=uuid4(),
            created_at=self._clock(),
        )

        document = self.load()
        document.accounts.append(new_account)
        self.save(document)

        self._audit.log_account_created(new_account.id, new_account.name, new_account.type.value)
        return new_account

    def update_account(self, account_id: IdLike, updates: dict[str, Any]) -> Optional[Account]:
        """
        Merge ``updates`` into an account.

        Returns:
            The updated account, or None if no account has this id
        """
        document = self.load()
        index = self._find_account(document, account_id)
        if index is None:
            self._audit.log_not_found("account", _as_uuid(account_id), "update_account")
            return None

        current = document.accounts[index]
        changes = _normalize_updates(Account, updates, ACCOUNT_IMMUTABLE_FIELDS)
        updated = Account.model_validate({**current.model_dump(), **changes})
        document.accounts[index] = updated
        self.save(document)

        self._audit.log_account_updated(updated.id, sorted(changes))
        return updated

    def delete_account(self, account_id: IdLike) -> bool:
        """
        Remove an account and unlink every bill that referenced it.

        Linked bills are kept, with ``accountId`` set to null.

        Returns:
            True if an account was removed
        """
        document = self.load()
        index = self._find_account(document, account_id)
        if index is None:
            self._audit.log_not_found("account", _as_uuid(account_id), "delete_account")
            return False

        removed = document.accounts.pop(index)
        unlinked = []
        for position, bill in enumerate(document.bills):
            if bill.account_id == removed.id:
                document.bills[position] = bill.model_copy(update={"account_id": None})
                unlinked.append(bill.id)
        self.save(document)

        self._audit.log_account_deleted(removed.id, unlinked)
        return True

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def update_settings(self, updates: dict[str, Any]) -> TrackerSettings:
        """Merge ``updates`` into the settings and return the result."""
        document = self.load()
        changes = _normalize_updates(TrackerSettings, updates, frozenset())
        document.settings = TrackerSettings.model_validate(
            {**document.settings.model_dump(), **changes}
        )
        self.save(document)

        self._audit.log_settings_updated(sorted(changes))
        return document.settings

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _build_bill(self, payload: NewBill) -> Bill:
        return Bill(
            **payload.model_dump(),
            id=uuid4(),
            paid=False,
            paid_date=None,
            created_at=self._clock(),
        )

    @staticmethod
    def _find_bill(document: BillDocument, bill_id: IdLike) -> Optional[int]:
        parsed = _as_uuid(bill_id)
        return document.find_bill(parsed) if parsed is not None else None

    @staticmethod
    def _find_account(document: BillDocument, account_id: IdLike) -> Optional[int]:
        parsed = _as_uuid(account_id)
        return document.find_account(parsed) if parsed is not None else None
