"""Core records: transactions, AI drafts, purchase orders and invoices.

Records arrive as loosely typed mappings (database rows or JSON produced by a
language model). Each record type has a ``from_*`` constructor that coerces
numbers to ``Decimal`` and dates to ``date``/``datetime`` and rejects values
that cannot be interpreted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from bizledger.config import get_settings
from bizledger.errors import InvalidTransactionError
from bizledger.invoices import compute_totals, default_due_date


class TransactionType(str, Enum):
    """Kinds of transactions a business records."""

    INCOME = "income"
    EXPENSE = "expense"
    PURCHASE = "purchase"
    SALE = "sale"


def to_decimal(value: Any, field_name: str, record_id: str | None = None) -> Decimal:
    """Coerce a numeric value to a finite Decimal."""
    if isinstance(value, bool) or value is None:
        raise InvalidTransactionError(f"{field_name} must be a number", record_id)
    try:
        # str() keeps floats like 0.1 from dragging binary noise along
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidTransactionError(
            f"{field_name} must be a number", record_id, details=value
        ) from None
    if not amount.is_finite():
        raise InvalidTransactionError(f"{field_name} must be finite", record_id)
    return amount


def to_amount(value: Any, field_name: str = "amount", record_id: str | None = None) -> Decimal:
    """Coerce a monetary amount, which may never be negative."""
    amount = to_decimal(value, field_name, record_id)
    if amount < 0:
        raise InvalidTransactionError(
            f"{field_name} must not be negative", record_id, details=str(amount)
        )
    return amount


def to_date(value: Any, field_name: str = "date", record_id: str | None = None) -> date:
    """Parse a business date from a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise InvalidTransactionError(
        f"{field_name} must be an ISO date", record_id, details=value
    )


def to_datetime(
    value: Any, field_name: str = "created_at", record_id: str | None = None
) -> datetime:
    """Parse a timestamp; naive values are taken to be UTC."""
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            parsed = None
    if parsed is None:
        raise InvalidTransactionError(
            f"{field_name} must be an ISO timestamp", record_id, details=value
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_transaction_type(value: Any, record_id: str | None = None) -> TransactionType:
    """Resolve a transaction type, rejecting anything outside the enum."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        raise InvalidTransactionError(
            f"unknown transaction type {value!r}", record_id, details=value
        ) from None


@dataclass(frozen=True)
class Transaction:
    """One recorded financial event."""

    id: str
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    date: date
    created_at: datetime
    user_id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Transaction:
        """Build a transaction from a storage row.

        Raises:
            InvalidTransactionError: If type, amount or dates are unusable.
        """
        record_id = str(record["id"]) if record.get("id") is not None else None
        if record_id is None:
            raise InvalidTransactionError("id is required")
        user_id = record.get("user_id")
        return cls(
            id=record_id,
            description=str(record.get("description") or ""),
            amount=to_amount(record.get("amount"), record_id=record_id),
            type=to_transaction_type(record.get("type"), record_id),
            category=str(record.get("category") or ""),
            date=to_date(record.get("date"), record_id=record_id),
            created_at=to_datetime(record.get("created_at"), record_id=record_id),
            user_id=str(user_id) if user_id is not None else None,
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly storage row."""
        record: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "category": self.category,
            "date": self.date.isoformat(),
            "created_at": self.created_at.isoformat(),
        }
        if self.user_id is not None:
            record["user_id"] = self.user_id
        return record


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction interpreted from a prompt, not yet stored."""

    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: date

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], today: date | None = None
    ) -> TransactionDraft:
        """Validate a model-produced payload. A missing date means today."""
        raw_date = payload.get("date")
        return cls(
            type=to_transaction_type(payload.get("type")),
            amount=to_amount(payload.get("amount")),
            description=str(payload.get("description") or "").strip(),
            category=str(payload.get("category") or "").strip(),
            date=to_date(raw_date) if raw_date else (today or date.today()),
        )

    def to_transaction(
        self, id: str, created_at: datetime, user_id: str | None = None
    ) -> Transaction:
        return Transaction(
            id=id,
            description=self.description,
            amount=self.amount,
            type=self.type,
            category=self.category,
            date=self.date,
            created_at=created_at,
            user_id=user_id,
        )


@dataclass(frozen=True)
class PurchaseOrderItem:
    """A line on a purchase order."""

    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PurchaseOrderItem:
        quantity = to_amount(payload.get("quantity", 1), "quantity")
        unit_price = to_amount(payload.get("unit_price", 0), "unit_price")
        raw_amount = payload.get("amount")
        amount = (
            to_amount(raw_amount) if raw_amount is not None else quantity * unit_price
        )
        return cls(
            description=str(payload.get("description") or ""),
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
        )


@dataclass(frozen=True)
class PurchaseOrder:
    """Purchase order data extracted from a prompt."""

    supplier_name: str
    items: tuple[PurchaseOrderItem, ...]
    delivery_date: date
    payment_terms: str
    shipping_address: str
    total_amount: Decimal

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PurchaseOrder:
        items = tuple(
            PurchaseOrderItem.from_payload(item) for item in payload.get("items") or []
        )
        raw_total = payload.get("total_amount")
        total = (
            to_amount(raw_total, "total_amount")
            if raw_total is not None
            else sum((item.amount for item in items), Decimal("0"))
        )
        return cls(
            supplier_name=str(payload.get("supplier_name") or ""),
            items=items,
            delivery_date=to_date(payload.get("delivery_date"), "delivery_date"),
            payment_terms=str(payload.get("payment_terms") or ""),
            shipping_address=str(payload.get("shipping_address") or ""),
            total_amount=total,
        )


@dataclass(frozen=True)
class BillTo:
    """Invoice recipient."""

    name: str
    address: str
    email: str | None = None


@dataclass(frozen=True)
class BusinessInfo:
    """Issuing business details shown in an invoice header."""

    business_name: str | None = None
    business_address: str | None = None
    contact_number: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> BusinessInfo | None:
        if not payload:
            return None
        return cls(
            business_name=payload.get("business_name"),
            business_address=payload.get("business_address"),
            contact_number=payload.get("contact_number"),
        )


@dataclass(frozen=True)
class InvoiceItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class Invoice:
    """A customer invoice."""

    invoice_number: str
    date: date
    due_date: date
    bill_to: BillTo
    items: tuple[InvoiceItem, ...]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    business_info: BusinessInfo | None = field(default=None)

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        business_info: BusinessInfo | None = None,
        default_tax_rate: Decimal | None = None,
        default_due_days: int | None = None,
    ) -> Invoice:
        """Read the camelCase invoice JSON produced by the generator.

        Missing subtotal, tax or total are derived from the items. A missing
        tax rate or due date falls back to the configured defaults.
        """
        if default_tax_rate is None:
            default_tax_rate = get_settings().default_tax_rate
        items: list[InvoiceItem] = []
        for raw in payload.get("items") or []:
            quantity = to_amount(raw.get("quantity", 1), "quantity")
            unit_price = to_amount(raw.get("unitPrice", 0), "unitPrice")
            raw_amount = raw.get("amount")
            items.append(
                InvoiceItem(
                    description=str(raw.get("description") or ""),
                    quantity=quantity,
                    unit_price=unit_price,
                    amount=(
                        to_amount(raw_amount)
                        if raw_amount is not None
                        else quantity * unit_price
                    ),
                )
            )

        raw_rate = payload.get("taxRate")
        tax_rate = to_amount(raw_rate, "taxRate") if raw_rate is not None else default_tax_rate
        totals = compute_totals(items, tax_rate)

        issue_date = to_date(payload.get("date"), "date")
        raw_due = payload.get("dueDate")
        due_date = (
            to_date(raw_due, "dueDate")
            if raw_due
            else default_due_date(issue_date, default_due_days)
        )

        bill_to_raw = payload.get("billTo") or {}
        bill_to = BillTo(
            name=str(bill_to_raw.get("name") or ""),
            address=str(bill_to_raw.get("address") or ""),
            email=bill_to_raw.get("email") or None,
        )

        def _given(key: str, fallback: Decimal) -> Decimal:
            value = payload.get(key)
            return to_amount(value, key) if value is not None else fallback

        return cls(
            invoice_number=str(payload.get("invoiceNumber") or ""),
            date=issue_date,
            due_date=due_date,
            bill_to=bill_to,
            items=tuple(items),
            subtotal=_given("subtotal", totals.subtotal),
            tax_rate=tax_rate,
            tax_amount=_given("taxAmount", totals.tax_amount),
            total=_given("total", totals.total),
            business_info=business_info,
        )
