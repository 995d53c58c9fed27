"""Report summaries for the dashboard and the sales/expense/purchase pages."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from bizledger.models import Transaction, TransactionType

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class ReportSummary:
    """Money in, money out and the difference."""

    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal

    @property
    def is_profitable(self) -> bool:
        return self.net_profit >= 0

    def profit_label(self) -> str:
        """E.g. ``"250.00 (Profit)"`` or ``"75.50 (Loss)"``."""
        amount = abs(self.net_profit).quantize(CENT, rounding=ROUND_HALF_UP)
        return f"{amount:f} ({'Profit' if self.is_profitable else 'Loss'})"


@dataclass(frozen=True)
class TypeReport:
    """Transactions of selected types with their total and average."""

    types: tuple[TransactionType, ...]
    transactions: tuple[Transaction, ...]
    total: Decimal

    @property
    def count(self) -> int:
        return len(self.transactions)

    @property
    def average(self) -> Decimal:
        # An empty report averages to zero rather than dividing by zero.
        return self.total / max(self.count, 1)


def summarize(transactions: Iterable[Transaction]) -> ReportSummary:
    """Summarize cash flow. Purchases count as expenses here."""
    total_income = ZERO
    total_expenses = ZERO
    for t in transactions:
        if t.type in (TransactionType.INCOME, TransactionType.SALE):
            total_income += t.amount
        elif t.type in (TransactionType.EXPENSE, TransactionType.PURCHASE):
            total_expenses += t.amount
    return ReportSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    types: Iterable[TransactionType] | None = None,
    user_id: str | None = None,
    on: date | None = None,
) -> list[Transaction]:
    """Select transactions by type, owner and business date, keeping order."""
    wanted = frozenset(types) if types is not None else None
    return [
        t
        for t in transactions
        if (wanted is None or t.type in wanted)
        and (user_id is None or t.user_id == user_id)
        and (on is None or t.date == on)
    ]


def sort_by_created(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest first, as listed in the transaction history."""
    return sorted(transactions, key=lambda t: t.created_at, reverse=True)


def type_report(
    transactions: Iterable[Transaction], types: Iterable[TransactionType]
) -> TypeReport:
    wanted = tuple(types)
    rows = tuple(filter_transactions(transactions, types=wanted))
    return TypeReport(
        types=wanted,
        transactions=rows,
        total=sum((t.amount for t in rows), ZERO),
    )


def sales_report(transactions: Iterable[Transaction]) -> TypeReport:
    return type_report(transactions, (TransactionType.INCOME, TransactionType.SALE))


def expense_report(transactions: Iterable[Transaction]) -> TypeReport:
    return type_report(transactions, (TransactionType.EXPENSE,))


def purchase_report(transactions: Iterable[Transaction]) -> TypeReport:
    return type_report(transactions, (TransactionType.PURCHASE,))


def type_breakdown(transactions: Iterable[Transaction]) -> dict[TransactionType, Decimal]:
    """Totals per transaction type for the dashboard chart.

    Types with no activity are left out.
    """
    totals = {transaction_type: ZERO for transaction_type in TransactionType}
    for t in transactions:
        totals[t.type] += t.amount
    return {key: value for key, value in totals.items() if value > 0}


def category_totals(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Totals per category across all types, in first-seen order."""
    totals: dict[str, Decimal] = {}
    for t in transactions:
        totals[t.category] = totals.get(t.category, ZERO) + t.amount
    return totals
