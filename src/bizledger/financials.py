"""Financial snapshot: balance sheet, income statement and ratios.

The snapshot is derived from a user's transactions on every call. Balance
sheet buckets are picked out by exact, case-sensitive category names:

    cash, bank, accounts_receivable   current assets
    equipment, asset                  fixed assets
    accounts_payable                  current liabilities
    loan                              long-term liabilities
    capital                           owner's capital

Transactions in any other category only feed the income statement and the
per-category breakdowns.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

import structlog

from bizledger.errors import InvalidTransactionError
from bizledger.models import Transaction, TransactionType

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
INFINITY_SYMBOL = "∞"
COST_OF_GOODS_SOLD = "Cost of Goods Sold"
INVENTORY_CATEGORY = "inventory"

CASH_CATEGORY = "cash"
BANK_CATEGORY = "bank"
RECEIVABLE_CATEGORY = "accounts_receivable"
EQUIPMENT_CATEGORIES = frozenset({"equipment", "asset"})
PAYABLE_CATEGORY = "accounts_payable"
LOAN_CATEGORY = "loan"
CAPITAL_CATEGORY = "capital"

INCOME_TYPES = frozenset({TransactionType.INCOME, TransactionType.SALE})
OUTFLOW_TYPES = frozenset({TransactionType.EXPENSE, TransactionType.PURCHASE})


@dataclass(frozen=True)
class FinancialSnapshot:
    """Everything the dashboards and statements display."""

    # Assets
    total_assets: Decimal
    cash_in_hand: Decimal
    bank_account: Decimal
    accounts_receivable: Decimal
    equipment: Decimal

    # Liabilities and equity
    total_liabilities: Decimal
    accounts_payable: Decimal
    loans: Decimal
    total_equity: Decimal
    owners_capital: Decimal
    retained_earnings: Decimal

    # Income statement
    total_income: Decimal
    cost_of_goods_sold: Decimal
    total_expenses: Decimal
    gross_profit: Decimal
    net_profit: Decimal

    # Ratios, already formatted for display
    current_ratio: str
    debt_to_equity: str
    gross_margin: str
    net_profit_margin: str
    return_on_assets: str
    return_on_equity: str

    income_by_category: dict[str, Decimal] = field(default_factory=dict)
    expenses_by_category: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the field names the display layer binds to."""
        return {
            "totalAssets": self.total_assets,
            "cashInHand": self.cash_in_hand,
            "bankAccount": self.bank_account,
            "accountsReceivable": self.accounts_receivable,
            "equipment": self.equipment,
            "totalLiabilities": self.total_liabilities,
            "accountsPayable": self.accounts_payable,
            "loans": self.loans,
            "totalEquity": self.total_equity,
            "ownersCapital": self.owners_capital,
            "retainedEarnings": self.retained_earnings,
            "totalIncome": self.total_income,
            "costOfGoodsSold": self.cost_of_goods_sold,
            "totalExpenses": self.total_expenses,
            "grossProfit": self.gross_profit,
            "netProfit": self.net_profit,
            "currentRatio": self.current_ratio,
            "debtToEquity": self.debt_to_equity,
            "grossMargin": self.gross_margin,
            "netProfitMargin": self.net_profit_margin,
            "returnOnAssets": self.return_on_assets,
            "returnOnEquity": self.return_on_equity,
            "incomeByCategory": dict(self.income_by_category),
            "expensesByCategory": dict(self.expenses_by_category),
        }


def _round_half_up(value: Decimal, places: int) -> Decimal:
    """Quantize to a fixed number of decimals whatever the magnitude."""
    with localcontext() as ctx:
        ctx.rounding = ROUND_HALF_UP
        # integer digits plus decimals must fit in the working precision
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places))


def format_ratio(numerator: Decimal, denominator: Decimal) -> str:
    """Render a ratio with two decimals.

    A non-positive denominator yields the infinity symbol when the numerator
    is positive and "0.00" otherwise.
    """
    if denominator > 0:
        quotient = _round_half_up(numerator / denominator, 2)
        return f"{quotient:f}"
    return INFINITY_SYMBOL if numerator > 0 else "0.00"


def format_percentage(numerator: Decimal, denominator: Decimal) -> str:
    """Render numerator/denominator as a percentage with one decimal."""
    if denominator > 0:
        percent = _round_half_up(numerator / denominator * 100, 1)
        return f"{percent:f}%"
    return "0.0%"


def _validate(transaction: Transaction) -> None:
    if not isinstance(transaction.type, TransactionType):
        raise InvalidTransactionError(
            f"unknown transaction type {transaction.type!r}", transaction.id
        )
    amount = transaction.amount
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, int)):
        raise InvalidTransactionError("amount must be a Decimal", transaction.id)
    if isinstance(amount, Decimal) and not amount.is_finite():
        raise InvalidTransactionError("amount must be finite", transaction.id)
    if amount < 0:
        raise InvalidTransactionError("amount must not be negative", transaction.id)


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _balance(
    transactions: Iterable[Transaction],
    increases: frozenset[TransactionType],
    decreases: frozenset[TransactionType],
) -> Decimal:
    """Running balance: some types add to the bucket, others draw it down."""
    balance = ZERO
    for t in transactions:
        if t.type in increases:
            balance += t.amount
        elif t.type in decreases:
            balance -= t.amount
    return balance


def _by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for t in transactions:
        totals[t.category] = totals.get(t.category, ZERO) + t.amount
    return totals


def calculate_financial_data(transactions: Iterable[Transaction]) -> FinancialSnapshot:
    """Compute the financial snapshot for a set of transactions.

    Input order only affects the order of the category breakdowns.

    Raises:
        InvalidTransactionError: If any record has an unknown type or an
            amount that is not a finite, non-negative number. Nothing is
            computed in that case.
    """
    rows = list(transactions)
    for t in rows:
        _validate(t)

    def having(predicate: Callable[[Transaction], bool]) -> list[Transaction]:
        return [t for t in rows if predicate(t)]

    income_rows = having(lambda t: t.type in INCOME_TYPES)
    expense_rows = having(lambda t: t.type == TransactionType.EXPENSE)
    cogs_rows = having(
        lambda t: t.type == TransactionType.PURCHASE and t.category == INVENTORY_CATEGORY
    )

    # Income statement
    total_income = _total(income_rows)
    cost_of_goods_sold = _total(cogs_rows)
    total_expenses = _total(expense_rows)
    gross_profit = total_income - cost_of_goods_sold
    net_profit = gross_profit - total_expenses

    # Assets
    cash_in_hand = _balance(
        having(lambda t: t.category == CASH_CATEGORY), INCOME_TYPES, OUTFLOW_TYPES
    )
    bank_account = _balance(
        having(lambda t: t.category == BANK_CATEGORY), INCOME_TYPES, OUTFLOW_TYPES
    )
    accounts_receivable = _balance(
        having(lambda t: t.category == RECEIVABLE_CATEGORY), INCOME_TYPES, OUTFLOW_TYPES
    )
    equipment = _balance(
        having(lambda t: t.category in EQUIPMENT_CATEGORIES),
        frozenset({TransactionType.PURCHASE}),
        frozenset({TransactionType.SALE}),
    )

    # Liabilities: billed amounts raise payables, settlements lower them
    accounts_payable = _balance(
        having(lambda t: t.category == PAYABLE_CATEGORY), OUTFLOW_TYPES, INCOME_TYPES
    )
    loans = _balance(
        having(lambda t: t.category == LOAN_CATEGORY),
        frozenset({TransactionType.INCOME}),
        frozenset({TransactionType.EXPENSE}),
    )

    # Equity: injections and withdrawals
    owners_capital = _balance(
        having(lambda t: t.category == CAPITAL_CATEGORY),
        frozenset({TransactionType.INCOME}),
        frozenset({TransactionType.EXPENSE}),
    )
    retained_earnings = net_profit

    total_assets = cash_in_hand + bank_account + accounts_receivable + equipment
    total_liabilities = accounts_payable + loans
    total_equity = owners_capital + retained_earnings

    current_assets = cash_in_hand + bank_account + accounts_receivable
    current_liabilities = accounts_payable

    expenses_by_category = _by_category(expense_rows)
    if cost_of_goods_sold > 0:
        expenses_by_category[COST_OF_GOODS_SOLD] = cost_of_goods_sold

    snapshot = FinancialSnapshot(
        total_assets=total_assets,
        cash_in_hand=cash_in_hand,
        bank_account=bank_account,
        accounts_receivable=accounts_receivable,
        equipment=equipment,
        total_liabilities=total_liabilities,
        accounts_payable=accounts_payable,
        loans=loans,
        total_equity=total_equity,
        owners_capital=owners_capital,
        retained_earnings=retained_earnings,
        total_income=total_income,
        cost_of_goods_sold=cost_of_goods_sold,
        total_expenses=total_expenses,
        gross_profit=gross_profit,
        net_profit=net_profit,
        current_ratio=format_ratio(current_assets, current_liabilities),
        debt_to_equity=format_ratio(total_liabilities, total_equity),
        gross_margin=format_percentage(gross_profit, total_income),
        net_profit_margin=format_percentage(net_profit, total_income),
        return_on_assets=format_percentage(net_profit, total_assets),
        return_on_equity=format_percentage(net_profit, total_equity),
        income_by_category=_by_category(income_rows),
        expenses_by_category=expenses_by_category,
    )

    logger.debug(
        "financial_snapshot_calculated",
        transaction_count=len(rows),
        total_income=str(total_income),
        net_profit=str(net_profit),
    )
    return snapshot
