"""Tests for the financial snapshot calculation."""

import random
from dataclasses import replace
from decimal import Decimal

import pytest

from bizledger.errors import InvalidTransactionError
from bizledger.financials import (
    COST_OF_GOODS_SOLD,
    calculate_financial_data,
    format_percentage,
    format_ratio,
)

SNAPSHOT_KEYS = {
    "totalAssets", "cashInHand", "bankAccount", "accountsReceivable", "equipment",
    "totalLiabilities", "accountsPayable", "loans", "totalEquity", "ownersCapital",
    "retainedEarnings", "totalIncome", "costOfGoodsSold", "totalExpenses",
    "grossProfit", "netProfit", "currentRatio", "debtToEquity", "grossMargin",
    "netProfitMargin", "returnOnAssets", "returnOnEquity", "incomeByCategory",
    "expensesByCategory",
}


class TestEmptyInput:
    """Tests for an empty transaction list."""

    def test_monetary_fields_are_zero(self):
        snapshot = calculate_financial_data([])
        data = snapshot.to_dict()

        for key, value in data.items():
            if isinstance(value, Decimal):
                assert value == 0, key

    def test_ratios_are_zero_strings(self):
        snapshot = calculate_financial_data([])

        assert snapshot.current_ratio == "0.00"
        assert snapshot.debt_to_equity == "0.00"
        assert snapshot.gross_margin == "0.0%"
        assert snapshot.net_profit_margin == "0.0%"
        assert snapshot.return_on_assets == "0.0%"
        assert snapshot.return_on_equity == "0.0%"

    def test_category_maps_are_empty(self):
        snapshot = calculate_financial_data([])

        assert snapshot.income_by_category == {}
        assert snapshot.expenses_by_category == {}


class TestScenario:
    """Sale, rent and inventory purchase together."""

    def test_income_statement(self, scenario_transactions):
        snapshot = calculate_financial_data(scenario_transactions)

        assert snapshot.total_income == Decimal("1000")
        assert snapshot.cost_of_goods_sold == Decimal("200")
        assert snapshot.total_expenses == Decimal("300")
        assert snapshot.gross_profit == Decimal("800")
        assert snapshot.net_profit == Decimal("500")

    def test_only_cash_category_moves_cash(self, scenario_transactions):
        snapshot = calculate_financial_data(scenario_transactions)

        assert snapshot.cash_in_hand == Decimal("1000")
        assert snapshot.bank_account == 0
        assert snapshot.total_assets == Decimal("1000")

    def test_category_maps(self, scenario_transactions):
        snapshot = calculate_financial_data(scenario_transactions)

        assert snapshot.income_by_category == {"cash": Decimal("1000")}
        assert snapshot.expenses_by_category == {
            "rent": Decimal("300"),
            COST_OF_GOODS_SOLD: Decimal("200"),
        }
        assert list(snapshot.expenses_by_category) == ["rent", COST_OF_GOODS_SOLD]

    def test_margins(self, scenario_transactions):
        snapshot = calculate_financial_data(scenario_transactions)

        assert snapshot.gross_margin == "80.0%"
        assert snapshot.net_profit_margin == "50.0%"

    def test_to_dict_uses_display_field_names(self, scenario_transactions):
        data = calculate_financial_data(scenario_transactions).to_dict()

        assert set(data) == SNAPSHOT_KEYS
        assert data["grossMargin"] == "80.0%"
        assert data["expensesByCategory"][COST_OF_GOODS_SOLD] == Decimal("200")


class TestBalanceSheetBuckets:
    """Tests for category-driven balance sheet reductions."""

    def test_cash_running_balance(self, tx):
        snapshot = calculate_financial_data([
            tx("income", "cash", 500),
            tx("sale", "cash", 250),
            tx("expense", "cash", 100),
            tx("purchase", "cash", 50),
        ])

        assert snapshot.cash_in_hand == Decimal("600")

    def test_bank_and_receivables(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "bank", 900),
            tx("expense", "bank", 400),
            tx("sale", "accounts_receivable", 300),
            tx("purchase", "accounts_receivable", 100),
        ])

        assert snapshot.bank_account == Decimal("500")
        assert snapshot.accounts_receivable == Decimal("200")

    def test_equipment_counts_purchases_minus_disposals(self, tx):
        snapshot = calculate_financial_data([
            tx("purchase", "equipment", 5000),
            tx("purchase", "asset", 1000),
            tx("sale", "equipment", 1500),
            tx("expense", "equipment", 999),
            tx("income", "asset", 999),
        ])

        assert snapshot.equipment == Decimal("4500")

    def test_accounts_payable(self, tx):
        snapshot = calculate_financial_data([
            tx("purchase", "accounts_payable", 800),
            tx("expense", "accounts_payable", 200),
            tx("income", "accounts_payable", 300),
        ])

        assert snapshot.accounts_payable == Decimal("700")
        assert snapshot.total_liabilities == Decimal("700")

    def test_loans_and_capital(self, tx):
        snapshot = calculate_financial_data([
            tx("income", "loan", 10000),
            tx("expense", "loan", 2500),
            tx("purchase", "loan", 777),
            tx("income", "capital", 20000),
            tx("expense", "capital", 1000),
            tx("sale", "capital", 333),
        ])

        assert snapshot.loans == Decimal("7500")
        assert snapshot.owners_capital == Decimal("19000")

    def test_category_match_is_case_sensitive(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "Cash", 100),
            tx("purchase", "Inventory", 40),
        ])

        assert snapshot.cash_in_hand == 0
        assert snapshot.cost_of_goods_sold == 0
        assert snapshot.income_by_category == {"Cash": Decimal("100")}

    def test_equity_includes_retained_earnings(self, tx):
        snapshot = calculate_financial_data([
            tx("income", "capital", 1000),
            tx("sale", "cash", 400),
            tx("expense", "rent", 100),
        ])

        assert snapshot.retained_earnings == snapshot.net_profit
        assert snapshot.total_equity == snapshot.owners_capital + snapshot.net_profit
        assert snapshot.total_equity == Decimal("2300")


class TestRatios:
    """Tests for ratio values and formatting."""

    def test_infinite_current_ratio(self, tx):
        snapshot = calculate_financial_data([tx("sale", "cash", 100)])

        assert snapshot.current_ratio == "∞"
        assert snapshot.debt_to_equity == "0.00"

    def test_finite_ratios(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "cash", 900),
            tx("purchase", "accounts_payable", 300),
        ])

        # current assets 900 / payables 300; equity is net profit 900
        assert snapshot.current_ratio == "3.00"
        assert snapshot.debt_to_equity == "0.33"
        assert snapshot.return_on_assets == "100.0%"
        assert snapshot.return_on_equity == "100.0%"

    def test_format_ratio_rounds_half_up(self):
        assert format_ratio(Decimal("1"), Decimal("8")) == "0.13"
        assert format_ratio(Decimal("2"), Decimal("3")) == "0.67"

    def test_format_ratio_zero_denominator(self):
        assert format_ratio(Decimal("5"), Decimal("0")) == "∞"
        assert format_ratio(Decimal("0"), Decimal("0")) == "0.00"

    def test_format_ratio_negative_denominator(self):
        assert format_ratio(Decimal("5"), Decimal("-10")) == "∞"
        assert format_ratio(Decimal("-5"), Decimal("-10")) == "0.00"

    def test_format_percentage(self):
        assert format_percentage(Decimal("1"), Decimal("3")) == "33.3%"
        assert format_percentage(Decimal("-250"), Decimal("1000")) == "-25.0%"
        assert format_percentage(Decimal("500"), Decimal("0")) == "0.0%"

    def test_very_large_ratio(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "cash", "1e30"),
            tx("purchase", "accounts_payable", "1"),
        ])

        assert snapshot.current_ratio == "1" + "0" * 30 + ".00"
        assert snapshot.debt_to_equity == "0.00"
        assert snapshot.return_on_assets == "100.0%"

    def test_tiny_denominator(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "cash", "1000000"),
            tx("purchase", "accounts_payable", "0.00000000000000000000001"),
        ])

        assert snapshot.current_ratio == "1" + "0" * 29 + ".00"
        assert snapshot.debt_to_equity == "0.00"

    def test_format_percentage_beyond_default_precision(self):
        assert format_percentage(Decimal("1e30"), Decimal("1")) == "1" + "0" * 32 + ".0%"

    def test_loss_gives_negative_margins(self, tx):
        snapshot = calculate_financial_data([
            tx("sale", "services", 100),
            tx("expense", "rent", 300),
        ])

        assert snapshot.net_profit == Decimal("-200")
        assert snapshot.net_profit_margin == "-200.0%"
        # negative equity short-circuits the percentage
        assert snapshot.return_on_equity == "0.0%"


class TestAggregationProperties:
    """Determinism, partition and identity checks."""

    @pytest.fixture
    def mixed(self, tx):
        return [
            tx("income", "consulting", "1250.75"),
            tx("sale", "cash", "310.10"),
            tx("expense", "utilities", "89.99"),
            tx("expense", "rent", "1200"),
            tx("purchase", "inventory", "410.30"),
            tx("purchase", "equipment", "2000"),
            tx("income", "loan", "5000"),
            tx("expense", "utilities", "45.01"),
            tx("sale", "bank", "99.95"),
        ]

    def test_repeated_calls_match(self, mixed):
        assert calculate_financial_data(mixed) == calculate_financial_data(mixed)

    def test_order_does_not_change_totals(self, mixed):
        shuffled = list(mixed)
        random.Random(7).shuffle(shuffled)

        first = calculate_financial_data(mixed).to_dict()
        second = calculate_financial_data(shuffled).to_dict()

        for key in SNAPSHOT_KEYS - {"incomeByCategory", "expensesByCategory"}:
            assert first[key] == second[key], key
        assert dict(first["incomeByCategory"]) == dict(second["incomeByCategory"])

    def test_income_and_expense_partition(self, mixed):
        snapshot = calculate_financial_data(mixed)

        assert snapshot.total_income == sum(
            t.amount for t in mixed if t.type.value in ("income", "sale")
        )
        assert snapshot.total_expenses == sum(
            t.amount for t in mixed if t.type.value == "expense"
        )

    def test_profit_identity(self, mixed):
        snapshot = calculate_financial_data(mixed)

        assert snapshot.net_profit == (
            snapshot.total_income - snapshot.cost_of_goods_sold
        ) - snapshot.total_expenses

    def test_category_sums_first_seen_order(self, mixed):
        snapshot = calculate_financial_data(mixed)

        assert list(snapshot.expenses_by_category) == [
            "utilities", "rent", COST_OF_GOODS_SOLD,
        ]
        assert snapshot.expenses_by_category["utilities"] == Decimal("135.00")

    def test_cogs_entry_only_when_positive(self, tx):
        without = calculate_financial_data([tx("purchase", "supplies", 50)])
        zero = calculate_financial_data([tx("purchase", "inventory", 0)])
        with_cogs = calculate_financial_data([tx("purchase", "inventory", 50)])

        assert COST_OF_GOODS_SOLD not in without.expenses_by_category
        assert COST_OF_GOODS_SOLD not in zero.expenses_by_category
        assert with_cogs.expenses_by_category == {COST_OF_GOODS_SOLD: Decimal("50")}

    def test_accepts_generators(self, scenario_transactions):
        snapshot = calculate_financial_data(t for t in scenario_transactions)

        assert snapshot.net_profit == Decimal("500")


class TestInvalidInput:
    """Malformed records are rejected before anything is computed."""

    def test_negative_amount_rejected(self, tx):
        bad = replace(tx("sale", "cash", 10), amount=Decimal("-1"))

        with pytest.raises(InvalidTransactionError) as exc_info:
            calculate_financial_data([tx("sale", "cash", 5), bad])

        assert exc_info.value.record_id == bad.id

    def test_unknown_type_rejected(self, tx):
        bad = replace(tx("sale", "cash", 10), type="refund")

        with pytest.raises(InvalidTransactionError) as exc_info:
            calculate_financial_data([bad])

        assert exc_info.value.record_id == bad.id
        assert "refund" in exc_info.value.reason

    def test_non_finite_amount_rejected(self, tx):
        bad = replace(tx("expense", "rent", 10), amount=Decimal("NaN"))

        with pytest.raises(InvalidTransactionError):
            calculate_financial_data([bad])
