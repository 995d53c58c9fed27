"""Pytest configuration and fixtures."""

import itertools
import os
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from bizledger.models import Transaction, TransactionType  # noqa: E402

_ids = itertools.count(1)


def make_transaction(
    type: str | TransactionType,
    category: str,
    amount: str | int | Decimal,
    description: str = "",
    on: date = date(2024, 1, 15),
    user_id: str | None = None,
) -> Transaction:
    """Build a transaction with sensible defaults."""
    n = next(_ids)
    return Transaction(
        id=f"tx-{n}",
        description=description or f"{type} {category}",
        amount=Decimal(str(amount)),
        type=TransactionType(type),
        category=category,
        date=on,
        created_at=datetime(2024, 1, 15, 9, 0, tzinfo=UTC) + timedelta(seconds=n),
        user_id=user_id,
    )


@pytest.fixture
def tx():
    """Factory fixture for transactions."""
    return make_transaction


@pytest.fixture
def scenario_transactions():
    """A cash sale, a rent expense and an inventory purchase."""
    return [
        make_transaction("sale", "cash", 1000),
        make_transaction("expense", "rent", 300),
        make_transaction("purchase", "inventory", 200),
    ]


@pytest.fixture
def mock_openai_response():
    """Build a chat-completion-like object returning the given content."""

    def _build(content: str, finish_reason: str = "stop"):
        response = MagicMock()
        choice = MagicMock()
        choice.message.content = content
        choice.finish_reason = finish_reason
        response.choices = [choice]
        response.usage.prompt_tokens = 120
        response.usage.completion_tokens = 40
        return response

    return _build


@pytest.fixture
def mock_transaction_record():
    """A transaction row as returned by storage."""
    return {
        "id": "8b0f6a9e-1111-4c1e-9f00-000000000001",
        "description": "Sold office chairs",
        "amount": "4500.00",
        "type": "sale",
        "category": "cash",
        "date": "2024-01-15",
        "created_at": "2024-01-15T10:30:00+00:00",
        "user_id": "11111111-1111-1111-1111-111111111111",
    }
