"""Exceptions raised by bizledger."""

from typing import Any


class BizLedgerError(Exception):
    """Base exception for bizledger errors."""

    pass


class InvalidTransactionError(BizLedgerError):
    """A transaction record failed validation."""

    def __init__(self, reason: str, record_id: str | None = None, details: Any = None):
        message = f"Invalid transaction {record_id}: {reason}" if record_id else reason
        super().__init__(message)
        self.reason = reason
        self.record_id = record_id
        self.details = details


class AIResponseParseError(BizLedgerError):
    """The language model returned something we could not use."""

    def __init__(self, message: str, ai_response: str | None = None):
        super().__init__(message)
        self.ai_response = ai_response
