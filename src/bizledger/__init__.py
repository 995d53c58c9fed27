"""bizledger - bookkeeping core for small businesses."""

__version__ = "0.1.0"

from bizledger.assistant import Assistant, extract_json_object
from bizledger.clients import OpenAIClient
from bizledger.config import configure_logging, get_settings
from bizledger.errors import AIResponseParseError, BizLedgerError, InvalidTransactionError
from bizledger.financials import FinancialSnapshot, calculate_financial_data
from bizledger.invoices import InvoiceTemplate, compute_totals, template_layout
from bizledger.models import (
    BillTo,
    BusinessInfo,
    Invoice,
    InvoiceItem,
    PurchaseOrder,
    PurchaseOrderItem,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from bizledger.reports import ReportSummary, TypeReport, summarize
from bizledger.session import SessionContext

__all__ = [
    # Version
    "__version__",
    # Records
    "Transaction",
    "TransactionType",
    "TransactionDraft",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "Invoice",
    "InvoiceItem",
    "BillTo",
    "BusinessInfo",
    # Financials & reports
    "FinancialSnapshot",
    "calculate_financial_data",
    "ReportSummary",
    "TypeReport",
    "summarize",
    # Invoices
    "InvoiceTemplate",
    "compute_totals",
    "template_layout",
    # Session
    "SessionContext",
    # AI entry
    "Assistant",
    "OpenAIClient",
    "extract_json_object",
    # Errors
    "BizLedgerError",
    "InvalidTransactionError",
    "AIResponseParseError",
    # Config
    "get_settings",
    "configure_logging",
]
