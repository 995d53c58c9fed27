"""Invoice templates and totals."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Protocol

from bizledger.config import get_settings

CENT = Decimal("0.01")


class InvoiceTemplate(str, Enum):
    """Available invoice layouts."""

    CLASSIC = "classic"
    MODERN = "modern"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class TemplateLayout:
    """Presentation choices for one invoice template."""

    template: InvoiceTemplate
    name: str
    description: str
    show_business_header: bool
    show_item_table_borders: bool
    accent: str


def template_layout(template: InvoiceTemplate) -> TemplateLayout:
    """Return the layout for a template."""
    match template:
        case InvoiceTemplate.CLASSIC:
            return TemplateLayout(
                template=template,
                name="Classic",
                description="Traditional invoice layout with a professional look",
                show_business_header=True,
                show_item_table_borders=True,
                accent="slate",
            )
        case InvoiceTemplate.MODERN:
            return TemplateLayout(
                template=template,
                name="Modern",
                description="Contemporary design with clean lines and visual hierarchy",
                show_business_header=True,
                show_item_table_borders=False,
                accent="indigo",
            )
        case InvoiceTemplate.MINIMAL:
            return TemplateLayout(
                template=template,
                name="Minimal",
                description="Simplified layout focusing on essential information",
                show_business_header=False,
                show_item_table_borders=False,
                accent="none",
            )
    raise ValueError(f"Unknown invoice template: {template!r}")


def available_templates() -> list[TemplateLayout]:
    """All template layouts in selector order."""
    return [template_layout(template) for template in InvoiceTemplate]


class _Priced(Protocol):
    amount: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_totals(items: Iterable[_Priced], tax_rate: Decimal) -> InvoiceTotals:
    """Sum line amounts and apply a percentage tax rate.

    Args:
        items: Lines carrying an ``amount``.
        tax_rate: Tax as a percentage (18 means 18%).

    Returns:
        Subtotal, tax and total, each rounded half-up to cents.
    """
    subtotal = sum((item.amount for item in items), Decimal("0"))
    tax_amount = subtotal * tax_rate / Decimal("100")
    subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
    tax_amount = tax_amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def default_due_date(issue_date: date, days: int | None = None) -> date:
    """Due date for an invoice issued on ``issue_date``."""
    if days is None:
        days = get_settings().invoice_due_days
    return issue_date + timedelta(days=days)
