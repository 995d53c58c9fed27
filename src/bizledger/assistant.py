"""Turn free-text descriptions into transactions, purchase orders and invoices.

Each operation sends the user's prompt to the language model with a system
prompt describing the JSON it must return, pulls the JSON object out of the
reply and validates it into one of the record types in ``bizledger.models``.
"""

import json
import re
from datetime import date
from typing import Any

import structlog

from bizledger.clients import OpenAIClient
from bizledger.config import get_settings
from bizledger.errors import AIResponseParseError, InvalidTransactionError
from bizledger.models import BusinessInfo, Invoice, PurchaseOrder, TransactionDraft

logger = structlog.get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

TRANSACTION_PROMPT = """You categorize business transactions.
Return ONLY a JSON object with these fields:
- type: one of "income", "expense", "purchase", "sale"
- amount: the numeric amount without currency symbol (INR or USD)
- description: a clean description of the transaction
- category: the accounting category
- date: the transaction date as YYYY-MM-DD, today ({today}) if not specified
No explanations, only the JSON object."""

PURCHASE_ORDER_PROMPT = """You extract purchase orders from descriptions.
Return ONLY a JSON object shaped like:
{
  "supplier_name": string,
  "items": [{"description": string, "quantity": number, "unit_price": number, "amount": number}],
  "delivery_date": "YYYY-MM-DD",
  "payment_terms": string,
  "shipping_address": string,
  "total_amount": number
}
Fill missing details with reasonable defaults. Only the JSON object."""

INVOICE_PROMPT = """You extract invoices from descriptions.
Return ONLY a JSON object shaped like:
{{
  "invoiceNumber": string,
  "date": "YYYY-MM-DD" (today, {today}, if not specified),
  "dueDate": "YYYY-MM-DD" ({due_days} days after date if not specified),
  "billTo": {{"name": string, "address": string, "email": string (optional)}},
  "items": [{{"description": string, "quantity": number, "unitPrice": number, "amount": number}}],
  "subtotal": number,
  "taxRate": number (percentage, {tax_rate} if not specified),
  "taxAmount": number,
  "total": number
}}
Fill missing details with reasonable defaults. Only the JSON object."""


def extract_json_object(content: str) -> dict[str, Any]:
    """Pull the JSON object out of a model reply, ignoring surrounding prose.

    Raises:
        AIResponseParseError: If no JSON object can be decoded.
    """
    match = _JSON_OBJECT.search(content)
    candidate = match.group(0) if match else content
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        raise AIResponseParseError("Failed to parse AI response", ai_response=content) from None
    if not isinstance(data, dict):
        raise AIResponseParseError("AI response is not a JSON object", ai_response=content)
    return data


def _require_prompt(prompt: str) -> str:
    prompt = prompt.strip() if prompt else ""
    if not prompt:
        raise ValueError("Prompt is required")
    return prompt


class Assistant:
    """Interprets natural-language entries with a language model."""

    def __init__(self, client: OpenAIClient | None = None):
        self._client = client or OpenAIClient()
        self._settings = get_settings()
        self._logger = logger.bind(component="assistant")

    async def _ask(self, system_prompt: str, prompt: str, temperature: float) -> dict[str, Any]:
        response = await self._client.complete(system_prompt, prompt, temperature=temperature)
        try:
            return extract_json_object(response.content)
        except AIResponseParseError:
            self._logger.warning("unparseable_ai_response", content=response.content[:200])
            raise

    async def analyze_transaction(self, prompt: str, today: date | None = None) -> TransactionDraft:
        """Interpret a description such as "sold 3 chairs for 4500 cash".

        Raises:
            ValueError: If the prompt is empty.
            AIResponseParseError: If the reply is not a usable transaction.
        """
        prompt = _require_prompt(prompt)
        today = today or date.today()
        payload = await self._ask(
            TRANSACTION_PROMPT.format(today=today.isoformat()),
            prompt,
            self._settings.transaction_temperature,
        )
        try:
            draft = TransactionDraft.from_payload(payload, today=today)
        except InvalidTransactionError as e:
            raise AIResponseParseError(str(e), ai_response=json.dumps(payload)) from e

        self._logger.info(
            "transaction_analyzed",
            type=draft.type.value,
            category=draft.category,
            amount=str(draft.amount),
        )
        return draft

    async def analyze_purchase_order(self, prompt: str) -> PurchaseOrder:
        """Extract a purchase order from a description."""
        prompt = _require_prompt(prompt)
        payload = await self._ask(
            PURCHASE_ORDER_PROMPT, prompt, self._settings.document_temperature
        )
        try:
            order = PurchaseOrder.from_payload(payload)
        except (InvalidTransactionError, AttributeError, TypeError) as e:
            raise AIResponseParseError(
                f"Invalid purchase order: {e}", ai_response=json.dumps(payload)
            ) from e

        self._logger.info(
            "purchase_order_analyzed",
            supplier=order.supplier_name,
            item_count=len(order.items),
            total=str(order.total_amount),
        )
        return order

    async def generate_invoice(
        self,
        prompt: str,
        business_info: BusinessInfo | None = None,
        today: date | None = None,
    ) -> Invoice:
        """Extract an invoice from a description.

        The business details are attached to the result as given; the model
        never sees or alters them.
        """
        prompt = _require_prompt(prompt)
        today = today or date.today()
        system_prompt = INVOICE_PROMPT.format(
            today=today.isoformat(),
            due_days=self._settings.invoice_due_days,
            tax_rate=self._settings.default_tax_rate,
        )
        payload = await self._ask(system_prompt, prompt, self._settings.document_temperature)
        payload.setdefault("date", today.isoformat())
        try:
            invoice = Invoice.from_payload(
                payload,
                business_info=business_info,
                default_tax_rate=self._settings.default_tax_rate,
                default_due_days=self._settings.invoice_due_days,
            )
        except (InvalidTransactionError, AttributeError, TypeError) as e:
            raise AIResponseParseError(
                f"Invalid invoice: {e}", ai_response=json.dumps(payload)
            ) from e

        self._logger.info(
            "invoice_generated",
            invoice_number=invoice.invoice_number,
            item_count=len(invoice.items),
            total=str(invoice.total),
        )
        return invoice
