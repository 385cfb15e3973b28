"""
personalization_engine.py
--------------------------
Derives recipient-specific text for an invoice from the customer's
payment-history signals. Independent of the recommendation engine: it never
looks at templates and never alters layout.

Greeting precedence is last-rule-wins, evaluated in this order:
    default → repeat customer → consistently fast payer
so a fast payer who is also a repeat customer gets the fast-payer greeting.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from config.config_loader import get_personalization_config
from core.models import AIRecommendations, Customer, Invoice, Personalization

logger = logging.getLogger(__name__)


class PersonalizationEngine:
    """
    Usage:
        engine = PersonalizationEngine()
        personalization = engine.personalize(invoice, customer)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else get_personalization_config()

    def personalize(self, invoice: Invoice, customer: Customer) -> Personalization:
        """
        Raises:
            ValidationError: missing required invoice/customer fields.
        """
        invoice.validate()
        customer.validate()

        personalization = Personalization(
            greeting=self._greeting(customer),
            payment_terms_message=self._payment_terms_message(customer),
            special_notes=self._special_notes(invoice, customer),
            ai_recommendations=AIRecommendations(
                suggested_payment_methods=self._suggested_payment_methods(invoice, customer),
                optimal_due_date=self._optimal_due_date(invoice, customer),
                personalized_message=self._personalized_message(customer),
                upsell_opportunities=list(self.config["upsell_opportunities"]),
            ),
        )
        logger.debug(f"Personalized invoice {invoice.invoice_number} for customer {customer.id}")
        return personalization

    # -------------------------------------------------------------------------
    # CUSTOMER-SPECIFIC TEXT
    # -------------------------------------------------------------------------

    def _greeting(self, customer: Customer) -> str:
        greetings = self.config["greetings"]
        greeting = greetings["default"]
        if customer.is_repeat_customer:
            greeting = greetings["repeat_customer"]
        if customer.is_consistently_fast_payer:
            greeting = greetings["fast_payer"]
        return greeting.format(name=customer.name)

    def _payment_terms_message(self, customer: Customer) -> str:
        message = self.config["payment_terms_message"].format(days=customer.payment_terms)
        if customer.preferred_payment_method:
            message += self.config["preferred_method_clause"].format(method=customer.preferred_payment_method)
        return message

    def _special_notes(self, invoice: Invoice, customer: Customer) -> list[str]:
        notes = []
        grace = self.config["late_payer_grace_days"]
        if customer.average_days_to_pay is not None and customer.average_days_to_pay > customer.payment_terms + grace:
            notes.append(self.config["notes"]["late_payer"])

        multiplier = self.config["large_invoice_multiplier"]
        if customer.average_invoice_amount is not None and invoice.total_amount > customer.average_invoice_amount * multiplier:
            notes.append(self.config["notes"]["large_invoice"])
        return notes

    # -------------------------------------------------------------------------
    # RECOMMENDATIONS
    # -------------------------------------------------------------------------

    def _suggested_payment_methods(self, invoice: Invoice, customer: Customer) -> list[str]:
        """Preferred method first, then defaults, then wire for large invoices. No duplicates."""
        candidates = []
        if customer.preferred_payment_method:
            candidates.append(customer.preferred_payment_method)
        candidates.extend(self.config["default_payment_methods"])

        wire = self.config["wire_transfer"]
        if invoice.total_amount >= wire["min_total_amount"]:
            candidates.append(wire["method"])

        return list(dict.fromkeys(candidates))

    @staticmethod
    def _optimal_due_date(invoice: Invoice, customer: Customer) -> str:
        return (invoice.created_at.date() + timedelta(days=customer.payment_terms)).isoformat()

    def _personalized_message(self, customer: Customer) -> str:
        messages = self.config["messages"]
        template = messages["repeat_customer"] if customer.is_repeat_customer else messages["default"]
        return template.format(name=customer.name)
