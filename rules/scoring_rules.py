"""
scoring_rules.py
-----------------
Concrete recommendation bonus rules. One class per rule.

Rules are additive, not mutually exclusive, and are evaluated in registry
order so the reasoning list comes out in a fixed order:

    1. Short payment terms  → professional templates
    2. High-value invoice   → professional / minimal templates
    3. Industry match       → categories configured per industry group
    4. Fast payment history → templates with a short average payment time

Thresholds, bonus points and reason strings come from config.yaml — only
the rule conditions live in code.
"""

from typing import Any, Dict, Optional

from core.models import PaymentUrgency, Template, TemplateCategory
from rules.base_rule import BaseScoringRule, RuleContext


# =============================================================================
# SHORT PAYMENT TERMS
# =============================================================================
class ShortPaymentTermsRule(BaseScoringRule):
    """Short terms call for a template that conveys urgency."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("short_terms", config)

    def _applies(self, template: Template, context: RuleContext) -> bool:
        return context.customer.payment_terms <= self.config["max_payment_terms_days"]


# =============================================================================
# HIGH-VALUE INVOICE
# =============================================================================
class HighValueInvoiceRule(BaseScoringRule):
    """Large invoices favour a conservative, professional appearance."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("high_value", config)

    def _applies(self, template: Template, context: RuleContext) -> bool:
        return context.invoice.total_amount > self.config["min_total_amount"]


# =============================================================================
# INDUSTRY MATCH
# =============================================================================
class IndustryMatchRule(BaseScoringRule):
    """
    Rewards templates whose category suits the customer's industry.

    Industry groups (industries → categories + reason) are configuration;
    an industry outside every group earns nothing.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("industry_match", config)

    def _group_for(self, context: RuleContext) -> Dict[str, Any] | None:
        industry = context.preferences.industry
        if industry is None:
            return None
        for group in self.config["groups"]:
            if industry.value in group["industries"]:
                return group
        return None

    def _applies(self, template: Template, context: RuleContext) -> bool:
        return self._group_for(context) is not None

    def _categories_for(self, context: RuleContext) -> set[TemplateCategory] | None:
        return {TemplateCategory(c) for c in self._group_for(context)["categories"]}

    def _reason_for(self, context: RuleContext) -> str:
        return self._group_for(context)["reason"]


# =============================================================================
# FAST PAYMENT HISTORY
# =============================================================================
class FastPaymentRule(BaseScoringRule):
    """Under high urgency, prefer templates that historically get paid quickly."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("fast_payment", config)

    def _applies(self, template: Template, context: RuleContext) -> bool:
        if context.preferences.payment_urgency != PaymentUrgency(self.config["urgency"]):
            return False
        return template.usage_stats.avg_payment_time < self.config["max_avg_payment_time_days"]


# =============================================================================
# RULE REGISTRY
# =============================================================================
# Evaluation order is registry order. To add a rule: create the class above,
# add its config block, add it here.

RULE_REGISTRY: dict[str, type[BaseScoringRule]] = {
    "short_terms": ShortPaymentTermsRule,
    "high_value": HighValueInvoiceRule,
    "industry_match": IndustryMatchRule,
    "fast_payment": FastPaymentRule,
}


def get_all_rules(scoring_config: Optional[Dict[str, Any]] = None) -> list[BaseScoringRule]:
    """
    Instantiates all registered rules, in evaluation order.

    Args:
        scoring_config: Full scoring block. Defaults to config.yaml.
    """
    if scoring_config is None:
        return [cls() for cls in RULE_REGISTRY.values()]
    return [cls(scoring_config[name]) for name, cls in RULE_REGISTRY.items()]
