"""
base_rule.py
-------------
Abstract base class for all recommendation bonus rules.

Each concrete rule (short payment terms, high value, etc.) inherits from
this. Shared logic — config lookup, category gating, result construction —
lives here so it's never duplicated.

Concrete rules only need to implement:
    - _applies(): rule-specific condition on invoice/customer/preferences
    - _categories_for(): which template categories earn the bonus
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config.config_loader import get_scoring_rule_config
from core.models import Customer, Invoice, Preferences, Template, TemplateCategory


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may look at, bundled once per recommendation call."""
    invoice: Invoice
    customer: Customer
    preferences: Preferences


@dataclass(frozen=True)
class RuleOutcome:
    bonus: float
    reason: str


class BaseScoringRule(ABC):
    """
    Abstract base for bonus rules.

    Subclasses implement _applies() and optionally _categories_for() /
    _reason_for(). This class handles category gating and outcome
    construction.
    """

    def __init__(self, rule_name: str, config: Optional[Dict[str, Any]] = None):
        self.rule_name = rule_name
        self.config = config if config is not None else get_scoring_rule_config(rule_name)
        self.bonus = float(self.config["bonus"])

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def evaluate(self, template: Template, context: RuleContext) -> RuleOutcome | None:
        """
        Returns:
            RuleOutcome if this rule awards its bonus to the template, None otherwise.
        """
        if not self._applies(template, context):
            return None
        categories = self._categories_for(context)
        if categories is not None and template.category not in categories:
            return None
        return RuleOutcome(bonus=self.bonus, reason=self._reason_for(context))

    # -------------------------------------------------------------------------
    # ABSTRACT METHODS
    # -------------------------------------------------------------------------

    @abstractmethod
    def _applies(self, template: Template, context: RuleContext) -> bool:
        """Rule condition, independent of template category."""
        ...

    # -------------------------------------------------------------------------
    # OVERRIDABLE DEFAULTS
    # -------------------------------------------------------------------------

    def _categories_for(self, context: RuleContext) -> set[TemplateCategory] | None:
        """Eligible categories. None means every category qualifies."""
        if "categories" not in self.config:
            return None
        return {TemplateCategory(c) for c in self.config["categories"]}

    def _reason_for(self, context: RuleContext) -> str:
        return self.config["reason"]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bonus={self.bonus})"
