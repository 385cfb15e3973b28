"""
recommendation_engine.py
-------------------------
Template recommendation engine.

For each catalog template:
    1. Base score from the template's optimization metrics, weighted:

        base = w_conversion × payment_conversion_rate
             + w_readability × 10 × readability_score
             + w_brand × 10 × brand_consistency
             + w_mobile × (100 if mobile_friendly else 0)

       With the default weights (0.4 / 0.3 / 0.2 / 0.1) this is
       0.4·conversion + 3·readability + 2·brand + 10·mobile.

    2. Bonus rules (rules/scoring_rules.py), additive, in registry order.

Templates are then stable-sorted by final score, so equal scores keep catalog
order. The top three are recommended. `reasoning` holds the reasons of the
top-scored template only; every shortlisted ScoredTemplate carries its own.

Style customizations are generated for the top template only, from the
per-industry palettes and emphasis styles in config.yaml.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from config.config_loader import get_customization_config, get_scoring_config
from core.catalog import TemplateCatalog
from core.errors import ConfigurationError
from core.models import (
    Customer,
    Invoice,
    PaymentUrgency,
    Preferences,
    RecommendationResult,
    ScoredTemplate,
    Template,
)
from rules.base_rule import BaseScoringRule, RuleContext
from rules.scoring_rules import get_all_rules

logger = logging.getLogger(__name__)


# =============================================================================
# BASE SCORE
# =============================================================================

@dataclass(frozen=True)
class ScoringWeights:
    conversion: float = 0.4
    readability: float = 0.3
    brand: float = 0.2
    mobile: float = 0.1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringWeights":
        """
        Raises:
            ConfigurationError: unknown weight name or non-numeric value,
                plus everything validate() rejects.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigurationError(f"Unknown scoring weights: {unknown}. Allowed: {sorted(known)}")
        try:
            values = {k: float(v) for k, v in d.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Scoring weights must be numeric: {e}") from e
        weights = cls(**values)
        weights.validate()
        return weights

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: a weight outside [0, 1], or weights not summing to 1.
        """
        values = {"conversion": self.conversion, "readability": self.readability,
                  "brand": self.brand, "mobile": self.mobile}
        out_of_range = {k: v for k, v in values.items() if not 0.0 <= v <= 1.0}
        if out_of_range:
            raise ConfigurationError(f"Scoring weights must be within [0, 1]: {out_of_range}")
        total = sum(values.values())
        if abs(total - 1.0) > 0.01:
            raise ConfigurationError(f"Scoring weights must sum to 1.0, got {total:.3f}")


def calculate_template_score(template: Template, weights: Optional[ScoringWeights] = None) -> float:
    """Base score of a template before any bonus rule is applied."""
    weights = weights or ScoringWeights()
    metrics = template.ai_optimization
    score = (
        metrics.payment_conversion_rate * weights.conversion
        + metrics.readability_score * 10 * weights.readability
        + metrics.brand_consistency * 10 * weights.brand
        + (100 if metrics.mobile_friendly else 0) * weights.mobile
    )
    return round(score, 4)


# =============================================================================
# ENGINE
# =============================================================================

class RecommendationEngine:
    """
    Ranks catalog templates for an invoice/customer/preferences triple.

    Usage:
        engine = RecommendationEngine(TemplateCatalog.from_config())
        result = engine.recommend(invoice, customer, Preferences(industry=Industry.FINANCE))
    """

    def __init__(
        self,
        catalog: TemplateCatalog,
        weights: Optional[ScoringWeights] = None,
        rules: Optional[list[BaseScoringRule]] = None,
        customization_config: Optional[Dict[str, Any]] = None,
        max_recommendations: Optional[int] = None,
    ):
        scoring_config = get_scoring_config()
        self.catalog = catalog
        self.weights = weights if weights is not None else ScoringWeights.from_dict(scoring_config["weights"])
        self.weights.validate()
        self.rules = rules if rules is not None else get_all_rules()
        self.customization_config = (
            customization_config if customization_config is not None else get_customization_config()
        )
        self.max_recommendations = (
            max_recommendations if max_recommendations is not None
            else scoring_config["max_recommendations"]
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def recommend(
        self,
        invoice: Invoice,
        customer: Customer,
        preferences: Preferences | Dict[str, Any] | None = None,
    ) -> RecommendationResult:
        """
        Rank every catalog template and derive customizations for the winner.

        Raises:
            ValidationError: missing required invoice/customer fields or an
                unknown preference value. Raised before any scoring runs.
        """
        invoice.validate()
        customer.validate()
        if not isinstance(preferences, Preferences):
            preferences = Preferences.from_dict(preferences)

        context = RuleContext(invoice=invoice, customer=customer, preferences=preferences)
        scored = [self.score_template(t, context) for t in self.catalog.load()]

        # sorted() is stable, so equal scores keep catalog insertion order.
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)
        shortlist = ranked[: self.max_recommendations]

        if not shortlist:
            logger.warning("Recommendation requested against an empty template catalog")
            return RecommendationResult(recommended=[], reasoning=[], customizations={}, scored=[])

        top = shortlist[0]
        customizations = self.generate_customizations(top.template, invoice, preferences)

        logger.info(
            f"Invoice {invoice.invoice_number}: recommended "
            f"{[(s.template.id, s.score) for s in shortlist]}"
        )
        return RecommendationResult(
            recommended=[s.template for s in shortlist],
            reasoning=list(top.reasons),
            customizations=customizations,
            scored=shortlist,
        )

    def score_template(self, template: Template, context: RuleContext) -> ScoredTemplate:
        """Base score plus every bonus rule that fires, in rule order."""
        base_score = calculate_template_score(template, self.weights)
        score = base_score
        reasons: list[str] = []

        for rule in self.rules:
            outcome = rule.evaluate(template, context)
            if outcome is not None:
                score += outcome.bonus
                reasons.append(outcome.reason)

        logger.debug(f"Template {template.id}: base={base_score}, final={round(score, 4)}, reasons={reasons}")
        return ScoredTemplate(template=template, score=round(score, 4), base_score=base_score, reasons=reasons)

    def generate_customizations(
        self, template: Template, invoice: Invoice, preferences: Preferences
    ) -> Dict[str, Dict[str, Any]]:
        """
        Style overrides for the chosen template. Always a fresh dict; the
        template itself is never modified.
        """
        cfg = self.customization_config
        customizations: Dict[str, Dict[str, Any]] = {}

        # --- Industry palette ---
        if preferences.industry is not None:
            palette = cfg["industry_palettes"].get(preferences.industry.value)
            if palette:
                colors = template.to_dict()["styling"]["colors"]
                colors.update(palette)
                customizations["colors"] = colors

        # --- Payment urgency ---
        if preferences.payment_urgency == PaymentUrgency.HIGH:
            customizations["payment_highlight"] = dict(cfg["payment_highlight"])
            customizations["due_date_styling"] = dict(cfg["due_date_styling"])

        # --- Large amounts ---
        amount_cfg = cfg["amount_styling"]
        if invoice.total_amount > amount_cfg["min_total_amount"]:
            customizations["amount_styling"] = {
                "font_size": amount_cfg["font_size"],
                "font_weight": amount_cfg["font_weight"],
                "color": template.styling.colors.primary,
            }

        return customizations
