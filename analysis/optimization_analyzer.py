"""
optimization_analyzer.py
-------------------------
Quality report for a chosen (invoice, template) pair.

Four independent sub-analyses, always run in this order:
    1. Readability   — font size, text/background contrast, line height
    2. Conversion    — predicted payment rate from history, adjusted for
                       amount, due-date prominence and payment options
    3. Branding      — logo presence and brand colour usage
    4. Accessibility — WCAG tier from contrast, downgraded for small fonts

Each returns a score/tier plus issues and suggestions, listed in the order
the checks ran. Nothing here raises on odd input: malformed colours or
sizes only lower the score. A composite optimization score blends the four.

All thresholds and penalties come from config.yaml.
"""

import logging
from typing import Any, Dict, Optional

from config.config_loader import get_optimization_config
from core.color import contrast_ratio, parse_hex_color
from core.models import (
    AccessibilityAnalysis,
    BrandingAnalysis,
    ConversionAnalysis,
    Invoice,
    OptimizationReport,
    ReadabilityAnalysis,
    Template,
    WCAGTier,
)

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _below(value, threshold: float) -> bool:
    """True when value is under threshold. Non-numeric values count as failing."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
        return True
    return value < threshold


class OptimizationAnalyzer:
    """
    Usage:
        analyzer = OptimizationAnalyzer()
        report = analyzer.analyze(invoice, template, customizations)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else get_optimization_config()
        self.readability_cfg = self.config["readability"]
        self.conversion_cfg = self.config["conversion"]
        self.branding_cfg = self.config["branding"]
        self.accessibility_cfg = self.config["accessibility"]
        self.tier_points = self.config["tier_points"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def analyze(
        self,
        invoice: Invoice,
        template: Template,
        customizations: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> OptimizationReport:
        """
        Args:
            invoice: The invoice being designed.
            template: Chosen template.
            customizations: Style overrides from the recommendation engine.
                Only consulted for due-date prominence.
        """
        invoice.validate()
        customizations = customizations or {}

        readability = self.analyze_readability(template)
        conversion = self.analyze_conversion(invoice, template, customizations)
        branding = self.analyze_branding(template)
        accessibility = self.analyze_accessibility(template)

        report = OptimizationReport(
            readability=readability,
            conversion=conversion,
            branding=branding,
            accessibility=accessibility,
            optimization_score=self._composite_score(readability, conversion, branding, accessibility),
        )
        logger.info(
            f"Optimization for invoice {invoice.invoice_number} / template {template.id}: "
            f"readability={readability.score}, conversion={conversion.predicted_payment_rate}, "
            f"branding={branding.consistency_score}, wcag={accessibility.wcag_compliance.value}, "
            f"overall={report.optimization_score}"
        )
        return report

    # -------------------------------------------------------------------------
    # 1. READABILITY
    # -------------------------------------------------------------------------

    def analyze_readability(self, template: Template) -> ReadabilityAnalysis:
        cfg = self.readability_cfg
        styling = template.styling
        issues, suggestions = [], []
        score = float(cfg["start_score"])

        if _below(styling.fonts.primary.size, cfg["min_font_size"]):
            issues.append("Primary font size too small")
            suggestions.append(f"Increase primary font size to at least {cfg['min_font_size']}pt")
            score -= cfg["font_penalty"]

        if self._text_contrast(template) < cfg["min_contrast"]:
            issues.append("Insufficient color contrast")
            suggestions.append("Increase contrast between text and background colors")
            score -= cfg["contrast_penalty"]

        if _below(styling.spacing.line_height, cfg["min_line_height"]):
            issues.append("Line spacing too tight")
            suggestions.append(f"Increase line height to at least {cfg['min_line_height']} for better readability")
            score -= cfg["line_height_penalty"]

        return ReadabilityAnalysis(score=_clamp(score, 0.0, 10.0), issues=issues, suggestions=suggestions)

    # -------------------------------------------------------------------------
    # 2. CONVERSION
    # -------------------------------------------------------------------------

    def analyze_conversion(
        self, invoice: Invoice, template: Template, customizations: Dict[str, Dict[str, Any]]
    ) -> ConversionAnalysis:
        cfg = self.conversion_cfg
        factors, recommendations = [], []
        rate = template.usage_stats.payment_rate * 100

        if invoice.total_amount > cfg["high_amount_threshold"]:
            factors.append("High invoice amount may delay payment")
            recommendations.append("Highlight payment terms and consider payment plans")
            rate -= cfg["high_amount_penalty"]

        if not self.is_due_date_prominent(template, customizations):
            factors.append("Due date not prominently displayed")
            recommendations.append("Make due date more visible with styling emphasis")
            rate -= cfg["due_date_penalty"]

        if len(template.payment_methods) < cfg["min_payment_methods"]:
            factors.append("Limited payment method options")
            recommendations.append("Add more payment method options (ACH, card, etc.)")
            rate -= cfg["payment_methods_penalty"]

        return ConversionAnalysis(
            predicted_payment_rate=round(_clamp(rate, 0.0, 100.0), 4),
            factors_affecting_payment=factors,
            optimization_recommendations=recommendations,
        )

    @staticmethod
    def is_due_date_prominent(template: Template, customizations: Dict[str, Dict[str, Any]]) -> bool:
        """
        A due-date override must be bold and use a valid colour other than the
        default text colour. An unparseable text colour never matches.
        """
        styling = customizations.get("due_date_styling") or {}
        if str(styling.get("font_weight", "")).lower() not in ("bold", "700", "800", "900"):
            return False
        color = parse_hex_color(styling.get("color"))
        if color is None:
            return False
        return color != parse_hex_color(template.styling.colors.text_primary)

    # -------------------------------------------------------------------------
    # 3. BRANDING
    # -------------------------------------------------------------------------

    def analyze_branding(self, template: Template) -> BrandingAnalysis:
        cfg = self.branding_cfg
        branding = template.styling.branding
        issues, improvements = [], []
        score = float(template.ai_optimization.brand_consistency)

        if not branding.logo.url:
            issues.append("No company logo present")
            improvements.append("Add company logo for brand recognition")
            score -= cfg["missing_logo_penalty"]

        if len(branding.company_colors) < cfg["min_brand_colors"]:
            issues.append("Limited brand color usage")
            improvements.append("Incorporate more brand colors throughout the design")
            score -= cfg["brand_colors_penalty"]

        return BrandingAnalysis(
            consistency_score=_clamp(score, 0.0, 10.0),
            brand_alignment_issues=issues,
            branding_improvements=improvements,
        )

    # -------------------------------------------------------------------------
    # 4. ACCESSIBILITY
    # -------------------------------------------------------------------------

    def analyze_accessibility(self, template: Template) -> AccessibilityAnalysis:
        cfg = self.accessibility_cfg
        issues, fixes = [], []
        contrast = self._text_contrast(template)

        tier = self.classify_contrast(contrast)
        if tier == WCAGTier.NONE:
            issues.append("Insufficient color contrast (below AA standards)")
            fixes.append(f"Increase color contrast to at least {cfg['aa_min_contrast']}:1")
        elif tier == WCAGTier.PARTIAL:
            issues.append("Color contrast below AAA standards")
            fixes.append(f"Increase color contrast to {cfg['aaa_min_contrast']}:1 for AAA compliance")

        if _below(template.styling.fonts.primary.size, cfg["min_font_size"]):
            issues.append("Font size below accessibility recommendations")
            fixes.append(f"Use minimum {cfg['min_font_size']}pt font size for body text")
            tier = tier.downgrade()

        return AccessibilityAnalysis(
            wcag_compliance=tier,
            contrast_ratio=round(contrast, 2),
            accessibility_issues=issues,
            accessibility_fixes=fixes,
        )

    def classify_contrast(self, contrast: float) -> WCAGTier:
        cfg = self.accessibility_cfg
        if contrast < cfg["partial_min_contrast"]:
            return WCAGTier.NONE
        if contrast < cfg["aa_min_contrast"]:
            return WCAGTier.PARTIAL
        if contrast < cfg["aaa_min_contrast"]:
            return WCAGTier.AA
        return WCAGTier.AAA

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    @staticmethod
    def _text_contrast(template: Template) -> float:
        colors = template.styling.colors
        return contrast_ratio(colors.text_primary, colors.background)

    def _composite_score(
        self,
        readability: ReadabilityAnalysis,
        conversion: ConversionAnalysis,
        branding: BrandingAnalysis,
        accessibility: AccessibilityAnalysis,
    ) -> float:
        """Average of the four axes on a 0–10 scale."""
        tier_points = self.tier_points[accessibility.wcag_compliance.value]
        score = (
            readability.score
            + conversion.predicted_payment_rate / 10
            + branding.consistency_score
            + tier_points
        ) / 4
        return round(score, 4)
