"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. RecommendationEngine   →  ranks catalog templates, derives customizations
    2. merge_styling          →  applies customizations to the chosen template
    3. PersonalizationEngine  →  recipient-specific text
    4. OptimizationAnalyzer   →  four-part quality report
    5. DocumentRenderer       →  external; only called by generate()

This is the single entry point for running the engine. Everything else
is internal machinery.

Usage:
    from pipeline import InvoiceDesignPipeline

    pipeline = InvoiceDesignPipeline()
    plan = pipeline.run(invoice, customer, preferences)
    result = pipeline.generate(invoice, plan.template, renderer,
                               plan.recommendation.customizations, plan.personalization)
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import pandas as pd

from analysis.optimization_analyzer import OptimizationAnalyzer
from config.config_loader import get_output_config
from core.catalog import TemplateCatalog
from core.errors import RenderError, ValidationError
from core.models import (
    Customer,
    Invoice,
    OptimizationReport,
    Personalization,
    Preferences,
    RecommendationResult,
    Template,
)
from core.rendering import (
    DocumentRenderer,
    GenerationMetadata,
    GenerationResult,
    RenderRequest,
    build_file_name,
)
from core.styling import MergedStyling, merge_styling
from engines.personalization_engine import PersonalizationEngine
from engines.recommendation_engine import RecommendationEngine

logger = logging.getLogger(__name__)


@dataclass
class DesignPlan:
    """Everything the renderer needs, computed synchronously."""
    recommendation: RecommendationResult
    template: Template
    styling: MergedStyling
    personalization: Personalization
    report: OptimizationReport


class InvoiceDesignPipeline:
    """
    End-to-end invoice design pipeline.

    Every collaborator can be injected; anything omitted is built from
    config.yaml and the default template catalog.
    """

    def __init__(
        self,
        catalog: Optional[TemplateCatalog] = None,
        recommender: Optional[RecommendationEngine] = None,
        personalizer: Optional[PersonalizationEngine] = None,
        analyzer: Optional[OptimizationAnalyzer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog if catalog is not None else TemplateCatalog.from_config()
        self.recommender = recommender if recommender is not None else RecommendationEngine(self.catalog)
        self.personalizer = personalizer if personalizer is not None else PersonalizationEngine()
        self.analyzer = analyzer if analyzer is not None else OptimizationAnalyzer()
        self.clock = clock
        self.file_name_pattern = get_output_config()["file_name_pattern"]

        logger.info(f"Pipeline initialized. Catalog: {len(self.catalog)} templates.")

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(
        self,
        invoice: Invoice,
        customer: Customer,
        preferences: Preferences | Dict[str, Any] | None = None,
    ) -> DesignPlan:
        """
        Recommend, merge, personalize and analyze. Does not render.

        Raises:
            ValidationError: missing required input, raised before any scoring.
        """
        invoice.validate()
        customer.validate()
        if not isinstance(preferences, Preferences):
            preferences = Preferences.from_dict(preferences)

        # --- Stage 1: Recommendation ---
        recommendation = self.recommender.recommend(invoice, customer, preferences)
        if not recommendation.recommended:
            raise ValidationError("Template catalog is empty; nothing to recommend")
        template = recommendation.recommended[0]
        logger.info(f"Stage 1 complete. Top template: {template.id}.")

        # --- Stage 2: Styling ---
        styling = merge_styling(template.styling, recommendation.customizations)
        logger.info(f"Stage 2 complete. Customizations: {list(recommendation.customizations)}.")

        # --- Stage 3: Personalization ---
        personalization = self.personalizer.personalize(invoice, customer)
        logger.info(f"Stage 3 complete. Special notes: {len(personalization.special_notes)}.")

        # --- Stage 4: Optimization report ---
        report = self.analyzer.analyze(invoice, template, recommendation.customizations)
        logger.info(f"Stage 4 complete. Optimization score: {report.optimization_score}.")

        return DesignPlan(
            recommendation=recommendation,
            template=template,
            styling=styling,
            personalization=personalization,
            report=report,
        )

    def generate(
        self,
        invoice: Invoice,
        template: Template,
        renderer: DocumentRenderer,
        customizations: Optional[Dict[str, Dict[str, Any]]] = None,
        personalization: Optional[Personalization] = None,
    ) -> GenerationResult:
        """
        Produce the final document through the external renderer.

        Raises:
            ValidationError: bad invoice or customization keys.
            RenderError: anything the renderer raised. Not retried.
        """
        invoice.validate()
        start = time.perf_counter()
        customizations = customizations or {}

        styling = merge_styling(template.styling, customizations)
        report = self.analyzer.analyze(invoice, template, customizations)
        request = RenderRequest(invoice=invoice, template=template, styling=styling, personalization=personalization)

        try:
            document = renderer.render(request)
        except Exception as e:
            logger.error(f"Renderer failed for invoice {invoice.invoice_number}: {e}")
            raise RenderError(f"Renderer failed for invoice {invoice.invoice_number}: {e}") from e

        elapsed_ms = round((time.perf_counter() - start) * 1000, 3)
        result = GenerationResult(
            document=document,
            file_name=build_file_name(invoice, self.file_name_pattern, self.clock()),
            optimization_score=report.optimization_score,
            metadata=GenerationMetadata(
                template_used=template.name,
                customizations_applied=list(customizations.keys()),
                generation_time_ms=elapsed_ms,
                file_size_bytes=len(document),
            ),
        )
        logger.info(f"Generated {result.file_name} ({result.metadata.file_size_bytes:,} bytes, {elapsed_ms} ms).")
        return result

    # -------------------------------------------------------------------------
    # OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    @staticmethod
    def recommendations_frame(result: RecommendationResult) -> pd.DataFrame:
        """One row per shortlisted template, in rank order."""
        columns = [
            "rank", "template_id", "name", "category", "score", "base_score",
            "payment_conversion_rate", "avg_payment_time", "reasons",
        ]
        if not result.scored:
            return pd.DataFrame(columns=columns)

        rows = []
        for rank, s in enumerate(result.scored, start=1):
            rows.append({
                "rank": rank,
                "template_id": s.template.id,
                "name": s.template.name,
                "category": s.template.category.value,
                "score": s.score,
                "base_score": s.base_score,
                "payment_conversion_rate": s.template.ai_optimization.payment_conversion_rate,
                "avg_payment_time": s.template.usage_stats.avg_payment_time,
                "reasons": " | ".join(s.reasons),
            })
        return pd.DataFrame(rows, columns=columns)
