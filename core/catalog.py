"""
catalog.py
-----------
Template catalog.

Holds the ordered set of available templates and their historical
performance statistics. Built once (from templates.yaml by default, or from
a fixture list in tests) and read by every engine. Order is significant: it
is the tie-break key for recommendations.

The catalog is a read-only snapshot. import_template() builds a complete new
tuple and swaps it in with a single assignment, so readers never observe a
half-applied import.
"""

import copy
import json
import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from config.config_loader import load_templates, get_catalog_config
from core.errors import TemplateNotFoundError, ValidationError
from core.models import Template, TemplateCategory

logger = logging.getLogger(__name__)


def _deep_merge(base: dict, override: dict) -> dict:
    """Returns base with override applied key-by-key. Lists are replaced, not merged."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class TemplateCatalog:
    """
    Ordered, effectively-immutable template collection.

    Usage:
        catalog = TemplateCatalog.from_config()
        templates = catalog.load()
    """

    def __init__(self, templates: Iterable[Template], base_template_id: Optional[str] = None):
        self._templates: tuple[Template, ...] = tuple(templates)
        ids = [t.id for t in self._templates]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"Duplicate template ids in catalog: {ids}")
        self.base_template_id = base_template_id or (ids[0] if ids else None)

    @classmethod
    def from_config(cls) -> "TemplateCatalog":
        """Builds the default catalog from templates.yaml."""
        templates = [Template.from_dict(entry) for entry in load_templates()]
        catalog = cls(templates, base_template_id=get_catalog_config().get("base_template_id"))
        logger.info(f"Template catalog loaded: {[t.id for t in templates]}")
        return catalog

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def load(self) -> List[Template]:
        """Returns the ordered template list."""
        return list(self._templates)

    def get(self, template_id: str) -> Template:
        for template in self._templates:
            if template.id == template_id:
                return template
        raise TemplateNotFoundError(template_id)

    def by_category(self, category: TemplateCategory | str) -> List[Template]:
        """Templates of one category, in catalog order."""
        category = TemplateCategory(category)
        return [t for t in self._templates if t.category == category]

    @staticmethod
    def format_usage_stats(template: Template) -> str:
        stats = template.usage_stats
        return (
            f"Used {stats.times_used:,} times • "
            f"{stats.payment_rate * 100:.1f}% payment rate • "
            f"{stats.avg_payment_time:.1f} day avg"
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per template with its headline metrics."""
        rows = [
            {
                "template_id": t.id,
                "name": t.name,
                "category": t.category.value,
                "readability_score": t.ai_optimization.readability_score,
                "brand_consistency": t.ai_optimization.brand_consistency,
                "payment_conversion_rate": t.ai_optimization.payment_conversion_rate,
                "mobile_friendly": t.ai_optimization.mobile_friendly,
                "times_used": t.usage_stats.times_used,
                "payment_rate": t.usage_stats.payment_rate,
                "avg_payment_time": t.usage_stats.avg_payment_time,
            }
            for t in self._templates
        ]
        return pd.DataFrame(rows)

    # -------------------------------------------------------------------------
    # IMPORT / EXPORT
    # -------------------------------------------------------------------------

    def export_template(self, template_id: str) -> Dict:
        """Plain, JSON-compatible dict. import_template() accepts it unchanged."""
        return self.get(template_id).to_dict()

    def import_template(self, data: Dict | str) -> Template:
        """
        Validates and merges a template into the catalog.

        Missing layout/styling/statistics fields fall back to the base
        template's values. An existing id is replaced in place; a new id is
        appended.

        Raises:
            ValidationError: malformed JSON, missing id, unknown category, or
                a merge that still cannot satisfy required fields. The catalog
                is left untouched.
        """
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Template import is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("Template import must be a JSON object")
        if not data.get("id"):
            raise ValidationError("Template import requires a non-empty string 'id'")

        merged = self._merge_with_base(data)
        template = Template.from_dict(merged)

        templates = list(self._templates)
        for i, existing in enumerate(templates):
            if existing.id == template.id:
                templates[i] = template
                logger.info(f"Template '{template.id}' replaced in catalog")
                break
        else:
            templates.append(template)
            logger.info(f"Template '{template.id}' added to catalog")

        self._templates = tuple(templates)
        return template

    def _merge_with_base(self, data: Dict) -> Dict:
        base = self._base_template()
        if base is None:
            return data
        base_dict = base.to_dict()
        # Identity and presentation text never come from the base.
        for key in ("id", "name", "description", "preview_image", "category"):
            base_dict.pop(key, None)
        return _deep_merge(base_dict, data)

    def _base_template(self) -> Optional[Template]:
        if self.base_template_id is None:
            return None
        try:
            return self.get(self.base_template_id)
        except TemplateNotFoundError:
            return self._templates[0] if self._templates else None

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self):
        return iter(self._templates)

    def __repr__(self) -> str:
        return f"TemplateCatalog(templates={[t.id for t in self._templates]})"
