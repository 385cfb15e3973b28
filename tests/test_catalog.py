"""
test_catalog.py
----------------
Tests for the data layer: configuration, domain models, template catalog,
colour math and styling merge.

Run from the project root:
    python -m pytest tests/test_catalog.py -v
"""

import sys
import os
import copy
import json
import pytest

# Ensure the project root is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from config.config_loader import (
    load_config,
    load_templates,
    get_scoring_config,
    get_scoring_rule_config,
    reset_config,
)
from core.catalog import TemplateCatalog
from core.color import contrast_ratio, parse_hex_color, relative_luminance
from core.errors import TemplateNotFoundError, ValidationError
from core.models import (
    Customer,
    Industry,
    Invoice,
    PaymentUrgency,
    Preferences,
    Template,
    TemplateCategory,
    WCAGTier,
)
from core.styling import merge_styling


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config_cache():
    """Clears config cache before each test for isolation."""
    reset_config()
    yield
    reset_config()


def _template_dict(template_id: str = "professional_modern", **overrides) -> dict:
    """Helper: plain-dict copy of a default template with top-level overrides."""
    entry = next(e for e in load_templates() if e["id"] == template_id)
    data = copy.deepcopy(entry)
    data.update(overrides)
    return data


# =============================================================================
# CONFIG TESTS
# =============================================================================

class TestConfig:
    def test_config_loads_successfully(self):
        config = load_config()
        for block in ("catalog", "scoring", "customizations", "personalization", "optimization", "output"):
            assert block in config

    def test_default_weights_sum_to_one(self):
        weights = get_scoring_config()["weights"]
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_every_rule_has_bonus(self):
        for rule in ("short_terms", "high_value", "industry_match", "fast_payment"):
            assert "bonus" in get_scoring_rule_config(rule)

    def test_missing_rule_raises(self):
        with pytest.raises(KeyError):
            get_scoring_rule_config("nonexistent_rule")

    def test_templates_file_loads_in_order(self):
        ids = [e["id"] for e in load_templates()]
        assert ids == ["professional_modern", "creative_bold", "minimal_clean"]


# =============================================================================
# MODEL TESTS
# =============================================================================

class TestModels:
    def test_invoice_from_dict(self):
        invoice = Invoice.from_dict({
            "id": "inv-1",
            "invoice_number": "INV-1001",
            "total_amount": "1250.50",
            "created_at": "2024-03-01T09:30:00",
            "line_items": [{"description": "Consulting", "quantity": 5, "unit_price": 250.1}],
        })
        assert invoice.total_amount == pytest.approx(1250.5)
        assert invoice.created_at.year == 2024
        assert invoice.line_items[0].total == pytest.approx(1250.5)

    def test_invoice_missing_fields_raise(self):
        with pytest.raises(ValidationError, match="invoice_number"):
            Invoice.from_dict({"id": "inv-1", "total_amount": 10, "created_at": "2024-03-01"})

    def test_customer_missing_payment_terms_raises(self):
        with pytest.raises(ValidationError, match="payment_terms"):
            Customer.from_dict({"id": "c1", "name": "Acme"})

    def test_customer_defaults_for_history_signals(self):
        customer = Customer.from_dict({"id": "c1", "name": "Acme", "payment_terms": "30"})
        assert customer.payment_terms == 30
        assert customer.is_repeat_customer is False
        assert customer.average_invoice_amount is None

    def test_preferences_parse_enums(self):
        prefs = Preferences.from_dict({"industry": "Finance", "payment_urgency": "HIGH"})
        assert prefs.industry == Industry.FINANCE
        assert prefs.payment_urgency == PaymentUrgency.HIGH
        assert prefs.brand_personality is None

    def test_preferences_reject_unknown_values(self):
        with pytest.raises(ValidationError, match="industry"):
            Preferences.from_dict({"industry": "aerospace"})

    def test_preferences_reject_unknown_keys(self):
        with pytest.raises(ValidationError, match="Unknown preference keys"):
            Preferences.from_dict({"colour_scheme": "dark"})

    def test_wcag_downgrade_never_below_none(self):
        assert WCAGTier.AAA.downgrade() == WCAGTier.AA
        assert WCAGTier.AA.downgrade() == WCAGTier.PARTIAL
        assert WCAGTier.PARTIAL.downgrade() == WCAGTier.NONE
        assert WCAGTier.NONE.downgrade() == WCAGTier.NONE

    def test_template_is_frozen(self):
        template = Template.from_dict(_template_dict())
        with pytest.raises(Exception):
            template.name = "Changed"


# =============================================================================
# CATALOG TESTS
# =============================================================================

class TestTemplateCatalog:
    def test_catalog_loads_from_config(self):
        catalog = TemplateCatalog.from_config()
        assert len(catalog) == 3
        assert [t.id for t in catalog.load()] == ["professional_modern", "creative_bold", "minimal_clean"]

    def test_get_unknown_raises(self):
        catalog = TemplateCatalog.from_config()
        with pytest.raises(TemplateNotFoundError):
            catalog.get("does_not_exist")
        # Also a KeyError for callers that only know the builtin
        with pytest.raises(KeyError):
            catalog.get("does_not_exist")

    def test_by_category(self):
        catalog = TemplateCatalog.from_config()
        assert [t.id for t in catalog.by_category("creative")] == ["creative_bold"]
        assert catalog.by_category(TemplateCategory.BRANDED) == []

    def test_format_usage_stats(self):
        catalog = TemplateCatalog.from_config()
        text = catalog.format_usage_stats(catalog.get("professional_modern"))
        assert text == "Used 1,247 times • 87.5% payment rate • 18.5 day avg"

    def test_to_frame(self):
        frame = TemplateCatalog.from_config().to_frame()
        assert list(frame["template_id"]) == ["professional_modern", "creative_bold", "minimal_clean"]
        assert "payment_conversion_rate" in frame.columns

    def test_duplicate_ids_rejected(self):
        template = Template.from_dict(_template_dict())
        with pytest.raises(ValidationError, match="Duplicate"):
            TemplateCatalog([template, template])

    @pytest.mark.parametrize("template_id", ["professional_modern", "creative_bold", "minimal_clean"])
    def test_export_import_round_trip(self, template_id):
        catalog = TemplateCatalog.from_config()
        original = catalog.get(template_id)
        imported = catalog.import_template(catalog.export_template(template_id))
        assert imported == original
        assert len(catalog) == 3

    def test_round_trip_through_json_string(self):
        catalog = TemplateCatalog.from_config()
        payload = json.dumps(catalog.export_template("creative_bold"))
        assert catalog.import_template(payload) == catalog.get("creative_bold")

    def test_partial_import_falls_back_to_base(self):
        catalog = TemplateCatalog.from_config()
        imported = catalog.import_template({
            "id": "acme_branded",
            "name": "Acme Branded",
            "category": "branded",
            "styling": {"colors": {"primary": "#FF0000"}},
        })
        base = catalog.get("professional_modern")
        assert imported.styling.colors.primary == "#FF0000"
        assert imported.styling.colors.text_primary == base.styling.colors.text_primary
        assert imported.styling.fonts == base.styling.fonts
        assert imported.layout == base.layout
        # New ids are appended, preserving tie-break order
        assert [t.id for t in catalog.load()][-1] == "acme_branded"
        assert len(catalog) == 4

    def test_import_replaces_existing_in_place(self):
        catalog = TemplateCatalog.from_config()
        data = catalog.export_template("creative_bold")
        data["name"] = "Creative Bold v2"
        catalog.import_template(data)
        assert [t.id for t in catalog.load()] == ["professional_modern", "creative_bold", "minimal_clean"]
        assert catalog.get("creative_bold").name == "Creative Bold v2"

    def test_import_without_id_fails_without_mutation(self):
        catalog = TemplateCatalog.from_config()
        before = catalog.load()
        with pytest.raises(ValidationError):
            catalog.import_template({"name": "No id", "category": "custom"})
        assert catalog.load() == before

    def test_import_unknown_category_fails_without_mutation(self):
        catalog = TemplateCatalog.from_config()
        before = catalog.load()
        with pytest.raises(ValidationError, match="template category"):
            catalog.import_template({"id": "neon", "category": "neon"})
        assert catalog.load() == before

    def test_import_invalid_json_string(self):
        catalog = TemplateCatalog.from_config()
        with pytest.raises(ValidationError, match="JSON"):
            catalog.import_template("{not json")

    def test_empty_name_survives_import(self):
        catalog = TemplateCatalog.from_config()
        imported = catalog.import_template({"id": "unnamed", "name": "", "category": "custom"})
        assert imported.name == ""
        assert catalog.import_template(catalog.export_template("unnamed")) == imported

    def test_missing_name_defaults_to_id(self):
        catalog = TemplateCatalog.from_config()
        assert catalog.import_template({"id": "nameless", "category": "custom"}).name == "nameless"

    def test_payment_methods_string_rejected(self):
        catalog = TemplateCatalog.from_config()
        before = catalog.load()
        with pytest.raises(ValidationError, match="payment_methods must be a list"):
            catalog.import_template({"id": "ach_only", "category": "custom", "payment_methods": "ACH"})
        assert catalog.load() == before

    def test_payment_methods_list_kept_whole(self):
        catalog = TemplateCatalog.from_config()
        imported = catalog.import_template({"id": "ach_only", "category": "custom", "payment_methods": ["ACH"]})
        assert imported.payment_methods == ("ACH",)

    def test_import_without_base_requires_full_template(self):
        catalog = TemplateCatalog([])
        with pytest.raises(ValidationError, match="missing required field"):
            catalog.import_template({"id": "bare", "category": "custom"})
        assert len(catalog) == 0


# =============================================================================
# COLOUR TESTS
# =============================================================================

class TestColor:
    def test_black_on_white_is_max(self):
        assert contrast_ratio("#000000", "#FFFFFF") == pytest.approx(21.0)

    def test_same_color_is_min(self):
        assert contrast_ratio("#3B82F6", "#3B82F6") == pytest.approx(1.0)

    @pytest.mark.parametrize("c1, c2", [
        ("#111827", "#FFFFFF"),
        ("#777777", "#FFFFFF"),
        ("#7C3AED", "#FEF3C7"),
        ("#000", "#abc"),
    ])
    def test_contrast_is_symmetric_and_bounded(self, c1, c2):
        forward = contrast_ratio(c1, c2)
        assert forward == pytest.approx(contrast_ratio(c2, c1))
        assert 1.0 <= forward <= 21.0

    def test_known_reference_values(self):
        # Reference values from the WCAG contrast checker
        assert contrast_ratio("#777777", "#FFFFFF") == pytest.approx(4.48, abs=0.01)
        assert contrast_ratio("#767676", "#FFFFFF") == pytest.approx(4.54, abs=0.01)

    def test_shorthand_hex(self):
        assert parse_hex_color("#FFF") == (255, 255, 255)
        assert parse_hex_color("3b82f6") == (59, 130, 246)

    @pytest.mark.parametrize("bad", ["", "red", "#12345", None, 42, "#GGGGGG"])
    def test_unparseable_colors_do_not_raise(self, bad):
        assert parse_hex_color(bad) is None
        assert contrast_ratio(bad, "#FFFFFF") == 1.0

    def test_luminance_range(self):
        assert relative_luminance((0, 0, 0)) == pytest.approx(0.0)
        assert relative_luminance((255, 255, 255)) == pytest.approx(1.0)


# =============================================================================
# STYLING MERGE TESTS
# =============================================================================

class TestStylingMerge:
    def test_color_override_builds_new_styling(self):
        template = Template.from_dict(_template_dict())
        merged = merge_styling(template.styling, {"colors": {"primary": "#0066CC", "accent": "#00AA88"}})
        assert merged.styling.colors.primary == "#0066CC"
        assert merged.styling.colors.accent == "#00AA88"
        assert merged.styling.colors.background == template.styling.colors.background
        # Source template untouched
        assert template.styling.colors.primary == "#1F2937"

    def test_element_styles_carried(self):
        template = Template.from_dict(_template_dict())
        customizations = {
            "due_date_styling": {"color": "#DC2626", "font_weight": "bold", "font_size": "18px"},
            "amount_styling": {"font_size": "24px", "font_weight": "bold", "color": "#1F2937"},
        }
        merged = merge_styling(template.styling, customizations)
        assert merged.styling == template.styling
        assert set(merged.element_styles) == {"due_date_styling", "amount_styling"}

    def test_no_customizations_is_identity(self):
        template = Template.from_dict(_template_dict())
        merged = merge_styling(template.styling, None)
        assert merged.styling == template.styling
        assert merged.element_styles == {}

    def test_unknown_key_rejected(self):
        template = Template.from_dict(_template_dict())
        with pytest.raises(ValidationError, match="Unknown customization keys"):
            merge_styling(template.styling, {"sparkles": {"on": True}})

    def test_unknown_color_name_rejected(self):
        template = Template.from_dict(_template_dict())
        with pytest.raises(ValidationError, match="colour"):
            merge_styling(template.styling, {"colors": {"fuchsia": "#FF00FF"}})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
