"""
styling.py
-----------
Applies a customization set on top of a template's style configuration.

The template is never touched: a new StyleConfig is built with the colour
override applied, and element-level emphasis styles (payment highlight,
due date, amount) are carried alongside for the renderer.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

from core.errors import ValidationError
from core.models import ColorPalette, StyleConfig, to_plain

ELEMENT_STYLE_KEYS = ("payment_highlight", "due_date_styling", "amount_styling")
CUSTOMIZATION_KEYS = ("colors",) + ELEMENT_STYLE_KEYS


@dataclass(frozen=True)
class MergedStyling:
    styling: StyleConfig
    element_styles: Dict[str, Dict[str, Any]] = field(default_factory=dict, hash=False)

    def to_dict(self) -> dict:
        return to_plain(self)


def merge_styling(styling: StyleConfig, customizations: Optional[Dict[str, Dict[str, Any]]] = None) -> MergedStyling:
    """
    Raises:
        ValidationError: unknown customization key or unknown colour name.
    """
    customizations = customizations or {}
    unknown = [k for k in customizations if k not in CUSTOMIZATION_KEYS]
    if unknown:
        raise ValidationError(f"Unknown customization keys: {unknown}. Allowed: {list(CUSTOMIZATION_KEYS)}")

    merged = styling
    color_override = customizations.get("colors")
    if color_override:
        palette_fields = {f.name for f in fields(ColorPalette)}
        bad = sorted(set(color_override) - palette_fields)
        if bad:
            raise ValidationError(f"Unknown colour names in customization: {bad}")
        palette = replace(styling.colors, **color_override)
        merged = replace(styling, colors=palette)

    element_styles = {k: dict(customizations[k]) for k in ELEMENT_STYLE_KEYS if k in customizations}
    return MergedStyling(styling=merged, element_styles=element_styles)
