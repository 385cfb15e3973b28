"""
errors.py
----------
Exception taxonomy for the design engine.

Only missing or malformed required input fails fast. Numeric analyzers
clamp instead of raising, so these are never thrown for extreme values.
"""


class InvoiceDesignError(Exception):
    """Base class for all engine errors."""


class ValidationError(InvoiceDesignError, ValueError):
    """Missing required invoice/customer field, bad preference value, or an
    unusable template import."""


class TemplateNotFoundError(InvoiceDesignError, KeyError):
    """Catalog lookup miss."""

    def __init__(self, template_id: str):
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Template not found: '{self.template_id}'"


class RenderError(InvoiceDesignError):
    """Opaque failure surfaced from the external renderer. Never retried here."""


class ConfigurationError(InvoiceDesignError, ValueError):
    """Scoring weights or other configuration values are unusable."""
