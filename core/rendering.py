"""
rendering.py
-------------
Contract with the external document renderer.

The engine prepares content and style instructions; producing bytes is the
renderer's job. It is called strictly after every synchronous step has
finished. Retries and cancellation belong to the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.models import Invoice, Personalization, Template
from core.styling import MergedStyling


@dataclass(frozen=True)
class RenderRequest:
    invoice: Invoice
    template: Template
    styling: MergedStyling
    personalization: Optional[Personalization] = field(default=None, hash=False)


class DocumentRenderer(ABC):
    """Implemented outside this package (PDF engine, HTML-to-PDF service, ...)."""

    @abstractmethod
    def render(self, request: RenderRequest) -> bytes:
        ...


@dataclass
class GenerationMetadata:
    template_used: str
    customizations_applied: list[str]
    generation_time_ms: float
    file_size_bytes: int


@dataclass
class GenerationResult:
    document: bytes
    file_name: str
    optimization_score: float
    metadata: GenerationMetadata


def build_file_name(invoice: Invoice, pattern: str, now: Optional[datetime] = None) -> str:
    """invoice_{invoice_number}_{unix_timestamp}.pdf by default."""
    now = now or datetime.now()
    return pattern.format(invoice_number=invoice.invoice_number, timestamp=int(now.timestamp()))
