"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- Template (and its layout/styling parts): catalog data. Frozen, so a
  loaded template can only change through an explicit catalog import.
  Every part has from_dict()/to_dict() so export → import is lossless.

- Invoice, Customer, Preferences: read-only inputs supplied by the
  surrounding application.

- Personalization, OptimizationReport, RecommendationResult: engine outputs.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from core.errors import ValidationError


# =============================================================================
# ENUMERATIONS
# =============================================================================

class TemplateCategory(str, Enum):
    PROFESSIONAL = "professional"
    CREATIVE = "creative"
    MINIMAL = "minimal"
    BRANDED = "branded"
    CUSTOM = "custom"


class Industry(str, Enum):
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    LEGAL = "legal"
    CONSULTING = "consulting"
    CREATIVE = "creative"
    MARKETING = "marketing"
    DESIGN = "design"
    TECHNOLOGY = "technology"
    RETAIL = "retail"
    CONSTRUCTION = "construction"
    HOME_SERVICES = "home_services"
    OTHER = "other"


class BrandPersonality(str, Enum):
    PROFESSIONAL = "professional"
    CREATIVE = "creative"
    MINIMAL = "minimal"
    BOLD = "bold"


class PaymentUrgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WCAGTier(str, Enum):
    """WCAG compliance tiers, declared weakest first."""
    NONE = "none"
    PARTIAL = "partial"
    AA = "AA"
    AAA = "AAA"

    @property
    def rank(self) -> int:
        return list(WCAGTier).index(self)

    def downgrade(self) -> "WCAGTier":
        """One step weaker, never below NONE."""
        return list(WCAGTier)[max(self.rank - 1, 0)]


def _parse_enum(enum_cls, value, field_name: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = [m.value for m in enum_cls]
        raise ValidationError(f"Unknown {field_name} '{value}'. Allowed: {allowed}") from None


def to_plain(obj: Any) -> Any:
    """Recursively converts dataclasses/enums/tuples into JSON-compatible values."""
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {k: to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


# =============================================================================
# TEMPLATE LAYOUT
# =============================================================================

@dataclass(frozen=True)
class Position:
    x: float
    y: float

    @classmethod
    def from_dict(cls, d: dict) -> "Position":
        return cls(x=d["x"], y=d["y"])


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @classmethod
    def from_dict(cls, d: dict) -> "Size":
        return cls(width=d["width"], height=d["height"])


@dataclass(frozen=True)
class Padding:
    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def from_dict(cls, d: dict) -> "Padding":
        return cls(top=d["top"], right=d["right"], bottom=d["bottom"], left=d["left"])


@dataclass(frozen=True)
class BorderConfig:
    width: float
    color: str
    style: str                       # "solid" | "dashed" | "dotted"
    radius: Optional[float] = None

    @classmethod
    def from_dict(cls, d: dict) -> "BorderConfig":
        return cls(width=d["width"], color=d["color"], style=d["style"], radius=d.get("radius"))


@dataclass(frozen=True)
class LayoutSection:
    position: Position
    size: Size
    alignment: str                   # "left" | "center" | "right"
    padding: Padding
    visible: bool = True
    background_color: Optional[str] = None
    border: Optional[BorderConfig] = None

    @classmethod
    def from_dict(cls, d: dict) -> "LayoutSection":
        return cls(
            position=Position.from_dict(d["position"]),
            size=Size.from_dict(d["size"]),
            alignment=d["alignment"],
            padding=Padding.from_dict(d["padding"]),
            visible=bool(d.get("visible", True)),
            background_color=d.get("background_color"),
            border=BorderConfig.from_dict(d["border"]) if d.get("border") else None,
        )


@dataclass(frozen=True)
class WatermarkConfig:
    text: str
    opacity: float
    rotation: float
    position: str                    # "center" | "diagonal"
    font_size: float
    color: str

    @classmethod
    def from_dict(cls, d: dict) -> "WatermarkConfig":
        return cls(**{f.name: d[f.name] for f in fields(cls)})


LAYOUT_SECTIONS = (
    "header", "company_info", "customer_info", "invoice_details",
    "line_items", "totals", "payment_info", "footer",
)


@dataclass(frozen=True)
class TemplateLayout:
    header: LayoutSection
    company_info: LayoutSection
    customer_info: LayoutSection
    invoice_details: LayoutSection
    line_items: LayoutSection
    totals: LayoutSection
    payment_info: LayoutSection
    footer: LayoutSection
    watermark: Optional[WatermarkConfig] = None

    @classmethod
    def from_dict(cls, d: dict) -> "TemplateLayout":
        sections = {name: LayoutSection.from_dict(d[name]) for name in LAYOUT_SECTIONS}
        watermark = WatermarkConfig.from_dict(d["watermark"]) if d.get("watermark") else None
        return cls(watermark=watermark, **sections)


# =============================================================================
# TEMPLATE STYLING
# =============================================================================

@dataclass(frozen=True)
class FontConfig:
    family: str
    size: float                      # Points
    weight: str                      # "normal" | "bold" | "100".."900"
    color: str
    line_height: float

    @classmethod
    def from_dict(cls, d: dict) -> "FontConfig":
        return cls(
            family=d["family"], size=d["size"], weight=str(d["weight"]),
            color=d["color"], line_height=d["line_height"],
        )


@dataclass(frozen=True)
class FontSet:
    primary: FontConfig
    secondary: FontConfig
    accent: FontConfig

    @classmethod
    def from_dict(cls, d: dict) -> "FontSet":
        return cls(
            primary=FontConfig.from_dict(d["primary"]),
            secondary=FontConfig.from_dict(d["secondary"]),
            accent=FontConfig.from_dict(d["accent"]),
        )


@dataclass(frozen=True)
class ColorPalette:
    primary: str
    secondary: str
    accent: str
    text_primary: str
    text_secondary: str
    background: str
    border: str
    success: str
    warning: str
    error: str

    @classmethod
    def from_dict(cls, d: dict) -> "ColorPalette":
        return cls(**{f.name: d[f.name] for f in fields(cls)})


@dataclass(frozen=True)
class SpacingConfig:
    section_gap: float
    line_height: float
    paragraph_spacing: float
    table_cell_padding: float

    @classmethod
    def from_dict(cls, d: dict) -> "SpacingConfig":
        return cls(**{f.name: d[f.name] for f in fields(cls)})


@dataclass(frozen=True)
class LogoConfig:
    url: str
    width: float
    height: float
    position: str                    # "top-left" | "top-center" | "top-right"

    @classmethod
    def from_dict(cls, d: dict) -> "LogoConfig":
        return cls(url=d.get("url") or "", width=d["width"], height=d["height"], position=d["position"])


@dataclass(frozen=True)
class BrandElement:
    type: str                        # "text" | "image" | "shape"
    content: str
    position: Position
    styling: dict = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, d: dict) -> "BrandElement":
        return cls(
            type=d["type"], content=d["content"],
            position=Position.from_dict(d["position"]),
            styling=dict(d.get("styling") or {}),
        )


@dataclass(frozen=True)
class BrandingConfig:
    logo: LogoConfig
    company_colors: tuple[str, ...] = ()
    brand_elements: tuple[BrandElement, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> "BrandingConfig":
        return cls(
            logo=LogoConfig.from_dict(d["logo"]),
            company_colors=tuple(d.get("company_colors") or ()),
            brand_elements=tuple(BrandElement.from_dict(e) for e in d.get("brand_elements") or ()),
        )


@dataclass(frozen=True)
class StyleConfig:
    fonts: FontSet
    colors: ColorPalette
    spacing: SpacingConfig
    branding: BrandingConfig

    @classmethod
    def from_dict(cls, d: dict) -> "StyleConfig":
        return cls(
            fonts=FontSet.from_dict(d["fonts"]),
            colors=ColorPalette.from_dict(d["colors"]),
            spacing=SpacingConfig.from_dict(d["spacing"]),
            branding=BrandingConfig.from_dict(d["branding"]),
        )


# =============================================================================
# TEMPLATE
# =============================================================================

@dataclass(frozen=True)
class AIOptimization:
    readability_score: float         # 0–10
    brand_consistency: float         # 0–10
    payment_conversion_rate: float   # 0–100
    mobile_friendly: bool

    @classmethod
    def from_dict(cls, d: dict) -> "AIOptimization":
        return cls(
            readability_score=d["readability_score"],
            brand_consistency=d["brand_consistency"],
            payment_conversion_rate=d["payment_conversion_rate"],
            mobile_friendly=bool(d["mobile_friendly"]),
        )


@dataclass(frozen=True)
class UsageStats:
    times_used: int
    payment_rate: float              # 0–1
    avg_payment_time: float          # Days

    @classmethod
    def from_dict(cls, d: dict) -> "UsageStats":
        return cls(times_used=d["times_used"], payment_rate=d["payment_rate"], avg_payment_time=d["avg_payment_time"])


@dataclass(frozen=True)
class Template:
    """A visual invoice template plus its historical performance."""

    id: str
    name: str
    category: TemplateCategory
    layout: TemplateLayout
    styling: StyleConfig
    ai_optimization: AIOptimization
    usage_stats: UsageStats
    payment_methods: tuple[str, ...] = ()
    description: str = ""
    preview_image: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "Template":
        """
        Builds a Template from its plain-dict form.

        Raises:
            ValidationError: missing id, unknown category, or any missing /
                malformed nested field.
        """
        template_id = d.get("id")
        if not template_id or not isinstance(template_id, str):
            raise ValidationError("Template import requires a non-empty string 'id'")
        category = _parse_enum(TemplateCategory, d.get("category"), "template category")
        if category is None:
            raise ValidationError(f"Template '{template_id}' has no category")

        payment_methods = d.get("payment_methods")
        if payment_methods is None:
            payment_methods = ()
        elif not isinstance(payment_methods, (list, tuple)):
            raise ValidationError(
                f"Template '{template_id}' payment_methods must be a list, got {type(payment_methods).__name__}"
            )

        try:
            return cls(
                id=template_id,
                name=d.get("name", template_id),
                category=category,
                layout=TemplateLayout.from_dict(d["layout"]),
                styling=StyleConfig.from_dict(d["styling"]),
                ai_optimization=AIOptimization.from_dict(d["ai_optimization"]),
                usage_stats=UsageStats.from_dict(d["usage_stats"]),
                payment_methods=tuple(payment_methods),
                description=d.get("description") or "",
                preview_image=d.get("preview_image") or "",
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f"Template '{template_id}' is missing required field: {e}") from e

    def to_dict(self) -> dict:
        return to_plain(self)


# =============================================================================
# INPUT ENTITIES (read-only)
# =============================================================================

def _require(data: dict, keys: list[str], entity: str) -> None:
    missing = [k for k in keys if data.get(k) is None or data.get(k) == ""]
    if missing:
        raise ValidationError(f"{entity} is missing required fields: {missing}")


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: float
    unit_price: float

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class Invoice:
    id: str
    invoice_number: str
    total_amount: float
    created_at: datetime
    line_items: tuple[LineItem, ...] = ()
    due_date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Invoice":
        _require(d, ["id", "invoice_number", "total_amount", "created_at"], "Invoice")
        try:
            return cls(
                id=str(d["id"]),
                invoice_number=str(d["invoice_number"]),
                total_amount=float(d["total_amount"]),
                created_at=_parse_datetime(d["created_at"]),
                line_items=tuple(
                    LineItem(
                        description=item["description"],
                        quantity=float(item.get("quantity", 1)),
                        unit_price=float(item["unit_price"]),
                    )
                    for item in d.get("line_items") or ()
                ),
                due_date=_parse_datetime(d["due_date"]) if d.get("due_date") else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invoice has malformed field: {e}") from e

    def validate(self) -> None:
        """Fails fast on missing required fields, before any scoring runs."""
        if not self.invoice_number:
            raise ValidationError("Invoice is missing required fields: ['invoice_number']")
        if not isinstance(self.total_amount, (int, float)) or isinstance(self.total_amount, bool):
            raise ValidationError("Invoice total_amount must be numeric")
        if not isinstance(self.created_at, datetime):
            raise ValidationError("Invoice created_at must be a datetime")


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    payment_terms: int               # Days

    # Payment-history signals
    is_repeat_customer: bool = False
    is_consistently_fast_payer: bool = False
    average_days_to_pay: Optional[float] = None
    preferred_payment_method: Optional[str] = None
    average_invoice_amount: Optional[float] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Customer":
        _require(d, ["id", "name", "payment_terms"], "Customer")
        try:
            return cls(
                id=str(d["id"]),
                name=str(d["name"]),
                payment_terms=int(d["payment_terms"]),
                is_repeat_customer=bool(d.get("is_repeat_customer", False)),
                is_consistently_fast_payer=bool(d.get("is_consistently_fast_payer", False)),
                average_days_to_pay=_optional_float(d.get("average_days_to_pay")),
                preferred_payment_method=d.get("preferred_payment_method") or None,
                average_invoice_amount=_optional_float(d.get("average_invoice_amount")),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Customer has malformed field: {e}") from e

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("Customer is missing required fields: ['name']")
        if not isinstance(self.payment_terms, int) or isinstance(self.payment_terms, bool):
            raise ValidationError("Customer payment_terms must be an integer number of days")


@dataclass(frozen=True)
class Preferences:
    industry: Optional[Industry] = None
    brand_personality: Optional[BrandPersonality] = None
    payment_urgency: Optional[PaymentUrgency] = None

    @classmethod
    def from_dict(cls, d: dict | None) -> "Preferences":
        """
        Builds Preferences from loose input. Unknown keys and unknown enum
        values are rejected rather than silently ignored.
        """
        if not d:
            return cls()
        unknown = set(d) - {f.name for f in fields(cls)}
        if unknown:
            raise ValidationError(f"Unknown preference keys: {sorted(unknown)}")
        return cls(
            industry=_parse_enum(Industry, d.get("industry"), "industry"),
            brand_personality=_parse_enum(BrandPersonality, d.get("brand_personality"), "brand personality"),
            payment_urgency=_parse_enum(PaymentUrgency, d.get("payment_urgency"), "payment urgency"),
        )


def _parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


# =============================================================================
# ENGINE OUTPUTS
# =============================================================================

@dataclass
class AIRecommendations:
    suggested_payment_methods: list[str] = field(default_factory=list)
    optimal_due_date: str = ""       # ISO date
    personalized_message: str = ""
    upsell_opportunities: list[str] = field(default_factory=list)


@dataclass
class Personalization:
    """Recipient-specific text layered onto a template without touching layout."""
    greeting: str
    payment_terms_message: str
    special_notes: list[str] = field(default_factory=list)
    ai_recommendations: AIRecommendations = field(default_factory=AIRecommendations)

    def to_dict(self) -> dict:
        return to_plain(self)


@dataclass
class ReadabilityAnalysis:
    score: float                     # 0–10
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class ConversionAnalysis:
    predicted_payment_rate: float    # 0–100
    factors_affecting_payment: list[str] = field(default_factory=list)
    optimization_recommendations: list[str] = field(default_factory=list)


@dataclass
class BrandingAnalysis:
    consistency_score: float         # 0–10
    brand_alignment_issues: list[str] = field(default_factory=list)
    branding_improvements: list[str] = field(default_factory=list)


@dataclass
class AccessibilityAnalysis:
    wcag_compliance: WCAGTier
    contrast_ratio: float            # 1–21
    accessibility_issues: list[str] = field(default_factory=list)
    accessibility_fixes: list[str] = field(default_factory=list)


@dataclass
class OptimizationReport:
    readability: ReadabilityAnalysis
    conversion: ConversionAnalysis
    branding: BrandingAnalysis
    accessibility: AccessibilityAnalysis
    optimization_score: float        # Composite, 0–10

    def to_dict(self) -> dict:
        return to_plain(self)


@dataclass
class ScoredTemplate:
    template: Template
    score: float                     # Final score: base + bonuses
    base_score: float
    reasons: list[str] = field(default_factory=list)


@dataclass
class RecommendationResult:
    recommended: list[Template]
    reasoning: list[str]             # Reasons for the top-scored template only
    customizations: dict[str, dict]
    scored: list[ScoredTemplate] = field(default_factory=list)
