"""
design_view.py
----------------
Design Review view.

Layout:
    Left column:  Ranked templates (score chart) → Reasoning → Customizations
    Right column: Optimization axes chart → Issues & suggestions → Personalized text

Chart builders are plain functions returning Plotly figures so they can be
used (and tested) without a running Streamlit session.
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from config.config_loader import get_optimization_config
from core.models import OptimizationReport, ScoredTemplate, WCAGTier
from pipeline import DesignPlan


TIER_COLORS = {
    WCAGTier.AAA: "#27ae60",
    WCAGTier.AA: "#3498db",
    WCAGTier.PARTIAL: "#e67e22",
    WCAGTier.NONE: "#e74c3c",
}


# =============================================================================
# CHART BUILDERS
# =============================================================================

def build_score_chart(scored: list[ScoredTemplate]) -> go.Figure:
    """Stacked bar per template: base score + rule bonus."""
    names = [s.template.name for s in scored]
    base = [s.base_score for s in scored]
    bonus = [round(s.score - s.base_score, 4) for s in scored]

    fig = go.Figure()
    fig.add_trace(go.Bar(name="Base score", x=names, y=base, marker_color="#2c3e50"))
    fig.add_trace(go.Bar(name="Rule bonus", x=names, y=bonus, marker_color="#3498db"))
    fig.update_layout(
        barmode="stack",
        height=320,
        margin=dict(l=10, r=10, t=30, b=10),
        legend=dict(orientation="h", y=1.12),
    )
    return fig


def build_report_chart(report: OptimizationReport) -> go.Figure:
    """Horizontal bars for the four axes, all on a 0–10 scale."""
    tier_points = get_optimization_config()["tier_points"]
    axes = ["Readability", "Conversion", "Branding", "Accessibility"]
    values = [
        report.readability.score,
        report.conversion.predicted_payment_rate / 10,
        report.branding.consistency_score,
        tier_points[report.accessibility.wcag_compliance.value],
    ]
    colors = ["#2c3e50", "#2c3e50", "#2c3e50", TIER_COLORS[report.accessibility.wcag_compliance]]

    fig = go.Figure(go.Bar(x=values, y=axes, orientation="h", marker_color=colors))
    fig.update_layout(
        xaxis=dict(range=[0, 10]),
        height=260,
        margin=dict(l=10, r=10, t=10, b=10),
    )
    return fig


def report_findings_frame(report: OptimizationReport) -> pd.DataFrame:
    """Flattens issues and suggestions of every axis into one table, in check order."""
    sections = [
        ("Readability", report.readability.issues, report.readability.suggestions),
        ("Conversion", report.conversion.factors_affecting_payment, report.conversion.optimization_recommendations),
        ("Branding", report.branding.brand_alignment_issues, report.branding.branding_improvements),
        ("Accessibility", report.accessibility.accessibility_issues, report.accessibility.accessibility_fixes),
    ]
    rows = [
        {"axis": axis, "issue": issue, "suggestion": suggestion}
        for axis, issues, suggestions in sections
        for issue, suggestion in zip(issues, suggestions)
    ]
    return pd.DataFrame(rows, columns=["axis", "issue", "suggestion"])


# =============================================================================
# PAGE
# =============================================================================

def render_design_view(plan: DesignPlan):
    """Renders the full Design Review page."""

    st.markdown(f"""
        <div class="main-header">
            <h1>Design Review</h1>
            <p>Top template: <b>{plan.template.name}</b> · overall {plan.report.optimization_score:.2f} / 10</p>
        </div>
    """, unsafe_allow_html=True)

    left, right = st.columns([1, 1.1], gap="medium")

    with left:
        st.markdown('<div class="section-title">Ranked Templates</div>', unsafe_allow_html=True)
        st.plotly_chart(build_score_chart(plan.recommendation.scored), use_container_width=True)

        if plan.recommendation.reasoning:
            st.markdown('<div class="section-title">Why this template</div>', unsafe_allow_html=True)
            for reason in plan.recommendation.reasoning:
                st.markdown(f"- {reason}")

        st.markdown('<div class="section-title">Style Customizations</div>', unsafe_allow_html=True)
        if plan.recommendation.customizations:
            st.json(plan.recommendation.customizations)
        else:
            st.caption("No overrides for this invoice.")

    with right:
        st.markdown('<div class="section-title">Optimization</div>', unsafe_allow_html=True)
        st.plotly_chart(build_report_chart(plan.report), use_container_width=True)

        findings = report_findings_frame(plan.report)
        if findings.empty:
            st.success("No issues found.")
        else:
            st.dataframe(findings, use_container_width=True, hide_index=True)

        st.markdown('<div class="section-title">Personalized Content</div>', unsafe_allow_html=True)
        p = plan.personalization
        st.markdown(f"**{p.greeting}**")
        st.markdown(p.payment_terms_message)
        for note in p.special_notes:
            st.warning(note)
        st.caption(
            f"Suggested payment methods: {', '.join(p.ai_recommendations.suggested_payment_methods)} · "
            f"Due {p.ai_recommendations.optimal_due_date}"
        )
