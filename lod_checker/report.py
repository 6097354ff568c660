"""
Report rendering helpers.

Everything here is a pure function of an AnalysisResult: the Streamlit page
only lays out what build_report_view() returns, draws gauge_figure() and
offers report_frame() as a table / CSV download.
"""

import json
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.patches import Wedge

from lod_checker.models import AnalysisResult, AnalysisSection, ComplianceStatus

RED = "#ef4444"
YELLOW = "#eab308"
GREEN = "#22c55e"
TRACK = "#e2e8f0"

FACET_TITLES = {
    "geometry": "Geometry",
    "parameters": "Parameters",
    "information": "Information Level",
}


@dataclass(frozen=True)
class BadgeStyle:
    background: str
    foreground: str
    icon: str


STATUS_BADGES = {
    ComplianceStatus.COMPLIANT: BadgeStyle("#dcfce7", "#15803d", "✅"),
    ComplianceStatus.PARTIAL: BadgeStyle("#fef9c3", "#a16207", "⚠️"),
    ComplianceStatus.NON_COMPLIANT: BadgeStyle("#fee2e2", "#b91c1c", "❌"),
}


@dataclass(frozen=True)
class FacetCard:
    key: str
    title: str
    score: int
    badge: str
    style: BadgeStyle
    observations: Tuple[str, ...]
    missing: Tuple[str, ...]
    recommendations: Tuple[str, ...]


@dataclass(frozen=True)
class ReportView:
    element_name: str
    lod_target: str
    summary: str
    overall_score: int
    gauge_color: str
    cards: List[FacetCard]


def gauge_color(score: int) -> str:
    if score > 85:
        return GREEN
    if score > 60:
        return YELLOW
    return RED


def badge_label(status: ComplianceStatus) -> str:
    return ComplianceStatus(status).value.upper()


def facet_card(key: str, section: AnalysisSection) -> FacetCard:
    return FacetCard(
        key=key,
        title=FACET_TITLES[key],
        score=section.score,
        badge=badge_label(section.status),
        style=STATUS_BADGES[section.status],
        observations=section.observations,
        missing=section.missing,
        recommendations=section.recommendations,
    )


def build_report_view(result: AnalysisResult) -> ReportView:
    return ReportView(
        element_name=result.element_name,
        lod_target=result.lod_target,
        summary=result.summary,
        overall_score=result.overall_score,
        gauge_color=gauge_color(result.overall_score),
        cards=[facet_card(key, section) for key, section in result.sections()],
    )


def badge_html(card: FacetCard) -> str:
    s = card.style
    return (
        f'<span style="background:{s.background};color:{s.foreground};font-weight:700;'
        f'font-size:0.75rem;padding:2px 8px;border-radius:9999px">{card.badge}</span>'
    )


def gauge_figure(score: int, size: float = 2.4) -> Figure:
    """Half-donut compliance gauge, score sweeping from the left (180°) to the right (0°)."""
    fraction = float(np.clip(score, 0, 100)) / 100.0
    split = 180.0 - 180.0 * fraction

    fig = Figure(figsize=(size, size * 0.6))
    ax = fig.add_subplot(111)
    ax.add_patch(Wedge((0, 0), 1.0, 0, 180, width=0.27, facecolor=TRACK))
    if fraction > 0:
        ax.add_patch(Wedge((0, 0), 1.0, split, 180, width=0.27, facecolor=gauge_color(score)))
    ax.text(0, 0.12, f"{score}%", ha="center", va="center", fontsize=16, fontweight="bold", color="#1e293b")
    ax.text(0, -0.12, "COMPLIANCE", ha="center", va="center", fontsize=7, color="#94a3b8")
    ax.set_xlim(-1.05, 1.05)
    ax.set_ylim(-0.25, 1.05)
    ax.set_aspect("equal")
    ax.axis("off")
    fig.patch.set_alpha(0.0)
    return fig


_ITEM_KINDS = (
    ("observations", "Observation"),
    ("missing", "Missing"),
    ("recommendations", "Action Item"),
)


def report_frame(result: AnalysisResult) -> pd.DataFrame:
    """One row per facet item; facets with no items still get a row."""
    rows = []
    for key, section in result.sections():
        base = {
            "Facet": FACET_TITLES[key],
            "Score": section.score,
            "Status": section.status.value,
        }
        items = [(label, text) for attr, label in _ITEM_KINDS for text in getattr(section, attr)]
        if not items:
            rows.append({**base, "Kind": "", "Item": ""})
        for label, text in items:
            rows.append({**base, "Kind": label, "Item": text})
    return pd.DataFrame(rows, columns=["Facet", "Score", "Status", "Kind", "Item"])


def report_json(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
