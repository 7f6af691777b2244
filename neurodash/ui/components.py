"""Plotly figure builders for the dashboard cards.

Renderers only consume the numeric snapshot produced by the playback engine;
they never read trial samples directly.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go

from neurodash import config
from neurodash.engine.band_analysis import (
    BUCKET_COLORS,
    BUCKET_LABELS,
    SYMMETRY_COLORS,
    SYMMETRY_LABELS,
    TREND_ALERT_COLORS,
    TREND_ALERT_LABELS,
    TrendAlert,
    classify_by_range,
    classify_symmetry,
)

BAND_LABELS = ("Alpha", "Beta", "Theta", "Delta")
WEDGE_GAP_DEG = 12.0
IDLE_SEGMENT_COLOR = "rgba(255,255,255,0.10)"
INK = "#d8e1ff"


def _dark_layout(fig: go.Figure, title: str, height: int) -> go.Figure:
    fig.update_layout(
        template="plotly_dark",
        title=title,
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=40, b=10),
        height=height,
    )
    return fig


def blank_figure(title: str, message: str = "No data yet", height: int = 260) -> go.Figure:
    fig = _dark_layout(go.Figure(), title, height)
    fig.update_layout(xaxis=dict(visible=False), yaxis=dict(visible=False))
    fig.add_annotation(text=message, xref="paper", yref="paper", x=0.5, y=0.5, showarrow=False)
    return fig


def radial_color(frac: float) -> str:
    """Segment color by radial position: inner third green, middle yellow, outer red."""
    if frac < 1.0 / 3.0:
        return BUCKET_COLORS["GREEN"]
    if frac < 2.0 / 3.0:
        return BUCKET_COLORS["YELLOW"]
    return BUCKET_COLORS["RED"]


def active_rings(visual_intensity: float, segments: int = config.RADIAL_SEGMENTS) -> int:
    return int(round(max(0.0, min(1.0, visual_intensity)) * segments))


def make_radial_figure(
    reading: Dict[str, object],
    analysis: Dict[str, object],
    segments: int = config.RADIAL_SEGMENTS,
    height: int = 460,
) -> go.Figure:
    """Four band wedges of ``segments`` rings each; filled rings track severity."""
    n = len(BAND_LABELS)
    sweep = 360.0 / n - WEDGE_GAP_DEG
    centers = [wi * (360.0 / n) + WEDGE_GAP_DEG / 2 + sweep / 2 for wi in range(n)]
    filled = active_rings(float(analysis.get("visual_intensity") or 0.0), segments)
    hover = [f"{label}: {float(reading.get(label.lower()) or 0.0):.2f}" for label in BAND_LABELS]

    fig = go.Figure()
    for si in range(segments):
        is_filled = si < filled
        color = radial_color((si + 0.5) / segments) if is_filled else IDLE_SEGMENT_COLOR
        fig.add_trace(
            go.Barpolar(
                r=[0.9] * n,
                base=[si + 0.05] * n,
                theta=centers,
                width=[sweep] * n,
                marker=dict(color=color, line=dict(width=0)),
                opacity=0.9 if is_filled else 1.0,
                hovertext=hover,
                hoverinfo="text",
                name=f"ring {si + 1}",
                showlegend=False,
            )
        )
    _dark_layout(fig, f"Severity {float(analysis.get('severity') or 0.0):.2f}", height)
    fig.update_layout(
        polar=dict(
            bgcolor="#0f1422",
            hole=0.08,
            radialaxis=dict(range=[0, segments], visible=False),
            angularaxis=dict(
                rotation=90,
                direction="clockwise",
                tickmode="array",
                tickvals=centers,
                ticktext=list(BAND_LABELS),
                tickfont=dict(color=INK, size=14),
                showgrid=False,
            ),
        ),
    )
    return fig


def bucket_edges(
    rng: Tuple[float, float],
    buckets: int,
    invert: bool = False,
    gamma: float = 1.0,
) -> List[Tuple[float, float, str]]:
    """Bucket bands in value units as (lo, hi, label), ordered by value."""
    lo, hi = rng
    labels = BUCKET_LABELS[buckets]

    def to_value(pos: float) -> float:
        base = pos ** (1.0 / gamma) if gamma != 1.0 else pos
        raw = 1.0 - base if invert else base
        return lo + raw * (hi - lo)

    edges = []
    for k, label in enumerate(labels):
        a, b = to_value(k / buckets), to_value((k + 1) / buckets)
        edges.append((min(a, b), max(a, b), label))
    return sorted(edges)


def make_gauge_figure(
    gauge: config.GaugeConfig,
    value: float,
    rng: Sequence[float],
    height: int = 220,
) -> go.Figure:
    lo, hi = float(rng[0]), float(rng[1])
    label = classify_by_range(value, (lo, hi), buckets=gauge.buckets, invert=gauge.invert, gamma=gauge.gamma)
    steps = [
        {"range": [a, b], "color": BUCKET_COLORS[name]}
        for a, b, name in bucket_edges((lo, hi), gauge.buckets, invert=gauge.invert, gamma=gauge.gamma)
    ]
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=value,
            number={"valueformat": ".2f", "font": {"color": BUCKET_COLORS[label]}},
            title={
                "text": f"{gauge.title}<br><span style='font-size:0.75em'>Range: {lo:.2f}–{hi:.2f} · {label}</span>"
            },
            gauge={
                "axis": {"range": [lo, hi]},
                "bar": {"color": INK, "thickness": 0.2},
                "steps": steps,
                "threshold": {"line": {"color": INK, "width": 4}, "thickness": 0.9, "value": value},
            },
        )
    )
    _dark_layout(fig, "", height)
    fig.update_layout(margin=dict(l=20, r=20, t=60, b=10))
    return fig


def make_trend_figure(
    trials: Sequence[float],
    slopes: Sequence[float],
    alert: Optional[str],
    height: int = 240,
) -> go.Figure:
    title = "Aperiodic Slope (1-4 Hz Delta Range)"
    if not slopes:
        return blank_figure(title, height=height)
    level = TrendAlert(alert) if alert else TrendAlert.NORMAL
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=list(trials),
            y=list(slopes),
            mode="lines+markers",
            name="Slope",
            line=dict(color="#5bc0de", width=2),
            marker=dict(size=5),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[trials[-1]],
            y=[slopes[-1]],
            mode="markers",
            name="Current",
            marker=dict(color=TREND_ALERT_COLORS[level], size=12, line=dict(color=INK, width=2)),
        )
    )
    _dark_layout(fig, title, height)
    fig.update_layout(
        showlegend=False,
        xaxis=dict(title="Trial"),
        yaxis=dict(title="Slope"),
    )
    fig.add_annotation(
        text=TREND_ALERT_LABELS[level],
        xref="paper",
        yref="paper",
        x=1.0,
        y=1.12,
        showarrow=False,
        bgcolor=TREND_ALERT_COLORS[level],
        font=dict(color="#0b0f1a"),
    )
    return fig


def hemisphere_opacity(bsi: float) -> Tuple[float, float]:
    """(left, right) opacity; the affected side is opaque."""
    level = min(1.0, abs(bsi))
    resting = 0.3 + (1.0 - level) * 0.7
    left = 1.0 if bsi < 0 else resting
    right = 1.0 if bsi > 0 else resting
    return left, right


def make_symmetry_figure(bsi: Optional[float], height: int = 240) -> go.Figure:
    title = "Brain Symmetry Index (BSI)"
    if bsi is None:
        return blank_figure(title, message="No BSI column", height=height)
    symmetry = classify_symmetry(bsi)
    color = SYMMETRY_COLORS[symmetry]
    left, right = hemisphere_opacity(bsi)
    fig = go.Figure(
        go.Bar(
            x=["Left", "Right"],
            y=[1.0, 1.0],
            marker=dict(color=color, opacity=[left, right]),
            hoverinfo="skip",
        )
    )
    _dark_layout(fig, f"{title}: {bsi:.3f}", height)
    fig.update_layout(yaxis=dict(visible=False, range=[0, 1.2]), bargap=0.15)
    fig.add_annotation(
        text=SYMMETRY_LABELS[symmetry],
        xref="paper",
        yref="paper",
        x=0.5,
        y=1.05,
        showarrow=False,
        font=dict(color=color, size=14),
    )
    return fig


__all__ = [
    "BAND_LABELS",
    "blank_figure",
    "radial_color",
    "active_rings",
    "make_radial_figure",
    "bucket_edges",
    "make_gauge_figure",
    "make_trend_figure",
    "hemisphere_opacity",
    "make_symmetry_figure",
]
