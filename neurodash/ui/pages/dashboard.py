from typing import Dict, Optional, Tuple

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output, State, callback, ctx, dcc, html

from neurodash import config
from neurodash.app_state import registry
from neurodash.engine.playback import PlaybackState
from neurodash.ui import components

LOADING_TEXT = "Loading EEG Data…"

COMMANDS = {
    "dash-play-btn": "toggle_play",
    "dash-reset-btn": "reset",
    "dash-prev-btn": "prev_subject",
    "dash-next-btn": "next_subject",
}


def _shown(variant: config.DashboardVariant, *names: str) -> Dict[str, str]:
    return {} if any(n in variant.components for n in names) else {"display": "none"}


def _graph(graph_id: str) -> dcc.Graph:
    return dcc.Graph(id=graph_id, config={"displayModeBar": False})


def layout(variant_name: Optional[str] = None) -> dbc.Container:
    variant = config.get_variant(variant_name)
    return dbc.Container(
        [
            dcc.Store(id="dash-variant", data=variant.name),
            dcc.Interval(id="dash-interval", interval=config.FRAME_INTERVAL_MS, n_intervals=0),
            dbc.Card(
                [
                    dbc.CardHeader(f"EEG Playback · {variant.title}"),
                    dbc.CardBody(
                        [
                            html.H4(id="dash-subject", className="mb-0"),
                            html.Div(id="dash-time", className="text-info"),
                            html.Div(id="dash-status", className="text-warning small mt-1"),
                            dbc.ButtonGroup(
                                [
                                    dbc.Button("⏸ Pause", id="dash-play-btn", color="primary", size="sm"),
                                    dbc.Button("🔁 Reset", id="dash-reset-btn", color="secondary", size="sm"),
                                    dbc.Button("⬅️ Prev", id="dash-prev-btn", color="secondary", size="sm"),
                                    dbc.Button("➡️ Next", id="dash-next-btn", color="secondary", size="sm"),
                                ],
                                className="mt-2",
                            ),
                        ]
                    ),
                ],
                className="page-card",
            ),
            dbc.Row(
                [
                    dbc.Col(dbc.Card(dbc.CardBody(_graph("dash-radial")), className="page-card"), md=7, sm=12),
                    dbc.Col(
                        dbc.Card(
                            dbc.CardBody([_graph("dash-gauge-adr"), _graph("dash-gauge-tar")]),
                            className="page-card",
                        ),
                        md=5,
                        sm=12,
                        style=_shown(variant, "gauges"),
                    ),
                ],
                className="g-2",
            ),
            dbc.Row(
                [
                    dbc.Col(
                        dbc.Card(dbc.CardBody(_graph("dash-trend")), className="page-card"),
                        md=7,
                        sm=12,
                        style=_shown(variant, "trend"),
                    ),
                    dbc.Col(
                        dbc.Card(dbc.CardBody(_graph("dash-symmetry")), className="page-card"),
                        md=5,
                        sm=12,
                        style=_shown(variant, "symmetry"),
                    ),
                ],
                className="g-2",
                style=_shown(variant, "trend", "symmetry"),
            ),
        ],
        fluid=True,
        className="page-container",
    )


def render_snapshot(
    snapshot: Dict[str, object], variant_name: Optional[str] = None
) -> Tuple[str, str, str, str, go.Figure, go.Figure, go.Figure, go.Figure, go.Figure]:
    """Map an engine snapshot onto the dashboard outputs."""
    variant = config.get_variant(variant_name)
    state = snapshot.get("state")
    play_label = "⏸ Pause" if state == PlaybackState.PLAYING.value else "▶️ Play"

    if "reading" not in snapshot:
        message = LOADING_TEXT
        if snapshot.get("status") == "error":
            message = f"Could not load data: {snapshot.get('last_error')}"
        elif snapshot.get("status") == "not_ready":
            message = "No subjects loaded."
        blank = components.blank_figure("", message=message)
        return message, "", "", play_label, blank, blank, blank, blank, blank

    reading: Dict[str, object] = snapshot["reading"]  # type: ignore[assignment]
    analysis: Dict[str, object] = snapshot["analysis"]  # type: ignore[assignment]
    ranges: Dict[str, Tuple[float, float]] = snapshot["ranges"]  # type: ignore[assignment]

    subject_text = f"Subject: {snapshot['subject']}"
    time_text = f"Time: {float(snapshot['time']):.2f}"
    status_text = (
        f"Subject {int(snapshot['subject_position']) + 1}/{snapshot['subject_count']} · "
        f"Trial {int(snapshot['trial_position']) + 1}/{snapshot['trial_count']}"
    )
    if state == PlaybackState.FINISHED.value:
        status_text += " · Finished"

    radial = components.make_radial_figure(reading, analysis)
    gauges = {}
    for gauge in variant.gauges:
        gauges[gauge.key] = components.make_gauge_figure(gauge, float(analysis[gauge.key]), ranges[gauge.key])
    blank = components.blank_figure("")
    trend = components.make_trend_figure(
        snapshot.get("trial_history") or [],  # type: ignore[arg-type]
        snapshot.get("slope_history") or [],  # type: ignore[arg-type]
        analysis.get("trend_alert"),  # type: ignore[arg-type]
    )
    symmetry = components.make_symmetry_figure(reading.get("bsi"))  # type: ignore[arg-type]
    return (
        subject_text,
        time_text,
        status_text,
        play_label,
        radial,
        gauges.get("adr", blank),
        gauges.get("tar", blank),
        trend,
        symmetry,
    )


@callback(
    Output("dash-subject", "children"),
    Output("dash-time", "children"),
    Output("dash-status", "children"),
    Output("dash-play-btn", "children"),
    Output("dash-radial", "figure"),
    Output("dash-gauge-adr", "figure"),
    Output("dash-gauge-tar", "figure"),
    Output("dash-trend", "figure"),
    Output("dash-symmetry", "figure"),
    Input("dash-interval", "n_intervals"),
    Input("dash-play-btn", "n_clicks"),
    Input("dash-reset-btn", "n_clicks"),
    Input("dash-prev-btn", "n_clicks"),
    Input("dash-next-btn", "n_clicks"),
    State("dash-variant", "data"),
)
def update_dashboard(_n, _play, _reset, _prev, _next, variant_name):
    engine = registry.playback_engine
    triggered = ctx.triggered_id
    command = COMMANDS.get(triggered) if triggered else None
    if command:
        getattr(engine, command)()
    else:
        engine.on_frame()
    return render_snapshot(engine.snapshot(), variant_name)
