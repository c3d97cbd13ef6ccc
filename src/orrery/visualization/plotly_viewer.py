from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import plotly.graph_objects as go

from orrery.objects.style import BodyStyle
from orrery.simulation.engine import SimulationLog

# Plotly marker sizes are in pixels; display radii are relative
MARKER_SIZE_PER_RADIUS: float = 0.6
MIN_MARKER_SIZE: float = 3.0


def _marker(style: Optional[BodyStyle]) -> dict:
    if style is None:
        return dict(size=5)
    return dict(
        size=max(MIN_MARKER_SIZE, style.display_radius * MARKER_SIZE_PER_RADIUS),
        color=style.color,
    )


def _scene_layout(title: str) -> dict:
    return dict(
        title=title,
        scene=dict(
            xaxis_title="X",
            yaxis_title="Y",
            zaxis_title="Z",
            aspectmode="data",
        ),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )


def render_static_scene(
    log: SimulationLog,
    styles: Optional[Dict[str, BodyStyle]] = None,
    out_html: str = "out/orrery_scene.html",
) -> str:
    """
    Renders a static 3D scene:
      - Orbit track for each body
      - Last position marker for each body
    """
    if not log.body_positions:
        raise ValueError("No body positions found in log.")
    styles = styles or {}

    fig = go.Figure()

    for key, samples in log.body_positions.items():
        xs = [r[0] for (_t, r) in samples]
        ys = [r[1] for (_t, r) in samples]
        zs = [r[2] for (_t, r) in samples]
        style = styles.get(key)

        fig.add_trace(go.Scatter3d(
            x=xs, y=ys, z=zs,
            mode="lines",
            name=f"{key} track",
            line=dict(color=style.color) if style else None,
        ))

        fig.add_trace(go.Scatter3d(
            x=[xs[-1]], y=[ys[-1]], z=[zs[-1]],
            mode="markers",
            name=key,
            marker=_marker(style),
        ))

    fig.update_layout(**_scene_layout("Orrery (static scene)"))

    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html


def render_animated_scene(
    log: SimulationLog,
    styles: Optional[Dict[str, BodyStyle]] = None,
    out_html: str = "out/orrery_animated.html",
) -> str:
    """
    Renders an animated 3D scene with every body:
      - Full track per body (static traces)
      - One marker per body, moved by the animation frames
    All bodies must have been sampled at the same times.
    """
    keys = list(log.body_positions.keys())
    if not keys:
        raise ValueError("No body positions found in log.")
    styles = styles or {}

    times = [t for (t, _r) in log.body_positions[keys[0]]]
    for key in keys:
        if len(log.body_positions[key]) != len(times):
            raise ValueError(f"{key} samples length mismatch.")

    fig = go.Figure()

    # Tracks occupy trace indices [0, n); markers [n, 2n)
    for key in keys:
        samples = log.body_positions[key]
        style = styles.get(key)
        fig.add_trace(go.Scatter3d(
            x=[r[0] for (_t, r) in samples],
            y=[r[1] for (_t, r) in samples],
            z=[r[2] for (_t, r) in samples],
            mode="lines",
            name=f"{key} track",
            line=dict(color=style.color) if style else None,
        ))

    for key in keys:
        _t0, r0 = log.body_positions[key][0]
        fig.add_trace(go.Scatter3d(
            x=[r0[0]], y=[r0[1]], z=[r0[2]],
            mode="markers",
            name=key,
            marker=_marker(styles.get(key)),
        ))

    marker_traces: List[int] = list(range(len(keys), 2 * len(keys)))
    frames = []
    for i in range(len(times)):
        data = []
        for key in keys:
            _t, r = log.body_positions[key][i]
            data.append(go.Scatter3d(x=[r[0]], y=[r[1]], z=[r[2]], mode="markers",
                                     marker=_marker(styles.get(key))))
        frames.append(go.Frame(name=str(i), data=data, traces=marker_traces))

    fig.frames = frames

    fig.update_layout(
        **_scene_layout("Orrery (animated)"),
        updatemenus=[dict(
            type="buttons",
            showactive=True,
            buttons=[
                dict(label="Play", method="animate",
                     args=[None, {"frame": {"duration": 50, "redraw": True}, "fromcurrent": True}]),
                dict(label="Pause", method="animate",
                     args=[[None], {"frame": {"duration": 0, "redraw": False}, "mode": "immediate"}]),
            ],
        )],
        sliders=[dict(
            steps=[dict(method="animate", args=[[str(i)], {"mode": "immediate", "frame": {"duration": 0, "redraw": True}}],
                        label=f"{times[i]:g}s") for i in range(0, len(times), max(1, len(times)//20))],
            active=0
        )]
    )

    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html
