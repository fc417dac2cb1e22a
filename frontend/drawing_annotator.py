"""Drawing with numbered parameter bubbles.

Clicking the drawing places (or moves) the bubble of the selected parameter;
clicking a bubble selects its parameter. Positions are stored by the API as
percentages with the origin at the top-left corner.
"""

from __future__ import annotations

from typing import Any

import plotly.graph_objects as go
import streamlit as st

from streamlit_app import run_action

# Click targets: a transparent grid over the drawing, one point per GRID_STEP %.
GRID_STEP = 2
BUBBLE_COLOR = "#f97316"
SELECTED_COLOR = "#3b82f6"


def selected_parameter_key(sample_id: str) -> str:
    return f"drawing-parameter-{sample_id}"


def drawing_figure(image_url: str, bubbles: list[dict[str, Any]], selected_parameter_id: str | None) -> go.Figure:
    grid = [(x, y) for x in range(0, 101, GRID_STEP) for y in range(0, 101, GRID_STEP)]

    fig = go.Figure()
    fig.add_layout_image(
        source=image_url,
        xref="x",
        yref="y",
        x=0,
        y=100,
        sizex=100,
        sizey=100,
        xanchor="left",
        yanchor="top",
        sizing="stretch",
        layer="below",
    )
    fig.add_scatter(
        x=[x for x, _ in grid],
        y=[100 - y for _, y in grid],
        mode="markers",
        marker=dict(size=GRID_STEP * 4, opacity=0),
        hoverinfo="none",
        showlegend=False,
    )
    fig.add_scatter(
        x=[b["x"] for b in bubbles],
        y=[100 - b["y"] for b in bubbles],
        mode="markers+text",
        text=[str(b["number"]) for b in bubbles],
        customdata=[b["parameter_id"] for b in bubbles],
        textfont=dict(color="white", size=11),
        marker=dict(
            size=[26 if b["parameter_id"] == selected_parameter_id else 20 for b in bubbles],
            color=[SELECTED_COLOR if b["parameter_id"] == selected_parameter_id else BUBBLE_COLOR for b in bubbles],
        ),
        hovertemplate="%{customdata}<extra></extra>",
        showlegend=False,
    )
    fig.update_xaxes(range=[0, 100], visible=False, fixedrange=True)
    fig.update_yaxes(range=[0, 100], visible=False, fixedrange=True, scaleanchor="x")
    fig.update_layout(height=420, margin=dict(l=0, r=0, t=0, b=0), clickmode="event+select", dragmode=False)
    return fig


def render_drawing(sample: dict[str, Any], plan: dict[str, Any], image_url: str) -> bool:
    """Draw the annotated drawing. Returns True when the sample changed."""
    key = selected_parameter_key(sample["id"])
    pending = st.session_state.pop(f"{key}-pending", None)
    if pending is not None:
        st.session_state[key] = pending

    names = {p["id"]: p["name"] for p in plan["parameters"]}
    selected = st.selectbox(
        "Parameter to place",
        list(names),
        format_func=lambda pid: names[pid],
        index=None,
        placeholder="Select a parameter, then click the drawing",
        key=key,
    )

    event = st.plotly_chart(
        drawing_figure(image_url, sample.get("bubbles", []), selected),
        use_container_width=True,
        on_select="rerun",
        selection_mode="points",
        key=f"drawing-{sample['id']}",
    )
    points = event.selection.get("points", []) if event else []
    if not points:
        return False

    point = points[0]
    # The selection survives reruns; act on each click once.
    click = (point["curve_number"], point["x"], point["y"])
    if st.session_state.get(f"{key}-last-click") == click:
        return False
    st.session_state[f"{key}-last-click"] = click

    if point["curve_number"] == 1:
        st.session_state[f"{key}-pending"] = sample["bubbles"][point["point_index"]]["parameter_id"]
        return True
    if selected is None:
        st.warning("First, select a parameter from the list to add a bubble.")
        return False

    data = run_action(
        "Place bubble",
        "PUT",
        f"/samples/{sample['id']}/bubbles",
        {"parameter_id": selected, "x": point["x"], "y": 100 - point["y"]},
    )
    return data is not None
