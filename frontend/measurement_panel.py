"""Measurement entry widgets shared by the sampling and inspection pages.

Verdicts come from the API; nothing here evaluates tolerances.
"""

from __future__ import annotations

from typing import Any

import plotly.graph_objects as go
import streamlit as st

from streamlit_app import INDICATOR_COLORS, run_action


def measurement_run_chart(parameter: dict[str, Any], readings: list[dict[str, Any]]) -> go.Figure:
    """Readings in order with nominal and tolerance limits."""
    nominal = parameter.get("nominal", 0.0)
    upper = nominal + parameter.get("tol_plus", 0.0)
    lower = nominal - parameter.get("tol_minus", 0.0)
    xs = list(range(1, len(readings) + 1))

    fig = go.Figure()
    fig.add_scatter(
        x=xs,
        y=[r["value"] for r in readings],
        mode="lines+markers",
        name="Measured",
        marker=dict(color=[INDICATOR_COLORS["ok" if r["is_ok"] else "nok"] for r in readings], size=10),
    )
    for value, label, dash in ((upper, "USL", "dash"), (nominal, "Nominal", "dot"), (lower, "LSL", "dash")):
        fig.add_hline(y=value, line_dash=dash, annotation_text=f"{label} {value:g}")
    fig.update_layout(
        height=280,
        margin=dict(l=10, r=10, t=20, b=10),
        xaxis_title="Reading #",
        yaxis_title=parameter.get("unit") or "Value",
    )
    return fig


def render_measurement_panel(
    sample: dict[str, Any],
    plan: dict[str, Any],
    summaries: list[dict[str, Any]],
    selected_parameter_id: str | None = None,
) -> bool:
    """Draw one block per parameter. Returns True when the sample changed."""
    changed = False
    by_parameter = {s["parameter_id"]: s for s in summaries}
    readonly = sample["status"] in ("Completed", "Inspection Completed")

    for parameter in plan["parameters"]:
        summary = by_parameter.get(parameter["id"], {"label": "0 / 0 OK", "indicator": "neutral"})
        color = INDICATOR_COLORS[summary["indicator"]]
        readings = [m for m in sample["measurements"] if m["parameter_id"] == parameter["id"]]

        with st.container(border=True):
            header, badge = st.columns([4, 1])
            marker = "\u25b6 " if parameter["id"] == selected_parameter_id else ""
            header.markdown(f"{marker}**{parameter['name']}**  \n{_spec_text(parameter)}")
            badge.markdown(f"<span style='color:{color};font-weight:700'>{summary['label']}</span>", unsafe_allow_html=True)

            if parameter["type"] == "numeric":
                changed |= _numeric_controls(sample, parameter, readings, readonly)
            else:
                changed |= _boolean_controls(sample, parameter, readings, readonly)
    return changed


def _spec_text(parameter: dict[str, Any]) -> str:
    if parameter["type"] == "numeric":
        return (
            f"{parameter['nominal']:g} {parameter.get('unit', '')} "
            f"(+{parameter['tol_plus']:g} / -{parameter['tol_minus']:g})"
        )
    return f"Expected: {'Yes' if parameter['expected_value'] else 'No'}"


def _numeric_controls(sample: dict[str, Any], parameter: dict[str, Any], readings: list[dict[str, Any]], readonly: bool) -> bool:
    changed = False
    key = f"{sample['id']}-{parameter['id']}"
    if not readonly:
        value_col, add_col = st.columns([3, 1])
        value = value_col.number_input(
            "Value",
            value=float(parameter["nominal"]),
            format="%.4f",
            key=f"value-{key}",
            label_visibility="collapsed",
        )
        if add_col.button("Add", key=f"add-{key}", use_container_width=True):
            data = run_action(
                "Add measurement",
                "POST",
                f"/samples/{sample['id']}/measurements",
                {"parameter_id": parameter["id"], "value": value},
            )
            changed = data is not None

    for reading in readings:
        text_col, delete_col = st.columns([4, 1])
        verdict = "OK" if reading["is_ok"] else "NOK"
        text_col.write(f"{reading['value']:g} {parameter.get('unit', '')} - {verdict}")
        if not readonly and delete_col.button("Delete", key=f"del-{reading['id']}"):
            data = run_action(
                "Delete measurement",
                "DELETE",
                f"/samples/{sample['id']}/measurements/{reading['id']}",
            )
            changed = changed or data is not None

    if len(readings) > 1:
        st.plotly_chart(measurement_run_chart(parameter, readings), use_container_width=True, key=f"chart-{key}")
    return changed


def _boolean_controls(sample: dict[str, Any], parameter: dict[str, Any], readings: list[dict[str, Any]], readonly: bool) -> bool:
    current = readings[-1]["boolean_value"] if readings else None
    if readonly:
        st.write("Not measured" if current is None else ("Yes" if current else "No"))
        return False

    key = f"{sample['id']}-{parameter['id']}"
    yes_col, no_col = st.columns(2)
    choice = None
    if yes_col.button("Yes" + (" ✓" if current is True else ""), key=f"yes-{key}", use_container_width=True):
        choice = True
    if no_col.button("No" + (" ✓" if current is False else ""), key=f"no-{key}", use_container_width=True):
        choice = False
    if choice is None:
        return False

    data = run_action(
        "Set check",
        "POST",
        f"/samples/{sample['id']}/measurements",
        {"parameter_id": parameter["id"], "value": choice},
    )
    return data is not None
