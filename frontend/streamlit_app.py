"""Streamlit client for the Metrology QMS API: dashboard page."""

from __future__ import annotations

import os
from typing import Any

import httpx
import plotly.graph_objects as go
import streamlit as st

DEFAULT_API_BASE = "http://localhost:8000"
PAGE_SIZE = 500
OK_COLOR = "#22c55e"
NOK_COLOR = "#ef4444"
NEUTRAL_COLOR = "#9ca3af"
INDICATOR_COLORS = {"ok": OK_COLOR, "nok": NOK_COLOR, "neutral": NEUTRAL_COLOR}


def get_api_base() -> str:
    """Prefer Streamlit secrets/env var overrides for API base URL."""
    # Streamlit raises when no secrets file exists, so guard the lookup.
    secret_value: str | None = None
    try:
        secret_value = st.secrets["api_base"]
    except Exception:  # noqa: BLE001 - secrets module raises custom errors
        secret_value = None

    env_value = os.environ.get("API_BASE_URL")
    return secret_value or env_value or DEFAULT_API_BASE


def api_get(path: str, params: dict[str, Any] | None = None) -> Any:
    return _request_api("GET", path, params=params)


def api_post(path: str, payload: dict[str, Any] | None = None) -> Any:
    return _request_api("POST", path, json=payload)


def api_get_all(path: str, params: dict[str, Any] | None = None, page_size: int = PAGE_SIZE) -> list[Any]:
    """Collect every row of a paginated list endpoint."""
    rows: list[Any] = []
    offset = 0
    while True:
        page = api_get(path, {**(params or {}), "limit": page_size, "offset": offset})
        rows.extend(page["data"])
        if not page["meta"]["has_more"] or not page["data"]:
            return rows
        offset += len(page["data"])


def error_detail(exc: httpx.HTTPError) -> str:
    """Operator-facing text for a failed request."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            return exc.response.json().get("detail", str(exc))
        except ValueError:
            return exc.response.text
    return f"Request failed: {exc}"


def run_action(label: str, method: str, path: str, payload: dict[str, Any] | None = None) -> Any | None:
    """Call a state-changing endpoint and show its message; returns ``data`` or None."""
    try:
        result = _request_api(method, path, json=payload)
    except httpx.HTTPError as exc:
        st.error(f"{label}: {error_detail(exc)}")
        return None
    st.success(result.get("message", label))
    return result.get("data")


def _request_api(method: str, path: str, **kwargs: Any) -> Any:
    base_url = get_api_base().rstrip("/")
    url = f"{base_url}{path}"
    with httpx.Client(timeout=30, follow_redirects=True) as client:
        response = client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()


def quality_overview_chart(overview: list[dict[str, Any]]) -> go.Figure:
    names = [row["name"] for row in overview]
    fig = go.Figure()
    fig.add_bar(name="Pass", x=names, y=[row["passed"] for row in overview], marker_color=OK_COLOR)
    fig.add_bar(name="Fail", x=names, y=[row["failed"] for row in overview], marker_color=NOK_COLOR)
    fig.update_layout(barmode="stack", height=300, margin=dict(l=10, r=10, t=10, b=10))
    return fig


def main() -> None:
    st.set_page_config(page_title="Metrology QMS", layout="wide")
    st.title("Quality Dashboard")
    st.caption("Parts, gauges, control plans and measurement samples")

    try:
        data = api_get("/dashboard/")
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    cols = st.columns(4)
    cols[0].metric("Active Parts", data["active_parts"])
    cols[1].metric("Gauges Due for Calibration", data["gauges_due"])
    cols[2].metric("Active Plans", data["active_plans"])
    cols[3].metric("Samples to Measure", data["samples_to_measure"])

    main_col, side_col = st.columns([2, 1])
    with main_col:
        st.subheader("Part Quality Overview")
        if data["quality_overview"]:
            st.plotly_chart(quality_overview_chart(data["quality_overview"]), use_container_width=True)
        else:
            st.info("No completed measurements to display.")

    with side_col:
        st.subheader("Needs Attention")
        st.markdown("**Gauge Calibration**")
        if data["gauges_due_for_calibration"]:
            for gauge in data["gauges_due_for_calibration"]:
                st.write(f"- {gauge['name']} (due {gauge['next_calibration']})")
        else:
            st.write("All gauges are calibrated.")

        st.markdown("**Samples with Non-conformance**")
        if data["samples_with_failures"]:
            for item in data["samples_with_failures"]:
                st.write(f"- {item['sample_id']} ({item['fail_count']} NOK)")
        else:
            st.write("No samples with non-conformance.")

        st.subheader("Recent Activity")
        if data["recent_activity"]:
            for item in data["recent_activity"]:
                st.write(f"**{item['part_name']}** - sample `{item['sample_id']}` measured.")
        else:
            st.write("No recent activity.")


if __name__ == "__main__":
    main()
