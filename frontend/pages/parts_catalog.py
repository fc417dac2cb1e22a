"""Parts catalog and gauge management."""

import sys
from pathlib import Path
from typing import Any

import httpx
import pandas as pd
import streamlit as st

sys.path.insert(0, str(Path(__file__).parent.parent))
from streamlit_app import api_get_all, error_detail, run_action

PART_FIELDS = ("part_code", "name", "drawing_number", "material", "image_url")
GAUGE_STATUSES = ["Active", "Inactive", "Due for Calibration"]


def part_form(part: dict[str, Any] | None) -> None:
    key = part["id"] if part else "new"
    with st.form(f"part-form-{key}"):
        values = {
            field: st.text_input(field.replace("_", " ").title(), value=(part or {}).get(field, ""))
            for field in PART_FIELDS
        }
        if st.form_submit_button("Save"):
            if part:
                run_action("Save part", "PUT", f"/parts/{part['id']}", values)
            else:
                run_action("Create part", "POST", "/parts/", values)


def part_actions(part: dict[str, Any]) -> None:
    """Archive and revision ask for confirmation before calling the API."""
    if part["status"] == "Archived":
        if st.button("Restore", key=f"restore-{part['id']}"):
            run_action("Restore part", "POST", f"/parts/{part['id']}/restore")
        return

    confirm = st.checkbox(
        "I confirm archiving / revising this part (the current revision will be archived)",
        key=f"confirm-{part['id']}",
    )
    archive_col, revise_col = st.columns(2)
    if archive_col.button("Archive", key=f"archive-{part['id']}", disabled=not confirm):
        run_action("Archive part", "POST", f"/parts/{part['id']}/archive")
    if revise_col.button("New revision", key=f"revise-{part['id']}", disabled=not confirm):
        run_action("Create revision", "POST", f"/parts/{part['id']}/revisions")


def parts_tab() -> None:
    show_archived = st.toggle("Show Archived")
    status = "Archived" if show_archived else "Active"
    try:
        parts = api_get_all("/parts/", {"status": status})
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    if parts:
        st.dataframe(
            pd.DataFrame(parts)[["part_code", "name", "drawing_number", "material", "revision", "status"]],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info(f"No {status.lower()} parts.")

    with st.expander("Add part"):
        part_form(None)

    if not parts:
        return
    part = st.selectbox("Part", parts, format_func=lambda p: f"{p['part_code']} - {p['name']} (Rev. {p['revision']})")
    detail_col, edit_col = st.columns(2)
    with detail_col:
        if part.get("image_url"):
            st.image(part["image_url"], use_container_width=True)
        part_actions(part)
    with edit_col:
        part_form(part)


def gauge_form(gauge: dict[str, Any] | None) -> None:
    key = gauge["id"] if gauge else "new"
    gauge = gauge or {}
    with st.form(f"gauge-form-{key}"):
        values = {
            "name": st.text_input("Name", value=gauge.get("name", "")),
            "type": st.text_input("Type", value=gauge.get("type", "")),
            "serial_number": st.text_input("Serial Number", value=gauge.get("serial_number", "")),
            "last_calibration": st.text_input("Last Calibration (YYYY-MM-DD)", value=gauge.get("last_calibration") or ""),
            "next_calibration": st.text_input("Next Calibration (YYYY-MM-DD)", value=gauge.get("next_calibration") or ""),
            "status": st.selectbox(
                "Status",
                GAUGE_STATUSES,
                index=GAUGE_STATUSES.index(gauge.get("status", "Active")),
            ),
        }
        values = {k: v for k, v in values.items() if v != ""}
        if st.form_submit_button("Save"):
            if key == "new":
                run_action("Create gauge", "POST", "/gauges/", values)
            else:
                run_action("Save gauge", "PUT", f"/gauges/{key}", values)


def gauges_tab() -> None:
    try:
        gauges = api_get_all("/gauges/")
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    if gauges:
        st.dataframe(pd.DataFrame(gauges).drop(columns=["id"]), use_container_width=True, hide_index=True)
    with st.expander("Add gauge"):
        gauge_form(None)

    if not gauges:
        return
    gauge = st.selectbox("Gauge", gauges, format_func=lambda g: f"{g['name']} ({g['serial_number']})")
    gauge_form(gauge)
    if st.checkbox("Confirm delete", key=f"confirm-del-{gauge['id']}") and st.button("Delete gauge"):
        run_action("Delete gauge", "DELETE", f"/gauges/{gauge['id']}")


def main() -> None:
    st.set_page_config(page_title="Parts & Gauges", layout="wide")
    st.title("Parts Catalog & Gauge Management")
    parts, gauges = st.tabs(["Parts", "Gauges"])
    with parts:
        parts_tab()
    with gauges:
        gauges_tab()


if __name__ == "__main__":
    main()
