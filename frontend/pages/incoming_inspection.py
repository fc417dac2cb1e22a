"""Receiving and incoming inspection of delivered parts."""

import sys
from pathlib import Path

import httpx
import streamlit as st

sys.path.insert(0, str(Path(__file__).parent.parent))
from streamlit_app import api_get, api_get_all, error_detail, run_action
from measurement_panel import render_measurement_panel


def receiving_form() -> None:
    st.subheader("Create Inspection Samples")
    st.caption("Enter the code of the received part to generate an inspection.")
    with st.form("receiving", clear_on_submit=True):
        part_code = st.text_input("Part Code", placeholder="e.g., PN-1001")
        batch_number = st.text_input("Batch Number / Delivery Note", placeholder="e.g., DEL-ACME-0824")
        count = st.number_input("Number of Samples to Inspect", min_value=1, value=3, step=1)
        if st.form_submit_button("Create Samples and Move to Inspection", use_container_width=True):
            run_action(
                "Receiving",
                "POST",
                "/samples/receiving",
                {"part_code": part_code, "count": int(count), "batch_number": batch_number},
            )


def inspection_queue() -> None:
    st.subheader("Incoming Part Inspection")
    try:
        pending = api_get_all("/samples/", {"status": "Inspection Pending"})
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    if not pending:
        st.success("All inspections are complete. Create new inspection samples in Receiving.")
        return

    st.dataframe(
        [
            {"Sample": s["id"], "Part": s["part_id"], "Batch": s["batch_number"], "Created": s["created_at"]}
            for s in pending
        ],
        use_container_width=True,
    )
    ids = [s["id"] for s in pending]
    sample_id = st.selectbox("Inspect sample", ids)
    sample = next(s for s in pending if s["id"] == sample_id)
    plan = api_get(f"/control-plans/{sample['control_plan_id']}")
    part = api_get(f"/parts/{sample['part_id']}")
    st.caption(f"Part: {part['name']} ({part['part_code']}) | Batch: {sample['batch_number']}")

    summaries = api_get(f"/samples/{sample_id}/summary")
    if render_measurement_panel(sample, plan, summaries):
        st.rerun()

    if st.button("Save and complete inspection", type="primary"):
        if run_action("Complete inspection", "POST", f"/samples/{sample_id}/complete") is not None:
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="Incoming Inspection", layout="wide")
    st.title("Material Receiving & Incoming Inspection")
    receiving_tab, inspection_tab = st.tabs(["Receiving", "Inspection"])
    with receiving_tab:
        receiving_form()
    with inspection_tab:
        inspection_queue()


if __name__ == "__main__":
    main()
