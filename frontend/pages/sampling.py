"""Production sampling: measure samples against their control plan."""

import sys
from pathlib import Path
from typing import Any

import httpx
import streamlit as st

sys.path.insert(0, str(Path(__file__).parent.parent))
from streamlit_app import api_get, api_get_all, api_post, error_detail, run_action
from drawing_annotator import render_drawing, selected_parameter_key
from measurement_panel import render_measurement_panel


def load_context() -> dict[str, Any]:
    return {
        "samples": api_get_all("/samples/", {"origin": "production"}),
        "parts": api_get_all("/parts/"),
        "plans": api_get_all("/control-plans/"),
    }


def new_sample_form(parts: list[dict[str, Any]], plans: list[dict[str, Any]]) -> None:
    active_parts = [p for p in parts if p["status"] == "Active"]
    if not active_parts:
        st.info("No active parts.")
        return

    part = st.selectbox(
        "Part",
        active_parts,
        format_func=lambda p: f"{p['name']} (Rev. {p['revision']})",
        key="new-sample-part",
    )
    available = [p for p in plans if p["part_id"] == part["id"] and p["status"] == "Active"]
    plan = st.selectbox(
        "Control Plan",
        available,
        format_func=lambda p: f"{p['name']} (v{p['version']})",
        placeholder="No active plan available for this part",
        key="new-sample-plan",
    )
    batch_number = st.text_input("Batch Number", key="new-sample-batch")
    if st.button("Create", use_container_width=True, disabled=plan is None):
        data = run_action(
            "Create sample",
            "POST",
            "/samples/",
            {"part_id": part["id"], "control_plan_id": plan["id"], "batch_number": batch_number},
        )
        if data:
            st.session_state["selected_sample_id"] = data["id"]
            st.rerun()


def default_sample_id(samples: list[dict[str, Any]]) -> str | None:
    for status in ("In Progress", "Pending"):
        for sample in samples:
            if sample["status"] == status:
                return sample["id"]
    return samples[0]["id"] if samples else None


def main() -> None:
    st.set_page_config(page_title="Sampling", layout="wide")
    st.title("Sampling")

    try:
        context = load_context()
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    samples = context["samples"]
    parts = {p["id"]: p for p in context["parts"]}
    plans = {p["id"]: p for p in context["plans"]}

    with st.sidebar:
        st.header("Create New Sample")
        new_sample_form(context["parts"], context["plans"])

    if not samples:
        st.info("No samples to measure. Create a new sample to start measurement.")
        return

    ids = [s["id"] for s in samples]
    selected = st.session_state.get("selected_sample_id") or default_sample_id(samples)
    sample_id = st.selectbox(
        "Sample",
        ids,
        index=ids.index(selected) if selected in ids else 0,
        format_func=lambda sid: next(f"{s['id']} - {s['batch_number']} ({s['status']})" for s in samples if s["id"] == sid),
    )
    st.session_state["selected_sample_id"] = sample_id
    sample = next(s for s in samples if s["id"] == sample_id)
    part = parts.get(sample["part_id"])
    plan = plans.get(sample["control_plan_id"])
    if part is None or plan is None:
        st.error("Missing data for part or plan.")
        return

    st.caption(f"Part: {part['name']} ({part['part_code']}) | Plan: {plan['name']} v{plan['version']} | Batch: {sample['batch_number']}")

    drawing_col, measure_col = st.columns([1, 1])
    with drawing_col:
        image = plan.get("drawing_image_url") or part.get("image_url")
        if image:
            if render_drawing(sample, plan, image):
                st.rerun()

        st.subheader("AI Analysis")
        if st.button("Generate analysis"):
            with st.spinner("Analyzing measurements..."):
                try:
                    st.markdown(api_post(f"/samples/{sample_id}/analysis")["analysis"])
                except httpx.HTTPError as exc:
                    st.error(error_detail(exc))

    with measure_col:
        summaries = api_get(f"/samples/{sample_id}/summary")
        selected = st.session_state.get(selected_parameter_key(sample_id))
        if render_measurement_panel(sample, plan, summaries, selected_parameter_id=selected):
            st.rerun()

        if sample["status"] != "Completed" and st.button("Save and complete", type="primary", use_container_width=True):
            if run_action("Complete sample", "POST", f"/samples/{sample_id}/complete") is not None:
                st.rerun()


if __name__ == "__main__":
    main()
