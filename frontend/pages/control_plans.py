"""Control plan editor: parameters, tolerances and versions."""

import sys
from pathlib import Path
from typing import Any

import httpx
import pandas as pd
import streamlit as st

sys.path.insert(0, str(Path(__file__).parent.parent))
from streamlit_app import api_get_all, error_detail, run_action


def parameter_table(plan: dict[str, Any]) -> pd.DataFrame:
    rows = []
    for p in plan["parameters"]:
        if p["type"] == "numeric":
            spec = f"{p['nominal']:g} +{p['tol_plus']:g} / -{p['tol_minus']:g} {p.get('unit', '')}"
        else:
            spec = f"Expected: {'Yes' if p['expected_value'] else 'No'}"
        rows.append({"id": p["id"], "Name": p["name"], "Type": p["type"], "Specification": spec})
    return pd.DataFrame(rows, columns=["id", "Name", "Type", "Specification"])


def parameter_form(plan_id: str, parameter: dict[str, Any] | None) -> None:
    key = parameter["id"] if parameter else "new"
    parameter = parameter or {}
    kind = st.radio(
        "Type",
        ["numeric", "boolean"],
        index=0 if parameter.get("type", "numeric") == "numeric" else 1,
        horizontal=True,
        key=f"ptype-{plan_id}-{key}",
    )
    with st.form(f"param-{plan_id}-{key}"):
        payload: dict[str, Any] = {"type": kind, "name": st.text_input("Name", value=parameter.get("name", ""))}
        if kind == "numeric":
            payload["nominal"] = st.number_input("Nominal", value=float(parameter.get("nominal", 0.0)), format="%.4f")
            payload["tol_plus"] = st.number_input("Tol +", min_value=0.0, value=float(parameter.get("tol_plus", 0.0)), format="%.4f")
            payload["tol_minus"] = st.number_input("Tol -", min_value=0.0, value=float(parameter.get("tol_minus", 0.0)), format="%.4f")
            payload["unit"] = st.text_input("Unit", value=parameter.get("unit", "mm"))
        else:
            payload["expected_value"] = st.checkbox("Expected value is Yes", value=bool(parameter.get("expected_value", True)))
        if st.form_submit_button("Save parameter"):
            if key == "new":
                run_action("Add parameter", "POST", f"/control-plans/{plan_id}/parameters", payload)
            else:
                run_action("Save parameter", "PUT", f"/control-plans/{plan_id}/parameters/{key}", payload)


def plan_form(parts: list[dict[str, Any]], plan: dict[str, Any] | None) -> None:
    key = plan["id"] if plan else "new"
    active_parts = [p for p in parts if p["status"] == "Active" or (plan and p["id"] == plan["part_id"])]
    part_ids = [p["id"] for p in active_parts]
    with st.form(f"plan-form-{key}"):
        name = st.text_input("Plan name", value=(plan or {}).get("name", ""))
        part_id = st.selectbox(
            "Part",
            part_ids,
            index=part_ids.index(plan["part_id"]) if plan and plan["part_id"] in part_ids else 0,
            format_func=lambda pid: next(p["name"] for p in active_parts if p["id"] == pid),
        )
        drawing = st.text_input("Drawing image URL", value=(plan or {}).get("drawing_image_url") or "")
        if st.form_submit_button("Save plan"):
            payload = {"name": name, "part_id": part_id, "drawing_image_url": drawing or None}
            if plan:
                run_action("Save plan", "PUT", f"/control-plans/{plan['id']}", payload)
            else:
                run_action("Create plan", "POST", "/control-plans/", payload)


def plan_actions(plan: dict[str, Any]) -> None:
    if plan["status"] == "Archived":
        if st.button("Restore plan"):
            run_action("Restore plan", "POST", f"/control-plans/{plan['id']}/restore")
        return

    confirm = st.checkbox("I confirm archiving / creating a new version (the current version will be archived)")
    archive_col, revise_col = st.columns(2)
    if archive_col.button("Archive plan", disabled=not confirm):
        run_action("Archive plan", "POST", f"/control-plans/{plan['id']}/archive")
    if revise_col.button("New version", disabled=not confirm):
        run_action("Create version", "POST", f"/control-plans/{plan['id']}/revisions")


def main() -> None:
    st.set_page_config(page_title="Control Plans", layout="wide")
    st.title("Control Plans")

    show_archived = st.toggle("Show Archived")
    status = "Archived" if show_archived else "Active"
    try:
        plans = api_get_all("/control-plans/", {"status": status})
        parts = api_get_all("/parts/")
    except httpx.HTTPError as exc:
        st.error(error_detail(exc))
        return

    with st.expander("Add plan"):
        plan_form(parts, None)

    if not plans:
        st.info(f"No {status.lower()} control plans.")
        return

    part_names = {p["id"]: p["name"] for p in parts}
    plan = st.selectbox(
        "Plan",
        plans,
        format_func=lambda p: f"{p['name']} (v{p['version']}) - {part_names.get(p['part_id'], 'Unknown Part')}",
    )

    table = parameter_table(plan)
    st.dataframe(table.drop(columns=["id"]), use_container_width=True, hide_index=True)

    edit_col, param_col = st.columns(2)
    with edit_col:
        plan_form(parts, plan)
        plan_actions(plan)
    with param_col:
        options = ["(new parameter)", *[p["id"] for p in plan["parameters"]]]
        chosen = st.selectbox(
            "Parameter",
            options,
            format_func=lambda pid: pid if pid == options[0] else next(p["name"] for p in plan["parameters"] if p["id"] == pid),
        )
        parameter = next((p for p in plan["parameters"] if p["id"] == chosen), None)
        parameter_form(plan["id"], parameter)
        if parameter and st.checkbox("Confirm delete parameter") and st.button("Delete parameter"):
            run_action("Delete parameter", "DELETE", f"/control-plans/{plan['id']}/parameters/{parameter['id']}")


if __name__ == "__main__":
    main()
