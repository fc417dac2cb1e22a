"""Free-text analysis of a sample's measurements.

A canned summary is produced locally unless ``QMS_ANALYSIS_MODE=live`` and
``GEMINI_API_KEY`` are set, in which case the readings are sent to the Gemini
``generateContent`` endpoint. The returned text is display-only.
"""

from __future__ import annotations

import os
import time
from collections.abc import Sequence

import httpx

from backend.core import logger
from backend.models.control_plan import BooleanParameter, NumericParameter
from backend.models.sample import Measurement

ANALYSIS_MODE_ENV_VAR = "QMS_ANALYSIS_MODE"
API_KEY_ENV_VAR = "GEMINI_API_KEY"
MODEL_ENV_VAR = "QMS_ANALYSIS_MODEL"
DELAY_ENV_VAR = "QMS_ANALYSIS_DELAY"
DEFAULT_MODEL = "gemini-2.5-flash"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
ERROR_TEXT = (
    "Error: Could not get analysis from AI. "
    "Please check your API key and network connection."
)

PROMPT_TEMPLATE = """\
You are a metrology expert. Analyze the following measurement data from a single manufactured part and provide a concise summary.
The summary should include an overall status, key findings, and actionable recommendations.

Measurement Data:
{data}
"""


def analyze_measurement_data(
    measurements: Sequence[Measurement],
    parameters: Sequence[NumericParameter | BooleanParameter],
    *,
    client: httpx.Client | None = None,
) -> str:
    """Return a markdown summary for the given readings."""
    mode = os.environ.get(ANALYSIS_MODE_ENV_VAR, "mock").strip().lower()
    api_key = os.environ.get(API_KEY_ENV_VAR)
    if mode != "live" or not api_key:
        logger.info("Using mocked analysis response.")
        _simulate_delay()
        return mock_summary(measurements)

    prompt = build_prompt(measurements, parameters)
    model = os.environ.get(MODEL_ENV_VAR, DEFAULT_MODEL)
    try:
        return _generate(prompt, model, api_key, client)
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
        logger.error("Error calling analysis API: %s", exc)
        return ERROR_TEXT


def mock_summary(measurements: Sequence[Measurement]) -> str:
    out_of_spec = sum(1 for m in measurements if not m.is_ok)
    if out_of_spec:
        return (
            "**AI Analysis Summary:**\n\n"
            "*   **Overall Status:** Concerns identified.\n"
            f"*   **Key Findings:** {out_of_spec} measurement(s) are out of specification.\n"
            "*   **Recommendation:** Review the manufacturing process for parameters that are "
            "consistently out of tolerance. Focus on machine calibration and tool wear. Further "
            "statistical process control (SPC) analysis is recommended."
        )
    return (
        "**AI Analysis Summary:**\n\n"
        "*   **Overall Status:** All measurements are within specified tolerances.\n"
        "*   **Key Findings:** The production process appears to be stable and capable.\n"
        "*   **Recommendation:** Continue monitoring the process. No immediate corrective "
        "actions are required based on this sample."
    )


def build_prompt(
    measurements: Sequence[Measurement],
    parameters: Sequence[NumericParameter | BooleanParameter],
) -> str:
    by_id = {parameter.id: parameter for parameter in parameters}
    lines = [_describe(m, by_id.get(m.parameter_id)) for m in measurements]
    return PROMPT_TEMPLATE.format(data="\n".join(lines))


def _describe(measurement: Measurement, parameter: NumericParameter | BooleanParameter | None) -> str:
    status = "OK" if measurement.is_ok else "Not OK"
    if parameter is None:
        return f"Unknown Parameter: {measurement.reading} (Status: {status})"
    if isinstance(parameter, BooleanParameter):
        return (
            f"{parameter.name}: {'Yes' if measurement.boolean_value else 'No'} "
            f"(Expected: {'Yes' if parameter.expected_value else 'No'}, Status: {status})"
        )
    return (
        f"{parameter.name}: {measurement.value} {parameter.unit} "
        f"(Nominal: {parameter.nominal}, Tolerance: -{parameter.tol_minus}/+{parameter.tol_plus}, "
        f"Status: {status})"
    )


def _generate(prompt: str, model: str, api_key: str, client: httpx.Client | None) -> str:
    url = GEMINI_URL.format(model=model)
    body = {"contents": [{"parts": [{"text": prompt}]}]}
    headers = {"x-goog-api-key": api_key}

    if client is None:
        with httpx.Client(timeout=30) as owned:
            response = owned.post(url, json=body, headers=headers)
    else:
        response = client.post(url, json=body, headers=headers)
    response.raise_for_status()

    payload = response.json()
    parts = payload["candidates"][0]["content"]["parts"]
    return "".join(part.get("text", "") for part in parts)


def _simulate_delay() -> None:
    raw = os.environ.get(DELAY_ENV_VAR, "0") or "0"
    try:
        delay = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number of seconds", DELAY_ENV_VAR, raw)
        delay = 0.0
    if delay > 0:
        time.sleep(delay)
