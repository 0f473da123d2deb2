"""
Gradio web interface for the roof layout engine.

Enter a coordinate → see roof segments, move the panel slider → see the
chosen panels and the quote figures update.

Run:
    python app.py
"""

import logging

import gradio as gr

from solar_layout.analyze import build_report
from solar_layout.building_insights import fetch_and_process
from solar_layout.config import (
    GRANT_CAP_EUR,
    PANEL_UNIT_COST_EUR,
    TARIFF_EUR_PER_KWH,
    __version__,
)
from solar_layout.errors import TransportError
from solar_layout.fallback import synthesize_profile
from solar_layout.geometry import Coordinate

logging.basicConfig(level=logging.INFO, format="%(levelname)-8s %(message)s")


# ── Callbacks ─────────────────────────────────────────────────────────────────

def load_building(lat: str, lng: str, offline: bool):
    """Called when the user clicks Load.  Resets the slider to the default seed."""
    lat_val = _parse_float(lat)
    lng_val = _parse_float(lng)
    if lat_val is None or lng_val is None:
        return None, "❌ **Enter a latitude and a longitude.**", None, None, gr.update()

    coordinate = Coordinate(lat_val, lng_val)
    try:
        profile = synthesize_profile(coordinate) if offline else fetch_and_process(coordinate)
    except TransportError as exc:
        return None, f"❌ **Building insights unavailable:** {exc} — try again.", None, None, gr.update()

    result = build_report(profile)
    slider = gr.update(
        minimum=0,
        maximum=result["max_panels"],
        value=result["default_panel_count"],
        interactive=True,
    )
    return (
        profile,
        _format_summary(result),
        _format_quote(result),
        _format_segment_table(result),
        slider,
    )


def change_panels(profile, panels: float):
    """Called on every slider move; reuses the loaded profile."""
    if profile is None:
        return None, None
    result = build_report(profile, int(panels))
    return _format_quote(result), _format_segment_table(result)


def _parse_float(s: str) -> float | None:
    if not s or not s.strip():
        return None
    try:
        return float(s.strip())
    except ValueError:
        return None


# ── Formatters ────────────────────────────────────────────────────────────────

def _format_summary(result: dict) -> str:
    source = "synthesized roof (no imagery coverage)" if result["is_fallback"] \
        else f"{result['imagery_quality']} quality imagery"
    return (
        f"## ☀️ {result['building_id'] or 'Building'}\n\n"
        f"**{len(result['segments'])} roof segments** · "
        f"{result['total_roof_area_m2']:,.0f} m² · up to **{result['max_panels']} panels**\n\n"
        f"*Source: {source}*"
    )


def _format_quote(result: dict) -> str:
    sel = result["selection"]
    p = result["projection"]
    return f"""### 💶 Your Solar Quote — {sel['chosen_count']} panels

| Metric | Value |
|--------|-------|
| **System Size** | {p['system_size_kw']:,.1f} kW |
| **Roof Coverage** | {p['roof_coverage_percent']:.1f} % |
| **Annual Generation** | {sel['total_yearly_energy_kwh']:,.0f} kWh |
| **Estimated Cost** | €{p['estimated_cost']:,.0f} |
| **SEAI Grant** | €{p['grant']:,.0f} |
| **Net Cost** | €{p['net_cost']:,.0f} |
| **Monthly Savings** | €{p['monthly_savings']:,.0f} |
| **25-Year Savings** | €{p['horizon_savings']:,.0f} |
| **Payback** | {p['payback_years']:.1f} years |
| **CO₂ Saved** | {p['co2_tonnes']:.1f} t/yr |
| **Trees Equivalent** | {round(p['trees_equivalent'])} |
| **Home Value Increase** | €{p['home_value_increase']:,.0f} |
"""


def _format_segment_table(result: dict) -> str:
    if not result.get("segments"):
        return "No segments found."

    rows = "| Segment | Quality | Facing | Pitch (°) | Area (m²) | Panels |\n"
    rows += "|---------|---------|--------|-----------|-----------|--------|\n"
    for s in result["segments"]:
        rows += (
            f"| #{s['index']} | {s['quality_class']} | "
            f"{s['direction']} ({s['azimuth_degrees']:.0f}°) | "
            f"{s['pitch_degrees']:.0f} | {s['area_m2']:,.1f} | "
            f"{s['chosen_count']} / {s['candidate_count']} |\n"
        )
    return rows


# ── Gradio UI ─────────────────────────────────────────────────────────────────

def build_app() -> gr.Blocks:
    with gr.Blocks(
        title="☀️ Solar Layout",
        theme=gr.themes.Soft(),
    ) as app:

        gr.Markdown(
            """
            # ☀️ Solar Layout — Panel Planner

            **Pick a location → choose how many panels → see what they save.**
            """
        )

        profile_state = gr.State(None)

        with gr.Row():
            # ── Left column: Inputs ───────────────────────────────────────
            with gr.Column(scale=1):
                with gr.Row():
                    lat_input = gr.Textbox(label="Latitude", placeholder="e.g. 53.3498", scale=1)
                    lng_input = gr.Textbox(label="Longitude", placeholder="e.g. -6.2603", scale=1)

                offline_toggle = gr.Checkbox(
                    value=False,
                    label="Offline mode",
                    info="Skip the Google Solar API and use a synthesized roof",
                )
                load_btn = gr.Button("📍 Load Roof", variant="primary", size="lg")

                panel_slider = gr.Slider(
                    minimum=0,
                    maximum=0,
                    value=0,
                    step=1,
                    label="Solar panels",
                    interactive=False,
                )
                gr.Markdown(
                    f"*€{PANEL_UNIT_COST_EUR:,.0f}/panel · grant capped at "
                    f"€{GRANT_CAP_EUR:,.0f} · €{TARIFF_EUR_PER_KWH}/kWh*"
                )

            # ── Right column: Outputs ─────────────────────────────────────
            with gr.Column(scale=2):
                summary_output = gr.Markdown(value="*Enter a coordinate and click Load Roof.*")
                quote_output = gr.Markdown(label="Quote")
                segments_output = gr.Markdown(label="Roof Segments")

        load_btn.click(
            fn=load_building,
            inputs=[lat_input, lng_input, offline_toggle],
            outputs=[profile_state, summary_output, quote_output, segments_output, panel_slider],
        )
        panel_slider.change(
            fn=change_panels,
            inputs=[profile_state, panel_slider],
            outputs=[quote_output, segments_output],
        )

        gr.Markdown(f"---\n*Solar Layout v{__version__} · Powered by Google Solar API*")

    return app


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app = build_app()
    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False,
        inbrowser=True,
    )
