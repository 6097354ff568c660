# ======================================================
# LOD Checker AI — BIM Compliance Assistant
# ======================================================

import asyncio
import datetime
import os
import sys
from pathlib import Path

import streamlit as st

# ======================================================
# PATHS
# ======================================================
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from lod_checker.client import build_client
from lod_checker.config import configure_logging, load_settings
from lod_checker.controller import (
    AnalysisController,
    AppState,
    ContextChanged,
    ElementTypeChanged,
    ImageCleared,
    ResetRequested,
    TargetLODChanged,
)
from lod_checker.errors import ConfigError, ImageDecodeError
from lod_checker.ingest import preview_image
from lod_checker.models import LODLevel
from lod_checker.report import (
    badge_html,
    build_report_view,
    gauge_figure,
    report_frame,
    report_json,
)

# ======================================================
# STREAMLIT CONFIG
# ======================================================
st.set_page_config(page_title="LOD Checker AI", layout="wide")

SECRET_KEYS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "API_KEY",
    "LOD_CHECKER_MODEL",
    "LOD_CHECKER_BACKEND_URL",
    "LOD_CHECKER_MOCK",
)


def load_app_settings():
    # Streamlit Cloud provides secrets in TOML; env vars win, secrets fill the gaps
    source = dict(os.environ)
    try:
        for key in SECRET_KEYS:
            if key not in source and key in st.secrets:
                source[key] = str(st.secrets[key])
    except FileNotFoundError:
        pass
    return load_settings(source)


SETTINGS = load_app_settings()
configure_logging(SETTINGS.log_level)


@st.cache_resource
def get_client():
    """One analysis client per app process, shared by all sessions."""
    return build_client(SETTINGS)


# ======================================================
# SESSION STATE
# ======================================================
if "controller" not in st.session_state:
    st.session_state.controller = AnalysisController(history_limit=SETTINGS.history_limit)
ctrl: AnalysisController = st.session_state.controller

# Widget keys are dropped while their widget is off screen (e.g. on the report
# view), so they are re-seeded from the controller, which owns the values.
for k, default in [
    ("uploader_key", 0),
    ("decode_error", None),
    ("target_lod", ctrl.target_lod.value),
    ("element_type", ctrl.element_type),
    ("context", ctrl.context),
]:
    if k not in st.session_state:
        st.session_state[k] = default


# ======================================================
# EVENT HANDLERS
# ======================================================
def uploader_key():
    return f"upload_{st.session_state.uploader_key}"


def on_upload():
    uploaded_file = st.session_state[uploader_key()]
    st.session_state.decode_error = None
    if uploaded_file is None:
        ctrl.dispatch(ImageCleared())
        return
    try:
        ctrl.select_upload(uploaded_file, uploaded_file.type)
    except ImageDecodeError as e:
        st.session_state.decode_error = f"Could not read {uploaded_file.name}: {e}"


def on_remove_image():
    ctrl.dispatch(ImageCleared())
    st.session_state.uploader_key += 1


def on_target_lod():
    ctrl.dispatch(TargetLODChanged(LODLevel(st.session_state.target_lod)))


def on_element_type():
    ctrl.dispatch(ElementTypeChanged(st.session_state.element_type))


def on_context():
    ctrl.dispatch(ContextChanged(st.session_state.context))


def on_reset():
    ctrl.dispatch(ResetRequested())
    st.session_state.uploader_key += 1
    st.session_state.decode_error = None
    st.session_state.element_type = ""
    st.session_state.context = ""


# ======================================================
# RENDERING
# ======================================================
def render_list(title, items, box=None):
    if not items:
        return
    body = f"**{title}**\n\n" + "\n".join(f"- {item}" for item in items)
    if box is None:
        st.markdown(body)
    else:
        box(body)


def render_report(result):
    view = build_report_view(result)

    with st.container(border=True):
        c1, c2 = st.columns([3, 1])
        with c1:
            st.markdown(f"`{view.lod_target}`")
            st.subheader(view.element_name)
            st.write(view.summary)
        with c2:
            st.pyplot(gauge_figure(view.overall_score))

    cols = st.columns(3)
    for col, card in zip(cols, view.cards):
        with col, st.container(border=True):
            st.markdown(f"{card.style.icon} **{card.title}** &nbsp; {badge_html(card)}", unsafe_allow_html=True)
            st.metric("Score", f"{card.score} / 100")
            render_list("Observations", card.observations)
            render_list("Missing Elements", card.missing, st.error)
            render_list("Action Items", card.recommendations, st.info)

    with st.expander("📋 Report table & export"):
        frame = report_frame(result)
        st.dataframe(frame, width="stretch", hide_index=True)
        d1, d2 = st.columns(2)
        d1.download_button(
            label="📥 Download Report as CSV",
            data=frame.to_csv(index=False),
            file_name="lod_report.csv",
            mime="text/csv",
        )
        d2.download_button(
            label="📥 Download Report as JSON",
            data=report_json(result),
            file_name="lod_report.json",
            mime="application/json",
        )

    st.button("Analyze Another Model", on_click=on_reset)


def render_form(client_error):
    left, right = st.columns([7, 5])

    with left:
        with st.container(border=True):
            st.subheader("1 · Upload Model View")
            if ctrl.image is None:
                st.file_uploader(
                    "Drop model screenshot here or click to browse",
                    type=["png", "jpg", "jpeg", "webp", "gif", "bmp"],
                    key=uploader_key(),
                    on_change=on_upload,
                )
            else:
                st.image(preview_image(ctrl.image), caption="Preview", width="stretch")
                st.button("✖ Remove image", on_click=on_remove_image, disabled=ctrl.is_loading)
            if st.session_state.decode_error:
                st.error(st.session_state.decode_error)

        with st.container(border=True):
            st.subheader("2 · Configuration")
            st.radio(
                "Target Level of Development",
                [level.value for level in LODLevel],
                key="target_lod",
                on_change=on_target_lod,
                horizontal=True,
            )
            st.caption(ctrl.target_lod.hint)
            st.text_input(
                "Element Category (Optional)",
                placeholder="e.g., Structural Column, Air Handling Unit",
                key="element_type",
                on_change=on_element_type,
            )
            st.text_area(
                "Additional Context (Optional)",
                placeholder="Describe what we are looking at or paste property parameters here...",
                key="context",
                on_change=on_context,
                height=90,
            )

        run = st.button(
            "Run Compliance Check",
            type="primary",
            disabled=client_error is not None or not ctrl.can_analyze,
            width="stretch",
        )
        if run:
            with st.spinner("Analyzing Model Structure..."):
                asyncio.run(ctrl.run_analysis(get_client()))
            st.rerun()

        if ctrl.state is AppState.FAILED and ctrl.error:
            st.error(ctrl.error)

    with right:
        with st.container(border=True):
            st.markdown("#### How it works")
            st.markdown(
                """
- **Visual Analysis:** the AI identifies fabrication details like bolts, plates, and clearances to determine geometric LOD.
- **Parameter Inference:** missing non-geometric attributes (Fire Rating, Cost, Manufacturer) are inferred from the object's fidelity.
- **Information Level:** the element is judged against the target phase (Coordination, Fabrication, or Operations).
"""
            )
        m1, m2, m3 = st.columns(3)
        m1.metric("Design Development", "300")
        m2.metric("Fabrication", "400")
        m3.metric("As-Built", "500")


def render_history():
    st.sidebar.markdown("### 🕘 This session")
    if not ctrl.history:
        st.sidebar.caption("No analyses yet.")
        return
    for item in ctrl.history:
        when = datetime.datetime.fromtimestamp(item.timestamp).strftime("%H:%M:%S")
        with st.sidebar.expander(f"{when} · {item.result.element_name} · {item.result.overall_score}%"):
            st.image(item.image_url, width="stretch")
            st.caption(f"{item.target_lod.value} · {item.result.summary}")


# ======================================================
# HEADER
# ======================================================
st.title("🏗️ LOD Checker AI")
st.caption("BIM Compliance Assistant")

client_error = None
try:
    client = get_client()
    st.sidebar.markdown(f"**Analysis client:** `{client.name}`  \n**Model:** `{SETTINGS.model}`")
except ConfigError as e:
    client_error = str(e)
    st.warning(
        f"Analysis is disabled: {client_error}. "
        "Set it in the environment or `.streamlit/secrets.toml`, or set `LOD_CHECKER_BACKEND_URL` / `LOD_CHECKER_MOCK`."
    )

# ======================================================
# MAIN VIEW
# ======================================================
if ctrl.state is AppState.COMPLETED and ctrl.result is not None:
    render_report(ctrl.result)
else:
    render_form(client_error)

render_history()
