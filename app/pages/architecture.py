import streamlit as st

st.set_page_config(page_title="Architecture · LOD Checker AI", layout="centered")

st.title("🏗️ Architecture Overview")
st.caption("How a model screenshot becomes an LOD compliance report")

st.divider()

st.subheader("🔄 High-Level Pipeline")

st.markdown(
    """
    ```text
    Model Screenshot Upload
    (file picker / drag-and-drop)
            │
            ▼
    Image Ingestor
    (decode check, base64 payload + preview)
            │
            ▼
    State Controller ───── target LOD, element type, context
    (Idle → Staged → Analyzing)
            │
            ▼
    Analysis Client ─────────────┐
    (Gemini direct, or           │  strict JSON schema
     FastAPI backend /analyze)   │  on request and reply
            │                    │
            ▼                    │
    Schema Validation ◄──────────┘
    (reject, never patch)
            │
      ┌─────┴──────┐
      ▼            ▼
    Completed     Failed
    (report)      (generic message, cause logged)
      │
      ▼
    Report Renderer
    (score gauge, facet cards, CSV / JSON export)
    ```
    """
)

st.divider()

st.subheader("🧩 Component Breakdown")

with st.expander("1️⃣ Image Ingestor", expanded=True):
    st.markdown(
        """
        - Reads the upload once and checks that Pillow can decode it
        - Produces the bare base64 payload sent to the service and a data URL for previews
        - Unreadable files are reported immediately, before any request is made
        """
    )

with st.expander("2️⃣ Analysis Client", expanded=False):
    st.markdown(
        """
        - Sends the image and a three-facet instruction (geometry, parameters, information level)
        - Declares the response schema so the model answers in structured JSON
        - Validates every reply; a missing field or unknown status is a failure, not a guess
        """
    )

with st.expander("3️⃣ State Controller", expanded=False):
    st.markdown(
        """
        - Explicit states: Idle, Staged, Analyzing, Completed, Failed
        - Only one analysis runs at a time; a second click while analyzing does nothing
        - Responses that arrive after a reset or a new upload are discarded
        - Reset keeps the chosen target LOD
        """
    )

with st.expander("4️⃣ Report Renderer", expanded=False):
    st.markdown(
        """
        - Overall score gauge (red up to 60, yellow up to 85, green above)
        - One card per facet with status badge, observations, missing items and action items
        - Table view with CSV and JSON downloads
        """
    )

st.divider()

st.subheader("📐 LOD Tiers")

st.markdown(
    """
    | Tier | Meaning |
    |---|---|
    | **LOD 300** | Precise geometry: size, shape, location and orientation; no fabrication detail |
    | **LOD 400** | Fabrication: bolts, welds, connections, reinforcement and fittings modeled |
    | **LOD 500** | As-built: field verified, with manufacturer, model, serial and installation data |
    """
)

st.caption("© LOD Checker AI · Architecture Overview")
