# main.py
import json
import logging

import pandas as pd
import streamlit as st

from code_analyzer import analyze, render_diagram
from flowchart_generator import flowchart_to_dot
from language_detect import EXTENSION_LANGUAGES
from metrics_calculator import calculate_metrics
from utils import display_name, explain_metrics

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

LANGUAGE_CHOICES = ["(auto)"] + sorted(set(EXTENSION_LANGUAGES.values()))

st.set_page_config(page_title="Code Flow Diagrams", layout="wide")
st.title("🔀 Code Flow Diagrams")

# ---------- Top instructions ----------
st.markdown(
    """
**How to use**

1. Upload a source file OR paste code in the sidebar (JavaScript/TypeScript, C/C++, Python, ...).
2. Optionally give a file name and a language hint.
3. Click **Process Code**.
4. Explore the tabs: **Flowchart**, **Mind map**, **Summary**, **Metrics**, **Raw JSON**.
"""
)

# ---------- Sidebar: input & process button ----------
st.sidebar.header("Input")
uploaded_file = st.sidebar.file_uploader("Upload a source file", type=sorted(EXTENSION_LANGUAGES))
code_area = st.sidebar.text_area("Or paste code here", height=300)
path_hint = st.sidebar.text_input("File name hint (optional)", value="")
language_hint = st.sidebar.selectbox("Language hint", LANGUAGE_CHOICES)
process_button = st.sidebar.button("▶ Process Code")

if "last_code" not in st.session_state:
    st.session_state["last_code"] = ""
    st.session_state["last_path"] = ""

if uploaded_file is not None:
    raw = uploaded_file.read()
    st.session_state["last_code"] = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    st.session_state["last_path"] = uploaded_file.name
elif code_area and code_area.strip():
    st.session_state["last_code"] = code_area
    st.session_state["last_path"] = ""

code = st.session_state.get("last_code", "")
file_path = path_hint.strip() or st.session_state.get("last_path", "")
hint = "" if language_hint == "(auto)" else language_hint

if process_button:
    st.session_state["run_analysis"] = True

if "run_analysis" not in st.session_state:
    st.info("Press **Process Code** in the sidebar to analyze the provided code.")
    st.stop()

if not code.strip():
    st.error("No code provided. Paste code in the sidebar or upload a file.")
    st.stop()

with st.spinner("Analyzing code..."):
    result = analyze(code, file_path, hint)
    title = display_name(file_path, result.language)
    flowchart = render_diagram(result.cfg_nodes, "flowchart")
    mindmap = render_diagram(result.cfg_nodes, "mindmap", title=title)

    metrics = {}
    try:
        metrics = calculate_metrics(result.cfg_nodes, code, result.language)
    except Exception as e:
        logger.warning("metrics failed: %s", e)
        st.warning("Metrics could not be computed: " + str(e))

st.caption(f"Detected **{result.language}** ({result.dialect} dialect)")
if not result.has_structure:
    st.warning("No control-flow structure was recognised; the diagrams below are minimal.")

overall_metrics = metrics.get("_overall", {})
functions_metrics = {k: v for k, v in metrics.items() if k != "_overall"}
df = pd.DataFrame.from_dict(functions_metrics, orient="index") if functions_metrics else pd.DataFrame()

# ---------- Tabs ----------
tab_flow, tab_mind, tab_summary, tab_metrics, tab_raw = st.tabs(
    ["🔗 Flowchart", "🧠 Mind map", "📝 Summary", "📊 Metrics", "📦 Raw JSON"]
)

# ----- Flowchart Tab -----
with tab_flow:
    st.header("Flowchart")
    try:
        st.graphviz_chart(flowchart_to_dot(flowchart, name=title))
    except Exception as e:
        st.warning(f"Preview failed: {e}")
    with st.expander("Mermaid source", expanded=True):
        st.code(flowchart, language="text")
    st.download_button("⬇️ Download flowchart (.mmd)", flowchart, file_name="flowchart.mmd",
                       mime="text/plain", key="flowchart_dl")

# ----- Mind map Tab -----
with tab_mind:
    st.header("Mind map")
    st.code(mindmap, language="text")
    st.download_button("⬇️ Download mind map (.mmd)", mindmap, file_name="mindmap.mmd",
                       mime="text/plain", key="mindmap_dl")

# ----- Summary Tab -----
with tab_summary:
    st.header("Structural summary")
    st.code(result.summary, language="text")

# ----- Metrics Tab -----
with tab_metrics:
    st.header("Metrics")
    if df.empty:
        st.info("No metrics available.")
    else:
        def _highlight_cc(val):
            if val > 10:
                return "background-color: #ff9999"
            if val > 5:
                return "background-color: #ffe599"
            return ""

        styled = df.style.map(lambda v: _highlight_cc(v) if isinstance(v, (int, float)) else "",
                              subset=["cyclomatic_complexity"]).format(precision=0, na_rep="-")
        st.dataframe(styled, width="stretch")

        for name, text in explain_metrics(functions_metrics).items():
            st.markdown(f"- {text}")

    if overall_metrics:
        st.subheader("Overall")
        st.json(overall_metrics)

# ----- Raw JSON Tab -----
with tab_raw:
    st.header("Raw analysis JSON")
    full_report = {"analysis": result.to_dict(), "metrics": metrics}
    st.json(full_report)

    st.download_button("Download full JSON", json.dumps(full_report, indent=2), file_name="analysis.json",
                       mime="application/json", key="analysis_json_dl")
    if not df.empty:
        st.download_button("Download metrics CSV", df.to_csv().encode("utf-8"), file_name="metrics.csv",
                           mime="text/csv", key="metrics_csv_dl")

st.markdown("---")
st.markdown("Built with ❤️ to show how your code flows.")
