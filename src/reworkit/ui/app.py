# ui/app.py
import logging

import streamlit as st

from reworkit.config import DB_FILE_PATH, configure_logging
from reworkit.db.errors import ResultNotFound
from reworkit.db.infra.core import init_db
from reworkit.ui.cache import cached_load_result, cached_load_results, invalidate_results
from reworkit.ui.views import (
    STATUS_FAILED,
    STATUS_OK,
    arch_matrix,
    filter_results,
    results_frame,
    summarize,
)

# ======================================================
# STREAMLIT PAGE CONFIG (must be first Streamlit call)
# ======================================================

st.set_page_config(
    page_title="ReworkIt build results",
    layout="wide",
)

logger = logging.getLogger(__name__)

configure_logging()

# Only migrate once per session; reruns reuse the initialized DB.
if "db_ready" not in st.session_state:
    init_db(DB_FILE_PATH)
    st.session_state.db_ready = True

# ======================================================
# SIDEBAR
# ======================================================

st.sidebar.title("ReworkIt")
if st.sidebar.button("Reload"):
    invalidate_results()

df = results_frame(cached_load_results())

all_arches = sorted(df["arch"].unique())
selected_arches = st.sidebar.multiselect("Architecture", all_arches)
status_choice = st.sidebar.radio("Status", ["all", STATUS_OK, STATUS_FAILED])
name_query = st.sidebar.text_input("Package name contains")

# ======================================================
# SUMMARY
# ======================================================

st.header("Build results")

summary = summarize(df)
col1, col2, col3, col4 = st.columns(4)
col1.metric("Packages", summary["packages"])
col2.metric("Results", summary["results"])
col3.metric("Succeeded", summary["succeeded"])
col4.metric("Failed", summary["failed"])

if df.empty:
    st.info("No build results recorded yet.")
    st.stop()

filtered = filter_results(
    df,
    arches=selected_arches,
    status=None if status_choice == "all" else status_choice,
    name_contains=name_query.strip(),
)

tab_list, tab_matrix = st.tabs(["Results", "By architecture"])
with tab_list:
    st.dataframe(filtered, use_container_width=True, hide_index=True)
with tab_matrix:
    st.dataframe(arch_matrix(filtered), use_container_width=True)

# ======================================================
# LOG VIEWER
# ======================================================

st.subheader("Build log")

if filtered.empty:
    st.caption("No results match the current filters.")
else:
    options = list(zip(filtered["name"], filtered["arch"]))
    choice = st.selectbox(
        "Result",
        options,
        format_func=lambda pair: f"{pair[0]} ({pair[1]})",
    )
    try:
        result = cached_load_result(*choice)
    except ResultNotFound:
        # removed since the list was cached
        invalidate_results()
        st.warning("This result no longer exists.")
    else:
        label = "✅ success" if result["success"] else "❌ failed"
        st.markdown(f"**{result['name']}** on `{result['arch']}`: {label}")
        st.code(result["log"] or "(empty log)", language="text")
        st.download_button(
            "Download log",
            data=result["log"],
            file_name=f"{result['name']}-{result['arch']}.log",
            mime="text/plain",
        )
