import streamlit as st
from core import (
    get_theme,
    apply_theme_css,
    load_dashboard_data,
    prepare_diagnosis,
    show_diagnosis_chart,
    show_diagnosis_summary,
)

theme = get_theme(False)
apply_theme_css(theme)

st.title("Diagnosis Frequency by Age Group")

hospital, _ = load_dashboard_data()
state = prepare_diagnosis(hospital)

show_diagnosis_chart(state)
show_diagnosis_summary(state.series)

if not state.series.empty:
    with st.expander("Chart data", expanded=False):
        st.dataframe(state.series.cells, use_container_width=True)
    st.download_button(
        "Download Chart Data (CSV)",
        state.series.cells.to_csv(index=False).encode("utf-8"),
        "diagnosis_by_age.csv",
        "text/csv",
    )
