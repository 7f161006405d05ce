import streamlit as st
from core import (
    get_theme,
    apply_theme_css,
    load_dashboard_data,
    prepare_diagnosis,
    prepare_specialty,
    show_specialty_chart,
    show_specialty_summary,
)
from reports import REPORTLAB_AVAILABLE, build_chart_data_excel, build_pdf

theme = get_theme(False)
apply_theme_css(theme)

st.title("Readmission Rate by Medical Specialty")

hospital, specialty = load_dashboard_data()
state = prepare_specialty(specialty)

show_specialty_chart(state)
show_specialty_summary(state.series)

if not state.series.empty:
    diagnoses = prepare_diagnosis(hospital).series
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            "Download Chart Data (CSV)",
            state.series.rows.to_csv(index=False).encode("utf-8"),
            "specialty_readmission_sorted.csv",
            "text/csv",
        )
    with col2:
        st.download_button(
            "Download Both Charts' Data (Excel)",
            data=build_chart_data_excel(diagnoses, state.series),
            file_name="readmission_charts.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    with col3:
        if REPORTLAB_AVAILABLE:
            st.download_button(
                "Download Summary (PDF)",
                data=build_pdf(diagnoses, state.series),
                file_name="readmission_summary.pdf",
                mime="application/pdf",
            )
        else:
            st.info("Install `reportlab` to enable PDF export (pip install reportlab).")
