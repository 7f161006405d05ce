import streamlit as st
from core import (
    get_theme,
    apply_theme_css,
    load_dashboard_data,
    prepare_diagnosis,
    prepare_specialty,
    show_diagnosis_chart,
    show_specialty_chart,
)

# This MUST be the first Streamlit command in the whole app
st.set_page_config(
    page_title="Hospital Readmissions",
    page_icon="🏥",
    layout="wide",
)

theme = get_theme(False)
apply_theme_css(theme)

st.title("Hospital Readmissions")
st.write(
    "Diagnosis frequency by age group and readmission rate by medical specialty. "
    "Use the navigation in the left sidebar to open the detail page for each chart "
    "or the **About** page."
)

hospital, specialty = load_dashboard_data()

# each chart fails on its own; the other one still renders
show_diagnosis_chart(prepare_diagnosis(hospital), anchor_id="v6")
show_specialty_chart(prepare_specialty(specialty), anchor_id="v7")
