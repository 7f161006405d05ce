import streamlit as st

# ----------------------------
# ABOUT PAGE
# ----------------------------

st.title("About This Dashboard")

st.write(
    """
This dashboard shows two views of hospital readmission data:  
**how often the most common primary diagnoses occur in each age group**, and  
**how readmission rates differ between medical specialties**.  
Hover over a bar to highlight it and see its exact values.
"""
)

st.divider()

st.header("How the Charts Are Built")

st.markdown(
    """
**Diagnosis by age group**  
- The seven most frequent primary diagnoses (`diag_1`) are selected; ties keep the order
  in which the diagnoses first appear in the file.  
- Records with the diagnosis `Missing` or without an age group are left out.  
- Each bar is the number of patients for one diagnosis and age group.
  Combinations with no patients have no bar.  
- Age groups use a fixed ten-colour palette. If more than ten age groups appear,
  the palette repeats.

**Readmission rate by specialty**  
- Specialties are sorted from highest to lowest readmission rate.  
- The dashed red line is the **patient-weighted** average rate:
  the sum of rate × patients divided by the total number of patients.  
- Rates must be between 0 and 1 and sample sizes must be whole numbers;
  otherwise the chart reports the offending rows instead of drawing.
"""
)

st.divider()

st.header("Data Files")

st.markdown(
    """
- `hospital_readmissions.csv`: one row per patient encounter, with `diag_1` and `age`.  
- `specialty_readmission.csv`: one row per specialty, with `medical_specialty`,
  `readmission_rate` and `count`.  

Both files are read from the `data/` folder, or from the folder named in the
`READMISSION_DATA_DIR` environment variable.
"""
)
