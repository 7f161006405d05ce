import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import streamlit as st

from charts import diagnosis_chart, specialty_chart
from prep import (
    ChartDataError,
    CoercionError,
    DataShapeError,
    DiagnosisSeries,
    ResourceLoadError,
    SpecialtySeries,
    aggregate_diagnoses,
    aggregate_specialties,
    diagnosis_totals,
    empty_diagnosis_series,
    empty_specialty_series,
    top_specialties,
)
from scales import diagnosis_scales, specialty_scales

log = logging.getLogger("readmission.core")

# ------------------------------
# DATA PATHS
# ------------------------------
DATA_DIR = Path(os.environ.get("READMISSION_DATA_DIR", "data"))
HOSPITAL_CSV = "hospital_readmissions.csv"
SPECIALTY_CSV = "specialty_readmission.csv"


# ------------------------------
# DATA LOADING
# ------------------------------
@dataclass
class LoadResult:
    """Either a loaded frame or the error that stopped it."""

    name: str
    frame: pd.DataFrame | None = None
    error: ResourceLoadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def read_records(path: Path) -> pd.DataFrame:
    """Read a CSV with every field kept as a string."""
    path = Path(path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except FileNotFoundError as exc:
        raise ResourceLoadError(f"File not found: {path}") from exc
    except pd.errors.EmptyDataError:
        log.warning("%s is empty", path)
        return pd.DataFrame()
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
        raise ResourceLoadError(f"Could not read {path}: {exc}") from exc

    df.columns = [c.strip() for c in df.columns]
    log.info("Loaded %d rows from %s", len(df), path)
    return df


def _load_one(path: Path) -> LoadResult:
    try:
        return LoadResult(name=path.name, frame=read_records(path))
    except ResourceLoadError as exc:
        log.error("%s", exc)
        return LoadResult(name=path.name, error=exc)


def load_both(data_dir: Path = DATA_DIR) -> tuple[LoadResult, LoadResult]:
    """Read both CSVs concurrently and wait for both to finish."""
    data_dir = Path(data_dir)
    paths = [data_dir / HOSPITAL_CSV, data_dir / SPECIALTY_CSV]
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="csv") as pool:
        hospital, specialty = pool.map(_load_one, paths)
    return hospital, specialty


@st.cache_data
def load_dashboard_data(data_dir: str = str(DATA_DIR)) -> tuple[LoadResult, LoadResult]:
    return load_both(Path(data_dir))


# ------------------------------
# CHART PREPARATION
# ------------------------------
@dataclass
class ChartState:
    """Series for one chart plus the problem to show next to it, if any."""

    series: DiagnosisSeries | SpecialtySeries
    problem: ChartDataError | None = None


def prepare_diagnosis(result: LoadResult) -> ChartState:
    if not result.ok:
        return ChartState(empty_diagnosis_series(), result.error)
    try:
        return ChartState(aggregate_diagnoses(result.frame))
    except DataShapeError as exc:
        log.warning("Diagnosis chart: %s", exc)
        return ChartState(empty_diagnosis_series(), exc)


def prepare_specialty(result: LoadResult) -> ChartState:
    if not result.ok:
        return ChartState(empty_specialty_series(), result.error)
    try:
        return ChartState(aggregate_specialties(result.frame))
    except (DataShapeError, CoercionError) as exc:
        log.warning("Specialty chart: %s", exc)
        return ChartState(empty_specialty_series(), exc)


# ------------------------------
# THEME (LIGHT ONLY) + CSS
# ------------------------------
def get_theme(dark_mode: bool = False) -> dict:
    """Return theme colors. We always use the light theme."""
    return {
        "APP_BG": "#f3f4f6",
        "TEXT_COLOR": "#111827",
        "CARD_GRADIENT": "linear-gradient(135deg, #ffffff 0%, #f3f4f6 100%)",
        "BORDER": "#e5e7eb",
        "SUBTXT": "#6b7280",
    }


def apply_theme_css(theme: dict) -> None:
    """Inject CSS for the light theme and the Vega tooltip."""
    APP_BG = theme["APP_BG"]
    TEXT_COLOR = theme["TEXT_COLOR"]

    st.markdown(
        f"""
        <style>
        .stApp {{
            background-color: {APP_BG};
            color: {TEXT_COLOR};
            font-family: Georgia, serif;
        }}
        #vg-tooltip-element {{
            background: rgba(0, 0, 0, 0.85);
            color: white;
            padding: 10px 12px;
            border-radius: 6px;
            font-size: 13px;
            font-family: Georgia, serif;
            box-shadow: 0 4px 6px rgba(0,0,0,0.3);
        }}
        </style>
        """,
        unsafe_allow_html=True,
    )


# ------------------------------
# CHART RENDERERS
# ------------------------------
def _anchor(anchor_id: str) -> None:
    # empty link target placed before the chart; Streamlit cannot nest the chart in it
    st.markdown(f"<div id='{anchor_id}'></div>", unsafe_allow_html=True)


def _show_problem(problem: ChartDataError | None) -> bool:
    """Report a chart problem; True when nothing should be drawn."""
    if problem is None:
        return False
    if isinstance(problem, ResourceLoadError):
        st.error(f"Chart data could not be loaded. {problem}")
        return True
    if isinstance(problem, CoercionError):
        st.error(f"Chart data is invalid. {problem}")
        return True
    st.warning(f"Chart data is incomplete, showing an empty chart. {problem}")
    return False


def show_diagnosis_chart(state: ChartState, anchor_id: str = "v6") -> None:
    """Render the diagnosis-by-age chart under its anchor."""
    _anchor(anchor_id)
    with st.container():
        if _show_problem(state.problem):
            return
        series = state.series
        if series.empty:
            st.info("No diagnosis records with an age group to show.")
        chart = diagnosis_chart(series, diagnosis_scales(series))
        st.altair_chart(chart, use_container_width=False)


def show_specialty_chart(state: ChartState, anchor_id: str = "v7") -> None:
    """Render the specialty readmission chart under its anchor."""
    _anchor(anchor_id)
    with st.container():
        if _show_problem(state.problem):
            return
        series = state.series
        if series.empty:
            st.info("No specialty rows to show.")
        chart = specialty_chart(series, specialty_scales(series))
        st.altair_chart(chart, use_container_width=False)


# ------------------------------
# SUMMARY HELPERS
# ------------------------------
def show_diagnosis_summary(series: DiagnosisSeries) -> None:
    if series.empty:
        return
    totals = diagnosis_totals(series)
    st.markdown("### Quick Summary")
    st.markdown(
        f"""
        - **Diagnoses shown:** {len(series.diagnoses)}
        - **Age groups observed:** {len(series.ages)}
        - **Patients counted:** {int(totals["count"].sum()):,}
        - **Most frequent diagnosis:** {totals.iloc[0]["diagnosis"]}
          ({int(totals.iloc[0]["count"]):,} patients)
        """
    )


def show_specialty_summary(series: SpecialtySeries) -> None:
    if series.empty:
        return
    st.markdown("### Quick Summary")
    rate = "n/a" if series.overall_rate is None else f"{series.overall_rate * 100:.1f}%"
    st.markdown(
        f"""
        - **Specialties:** {len(series.rows)}
        - **Patients:** {series.total_patients:,}
        - **Patient-weighted readmission rate:** {rate}
        """
    )
    top = top_specialties(series)
    top["readmission_rate"] = (top["readmission_rate"] * 100).round(1)
    top.columns = ["Specialty", "Readmission Rate (%)", "Patients"]
    st.table(top)
