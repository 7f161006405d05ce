import logging
import math
from dataclasses import dataclass, field

import pandas as pd

log = logging.getLogger("readmission.prep")

# ------------------------------
# CONSTANTS
# ------------------------------
TOP_DIAGNOSES = 7
MISSING_DIAGNOSIS = "Missing"

DIAGNOSIS_COLUMNS = ["diag_1", "age"]
SPECIALTY_COLUMNS = ["medical_specialty", "readmission_rate", "count"]


# ------------------------------
# ERRORS
# ------------------------------
class ChartDataError(Exception):
    """Base class for everything that stops a chart from rendering."""


class ResourceLoadError(ChartDataError):
    """A CSV file is missing, unreadable or cannot be parsed."""


class DataShapeError(ChartDataError):
    """Expected columns are missing from a non-empty input."""


class CoercionError(ChartDataError, ValueError):
    """A numeric field holds a value that is not a valid number."""

    def __init__(self, column: str, rows: list, reason: str = "not numeric"):
        self.column = column
        self.rows = rows
        shown = ", ".join(str(r) for r in rows[:5])
        if len(rows) > 5:
            shown += ", ..."
        super().__init__(f"Column '{column}' is {reason} in rows: {shown}")


InvalidDataError = CoercionError


# ------------------------------
# RESULT TYPES
# ------------------------------
@dataclass
class DiagnosisSeries:
    cells: pd.DataFrame
    diagnoses: list = field(default_factory=list)
    ages: list = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.cells.empty


@dataclass
class SpecialtySeries:
    rows: pd.DataFrame
    total_patients: int = 0
    total_readmissions: float = 0.0
    overall_rate: float | None = None

    @property
    def empty(self) -> bool:
        return self.rows.empty


def _require_columns(df: pd.DataFrame, columns: list) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataShapeError(f"Expected column(s) not found in CSV: {', '.join(missing)}")


# ------------------------------
# DIAGNOSIS x AGE
# ------------------------------
def empty_diagnosis_series() -> DiagnosisSeries:
    cells = pd.DataFrame(
        {
            "diagnosis": pd.Series(dtype=str),
            "age": pd.Series(dtype=str),
            "count": pd.Series(dtype="int64"),
        }
    )
    return DiagnosisSeries(cells=cells)


def rank_diagnoses(records: pd.DataFrame, top_n: int = TOP_DIAGNOSES) -> list:
    """Most frequent `diag_1` codes, ties kept in first-occurrence order."""
    codes = records["diag_1"].astype(str)
    counts = codes.groupby(codes, sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    return list(counts.index[:top_n])


def aggregate_diagnoses(records: pd.DataFrame, top_n: int = TOP_DIAGNOSES) -> DiagnosisSeries:
    """Count records per (diagnosis, age) for the most frequent diagnoses.

    The ranking runs over every record, so a frequent "Missing" code takes
    one of the slots and is then filtered out together with empty ages.
    Cells come out grouped by diagnosis in order of first appearance, and
    within a diagnosis by age in order of first appearance.
    """
    if records.empty:
        return empty_diagnosis_series()
    _require_columns(records, DIAGNOSIS_COLUMNS)

    top = rank_diagnoses(records, top_n)

    diag = records["diag_1"].astype(str)
    age = records["age"].fillna("").astype(str)
    mask = diag.isin(top) & (diag != MISSING_DIAGNOSIS) & (age != "")
    filtered = pd.DataFrame({"diagnosis": diag[mask], "age": age[mask]})
    log.debug("Diagnosis filter kept %d of %d records", len(filtered), len(records))

    if filtered.empty:
        return empty_diagnosis_series()

    cells = filtered.groupby(["diagnosis", "age"], sort=False).size().reset_index(name="count")

    # pair order of first appearance -> nested order (diagnosis first, then age)
    first_seen = {d: i for i, d in enumerate(pd.unique(filtered["diagnosis"]))}
    cells = cells.sort_values(
        "diagnosis", key=lambda s: s.map(first_seen), kind="stable"
    ).reset_index(drop=True)
    cells["count"] = cells["count"].astype("int64")

    present = set(cells["diagnosis"])
    diagnoses = [d for d in top if d in present]
    ages = sorted(cells["age"].unique())

    return DiagnosisSeries(cells=cells, diagnoses=diagnoses, ages=ages)


def diagnosis_totals(series: DiagnosisSeries) -> pd.DataFrame:
    """Total patients per diagnosis, in chart order."""
    if series.empty:
        return pd.DataFrame({"diagnosis": pd.Series(dtype=str), "count": pd.Series(dtype="int64")})
    totals = series.cells.groupby("diagnosis", sort=False)["count"].sum()
    return totals.reindex(series.diagnoses).reset_index()


# ------------------------------
# SPECIALTY READMISSION
# ------------------------------
def empty_specialty_series() -> SpecialtySeries:
    rows = pd.DataFrame(
        {
            "medical_specialty": pd.Series(dtype=str),
            "readmission_rate": pd.Series(dtype="float64"),
            "count": pd.Series(dtype="int64"),
        }
    )
    return SpecialtySeries(rows=rows)


def _parse_numeric(column: pd.Series, name: str) -> pd.Series:
    text = column.astype(str).str.strip()
    values = pd.to_numeric(text, errors="coerce")
    bad = values.isna()
    if bad.any():
        raise CoercionError(name, list(column.index[bad]))
    return values.astype("float64")


def aggregate_specialties(records: pd.DataFrame) -> SpecialtySeries:
    """Validate specialty rows, sort them by rate and compute the weighted rate."""
    if records.empty:
        return empty_specialty_series()
    _require_columns(records, SPECIALTY_COLUMNS)

    rates = _parse_numeric(records["readmission_rate"], "readmission_rate")
    out_of_range = (rates < 0) | (rates > 1)
    if out_of_range.any():
        raise CoercionError(
            "readmission_rate", list(rates.index[out_of_range]), reason="outside [0, 1]"
        )

    counts = _parse_numeric(records["count"], "count")
    not_whole = (counts < 0) | (counts.abs() == float("inf")) | (counts != counts.round())
    if not_whole.any():
        raise CoercionError(
            "count", list(counts.index[not_whole]), reason="not a non-negative integer"
        )

    rows = pd.DataFrame(
        {
            "medical_specialty": records["medical_specialty"].astype(str),
            "readmission_rate": rates,
            "count": counts.astype("int64"),
        }
    )
    rows = rows.sort_values("readmission_rate", ascending=False, kind="stable")
    rows = rows.reset_index(drop=True)

    total_patients = int(rows["count"].sum())
    total_readmissions = math.fsum(rows["readmission_rate"] * rows["count"])
    overall_rate = None
    if total_patients > 0:
        # rounding may leave the mean a hair outside the observed rates
        observed = rows["readmission_rate"]
        overall_rate = total_readmissions / total_patients
        overall_rate = min(max(overall_rate, float(observed.min())), float(observed.max()))
    log.debug(
        "Specialty rows: %d, patients: %d, overall rate: %s",
        len(rows),
        total_patients,
        overall_rate,
    )

    return SpecialtySeries(
        rows=rows,
        total_patients=total_patients,
        total_readmissions=total_readmissions,
        overall_rate=overall_rate,
    )


def top_specialties(series: SpecialtySeries, n: int = 5) -> pd.DataFrame:
    """Highest-rate specialties, as shown in the summaries."""
    return series.rows.head(n).copy()
