import pandas as pd
import pytest

from core import (
    HOSPITAL_CSV,
    SPECIALTY_CSV,
    LoadResult,
    load_both,
    prepare_diagnosis,
    prepare_specialty,
    read_records,
)
from prep import CoercionError, DataShapeError, ResourceLoadError


def test_read_records_keeps_strings(tmp_path):
    path = tmp_path / "h.csv"
    path.write_text("diag_1,age\n250.83,[70-80)\n428,\n")

    df = read_records(path)

    assert list(df["diag_1"]) == ["250.83", "428"]
    assert list(df["age"]) == ["[70-80)", ""]


def test_read_records_strips_header_whitespace(tmp_path):
    path = tmp_path / "s.csv"
    path.write_text("medical_specialty , readmission_rate,count\nA,0.1,3\n")

    assert list(read_records(path).columns) == ["medical_specialty", "readmission_rate", "count"]


def test_read_records_missing_file(tmp_path):
    with pytest.raises(ResourceLoadError, match="nope.csv"):
        read_records(tmp_path / "nope.csv")


def test_read_records_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    assert read_records(path).empty


def test_load_both_reads_the_two_files(data_dir):
    hospital, specialty = load_both(data_dir)

    assert hospital.ok and specialty.ok
    assert hospital.name == HOSPITAL_CSV
    assert specialty.name == SPECIALTY_CSV
    assert len(hospital.frame) == 16
    assert len(specialty.frame) == 4


def test_one_missing_file_does_not_block_the_other(data_dir):
    (data_dir / SPECIALTY_CSV).unlink()

    hospital, specialty = load_both(data_dir)

    assert hospital.ok
    assert not specialty.ok
    assert isinstance(specialty.error, ResourceLoadError)
    assert specialty.frame is None


def test_prepare_diagnosis_from_loaded_frame(data_dir):
    hospital, _ = load_both(data_dir)

    state = prepare_diagnosis(hospital)

    assert state.problem is None
    assert state.series.diagnoses[0] == "Circulatory"


def test_prepare_passes_load_errors_through():
    failed = LoadResult(name="x.csv", error=ResourceLoadError("File not found: x.csv"))

    for state in (prepare_diagnosis(failed), prepare_specialty(failed)):
        assert isinstance(state.problem, ResourceLoadError)
        assert state.series.empty


def test_prepare_diagnosis_reports_shape_problem():
    result = LoadResult(name="h.csv", frame=pd.DataFrame({"diagnosis": ["V1"]}))

    state = prepare_diagnosis(result)

    assert isinstance(state.problem, DataShapeError)
    assert state.series.empty


def test_prepare_specialty_reports_bad_numbers(specialty_df):
    specialty_df.loc[0, "readmission_rate"] = "n/a"
    result = LoadResult(name="s.csv", frame=specialty_df)

    state = prepare_specialty(result)

    assert isinstance(state.problem, CoercionError)
    assert state.series.empty
