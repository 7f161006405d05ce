import json

import pandas as pd
import pytest

import reports
from core import SPECIALTY_CSV
from prep import aggregate_diagnoses, aggregate_specialties, empty_specialty_series


@pytest.fixture
def both_series(hospital_df, specialty_df):
    return aggregate_diagnoses(hospital_df), aggregate_specialties(specialty_df)


def test_excel_has_one_sheet_per_chart_and_summary(both_series):
    out = reports.build_chart_data_excel(*both_series)

    sheets = pd.read_excel(out, sheet_name=None)
    assert list(sheets) == ["Diagnosis by Age", "Specialty Rates", "Summary"]
    assert list(sheets["Diagnosis by Age"].columns) == ["Diagnosis", "Age Group", "Patient Count"]
    assert sheets["Specialty Rates"]["Specialty"].iloc[0] == "Cardiology"


def test_excel_with_empty_specialties(hospital_df):
    out = reports.build_chart_data_excel(
        aggregate_diagnoses(hospital_df), empty_specialty_series()
    )

    summary = pd.read_excel(out, sheet_name="Summary", keep_default_na=False)
    assert "n/a" in list(summary["Value"].astype(str))


@pytest.mark.skipif(not reports.REPORTLAB_AVAILABLE, reason="reportlab not installed")
def test_pdf_summary(both_series):
    pdf = reports.build_pdf(*both_series)

    assert pdf.getvalue().startswith(b"%PDF")


def test_write_static_page(tmp_path, data_dir):
    _, _, diag_chart, spec_chart, problems = reports.build_charts(data_dir)

    path = reports.write_static_page(diag_chart, spec_chart, tmp_path / "out" / "index.html")

    html = path.read_text(encoding="utf-8")
    assert problems == []
    assert '<div id="v6"' in html
    assert '<div id="v7"' in html
    assert "Frequency of Diagnosis by Age" in html
    assert "vega-embed@6" in html


def test_static_page_shows_message_in_place_of_chart(tmp_path):
    path = reports.write_static_page("Diagnosis chart unavailable: </script>", "x", tmp_path / "p.html")

    html = path.read_text(encoding="utf-8")
    start = html.index("const specs = ") + len("const specs = ")
    payload = html[start : html.index(";\n", start)]
    assert json.loads(payload)["v6"] == "Diagnosis chart unavailable: </script>"
    assert "</script>\"" not in payload


def test_cli_writes_all_outputs(tmp_path, data_dir):
    out = tmp_path / "site" / "index.html"
    excel = tmp_path / "charts.xlsx"

    code = reports.main(["--data-dir", str(data_dir), "--out", str(out), "--excel", str(excel)])

    assert code == 0
    assert out.exists()
    assert excel.stat().st_size > 0


def test_cli_reports_failed_chart_and_keeps_the_other(tmp_path, data_dir):
    (data_dir / SPECIALTY_CSV).unlink()
    out = tmp_path / "index.html"

    code = reports.main(["--data-dir", str(data_dir), "--out", str(out)])

    html = out.read_text(encoding="utf-8")
    assert code == 1
    assert "Specialty chart unavailable" in html
    assert "Frequency of Diagnosis by Age" in html
