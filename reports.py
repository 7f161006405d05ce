"""Export helpers: chart data workbook, PDF summary and a standalone HTML page.

Also runnable as a script to build the static page without starting the app:

    python reports.py --data-dir data --out dist/index.html --excel dist/charts.xlsx
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from io import BytesIO
from pathlib import Path

import pandas as pd

from charts import diagnosis_chart, specialty_chart
from core import ChartState, load_both, prepare_diagnosis, prepare_specialty
from prep import (
    CoercionError,
    DiagnosisSeries,
    ResourceLoadError,
    SpecialtySeries,
    diagnosis_totals,
    top_specialties,
)
from scales import diagnosis_scales, specialty_scales

# PDF export (for the summary report)
try:
    from reportlab.lib.pagesizes import letter
    from reportlab.pdfgen import canvas

    REPORTLAB_AVAILABLE = True
except Exception:
    REPORTLAB_AVAILABLE = False

log = logging.getLogger("readmission.reports")

VEGA_CDN = "https://cdn.jsdelivr.net/npm"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <script src="{cdn}/vega@5"></script>
  <script src="{cdn}/vega-lite@5"></script>
  <script src="{cdn}/vega-embed@6"></script>
  <style>
    body {{ font-family: Georgia, serif; background: #f3f4f6; color: #111827; }}
    .chart {{ margin: 2rem auto; width: fit-content; }}
    .chart-error {{ color: #b91c1c; font-weight: bold; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  <div id="v6" class="chart"></div>
  <div id="v7" class="chart"></div>
  <script>
    const specs = {specs};
    for (const [target, spec] of Object.entries(specs)) {{
      const el = document.getElementById(target);
      if (typeof spec === "string") {{
        el.innerHTML = '<p class="chart-error"></p>';
        el.firstChild.textContent = spec;
        continue;
      }}
      vegaEmbed(el, spec, {{actions: false}}).catch(err => {{
        el.innerHTML = '<p class="chart-error"></p>';
        el.firstChild.textContent = "Chart failed to render: " + err;
      }});
    }}
  </script>
</body>
</html>
"""


# ------------------------------
# EXCEL
# ------------------------------
def build_chart_data_excel(diagnoses: DiagnosisSeries, specialties: SpecialtySeries) -> BytesIO:
    """Create an Excel file with the data behind both charts."""
    cells = diagnoses.cells.rename(
        columns={"diagnosis": "Diagnosis", "age": "Age Group", "count": "Patient Count"}
    )
    rows = specialties.rows.rename(
        columns={
            "medical_specialty": "Specialty",
            "readmission_rate": "Readmission Rate",
            "count": "Sample Size",
        }
    )
    summary = {
        "Metric": [
            "Diagnoses shown",
            "Age groups observed",
            "Specialties",
            "Patients (specialty chart)",
            "Patient-weighted readmission rate",
        ],
        "Value": [
            len(diagnoses.diagnoses),
            len(diagnoses.ages),
            len(specialties.rows),
            specialties.total_patients,
            "n/a" if specialties.overall_rate is None else round(specialties.overall_rate, 4),
        ],
    }
    out = BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        cells.to_excel(writer, index=False, sheet_name="Diagnosis by Age")
        rows.to_excel(writer, index=False, sheet_name="Specialty Rates")
        pd.DataFrame(summary).to_excel(writer, index=False, sheet_name="Summary")
    out.seek(0)
    return out


# ------------------------------
# PDF
# ------------------------------
def build_pdf(diagnoses: DiagnosisSeries, specialties: SpecialtySeries) -> BytesIO | None:
    """Create a one-page PDF summary (if reportlab is installed)."""
    if not REPORTLAB_AVAILABLE:
        return None

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    width, height = letter

    c.setFont("Helvetica-Bold", 16)
    c.drawString(40, height - 40, "Readmission Charts Summary")
    c.setFont("Helvetica", 10)
    c.drawString(40, height - 60, f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")

    y = height - 90
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, y, "Most Frequent Primary Diagnoses")
    c.setFont("Helvetica", 10)
    for _, row in diagnosis_totals(diagnoses).iterrows():
        y -= 15
        c.drawString(60, y, f"{row['diagnosis']}: {int(row['count']):,} patients")

    y -= 30
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, y, "Highest Readmission Rates by Specialty")
    c.setFont("Helvetica", 10)
    for _, row in top_specialties(specialties).iterrows():
        y -= 15
        c.drawString(
            60,
            y,
            f"{row['medical_specialty']}: {row['readmission_rate'] * 100:.1f}% "
            f"({int(row['count']):,} patients)",
        )

    y -= 25
    if specialties.overall_rate is not None:
        c.drawString(
            40, y, f"Patient-weighted readmission rate: {specialties.overall_rate * 100:.1f}%"
        )
    else:
        c.drawString(40, y, "Patient-weighted readmission rate: n/a")

    c.showPage()
    c.save()
    buf.seek(0)
    return buf


# ------------------------------
# STATIC HTML
# ------------------------------
def write_static_page(diag_chart, spec_chart, path, title: str = "Hospital Readmissions") -> Path:
    """Write both charts into one HTML page under #v6 and #v7.

    A chart may be passed as an error message string instead, which is shown
    in place of that chart.
    """
    specs = {}
    for target, chart in (("v6", diag_chart), ("v7", spec_chart)):
        specs[target] = chart if isinstance(chart, str) else chart.to_dict()

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # keep labels like "</script>" from closing the inline script
    payload = json.dumps(specs).replace("</", "<\\/")
    html = PAGE_TEMPLATE.format(title=title, cdn=VEGA_CDN, specs=payload)
    path.write_text(html, encoding="utf-8")
    log.info("Wrote %s", path)
    return path


# ------------------------------
# CLI
# ------------------------------
def _chart_or_message(state: ChartState, chart, label: str):
    # missing columns still draw an empty chart; load and value errors replace it
    if isinstance(state.problem, (ResourceLoadError, CoercionError)):
        return f"{label} unavailable: {state.problem}"
    return chart


def build_charts(data_dir: Path):
    """Load, aggregate and render both charts; failures stay per chart."""
    hospital, specialty = load_both(data_dir)
    diag_state = prepare_diagnosis(hospital)
    spec_state = prepare_specialty(specialty)

    diag = diag_state.series
    spec = spec_state.series
    diag_chart = _chart_or_message(
        diag_state, diagnosis_chart(diag, diagnosis_scales(diag)), "Diagnosis chart"
    )
    spec_chart = _chart_or_message(
        spec_state, specialty_chart(spec, specialty_scales(spec)), "Specialty chart"
    )

    problems = [s.problem for s in (diag_state, spec_state) if s.problem is not None]
    return diag, spec, diag_chart, spec_chart, problems


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Build the readmission charts page.")
    parser.add_argument("--data-dir", default="data", help="Folder with the two CSV files")
    parser.add_argument("--out", default="dist/index.html", help="HTML file to write")
    parser.add_argument("--excel", help="Also write the chart data workbook here")
    parser.add_argument("--pdf", help="Also write the PDF summary here")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    diag, spec, diag_chart, spec_chart, problems = build_charts(Path(args.data_dir))
    write_static_page(diag_chart, spec_chart, args.out)

    if args.excel:
        Path(args.excel).write_bytes(build_chart_data_excel(diag, spec).getvalue())
        log.info("Wrote %s", args.excel)
    if args.pdf:
        pdf = build_pdf(diag, spec)
        if pdf is None:
            log.warning("reportlab is not installed; skipping %s", args.pdf)
        else:
            Path(args.pdf).write_bytes(pdf.getvalue())
            log.info("Wrote %s", args.pdf)

    for problem in problems:
        log.error("%s: %s", type(problem).__name__, problem)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
