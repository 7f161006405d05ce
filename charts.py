import altair as alt
import pandas as pd

from prep import DiagnosisSeries, SpecialtySeries
from scales import (
    BandScale,
    DiagnosisScales,
    LinearScale,
    OrdinalColorScale,
    SequentialColorScale,
    SpecialtyScales,
)

FONT = "Georgia"
HOVER_OPACITY = 0.7
BAR_STROKE = "darkslategray"
AVERAGE_COLOR = "crimson"

DIAGNOSIS_SIZE = (740, 370)
SPECIALTY_SIZE = (790, 440)

DIAGNOSIS_TITLE = "Frequency of Diagnosis by Age & Primary Diagnosis"
SPECIALTY_TITLE = "Medical Specialty Categories with Readmission Rates"


# ------------------------------
# SCALE -> VEGA-LITE
# ------------------------------
def to_alt_scale(scale) -> alt.Scale:
    """Translate a scale descriptor into an Altair scale."""
    if isinstance(scale, BandScale):
        return alt.Scale(domain=list(scale.domain), padding=scale.padding)
    if isinstance(scale, LinearScale):
        return alt.Scale(domain=list(scale.domain), nice=False, zero=True)
    if isinstance(scale, OrdinalColorScale):
        return alt.Scale(domain=list(scale.domain), range=list(scale.range))
    if isinstance(scale, SequentialColorScale):
        return alt.Scale(domain=list(scale.domain), scheme=scale.scheme)
    raise TypeError(f"Unsupported scale: {scale!r}")


def _hover():
    # one selection per chart, so each chart owns its own highlight state
    return alt.selection_point(on="mouseover", clear="mouseout", empty=False)


def _configure(chart):
    return (
        chart.configure_axis(
            labelFont=FONT,
            titleFont=FONT,
            labelFontSize=12,
            titleFontSize=14,
            titleFontWeight="bold",
        )
        .configure_legend(labelFont=FONT, titleFont=FONT, labelFontSize=12)
        .configure_title(font=FONT, fontSize=18, anchor="middle")
        .configure_view(stroke=None)
    )


# ------------------------------
# DIAGNOSIS x AGE (v6)
# ------------------------------
def diagnosis_chart(series: DiagnosisSeries, scales: DiagnosisScales):
    """Grouped bars: one group per diagnosis, one bar per age bracket."""
    width, height = DIAGNOSIS_SIZE
    hover = _hover()

    chart = (
        alt.Chart(series.cells)
        .mark_bar(stroke=BAR_STROKE, strokeWidth=0.5)
        .encode(
            x=alt.X(
                "diagnosis:N",
                title="Primary Diagnosis",
                sort=list(scales.x.domain),
                scale=to_alt_scale(scales.x),
                axis=alt.Axis(labelAngle=-45, labelFontWeight="bold"),
            ),
            xOffset=alt.XOffset(
                "age:N",
                sort=list(scales.x_offset.domain),
                scale=to_alt_scale(scales.x_offset),
            ),
            y=alt.Y(
                "count:Q",
                title="Frequency of Diagnosis",
                scale=to_alt_scale(scales.y),
                axis=alt.Axis(
                    tickCount=10,
                    grid=True,
                    gridColor="lightgray",
                    gridDash=[3, 3],
                ),
            ),
            color=alt.Color(
                "age:N",
                title="Age Group",
                scale=to_alt_scale(scales.color),
            ),
            opacity=alt.condition(hover, alt.value(HOVER_OPACITY), alt.value(1.0)),
            tooltip=[
                alt.Tooltip("age:N", title="Age Group"),
                alt.Tooltip("diagnosis:N", title="Diagnosis"),
                alt.Tooltip("count:Q", title="Patient Count"),
            ],
        )
        .add_params(hover)
        .properties(title=DIAGNOSIS_TITLE, width=width, height=height)
    )
    return _configure(chart)


# ------------------------------
# SPECIALTY READMISSION (v7)
# ------------------------------
def _average_layers(overall_rate: float, x_scale: alt.Scale) -> list:
    avg = pd.DataFrame({"overall_rate": [overall_rate], "label": ["Average Rate"]})
    base = alt.Chart(avg).encode(x=alt.X("overall_rate:Q", scale=x_scale))
    rule = base.mark_rule(color=AVERAGE_COLOR, strokeWidth=2.5, strokeDash=[6, 4])
    label = base.mark_text(
        color=AVERAGE_COLOR,
        font=FONT,
        fontSize=13,
        fontWeight="bold",
        dy=-10,
    ).encode(text="label:N", y=alt.value(0))
    return [rule, label]


def specialty_chart(series: SpecialtySeries, scales: SpecialtyScales):
    """Horizontal bars sorted by rate, with the patient-weighted average marked."""
    width, height = SPECIALTY_SIZE
    hover = _hover()
    x_scale = to_alt_scale(scales.x)

    bars = (
        alt.Chart(series.rows)
        .mark_bar(stroke=BAR_STROKE, strokeWidth=1)
        .encode(
            y=alt.Y(
                "medical_specialty:N",
                title="Medical Specialty",
                sort=list(scales.y.domain),
                scale=to_alt_scale(scales.y),
                axis=alt.Axis(labelFontSize=13, labelLimit=220),
            ),
            x=alt.X(
                "readmission_rate:Q",
                title="Readmission Rate",
                scale=x_scale,
                axis=alt.Axis(
                    format=".0%",
                    tickCount=6,
                    grid=True,
                    gridColor="gainsboro",
                    gridDash=[2, 2],
                ),
            ),
            color=alt.Color(
                "readmission_rate:Q",
                scale=to_alt_scale(scales.color),
                legend=None,
            ),
            opacity=alt.condition(hover, alt.value(HOVER_OPACITY), alt.value(1.0)),
            tooltip=[
                alt.Tooltip("medical_specialty:N", title="Specialty"),
                alt.Tooltip("readmission_rate:Q", title="Readmission Rate", format=".1%"),
                alt.Tooltip(field="count", type="quantitative", title="Sample Size", format=","),
            ],
        )
        .add_params(hover)
    )

    layers = [bars]
    if series.overall_rate is not None:
        layers += _average_layers(series.overall_rate, x_scale)

    chart = alt.layer(*layers).properties(
        title=SPECIALTY_TITLE, width=width, height=height, background="white"
    )
    return _configure(chart)
