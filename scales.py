import logging
import math
from dataclasses import dataclass
from itertools import cycle, islice

from prep import DiagnosisSeries, SpecialtySeries

log = logging.getLogger("readmission.scales")

# Fixed palette for age brackets, darkest first
AGE_PALETTE = [
    "darkviolet",
    "indigo",
    "darkslateblue",
    "steelblue",
    "darkcyan",
    "mediumseagreen",
    "limegreen",
    "yellowgreen",
    "greenyellow",
    "yellow",
]

DIAGNOSIS_PADDING = 0.2
AGE_PADDING = 0.05
SPECIALTY_PADDING = 0.15
RATE_HEADROOM = 1.1
RATE_SCHEME = "viridis"


@dataclass(frozen=True)
class BandScale:
    domain: tuple
    padding: float


@dataclass(frozen=True)
class LinearScale:
    domain: tuple


@dataclass(frozen=True)
class OrdinalColorScale:
    domain: tuple
    range: tuple


@dataclass(frozen=True)
class SequentialColorScale:
    domain: tuple
    scheme: str = RATE_SCHEME


@dataclass(frozen=True)
class DiagnosisScales:
    x: BandScale
    x_offset: BandScale
    y: LinearScale
    color: OrdinalColorScale


@dataclass(frozen=True)
class SpecialtyScales:
    y: BandScale
    x: LinearScale
    color: SequentialColorScale


# ------------------------------
# NICE ROUNDING
# ------------------------------
def tick_increment(start: float, stop: float, count: int = 10) -> float:
    """Step between ticks: 1, 2, 5 or 10 times a power of ten."""
    if count <= 0:
        return 0.0
    step = (stop - start) / count
    if not step > 0:
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10**power
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * 10.0**power


def nice_upper(value: float, count: int = 10) -> float:
    """Round `value` up to a tick boundary of a [0, value] axis with ~`count` ticks."""
    if value is None or not value > 0 or math.isinf(value):
        return 1.0
    stop = float(value)
    previous = None
    for _ in range(10):
        step = tick_increment(0.0, stop, count)
        if step == previous or step == 0:
            break
        if step >= 1:
            stop = math.ceil(round(stop / step, 9)) * step
        else:
            # divide by the inverse to stay on exact decimal boundaries
            inverse = round(1 / step)
            stop = math.ceil(round(stop * inverse, 9)) / inverse
        previous = step
    return stop


# ------------------------------
# SCALE SETS
# ------------------------------
def age_colors(ages: list) -> tuple:
    """Palette colour per age bracket; the palette repeats past ten brackets."""
    if len(ages) > len(AGE_PALETTE):
        log.warning(
            "%d age brackets but only %d palette colours; colours will repeat",
            len(ages),
            len(AGE_PALETTE),
        )
    return tuple(islice(cycle(AGE_PALETTE), len(ages)))


def diagnosis_scales(series: DiagnosisSeries) -> DiagnosisScales:
    max_count = int(series.cells["count"].max()) if not series.empty else 0
    return DiagnosisScales(
        x=BandScale(domain=tuple(series.diagnoses), padding=DIAGNOSIS_PADDING),
        x_offset=BandScale(domain=tuple(series.ages), padding=AGE_PADDING),
        y=LinearScale(domain=(0, nice_upper(max_count))),
        color=OrdinalColorScale(domain=tuple(series.ages), range=age_colors(series.ages)),
    )


def specialty_scales(series: SpecialtySeries) -> SpecialtyScales:
    if series.empty:
        low, high = 0.0, 1.0
        upper = 1.0
    else:
        rates = series.rows["readmission_rate"]
        low, high = float(rates.min()), float(rates.max())
        # all-zero rates would collapse the axis
        upper = high * RATE_HEADROOM if high > 0 else 1.0

    return SpecialtyScales(
        y=BandScale(
            domain=tuple(series.rows["medical_specialty"]), padding=SPECIALTY_PADDING
        ),
        x=LinearScale(domain=(0, upper)),
        color=SequentialColorScale(domain=(low, high)),
    )
