"""
Flux-averaged cross-section resolution.

A NuHepMC file can carry its normalization in one of two ways: a
precomputed flux-averaged total cross section in the run info (G.C.4), or a
running estimate attached to every event (E.C.4), where the last event holds
the best one. Either way the run info only becomes available after the first
event is decoded, so the whole file is scanned once up front.

The resolved value is exposed the way the rest of the framework queries
normalization: as the integral of an event-rate histogram, divided by the
integral of a flux histogram. Both are single-bin placeholders here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import FatalConfigError
from .models import RunInfo
from .nuhepmc import RunMetadata
from .stream import EventStream

logger = logging.getLogger(__name__)

PLACEHOLDER_NBINS = 10
PLACEHOLDER_RANGE = (0.0, 10.0)
PLACEHOLDER_BIN = 5


@dataclass
class PlaceholderHistogram:
    """Fixed-axis 1D histogram: ``nbins`` uniform bins on ``[low, high)``.

    Bins are numbered from 1 as in the analysis framework.
    """

    name: str
    nbins: int = PLACEHOLDER_NBINS
    low: float = PLACEHOLDER_RANGE[0]
    high: float = PLACEHOLDER_RANGE[1]
    contents: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.contents:
            self.contents = [0.0] * self.nbins

    @property
    def bin_width(self) -> float:
        return (self.high - self.low) / self.nbins

    def set_bin_content(self, ibin: int, value: float) -> None:
        if not 1 <= ibin <= self.nbins:
            raise IndexError(f"Bin {ibin} outside 1..{self.nbins}")
        self.contents[ibin - 1] = value

    def bin_content(self, ibin: int) -> float:
        return self.contents[ibin - 1]

    def integral(self, width: bool = False) -> float:
        """Integral over the full axis; with *width*, contents times bin width."""
        total = sum(self.contents)
        return total * self.bin_width if width else total

    def add(self, other: "PlaceholderHistogram") -> None:
        if (other.nbins, other.low, other.high) != (self.nbins, self.low, self.high):
            raise ValueError(f"Cannot add {other.name} to {self.name}: axes differ")
        self.contents = [a + b for a, b in zip(self.contents, other.contents)]

    @classmethod
    def single_value(cls, name: str, value: float) -> "PlaceholderHistogram":
        h = cls(name)
        h.set_bin_content(PLACEHOLDER_BIN, value)
        return h


@dataclass
class Normalization:
    """Outcome of the pre-scan of one file.

    Attributes:
        fatx: Flux-averaged total cross section in 1e-38 cm^2, or 1 when
            the file carries no normalization.
        n_events: Number of events in the file.
        metadata: The file's resolved run metadata.
        run_info: The raw run header captured with the first event.
        best_estimate: Last per-event running cross-section estimate.
        sum_of_weights: Sum of the first weight channel over events that
            carried an estimate. Diagnostic only.
    """

    fatx: float
    n_events: int
    metadata: RunMetadata
    best_estimate: float = 0.0
    sum_of_weights: float = 0.0
    run_info: Optional[RunInfo] = None

    @property
    def source(self) -> str:
        if self.metadata.has_fatx:
            return "fatx"
        if self.metadata.has_running_estimate:
            return "running-estimate"
        return "none"

    def event_histogram(self) -> PlaceholderHistogram:
        return PlaceholderHistogram.single_value("eventhist", self.fatx)

    def flux_histogram(self) -> PlaceholderHistogram:
        return PlaceholderHistogram.single_value("fluxhist", 1.0)


def resolve_normalization(stream: EventStream) -> Normalization:
    """Scan *stream* to the end once and resolve the file normalization.

    The stream is reopened at position 0 afterwards. Raises
    FatalConfigError when no event (and so no run info) could be read.
    """
    stream.open()

    metadata: Optional[RunMetadata] = None
    run_info: Optional[RunInfo] = None
    n_events = 0
    best_estimate = 0.0
    sum_of_weights = 0.0

    while True:
        ev = stream.read_next()
        if ev is None:
            break
        n_events += 1

        if metadata is None:
            run_info = stream.reader.run_info
            metadata = RunMetadata.from_run_info(run_info)
            logger.info("Input file contains weights: %s", ", ".join(metadata.weight_names) or "<none>")
            logger.debug("Declared conventions: %s", " ".join(metadata.conventions))

        if not metadata.has_running_estimate:
            continue

        xs = ev.cross_section
        if xs is None:
            logger.warning("Failed to read xs info for event %d", n_events - 1)
            continue
        best_estimate = xs.xsecs[0]
        if metadata.n_weights > 0 and ev.weights:
            sum_of_weights += ev.weights[0]
        logger.debug("xsecs[0] = %g, weights[0] = %s", xs.xsecs[0], ev.weights[0] if ev.weights else "n/a")

    if metadata is None:
        raise FatalConfigError(f"Could not read run_info from input NuHepMC file: {stream.path}")

    logger.info(
        "%s: nevents = %d, best_xs_estimate = %g, sum of weights = %g",
        stream.path, n_events, best_estimate, sum_of_weights,
    )

    if metadata.has_fatx:
        fatx = metadata.fatx * metadata.to_1em38_cm2
    elif metadata.has_running_estimate:
        fatx = best_estimate * metadata.to_1em38_cm2
    else:
        logger.warning("%s declares no cross-section normalization; using 1", stream.path)
        fatx = 1.0

    stream.open()

    return Normalization(
        fatx=fatx,
        n_events=n_events,
        metadata=metadata,
        best_estimate=best_estimate,
        sum_of_weights=sum_of_weights,
        run_info=run_info,
    )
