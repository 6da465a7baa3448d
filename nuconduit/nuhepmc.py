"""NuHepMC conventions on top of the raw HepMC3 records.

Status codes, the run/event attribute names nuconduit relies on, and
attribute accessors that either return a default (optional attributes) or
raise :class:`~nuconduit.errors.MissingAttributeError` (required ones).
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .errors import AttributeValueError, MissingAttributeError
from .models import GeneratorEvent, RunInfo

logger = logging.getLogger(__name__)


class VertexStatus:
    PRIMARY = 1
    NUCLEAR = 2


class ParticleStatus:
    UNDECAYED_PHYSICAL = 1
    INCOMING_BEAM = 4
    TARGET = 11
    STRUCK_NUCLEON = 21


CONVENTIONS_ATTR = "NuHepMC.Conventions"
FATX_ATTR = "NuHepMC.FluxAveragedTotalCrossSection"
PROCID_ATTR = "ProcID"

# E.C.5 files carry cross sections in units 100x smaller than 1e-38 cm^2
ALT_UNITS_TO_1EM38_CM2 = 1e2


class Convention(str, enum.Enum):
    FLUX_AVERAGED_TOTAL_XSEC = "G.C.4"
    RUNNING_XSEC_ESTIMATE = "E.C.4"
    ALTERNATE_XSEC_UNITS = "E.C.5"


_Attributed = Union[RunInfo, GeneratorEvent]

_PARSERS: dict[type, Callable[[str], Any]] = {
    int: lambda s: int(s.strip()),
    float: lambda s: float(s.strip()),
    str: lambda s: s,
    list: lambda s: s.split(),
}

_MISSING = object()


def _owner_name(obj: _Attributed) -> str:
    if isinstance(obj, RunInfo):
        return "run info"
    return f"event {obj.event_number}"


def has_attribute(obj: _Attributed, name: str) -> bool:
    return name in obj.attributes


def attribute_value(obj: _Attributed, name: str, kind: type = str, default: Any = _MISSING) -> Any:
    """Return attribute *name* of *obj* parsed as *kind*.

    Without *default* the attribute is required: absence raises
    MissingAttributeError with the list of attributes that are present.
    A present attribute that does not parse always raises
    AttributeValueError.
    """
    if obj is None:
        raise ValueError("attribute_value called on a missing object")

    if not has_attribute(obj, name):
        if default is not _MISSING:
            return default
        known = obj.attribute_names()
        logger.error(
            "Failed to find attribute: %s. Known attributes: %s",
            name,
            ", ".join(known) or "<none>",
        )
        raise MissingAttributeError(name, known, _owner_name(obj))

    raw = obj.attributes[name]
    try:
        return _PARSERS[kind](raw)
    except (KeyError, ValueError) as e:
        logger.error("%s: %s", name, raw)
        raise AttributeValueError(
            name, raw, getattr(kind, "__name__", str(kind)), obj.attribute_names(), _owner_name(obj)
        ) from e


@dataclass(frozen=True)
class RunMetadata:
    """Typed view of a file's run header, resolved once when it is opened.

    Attributes:
        conventions: All convention identifiers the file declares.
        has_fatx: ``G.C.4``: a precomputed flux-averaged total cross section
            is stored in the run info.
        has_running_estimate: ``E.C.4``: every event carries a running
            cross-section estimate.
        fatx: The precomputed value when ``has_fatx``, else ``None``.
        weight_names: Declared weight channels.
        to_1em38_cm2: Factor converting file cross sections to 1e-38 cm^2.
    """

    conventions: tuple[str, ...]
    has_fatx: bool
    has_running_estimate: bool
    fatx: Optional[float]
    weight_names: tuple[str, ...]
    to_1em38_cm2: float = 1.0

    @classmethod
    def from_run_info(cls, run_info: RunInfo) -> "RunMetadata":
        conventions = tuple(attribute_value(run_info, CONVENTIONS_ATTR, list))
        has_fatx = Convention.FLUX_AVERAGED_TOTAL_XSEC.value in conventions
        has_running = Convention.RUNNING_XSEC_ESTIMATE.value in conventions
        units = 1.0
        if Convention.ALTERNATE_XSEC_UNITS.value in conventions:
            units = ALT_UNITS_TO_1EM38_CM2

        fatx = None
        if has_fatx:
            fatx = attribute_value(run_info, FATX_ATTR, float)

        return cls(
            conventions=conventions,
            has_fatx=has_fatx,
            has_running_estimate=has_running,
            fatx=fatx,
            weight_names=tuple(run_info.weight_names),
            to_1em38_cm2=units,
        )

    @property
    def n_weights(self) -> int:
        return len(self.weight_names)
