"""nuconduit: NuHepMC generator output as internal events for cross-section analyses."""

from __future__ import annotations

__version__ = "0.1.0"

from .api import info, open_inputs
from .errors import (
    AttributeValueError,
    FatalConfigError,
    MissingAttributeError,
    NuconduitError,
    OpenError,
    StackOverflowError,
)
from .event import InternalEvent, ParticleRecord, ParticleState
from .handler import HandlerState, NuHepMCInputHandler
from .models import GeneratorEvent, GeneratorParticle, GeneratorVertex, RunInfo

__all__ = [
    "__version__",
    "info",
    "open_inputs",
    "NuHepMCInputHandler",
    "HandlerState",
    "InternalEvent",
    "ParticleRecord",
    "ParticleState",
    "GeneratorEvent",
    "GeneratorParticle",
    "GeneratorVertex",
    "RunInfo",
    "NuconduitError",
    "FatalConfigError",
    "OpenError",
    "MissingAttributeError",
    "AttributeValueError",
    "StackOverflowError",
]
