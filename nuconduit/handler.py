"""
NuHepMC input handler.

Turns one or more NuHepMC files into a random-access sequence of
:class:`~nuconduit.event.InternalEvent` for measurement modules::

    with NuHepMCInputHandler("sample", "(a.hepmc3,b.hepmc3)") as h:
        scale = h.get_normalization() * 1e-38 / h.event_count
        for ev in h:
            fill(ev.enu, ev.input_weight * scale)

Construction scans every file once to count events and resolve its
normalization. Serving entries in increasing order only ever moves the
readers forward; asking for an entry behind the last one served reopens the
corresponding file and skips from the start.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from . import config
from .errors import FatalConfigError, NuconduitError
from .event import InternalEvent, ParticleStack
from .joint import JointIndexTable, joint_scales, parse_input_list
from .normalization import Normalization, PlaceholderHistogram, resolve_normalization
from .stack import ParticleStackBuilder
from .stream import EventStream

logger = logging.getLogger(__name__)


class HandlerState(enum.Enum):
    UNOPENED = "unopened"
    SCANNING = "scanning"
    IDLE = "idle"
    SERVING = "serving"
    REOPENING = "reopening"
    ABORTED = "aborted"
    CLOSED = "closed"


@dataclass
class InputFile:
    """One input file with its cursor and pre-scan result."""

    stream: EventStream
    normalization: Normalization

    @property
    def path(self) -> str:
        return self.stream.path

    @property
    def n_events(self) -> int:
        return self.normalization.n_events


class NuHepMCInputHandler:
    """Random-access view over NuHepMC input file(s).

    Args:
        handle: Name used in diagnostics.
        rawinputs: A path, or a comma separated list of paths optionally
            wrapped in parentheses for a joint input.
        max_events: Event cap; read from the ``MAXEVENTS`` configuration
            parameter when omitted. -1 disables the cap.

    Raises:
        FatalConfigError: An input cannot be opened, holds no events, or a
            joint input is combined with an event cap.
        MissingAttributeError: A file lacks a required run attribute.
    """

    def __init__(self, handle: str, rawinputs: str, max_events: Optional[int] = None) -> None:
        logger.info("Creating NuHepMCInputHandler : %s", handle)
        self.name = handle
        self.state = HandlerState.UNOPENED
        self.max_events = config.get_par_i("MAXEVENTS") if max_events is None else int(max_events)

        self.inputs = parse_input_list(rawinputs)
        for i, path in enumerate(self.inputs):
            logger.info("\t\t|-> Input File %d      : %s", i, path)

        self._builder = ParticleStackBuilder()
        self._event = InternalEvent(particles=ParticleStack(config.get_par_i("MAXPARTICLES")))
        self.files: list[InputFile] = []

        self.state = HandlerState.SCANNING
        try:
            for path in self.inputs:
                stream = EventStream(path)
                try:
                    norm = resolve_normalization(stream)
                except NuconduitError:
                    stream.close()
                    raise
                self.files.append(InputFile(stream, norm))
            self._setup_joint_inputs()
        except NuconduitError:
            self.state = HandlerState.ABORTED
            self.close()
            raise
        self.state = HandlerState.IDLE

    def _setup_joint_inputs(self) -> None:
        counts = [f.n_events for f in self.files]
        self.joint_input = len(self.files) > 1

        if self.joint_input:
            if self.max_events != -1:
                raise FatalConfigError(
                    f"{self.name}: joint inputs can only be used with MAXEVENTS = -1 "
                    f"(got {self.max_events})"
                )
            scales = joint_scales(counts, [f.normalization.fatx for f in self.files])
        else:
            scales = [1.0]
        self.joint_table = JointIndexTable.from_counts(counts, scales)

        self._event_hist = PlaceholderHistogram("eventhist")
        self._flux_hist = PlaceholderHistogram("fluxhist")
        for f in self.files:
            self._event_hist.add(f.normalization.event_histogram())
            self._flux_hist.add(f.normalization.flux_histogram())

        n_events = sum(counts)
        if 0 < self.max_events < n_events:
            logger.info("%s: capping %d events to MAXEVENTS = %d", self.name, n_events, self.max_events)
            n_events = self.max_events
        self._n_events = n_events

    # -- consumer contract --------------------------------------------------------------

    @property
    def event_count(self) -> int:
        return self._n_events

    def get_event_histogram(self) -> PlaceholderHistogram:
        return self._event_hist

    def get_flux_histogram(self) -> PlaceholderHistogram:
        return self._flux_hist

    def get_normalization(self) -> float:
        """Flux-averaged total cross section in 1e-38 cm^2 (1 when unknown)."""
        return self._event_hist.integral() / self._flux_hist.integral()

    def get_entry(self, entry: int) -> Optional[InternalEvent]:
        """Fill and return the shared event buffer for *entry*.

        Returns None past the last available event. The returned object is
        overwritten by the next call.
        """
        if entry < 0:
            raise IndexError(f"Negative entry: {entry}")
        if entry >= self._n_events:
            return None

        ifile = self.joint_table.locate(entry)
        f = self.files[ifile]
        local = entry - self.joint_table.low[ifile]

        if local < f.stream.position:
            self.state = HandlerState.REOPENING
        f.stream.skip_to(local)

        raw = f.stream.read_next()
        if raw is None:
            return None

        self._builder.build(raw, self._event)
        self.state = HandlerState.SERVING
        self._event.input_weight = self.joint_table.scale[ifile] if self.joint_input else 1.0
        return self._event

    def get_base_event(self, entry: int) -> Optional[InternalEvent]:
        if entry >= self._n_events:
            return None
        return self.get_entry(entry)

    @property
    def reopen_count(self) -> int:
        return sum(f.stream.reopen_count for f in self.files)

    def __len__(self) -> int:
        return self._n_events

    def __iter__(self) -> Iterator[InternalEvent]:
        for i in range(self._n_events):
            ev = self.get_entry(i)
            if ev is None:
                break
            yield ev

    def close(self) -> None:
        for f in self.files:
            f.stream.close()
        if self.state != HandlerState.ABORTED:
            self.state = HandlerState.CLOSED

    def __enter__(self) -> "NuHepMCInputHandler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
