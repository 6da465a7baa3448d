"""
Raw generator-event model.

These records mirror what a HepMC3 Asciiv3 file actually contains, before
any NuHepMC interpretation. The decoder produces a fresh
:class:`GeneratorEvent` for every event it reads; the framework-internal
representation lives in :mod:`nuconduit.event`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GeneratorParticle:
    """A single particle as written by the generator.

    Attributes:
        id: 1-based particle id within the event.
        pid: PDG Monte Carlo particle code (nuclei use 10LZZZAAAI).
        status: Generator status code. NuHepMC assigns 1 = undecayed
            physical, 4 = incoming beam, 11 = target, 21 = struck nucleon;
            anything else is generator-internal.
        px, py, pz, energy: Four-momentum in the file's momentum unit.
        mass: Generated mass.
        production_vertex: Id of the production vertex (negative), or 0
            when the particle has none (beam and target particles).
        end_vertex: Id of the vertex the particle enters, or 0.
        attributes: Raw per-particle attribute strings.
    """

    id: int
    pid: int
    status: int
    px: float
    py: float
    pz: float
    energy: float
    mass: float = 0.0
    production_vertex: int = 0
    end_vertex: int = 0
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def momentum(self) -> tuple[float, float, float, float]:
        return (self.px, self.py, self.pz, self.energy)


@dataclass
class GeneratorVertex:
    """A vertex in the event graph.

    Attributes:
        id: Vertex id (negative integer by convention).
        status: Vertex status. NuHepMC: 1 = primary, 2 = nuclear.
        x, y, z, t: Position, if one was written.
        incoming: Ids of particles entering the vertex.
        outgoing: Ids of particles leaving the vertex.
    """

    id: int
    status: int = 0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    t: float = 0.0
    incoming: list[int] = field(default_factory=list)
    outgoing: list[int] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CrossSection:
    """Parsed ``GenCrossSection`` attribute.

    HepMC3 writes ``xs0 err0 accepted attempted [xs1 err1 ...]``.
    """

    xsecs: tuple[float, ...]
    xsec_errs: tuple[float, ...]
    accepted_events: int = -1
    attempted_events: int = -1

    @classmethod
    def from_string(cls, raw: str) -> Optional["CrossSection"]:
        toks = raw.split()
        if len(toks) < 2:
            return None
        try:
            xsecs = [float(toks[0])]
            errs = [float(toks[1])]
            accepted = int(float(toks[2])) if len(toks) > 2 else -1
            attempted = int(float(toks[3])) if len(toks) > 3 else -1
            rest = toks[4:]
            for i in range(0, len(rest) - 1, 2):
                xsecs.append(float(rest[i]))
                errs.append(float(rest[i + 1]))
        except ValueError:
            return None
        return cls(tuple(xsecs), tuple(errs), accepted, attempted)


@dataclass
class ToolInfo:
    name: str
    version: str = ""
    description: str = ""


@dataclass
class RunInfo:
    """Run-level header of a HepMC3 file.

    Attributes:
        weight_names: Ordered weight-channel names.
        tools: Generator/tool records (``T`` lines).
        attributes: Run attributes as raw strings, in file order.
        headers: Raw ``HepMC::`` header lines.
    """

    weight_names: list[str] = field(default_factory=list)
    tools: list[ToolInfo] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    headers: list[str] = field(default_factory=list)

    def attribute_names(self) -> list[str]:
        return list(self.attributes)


@dataclass
class GeneratorEvent:
    """One decoded event.

    Attributes:
        event_number: Event number from the ``E`` record.
        momentum_unit, length_unit: Units from the ``U`` record.
        weights: Event weights, one per declared weight channel.
        attributes: Event-level attributes (``A 0 <name> <value>``).
        particles: Particles in file order.
        vertices: Vertices keyed by id.
    """

    event_number: int = 0
    momentum_unit: str = "GEV"
    length_unit: str = "MM"
    weights: list[float] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    particles: list[GeneratorParticle] = field(default_factory=list)
    vertices: dict[int, GeneratorVertex] = field(default_factory=dict)

    def attribute_names(self) -> list[str]:
        return list(self.attributes)

    @property
    def cross_section(self) -> Optional[CrossSection]:
        raw = self.attributes.get("GenCrossSection")
        if raw is None:
            return None
        return CrossSection.from_string(raw)

    def production_vertex(self, particle: GeneratorParticle) -> Optional[GeneratorVertex]:
        if not particle.production_vertex:
            return None
        return self.vertices.get(particle.production_vertex)
