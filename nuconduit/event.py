"""
Framework-internal event representation.

Measurement code only ever sees :class:`InternalEvent`. One instance is
allocated per input handler and refilled in place for every entry, so
consumers that want to keep an event around must take a :meth:`copy`.
"""

from __future__ import annotations

import copy as _copy
import enum
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .errors import StackOverflowError

MAX_PARTICLES = 400


class ParticleState(enum.IntEnum):
    """Kinematic role of a particle in the internal stack."""

    INITIAL = 0
    FSI = 1
    FINAL = 2
    NUCLEAR_INITIAL = 3
    NUCLEAR_REMNANT = 4
    UNDEFINED = 5


# Stack grouping order: initial, FSI, final, then everything else
_ORDER_KEY = {
    ParticleState.INITIAL: 0,
    ParticleState.FSI: 1,
    ParticleState.FINAL: 2,
}
_OTHER_GROUP = 3


def order_key(state: ParticleState) -> int:
    return _ORDER_KEY.get(state, _OTHER_GROUP)


@dataclass
class ParticleRecord:
    """One slot of the particle stack.

    Attributes:
        px, py, pz, energy: Four-momentum, copied verbatim from the source.
        pdg: PDG particle code.
        state: Kinematic role.
        primary_vertex: Whether the particle was produced at the primary
            interaction vertex.
    """

    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    energy: float = 0.0
    pdg: int = 0
    state: ParticleState = ParticleState.UNDEFINED
    primary_vertex: bool = False

    def set(self, px: float, py: float, pz: float, energy: float, pdg: int,
            state: ParticleState, primary_vertex: bool) -> None:
        self.px, self.py, self.pz, self.energy = px, py, pz, energy
        self.pdg = pdg
        self.state = state
        self.primary_vertex = primary_vertex

    @property
    def momentum(self) -> tuple[float, float, float, float]:
        return (self.px, self.py, self.pz, self.energy)

    @property
    def p(self) -> float:
        """Three-momentum magnitude."""
        return math.sqrt(self.px**2 + self.py**2 + self.pz**2)


class ParticleStack:
    """Preallocated particle arena with an explicit logical length.

    ``reset`` truncates to zero; slots are never reallocated.
    """

    def __init__(self, capacity: int = MAX_PARTICLES) -> None:
        self.capacity = capacity
        self._slots = [ParticleRecord() for _ in range(capacity)]
        self._n = 0

    def reset(self) -> None:
        self._n = 0

    def append(self, px: float, py: float, pz: float, energy: float, pdg: int,
               state: ParticleState, primary_vertex: bool) -> ParticleRecord:
        if self._n >= self.capacity:
            raise StackOverflowError(
                f"Particle stack capacity ({self.capacity}) exceeded"
            )
        slot = self._slots[self._n]
        slot.set(px, py, pz, energy, pdg, state, primary_vertex)
        self._n += 1
        return slot

    def order(self) -> None:
        """Stable-group the live slots: initial, FSI, final, other."""
        live = self._slots[: self._n]
        self._slots[: self._n] = sorted(live, key=lambda s: order_key(s.state))

    def __len__(self) -> int:
        return self._n

    def __iter__(self) -> Iterator[ParticleRecord]:
        return iter(self._slots[: self._n])

    def __getitem__(self, idx):
        return self._slots[: self._n][idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParticleStack):
            return NotImplemented
        return list(self) == list(other)


@dataclass
class InternalEvent:
    """The event handed to measurement modules.

    Attributes:
        mode: Interaction mode (generator process id).
        event_number: Event number from the source file.
        target_a, target_z, target_h: Target nucleus mass number, charge
            and hydrogen count.
        bound: Target flag carried for downstream selections; True when the
            target code is 1000010010 (a hydrogen nucleus).
        input_weight: Per-file scale for joint inputs, 1 otherwise.
        particles: The particle stack.
    """

    mode: int = 0
    event_number: int = 0
    target_a: int = 0
    target_z: int = 0
    target_h: int = 0
    bound: bool = False
    input_weight: float = 1.0
    particles: ParticleStack = field(default_factory=ParticleStack)

    def reset(self) -> None:
        self.mode = 0
        self.event_number = 0
        self.target_a = 0
        self.target_z = 0
        self.target_h = 0
        self.bound = False
        self.particles.reset()

    def copy(self) -> "InternalEvent":
        return _copy.deepcopy(self)

    @property
    def n_particles(self) -> int:
        return len(self.particles)

    def particles_in_state(self, state: ParticleState) -> list[ParticleRecord]:
        return [p for p in self.particles if p.state == state]

    @property
    def initial_particles(self) -> list[ParticleRecord]:
        return self.particles_in_state(ParticleState.INITIAL)

    @property
    def final_particles(self) -> list[ParticleRecord]:
        return self.particles_in_state(ParticleState.FINAL)

    @property
    def neutrino_in(self) -> Optional[ParticleRecord]:
        """First incoming neutrino (any flavour), if there is one."""
        for p in self.initial_particles:
            if abs(p.pdg) in (12, 14, 16):
                return p
        return None

    @property
    def enu(self) -> float:
        """Incoming neutrino energy, 0 when there is no incoming neutrino."""
        nu = self.neutrino_in
        return nu.energy if nu is not None else 0.0

    def hm_final_particle(self, pdg: int) -> Optional[ParticleRecord]:
        """Highest-momentum final-state particle with code *pdg*."""
        cands = [p for p in self.final_particles if p.pdg == pdg]
        if not cands:
            return None
        return max(cands, key=lambda p: p.p)

    def n_final(self, pdg: Optional[int] = None) -> int:
        if pdg is None:
            return len(self.final_particles)
        return sum(1 for p in self.final_particles if p.pdg == pdg)
