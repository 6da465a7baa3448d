"""Rewrite a decoded NuHepMC event into an :class:`~nuconduit.event.InternalEvent`."""

from __future__ import annotations

from typing import Optional

from .event import InternalEvent, ParticleState
from .models import GeneratorEvent, GeneratorParticle
from .nuhepmc import PROCID_ATTR, ParticleStatus, VertexStatus, attribute_value

FREE_PROTON_PDG = 1000010010

_STATUS_TO_STATE = {
    ParticleStatus.INCOMING_BEAM: ParticleState.INITIAL,
    ParticleStatus.TARGET: ParticleState.NUCLEAR_INITIAL,
    ParticleStatus.STRUCK_NUCLEON: ParticleState.INITIAL,
    ParticleStatus.UNDECAYED_PHYSICAL: ParticleState.FINAL,
}


def state_for_status(status: int) -> Optional[ParticleState]:
    """Internal role for a NuHepMC status code; None for internal particles."""
    return _STATUS_TO_STATE.get(status)


def _set_target(event: InternalEvent, pid: int) -> None:
    event.target_a = (pid // 10) % 1000
    event.target_z = (pid // 10000) % 1000
    event.target_h = 0
    event.bound = pid == FREE_PROTON_PDG


def _is_primary(raw: GeneratorEvent, p: GeneratorParticle) -> bool:
    v = raw.production_vertex(p)
    return v is not None and v.status == VertexStatus.PRIMARY


class ParticleStackBuilder:
    """Fills an InternalEvent in place from a raw generator event."""

    def build(self, raw: GeneratorEvent, event: InternalEvent) -> InternalEvent:
        event.reset()
        event.mode = attribute_value(raw, PROCID_ATTR, int)
        event.event_number = raw.event_number

        for p in raw.particles:
            state = state_for_status(p.status)
            if state is None:
                continue
            if state == ParticleState.NUCLEAR_INITIAL:
                _set_target(event, p.pid)
            event.particles.append(
                p.px, p.py, p.pz, p.energy, p.pid, state, _is_primary(raw, p)
            )

        event.particles.order()
        return event
