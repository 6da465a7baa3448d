"""PDG helpers backed by scikit-hep ``particle``.

Nuclear codes (10LZZZAAAI) are not in the particle table and are named by
their A and Z instead.
"""

from __future__ import annotations

from particle import PDGID, InvalidParticle, Particle, ParticleNotFound

NUCLEUS_MIN_CODE = 1000000000


def is_nucleus(pdg_id: int) -> bool:
    return abs(pdg_id) >= NUCLEUS_MIN_CODE


def is_valid_pdg_id(pdg_id: int) -> bool:
    return bool(PDGID(pdg_id).is_valid)


def name(pdg_id: int) -> str:
    if is_nucleus(pdg_id):
        pid = PDGID(pdg_id)
        return f"nucleus(A={pid.A}, Z={pid.Z})"
    try:
        return Particle.from_pdgid(pdg_id).name
    except (ParticleNotFound, InvalidParticle):
        return str(pdg_id)
