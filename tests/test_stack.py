from __future__ import annotations

import pytest

from nuconduit.errors import MissingAttributeError, StackOverflowError
from nuconduit.event import InternalEvent, ParticleStack, ParticleState
from nuconduit.models import GeneratorEvent, GeneratorParticle, GeneratorVertex
from nuconduit.stack import ParticleStackBuilder, state_for_status


def _particle(pid: int, status: int, vertex: int = 0, energy: float = 1.0) -> GeneratorParticle:
    return GeneratorParticle(
        id=0, pid=pid, status=status, px=0.0, py=0.0, pz=energy, energy=energy,
        production_vertex=vertex,
    )


def _raw_event(particles, vertices=(), procid="1") -> GeneratorEvent:
    ev = GeneratorEvent(event_number=7)
    if procid is not None:
        ev.attributes["ProcID"] = procid
    for i, p in enumerate(particles, start=1):
        p.id = i
        ev.particles.append(p)
    for v in vertices:
        ev.vertices[v.id] = v
    return ev


@pytest.mark.parametrize(
    "status, state",
    [
        (4, ParticleState.INITIAL),
        (11, ParticleState.NUCLEAR_INITIAL),
        (21, ParticleState.INITIAL),
        (1, ParticleState.FINAL),
        (2, None),
        (3, None),
        (0, None),
    ],
)
def test_status_mapping(status, state) -> None:
    assert state_for_status(status) == state


def test_build_orders_stack_into_groups() -> None:
    raw = _raw_event(
        [
            _particle(211, 1, vertex=-1, energy=0.5),
            _particle(1000060120, 11),
            _particle(14, 4, energy=2.0),
            _particle(111, 2, vertex=-1),
            _particle(13, 1, vertex=-1, energy=1.5),
            _particle(2112, 21),
        ],
        vertices=[GeneratorVertex(id=-1, status=1)],
        procid="300",
    )
    ev = ParticleStackBuilder().build(raw, InternalEvent())

    assert ev.mode == 300
    assert ev.event_number == 7
    assert [p.pdg for p in ev.particles] == [14, 2112, 211, 13, 1000060120]
    assert [p.state for p in ev.particles] == [
        ParticleState.INITIAL,
        ParticleState.INITIAL,
        ParticleState.FINAL,
        ParticleState.FINAL,
        ParticleState.NUCLEAR_INITIAL,
    ]
    assert [p.primary_vertex for p in ev.particles] == [False, False, True, True, False]
    # momenta are copied untouched
    assert ev.particles[0].momentum == (0.0, 0.0, 2.0, 2.0)
    assert ev.enu == 2.0


def test_target_codes_set_nucleus() -> None:
    raw = _raw_event([_particle(14, 4), _particle(1000260560, 11)])
    ev = ParticleStackBuilder().build(raw, InternalEvent())
    assert (ev.target_a, ev.target_z, ev.target_h) == (56, 26, 0)
    assert not ev.bound


def test_hydrogen_target_sets_bound_flag() -> None:
    raw = _raw_event([_particle(14, 4), _particle(1000010010, 11)])
    ev = ParticleStackBuilder().build(raw, InternalEvent())
    assert (ev.target_a, ev.target_z) == (1, 1)
    assert ev.bound


def test_build_resets_previous_event() -> None:
    builder = ParticleStackBuilder()
    ev = InternalEvent()
    builder.build(_raw_event([_particle(14, 4), _particle(1000060120, 11), _particle(13, 1)]), ev)
    assert ev.n_particles == 3

    builder.build(_raw_event([_particle(12, 4)], procid="2"), ev)
    assert ev.n_particles == 1
    assert ev.mode == 2
    assert ev.target_a == 0


def test_capacity_overflow_raises() -> None:
    raw = _raw_event([_particle(22, 1) for _ in range(4)])
    ev = InternalEvent(particles=ParticleStack(3))
    with pytest.raises(StackOverflowError):
        ParticleStackBuilder().build(raw, ev)


def test_missing_procid_is_fatal() -> None:
    raw = _raw_event([_particle(14, 4)], procid=None)
    with pytest.raises(MissingAttributeError) as exc:
        ParticleStackBuilder().build(raw, InternalEvent())
    assert exc.value.name == "ProcID"


def test_stack_order_is_stable() -> None:
    stack = ParticleStack(10)
    stack.append(0, 0, 0, 1, 22, ParticleState.FINAL, False)
    stack.append(0, 0, 0, 2, 1000060120, ParticleState.NUCLEAR_REMNANT, False)
    stack.append(0, 0, 0, 3, 2212, ParticleState.FSI, False)
    stack.append(0, 0, 0, 4, 11, ParticleState.FINAL, False)
    stack.append(0, 0, 0, 5, 12, ParticleState.INITIAL, False)
    stack.order()
    assert [p.pdg for p in stack] == [12, 2212, 22, 11, 1000060120]


def test_copy_is_independent_of_buffer() -> None:
    ev = InternalEvent()
    ParticleStackBuilder().build(_raw_event([_particle(14, 4), _particle(13, 1)]), ev)
    snap = ev.copy()
    ev.reset()
    assert snap.n_particles == 2
    assert ev.n_particles == 0


def test_final_state_helpers() -> None:
    raw = _raw_event(
        [
            _particle(14, 4),
            _particle(211, 1, energy=0.3),
            _particle(211, 1, energy=0.9),
            _particle(2212, 1),
        ]
    )
    ev = ParticleStackBuilder().build(raw, InternalEvent())
    assert ev.n_final() == 3
    assert ev.n_final(211) == 2
    assert ev.hm_final_particle(211).energy == 0.9
    assert ev.hm_final_particle(13) is None
