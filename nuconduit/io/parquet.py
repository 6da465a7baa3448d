from __future__ import annotations

import json
from typing import Iterable, Optional

from ..event import InternalEvent
from ..normalization import Normalization


def _require_pyarrow():
    try:
        import pyarrow as pa  # type: ignore
        import pyarrow.parquet as pq  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("Parquet export requires 'pyarrow'. Install nuconduit[parquet].") from e
    return pa, pq


_META_PREFIX = "nuconduit."


def _md_set(md: dict[str, str], key: str, value) -> None:
    md[f"{_META_PREFIX}{key}"] = str(value)


def _encode_normalization(norms: Iterable[Normalization]) -> dict[str, str]:
    md: dict[str, str] = {}
    norms = list(norms)
    _md_set(md, "fatx", json.dumps([n.fatx for n in norms]))
    _md_set(md, "n_events", json.dumps([n.n_events for n in norms]))
    _md_set(md, "conventions", json.dumps([list(n.metadata.conventions) for n in norms]))
    return md


def _event_fields(entry: int, ev: InternalEvent) -> dict:
    return {
        "entry": entry,
        "event_number": ev.event_number,
        "mode": ev.mode,
        "target_a": ev.target_a,
        "target_z": ev.target_z,
        "bound": ev.bound,
        "input_weight": ev.input_weight,
    }


def _particle_fields(p) -> dict:
    return {
        "pdg": p.pdg,
        "state": int(p.state),
        "primary_vertex": p.primary_vertex,
        "px": p.px,
        "py": p.py,
        "pz": p.pz,
        "energy": p.energy,
    }


def write_parquet(
    path: str,
    events: Iterable[InternalEvent],
    normalizations: Optional[Iterable[Normalization]] = None,
    *,
    columnar: bool = False,
    metadata: Optional[dict] = None,
) -> int:
    """Write internal events to Parquet; returns the number of events written.

    The flat layout has one row per particle; ``columnar`` has one row per
    event with a list column of particles. Events are consumed as they are
    produced, so the shared handler buffer can be passed directly.
    """
    pa, pq = _require_pyarrow()

    md = _encode_normalization(normalizations or [])
    for k, v in (metadata or {}).items():
        md[str(k)] = str(v)

    rows = []
    n = 0
    for entry, ev in enumerate(events):
        n += 1
        if columnar:
            rows.append({
                **_event_fields(entry, ev),
                "particles": [_particle_fields(p) for p in ev.particles],
            })
        else:
            head = _event_fields(entry, ev)
            for p in ev.particles:
                rows.append({**head, **_particle_fields(p)})

    table = pa.Table.from_pylist(rows)
    table = table.replace_schema_metadata(md)
    pq.write_table(table, path)
    return n
