"""High-level open/info API."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .handler import NuHepMCInputHandler


def open_inputs(
    rawinputs: Union[str, Path],
    name: str = "nuconduit",
    max_events: Optional[int] = None,
) -> NuHepMCInputHandler:
    """Open one file, or a ``(a,b,...)`` joint input, for reading."""
    return NuHepMCInputHandler(name, str(rawinputs), max_events=max_events)


def info(rawinputs: Union[str, Path], max_events: Optional[int] = None) -> dict:
    from .pdg import name as pdg_name

    pdg_counts: dict[int, int] = {}
    state_counts: dict[str, int] = {}
    total_particles = 0
    n_read = 0

    with open_inputs(rawinputs, "info", max_events=max_events) as handler:
        for ev in handler:
            n_read += 1
            total_particles += ev.n_particles
            for p in ev.particles:
                pdg_counts[p.pdg] = pdg_counts.get(p.pdg, 0) + 1
                state_counts[p.state.name] = state_counts.get(p.state.name, 0) + 1

        files = []
        for i, f in enumerate(handler.files):
            meta = f.normalization.metadata
            run_info = f.normalization.run_info
            files.append({
                "path": f.path,
                "n_events": f.n_events,
                "fatx": f.normalization.fatx,
                "source": f.normalization.source,
                "best_estimate": f.normalization.best_estimate,
                "sum_of_weights": f.normalization.sum_of_weights,
                "conventions": list(meta.conventions),
                "weight_names": list(meta.weight_names),
                "tools": [f"{t.name} {t.version}".strip() for t in run_info.tools] if run_info else [],
                "scale": handler.joint_table.scale[i],
            })
        normalization = handler.get_normalization()
        n_events = handler.event_count

    top_pdg = sorted(pdg_counts.items(), key=lambda x: -x[1])[:20]

    return {
        "n_events": n_events,
        "normalization": normalization,
        "joint": len(files) > 1,
        "files": files,
        "total_particles": total_particles,
        "avg_particles_per_event": total_particles / max(1, n_read),
        "top_particles": [(pdg_name(pid), count) for pid, count in top_pdg],
        "state_counts": dict(sorted(state_counts.items())),
    }
