"""Test fixtures.

NuHepMC fixture files are generated deterministically at collection time
instead of being checked in, so the suite does not depend on packaging
keeping binary or data files around.

Every generated event has the same shape::

    P1 nu_mu (status 4) + P2 12C (status 11) -> V-1 (nuclear, status 2) -> P3 n (status 21)
    P1 + P3 -> V-2 (primary, status 1) -> mu- (1), p (1), pi0 (2)
    pi0 -> implicit vertex -> gamma (1)
"""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import Optional, Sequence

import pytest

from nuconduit import config as nuconduit_config

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def event_text(
    index: int,
    *,
    event_number: int,
    procid: Optional[int] = 200,
    xsec: Optional[float] = None,
    weights: Sequence[float] = (1.0,),
    target: int = 1000060120,
) -> str:
    enu = 1.0 + 0.1 * index
    lines = [
        f"E {event_number} 3 7",
        "U GEV MM",
    ]
    if weights:
        lines.append("W " + " ".join(f"{w:g}" for w in weights))
    if procid is not None:
        lines.append(f"A 0 ProcID {procid}")
    if xsec is not None:
        lines.append(f"A 0 GenCrossSection {xsec!r} 0.1 -1 -1")
    lines += [
        f"P 1 0 14 0 0 {enu!r} {enu!r} 0 4",
        f"P 2 0 {target} 0 0 0 11.1749 11.1749 11",
        "V -1 2 [2]",
        "P 3 -1 2112 0.1 0 0.05 0.945 0.9396 21",
        "V -2 1 [1,3]",
        "P 4 -2 13 0.1 0.2 0.6 0.64 0.1057 1",
        "P 5 -2 2212 0.0 -0.2 0.3 1.02 0.9383 1",
        "P 6 -2 111 0.0 0.0 0.2 0.25 0.135 2",
        "P 7 6 22 0.0 0.0 0.1 0.1 0 1",
    ]
    return "\n".join(lines) + "\n"


def nuhepmc_text(
    n_events: int = 3,
    *,
    conventions: Optional[Sequence[str]] = ("G.C.1", "G.C.4"),
    fatx: Optional[float] = 1.2345,
    xsecs: Optional[Sequence[Optional[float]]] = None,
    weight_names: Sequence[str] = ("CV",),
    procid: Optional[int] = 200,
    first_event_number: int = 100,
    target: int = 1000060120,
) -> str:
    """Text of a NuHepMC Asciiv3 file. ``xsecs[i]`` is event i's running estimate."""
    lines = ["HepMC::Version 3.02.06", "HepMC::Asciiv3-START_EVENT_LISTING"]
    if weight_names:
        lines.append("W " + " ".join(weight_names))
    lines.append("T TestGen\\|1.0\\|fixture generator")
    if conventions is not None:
        lines.append("A NuHepMC.Conventions " + " ".join(conventions))
    if fatx is not None:
        lines.append(f"A NuHepMC.FluxAveragedTotalCrossSection {fatx!r}")
    text = "\n".join(lines) + "\n"
    for i in range(n_events):
        text += event_text(
            i,
            event_number=first_event_number + i,
            procid=procid,
            xsec=xsecs[i] if xsecs is not None else None,
            target=target,
        )
    return text + "HepMC::Asciiv3-END_EVENT_LISTING\n"


def _ensure_standard_fixtures(fixtures: Path) -> None:
    _write_text(fixtures / "fatx.hepmc3", nuhepmc_text(3))
    _write_text(
        fixtures / "running_estimate.hepmc3",
        nuhepmc_text(
            4,
            conventions=("G.C.1", "E.C.4"),
            fatx=None,
            xsecs=[10.0, 11.0, 12.5, None],
        ),
    )
    _write_text(
        fixtures / "no_normalization.hepmc3",
        nuhepmc_text(2, conventions=("G.C.1",), fatx=None),
    )


def pytest_configure(config):  # noqa: D401
    """Ensure fixtures exist before any tests run."""
    _ensure_standard_fixtures(FIXTURES)


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    monkeypatch.delenv("NUCONDUIT_MAXEVENTS", raising=False)
    monkeypatch.delenv("NUCONDUIT_MAXPARTICLES", raising=False)
    nuconduit_config.reset()
    yield
    nuconduit_config.reset()


@pytest.fixture
def nuhepmc_file(tmp_path):
    """Factory writing a NuHepMC file under tmp_path; accepts nuhepmc_text options."""

    def _make(name: str = "events.hepmc3", *, compress: bool = False, **kwargs) -> Path:
        path = tmp_path / name
        text = nuhepmc_text(**kwargs)
        if compress:
            with gzip.open(path, "wt", encoding="utf-8") as f:
                f.write(text)
        else:
            _write_text(path, text)
        return path

    return _make
