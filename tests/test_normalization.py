from __future__ import annotations

import logging
from pathlib import Path

import pytest

from nuconduit.errors import FatalConfigError, MissingAttributeError
from nuconduit.normalization import PlaceholderHistogram, resolve_normalization
from nuconduit.stream import EventStream

FIXTURES = Path(__file__).parent / "fixtures"


def _resolve(path):
    with EventStream(str(path)) as stream:
        norm = resolve_normalization(stream)
        # the stream is rewound after the scan
        assert stream.position == 0
        assert stream.read_next() is not None
    return norm


def test_precomputed_fatx() -> None:
    norm = _resolve(FIXTURES / "fatx.hepmc3")
    assert norm.n_events == 3
    assert norm.fatx == pytest.approx(1.2345)
    assert norm.source == "fatx"
    assert norm.run_info.weight_names == ["CV"]


def test_running_estimate_takes_last_available(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="nuconduit.normalization"):
        norm = _resolve(FIXTURES / "running_estimate.hepmc3")
    assert norm.n_events == 4
    assert norm.source == "running-estimate"
    assert norm.best_estimate == pytest.approx(12.5)
    assert norm.fatx == pytest.approx(12.5)
    # three events carried an estimate and a CV weight of 1
    assert norm.sum_of_weights == pytest.approx(3.0)
    assert "Failed to read xs info for event 3" in caplog.text


def test_no_normalization_defaults_to_one() -> None:
    norm = _resolve(FIXTURES / "no_normalization.hepmc3")
    assert norm.n_events == 2
    assert norm.fatx == 1.0
    assert norm.source == "none"


def test_alternate_units_scale_fatx(nuhepmc_file) -> None:
    path = nuhepmc_file(n_events=2, conventions=("G.C.1", "G.C.4", "E.C.5"), fatx=0.5)
    assert _resolve(path).fatx == pytest.approx(50.0)


def test_alternate_units_scale_running_estimate(nuhepmc_file) -> None:
    path = nuhepmc_file(
        n_events=2, conventions=("E.C.4", "E.C.5"), fatx=None, xsecs=[0.25, 0.5]
    )
    assert _resolve(path).fatx == pytest.approx(50.0)


def test_fatx_wins_over_running_estimate(nuhepmc_file) -> None:
    path = nuhepmc_file(
        n_events=2, conventions=("G.C.4", "E.C.4"), fatx=3.0, xsecs=[7.0, 8.0]
    )
    norm = _resolve(path)
    assert norm.fatx == pytest.approx(3.0)
    assert norm.best_estimate == pytest.approx(8.0)


def test_empty_file_is_fatal(nuhepmc_file) -> None:
    path = nuhepmc_file(n_events=0)
    with EventStream(str(path)) as stream:
        with pytest.raises(FatalConfigError, match="Could not read run_info"):
            resolve_normalization(stream)


def test_missing_conventions_is_fatal(nuhepmc_file) -> None:
    path = nuhepmc_file(n_events=1, conventions=None)
    with EventStream(str(path)) as stream:
        with pytest.raises(MissingAttributeError) as exc:
            resolve_normalization(stream)
    assert exc.value.name == "NuHepMC.Conventions"
    assert "NuHepMC.FluxAveragedTotalCrossSection" in exc.value.available


def test_declared_fatx_must_be_present(nuhepmc_file) -> None:
    path = nuhepmc_file(n_events=1, conventions=("G.C.4",), fatx=None)
    with EventStream(str(path)) as stream:
        with pytest.raises(MissingAttributeError):
            resolve_normalization(stream)


def test_placeholder_histogram_holds_value_in_one_bin() -> None:
    h = PlaceholderHistogram.single_value("eventhist", 4.2)
    assert h.nbins == 10
    assert (h.low, h.high) == (0.0, 10.0)
    assert h.bin_content(5) == 4.2
    assert sum(1 for c in h.contents if c) == 1
    assert h.integral() == pytest.approx(4.2)
    assert h.integral(width=True) == pytest.approx(4.2)


def test_placeholder_histogram_add() -> None:
    h = PlaceholderHistogram("sum")
    h.add(PlaceholderHistogram.single_value("a", 1.0))
    h.add(PlaceholderHistogram.single_value("b", 2.5))
    assert h.integral() == pytest.approx(3.5)

    with pytest.raises(ValueError):
        h.add(PlaceholderHistogram("other", nbins=5))
    with pytest.raises(IndexError):
        h.set_bin_content(11, 1.0)
