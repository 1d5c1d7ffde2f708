import logging

import numpy as np
import pytest

from vlbistats.divergences import Divergence, LeastSquares, NxCorr, get_divergence, nxcorr_arrays
from vlbistats.images import Grid, Image
from vlbistats.models import Gaussian
from vlbistats.utils.exceptions import DegenerateImageError
from vlbistats.utils.units import uas2rad


def _gauss(x0: float = 0.0, sigma: float = 8.0):
    s = uas2rad(sigma)
    return Gaussian().modify(stretch=(s, s), shift=(uas2rad(x0), 0.0))


@pytest.fixture()
def reference(grid) -> Image:
    return _gauss().intensitymap(grid)


@pytest.mark.parametrize("klass", [LeastSquares, NxCorr])
def test_identity(klass, reference: Image) -> None:
    div = klass(reference)
    assert div(reference) == pytest.approx(0.0, abs=1e-12)
    assert div(_gauss()) == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("klass", [LeastSquares, NxCorr])
def test_monotonic_in_offset(klass, reference: Image) -> None:
    div = klass(reference)
    values = [div(_gauss(x0)) for x0 in (0.0, 2.0, 5.0, 10.0, 20.0)]
    assert all(a < b for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("klass", [LeastSquares, NxCorr])
def test_flux_scale_invariant(klass, reference: Image) -> None:
    div = klass(reference)
    candidate = _gauss(3.0)
    assert div(3.0 * candidate) == pytest.approx(div(candidate))


def test_zero_candidate(reference: Image, grid) -> None:
    div = LeastSquares(reference)
    assert div(Image(np.zeros(grid.shape), grid=grid)) == Divergence.PENALTY


def test_reference_clamped(reference: Image) -> None:
    negative = reference.safe_data.copy()
    negative[0, :] = -1.0
    div1 = NxCorr(reference)
    div2 = NxCorr(reference.with_data(negative))
    assert div2(_gauss(4.0)) == pytest.approx(div1(_gauss(4.0)))


def test_degenerate_reference(grid, caplog) -> None:
    empty = Image(np.zeros(grid.shape), grid=grid)

    with caplog.at_level(logging.WARNING):
        div = LeastSquares(empty)
    assert div.degenerate
    assert "no positive flux" in caplog.text
    assert np.isfinite(div(_gauss()))

    with pytest.raises(DegenerateImageError):
        LeastSquares(empty, strict=True)


def test_candidate_on_other_grid(reference: Image) -> None:
    div = NxCorr(reference)
    other = _gauss().intensitymap(Grid.from_uas(100.0, 100.0, 64, 64))
    assert div(other) < 1e-3


def test_polarized_reference_uses_intensity(polarized_ring, ring_image) -> None:
    assert LeastSquares(polarized_ring)(ring_image) == pytest.approx(0.0, abs=1e-12)


def test_nxcorr_arrays() -> None:
    a = np.array([1.0, 2.0, 3.0])
    assert nxcorr_arrays(a, a) == pytest.approx(1.0)
    assert nxcorr_arrays(a, -a) == pytest.approx(-1.0)
    assert nxcorr_arrays(a, np.zeros(3)) == 0.0

    # complex vectors use the real part of <a, conj(b)>
    c = np.array([1.0 + 1.0j, 2.0 - 1.0j])
    assert nxcorr_arrays(c, c) == pytest.approx(1.0)
    assert nxcorr_arrays(c, 1j * c) == pytest.approx(0.0)


def test_get_divergence(reference: Image) -> None:
    assert isinstance(get_divergence(NxCorr, reference), NxCorr)
    assert isinstance(get_divergence("vlbistats.divergences.LeastSquares", reference), LeastSquares)

    div = get_divergence({"class": "vlbistats.divergences.NxCorr", "strict": True}, reference)
    assert isinstance(div, NxCorr)

    with pytest.raises(TypeError):
        get_divergence(NxCorr(reference), reference)
    with pytest.raises(TypeError):
        get_divergence("vlbistats.images.Grid", reference)
    with pytest.raises(TypeError):
        get_divergence({"class": "vlbistats.images.Grid", "fov_x": 1.0}, reference)
