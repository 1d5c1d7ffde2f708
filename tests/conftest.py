from typing import Any, Callable, Sequence

import numpy as np
import pytest

from vlbistats.images import Grid, Image
from vlbistats.models import AzimuthalCosine, Gaussian, RadialGaussian, RingTemplate
from vlbistats.utils.units import uas2rad


def _ring(
    grid: Grid,
    r0: float = 20.0,
    width: float = 4.0,
    x0: float = 0.0,
    y0: float = 0.0,
    s: Sequence[float] = (0.0,),
    xi: Sequence[float] = (0.0,),
) -> Image:
    """Ring with unit flux, sizes and positions in μas."""
    r = uas2rad(r0)
    ring = RingTemplate(RadialGaussian(width / r0), AzimuthalCosine(s, xi))
    model = ring.modify(stretch=(r, r), shift=(uas2rad(x0), uas2rad(y0)))
    return model.intensitymap(grid)


def _gaussian(grid: Grid, sigma: float = 8.0, x0: float = 0.0, y0: float = 0.0) -> Image:
    """Gaussian with unit flux, sizes and positions in μas."""
    s = uas2rad(sigma)
    return Gaussian().modify(stretch=(s, s), shift=(uas2rad(x0), uas2rad(y0))).intensitymap(grid)


def _polarized(
    intensity: Image, lp: complex = 0.0, lp_mode: int = 2, cp: float = 0.0, cp_mode: int = 0
) -> Image:
    """Polarized image whose polarization follows a pure azimuthal mode of the intensity."""
    i = intensity.safe_data
    _, theta = intensity.safe_grid.polar()
    p = lp * i * np.exp(-1j * lp_mode * theta)
    v = cp * i * np.cos(cp_mode * theta)
    return intensity.with_data(np.stack([i, p.real, p.imag, v]))


@pytest.fixture()
def grid() -> Grid:
    return Grid.from_uas(120.0, 120.0, 48, 48)


@pytest.fixture()
def make_ring() -> Callable[..., Image]:
    return _ring


@pytest.fixture()
def make_gaussian() -> Callable[..., Image]:
    return _gaussian


@pytest.fixture()
def make_polarized() -> Callable[..., Image]:
    return _polarized


@pytest.fixture()
def ring_image(grid: Grid) -> Image:
    return _ring(grid)


@pytest.fixture()
def polarized_ring(grid: Grid) -> Image:
    return _polarized(_ring(grid), lp=0.2 + 0.1j, lp_mode=2, cp=0.05, cp_mode=0)


@pytest.fixture()
def random_image() -> Any:
    rng = np.random.default_rng(42)
    return Image(rng.uniform(0.0, 1.0, (4, 6, 8)), grid=Grid(8e-10, 6e-10, 8, 6))
