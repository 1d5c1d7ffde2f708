import numpy as np
import pytest
from scipy.integrate import quad

from vlbistats.images import Grid
from vlbistats.models import AzimuthalCosine, Constant, GaussDisk, Gaussian, RadialGaussian, RingTemplate
from vlbistats.utils.units import uas2rad


@pytest.fixture()
def fine_grid() -> Grid:
    return Grid.from_uas(200.0, 200.0, 128, 128)


def _size(value: float) -> float:
    return uas2rad(value)


@pytest.mark.parametrize(
    "model",
    [
        Gaussian().modify(stretch=(_size(10.0), _size(10.0))),
        GaussDisk(0.2).modify(stretch=(_size(20.0), _size(20.0))),
        RingTemplate(RadialGaussian(0.2), AzimuthalCosine((0.4, 0.1), (1.0, 2.0))).modify(
            stretch=(_size(20.0), _size(20.0))
        ),
    ],
)
def test_unit_flux(fine_grid: Grid, model) -> None:
    assert model.intensitymap(fine_grid).flux() == pytest.approx(1.0, rel=1e-2)


def test_constant(fine_grid: Grid) -> None:
    image = Constant(fine_grid.fov_x).intensitymap(fine_grid)
    assert image.flux() == pytest.approx(1.0)
    assert np.ptp(image.safe_data) == 0.0


def test_radial_integral() -> None:
    radial = RadialGaussian(0.3)
    numeric, _ = quad(lambda r: r * radial(r), 0.0, 20.0)
    assert radial.radial_integral() == pytest.approx(numeric, rel=1e-6)


def test_azimuthal_cosine() -> None:
    azimuthal = AzimuthalCosine((0.5,), (0.0,))
    theta = np.array([0.0, np.pi / 2, np.pi])
    np.testing.assert_allclose(azimuthal(theta), [0.5, 1.0, 1.5])

    with pytest.raises(ValueError):
        AzimuthalCosine((0.1, 0.2), (0.0,))


def test_ring_brightness_asymmetry() -> None:
    ring = RingTemplate(RadialGaussian(0.1), AzimuthalCosine((0.5,), (0.0,)))

    # position angle 0 is north, i.e. +y
    north = ring.intensity_point(np.array(0.0), np.array(1.0))
    south = ring.intensity_point(np.array(0.0), np.array(-1.0))
    assert south == pytest.approx(3.0 * north)


def test_gaussdisk_flat_inside() -> None:
    disk = GaussDisk(0.1)
    values = disk.intensity_point(np.array([0.0, 0.5, 0.9]), np.zeros(3))
    assert np.ptp(values) == 0.0
    assert disk.intensity_point(np.array(1.5), np.array(0.0)) < values[0]
