import logging

import numpy as np
import pytest

from vlbistats.images import Grid, Image
from vlbistats.images.processors import Smooth, smooth


@pytest.fixture()
def point_source() -> Image:
    data = np.zeros((4, 21, 21))
    data[0, 10, 10] = 1.0
    data[3, 10, 10] = 0.5
    return Image(data, grid=Grid(21.0, 21.0, 21, 21))


def test_conserves_flux(point_source: Image) -> None:
    smoothed = smooth(point_source, 2.0)

    assert smoothed.flux().I == pytest.approx(1.0)
    assert smoothed.flux().V == pytest.approx(0.5)
    assert smoothed.safe_data[0, 10, 10] < 1.0

    # no leaking between Stokes planes
    assert np.all(smoothed.safe_data[1] == 0.0)
    assert np.all(smoothed.safe_data[2] == 0.0)

    # original is untouched
    assert point_source.safe_data[0, 10, 10] == 1.0


def test_width(point_source: Image) -> None:
    smoothed = smooth(point_source, 2.0)
    xx, yy = smoothed.safe_grid.meshgrid()
    variance = np.sum(xx**2 * smoothed.safe_data[0])
    assert variance == pytest.approx(4.0, rel=1e-2)


def test_zero_sigma(point_source: Image) -> None:
    smoothed = smooth(point_source, 0.0)
    np.testing.assert_array_equal(smoothed.safe_data, point_source.safe_data)


def test_no_data(caplog) -> None:
    image = Image()
    with caplog.at_level(logging.WARNING):
        assert Smooth(1.0)(image) is image
    assert "No data found in image." in caplog.text


def test_unknown_argument() -> None:
    with pytest.raises(TypeError):
        Smooth(1.0, foo=1)
