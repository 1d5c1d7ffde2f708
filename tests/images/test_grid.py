import dataclasses

import numpy as np
import pytest

from vlbistats.images import Grid
from vlbistats.utils.units import uas2rad


def test_pixel_centres() -> None:
    grid = Grid(4.0, 2.0, 4, 2)

    np.testing.assert_allclose(grid.x, [-1.5, -0.5, 0.5, 1.5])
    np.testing.assert_allclose(grid.y, [-0.5, 0.5])
    assert grid.shape == (2, 4)
    assert grid.pixel_sizes == (1.0, 1.0)
    assert grid.pixel_area == 1.0


def test_from_uas() -> None:
    grid = Grid.from_uas(100.0, 50.0, 10, 5)

    assert grid.fov_x == pytest.approx(uas2rad(100.0))
    assert grid.fov_y == pytest.approx(uas2rad(50.0))
    assert grid.pixel_sizes[0] == pytest.approx(uas2rad(10.0))


def test_from_pixel_sizes() -> None:
    grid = Grid.from_pixel_sizes(2.0, 3.0, 5, 4)
    assert grid.fov == (10.0, 12.0)


@pytest.mark.parametrize("fov_x, fov_y, nx, ny", [(1.0, 1.0, 0, 1), (1.0, 1.0, 1, 0), (-1.0, 1.0, 2, 2)])
def test_invalid(fov_x: float, fov_y: float, nx: int, ny: int) -> None:
    with pytest.raises(ValueError):
        Grid(fov_x, fov_y, nx, ny)


def test_frozen() -> None:
    grid = Grid(1.0, 1.0, 2, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        grid.nx = 3  # type: ignore

    # hashable and comparable
    assert grid == Grid(1.0, 1.0, 2, 2)
    assert len({grid, Grid(1.0, 1.0, 2, 2)}) == 1


def test_polar() -> None:
    grid = Grid(2.0, 2.0, 2, 2)
    r, theta = grid.polar()

    # pixel [1, 1] is at x=0.5, y=0.5
    assert r[1, 1] == pytest.approx(np.sqrt(0.5))
    assert theta[1, 1] == pytest.approx(-np.pi / 4)

    # pixel [1, 0] is at x=-0.5, y=0.5
    assert theta[1, 0] == pytest.approx(np.pi / 4)


def test_box_mask() -> None:
    grid = Grid(4.0, 4.0, 4, 4)
    mask = grid.box_mask((-1.0, 1.0), (-1.0, 1.0))

    assert mask.sum() == 4
    assert mask[1:3, 1:3].all()
