import logging
from typing import Dict, Optional, Tuple

import numpy as np
import pytest

from vlbistats.divergences import LeastSquares, NxCorr, get_divergence
from vlbistats.fitting import center_ring, center_template, find_template
from vlbistats.images import Grid, Image
from vlbistats.images.processors import shifted
from vlbistats.models import Gaussian, SkyModel
from vlbistats.optimize import FitResult, ParameterSpace, TemplateProblem
from vlbistats.optimize.parameters import Parameters
from vlbistats.polarization import lpmodes
from vlbistats.templates import Disk, DualGaussian, MRing, Template
from vlbistats.utils.exceptions import BoundsViolationError
from vlbistats.utils.units import uas2rad


def _ring_params(x0: float = 0.0, y0: float = 0.0) -> Parameters:
    return {
        "r0": uas2rad(20.0),
        "sigma": uas2rad(3.0),
        "s": (0.4,),
        "xi": (1.0,),
        "tau": 0.05,
        "xitau": 0.5,
        "x0": x0,
        "y0": y0,
        "f0": 0.01,
    }


@pytest.fixture()
def mock_solve(mocker):
    def solve(params: Parameters, divergence: float = 0.1):
        return mocker.patch(
            "vlbistats.optimize.problem.TemplateProblem.solve",
            return_value=FitResult(params=params, divergence=divergence, converged=True, evaluations=10),
        )

    return solve


def test_center_template(mock_solve, grid: Grid) -> None:
    x0, y0 = uas2rad(5.0), uas2rad(-2.5)
    image = MRing(1).model(_ring_params(x0, y0), grid).intensitymap(grid)
    mock_solve(_ring_params(x0, y0))

    centered, params, model = center_template(image, "mring")
    assert params == _ring_params(x0, y0)
    assert isinstance(model, SkyModel)

    # shifted by (-x0, -y0)
    expected = MRing(1).model(_ring_params(), grid).intensitymap(grid)
    assert centered.centroid() == pytest.approx(expected.centroid(), abs=uas2rad(0.1))

    # input untouched
    assert image.centroid() != pytest.approx(centered.centroid(), abs=uas2rad(0.1))


def test_center_polarized(mock_solve, polarized_ring) -> None:
    mock_solve(_ring_params(uas2rad(2.5), 0.0))
    centered, _, _ = center_ring(polarized_ring)

    assert centered.is_polarized
    assert centered.safe_grid == polarized_ring.safe_grid


def test_find_template_on_grid(mocker, mock_solve, ring_image) -> None:
    solve = mock_solve(_ring_params())
    spy = mocker.spy(MRing, "model_factory")
    fit_grid = Grid.from_uas(100.0, 100.0, 32, 32)

    fit = find_template(ring_image, MRing(1), grid=fit_grid, divergence=NxCorr, max_iters=123, seed=5)
    assert fit.model is not None
    assert spy.call_args[0][1] == fit_grid
    solve.assert_called_once()
    assert solve.call_args[0][1] == 123
    assert solve.call_args[1]["seed"] == 5


class _Shifted(Template):
    """Gaussian template with an initial guess outside of its bounds."""

    name = "shifted"

    @property
    def shape(self) -> Dict[str, Optional[int]]:
        return {"sigma": None, "x0": None, "y0": None}

    def lower(self, grid: Grid) -> Parameters:
        return {"sigma": 1.0, "x0": -1.0, "y0": -1.0}

    def upper(self, grid: Grid) -> Parameters:
        return {"sigma": 2.0, "x0": 1.0, "y0": 1.0}

    def _initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters:
        return {"sigma": 3.0, "x0": centroid[0], "y0": centroid[1]}

    def model(self, params: Parameters, grid: Grid) -> SkyModel:
        return Gaussian().modify(stretch=(params["sigma"], params["sigma"]), shift=(params["x0"], params["y0"]))


def test_bounds_violation() -> None:
    image = Gaussian().intensitymap(Grid(8.0, 8.0, 8, 8))
    with pytest.raises(BoundsViolationError) as e:
        center_template(image, _Shifted())
    assert e.value.parameter == "sigma"


def test_dual_gaussian_divergence_after_swap(mock_solve, grid: Grid) -> None:
    s = uas2rad(5.0)
    params = {"sigma1": s, "x0": uas2rad(10.0), "y0": 0.0, "sigma2": s, "x1": -uas2rad(10.0), "y1": 0.0}
    params.update(f2=0.25, f0=0.01)
    image = DualGaussian().model(params, grid).intensitymap(grid)
    mock_solve(params, divergence=0.0)

    fit = find_template(image, "gaussian")
    assert fit.params["x0"] < fit.params["x1"]
    assert LeastSquares(image)(fit.model) == pytest.approx(fit.divergence, abs=1e-12)


def test_degenerate_image(grid: Grid, caplog) -> None:
    empty = Image(np.zeros(grid.shape), grid=grid)
    with caplog.at_level(logging.WARNING):
        centered, params, _ = center_template(empty, "disk", max_iters=100, seed=1)
    assert "no positive flux" in caplog.text
    assert set(params.keys()) == set(MRing(1).names) - {"s", "xi"}
    assert np.all(centered.safe_data == 0.0)


@pytest.mark.slow
def test_ring_recovery(grid: Grid) -> None:
    truth = _ring_params(uas2rad(3.0), uas2rad(-2.0))
    image = MRing(1).model(truth, grid).intensitymap(grid)

    _, params, _ = center_ring(image, order=1, max_iters=20_000, seed=1)
    assert params["r0"] == pytest.approx(truth["r0"], abs=uas2rad(1.0))
    assert params["x0"] == pytest.approx(truth["x0"], abs=uas2rad(1.0))
    assert params["y0"] == pytest.approx(truth["y0"], abs=uas2rad(1.0))
    assert params["s"][0] == pytest.approx(0.4, abs=0.05)


@pytest.mark.slow
def test_dual_gaussian_order(grid: Grid) -> None:
    s = uas2rad(6.0)
    left = Gaussian().modify(stretch=(s, s), shift=(-uas2rad(15.0), 0.0))
    right = Gaussian().modify(stretch=(s, s), shift=(uas2rad(15.0), 0.0))
    image = (left + 0.5 * right).intensitymap(grid)

    fit = find_template(image, "gaussian", max_iters=20_000, seed=2)
    assert fit.params["x0"] < fit.params["x1"]
    assert fit.params["x0"] == pytest.approx(-uas2rad(15.0), abs=uas2rad(1.5))


@pytest.mark.parametrize("template", [MRing(1), MRing(3), Disk(), DualGaussian()])
@pytest.mark.parametrize("kind", ["ring", "noise"])
def test_result_within_bounds(template: Template, kind: str, grid: Grid, ring_image: Image) -> None:
    if kind == "ring":
        image = ring_image
    else:
        image = Image(np.random.default_rng(3).uniform(-0.1, 1.0, grid.shape), grid=grid)
    lower, upper = template.lower(grid), template.upper(grid)
    problem = TemplateProblem(get_divergence(LeastSquares, image), template.model_factory(grid), lower, upper)

    fit = problem.solve(template.initial_guess(grid, image.centroid()), 300, seed=1)
    ParameterSpace(lower, upper).check(fit.params)


@pytest.mark.slow
def test_ring_example(make_polarized) -> None:
    grid = Grid.from_uas(128.0, 128.0, 64, 64)
    truth = {
        "r0": uas2rad(20.0),
        "sigma": uas2rad(4.0),
        "s": (0.3,),
        "xi": (1.0,),
        "tau": 0.0,
        "xitau": 0.0,
        "x0": 0.0,
        "y0": 0.0,
        "f0": 0.001,
    }
    beta = 0.2 + 0.1j
    x0, y0 = uas2rad(2.0), uas2rad(-1.0)
    centered = make_polarized(MRing(1).model(truth, grid).intensitymap(grid), lp=beta, lp_mode=1)
    image = shifted(centered, x0, y0)

    recentered, params, _ = center_template(image, MRing(1), max_iters=5000, seed=1)
    assert params["x0"] == pytest.approx(x0, abs=uas2rad(0.5))
    assert params["y0"] == pytest.approx(y0, abs=uas2rad(0.5))
    assert params["r0"] == pytest.approx(truth["r0"], rel=0.1)
    assert params["sigma"] == pytest.approx(truth["sigma"], rel=0.1)

    # mode of the injected polarization survives centering
    (mode,) = lpmodes(recentered, (1,))
    assert abs(mode - beta) < 0.1 * abs(beta)
