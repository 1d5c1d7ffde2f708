import numpy as np
import pytest

from vlbistats.images import Grid
from vlbistats.optimize import ParameterSpace
from vlbistats.templates import Disk, DualGaussian, MRing, Template, get_template
from vlbistats.utils.units import uas2rad


TEMPLATES = [MRing(1), MRing(4), Disk(), DualGaussian()]


@pytest.mark.parametrize("template", TEMPLATES)
def test_declared_parameters(template: Template, grid: Grid) -> None:
    names = template.names
    assert list(template.lower(grid).keys()) == names
    assert list(template.upper(grid).keys()) == names
    assert list(template.initial_guess(grid, (0.0, 0.0)).keys()) == names


@pytest.mark.parametrize("template", TEMPLATES)
def test_initial_guess_in_bounds(template: Template, grid: Grid) -> None:
    space = ParameterSpace(template.lower(grid), template.upper(grid))
    space.check(template.initial_guess(grid, (uas2rad(3.0), uas2rad(-2.0))))


@pytest.mark.parametrize("template", TEMPLATES)
def test_centroid_clipped(template: Template, grid: Grid) -> None:
    far = 10 * grid.fov_x
    guess = template.initial_guess(grid, (far, -far))
    assert guess["x0"] == template.upper(grid)["x0"]
    assert guess["y0"] == template.lower(grid)["y0"]


@pytest.mark.parametrize("template", [MRing(1), MRing(4), Disk()])
def test_model_flux(template: Template, grid: Grid) -> None:
    params = template.initial_guess(grid, (0.0, 0.0))
    flux = template.model(params, grid).intensitymap(grid).flux()
    assert flux == pytest.approx(1.0 + params["f0"], rel=1e-2)


def test_dual_gaussian_flux(grid: Grid) -> None:
    s = uas2rad(5.0)
    params = {
        "sigma1": s,
        "x0": -uas2rad(10.0),
        "y0": 0.0,
        "sigma2": s,
        "x1": uas2rad(10.0),
        "y1": 0.0,
        "f2": 0.5,
        "f0": 0.1,
    }
    flux = DualGaussian().model(params, grid).intensitymap(grid).flux()
    assert flux == pytest.approx(1.6, rel=1e-3)


def test_mring_keys() -> None:
    assert MRing(2).keys() == ["r0", "sigma", "s_1", "s_2", "xi_1", "xi_2", "tau", "xitau", "x0", "y0", "f0"]
    assert Disk().keys() == ["r0", "sigma", "tau", "xitau", "x0", "y0", "f0"]

    with pytest.raises(ValueError):
        MRing(0)


def test_mring_flatten() -> None:
    flat = MRing.flatten({"r0": 1.0, "s": (0.1, 0.2), "x0": 0.0})
    assert flat == {"r0": 1.0, "s_1": 0.1, "s_2": 0.2, "x0": 0.0}


def _mring_params(**kwargs):
    params = {
        "r0": uas2rad(20.0),
        "sigma": uas2rad(3.0),
        "s": (0.5,),
        "xi": (0.0,),
        "tau": 0.0,
        "xitau": 0.0,
        "x0": 0.0,
        "y0": 0.0,
        "f0": 0.0,
    }
    params.update(kwargs)
    return params


def test_mring_orientation(grid: Grid) -> None:
    model = MRing(1).model(_mring_params(), grid)
    r = np.array(uas2rad(20.0))
    north = model.intensity_point(np.array(0.0), r)
    south = model.intensity_point(np.array(0.0), -r)
    assert south == pytest.approx(3.0 * north)


def test_mring_phase_on_sky(grid: Grid) -> None:
    # for a circular ring the orientation of the stretch must not change the brightness pattern
    xx, yy = grid.meshgrid()
    a = MRing(1).model(_mring_params(xi=(1.0,)), grid).intensity_point(xx, yy)
    b = MRing(1).model(_mring_params(xi=(1.0,), xitau=0.7), grid).intensity_point(xx, yy)
    np.testing.assert_allclose(a, b, rtol=1e-10, atol=1e-12 * np.max(a))


def test_mring_stretch(grid: Grid) -> None:
    model = MRing(1).model(_mring_params(s=(0.0,), tau=0.5), grid)
    r = uas2rad(20.0)

    # stretched along y by 1+tau
    assert model.intensity_point(np.array(0.0), np.array(1.5 * r)) == pytest.approx(
        model.intensity_point(np.array(r), np.array(0.0)), rel=0.05
    )


def test_dual_gaussian_postprocess() -> None:
    template = DualGaussian()
    params = {"sigma1": 1.0, "x0": 2.0, "y0": 0.5, "sigma2": 3.0, "x1": -1.0, "y1": 0.1, "f2": 4.0, "f0": 0.2}

    swapped = template.postprocess(params)
    assert swapped == {"sigma1": 3.0, "x0": -1.0, "y0": 0.1, "sigma2": 1.0, "x1": 2.0, "y1": 0.5, "f2": 0.25, "f0": 0.05}

    # already ordered
    assert template.postprocess(swapped) == swapped

    # no second component
    params["f2"] = 0.0
    assert template.postprocess(params) == params


def test_dual_gaussian_postprocess_keeps_model(grid: Grid) -> None:
    template = DualGaussian()
    s = uas2rad(5.0)
    params = {"sigma1": s, "x0": uas2rad(10.0), "y0": 0.0, "sigma2": 2 * s, "x1": -uas2rad(10.0), "y1": 0.0}
    params.update(f2=0.25, f0=0.01)

    before = template.model(params, grid).intensitymap(grid).safe_data
    after = template.model(template.postprocess(params), grid).intensitymap(grid).safe_data
    np.testing.assert_allclose(after / after.sum(), before / before.sum(), atol=1e-12)


def test_get_template() -> None:
    template = get_template("MRing", order=2)
    assert isinstance(template, MRing)
    assert template.order == 2

    disk = Disk()
    assert get_template(disk) is disk
    assert isinstance(get_template("gaussian"), DualGaussian)

    with pytest.raises(ValueError):
        get_template("blob")


def test_get_template_from_config() -> None:
    template = get_template({"class": "vlbistats.templates.MRing", "order": 4})
    assert isinstance(template, MRing)
    assert template.order == 4

    assert get_template(MRing, order=3).order == 3

    with pytest.raises(TypeError):
        get_template({"class": "vlbistats.divergences.NxCorr"})
