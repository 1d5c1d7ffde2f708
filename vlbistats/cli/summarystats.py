import argparse
import logging
from functools import partial
from typing import Any, Dict, Optional, Sequence

from vlbistats.cli._cli import CLI
from vlbistats.cli.batch import read_list, run_batch
from vlbistats.divergences import LeastSquares
from vlbistats.fitting.centertemplate import DivergenceType
from vlbistats.images.grid import Grid
from vlbistats.images.image import load_image
from vlbistats.images.processors import center_image, regrid, smooth
from vlbistats.summary import record_keys, summary_ringparams
from vlbistats.utils.units import fwhm2sigma, uas2rad

log = logging.getLogger(__name__)

"""Default grid for resampling, field of view in μas and number of pixels."""
GRID = {"fov": 200.0, "npix": 64}


def make_grid(config: Dict[str, Any]) -> Grid:
    """Creates a square grid from a dict with fov in μas and npix."""
    return Grid.from_uas(float(config["fov"]), float(config["fov"]), int(config["npix"]), int(config["npix"]))


def analyse_image(
    filename: str,
    grid: Optional[Grid] = None,
    blur: float = 0.0,
    order: int = 4,
    fevals: int = 20_000,
    lp_modes: Sequence[int] = (1, 2),
    cp_modes: Sequence[int] = (1,),
    divergence: DivergenceType = LeastSquares,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """Summary statistics for a single image file.

    The image is centred on its centroid, optionally resampled and blurred, and then analysed by
    :func:`~vlbistats.summary.summary_ringparams`. For unpolarized images the modes are NaN.

    Args:
        filename: Name of FITS file.
        grid: If given, resample image onto this grid.
        blur: FWHM of Gaussian blurring kernel in μas, 0 for none.
        order: Order of ring template.
        fevals: Maximum number of divergence evaluations.
        lp_modes: Linear polarization modes.
        cp_modes: Circular polarization modes.
        divergence: Divergence for the fit.
        seed: Seed for the optimizer.

    Returns:
        Summary record.
    """
    image = center_image(load_image(filename))
    if grid is not None:
        image = regrid(image, grid)
    if blur > 0:
        image = smooth(image, fwhm2sigma(uas2rad(blur)))
    keys = record_keys(order, lp_modes, cp_modes)
    record = summary_ringparams(
        image,
        lp_modes=lp_modes if image.is_polarized else (),
        cp_modes=cp_modes if image.is_polarized else (),
        order=order,
        max_iters=fevals,
        divergence=divergence,
        seed=seed,
    )

    # modes of unpolarized images are undefined
    return {key: record.get(key, float("nan")) for key in keys}


class SummaryStatsCLI(CLI):
    CONFIG_SECTION = "summary"
    GLOBAL_CONFIG_KEYS = ["workers"]

    def init_cli(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("imfiles", type=str, help="file with paths to all images, one per line")
        parser.add_argument("outname", type=str, help="CSV file to write results into")
        parser.add_argument("-c", "--code", type=str, help="file with the code that created each image")
        parser.add_argument("-f", "--fevals", type=int, default=20_000, help="evaluations allowed per fit")
        parser.add_argument("-s", "--stride", type=int, default=8, help="checkpointing stride")
        parser.add_argument("-o", "--order", type=int, default=4, help="order of ring template")
        parser.add_argument("-b", "--blur", type=float, default=0.0, help="FWHM of blurring kernel in μas")
        parser.add_argument("--no-regrid", dest="regrid", action="store_false", help="do not resample images")
        parser.add_argument("--restart", action="store_true", help="continue after existing results")
        parser.add_argument("-w", "--workers", type=int, default=1, help="number of worker processes")
        parser.add_argument("--seed", type=int, help="seed for the optimizer")
        parser.set_defaults(grid=GRID, lp_modes=[1, 2], cp_modes=[1], divergence="vlbistats.divergences.LeastSquares")

    def run(self, **options: Any) -> None:
        log.info("Image files path: %s", options["imfiles"])
        log.info("Outputting results to %s", options["outname"])
        log.info("Using a ring template of order %d", options["order"])

        files = read_list(options["imfiles"])
        log.info("Loaded %d files.", len(files))
        codes = read_list(options["code"]) if options["code"] else ["unknown"] * len(files)
        if len(codes) != len(files):
            raise ValueError(f"Length of imfiles ({len(files)}) and code ({len(codes)}) do not match.")

        log.info("Regridding images: %s", options["regrid"])
        log.info("Blurring kernel: %.2f μas", options["blur"])
        lp_modes = tuple(int(m) for m in options["lp_modes"])
        cp_modes = tuple(int(m) for m in options["cp_modes"])
        func = partial(
            analyse_image,
            grid=make_grid(options["grid"]) if options["regrid"] else None,
            blur=float(options["blur"]),
            order=int(options["order"]),
            fevals=int(options["fevals"]),
            lp_modes=lp_modes,
            cp_modes=cp_modes,
            divergence=options["divergence"],
            seed=options["seed"],
        )

        run_batch(
            func,
            files,
            options["outname"],
            columns=record_keys(int(options["order"]), lp_modes, cp_modes),
            extra={"code": codes, "files": files},
            stride=int(options["stride"]),
            restart=options["restart"],
            workers=int(options["workers"]),
        )


def main() -> None:
    SummaryStatsCLI(description="Extract summary statistics from a set of images.")()


if __name__ == "__main__":
    main()
