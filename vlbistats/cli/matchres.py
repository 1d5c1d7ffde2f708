import argparse
import logging
import os
from functools import partial
from typing import Any, Dict, Optional

from vlbistats.cli._cli import CLI
from vlbistats.cli.batch import read_list, run_batch
from vlbistats.cli.summarystats import make_grid
from vlbistats.divergences import NxCorr
from vlbistats.fitting import match_center_and_res
from vlbistats.fitting.centertemplate import DivergenceType
from vlbistats.images.grid import Grid
from vlbistats.images.image import Image, load_image, save_image
from vlbistats.images.processors import center_image, regrid

log = logging.getLogger(__name__)

"""Default grid for comparison, field of view in μas and number of pixels."""
GRID = {"fov": 150.0, "npix": 50}

"""Columns written for every image."""
COLUMNS = ["x", "y", "sigma", "divmin", "nxI", "nxP", "nxV"]


def output_name(filename: str, outdir: str) -> str:
    """Name of matched image in output directory, e.g. img.fits -> outdir/img_matchres.fits."""
    base = os.path.basename(filename)
    root, ext = os.path.splitext(base)
    return os.path.join(outdir, f"{root}_matchres{ext or '.fits'}")


def match_image(
    filename: str,
    base: Image,
    outdir: str,
    grid: Optional[Grid] = None,
    fevals: int = 15_000,
    divergence: DivergenceType = NxCorr,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """Matches centre and resolution of an image file to a base image and stores the result.

    Args:
        filename: Name of FITS file.
        base: Image to match.
        outdir: Directory to write matched image into.
        grid: If given, comparison is done on this grid, otherwise on the grid of the base image.
        fevals: Maximum number of divergence evaluations.
        divergence: Divergence for the fit.
        seed: Seed for the optimizer.

    Returns:
        Parameters of the match.
    """
    image = center_image(load_image(filename))
    matched, params = match_center_and_res(
        base, image, divergence=divergence, grid=grid, max_iters=fevals, seed=seed
    )

    # resample after blurring
    comparison = base.safe_grid if grid is None else grid
    save_image(output_name(filename, outdir), regrid(matched, comparison))
    return params


class MatchResCLI(CLI):
    CONFIG_SECTION = "matchres"
    GLOBAL_CONFIG_KEYS = ["workers"]

    def init_cli(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("imfiles", type=str, help="file with paths to all images, one per line")
        parser.add_argument("base", type=str, help="base image to match the resolution to")
        parser.add_argument("outdir", type=str, help="output directory for matched images and parameters")
        parser.add_argument("-f", "--fevals", type=int, default=15_000, help="evaluations allowed per fit")
        parser.add_argument("-s", "--stride", type=int, default=8, help="checkpointing stride")
        parser.add_argument("--no-regrid", dest="regrid", action="store_false", help="do not resample images")
        parser.add_argument("--restart", action="store_true", help="continue after existing results")
        parser.add_argument("-w", "--workers", type=int, default=1, help="number of worker processes")
        parser.add_argument("--seed", type=int, help="seed for the optimizer")
        parser.set_defaults(grid=GRID, divergence="vlbistats.divergences.NxCorr")

    def run(self, **options: Any) -> None:
        log.info("Image files path: %s", options["imfiles"])
        log.info("Base image to match resolution: %s", options["base"])
        log.info("Outputting results to %s", options["outdir"])
        if not os.path.isfile(options["base"]):
            self._parser.error(f"Base image to match resolution {options['base']} does not exist.")

        files = read_list(options["imfiles"])
        log.info("Loaded %d files.", len(files))
        os.makedirs(options["outdir"], exist_ok=True)

        # base image, resampled if requested
        grid = make_grid(options["grid"]) if options["regrid"] else None
        base = load_image(options["base"])
        if grid is not None:
            base = regrid(base, grid)
        log.info("Regridding images: %s", options["regrid"])

        func = partial(
            match_image,
            base=base,
            outdir=options["outdir"],
            grid=grid,
            fevals=int(options["fevals"]),
            divergence=options["divergence"],
            seed=options["seed"],
        )
        run_batch(
            func,
            files,
            os.path.join(options["outdir"], "parameters.csv"),
            columns=COLUMNS,
            extra={"files": files},
            stride=int(options["stride"]),
            restart=options["restart"],
            workers=int(options["workers"]),
        )


def main() -> None:
    MatchResCLI(description="Match centre and resolution of a set of images to a base image.")()


if __name__ == "__main__":
    main()
