"""
Flat records of summary statistics for ring-like images.

A record contains the flattened parameters of the best-fit ring, the divergence of the fit and the fluxes
within a window around the ring centre, followed by the net EVPA, net and average polarization fractions and the
azimuthal polarization modes, which are NaN for unpolarized images. The key order is fixed and known in advance via
:func:`record_keys`, so records of many images can be stacked into a table.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from vlbistats.divergences import LeastSquares
from vlbistats.fitting.centertemplate import DivergenceType, find_template
from vlbistats.images.grid import Grid
from vlbistats.images.image import Image
from vlbistats.images.processors.crop import crop
from vlbistats.images.processors.shift import shifted
from vlbistats.polarization import cpmodes, lpmodes, mavg, mnet, netevpa, vavg, vnet
from vlbistats.templates import MRing
from vlbistats.utils.exceptions import InvalidImageError
from vlbistats.utils.units import uas2rad

log = logging.getLogger(__name__)

"""Default diameter of the window for the fluxes."""
CFLUX_DIAMETER = uas2rad(80.0)


def _check_modes(name: str, modes: Sequence[int]) -> None:
    if len(set(modes)) != len(modes):
        raise ValueError(f"Duplicate {name} modes in {tuple(modes)}.")


def record_keys(order: int = 3, lp_modes: Sequence[int] = (1, 2), cp_modes: Sequence[int] = (1,)) -> List[str]:
    """Keys of a summary record, in order.

    The keys only depend on the arguments, so records of polarized and unpolarized images share them.

    Args:
        order: Order of ring template.
        lp_modes: Linear polarization modes.
        cp_modes: Circular polarization modes.

    Returns:
        List of keys.

    Raises:
        ValueError: If a mode is requested twice.
    """
    _check_modes("linear polarization", lp_modes)
    _check_modes("circular polarization", cp_modes)

    keys = MRing(order).keys() + ["divmin", "Itot", "Qtot", "Utot", "Vtot", "evpa", "m_net", "m_avg"]
    keys += [f"re_betalp_{n}" for n in lp_modes] + [f"im_betalp_{n}" for n in lp_modes]
    keys += ["v_net", "v_avg"]
    keys += [f"re_betacp_{n}" for n in cp_modes] + [f"im_betacp_{n}" for n in cp_modes]
    return keys


def summary_ringparams(
    image: Image,
    lp_modes: Sequence[int] = (1, 2),
    cp_modes: Sequence[int] = (1,),
    order: int = 3,
    max_iters: int = 20_000,
    divergence: DivergenceType = LeastSquares,
    grid: Optional[Grid] = None,
    cflux_diameter: float = CFLUX_DIAMETER,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """Summary statistics of an image.

    A ring of given order is fitted to total intensity, and the image is shifted onto the ring centre. Fluxes,
    polarization fractions and modes are measured within a square window of side cflux_diameter around that
    centre. The net EVPA is measured on the full image.

    Args:
        image: Image to analyse.
        lp_modes: Linear polarization modes to compute.
        cp_modes: Circular polarization modes to compute.
        order: Order of ring template.
        max_iters: Maximum number of divergence evaluations for the fit.
        divergence: Divergence for the fit.
        grid: If given, the ring is fitted on this grid.
        cflux_diameter: Side length of the window for fluxes, fractions and modes.
        seed: Seed for the optimizer.

    Returns:
        Record with keys as given by :func:`record_keys`.

    Raises:
        InvalidImageError: If polarization modes are requested for an unpolarized image.
        ValueError: If a mode is requested twice.
    """
    keys = record_keys(order, lp_modes, cp_modes)
    polarized = image.is_polarized
    if not polarized and (len(lp_modes) > 0 or len(cp_modes) > 0):
        raise InvalidImageError("Polarization modes requested for unpolarized image.")

    # ring
    fit = find_template(image, MRing(order), grid=grid, divergence=divergence, max_iters=max_iters, seed=seed)
    record: Dict[str, float] = MRing.flatten(fit.params)
    record["divmin"] = fit.divergence

    # fluxes around ring centre
    centered = shifted(image, -fit.params["x0"], -fit.params["y0"])  # type: ignore
    window = crop(centered, cflux_diameter)
    flux = window.flux()
    if not polarized:
        # no polarization, but same keys as for polarized images
        record["Itot"] = flux  # type: ignore
        record.update({key: float("nan") for key in keys if key not in record})
    else:
        record.update(Itot=flux.I, Qtot=flux.Q, Utot=flux.U, Vtot=flux.V)  # type: ignore
        record["evpa"] = netevpa(image)
        record.update(m_net=mnet(window), m_avg=mavg(window))
        betalp = lpmodes(window, lp_modes)
        record.update({f"re_betalp_{n}": b.real for n, b in zip(lp_modes, betalp)})
        record.update({f"im_betalp_{n}": b.imag for n, b in zip(lp_modes, betalp)})
        record.update(v_net=vnet(window), v_avg=vavg(window))
        betacp = cpmodes(window, cp_modes)
        record.update({f"re_betacp_{n}": b.real for n, b in zip(cp_modes, betacp)})
        record.update({f"im_betacp_{n}": b.imag for n, b in zip(cp_modes, betacp)})

    # make sure, records can be stacked
    if list(record.keys()) != keys:
        raise RuntimeError(f"Summary record has keys {list(record.keys())}, expected {keys}.")
    return record


__all__ = ["summary_ringparams", "record_keys", "CFLUX_DIAMETER"]
