from __future__ import annotations

import copy
import io
import logging
from typing import Any, Dict, NamedTuple, Optional, Tuple, Union

import numpy as np
from astropy.io import fits
from numpy.typing import NDArray

from vlbistats.images.grid import Grid
from vlbistats.utils.exceptions import InvalidImageError
from vlbistats.utils.units import deg2rad, rad2deg

log = logging.getLogger(__name__)

"""Order of Stokes planes in polarized images."""
STOKES = ("I", "Q", "U", "V")

"""Keywords describing the HDU layout, astropy writes them itself."""
STRUCTURAL_KEYWORDS = ("SIMPLE", "XTENSION", "BITPIX", "EXTEND", "PCOUNT", "GCOUNT", "EXTNAME")


class StokesFlux(NamedTuple):
    I: float
    Q: float
    U: float
    V: float


class Image:
    """Image class.

    Pixel values are fluxes per pixel. The data is either of shape (ny, nx) for an intensity-only image or
    (4, ny, nx) for a polarized image with Stokes I, Q, U and V planes. Images are never modified in place
    by any of the analysis functions, all of them return new images.
    """

    __module__ = "vlbistats.images"

    def __init__(
        self,
        data: Optional[NDArray[Any]] = None,
        grid: Optional[Grid] = None,
        header: Optional[fits.Header] = None,
        meta: Optional[Dict[Any, Any]] = None,
    ):
        """Init a new image.

        Args:
            data: Numpy array containing data for image, either (ny, nx) or (4, ny, nx).
            grid: Grid the image is sampled on. If not given, it is taken from CDELT1/2 in the header.
            header: Header for the new image.
            meta: Dictionary with meta information (note: not preserved in I/O operations!).
        """

        # store
        self.data = None if data is None else np.array(data, dtype=float)
        self.header = fits.Header() if header is None else header.copy()
        self.meta = {} if meta is None else copy.deepcopy(meta)
        self.grid = grid

        if self.data is None:
            return

        # check shape
        if self.data.ndim not in (2, 3) or (self.data.ndim == 3 and self.data.shape[0] != len(STOKES)):
            raise InvalidImageError(f"Unsupported image shape {self.data.shape}.")

        # get grid from header, if necessary
        if self.grid is None:
            self.grid = self._grid_from_header(self.header, self.data.shape[-1], self.data.shape[-2])
        if self.grid.shape != self.data.shape[-2:]:
            raise InvalidImageError(f"Image of shape {self.data.shape} does not fit grid of shape {self.grid.shape}.")

        # add basic header stuff
        dx, dy = self.grid.pixel_sizes
        self.header["CDELT1"] = -rad2deg(dx)
        self.header["CDELT2"] = rad2deg(dy)
        self.header["CRPIX1"] = (self.grid.nx + 1) / 2.0
        self.header["CRPIX2"] = (self.grid.ny + 1) / 2.0

    @staticmethod
    def _grid_from_header(header: fits.Header, nx: int, ny: int) -> Grid:
        if "CDELT1" not in header or "CDELT2" not in header:
            raise InvalidImageError("No grid given and no pixel sizes found in header.")
        return Grid.from_pixel_sizes(abs(deg2rad(header["CDELT1"])), abs(deg2rad(header["CDELT2"])), nx, ny)

    @classmethod
    def from_bytes(cls, data: bytes) -> Image:
        """Create Image from a bytes array containing a FITS file.

        Args:
            data: Bytes array to create image from.

        Returns:
            The new image.
        """

        # create hdu
        with io.BytesIO(data) as bio:
            # read whole file
            with fits.open(bio, memmap=False, lazy_load_hdus=False) as hdu_list:
                # load image
                return cls._from_hdu_list(hdu_list)

    @classmethod
    def from_file(cls, filename: str) -> Image:
        """Create image from FITS file.

        Args:
            filename: Name of file to load image from.

        Returns:
            New image.

        Raises:
            OSError: If file does not exist or does not contain a valid image.
        """

        # open file
        try:
            with fits.open(filename, memmap=False, lazy_load_hdus=False) as hdu_list:
                # load image
                return cls._from_hdu_list(hdu_list)
        except (ValueError, TypeError, KeyError, InvalidImageError) as e:
            raise OSError(f"Could not read image from {filename}: {e}") from e

    @classmethod
    def _from_hdu_list(cls, data: fits.HDUList) -> Image:
        """Load Image from HDU list.

        Args:
            data: HDU list.

        Returns:
            Image.
        """

        # find HDU with image data
        for hdu in data:
            if (
                isinstance(hdu, fits.PrimaryHDU)
                and hdu.header["NAXIS"] > 0
                or isinstance(hdu, fits.ImageHDU)
                and hdu.name in ("I", "SCI")
                or isinstance(hdu, fits.CompImageHDU)
            ):
                # found image HDU
                image_hdu = hdu
                break
        else:
            raise ValueError("Could not find HDU with main image.")

        # get data, remove degenerate frequency/stokes axes
        header = image_hdu.header.copy()
        pixels = np.squeeze(np.asarray(image_hdu.data, dtype=float))

        # polarization in separate extensions?
        if pixels.ndim == 2 and all(s in data for s in STOKES[1:]):
            planes = [np.squeeze(np.asarray(data[s].data, dtype=float)) for s in STOKES[1:]]
            pixels = np.stack([pixels] + planes)

        # RA axis runs from east to west, flip so that x increases with column
        if header.get("CDELT1", 0.0) < 0:
            pixels = pixels[..., ::-1]

        # strip axis-related keywords, they get rewritten
        for key in ("NAXIS3", "NAXIS4", "CTYPE3", "CTYPE4", "CDELT3", "CDELT4", "CRPIX3", "CRPIX4", "CRVAL3", "CRVAL4"):
            header.remove(key, ignore_missing=True)
        return cls(data=pixels, header=header)

    def __deepcopy__(self, memo: Any = None) -> Image:
        """Returns a copy of this image."""
        return self.copy()

    def copy(self) -> Image:
        """Returns a copy of this image."""
        return Image(data=self.data, grid=self.grid, header=self.header, meta=self.meta)

    def with_data(self, data: NDArray[Any], grid: Optional[Grid] = None) -> Image:
        """Returns a new image with the same header and meta data, but new pixels (and optionally a new grid)."""
        return Image(data=data, grid=self.grid if grid is None else grid, header=self.header, meta=self.meta)

    def writeto(self, f: Any, *args: Any, **kwargs: Any) -> None:
        """Write image as FITS to given file object or filename.

        Stokes I goes into the primary HDU, Q, U and V into image extensions of the same name.

        Args:
            f: File object to write to.
        """
        data = self.safe_data

        # create HDU list
        hdu_list = fits.HDUList([])

        # create image HDU, RA axis runs east to west in FITS
        planes = data if self.is_polarized else data[np.newaxis]
        header = self.header.copy()
        for key in list(header.keys()):
            if key in STRUCTURAL_KEYWORDS or key.startswith("NAXIS"):
                header.remove(key, ignore_missing=True, remove_all=True)
        header["CTYPE1"] = "RA---SIN"
        header["CTYPE2"] = "DEC--SIN"
        if "BUNIT" not in header:
            header["BUNIT"] = "JY/PIXEL"
        hdu_list.append(fits.PrimaryHDU(planes[0][..., ::-1], header=header))

        # polarization?
        for name, plane in zip(STOKES[1:], planes[1:]):
            hdu = fits.ImageHDU(plane[..., ::-1], header=header)
            hdu.name = name
            hdu_list.append(hdu)

        # write it
        hdu_list.writeto(f, *args, **kwargs)

    def to_bytes(self) -> bytes:
        """Write to a bytes array and return it."""
        with io.BytesIO() as bio:
            self.writeto(bio)
            return bio.getvalue()

    @property
    def safe_data(self) -> NDArray[Any]:
        """Returns data or raises exception, if there is none."""
        if self.data is None:
            raise InvalidImageError("No data in image.")
        return self.data

    @property
    def safe_grid(self) -> Grid:
        if self.grid is None:
            raise InvalidImageError("No grid for image.")
        return self.grid

    @property
    def is_polarized(self) -> bool:
        """Whether the image contains all four Stokes planes."""
        return self.safe_data.ndim == 3

    def stokes(self, name: str) -> Image:
        """Returns a single Stokes plane as intensity-only image.

        Args:
            name: One of I, Q, U, V.

        Returns:
            New image.

        Raises:
            InvalidImageError: If Q, U or V are requested from an intensity-only image.
        """
        name = name.upper()
        if name not in STOKES:
            raise ValueError(f"Unknown Stokes parameter {name}.")
        if not self.is_polarized:
            if name == "I":
                return self.copy()
            raise InvalidImageError(f"Image is not polarized, cannot extract Stokes {name}.")
        return self.with_data(self.safe_data[STOKES.index(name)])

    def stokes_data(self, name: str) -> NDArray[Any]:
        """Same as :meth:`stokes`, but returns the plain array."""
        return self.stokes(name).safe_data

    @property
    def linearpol(self) -> NDArray[Any]:
        """Complex linear polarization Q + iU per pixel."""
        return self.stokes_data("Q") + 1j * self.stokes_data("U")

    def flux(self, mask: Optional[NDArray[Any]] = None) -> Union[float, StokesFlux]:
        """Integrated flux, optionally restricted to a pixel mask.

        Args:
            mask: Boolean mask of shape (ny, nx).

        Returns:
            Total flux for intensity-only images, otherwise fluxes for all Stokes parameters.
        """
        data = self.safe_data
        if mask is None:
            mask = np.ones(self.safe_grid.shape, dtype=bool)
        if self.is_polarized:
            return StokesFlux(*(float(np.sum(plane[mask])) for plane in data))
        return float(np.sum(data[mask]))

    def centroid(self) -> Tuple[float, float]:
        """Flux-weighted mean position of Stokes I."""
        intensity = self.stokes_data("I")
        total = np.sum(intensity)
        if total == 0:
            log.warning("Image has no total flux, using origin as centroid.")
            return 0.0, 0.0
        xx, yy = self.safe_grid.meshgrid()
        return float(np.sum(xx * intensity) / total), float(np.sum(yy * intensity) / total)

    def window_mask(self, width: float, height: Optional[float] = None) -> NDArray[Any]:
        """Mask for a window of given size centred on the origin."""
        height = width if height is None else height
        return self.safe_grid.box_mask((-width / 2.0, width / 2.0), (-height / 2.0, height / 2.0))

    def crop(self, width: float, height: Optional[float] = None) -> Image:
        """Crops image to the pixels within a window of given size centred on the origin.

        Args:
            width: Width of window in radians.
            height: Height of window, defaults to width.

        Returns:
            Cropped image on the reduced grid.
        """
        mask = self.window_mask(width, height)
        rows = np.where(mask.any(axis=1))[0]
        cols = np.where(mask.any(axis=0))[0]
        if len(rows) == 0 or len(cols) == 0:
            raise InvalidImageError("Crop window does not contain any pixel.")
        dx, dy = self.safe_grid.pixel_sizes
        grid = Grid.from_pixel_sizes(dx, dy, len(cols), len(rows))
        data = self.safe_data[..., rows[0] : rows[-1] + 1, cols[0] : cols[-1] + 1]
        return self.with_data(data, grid=grid)


def load_image(path: str) -> Image:
    """Load image from FITS file, see :meth:`Image.from_file`."""
    return Image.from_file(path)


def save_image(path: str, image: Image, overwrite: bool = True) -> None:
    """Write image to FITS file.

    Raises:
        OSError: If path is not writable.
    """
    image.writeto(path, overwrite=overwrite)


__all__ = ["Image", "StokesFlux", "STOKES", "load_image", "save_image"]
