# src/rasterkey/raster/io.py

"""
This module handles the disk-based operations that go through rasterio:
GeoTIFF export and import of numeric rasters, PNG export of rendered
keyed rasters, and decoding ordinary images into keyed rasters.
"""

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning, RasterioIOError
from rasterio.transform import Affine

from rasterkey.exceptions import RasterIOError, RasterValidationError
from rasterkey.numeric import NumericKind
from .keyed import KeyedRaster, KeySpec
from .layer import Raster
from .utils import normalise_path

log = logging.getLogger(__name__)

__all__ = [
    "IMAGE_SUFFIXES",
    "save",
    "load",
    "save_image",
    "read_image",
    "read_info"
]

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff")

def _fill_value(raster: Raster) -> Any:
    """Value written to 'no data' cells of an exported band."""
    if raster.no_data_value is not None:
        return raster.no_data_value
    if raster.kind.is_integer:
        return int(np.iinfo(raster.kind.dtype).min)
    return float("nan")

def save(
    raster: Raster,
    path: Union[str, Path],
    **profile_kwargs
):
    """
    Write a numeric Raster to disk as a single-band GeoTIFF.

    'No data' cells are written as the raster's no-data value, or the
    smallest integer / NaN when it has none, and that value is recorded as
    the band's nodata.

    Args:
        raster: Numeric Raster object to save.
        path: Output file path.
        **profile_kwargs: Override default rasterio profile settings.

    Raises:
        RasterValidationError: If the raster holds text.
        RasterIOError: If rasterio cannot write the file.
    """
    if raster.kind is None:
        raise RasterValidationError("Text rasters cannot be written as GeoTIFF; coerce to a numeric kind first")

    path = normalise_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fill = _fill_value(raster)
    profile = {
        "driver": "GTiff",
        "height": raster.nrows,
        "width": raster.ncols,
        "count": 1,
        "dtype": raster.kind.dtype.name,
        "transform": raster.transform,
        "nodata": fill
    }
    profile.update(profile_kwargs)

    log.info(f"Saving raster {raster.shape} → {path}")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(path, "w", **profile) as dst:
                dst.write(raster.to_array(fill=fill).astype(raster.kind.dtype), 1)
    except (RasterioIOError, OSError) as e:
        raise RasterIOError(f"Failed to save raster to {path}: {e}") from e

def _georef(transform: Affine, height: int) -> Dict[str, float]:
    """Recover origin and cell size from a north-up, square-pixel transform."""
    if transform.b != 0 or transform.d != 0:
        raise RasterValidationError(f"Rotated rasters are not supported: {transform}")
    if transform.a != -transform.e:
        raise RasterValidationError(f"Pixels must be square, got {transform.a} x {-transform.e}")
    return {
        "origin_x": transform.c,
        "origin_y": transform.f + height * transform.e,
        "cell_size": transform.a
    }

def _kind_for(dtype: np.dtype) -> NumericKind:
    kind = NumericKind.from_dtype(dtype)
    if kind is not None:
        return kind
    # Unsigned and small types widen to the nearest signed kind
    widened = np.promote_types(dtype, np.int8)
    kind = NumericKind.from_dtype(widened)
    return kind if kind is not None else NumericKind.DOUBLE

def load(path: Union[str, Path], band: int = 1) -> Raster:
    """
    Load one band of a raster file into a numeric Raster.

    Args:
        path: Path to a raster file. All GDAL formats rasterio opens are accepted.
        band: 1-based band index.

    Returns:
        Raster: In-memory Raster with the band's nodata as its no-data value.

    Raises:
        FileNotFoundError: If the path does not exist.
        RasterValidationError: If the raster is rotated or has non-square pixels.
        RasterIOError: If rasterio cannot read the file.
    """
    path = normalise_path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    log.debug(f"Loading raster: {path.name}")

    try:
        with rasterio.open(path) as src:
            data = src.read(band)
            georef = _georef(src.transform, src.height)
            nodata = src.nodata
    except RasterioIOError as e:
        raise RasterIOError(f"Failed to read raster from {path}: {e}") from e

    kind = _kind_for(data.dtype)
    if nodata is not None:
        nodata = None if np.isnan(nodata) else kind.coerce(nodata)

    raster = Raster.from_array(data.astype(kind.dtype), no_data_value=nodata, kind=kind, **georef)
    log.info(f"Loaded {raster!r} from {path.name}")
    return raster

def save_image(
    keyed: KeyedRaster,
    path: Union[str, Path],
    zoom: int = 1,
    driver: str = "PNG"
):
    """
    Render a KeyedRaster and write it as an RGBA image.

    Args:
        keyed: Raster to render.
        path: Output file path.
        zoom: Each cell becomes a zoom x zoom block of pixels.
        driver: GDAL driver name (PNG by default).

    Raises:
        ConversionError: If the key cannot encode some cell's value.
        RasterIOError: If rasterio cannot write the file.
    """
    path = normalise_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rgba = keyed.to_rgba(zoom)
    profile = {
        "driver": driver,
        "height": rgba.shape[0],
        "width": rgba.shape[1],
        "count": 4,
        "dtype": "uint8"
    }

    log.info(f"Saving image {rgba.shape[1]}x{rgba.shape[0]} → {path}")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(path, "w", **profile) as dst:
                dst.write(np.moveaxis(rgba, -1, 0))
    except (RasterioIOError, OSError) as e:
        raise RasterIOError(f"Failed to save image to {path}: {e}") from e

def _as_rgba(bands: np.ndarray) -> np.ndarray:
    """Convert a (bands, rows, cols) uint8 stack to (rows, cols, 4)."""
    count = bands.shape[0]
    if count == 1:
        grey = bands[0]
        stack = [grey, grey, grey, np.full_like(grey, 255)]
    elif count == 2:
        grey, alpha = bands
        stack = [grey, grey, grey, alpha]
    elif count == 3:
        stack = [bands[0], bands[1], bands[2], np.full_like(bands[0], 255)]
    else:
        stack = [bands[0], bands[1], bands[2], bands[3]]
    return np.stack(stack, axis=-1)

def read_image(
    path: Union[str, Path],
    key: KeySpec,
    origin_x: float = 0.0,
    origin_y: float = 0.0,
    cell_size: float = 1.0,
    kind: Optional[NumericKind] = None
) -> KeyedRaster:
    """
    Decode an 8-bit image into a KeyedRaster through a key.

    Grey, grey+alpha, RGB and RGBA images are accepted. Pixels the key
    cannot decode become 'no data'.

    Args:
        path: Path to the image.
        key: Key, or value -> Colour mapping, used to decode pixels.
        origin_x: Easting of the image's bottom-left corner.
        origin_y: Northing of the image's bottom-left corner.
        cell_size: Real-world size of one pixel.
        kind: Numeric cell type, None for text.

    Raises:
        FileNotFoundError: If the path does not exist.
        RasterValidationError: If the image is not 8-bit.
        RasterIOError: If rasterio cannot read the file.
    """
    path = normalise_path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(path) as src:
                bands = src.read()
    except RasterioIOError as e:
        raise RasterIOError(f"Failed to read image from {path}: {e}") from e

    if bands.dtype != np.uint8:
        raise RasterValidationError(f"Expected an 8-bit image, got {bands.dtype} in {path.name}")

    keyed = KeyedRaster.from_rgba(_as_rgba(bands), key, origin_x, origin_y, cell_size, kind=kind)
    log.info(f"Decoded {path.name} into {keyed!r}")
    return keyed

def read_info(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Inspect a raster file without loading its cells.
    """
    path = normalise_path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(path) as src:
                return {
                    "transform": src.transform,
                    "bounds": src.bounds,
                    "width": src.width,
                    "height": src.height,
                    "count": src.count,
                    "driver": src.driver,
                    "dtypes": src.dtypes,
                    "nodata": src.nodata
                }
    except RasterioIOError as e:
        raise RasterIOError(f"Failed to read metadata from {path}: {e}") from e
