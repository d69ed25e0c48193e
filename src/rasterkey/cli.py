# src/rasterkey/cli.py

import argparse
import logging
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

from rasterkey.config import ReadOptions
from rasterkey.exceptions import RasterError
from rasterkey.key.colour import ColourSpace
from rasterkey.key.scaled import ScaledKey, ValueScale
from rasterkey.raster.io import load, read_info, save, save_image
from rasterkey.raster.keyed import KeyedRaster
from rasterkey.raster.layer import Raster
from rasterkey.readers import read
from rasterkey.readers.xcolour import default_colour_table
from rasterkey.readers.xpm import parse_xpm_colour

log = logging.getLogger(__name__)

GEOTIFF_SUFFIXES = (".tif", ".tiff")

def setup_logging(level: int = logging.INFO) -> None:
    """
    Configures the standard logging format and level for the command-line interface.

    Args:
        level (int): The logging threshold level.
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def _options(args: argparse.Namespace) -> ReadOptions:
    return ReadOptions(
        check_memory=not args.no_memory_check,
        colour_table=args.colour_table
    )

def _open(path: str, options: ReadOptions) -> Raster:
    """Load a GeoTIFF through rasterio, anything else through the text readers."""
    if Path(path).suffix.lower() in GEOTIFF_SUFFIXES:
        return load(path)
    return read(path, options=options)

def _scale_key(spec: List[str], space: str, log_scale: bool, options: ReadOptions) -> ScaledKey:
    min_value, max_value, min_colour, max_colour = spec
    table_path = None if options.colour_table is None else str(options.colour_table)
    colour_table = partial(default_colour_table, table_path)
    return ScaledKey(
        float(min_value),
        float(max_value),
        parse_xpm_colour(min_colour, colour_table),
        parse_xpm_colour(max_colour, colour_table),
        space=ColourSpace[space.upper()],
        scale=ValueScale.LOG if log_scale else ValueScale.LINEAR
    )

def show_info(path: str, options: ReadOptions) -> None:
    """
    Logs the size, georeferencing and key of a raster file.

    Args:
        path (str): Raster to describe.
        options (ReadOptions): Reader settings.
    """
    if Path(path).suffix.lower() in GEOTIFF_SUFFIXES:
        info = read_info(path)
        log.info(f"{path}: {info['width']}x{info['height']} {info['driver']}, {info['count']} band(s)")
        log.info(f"Bounds: {info['bounds']}, nodata: {info['nodata']}")
        return

    raster = _open(path, options)
    kind = raster.kind.name if raster.kind is not None else "TEXT"
    log.info(f"{path}: {raster.ncols}x{raster.nrows} {kind} cells of size {raster.cell_size}")
    log.info(f"Bounds: {raster.bounds}, no-data value: {raster.no_data_value}")
    if isinstance(raster, KeyedRaster):
        log.info(f"Key: {raster.key!r}")

def render(
    path: str,
    output: str,
    options: ReadOptions,
    zoom: int = 1,
    scale: Optional[List[str]] = None,
    space: str = "rgb",
    log_scale: bool = False
) -> None:
    """
    Renders a raster to an RGBA image.

    XPM files carrying a legend render with it; any other raster needs a
    linear or logarithmic colour scale given on the command line.

    Args:
        path (str): Raster to render.
        output (str): Image file to write.
        options (ReadOptions): Reader settings.
        zoom (int): Pixels per cell side.
        scale (list): MIN MAX MIN_COLOUR MAX_COLOUR, colours as XPM literals.
        space (str): Interpolation colour space, 'rgb' or 'hsb'.
        log_scale (bool): Interpolate over the logarithm of the values.
    """
    raster = _open(path, options)
    if scale is not None:
        raster = KeyedRaster.from_raster(raster, _scale_key(scale, space, log_scale, options))
    elif not isinstance(raster, KeyedRaster):
        log.error(f"{path} carries no colour legend. Pass --scale MIN MAX MIN_COLOUR MAX_COLOUR.")
        sys.exit(1)

    save_image(raster, output, zoom=zoom)
    log.info(f"Rendered {path} to {output}")

def convert(path: str, output: str, options: ReadOptions) -> None:
    """
    Converts an ARC/ASCII grid or XPM file to a single-band GeoTIFF.

    Args:
        path (str): Raster to convert.
        output (str): GeoTIFF file to write.
        options (ReadOptions): Reader settings.
    """
    raster = _open(path, options)
    save(raster, output)
    log.info(f"Converted {path} to {output}")

def main(argv: Optional[List[str]] = None) -> None:
    """
    Parses command-line arguments and routes execution to the matching subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="rasterkey",
        description="Inspect, render and convert keyed rasters"
    )
    parser.add_argument(
        "--colour-table",
        type=str,
        default=None,
        help="Path to an rgb.txt file for XPM colour names. Defaults to the X11 locations."
    )
    parser.add_argument(
        "--no-memory-check",
        action="store_true",
        help="Skips the free memory check before allocating grids."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Logs progress at debug level."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser(
        "info",
        help="Describes a raster file."
    )
    info_parser.add_argument("path", help="ARC/ASCII grid, XPM or GeoTIFF file.")

    render_parser = subparsers.add_parser(
        "render",
        help="Renders a raster to a PNG through its legend or a colour scale."
    )
    render_parser.add_argument("path", help="ARC/ASCII grid, XPM or GeoTIFF file.")
    render_parser.add_argument("output", help="Output image path.")
    render_parser.add_argument(
        "--zoom",
        type=int,
        default=1,
        help="Pixels per cell side. Defaults to 1."
    )
    render_parser.add_argument(
        "--scale",
        nargs=4,
        metavar=("MIN", "MAX", "MIN_COLOUR", "MAX_COLOUR"),
        default=None,
        help="Colour scale for rasters without a legend, e.g. 0 100 '#0000FF' '#FF0000'."
    )
    render_parser.add_argument(
        "--space",
        choices=["rgb", "hsb"],
        default="rgb",
        help="Colour space the scale interpolates in. Defaults to rgb."
    )
    render_parser.add_argument(
        "--log",
        action="store_true",
        help="Interpolates over the logarithm of the values."
    )

    convert_parser = subparsers.add_parser(
        "convert",
        help="Converts an ARC/ASCII grid or XPM file to GeoTIFF."
    )
    convert_parser.add_argument("path", help="ARC/ASCII grid or XPM file.")
    convert_parser.add_argument("output", help="Output GeoTIFF path.")

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    options = _options(args)

    try:
        if args.command == "info":
            show_info(args.path, options)
        elif args.command == "render":
            render(
                args.path, args.output, options,
                zoom=args.zoom, scale=args.scale, space=args.space, log_scale=args.log
            )
        elif args.command == "convert":
            convert(args.path, args.output, options)
    except (RasterError, FileNotFoundError, MemoryError, ValueError) as e:
        log.error(f"{args.command} failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
