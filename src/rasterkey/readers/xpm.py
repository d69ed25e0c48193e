# src/rasterkey/readers/xpm.py

"""
This module reads XPM (X PixMap) files as rasters.

Beyond the standard format, georeferencing can be carried in extension
lines after the pixels:

    "XPMEXT xllcorner 450000",
    "XPMEXT yllcorner 120000",
    "XPMEXT cellsize 50",
    "XPMENDEXT"

Each pixel code becomes a cell. The cell value is the code's symbolic
name ('s' entry) if it has one, else the value the caller's legend gives
its colour, else the code itself. When every populated cell has a colour
and colours and values pair up one-to-one, the result is a KeyedRaster
over that legend.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TextIO, Tuple, Union

from rasterkey.config import ReadOptions, XPM_CELLSIZE, XPM_XLLCORNER, XPM_YLLCORNER
from rasterkey.exceptions import FormatError
from rasterkey.key.colour import Colour, TRANSPARENT
from rasterkey.key.mapped import MappedKey
from rasterkey.numeric import NumericKind, parse_token
from rasterkey.raster.grid import Grid
from rasterkey.raster.keyed import KeyedRaster
from rasterkey.raster.layer import Raster
from rasterkey.raster.resources import ensure_memory
from rasterkey.raster.utils import detect_kind
from .text import Comment, TextReader, open_source
from .xcolour import XColourTable, default_colour_table

log = logging.getLogger(__name__)

__all__ = [
    "XPM_FORMAT",
    "COLOUR_TAGS",
    "parse_xpm_colour",
    "read_xpm"
]

XPM_FORMAT = "XPM"

# Colour-bearing tags, best first; 's' (symbol) carries a value instead
COLOUR_TAGS = ("c", "g", "g4", "m")
SYMBOL_TAG = "s"

_HEX = re.compile(r"^[0-9A-Fa-f]+$")
_C_COMMENTS = (Comment.C,)

class _ColourTableSource:
    """Loads the named-colour table on first use only."""

    def __init__(self, options: ReadOptions):
        self._path = options.colour_table
        self._table: Optional[XColourTable] = None

    def get(self) -> XColourTable:
        if self._table is None:
            self._table = default_colour_table(None if self._path is None else str(self._path))
        return self._table

def _hex_channels(digits: str) -> Optional[Tuple[float, float, float]]:
    if not digits or len(digits) % 3 != 0 or not _HEX.match(digits):
        return None
    width = len(digits) // 3
    denominator = float((1 << (4 * width)) - 1)
    return tuple(int(digits[i * width:(i + 1) * width], 16) / denominator for i in range(3))

def parse_xpm_colour(
    text: str,
    colour_table: Any = default_colour_table,
    reader: Optional[TextReader] = None
) -> Colour:
    """
    Decode an XPM colour literal.

    Args:
        text: 'None', '#' + 3N hex digits (RGB), '%' + 3N hex digits (HSB),
              or an X colour name.
        colour_table: Callable returning the XColourTable for names.
        reader: Supplies file name and position for errors.

    Raises:
        FormatError: If the literal is malformed or the name is unknown.
        ColourTableError: If a name needs the colour table and it cannot be loaded.
    """
    def fail(expecting: str) -> FormatError:
        if reader is None:
            return FormatError("<colour>", XPM_FORMAT, expecting, text)
        return reader.error(expecting, text)

    if text.lower() == "none":
        return TRANSPARENT
    if text.startswith("#"):
        channels = _hex_channels(text[1:])
        if channels is None:
            raise fail("a hexadecimal colour in format #RnGnBn")
        return Colour(*channels)
    if text.startswith("%"):
        channels = _hex_channels(text[1:])
        if channels is None:
            raise fail("a hexadecimal colour in format %HnSnBn")
        return Colour.from_hsb(*channels)

    colour = colour_table().get(text)
    if colour is None:
        raise fail(
            'the word "None", an RGB colour as #RnGnBn, an HSB (aka HSV) colour as %HnSnBn, '
            "or the name of an X standard colour"
        )
    return colour

def _parse_header(reader: TextReader, header: str) -> Tuple[int, int, int, int, bool]:
    usage = "<width> <height> <ncolours> <nchrspcolour> [<x hotspot> <y hotspot>] [XPMEXT]"
    words = header.split()
    extensions = bool(words) and words[-1] == "XPMEXT"
    numeric = words[:-1] if extensions else words
    if len(numeric) not in (4, 6):
        raise reader.error(usage, header)

    names = ("width", "height", "number of colours", "number of characters per colour",
             "x hotspot", "y hotspot")
    numbers = []
    for word, name in zip(numeric, names):
        try:
            numbers.append(NumericKind.INT.parse(word))
        except ValueError:
            raise reader.error(f"integer for {name}", word) from None

    width, height, ncolours, cpp = numbers[:4]
    if width < 0 or height < 0 or ncolours < 0 or cpp < 1:
        raise reader.error(usage, header)
    return width, height, ncolours, cpp, extensions

def _parse_colour_line(
    reader: TextReader,
    line: str,
    cpp: int,
    colour_table
) -> Tuple[str, Dict[str, Colour], Optional[str]]:
    """Split one colour-table string into (code, {tag: colour}, symbol)."""
    if len(line) < cpp:
        raise reader.error("colour map", line)
    code = line[:cpp]
    words = line[cpp:].split()

    entries: Dict[str, List[str]] = {}
    tag = None
    for word in words:
        if word in COLOUR_TAGS or word == SYMBOL_TAG:
            tag = word
            entries[tag] = []
        elif tag is None:
            raise reader.error('"m", "g4", "g", "c" or "s"', word)
        else:
            entries[tag].append(word)

    colours: Dict[str, Colour] = {}
    symbol = None
    for tag, value in entries.items():
        if not value:
            raise reader.error(f'colour name for key "{tag}"', line)
        text = " ".join(value)
        if tag == SYMBOL_TAG:
            symbol = text
        else:
            colours[tag] = parse_xpm_colour(text, colour_table, reader)
    return code, colours, symbol

def _best_colour(colours: Dict[str, Colour]) -> Optional[Colour]:
    for tag in COLOUR_TAGS:
        if tag in colours:
            return colours[tag]
    return None

def _read_extensions(reader: TextReader, georef: Dict[str, float]):
    """Read 'XPMEXT key value' strings until XPMENDEXT or the closing brace."""
    while reader.read_exact(",", skip_leading_space=True):
        reader.skip_space(_C_COMMENTS)
        if reader.peek() == "}":
            break
        if reader.peek() != '"':
            raise reader.error('an "XPMEXT" string', reader.read_line())
        text = reader.read_quoted(_C_COMMENTS)
        if text.strip() == "XPMENDEXT":
            break
        words = text.split()
        if len(words) < 3 or words[0] != "XPMEXT" or words[1] not in georef:
            continue
        try:
            georef[words[1]] = NumericKind.DOUBLE.parse(words[2])
        except ValueError:
            raise reader.error(
                f"a valid double precision floating point number for {words[1]}", words[2]
            ) from None

def read_xpm(
    source: Union[str, Path, TextIO],
    legend: Optional[Mapping[Colour, Any]] = None,
    options: Optional[ReadOptions] = None
) -> Union[Raster, KeyedRaster]:
    """
    Read an XPM file into a Raster, or a KeyedRaster when its colours form a legend.

    Args:
        source: Path to the file, or an open text stream.
        legend: Optional colour -> value map used for pixel codes without a
            symbolic name.
        options: Reader settings: memory check, colour table location and
            the georeferencing used when the file has no extensions.

    Returns:
        KeyedRaster over a MappedKey if every populated cell has a colour and
        the colour <-> value pairing is one-to-one, otherwise a Raster.
        Fully transparent pixels are left empty.

    Raises:
        FormatError: If the file does not follow the format.
        ColourTableError: If a colour name needs rgb.txt and it cannot be loaded.
        MemoryError: If the grid would not fit in memory.
    """
    options = options or ReadOptions()
    legend = dict(legend or {})
    colour_table = _ColourTableSource(options).get

    with open_source(source) as (stream, filename):
        reader = TextReader(stream, filename, XPM_FORMAT)

        # static char *name[] = {
        reader.expect_exact("/* XPM */", skip_leading_space=True)
        if reader.read_word(_C_COMMENTS) != "static":
            raise reader.error('"static"', reader.read_line())
        reader.skip_space(_C_COMMENTS)
        if reader.read_exact("const"):
            reader.skip_space(_C_COMMENTS)
        reader.expect_exact("char")
        reader.expect_exact("*", skip_leading_space=True)
        name = reader.read_word(_C_COMMENTS, delimiter="[").strip()
        if not name:
            raise reader.error("a variable name", None)
        reader.expect_exact("]", skip_leading_space=True)
        reader.expect_exact("=", skip_leading_space=True)
        reader.expect_exact("{", skip_leading_space=True)

        header = reader.read_quoted(_C_COMMENTS)
        width, height, ncolours, cpp, extensions = _parse_header(reader, header)
        log.debug(f"{filename}: XPM '{name}' {width}x{height}, {ncolours} colours, {cpp} chars per pixel")

        codes: Dict[str, Tuple[Optional[Colour], Optional[str]]] = {}
        for _ in range(ncolours):
            reader.expect_exact(",", skip_leading_space=True)
            line = reader.read_quoted(_C_COMMENTS)
            code, colours, symbol = _parse_colour_line(reader, line, cpp, colour_table)
            colour = _best_colour(colours)
            if colour is None and symbol is None:
                raise reader.error("a colour or symbol for code", line)
            codes[code] = (colour, symbol)

        if options.check_memory:
            ensure_memory(height, width, None, safety_factor=options.safety_factor)

        table = Grid(height, width)
        pairs: Dict[str, Colour] = {}
        all_coloured = True
        one_to_one = True
        for row in range(height):
            reader.expect_exact(",", skip_leading_space=True)
            pixels = reader.read_quoted(_C_COMMENTS)
            if len(pixels) != width * cpp:
                raise reader.error(
                    f"{width} pixels * {cpp} character each = {width * cpp} characters", pixels
                )
            for col in range(width):
                code = pixels[col * cpp:(col + 1) * cpp]
                if code not in codes:
                    raise reader.error(f"valid colour for ({col}, {row})", code)
                colour, symbol = codes[code]
                if colour is not None and colour.is_transparent:
                    continue

                if symbol is not None:
                    value = symbol
                elif colour in legend:
                    value = str(legend[colour])
                else:
                    value = code
                table.set(row, col, value)

                if colour is None:
                    all_coloured = False
                elif pairs.setdefault(value, colour) != colour:
                    one_to_one = False

        georef = {
            XPM_XLLCORNER: options.origin_x,
            XPM_YLLCORNER: options.origin_y,
            XPM_CELLSIZE: options.cell_size
        }
        if extensions:
            _read_extensions(reader, georef)
        reader.read_exact(",", skip_leading_space=True)
        reader.skip_space(_C_COMMENTS)
        reader.expect_exact("}")

    kind = detect_kind(table)

    # Distinct tokens such as "1" and "1.0" may parse to the same value
    legend_values: Dict[Any, Colour] = {}
    for value, colour in pairs.items():
        if legend_values.setdefault(parse_token(value, kind), colour) != colour:
            one_to_one = False
    if len(set(legend_values.values())) != len(legend_values):
        one_to_one = False

    raster = Raster.from_grid(
        table.coerce(kind), georef[XPM_XLLCORNER], georef[XPM_YLLCORNER], georef[XPM_CELLSIZE]
    )

    if not pairs or not all_coloured or not one_to_one:
        reason = "no coloured cells" if not pairs else (
            "some cells have no colour" if not all_coloured else "colours and values are not one-to-one"
        )
        log.warning(f"{filename}: returning a plain raster because {reason}")
        return raster

    key = MappedKey(legend_values)
    keyed = KeyedRaster.from_raster(raster, key)
    log.info(f"Read {keyed!r} from {filename}")
    return keyed
