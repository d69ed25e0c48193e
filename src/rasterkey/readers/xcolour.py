# src/rasterkey/readers/xcolour.py

"""
This module loads the X11 named-colour table (rgb.txt).

XPM colour entries may name a colour instead of giving hex digits; the
table maps those names to Colours. Lookups ignore case and spaces, so
'Light Blue', 'light blue' and 'LightBlue' are the same colour.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from rasterkey.config import RGB_TXT_NAME, rgb_txt_candidates
from rasterkey.exceptions import ColourTableError, FormatError
from rasterkey.key.colour import Colour
from .text import TextReader, open_source

log = logging.getLogger(__name__)

__all__ = [
    "XColourTable",
    "default_colour_table"
]

_COMMENT_MARKERS = ("!", "#")

def _normalise(name: str) -> str:
    return "".join(name.split()).lower()

class XColourTable:
    """
    Case- and space-insensitive map from X colour names to Colours.

    Args:
        colours: Initial name -> Colour pairs.
        source: Where the table was loaded from, for messages.
    """

    def __init__(self, colours: Optional[Dict[str, Colour]] = None, source: Optional[str] = None):
        self.source = source
        self._colours: Dict[str, Colour] = {}
        self._names: Dict[str, str] = {}
        for name, colour in (colours or {}).items():
            self.add(name, colour)

    def add(self, name: str, colour: Colour):
        key = _normalise(name)
        self._colours[key] = colour
        self._names.setdefault(key, name)

    def get(self, name: str) -> Optional[Colour]:
        """Look up a colour by name, or None if unknown."""
        return self._colours.get(_normalise(name))

    def __contains__(self, name: str) -> bool:
        return _normalise(name) in self._colours

    def __len__(self) -> int:
        return len(self._colours)

    def __iter__(self) -> Iterator[Tuple[str, Colour]]:
        for key, colour in self._colours.items():
            yield self._names[key], colour

    @staticmethod
    def find() -> Optional[Path]:
        """Return the first readable rgb.txt among the standard locations, or None."""
        for candidate in rgb_txt_candidates():
            if candidate.is_file():
                log.debug(f"Found {RGB_TXT_NAME} at {candidate}")
                return candidate
        return None

    @classmethod
    def load(cls, source: Union[str, Path]) -> "XColourTable":
        """
        Parse an rgb.txt file of 'red green blue name' lines.

        Lines starting with '!' or '#' are comments.

        Raises:
            ColourTableError: If the file cannot be opened.
            FormatError: If a line is malformed.
        """
        try:
            with open_source(source) as (stream, name):
                table = cls._parse(TextReader(stream, name, RGB_TXT_NAME))
        except FormatError:
            raise
        except OSError as e:
            raise ColourTableError(f"Could not load {RGB_TXT_NAME} from {source}: {e}") from e
        log.info(f"Loaded {len(table)} named colours from {table.source}")
        return table

    @classmethod
    def _parse(cls, reader: TextReader) -> "XColourTable":
        table = cls(source=reader.filename)
        while True:
            line = reader.read_line()
            if line is None:
                break
            text = line.strip()
            if not text or text.startswith(_COMMENT_MARKERS):
                continue

            fields = text.split(None, 3)
            if len(fields) < 4:
                raise FormatError(
                    reader.filename, RGB_TXT_NAME, "red, green and blue values followed by a name",
                    line, reader.line
                )
            try:
                channels = [int(field) for field in fields[:3]]
                colour = Colour.from_rgb8(*channels)
            except ValueError:
                raise FormatError(
                    reader.filename, RGB_TXT_NAME, "three integers between 0 and 255",
                    " ".join(fields[:3]), reader.line
                ) from None
            table.add(" ".join(fields[3].split()), colour)
        return table

@lru_cache(maxsize=None)
def default_colour_table(path: Optional[str] = None) -> XColourTable:
    """
    Load (once) the colour table at ``path``, or the first one ``find()`` locates.

    Raises:
        ColourTableError: If no table can be found or loaded.
    """
    if path is not None:
        return XColourTable.load(path)

    found = XColourTable.find()
    if found is None:
        searched = ", ".join(str(candidate) for candidate in rgb_txt_candidates())
        raise ColourTableError(f"Could not find {RGB_TXT_NAME} in any of: {searched}")
    return XColourTable.load(found)
