# src/rasterkey/readers/text.py

"""
This module provides the tokenizer shared by the file readers.

TextReader pulls a text stream one line at a time and offers the
primitives the ARC/ASCII grid and XPM grammars are written in: exact
literals, words with pluggable comment syntaxes, numbers, quoted strings,
whole lines, whitespace tables and ordered key/value headers. Every
grammar violation is raised as a FormatError carrying the file name,
format, expected construct, the text found and the position.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from rasterkey.exceptions import FormatError
from rasterkey.numeric import NumericKind
from rasterkey.raster.grid import Grid

log = logging.getLogger(__name__)

__all__ = [
    "Comment",
    "TextReader",
    "open_source"
]

Source = Union[str, Path, TextIO]

class Comment(Enum):
    """
    Comment syntaxes a word reader can skip.

    Options:
        HASH: '#' to end of line.
        C: '/*' to '*/', possibly over several lines.
        SLASH2: '//' to end of line.
        XML: '<!--' to '-->', possibly over several lines.
    """
    HASH = "#"
    C = "/*"
    SLASH2 = "//"
    XML = "<!--"

    @property
    def closer(self) -> Optional[str]:
        """Closing marker, or None for comments running to end of line."""
        return {Comment.C: "*/", Comment.XML: "-->"}.get(self)

@contextmanager
def open_source(source: Source) -> Iterator[Tuple[TextIO, str]]:
    """
    Yield a text stream and a display name for a path or an open stream.

    Streams passed in are left open; paths are opened and closed here.
    """
    if hasattr(source, "read"):
        yield source, str(getattr(source, "name", "<stream>"))
        return
    path = Path(source).expanduser()
    with open(path, "r", encoding="utf-8") as stream:
        yield stream, str(path)

def _options(spec: str) -> Tuple[bool, List[str]]:
    """Split a key spec such as '?a|b' into (optional, ['a', 'b'])."""
    optional = spec.startswith("?")
    keywords = spec[1:] if optional else spec
    return optional, keywords.split("|")

def _options_message(spec: str) -> str:
    _, options = _options(spec)
    quoted = [f'"{option}"' for option in options]
    if len(quoted) == 1:
        return quoted[0]
    return ", ".join(quoted[:-1]) + " or " + quoted[-1]

def _key_message(keys: Sequence[str], start: int) -> str:
    """Describe what may legally come next when reading ``keys`` from ``start``."""
    run = []
    for spec in keys[start:]:
        run.append(_options_message(spec))
        if not spec.startswith("?"):
            break
    if len(run) == 1:
        return run[0]
    return "one of the following: " + "; ".join(run[:-1]) + "; or " + run[-1]

class TextReader:
    """
    Line-buffered tokenizer over a text stream.

    Args:
        stream: Any iterable of lines (an open text file, io.StringIO, ...).
        filename: Name used in error messages.
        file_format: Format name used in error messages.

    Attributes:
        line (int): 1-based number of the line holding the next character
            (0 before anything has been read).
    """

    def __init__(self, stream: Iterable[str], filename: str, file_format: str):
        self._lines = iter(stream)
        self.filename = filename
        self.file_format = file_format
        self.line = 0
        self._buffer = ""
        self._pos = 0
        self._exhausted = False

    # Low-level buffer handling

    def _fill(self) -> bool:
        """Make sure a character is available. Returns False at end of file."""
        while self._pos >= len(self._buffer):
            if self._exhausted:
                return False
            try:
                self._buffer = next(self._lines)
            except StopIteration:
                self._exhausted = True
                self._buffer = ""
                self._pos = 0
                return False
            self._pos = 0
            self.line += 1
        return True

    def _peek(self) -> str:
        return self._buffer[self._pos] if self._fill() else ""

    def _advance(self, count: int = 1):
        self._pos += count

    def peek(self) -> str:
        """Return the next character without consuming it, or '' at end of file."""
        return self._peek()

    @property
    def column(self) -> int:
        """1-based column of the next character."""
        return self._pos + 1

    @property
    def eof(self) -> bool:
        """True once no characters remain."""
        return not self._fill()

    def error(self, expecting: str, found: Optional[str]) -> FormatError:
        """Build a FormatError at the current position."""
        return FormatError(self.filename, self.file_format, expecting, found, self.line, self.column)

    def _rest_of_line(self) -> Optional[str]:
        if not self._fill():
            return None
        return self._buffer[self._pos:].rstrip("\r\n")

    # Literals

    def _skip_space(self):
        while self._peek().isspace():
            self._advance()

    def skip_space(self, comments: Iterable[Comment] = ()):
        """Skip whitespace and any of the given comments."""
        comments = tuple(comments)
        while True:
            self._skip_space()
            if not self._fill():
                return
            comment = self._comment_at(comments)
            if comment is None:
                return
            self._skip_comment(comment)

    def read_exact(self, text: str, ignore_case: bool = False, skip_leading_space: bool = False) -> bool:
        """
        Consume ``text`` if it comes next.

        Only leading space (when skipped) is consumed on a mismatch.
        """
        if skip_leading_space:
            self._skip_space()
        if not self._fill():
            return False
        candidate = self._buffer[self._pos:self._pos + len(text)]
        matched = candidate.lower() == text.lower() if ignore_case else candidate == text
        if matched:
            self._advance(len(text))
        return matched

    def expect_exact(self, text: str, ignore_case: bool = False, skip_leading_space: bool = False):
        """
        Like read_exact, but a mismatch is a FormatError.

        Raises:
            FormatError: If ``text`` does not come next.
        """
        if not self.read_exact(text, ignore_case, skip_leading_space):
            raise self.error(f'"{text}"', self._rest_of_line())

    # Words

    def _comment_at(self, comments: Iterable[Comment]) -> Optional[Comment]:
        for comment in comments:
            if self._buffer.startswith(comment.value, self._pos):
                return comment
        return None

    def _skip_comment(self, comment: Comment):
        closer = comment.closer
        if closer is None:
            # Runs to the end of the line; leave the newline as a delimiter
            self._pos = len(self._buffer.rstrip("\r\n"))
            return
        self._advance(len(comment.value))
        while self._fill():
            end = self._buffer.find(closer, self._pos)
            if end >= 0:
                self._pos = end + len(closer)
                return
            self._pos = len(self._buffer)
        raise self.error(f'"{closer}" closing a comment', None)

    def _scan_word(
        self,
        comments: Iterable[Comment],
        skip_leading_space: bool,
        delimiter: Optional[str]
    ) -> Tuple[str, bool]:
        """Read a word; also report whether the delimiter (not end of file) ended it."""
        comments = tuple(comments)
        word: List[str] = []
        while True:
            c = self._peek()
            if c == "":
                return "".join(word), False
            if not word and skip_leading_space and c.isspace() and c != delimiter:
                self._advance()
                continue
            comment = self._comment_at(comments)
            if comment is not None:
                self._skip_comment(comment)
                continue
            if (c.isspace() if delimiter is None else c == delimiter):
                self._advance()
                return "".join(word), True
            word.append(c)
            self._advance()

    def read_word(
        self,
        comments: Iterable[Comment] = (),
        skip_leading_space: bool = True,
        delimiter: Optional[str] = None
    ) -> str:
        """
        Read up to the next delimiter, skipping comments.

        Args:
            comments: Comment syntaxes to skip; they are elided from the word.
            skip_leading_space: Ignore whitespace before the word starts.
            delimiter: Character ending the word. None means any whitespace.

        Returns:
            The word, empty at end of file. The delimiter is consumed.
        """
        word, _ = self._scan_word(comments, skip_leading_space, delimiter)
        return word

    def read_exact_word(self, text: str, comments: Iterable[Comment] = (), ignore_case: bool = False) -> bool:
        word = self.read_word(comments)
        return word.lower() == text.lower() if ignore_case else word == text

    def read_number(self, kind: NumericKind, comments: Iterable[Comment] = ()):
        """
        Read a word and parse it as ``kind``.

        Raises:
            FormatError: If the word is not a literal of that kind.
        """
        column = self.column
        word = self.read_word(comments)
        try:
            return kind.parse(word)
        except ValueError:
            raise FormatError(
                self.filename, self.file_format, kind.label, word or None, self.line, column
            ) from None

    def read_int(self, comments: Iterable[Comment] = ()) -> int:
        return self.read_number(NumericKind.INT, comments)

    def read_double(self, comments: Iterable[Comment] = ()) -> float:
        return self.read_number(NumericKind.DOUBLE, comments)

    def read_quoted(self, comments: Iterable[Comment] = (), start: str = '"', end: Optional[str] = None) -> str:
        """
        Read a string between ``start`` and ``end`` (``start`` again if None).

        Whitespace and comments may precede the opening quote. The string
        may span lines.

        Raises:
            FormatError: If something else precedes the opening quote, or
                the closing quote is missing.
        """
        end = start if end is None else end
        before, found = self._scan_word(comments, True, start)
        if before or not found:
            raise self.error(f'"{start}"', before or None)

        text: List[str] = []
        while True:
            c = self._peek()
            if c == "":
                raise self.error(f'"{end}"', None)
            self._advance()
            if c == end:
                return "".join(text)
            text.append(c)

    # Lines

    def read_line(self) -> Optional[str]:
        """Return the rest of the current line without its newline, or None at end of file."""
        line = self._rest_of_line()
        if line is not None:
            self._pos = len(self._buffer)
        return line

    def read_line_ignore_leading_space(self) -> Optional[str]:
        """Read a line with runs of whitespace collapsed and the ends trimmed."""
        line = self.read_line()
        return None if line is None else " ".join(line.split())

    def read_table(self, nrows: int, ncols: int) -> Grid:
        """
        Read ``nrows`` lines of exactly ``ncols`` whitespace-separated tokens.

        Returns:
            Grid: A text grid of the tokens.

        Raises:
            FormatError: On a short or long row, or a premature end of file.
        """
        grid = Grid(nrows, ncols)
        for row in range(nrows):
            line = self.read_line()
            if line is None:
                raise self.error(f"{ncols} columns of space-separated data", None)
            tokens = line.split()
            if len(tokens) != ncols:
                raise FormatError(
                    self.filename, self.file_format,
                    f"{ncols} columns of space-separated data", line, self.line, None
                )
            for col, token in enumerate(tokens):
                grid._write(row, col, token)
        return grid

    def read_ordered_key_values(self, keys: Sequence[str]) -> Dict[str, str]:
        """
        Read a header of 'key value' lines in a fixed order.

        Each spec in ``keys`` is ``key`` (required), ``?key`` (optional),
        ``a|b`` (either spelling) or ``?a|b``. Names match case-insensitively
        and values are stored under the spelling given in the spec. A line
        that matches no remaining optional key is left unread.

        Raises:
            FormatError: If a required key is missing or out of order.
        """
        pairs: Dict[str, str] = {}
        i = 0
        while i < len(keys):
            line = self._rest_of_line()
            words = line.split() if line is not None else []
            if len(words) != 2:
                if any(not spec.startswith("?") for spec in keys[i:]):
                    raise FormatError(
                        self.filename, self.file_format, _key_message(keys, i), line, self.line, None
                    )
                break

            name, value = words
            start = i
            matched = None
            while i < len(keys):
                optional, options = _options(keys[i])
                i += 1
                matched = next((option for option in options if option.lower() == name.lower()), None)
                if matched is not None:
                    break
                if not optional:
                    raise FormatError(
                        self.filename, self.file_format, _key_message(keys, start), name, self.line, None
                    )

            if matched is None:
                break
            pairs[matched] = value
            self.read_line()
            log.debug(f"{self.filename}: {matched} = {value}")
        return pairs
