# src/rasterkey/key/base.py

"""
This module defines the interface shared by every colour key.

A key converts cell values to colours and back. Neither direction
raises on a miss: the conversion returns None and the key records why,
so a caller rendering thousands of cells can decide what a miss means.
"""

import logging
from typing import Any, Optional

from rasterkey.exceptions import KeyConversionError
from .colour import Colour

log = logging.getLogger(__name__)

__all__ = ["Key"]

class Key:
    """
    Base class for value <-> colour converters.

    Attributes:
        last_failure (KeyConversionError | None): Exception object describing
            the most recent failed conversion. It is never raised by the key.
    """

    def __init__(self):
        self.last_failure: Optional[KeyConversionError] = None

    def encode(self, value: Any) -> Optional[Colour]:
        """Return the colour for a value, or None (recording why) if there is none."""
        raise NotImplementedError(f"{type(self).__name__} does not implement encode")

    def decode(self, colour: Colour) -> Any:
        """Return the value for a colour, or None (recording why) if there is none."""
        raise NotImplementedError(f"{type(self).__name__} does not implement decode")

    @property
    def failure_message(self) -> Optional[str]:
        """Text of the last failure, or None if no conversion has failed yet."""
        return None if self.last_failure is None else str(self.last_failure)

    def _fail(self, error: KeyConversionError) -> None:
        self.last_failure = error
        log.debug(f"{type(self).__name__}: {error}")
        return None
