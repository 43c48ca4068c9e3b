"""
Exceptions raised by localfilters.

Every error derives from ``LocalFilterError`` and from the builtin that
best matches it, so callers may catch either.
"""
from __future__ import annotations


class LocalFilterError(Exception):
    """Base class for all localfilters errors."""


class ShapeMismatchError(LocalFilterError, ValueError):
    """Destination, workspace or neighborhood does not match the source."""


class AliasingError(LocalFilterError, ValueError):
    """Arrays that must be distinct share memory."""


class UnsupportedKernelError(LocalFilterError, TypeError):
    """The neighborhood kind is not valid for the requested operator."""


class DivisionByZeroError(LocalFilterError, ZeroDivisionError):
    """A local mean saw no participating cell (or a zero weight sum)."""


class OutputTypeError(LocalFilterError, TypeError):
    """Destination element type cannot hold the result without truncation."""
