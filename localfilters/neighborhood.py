"""
Neighborhood (structuring element) geometry.

Three kinds of neighborhoods are supported:

  CenteredBox  : symmetric box, ``first == -last``, all cells weigh the same
  CartesianBox : box with arbitrary corners, all cells weigh the same
  Kernel       : dense coefficient array (boolean mask or numeric weights)
                 addressed by offset from an anchor cell

All offsets are expressed as ``CartesianIndex`` values relative to the output
coordinate.  Neighborhoods are immutable and hold no traversal logic.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ShapeMismatchError


class CartesianIndex(tuple):
    """
    N-tuple of integers with elementwise arithmetic.

    ``a <= b`` is the partial order "less or equal on every axis", it is not
    the lexicographic tuple comparison.
    """

    __slots__ = ()

    def __new__(cls, *args):
        if len(args) == 1 and not isinstance(args[0], (int, np.integer)):
            args = tuple(args[0])
        return super().__new__(cls, (int(x) for x in args))

    def _check(self, other) -> None:
        if len(other) != len(self):
            raise ShapeMismatchError(
                f"CartesianIndex rank mismatch ({len(self)} != {len(other)})"
            )

    def __add__(self, other):
        self._check(other)
        return CartesianIndex(a + b for a, b in zip(self, other))

    def __radd__(self, other):
        self._check(other)
        return CartesianIndex(b + a for a, b in zip(self, other))

    def __sub__(self, other):
        self._check(other)
        return CartesianIndex(a - b for a, b in zip(self, other))

    def __rsub__(self, other):
        self._check(other)
        return CartesianIndex(b - a for a, b in zip(self, other))

    def __neg__(self):
        return CartesianIndex(-a for a in self)

    def __le__(self, other):
        self._check(other)
        return all(a <= b for a, b in zip(self, other))

    def __ge__(self, other):
        self._check(other)
        return all(a >= b for a, b in zip(self, other))

    def __lt__(self, other):
        return self <= other and tuple(self) != tuple(other)

    def __gt__(self, other):
        return self >= other and tuple(self) != tuple(other)

    def __repr__(self) -> str:
        return f"CartesianIndex{tuple(self)!r}"


def cartesian_max(a: Sequence[int], b: Sequence[int]) -> CartesianIndex:
    """Elementwise maximum of two indices."""
    return CartesianIndex(max(x, y) for x, y in zip(a, b))


def cartesian_min(a: Sequence[int], b: Sequence[int]) -> CartesianIndex:
    """Elementwise minimum of two indices."""
    return CartesianIndex(min(x, y) for x, y in zip(a, b))


def default_anchor(shape: Sequence[int]) -> CartesianIndex:
    """
    Default anchor of a kernel of the given shape: its central cell.

    The anchor is 0-based, ``shape[d] // 2`` along each axis.
    """
    return CartesianIndex(int(n) // 2 for n in shape)


# --------------------------------------------------------------------------- #
# Boxes
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class CenteredBox:
    """
    Symmetric box of half-widths ``half_widths``.

    ``CenteredBox((1, 2))`` covers offsets ``-1..1`` on the first axis and
    ``-2..2`` on the second one, i.e. a 3×5 box.
    """

    half_widths: CartesianIndex

    def __post_init__(self):
        hw = CartesianIndex(self.half_widths)
        if any(h < 0 for h in hw):
            raise ValueError(f"half-widths must be non-negative, got {tuple(hw)}")
        object.__setattr__(self, "half_widths", hw)

    @classmethod
    def from_size(cls, sizes: Iterable[int]) -> "CenteredBox":
        """Build a centered box from odd widths."""
        sizes = tuple(int(s) for s in sizes)
        for s in sizes:
            if s < 1 or s % 2 != 1:
                raise ValueError(
                    f"centered box widths must be positive and odd, got {sizes}"
                )
        return cls(CartesianIndex(s // 2 for s in sizes))

    @property
    def ndim(self) -> int:
        return len(self.half_widths)

    @property
    def first(self) -> CartesianIndex:
        return -self.half_widths

    @property
    def last(self) -> CartesianIndex:
        return self.half_widths

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(2 * h + 1 for h in self.half_widths)

    @property
    def anchor(self) -> CartesianIndex:
        return self.half_widths

    def limits(self) -> Tuple[CartesianIndex, CartesianIndex]:
        return self.first, self.last


@dataclass(frozen=True)
class CartesianBox:
    """
    Box defined by its two corner offsets ``first <= last`` (inclusive).
    """

    first: CartesianIndex
    last: CartesianIndex

    def __post_init__(self):
        first = CartesianIndex(self.first)
        last = CartesianIndex(self.last)
        if len(first) != len(last):
            raise ShapeMismatchError(
                f"box corners have different ranks ({len(first)} != {len(last)})"
            )
        if not first <= last:
            raise ValueError(
                f"box corners must satisfy first <= last, got {tuple(first)} "
                f"and {tuple(last)}"
            )
        object.__setattr__(self, "first", first)
        object.__setattr__(self, "last", last)

    @classmethod
    def from_ranges(cls, ranges: Sequence[range]) -> "CartesianBox":
        """Build a box from one ``range`` per axis (stop is exclusive)."""
        for r in ranges:
            if r.step != 1:
                raise ValueError(f"box ranges must have unit step, got {r!r}")
            if len(r) == 0:
                raise ValueError(f"box ranges must not be empty, got {r!r}")
        return cls(
            CartesianIndex(r.start for r in ranges),
            CartesianIndex(r.stop - 1 for r in ranges),
        )

    @property
    def ndim(self) -> int:
        return len(self.first)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(b - a + 1 for a, b in zip(self.first, self.last))

    @property
    def anchor(self) -> CartesianIndex:
        return -self.first

    def limits(self) -> Tuple[CartesianIndex, CartesianIndex]:
        return self.first, self.last


# --------------------------------------------------------------------------- #
# Kernels
# --------------------------------------------------------------------------- #

class Kernel:
    """
    Structuring element with one coefficient per cell.

    Parameters
    ----------
    coefs : array_like
        Boolean mask or numeric weights.  A read-only copy is kept.
    anchor : sequence of int, optional
        0-based position of the reference cell inside ``coefs``.  Defaults to
        the central cell, ``shape[d] // 2`` along each axis.

    Notes
    -----
    Offsets run from ``first = -anchor`` to ``last = shape - 1 - anchor``.
    For an output coordinate ``i`` and a source coordinate ``j`` the
    coefficient is ``coefs[anchor + i - j]`` (convolution orientation).
    """

    __slots__ = ("coefs", "anchor")

    def __init__(self, coefs, anchor: Optional[Sequence[int]] = None):
        coefs = np.array(coefs, copy=True)
        if coefs.ndim == 0:
            raise ValueError("kernel coefficients must have at least one dimension")
        if coefs.size == 0:
            raise ValueError(f"kernel must not be empty, got shape {coefs.shape}")
        coefs.flags.writeable = False
        if anchor is None:
            anchor = default_anchor(coefs.shape)
        anchor = CartesianIndex(anchor)
        if len(anchor) != coefs.ndim:
            raise ShapeMismatchError(
                f"kernel anchor has rank {len(anchor)}, coefficients have "
                f"rank {coefs.ndim}"
            )
        object.__setattr__(self, "coefs", coefs)
        object.__setattr__(self, "anchor", anchor)

    def __setattr__(self, name, value):
        raise AttributeError("Kernel is immutable")

    @classmethod
    def from_box(cls, box: Union[CenteredBox, CartesianBox]) -> "Kernel":
        """Boolean kernel covering exactly the cells of ``box``."""
        return cls(np.ones(box.shape, dtype=bool), anchor=-box.first)

    def __repr__(self) -> str:
        return (
            f"Kernel(shape={self.coefs.shape}, dtype={self.coefs.dtype}, "
            f"anchor={tuple(self.anchor)})"
        )

    @property
    def ndim(self) -> int:
        return self.coefs.ndim

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.coefs.shape

    @property
    def dtype(self) -> np.dtype:
        return self.coefs.dtype

    @property
    def first(self) -> CartesianIndex:
        return -self.anchor

    @property
    def last(self) -> CartesianIndex:
        return CartesianIndex(n - 1 for n in self.coefs.shape) - self.anchor

    @property
    def is_boolean(self) -> bool:
        return self.coefs.dtype == np.bool_

    @property
    def is_floating(self) -> bool:
        return bool(np.issubdtype(self.coefs.dtype, np.floating))

    def limits(self) -> Tuple[CartesianIndex, CartesianIndex]:
        return self.first, self.last

    def coefficients_for(self, i: Sequence[int], region) -> np.ndarray:
        """
        Coefficients ``coefs[anchor + i - j]`` for every ``j`` of ``region``.

        The returned block has the shape of the region: ``block[p]`` is the
        coefficient paired with source index ``region.first + p``.
        """
        k = self.anchor + CartesianIndex(i)
        lo = k - region.last
        hi = k - region.first
        forward = tuple(slice(a, max(a, b + 1)) for a, b in zip(lo, hi))
        flip = (slice(None, None, -1),) * self.coefs.ndim
        return self.coefs[forward][flip]


Neighborhood = Union[CenteredBox, CartesianBox, Kernel]


def is_box(B) -> bool:
    return isinstance(B, (CenteredBox, CartesianBox))


def is_symmetric(B: Neighborhood) -> bool:
    """True when ``first == -last``, which enables the single-offset path."""
    return tuple(B.first) == tuple(-B.last)


def to_neighborhood(B, ndim: int) -> Neighborhood:
    """
    Normalize a loosely-typed neighborhood specification.

    Parameters
    ----------
    B : int, sequence of int, tuple of range, ndarray or neighborhood
        - ``int`` w : centered box of odd width ``w`` along every axis
          (3 gives a 3×…×3 box of half-width 1);
        - sequence of int : centered box with one odd width per axis;
        - tuple of ``range`` : Cartesian box, one range per axis;
        - ndarray : kernel (boolean or numeric) with its default anchor;
        - ``CenteredBox`` / ``CartesianBox`` / ``Kernel`` : used as is.
    ndim : int
        Rank of the arrays the neighborhood will be applied to.

    Raises
    ------
    ShapeMismatchError
        If the neighborhood rank differs from ``ndim``.
    """
    if isinstance(B, (bool, np.bool_)):
        raise TypeError(f"Cannot build a neighborhood from {B!r}")
    if isinstance(B, (int, np.integer)):
        nbhd = CenteredBox.from_size((int(B),) * ndim)
    elif isinstance(B, (CenteredBox, CartesianBox, Kernel)):
        nbhd = B
    elif isinstance(B, np.ndarray):
        nbhd = Kernel(B)
    elif isinstance(B, (tuple, list)) and len(B) > 0 and all(
        isinstance(r, range) for r in B
    ):
        nbhd = CartesianBox.from_ranges(B)
    elif isinstance(B, (tuple, list)) and len(B) > 0 and all(
        isinstance(s, (int, np.integer)) and not isinstance(s, (bool, np.bool_))
        for s in B
    ):
        nbhd = CenteredBox.from_size(B)
    else:
        raise TypeError(f"Cannot build a neighborhood from {B!r}")

    if nbhd.ndim != ndim:
        raise ShapeMismatchError(
            f"neighborhood has rank {nbhd.ndim}, array has rank {ndim}"
        )
    return nbhd
