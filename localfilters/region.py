"""
Boundary-aware regions: which source indices one output coordinate visits.

For an array with index bounds ``[imin, imax]``, a neighborhood with offset
bounds ``[kmin, kmax]`` and an output coordinate ``i``:

    region = [max(imin, i - kmax), min(imax, i - kmin)]

and, for a symmetric neighborhood of half-width ``off`` (``kmin == -off``):

    region = [max(imin, i - off), min(imax, i + off)]

Out-of-range neighbors are simply left out (clip boundary).

Four strategies compute the same regions in different ways.  They are kept
side by side so that traversals can be benchmarked against each other and
so that each one checks the others:

  "base"       : whole-corner composition with cartesian_max / cartesian_min
  "ntuple"     : per-axis expansion through a tuple comprehension
  "ntuple_val" : per-axis expansion with the rank fixed in advance
                 (hand-unrolled functions for ranks 1 to 4)
  "map"        : elementwise map() of a per-axis range helper
"""
from __future__ import annotations

import itertools
from typing import Dict, Iterator, NamedTuple, Sequence, Tuple

from .neighborhood import (
    CartesianIndex,
    Neighborhood,
    cartesian_max,
    cartesian_min,
    is_symmetric,
)


class Region(NamedTuple):
    """Inclusive corner pair of the source indices to visit."""

    first: CartesianIndex
    last: CartesianIndex

    @classmethod
    def from_ranges(cls, ranges: Sequence[range]) -> "Region":
        return cls(
            CartesianIndex(r.start for r in ranges),
            CartesianIndex(r.stop - 1 for r in ranges),
        )

    @property
    def ranges(self) -> Tuple[range, ...]:
        return tuple(range(a, b + 1) for a, b in zip(self.first, self.last))

    @property
    def slices(self) -> Tuple[slice, ...]:
        return tuple(slice(a, max(a, b + 1)) for a, b in zip(self.first, self.last))

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(max(0, b - a + 1) for a, b in zip(self.first, self.last))

    @property
    def size(self) -> int:
        n = 1
        for s in self.shape:
            n *= s
        return n

    @property
    def is_empty(self) -> bool:
        return any(b < a for a, b in zip(self.first, self.last))

    def indices(self) -> Iterator[CartesianIndex]:
        """Visit every index of the region in row-major order."""
        for idx in itertools.product(*self.ranges):
            yield CartesianIndex(idx)


class RegionResolver:
    """Strategy interface: compute the region for one output coordinate."""

    name = ""

    def centered(self, imin, imax, i, off) -> Region:
        raise NotImplementedError

    def general(self, imin, imax, i, kmin, kmax) -> Region:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<RegionResolver {self.name!r}>"


# --------------------------------------------------------------------------- #
# "base": compose whole corners
# --------------------------------------------------------------------------- #

class BaseResolver(RegionResolver):
    name = "base"

    def centered(self, imin, imax, i, off) -> Region:
        return Region(cartesian_max(imin, i - off), cartesian_min(imax, i + off))

    def general(self, imin, imax, i, kmin, kmax) -> Region:
        return Region(cartesian_max(imin, i - kmax), cartesian_min(imax, i - kmin))


# --------------------------------------------------------------------------- #
# "ntuple": runtime-length per-axis expansion
# --------------------------------------------------------------------------- #

class NTupleResolver(RegionResolver):
    name = "ntuple"

    def centered(self, imin, imax, i, off) -> Region:
        n = len(i)
        return Region.from_ranges(tuple(
            range(max(imin[k], i[k] - off[k]), min(imax[k], i[k] + off[k]) + 1)
            for k in range(n)
        ))

    def general(self, imin, imax, i, kmin, kmax) -> Region:
        n = len(i)
        return Region.from_ranges(tuple(
            range(max(imin[k], i[k] - kmax[k]), min(imax[k], i[k] - kmin[k]) + 1)
            for k in range(n)
        ))


# --------------------------------------------------------------------------- #
# "ntuple_val": rank known in advance, one unrolled function per rank
# --------------------------------------------------------------------------- #

def _centered_1(imin, imax, i, off):
    return (
        range(max(imin[0], i[0] - off[0]), min(imax[0], i[0] + off[0]) + 1),
    )


def _centered_2(imin, imax, i, off):
    return (
        range(max(imin[0], i[0] - off[0]), min(imax[0], i[0] + off[0]) + 1),
        range(max(imin[1], i[1] - off[1]), min(imax[1], i[1] + off[1]) + 1),
    )


def _centered_3(imin, imax, i, off):
    return (
        range(max(imin[0], i[0] - off[0]), min(imax[0], i[0] + off[0]) + 1),
        range(max(imin[1], i[1] - off[1]), min(imax[1], i[1] + off[1]) + 1),
        range(max(imin[2], i[2] - off[2]), min(imax[2], i[2] + off[2]) + 1),
    )


def _centered_4(imin, imax, i, off):
    return (
        range(max(imin[0], i[0] - off[0]), min(imax[0], i[0] + off[0]) + 1),
        range(max(imin[1], i[1] - off[1]), min(imax[1], i[1] + off[1]) + 1),
        range(max(imin[2], i[2] - off[2]), min(imax[2], i[2] + off[2]) + 1),
        range(max(imin[3], i[3] - off[3]), min(imax[3], i[3] + off[3]) + 1),
    )


def _general_1(imin, imax, i, kmin, kmax):
    return (
        range(max(imin[0], i[0] - kmax[0]), min(imax[0], i[0] - kmin[0]) + 1),
    )


def _general_2(imin, imax, i, kmin, kmax):
    return (
        range(max(imin[0], i[0] - kmax[0]), min(imax[0], i[0] - kmin[0]) + 1),
        range(max(imin[1], i[1] - kmax[1]), min(imax[1], i[1] - kmin[1]) + 1),
    )


def _general_3(imin, imax, i, kmin, kmax):
    return (
        range(max(imin[0], i[0] - kmax[0]), min(imax[0], i[0] - kmin[0]) + 1),
        range(max(imin[1], i[1] - kmax[1]), min(imax[1], i[1] - kmin[1]) + 1),
        range(max(imin[2], i[2] - kmax[2]), min(imax[2], i[2] - kmin[2]) + 1),
    )


def _general_4(imin, imax, i, kmin, kmax):
    return (
        range(max(imin[0], i[0] - kmax[0]), min(imax[0], i[0] - kmin[0]) + 1),
        range(max(imin[1], i[1] - kmax[1]), min(imax[1], i[1] - kmin[1]) + 1),
        range(max(imin[2], i[2] - kmax[2]), min(imax[2], i[2] - kmin[2]) + 1),
        range(max(imin[3], i[3] - kmax[3]), min(imax[3], i[3] - kmin[3]) + 1),
    )


_CENTERED_BY_RANK = {1: _centered_1, 2: _centered_2, 3: _centered_3, 4: _centered_4}
_GENERAL_BY_RANK = {1: _general_1, 2: _general_2, 3: _general_3, 4: _general_4}


class NTupleValResolver(RegionResolver):
    name = "ntuple_val"

    @staticmethod
    def _lookup(table, n: int):
        try:
            return table[n]
        except KeyError:
            raise ValueError(
                f"'ntuple_val' regions are only specialized for ranks "
                f"{sorted(table)}, got rank {n}"
            ) from None

    def centered(self, imin, imax, i, off) -> Region:
        func = self._lookup(_CENTERED_BY_RANK, len(i))
        return Region.from_ranges(func(imin, imax, i, off))

    def general(self, imin, imax, i, kmin, kmax) -> Region:
        func = self._lookup(_GENERAL_BY_RANK, len(i))
        return Region.from_ranges(func(imin, imax, i, kmin, kmax))


# --------------------------------------------------------------------------- #
# "map": elementwise map of a per-axis helper
# --------------------------------------------------------------------------- #

def _centered_range(imin: int, imax: int, i: int, off: int) -> range:
    return range(max(imin, i - off), min(imax, i + off) + 1)


def _general_range(imin: int, imax: int, i: int, kmin: int, kmax: int) -> range:
    return range(max(imin, i - kmax), min(imax, i - kmin) + 1)


class MapResolver(RegionResolver):
    name = "map"

    def centered(self, imin, imax, i, off) -> Region:
        return Region.from_ranges(tuple(map(_centered_range, imin, imax, i, off)))

    def general(self, imin, imax, i, kmin, kmax) -> Region:
        return Region.from_ranges(
            tuple(map(_general_range, imin, imax, i, kmin, kmax))
        )


# --------------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------------- #

_RESOLVERS: Dict[str, RegionResolver] = {
    r.name: r
    for r in (BaseResolver(), NTupleResolver(), NTupleValResolver(), MapResolver())
}

VARIANTS: Tuple[str, ...] = tuple(_RESOLVERS)


def get_resolver(variant) -> RegionResolver:
    """Return the resolver named ``variant`` (or ``variant`` itself)."""
    if isinstance(variant, RegionResolver):
        return variant
    try:
        return _RESOLVERS[variant]
    except KeyError:
        raise ValueError(
            f"variant must be one of {list(VARIANTS)}, got {variant!r}"
        ) from None


def array_limits(shape: Sequence[int]) -> Tuple[CartesianIndex, CartesianIndex]:
    """Index bounds ``(imin, imax)`` of an array of the given shape."""
    return (
        CartesianIndex(0 for _ in shape),
        CartesianIndex(n - 1 for n in shape),
    )


def resolve(
    resolver: RegionResolver,
    imin: CartesianIndex,
    imax: CartesianIndex,
    i: CartesianIndex,
    B: Neighborhood,
) -> Region:
    """Region of ``B`` around ``i``, using the symmetric path when possible."""
    if is_symmetric(B):
        return resolver.centered(imin, imax, i, B.last)
    kmin, kmax = B.limits()
    return resolver.general(imin, imax, i, kmin, kmax)
