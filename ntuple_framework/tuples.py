"""
NTuple Framework - Tuple Indexing Module

A tuple is an ordered subset of candidate positions. The landscape model
projects every candidate onto each tuple and encodes the projected values as
an integer address (mixed radix, first tuple position least significant).

Two indexers are provided:

- ConvTupleIndexer: candidates are flattened images; one tuple per filter
  window position (convolutional N-tuple).
- FullTupleIndexer: classic N-tuple sets over a flat vector (all 1-tuples,
  optionally all 2-tuples, optionally the single N-tuple).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from .errors import ConfigurationError
from .search_space import positive_int

IndexTuple = Tuple[int, ...]


class TupleIndexer(Protocol):
    """Strategy interface producing the tuple set of a landscape model."""

    def make_tuples(self) -> List[IndexTuple]:
        ...


@dataclass(frozen=True)
class ConvTupleIndexer:
    """One tuple per filter window that fits inside the image.

    Window top-left corners step by ``stride`` along x (outer loop) and y
    (inner loop). Inside a window, offsets run over x then y, and each pixel
    maps to the flat index ``x + image_width * y``.

    A filter larger than the image yields an empty tuple set.
    """

    image_width: int
    image_height: int
    filter_width: int
    filter_height: int
    stride: int = 1

    def __post_init__(self) -> None:
        for name in ("image_width", "image_height", "filter_width", "filter_height", "stride"):
            object.__setattr__(self, name, positive_int(name, getattr(self, name)))

    @property
    def n_dims(self) -> int:
        return self.image_width * self.image_height

    def make_tuples(self) -> List[IndexTuple]:
        tuples: List[IndexTuple] = []
        for x0 in range(0, self.image_width - self.filter_width + 1, self.stride):
            for y0 in range(0, self.image_height - self.filter_height + 1, self.stride):
                tuples.append(tuple(
                    (x0 + dx) + self.image_width * (y0 + dy)
                    for dx in range(self.filter_width)
                    for dy in range(self.filter_height)
                ))
        return tuples


@dataclass(frozen=True)
class FullTupleIndexer:
    """Non-convolutional tuple set over ``n_dims`` positions."""

    n_dims: int
    use_1_tuples: bool = True
    use_2_tuples: bool = False
    use_n_tuple: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "n_dims", positive_int("n_dims", self.n_dims))
        for name in ("use_1_tuples", "use_2_tuples", "use_n_tuple"):
            object.__setattr__(self, name, bool(getattr(self, name)))

    def make_tuples(self) -> List[IndexTuple]:
        tuples: List[IndexTuple] = []
        if self.use_1_tuples:
            tuples.extend((i,) for i in range(self.n_dims))
        if self.use_2_tuples:
            tuples.extend(itertools.combinations(range(self.n_dims), 2))
        if self.use_n_tuple:
            full = tuple(range(self.n_dims))
            # a 1-position space already has this tuple
            if full not in tuples:
                tuples.append(full)
        return tuples


def address(values: Sequence[int], index: Sequence[int], radix: int) -> int:
    """Exact mixed-radix address of ``values`` projected onto ``index``."""
    addr = 0
    prod = 1
    for i in index:
        addr += prod * int(values[i])
        prod *= radix
    return addr


def decode_address(addr: int, tuple_size: int, radix: int) -> Tuple[int, ...]:
    """Inverse of :func:`address` for a tuple of ``tuple_size`` positions."""
    addr = int(addr)
    if not 0 <= addr < address_space_size(tuple_size, radix):
        raise ConfigurationError(f"address {addr} outside the space of a {tuple_size}-tuple")
    out = []
    for _ in range(tuple_size):
        addr, v = divmod(addr, radix)
        out.append(v)
    return tuple(out)


def address_space_size(tuple_size: int, radix: int) -> int:
    return int(radix) ** int(tuple_size)
