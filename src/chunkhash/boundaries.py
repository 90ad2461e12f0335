"""Boundary sources: lazy producers of cumulative chunk end offsets."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Optional, Union

BoundarySource = Callable[[], Optional[int]]
"""Zero-argument callable returning the next boundary, or ``None`` when exhausted."""


def every(step: int) -> BoundarySource:
    """Return a source yielding ``step, 2 * step, 3 * step, ...`` forever."""

    if isinstance(step, bool) or not isinstance(step, int) or step <= 0:
        raise ValueError(f"step must be a positive integer, got {step!r}")

    position = 0

    def _next() -> int:
        nonlocal position
        position += step
        return position

    return _next


def at_offsets(offsets: Iterable[int]) -> BoundarySource:
    """Return a source yielding the given cumulative offsets, then ``None``."""

    return _from_iterator(iter(offsets))


def from_sizes(sizes: Iterable[int]) -> BoundarySource:
    """Return a source whose chunks have the given sizes, in order."""

    def _cumulative() -> Iterator[int]:
        total = 0
        for size in sizes:
            if size <= 0:
                raise ValueError(f"chunk sizes must be positive, got {size!r}")
            total += size
            yield total

    return _from_iterator(_cumulative())


def as_boundary_source(source: Union[BoundarySource, Iterable[int]]) -> BoundarySource:
    """Normalise a callable or an iterable of offsets into a boundary source."""

    if callable(source):
        return source
    if isinstance(source, Iterable):
        return _from_iterator(iter(source))
    raise TypeError(f"cannot use {type(source).__name__} as a boundary source")


def _from_iterator(iterator: Iterator[int]) -> BoundarySource:
    def _next() -> Optional[int]:
        return next(iterator, None)

    return _next


__all__ = ["BoundarySource", "as_boundary_source", "at_offsets", "every", "from_sizes"]
