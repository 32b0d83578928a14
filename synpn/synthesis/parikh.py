"""
Parikh Vectors

This file is part of SynPN.

SynPN is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

SynPN is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with SynPN. If not, see <https://www.gnu.org/licenses/>.
"""

from __future__ import annotations

__author__ = "SynPN developers"
__license__ = "GPLv3"
__version__ = "1.0.0"

from typing import Iterable, Iterator, Optional


class ParikhVector:
    """ Number of occurrences of each event index in a firing sequence.

    Note
    ----
    Counts are non-negative for real firing sequences,
    differences (chord offsets) may be negative.

    Attributes
    ----------
    counts : dict of int: int
        Non-zero counts by event index.
    """

    def __init__(self, counts: Optional[dict[int, int]] = None) -> None:
        if counts is None:
            counts = {}
        self.counts: dict[int, int] = {index: count for index, count in counts.items() if count != 0}

    @classmethod
    def of_sequence(cls, sequence: Iterable[int]) -> ParikhVector:
        """ Parikh vector of a sequence of event indices.
        """
        counts: dict[int, int] = {}
        for index in sequence:
            counts[index] = counts.get(index, 0) + 1
        return cls(counts)

    @classmethod
    def unit(cls, index: int) -> ParikhVector:
        return cls({index: 1})

    def __getitem__(self, index: int) -> int:
        return self.counts.get(index, 0)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(sorted(self.counts.items()))

    def __add__(self, other: ParikhVector) -> ParikhVector:
        counts = dict(self.counts)
        for index, count in other.counts.items():
            counts[index] = counts.get(index, 0) + count
        return ParikhVector(counts)

    def __sub__(self, other: ParikhVector) -> ParikhVector:
        counts = dict(self.counts)
        for index, count in other.counts.items():
            counts[index] = counts.get(index, 0) - count
        return ParikhVector(counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParikhVector):
            return NotImplemented
        return self.counts == other.counts

    def __hash__(self) -> int:
        return hash(frozenset(self.counts.items()))

    def __bool__(self) -> bool:
        return bool(self.counts)

    def __str__(self) -> str:
        return "{" + ", ".join("{}: {}".format(index, count) for index, count in self) + "}"

    def __repr__(self) -> str:
        return "ParikhVector({})".format(self)

    def to_list(self, size: int) -> list[int]:
        """ Dense representation over `size` events.
        """
        return [self[index] for index in range(size)]

    def is_non_negative(self) -> bool:
        return all(count >= 0 for count in self.counts.values())
