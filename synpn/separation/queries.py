"""
Separation Queries

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

from typing import Union

from synpn.exec.utils import UnreachableError
from synpn.ptio.lts import State
from synpn.synthesis.constraints import ConstraintBuilder, ConstraintGroup, InequalitySystem
from synpn.synthesis.region import Region


class EventSeparation:
    """ Find a region preventing `label` in `state`.
    """

    def __init__(self, state: State, label: str) -> None:
        self.state: State = state
        self.label: str = label

    def __str__(self) -> str:
        return "({}, {})".format(self.state.id, self.label)

    def __repr__(self) -> str:
        return "EventSeparation{}".format(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventSeparation):
            return NotImplemented
        return self.state is other.state and self.label == other.label

    def __hash__(self) -> int:
        return hash((self.state.id, self.label))

    def constraints(self, builder: ConstraintBuilder) -> InequalitySystem:
        return builder.event_separation(self.state, self.label)


class StateSeparation:
    """ Find a region with different markings in `state` and `other`.
    """

    def __init__(self, state: State, other: State) -> None:
        self.state: State = state
        self.other: State = other

    def __str__(self) -> str:
        return "({}, {})".format(self.state.id, self.other.id)

    def __repr__(self) -> str:
        return "StateSeparation{}".format(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateSeparation):
            return NotImplemented
        return {self.state.id, self.other.id} == {other.state.id, other.other.id}

    def __hash__(self) -> int:
        return hash(frozenset((self.state.id, self.other.id)))

    def constraints(self, builder: ConstraintBuilder) -> ConstraintGroup:
        return builder.state_separation(self.state, self.other)


Query = Union[EventSeparation, StateSeparation]


def is_event_enabled(region: Region, state: State, label: str) -> bool:
    """ Check if a region enables an event in a state.

    Returns
    -------
    bool
        Enabling status, `False` for unreachable states.
    """
    try:
        return region.marking_at(state) >= region.backward_weight(label)
    except UnreachableError:
        return False


def is_separating_region(region: Region, query: Query) -> bool:
    """ Check if a region solves a separation query.

    Parameters
    ----------
    region : Region
        Candidate region.
    query : Query
        Event or state separation.

    Returns
    -------
    bool
        `True` if the region separates.
    """
    if isinstance(query, EventSeparation):
        if not region.utility.is_reachable(query.state):
            return False
        return not is_event_enabled(region, query.state, query.label)

    try:
        return region.marking_at(query.state) != region.marking_at(query.other)
    except UnreachableError:
        return False
