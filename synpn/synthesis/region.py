"""
Region Module

A region is a linear functional over the event firing counts,
plus an initial marking. It becomes one place of the synthesized net.

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

from typing import Optional, Sequence, Union

from synpn.exec.utils import InvalidRegionError, UnreachableError
from synpn.ptio.lts import Arc, State
from synpn.synthesis.parikh import ParikhVector
from synpn.synthesis.utility import RegionUtility

Event = Union[int, str]


class Region:
    """ Region.

    Attributes
    ----------
    utility : RegionUtility
        Event indexing the weights refer to.
    backward : tuple of int
        Tokens consumed by each event.
    forward : tuple of int
        Tokens produced by each event.
    initial_marking : int
        Initial number of tokens.
    """

    def __init__(self, utility: RegionUtility, backward: Sequence[int], forward: Sequence[int], initial_marking: int) -> None:
        """ Initializer.

        Raises
        ------
        ValueError
            Wrong number of weights or negative value.
        """
        if len(backward) != utility.number_of_events or len(forward) != utility.number_of_events:
            raise ValueError("There must be one backward and one forward weight per event")
        if any(weight < 0 for weight in backward) or any(weight < 0 for weight in forward):
            raise ValueError("Weights must not be negative")
        if initial_marking < 0:
            raise ValueError("Initial marking {} must not be negative".format(initial_marking))

        self.utility: RegionUtility = utility
        self.backward: tuple[int, ...] = tuple(backward)
        self.forward: tuple[int, ...] = tuple(forward)
        self.initial_marking: int = initial_marking

        self._markings: dict[State, int] = {}

    @classmethod
    def from_weights(cls, utility: RegionUtility, weights: Sequence[int], initial_marking: int) -> Region:
        """ Pure region from its effective weights.
        """
        return RegionBuilder.create_pure(utility, weights).with_initial_marking(initial_marking)

    def __str__(self) -> str:
        """ Region to textual format.

        Returns
        -------
        str
            `{ init=m, b:event:f, ... }`
        """
        text = "{ init=" + str(self.initial_marking)
        for index, label in enumerate(self.utility.event_list):
            text += ", {}:{}:{}".format(self.backward[index], label, self.forward[index])
        return text + " }"

    def __repr__(self) -> str:
        return "Region({})".format(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return (self.utility is other.utility and self.backward == other.backward
                and self.forward == other.forward and self.initial_marking == other.initial_marking)

    def __hash__(self) -> int:
        return hash((self.backward, self.forward, self.initial_marking))

    def _index(self, event: Event) -> int:
        return event if isinstance(event, int) else self.utility.event_index(event)

    def backward_weight(self, event: Event) -> int:
        return self.backward[self._index(event)]

    def forward_weight(self, event: Event) -> int:
        return self.forward[self._index(event)]

    def weight(self, event: Event) -> int:
        """ Effective weight: `forward - backward`.
        """
        index = self._index(event)
        return self.forward[index] - self.backward[index]

    def weights(self) -> list[int]:
        return [f - b for b, f in zip(self.backward, self.forward)]

    def is_pure(self) -> bool:
        return all(b == 0 or f == 0 for b, f in zip(self.backward, self.forward))

    def is_plain(self) -> bool:
        return all(weight <= 1 for weight in self.backward + self.forward)

    def evaluate(self, parikh: ParikhVector) -> int:
        """ Dot product of the effective weights with a Parikh vector.
        """
        return sum(count * self.weight(index) for index, count in parikh)

    def marking_at(self, state: State) -> int:
        """ Number of tokens once `state` is reached.

        Raises
        ------
        UnreachableError
            No path from the initial state.
        """
        marking = self._markings.get(state)
        if marking is None:
            marking = self.initial_marking + self.evaluate(self.utility.reaching_parikh_vector(state))
            self._markings[state] = marking
        return marking

    def find_prevented_arc(self) -> Optional[tuple[State, str]]:
        """ Find a reachable arc the region does not enable.

        Returns
        -------
        tuple of State, str, optional
            Source state and label, `None` if every arc is enabled.
        """
        for state in self.utility.reachable_states():
            marking = self.marking_at(state)
            for arc in state.postset:
                if marking < self.backward_weight(arc.label):
                    return state, arc.label
        return None

    def find_arc_with_wrong_effect(self) -> Optional[Arc]:
        """ Find a reachable arc whose target marking is not the source marking plus the weight.
        """
        for arc in self.utility.edges():
            try:
                source = self.marking_at(arc.source)
                target = self.marking_at(arc.target)
            except UnreachableError:
                continue
            if source + self.weight(arc.label) != target:
                return arc
        return None

    def check_valid(self) -> None:
        """ Check the region axioms.

        Raises
        ------
        InvalidRegionError
            Some arc is prevented or has a wrong effect.
        """
        prevented = self.find_prevented_arc()
        if prevented is not None:
            state, label = prevented
            raise InvalidRegionError("Region {} prevents {} in state {}".format(self, label, state.id))

        arc = self.find_arc_with_wrong_effect()
        if arc is not None:
            raise InvalidRegionError("Region {} has a wrong effect on {}".format(self, arc))


class RegionBuilder:
    """ Mutable accumulator of backward/forward weights.
    """

    def __init__(self, utility: RegionUtility, backward: Optional[Sequence[int]] = None, forward: Optional[Sequence[int]] = None) -> None:
        size = utility.number_of_events
        backward = list(backward) if backward is not None else [0] * size
        forward = list(forward) if forward is not None else [0] * size
        if len(backward) != size or len(forward) != size:
            raise ValueError("There must be one backward and one forward weight per event")

        self.utility: RegionUtility = utility
        self.backward: list[int] = backward
        self.forward: list[int] = forward

    @classmethod
    def from_region(cls, region: Region) -> RegionBuilder:
        return cls(region.utility, region.backward, region.forward)

    @classmethod
    def create_pure(cls, utility: RegionUtility, weights: Sequence[int]) -> RegionBuilder:
        """ Builder with a positive weight as forward weight, a negative one as backward weight.
        """
        if len(weights) != utility.number_of_events:
            raise ValueError("There must be one weight per event")
        builder = cls(utility)
        for index, weight in enumerate(weights):
            builder.add_weight_on(index, weight)
        return builder

    def _index(self, event: Event) -> int:
        return event if isinstance(event, int) else self.utility.event_index(event)

    def add_weight_on(self, event: Event, weight: int) -> RegionBuilder:
        index = self._index(event)
        if weight > 0:
            self.forward[index] += weight
        elif weight < 0:
            self.backward[index] -= weight
        return self

    def add_loop_around(self, event: Event, weight: int) -> RegionBuilder:
        index = self._index(event)
        self.backward[index] += weight
        self.forward[index] += weight
        return self

    def add_region_with_factor(self, region: Region, factor: int) -> RegionBuilder:
        """ Add `factor` times a region (a negative factor swaps backward and forward weights).
        """
        backward, forward = region.backward, region.forward
        if factor < 0:
            factor = -factor
            backward, forward = forward, backward
        for index in range(self.utility.number_of_events):
            self.backward[index] += factor * backward[index]
            self.forward[index] += factor * forward[index]
        return self

    def make_pure(self) -> RegionBuilder:
        for index in range(self.utility.number_of_events):
            weight = self.forward[index] - self.backward[index]
            self.forward[index] = max(weight, 0)
            self.backward[index] = max(-weight, 0)
        return self

    def with_initial_marking(self, initial_marking: int) -> Region:
        return Region(self.utility, self.backward, self.forward, initial_marking)

    def with_normal_region_initial_marking(self) -> Region:
        """ Region with the smallest initial marking keeping every reachable marking non-negative.

        Note
        ----
        Backward weights are not taken into account, the result may still prevent arcs.
        """
        initial = 0
        for state in self.utility.reachable_states():
            parikh = self.utility.reaching_parikh_vector(state)
            value = sum(count * (self.forward[index] - self.backward[index]) for index, count in parikh)
            initial = max(initial, -value)
        return self.with_initial_marking(initial)
