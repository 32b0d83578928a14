"""
Region Utility

Event indexing and reachability information shared by every region
computed on a transition system.

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

from typing import Optional

from synpn.exec.utils import Interrupter, UnreachableError
from synpn.ptio.lts import Arc, State, TransitionSystem
from synpn.synthesis.parikh import ParikhVector
from synpn.synthesis.spanningtree import SpanningTree


class RegionUtility:
    """ Event indexing and reachability.

    Note
    ----
    The event indices are fixed for the lifetime of the utility:
    every region and constraint addresses events by index.

    Attributes
    ----------
    ts : TransitionSystem
        Underlying transition system.
    event_list : list of str
        Labels, sorted, the position is the event index.
    spanning_tree : SpanningTree
        Breadth-first spanning tree from the initial state.
    """

    def __init__(self, ts: TransitionSystem, interrupter: Optional[Interrupter] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        ts : TransitionSystem
            Transition system.
        interrupter : Interrupter, optional
            Cancellation flag.
        """
        self.ts: TransitionSystem = ts
        self.event_list: list[str] = ts.alphabet
        self._indices: dict[str, int] = {label: index for index, label in enumerate(self.event_list)}

        self.spanning_tree: SpanningTree = SpanningTree(ts, interrupter=interrupter)

        self._parikh_vectors: dict[State, ParikhVector] = {}
        self._chord_offsets: Optional[list[tuple[Arc, ParikhVector]]] = None

    @property
    def number_of_events(self) -> int:
        return len(self.event_list)

    def event_index(self, label: str) -> int:
        """ Index of an event.

        Raises
        ------
        ValueError
            Unknown label.
        """
        index = self._indices.get(label)
        if index is None:
            raise ValueError("Unknown event {}".format(label))
        return index

    def is_reachable(self, state: State) -> bool:
        return self.spanning_tree.is_reachable(state)

    def reachable_states(self) -> list[State]:
        """ Reachable states, in the order of the transition system.
        """
        return [state for state in self.ts if self.spanning_tree.is_reachable(state)]

    def reaching_parikh_vector(self, state: State) -> ParikhVector:
        """ Parikh vector of the tree path from the initial state.

        Parameters
        ----------
        state : State
            Target state.

        Returns
        -------
        ParikhVector
            Counts by event index.

        Raises
        ------
        UnreachableError
            No path from the initial state.
        """
        parikh = self._parikh_vectors.get(state)
        if parikh is None:
            if not self.spanning_tree.is_reachable(state):
                raise UnreachableError(state)
            arcs = self.spanning_tree.edge_path_from_start(state)
            parikh = ParikhVector.of_sequence(self._indices[arc.label] for arc in arcs)
            self._parikh_vectors[state] = parikh
        return parikh

    def chord_parikh_vector(self, chord: Arc) -> ParikhVector:
        """ Cycle offset of an edge: `PV(source) + label - PV(target)`.

        Note
        ----
        Zero for tree edges, evaluates to zero under every region.
        """
        return (self.reaching_parikh_vector(chord.source)
                + ParikhVector.unit(self._indices[chord.label])
                - self.reaching_parikh_vector(chord.target))

    def chord_offsets(self) -> list[tuple[Arc, ParikhVector]]:
        """ Non-trivial chord offsets.

        Returns
        -------
        list of (Arc, ParikhVector)
            Chords with their cycle offset, zero offsets omitted.
        """
        if self._chord_offsets is None:
            offsets = []
            for chord in self.spanning_tree.chords:
                offset = self.chord_parikh_vector(chord)
                if offset:
                    offsets.append((chord, offset))
            self._chord_offsets = offsets
        return list(self._chord_offsets)

    def edges(self) -> list[Arc]:
        return list(self.ts.arcs)

    def reachable_edges(self) -> list[Arc]:
        return [arc for arc in self.ts.arcs if self.spanning_tree.is_reachable(arc.source)]

    def location_list(self, mapping: Optional[dict[str, str]]) -> Optional[list[str]]:
        """ Locations by event index.
        """
        if mapping is None:
            return None
        return [mapping[label] for label in self.event_list]
