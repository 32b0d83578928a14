"""
Spanning Tree

Breadth-first spanning tree of a transition system,
rooted at its initial state.

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

from collections import deque
from typing import Optional

from synpn.exec.utils import Interrupter
from synpn.ptio.lts import Arc, State, TransitionSystem


class SpanningTree:
    """ Spanning tree.

    Attributes
    ----------
    ts : TransitionSystem
        Underlying transition system.
    start : State
        Root of the tree.
    predecessors : dict of State: Arc
        Tree-parent edge of every reached non-root state.
    chords : list of Arc
        Edges between reached states that are not part of the tree.
    unreachable : set of State
        States without a path from the root.
    """

    def __init__(self, ts: TransitionSystem, start: Optional[State] = None, interrupter: Optional[Interrupter] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        ts : TransitionSystem
            Transition system.
        start : State, optional
            Root, initial state by default.
        interrupter : Interrupter, optional
            Cancellation flag.
        """
        self.ts: TransitionSystem = ts
        self.start: State = start if start is not None else ts.initial_state

        self.predecessors: dict[State, Arc] = {}
        self.chords: list[Arc] = []

        unvisited = set(ts.states.values())
        unvisited.discard(self.start)

        to_visit = deque([self.start])
        while to_visit:
            if interrupter is not None:
                interrupter.throw_if_requested()

            state = to_visit.popleft()
            for arc in state.postset:
                if arc.target in unvisited:
                    unvisited.remove(arc.target)
                    self.predecessors[arc.target] = arc
                    to_visit.append(arc.target)
                else:
                    self.chords.append(arc)

        self.unreachable: set[State] = unvisited

    def __str__(self) -> str:
        text = "tree {}\n".format(self.start.id)
        text += ''.join("{}\n".format(arc) for arc in self.predecessors.values())
        text += ''.join("chord {}\n".format(arc) for arc in self.chords)
        return text

    def is_reachable(self, state: State) -> bool:
        return state not in self.unreachable

    def is_totally_reachable(self) -> bool:
        return not self.unreachable

    def unreachable_nodes(self) -> set[State]:
        return set(self.unreachable)

    def predecessor(self, state: State) -> Optional[State]:
        arc = self.predecessors.get(state)
        return arc.source if arc is not None else None

    def edge_path_from_start(self, state: State) -> list[Arc]:
        """ Tree path from the root to a state.

        Parameters
        ----------
        state : State
            Target state.

        Returns
        -------
        list of Arc
            Edges of the path, empty for the root and unreachable states.
        """
        path = []
        arc = self.predecessors.get(state)
        while arc is not None:
            path.append(arc)
            arc = self.predecessors.get(arc.source)
        path.reverse()
        return path

    def node_path_from_start(self, state: State) -> list[State]:
        """ States along the tree path from the root, both ends included.

        Returns
        -------
        list of State
            Empty for unreachable states.
        """
        if not self.is_reachable(state):
            return []
        return [self.start] + [arc.target for arc in self.edge_path_from_start(state)]
