"""
Labeled Transition System Module

Finite directed labeled graph with a distinguished initial state.

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

from typing import Iterator, Optional


class TransitionSystem:
    """ Labeled transition system.

    Attributes
    ----------
    id : str
        Identifier.
    states : dict of str: State
        Finite set of states (identified by ids).
    events : dict of str: Event
        Alphabet (identified by labels).
    arcs : list of Arc
        Labeled edges, in creation order.
    initial_state : State, optional
        Initial state.
    """

    def __init__(self, ts_id: str = "") -> None:
        """ Initializer.

        Parameters
        ----------
        ts_id : str, optional
            Identifier.
        """
        self.id: str = ts_id

        self.states: dict[str, State] = {}
        self.events: dict[str, Event] = {}
        self.arcs: list[Arc] = []

        self._initial_state: Optional[State] = None

    def __str__(self) -> str:
        """ Transition system to textual format.

        Returns
        -------
        str
            Debugging format.
        """
        text = "lts {}\n".format(self.id)
        if self._initial_state is not None:
            text += "initial {}\n".format(self._initial_state.id)
        text += ''.join(map(lambda arc: "{}\n".format(arc), self.arcs))
        return text

    @property
    def initial_state(self) -> State:
        """ Initial state.

        Raises
        ------
        ValueError
            No initial state has been set.
        """
        if self._initial_state is None:
            raise ValueError("Transition system {} has no initial state".format(self.id))
        return self._initial_state

    @initial_state.setter
    def initial_state(self, state: State) -> None:
        if self.states.get(state.id) is not state:
            raise ValueError("State {} does not belong to this transition system".format(state.id))
        self._initial_state = state

    @property
    def alphabet(self) -> list[str]:
        """ Labels of the events, sorted.
        """
        return sorted(self.events)

    def create_state(self, state_id: Optional[str] = None) -> State:
        """ Create a new state.

        Parameters
        ----------
        state_id : str, optional
            Identifier, `s<n>` by default.

        Returns
        -------
        State
            The new state.
        """
        if state_id is None:
            state_id = "s{}".format(len(self.states))

        if state_id in self.states:
            raise ValueError("State {} already exists".format(state_id))

        state = State(state_id, self)
        self.states[state_id] = state

        if self._initial_state is None:
            self._initial_state = state

        return state

    def create_states(self, *state_ids: str) -> list[State]:
        """ Create several states at once.
        """
        return [self.create_state(state_id) for state_id in state_ids]

    def create_event(self, label: str, location: Optional[str] = None) -> Event:
        """ Get or create an event.

        Parameters
        ----------
        label : str
            Label of the event.
        location : str, optional
            Location of the event.

        Returns
        -------
        Event
            The (possibly already existing) event.
        """
        event = self.events.get(label)
        if event is None:
            event = Event(label, location)
            self.events[label] = event
        elif location is not None:
            if event.location is not None and event.location != location:
                raise ValueError("Event {} already has location {}".format(label, event.location))
            event.location = location
        return event

    def create_arc(self, source: str | State, label: str, target: str | State) -> Arc:
        """ Create a labeled edge.

        Parameters
        ----------
        source : str or State
            Source state (or its id).
        label : str
            Label.
        target : str or State
            Target state (or its id).

        Returns
        -------
        Arc
            The new arc.
        """
        source, target = self.get_state(source), self.get_state(target)
        self.create_event(label)

        arc = Arc(source, label, target)
        self.arcs.append(arc)
        source.postset.append(arc)
        target.preset.append(arc)

        return arc

    def get_state(self, state: str | State) -> State:
        """ Return the corresponding state.

        Raises
        ------
        KeyError
            Unknown state.
        """
        if isinstance(state, State):
            if self.states.get(state.id) is not state:
                raise KeyError(state.id)
            return state
        return self.states[state]

    def get_arc(self, source: str | State, label: str, target: str | State) -> Optional[Arc]:
        """ Return the arc `source --label--> target` if it exists.
        """
        source, target = self.get_state(source), self.get_state(target)
        for arc in source.postset:
            if arc.label == label and arc.target is target:
                return arc
        return None

    def __iter__(self) -> Iterator[State]:
        return iter(self.states.values())


class State:
    """ State.

    Attributes
    ----------
    id : str
        An identifier.
    preset : list of Arc
        Incoming arcs.
    postset : list of Arc
        Outgoing arcs.
    """

    def __init__(self, state_id: str, ts: TransitionSystem) -> None:
        self.id: str = state_id
        self.ts: TransitionSystem = ts
        self.preset: list[Arc] = []
        self.postset: list[Arc] = []

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return "State({})".format(self.id)

    def __lt__(self, other: State) -> bool:
        return self.id < other.id

    def postset_by_label(self, label: str) -> list[State]:
        """ Successors reached with a given label.
        """
        return [arc.target for arc in self.postset if arc.label == label]

    def enabled_labels(self) -> set[str]:
        """ Labels of the outgoing arcs.
        """
        return {arc.label for arc in self.postset}


class Arc:
    """ Labeled edge.

    Attributes
    ----------
    source : State
        Source state.
    label : str
        Label.
    target : State
        Target state.
    """

    def __init__(self, source: State, label: str, target: State) -> None:
        self.source: State = source
        self.label: str = label
        self.target: State = target

    def __str__(self) -> str:
        return "{} --{}--> {}".format(self.source.id, self.label, self.target.id)

    def __repr__(self) -> str:
        return "Arc({}, {}, {})".format(self.source.id, self.label, self.target.id)


class Event:
    """ Event of the alphabet.

    Attributes
    ----------
    label : str
        Label.
    location : str, optional
        Location of the event (distributed synthesis).
    """

    def __init__(self, label: str, location: Optional[str] = None) -> None:
        self.label: str = label
        self.location: Optional[str] = location

    def __str__(self) -> str:
        return self.label if self.location is None else "{}@{}".format(self.label, self.location)
