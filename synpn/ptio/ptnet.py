"""
Petri Net Module

Synthesized nets, one place per region.

Output file format: .net
Standard: http://projects.laas.fr/tina//manuals/formats.html

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

from synpn.synthesis.region import Region


class PetriNet:
    """ Petri net.

    Attributes
    ----------
    id : str
        Identifier.
    places : dict of str: Place
        Finite set of places (identified by names).
    transitions : dict of str: Transition
        Finite set of transitions (identified by names).
    """

    def __init__(self, net_id: str = "") -> None:
        """ Initializer.

        Parameters
        ----------
        net_id : str, optional
            Identifier.
        """
        self.id: str = net_id

        self.places: dict[str, Place] = {}
        self.transitions: dict[str, Transition] = {}

    def __str__(self) -> str:
        """ Petri net to .net format.

        Returns
        -------
        str
            .net format.
        """
        text = "net {}\n".format(self.id)
        text += ''.join(map(str, self.places.values()))
        text += ''.join(map(str, self.transitions.values()))

        return text

    @property
    def initial_marking(self) -> Marking:
        return Marking({place: place.initial_marking for place in self.places.values()})

    def create_place(self, place_id: Optional[str] = None, initial_marking: int = 0, region: Optional[Region] = None) -> Place:
        """ Create a place.

        Parameters
        ----------
        place_id : str, optional
            Identifier, `p<n>` by default.
        initial_marking : int, optional
            Initial marking of the place.
        region : Region, optional
            Region the place comes from.

        Returns
        -------
        Place
            The new place.
        """
        if place_id is None:
            place_id = "p{}".format(len(self.places))
        if place_id in self.places:
            raise ValueError("Place {} already exists".format(place_id))

        place = Place(place_id, initial_marking, region)
        self.places[place_id] = place
        return place

    def create_transition(self, transition_id: str, location: Optional[str] = None) -> Transition:
        """ Get or create a transition.
        """
        transition = self.transitions.get(transition_id)
        if transition is None:
            transition = Transition(transition_id, self, location)
            self.transitions[transition_id] = transition
        return transition

    def add_place_from_region(self, region: Region, place_id: Optional[str] = None) -> Place:
        """ Add the place corresponding to a region.

        Note
        ----
        Every event of the region becomes a transition (even without arcs).
        """
        place = self.create_place(place_id, region.initial_marking, region)
        for index, label in enumerate(region.utility.event_list):
            transition = self.create_transition(label)
            transition.add_arcs(place, region.backward[index], region.forward[index])
        return place

    def is_pure(self) -> bool:
        return all(not (transition.pre.get(place) and transition.post.get(place))
                   for transition in self.transitions.values() for place in transition.connected_places)

    def is_plain(self) -> bool:
        return all(weight <= 1 for transition in self.transitions.values()
                   for weight in list(transition.pre.values()) + list(transition.post.values()))

    def enabled(self, marking: Marking, transition: Transition) -> bool:
        return all(marking.tokens.get(place, 0) >= weight for place, weight in transition.pre.items())

    def fire(self, marking: Marking, transition: Transition) -> Marking:
        """ Marking reached by firing an enabled transition.

        Raises
        ------
        ValueError
            Transition not enabled.
        """
        if not self.enabled(marking, transition):
            raise ValueError("Transition {} is not enabled in{}".format(transition.id, marking))
        tokens = dict(marking.tokens)
        for place, weight in transition.delta.items():
            tokens[place] = tokens.get(place, 0) + weight
        return Marking(tokens)


class Place:
    """ Place.

    Attributes
    ----------
    id : str
        An identifier.
    initial_marking : int
        Initial marking of the place.
    region : Region, optional
        Region the place comes from.
    input_transitions: set of Transition
        Input transitions.
    output_transitions : set of Transition
        Output transitions.
    """

    def __init__(self, place_id: str, initial_marking: int = 0, region: Optional[Region] = None) -> None:
        self.id: str = place_id
        self.initial_marking: int = initial_marking
        self.region: Optional[Region] = region

        self.input_transitions: set[Transition] = set()
        self.output_transitions: set[Transition] = set()

    def __str__(self) -> str:
        """ Place to .net format.

        Returns
        -------
        str
            .net format.
        """
        if self.initial_marking:
            return "pl {} ({})\n".format(self.id, self.initial_marking)
        else:
            return "pl {}\n".format(self.id)


class Transition:
    """ Transition.

    Attributes
    ----------
    id : str
        An identifier.
    pre: dict of Place: int
        Pre vector (firing condition).
    post: dict of Place: int
        Post vector.
    delta: dict of Place: int
        Delta vector (change marking).
    connected_places: list of Place
        Places connected to the transition, in creation order.
    location : str, optional
        Location of the transition.
    ptnet: PetriNet
        Associated Petri net.
    """

    def __init__(self, transition_id: str, ptnet: PetriNet, location: Optional[str] = None) -> None:
        self.id: str = transition_id

        self.pre: dict[Place, int] = {}
        self.post: dict[Place, int] = {}
        self.delta: dict[Place, int] = {}

        self.connected_places: list[Place] = []
        self.location: Optional[str] = location
        self.ptnet: PetriNet = ptnet

    def __str__(self) -> str:
        """ Transition to textual format.

        Returns
        -------
        str
            .net format.
        """
        text = "tr {}".format(self.id)

        for src, weight in self.pre.items():
            text += ' ' + self.str_arc(src, weight)

        text += ' ->'

        for dest, weight in self.post.items():
            text += ' ' + self.str_arc(dest, weight)

        text += '\n'
        return text

    def str_arc(self, place: Place, weight: int) -> str:
        """ Arc to textual format.

        Parameters
        ----------
        place : place
            Connected place.
        weight : int
            Weight of the arc.

        Returns
        -------
        str
            .net format.
        """
        text = place.id

        if weight > 1:
            text += '*' + str(weight)

        return text

    def add_arcs(self, place: Place, backward: int, forward: int) -> None:
        """ Connect a place with the given weights (zero weights add no arc).
        """
        if backward < 0 or forward < 0:
            raise ValueError("Arc weights must not be negative")

        if backward:
            self.pre[place] = self.pre.get(place, 0) + backward
            place.output_transitions.add(self)
        if forward:
            self.post[place] = self.post.get(place, 0) + forward
            place.input_transitions.add(self)

        if backward or forward:
            if place not in self.connected_places:
                self.connected_places.append(place)
            delta = self.post.get(place, 0) - self.pre.get(place, 0)
            if delta:
                self.delta[place] = delta
            else:
                self.delta.pop(place, None)


class Marking:
    """ Marking.

    Attributes
    ----------
    tokens : dict of Place: int
        Number of tokens associated to the places.
    """

    def __init__(self, tokens: Optional[dict[Place, int]] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        tokens : dict of Place: int, optional
            Number of tokens associated to the places.
        """
        if tokens is None:
            tokens = {}
        self.tokens: dict[Place, int] = tokens

    def __str__(self) -> str:
        """ Marking to textual format.

        Returns
        -------
        str
            .net format.
        """
        text = ""

        for place, marking in self.tokens.items():
            if marking > 0:
                text += " {}({})".format(str(place.id), marking)

        if text == "":
            text = " empty marking"

        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Marking):
            return NotImplemented
        return {place: tokens for place, tokens in self.tokens.items() if tokens} == \
            {place: tokens for place, tokens in other.tokens.items() if tokens}

    def __hash__(self) -> int:
        return hash(frozenset((place.id, tokens) for place, tokens in self.tokens.items() if tokens))
