"""
Petri Net Properties

Structural restrictions requested on the synthesized net,
and derivation of the event locations.

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

from copy import copy
from math import lcm
from typing import Optional

from synpn.exec.utils import MissingLocationError, UnsupportedPropertiesError
from synpn.ptio.lts import TransitionSystem

FLAGS = ['pure', 'plain', 'tnet', 'marked_graph', 'output_nonbranching', 'conflict_free',
         'homogeneous', 'distributable', 'merge_free', 'behaviourally_conflict_free',
         'binary_conflict_free', 'equal_conflict']


class PNProperties:
    """ Immutable set of structural properties.

    Note
    ----
    Every setter returns a new instance.
    Conflict-freeness implies plainness.

    Attributes
    ----------
    k_bounded : int, optional
        Bound on the number of tokens per place.
    k_marking : int, optional
        Every initial marking is a multiple of k.
    """

    def __init__(self, k_bounded: Optional[int] = None, k_marking: Optional[int] = None, **flags: bool) -> None:
        """ Initializer.

        Parameters
        ----------
        k_bounded : int, optional
            Bound on the number of tokens per place.
        k_marking : int, optional
            Every initial marking must be a multiple of `k_marking`.
        **flags
            Boolean properties (see `FLAGS`).

        Raises
        ------
        ValueError
            Unknown flag or invalid integer parameter.
        """
        unknown = set(flags) - set(FLAGS)
        if unknown:
            raise ValueError("Unknown properties: {}".format(', '.join(sorted(unknown))))
        if k_bounded is not None and k_bounded < 0:
            raise ValueError("k-boundedness requires k >= 0")
        if k_marking is not None and k_marking < 1:
            raise ValueError("k-marking requires k >= 1")

        self._k_bounded: Optional[int] = k_bounded
        self._k_marking: Optional[int] = k_marking if k_marking != 1 else None
        self._flags: dict[str, bool] = {flag: bool(flags.get(flag, False)) for flag in FLAGS}

    def __getattr__(self, name: str) -> bool:
        if name.startswith('_'):
            raise AttributeError(name)
        if name in FLAGS:
            if name == 'plain':
                return self._flags['plain'] or self._flags['conflict_free']
            return self._flags[name]
        raise AttributeError(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PNProperties):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        """ Properties to textual format.

        Returns
        -------
        str
            Comma separated list, `none` if empty.
        """
        names = []
        if self._k_bounded == 1:
            names.append("safe")
        elif self._k_bounded is not None:
            names.append("{}-bounded".format(self._k_bounded))
        if self._k_marking is not None:
            names.append("{}-marking".format(self._k_marking))
        names += [flag.replace('_', '-') for flag in FLAGS if self._flags[flag]]
        return ', '.join(names) if names else "none"

    def __repr__(self) -> str:
        return "PNProperties({})".format(self)

    def _key(self) -> tuple:
        return (self._k_bounded, self._k_marking, tuple(getattr(self, flag) for flag in FLAGS))

    def _with(self, **changes) -> PNProperties:
        result = copy(self)
        result._flags = dict(self._flags)
        for name, value in changes.items():
            if name in FLAGS:
                result._flags[name] = value
            else:
                setattr(result, '_' + name, value)
        return result

    @property
    def k_bounded(self) -> Optional[int]:
        return self._k_bounded

    @property
    def k_marking(self) -> Optional[int]:
        return self._k_marking

    @property
    def safe(self) -> bool:
        return self._k_bounded is not None and self._k_bounded <= 1

    def is_k_bounded(self, k: Optional[int] = None) -> bool:
        """ Check if k-boundedness (for some k, or for at most `k`) is required.
        """
        if self._k_bounded is None:
            return False
        return k is None or self._k_bounded <= k

    def require_k_bounded(self, k: int) -> PNProperties:
        """ Require at least k-boundedness (the smaller bound wins).
        """
        if k < 0:
            raise ValueError("k-boundedness requires k >= 0")
        if self.is_k_bounded(k):
            return self
        return self._with(k_bounded=k)

    def require_safe(self) -> PNProperties:
        return self.require_k_bounded(1)

    def require_k_marking(self, k: int) -> PNProperties:
        """ Require every initial marking to be a multiple of `k` (combined by lcm).
        """
        if k < 1:
            raise ValueError("k-marking requires k >= 1")
        current = self._k_marking or 1
        combined = lcm(current, k)
        if combined == current:
            return self
        return self._with(k_marking=combined)

    def set(self, name: str, value: bool = True) -> PNProperties:
        """ Return a copy with a boolean property set to `value`.

        Raises
        ------
        ValueError
            Unknown property.
        """
        if name not in FLAGS:
            raise ValueError("Unknown property: {}".format(name))
        return self._with(**{name: value})

    def set_pure(self, value: bool = True) -> PNProperties:
        return self.set('pure', value)

    def set_plain(self, value: bool = True) -> PNProperties:
        return self.set('plain', value)

    def set_tnet(self, value: bool = True) -> PNProperties:
        return self.set('tnet', value)

    def set_marked_graph(self, value: bool = True) -> PNProperties:
        return self.set('marked_graph', value)

    def set_output_nonbranching(self, value: bool = True) -> PNProperties:
        return self.set('output_nonbranching', value)

    def set_conflict_free(self, value: bool = True) -> PNProperties:
        return self.set('conflict_free', value)

    def set_homogeneous(self, value: bool = True) -> PNProperties:
        return self.set('homogeneous', value)

    def set_distributable(self, value: bool = True) -> PNProperties:
        return self.set('distributable', value)

    def contains_all(self, other: PNProperties) -> bool:
        """ Check if every requirement of `other` is also enforced by this instance.

        Parameters
        ----------
        other : PNProperties
            Properties to compare with.

        Returns
        -------
        bool
            Inclusion status.
        """
        if other.k_bounded is not None and not self.is_k_bounded(other.k_bounded):
            return False
        if other.k_marking is not None and (self._k_marking is None or self._k_marking % other.k_marking):
            return False
        return all(getattr(self, flag) for flag in FLAGS if getattr(other, flag))


def location_map(ts: TransitionSystem, properties: PNProperties, locations: Optional[dict[str, str]] = None) -> Optional[dict[str, str]]:
    """ Derive the location of every event.

    Parameters
    ----------
    ts : TransitionSystem
        Input transition system, its events may carry a location.
    properties : PNProperties
        Requested properties.
    locations : dict of str: str, optional
        Explicit locations (by label), override the ones of the events.

    Returns
    -------
    dict of str: str, optional
        Location of each label, `None` when no location constraint applies.

    Raises
    ------
    MissingLocationError
        Some events have a location and others do not.
    UnsupportedPropertiesError
        Output-nonbranching conflicts with the given locations.
    """
    mapping = {label: event.location for label, event in ts.events.items() if event.location is not None}
    if locations:
        unknown = set(locations) - set(ts.events)
        if unknown:
            raise ValueError("Unknown events: {}".format(', '.join(sorted(unknown))))
        mapping.update(locations)

    if mapping and len(mapping) != len(ts.events):
        missing = sorted(set(ts.events) - set(mapping))
        raise MissingLocationError("Events without location: {}".format(', '.join(missing)))

    if properties.output_nonbranching:
        if len(set(mapping.values())) != len(mapping):
            raise UnsupportedPropertiesError("Output-nonbranching requires every event in its own location")
        return {label: label for label in ts.events}

    if not mapping:
        if properties.distributable and ts.events:
            raise MissingLocationError("Distributable synthesis requires a location for every event")
        return None

    # A single location does not restrict anything
    if len(set(mapping.values())) == 1:
        return None

    return mapping
