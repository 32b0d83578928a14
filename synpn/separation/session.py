"""
Separation Sessions

Backend selection and common interface of the separation engines.

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

import logging as log
from enum import Enum
from typing import Iterable, Optional, Protocol

from synpn.exec.config import Configuration
from synpn.ptio.lts import State
from synpn.ptio.properties import PNProperties, location_map
from synpn.separation.ilp import IlpSession
from synpn.separation.queries import Query
from synpn.separation.smt import SmtSession
from synpn.synthesis.constraints import ConstraintBuilder
from synpn.synthesis.region import Region
from synpn.synthesis.utility import RegionUtility


class Backend(Enum):
    """ Backend enum.

        Note
        ----
        SMT -> incremental assertions in z3
        ILP -> inequality systems with CBC
    """
    SMT = 1
    ILP = 2

    @classmethod
    def from_name(cls, name: str) -> Backend:
        """ Backend from its name (`smt` or `ilp`, case insensitive).

        Raises
        ------
        ValueError
            Unknown backend.
        """
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError("Unknown backend: {}".format(name)) from None


class Session(Protocol):
    """ Separation session.

    Note
    ----
    The constraint groups are built once at creation,
    every query is solved in its own scope.
    Not thread-safe.
    """

    utility: RegionUtility
    properties: PNProperties
    builder: ConstraintBuilder

    def solve(self, query: Query) -> Optional[Region]:
        ...

    def separate_event(self, state: State, label: str) -> Optional[Region]:
        ...

    def separate_states(self, state: State, other: State) -> Optional[Region]:
        ...

    def close(self) -> None:
        ...


def create_session(backend: Backend, utility: RegionUtility, properties: PNProperties, config: Configuration, locations: Optional[dict[str, str]] = None, families: Optional[Iterable[str]] = None) -> Session:
    """ Prepare a separation session.

    Parameters
    ----------
    backend : Backend
        Solving technology.
    utility : RegionUtility
        Event indexing and reachability.
    properties : PNProperties
        Requested properties.
    config : Configuration
        Process configuration.
    locations : dict of str: str, optional
        Explicit event locations (by label).
    families : iterable of str, optional
        Restrict the constraint families (region axioms are always kept).

    Returns
    -------
    Session
        Ready-to-use session.

    Raises
    ------
    MissingLocationError
        Partial location map.
    UnsupportedPropertiesError
        Properties conflicting with the location map.
    """
    mapping = location_map(utility.ts, properties, locations)
    location_list = utility.location_list(mapping)

    log.debug("[SYNTHESIS] {} session for properties: {}".format(backend.name, properties))

    if backend is Backend.SMT:
        return SmtSession(utility, properties, config, location_list, families)
    if backend is Backend.ILP:
        return IlpSession(utility, properties, config, location_list, families)

    raise ValueError("Unknown backend: {}".format(backend))
