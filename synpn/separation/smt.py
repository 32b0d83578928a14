"""
Incremental-Assertion Separation

The region constraints are defined once as a boolean function inside z3,
each query is solved in its own scope.

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
from typing import Iterable, Optional

from synpn.exec.config import Configuration
from synpn.exec.utils import InterruptedSynthesis, UnreachableError
from synpn.interfaces.z3 import Z3
from synpn.ptio.lts import State
from synpn.ptio.properties import PNProperties
from synpn.separation.queries import EventSeparation, Query, StateSeparation
from synpn.synthesis.constraints import ConstraintBuilder, ConstraintGroup
from synpn.synthesis.region import Region
from synpn.synthesis.utility import RegionUtility


class SmtSession:
    """ Separation session backed by a z3 process.

    Attributes
    ----------
    utility : RegionUtility
        Event indexing and reachability.
    properties : PNProperties
        Requested properties.
    builder : ConstraintBuilder
        Constraint builder.
    groups : list of ConstraintGroup
        Region constraints.
    solver : Z3
        z3 process.
    """

    def __init__(self, utility: RegionUtility, properties: PNProperties, config: Configuration, locations: Optional[list[str]] = None, families: Optional[Iterable[str]] = None) -> None:
        """ Initializer.

        Parameters
        ----------
        utility : RegionUtility
            Event indexing and reachability.
        properties : PNProperties
            Requested properties.
        config : Configuration
            Process configuration.
        locations : list of str, optional
            Location by event index.
        families : iterable of str, optional
            Restrict the constraint families.
        """
        config.setup_logging()

        self.utility: RegionUtility = utility
        self.properties: PNProperties = properties
        self.config: Configuration = config

        self.builder: ConstraintBuilder = ConstraintBuilder(utility, properties, locations)
        self.groups: list[ConstraintGroup] = self.builder.build(families)
        self.names: list[str] = self.builder.variables.names()

        self.solver: Z3 = Z3(config.z3_path, config.debug)
        self.solver.write(self.smtlib_declare())
        self.solver.write(self.smtlib_define_region())

    def __enter__(self) -> SmtSession:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """ Kill the z3 process.
        """
        if not self.solver.aborted:
            self.solver.kill()

    def smtlib_declare(self) -> str:
        """ Declare the unknowns.

        Returns
        -------
        str
            SMT-LIB format.
        """
        return ''.join("(declare-const {} Int)\n".format(name) for name in self.names)

    def smtlib_define_region(self) -> str:
        """ Define the `is-region` predicate from the constraint groups.

        Returns
        -------
        str
            SMT-LIB format.
        """
        parameters = ' '.join("({} Int)".format(name) for name in self.names)
        body = ' '.join(group.smtlib() for group in self.groups)
        if len(self.groups) > 1:
            body = "(and {})".format(body)
        return "(define-fun is-region ({}) Bool {})\n".format(parameters, body)

    def smtlib_call_region(self) -> str:
        return "(assert (is-region {}))\n".format(' '.join(self.names))

    def solve(self, query: Query) -> Optional[Region]:
        """ Find a region solving a separation query.

        Parameters
        ----------
        query : Query
            Event or state separation.

        Returns
        -------
        Region, optional
            A separating region, `None` if there is none (or if a state is unreachable).

        Raises
        ------
        InterruptedSynthesis
            Cancellation requested.
        SolverError
            z3 failure.
        """
        interrupter = self.config.interrupter
        interrupter.throw_if_requested()

        try:
            query_constraints = query.constraints(self.builder)
        except UnreachableError:
            return None

        log.debug("[SMT-SEPARATION] Query {}".format(query))

        self.solver.push()
        remaining = interrupter.remaining()
        if remaining is not None:
            self.solver.set_timeout(max(1, int(remaining * 1000)))
        self.solver.write(self.smtlib_call_region())
        self.solver.write("(assert {})\n".format(query_constraints.smtlib()))

        sat = self.solver.check_sat(no_check=True)

        if sat is None:
            self.solver.pop()
            if interrupter.is_requested():
                raise InterruptedSynthesis("Synthesis interrupted")
            self.solver.abort("unknown verdict")

        if not sat:
            self.solver.pop()
            log.debug("[SMT-SEPARATION] No region for {}".format(query))
            return None

        values = self.solver.get_values(self.names)
        self.solver.pop()

        region = self.builder.variables.to_region(values)
        log.debug("[SMT-SEPARATION] Region {} for {}".format(region, query))
        return region

    def separate_event(self, state: State, label: str) -> Optional[Region]:
        return self.solve(EventSeparation(state, label))

    def separate_states(self, state: State, other: State) -> Optional[Region]:
        return self.solve(StateSeparation(state, other))
