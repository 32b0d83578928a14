"""
Inequality System Separation

Every constraint is an explicit inequality, the disjunctive families are
handed to the branching ILP solver as groups of alternatives.

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
from synpn.exec.utils import UnreachableError
from synpn.interfaces.ilp import InequalitySystemSolver
from synpn.ptio.lts import State
from synpn.ptio.properties import PNProperties
from synpn.separation.queries import EventSeparation, Query, StateSeparation
from synpn.synthesis.constraints import ConstraintBuilder, ConstraintGroup, Inequality, LinearExpression, ge
from synpn.synthesis.region import Region
from synpn.synthesis.utility import RegionUtility


class IlpSession:
    """ Separation session backed by CBC.

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
    solver : InequalitySystemSolver
        Disjunctive ILP solver.
    """

    def __init__(self, utility: RegionUtility, properties: PNProperties, config: Configuration, locations: Optional[list[str]] = None, families: Optional[Iterable[str]] = None) -> None:
        config.setup_logging()

        self.utility: RegionUtility = utility
        self.properties: PNProperties = properties
        self.config: Configuration = config

        self.builder: ConstraintBuilder = ConstraintBuilder(utility, properties, locations)
        self.groups: list[ConstraintGroup] = self.builder.build(families)

        self.solver: InequalitySystemSolver = InequalitySystemSolver(self.objective(), config.cbc_messages, config.interrupter)
        self.solver.assert_constraints(self.magnitudes())
        for group in self.groups:
            self.solver.assert_disjunction(group)

    def __enter__(self) -> IlpSession:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """ Nothing to release (CBC runs once per problem).
        """
        pass

    @staticmethod
    def magnitude(index: int) -> LinearExpression:
        """ Upper bound of the absolute weight `|w<index>|` of a pure region.
        """
        return LinearExpression.variable("u{}".format(index))

    def magnitudes(self) -> list[Inequality]:
        """ Constraints `u<i> >= w<i>` and `u<i> >= -w<i>` for pure regions.

        Note
        ----
        Pure weights are unbounded in both directions,
        minimizing the magnitudes keeps the objective bounded below.
        """
        variables = self.builder.variables
        if not variables.pure:
            return []

        constraints = []
        for index in range(self.utility.number_of_events):
            constraints.append(ge(self.magnitude(index), variables.effect(index)))
            constraints.append(ge(self.magnitude(index), -variables.effect(index)))
        return constraints

    def objective(self) -> LinearExpression:
        """ Minimized expression: the initial marking plus the weights.
        """
        variables = self.builder.variables
        objective = variables.initial()
        for index in range(self.utility.number_of_events):
            if variables.pure:
                objective = objective + self.magnitude(index)
            else:
                objective = objective + variables.backward(index) + variables.forward(index)
        return objective

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
        """
        self.config.interrupter.throw_if_requested()

        try:
            query_constraints = query.constraints(self.builder)
        except UnreachableError:
            return None

        log.debug("[ILP-SEPARATION] Query {}".format(query))

        self.solver.push()
        try:
            if isinstance(query_constraints, ConstraintGroup):
                self.solver.assert_disjunction(query_constraints)
            else:
                self.solver.assert_constraints(query_constraints)
            solution = self.solver.find_solution()
        finally:
            self.solver.pop()

        if solution is None:
            log.debug("[ILP-SEPARATION] No region for {}".format(query))
            return None

        region = self.builder.variables.to_region(solution)
        log.debug("[ILP-SEPARATION] Region {} for {}".format(region, query))
        return region

    def separate_event(self, state: State, label: str) -> Optional[Region]:
        return self.solve(EventSeparation(state, label))

    def separate_states(self, state: State, other: State) -> Optional[Region]:
        return self.solve(StateSeparation(state, other))
