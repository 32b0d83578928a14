"""
Disjunctive Integer Linear Programming Interface

Integer solutions of a hard system of constraints plus groups of
alternative systems, by branching over the alternatives on top of CBC.

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
from typing import Iterable, Optional, Tuple

import pulp

from synpn.exec.utils import Interrupter, SolverError
from synpn.synthesis.constraints import (Constraint, ConstraintGroup, Divisibility, Inequality,
                                         InequalitySystem, LinearExpression)

Incumbent = Tuple[int, dict[str, int]]


class InequalitySystemSolver:
    """ Solver of disjunctive inequality systems.

    Note
    ----
    Each node of the search solves the hard system plus the alternatives
    chosen so far. A solution satisfying every remaining group becomes the
    incumbent, otherwise the search branches on the first violated group.
    Every alternative is explored unless its node cannot beat the incumbent.

    Dependency: https://github.com/coin-or/pulp (bundles CBC)

    Attributes
    ----------
    objective : LinearExpression
        Minimized expression, must be bounded below by the constraints.
    messages : bool
        Let CBC print its log.
    interrupter : Interrupter, optional
        Cancellation flag, checked once per top-level branch.
    """

    def __init__(self, objective: Optional[LinearExpression] = None, messages: bool = False, interrupter: Optional[Interrupter] = None) -> None:
        self.objective: LinearExpression = objective if objective is not None else LinearExpression()
        self.messages: bool = messages
        self.interrupter: Optional[Interrupter] = interrupter

        self.constraints: list[Constraint] = []
        self.disjunctions: list[ConstraintGroup] = []
        self.scopes: list[tuple[int, int]] = []

        self.solved_problems: int = 0

    def assert_constraints(self, constraints: Iterable[Constraint]) -> None:
        self.constraints.extend(constraints)

    def assert_disjunction(self, group: ConstraintGroup) -> None:
        """ Require at least one alternative of a group.

        Note
        ----
        A group without alternatives is ignored (trivially true),
        a group with a single alternative is asserted as hard constraints.
        """
        if group.is_trivial():
            return
        if group.is_hard():
            self.assert_constraints(group.alternatives[0])
        else:
            self.disjunctions.append(group)

    def push(self) -> None:
        """ Push.

        Note
        ----
        Saves the current number of constraints and groups.
        """
        self.scopes.append((len(self.constraints), len(self.disjunctions)))

    def pop(self) -> None:
        """ Pop.

        Note
        ----
        Removes the constraints and groups asserted since the last push.
        """
        if not self.scopes:
            raise SolverError("Pop without push")
        nb_constraints, nb_disjunctions = self.scopes.pop()
        del self.constraints[nb_constraints:]
        del self.disjunctions[nb_disjunctions:]

    def find_solution(self) -> Optional[dict[str, int]]:
        """ Find an integer solution.

        Returns
        -------
        dict of str: int, optional
            Value of the unknowns (absent ones are 0), `None` if infeasible.

        Raises
        ------
        InterruptedSynthesis
            Cancellation requested.
        SolverError
            CBC failure.
        """
        best = self._branch(list(self.constraints), list(self.disjunctions), 0, None)
        solution = best[1] if best is not None else None

        if solution is not None:
            if not InequalitySystem(self.constraints).holds(solution) or not all(group.holds(solution) for group in self.disjunctions):
                log.warning("[ILP] Solution failed the exact check")
                raise SolverError("CBC solution does not satisfy the constraints")

        return solution

    def _branch(self, chosen: list[Constraint], groups: list[ConstraintGroup], depth: int, incumbent: Optional[Incumbent]) -> Optional[Incumbent]:
        """ Branch and bound over the alternatives of the violated groups.

        Note
        ----
        The optimum of a node bounds the optimum of all its children,
        a node that cannot beat the incumbent is pruned.

        Returns
        -------
        tuple of int, dict of str: int, optional
            Best objective value and solution found so far.
        """
        solution = self.solve(chosen)
        if solution is None:
            return incumbent

        value = self.objective.evaluate(solution)
        if incumbent is not None and value >= incumbent[0]:
            return incumbent

        violated = next((position for position, group in enumerate(groups) if not group.holds(solution)), None)
        if violated is None:
            return value, solution

        group = groups[violated]
        remaining = groups[:violated] + groups[violated + 1:]
        log.debug("[ILP] Branching on {} (depth {})".format(group, depth))

        for alternative in group.alternatives:
            if depth == 0 and self.interrupter is not None:
                self.interrupter.throw_if_requested()

            incumbent = self._branch(chosen + list(alternative), remaining, depth + 1, incumbent)

        return incumbent

    def solve(self, constraints: list[Constraint]) -> Optional[dict[str, int]]:
        """ Solve a conjunction of constraints with CBC.

        Parameters
        ----------
        constraints : list of Constraint
            Hard constraints.

        Returns
        -------
        dict of str: int, optional
            Optimal solution, `None` if infeasible.
        """
        prob = pulp.LpProblem("Region", pulp.LpMinimize)
        ilp_vars: dict[str, pulp.LpVariable] = {}

        def variable(name: str) -> pulp.LpVariable:
            if name not in ilp_vars:
                ilp_vars[name] = pulp.LpVariable(name, cat=pulp.LpInteger)
            return ilp_vars[name]

        def affine(expression: LinearExpression):
            return pulp.lpSum([coef * variable(var) for var, coef in sorted(expression.coefficients.items())]) + expression.constant

        prob += affine(self.objective)

        for index, constraint in enumerate(constraints):
            if isinstance(constraint, Divisibility):
                quotient = pulp.LpVariable("q_{}".format(index), cat=pulp.LpInteger)
                prob += variable(constraint.variable) - constraint.k * quotient == 0
                continue

            inequality: Inequality = constraint.non_strict()
            if not inequality.expression.coefficients:
                if inequality.holds({}):
                    continue
                return None

            lhs = affine(inequality.expression)
            if inequality.comparator == '<=':
                prob += lhs <= 0
            elif inequality.comparator == '>=':
                prob += lhs >= 0
            else:
                prob += lhs == 0

        time_limit = self.interrupter.remaining() if self.interrupter is not None else None
        if time_limit is not None:
            status = prob.solve(pulp.PULP_CBC_CMD(msg=self.messages, timeLimit=max(1, int(time_limit))))
        else:
            status = prob.solve(pulp.PULP_CBC_CMD(msg=self.messages))
        self.solved_problems += 1

        if status == pulp.LpStatusOptimal:
            solution = {}
            for name, ilp_var in ilp_vars.items():
                value = pulp.value(ilp_var)
                solution[name] = int(round(value)) if value is not None else 0
            return solution

        if status in (pulp.LpStatusInfeasible, pulp.LpStatusUndefined):
            return None

        if self.interrupter is not None:
            self.interrupter.throw_if_requested()

        log.warning("[ILP] CBC returned status {}".format(pulp.LpStatus[status]))
        raise SolverError("CBC returned status {}".format(pulp.LpStatus[status]))
