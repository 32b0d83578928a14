"""
Constraint Builder

Translation of the requested properties into constraint groups
over the unknowns of a region.

Unknowns:
- `m0`: initial marking,
- `w<i>`: effective weight of event i (pure regions),
- `b<i>`, `f<i>`: backward and forward weights of event i (impure regions).

Every constraint is linear (plus divisibility), so that the same groups
can be handed to an SMT solver or to an ILP solver.

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
from itertools import combinations
from typing import Iterable, Optional, Union

from synpn.ptio.lts import State
from synpn.ptio.properties import PNProperties
from synpn.synthesis.parikh import ParikhVector
from synpn.synthesis.region import Region, RegionBuilder
from synpn.synthesis.utility import RegionUtility

REGION = 'region'
K_BOUNDED = 'k-bounded'
K_MARKING = 'k-marking'
PLAIN = 'plain'
DISTRIBUTABLE = 'distributable'
CONFLICT_FREE = 'conflict-free'
TNET = 'tnet'
MARKED_GRAPH = 'marked-graph'
HOMOGENEOUS = 'homogeneous'
MERGE_FREE = 'merge-free'
BEHAVIOURALLY_CONFLICT_FREE = 'behaviourally-conflict-free'
BINARY_CONFLICT_FREE = 'binary-conflict-free'
EQUAL_CONFLICT = 'equal-conflict'

COMPARATORS = ['<=', '>=', '=', '<', '>']


def smtlib_int(value: int) -> str:
    """ Integer literal (SMT-LIB has no negative literals).
    """
    return str(value) if value >= 0 else "(- {})".format(-value)


class LinearExpression:
    """ Affine expression over named integer unknowns.

    Attributes
    ----------
    coefficients : dict of str: int
        Non-zero coefficients.
    constant : int
        Constant term.
    """

    def __init__(self, coefficients: Optional[dict[str, int]] = None, constant: int = 0) -> None:
        if coefficients is None:
            coefficients = {}
        self.coefficients: dict[str, int] = {var: coef for var, coef in coefficients.items() if coef != 0}
        self.constant: int = constant

    @classmethod
    def variable(cls, name: str, coefficient: int = 1) -> LinearExpression:
        return cls({name: coefficient})

    def __add__(self, other: Union[LinearExpression, int]) -> LinearExpression:
        other = as_expression(other)
        coefficients = dict(self.coefficients)
        for var, coef in other.coefficients.items():
            coefficients[var] = coefficients.get(var, 0) + coef
        return LinearExpression(coefficients, self.constant + other.constant)

    __radd__ = __add__

    def __neg__(self) -> LinearExpression:
        return self * -1

    def __sub__(self, other: Union[LinearExpression, int]) -> LinearExpression:
        return self + (-as_expression(other))

    def __rsub__(self, other: int) -> LinearExpression:
        return as_expression(other) - self

    def __mul__(self, factor: int) -> LinearExpression:
        return LinearExpression({var: coef * factor for var, coef in self.coefficients.items()}, self.constant * factor)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinearExpression):
            return NotImplemented
        return self.coefficients == other.coefficients and self.constant == other.constant

    def __hash__(self) -> int:
        return hash((frozenset(self.coefficients.items()), self.constant))

    def __str__(self) -> str:
        terms = ["{}*{}".format(coef, var) if coef != 1 else var for var, coef in sorted(self.coefficients.items())]
        if self.constant or not terms:
            terms.append(str(self.constant))
        return " + ".join(terms)

    def variables(self) -> set[str]:
        return set(self.coefficients)

    def evaluate(self, assignment: dict[str, int]) -> int:
        return self.constant + sum(coef * assignment.get(var, 0) for var, coef in self.coefficients.items())

    def smtlib(self) -> str:
        """ Variable part of the expression (the constant is left out).

        Returns
        -------
        str
            SMT-LIB format.
        """
        terms = []
        for var, coef in sorted(self.coefficients.items()):
            terms.append(var if coef == 1 else "(* {} {})".format(smtlib_int(coef), var))

        if not terms:
            return "0"
        if len(terms) == 1:
            return terms[0]
        return "(+ {})".format(' '.join(terms))


def as_expression(value: Union[LinearExpression, int]) -> LinearExpression:
    if isinstance(value, LinearExpression):
        return value
    return LinearExpression(constant=value)


class Inequality:
    """ Constraint `expression <comparator> 0`.

    Attributes
    ----------
    expression : LinearExpression
        Left-hand side.
    comparator : str
        One of `<=`, `>=`, `=`, `<`, `>`.
    """

    def __init__(self, expression: LinearExpression, comparator: str) -> None:
        if comparator not in COMPARATORS:
            raise ValueError("Unknown comparator {}".format(comparator))
        self.expression: LinearExpression = expression
        self.comparator: str = comparator

    def __str__(self) -> str:
        return "{} {} 0".format(self.expression, self.comparator)

    def __repr__(self) -> str:
        return "Inequality({})".format(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inequality):
            return NotImplemented
        return self.expression == other.expression and self.comparator == other.comparator

    def __hash__(self) -> int:
        return hash((self.expression, self.comparator))

    def variables(self) -> set[str]:
        return self.expression.variables()

    def holds(self, assignment: dict[str, int]) -> bool:
        value = self.expression.evaluate(assignment)
        if self.comparator == '<=':
            return value <= 0
        if self.comparator == '>=':
            return value >= 0
        if self.comparator == '=':
            return value == 0
        if self.comparator == '<':
            return value < 0
        return value > 0

    def non_strict(self) -> Inequality:
        """ Equivalent non-strict constraint over the integers.
        """
        if self.comparator == '<':
            return Inequality(self.expression + 1, '<=')
        if self.comparator == '>':
            return Inequality(self.expression - 1, '>=')
        return self

    def smtlib(self) -> str:
        """ Constraint.

        Returns
        -------
        str
            SMT-LIB format.
        """
        return "({} {} {})".format(self.comparator, self.expression.smtlib(), smtlib_int(-self.expression.constant))


def le(lhs: Union[LinearExpression, int], rhs: Union[LinearExpression, int]) -> Inequality:
    return Inequality(as_expression(lhs) - rhs, '<=')


def ge(lhs: Union[LinearExpression, int], rhs: Union[LinearExpression, int]) -> Inequality:
    return Inequality(as_expression(lhs) - rhs, '>=')


def eq(lhs: Union[LinearExpression, int], rhs: Union[LinearExpression, int]) -> Inequality:
    return Inequality(as_expression(lhs) - rhs, '=')


def lt(lhs: Union[LinearExpression, int], rhs: Union[LinearExpression, int]) -> Inequality:
    return Inequality(as_expression(lhs) - rhs, '<')


def gt(lhs: Union[LinearExpression, int], rhs: Union[LinearExpression, int]) -> Inequality:
    return Inequality(as_expression(lhs) - rhs, '>')


class Divisibility:
    """ Constraint `variable` is a multiple of `k`.
    """

    def __init__(self, variable: str, k: int) -> None:
        if k < 1:
            raise ValueError("Divisor must be positive")
        self.variable: str = variable
        self.k: int = k

    def __str__(self) -> str:
        return "{} % {} = 0".format(self.variable, self.k)

    def variables(self) -> set[str]:
        return {self.variable}

    def holds(self, assignment: dict[str, int]) -> bool:
        return assignment.get(self.variable, 0) % self.k == 0

    def smtlib(self) -> str:
        return "(= (mod {} {}) 0)".format(self.variable, self.k)


Constraint = Union[Inequality, Divisibility]


class InequalitySystem:
    """ Conjunction of constraints.
    """

    def __init__(self, constraints: Optional[Iterable[Constraint]] = None) -> None:
        self.constraints: list[Constraint] = list(constraints) if constraints is not None else []

    def __len__(self) -> int:
        return len(self.constraints)

    def __iter__(self):
        return iter(self.constraints)

    def __str__(self) -> str:
        return "\n".join(map(str, self.constraints))

    def add(self, *constraints: Constraint) -> InequalitySystem:
        self.constraints.extend(constraints)
        return self

    def variables(self) -> set[str]:
        return set().union(*(constraint.variables() for constraint in self.constraints))

    def holds(self, assignment: dict[str, int]) -> bool:
        return all(constraint.holds(assignment) for constraint in self.constraints)

    def smtlib(self) -> str:
        if not self.constraints:
            return "true"
        if len(self.constraints) == 1:
            return self.constraints[0].smtlib()
        return "(and {})".format(' '.join(constraint.smtlib() for constraint in self.constraints))


class ConstraintGroup:
    """ Disjunction of alternative systems, tagged with the property it comes from.

    Note
    ----
    A hard conjunction is a group with exactly one alternative.
    A group without alternatives is trivially satisfied.

    Attributes
    ----------
    family : str
        Property family.
    alternatives : list of InequalitySystem
        At least one of them must hold.
    """

    def __init__(self, family: str, alternatives: Iterable[InequalitySystem]) -> None:
        self.family: str = family
        self.alternatives: list[InequalitySystem] = list(alternatives)

    @classmethod
    def hard(cls, family: str, constraints: Iterable[Constraint]) -> ConstraintGroup:
        return cls(family, [InequalitySystem(constraints)])

    def __str__(self) -> str:
        return "{}: {} alternative(s)".format(self.family, len(self.alternatives))

    def is_hard(self) -> bool:
        return len(self.alternatives) == 1

    def is_trivial(self) -> bool:
        return not self.alternatives

    def holds(self, assignment: dict[str, int]) -> bool:
        if not self.alternatives:
            return True
        return any(alternative.holds(assignment) for alternative in self.alternatives)

    def smtlib(self) -> str:
        if not self.alternatives:
            return "true"
        if len(self.alternatives) == 1:
            return self.alternatives[0].smtlib()
        return "(or {})".format(' '.join(alternative.smtlib() for alternative in self.alternatives))


class RegionVariables:
    """ Unknowns of a region and the linear atoms built on them.

    Note
    ----
    In pure mode, `b = max(0, -w)` and `f = max(0, w)`,
    atoms on backward/forward weights are rewritten on `w`.

    Attributes
    ----------
    utility : RegionUtility
        Event indexing.
    pure : bool
        Pure mode flag.
    """

    def __init__(self, utility: RegionUtility, pure: bool) -> None:
        self.utility: RegionUtility = utility
        self.pure: bool = pure

    @staticmethod
    def initial() -> LinearExpression:
        return LinearExpression.variable('m0')

    def names(self) -> list[str]:
        """ Unknowns, `m0` first then by event index.
        """
        names = ['m0']
        for index in range(self.utility.number_of_events):
            names += ["w{}".format(index)] if self.pure else ["b{}".format(index), "f{}".format(index)]
        return names

    def effect(self, index: int) -> LinearExpression:
        if self.pure:
            return LinearExpression.variable("w{}".format(index))
        return LinearExpression({"f{}".format(index): 1, "b{}".format(index): -1})

    def backward(self, index: int) -> LinearExpression:
        if self.pure:
            raise ValueError("Pure regions have no backward unknowns")
        return LinearExpression.variable("b{}".format(index))

    def forward(self, index: int) -> LinearExpression:
        if self.pure:
            raise ValueError("Pure regions have no forward unknowns")
        return LinearExpression.variable("f{}".format(index))

    def evaluate(self, parikh: ParikhVector) -> LinearExpression:
        expression = LinearExpression()
        for index, count in parikh:
            expression = expression + self.effect(index) * count
        return expression

    def marking(self, state: State) -> LinearExpression:
        """ Marking of a reachable state (raises `UnreachableError` otherwise).
        """
        return self.initial() + self.evaluate(self.utility.reaching_parikh_vector(state))

    def backward_zero(self, index: int) -> Inequality:
        if self.pure:
            return ge(self.effect(index), 0)
        return eq(self.backward(index), 0)

    def forward_zero(self, index: int) -> Inequality:
        if self.pure:
            return le(self.effect(index), 0)
        return eq(self.forward(index), 0)

    def backward_positive(self, index: int) -> Inequality:
        if self.pure:
            return le(self.effect(index), -1)
        return ge(self.backward(index), 1)

    def forward_positive(self, index: int) -> Inequality:
        if self.pure:
            return ge(self.effect(index), 1)
        return ge(self.forward(index), 1)

    def backward_at_most(self, index: int, k: int) -> Inequality:
        if self.pure:
            return ge(self.effect(index), -k)
        return le(self.backward(index), k)

    def forward_at_most(self, index: int, k: int) -> Inequality:
        if self.pure:
            return le(self.effect(index), k)
        return le(self.forward(index), k)

    def enables(self, marking: LinearExpression, index: int) -> list[Inequality]:
        """ Constraints stating that `marking` enables event `index`.
        """
        if self.pure:
            return [ge(marking, 0), ge(marking + self.effect(index), 0)]
        return [ge(marking - self.backward(index), 0)]

    def prevents(self, marking: LinearExpression, index: int) -> Inequality:
        """ Constraint stating that `marking` does not enable event `index`.
        """
        if self.pure:
            return le(marking + self.effect(index), -1)
        return le(marking - self.backward(index), -1)

    def non_negative(self) -> list[Inequality]:
        constraints = [ge(self.initial(), 0)]
        if not self.pure:
            for index in range(self.utility.number_of_events):
                constraints += [ge(self.backward(index), 0), ge(self.forward(index), 0)]
        return constraints

    def to_region(self, assignment: dict[str, int]) -> Region:
        """ Region from a solution.

        Parameters
        ----------
        assignment : dict of str: int
            Value of the unknowns (missing ones are 0).

        Returns
        -------
        Region
            Corresponding region.
        """
        size = self.utility.number_of_events
        if self.pure:
            weights = [assignment.get("w{}".format(index), 0) for index in range(size)]
            builder = RegionBuilder.create_pure(self.utility, weights)
        else:
            builder = RegionBuilder(self.utility,
                                    [assignment.get("b{}".format(index), 0) for index in range(size)],
                                    [assignment.get("f{}".format(index), 0) for index in range(size)])
        return builder.with_initial_marking(assignment.get('m0', 0))


class ConstraintBuilder:
    """ Stateless translation of properties into constraint groups.

    Attributes
    ----------
    utility : RegionUtility
        Event indexing and reachability.
    properties : PNProperties
        Requested properties.
    locations : list of str, optional
        Location by event index.
    variables : RegionVariables
        Unknowns of the regions.
    """

    def __init__(self, utility: RegionUtility, properties: PNProperties, locations: Optional[list[str]] = None) -> None:
        if locations is not None and len(locations) != utility.number_of_events:
            raise ValueError("There must be one location per event")

        self.utility: RegionUtility = utility
        self.properties: PNProperties = properties
        self.locations: Optional[list[str]] = locations
        self.variables: RegionVariables = RegionVariables(utility, properties.pure)

    def families(self) -> list[str]:
        """ Families required by the properties, region axioms excluded.
        """
        properties = self.properties
        families = []
        if properties.k_bounded is not None:
            families.append(K_BOUNDED)
        if properties.k_marking is not None:
            families.append(K_MARKING)
        if properties.plain:
            families.append(PLAIN)
        if self.locations is not None:
            families.append(DISTRIBUTABLE)
        if properties.conflict_free:
            families.append(CONFLICT_FREE)
        if properties.tnet:
            families.append(TNET)
        if properties.marked_graph:
            families.append(MARKED_GRAPH)
        if properties.homogeneous:
            families.append(HOMOGENEOUS)
        if properties.merge_free:
            families.append(MERGE_FREE)
        if properties.behaviourally_conflict_free:
            families.append(BEHAVIOURALLY_CONFLICT_FREE)
        if properties.binary_conflict_free:
            families.append(BINARY_CONFLICT_FREE)
        if properties.equal_conflict:
            families.append(EQUAL_CONFLICT)
        return families

    def build(self, families: Optional[Iterable[str]] = None) -> list[ConstraintGroup]:
        """ Constraint groups of the region axioms and of the requested families.

        Parameters
        ----------
        families : iterable of str, optional
            Restrict to these families (all by default), region axioms always included.

        Returns
        -------
        list of ConstraintGroup
            Groups to satisfy.
        """
        selected = self.families()
        if families is not None:
            families = set(families)
            selected = [family for family in selected if family in families]

        builders = {
            K_BOUNDED: self.require_k_bounded,
            K_MARKING: self.require_k_marking,
            PLAIN: self.require_plain,
            DISTRIBUTABLE: self.require_distributable,
            CONFLICT_FREE: self.require_conflict_free,
            TNET: lambda: self.require_tnet(backward=True) + self.require_tnet(backward=False),
            MARKED_GRAPH: lambda: self.require_marked_graph(backward=True) + self.require_marked_graph(backward=False),
            HOMOGENEOUS: self.require_homogeneous,
            MERGE_FREE: self.require_merge_free,
            BEHAVIOURALLY_CONFLICT_FREE: self.require_behaviourally_conflict_free,
            BINARY_CONFLICT_FREE: self.require_binary_conflict_free,
            EQUAL_CONFLICT: self.require_equal_conflict,
        }

        groups = self.require_region()
        for family in selected:
            groups += builders[family]()

        log.debug("[SYNTHESIS] {} constraint group(s) for families: {}".format(len(groups), ', '.join([REGION] + selected)))
        return groups

    def require_region(self) -> list[ConstraintGroup]:
        """ Region axioms.

        Note
        ----
        Non-negativity, zero effect of every cycle offset,
        and every reachable arc enabled.
        """
        variables = self.variables
        constraints: list[Constraint] = variables.non_negative()

        for _, offset in self.utility.chord_offsets():
            constraints.append(eq(variables.evaluate(offset), 0))

        for arc in self.utility.reachable_edges():
            marking = variables.marking(arc.source)
            constraints += variables.enables(marking, self.utility.event_index(arc.label))

        return [ConstraintGroup.hard(REGION, constraints)]

    def require_k_bounded(self) -> list[ConstraintGroup]:
        k = self.properties.k_bounded
        constraints = [le(self.variables.marking(state), k) for state in self.utility.reachable_states()]
        return [ConstraintGroup.hard(K_BOUNDED, constraints)]

    def require_k_marking(self) -> list[ConstraintGroup]:
        return [ConstraintGroup.hard(K_MARKING, [Divisibility('m0', self.properties.k_marking)])]

    def require_plain(self) -> list[ConstraintGroup]:
        constraints = []
        for index in range(self.utility.number_of_events):
            constraints += [self.variables.backward_at_most(index, 1), self.variables.forward_at_most(index, 1)]
        return [ConstraintGroup.hard(PLAIN, constraints)]

    def require_distributable(self) -> list[ConstraintGroup]:
        """ All the consumers of a region share one location.
        """
        alternatives = []
        for location in sorted(set(self.locations)):
            alternatives.append(InequalitySystem(self.variables.backward_zero(index)
                                                 for index, other in enumerate(self.locations) if other != location))
        return [ConstraintGroup(DISTRIBUTABLE, alternatives)]

    def require_conflict_free(self) -> list[ConstraintGroup]:
        """ At most one consumer, or no event decreases the marking.
        """
        size = self.utility.number_of_events
        alternatives = [self._only(index, self.variables.backward_zero) for index in range(size)]
        if size:
            alternatives.append(InequalitySystem(ge(self.variables.effect(index), 0) for index in range(size)))
        return [ConstraintGroup(CONFLICT_FREE, alternatives)]

    def require_tnet(self, backward: bool = True) -> list[ConstraintGroup]:
        """ At most one consumer (or producer).
        """
        zero = self.variables.backward_zero if backward else self.variables.forward_zero
        alternatives = [self._only(index, zero) for index in range(self.utility.number_of_events)]
        return [ConstraintGroup(TNET, alternatives)]

    def require_marked_graph(self, backward: bool = True) -> list[ConstraintGroup]:
        """ Exactly one consumer (or producer).
        """
        zero = self.variables.backward_zero if backward else self.variables.forward_zero
        positive = self.variables.backward_positive if backward else self.variables.forward_positive
        alternatives = []
        for index in range(self.utility.number_of_events):
            alternatives.append(self._only(index, zero).add(positive(index)))
        return [ConstraintGroup(MARKED_GRAPH, alternatives)]

    def require_homogeneous(self) -> list[ConstraintGroup]:
        """ Two consumers consume the same number of tokens.
        """
        variables = self.variables
        groups = []
        for i, j in combinations(range(self.utility.number_of_events), 2):
            if variables.pure:
                same = eq(variables.effect(i), variables.effect(j))
            else:
                same = eq(variables.backward(i), variables.backward(j))
            alternatives = [InequalitySystem([variables.backward_zero(i)]),
                            InequalitySystem([variables.backward_zero(j)]),
                            InequalitySystem([same])]
            groups.append(ConstraintGroup(HOMOGENEOUS, alternatives))
        return groups

    def require_merge_free(self) -> list[ConstraintGroup]:
        alternatives = [self._only(index, self.variables.forward_zero) for index in range(self.utility.number_of_events)]
        return [ConstraintGroup(MERGE_FREE, alternatives)]

    def require_behaviourally_conflict_free(self) -> list[ConstraintGroup]:
        """ Among events enabled together, at most one consumes from the region.
        """
        groups = []
        seen = set()
        for state in self.utility.reachable_states():
            enabled = frozenset(self.utility.event_index(label) for label in state.enabled_labels())
            if len(enabled) < 2 or enabled in seen:
                continue
            seen.add(enabled)
            alternatives = []
            for index in sorted(enabled):
                alternatives.append(InequalitySystem(self.variables.backward_zero(other)
                                                     for other in sorted(enabled) if other != index))
            groups.append(ConstraintGroup(BEHAVIOURALLY_CONFLICT_FREE, alternatives))
        return groups

    def require_binary_conflict_free(self) -> list[ConstraintGroup]:
        """ Two events enabled together can fire one after the other.
        """
        variables = self.variables
        constraints = []
        for state in self.utility.reachable_states():
            marking = variables.marking(state)
            enabled = sorted(self.utility.event_index(label) for label in state.enabled_labels())
            for i, j in combinations(enabled, 2):
                if variables.pure:
                    constraints += [ge(marking, 0), ge(marking + variables.effect(i), 0),
                                    ge(marking + variables.effect(j), 0),
                                    ge(marking + variables.effect(i) + variables.effect(j), 0)]
                else:
                    constraints.append(ge(marking, variables.backward(i) + variables.backward(j)))
        return [ConstraintGroup.hard(BINARY_CONFLICT_FREE, constraints)]

    def require_equal_conflict(self) -> list[ConstraintGroup]:
        """ Consumers are empty or one class of events always enabled together, with equal weights.
        """
        variables = self.variables
        size = self.utility.number_of_events
        classes = self.enabled_together_classes()

        alternatives = [InequalitySystem(variables.backward_zero(index) for index in range(size))]
        for members in classes:
            pivot = members[0]
            system = InequalitySystem([variables.backward_positive(pivot)])
            for index in members[1:]:
                if variables.pure:
                    system.add(eq(variables.effect(index), variables.effect(pivot)))
                else:
                    system.add(eq(variables.backward(index), variables.backward(pivot)))
            system.add(*(variables.backward_zero(index) for index in range(size) if index not in members))
            alternatives.append(system)
        return [ConstraintGroup(EQUAL_CONFLICT, alternatives)]

    def enabled_together_classes(self) -> list[list[int]]:
        """ Partition of the events by the set of reachable states enabling them.

        Returns
        -------
        list of list of int
            Classes of event indices, sorted.
        """
        signatures: dict[int, frozenset] = {index: frozenset() for index in range(self.utility.number_of_events)}
        for state in self.utility.reachable_states():
            for label in state.enabled_labels():
                index = self.utility.event_index(label)
                signatures[index] = signatures[index] | {state}

        classes: dict[frozenset, list[int]] = {}
        for index, signature in signatures.items():
            classes.setdefault(signature, []).append(index)
        return sorted(classes.values())

    def _only(self, index: int, zero) -> InequalitySystem:
        return InequalitySystem(zero(other) for other in range(self.utility.number_of_events) if other != index)

    def event_separation(self, state: State, label: str) -> InequalitySystem:
        """ Region preventing `label` in `state`.

        Raises
        ------
        UnreachableError
            Unreachable state.
        """
        index = self.utility.event_index(label)
        return InequalitySystem([self.variables.prevents(self.variables.marking(state), index)])

    def state_separation(self, state: State, other: State) -> ConstraintGroup:
        """ Region distinguishing two states.

        Raises
        ------
        UnreachableError
            Unreachable state.
        """
        difference = self.variables.marking(state) - self.variables.marking(other)
        return ConstraintGroup('state-separation', [InequalitySystem([lt(difference, 0)]),
                                                    InequalitySystem([gt(difference, 0)])])
