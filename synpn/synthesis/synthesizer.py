"""
Separation Driver

Solves every event/state and state/state separation problem of a
transition system, keeps the failures, minimizes the regions and
assembles the synthesized Petri net.

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
from typing import Iterable, Iterator, Optional

from synpn.exec.config import Configuration
from synpn.exec.utils import Interrupter, UnreachableError
from synpn.ptio.lts import State, TransitionSystem
from synpn.ptio.properties import PNProperties, location_map
from synpn.ptio.ptnet import PetriNet
from synpn.separation.queries import EventSeparation, Query, StateSeparation, is_separating_region
from synpn.separation.session import Backend, Session, create_session
from synpn.synthesis.constraints import REGION
from synpn.synthesis.region import Region
from synpn.synthesis.utility import RegionUtility


class FailedSeparation:
    """ Separation problem without solution.

    Attributes
    ----------
    query : Query
        Event or state separation.
    family : str, optional
        Property family responsible for the failure (`region` if no region
        at all exists), `None` if undetermined.
    """

    def __init__(self, query: Query, family: Optional[str] = None) -> None:
        self.query: Query = query
        self.family: Optional[str] = family

    def __str__(self) -> str:
        kind = "event" if isinstance(self.query, EventSeparation) else "state"
        return "{} separation {} failed{}".format(kind, self.query, " ({})".format(self.family) if self.family else "")

    def __repr__(self) -> str:
        return "FailedSeparation({})".format(self)


class Synthesizer:
    """ Region-based synthesis.

    Attributes
    ----------
    ts : TransitionSystem
        Input transition system.
    utility : RegionUtility
        Event indexing and reachability.
    properties : PNProperties
        Requested properties.
    config : Configuration
        Process configuration.
    backend : Backend
        Separation engine.
    only_event_separation : bool
        Language equivalence mode (no state separation).
    regions : list of Region
        Separating regions found so far.
    failures : list of FailedSeparation
        Unsolvable problems.
    """

    def __init__(self, ts: TransitionSystem, properties: Optional[PNProperties] = None, config: Optional[Configuration] = None, backend: Backend = Backend.SMT, locations: Optional[dict[str, str]] = None, only_event_separation: bool = False, diagnose: bool = True) -> None:
        """ Initializer.

        Parameters
        ----------
        ts : TransitionSystem
            Input transition system.
        properties : PNProperties, optional
            Requested properties (none by default).
        config : Configuration, optional
            Process configuration.
        backend : Backend, optional
            Separation engine.
        locations : dict of str: str, optional
            Explicit event locations.
        only_event_separation : bool, optional
            Skip state separation.
        diagnose : bool, optional
            Tag every failure with the responsible family.
        """
        self.config: Configuration = config if config is not None else Configuration()
        self.config.setup_logging()

        self.ts: TransitionSystem = ts
        self.properties: PNProperties = properties if properties is not None else PNProperties()
        self.backend: Backend = backend
        self.locations: Optional[dict[str, str]] = locations
        self.only_event_separation: bool = only_event_separation
        self.diagnose: bool = diagnose

        self.utility: RegionUtility = RegionUtility(ts, self.config.interrupter)
        self.session: Session = create_session(backend, self.utility, self.properties, self.config, locations)
        self._diagnosis_sessions: dict[Optional[str], Session] = {}

        self.regions: list[Region] = []
        self.failures: list[FailedSeparation] = []

    def __enter__(self) -> Synthesizer:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """ Release the solver sessions.
        """
        self.session.close()
        for session in self._diagnosis_sessions.values():
            session.close()
        self._diagnosis_sessions.clear()

    def run(self) -> list[Region]:
        """ Solve every separation problem, then minimize the regions.

        Note
        ----
        Event separation comes first, its regions often also separate states.

        Returns
        -------
        list of Region
            Minimal set of separating regions.
        """
        log.info("[SYNTHESIS] Solving event-state separation")
        self.solve_event_state_separation()

        if not self.only_event_separation:
            log.info("[SYNTHESIS] Solving state separation")
            self.solve_state_separation()

        log.info("[SYNTHESIS] Minimizing regions")
        self.regions = minimize_regions(self.utility, self.regions, self.only_event_separation, self.config.interrupter)

        log.info("[SYNTHESIS] {} region(s), {} failure(s)".format(len(self.regions), len(self.failures)))
        return list(self.regions)

    def event_state_separation_problems(self) -> Iterator[EventSeparation]:
        """ Every reachable state paired with every event it does not enable.
        """
        alphabet = self.utility.event_list
        for state in self.utility.reachable_states():
            enabled = state.enabled_labels()
            for label in alphabet:
                if label not in enabled:
                    yield EventSeparation(state, label)

    def state_separation_problems(self) -> Iterator[StateSeparation]:
        """ Pairs of reachable states not separated by the current regions.
        """
        reachable = self.utility.reachable_states()
        unseparated = calculate_unseparated_states(reachable, self.regions, self.config.interrupter)
        states = [state for state in reachable if state in unseparated]
        for state, other in combinations(states, 2):
            yield StateSeparation(state, other)

    def solve_event_state_separation(self) -> None:
        for query in self.event_state_separation_problems():
            self.separate(query)

    def solve_state_separation(self) -> None:
        for query in self.state_separation_problems():
            self.separate(query)

    def separate(self, query: Query) -> Optional[Region]:
        """ Solve a problem, reusing a known region when possible.

        Parameters
        ----------
        query : Query
            Event or state separation.

        Returns
        -------
        Region, optional
            Separating region, `None` on failure (recorded in `failures`).
        """
        self.config.interrupter.throw_if_requested()

        for region in self.regions:
            if is_separating_region(region, query):
                log.debug("[SYNTHESIS] {} already separated by {}".format(query, region))
                return region

        region = self.session.solve(query)
        if region is None:
            failure = FailedSeparation(query, self.diagnose_failure(query) if self.diagnose else None)
            log.debug("[SYNTHESIS] {}".format(failure))
            self.failures.append(failure)
            return None

        if region not in self.regions:
            self.regions.append(region)
        return region

    def diagnose_failure(self, query: Query) -> Optional[str]:
        """ Find the family responsible for a failure.

        Note
        ----
        Re-solves the query with the region axioms alone, then with each family alone.

        Returns
        -------
        str, optional
            `region` if no region at all separates, the first family failing on its own,
            `None` if only a combination of families fails.
        """
        if self._diagnosis_session(None).solve(query) is None:
            return REGION

        for family in self.session.builder.families():
            if self._diagnosis_session(family).solve(query) is None:
                return family

        return None

    def _diagnosis_session(self, family: Optional[str]) -> Session:
        session = self._diagnosis_sessions.get(family)
        if session is None:
            families = [] if family is None else [family]
            session = create_session(self.backend, self.utility, self.properties, self.config, self.locations, families)
            self._diagnosis_sessions[family] = session
        return session

    def was_successfully_separated(self) -> bool:
        return not self.failures

    def failed_event_state_separation_problems(self) -> dict[str, list[State]]:
        """ States where each event could not be prevented.
        """
        failed: dict[str, list[State]] = {}
        for failure in self.failures:
            if isinstance(failure.query, EventSeparation):
                failed.setdefault(failure.query.label, []).append(failure.query.state)
        return failed

    def failed_state_separation_problems(self) -> list[tuple[State, State]]:
        return [(failure.query.state, failure.query.other) for failure in self.failures
                if isinstance(failure.query, StateSeparation)]

    def synthesize_petri_net(self, regions: Optional[Iterable[Region]] = None) -> Optional[PetriNet]:
        """ Petri net of the separating regions.

        Returns
        -------
        PetriNet, optional
            Synthesized net, `None` if some problem could not be solved.
        """
        if regions is None:
            if not self.was_successfully_separated():
                return None
            regions = self.regions
        return synthesize_petri_net(self.utility, regions, self.ts.id, location_map(self.ts, self.properties, self.locations))


def calculate_unseparated_states(states: Iterable[State], regions: Iterable[Region], interrupter: Optional[Interrupter] = None) -> set[State]:
    """ States sharing their markings in every region with some other state.

    Parameters
    ----------
    states : iterable of State
        States to separate.
    regions : iterable of Region
        Available regions.
    interrupter : Interrupter, optional
        Cancellation flag.

    Returns
    -------
    set of State
        Unseparated (or unreachable) states.
    """
    result: set[State] = set()
    partition: list[list[State]] = [list(states)]

    for region in regions:
        if interrupter is not None:
            interrupter.throw_if_requested()

        new_partition = []
        for family in partition:
            markings: dict[int, list[State]] = {}
            for state in family:
                try:
                    markings.setdefault(region.marking_at(state), []).append(state)
                except UnreachableError:
                    result.add(state)
            new_partition += [block for block in markings.values() if len(block) > 1]

        partition = new_partition
        if not partition:
            break

    for family in partition:
        if len(family) > 1:
            result.update(family)

    return result


def minimize_regions(utility: RegionUtility, regions: Iterable[Region], only_event_separation: bool = False, interrupter: Optional[Interrupter] = None) -> list[Region]:
    """ Select a subset of regions solving the same separation problems.

    Note
    ----
    A region that is the only one solving some problem is required.
    Every problem not solved by the required regions then adds one of its solvers.

    Parameters
    ----------
    utility : RegionUtility
        Event indexing and reachability.
    regions : iterable of Region
        Separating regions.
    only_event_separation : bool, optional
        Ignore state separation.
    interrupter : Interrupter, optional
        Cancellation flag.

    Returns
    -------
    list of Region
        Selected regions, in input order.
    """
    all_regions = list(dict.fromkeys(regions))
    required: list[Region] = []
    remaining: list[Region] = list(all_regions)
    problems: list[list[Region]] = []

    def classify(query: Query) -> None:
        if interrupter is not None:
            interrupter.throw_if_requested()
        if any(is_separating_region(region, query) for region in required):
            return
        solvers = [region for region in remaining if is_separating_region(region, query)]
        if len(solvers) == 1:
            required.append(solvers[0])
            remaining.remove(solvers[0])
        elif solvers:
            problems.append(solvers)

    reachable = utility.reachable_states()
    for state in reachable:
        enabled = state.enabled_labels()
        for label in utility.event_list:
            if label not in enabled:
                classify(EventSeparation(state, label))

    if not only_event_separation:
        unseparated = calculate_unseparated_states(reachable, required, interrupter)
        states = [state for state in reachable if state in unseparated]
        for state, other in combinations(states, 2):
            classify(StateSeparation(state, other))

    log.debug("[MINIMIZE] {} required region(s) after the first pass, {} open problem(s)".format(len(required), len(problems)))

    for solvers in problems:
        if not any(region in required for region in solvers):
            required.append(solvers[0])

    log.debug("[MINIMIZE] Picked {} region(s) out of {}".format(len(required), len(all_regions)))

    return [region for region in all_regions if region in required]


def synthesize_petri_net(utility: RegionUtility, regions: Iterable[Region], net_id: str = "", locations: Optional[dict[str, str]] = None) -> PetriNet:
    """ Petri net with one place per region.

    Note
    ----
    Every event becomes a transition, even without arcs.
    """
    ptnet = PetriNet(net_id)
    for label in utility.event_list:
        ptnet.create_transition(label, locations.get(label) if locations is not None else None)

    for region in regions:
        ptnet.add_place_from_region(region)

    log.debug("[SYNTHESIS] Synthesized net:\n{}".format(ptnet))
    return ptnet


def is_distributed_implementation(ptnet: PetriNet) -> bool:
    """ Check that the consumers of each place share one location.
    """
    for place in ptnet.places.values():
        locations = {transition.location for transition in place.output_transitions if transition.location is not None}
        if len(locations) > 1:
            log.debug("[SYNTHESIS] Place {} is consumed from several locations".format(place.id))
            return False
    return True


def is_generalized_tnet(ptnet: PetriNet) -> bool:
    return all(len(place.input_transitions) <= 1 and len(place.output_transitions) <= 1
               for place in ptnet.places.values())


def is_generalized_marked_graph(ptnet: PetriNet) -> bool:
    return all(len(place.input_transitions) == 1 and len(place.output_transitions) == 1
               for place in ptnet.places.values())


def synthesize(ts: TransitionSystem, properties: Optional[PNProperties] = None, config: Optional[Configuration] = None, backend: Backend = Backend.SMT, **kwargs) -> tuple[list[Region], list[FailedSeparation]]:
    """ Run a complete synthesis.

    Returns
    -------
    tuple of list of Region, list of FailedSeparation
        Minimized regions and failures.
    """
    with Synthesizer(ts, properties, config, backend, **kwargs) as synthesizer:
        regions = synthesizer.run()
        return regions, list(synthesizer.failures)
