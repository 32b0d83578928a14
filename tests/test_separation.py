import pytest

from synpn.exec.config import Configuration
from synpn.exec.utils import InterruptedSynthesis, Interrupter, SolverError, UnsupportedPropertiesError
from synpn.interfaces.z3 import VALUE, Z3
from synpn.ptio.properties import PNProperties
from synpn.separation.queries import EventSeparation, StateSeparation, is_event_enabled, is_separating_region
from synpn.separation.session import Backend, create_session
from synpn.synthesis import constraints as c
from synpn.synthesis.region import Region
from synpn.synthesis.utility import RegionUtility

from conftest import make_ts


def solve(backend, ts, properties, query, config=None, **kwargs):
    utility = RegionUtility(ts)
    with create_session(backend, utility, properties, config or Configuration(), **kwargs) as session:
        return session.solve(query)


def check_properties(region, properties):
    region.check_valid()
    if properties.pure:
        assert region.is_pure()
    if properties.plain:
        assert region.is_plain()
    if properties.k_bounded is not None:
        utility = region.utility
        assert all(region.marking_at(state) <= properties.k_bounded for state in utility.reachable_states())


class TestBackend:

    def test_from_name(self):
        assert Backend.from_name('smt') is Backend.SMT
        assert Backend.from_name('ILP') is Backend.ILP
        with pytest.raises(ValueError):
            Backend.from_name('bdd')


class TestQueries:

    def test_text_and_equality(self, ping_pong):
        s0, s1 = ping_pong.states['s0'], ping_pong.states['s1']
        assert str(EventSeparation(s0, 'b')) == "(s0, b)"
        assert StateSeparation(s0, s1) == StateSeparation(s1, s0)
        assert len({EventSeparation(s0, 'b'), EventSeparation(s0, 'b')}) == 1

    def test_separating_region(self, ping_pong, with_unreachable):
        utility = RegionUtility(ping_pong)
        region = Region(utility, [1, 0], [0, 1], 1)
        s0, s1 = ping_pong.states['s0'], ping_pong.states['s1']
        assert is_event_enabled(region, s0, 'a')
        assert is_separating_region(region, EventSeparation(s1, 'a'))
        assert not is_separating_region(region, EventSeparation(s0, 'a'))
        assert is_separating_region(region, StateSeparation(s0, s1))

        utility = RegionUtility(with_unreachable)
        region = Region(utility, [0], [1], 0)
        u = with_unreachable.states['u']
        assert not is_event_enabled(region, u, 'a')
        assert not is_separating_region(region, EventSeparation(u, 'a'))


class TestSessions:

    @pytest.mark.parametrize('pure', [False, True])
    @pytest.mark.parametrize('plain', [False, True])
    @pytest.mark.parametrize('k', [None, 0, 1, 2])
    def test_cycle(self, backend, abc_cycle, pure, plain, k):
        properties = PNProperties(k_bounded=k, pure=pure, plain=plain)
        s0, s1 = abc_cycle.states['s0'], abc_cycle.states['s1']

        for query in (EventSeparation(s0, 'c'), StateSeparation(s0, s1)):
            region = solve(backend, abc_cycle, properties, query)
            if k == 0:
                assert region is None
                continue
            assert region is not None
            assert is_separating_region(region, query)
            check_properties(region, properties)

    def test_ping_pong(self, backend, ping_pong):
        properties = PNProperties(pure=True)
        for state, label in (('s0', 'b'), ('s1', 'a')):
            state = ping_pong.states[state]
            region = solve(backend, ping_pong, properties, EventSeparation(state, label))
            assert region.backward_weight(label) > 0
            assert region.marking_at(state) < region.backward_weight(label)
            check_properties(region, properties)

    def test_minimal_ilp_region(self, ping_pong):
        region = solve(Backend.ILP, ping_pong, PNProperties(), EventSeparation(ping_pong.states['s0'], 'b'))
        assert region.initial_marking == 0
        assert region.backward == (0, 1) and region.forward == (1, 0)

    def test_same_session_many_queries(self, backend, abc_cycle):
        utility = RegionUtility(abc_cycle)
        with create_session(backend, utility, PNProperties(k_bounded=1), Configuration()) as session:
            for state in abc_cycle.states.values():
                for label in utility.event_list:
                    if label in state.enabled_labels():
                        continue
                    first = session.separate_event(state, label)
                    second = session.separate_event(state, label)
                    assert is_separating_region(first, EventSeparation(state, label))
                    assert is_separating_region(second, EventSeparation(state, label))

    @pytest.mark.parametrize('pure', [False, True])
    def test_k_marking(self, backend, ping_pong, pure):
        properties = PNProperties(k_marking=2, pure=pure)
        query = EventSeparation(ping_pong.states['s1'], 'a')
        region = solve(backend, ping_pong, properties, query)
        assert region is not None
        assert region.initial_marking > 0 and region.initial_marking % 2 == 0
        assert is_separating_region(region, query)
        check_properties(region, properties)

    def test_pure_unconstrained_weights(self, backend):
        # only s0 and s1 are reachable, b and c never fire
        ts = make_ts([('s0', 'a', 's1'), ('s2', 'b', 's0'), ('s3', 'a', 's4'), ('s3', 'c', 's1')])
        properties = PNProperties(k_bounded=2, pure=True)
        query = EventSeparation(ts.states['s1'], 'b')
        region = solve(backend, ts, properties, query)
        assert region is not None
        assert is_separating_region(region, query)
        check_properties(region, properties)

    def test_no_region(self, backend, word_aa):
        s2 = word_aa.states['s2']
        assert solve(backend, word_aa, PNProperties(k_bounded=1), EventSeparation(s2, 'a')) is None
        region = solve(backend, word_aa, PNProperties(), EventSeparation(s2, 'a'))
        assert is_separating_region(region, EventSeparation(s2, 'a'))

    def test_family_restriction(self, backend, word_aa):
        s2 = word_aa.states['s2']
        region = solve(backend, word_aa, PNProperties(k_bounded=1), EventSeparation(s2, 'a'), families=[])
        assert region is not None

    def test_unreachable(self, backend, with_unreachable):
        u = with_unreachable.states['u']
        assert solve(backend, with_unreachable, PNProperties(), EventSeparation(u, 'a')) is None

    def test_marked_graph(self, backend, ping_pong):
        properties = PNProperties(marked_graph=True)
        region = solve(backend, ping_pong, properties, EventSeparation(ping_pong.states['s0'], 'b'))
        assert region.backward[0] == 0 and region.backward[1] >= 1
        assert region.forward[0] >= 1 and region.forward[1] == 0

    def test_distributable(self, backend, choice):
        s0 = choice.states['s0']
        locations = {'a': 'x', 'b': 'y', 'c': 'x'}
        region = solve(backend, choice, PNProperties(distributable=True), EventSeparation(s0, 'c'), locations=locations)
        consumers = {locations[label] for label in 'abc' if region.backward_weight(label) > 0}
        assert len(consumers) <= 1

    def test_empty_alphabet(self, backend):
        ts = make_ts([], states=['s0'])
        utility = RegionUtility(ts)
        with create_session(backend, utility, PNProperties(), Configuration()) as session:
            assert session.builder.families() == []

    def test_unsupported_location_map(self, choice):
        properties = PNProperties(output_nonbranching=True)
        with pytest.raises(UnsupportedPropertiesError):
            create_session(Backend.ILP, RegionUtility(choice), properties, Configuration(),
                           locations={'a': 'x', 'b': 'x', 'c': 'y'})

    def test_interrupted(self, backend, ping_pong):
        interrupter = Interrupter()
        config = Configuration(interrupter=interrupter)
        utility = RegionUtility(ping_pong)
        with create_session(backend, utility, PNProperties(), config) as session:
            interrupter.request()
            with pytest.raises(InterruptedSynthesis):
                session.separate_event(ping_pong.states['s0'], 'b')


class TestBackendEquivalence:

    @pytest.mark.parametrize('properties', [PNProperties(), PNProperties(k_bounded=1), PNProperties(pure=True, plain=True),
                                            PNProperties(tnet=True), PNProperties(conflict_free=True)],
                             ids=str)
    def test_same_answers(self, z3_backend, choice, properties):
        states = list(choice.states.values())
        queries = [EventSeparation(state, label) for state in states for label in choice.alphabet
                   if label not in state.enabled_labels()]
        queries += [StateSeparation(states[0], states[1]), StateSeparation(states[1], states[2])]

        for query in queries:
            smt = solve(z3_backend, choice, properties, query)
            ilp = solve(Backend.ILP, choice, properties, query)
            assert (smt is None) == (ilp is None)
            for region in (smt, ilp):
                if region is not None:
                    assert is_separating_region(region, query)
                    check_properties(region, properties)

    def test_ilp_idempotence(self, abc_cycle):
        utility = RegionUtility(abc_cycle)
        query = StateSeparation(abc_cycle.states['s0'], abc_cycle.states['s2'])
        with create_session(Backend.ILP, utility, PNProperties(), Configuration()) as session:
            assert session.solve(query) == session.solve(query)

    @pytest.mark.parametrize('pure', [False, True])
    def test_idempotence(self, backend, abc_cycle, pure):
        utility = RegionUtility(abc_cycle)
        states = utility.reachable_states()
        queries = [StateSeparation(abc_cycle.states['s0'], abc_cycle.states['s2']), EventSeparation(abc_cycle.states['s0'], 'c')]
        with create_session(backend, utility, PNProperties(pure=pure), Configuration()) as session:
            for query in queries:
                first, second = session.solve(query), session.solve(query)
                assert is_separating_region(first, query) and is_separating_region(second, query)
                assert [first.marking_at(state) for state in states] == [second.marking_at(state) for state in states]


class TestSmtSession:

    def test_region_predicate(self, z3_backend, ping_pong):
        utility = RegionUtility(ping_pong)
        with create_session(z3_backend, utility, PNProperties(pure=True), Configuration()) as session:
            assert session.smtlib_declare() == "(declare-const m0 Int)\n(declare-const w0 Int)\n(declare-const w1 Int)\n"
            assert session.smtlib_define_region().startswith("(define-fun is-region ((m0 Int) (w0 Int) (w1 Int)) Bool ")
            assert session.smtlib_call_region() == "(assert (is-region m0 w0 w1))\n"

    def test_bad_executable(self):
        with pytest.raises(SolverError):
            Z3('/nonexistent/z3')

    def test_value_parsing(self):
        assert VALUE.findall("((m0 1) (w0 (- 2)) (w1 0))") == [('m0', '1'), ('w0', '(- 2)'), ('w1', '0')]


class TestIlpSession:

    def test_objective(self, ping_pong):
        utility = RegionUtility(ping_pong)
        with create_session(Backend.ILP, utility, PNProperties(), Configuration()) as session:
            assert session.objective().coefficients == {'m0': 1, 'b0': 1, 'f0': 1, 'b1': 1, 'f1': 1}
        with create_session(Backend.ILP, utility, PNProperties(pure=True), Configuration()) as session:
            assert session.objective().coefficients == {'m0': 1, 'u0': 1, 'u1': 1}
            assert len(session.solver.constraints) > len(session.magnitudes()) == 4

    def test_groups(self, choice):
        utility = RegionUtility(choice)
        properties = PNProperties(conflict_free=True)
        with create_session(Backend.ILP, utility, properties, Configuration()) as session:
            assert [group.family for group in session.groups] == [c.REGION, c.PLAIN, c.CONFLICT_FREE]
            assert [group.family for group in session.solver.disjunctions] == [c.CONFLICT_FREE]
