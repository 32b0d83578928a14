import pytest

from synpn.exec.config import Configuration
from synpn.exec.utils import InterruptedSynthesis, Interrupter
from synpn.ptio.properties import PNProperties
from synpn.ptio.ptnet import PetriNet
from synpn.separation.queries import EventSeparation, StateSeparation
from synpn.separation.session import Backend
from synpn.synthesis import constraints as c
from synpn.synthesis.region import Region
from synpn.synthesis.synthesizer import (Synthesizer, calculate_unseparated_states, is_distributed_implementation,
                                         is_generalized_marked_graph, is_generalized_tnet, minimize_regions,
                                         synthesize, synthesize_petri_net)
from synpn.synthesis.utility import RegionUtility

from conftest import make_ts


def replay(ptnet, word):
    marking = ptnet.initial_marking
    for label in word:
        marking = ptnet.fire(marking, ptnet.transitions[label])
    return marking


class TestSynthesizer:

    def test_ping_pong(self, backend, ping_pong):
        with Synthesizer(ping_pong, PNProperties(), backend=backend) as synthesizer:
            regions = synthesizer.run()
            assert synthesizer.was_successfully_separated()
            assert len(regions) == 2
            for region in regions:
                region.check_valid()

            ptnet = synthesizer.synthesize_petri_net()
            initial = ptnet.initial_marking
            assert not ptnet.enabled(initial, ptnet.transitions['b'])
            assert replay(ptnet, 'a') != initial
            assert replay(ptnet, 'ab') == initial
            with pytest.raises(ValueError):
                replay(ptnet, 'aa')

    def test_ping_pong_net_text(self, ping_pong):
        with Synthesizer(ping_pong, backend=Backend.ILP) as synthesizer:
            synthesizer.run()
            ptnet = synthesizer.synthesize_petri_net()
        assert str(ptnet) == "net ping_pong\npl p0\npl p1 (1)\ntr a p1 -> p0\ntr b p0 -> p1\n"
        assert is_generalized_tnet(ptnet) and is_generalized_marked_graph(ptnet)
        assert ptnet.is_pure() and ptnet.is_plain()

    def test_not_safe(self, backend, word_aa):
        with Synthesizer(word_aa, PNProperties(k_bounded=1), backend=backend) as synthesizer:
            synthesizer.run()
            assert not synthesizer.was_successfully_separated()
            assert synthesizer.failed_event_state_separation_problems() == {'a': [word_aa.states['s2']]}
            assert all(failure.family == c.K_BOUNDED for failure in synthesizer.failures)
            assert synthesizer.synthesize_petri_net() is None

    def test_not_safe_without_diagnosis(self, word_aa):
        regions, failures = synthesize(word_aa, PNProperties(k_bounded=1), backend=Backend.ILP, diagnose=False)
        assert regions == []
        assert failures and all(failure.family is None for failure in failures)

    def test_no_region_at_all(self, backend):
        ts = make_ts([('s0', 'a', 's1'), ('s0', 'a', 's2'), ('s1', 'b', 's3')])
        with Synthesizer(ts, backend=backend) as synthesizer:
            synthesizer.run()
            s1, s2 = ts.states['s1'], ts.states['s2']
            failures = {failure.query: failure.family for failure in synthesizer.failures}
            assert failures[EventSeparation(s2, 'b')] == c.REGION
            assert failures[StateSeparation(s1, s2)] == c.REGION
            assert synthesizer.failed_state_separation_problems() == [(s1, s2)]

    def test_only_event_separation(self, backend):
        ts = make_ts([('s0', 'a', 's1'), ('s1', 'a', 's0')])
        with Synthesizer(ts, backend=backend, only_event_separation=True) as synthesizer:
            assert synthesizer.run() == []
            assert synthesizer.was_successfully_separated()
            ptnet = synthesizer.synthesize_petri_net()
            assert str(ptnet) == "net ts\ntr a ->\n"

        with Synthesizer(ts, backend=backend) as synthesizer:
            synthesizer.run()
            assert [failure.family for failure in synthesizer.failures] == [c.REGION]

    def test_reuses_regions(self, abc_cycle):
        with Synthesizer(abc_cycle, backend=Backend.ILP) as synthesizer:
            synthesizer.run()
            solved = synthesizer.session.solver.solved_problems
            query = next(synthesizer.event_state_separation_problems())
            assert synthesizer.separate(query) in synthesizer.regions
            assert synthesizer.session.solver.solved_problems == solved

    def test_problems(self, choice):
        with Synthesizer(choice, backend=Backend.ILP) as synthesizer:
            problems = [str(query) for query in synthesizer.event_state_separation_problems()]
            assert problems == ["(s0, c)", "(s1, a)", "(s1, b)", "(s2, a)", "(s2, b)"]
            assert len(list(synthesizer.state_separation_problems())) == 3

    def test_distributed(self, backend, choice):
        locations = {'a': 'x', 'b': 'y', 'c': 'x'}
        properties = PNProperties(distributable=True)
        with Synthesizer(choice, properties, backend=backend, locations=locations) as synthesizer:
            synthesizer.run()
            assert not synthesizer.was_successfully_separated()
            ptnet = synthesizer.synthesize_petri_net(synthesizer.regions)
            assert is_distributed_implementation(ptnet)
            assert ptnet.transitions['b'].location == 'y'

    def test_interrupted(self, backend, ping_pong):
        interrupter = Interrupter()
        with Synthesizer(ping_pong, config=Configuration(interrupter=interrupter), backend=backend) as synthesizer:
            interrupter.request()
            with pytest.raises(InterruptedSynthesis):
                synthesizer.run()


class TestMinimization:

    def test_redundant_region(self, ping_pong):
        utility = RegionUtility(ping_pong)
        consumer_b = Region(utility, [0, 1], [1, 0], 0)
        consumer_a = Region(utility, [1, 0], [0, 1], 1)
        shifted = Region(utility, [0, 1], [1, 0], 2)
        assert minimize_regions(utility, [consumer_b, consumer_a, shifted]) == [consumer_b, consumer_a]
        assert minimize_regions(utility, [shifted, consumer_a, consumer_b, consumer_a]) == [consumer_a, consumer_b]

    def test_state_separation_only(self, diamond):
        utility = RegionUtility(diamond)
        count_a = Region(utility, [0, 0], [1, 0], 0)
        count_b = Region(utility, [0, 0], [0, 1], 0)
        count_both = Region(utility, [0, 0], [1, 1], 0)
        assert minimize_regions(utility, [count_a, count_b, count_both], only_event_separation=True) == []
        assert len(minimize_regions(utility, [count_a, count_b, count_both])) == 2


class TestUnseparatedStates:

    def test_partition(self, diamond):
        utility = RegionUtility(diamond)
        states = utility.reachable_states()
        count_a = Region(utility, [0, 0], [1, 0], 0)
        count_b = Region(utility, [0, 0], [0, 1], 0)
        assert calculate_unseparated_states(states, []) == set(states)
        assert calculate_unseparated_states(states, [count_a]) == set(states)
        assert calculate_unseparated_states(states, [count_a, count_b]) == set()

    def test_unreachable(self, with_unreachable):
        utility = RegionUtility(with_unreachable)
        region = Region(utility, [0], [1], 0)
        states = list(with_unreachable.states.values())
        assert calculate_unseparated_states(states, [region]) == {with_unreachable.states['u']}

    def test_interrupted(self, ping_pong):
        utility = RegionUtility(ping_pong)
        interrupter = Interrupter()
        interrupter.request()
        with pytest.raises(InterruptedSynthesis):
            calculate_unseparated_states(utility.reachable_states(), [Region(utility, [1, 0], [0, 1], 1)], interrupter)


class TestPetriNet:

    def test_synthesize_with_locations(self, choice):
        utility = RegionUtility(choice)
        region = Region(utility, [1, 1, 0], [0, 0, 1], 1)
        ptnet = synthesize_petri_net(utility, [region], "choice", {'a': 'x', 'b': 'y', 'c': 'x'})
        assert str(ptnet) == "net choice\npl p0 (1)\ntr a p0 ->\ntr b p0 ->\ntr c -> p0\n"
        assert not is_distributed_implementation(ptnet)
        assert is_generalized_tnet(ptnet) is False
        assert not is_generalized_marked_graph(ptnet)

    def test_weighted_arcs(self, ping_pong):
        utility = RegionUtility(ping_pong)
        ptnet = synthesize_petri_net(utility, [Region(utility, [2, 0], [1, 1], 2)])
        assert str(ptnet.transitions['a']) == "tr a p0*2 -> p0\n"
        assert not ptnet.is_pure() and not ptnet.is_plain()
        assert ptnet.transitions['a'].delta == {ptnet.places['p0']: -1}

    def test_isolated_place(self):
        ptnet = PetriNet("isolated")
        ptnet.create_place()
        assert is_generalized_tnet(ptnet)
        assert not is_generalized_marked_graph(ptnet)
        with pytest.raises(ValueError):
            ptnet.create_place('p0')
