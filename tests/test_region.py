import pytest

from synpn.exec.utils import InvalidRegionError, UnreachableError
from synpn.synthesis.parikh import ParikhVector
from synpn.synthesis.region import Region, RegionBuilder
from synpn.synthesis.utility import RegionUtility


@pytest.fixture
def utility(ping_pong):
    return RegionUtility(ping_pong)


class TestRegionUtility:

    def test_event_indices(self, choice):
        utility = RegionUtility(choice)
        assert utility.event_list == ['a', 'b', 'c']
        assert utility.event_index('c') == 2
        assert utility.number_of_events == 3
        with pytest.raises(ValueError):
            utility.event_index('d')

    def test_reaching_parikh_vectors(self, diamond):
        utility = RegionUtility(diamond)
        assert utility.reaching_parikh_vector(diamond.states['s0']) == ParikhVector()
        assert utility.reaching_parikh_vector(diamond.states['s3']).to_list(2) == [1, 1]

    def test_chord_offsets(self, ping_pong, diamond):
        utility = RegionUtility(ping_pong)
        [(chord, offset)] = utility.chord_offsets()
        assert str(chord) == "s1 --b--> s0"
        assert offset.to_list(2) == [1, 1]

        # a diamond closes without any cycle offset
        assert RegionUtility(diamond).chord_offsets() == []

    def test_unreachable(self, with_unreachable):
        utility = RegionUtility(with_unreachable)
        u = with_unreachable.states['u']
        assert [state.id for state in utility.reachable_states()] == ['s0', 's1']
        assert [str(arc) for arc in utility.reachable_edges()] == ["s0 --a--> s1"]
        with pytest.raises(UnreachableError) as error:
            utility.reaching_parikh_vector(u)
        assert error.value.state is u

    def test_location_list(self, choice):
        utility = RegionUtility(choice)
        assert utility.location_list(None) is None
        assert utility.location_list({'c': 'z', 'a': 'x', 'b': 'y'}) == ['x', 'y', 'z']


class TestRegion:

    def test_markings(self, utility, ping_pong):
        region = Region(utility, [1, 0], [0, 1], 1)
        assert region.weights() == [-1, 1]
        assert region.weight('a') == -1
        assert region.backward_weight('a') == 1 and region.forward_weight('b') == 1
        assert region.marking_at(ping_pong.states['s0']) == 1
        assert region.marking_at(ping_pong.states['s1']) == 0
        assert region.evaluate(ParikhVector({0: 1, 1: 1})) == 0
        assert region.is_pure() and region.is_plain()
        region.check_valid()

    def test_impure_and_not_plain(self, utility):
        region = Region(utility, [2, 1], [1, 2], 2)
        assert not region.is_pure()
        assert not region.is_plain()

    def test_prevented_arc(self, utility, ping_pong):
        region = Region(utility, [1, 0], [0, 1], 0)
        assert region.find_prevented_arc() == (ping_pong.states['s0'], 'a')
        with pytest.raises(InvalidRegionError):
            region.check_valid()

    def test_wrong_effect(self, utility):
        region = Region(utility, [1, 0], [0, 0], 1)
        assert region.find_prevented_arc() is None
        assert str(region.find_arc_with_wrong_effect()) == "s1 --b--> s0"
        with pytest.raises(InvalidRegionError):
            region.check_valid()

    def test_unreachable_marking(self, with_unreachable):
        utility = RegionUtility(with_unreachable)
        region = Region(utility, [0], [1], 0)
        with pytest.raises(UnreachableError):
            region.marking_at(with_unreachable.states['u'])
        region.check_valid()

    def test_invalid_input(self, utility):
        with pytest.raises(ValueError):
            Region(utility, [1], [0, 1], 0)
        with pytest.raises(ValueError):
            Region(utility, [-1, 0], [0, 1], 0)
        with pytest.raises(ValueError):
            Region(utility, [1, 0], [0, 1], -1)

    def test_text_and_equality(self, utility):
        region = Region(utility, [1, 0], [0, 1], 1)
        assert str(region) == "{ init=1, 1:a:0, 0:b:1 }"
        assert region == Region.from_weights(utility, [-1, 1], 1)
        assert len({region, Region.from_weights(utility, [-1, 1], 1)}) == 1


class TestRegionBuilder:

    def test_normal_initial_marking(self, utility):
        region = RegionBuilder.create_pure(utility, [-1, 1]).with_normal_region_initial_marking()
        assert region.initial_marking == 1
        assert region.backward == (1, 0) and region.forward == (0, 1)

    def test_loops_and_purification(self, utility):
        builder = RegionBuilder.create_pure(utility, [-1, 1]).add_loop_around('a', 2)
        assert builder.backward == [3, 0] and builder.forward == [2, 1]
        builder.make_pure()
        assert builder.backward == [1, 0] and builder.forward == [0, 1]

    def test_add_region_with_factor(self, utility):
        region = Region(utility, [1, 0], [0, 1], 1)
        builder = RegionBuilder(utility).add_region_with_factor(region, -2)
        assert builder.backward == [0, 2] and builder.forward == [2, 0]
        builder.add_weight_on('b', 3).add_weight_on(0, -1)
        assert builder.backward == [1, 2] and builder.forward == [2, 3]
        assert RegionBuilder.from_region(region).with_initial_marking(1) == region

    def test_wrong_size(self, utility):
        with pytest.raises(ValueError):
            RegionBuilder.create_pure(utility, [1])
