"""
Shared fixtures: transition systems, configurations and backends.
"""

import shutil

import pytest

from synpn.exec.config import Configuration
from synpn.ptio.lts import TransitionSystem
from synpn.separation.session import Backend

HAS_Z3 = shutil.which('z3') is not None


def make_ts(arcs, ts_id="ts", states=None):
    """ Transition system from `(source, label, target)` triples, first source is initial.
    """
    ts = TransitionSystem(ts_id)
    for state_id in states or []:
        ts.create_state(state_id)
    for source, _, target in arcs:
        for state_id in (source, target):
            if state_id not in ts.states:
                ts.create_state(state_id)
    for source, label, target in arcs:
        ts.create_arc(source, label, target)
    return ts


@pytest.fixture
def config():
    return Configuration()


@pytest.fixture(params=[Backend.SMT, Backend.ILP], ids=['smt', 'ilp'])
def backend(request):
    if request.param is Backend.SMT and not HAS_Z3:
        pytest.skip("z3 executable not available")
    return request.param


@pytest.fixture
def z3_backend():
    if not HAS_Z3:
        pytest.skip("z3 executable not available")
    return Backend.SMT


@pytest.fixture
def ping_pong():
    """ s0 --a--> s1 --b--> s0 """
    return make_ts([('s0', 'a', 's1'), ('s1', 'b', 's0')], "ping_pong")


@pytest.fixture
def abc_cycle():
    """ s0 --a--> s1 --b--> s2 --c--> s0 """
    return make_ts([('s0', 'a', 's1'), ('s1', 'b', 's2'), ('s2', 'c', 's0')], "abc_cycle")


@pytest.fixture
def diamond():
    """ Two concurrent events a and b. """
    return make_ts([('s0', 'a', 's1'), ('s0', 'b', 's2'), ('s1', 'b', 's3'), ('s2', 'a', 's3')], "diamond")


@pytest.fixture
def choice():
    """ a and b in conflict, then back to the start with c. """
    return make_ts([('s0', 'a', 's1'), ('s0', 'b', 's2'), ('s1', 'c', 's0'), ('s2', 'c', 's0')], "choice")


@pytest.fixture
def word_aa():
    """ The word `aa`: not synthesizable by a safe net. """
    return make_ts([('s0', 'a', 's1'), ('s1', 'a', 's2')], "word_aa")


@pytest.fixture
def with_unreachable():
    """ s0 --a--> s1, plus an unreachable state u --a--> s0. """
    return make_ts([('s0', 'a', 's1'), ('u', 'a', 's0')], "with_unreachable")
