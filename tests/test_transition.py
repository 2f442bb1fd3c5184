# tests/test_transition.py
import itertools
import numpy as np
import pytest
from envs.ctmc import SliceParams, EventKind, enabled_events, sample_transition, TransitionSampler

def _states(S, max_x3=3):
    for x1, x2 in itertools.product(range(S + 1), repeat=2):
        if x1 + x2 <= S:
            for x3 in range(max_x3 + 1):
                yield (x1, x2, x3)

@pytest.mark.parametrize("G", [0, 2, 5])
def test_every_state_has_positive_holding_time_and_unit_step(G):
    p = SliceParams(lambda_u=3.0, lambda_e=4.0, mu=1.5, S=5, G=G)
    rng = np.random.default_rng(0)
    for state in _states(p.S):
        events = enabled_events(state, p)
        assert 2 <= len(events) <= 4
        # exactly one eMBB-arrival branch
        kinds = [ev.kind for ev in events]
        assert (EventKind.EMBB_ARRIVAL in kinds) != (EventKind.EMBB_BLOCKED in kinds)
        for ev in events:
            diff = np.subtract(ev.next_state, state)
            assert np.count_nonzero(diff) == 1 and np.abs(diff).sum() == 1
            assert min(ev.next_state) >= 0
            assert ev.next_state[0] + ev.next_state[1] <= p.S
        for _ in range(5):
            u1, u2 = rng.uniform(1e-12, 1.0, size=2)
            jump = sample_transition(state, p, u1, u2)
            assert jump.holding_time > 0.0
            assert jump.next_state in [ev.next_state for ev in events]

def test_fixed_order_and_rates():
    p = SliceParams(lambda_u=5.0, lambda_e=7.0, mu=2.0, S=10, G=3)
    events = enabled_events((2, 3, 1), p)
    assert [ev.kind for ev in events] == [
        EventKind.URLLC_DEPARTURE, EventKind.EMBB_COMPLETION,
        EventKind.URLLC_ARRIVAL, EventKind.EMBB_ARRIVAL,
    ]
    assert [ev.rate for ev in events] == [8.0, 6.0, 5.0, 7.0]   # 2*mu*x1, mu*x2, lambda_u, lambda_e
    # x1+x2 = 5 <= S-G = 7 with a waiting unit: completion promotes it
    assert events[1].next_state == (2, 3, 0)

def test_completion_without_room_releases_the_unit():
    p = SliceParams(lambda_u=1.0, lambda_e=1.0, mu=1.0, S=6, G=2)
    events = {ev.kind: ev for ev in enabled_events((2, 3, 4), p)}   # busy 5 > S-G 4
    assert events[EventKind.EMBB_COMPLETION].next_state == (2, 2, 4)
    assert events[EventKind.EMBB_BLOCKED].next_state == (2, 3, 5)
    assert EventKind.EMBB_ARRIVAL not in events

def test_full_system_only_departures_and_blocked_arrival():
    p = SliceParams(lambda_u=1.0, lambda_e=1.0, mu=1.0, S=4, G=0)
    kinds = [ev.kind for ev in enabled_events((1, 3, 0), p)]
    assert kinds == [EventKind.URLLC_DEPARTURE, EventKind.EMBB_COMPLETION, EventKind.EMBB_BLOCKED]

def test_inverse_cdf_selection_is_deterministic():
    p = SliceParams(lambda_u=1.0, lambda_e=3.0, mu=1.0, S=4)
    # empty state: URLLC arrival (mass 0.25) then eMBB arrival (0.75)
    a = sample_transition((0, 0, 0), p, 0.5, 0.25)
    b = sample_transition((0, 0, 0), p, 0.5, 0.2500001)
    assert a.kind == EventKind.URLLC_ARRIVAL and a.next_state == (1, 0, 0)
    assert b.kind == EventKind.EMBB_ARRIVAL and b.next_state == (0, 1, 0)
    assert a.holding_time == pytest.approx(-np.log(0.5) / 4.0)
    assert sample_transition((0, 0, 0), p, 0.5, 0.25) == a

def test_zero_rate_branch_never_selected():
    p = SliceParams(lambda_u=2.0, lambda_e=0.0, mu=1.0, S=3)
    jump = sample_transition((0, 0, 0), p, 0.3, 1.0)
    assert jump.kind == EventKind.URLLC_ARRIVAL

def test_sampler_reproducible_with_same_seed():
    p = SliceParams(lambda_u=4.0, lambda_e=2.0, mu=1.0, S=5, G=1)
    def path(seed):
        s = TransitionSampler(p, np.random.default_rng(seed), block=16)
        x, out = (0, 0, 0), []
        for _ in range(100):   # crosses several uniform blocks
            j = s.step(x)
            out.append(j)
            x = j.next_state
        return out
    assert path(7) == path(7)
    assert path(7) != path(8)

def test_guard_bounds_validated():
    with pytest.raises(ValueError):
        SliceParams(lambda_u=1.0, lambda_e=1.0, mu=1.0, S=4, G=5)
    with pytest.raises(ValueError):
        SliceParams(lambda_u=0.0, lambda_e=0.0, mu=1.0, S=4)
