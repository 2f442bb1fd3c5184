# tests/test_slotted.py
import pytest
from envs.slotted import SlottedSliceSim, SlottedResult, slot_arrivals

def test_arrivals_spread_over_ten_slots():
    assert slot_arrivals(0, 3000) == 300
    assert slot_arrivals(0, 25) == 7 and slot_arrivals(1, 25) == 2
    assert sum(slot_arrivals(t, 25) for t in range(10)) == 25

def test_first_slots_by_hand():
    # URLLC lasts 2 slots, eMBB 10 slots; 2 URLLC + 3 eMBB arrivals per slot
    sim = SlottedSliceSim(mu_e=1000, mu_u=5000, servers=4, guard=1, max_queue=2,
                          urllc_ue=20, embb_ue=30)
    r0 = sim.step()
    assert (r0.urllc_lost, r0.embb_lost) == (1, 0)       # URLLC capped at G=1
    assert sim.state == (1, 3, 0)
    r1 = sim.step()                                       # no idle server
    assert (r1.urllc_lost, r1.embb_lost) == (2, 1)
    assert sim.state == (1, 3, 2)
    r2 = sim.step()                                       # URLLC done; slot not reused yet
    assert r2.urllc_transmitted == 1
    assert sim.state == (0, 3, 2)
    r3 = sim.step()
    assert sim.state == (1, 3, 2) and r3.urllc_lost == 1

def test_packet_conservation_and_caps():
    sim = SlottedSliceSim(mu_e=1000, mu_u=5000, servers=20, guard=5, max_queue=8,
                          urllc_ue=30, embb_ue=25)
    total = SlottedResult()
    total_u = total_e = 0
    for t in range(300):
        total_u += slot_arrivals(t, 30)
        total_e += slot_arrivals(t, 25)
        total.accumulate(sim.step())
        x1, x2, x3 = sim.state
        assert x1 <= 5 and x1 + x2 <= 20 and x3 <= 8
    x1, x2, x3 = sim.state
    assert total.urllc_transmitted + total.urllc_lost + x1 == total_u
    assert total.embb_transmitted + total.embb_lost + x2 + x3 == total_e
    assert total.embb_leaving_q > 0 and total.total_wait >= 0
    assert total.avg_wait == pytest.approx(total.total_wait / total.embb_leaving_q)

def test_run_matches_stepping():
    kw = dict(servers=20, guard=5, max_queue=8, urllc_ue=30, embb_ue=25)
    a, b = SlottedSliceSim(**kw), SlottedSliceSim(**kw)
    total = SlottedResult()
    for _ in range(50):
        total.accumulate(a.step())
    assert b.run(50) == total and a.state == b.state

def test_invalid_guard_rejected():
    with pytest.raises(ValueError):
        SlottedSliceSim(servers=10, guard=11)
