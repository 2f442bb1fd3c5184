# envs/slotted/traffic.py
# Deterministic per-slot arrivals: n//10 every slot, plus the n%10 remainder every 10th slot
from __future__ import annotations
from typing import Tuple

def slot_arrivals(time_slot: int, n_ue: int) -> int:
    return n_ue // 10 + (n_ue % 10 if time_slot % 10 == 0 else 0)

class SlotTraffic:
    """URLLC / eMBB packet arrivals for one slot, driven by the UE counts of each class."""
    def __init__(self, urllc_ue: int, embb_ue: int):
        if urllc_ue < 0 or embb_ue < 0:
            raise ValueError("UE counts must be >= 0")
        self.urllc_ue = urllc_ue
        self.embb_ue = embb_ue

    def step(self, time_slot: int) -> Tuple[int, int]:
        return slot_arrivals(time_slot, self.urllc_ue), slot_arrivals(time_slot, self.embb_ue)
