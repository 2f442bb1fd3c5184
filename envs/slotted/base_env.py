# envs/slotted/base_env.py
# Slot-level packet simulator: S servers, URLLC capped at G servers, FIFO eMBB queue of max_q
from __future__ import annotations
from collections import deque
from dataclasses import dataclass, fields
from typing import Deque, Dict, Tuple
import logging
import numpy as np

from .traffic import SlotTraffic

logger = logging.getLogger("guard_sim.slotted")

IDLE, URLLC, EMBB = 0, 1, 2

@dataclass
class SlottedResult:
    urllc_lost: int = 0
    embb_lost: int = 0
    urllc_transmitted: int = 0
    embb_transmitted: int = 0
    embb_leaving_q: int = 0      # eMBB packets served out of the queue
    total_wait: int = 0          # slots spent in queue by those packets

    def accumulate(self, other: "SlottedResult"):
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    @property
    def avg_wait(self) -> float:
        return self.total_wait / max(self.embb_leaving_q, 1)

class SlottedSliceSim:
    """
    Per slot:
      1) busy servers advance one cycle; a server is freed once cycles >= 10000//mu slots
      2) servers idle at slot start, in index order, take: a URLLC arrival while
         URLLC-in-service (incl. this slot's admissions) < G, else the queue head,
         else a direct eMBB arrival
      3) queued packets age one slot; leftover eMBB arrivals enqueue up to max_q
      4) whatever is still unplaced is lost
    State (x1, x2, x3) = (URLLC in service, eMBB in service, queue length).
    """
    def __init__(
        self,
        *,
        mu_e: int = 1000,
        mu_u: int = 5000,
        servers: int = 1000,
        guard: int = 100,
        max_queue: int = 512,
        urllc_ue: int = 500,
        embb_ue: int = 3000,
        slots_per_s: int = 10000,
    ):
        if servers < 1 or not 0 <= guard <= servers:
            raise ValueError(f"need servers >= 1 and 0 <= guard <= servers, got {servers}/{guard}")
        if mu_e <= 0 or mu_u <= 0:
            raise ValueError("transmission rates must be > 0")
        self.S = servers
        self.G = guard
        self.max_queue = max_queue
        self.slots_per_s = slots_per_s
        self.service_slots_u = max(slots_per_s // mu_u, 1)
        self.service_slots_e = max(slots_per_s // mu_e, 1)
        self.traffic = SlotTraffic(urllc_ue, embb_ue)
        self.reset()

    # --------------------------- Public API ---------------------------

    def reset(self) -> Tuple[int, int, int]:
        self.kind = np.full(self.S, IDLE, dtype=np.int8)
        self.cycles = np.zeros(self.S, dtype=np.int32)
        self.queue: Deque[int] = deque()    # enqueue slot of each waiting packet
        self.x1 = 0
        self.x2 = 0
        self.time_slot = 0
        return self.state

    @property
    def state(self) -> Tuple[int, int, int]:
        return self.x1, self.x2, len(self.queue)

    def step(self) -> SlottedResult:
        t = self.time_slot
        urllc_a, embb_a = self.traffic.step(t)
        res = SlottedResult()
        kind, cycles = self.kind, self.cycles

        idle = np.flatnonzero(kind == IDLE)
        busy = kind != IDLE
        cycles[busy] += 1
        done_u = (kind == URLLC) & (cycles >= self.service_slots_u)
        done_e = (kind == EMBB) & (cycles >= self.service_slots_e)
        res.urllc_transmitted = int(done_u.sum())
        res.embb_transmitted = int(done_e.sum())
        freed = done_u | done_e
        kind[freed] = IDLE
        cycles[freed] = 0

        # admissions only on servers that were idle when the slot began
        n_u = min(len(idle), max(self.G - self.x1, 0), urllc_a)
        n_q = min(len(idle) - n_u, len(self.queue))
        n_d = min(len(idle) - n_u - n_q, embb_a)
        kind[idle[:n_u]] = URLLC
        kind[idle[n_u:n_u + n_q + n_d]] = EMBB
        cycles[idle[:n_u + n_q + n_d]] = 0
        for _ in range(n_q):
            res.total_wait += t - self.queue.popleft() - 1
        res.embb_leaving_q = n_q
        urllc_a -= n_u
        embb_a -= n_d

        n_enq = min(embb_a, max(self.max_queue - len(self.queue), 0))
        self.queue.extend([t] * n_enq)
        embb_a -= n_enq

        res.urllc_lost = urllc_a
        res.embb_lost = embb_a
        self.x1 += n_u - res.urllc_transmitted
        self.x2 += n_q + n_d - res.embb_transmitted
        self.time_slot += 1
        return res

    def run(self, n_slots: int) -> SlottedResult:
        total = SlottedResult()
        for _ in range(n_slots):
            total.accumulate(self.step())
        logger.debug("slotted run: %d slots, final state=%s", n_slots, self.state)
        return total

    def summary(self, res: SlottedResult) -> Dict[str, float]:
        return {
            "embb_leaving_q": res.embb_leaving_q,
            "total_wait": res.total_wait,
            "avg_wait_slots": res.avg_wait,
            "embb_transmitted": res.embb_transmitted,
            "embb_lost": res.embb_lost,
            "urllc_transmitted": res.urllc_transmitted,
            "urllc_lost": res.urllc_lost,
        }

# ------------------------------ smoke test ---------------------------------
if __name__ == "__main__":
    sim = SlottedSliceSim()
    out = sim.run(10000)
    print("OK:", sim.summary(out), "state=", sim.state)
