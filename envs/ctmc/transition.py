# envs/ctmc/transition.py
# Competing-exponential sampler for one jump of the (x1, x2, x3) chain
from __future__ import annotations
from enum import IntEnum
from typing import List, NamedTuple, Optional, Tuple
import math
import numpy as np

from .params import SliceParams, State

# smallest positive double: keeps U1 inside (0,1) so the holding time stays finite and > 0
_U_MIN = float(np.nextafter(0.0, 1.0))

class EventKind(IntEnum):
    URLLC_DEPARTURE = 0
    EMBB_COMPLETION = 1
    URLLC_ARRIVAL = 2
    EMBB_ARRIVAL = 3
    EMBB_BLOCKED = 4

class Event(NamedTuple):
    kind: EventKind
    rate: float
    next_state: State

class Jump(NamedTuple):
    holding_time: float
    kind: EventKind
    next_state: State

def enabled_events(state: State, p: SliceParams) -> List[Event]:
    """
    Ordered list of enabled events at `state`:
      URLLC departure, eMBB completion, URLLC arrival, then exactly one eMBB-arrival branch.
    The order fixes the tie-break used by sample_transition.
    """
    x1, x2, x3 = state
    busy = x1 + x2
    events: List[Event] = []
    if x1 > 0:
        events.append(Event(EventKind.URLLC_DEPARTURE, 2.0 * p.mu * x1, (x1 - 1, x2, x3)))
    if x2 > 0:
        if busy <= p.S - p.G and x3 > 0:
            # a waiting unit takes the freed slot
            nxt = (x1, x2, x3 - 1)
        else:
            nxt = (x1, x2 - 1, x3)
        events.append(Event(EventKind.EMBB_COMPLETION, p.mu * x2, nxt))
    if busy < p.S:
        events.append(Event(EventKind.URLLC_ARRIVAL, p.lambda_u, (x1 + 1, x2, x3)))
    if busy < p.S - p.G:
        events.append(Event(EventKind.EMBB_ARRIVAL, p.lambda_e, (x1, x2 + 1, x3)))
    else:
        events.append(Event(EventKind.EMBB_BLOCKED, p.lambda_e, (x1, x2, x3 + 1)))
    return events

def sample_transition(state: State, p: SliceParams, u1: float, u2: float) -> Jump:
    """
    Inverse-CDF jump: holding = -ln(u1)/total_rate, event = first with cumulative mass >= u2.
    Deterministic in (state, p, u1, u2).
    """
    events = enabled_events(state, p)
    total = 0.0
    for ev in events:
        total += ev.rate
    if total <= 0.0:
        raise ValueError(f"no event has positive rate at state {state}")
    holding = -math.log(u1) / total

    cumulative = 0.0
    for ev in events:
        if ev.rate <= 0.0:
            continue
        cumulative += ev.rate / total
        if u2 <= cumulative:
            chosen = ev
            break
    else:
        # rounding left u2 above the last cumulative mass: take the last event with mass
        chosen = [ev for ev in events if ev.rate > 0.0][-1]
    return Jump(holding, chosen.kind, chosen.next_state)

class TransitionSampler:
    """
    Stateful wrapper owning one numpy Generator; never share an instance across processes.
    Uniforms are drawn in blocks to keep per-jump overhead low.
    """
    def __init__(self, params: SliceParams, rng: np.random.Generator, block: int = 4096):
        self.params = params
        self.rng = rng
        self.block = block
        self._buf: Optional[np.ndarray] = None
        self._pos = 0

    def _uniforms(self) -> Tuple[float, float]:
        if self._buf is None or self._pos >= len(self._buf):
            self._buf = self.rng.uniform(_U_MIN, 1.0, size=(self.block, 2))
            self._pos = 0
        u1, u2 = self._buf[self._pos]
        self._pos += 1
        return float(u1), float(u2)

    def step(self, state: State) -> Jump:
        u1, u2 = self._uniforms()
        return sample_transition(state, self.params, u1, u2)
