# envs/ctmc/trajectory.py
# One sample path from the empty state to the normalized horizon
from __future__ import annotations
from dataclasses import dataclass, astuple, fields
from typing import Iterable, Tuple
import numpy as np

from .params import SliceParams, EMPTY_STATE
from .transition import EventKind, TransitionSampler

@dataclass
class TrajectoryResult:
    loss: float = 0.0        # time fraction with x1+x2 == S
    wait_avg: float = 0.0    # time-average of x3
    wait_max: float = 0.0    # max x3 seen before a jump
    urllc_tot: float = 0.0   # accepted URLLC arrivals
    urllc_max: float = 0.0   # max x1 after a URLLC arrival
    embb_tot: float = 0.0    # eMBB arrivals taken into service directly

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def as_array(self) -> np.ndarray:
        return np.asarray(astuple(self), dtype=np.float64)

    @classmethod
    def from_array(cls, arr) -> "TrajectoryResult":
        return cls(*(float(v) for v in arr))

    @classmethod
    def mean(cls, results: Iterable["TrajectoryResult"]) -> "TrajectoryResult":
        """Field-wise arithmetic mean."""
        total = np.zeros(len(cls.field_names()), dtype=np.float64)
        n = 0
        for r in results:
            total += r.as_array()
            n += 1
        if n == 0:
            raise ValueError("cannot average an empty set of trajectories")
        return cls.from_array(total / n)

def simulate_trajectory(params: SliceParams, nb_iter: float, rng: np.random.Generator,
                        return_jumps: bool = False):
    """
    Time-average estimators over [0, horizon], horizon = nb_iter / (lambda_e + lambda_u).
    Occupancy accumulators use the pre-jump state; the overshooting last holding time is
    truncated at the horizon. Counts and maxima are returned raw.
    """
    horizon = params.horizon(nb_iter)
    sampler = TransitionSampler(params, rng)
    S = params.S

    x = EMPTY_STATE
    elapsed = 0.0
    loss_time = 0.0
    wait_mass = 0.0
    wait_max = 0
    urllc_tot = 0
    urllc_max = 0
    embb_tot = 0
    n_jumps = 0

    while elapsed < horizon:
        jump = sampler.step(x)
        dt = min(jump.holding_time, horizon - elapsed)
        x1, x2, x3 = x
        if x1 + x2 == S:
            loss_time += dt
        wait_mass += x3 * dt
        if x3 > wait_max:
            wait_max = x3
        if jump.kind == EventKind.URLLC_ARRIVAL:
            urllc_tot += 1
            if jump.next_state[0] > urllc_max:
                urllc_max = jump.next_state[0]
        elif jump.kind == EventKind.EMBB_ARRIVAL:
            embb_tot += 1
        elapsed += jump.holding_time
        x = jump.next_state
        n_jumps += 1

    res = TrajectoryResult(
        loss=loss_time / horizon,
        wait_avg=wait_mass / horizon,
        wait_max=float(wait_max),
        urllc_tot=float(urllc_tot),
        urllc_max=float(urllc_max),
        embb_tot=float(embb_tot),
    )
    if return_jumps:
        return res, n_jumps
    return res
