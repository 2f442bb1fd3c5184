# envs/ctmc/params.py
# Immutable rate set and state type of the 3-dimensional URLLC/eMBB chain
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple

# (x1, x2, x3) = (URLLC in service, eMBB in service, eMBB waiting)
State = Tuple[int, int, int]
EMPTY_STATE: State = (0, 0, 0)

@dataclass(frozen=True)
class SliceParams:
    lambda_u: float     # URLLC arrival rate
    lambda_e: float     # eMBB arrival rate (swept)
    mu: float           # per-unit service rate
    S: int              # total capacity units
    G: int = 0          # guard channels reserved for URLLC

    def __post_init__(self):
        if self.S < 1:
            raise ValueError(f"S must be >= 1, got {self.S}")
        if not 0 <= self.G <= self.S:
            raise ValueError(f"G must be in [0, S={self.S}], got {self.G}")
        if self.lambda_u < 0 or self.lambda_e < 0:
            raise ValueError("arrival rates must be >= 0")
        if self.mu <= 0:
            raise ValueError("mu must be > 0")
        if self.lambda_u + self.lambda_e <= 0:
            raise ValueError("lambda_u + lambda_e must be > 0")

    @property
    def total_arrival_rate(self) -> float:
        return self.lambda_u + self.lambda_e

    def horizon(self, nb_iter: float) -> float:
        """Simulated time whose expected jump count is about nb_iter, whatever the load."""
        return nb_iter / self.total_arrival_rate

    def with_guard(self, G: int) -> "SliceParams":
        return replace(self, G=G)
