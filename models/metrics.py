# models/metrics.py
# Analytic reference values for the simulated chain (Erlang loss system) and Monte Carlo error helpers
from __future__ import annotations
import math
from typing import Iterable, Tuple
import numpy as np

def erlang_b(servers: int, offered_load: float) -> float:
    """
    Blocking probability of an M/M/c/c loss system, via the stable recursion
      B(0) = 1,  B(k) = A*B(k-1) / (k + A*B(k-1)).
    """
    if servers < 0:
        raise ValueError("servers must be >= 0")
    if offered_load < 0:
        raise ValueError("offered_load must be >= 0")
    b = 1.0
    for k in range(1, servers + 1):
        b = offered_load * b / (k + offered_load * b)
    return b

def urllc_only_loss(S: int, lambda_u: float, mu: float) -> float:
    """
    Time fraction at full occupancy when no eMBB traffic is offered:
    URLLC units leave at 2*mu each, so the offered load is lambda_u / (2*mu).
    """
    return erlang_b(S, lambda_u / (2.0 * mu))

def min_servers_for_loss(lambda_u: float, mu: float, seuil: float, max_servers: int = 100000) -> int:
    """Smallest S whose URLLC-only loss is <= seuil (lower bound on any useful S)."""
    A = lambda_u / (2.0 * mu)
    b = 1.0
    for k in range(1, max_servers + 1):
        b = A * b / (k + A * b)
        if b <= seuil:
            return k
    raise ValueError(f"no S <= {max_servers} reaches loss {seuil}")

# ------------------------------ Monte Carlo ------------------------------ #

def mean_stderr(samples: Iterable[float]) -> Tuple[float, float]:
    """
    Sample mean and its standard error s / sqrt(n), s with the n-1 denominator.
    A single sample has no error estimate (nan).
    """
    x = np.asarray(list(samples), dtype=np.float64)
    if x.size == 0:
        raise ValueError("no samples")
    if x.size == 1:
        return float(x[0]), float("nan")
    return float(x.mean()), float(x.std(ddof=1) / math.sqrt(x.size))
