# envs/ctmc/guard_search.py
# Smallest guard G whose averaged loss estimate meets the threshold, for one load point
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
import logging
import numpy as np

from models.metrics import mean_stderr

from .params import SliceParams
from .trajectory import TrajectoryResult, simulate_trajectory

logger = logging.getLogger("guard_sim.search")

SeedLike = Union[None, int, np.random.SeedSequence]

@dataclass
class GuardSearchResult:
    guard: Optional[int]                # None when no G < S meets the threshold
    stats: TrajectoryResult             # averaged stats at `guard` (or at the last G tried)
    history: List[Tuple[int, float]] = field(default_factory=list)  # (G, averaged loss)
    loss_stderr: float = float("nan")   # standard error of stats.loss over the nb_sim paths

    @property
    def feasible(self) -> bool:
        return self.guard is not None

    @property
    def last_guard(self) -> int:
        return self.history[-1][0]

def _as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)

def average_trajectories(params: SliceParams, nb_iter: float, nb_sim: int,
                         seed: SeedLike = None, return_stderr: bool = False):
    """
    Mean of nb_sim trajectories, each on its own generator spawned from `seed`.
    With return_stderr, also the standard error of the loss estimate.
    """
    seq = _as_seed_sequence(seed)
    paths = [simulate_trajectory(params, nb_iter, np.random.default_rng(child))
             for child in seq.spawn(nb_sim)]
    mean = TrajectoryResult.mean(paths)
    if return_stderr:
        return mean, mean_stderr(r.loss for r in paths)[1]
    return mean

def search_guard(params: SliceParams, *, nb_iter: float, nb_sim: int, seuil: float,
                 seed: SeedLike = None) -> GuardSearchResult:
    """
    G = 0, 1, ..., S-1: stop at the first G whose averaged loss <= seuil.
    G = S is never evaluated (direct eMBB admission would be disabled for good);
    exhausting the range yields an infeasible result.
    """
    seq = _as_seed_sequence(seed)
    history: List[Tuple[int, float]] = []
    stats, se = TrajectoryResult(), float("nan")
    for G in range(params.S):
        stats, se = average_trajectories(params.with_guard(G), nb_iter, nb_sim, seed=seq,
                                         return_stderr=True)
        history.append((G, stats.loss))
        logger.debug("lambda_e=%g G=%d loss=%.3e (se %.1e)", params.lambda_e, G, stats.loss, se)
        if stats.loss <= seuil:
            return GuardSearchResult(guard=G, stats=stats, history=history, loss_stderr=se)
    logger.warning("lambda_e=%g: loss %.3e (se %.1e) never reached %.1e for G < S=%d (infeasible)",
                   params.lambda_e, stats.loss, se, seuil, params.S)
    return GuardSearchResult(guard=None, stats=stats, history=history, loss_stderr=se)
