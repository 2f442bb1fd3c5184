# envs/ctmc/sweep.py
# Process-parallel sweep of the guard search over an eMBB load grid.
# Slots of the shared results table are owned by exactly one worker (round-robin on index)
# and read by the coordinator only after every worker has been joined.
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging
import math
import multiprocessing as mp
import time
import numpy as np
from tqdm import tqdm

from utils.seed import point_seed, resolve_entropy

from .params import SliceParams
from .trajectory import TrajectoryResult
from .guard_search import search_guard

logger = logging.getLogger("guard_sim.sweep")

_STAT_FIELDS = TrajectoryResult.field_names()
# table row: [guard, feasible, *stats]; NaN marks a slot nobody wrote
_COL_GUARD, _COL_FEASIBLE, _COL_STATS = 0, 1, 2
N_COLS = _COL_STATS + len(_STAT_FIELDS)

class SweepError(RuntimeError):
    pass

# ------------------------------ grid ------------------------------ #

@dataclass(frozen=True)
class SweepGrid:
    start: float
    end: float
    step: float

    def __post_init__(self):
        if self.step <= 0 or self.end < self.start:
            raise ValueError(f"invalid grid [{self.start}, {self.end}] step {self.step}")

    def __len__(self) -> int:
        return int(math.floor((self.end - self.start) / self.step + 1e-9)) + 1

    @property
    def values(self) -> List[float]:
        # start + k*step avoids accumulating float error over long grids
        return [self.start + k * self.step for k in range(len(self))]

    def partition(self, workers: int) -> List[List[int]]:
        """Round-robin: index i belongs to worker i % workers."""
        return [list(range(w, len(self), workers)) for w in range(workers)]

# ----------------------------- records ---------------------------- #

@dataclass
class SweepRecord:
    index: int
    load: float                 # lambda_e
    guard: Optional[int]        # G*, None if infeasible
    stats: TrajectoryResult
    S: int
    mu: float
    horizon: float

    @property
    def feasible(self) -> bool:
        return self.guard is not None

    @property
    def load_factor(self) -> float:
        """eMBB load per non-reserved unit: E / (mu * (S - G))."""
        if self.guard is None or self.guard >= self.S:
            return float("nan")
        return self.load / (self.mu * (self.S - self.guard))

    @property
    def guard_pct(self) -> float:
        if self.guard is None:
            return float("nan")
        return 100.0 * self.guard / self.S

# ----------------------------- worker ----------------------------- #

def _sweep_worker(worker_id: int, indices: Sequence[int], loads: Sequence[float],
                  lambda_u: float, mu: float, S: int,
                  nb_iter: float, nb_sim: int, seuil: float, entropy: int,
                  table, progress):
    view = np.frombuffer(table, dtype=np.float64).reshape(-1, N_COLS)
    for idx in indices:
        params = SliceParams(lambda_u=lambda_u, lambda_e=loads[idx], mu=mu, S=S)
        seq = point_seed(entropy, worker_id, idx)
        res = search_guard(params, nb_iter=nb_iter, nb_sim=nb_sim, seuil=seuil, seed=seq)
        row = view[idx]
        row[_COL_STATS:] = res.stats.as_array()
        row[_COL_GUARD] = res.guard if res.feasible else res.last_guard
        row[_COL_FEASIBLE] = 1.0 if res.feasible else 0.0
        with progress.get_lock():
            progress.value += 1
        s = res.stats
        logger.info("E=%g, G=%s, L=%e (se %.1e), U=%f, T=%f, B=%f, A=%f, M=%f, H=%f",
                    loads[idx], res.guard, s.loss, res.loss_stderr, s.urllc_tot, s.urllc_max, s.embb_tot,
                    s.wait_avg, s.wait_max, params.horizon(nb_iter))

# -------------------------- orchestrator -------------------------- #

class SweepOrchestrator:
    def __init__(
        self,
        grid: SweepGrid,
        *,
        S: int,
        lambda_u: float = 500.0,
        mu: float = 1.0,
        nb_iter: float = 5e4,
        nb_sim: int = 50000,
        seuil: float = 1e-5,
        workers: int = 64,
        poll_interval_s: float = 0.1,
        seed: Optional[int] = None,
        show_progress: bool = True,
    ):
        # validates S / rates once, before any process is started
        SliceParams(lambda_u=lambda_u, lambda_e=grid.start, mu=mu, S=S)
        self.grid = grid
        self.S = S
        self.lambda_u = lambda_u
        self.mu = mu
        self.nb_iter = nb_iter
        self.nb_sim = nb_sim
        self.seuil = seuil
        self.workers = max(1, min(workers, len(grid)))
        self.poll_interval_s = poll_interval_s
        # one entropy value for the whole run; workers derive their streams from it
        self.entropy = resolve_entropy(seed)
        self.show_progress = show_progress
        self.elapsed_s = 0.0

    def run(self) -> List[SweepRecord]:
        n = len(self.grid)
        loads = self.grid.values
        try:
            table = mp.Array("d", n * N_COLS, lock=False)
            progress = mp.Value("i", 0)
        except OSError as e:
            raise SweepError(f"cannot allocate shared results table: {e}") from e
        np.frombuffer(table, dtype=np.float64)[:] = np.nan

        logger.info("sweep: %d load points, %d workers, S=%d, entropy=%d",
                    n, self.workers, self.S, self.entropy)
        t0 = time.time()
        procs = []
        for w, indices in enumerate(self.grid.partition(self.workers)):
            p = mp.Process(
                target=_sweep_worker,
                args=(w, indices, loads, self.lambda_u, self.mu, self.S,
                      self.nb_iter, self.nb_sim, self.seuil, self.entropy, table, progress),
                name=f"sweep-worker-{w}",
            )
            p.start()
            procs.append(p)

        self._poll(procs, progress, n)
        for p in procs:
            p.join()
        self.elapsed_s = time.time() - t0

        failed = [p.name for p in procs if p.exitcode != 0]
        if failed:
            raise SweepError(f"workers exited abnormally: {', '.join(failed)}")
        return self._collect(np.frombuffer(table, dtype=np.float64).reshape(n, N_COLS), loads)

    # ----------------------------- helpers ------------------------------

    def _poll(self, procs, progress, total: int):
        """Progress display only; results are never read here."""
        seen = 0
        with tqdm(total=total, desc=f"S={self.S}", unit="pt", disable=not self.show_progress) as pbar:
            while any(p.is_alive() for p in procs):
                time.sleep(self.poll_interval_s)
                cur = progress.value
                if cur != seen:
                    pbar.update(cur - seen)
                    seen = cur
            pbar.update(progress.value - seen)

    def _collect(self, view: np.ndarray, loads: List[float]) -> List[SweepRecord]:
        missing = np.flatnonzero(np.isnan(view[:, _COL_FEASIBLE]))
        if missing.size:
            raise SweepError(f"unpopulated sweep slots: {missing.tolist()}")
        records = []
        for idx, load in enumerate(loads):
            row = view[idx]
            feasible = row[_COL_FEASIBLE] > 0.5
            records.append(SweepRecord(
                index=idx,
                load=load,
                guard=int(row[_COL_GUARD]) if feasible else None,
                stats=TrajectoryResult.from_array(row[_COL_STATS:]),
                S=self.S,
                mu=self.mu,
                horizon=self.nb_iter / (load + self.lambda_u),
            ))
        return records
