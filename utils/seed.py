# utils/seed.py
# Seed handling: one base entropy per run, independent numpy streams derived per worker / grid point.
from __future__ import annotations
import os
from typing import Optional
import numpy as np

def seed_from_env(env_var: str = "SEED", default: Optional[int] = 42) -> Optional[int]:
    """Seed from the environment (SEED=none -> fresh entropy), falling back to `default`."""
    raw = os.environ.get(env_var)
    if raw is None:
        return default
    if raw.strip().lower() in ("", "none"):
        return None
    try:
        return int(raw)
    except ValueError:
        return default

def point_seed(entropy: int, worker_id: int, index: int) -> np.random.SeedSequence:
    """Stream for one grid point, keyed by (base entropy, owning worker, index)."""
    return np.random.SeedSequence(entropy, spawn_key=(worker_id, index))

def resolve_entropy(seed: Optional[int]) -> int:
    """Base entropy of a run; seed=None draws fresh OS entropy (logged so the run can be replayed)."""
    return int(np.random.SeedSequence(seed).entropy)
