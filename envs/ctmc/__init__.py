"""
ctmc: Monte Carlo estimator for the URLLC/eMBB guard-channel chain

Provides:
- SliceParams / State (rate set, (x1, x2, x3) state)
- TransitionSampler (one competing-exponential jump)
- simulate_trajectory (time-averaged statistics of one sample path)
- search_guard (smallest G meeting the loss threshold)
- SweepOrchestrator (process-parallel sweep over the eMBB load grid)
"""
from .params import SliceParams, State, EMPTY_STATE
from .transition import EventKind, Event, Jump, enabled_events, sample_transition, TransitionSampler
from .trajectory import TrajectoryResult, simulate_trajectory
from .guard_search import GuardSearchResult, average_trajectories, search_guard
from .sweep import SweepGrid, SweepRecord, SweepOrchestrator, SweepError
