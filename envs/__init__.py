"""
envs package

Simulation models of a URLLC/eMBB shared slice.
- ctmc    : Continuous-time Markov chain estimator of the guard-channel count.
- slotted : Slot-level packet simulator with an explicit eMBB wait queue.
"""
