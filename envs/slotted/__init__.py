"""
slotted: slot-level packet simulator of the URLLC/eMBB slice

Provides:
- SlottedSliceSim (servers + FIFO eMBB wait queue, 0.1 ms slots)
- SlotTraffic (deterministic per-slot arrivals)
"""
from .traffic import SlotTraffic, slot_arrivals
from .base_env import SlottedSliceSim, SlottedResult, IDLE, URLLC, EMBB
