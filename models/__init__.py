"""
Models package: analytic reference values and Monte Carlo error estimates.

Includes:
- erlang_b / urllc_only_loss (loss probability of the URLLC-only system)
- min_servers_for_loss
- mean_stderr (mean and standard error of per-trajectory estimates)
"""
from .metrics import erlang_b, urllc_only_loss, min_servers_for_loss, mean_stderr
