"""
Config loader & validator for the guard-channel sweep.
- Supports stacking multiple YAMLs (base -> overrides -> ablations)
- CLI-style overrides: key1.key2=value (optional)
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, get_type_hints
import copy
import os
import re
import yaml

DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), "default.yaml")

# ------------------------- dataclass schema ------------------------- #

@dataclass
class RunCfg:
    seed: Optional[int] = 42          # None -> fresh OS entropy
    run_name: str = "guard_sweep"
    output_dir: str = "runs/guard_sweep"

@dataclass
class LoggingCfg:
    level: str = "INFO"
    logfile: Optional[str] = None
    tensorboard: bool = False
    csv: bool = True
    progress: bool = True

@dataclass
class TrafficCfg:
    lambda_u: float = 500.0           # URLLC arrival rate
    mu: float = 1.0                   # per-unit service rate

@dataclass
class SearchCfg:
    nb_iter: float = 5e4              # expected jumps per trajectory
    nb_sim: int = 50000               # trajectories averaged per G candidate
    seuil: float = 1e-5               # loss threshold

@dataclass
class SweepCfg:
    start: float = 0.0
    end: float = 1250.0
    step: float = 5.0
    workers: int = 64
    poll_interval_s: float = 0.1

@dataclass
class SlottedCfg:
    mu_e: int = 1000                  # eMBB transmissions per second
    mu_u: int = 5000                  # URLLC transmissions per second
    servers: int = 1000               # S
    guard: int = 100                  # G, URLLC server cap
    max_queue: int = 512
    urllc_ue: int = 500
    embb_ue: int = 3000
    duration_s: int = 5
    slots_per_s: int = 10000          # 0.1 ms slots

@dataclass
class Config:
    cfg_version: int = 1
    run: RunCfg = field(default_factory=RunCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)
    traffic: TrafficCfg = field(default_factory=TrafficCfg)
    search: SearchCfg = field(default_factory=SearchCfg)
    sweep: SweepCfg = field(default_factory=SweepCfg)
    slotted: SlottedCfg = field(default_factory=SlottedCfg)

# --------------------------- load & merge --------------------------- #

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge b into a (modifies and returns a)."""
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(a.get(k), dict):
            _deep_merge(a[k], v)
        else:
            a[k] = copy.deepcopy(v)
    return a

def _load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def _interpolate_env_vars(d: Dict[str, Any]) -> Dict[str, Any]:
    """Expand ${VAR} and ${a.b} style placeholders if present."""
    pat = re.compile(r"\$\{([^}]+)\}")
    def _expand(val: Any, ctx: Dict[str, Any]) -> Any:
        if isinstance(val, str):
            def repl(m):
                key = m.group(1)
                # support ${ENV} or ${a.b.c} from ctx
                if key in os.environ:
                    return os.environ[key]
                cur = ctx
                for part in key.split("."):
                    cur = cur.get(part, "") if isinstance(cur, dict) else ""
                return str(cur)
            return pat.sub(repl, val)
        if isinstance(val, dict):
            return {k: _expand(v, ctx) for k, v in val.items()}
        if isinstance(val, list):
            return [_expand(v, ctx) for v in val]
        return val
    return _expand(d, d)

def load_config(paths: Optional[List[str]] = None, overrides: Optional[List[str]] = None) -> Config:
    """Load one or more YAML files (default.yaml if none) and apply CLI-style overrides."""
    merged: Dict[str, Any] = {}
    for p in (paths or [DEFAULT_CONFIG]):
        _deep_merge(merged, _load_yaml(p))
    if overrides:
        for ov in overrides:
            # example: "sweep.workers=8"
            if "=" not in ov:
                raise ValueError(f"override '{ov}' must look like key.sub=value")
            key, val = ov.split("=", 1)
            _apply_override(merged, key.strip(), _parse_val(val.strip()))
    merged = _interpolate_env_vars(merged)
    cfg = _to_dataclass(Config, merged)
    validate_config(cfg)
    return cfg

# --------------------------- overrides ----------------------------- #

def _parse_val(v: str) -> Any:
    if v.lower() in ("true", "false"):
        return v.lower() == "true"
    if v.lower() in ("null", "none", "~"):
        return None
    for cast in (int, float):
        try:
            return cast(v)
        except ValueError:
            pass
    return v  # string

def _apply_override(d: Dict[str, Any], dotted: str, value: Any):
    cur = d
    parts = dotted.split(".")
    for p in parts[:-1]:
        if p not in cur or not isinstance(cur[p], dict):
            cur[p] = {}
        cur = cur[p]
    cur[parts[-1]] = value

# ---------------------- dict -> dataclass -------------------------- #

def _to_dataclass(cls, data: Dict[str, Any]):
    """Recursively instantiate dataclasses from dict (unknown keys are rejected)."""
    if not hasattr(cls, "__dataclass_fields__"):
        return data
    hints = get_type_hints(cls)
    unknown = set(data) - set(cls.__dataclass_fields__)
    if unknown:
        raise ValueError(f"unknown config keys for {cls.__name__}: {sorted(unknown)}")
    kwargs = {}
    for name in cls.__dataclass_fields__:
        if name not in data:
            continue
        ftype = hints[name]
        val = data[name]
        if hasattr(ftype, "__dataclass_fields__"):
            kwargs[name] = _to_dataclass(ftype, val or {})
        else:
            kwargs[name] = val
    return cls(**kwargs)

# ----------------------------- validate --------------------------- #

def validate_config(cfg: Config):
    t, s, w = cfg.traffic, cfg.search, cfg.sweep
    assert t.lambda_u >= 0.0, "traffic.lambda_u must be >= 0"
    assert t.mu > 0.0, "traffic.mu must be > 0"
    assert s.nb_iter > 0, "search.nb_iter must be > 0"
    assert s.nb_sim >= 1, "search.nb_sim must be >= 1"
    assert 0.0 <= s.seuil <= 1.0, "search.seuil must be in [0,1]"
    assert w.step > 0, "sweep.step must be > 0"
    assert w.start >= 0 and w.end >= w.start, "sweep range invalid"
    assert w.workers >= 1, "sweep.workers must be >= 1"
    assert w.poll_interval_s > 0, "sweep.poll_interval_s must be > 0"
    if w.start + t.lambda_u <= 0:
        raise ValueError("lambda_u + first load value must be > 0 (horizon undefined)")
    sl = cfg.slotted
    assert sl.mu_e > 0 and sl.mu_u > 0, "slotted rates must be > 0"
    assert 0 <= sl.guard <= sl.servers, "slotted.guard must be in [0, servers]"
    if cfg.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Unknown logging level '{cfg.logging.level}'")

def save_resolved_config(cfg: Config, out_path: str):
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(cfg), f, sort_keys=False, allow_unicode=True)

# ----------------------------- example ---------------------------- #
if __name__ == "__main__":
    # e.g. python configs/loader.py configs/default.yaml sweep.workers=8
    import sys
    files = [p for p in sys.argv[1:] if "=" not in p]
    ovs = [p for p in sys.argv[1:] if "=" in p]
    cfg = load_config(files, ovs)
    print(yaml.safe_dump(asdict(cfg), sort_keys=False, allow_unicode=True))
