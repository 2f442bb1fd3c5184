# utils/logging.py
# Logging helpers for sweep runs: Python logging + per-load-point metric sinks (TensorBoard/CSV/JSONL)
from __future__ import annotations
import os, sys, csv, json, logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

try:
    from torch.utils.tensorboard import SummaryWriter  # optional
except Exception:
    SummaryWriter = None  # type: ignore

ROOT_LOGGER = "guard_sim"

# ------------------------------ base logger ------------------------------ #

def _ensure_dir(p: str) -> str:
    os.makedirs(p, exist_ok=True)
    return p

def setup_logging(
    run_name: str = ROOT_LOGGER,
    level: str = "INFO",
    stdout: bool = True,
    logfile: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package logger (`guard_sim`, children: guard_sim.sweep, guard_sim.search, ...)
    writing to stdout and/or file. `run_name` only labels the first log line.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    # clear duplicate handlers (useful on notebooks/reloads)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    fmt = logging.Formatter("[%(asctime)s] %(levelname)s - %(message)s", "%Y-%m-%d %H:%M:%S")
    if stdout:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(fmt); logger.addHandler(sh)
    if logfile:
        _ensure_dir(os.path.dirname(logfile) or ".")
        fh = logging.FileHandler(logfile)
        fh.setFormatter(fmt); logger.addHandler(fh)
    logger.debug("logging ready for run '%s'", run_name)
    return logger

# ------------------------------ tensorboard ------------------------------ #

@dataclass
class TBLogger:
    log_dir: str
    enabled: bool = True

    def __post_init__(self):
        self.writer = None
        if self.enabled and SummaryWriter is not None:
            _ensure_dir(self.log_dir)
            self.writer = SummaryWriter(log_dir=self.log_dir)
        elif self.enabled:
            logging.getLogger(ROOT_LOGGER).warning("tensorboard requested but torch is not installed")

    def add_scalars(self, tag: str, scalars: Dict[str, float], step: int):
        if self.writer is None: return
        for k, v in scalars.items():
            self.writer.add_scalar(f"{tag}/{k}", float(v), step)

    def flush(self):
        if self.writer is not None:
            self.writer.flush()

    def close(self):
        if self.writer is not None:
            self.writer.close()
            self.writer = None

# ------------------------------ CSV / JSONL ------------------------------ #

class CSVLogger:
    """
    Append-only CSV metric logger (comma separated, one row per load point).
    Header is inferred from the first row; later keys not in the header are dropped.
    """
    def __init__(self, path: str):
        _ensure_dir(os.path.dirname(path) or ".")
        self.path = path
        self._fieldnames = None
        self._fh = open(self.path, "a", newline="")
        self._writer = None

    def log(self, step: int, row: Dict[str, Any]):
        row = {"step": step, **row}
        if self._writer is None:
            self._fieldnames = list(row.keys())
            self._writer = csv.DictWriter(self._fh, fieldnames=self._fieldnames, extrasaction="ignore")
            if os.stat(self.path).st_size == 0:
                self._writer.writeheader()
        self._writer.writerow(row)
        self._fh.flush()

    def close(self):
        if not self._fh.closed:
            self._fh.flush(); self._fh.close()

class JSONLLogger:
    """Append-only JSON Lines logger."""
    def __init__(self, path: str):
        _ensure_dir(os.path.dirname(path) or ".")
        self.path = path
        self._fh = open(self.path, "a", encoding="utf-8")

    def log(self, step: int, obj: Dict[str, Any]):
        self._fh.write(json.dumps({"step": step, **obj}, ensure_ascii=False) + "\n")
        self._fh.flush()

    def close(self):
        if not self._fh.closed:
            self._fh.flush(); self._fh.close()

# ------------------------------ factory ------------------------------ #

@dataclass
class MetricSinks:
    tb: TBLogger
    csvlog: Optional[CSVLogger]
    jsonl: JSONLLogger

    def log_point(self, step: int, row: Dict[str, Any]):
        numeric = {k: v for k, v in row.items() if isinstance(v, (int, float))}
        self.tb.add_scalars("sweep", numeric, step)
        if self.csvlog is not None:
            self.csvlog.log(step, row)
        self.jsonl.log(step, row)

    def close(self):
        self.tb.close()
        if self.csvlog is not None:
            self.csvlog.close()
        self.jsonl.close()

def build_loggers(output_dir: str, enable_tb: bool = False, enable_csv: bool = True) -> MetricSinks:
    """
    Create default sinks under:
      output_dir/tb, output_dir/metrics.csv, output_dir/metrics.jsonl
    """
    tb = TBLogger(os.path.join(output_dir, "tb"), enabled=enable_tb)
    csvlog = CSVLogger(os.path.join(output_dir, "metrics.csv")) if enable_csv else None
    jsonl = JSONLLogger(os.path.join(output_dir, "metrics.jsonl"))
    return MetricSinks(tb, csvlog, jsonl)
