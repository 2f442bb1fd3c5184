# utils/serialization.py
# Sweep report I/O: semicolon-separated S(<S>).csv table + meta.json of the run.
from __future__ import annotations
import os, csv, json, time
from typing import Any, Dict, IO, List, Optional, Sequence

REPORT_COLUMNS = ["E", "G", "LoadE", "PerG", "Loss", "WaitAvg", "WaitMax",
                  "URLLC_Tot", "URLLC_Max", "eMBB_Tot", "Horizon"]

def _ensure_dir(p: str): os.makedirs(p, exist_ok=True)

def report_path(output_dir: str, S: int) -> str:
    return os.path.join(output_dir, f"S({S}).csv")

def format_duration(seconds: float) -> str:
    s = int(seconds)
    return f"{s // 3600} hrs {(s % 3600) // 60} mins {s % 60} s"

# ------------------------------ report ------------------------------ #

def check_report_destination(path: str) -> str:
    """
    Make sure the report can be written before the sweep starts. An existing report is left
    untouched; it is only replaced once a new one is complete (see save_sweep_report).
    """
    d = os.path.dirname(path) or "."
    _ensure_dir(d)
    if not os.access(d, os.W_OK) or (os.path.exists(path) and not os.access(path, os.W_OK)):
        raise PermissionError(f"report destination is not writable: {path}")
    return path

def record_to_row(rec) -> Dict[str, Any]:
    """SweepRecord -> report columns (None for undefined values of infeasible points)."""
    s = rec.stats
    return {
        "E": rec.load,
        "G": rec.guard,
        "LoadE": rec.load_factor if rec.feasible else None,
        "PerG": rec.guard_pct if rec.feasible else None,
        "Loss": s.loss,
        "WaitAvg": s.wait_avg,
        "WaitMax": s.wait_max,
        "URLLC_Tot": s.urllc_tot,
        "URLLC_Max": s.urllc_max,
        "eMBB_Tot": s.embb_tot,
        "Horizon": rec.horizon,
    }

def _fmt(col: str, v: Any) -> str:
    if v is None:
        return "nan"
    if col == "E":
        return f"{v:g}"
    if col == "Loss":
        return f"{v:e}"
    return f"{float(v):f}"

def write_sweep_csv(fh: IO[str], records: Sequence, elapsed_s: float):
    """
    One line per load point in ascending grid order; the header carries the run duration:
      E;G;LoadE;...;Horizon;;# 0 hrs 3 mins 12 s
    """
    w = csv.writer(fh, delimiter=";", lineterminator="\n")
    w.writerow(REPORT_COLUMNS + ["", f"# {format_duration(elapsed_s)}"])
    for rec in sorted(records, key=lambda r: r.index):
        row = record_to_row(rec)
        w.writerow([_fmt(c, row[c]) for c in REPORT_COLUMNS] + [""])
    fh.flush()

def save_sweep_report(path: str, records: Sequence, elapsed_s: float) -> str:
    """Write to <path>.tmp, then move it over `path`; a failed write leaves the old report."""
    tmp = f"{path}.tmp"
    try:
        with open(tmp, "w", newline="", encoding="utf-8") as fh:
            write_sweep_csv(fh, records, elapsed_s)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)
    return path

def read_sweep_csv(path: str) -> List[Dict[str, float]]:
    """Parse a report back into {column: float} rows (undefined values come back as nan)."""
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=";")
        header = next(reader)
        cols = [c for c in header if c in REPORT_COLUMNS]
        rows = []
        for line in reader:
            if not line:
                continue
            rows.append({c: float(line[i]) for i, c in enumerate(cols)})
    return rows

# ------------------------------ meta ------------------------------ #

def save_run_meta(out_dir: str, S: int, elapsed_s: float, extra: Optional[Dict[str, Any]] = None) -> str:
    """
    Layout:
      out_dir/
        S(<S>).csv
        meta.json
    """
    _ensure_dir(out_dir)
    meta = {"S": S, "elapsed_s": elapsed_s, "duration": format_duration(elapsed_s), "time": time.time()}
    if extra: meta.update(extra)
    path = os.path.join(out_dir, "meta.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(meta, f, ensure_ascii=False, indent=2)
    return path
