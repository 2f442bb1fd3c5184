# scripts/run_sweep.py
# Guard-channel sweep: for each eMBB load on the grid, smallest G keeping URLLC loss <= seuil.
# Writes <output_dir>/S(<S>).csv, meta.json, metrics.csv/jsonl and resolved_config.yaml.
from __future__ import annotations
import argparse, os, sys
from typing import List, Optional

import yaml

from configs.loader import load_config, save_resolved_config
from envs.ctmc import SweepGrid, SweepOrchestrator, SweepError
from models.metrics import urllc_only_loss
from utils.logging import setup_logging, build_loggers
from utils.seed import seed_from_env
from utils.serialization import (report_path, check_report_destination, save_sweep_report, record_to_row,
                                 save_run_meta, format_duration)

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="URLLC guard-channel sweep over eMBB load")
    ap.add_argument("S", type=int, help="total capacity units")
    ap.add_argument("--config", type=str, action="append", default=None,
                    help="YAML file(s), merged in order (default: configs/default.yaml)")
    ap.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                    help="override, e.g. --set sweep.workers=8")
    ap.add_argument("--output-dir", type=str, default=None, help="overrides run.output_dir")
    ap.add_argument("--no-progress", action="store_true", help="disable the progress bar")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.S < 1:
        ap.error("S must be a positive integer")

    try:
        cfg = load_config(args.config, args.overrides)
    except (AssertionError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"[ERROR] invalid configuration: {e}", file=sys.stderr)
        return 1
    out_dir = args.output_dir or cfg.run.output_dir
    log = setup_logging(cfg.run.run_name, cfg.logging.level, logfile=cfg.logging.logfile)

    t, s, w = cfg.traffic, cfg.search, cfg.sweep
    log.info("lambda_u: %g", t.lambda_u)
    log.info("mu: %.2f", t.mu)
    log.info("S: %d", args.S)
    log.info("Number of iterations: %.2f", s.nb_iter)
    log.info("Loss limit: %.5f", s.seuil)

    ref = urllc_only_loss(args.S, t.lambda_u, t.mu)
    log.info("URLLC-only loss (Erlang-B reference): %.3e", ref)
    if ref > s.seuil:
        log.warning("S=%d cannot reach loss %.1e even without eMBB; expect infeasible points", args.S, s.seuil)

    seed = seed_from_env(default=cfg.run.seed)

    path = report_path(out_dir, args.S)
    try:
        check_report_destination(path)
    except OSError as e:
        log.error("Error opening file %s: %s", path, e)
        return 1

    try:
        orch = SweepOrchestrator(
            SweepGrid(w.start, w.end, w.step),
            S=args.S,
            lambda_u=t.lambda_u,
            mu=t.mu,
            nb_iter=s.nb_iter,
            nb_sim=s.nb_sim,
            seuil=s.seuil,
            workers=w.workers,
            poll_interval_s=w.poll_interval_s,
            seed=seed,
            show_progress=cfg.logging.progress and not args.no_progress,
        )
        records = orch.run()
    except (SweepError, ValueError) as e:
        log.error("sweep failed: %s", e)
        return 1
    save_sweep_report(path, records, orch.elapsed_s)
    save_resolved_config(cfg, os.path.join(out_dir, "resolved_config.yaml"))

    sinks = build_loggers(out_dir, enable_tb=cfg.logging.tensorboard, enable_csv=cfg.logging.csv)
    try:
        for rec in records:
            sinks.log_point(rec.index, record_to_row(rec))
    finally:
        sinks.close()

    n_infeasible = sum(1 for r in records if not r.feasible)
    save_run_meta(out_dir, args.S, orch.elapsed_s, extra={
        "entropy": orch.entropy, "points": len(records), "infeasible": n_infeasible,
    })
    if n_infeasible:
        log.warning("%d/%d load points infeasible", n_infeasible, len(records))
    log.info("Time: %s", format_duration(orch.elapsed_s))
    log.info("[DONE] report written to %s", path)
    return 0

if __name__ == "__main__":
    sys.exit(main())
