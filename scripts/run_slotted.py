# scripts/run_slotted.py
# Slot-level packet simulation of the shared slice (0.1 ms slots, FIFO eMBB queue)
from __future__ import annotations
import argparse, sys
from typing import List, Optional

import yaml

from configs.loader import load_config
from envs.slotted import SlottedSliceSim
from utils.logging import setup_logging

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Slot-level URLLC/eMBB packet simulator")
    ap.add_argument("--config", type=str, action="append", default=None)
    ap.add_argument("-e", "--embb_rate", type=int, default=None, help="eMBB transmissions per second")
    ap.add_argument("-u", "--urllc_rate", type=int, default=None, help="URLLC transmissions per second")
    ap.add_argument("-s", "--servers", type=int, default=None, help="total resource blocks S")
    ap.add_argument("-g", "--guard", type=int, default=None, help="URLLC reserved resource blocks G")
    ap.add_argument("-m", "--max_queue", type=int, default=None, help="eMBB queue size")
    ap.add_argument("-r", "--urllc_ue", type=int, default=None, help="number of URLLC UEs")
    ap.add_argument("-b", "--embb_ue", type=int, default=None, help="number of eMBB UEs")
    ap.add_argument("-d", "--duration", type=int, default=None, help="simulated seconds")
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (AssertionError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"[ERROR] invalid configuration: {e}", file=sys.stderr)
        return 1
    sl = cfg.slotted
    pick = lambda v, d: d if v is None else v
    log = setup_logging(cfg.run.run_name, cfg.logging.level, logfile=cfg.logging.logfile)
    try:
        sim = SlottedSliceSim(
            mu_e=pick(args.embb_rate, sl.mu_e),
            mu_u=pick(args.urllc_rate, sl.mu_u),
            servers=pick(args.servers, sl.servers),
            guard=pick(args.guard, sl.guard),
            max_queue=pick(args.max_queue, sl.max_queue),
            urllc_ue=pick(args.urllc_ue, sl.urllc_ue),
            embb_ue=pick(args.embb_ue, sl.embb_ue),
            slots_per_s=sl.slots_per_s,
        )
    except ValueError as e:
        ap.error(str(e))
    n_slots = pick(args.duration, sl.duration_s) * sl.slots_per_s

    res = sim.run(n_slots)
    log.info("q: %d", res.embb_leaving_q)
    log.info("wait %d", res.total_wait)
    log.info("Average eMBB wait time: %.2f slots", res.avg_wait)
    log.info("Total eMBB transmitted: %d", res.embb_transmitted)
    log.info("Total eMBB lost: %d", res.embb_lost)
    log.info("Total URLLC transmitted: %d", res.urllc_transmitted)
    log.info("Total URLLC lost: %d", res.urllc_lost)
    return 0

if __name__ == "__main__":
    sys.exit(main())
