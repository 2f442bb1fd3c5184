from .logging import setup_logging, build_loggers, MetricSinks, TBLogger, CSVLogger, JSONLLogger
from .seed import seed_from_env, point_seed, resolve_entropy
from .serialization import report_path, check_report_destination, save_sweep_report, write_sweep_csv, read_sweep_csv, record_to_row, save_run_meta
