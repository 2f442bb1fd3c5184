# tests/test_cli.py
import pytest
from scripts import run_sweep, run_slotted
from envs.ctmc import SweepOrchestrator, SweepError
from utils.serialization import read_sweep_csv

def test_missing_capacity_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        run_sweep.main([])
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err

def test_small_sweep_writes_ordered_report(tmp_path):
    out = tmp_path / "run"
    rc = run_sweep.main([
        "4", "--output-dir", str(out), "--no-progress",
        "--set", "traffic.lambda_u=1", "--set", "search.nb_iter=100",
        "--set", "search.nb_sim=2", "--set", "search.seuil=1.0",
        "--set", "sweep.end=10", "--set", "sweep.workers=2",
        "--set", "sweep.poll_interval_s=0.01",
    ])
    assert rc == 0
    rows = read_sweep_csv(str(out / "S(4).csv"))
    assert [r["E"] for r in rows] == [0.0, 5.0, 10.0]
    assert all(r["G"] == 0.0 for r in rows)
    assert (out / "meta.json").exists() and (out / "resolved_config.yaml").exists()

def test_bad_override_exits_before_sweep(tmp_path):
    assert run_sweep.main(["4", "--output-dir", str(tmp_path), "--set", "traffic.mu=-1"]) == 1
    assert not (tmp_path / "S(4).csv").exists()

def test_slotted_cli_runs():
    assert run_slotted.main(["-s", "20", "-g", "5", "-m", "8", "-r", "30", "-b", "25", "-d", "0"]) == 0

def test_failed_sweep_keeps_previous_report(tmp_path, monkeypatch):
    report = tmp_path / "S(4).csv"
    report.write_text("E;G\n0;1;\n")
    def failing_run(self):
        raise SweepError("worker died")
    monkeypatch.setattr(SweepOrchestrator, "run", failing_run)
    rc = run_sweep.main(["4", "--output-dir", str(tmp_path), "--no-progress",
                         "--set", "sweep.end=10", "--set", "sweep.workers=2"])
    assert rc == 1
    assert report.read_text() == "E;G\n0;1;\n"
    assert not (tmp_path / "S(4).csv.tmp").exists()
    assert not (tmp_path / "resolved_config.yaml").exists()

def test_unwritable_output_dir_exits_before_sweep(tmp_path, monkeypatch):
    blocker = tmp_path / "file"
    blocker.write_text("")
    def unexpected_run(self):
        raise AssertionError("sweep must not start")
    monkeypatch.setattr(SweepOrchestrator, "run", unexpected_run)
    assert run_sweep.main(["4", "--output-dir", str(blocker / "out"), "--no-progress"]) == 1

def test_slotted_bad_config_exits_with_error(tmp_path, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("slotted:\n  no_such_key: 1\n")
    assert run_slotted.main(["--config", str(bad)]) == 1
    assert "invalid configuration" in capsys.readouterr().err
    broken = tmp_path / "broken.yaml"
    broken.write_text("slotted: [unclosed\n")
    assert run_slotted.main(["--config", str(broken)]) == 1

def test_entry_point_packages_are_regular_packages():
    import configs, scripts
    from importlib import resources
    assert scripts.__file__ is not None and configs.__file__ is not None
    assert (resources.files("configs") / "default.yaml").is_file()
