import json
from pathlib import Path

import main as cli
from config import AppConfig
from main import EXIT_FAILED_FILES, EXIT_FATAL, EXIT_OK, main, run_job
from orchestrator import copier
from utils.instance_guard import InstanceLock


def write_config(tmp_path: Path, sources: list[str], output_root: str, extra: str = "") -> Path:
    lines = ["job_name: CLI test", "backup:", "  sources:"]
    lines += [f"    - \"{source}\"" for source in sources]
    lines += [f"  output_root: \"{output_root}\"", "  max_parallel_copies: 2", "paths:", "  logs: logs"]
    config_path = tmp_path / "backup-config.yaml"
    config_path.write_text("\n".join(lines) + "\n" + extra, encoding="utf-8")
    return config_path


def make_source(tmp_path: Path) -> Path:
    root = tmp_path / "src"
    root.mkdir()
    (root / "a.txt").write_text("alpha", encoding="utf-8")
    return root


def test_missing_config_creates_starter(tmp_path: Path) -> None:
    config_path = tmp_path / "fresh" / "backup-config.yaml"

    assert main([str(config_path)]) == EXIT_OK
    assert "sources" in config_path.read_text(encoding="utf-8")


def test_placeholder_config_path_is_rejected(tmp_path: Path) -> None:
    assert main([str(tmp_path / "path" / "to" / "config.yaml")]) == EXIT_FATAL
    assert not (tmp_path / "path").exists()


def test_run_job_writes_report_and_returns_ok(tmp_path: Path) -> None:
    root = make_source(tmp_path)
    config = AppConfig.load(write_config(tmp_path, [root.as_posix()], (tmp_path / "out").as_posix()))
    report_path = tmp_path / "report.json"

    assert run_job(config, report_path=report_path) == EXIT_OK

    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["job_name"] == "CLI test"
    assert payload["summary"]["copied_files"] == 1
    assert payload["duplicate_handling"] == "skip_only_when_content_matches"


def test_run_job_dry_run_flag_overrides_config(tmp_path: Path) -> None:
    root = make_source(tmp_path)
    output_root = tmp_path / "out"
    config = AppConfig.load(write_config(tmp_path, [root.as_posix()], output_root.as_posix()))

    assert run_job(config, dry_run=True, report_path=tmp_path / "report.json") == EXIT_OK
    assert not output_root.exists()


def test_run_job_maps_failures_to_distinct_exit_codes(tmp_path: Path, monkeypatch) -> None:
    root = make_source(tmp_path)
    config = AppConfig.load(write_config(tmp_path, [root.as_posix()], (tmp_path / "out").as_posix()))

    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(copier, "copy_file", broken)

    assert run_job(config, report_path=tmp_path / "report.json") == EXIT_FAILED_FILES

    empty = AppConfig.load(write_config(tmp_path, [], (tmp_path / "out").as_posix()))
    assert run_job(empty, report_path=tmp_path / "report2.json") == EXIT_FATAL


def test_run_job_reports_bad_config_values_as_fatal(tmp_path: Path) -> None:
    root = make_source(tmp_path)
    config_path = write_config(
        tmp_path, [root.as_posix()], (tmp_path / "out").as_posix(), extra="hashing:\n  chunk_bytes: null\n"
    )

    assert run_job(AppConfig.load(config_path), report_path=tmp_path / "report.json") == EXIT_FATAL
    assert not (tmp_path / "out").exists()


def test_main_exits_fatal_while_another_run_holds_the_lock(tmp_path: Path, monkeypatch) -> None:
    root = make_source(tmp_path)
    config_path = write_config(tmp_path, [root.as_posix()], (tmp_path / "out").as_posix())
    monkeypatch.delenv("FILE_BACKUP_ALLOW_MULTI_INSTANCE", raising=False)
    monkeypatch.setattr(cli, "_enable_crash_diagnostics", lambda logs_dir: None)

    with InstanceLock(tmp_path / "logs" / "file_backup.lock"):
        assert main([str(config_path)]) == EXIT_FATAL

    assert not (tmp_path / "out").exists()
