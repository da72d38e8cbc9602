"""Unit tests for CLI commands: migrate, init-config and version."""

from pathlib import Path

import yaml
from typer.testing import CliRunner

from expectations_to_mockito import __version__, cli
from expectations_to_mockito.result import Result

runner = CliRunner()

SOURCE = """\
from mockit import Expectations


def test_value(svc):
    with Expectations():
        svc.getValue()
        result = 1
    assert svc.getValue() == 1
"""


def _write_source(tmp_path: Path) -> Path:
    path = tmp_path / "test_sample.py"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_init_config_writes_defaults(tmp_path):
    target = tmp_path / "config.yaml"
    result = runner.invoke(cli.app, ["init-config", str(target)])
    assert result.exit_code == 0
    assert "Configuration file created" in result.stdout
    loaded = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert loaded["stub_module"] == "mockito"
    assert loaded["line_length"] == 120


def test_migrate_dry_run_prints_code_and_leaves_file(tmp_path):
    path = _write_source(tmp_path)
    result = runner.invoke(cli.app, ["migrate", str(path), "--dry-run"])
    assert result.exit_code == 0
    assert f"== MIGRATED: {path} ==" in result.stdout
    assert "when(svc.getValue()).thenReturn(1)" in result.stdout
    assert path.read_text(encoding="utf-8") == SOURCE


def test_migrate_dry_run_diff(tmp_path):
    path = _write_source(tmp_path)
    result = runner.invoke(cli.app, ["migrate", str(path), "--dry-run", "--diff"])
    assert result.exit_code == 0
    assert f"== DIFF: {path} ==" in result.stdout
    assert "+    when(svc.getValue()).thenReturn(1)" in result.stdout


def test_migrate_writes_suffixed_target(tmp_path):
    path = _write_source(tmp_path)
    result = runner.invoke(cli.app, ["migrate", str(tmp_path), "--suffix", "_mockito"])
    assert result.exit_code == 0
    target = tmp_path / "test_sample_mockito.py"
    assert "thenReturn(1)" in target.read_text(encoding="utf-8")
    assert path.read_text(encoding="utf-8") == SOURCE


def test_migrate_reads_config_file(tmp_path):
    path = _write_source(tmp_path)
    config = tmp_path / "config.yaml"
    config.write_text(yaml.safe_dump({"dry_run": True}), encoding="utf-8")
    result = runner.invoke(cli.app, ["migrate", str(path), "--config", str(config)])
    assert result.exit_code == 0
    assert "== MIGRATED:" in result.stdout
    assert path.read_text(encoding="utf-8") == SOURCE


def test_migrate_without_files_fails(tmp_path):
    result = runner.invoke(cli.app, ["migrate", str(tmp_path / "missing.py")])
    assert result.exit_code == 1
    assert "No source files found." in result.stdout


def test_migrate_rejects_conflicting_format_flags(tmp_path):
    path = _write_source(tmp_path)
    result = runner.invoke(cli.app, ["migrate", str(path), "--format", "--no-format"])
    assert result.exit_code == 2


def test_migrate_rejects_invalid_log_level(tmp_path):
    path = _write_source(tmp_path)
    result = runner.invoke(cli.app, ["migrate", str(path), "--log-level", "LOUD"])
    assert result.exit_code == 1
    assert "Error loading configuration" in result.stdout


def test_migrate_exits_nonzero_on_failed_file(tmp_path):
    path = tmp_path / "test_bad.py"
    path.write_text(
        "def test_bad(svc):\n    with Expectations():\n        result = 1\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli.app, ["migrate", str(path), "--dry-run"])
    assert result.exit_code == 1


def test_migrate_delegates_to_programmatic_api(tmp_path, mocker):
    path = _write_source(tmp_path)
    fake = mocker.patch("expectations_to_mockito.main.migrate", return_value=Result.success([str(path)]))
    result = runner.invoke(cli.app, ["migrate", str(path), "--fail-fast", "--types", "types.yaml"])
    assert result.exit_code == 0
    config = fake.call_args.kwargs["config"]
    assert config.fail_fast is True
    assert config.types_file == "types.yaml"


def test_collect_source_files_expands_directories(tmp_path):
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "test_a.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "notes.txt").write_text("", encoding="utf-8")
    files = cli.collect_source_files([str(tmp_path)])
    assert files == [str(tmp_path / "pkg" / "test_a.py")]
