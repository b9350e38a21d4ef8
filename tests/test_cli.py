from __future__ import annotations

from typer.testing import CliRunner

from utilkit.cli import app
from utilkit.storage import KeyedBlobCache, KeyedRecordStore


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--help" in result.output


def test_cli_props_set_get_list(tmp_path) -> None:
    runner = CliRunner()
    options = ["--dir", str(tmp_path), "--file", "cli.properties"]

    set_result = runner.invoke(app, ["props", "set", "color", "blue", *options])
    runner.invoke(app, ["props", "set", "Alpha", "1", *options])
    get_result = runner.invoke(app, ["props", "get", "color", *options])
    list_result = runner.invoke(app, ["props", "list", *options])

    assert set_result.exit_code == 0
    assert get_result.exit_code == 0
    assert get_result.stdout.strip() == "blue"
    assert list_result.stdout.splitlines() == ["Alpha=1", "color=blue"]
    assert KeyedRecordStore(tmp_path, "cli.properties").get_property("color") == "blue"


def test_cli_props_get_missing_key_fails(tmp_path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["props", "get", "missing", "--dir", str(tmp_path), "--file", "cli.properties"],
    )

    assert result.exit_code == 1


def test_cli_cache_lifecycle(tmp_path) -> None:
    runner = CliRunner()
    cache_dir = tmp_path / "cache"
    options = ["--cache-dir", str(cache_dir)]

    put_result = runner.invoke(app, ["cache", "put", "note", "hello cache", *options])
    get_result = runner.invoke(app, ["cache", "get", "note", *options])

    assert put_result.exit_code == 0
    assert get_result.exit_code == 0
    assert get_result.stdout.strip() == "hello cache"
    assert KeyedBlobCache(cache_dir, delete_on_close=False).get("note") == "hello cache"

    delete_result = runner.invoke(app, ["cache", "delete", "note", *options])
    miss_result = runner.invoke(app, ["cache", "get", "note", *options])

    assert delete_result.exit_code == 0
    assert miss_result.exit_code == 1

    runner.invoke(app, ["cache", "put", "a", "1", *options])
    clear_result = runner.invoke(app, ["cache", "clear", *options])

    assert clear_result.exit_code == 0
    assert cache_dir.is_dir()
    assert list(cache_dir.iterdir()) == []


def test_cli_cache_rejects_unsafe_key(tmp_path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["cache", "put", "../escape", "x", "--cache-dir", str(tmp_path / "cache")],
    )

    assert result.exit_code == 1
    assert not (tmp_path / "escape").exists()


def test_cli_files_list_applies_filters(tmp_path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "Report.txt").write_text("r", encoding="utf-8")
    (tmp_path / "sub" / "report-old.log").write_text("o", encoding="utf-8")
    (tmp_path / "sub" / "notes.txt").write_text("n", encoding="utf-8")
    (tmp_path / ".report.txt").write_text("h", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["files", "list", str(tmp_path), "--ext", "txt", "--contains", "report", "--ignore-case"],
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [str(tmp_path / "Report.txt")]


def test_cli_debug_storage_smoke(tmp_path) -> None:
    runner = CliRunner()
    scratch = tmp_path / "debug"

    result = runner.invoke(app, ["debug", "storage", "--dir", str(scratch)])

    assert result.exit_code == 0
    assert "storage ok" in result.stdout
    assert (scratch / "debug.properties").exists()
    assert not (scratch / "blob-cache").exists()


def test_cli_reads_logging_level_from_config(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text('{"logging": {"level": "WARNING"}}', encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["--config", str(config_path), "debug", "storage", "--dir", str(tmp_path / "debug")],
    )

    assert result.exit_code == 0
    assert "storage ok" in result.stdout


def test_cli_rejects_unknown_log_level(tmp_path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["--log-level", "chatty", "debug", "storage", "--dir", str(tmp_path / "debug")],
    )

    assert result.exit_code == 1
