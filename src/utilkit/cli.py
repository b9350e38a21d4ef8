from __future__ import annotations

import logging
from pathlib import Path

import typer

from utilkit.config import load_config
from utilkit.exceptions import UtilkitError
from utilkit.filters import FileExtensionFilter, FilenameContainsFilter
from utilkit.storage import KeyedBlobCache, KeyedRecordStore
from utilkit.storage.record_store import DEFAULT_FILENAME
from utilkit.util.files import get_files_recursive
from utilkit.util.strings import string_sort_key

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

app = typer.Typer(help="utilkit CLI")
props_app = typer.Typer(help="Properties record store commands")
cache_app = typer.Typer(help="Blob cache commands")
files_app = typer.Typer(help="File helper commands")
debug_app = typer.Typer(help="Debug commands")
app.add_typer(props_app, name="props")
app.add_typer(cache_app, name="cache")
app.add_typer(files_app, name="files")
app.add_typer(debug_app, name="debug")

_STORE_DIR_OPTION = typer.Option(
    None,
    "--dir",
    help="Directory holding the properties file (defaults to the home directory).",
    file_okay=False,
)
_STORE_FILE_OPTION = typer.Option(
    DEFAULT_FILENAME,
    "--file",
    help="Properties file name.",
)
_CACHE_DIR_OPTION = typer.Option(
    ...,
    "--cache-dir",
    help="Blob cache directory (kept after the command exits).",
)


@app.callback()
def main_callback(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file path (JSON or YAML).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Override the configured logging level.",
    ),
) -> None:
    """Configure logging for every subcommand."""
    level = "INFO"
    if config_path is not None:
        try:
            level = load_config(config_path).logging.level
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc
    if log_level:
        level = log_level.upper()
        if level not in logging.getLevelNamesMapping():
            typer.echo(f"unknown log level: {log_level}", err=True)
            raise typer.Exit(code=1)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


@props_app.command("get")
def props_get(
    key: str = typer.Argument(..., help="Property key."),
    directory: Path | None = _STORE_DIR_OPTION,
    filename: str = _STORE_FILE_OPTION,
) -> None:
    """Print the value stored under KEY."""
    store = _open_store(directory, filename)
    value = store.get_property(key)
    if value is None:
        typer.echo(f"no property named {key}", err=True)
        raise typer.Exit(code=1)
    typer.echo(value)


@props_app.command("set")
def props_set(
    key: str = typer.Argument(..., help="Property key."),
    value: str = typer.Argument(..., help="Property value."),
    directory: Path | None = _STORE_DIR_OPTION,
    filename: str = _STORE_FILE_OPTION,
) -> None:
    """Store VALUE under KEY and save the file."""
    store = _open_store(directory, filename)
    if not store.set_property(key, value):
        typer.echo(f"failed to save property {key} to {store.path}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"saved {key} to {store.path}")


@props_app.command("list")
def props_list(
    directory: Path | None = _STORE_DIR_OPTION,
    filename: str = _STORE_FILE_OPTION,
) -> None:
    """Print every key=value pair, sorted by key."""
    store = _open_store(directory, filename)
    for key in sorted(store.keys(), key=string_sort_key()):
        typer.echo(f"{key}={store.get_property(key)}")


@cache_app.command("put")
def cache_put(
    key: str = typer.Argument(..., help="Cache key (a plain file name)."),
    value: str = typer.Argument(..., help="Text to cache."),
    cache_dir: Path = _CACHE_DIR_OPTION,
) -> None:
    """Cache VALUE as text under KEY."""
    cache = _open_cache(cache_dir)
    try:
        cache.put(key, value)
    except UtilkitError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"cached {key}")


@cache_app.command("get")
def cache_get(
    key: str = typer.Argument(..., help="Cache key."),
    cache_dir: Path = _CACHE_DIR_OPTION,
) -> None:
    """Print the cached value for KEY."""
    cache = _open_cache(cache_dir)
    try:
        value = cache.get(key)
    except UtilkitError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    if value is None:
        typer.echo(f"cache miss: {key}", err=True)
        raise typer.Exit(code=1)
    typer.echo(value)


@cache_app.command("delete")
def cache_delete(
    key: str = typer.Argument(..., help="Cache key."),
    cache_dir: Path = _CACHE_DIR_OPTION,
) -> None:
    """Remove KEY from the cache."""
    cache = _open_cache(cache_dir)
    failures = cache.delete(key)
    if failures:
        typer.echo(f"failed to delete {key}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"deleted {key}")


@cache_app.command("clear")
def cache_clear(cache_dir: Path = _CACHE_DIR_OPTION) -> None:
    """Remove every entry from the cache."""
    cache = _open_cache(cache_dir)
    failures = cache.clear()
    if failures:
        typer.echo(f"cache clear finished with {failures} failures", err=True)
        raise typer.Exit(code=1)
    typer.echo("cache cleared")


@files_app.command("list")
def files_list(
    directory: Path = typer.Argument(
        ...,
        help="Directory to search recursively.",
        exists=True,
        file_okay=False,
    ),
    extension: str | None = typer.Option(None, "--ext", help="Only files with this extension."),
    contains: str | None = typer.Option(
        None,
        "--contains",
        help="Only files whose name contains this text.",
    ),
    ignore_case: bool = typer.Option(False, "--ignore-case", help="Case-insensitive --contains."),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Include dot files."),
) -> None:
    """List files under DIRECTORY."""
    filters = []
    if extension is not None:
        filters.append(FileExtensionFilter(extension))
    if contains is not None:
        filters.append(FilenameContainsFilter(contains, case_sensitive=not ignore_case))

    for path in get_files_recursive(directory, include_hidden=include_hidden):
        if all(accept(path.parent, path.name) for accept in filters):
            typer.echo(str(path))


@debug_app.command("storage")
def debug_storage(
    directory: Path = typer.Option(
        Path("data/debug"),
        "--dir",
        help="Scratch directory for the smoke test.",
    ),
) -> None:
    """Run storage smoke test."""
    store = _open_store(directory, "debug.properties")
    stored = store.set_property("debug.storage", 42)

    with KeyedBlobCache(directory / "blob-cache") as cache:
        cache.put("debug-storage", {"status": "smoke_ok"})
        cached_value = cache.get("debug-storage")

    reloaded = KeyedRecordStore(directory, "debug.properties")
    if (
        not stored
        or reloaded.get_property_as_int("debug.storage") != 42
        or cached_value != {"status": "smoke_ok"}
    ):
        typer.echo("storage smoke test failed", err=True)
        raise typer.Exit(code=1)

    typer.echo("storage ok")


def _open_store(directory: Path | None, filename: str) -> KeyedRecordStore:
    try:
        return KeyedRecordStore(directory, filename)
    except UtilkitError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _open_cache(cache_dir: Path) -> KeyedBlobCache:
    try:
        return KeyedBlobCache(cache_dir, delete_on_close=False)
    except UtilkitError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def main() -> None:
    app()


if __name__ == "__main__":
    main()
