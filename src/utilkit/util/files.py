from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


def get_files_recursive(
    paths: str | Path | Iterable[str | Path],
    *,
    include_hidden: bool = False,
) -> list[Path]:
    """Collect regular files under ``paths``, descending into directories.

    ``paths`` is either one directory or an iterable of files and
    directories. Hidden files (dot-prefixed names) are skipped unless
    ``include_hidden`` is set; hidden directories are still searched.
    """
    if isinstance(paths, (str, Path)):
        root = Path(paths)
        if not root.is_dir():
            return []
        candidates: Iterable[str | Path] = sorted(root.iterdir())
    else:
        candidates = paths

    found: list[Path] = []
    for candidate in candidates:
        path = Path(candidate)
        if path.is_dir():
            found.extend(get_files_recursive(path, include_hidden=include_hidden))
        elif path.is_file() and (include_hidden or not _is_hidden(path)):
            found.append(path)
    return found


def copy(source: str | Path, dest: str | Path) -> None:
    source, dest = Path(source), Path(dest)
    if dest.exists():
        raise FileExistsError(f"Destination already exists: {dest}")
    shutil.copy2(source, dest)
    logger.debug("copied source=%s dest=%s", source, dest)


def delete_local_directory(directory: str | Path) -> None:
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"File {directory.absolute()} is not a directory.")
    shutil.rmtree(directory)
    logger.debug("deleted directory=%s", directory)


def delete_local_file_or_directory(path: str | Path) -> None:
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        delete_local_directory(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
        logger.debug("deleted file=%s", path)


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")
