from __future__ import annotations

from pathlib import Path

from utilkit.util.strings import is_null_or_empty

__all__ = ["DirectoryFilter", "FileExtensionFilter", "FilenameContainsFilter"]


class FileExtensionFilter:
    """Accept file names ending with one extension.

    Built from a string (``"txt"`` and ``".txt"`` are equivalent) or from a
    ``Path`` whose own extension is used. A blank string, or a path without
    a ``.`` in its name, gives a filter that accepts nothing.
    """

    def __init__(self, extension: str | Path | None) -> None:
        self.extension: str | None
        if isinstance(extension, Path):
            index = extension.name.rfind(".")
            self.extension = None if index == -1 else extension.name[index:]
        elif is_null_or_empty(extension):
            self.extension = None
        elif extension.strip().startswith("."):
            self.extension = extension
        else:
            self.extension = "." + extension

    def accept(self, directory: str | Path | None, name: str | None) -> bool:
        if self.extension is None or directory is None or name is None:
            return False
        return name.endswith(self.extension)

    __call__ = accept

    def __repr__(self) -> str:
        return f"FileExtensionFilter({self.extension!r})"


class FilenameContainsFilter:
    def __init__(self, match_text: str | None, case_sensitive: bool = True) -> None:
        self.match_text = None if is_null_or_empty(match_text) else match_text
        self.case_sensitive = case_sensitive

    def accept(self, directory: str | Path | None, name: str | None) -> bool:
        if self.match_text is None or directory is None or name is None:
            return False
        if self.case_sensitive:
            return self.match_text in name
        return self.match_text.casefold() in name.casefold()

    __call__ = accept

    def __repr__(self) -> str:
        return (
            f"FilenameContainsFilter({self.match_text!r}, case_sensitive={self.case_sensitive})"
        )


class DirectoryFilter:
    def accept(self, path: str | Path | None) -> bool:
        return path is not None and Path(path).is_dir()

    __call__ = accept
