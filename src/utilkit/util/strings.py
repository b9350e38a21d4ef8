from __future__ import annotations

from collections.abc import Callable


def is_null_or_empty(value: str | None) -> bool:
    return value is None or not value.strip()


def string_sort_key(case_sensitive: bool = False) -> Callable[[str], str]:
    """Key function for ``sorted``; case-insensitive unless asked otherwise."""
    if case_sensitive:
        return str
    return str.casefold
