"""Small helpers for strings, files and HTTP sessions."""

from .files import (
    copy,
    delete_local_directory,
    delete_local_file_or_directory,
    get_files_recursive,
)
from .net import ProxyConfig, build_session
from .strings import is_null_or_empty, string_sort_key

__all__ = [
    "ProxyConfig",
    "build_session",
    "copy",
    "delete_local_directory",
    "delete_local_file_or_directory",
    "get_files_recursive",
    "is_null_or_empty",
    "string_sort_key",
]
