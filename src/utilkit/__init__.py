"""utilkit: properties-file record store, disk blob cache and small helpers."""

from .config import AppConfig, load_config, open_blob_cache, open_record_store, open_session
from .exceptions import ConfigurationError, StorageIOError, UtilkitError, ValidationError
from .storage import KeyedBlobCache, KeyedRecordStore

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "KeyedBlobCache",
    "KeyedRecordStore",
    "StorageIOError",
    "UtilkitError",
    "ValidationError",
    "load_config",
    "open_blob_cache",
    "open_record_store",
    "open_session",
]
