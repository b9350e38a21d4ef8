"""Storage layer: properties-file record store + disk blob cache."""

from .blob_cache import KeyedBlobCache
from .record_store import KeyedRecordStore

__all__ = ["KeyedBlobCache", "KeyedRecordStore"]
