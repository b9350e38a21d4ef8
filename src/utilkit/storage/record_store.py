from __future__ import annotations

import logging
import re
import struct
from collections.abc import Iterator
from pathlib import Path

from utilkit.exceptions import ConfigurationError

from . import properties

DEFAULT_FILENAME = "default.properties"
_TRUE_VALUES = frozenset({"true", "yes", "y", "1"})
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# Java floating-point literal grammar, as accepted by Double.parseDouble.
_SPECIAL_FLOAT_RE = re.compile(r"([+-]?)(NaN|Infinity)")
_DECIMAL_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?[fFdD]?")
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX]([0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+[fFdD]?"
)
_INT_BITS = 32
_LONG_BITS = 64

PropertyValue = str | bool | int | float | None

logger = logging.getLogger(__name__)


class KeyedRecordStore:
    """Key/value settings persisted to a ``.properties`` file.

    The whole file is loaded at construction and rewritten on every
    ``set_property``. Typed getters never raise: a missing or unparsable
    value reads as the type's zero value. Use ``get_property`` and check for
    ``None`` when absence matters.

    Not safe for concurrent writers; the last write wins.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        filename: str | None = None,
    ) -> None:
        directory = Path.home() if directory is None else Path(directory)
        filename = filename or DEFAULT_FILENAME

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Unable to create directory {directory.absolute()}") from exc

        self._path = directory / filename
        if not self._path.exists():
            try:
                self._path.touch()
            except OSError as exc:
                raise ConfigurationError(
                    f"Unable to create properties file {self._path.absolute()}"
                ) from exc

        self._properties: dict[str, str] = {}
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    def reload(self) -> None:
        try:
            self._properties = properties.load(self._path)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(
                f"Unable to read properties file {self._path.absolute()}"
            ) from exc
        logger.debug("record_store load path=%s count=%d", self._path, len(self._properties))

    def get_property(self, key: str | None) -> str | None:
        if not key:
            return None
        return self._properties.get(key)

    def get_property_as_int(self, key: str | None) -> int:
        return _parse_integer(self.get_property(key), bits=_INT_BITS)

    def get_property_as_long(self, key: str | None) -> int:
        return _parse_integer(self.get_property(key), bits=_LONG_BITS)

    def get_property_as_float(self, key: str | None) -> float:
        value = _parse_float(self.get_property(key))
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            return float("inf") if value > 0 else float("-inf")

    def get_property_as_double(self, key: str | None) -> float:
        return _parse_float(self.get_property(key))

    def get_property_as_boolean(self, key: str | None) -> bool:
        value = self.get_property(key)
        if value is None:
            return False
        return value.strip().lower() in _TRUE_VALUES

    def set_property(self, key: str | None, value: PropertyValue) -> bool:
        """Store ``value`` under ``key`` and rewrite the backing file.

        Returns ``False`` without touching anything for an empty key, and
        ``False`` after logging the error when the file cannot be written.
        In the latter case the in-memory value is already updated.
        """
        if not key:
            logger.warning("record_store set rejected reason=empty_key")
            return False

        self._properties[key] = _to_text(value)
        try:
            properties.dump(self._properties, self._path, comment=f"Saved by {_qualified_name(self)}")
        except OSError:
            logger.exception("record_store save failed path=%s key=%s", self._path, key)
            return False

        logger.debug("record_store set key=%s path=%s", key, self._path)
        return True

    def keys(self) -> list[str]:
        return sorted(self._properties)

    def as_dict(self) -> dict[str, str]:
        return dict(self._properties)

    def __contains__(self, key: object) -> bool:
        return key in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


def _to_text(value: PropertyValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_integer(value: str | None, *, bits: int) -> int:
    if value is None or not _INTEGER_RE.fullmatch(value):
        return 0

    parsed = int(value)
    limit = 1 << (bits - 1)
    if not -limit <= parsed < limit:
        return 0
    return parsed


def _parse_float(value: str | None) -> float:
    if value is None:
        return 0.0

    text = value.strip()
    special = _SPECIAL_FLOAT_RE.fullmatch(text)
    if special:
        sign, word = special.groups()
        parsed = float("nan") if word == "NaN" else float("inf")
        return -parsed if sign == "-" else parsed

    if _DECIMAL_FLOAT_RE.fullmatch(text):
        return float(text.rstrip("fFdD"))

    if _HEX_FLOAT_RE.fullmatch(text):
        try:
            return float.fromhex(text.rstrip("fFdD"))
        except OverflowError:
            return float("-inf") if text.startswith("-") else float("inf")

    return 0.0


def _qualified_name(obj: object) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"
