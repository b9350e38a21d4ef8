from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests
import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from utilkit.storage import KeyedBlobCache, KeyedRecordStore
from utilkit.storage.record_store import DEFAULT_FILENAME
from utilkit.util.net import ProxyConfig, build_session


class RecordStoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str | None = None
    filename: str = DEFAULT_FILENAME

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("record_store.filename must not be empty")
        return normalized


class BlobCacheConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str | None = None
    name: str | None = None
    delete_on_close: bool = True

    @model_validator(mode="after")
    def validate_location(self) -> BlobCacheConfig:
        if self.directory is not None and self.name is not None:
            raise ValueError("blob_cache.directory and blob_cache.name are mutually exclusive")
        return self


class NetworkConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    proxy: ProxyConfig | None = None


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown logging level: {value}")
        return normalized


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_store: RecordStoreConfig = Field(default_factory=RecordStoreConfig)
    blob_cache: BlobCacheConfig = Field(default_factory=BlobCacheConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> AppConfig:
    raw = Path(path).read_text(encoding="utf-8")
    payload = _parse_yaml_or_json(raw)
    try:
        return AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def open_record_store(config: AppConfig) -> KeyedRecordStore:
    return KeyedRecordStore(config.record_store.directory, config.record_store.filename)


def open_blob_cache(config: AppConfig) -> KeyedBlobCache:
    settings = config.blob_cache
    if settings.directory is not None:
        return KeyedBlobCache(settings.directory, delete_on_close=settings.delete_on_close)
    return KeyedBlobCache.in_temp_dir(settings.name, delete_on_close=settings.delete_on_close)


def open_session(config: AppConfig, session: requests.Session | None = None) -> requests.Session:
    return build_session(config.network.proxy, session)


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> dict[str, Any]:
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed
