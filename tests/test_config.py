from __future__ import annotations

import json

import pytest

import requests

from utilkit.config import (
    AppConfig,
    load_config,
    open_blob_cache,
    open_record_store,
    open_session,
)


def test_load_config_from_yaml(tmp_path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "\n".join(
            [
                "record_store:",
                f"  directory: {tmp_path / 'settings'}",
                "  filename: app.properties",
                "blob_cache:",
                f"  directory: {tmp_path / 'blobs'}",
                "  delete_on_close: false",
                "network:",
                "  proxy:",
                "    host: proxy.internal",
                "    port: '3128'",
                "logging:",
                "  level: debug",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.record_store.filename == "app.properties"
    assert config.blob_cache.delete_on_close is False
    assert config.network.proxy is not None
    assert config.network.proxy.port == 3128
    assert config.logging.level == "DEBUG"


def test_load_config_from_json_uses_defaults(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"record_store": {"filename": "x.properties"}}), encoding="utf-8")

    config = load_config(config_path)

    assert config.record_store.directory is None
    assert config.record_store.filename == "x.properties"
    assert config.blob_cache.delete_on_close is True
    assert config.network.proxy is None
    assert config.logging.level == "INFO"


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown": 1},
        {"logging": {"level": "chatty"}},
        {"record_store": {"filename": "  "}},
        {"blob_cache": {"directory": "/tmp/a", "name": "b"}},
        ["not", "an", "object"],
    ],
)
def test_load_config_rejects_invalid_payloads(tmp_path, payload) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(config_path)


def test_open_stores_from_config(tmp_path) -> None:
    config = AppConfig.model_validate(
        {
            "record_store": {"directory": str(tmp_path / "settings"), "filename": "s.properties"},
            "blob_cache": {"directory": str(tmp_path / "blobs")},
        }
    )

    store = open_record_store(config)
    with open_blob_cache(config) as cache:
        cache.put("k", 1)
        assert cache.directory == tmp_path / "blobs"

    assert store.path == tmp_path / "settings" / "s.properties"
    assert store.path.exists()
    assert not (tmp_path / "blobs").exists()


def test_open_blob_cache_leaves_existing_directory_contents(tmp_path) -> None:
    blobs = tmp_path / "blobs"
    blobs.mkdir()
    (blobs / "keep.txt").write_text("keep", encoding="utf-8")
    config = AppConfig.model_validate({"blob_cache": {"directory": str(blobs)}})

    with open_blob_cache(config) as cache:
        cache.put("k", 1)

    assert (blobs / "keep.txt").exists()
    assert not (blobs / "k").exists()


def test_open_session_routes_through_configured_proxy() -> None:
    config = AppConfig.model_validate(
        {"network": {"proxy": {"host": "proxy.internal", "port": 3128}}}
    )

    session = open_session(config)

    assert session.proxies["http"] == "http://proxy.internal:3128"
    assert session.proxies["https"] == "http://proxy.internal:3128"
    assert session.trust_env is False


def test_open_session_without_proxy_reuses_given_session() -> None:
    existing = requests.Session()

    session = open_session(AppConfig(), existing)

    assert session is existing
    assert session.proxies == {}
