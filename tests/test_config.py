from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from storj_migrator.config import (
    Settings,
    StorjConfig,
    ZenkoConfig,
    load_config,
    load_storj_config,
    load_zenko_config,
    parse_bool,
)
from storj_migrator.errors import ConfigLoadError
from storj_migrator.logs import masked


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_storj_config_keys(self, tmp_path: Path) -> None:
        path = write_json(
            tmp_path / "storj_config.json",
            {
                "apiKey": "key",
                "satelliteURL": "us1.storj.io:7777",
                "bucketName": "backups",
                "uploadPath": "zenko",
                "encryptionPassphrase": "pass",
                "serializedScope": "scope",
                "disallowReads": "true",
                "disallowWrites": "false",
                "disallowDeletes": "1",
            },
        )
        cfg = load_storj_config(path)
        assert cfg.api_key == "key"
        assert cfg.satellite == "us1.storj.io:7777"
        assert cfg.bucket == "backups"
        assert cfg.upload_path == "zenko"
        assert cfg.serialized_scope == "scope"
        assert (cfg.disallow_reads, cfg.disallow_writes, cfg.disallow_deletes) == (True, False, True)

    @pytest.mark.parametrize("key", ["zenkoEndpoint", "endpoint"])
    def test_zenko_endpoint_aliases(self, tmp_path: Path, key: str) -> None:
        path = write_json(
            tmp_path / "zenko.json",
            {key: "zenko.local:8000", "accessKeyID": "id", "secretAccessKey": "secret"},
        )
        cfg = load_zenko_config(path)
        assert cfg == ZenkoConfig(endpoint="zenko.local:8000", access_key_id="id", secret_access_key="secret")

    def test_missing_file_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(tmp_path / "missing.json", StorjConfig)
        assert exc_info.value.fatal

    def test_malformed_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_config(path, StorjConfig) == StorjConfig()

    def test_invalid_utf8_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"apiKey": "\xff\xfe"}')
        assert load_config(path, StorjConfig) == StorjConfig()

    def test_non_object_uses_defaults(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "list.json", ["apiKey"])
        assert load_config(path, ZenkoConfig) == ZenkoConfig()


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True", True])
    def test_true(self, value) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "false", "", "yes", None, False])
    def test_false(self, value) -> None:
        assert parse_bool(value) is False


@pytest.mark.parametrize("value", ["0", "-1"])
def test_chunk_size_must_be_positive(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("STORJ_MIGRATOR_CHUNK_SIZE", value)
    with pytest.raises(ValidationError):
        Settings()


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORJ_MIGRATOR_CHUNK_SIZE", "1024")
    monkeypatch.setenv("STORJ_MIGRATOR_DEBUG_DIR", "/tmp/verify")
    s = Settings()
    assert s.CHUNK_SIZE == 1024
    assert s.DEBUG_DIR == "/tmp/verify"
    assert s.ZENKO_CONFIG_FILE == "./config/zenko_property.json"


@pytest.mark.parametrize(
    ("secret", "expected"),
    [("", ""), ("abc", "***"), ("abcdefgh", "****efgh")],
)
def test_masked(secret: str, expected: str) -> None:
    assert masked(secret) == expected
