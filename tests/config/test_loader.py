from __future__ import annotations

import json
from pathlib import Path

import pytest

from tests.fakes.settings import instance_mapping, make_instance, make_settings, project_mapping
from ticketbridge.core.config import load_settings, write_settings
from ticketbridge.core.contracts.exceptions import ConfigError


def test_load_settings_reads_camel_case_json(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "instances": [{"id": "a", "name": "Work", "baseUrl": "https://work.atlassian.net"}],
                "mappings": [{"id": "m", "folderPath": "Work", "type": "instance", "instanceId": "a"}],
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.instances[0].id == "a"
    assert settings.mappings[0].instance_id == "a"


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading settings file"):
        load_settings(tmp_path / "missing.json")


def test_invalid_json_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid JSON"):
        load_settings(path)


def test_validation_failure_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"sync": {"syncInterval": 0}}), encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid settings"):
        load_settings(path)


def test_unknown_instance_reference_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"mappings": [{"id": "m", "folderPath": "Work", "type": "instance", "instanceId": "nope"}]}),
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="unknown instance 'nope'"):
        load_settings(path)


def test_write_then_load_preserves_settings(tmp_path: Path) -> None:
    settings = make_settings(
        instances=[make_instance(is_default=True)],
        mappings=[instance_mapping("Work"), project_mapping("Work/Team", "TEAM")],
        cache_enabled=False,
    )

    path = write_settings(settings, tmp_path / "settings.json")
    payload = json.loads(path.read_text(encoding="utf-8"))

    assert "baseUrl" in payload["instances"][0]
    assert load_settings(path) == settings
