"""Settings loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ticketbridge.core.contracts.exceptions import ConfigError
from ticketbridge.core.contracts.settings import BridgeSettings, MappingType


def _validate_mapping_references(settings: BridgeSettings) -> None:
    known_instances = {instance.id for instance in settings.instances}
    for mapping in settings.mappings:
        if mapping.type != MappingType.INSTANCE:
            continue
        if mapping.instance_id not in known_instances:
            raise ConfigError(f"mapping {mapping.id!r} references unknown instance {mapping.instance_id!r}")


def load_settings(path: str | Path) -> BridgeSettings:
    settings_path = Path(path).expanduser().resolve()

    try:
        raw_payload: Any = json.loads(settings_path.read_text(encoding="utf-8"))
        parsed = BridgeSettings.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading settings file: {settings_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in settings file: {settings_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc

    _validate_mapping_references(parsed)
    return parsed


def write_settings(settings: BridgeSettings, path: str | Path) -> Path:
    settings_path = Path(path).expanduser().resolve()
    payload = settings.model_dump(mode="json", by_alias=True)
    settings_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return settings_path
