"""Settings contracts.

The host persists settings as camelCase JSON; every model accepts both the
persisted aliases and the snake_case field names. Models are frozen so that a
settings object captured at the start of an operation stays a stable snapshot
while ``update_settings`` swaps in a new one.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_SUMMARY_PATTERN = r"^## Summary\s*\n+```\s*\n(.+?)\n```"
DEFAULT_DESCRIPTION_PATTERN = r"^## Description[\s\t]*$"
DEFAULT_CACHE_MAX_SIZE = 100
FRONTMATTER_KEY_PATTERN = r"[\w-]+"


class _SettingsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _check_frontmatter_key(value: str) -> str:
    if re.fullmatch(FRONTMATTER_KEY_PATTERN, value) is None:
        raise ValueError(f"frontmatter key {value!r} may only contain letters, digits, '_' and '-'")
    return value


class MappingType(StrEnum):
    INSTANCE = "instance"
    PROJECT = "project"


class TrackerInstance(_SettingsModel):
    id: str
    name: str
    base_url: str
    email: str = ""
    api_token: str = Field(default="", repr=False)
    is_default: bool = False
    enabled: bool = True
    created_at: int = 0


class SyncFieldConfig(_SettingsModel):
    jira_field: str
    frontmatter_key: str
    enabled: bool = True
    read_only: bool = True

    @field_validator("frontmatter_key")
    @classmethod
    def validate_frontmatter_key(cls, value: str) -> str:
        return _check_frontmatter_key(value)


_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "g": 0,
}


def compile_pattern(pattern: str, flags: str = "") -> re.Pattern[str]:
    """Compile *pattern* with JavaScript-style single-letter *flags* (``"im"``)."""
    value = 0
    for flag in flags:
        if flag not in _REGEX_FLAGS:
            raise ValueError(f"unsupported regex flag: {flag!r}")
        value |= _REGEX_FLAGS[flag]
    return re.compile(pattern, value)


class ContentParsingConfig(_SettingsModel):
    summary_pattern: str = DEFAULT_SUMMARY_PATTERN
    summary_flags: str = "m"
    description_pattern: str = DEFAULT_DESCRIPTION_PATTERN
    description_flags: str = "m"

    @model_validator(mode="after")
    def validate_patterns(self) -> ContentParsingConfig:
        for pattern, flags in (
            (self.summary_pattern, self.summary_flags),
            (self.description_pattern, self.description_flags),
        ):
            try:
                compile_pattern(pattern, flags)
            except re.error as exc:
                raise ValueError(f"invalid content pattern {pattern!r}: {exc}") from exc
        return self

    def summary_regex(self) -> re.Pattern[str]:
        return compile_pattern(self.summary_pattern, self.summary_flags)

    def description_regex(self) -> re.Pattern[str]:
        return compile_pattern(self.description_pattern, self.description_flags)


class ProjectSyncConfig(_SettingsModel):
    enable_sync: bool = True
    sync_fields: list[SyncFieldConfig] | None = None


class FrontmatterFieldType(StrEnum):
    ISSUE_TYPE = "issue_type"
    LABELS = "labels"
    PARENT = "parent"
    PRIORITY = "priority"
    ASSIGNEE = "assignee"
    CUSTOM = "custom"


class FrontmatterFieldMapping(_SettingsModel):
    """Feeds a frontmatter value into a field of tickets created from the note."""

    frontmatter_key: str
    jira_field_type: FrontmatterFieldType
    custom_field_id: str | None = None
    custom_field_name: str | None = None

    @field_validator("frontmatter_key")
    @classmethod
    def validate_frontmatter_key(cls, value: str) -> str:
        return _check_frontmatter_key(value)

    @model_validator(mode="after")
    def validate_custom_field(self) -> FrontmatterFieldMapping:
        if self.jira_field_type == FrontmatterFieldType.CUSTOM and not self.custom_field_id:
            raise ValueError(f"custom frontmatter mapping {self.frontmatter_key!r} requires a custom_field_id")
        return self


class ProjectMappingConfig(_SettingsModel):
    frontmatter_mappings: list[FrontmatterFieldMapping] = Field(default_factory=list)
    content_parsing: ContentParsingConfig = Field(default_factory=ContentParsingConfig)
    sync_config: ProjectSyncConfig | None = None


class FolderMapping(_SettingsModel):
    id: str
    folder_path: str
    type: MappingType
    instance_id: str | None = None
    project_key: str | None = None
    enabled: bool = True
    created_at: int = 0
    project_config: ProjectMappingConfig | None = None

    @field_validator("folder_path")
    @classmethod
    def normalize_folder_path(cls, value: str) -> str:
        return value.strip().strip("/")

    @model_validator(mode="after")
    def validate_target(self) -> FolderMapping:
        if self.type == MappingType.INSTANCE and not self.instance_id:
            raise ValueError(f"instance mapping {self.id!r} requires an instance_id")
        if self.type == MappingType.PROJECT and not self.project_key:
            raise ValueError(f"project mapping {self.id!r} requires a project_key")
        return self


def _default_sync_fields() -> list[SyncFieldConfig]:
    return [
        SyncFieldConfig(jira_field="status", frontmatter_key="jira_status"),
        SyncFieldConfig(jira_field="assignee", frontmatter_key="jira_assignee"),
    ]


class SyncSettings(_SettingsModel):
    auto_sync: bool = True
    sync_interval: float = Field(default=5, gt=0)
    sync_on_file_open: bool = True
    update_frontmatter: bool = True
    sync_fields: list[SyncFieldConfig] = Field(default_factory=_default_sync_fields)

    @property
    def interval_ms(self) -> float:
        return self.sync_interval * 60 * 1000


class AdvancedSettings(_SettingsModel):
    request_timeout: int = Field(default=30000, gt=0)
    max_retries: int = Field(default=3, ge=0, le=10)
    log_level: str = "info"
    cache_enabled: bool = True
    cache_max_size: int = Field(default=DEFAULT_CACHE_MAX_SIZE, ge=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        if value not in {"debug", "info", "warn", "error"}:
            raise ValueError("log_level must be one of: debug, info, warn, error")
        return value


class BridgeSettings(_SettingsModel):
    instances: list[TrackerInstance] = Field(default_factory=list)
    mappings: list[FolderMapping] = Field(default_factory=list)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    advanced: AdvancedSettings = Field(default_factory=AdvancedSettings)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> BridgeSettings:
        for label, ids in (
            ("instance", [instance.id for instance in self.instances]),
            ("mapping", [mapping.id for mapping in self.mappings]),
        ):
            seen: set[str] = set()
            for item_id in ids:
                if item_id in seen:
                    raise ValueError(f"duplicate {label} id: {item_id}")
                seen.add(item_id)
        return self

    def find_instance(self, instance_id: str, *, enabled_only: bool = True) -> TrackerInstance | None:
        for instance in self.instances:
            if instance.id == instance_id and (instance.enabled or not enabled_only):
                return instance
        return None

    def default_instance(self) -> TrackerInstance | None:
        for instance in self.instances:
            if instance.enabled and instance.is_default:
                return instance
        return None
