"""Folder-mapping resolution.

A file inherits the instance and project of the closest enabled mapping on its
folder path. Instance and project mappings are matched independently; among
matching mappings of one type the longest ``folder_path`` wins, then the most
recently created, then the later entry in settings order.
"""

from __future__ import annotations

import logging

from ticketbridge.core.contracts.mapping import ResolvedContext
from ticketbridge.core.contracts.settings import BridgeSettings, FolderMapping, MappingType

_LOG = logging.getLogger(__name__)


def folder_of(file_path: str) -> str:
    """Return the containing folder of *file_path*, ``""`` for root-level files."""
    head, sep, _ = file_path.rpartition("/")
    return head if sep else ""


def is_path_match(folder_path: str, mapping_path: str) -> bool:
    if mapping_path == "":
        return True
    if folder_path == mapping_path:
        return True
    return folder_path.startswith(mapping_path + "/")


class MappingResolver:
    def __init__(self, settings: BridgeSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> BridgeSettings:
        return self._settings

    def update_settings(self, settings: BridgeSettings) -> None:
        self._settings = settings

    def resolve(self, file_path: str) -> ResolvedContext:
        settings = self._settings
        folder_path = folder_of(file_path)
        instance_mapping = self.find_most_specific_mapping(folder_path, MappingType.INSTANCE, settings)

        if instance_mapping is None:
            default = settings.default_instance()
            if default is None:
                _LOG.debug("no instance mapping for %s", file_path)
                return ResolvedContext()
            _LOG.debug("no instance mapping for %s; using default instance %s", file_path, default.id)
            return ResolvedContext(instance=default, is_default=True)

        project_mapping = self.find_most_specific_mapping(folder_path, MappingType.PROJECT, settings)
        instance = settings.find_instance(instance_mapping.instance_id or "")
        if instance is None:
            _LOG.debug(
                "mapping %s points at missing or disabled instance %s",
                instance_mapping.id,
                instance_mapping.instance_id,
            )

        return ResolvedContext(
            instance=instance,
            instance_mapping=instance_mapping,
            project_key=project_mapping.project_key if project_mapping is not None else None,
            project_mapping=project_mapping,
            is_instance_inherited=instance_mapping.folder_path != folder_path,
            is_project_inherited=project_mapping is not None and project_mapping.folder_path != folder_path,
        )

    def find_most_specific_mapping(
        self,
        folder_path: str,
        mapping_type: MappingType,
        settings: BridgeSettings | None = None,
    ) -> FolderMapping | None:
        mappings = (settings or self._settings).mappings
        candidates = [
            (index, mapping)
            for index, mapping in enumerate(mappings)
            if mapping.type == mapping_type and mapping.enabled and is_path_match(folder_path, mapping.folder_path)
        ]
        if not candidates:
            return None
        _, best = max(candidates, key=lambda pair: (len(pair[1].folder_path), pair[1].created_at, pair[0]))
        return best
