"""Tracker client construction."""

from __future__ import annotations

from collections.abc import Callable

from ticketbridge.core.contracts.settings import AdvancedSettings, TrackerInstance
from ticketbridge.core.contracts.tracker import TrackerClient
from ticketbridge.core.providers.jira.client import JiraClient

ClientFactory = Callable[[TrackerInstance, AdvancedSettings], TrackerClient]


def create_client(instance: TrackerInstance, advanced: AdvancedSettings | None = None) -> TrackerClient:
    """Create a client for *instance*.

    The returned client is an async context manager::

        async with create_client(instance, settings.advanced) as client:
            issue = await client.get_issue("PROJ-1", ["status"])
    """
    advanced = advanced or AdvancedSettings()
    return JiraClient(
        instance,
        timeout_seconds=advanced.request_timeout / 1000,
        max_retries=advanced.max_retries,
    )
