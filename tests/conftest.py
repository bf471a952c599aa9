"""Shared test fixtures for ticketbridge tests."""

from __future__ import annotations

import pytest

from tests.fakes.clock import FakeClock
from tests.fakes.settings import make_settings
from tests.fakes.store import InMemoryNoteStore
from tests.fakes.tracker import FakeClientFactory, FakeTrackerClient
from ticketbridge.core.contracts.settings import BridgeSettings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> BridgeSettings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryNoteStore:
    return InMemoryNoteStore()


@pytest.fixture
def tracker() -> FakeTrackerClient:
    return FakeTrackerClient()


@pytest.fixture
def client_factory(tracker: FakeTrackerClient) -> FakeClientFactory:
    return FakeClientFactory(tracker)
