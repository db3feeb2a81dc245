from __future__ import annotations

import pytest

from tests.helpers.fakes import FakeFetchClient, RecordingTransport
from vybebot.application.bot import create_scene_controller
from vybebot.application.flows import build_default_flows
from vybebot.config.settings import Settings
from vybebot.infra.session_store_memory import InMemorySessionStore


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        wizard_max_rewinds=3,
        results_display_limit=5,
    )


@pytest.fixture()
def flows():
    return build_default_flows()


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore(ttl_seconds=600)


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def fetch_client() -> FakeFetchClient:
    return FakeFetchClient()


@pytest.fixture()
def controller(settings, transport, fetch_client, store, flows):
    return create_scene_controller(
        settings,
        transport=transport,
        fetch_client=fetch_client,
        store=store,
        flows=flows,
    )
