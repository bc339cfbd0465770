"""Shared pytest fixtures and configuration for the cmdframe test suite.

Guidelines
----------
* No network access and no real terminal interaction in any test.
* Core tests must be pure: no output, no environment access.
* Lifecycle tests get a private event hub and an empty environment so
  nothing leaks between tests.
"""

from __future__ import annotations

import pytest

from cmdframe.cli.lifecycle import Collaborators
from cmdframe.infra.config_reader import MappingConfigReader
from cmdframe.infra.event_hub import InMemoryEventHub

_ENV_SWITCHES = (
    "CMDFRAME_CONTENT_TYPE",
    "CMDFRAME_JSON_TO_STDOUT",
    "CMDFRAME_ENV",
    "CMDFRAME_API_VERSION",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_SWITCHES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def hub() -> InMemoryEventHub:
    return InMemoryEventHub()


@pytest.fixture()
def collaborators(hub: InMemoryEventHub) -> Collaborators:
    return Collaborators(
        config_reader=MappingConfigReader({}),
        event_hub=hub,
        environ={},
    )
