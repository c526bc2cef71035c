from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from sqlproxy import ProxyConfig, wrap_connection
from tests.fakes import FakeConnection, RecordingListener

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def make_proxy(fake_connection: FakeConnection, listener: RecordingListener) -> Callable[..., Any]:
    """Wrap ``fake_connection`` with a config built from keyword overrides."""

    def factory(**overrides: Any) -> Any:
        overrides.setdefault("data_source_name", "test-ds")
        overrides.setdefault("listeners", (listener,))
        return wrap_connection(fake_connection, ProxyConfig(**overrides))

    return factory
