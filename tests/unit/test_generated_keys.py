"""Unit tests for the generated-keys request flag and cache."""

from typing import Any

import pytest

from sqlproxy.core.generated_keys import (
    NO_GENERATED_KEYS,
    RETURN_GENERATED_KEYS,
    GeneratedKeysCache,
    requests_generated_keys,
)
from tests.fakes import FakeResultSet


@pytest.mark.parametrize(
    ("args", "kwargs", "expected"),
    [
        (("INSERT",), {}, False),
        (("INSERT", RETURN_GENERATED_KEYS), {}, True),
        (("INSERT", NO_GENERATED_KEYS), {}, False),
        (("INSERT", [1]), {}, True),
        (("INSERT", ("id",)), {}, True),
        (("INSERT", []), {}, False),
        (("INSERT", True), {}, False),
        (("INSERT", None), {}, False),
        (("INSERT",), {"generated_keys": RETURN_GENERATED_KEYS}, True),
        (("INSERT",), {"generated_keys": ["id"]}, True),
        (("INSERT",), {"generated_keys": NO_GENERATED_KEYS}, False),
    ],
)
def test_requests_generated_keys(args: "tuple[Any, ...]", kwargs: "dict[str, Any]", expected: bool) -> None:
    assert requests_generated_keys(args, kwargs) is expected


def test_cache_returns_live_handle() -> None:
    cache = GeneratedKeysCache()
    handle = FakeResultSet()
    cache.put(handle)
    assert cache.get() is handle


def test_cache_evicts_closed_handle() -> None:
    cache = GeneratedKeysCache()
    handle = FakeResultSet()
    cache.put(handle)
    handle.close()
    assert cache.get() is None


def test_cache_put_overwrites() -> None:
    cache = GeneratedKeysCache()
    first, second = FakeResultSet(), FakeResultSet()
    cache.put(first)
    cache.put(second)
    assert cache.get() is second
    assert not first.closed


def test_close_closes_live_handle_and_clears() -> None:
    cache = GeneratedKeysCache()
    handle = FakeResultSet()
    cache.put(handle)

    assert cache.close() is True
    assert handle.closed
    assert cache.get() is None
    assert cache.close() is False


def test_close_clears_slot_even_when_handle_fails() -> None:
    class BrokenHandle(FakeResultSet):
        def close(self) -> None:
            raise RuntimeError("boom")

    cache = GeneratedKeysCache()
    cache.put(BrokenHandle())
    with pytest.raises(RuntimeError):
        cache.close()
    assert cache.get() is None


def test_invalidate_does_not_close() -> None:
    cache = GeneratedKeysCache()
    handle = FakeResultSet()
    cache.put(handle)
    cache.invalidate()
    assert cache.get() is None
    assert not handle.closed
