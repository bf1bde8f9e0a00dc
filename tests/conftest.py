"""Shared fixtures: a catalog cache over an in-memory source."""

import pytest

from media_catalog.cache import CatalogCache
from media_catalog.fetcher import CatalogFetcher

from helpers import FakeSource


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def cache(source):
    c = CatalogCache(CatalogFetcher(source))
    yield c
    c.close()


@pytest.fixture
def ready_cache(cache):
    assert cache.ensure_ready(timeout=5) is True
    return cache
