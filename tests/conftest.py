"""Shared fixtures: a seeded store on a frozen clock and a client over it."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from library_catalog.catalog import CatalogStore, load_sample_books
from library_catalog.config import DEFAULT_SAMPLE_FILE, Settings
from library_catalog.main import create_app


FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def sample_books():
    return load_sample_books(DEFAULT_SAMPLE_FILE, loaded_at=FIXED_NOW)


@pytest.fixture
def store(sample_books) -> CatalogStore:
    return CatalogStore(sample_books, clock=fixed_clock)


@pytest.fixture
def empty_store() -> CatalogStore:
    return CatalogStore(clock=fixed_clock)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
