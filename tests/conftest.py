"""Shared pytest fixtures for the Mealsync test suite."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mealsync.config import get_settings
from mealsync.db.households import create_household, create_member
from mealsync.db.repository import reset_repository_state
from mealsync.models.household import Household, Member
from mealsync.server.app import create_app


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def member() -> Member:
    return create_member(name="Asha", email="asha@example.com")


@pytest.fixture()
def other_member() -> Member:
    return create_member(name="Ben", email="ben@example.com")


@pytest.fixture()
def household(member) -> Household:
    return create_household(name="Flat 4B", owner_id=member.id)


@pytest.fixture()
def member_headers(member) -> dict[str, str]:
    return {"X-Member-ID": str(member.id)}


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_mealsync.db"
    monkeypatch.setenv("MEALSYNC_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("MEALSYNC_API_TOKEN", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("MEALSYNC_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
