"""Shared pytest fixtures for relay tests."""

import random

import pytest
from fastapi.testclient import TestClient

from ystp.api.main import create_app
from ystp.core.mnemonic import MnemonicGenerator
from ystp.session.registry import SessionRegistry
from ystp.utils.config import Settings
from tests.utils.fakes import RecordingStorage


@pytest.fixture
def storage():
    """A fresh in-memory store that records its calls."""
    return RecordingStorage()


@pytest.fixture
def registry(storage):
    """A registry backed by the recording store."""
    return SessionRegistry(storage)


@pytest.fixture
def settings():
    """Settings that never touch Redis or log files."""
    return Settings(STORAGE_TYPE="memory", LOG_TO_FILE=False)


@pytest.fixture
def app(settings, storage):
    """Relay application wired to the recording store and a seeded code generator."""
    generator = MnemonicGenerator(rng=random.Random(1234))
    return create_app(settings=settings, storage=storage, generator=generator)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running, so all sockets share one event loop."""
    with TestClient(app) as test_client:
        yield test_client
