"""Pytest configuration and fixtures."""

import os
import sys
import typing as t

import pytest
from fastapi.testclient import TestClient

# make the repo root importable when running from a checkout
sys.path.insert(
    0,
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..")),
)

# Import after path setup - pylint: disable=wrong-import-position
from cryptotracker import config  # noqa: E402
from cryptotracker.controller import build_tracker  # noqa: E402
from cryptotracker.main import app  # noqa: E402
from tests.helpers import FakeMarkets, RecordingRenderer, mock_client  # noqa: E402


@pytest.fixture
def markets() -> FakeMarkets:
    """Provide a fresh fake upstream.

    :return: Fake CoinGecko/CoinLore router.
    """
    return FakeMarkets()


@pytest.fixture
def client(
    markets: FakeMarkets,
    monkeypatch: pytest.MonkeyPatch,
) -> t.Generator[TestClient, None, None]:
    """Provide a test client whose tracker talks to ``markets``.

    :param markets: Fake upstream.
    :param monkeypatch: Pytest fixture for patching.
    :return: Test client generator.
    """
    monkeypatch.setattr(config, "MIN_REQUEST_INTERVAL_MS", 0)
    monkeypatch.setattr(config, "REFRESH_INTERVAL_SECONDS", 0)
    app.state.tracker = build_tracker(
        RecordingRenderer(),
        client=mock_client(markets),
    )
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    finally:
        del app.state.tracker
