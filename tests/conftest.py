"""
Shared pytest fixtures for the order load-test scenarios.

The scenarios talk to a Locust ``HttpSession``. These tests swap it for a
fake session (see ``fakes.py``) whose responses behave like Locust's
``catch_response`` context managers, so scenario code runs unchanged
without a runner.
"""
import copy

import pytest

from fakes import FakeSession
from spot_loadtest.config.config_loader import DEFAULT_CONFIG
from spot_loadtest.telemetry.metrics import registry


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture(autouse=True)
def reset_metrics():
    registry.reset()
    yield
    registry.reset()
