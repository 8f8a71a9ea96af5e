"""Pytest fixtures: test client with a fresh rate-limit budget per test."""
import os

import pytest
from fastapi.testclient import TestClient

# Must be set before the app (and its settings) are imported
os.environ.setdefault("RATE_LIMIT_COUPON_PER_MINUTE", "5")
os.environ.setdefault("STUDENT_DISCOUNT_PERCENT", "6")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.core.rate_limit import limiter
from app.main import app


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture(scope="function")
def client():
    with TestClient(app) as c:
        yield c
