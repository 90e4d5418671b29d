import pytest
from django.conf import settings
from rest_framework.test import APIClient

from core.common.ratelimit import get_rate_limiter
from core.iam.authentication import DemoUser, serialize_demo_cookie


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    # in-memory limiter is process-wide; start each test with empty windows
    get_rate_limiter.cache_clear()
    yield
    get_rate_limiter.cache_clear()


def _client_for(user_id, name=""):
    client = APIClient()
    client.cookies[settings.DEMO_AUTH_COOKIE] = serialize_demo_cookie(DemoUser(id=user_id, name=name))
    return client


@pytest.fixture
def owner_client():
    return _client_for("demo-user-1", "Demo User")


@pytest.fixture
def other_client():
    return _client_for("demo-user-2", "Someone Else")
