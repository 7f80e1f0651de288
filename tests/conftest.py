"""Shared test fixtures for cloud-metrics tests.

No test touches the network: HTTP clients are built on httpx.MockTransport
and the random source always returns the same cache-buster.
"""

from random import Random
from unittest.mock import MagicMock

import httpx
import pytest

from cloud_metrics.events import Event


# =============================================================================
# Helpers
# =============================================================================

def _split_body(content: bytes) -> list[str]:
    return content.decode("utf-8").split("&")


class RequestRecorder:
    """Mock transport handler that records requests and answers with a fixed status."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ignored")


# =============================================================================
# Random Source Fixtures
# =============================================================================

@pytest.fixture
def fixed_random() -> MagicMock:
    """Random source whose cache-buster is always 12345."""
    random = MagicMock(spec=Random)
    random.getrandbits.return_value = 12345
    return random


# =============================================================================
# Event Fixtures
# =============================================================================

@pytest.fixture
def minimal_event() -> Event:
    """Event with only the required fields set."""
    return (
        Event.builder()
        .set_name("testEventName")
        .set_type("testEventType")
        .set_client_id("testClientId")
        .build()
    )


@pytest.fixture
def full_event() -> Event:
    """Event with every optional field set."""
    return (
        Event.builder()
        .set_name("testEventName")
        .set_type("testEventType")
        .set_client_id("testClientId")
        .set_is_user_signed_in(True)
        .set_is_user_internal(True)
        .set_is_user_trial_eligible(True)
        .set_client_hostname("testClientHostname")
        .set_object_type("testObjectType")
        .set_project_number_hash("testProjectNumberHash")
        .set_billing_id_hash("testBillingIdHash")
        .add_metadata("key1,", "value1=\\")
        .build()
    )


# =============================================================================
# Transport Fixtures
# =============================================================================

@pytest.fixture
def recorder() -> RequestRecorder:
    """Records requests and answers 200."""
    return RequestRecorder()


@pytest.fixture
def make_recorder():
    """Factory for recorders answering with a given status."""
    return RequestRecorder


# =============================================================================
# Body Fixtures
# =============================================================================

@pytest.fixture
def body_fields():
    """Split a form body into its name=value fields."""
    return _split_body
