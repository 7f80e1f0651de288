"""
Cloud Metrics - usage reporting via the Google Analytics Measurement Protocol

Translates application usage events into Google Analytics pageview hits
and sends them to the collection endpoint:
- Event / EventBuilder: immutable description of one occurrence
- MetricsSender: blocking delivery, failures raise MetricsCommunicationError
- AsyncMetricsSender: fire-and-forget delivery, failures are only logged

Usage:
    from cloud_metrics import Event, MetricsSender

    event = (
        Event.builder()
        .set_name("create")
        .set_type("instance")
        .set_client_id(client_uuid)
        .build()
    )
    with MetricsSender("UA-12345-1") as sender:
        sender.send(event)
"""

from .config import MetricsConfig, create_sender
from .errors import IncompleteEventError, MetricsCommunicationError, MetricsError
from .events import Event, EventBuilder
from .senders import AsyncMetricsSender, BaseSender, MetricsSender

__version__ = "0.1.0"

__all__ = [
    # Events
    "Event",
    "EventBuilder",
    # Senders
    "BaseSender",
    "MetricsSender",
    "AsyncMetricsSender",
    # Configuration
    "MetricsConfig",
    "create_sender",
    # Exceptions
    "MetricsError",
    "MetricsCommunicationError",
    "IncompleteEventError",
]
