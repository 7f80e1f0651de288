"""Exceptions raised by the metrics library."""

from __future__ import annotations


class MetricsError(Exception):
    """Base exception for problems recording usage metrics."""
    pass


class MetricsCommunicationError(MetricsError):
    """Failed to communicate with the recording service.

    Raised by the synchronous sender for transport errors and for
    non-2xx responses. The underlying exception is chained as __cause__.
    """
    pass


class IncompleteEventError(MetricsError, RuntimeError):
    """EventBuilder.build() was invoked before a required field was set."""
    pass
