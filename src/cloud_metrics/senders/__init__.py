"""Senders - deliver encoded events to Google Analytics."""

from .base import BaseSender
from .sync import MetricsSender
from .asynchronous import AsyncMetricsSender

__all__ = [
    "BaseSender",
    "MetricsSender",
    "AsyncMetricsSender",
]
