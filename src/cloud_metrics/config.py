"""Configuration for metrics senders."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .encoding import GA_ENDPOINT_URL

if TYPE_CHECKING:
    from .senders import AsyncMetricsSender, MetricsSender


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@dataclass
class MetricsConfig:
    """
    Configuration for metrics reporting.

    Can be set via:
    - Constructor arguments
    - Environment variables (CLOUD_METRICS_*)
    - Config file (YAML or JSON)
    """
    # Google Analytics property receiving the reports
    analytics_id: str | None = field(
        default_factory=lambda: os.environ.get("CLOUD_METRICS_ANALYTICS_ID")
    )

    # Request timeout (seconds)
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("CLOUD_METRICS_TIMEOUT", "10"))
    )

    # Collection endpoint
    endpoint_url: str = field(
        default_factory=lambda: os.environ.get("CLOUD_METRICS_ENDPOINT_URL", GA_ENDPOINT_URL)
    )

    # Master switch; create_sender() returns None when disabled
    enabled: bool = field(
        default_factory=lambda: _env_flag("CLOUD_METRICS_ENABLED", "true")
    )

    # Fire-and-forget (async) or blocking (sync) delivery
    async_send: bool = field(
        default_factory=lambda: _env_flag("CLOUD_METRICS_ASYNC", "true")
    )

    @classmethod
    def from_dict(cls, data: dict) -> MetricsConfig:
        """Create config from dictionary."""
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str) -> MetricsConfig:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> MetricsConfig:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


def create_sender(
    config: MetricsConfig,
    **kwargs: Any,
) -> MetricsSender | AsyncMetricsSender | None:
    """
    Create the sender described by a config.

    Extra keyword arguments (client, random) are passed to the sender.

    Returns:
        A sender, or None if reporting is disabled

    Raises:
        ValueError: If reporting is enabled but no analytics ID is configured
    """
    from .senders import AsyncMetricsSender, MetricsSender

    if not config.enabled:
        return None
    if not config.analytics_id:
        raise ValueError("analytics_id is required when metrics reporting is enabled")

    sender_cls = AsyncMetricsSender if config.async_send else MetricsSender
    return sender_cls.from_config(config, **kwargs)
