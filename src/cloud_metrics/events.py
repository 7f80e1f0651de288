"""Usage event types."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from .errors import IncompleteEventError


T = TypeVar("T")


def check_not_none(value: T, name: str) -> T:
    """Return value, raising TypeError if it is None."""
    if value is None:
        raise TypeError(f"{name} must not be None")
    return value


@dataclass(frozen=True, slots=True)
class Event:
    """
    A single event to be reported.

    Optional fields use None for "absent". An empty string is a present
    value and is kept distinct from None.

    Build instances with Event.builder(); the metadata mapping of a built
    event is read-only.
    """
    # Event identification
    name: str
    type: str

    # Client ID - a UUID as Google Analytics expects. Must never include PII
    # and should stay constant across requests from a single client.
    client_id: str

    # User information
    is_user_signed_in: bool = False
    is_user_internal: bool = False
    is_user_trial_eligible: bool | None = None

    # Type of the object the event applies to
    object_type: str | None = None

    # Pre-hashed identifiers
    project_number_hash: str | None = None
    billing_id_hash: str | None = None

    # Hostname where the event occurred
    client_hostname: str | None = None

    # Free-form key/value context, reported as the virtual page title
    metadata: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    def __post_init__(self) -> None:
        check_not_none(self.name, "name")
        check_not_none(self.type, "type")
        check_not_none(self.client_id, "client_id")
        check_not_none(self.metadata, "metadata")
        # Detach from the caller's mapping
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @staticmethod
    def builder() -> EventBuilder:
        """Create a new EventBuilder."""
        return EventBuilder()

    def to_builder(self) -> EventBuilder:
        """Create a builder pre-populated with this event's values."""
        builder = (
            EventBuilder()
            .set_name(self.name)
            .set_type(self.type)
            .set_client_id(self.client_id)
            .set_is_user_signed_in(self.is_user_signed_in)
            .set_is_user_internal(self.is_user_internal)
        )
        if self.is_user_trial_eligible is not None:
            builder.set_is_user_trial_eligible(self.is_user_trial_eligible)
        if self.object_type is not None:
            builder.set_object_type(self.object_type)
        if self.project_number_hash is not None:
            builder.set_project_number_hash(self.project_number_hash)
        if self.billing_id_hash is not None:
            builder.set_billing_id_hash(self.billing_id_hash)
        if self.client_hostname is not None:
            builder.set_client_hostname(self.client_hostname)
        for key, value in self.metadata.items():
            builder.add_metadata(key, value)
        return builder

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and debugging."""
        return {
            "name": self.name,
            "type": self.type,
            "client_id": self.client_id,
            "is_user_signed_in": self.is_user_signed_in,
            "is_user_internal": self.is_user_internal,
            "is_user_trial_eligible": self.is_user_trial_eligible,
            "object_type": self.object_type,
            "project_number_hash": self.project_number_hash,
            "billing_id_hash": self.billing_id_hash,
            "client_hostname": self.client_hostname,
            "metadata": dict(self.metadata),
        }


class EventBuilder:
    """
    Accumulates state for an Event.

    Setters return the builder so calls can be chained:

        event = (
            Event.builder()
            .set_name("deploy")
            .set_type("click")
            .set_client_id(client_id)
            .add_metadata("region", "us-east1")
            .build()
        )
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._type: str | None = None
        self._client_id: str | None = None
        self._is_user_signed_in = False
        self._is_user_internal = False
        self._is_user_trial_eligible: bool | None = None
        self._object_type: str | None = None
        self._project_number_hash: str | None = None
        self._billing_id_hash: str | None = None
        self._client_hostname: str | None = None
        self._metadata: dict[str, str] = {}

    def set_name(self, name: str) -> EventBuilder:
        self._name = check_not_none(name, "name")
        return self

    def set_type(self, type: str) -> EventBuilder:
        self._type = check_not_none(type, "type")
        return self

    def set_client_id(self, client_id: str) -> EventBuilder:
        self._client_id = check_not_none(client_id, "client_id")
        return self

    def set_is_user_signed_in(self, is_user_signed_in: bool) -> EventBuilder:
        self._is_user_signed_in = bool(check_not_none(is_user_signed_in, "is_user_signed_in"))
        return self

    def set_is_user_internal(self, is_user_internal: bool) -> EventBuilder:
        self._is_user_internal = bool(check_not_none(is_user_internal, "is_user_internal"))
        return self

    def set_is_user_trial_eligible(self, is_user_trial_eligible: bool) -> EventBuilder:
        self._is_user_trial_eligible = bool(
            check_not_none(is_user_trial_eligible, "is_user_trial_eligible")
        )
        return self

    def clear_is_user_trial_eligible(self) -> EventBuilder:
        """Reset free-trial eligibility to unknown."""
        self._is_user_trial_eligible = None
        return self

    def set_object_type(self, object_type: str) -> EventBuilder:
        self._object_type = check_not_none(object_type, "object_type")
        return self

    def clear_object_type(self) -> EventBuilder:
        self._object_type = None
        return self

    def set_project_number_hash(self, project_number_hash: str) -> EventBuilder:
        self._project_number_hash = check_not_none(project_number_hash, "project_number_hash")
        return self

    def clear_project_number_hash(self) -> EventBuilder:
        self._project_number_hash = None
        return self

    def set_billing_id_hash(self, billing_id_hash: str) -> EventBuilder:
        self._billing_id_hash = check_not_none(billing_id_hash, "billing_id_hash")
        return self

    def clear_billing_id_hash(self) -> EventBuilder:
        self._billing_id_hash = None
        return self

    def set_client_hostname(self, client_hostname: str) -> EventBuilder:
        self._client_hostname = check_not_none(client_hostname, "client_hostname")
        return self

    def clear_client_hostname(self) -> EventBuilder:
        self._client_hostname = None
        return self

    def add_metadata(self, key: str, value: str) -> EventBuilder:
        """Add a metadata entry, overwriting any existing value for the key."""
        self._metadata[check_not_none(key, "metadata key")] = check_not_none(
            value, "metadata value"
        )
        return self

    def build(self) -> Event:
        """
        Construct the event.

        Raises:
            IncompleteEventError: If name, type or client_id was never set
        """
        if self._name is None:
            raise IncompleteEventError("build() method invoked without setting a name")
        if self._type is None:
            raise IncompleteEventError("build() method invoked without setting a type")
        if self._client_id is None:
            raise IncompleteEventError("build() method invoked without setting a client_id")

        return Event(
            name=self._name,
            type=self._type,
            client_id=self._client_id,
            is_user_signed_in=self._is_user_signed_in,
            is_user_internal=self._is_user_internal,
            is_user_trial_eligible=self._is_user_trial_eligible,
            object_type=self._object_type,
            project_number_hash=self._project_number_hash,
            billing_id_hash=self._billing_id_hash,
            client_hostname=self._client_hostname,
            metadata=self._metadata,
        )
