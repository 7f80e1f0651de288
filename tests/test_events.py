"""Tests for Event and EventBuilder."""

import dataclasses

import pytest

from cloud_metrics import encoding
from cloud_metrics.errors import IncompleteEventError, MetricsError
from cloud_metrics.events import Event, EventBuilder, check_not_none


def _required() -> EventBuilder:
    return Event.builder().set_name("name").set_type("type").set_client_id("client")


class TestBuild:
    def test_defaults(self):
        event = _required().build()

        assert event.name == "name"
        assert event.type == "type"
        assert event.client_id == "client"
        assert event.is_user_signed_in is False
        assert event.is_user_internal is False
        assert event.is_user_trial_eligible is None
        assert event.object_type is None
        assert event.project_number_hash is None
        assert event.billing_id_hash is None
        assert event.client_hostname is None
        assert dict(event.metadata) == {}

    @pytest.mark.parametrize(
        "builder, missing",
        [
            (Event.builder().set_type("t").set_client_id("c"), "name"),
            (Event.builder().set_name("n").set_client_id("c"), "type"),
            (Event.builder().set_name("n").set_type("t"), "client_id"),
        ],
    )
    def test_missing_required_field(self, builder, missing):
        with pytest.raises(IncompleteEventError, match=missing):
            builder.build()

    def test_incomplete_is_invalid_state(self):
        with pytest.raises(RuntimeError):
            Event.builder().build()
        assert issubclass(IncompleteEventError, MetricsError)

    def test_empty_strings_are_accepted(self):
        event = Event.builder().set_name("").set_type("").set_client_id("").build()
        assert event.name == ""

    def test_all_fields(self, full_event):
        assert full_event.is_user_signed_in is True
        assert full_event.is_user_internal is True
        assert full_event.is_user_trial_eligible is True
        assert full_event.object_type == "testObjectType"
        assert full_event.project_number_hash == "testProjectNumberHash"
        assert full_event.billing_id_hash == "testBillingIdHash"
        assert full_event.client_hostname == "testClientHostname"
        assert dict(full_event.metadata) == {"key1,": "value1=\\"}


class TestBuilderArguments:
    @pytest.mark.parametrize(
        "setter",
        [
            "set_name",
            "set_type",
            "set_client_id",
            "set_object_type",
            "set_project_number_hash",
            "set_billing_id_hash",
            "set_client_hostname",
            "set_is_user_signed_in",
            "set_is_user_internal",
            "set_is_user_trial_eligible",
        ],
    )
    def test_none_rejected(self, setter):
        with pytest.raises(TypeError):
            getattr(Event.builder(), setter)(None)

    def test_none_metadata_rejected(self):
        with pytest.raises(TypeError):
            Event.builder().add_metadata(None, "value")
        with pytest.raises(TypeError):
            Event.builder().add_metadata("key", None)

    def test_setters_chain(self):
        builder = Event.builder()
        assert builder.set_name("n") is builder
        assert builder.clear_object_type() is builder
        assert builder.add_metadata("k", "v") is builder


class TestOptionalFields:
    def test_clear_resets_to_absent(self):
        event = (
            _required()
            .set_is_user_trial_eligible(True)
            .set_object_type("object")
            .set_project_number_hash("project")
            .set_billing_id_hash("billing")
            .set_client_hostname("host")
            .clear_is_user_trial_eligible()
            .clear_object_type()
            .clear_project_number_hash()
            .clear_billing_id_hash()
            .clear_client_hostname()
            .build()
        )

        assert event.is_user_trial_eligible is None
        assert event.object_type is None
        assert event.project_number_hash is None
        assert event.billing_id_hash is None
        assert event.client_hostname is None

    def test_false_trial_eligibility_is_present(self):
        event = _required().set_is_user_trial_eligible(False).build()
        assert event.is_user_trial_eligible is False

    def test_empty_string_is_present(self):
        event = _required().set_object_type("").build()
        assert event.object_type == ""


class TestMetadata:
    def test_last_write_wins(self):
        event = _required().add_metadata("k", "first").add_metadata("k", "second").build()
        assert dict(event.metadata) == {"k": "second"}

    def test_insertion_order_preserved(self):
        event = _required().add_metadata("b", "2").add_metadata("a", "1").build()
        assert list(event.metadata) == ["b", "a"]

    def test_snapshot_on_build(self):
        builder = _required().add_metadata("k", "v")
        event = builder.build()

        builder.add_metadata("k", "changed").add_metadata("other", "x")
        builder.set_name("renamed")

        assert dict(event.metadata) == {"k": "v"}
        assert event.name == "name"

    def test_metadata_read_only(self):
        event = _required().add_metadata("k", "v").build()
        with pytest.raises(TypeError):
            event.metadata["k"] = "changed"


class TestEventValue:
    def test_immutable(self):
        event = _required().build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.name = "other"

    def test_equality(self):
        first = _required().add_metadata("k", "v").build()
        second = _required().add_metadata("k", "v").build()
        third = _required().add_metadata("k", "w").build()

        assert first == second
        assert first != third

    def test_hashable(self):
        first = _required().add_metadata("k", "v").build()
        second = _required().add_metadata("k", "v").build()
        assert hash(first) == hash(second)

    def test_to_builder_round_trip(self, full_event):
        assert full_event.to_builder().build() == full_event

    def test_to_builder_does_not_mutate(self, full_event):
        variant = full_event.to_builder().set_name("other").clear_object_type().build()

        assert variant.name == "other"
        assert variant.object_type is None
        assert full_event.name == "testEventName"
        assert full_event.object_type == "testObjectType"

    def test_to_dict(self, full_event):
        d = full_event.to_dict()
        assert d["name"] == "testEventName"
        assert d["client_id"] == "testClientId"
        assert d["is_user_trial_eligible"] is True
        assert d["metadata"] == {"key1,": "value1=\\"}

    @pytest.mark.parametrize("field", ["name", "type", "client_id"])
    def test_constructor_rejects_none(self, field):
        kwargs = dict(name="n", type="t", client_id="c")
        kwargs[field] = None
        with pytest.raises(TypeError):
            Event(**kwargs)

    def test_constructor_copies_metadata(self):
        meta = {"k": "v"}
        event = Event(name="n", type="t", client_id="c", metadata=meta)
        meta["k"] = "changed"

        assert dict(event.metadata) == {"k": "v"}
        with pytest.raises(TypeError):
            event.metadata["k"] = "other"


class TestCheckNotNone:
    def test_returns_value(self):
        assert check_not_none("", "field") == ""
        assert check_not_none(False, "field") is False

    def test_none_names_field(self):
        with pytest.raises(TypeError, match="client_id must not be None"):
            check_not_none(None, "client_id")

    def test_shared_with_encoding(self):
        assert encoding.check_not_none is check_not_none
