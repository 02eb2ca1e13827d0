"""Tests for EventRegistry: event lifecycle and the status state machine."""

from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from ticketing import models
from ticketing.domain import Actor, EventStatus, MerchandiseKind, NormalKind, Role
from ticketing.domain.errors import (
    CapacityReachedError,
    EventIncompleteError,
    EventNotDeletableError,
    EventNotEditableError,
    EventNotFoundError,
    ForbiddenError,
    FormLockedError,
    InvalidEventIdError,
    InvalidInputError,
    InvalidScheduleError,
    InvalidTransitionError,
)
from ticketing.services.notifications import NotificationKind
from tests.conftest import event_data, merchandise_data


@pytest.mark.django_db
class TestCreateEvent:
    def test_creates_draft_owned_by_organizer(self, services, organizer):
        """New events start as drafts owned by the caller."""
        event = services.events.create_event(organizer, event_data())

        assert event.status == EventStatus.DRAFT
        assert event.organizer_id == organizer.id
        assert event.registration_count == 0
        assert isinstance(event.kind, NormalKind)
        assert event.kind.registration_limit.value == 100

    def test_registration_limit_defaults_to_100(self, services, organizer):
        """Omitting registration_limit gives 100 seats."""
        data = event_data()
        data.pop("registration_limit")
        event = services.events.create_event(organizer, data)
        assert event.kind.registration_limit.value == 100

    def test_zero_registration_limit_is_kept(self, services, organizer, participant):
        """A declared limit of 0 is stored as 0 and admits nobody."""
        event = services.events.create_event(organizer, event_data(registration_limit=0))
        assert event.kind.registration_limit.value == 0

        services.events.transition_event_status(event.id, organizer, "published")
        with pytest.raises(CapacityReachedError):
            services.ledger.register(participant.id, event.id)
        assert models.Registration.objects.filter(event_id=event.id.value).count() == 0

    def test_duplicate_variants_are_invalid_input(self, services, organizer):
        """Listing the same size and color twice is rejected before anything is stored."""
        variants = [
            {"size": "M", "color": "Black", "stock": 1},
            {"size": "M", "color": "Black", "stock": 2},
        ]
        with pytest.raises(InvalidInputError) as exc_info:
            services.events.create_event(organizer, merchandise_data(variants=variants))
        assert exc_info.value.details["fields"] == {"variants": ["M/Black"]}
        assert not models.Event.objects.exists()

    def test_merchandise_event_stores_variants(self, services, organizer):
        """Merchandise drops keep their variants and purchase limit."""
        event = services.events.create_event(organizer, merchandise_data())

        assert isinstance(event.kind, MerchandiseKind)
        assert [(v.key.size, v.key.color, v.stock.value) for v in event.kind.variants] == [
            ("M", "Black", 5),
            ("L", "Black", 1),
        ]
        assert event.kind.purchase_limit == 3

    def test_participants_cannot_create_events(self, services, participant):
        """create_event raises ForbiddenError for participants."""
        with pytest.raises(ForbiddenError):
            services.events.create_event(participant, event_data())

    def test_name_and_type_are_required(self, services, organizer):
        """create_event raises InvalidInputError when name or type is missing."""
        with pytest.raises(InvalidInputError):
            services.events.create_event(organizer, {"name": "No type"})


@pytest.mark.django_db
class TestGetEvent:
    def test_invalid_id_raises_error(self, services):
        """get_event raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError):
            services.events.get_event("not-a-uuid")

    def test_missing_event_raises_not_found(self, services):
        """get_event raises EventNotFoundError when no event has the ID."""
        with pytest.raises(EventNotFoundError):
            services.events.get_event(str(uuid4()))


@pytest.mark.django_db
class TestUpdateEvent:
    def test_owner_edits_draft(self, services, organizer, make_event):
        """The owner can change a draft's fields."""
        event = make_event(publish=False)
        updated = services.events.update_event(
            event.id, organizer, {"name": "Renamed", "registration_limit": 3}
        )
        assert updated.name == "Renamed"
        assert updated.kind.registration_limit.value == 3

    def test_unknown_fields_are_ignored(self, services, organizer, make_event):
        """Fields outside the editable set are dropped silently."""
        event = make_event(publish=False)
        updated = services.events.update_event(
            event.id, organizer, {"registration_count": 50, "status": "published"}
        )
        assert updated.registration_count == 0
        assert updated.status == EventStatus.DRAFT

    def test_other_organizer_is_forbidden(self, services, make_event):
        """update_event raises ForbiddenError for someone else's event."""
        event = make_event(publish=False)
        stranger = Actor(id=uuid4(), role=Role.ORGANIZER)
        with pytest.raises(ForbiddenError):
            services.events.update_event(event.id, stranger, {"name": "Mine now"})

    def test_admin_may_edit_any_draft(self, services, admin, make_event):
        """Admins can edit drafts they do not own."""
        event = make_event(publish=False)
        assert services.events.update_event(event.id, admin, {"name": "Fixed"}).name == "Fixed"

    def test_published_event_is_not_editable(self, services, organizer, make_event):
        """update_event raises EventNotEditableError once published."""
        event = make_event()
        with pytest.raises(EventNotEditableError):
            services.events.update_event(event.id, organizer, {"name": "Too late"})

    def test_form_is_locked_once_registrations_exist(self, services, organizer, make_event):
        """update_event raises FormLockedError when the form changes after a registration."""
        event = make_event(publish=False)
        models.Event.objects.filter(pk=event.id.value).update(registration_count=1)

        with pytest.raises(FormLockedError):
            services.events.update_event(
                event.id,
                organizer,
                {"custom_form": [{"field_type": "text", "label": "Team", "required": True}]},
            )

    def test_duplicate_variants_rejected_on_update(self, services, organizer, make_merchandise):
        """Replacing variants with a repeated size and color keeps the old set."""
        event = make_merchandise(publish=False)
        with pytest.raises(InvalidInputError):
            services.events.update_event(
                event.id,
                organizer,
                {
                    "variants": [
                        {"size": "S", "color": "Red", "stock": 1},
                        {"size": "S", "color": "Red", "stock": 1},
                    ]
                },
            )
        assert models.MerchandiseVariant.objects.filter(event_id=event.id.value).count() == 2

    def test_replacing_variants(self, services, organizer, make_merchandise):
        """Updating variants replaces the whole set."""
        event = make_merchandise(publish=False)
        updated = services.events.update_event(
            event.id, organizer, {"variants": [{"size": "S", "color": "Red", "stock": 9}]}
        )
        assert [(v.key.size, v.stock.value) for v in updated.kind.variants] == [("S", 9)]


@pytest.mark.django_db
class TestDeleteEvent:
    def test_deletes_draft(self, services, organizer, make_event):
        """The owner can delete a draft."""
        event = make_event(publish=False)
        services.events.delete_event(event.id, organizer)
        assert not models.Event.objects.filter(pk=event.id.value).exists()

    def test_published_event_cannot_be_deleted(self, services, organizer, make_event):
        """delete_event raises EventNotDeletableError once published."""
        event = make_event()
        with pytest.raises(EventNotDeletableError):
            services.events.delete_event(event.id, organizer)

    def test_cascades_variants(self, services, organizer, make_merchandise):
        """Deleting a drop removes its variants."""
        event = make_merchandise(publish=False)
        services.events.delete_event(event.id, organizer)
        assert not models.MerchandiseVariant.objects.filter(event_id=event.id.value).exists()


@pytest.mark.django_db
class TestTransitionEventStatus:
    def test_publish_notifies_once(self, services, organizer, notifier, make_event):
        """Publishing emits exactly one event_published notification."""
        event = make_event(publish=False)
        published = services.events.transition_event_status(event.id, organizer, "published")

        assert published.status == EventStatus.PUBLISHED
        payloads = notifier.of_kind(NotificationKind.EVENT_PUBLISHED)
        assert len(payloads) == 1
        assert payloads[0]["event_id"] == str(event.id)
        assert payloads[0]["name"] == event.name

    def test_full_lifecycle(self, services, organizer, make_event):
        """draft -> published -> ongoing -> completed."""
        event = make_event()
        services.events.transition_event_status(event.id, organizer, "ongoing")
        done = services.events.transition_event_status(event.id, organizer, "completed")
        assert done.status == EventStatus.COMPLETED

    def test_draft_cannot_jump_to_ongoing(self, services, organizer, make_event):
        """draft -> ongoing raises InvalidTransitionError."""
        event = make_event(publish=False)
        with pytest.raises(InvalidTransitionError) as exc_info:
            services.events.transition_event_status(event.id, organizer, "ongoing")
        assert exc_info.value.source == "draft"
        assert exc_info.value.target == "ongoing"

    def test_terminal_status_has_no_exit(self, services, organizer, make_event):
        """A closed event cannot move again."""
        event = make_event()
        services.events.transition_event_status(event.id, organizer, "closed")
        with pytest.raises(InvalidTransitionError):
            services.events.transition_event_status(event.id, organizer, "published")

    def test_unknown_status_is_invalid_input(self, services, organizer, make_event):
        """An unknown target status raises InvalidInputError."""
        event = make_event()
        with pytest.raises(InvalidInputError):
            services.events.transition_event_status(event.id, organizer, "archived")

    def test_only_owner_or_admin(self, services, admin, make_event, participant):
        """A participant cannot change the status; an admin can."""
        event = make_event(publish=False)
        with pytest.raises(ForbiddenError):
            services.events.transition_event_status(event.id, participant, "published")
        published = services.events.transition_event_status(event.id, admin, "published")
        assert published.status == EventStatus.PUBLISHED

    def test_publish_requires_complete_details(self, services, organizer, make_event):
        """Publishing a bare draft lists the missing fields."""
        event = make_event(publish=False, description="", event_end_date=None)
        with pytest.raises(EventIncompleteError) as exc_info:
            services.events.transition_event_status(event.id, organizer, "published")
        assert set(exc_info.value.details["missing"]) == {"description", "event_end_date"}

    def test_publish_requires_ordered_schedule(self, services, organizer, make_event):
        """Deadline, start and end must be in order to publish."""
        now = timezone.now()
        event = make_event(
            publish=False,
            registration_deadline=now + timedelta(days=9),
            event_start_date=now + timedelta(days=7),
        )
        with pytest.raises(InvalidScheduleError):
            services.events.transition_event_status(event.id, organizer, "published")

    def test_merchandise_needs_variants_to_publish(self, services, organizer, make_merchandise):
        """A drop without variants cannot be published."""
        event = make_merchandise(publish=False, variants=[])
        with pytest.raises(EventIncompleteError):
            services.events.transition_event_status(event.id, organizer, "published")

    def test_stale_transition_loses(self, services, organizer, notifier, make_event, monkeypatch):
        """Two publishers racing: the conditional update admits only one."""
        event = make_event(publish=False)
        store = services.events._store
        stale = store.get_event(event.id)
        services.events.transition_event_status(event.id, organizer, "published")

        real_get = store.get_event
        calls = iter([stale])
        monkeypatch.setattr(store, "get_event", lambda event_id: next(calls, None) or real_get(event_id))

        with pytest.raises(InvalidTransitionError):
            services.events.transition_event_status(event.id, organizer, "published")
        assert len(notifier.of_kind(NotificationKind.EVENT_PUBLISHED)) == 1
