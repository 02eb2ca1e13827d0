"""Pytest configuration and shared fixtures."""

from datetime import timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from ticketing.container import Services, build_services
from ticketing.domain import Actor, Event, Role
from ticketing.services.notifications import NotificationKind, Notifier


class RecordingNotifier(Notifier):
    """Keeps notifications in memory instead of queueing them."""

    def __init__(self) -> None:
        self.sent: list[tuple[NotificationKind, dict[str, Any]]] = []

    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        self.sent.append((kind, payload))

    def of_kind(self, kind: NotificationKind) -> list[dict[str, Any]]:
        return [payload for sent_kind, payload in self.sent if sent_kind == kind]


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def services(notifier: RecordingNotifier) -> Services:
    return build_services(notifier=notifier)


@pytest.fixture
def organizer() -> Actor:
    return Actor(id=uuid4(), role=Role.ORGANIZER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id=uuid4(), role=Role.ADMIN)


@pytest.fixture
def make_participant():
    def _make() -> Actor:
        return Actor(id=uuid4(), role=Role.PARTICIPANT)

    return _make


@pytest.fixture
def participant(make_participant) -> Actor:
    return make_participant()


def event_data(**overrides: Any) -> dict[str, Any]:
    """Complete, publishable input for a normal event."""
    now = timezone.now()
    data: dict[str, Any] = {
        "name": "Hack Night",
        "type": "normal",
        "description": "An evening of building things.",
        "eligibility": "Everyone",
        "registration_deadline": now + timedelta(days=5),
        "event_start_date": now + timedelta(days=7),
        "event_end_date": now + timedelta(days=8),
        "registration_limit": 100,
        "registration_fee": Decimal("10.00"),
    }
    data.update(overrides)
    return data


def merchandise_data(**overrides: Any) -> dict[str, Any]:
    """Complete, publishable input for a merchandise drop."""
    data = event_data(
        name="Club Hoodie",
        type="merchandise",
        registration_fee=Decimal("25.00"),
        variants=[
            {"size": "M", "color": "Black", "stock": 5},
            {"size": "L", "color": "Black", "stock": 1},
        ],
        purchase_limit=3,
    )
    data.pop("registration_limit")
    data.update(overrides)
    return data


@pytest.fixture
def make_event(services: Services, organizer: Actor):
    """Create an event through the registry, published unless told otherwise."""

    def _make(publish: bool = True, **overrides: Any) -> Event:
        event = services.events.create_event(organizer, event_data(**overrides))
        if publish:
            event = services.events.transition_event_status(event.id, organizer, "published")
        return event

    return _make


@pytest.fixture
def make_merchandise(services: Services, organizer: Actor):
    def _make(publish: bool = True, **overrides: Any) -> Event:
        event = services.events.create_event(organizer, merchandise_data(**overrides))
        if publish:
            event = services.events.transition_event_status(event.id, organizer, "published")
        return event

    return _make


@pytest.fixture
def celery_eager(settings):
    settings.CELERY_BROKER_URL = "memory://"
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    from config.celery import app

    previous = {
        key: app.conf[key]
        for key in ("broker_url", "task_always_eager", "task_eager_propagates")
    }
    app.conf.update(broker_url="memory://", task_always_eager=True, task_eager_propagates=True)
    yield
    app.conf.update(previous)


def auth_headers(actor: Actor) -> dict[str, str]:
    return {"HTTP_X_ACTOR_ID": str(actor.id), "HTTP_X_ACTOR_ROLE": actor.role.value}
