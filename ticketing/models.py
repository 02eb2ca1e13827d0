"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
The constraints declared here back the conditional updates in the stores:
a registration insert that violates ``unique_active_registration`` or a
membership insert that violates ``one_team_per_event`` is rejected by the
database, not by a prior read.
"""

import uuid
from enum import StrEnum

from django.db import models
from django.db.models import F, Q

from ticketing.domain import (
    EventStatus,
    EventType,
    MemberStatus,
    PaymentStatus,
    RegistrationStatus,
    TeamStatus,
)

DEFAULT_REGISTRATION_LIMIT = 100


def _choices(enum: type[StrEnum]) -> list[tuple[str, str]]:
    return [(member.value, member.value.capitalize()) for member in enum]


class Event(models.Model):
    """Persistence model for events and merchandise drops."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    eligibility = models.CharField(max_length=255, blank=True, default="")
    type = models.CharField(max_length=20, choices=_choices(EventType))
    status = models.CharField(
        max_length=20, choices=_choices(EventStatus), default=EventStatus.DRAFT.value
    )
    registration_deadline = models.DateTimeField(null=True, blank=True)
    event_start_date = models.DateTimeField(null=True, blank=True)
    event_end_date = models.DateTimeField(null=True, blank=True)
    registration_limit = models.PositiveIntegerField(default=DEFAULT_REGISTRATION_LIMIT)
    purchase_limit = models.PositiveIntegerField(null=True, blank=True)
    registration_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    registration_count = models.PositiveIntegerField(default=0)
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tags = models.JSONField(default=list, blank=True)
    custom_form = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="ticketing_e_created_3c1e8b_idx"),
            models.Index(fields=["status"], name="ticketing_e_status_6f0a2d_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(type=EventType.MERCHANDISE.value)
                | Q(registration_count__lte=F("registration_limit")),
                name="registration_count_within_limit",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class MerchandiseVariant(models.Model):
    """Persistence model for one size/color variant and its stock."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="variants")
    size = models.CharField(max_length=50)
    color = models.CharField(max_length=50)
    stock = models.PositiveIntegerField(default=0)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "size", "color"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "size", "color"], name="unique_variant_per_event"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event.name} - {self.size}/{self.color}"


class Team(models.Model):
    """Persistence model for teams."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=255)
    target_size = models.PositiveSmallIntegerField()
    leader_id = models.UUIDField()
    invite_code = models.CharField(max_length=16, unique=True)
    status = models.CharField(
        max_length=20, choices=_choices(TeamStatus), default=TeamStatus.FORMING.value
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["event", "invite_code"], name="ticketing_t_event_i_9b47c1_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(target_size__gte=2) & Q(target_size__lte=6),
                name="team_size_in_range",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class TeamMember(models.Model):
    """Persistence model for team membership."""

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    # Denormalized from team.event so the database can enforce one team per event.
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="team_members")
    participant_id = models.UUIDField()
    status = models.CharField(
        max_length=20, choices=_choices(MemberStatus), default=MemberStatus.ACCEPTED.value
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "participant_id"], name="one_team_per_event"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.team.name} - {self.participant_id}"


class Registration(models.Model):
    """Persistence model for registrations (tickets)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    participant_id = models.UUIDField(db_index=True)
    ticket_id = models.CharField(max_length=64, unique=True)
    status = models.CharField(
        max_length=20,
        choices=_choices(RegistrationStatus),
        default=RegistrationStatus.REGISTERED.value,
    )
    payment_status = models.CharField(
        max_length=20, choices=_choices(PaymentStatus), default=PaymentStatus.PAID.value
    )
    form_data = models.JSONField(default=dict, blank=True)
    attended = models.BooleanField(default=False)
    attendance_timestamp = models.DateTimeField(null=True, blank=True)
    variant_size = models.CharField(max_length=50, null=True, blank=True)
    variant_color = models.CharField(max_length=50, null=True, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    team = models.ForeignKey(
        Team, on_delete=models.CASCADE, null=True, blank=True, related_name="registrations"
    )
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["event", "registered_at"], name="ticketing_r_event_i_4d2a7e_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["participant_id", "event"],
                condition=~Q(status=RegistrationStatus.CANCELLED.value),
                name="unique_active_registration",
            ),
        ]

    def __str__(self) -> str:
        return self.ticket_id
