"""Django ORM implementation of the ticketing stores.

Counters are only ever changed with filtered ``update()`` calls on F()
expressions, so the condition and the write happen in one statement.
Inserts that can collide run inside a savepoint and translate the
IntegrityError into a store-level UniqueViolation.
"""

from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ticketing import models
from ticketing.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    EventSummary,
    EventType,
    FormField,
    FormFieldType,
    InviteCode,
    MemberStatus,
    MerchandiseKind,
    Money,
    NormalKind,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    Team,
    TeamId,
    TeamMember,
    TeamStatus,
    TicketId,
    Variant,
    VariantKey,
)
from ticketing.stores.interfaces import (
    DuplicateInviteCode,
    DuplicateMembership,
    DuplicateRegistration,
    DuplicateTicketId,
    EventStore,
    InventoryStore,
    RegistrationStore,
    TeamStore,
)


def _to_form_field(data: dict[str, Any]) -> FormField:
    return FormField(
        field_type=FormFieldType(data.get("field_type", FormFieldType.TEXT.value)),
        label=data.get("label", ""),
        required=bool(data.get("required", False)),
        options=tuple(data.get("options") or ()),
    )


def _to_event(obj: models.Event) -> Event:
    if obj.type == EventType.MERCHANDISE.value:
        kind = MerchandiseKind(
            variants=tuple(
                Variant(key=VariantKey(size=v.size, color=v.color), stock=Capacity(v.stock))
                for v in obj.variants.all()
            ),
            purchase_limit=obj.purchase_limit,
        )
    else:
        kind = NormalKind(registration_limit=Capacity(obj.registration_limit))

    return Event(
        id=EventId(obj.id),
        organizer_id=obj.organizer_id,
        name=obj.name,
        kind=kind,
        status=EventStatus(obj.status),
        description=obj.description,
        eligibility=obj.eligibility,
        registration_deadline=obj.registration_deadline,
        event_start_date=obj.event_start_date,
        event_end_date=obj.event_end_date,
        registration_fee=Money(Decimal(obj.registration_fee)),
        registration_count=obj.registration_count,
        revenue=Money(Decimal(obj.revenue)),
        custom_form=tuple(_to_form_field(f) for f in obj.custom_form or ()),
        tags=tuple(obj.tags or ()),
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


def _to_summary(obj: models.Event) -> EventSummary:
    return EventSummary(
        id=EventId(obj.id),
        name=obj.name,
        type=EventType(obj.type),
        event_start_date=obj.event_start_date,
        event_end_date=obj.event_end_date,
        registration_fee=Money(Decimal(obj.registration_fee)),
    )


def _to_registration(obj: models.Registration, with_event: bool = False) -> Registration:
    variant = None
    if obj.variant_size is not None:
        variant = VariantKey(size=obj.variant_size, color=obj.variant_color or "")

    return Registration(
        id=obj.id,
        ticket_id=TicketId(obj.ticket_id),
        participant_id=obj.participant_id,
        event_id=EventId(obj.event_id),
        status=RegistrationStatus(obj.status),
        payment_status=PaymentStatus(obj.payment_status),
        registered_at=obj.registered_at,
        form_data=dict(obj.form_data or {}),
        attended=obj.attended,
        attendance_timestamp=obj.attendance_timestamp,
        variant=variant,
        quantity=obj.quantity,
        team_id=TeamId(obj.team_id) if obj.team_id else None,
        event=_to_summary(obj.event) if with_event else None,
    )


def _to_team(obj: models.Team) -> Team:
    return Team(
        id=TeamId(obj.id),
        event_id=EventId(obj.event_id),
        name=obj.name,
        target_size=obj.target_size,
        leader_id=obj.leader_id,
        invite_code=InviteCode(obj.invite_code),
        status=TeamStatus(obj.status),
        members=tuple(
            TeamMember(
                participant_id=m.participant_id,
                status=MemberStatus(m.status),
                joined_at=m.joined_at,
            )
            for m in obj.members.all()
        ),
        created_at=obj.created_at,
    )


class _DjangoTransactions:
    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()


class DjangoEventStore(_DjangoTransactions, EventStore):
    """Relational event store using Django ORM."""

    def get_event(self, event_id: EventId) -> Event | None:
        obj = (
            models.Event.objects.prefetch_related("variants")
            .filter(pk=event_id.value)
            .first()
        )
        return _to_event(obj) if obj else None

    def create_event(self, event: Event) -> Event:
        fields: dict[str, Any] = {
            "id": event.id.value,
            "organizer_id": event.organizer_id,
            "name": event.name,
            "description": event.description,
            "eligibility": event.eligibility,
            "type": event.type.value,
            "status": event.status.value,
            "registration_deadline": event.registration_deadline,
            "event_start_date": event.event_start_date,
            "event_end_date": event.event_end_date,
            "registration_fee": event.registration_fee.amount,
            "tags": list(event.tags),
            "custom_form": [_form_field_to_dict(f) for f in event.custom_form],
        }
        variants: tuple[Variant, ...] = ()
        match event.kind:
            case NormalKind(registration_limit=limit):
                fields["registration_limit"] = limit.value
            case MerchandiseKind(variants=declared, purchase_limit=purchase_limit):
                fields["purchase_limit"] = purchase_limit
                variants = declared

        with transaction.atomic():
            obj = models.Event.objects.create(**fields)
            _replace_variants(obj.pk, [v.key.to_dict() | {"stock": v.stock.value} for v in variants])

        return self.get_event(event.id)

    def update_event(self, event_id: EventId, changes: dict[str, Any]) -> Event:
        changes = dict(changes)
        variants = changes.pop("variants", None)

        with transaction.atomic():
            models.Event.objects.filter(pk=event_id.value).update(
                **changes, updated_at=timezone.now()
            )
            if variants is not None:
                _replace_variants(event_id.value, variants)

        return self.get_event(event_id)

    def delete_event(self, event_id: EventId) -> None:
        with transaction.atomic():
            models.Event.objects.filter(pk=event_id.value).delete()

    def transition_status(
        self, event_id: EventId, source: EventStatus, target: EventStatus
    ) -> bool:
        updated = models.Event.objects.filter(pk=event_id.value, status=source.value).update(
            status=target.value, updated_at=timezone.now()
        )
        return updated == 1

    def increment_registrations(
        self, event_id: EventId, count: int, revenue: Money, enforce_limit: bool
    ) -> bool:
        queryset = models.Event.objects.filter(pk=event_id.value)
        if enforce_limit:
            queryset = queryset.filter(registration_count__lte=F("registration_limit") - count)
        updated = queryset.update(
            registration_count=F("registration_count") + count,
            revenue=F("revenue") + revenue.amount,
            updated_at=timezone.now(),
        )
        return updated == 1


def _form_field_to_dict(field: FormField) -> dict[str, Any]:
    return {
        "field_type": field.field_type.value,
        "label": field.label,
        "required": field.required,
        "options": list(field.options),
    }


def _replace_variants(event_pk: UUID, variants: list[dict[str, Any]]) -> None:
    models.MerchandiseVariant.objects.filter(event_id=event_pk).delete()
    models.MerchandiseVariant.objects.bulk_create(
        models.MerchandiseVariant(
            event_id=event_pk,
            size=variant["size"],
            color=variant["color"],
            stock=variant.get("stock", 0),
            position=position,
        )
        for position, variant in enumerate(variants)
    )


class DjangoInventoryStore(_DjangoTransactions, InventoryStore):
    """Per-variant stock counters using Django ORM."""

    def _variant(self, event_id: EventId, key: VariantKey):
        return models.MerchandiseVariant.objects.filter(
            event_id=event_id.value, size=key.size, color=key.color
        )

    def reserve(self, event_id: EventId, key: VariantKey, quantity: int) -> bool:
        updated = self._variant(event_id, key).filter(stock__gte=quantity).update(
            stock=F("stock") - quantity
        )
        return updated == 1

    def restock(self, event_id: EventId, key: VariantKey, quantity: int) -> bool:
        return self._variant(event_id, key).update(stock=F("stock") + quantity) == 1

    def get_stock(self, event_id: EventId, key: VariantKey) -> int | None:
        return self._variant(event_id, key).values_list("stock", flat=True).first()


class DjangoRegistrationStore(_DjangoTransactions, RegistrationStore):
    """Registration store using Django ORM."""

    def insert(self, registration: Registration) -> Registration:
        ticket_id = str(registration.ticket_id)
        try:
            with transaction.atomic():
                obj = models.Registration.objects.create(
                    id=registration.id,
                    event_id=registration.event_id.value,
                    participant_id=registration.participant_id,
                    ticket_id=ticket_id,
                    status=registration.status.value,
                    payment_status=registration.payment_status.value,
                    form_data=registration.form_data,
                    variant_size=registration.variant.size if registration.variant else None,
                    variant_color=registration.variant.color if registration.variant else None,
                    quantity=registration.quantity,
                    team_id=registration.team_id.value if registration.team_id else None,
                )
        except IntegrityError as exc:
            if models.Registration.objects.filter(ticket_id=ticket_id).exists():
                raise DuplicateTicketId(ticket_id) from exc
            raise DuplicateRegistration(str(registration.participant_id)) from exc
        return _to_registration(obj)

    def get_by_ticket_id(self, ticket_id: TicketId) -> Registration | None:
        obj = (
            models.Registration.objects.select_related("event")
            .filter(ticket_id=str(ticket_id))
            .first()
        )
        return _to_registration(obj, with_event=True) if obj else None

    def get_active(self, participant_id: UUID, event_id: EventId) -> Registration | None:
        obj = (
            models.Registration.objects.select_related("event")
            .filter(participant_id=participant_id, event_id=event_id.value)
            .exclude(status=RegistrationStatus.CANCELLED.value)
            .first()
        )
        return _to_registration(obj, with_event=True) if obj else None

    def mark_attended(self, ticket_id: TicketId, at: datetime) -> bool:
        updated = (
            models.Registration.objects.filter(ticket_id=str(ticket_id), attended=False)
            .exclude(status=RegistrationStatus.CANCELLED.value)
            .update(attended=True, attendance_timestamp=at)
        )
        return updated == 1

    def cancel(self, ticket_id: TicketId) -> bool:
        updated = (
            models.Registration.objects.filter(ticket_id=str(ticket_id))
            .exclude(status=RegistrationStatus.CANCELLED.value)
            .update(status=RegistrationStatus.CANCELLED.value)
        )
        return updated == 1

    def list_for_participant(self, participant_id: UUID) -> list[Registration]:
        queryset = (
            models.Registration.objects.select_related("event")
            .filter(participant_id=participant_id)
            .order_by("-registered_at")
        )
        return [_to_registration(obj, with_event=True) for obj in queryset]

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        queryset = models.Registration.objects.filter(event_id=event_id.value).order_by(
            "registered_at"
        )
        return [_to_registration(obj) for obj in queryset]


class DjangoTeamStore(_DjangoTransactions, TeamStore):
    """Team store using Django ORM."""

    def create_team(self, team: Team) -> Team:
        try:
            with transaction.atomic():
                models.Team.objects.create(
                    id=team.id.value,
                    event_id=team.event_id.value,
                    name=team.name,
                    target_size=team.target_size,
                    leader_id=team.leader_id,
                    invite_code=str(team.invite_code),
                    status=team.status.value,
                )
                for member in team.members:
                    models.TeamMember.objects.create(
                        team_id=team.id.value,
                        event_id=team.event_id.value,
                        participant_id=member.participant_id,
                        status=member.status.value,
                    )
        except IntegrityError as exc:
            if models.Team.objects.filter(invite_code=str(team.invite_code)).exists():
                raise DuplicateInviteCode(str(team.invite_code)) from exc
            raise DuplicateMembership(str(team.leader_id)) from exc
        return self.get_team(team.id)

    def get_team(self, team_id: TeamId) -> Team | None:
        obj = models.Team.objects.prefetch_related("members").filter(pk=team_id.value).first()
        return _to_team(obj) if obj else None

    def lock_team(self, event_id: EventId, invite_code: InviteCode) -> Team | None:
        obj = (
            models.Team.objects.select_for_update()
            .filter(event_id=event_id.value, invite_code=str(invite_code))
            .first()
        )
        return _to_team(obj) if obj else None

    def find_team_for_participant(self, event_id: EventId, participant_id: UUID) -> Team | None:
        obj = (
            models.Team.objects.prefetch_related("members")
            .filter(event_id=event_id.value, members__participant_id=participant_id)
            .first()
        )
        return _to_team(obj) if obj else None

    def add_member(self, team_id: TeamId, participant_id: UUID) -> Team:
        event_pk = models.Team.objects.values_list("event_id", flat=True).get(pk=team_id.value)
        try:
            with transaction.atomic():
                models.TeamMember.objects.create(
                    team_id=team_id.value,
                    event_id=event_pk,
                    participant_id=participant_id,
                    status=MemberStatus.ACCEPTED.value,
                )
        except IntegrityError as exc:
            raise DuplicateMembership(str(participant_id)) from exc
        return self.get_team(team_id)

    def complete_team(self, team_id: TeamId) -> bool:
        updated = models.Team.objects.filter(
            pk=team_id.value, status=TeamStatus.FORMING.value
        ).update(status=TeamStatus.COMPLETED.value)
        return updated == 1
