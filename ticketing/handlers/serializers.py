"""Serializers for request validation and for rendering domain models."""

from rest_framework import serializers

from ticketing.domain import (
    EventType,
    FormFieldType,
    MerchandiseKind,
    NormalKind,
)

# Input


class VariantInputSerializer(serializers.Serializer):
    size = serializers.CharField(max_length=50)
    color = serializers.CharField(max_length=50)
    stock = serializers.IntegerField(min_value=0, default=0)


class FormFieldInputSerializer(serializers.Serializer):
    field_type = serializers.ChoiceField(choices=[t.value for t in FormFieldType])
    label = serializers.CharField(max_length=255)
    required = serializers.BooleanField(default=False)
    options = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class EventInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=[t.value for t in EventType])
    description = serializers.CharField(required=False, allow_blank=True)
    eligibility = serializers.CharField(required=False, allow_blank=True, max_length=255)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True)
    event_start_date = serializers.DateTimeField(required=False, allow_null=True)
    event_end_date = serializers.DateTimeField(required=False, allow_null=True)
    registration_limit = serializers.IntegerField(min_value=0, required=False)
    registration_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    purchase_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    custom_form = FormFieldInputSerializer(many=True, required=False)
    variants = VariantInputSerializer(many=True, required=False)


class StatusTransitionSerializer(serializers.Serializer):
    status = serializers.CharField()


class VariantSelectionSerializer(serializers.Serializer):
    size = serializers.CharField(max_length=50)
    color = serializers.CharField(max_length=50)


class RegisterSerializer(serializers.Serializer):
    form_data = serializers.DictField(required=False, default=dict)
    variant = VariantSelectionSerializer(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class RestockSerializer(VariantSelectionSerializer):
    quantity = serializers.IntegerField(min_value=1)


class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    target_size = serializers.IntegerField()


class TeamJoinSerializer(serializers.Serializer):
    invite_code = serializers.CharField(max_length=16)


class AttendanceInputSerializer(serializers.Serializer):
    ticket_id = serializers.CharField(max_length=64)


# Output


class VariantSerializer(serializers.Serializer):
    size = serializers.CharField(source="key.size")
    color = serializers.CharField(source="key.color")
    stock = serializers.IntegerField(source="stock.value")


class FormFieldSerializer(serializers.Serializer):
    field_type = serializers.CharField()
    label = serializers.CharField()
    required = serializers.BooleanField()
    options = serializers.ListField(child=serializers.CharField())


class EventSerializer(serializers.Serializer):
    """Serializer for the Event domain model."""

    id = serializers.UUIDField(source="id.value")
    organizer_id = serializers.UUIDField()
    name = serializers.CharField()
    description = serializers.CharField()
    eligibility = serializers.CharField()
    type = serializers.CharField()
    status = serializers.CharField()
    registration_deadline = serializers.DateTimeField()
    event_start_date = serializers.DateTimeField()
    event_end_date = serializers.DateTimeField()
    registration_fee = serializers.DecimalField(
        source="registration_fee.amount", max_digits=10, decimal_places=2
    )
    registration_count = serializers.IntegerField()
    revenue = serializers.DecimalField(source="revenue.amount", max_digits=12, decimal_places=2)
    registration_limit = serializers.SerializerMethodField()
    purchase_limit = serializers.SerializerMethodField()
    variants = serializers.SerializerMethodField()
    custom_form = FormFieldSerializer(many=True)
    tags = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_registration_limit(self, event) -> int | None:
        if isinstance(event.kind, NormalKind):
            return event.kind.registration_limit.value
        return None

    def get_purchase_limit(self, event) -> int | None:
        if isinstance(event.kind, MerchandiseKind):
            return event.kind.purchase_limit
        return None

    def get_variants(self, event) -> list[dict]:
        if isinstance(event.kind, MerchandiseKind):
            return VariantSerializer(event.kind.variants, many=True).data
        return []


class EventSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    type = serializers.CharField()
    event_start_date = serializers.DateTimeField()
    event_end_date = serializers.DateTimeField()
    registration_fee = serializers.DecimalField(
        source="registration_fee.amount", max_digits=10, decimal_places=2
    )


class RegistrationSerializer(serializers.Serializer):
    """Serializer for the Registration domain model."""

    id = serializers.UUIDField()
    ticket_id = serializers.CharField(source="ticket_id.value")
    participant_id = serializers.UUIDField()
    event_id = serializers.UUIDField(source="event_id.value")
    status = serializers.CharField()
    payment_status = serializers.CharField()
    form_data = serializers.DictField()
    attended = serializers.BooleanField()
    attendance_timestamp = serializers.DateTimeField()
    variant = serializers.SerializerMethodField()
    quantity = serializers.IntegerField()
    team_id = serializers.SerializerMethodField()
    registered_at = serializers.DateTimeField()
    event = EventSummarySerializer(allow_null=True)

    def get_variant(self, registration) -> dict | None:
        return registration.variant.to_dict() if registration.variant else None

    def get_team_id(self, registration) -> str | None:
        return str(registration.team_id) if registration.team_id else None


class AttendanceRecordSerializer(serializers.Serializer):
    ticket_id = serializers.CharField(source="ticket_id.value")
    participant_id = serializers.UUIDField()
    event_id = serializers.UUIDField(source="event_id.value")
    event_name = serializers.CharField()
    attendance_time = serializers.DateTimeField()


class TeamMemberSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()
    status = serializers.CharField()
    joined_at = serializers.DateTimeField()


class TeamSerializer(serializers.Serializer):
    """Serializer for the Team domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    target_size = serializers.IntegerField()
    leader_id = serializers.UUIDField()
    invite_code = serializers.CharField(source="invite_code.value")
    status = serializers.CharField()
    members = TeamMemberSerializer(many=True)
    created_at = serializers.DateTimeField()
