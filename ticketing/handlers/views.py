"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to the DRF exception handler (handlers/errors.py)
- Never contain business logic
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.container import Services, build_services
from ticketing.domain import VariantKey
from ticketing.handlers.authentication import IsParticipant, actor_of
from ticketing.handlers.serializers import (
    AttendanceInputSerializer,
    AttendanceRecordSerializer,
    EventInputSerializer,
    EventSerializer,
    RegisterSerializer,
    RegistrationSerializer,
    RestockSerializer,
    StatusTransitionSerializer,
    TeamCreateSerializer,
    TeamJoinSerializer,
    TeamSerializer,
    VariantSerializer,
)


class TicketingView(APIView):
    permission_classes = [IsAuthenticated]

    @property
    def services(self) -> Services:
        if not hasattr(self, "_services"):
            self._services = build_services()
        return self._services


class EventListView(TicketingView):
    """Handler for POST /api/events"""

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = self.services.events.create_event(actor_of(request), serializer.validated_data)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(TicketingView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        event = self.services.events.get_event(event_id)
        return Response(EventSerializer(event).data)

    def patch(self, request: Request, event_id: str) -> Response:
        serializer = EventInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        event = self.services.events.update_event(
            event_id, actor_of(request), serializer.validated_data
        )
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        self.services.events.delete_event(event_id, actor_of(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventStatusView(TicketingView):
    """Handler for POST /api/events/{event_id}/status"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = StatusTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = self.services.events.transition_event_status(
            event_id, actor_of(request), serializer.validated_data["status"]
        )
        return Response(EventSerializer(event).data)


class EventStockView(TicketingView):
    """Handler for GET/POST /api/events/{event_id}/stock"""

    def get(self, request: Request, event_id: str) -> Response:
        variants = self.services.inventory.available_stock(event_id)
        return Response({"variants": VariantSerializer(variants, many=True).data})

    def post(self, request: Request, event_id: str) -> Response:
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        stock = self.services.inventory.restock(
            event_id,
            VariantKey(size=data["size"], color=data["color"]),
            data["quantity"],
            actor_of(request),
        )
        return Response({"size": data["size"], "color": data["color"], "stock": stock})


class EventRegistrationsView(TicketingView):
    """Handler for GET /api/events/{event_id}/registrations"""

    def get(self, request: Request, event_id: str) -> Response:
        registrations = self.services.ledger.list_event_registrations(event_id, actor_of(request))
        return Response(
            {
                "count": len(registrations),
                "registrations": RegistrationSerializer(registrations, many=True).data,
            }
        )


class RegisterView(TicketingView):
    """Handler for POST /api/events/{event_id}/register"""

    permission_classes = [IsParticipant]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        variant = VariantKey.from_dict(data["variant"]) if data.get("variant") else None
        registration = self.services.ledger.register(
            actor_of(request).id,
            event_id,
            form_data=data.get("form_data"),
            variant=variant,
            quantity=data.get("quantity"),
        )
        return Response(
            {
                "message": "Registration successful! Check your email for ticket details.",
                "registration": RegistrationSerializer(registration).data,
            },
            status=status.HTTP_201_CREATED,
        )


class RegistrationStatusView(TicketingView):
    """Handler for GET /api/events/{event_id}/registration"""

    def get(self, request: Request, event_id: str) -> Response:
        registration = self.services.ledger.get_registration_status(
            actor_of(request).id, event_id
        )
        return Response(
            {
                "is_registered": registration is not None,
                "registration": RegistrationSerializer(registration).data if registration else None,
            }
        )


class MyRegistrationsView(TicketingView):
    """Handler for GET /api/registrations/mine"""

    def get(self, request: Request) -> Response:
        registrations = self.services.ledger.list_participant_registrations(actor_of(request).id)
        return Response(
            {
                "count": len(registrations),
                "registrations": RegistrationSerializer(registrations, many=True).data,
            }
        )


class CancelRegistrationView(TicketingView):
    """Handler for POST /api/registrations/{ticket_id}/cancel"""

    def post(self, request: Request, ticket_id: str) -> Response:
        registration = self.services.ledger.cancel_registration(ticket_id, actor_of(request))
        return Response(RegistrationSerializer(registration).data)


class AttendanceView(TicketingView):
    """Handler for POST /api/attendance"""

    def post(self, request: Request) -> Response:
        serializer = AttendanceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = self.services.ledger.mark_attendance(
            serializer.validated_data["ticket_id"], actor_of(request)
        )
        return Response(
            {
                "message": "Attendance marked successfully",
                "attendance": AttendanceRecordSerializer(record).data,
            }
        )


class TeamCreateView(TicketingView):
    """Handler for POST /api/events/{event_id}/teams"""

    permission_classes = [IsParticipant]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = self.services.teams.create_team(
            event_id,
            actor_of(request).id,
            serializer.validated_data["name"],
            serializer.validated_data["target_size"],
        )
        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)


class TeamJoinView(TicketingView):
    """Handler for POST /api/events/{event_id}/teams/join"""

    permission_classes = [IsParticipant]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TeamJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.services.teams.join_team(
            event_id, actor_of(request).id, serializer.validated_data["invite_code"]
        )
        return Response(
            {
                "team": TeamSerializer(result.team).data,
                "tickets": RegistrationSerializer(result.tickets, many=True).data,
            }
        )


class MyTeamView(TicketingView):
    """Handler for GET /api/events/{event_id}/team"""

    def get(self, request: Request, event_id: str) -> Response:
        team = self.services.teams.get_team(event_id, actor_of(request).id)
        return Response({"team": TeamSerializer(team).data if team else None})
