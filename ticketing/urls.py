from django.urls import path

from ticketing.handlers import (
    AttendanceView,
    CancelRegistrationView,
    EventDetailView,
    EventListView,
    EventRegistrationsView,
    EventStatusView,
    EventStockView,
    MyRegistrationsView,
    MyTeamView,
    RegisterView,
    RegistrationStatusView,
    TeamCreateView,
    TeamJoinView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/status", EventStatusView.as_view(), name="event-status"),
    path("events/<str:event_id>/stock", EventStockView.as_view(), name="event-stock"),
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationsView.as_view(),
        name="event-registrations",
    ),
    path("events/<str:event_id>/register", RegisterView.as_view(), name="event-register"),
    path(
        "events/<str:event_id>/registration",
        RegistrationStatusView.as_view(),
        name="registration-status",
    ),
    path("events/<str:event_id>/teams", TeamCreateView.as_view(), name="team-create"),
    path("events/<str:event_id>/teams/join", TeamJoinView.as_view(), name="team-join"),
    path("events/<str:event_id>/team", MyTeamView.as_view(), name="my-team"),
    path("registrations/mine", MyRegistrationsView.as_view(), name="my-registrations"),
    path(
        "registrations/<str:ticket_id>/cancel",
        CancelRegistrationView.as_view(),
        name="registration-cancel",
    ),
    path("attendance", AttendanceView.as_view(), name="attendance"),
]
