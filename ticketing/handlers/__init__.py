from ticketing.handlers.views import (
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

__all__ = [
    "AttendanceView",
    "CancelRegistrationView",
    "EventDetailView",
    "EventListView",
    "EventRegistrationsView",
    "EventStatusView",
    "EventStockView",
    "MyRegistrationsView",
    "MyTeamView",
    "RegisterView",
    "RegistrationStatusView",
    "TeamCreateView",
    "TeamJoinView",
]
