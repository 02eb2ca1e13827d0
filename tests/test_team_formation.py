"""Tests for TeamFormationEngine: team assembly and all-or-nothing ticket issuance."""

import pytest

from ticketing import models
from ticketing.domain import RegistrationStatus, TeamStatus
from ticketing.domain.errors import (
    AlreadyInTeamError,
    AlreadyMemberError,
    AlreadyRegisteredError,
    ErrorCode,
    InvalidSizeError,
    TeamFullError,
    TeamNotFoundError,
    TeamRegistrationFailedError,
    TeamsNotSupportedError,
)
from ticketing.services.notifications import NotificationKind


@pytest.mark.django_db
class TestCreateTeam:
    def test_leader_is_first_member(self, services, make_event, participant):
        """A new team is forming with its leader as the only member."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Rustaceans", 3)

        assert team.status == TeamStatus.FORMING
        assert team.member_ids == [participant.id]
        assert team.leader_id == participant.id
        assert len(team.invite_code.value) == 8

    @pytest.mark.parametrize("size", [1, 7])
    def test_size_out_of_range(self, services, make_event, participant, size):
        """Target sizes outside 2..6 raise InvalidSizeError."""
        event = make_event()
        with pytest.raises(InvalidSizeError):
            services.teams.create_team(event.id, participant.id, "Too odd", size)

    def test_leader_already_in_a_team(self, services, make_event, participant):
        """create_team raises AlreadyInTeamError for a second team."""
        event = make_event()
        services.teams.create_team(event.id, participant.id, "First", 2)
        with pytest.raises(AlreadyInTeamError):
            services.teams.create_team(event.id, participant.id, "Second", 2)

    def test_ticket_holder_cannot_lead_a_team(self, services, make_event, participant):
        """A participant who already holds a ticket cannot start a team for the same event."""
        event = make_event()
        services.ledger.register(participant.id, event.id)

        with pytest.raises(AlreadyRegisteredError):
            services.teams.create_team(event.id, participant.id, "Late", 2)
        assert not models.Team.objects.filter(event_id=event.id.value).exists()

    def test_cancelled_ticket_holder_may_lead(self, services, make_event, participant):
        """A cancelled ticket does not block leading a team."""
        event = make_event()
        registration = services.ledger.register(participant.id, event.id)
        services.ledger.cancel_registration(registration.ticket_id, participant)

        team = services.teams.create_team(event.id, participant.id, "Second try", 2)
        assert team.leader_id == participant.id

    def test_merchandise_events_have_no_teams(self, services, make_merchandise, participant):
        """create_team raises TeamsNotSupportedError for merchandise drops."""
        event = make_merchandise()
        with pytest.raises(TeamsNotSupportedError):
            services.teams.create_team(event.id, participant.id, "Shoppers", 2)


@pytest.mark.django_db
class TestJoinTeam:
    def test_join_below_target_keeps_forming(self, services, make_event, participant, make_participant):
        """Joining below the target adds a member and issues nothing."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Trio", 3)
        result = services.teams.join_team(event.id, make_participant().id, team.invite_code.value)

        assert result.team.status == TeamStatus.FORMING
        assert len(result.team.members) == 2
        assert result.tickets == ()

    def test_invite_code_is_case_insensitive(self, services, make_event, participant, make_participant):
        """Codes are matched after trimming and upper-casing."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Trio", 3)
        result = services.teams.join_team(
            event.id, make_participant().id, f"  {team.invite_code.value.lower()} "
        )
        assert len(result.team.members) == 2

    def test_completing_join_issues_every_ticket(
        self, services, notifier, make_event, participant, make_participant
    ):
        """targetSize=2: the second member completes the team and both get tickets."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        joiner = make_participant()

        result = services.teams.join_team(event.id, joiner.id, team.invite_code.value)

        assert result.team.status == TeamStatus.COMPLETED
        assert {t.participant_id for t in result.tickets} == {participant.id, joiner.id}
        assert all(t.team_id == team.id for t in result.tickets)
        assert all(t.status == RegistrationStatus.REGISTERED for t in result.tickets)
        stored = models.Event.objects.get(pk=event.id.value)
        assert stored.registration_count == 2
        assert models.Registration.objects.filter(team_id=team.id.value).count() == 2
        assert len(notifier.of_kind(NotificationKind.TICKET_CONFIRMED)) == 2

    def test_completed_team_is_full(self, services, make_event, participant, make_participant):
        """join_team raises TeamFullError once the team is complete."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        services.teams.join_team(event.id, make_participant().id, team.invite_code.value)

        with pytest.raises(TeamFullError):
            services.teams.join_team(event.id, make_participant().id, team.invite_code.value)

    def test_unknown_invite_code(self, services, make_event, participant):
        """join_team raises TeamNotFoundError for an unknown code."""
        event = make_event()
        with pytest.raises(TeamNotFoundError):
            services.teams.join_team(event.id, participant.id, "ZZZZZZZZ")

    def test_invite_code_is_scoped_to_event(self, services, make_event, participant, make_participant):
        """A code from another event is not found."""
        team = services.teams.create_team(make_event().id, participant.id, "Here", 2)
        with pytest.raises(TeamNotFoundError):
            services.teams.join_team(make_event().id, make_participant().id, team.invite_code.value)

    def test_member_cannot_join_twice(self, services, make_event, participant):
        """join_team raises AlreadyMemberError when the leader joins their own team."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Solo", 3)
        with pytest.raises(AlreadyMemberError):
            services.teams.join_team(event.id, participant.id, team.invite_code.value)

    def test_member_of_another_team(self, services, make_event, participant, make_participant):
        """One team per participant per event."""
        event = make_event()
        other_leader = make_participant()
        services.teams.create_team(event.id, participant.id, "Mine", 3)
        theirs = services.teams.create_team(event.id, other_leader.id, "Theirs", 3)

        with pytest.raises(AlreadyInTeamError):
            services.teams.join_team(event.id, participant.id, theirs.invite_code.value)

    def test_ticket_holder_cannot_join(self, services, make_event, participant, make_participant):
        """Joining with an active ticket fails and leaves the team as it was."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Trio", 3)
        joiner = make_participant()
        services.ledger.register(joiner.id, event.id)

        with pytest.raises(AlreadyRegisteredError):
            services.teams.join_team(event.id, joiner.id, team.invite_code.value)
        stored_team = models.Team.objects.get(pk=team.id.value)
        assert stored_team.members.count() == 1
        assert stored_team.status == TeamStatus.FORMING.value


@pytest.mark.django_db
class TestTeamBatchIssuance:
    """A completing join issues every ticket or none."""

    def test_member_registered_elsewhere_rolls_back_join(
        self, services, make_event, participant, make_participant
    ):
        """A member with a ticket fails the batch; the join is undone."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        services.ledger.register(participant.id, event.id)
        joiner = make_participant()

        with pytest.raises(TeamRegistrationFailedError) as exc_info:
            services.teams.join_team(event.id, joiner.id, team.invite_code.value)

        assert exc_info.value.failures == {str(participant.id): ErrorCode.ALREADY_REGISTERED.value}
        stored_team = models.Team.objects.get(pk=team.id.value)
        assert stored_team.status == TeamStatus.FORMING.value
        assert stored_team.members.count() == 1
        assert not models.Registration.objects.filter(participant_id=joiner.id).exists()
        assert models.Event.objects.get(pk=event.id.value).registration_count == 1

    def test_capacity_shortfall_rolls_back_every_ticket(
        self, services, make_event, participant, make_participant
    ):
        """Two seats needed, one left: no ticket is issued."""
        event = make_event(registration_limit=2)
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        services.ledger.register(make_participant().id, event.id)

        with pytest.raises(TeamRegistrationFailedError) as exc_info:
            services.teams.join_team(event.id, make_participant().id, team.invite_code.value)

        assert set(exc_info.value.failures.values()) == {ErrorCode.CAPACITY_REACHED.value}
        assert models.Registration.objects.filter(event_id=event.id.value).count() == 1
        assert models.Event.objects.get(pk=event.id.value).registration_count == 1

    def test_closed_event_blocks_completion(
        self, services, organizer, make_event, participant, make_participant
    ):
        """A closed event fails the completing join with EVENT_NOT_OPEN."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        services.events.transition_event_status(event.id, organizer, "closed")

        with pytest.raises(TeamRegistrationFailedError) as exc_info:
            services.teams.join_team(event.id, make_participant().id, team.invite_code.value)
        assert set(exc_info.value.failures.values()) == {ErrorCode.EVENT_NOT_OPEN.value}
        assert models.Team.objects.get(pk=team.id.value).status == TeamStatus.FORMING.value

    def test_failed_completion_can_be_retried(
        self, services, make_event, participant, make_participant
    ):
        """After the blocking ticket is cancelled the same join succeeds."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 2)
        registration = services.ledger.register(participant.id, event.id)
        joiner = make_participant()
        with pytest.raises(TeamRegistrationFailedError):
            services.teams.join_team(event.id, joiner.id, team.invite_code.value)

        services.ledger.cancel_registration(registration.ticket_id, participant)
        result = services.teams.join_team(event.id, joiner.id, team.invite_code.value)
        assert result.team.status == TeamStatus.COMPLETED
        assert len(result.tickets) == 2


@pytest.mark.django_db
class TestGetTeam:
    def test_returns_participants_team(self, services, make_event, participant, make_participant):
        """Any member can look up the team."""
        event = make_event()
        team = services.teams.create_team(event.id, participant.id, "Pair", 3)
        joiner = make_participant()
        services.teams.join_team(event.id, joiner.id, team.invite_code.value)

        found = services.teams.get_team(event.id, joiner.id)
        assert found.id == team.id
        assert found.member_ids == [participant.id, joiner.id]

    def test_none_without_team(self, services, make_event, participant):
        """Returns None when the participant has no team."""
        assert services.teams.get_team(make_event().id, participant.id) is None
