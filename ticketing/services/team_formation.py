"""Team formation engine - group assembly ending in batch ticket issuance."""

from uuid import UUID, uuid4

import structlog

from ticketing.domain import (
    EventId,
    InviteCode,
    MemberStatus,
    MerchandiseKind,
    Team,
    TeamId,
    TeamJoinResult,
    TeamMember,
    TeamStatus,
)
from ticketing.domain.errors import (
    AlreadyInTeamError,
    AlreadyRegisteredError,
    AlreadyMemberError,
    EventNotFoundError,
    InvalidSizeError,
    TeamFullError,
    TeamNotFoundError,
    TeamsNotSupportedError,
)
from ticketing.services.common import Clock, parse_event_id, utcnow
from ticketing.services.registration_ledger import RegistrationLedger
from ticketing.stores.interfaces import (
    DuplicateInviteCode,
    DuplicateMembership,
    EventStore,
    TeamStore,
)

logger = structlog.get_logger(__name__)

MIN_TEAM_SIZE = 2
MAX_TEAM_SIZE = 6
INVITE_CODE_ATTEMPTS = 3


class TeamFormationEngine:
    """Service for creating and joining teams.

    A team moves from forming to completed exactly once, when the join that
    fills the last seat commits. That join also issues every member's ticket
    through the ledger; if any member cannot be registered the join is rolled
    back as a whole and the team keeps forming.
    """

    def __init__(
        self,
        teams: TeamStore,
        events: EventStore,
        ledger: RegistrationLedger,
        clock: Clock = utcnow,
    ) -> None:
        self._teams = teams
        self._events = events
        self._ledger = ledger
        self._clock = clock

    def create_team(
        self, event_id: str | EventId, leader_id: UUID, name: str, target_size: int
    ) -> Team:
        """Create a forming team with the leader as its first member.

        Raises:
            InvalidSizeError: If target_size is outside 2..6.
            EventNotFoundError: If the event does not exist.
            TeamsNotSupportedError: If the event sells merchandise.
            AlreadyInTeamError: If the leader already belongs to a team for the event.
            AlreadyRegisteredError: If the leader already holds a ticket for the event.
        """
        if (
            not isinstance(target_size, int)
            or isinstance(target_size, bool)
            or not MIN_TEAM_SIZE <= target_size <= MAX_TEAM_SIZE
        ):
            raise InvalidSizeError(MIN_TEAM_SIZE, MAX_TEAM_SIZE)

        parsed = parse_event_id(event_id)
        event = self._events.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(parsed))
        if isinstance(event.kind, MerchandiseKind):
            raise TeamsNotSupportedError()
        if self._teams.find_team_for_participant(parsed, leader_id) is not None:
            raise AlreadyInTeamError()
        if self._ledger.get_registration_status(leader_id, parsed) is not None:
            raise AlreadyRegisteredError(str(leader_id))

        attempt = 1
        while True:
            team = Team(
                id=TeamId(uuid4()),
                event_id=parsed,
                name=name,
                target_size=target_size,
                leader_id=leader_id,
                invite_code=InviteCode.generate(),
                status=TeamStatus.FORMING,
                members=(
                    TeamMember(
                        participant_id=leader_id,
                        status=MemberStatus.ACCEPTED,
                        joined_at=self._clock(),
                    ),
                ),
            )
            try:
                created = self._teams.create_team(team)
                break
            except DuplicateMembership:
                raise AlreadyInTeamError() from None
            except DuplicateInviteCode:
                if attempt >= INVITE_CODE_ATTEMPTS:
                    raise
                attempt += 1

        logger.info(
            "team_created",
            team_id=str(created.id),
            event_id=str(parsed),
            leader_id=str(leader_id),
            target_size=target_size,
        )
        return created

    def join_team(
        self, event_id: str | EventId, participant_id: UUID, invite_code: str
    ) -> TeamJoinResult:
        """Add a participant to a forming team; complete it when it is full.

        Raises:
            TeamNotFoundError: If no team of the event has this invite code.
            TeamFullError: If the team is already completed.
            AlreadyMemberError: If the participant is already in this team.
            AlreadyInTeamError: If the participant is in another team for the event.
            AlreadyRegisteredError: If the participant already holds a ticket for the event.
            TeamRegistrationFailedError: If the completing join could not issue
                a ticket for every member; nothing is persisted.
        """
        parsed = parse_event_id(event_id)
        if not invite_code or not str(invite_code).strip():
            raise TeamNotFoundError()
        code = InviteCode(str(invite_code).strip().upper())

        with self._teams.atomic():
            team = self._teams.lock_team(parsed, code)
            if team is None:
                raise TeamNotFoundError()
            if team.status == TeamStatus.COMPLETED:
                raise TeamFullError()
            if team.has_member(participant_id):
                raise AlreadyMemberError()
            if self._teams.find_team_for_participant(parsed, participant_id) is not None:
                raise AlreadyInTeamError()
            if self._ledger.get_registration_status(participant_id, parsed) is not None:
                raise AlreadyRegisteredError(str(participant_id))

            try:
                team = self._teams.add_member(team.id, participant_id)
            except DuplicateMembership:
                raise AlreadyInTeamError() from None

            if len(team.members) < team.target_size:
                logger.info(
                    "team_member_joined",
                    team_id=str(team.id),
                    participant_id=str(participant_id),
                    members=len(team.members),
                    target_size=team.target_size,
                )
                return TeamJoinResult(team=team)

            if not self._teams.complete_team(team.id):
                raise TeamFullError()
            tickets = self._ledger.register_team(parsed, team.id, team.member_ids)
            team = self._teams.get_team(team.id)

        logger.info(
            "team_completed",
            team_id=str(team.id),
            event_id=str(parsed),
            members=len(team.members),
        )
        return TeamJoinResult(team=team, tickets=tuple(tickets))

    def get_team(self, event_id: str | EventId, participant_id: UUID) -> Team | None:
        """Return the participant's team for the event, or None."""
        return self._teams.find_team_for_participant(parse_event_id(event_id), participant_id)
