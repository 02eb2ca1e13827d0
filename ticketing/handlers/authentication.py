"""Caller identity.

Tokens are verified upstream; the gateway forwards the verified identity in
``X-Actor-Id`` and ``X-Actor-Role`` and this service trusts it as given.
"""

from uuid import UUID

from rest_framework import authentication, exceptions, permissions
from rest_framework.request import Request

from ticketing.domain import Actor, Role

ACTOR_ID_HEADER = "HTTP_X_ACTOR_ID"
ACTOR_ROLE_HEADER = "HTTP_X_ACTOR_ROLE"


class ActorUser:
    """Minimal user object so DRF permissions can see the actor."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, actor: Actor) -> None:
        self.actor = actor

    @property
    def pk(self) -> UUID:
        return self.actor.id

    def __str__(self) -> str:
        return f"{self.actor.role.value}:{self.actor.id}"


class ActorHeaderAuthentication(authentication.BaseAuthentication):
    def authenticate(self, request: Request) -> tuple[ActorUser, None] | None:
        raw_id = request.META.get(ACTOR_ID_HEADER)
        raw_role = request.META.get(ACTOR_ROLE_HEADER)
        if not raw_id and not raw_role:
            return None
        try:
            actor = Actor(id=UUID(raw_id), role=Role(raw_role))
        except (TypeError, ValueError):
            raise exceptions.AuthenticationFailed("Invalid actor identity headers") from None
        return ActorUser(actor), None

    def authenticate_header(self, request: Request) -> str:
        return "Actor"


class IsParticipant(permissions.BasePermission):
    message = "Only participants can perform this action."

    def has_permission(self, request: Request, view) -> bool:
        user = request.user
        return bool(
            getattr(user, "is_authenticated", False)
            and user.actor.role in (Role.PARTICIPANT, Role.ADMIN)
        )


def actor_of(request: Request) -> Actor:
    return request.user.actor
