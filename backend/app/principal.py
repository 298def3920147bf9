"""Principal abstractions for authenticated callers."""

from __future__ import annotations

from dataclasses import dataclass

from app.core.enums import RoleName


@dataclass(frozen=True)
class ActorContext:
    """
    The authenticated entity making a request.

    Built from the stored profile after token verification, so ``role`` is
    never client-asserted. Every business operation takes one explicitly.
    """

    id: str
    role: RoleName

    @classmethod
    def from_profile(cls, profile: object) -> "ActorContext":
        return cls(id=str(getattr(profile, "id")), role=RoleName(getattr(profile, "user_type")))

    @property
    def is_influencer(self) -> bool:
        return self.role == RoleName.INFLUENCER

    @property
    def is_subscriber(self) -> bool:
        return self.role == RoleName.SUBSCRIBER

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN
