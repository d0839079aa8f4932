"""Actor model — the caller requesting a workflow transition."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class ActorRole(StrEnum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Actor(BaseModel):
    """An authenticated editor with a precomputed publishing capability.

    ``has_direct_access`` is decided once, when the session is loaded: a
    superadmin always has it, an admin only when a superadmin issued a CRUD
    grant. Engine operations only ever look at the capability, never at the
    grant itself.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: ActorRole
    has_direct_access: bool = False
    name: str = ""

    @model_validator(mode="after")
    def _superadmin_has_direct_access(self) -> Actor:
        if self.role == ActorRole.SUPERADMIN and not self.has_direct_access:
            object.__setattr__(self, "has_direct_access", True)
        return self

    @classmethod
    def from_grant(
        cls,
        actor_id: str,
        role: ActorRole | str,
        *,
        crud_grant: bool,
        name: str = "",
    ) -> Actor:
        """Build an actor from its role and CRUD grant flag."""
        role = ActorRole(role)
        return cls(
            id=actor_id,
            role=role,
            has_direct_access=role == ActorRole.SUPERADMIN or crud_grant,
            name=name,
        )

    @property
    def is_superadmin(self) -> bool:
        return self.role == ActorRole.SUPERADMIN
