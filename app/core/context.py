from dataclasses import dataclass

from app.db.store import DocumentStore
from app.models.hotel import MemberRole


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an operation."""
    user_id: str
    email: str
    name: str = ""


@dataclass(frozen=True)
class LedgerContext:
    """Everything a tenant-scoped operation needs: storage, tenant, caller."""
    store: DocumentStore
    hotel_id: str
    actor: Actor
    role: MemberRole = MemberRole.MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN
