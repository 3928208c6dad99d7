"""The user on whose behalf an operation runs."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from proposal_hub.models.refs import RefId


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    SUPERADMIN = "superadmin"


class Actor(BaseModel):
    """Authenticated user as handed over by the session layer."""

    user_id: RefId
    role: Role
    name: Optional[str] = None
    company: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    def owns(self, owner_id: Optional[str]) -> bool:
        """True if this actor is the owner, or a superadmin acting for them."""
        return self.is_superadmin or (owner_id is not None and owner_id == self.user_id)
