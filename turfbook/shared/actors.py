"""The acting user passed into service calls"""

from typing import Literal

from pydantic import BaseModel

Role = Literal["user", "owner", "admin"]


class Actor(BaseModel):
    """Authenticated caller, resolved by whatever transport embeds turfbook"""

    user_id: int
    role: Role = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def owns_turf(self, turf) -> bool:
        return turf.owner_id is not None and turf.owner_id == self.user_id

    def can_manage_turf(self, turf) -> bool:
        """Admins manage every turf, owners only their own"""
        return self.is_admin or self.owns_turf(turf)
