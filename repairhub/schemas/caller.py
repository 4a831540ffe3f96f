from typing import Optional

from pydantic import BaseModel

from repairhub.models.role import UserRole


class CallerContext(BaseModel):
    """Identity of the authenticated caller, handed explicitly to services."""
    id:        int
    role:      UserRole
    companyId: Optional[int] = None

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.EMPLOYEE)
