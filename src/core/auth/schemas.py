from src.core.auth.models import UserRole
from src.shared.schemas import FrozenSchema


class Employee(FrozenSchema):
    """Authenticated employee resolved from the bearer token."""

    id: str
    full_name: str = "Unknown User"
    role: str = ""

    def has_role(self, *roles: UserRole) -> bool:
        """Check if employee has any of the specified roles."""
        return self.role in [r.value for r in roles]
