from typing import Annotated

from fastapi import Depends, Header

from src.core.auth.jwt import employee_from_token
from src.core.auth.models import UserRole
from src.core.auth.schemas import Employee
from src.core.exceptions import AuthenticationError, AuthorizationError


async def get_current_employee(
    authorization: Annotated[str | None, Header()] = None,
) -> Employee:
    """
    Dependency to resolve the current employee from the bearer token.

    Usage:
        @router.get("/me")
        async def get_me(employee: Employee = Depends(get_current_employee)):
            return employee
    """
    if not authorization:
        raise AuthenticationError("Authorization header required")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise AuthenticationError("Invalid authorization header format")

    return employee_from_token(token.strip())


def require_roles(*roles: UserRole):
    """
    Dependency factory to require specific roles.

    Usage:
        @router.post("/purchase-orders/{po_id}/force-close")
        async def force_close(
            employee: Employee = Depends(require_roles(UserRole.PARTS_MANAGER))
        ):
            ...
    """

    async def role_checker(
        current_employee: Employee = Depends(get_current_employee),
    ) -> Employee:
        if not current_employee.has_role(*roles):
            allowed = ", ".join(r.value for r in roles)
            raise AuthorizationError(f"Required role: {allowed}")
        return current_employee

    return role_checker


# Everyone who works the receiving desk
RECEIVING_ROLES = (UserRole.PARTS_MANAGER, UserRole.SHOP_MANAGER, UserRole.RECEIVING_CLERK)
# Closing an order short is a manager decision
MANAGER_ROLES = (UserRole.PARTS_MANAGER, UserRole.SHOP_MANAGER)

CurrentEmployee = Annotated[Employee, Depends(get_current_employee)]
ReceivingEmployee = Annotated[Employee, Depends(require_roles(*RECEIVING_ROLES))]
ManagerEmployee = Annotated[Employee, Depends(require_roles(*MANAGER_ROLES))]
