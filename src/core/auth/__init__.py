from src.core.auth.models import UserRole
from src.core.auth.schemas import Employee
from src.core.auth.jwt import create_access_token, decode_token, employee_from_token
from src.core.auth.dependencies import get_current_employee, require_roles

__all__ = [
    "UserRole",
    "Employee",
    "create_access_token",
    "decode_token",
    "employee_from_token",
    "get_current_employee",
    "require_roles",
]
