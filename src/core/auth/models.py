from enum import StrEnum


class UserRole(StrEnum):
    """Roles carried in access tokens issued by the identity service."""

    PARTS_MANAGER = "Parts Manager"
    SHOP_MANAGER = "Shop Manager"
    RECEIVING_CLERK = "Receiving Clerk"
    SALES_ASSOCIATE = "Sales Associate"
