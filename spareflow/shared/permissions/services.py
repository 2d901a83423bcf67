from typing import Optional

from prisma.enums import UserRole
from prisma.models import Shipment, User

from spareflow.shared.exceptions import InvalidDataError

from .models import ROLE_PERMISSIONS, Permission


def has_permission(role: UserRole, permission: Permission) -> bool:
    """
    Check if a role has a specific permission.

    Args:
        role: The user role to check
        permission: The permission to validate

    Returns:
        True if the role has the permission, False otherwise
    """
    return permission in ROLE_PERMISSIONS.get(role, set())


def resolve_brand_id(user: User, brand_id: Optional[str] = None) -> str:
    """
    Brand whose data a request operates on.

    Brands always act on their own data; admins must name the brand.

    Raises:
        InvalidDataError: If an admin does not pass a brand_id
    """
    if user.role == UserRole.SUPER_ADMIN:
        if not brand_id:
            raise InvalidDataError("brand_id is required")
        return brand_id
    return user.id


def is_shipment_party(user: User, shipment: Shipment) -> bool:
    """Admins, the sending brand and the recipient can see a shipment."""
    return user.role == UserRole.SUPER_ADMIN or user.id in (
        shipment.brandId,
        shipment.recipientId,
    )
