"""
Shared permission system for role-based access control.

This module provides a centralized permission system that can be used
across all domains in the application.

Usage:
    from spareflow.shared.permissions import Permission, require_permission

    @router.get("/shipments")
    async def get_resource(
        user: User = Depends(
            require_permission(Permission.VIEW_SHIPMENTS)
        )
    ):
        pass
"""

from .dependencies import require_permission
from .models import ROLE_PERMISSIONS, Permission
from .services import has_permission, is_shipment_party, resolve_brand_id

__all__ = [
    "Permission",
    "ROLE_PERMISSIONS",
    "has_permission",
    "is_shipment_party",
    "require_permission",
    "resolve_brand_id",
]
