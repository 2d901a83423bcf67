from enum import Enum
from typing import Set

from prisma.enums import UserRole


class Permission(Enum):
    """
    Defines all permissions available in the system.

    Permissions should follow the pattern: ACTION_RESOURCE
    Common actions: VIEW, MANAGE, CREATE
    """

    # Catalogue and stock
    VIEW_PARTS = "view_parts"
    MANAGE_PARTS = "manage_parts"  # Create and edit catalogue rows
    VIEW_INVENTORY = "view_inventory"
    MANAGE_INVENTORY = "manage_inventory"  # Manual stock adjustments

    # Shipments
    CREATE_SHIPMENTS = "create_shipments"  # Create, cancel, retry AWB
    VIEW_SHIPMENTS = "view_shipments"  # Sent or received shipments
    REFRESH_TRACKING = "refresh_tracking"  # Bulk tracking refresh

    # Pricing
    ESTIMATE_COST = "estimate_cost"
    MANAGE_PRICING_RULES = "manage_pricing_rules"
    MANAGE_PRICING_CONFIG = "manage_pricing_config"  # Tariff and brand overrides

    # Wallet
    VIEW_WALLET = "view_wallet"
    CREDIT_WALLET = "credit_wallet"  # Recharge any user's wallet

    # Network
    MANAGE_NETWORK = "manage_network"  # Authorize distributors and service centers


_RECIPIENT_PERMISSIONS = {
    Permission.VIEW_SHIPMENTS,
    Permission.VIEW_WALLET,
}

ROLE_PERMISSIONS: dict[UserRole, Set[Permission]] = {
    UserRole.SUPER_ADMIN: set(Permission),
    UserRole.BRAND: {
        Permission.VIEW_PARTS,
        Permission.MANAGE_PARTS,
        Permission.VIEW_INVENTORY,
        Permission.MANAGE_INVENTORY,
        Permission.CREATE_SHIPMENTS,
        Permission.VIEW_SHIPMENTS,
        Permission.ESTIMATE_COST,
        Permission.MANAGE_PRICING_RULES,
        Permission.VIEW_WALLET,
        Permission.MANAGE_NETWORK,
    },
    UserRole.DISTRIBUTOR: set(_RECIPIENT_PERMISSIONS),
    UserRole.SERVICE_CENTER: set(_RECIPIENT_PERMISSIONS),
    UserRole.CUSTOMER: {Permission.VIEW_SHIPMENTS},
}
