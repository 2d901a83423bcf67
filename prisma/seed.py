#!/usr/bin/env python3
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

from supabase import Client, create_client

# Add the project root to Python path so we can import spareflow
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from prisma.enums import RecipientType, UserRole  # noqa: E402

from prisma import Prisma  # noqa: E402
from spareflow.core.settings import settings  # noqa: E402
from spareflow.domains.auth.dependencies import create_access_token  # noqa: E402
from spareflow.domains.inventory.service import InventoryService  # noqa: E402
from spareflow.domains.wallet.service import WalletService  # noqa: E402

USERS = [
    {
        "email": "brand@spareflow.dev",
        "name": "Acme Appliances",
        "role": UserRole.BRAND,
        "phone": "9820000001",
        "address": "Plot 12, MIDC Industrial Area",
        "city": "Mumbai",
        "state": "Maharashtra",
        "pincode": "400093",
    },
    {
        "email": "distributor@spareflow.dev",
        "name": "Northline Distributors",
        "role": UserRole.DISTRIBUTOR,
        "phone": "9810000002",
        "address": "45 Naraina Industrial Estate",
        "city": "New Delhi",
        "state": "Delhi",
        "pincode": "110028",
    },
    {
        "email": "service@spareflow.dev",
        "name": "QuickFix Service Center",
        "role": UserRole.SERVICE_CENTER,
        "phone": "9880000003",
        "address": "18 Residency Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560025",
    },
    {
        "email": "customer@spareflow.dev",
        "name": "Priya Raman",
        "role": UserRole.CUSTOMER,
        "phone": "9840000004",
        "address": "7 Besant Nagar 2nd Avenue",
        "city": "Chennai",
        "state": "Tamil Nadu",
        "pincode": "600090",
    },
    {
        "email": "admin@spareflow.dev",
        "name": "SpareFlow Admin",
        "role": UserRole.SUPER_ADMIN,
    },
]

PARTS = [
    {
        "code": "CMP-1001",
        "name": "Compressor Relay",
        "category": "Refrigeration",
        "price": Decimal("450.00"),
        "weight": 0.2,
        "length": 8,
        "breadth": 6,
        "height": 4,
        "minStockLevel": 10,
        "stock": 120,
    },
    {
        "code": "MTR-2040",
        "name": "Washer Drain Pump Motor",
        "category": "Laundry",
        "price": Decimal("1850.00"),
        "weight": 1.4,
        "length": 20,
        "breadth": 15,
        "height": 12,
        "minStockLevel": 5,
        "stock": 40,
    },
    {
        "code": "PCB-3300",
        "name": "AC Indoor Control Board",
        "category": "Air Conditioning",
        "price": Decimal("3200.00"),
        "weight": 0.6,
        "length": 25,
        "breadth": 18,
        "height": 5,
        "minStockLevel": 3,
        "stock": 8,
    },
    {
        "code": "FLT-0110",
        "name": "Water Purifier Sediment Filter",
        "category": "Water",
        "price": Decimal("180.00"),
        "weight": 0.3,
        "minStockLevel": 25,
        "stock": 200,
    },
]

INITIAL_WALLET_BALANCE = Decimal("10000.00")


async def setup_storage_bucket(supabase: Client) -> None:
    """Create the shipping label storage bucket if it is missing"""
    print("🗂️ Setting up storage bucket...")

    bucket = settings.LABELS_BUCKET
    buckets = supabase.storage.list_buckets()
    if any(b.name == bucket for b in buckets):
        print(f"ℹ️ Storage bucket already exists: {bucket}")
        return

    supabase.storage.create_bucket(
        bucket,
        options={
            "public": False,
            "file_size_limit": 5242880,  # 5MB
            "allowed_mime_types": ["application/pdf"],
        },
    )
    print(f"✅ Created storage bucket: {bucket}")


async def main() -> None:
    print("🌱 Starting database seed...")

    prisma = Prisma()
    await prisma.connect()

    supabase: Client | None = (
        create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        if settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY
        else None
    )

    try:
        users = {}
        for data in USERS:
            user = await prisma.user.upsert(
                where={"email": data["email"]},
                data={"create": data, "update": {}},  # type: ignore[typeddict-item]
            )
            users[user.role] = user
            print(f"✅ User ready: {user.email} ({user.role})")

        brand = users[UserRole.BRAND]

        # Distributor and service center join the brand's network
        for role in (RecipientType.DISTRIBUTOR, RecipientType.SERVICE_CENTER):
            recipient = users[UserRole(role.value)]
            await prisma.brandauthorization.upsert(
                where={
                    "brandId_recipientId": {
                        "brandId": brand.id,
                        "recipientId": recipient.id,
                    }
                },
                data={
                    "create": {"brandId": brand.id, "recipientId": recipient.id},
                    "update": {},
                },
            )
            print(f"✅ Authorized {recipient.name} for {brand.name}")

        inventory = InventoryService(prisma)
        for spec in PARTS:
            data = dict(spec)
            stock = data.pop("stock")
            existing = await prisma.part.find_unique(
                where={"brandId_code": {"brandId": brand.id, "code": data["code"]}}
            )
            if existing:
                print(f"ℹ️ Part already exists: {existing.code}")
                continue
            part = await prisma.part.create(
                data={"brandId": brand.id, **data}  # type: ignore[typeddict-item]
            )
            await inventory.add_initial_stock(brand.id, part.id, stock, brand.id)
            print(f"✅ Created part {part.code} with {stock} units")

        wallets = WalletService(prisma)
        wallet = await wallets.get_or_create_wallet(brand.id)
        if wallet.totalCredited == 0:
            await wallets.credit(
                brand.id,
                INITIAL_WALLET_BALANCE,
                "Seed wallet recharge",
                reference="SEED",
                is_recharge=True,
            )
            print(f"✅ Credited {INITIAL_WALLET_BALANCE} to {brand.name}'s wallet")
        else:
            print(f"ℹ️ Wallet already funded: {wallet.balance}")

        if settings.JWT_SECRET:
            print("📋 Development tokens:")
            for user in users.values():
                print(f"   {user.role} ({user.email}): Bearer {create_access_token(user)}")
        else:
            print("ℹ️ JWT_SECRET not set - skipping development tokens")

        if supabase:
            await setup_storage_bucket(supabase)
        else:
            print("ℹ️ Skipping storage bucket setup - Supabase not configured")

        print("🌱 Seed completed successfully!")

    except Exception as e:
        print(f"❌ Seed failed: {e}")
        raise
    finally:
        await prisma.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
