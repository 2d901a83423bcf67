"""
Tests for the parts catalogue functions in spareflow/domains/parts/service.py
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest
from prisma.enums import InventoryAction

from spareflow.domains.parts.exceptions import DuplicatePartCodeError
from spareflow.domains.parts.models import PartCreate, PartUpdate
from spareflow.domains.parts.service import (
    create_part,
    get_part,
    get_parts_by_brand,
    update_part,
)
from spareflow.shared.exceptions import PartNotFoundError
from tests.fixtures.shipment_fixtures import make_inventory, make_part


def stocked_part(**kwargs) -> Mock:
    part = make_part(**kwargs)
    part.inventory = [make_inventory(part, on_hand=40, reserved=6)]
    return part


class TestGetParts:
    @pytest.mark.asyncio
    async def test_list_includes_stock_levels(self, mock_prisma: Mock):
        mock_prisma.part.find_many.return_value = [stocked_part()]
        mock_prisma.part.count.return_value = 1

        result = await get_parts_by_brand("brand-id-123", mock_prisma)

        assert result.parts[0].availableQuantity == 34
        assert result.parts[0].reservedQuantity == 6
        assert result.pagination.total == 1
        where = mock_prisma.part.find_many.call_args[1]["where"]
        assert where == {"brandId": "brand-id-123", "isActive": True}

    @pytest.mark.asyncio
    async def test_search_matches_code_name_and_part_number(self, mock_prisma: Mock):
        mock_prisma.part.find_many.return_value = []
        mock_prisma.part.count.return_value = 0

        await get_parts_by_brand(
            "brand-id-123",
            mock_prisma,
            search="relay",
            category="Refrigeration",
            include_inactive=True,
        )

        where = mock_prisma.part.find_many.call_args[1]["where"]
        assert "isActive" not in where
        assert where["category"] == "Refrigeration"
        assert len(where["OR"]) == 3

    @pytest.mark.asyncio
    async def test_part_without_stock_row(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = make_part(inventory=[])

        result = await get_part("part-1", mock_prisma, "brand-id-123")

        assert result.availableQuantity is None

    @pytest.mark.asyncio
    async def test_part_not_in_brand_catalogue(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = None

        with pytest.raises(PartNotFoundError) as exc_info:
            await get_part("part-9", mock_prisma, "brand-id-123")

        assert exc_info.value.status_code == 404
        where = mock_prisma.part.find_first.call_args[1]["where"]
        assert where == {"id": "part-9", "brandId": "brand-id-123"}


class TestCreatePart:
    @pytest.mark.asyncio
    async def test_create_with_opening_stock(self, mock_prisma: Mock):
        created = make_part()
        mock_prisma.part.find_unique.return_value = None
        mock_prisma.part.create.return_value = created
        mock_prisma.brandinventory.create.return_value = make_inventory(
            created, on_hand=25
        )
        mock_prisma.part.find_first.return_value = stocked_part()

        payload = PartCreate(
            code="CMP-1001",
            name="Compressor Relay",
            price=Decimal("450.00"),
            weight=0.2,
            initial_stock=25,
        )
        result = await create_part(
            "brand-id-123", payload, mock_prisma, user_id="brand-id-123"
        )

        assert result.code == "CMP-1001"
        data = mock_prisma.part.create.call_args[1]["data"]
        assert data["brandId"] == "brand-id-123"
        assert data["price"] == Decimal("450.00")
        mock_prisma.tx.assert_called_once()

        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.STOCK_IN
        assert ledger["quantity"] == 25

    @pytest.mark.asyncio
    async def test_duplicate_code(self, mock_prisma: Mock):
        mock_prisma.part.find_unique.return_value = make_part()

        payload = PartCreate(code="CMP-1001", name="Relay", price=Decimal("10"))
        with pytest.raises(DuplicatePartCodeError) as exc_info:
            await create_part("brand-id-123", payload, mock_prisma)

        assert exc_info.value.status_code == 409
        mock_prisma.part.create.assert_not_called()


class TestUpdatePart:
    @pytest.mark.asyncio
    async def test_only_provided_fields_are_written(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = stocked_part()

        await update_part(
            "part-1",
            "brand-id-123",
            PartUpdate(price=Decimal("475.00"), is_active=False),
            mock_prisma,
        )

        mock_prisma.part.update.assert_called_once_with(
            where={"id": "part-1"},
            data={"price": Decimal("475.00"), "isActive": False},
        )

    @pytest.mark.asyncio
    async def test_empty_update_skips_write(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = stocked_part()

        await update_part("part-1", "brand-id-123", PartUpdate(), mock_prisma)

        mock_prisma.part.update.assert_not_called()
