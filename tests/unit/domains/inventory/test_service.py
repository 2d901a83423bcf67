"""
Tests for InventoryService in spareflow/domains/inventory/service.py

Stock movements are conditional updates followed by a ledger entry; these
tests check the guards, the counters touched and the ledger rows written.
"""

from unittest.mock import Mock

import pytest
from prisma.enums import InventoryAction

from spareflow.domains.inventory.exceptions import (
    InsufficientStockError,
    InvalidAdjustmentError,
)
from spareflow.domains.inventory.models import StockAdjustmentRequest
from spareflow.domains.inventory.service import InventoryService
from spareflow.shared.exceptions import PartNotFoundError
from tests.fixtures.shipment_fixtures import make_inventory, make_part


class TestAvailability:
    @pytest.mark.asyncio
    async def test_reports_only_short_parts(self, mock_prisma: Mock):
        relay = make_part("part-1", code="CMP-1001")
        valve = make_part("part-2", code="CMP-2002", name="Expansion Valve")
        mock_prisma.brandinventory.find_many.return_value = [
            make_inventory(relay, on_hand=10),
            make_inventory(valve, on_hand=5, reserved=4),
        ]

        issues = await InventoryService(mock_prisma).check_availability(
            "brand-id-123",
            {"part-1": 3, "part-2": 2, "part-3": 1},
            {"part-1": relay, "part-2": valve},
        )

        assert [(i.part_id, i.available) for i in issues] == [
            ("part-2", 1),
            ("part-3", 0),
        ]
        assert issues[0].part_code == "CMP-2002"
        assert issues[1].part_code is None

    @pytest.mark.asyncio
    async def test_no_issues_when_covered(self, mock_prisma: Mock):
        mock_prisma.brandinventory.find_many.return_value = [make_inventory()]

        issues = await InventoryService(mock_prisma).check_availability(
            "brand-id-123", {"part-1": 100}
        )

        assert issues == []


class TestReserve:
    @pytest.mark.asyncio
    async def test_reserve_moves_available_to_reserved(self, mock_prisma: Mock):
        mock_prisma.brandinventory.update_many.return_value = 1
        mock_prisma.brandinventory.find_unique.return_value = make_inventory(
            on_hand=100, reserved=4
        )

        await InventoryService(mock_prisma).reserve(
            "brand-id-123", {"part-1": 4}, "shipment-1", user_id="brand-id-123"
        )

        update = mock_prisma.brandinventory.update_many.call_args[1]
        assert update["where"] == {
            "brandId": "brand-id-123",
            "partId": "part-1",
            "availableQuantity": {"gte": 4},
        }
        assert update["data"] == {
            "availableQuantity": {"decrement": 4},
            "reservedQuantity": {"increment": 4},
        }

        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.RESERVE
        assert ledger["quantity"] == 4
        assert ledger["balanceAfter"] == 96
        assert ledger["shipmentId"] == "shipment-1"

    @pytest.mark.asyncio
    async def test_reserve_fails_when_stock_taken(self, mock_prisma: Mock):
        """Guarded update matches nothing when a concurrent request took the stock"""
        mock_prisma.brandinventory.update_many.return_value = 0
        mock_prisma.brandinventory.find_unique.return_value = make_inventory(
            on_hand=2
        )

        with pytest.raises(InsufficientStockError) as exc_info:
            await InventoryService(mock_prisma).reserve(
                "brand-id-123", {"part-1": 4}, "shipment-1"
            )

        assert exc_info.value.status_code == 400
        issue = exc_info.value.detail["stockIssues"][0]
        assert issue["requested"] == 4
        assert issue["available"] == 2
        mock_prisma.inventoryledger.create.assert_not_called()


class TestShipmentMovements:
    @pytest.mark.asyncio
    async def test_release_returns_reserved_to_available(self, mock_prisma: Mock):
        mock_prisma.brandinventory.update_many.return_value = 1
        mock_prisma.brandinventory.find_unique.return_value = make_inventory()

        await InventoryService(mock_prisma).release(
            "brand-id-123", {"part-1": 2}, "shipment-1"
        )

        update = mock_prisma.brandinventory.update_many.call_args[1]
        assert update["where"]["reservedQuantity"] == {"gte": 2}
        assert update["data"]["availableQuantity"] == {"increment": 2}
        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.RELEASE

    @pytest.mark.asyncio
    async def test_release_without_reservation_writes_no_ledger(
        self, mock_prisma: Mock
    ):
        mock_prisma.brandinventory.update_many.return_value = 0

        await InventoryService(mock_prisma).release(
            "brand-id-123", {"part-1": 2}, "shipment-1"
        )

        mock_prisma.inventoryledger.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_removes_reserved_from_on_hand(self, mock_prisma: Mock):
        mock_prisma.brandinventory.update_many.return_value = 1
        mock_prisma.brandinventory.find_unique.return_value = make_inventory(
            on_hand=98
        )

        await InventoryService(mock_prisma).commit(
            "brand-id-123", {"part-1": 2}, "shipment-1"
        )

        update = mock_prisma.brandinventory.update_many.call_args[1]
        assert update["data"] == {
            "reservedQuantity": {"decrement": 2},
            "onHandQuantity": {"decrement": 2},
        }
        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.TRANSFER_OUT

    @pytest.mark.asyncio
    async def test_return_to_stock_is_unguarded(self, mock_prisma: Mock):
        mock_prisma.brandinventory.update_many.return_value = 1
        mock_prisma.brandinventory.find_unique.return_value = make_inventory()

        await InventoryService(mock_prisma).return_to_stock(
            "brand-id-123", {"part-1": 2}, "shipment-1"
        )

        update = mock_prisma.brandinventory.update_many.call_args[1]
        assert update["where"] == {"brandId": "brand-id-123", "partId": "part-1"}
        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.RETURN_IN


class TestAdjustStock:
    @pytest.mark.asyncio
    async def test_add_stock(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = make_part()
        mock_prisma.brandinventory.update_many.return_value = 1
        mock_prisma.brandinventory.find_unique.side_effect = [
            make_inventory(on_hand=100),
            make_inventory(on_hand=120),
            make_inventory(on_hand=120),
        ]

        result = await InventoryService(mock_prisma).adjust_stock(
            "brand-id-123",
            "part-1",
            StockAdjustmentRequest(quantity=20, note="Cycle count"),
        )

        assert result.onHandQuantity == 120
        assert result.isLowStock is False
        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.ADJUSTMENT
        assert ledger["referenceNote"] == "Cycle count"

    @pytest.mark.asyncio
    async def test_remove_more_than_available(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = make_part()
        mock_prisma.brandinventory.find_unique.return_value = make_inventory(
            on_hand=5
        )
        mock_prisma.brandinventory.update_many.return_value = 0

        with pytest.raises(InvalidAdjustmentError) as exc_info:
            await InventoryService(mock_prisma).adjust_stock(
                "brand-id-123", "part-1", StockAdjustmentRequest(quantity=-8)
            )

        assert "only 5 available" in exc_info.value.detail
        where = mock_prisma.brandinventory.update_many.call_args[1]["where"]
        assert where["availableQuantity"] == {"gte": 8}

    @pytest.mark.asyncio
    async def test_part_from_another_brand(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = None

        with pytest.raises(PartNotFoundError):
            await InventoryService(mock_prisma).adjust_stock(
                "brand-id-123", "part-9", StockAdjustmentRequest(quantity=5)
            )

    @pytest.mark.asyncio
    async def test_cannot_remove_from_missing_row(self, mock_prisma: Mock):
        mock_prisma.part.find_first.return_value = make_part()
        mock_prisma.brandinventory.find_unique.return_value = None

        with pytest.raises(InvalidAdjustmentError):
            await InventoryService(mock_prisma).adjust_stock(
                "brand-id-123", "part-1", StockAdjustmentRequest(quantity=-1)
            )

    def test_zero_adjustment_rejected(self):
        with pytest.raises(ValueError):
            StockAdjustmentRequest(quantity=0)


class TestQueries:
    @pytest.mark.asyncio
    async def test_low_stock_uses_part_minimum(self, mock_prisma: Mock):
        low = make_inventory(make_part("part-1", min_stock_level=10), on_hand=10)
        healthy = make_inventory(make_part("part-2", min_stock_level=10), on_hand=50)
        mock_prisma.brandinventory.find_many.return_value = [low, healthy]

        items = await InventoryService(mock_prisma).low_stock(
            "brand-id-123", ["part-1", "part-2"]
        )

        assert [item.partId for item in items] == ["part-1"]
        where = mock_prisma.brandinventory.find_many.call_args[1]["where"]
        assert where["partId"] == {"in": ["part-1", "part-2"]}

    @pytest.mark.asyncio
    async def test_initial_stock_records_stock_in(self, mock_prisma: Mock):
        mock_prisma.brandinventory.create.return_value = make_inventory(on_hand=25)

        await InventoryService(mock_prisma).add_initial_stock(
            "brand-id-123", "part-1", 25
        )

        ledger = mock_prisma.inventoryledger.create.call_args[1]["data"]
        assert ledger["actionType"] == InventoryAction.STOCK_IN
        assert ledger["balanceAfter"] == 25

    @pytest.mark.asyncio
    async def test_initial_stock_of_zero_writes_no_ledger(self, mock_prisma: Mock):
        mock_prisma.brandinventory.create.return_value = make_inventory(on_hand=0)

        await InventoryService(mock_prisma).add_initial_stock(
            "brand-id-123", "part-1", 0
        )

        mock_prisma.inventoryledger.create.assert_not_called()
