"""
Tests for PricingService in spareflow/domains/pricing/service.py
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest
from prisma.models import CourierPricing, PricingRule, SystemConfig

from spareflow.domains.pricing.exceptions import (
    InvalidPricingRuleError,
    PricingConfigError,
)
from spareflow.domains.pricing.models import CostEstimateRequest, PricingRuleCreate
from spareflow.domains.pricing.rules import PricingAction
from spareflow.domains.pricing.service import PricingService
from spareflow.domains.pricing.types import ActionType
from spareflow.shared.exceptions import NotAuthorizedError
from tests.fixtures.shipment_fixtures import make_wallet


def make_rule_row(
    rule_id: str = "rule-1",
    brand_id: str = "brand-id-123",
    percentage: str = "10",
) -> Mock:
    row = Mock(spec=PricingRule)
    row.id = rule_id
    row.name = "Loyalty discount"
    row.description = None
    row.priority = 5
    row.isActive = True
    row.brandId = brand_id
    row.conditions = []
    row.actions = [
        {
            "type": "percentage_discount",
            "value": percentage,
            "target": "total_cost",
            "conditions": [],
        }
    ]
    row.validFrom = datetime(2024, 1, 1, tzinfo=timezone.utc)
    row.validTo = None
    row.createdAt = datetime(2024, 1, 1, tzinfo=timezone.utc)
    row.updatedAt = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return row


@pytest.fixture
def estimate_request() -> CostEstimateRequest:
    return CostEstimateRequest(weight=3.0, pieces=2, pincode="400001")


class TestEstimate:
    @pytest.mark.asyncio
    async def test_estimate_with_default_tariff(
        self, mock_prisma: Mock, estimate_request: CostEstimateRequest
    ):
        mock_prisma.systemconfig.find_unique.return_value = None
        mock_prisma.courierpricing.find_unique.return_value = None
        mock_prisma.pricingrule.find_many.return_value = []

        result = await PricingService(mock_prisma).estimate(
            "brand-id-123", estimate_request
        )

        assert result.courier.total_cost == Decimal("172.50")
        assert result.total_cost == Decimal("172.50")
        assert result.affordability is None

        rules_where = mock_prisma.pricingrule.find_many.call_args[1]["where"]
        assert rules_where["OR"] == [{"brandId": "brand-id-123"}, {"brandId": None}]

    @pytest.mark.asyncio
    async def test_estimate_applies_rules_to_courier_cost(
        self, mock_prisma: Mock, estimate_request: CostEstimateRequest
    ):
        mock_prisma.systemconfig.find_unique.return_value = None
        mock_prisma.courierpricing.find_unique.return_value = None
        mock_prisma.pricingrule.find_many.return_value = [make_rule_row()]

        result = await PricingService(mock_prisma).estimate(
            "brand-id-123", estimate_request
        )

        # 172.50 less 10%
        assert result.total_cost == Decimal("155.25")
        assert result.pricing.applied_rules[0].rule_id == "rule-1"

    @pytest.mark.asyncio
    async def test_brand_rate_override(
        self, mock_prisma: Mock, estimate_request: CostEstimateRequest
    ):
        override = Mock(spec=CourierPricing)
        override.perBoxRate = Decimal("40")
        override.isActive = True
        mock_prisma.systemconfig.find_unique.return_value = None
        mock_prisma.courierpricing.find_unique.return_value = override
        mock_prisma.pricingrule.find_many.return_value = []

        result = await PricingService(mock_prisma).estimate(
            "brand-id-123", estimate_request
        )

        # (80 + 50) * 1.15
        assert result.courier.rate_per_box == Decimal("40.00")
        assert result.total_cost == Decimal("149.50")

    @pytest.mark.asyncio
    async def test_affordability_check(self, mock_prisma: Mock):
        mock_prisma.systemconfig.find_unique.return_value = None
        mock_prisma.courierpricing.find_unique.return_value = None
        mock_prisma.pricingrule.find_many.return_value = []
        mock_prisma.wallet.find_unique.return_value = make_wallet(Decimal("100.00"))

        request = CostEstimateRequest(
            weight=3.0, pieces=2, pincode="400001", check_affordability=True
        )
        result = await PricingService(mock_prisma).estimate("brand-id-123", request)

        assert result.affordability is not None
        assert result.affordability.sufficient is False
        assert result.affordability.shortfall == Decimal("72.50")


class TestConfig:
    @pytest.mark.asyncio
    async def test_stored_config_overrides_defaults(self, mock_prisma: Mock):
        row = Mock(spec=SystemConfig)
        row.value = {"forward": {"default_rate": "70"}}
        mock_prisma.systemconfig.find_unique.return_value = row

        config = await PricingService(mock_prisma).get_config()

        assert config.forward.default_rate == Decimal("70")
        assert config.forward.markup_percentage == Decimal("15")

    @pytest.mark.asyncio
    async def test_invalid_stored_config_raises(self, mock_prisma: Mock):
        row = Mock(spec=SystemConfig)
        row.value = {"forward": {"express_multiplier": "0.5"}}
        mock_prisma.systemconfig.find_unique.return_value = row

        with pytest.raises(PricingConfigError):
            await PricingService(mock_prisma).get_config()


class TestRuleManagement:
    @pytest.mark.asyncio
    async def test_brand_rule_is_scoped_to_brand(
        self, mock_prisma: Mock, mock_brand: Mock
    ):
        mock_prisma.pricingrule.create.return_value = make_rule_row()
        payload = PricingRuleCreate(
            name="Loyalty discount",
            brand_id="someone-else",
            actions=[
                PricingAction(
                    type=ActionType.PERCENTAGE_DISCOUNT, value=Decimal("10")
                )
            ],
        )

        result = await PricingService(mock_prisma).create_rule(mock_brand, payload)

        data = mock_prisma.pricingrule.create.call_args[1]["data"]
        assert data["brandId"] == mock_brand.id
        assert result.name == "Loyalty discount"

    @pytest.mark.asyncio
    async def test_window_must_be_ordered(self, mock_prisma: Mock, mock_admin: Mock):
        payload = PricingRuleCreate(
            name="Backwards",
            actions=[PricingAction(type=ActionType.MARKUP, value=Decimal("5"))],
            valid_from=datetime(2024, 6, 1, tzinfo=timezone.utc),
            valid_to=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

        with pytest.raises(InvalidPricingRuleError):
            await PricingService(mock_prisma).create_rule(mock_admin, payload)

    @pytest.mark.asyncio
    async def test_brand_cannot_delete_other_brand_rule(
        self, mock_prisma: Mock, mock_brand: Mock
    ):
        mock_prisma.pricingrule.find_unique.return_value = make_rule_row(
            brand_id="other-brand"
        )

        with pytest.raises(NotAuthorizedError):
            await PricingService(mock_prisma).delete_rule(mock_brand, "rule-1")

        mock_prisma.pricingrule.delete.assert_not_called()
