"""
Tests for NetworkService in spareflow/domains/network/service.py

Covers listing, searching, adding and revoking a brand's distributors and
service centers.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest
from fastapi import HTTPException
from prisma.enums import AuthorizationStatus, UserRole, UserStatus
from prisma.models import BrandAuthorization

from spareflow.domains.network.exceptions import (
    PartnerAlreadyAuthorizedError,
    PartnerNotFoundError,
)
from spareflow.domains.network.models import AddPartnerRequest
from spareflow.domains.network.service import CANDIDATE_LIMIT, NetworkService
from tests.fixtures.user_fixtures import (
    BRAND_ID,
    DISTRIBUTOR_ID,
    SERVICE_CENTER_ID,
    make_user,
)


def make_authorization(
    authorization_id: str = "auth-1",
    recipient: Mock = None,
    status: AuthorizationStatus = AuthorizationStatus.ACTIVE,
) -> Mock:
    recipient = recipient or make_user(DISTRIBUTOR_ID, UserRole.DISTRIBUTOR)
    authorization = Mock(spec=BrandAuthorization)
    authorization.id = authorization_id
    authorization.brandId = BRAND_ID
    authorization.recipientId = recipient.id
    authorization.recipient = recipient
    authorization.status = status
    authorization.createdAt = datetime(2024, 2, 1, 10, 0, 0)
    return authorization


@pytest.fixture
def brand_lookup(mock_prisma: Mock, mock_brand: Mock, mock_distributor: Mock):
    """Brand first, then the partner being added."""
    mock_prisma.user.find_unique.side_effect = [mock_brand, mock_distributor]
    return mock_prisma


class TestListPartners:
    @pytest.mark.asyncio
    async def test_splits_partners_by_role(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.find_many.return_value = [
            make_authorization("auth-1"),
            make_authorization(
                "auth-2", make_user(SERVICE_CENTER_ID, UserRole.SERVICE_CENTER)
            ),
        ]

        result = await NetworkService(mock_prisma).list_partners(BRAND_ID)

        assert [p.id for p in result.distributors] == ["auth-1"]
        assert [p.id for p in result.service_centers] == ["auth-2"]
        assert result.distributors[0].partner.email == f"{DISTRIBUTOR_ID}@example.com"
        where = mock_prisma.brandauthorization.find_many.call_args[1]["where"]
        assert where == {"brandId": BRAND_ID, "status": AuthorizationStatus.ACTIVE}

    @pytest.mark.asyncio
    async def test_include_revoked_drops_status_filter(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.find_many.return_value = []

        await NetworkService(mock_prisma).list_partners(BRAND_ID, include_revoked=True)

        where = mock_prisma.brandauthorization.find_many.call_args[1]["where"]
        assert where == {"brandId": BRAND_ID}


class TestSearchCandidates:
    @pytest.mark.asyncio
    async def test_excludes_active_partners(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.find_many.return_value = [make_authorization()]
        mock_prisma.user.find_many.return_value = [
            make_user("distributor-2", UserRole.DISTRIBUTOR, name="Southline")
        ]

        result = await NetworkService(mock_prisma).search_candidates(
            BRAND_ID, UserRole.DISTRIBUTOR, query="  south "
        )

        assert [u.id for u in result] == ["distributor-2"]
        call = mock_prisma.user.find_many.call_args[1]
        assert call["where"]["id"] == {"not_in": [DISTRIBUTOR_ID]}
        assert call["where"]["role"] == UserRole.DISTRIBUTOR
        assert call["where"]["status"] == UserStatus.ACTIVE
        assert call["where"]["OR"][0] == {
            "name": {"contains": "south", "mode": "insensitive"}
        }
        assert call["take"] == CANDIDATE_LIMIT

    @pytest.mark.asyncio
    async def test_blank_query_lists_all_candidates(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.find_many.return_value = []
        mock_prisma.user.find_many.return_value = []

        await NetworkService(mock_prisma).search_candidates(
            BRAND_ID, UserRole.SERVICE_CENTER, query="   "
        )

        assert "OR" not in mock_prisma.user.find_many.call_args[1]["where"]

    @pytest.mark.asyncio
    async def test_customers_cannot_be_candidates(self, mock_prisma: Mock):
        with pytest.raises(HTTPException) as exc_info:
            await NetworkService(mock_prisma).search_candidates(
                BRAND_ID, UserRole.CUSTOMER
            )

        assert exc_info.value.status_code == 400
        mock_prisma.user.find_many.assert_not_called()


class TestAddPartner:
    @pytest.mark.asyncio
    async def test_new_partner_by_email(self, brand_lookup: Mock):
        brand_lookup.brandauthorization.find_unique.return_value = None
        brand_lookup.brandauthorization.create.return_value = make_authorization()

        result = await NetworkService(brand_lookup).add_partner(
            BRAND_ID,
            AddPartnerRequest(
                user_email_or_id=f" {DISTRIBUTOR_ID}@example.com ",
                role=UserRole.DISTRIBUTOR,
            ),
            added_by=BRAND_ID,
        )

        assert result.status == AuthorizationStatus.ACTIVE
        partner_lookup = brand_lookup.user.find_unique.call_args_list[1][1]
        assert partner_lookup["where"] == {"email": f"{DISTRIBUTOR_ID}@example.com"}
        brand_lookup.brandauthorization.create.assert_called_once_with(
            data={"brandId": BRAND_ID, "recipientId": DISTRIBUTOR_ID},
            include={"recipient": True},
        )

    @pytest.mark.asyncio
    async def test_revoked_partner_is_reactivated(self, brand_lookup: Mock):
        brand_lookup.brandauthorization.find_unique.return_value = make_authorization(
            status=AuthorizationStatus.REVOKED
        )
        brand_lookup.brandauthorization.update.return_value = make_authorization()

        await NetworkService(brand_lookup).add_partner(
            BRAND_ID,
            AddPartnerRequest(
                user_email_or_id=DISTRIBUTOR_ID, role=UserRole.DISTRIBUTOR
            ),
            added_by=BRAND_ID,
        )

        partner_lookup = brand_lookup.user.find_unique.call_args_list[1][1]
        assert partner_lookup["where"] == {"id": DISTRIBUTOR_ID}
        brand_lookup.brandauthorization.update.assert_called_once_with(
            where={"id": "auth-1"},
            data={"status": AuthorizationStatus.ACTIVE},
            include={"recipient": True},
        )
        brand_lookup.brandauthorization.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_active_partner_conflicts(self, brand_lookup: Mock):
        brand_lookup.brandauthorization.find_unique.return_value = make_authorization()

        with pytest.raises(PartnerAlreadyAuthorizedError) as exc_info:
            await NetworkService(brand_lookup).add_partner(
                BRAND_ID,
                AddPartnerRequest(
                    user_email_or_id=DISTRIBUTOR_ID, role=UserRole.DISTRIBUTOR
                ),
                added_by=BRAND_ID,
            )

        assert exc_info.value.status_code == 409
        brand_lookup.brandauthorization.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_role_mismatch_rejected(self, brand_lookup: Mock):
        with pytest.raises(HTTPException) as exc_info:
            await NetworkService(brand_lookup).add_partner(
                BRAND_ID,
                AddPartnerRequest(
                    user_email_or_id=DISTRIBUTOR_ID, role=UserRole.SERVICE_CENTER
                ),
                added_by=BRAND_ID,
            )

        assert exc_info.value.status_code == 400
        assert "DISTRIBUTOR" in exc_info.value.detail
        brand_lookup.brandauthorization.find_unique.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_partner(self, mock_prisma: Mock, mock_brand: Mock):
        mock_prisma.user.find_unique.side_effect = [mock_brand, None]

        with pytest.raises(HTTPException) as exc_info:
            await NetworkService(mock_prisma).add_partner(
                BRAND_ID,
                AddPartnerRequest(
                    user_email_or_id="nobody@example.com", role=UserRole.DISTRIBUTOR
                ),
                added_by=BRAND_ID,
            )

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_inactive_partner_rejected(self, mock_prisma: Mock, mock_brand: Mock):
        suspended = make_user(
            DISTRIBUTOR_ID, UserRole.DISTRIBUTOR, status=UserStatus.SUSPENDED
        )
        mock_prisma.user.find_unique.side_effect = [mock_brand, suspended]

        with pytest.raises(HTTPException) as exc_info:
            await NetworkService(mock_prisma).add_partner(
                BRAND_ID,
                AddPartnerRequest(
                    user_email_or_id=DISTRIBUTOR_ID, role=UserRole.DISTRIBUTOR
                ),
                added_by=BRAND_ID,
            )

        assert exc_info.value.status_code == 400
        mock_prisma.brandauthorization.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_target_brand_must_exist(self, mock_prisma: Mock):
        """An admin naming an unknown brand gets a 404, not an orphan row"""
        mock_prisma.user.find_unique.side_effect = [None]

        with pytest.raises(HTTPException) as exc_info:
            await NetworkService(mock_prisma).add_partner(
                "missing-brand",
                AddPartnerRequest(
                    user_email_or_id=DISTRIBUTOR_ID, role=UserRole.DISTRIBUTOR
                ),
                added_by="admin-id-123",
            )

        assert exc_info.value.status_code == 404
        mock_prisma.brandauthorization.create.assert_not_called()


class TestSetStatus:
    @pytest.mark.asyncio
    async def test_revoke_is_scoped_to_brand(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.update_many.return_value = 1
        mock_prisma.brandauthorization.find_unique.return_value = make_authorization(
            status=AuthorizationStatus.REVOKED
        )

        result = await NetworkService(mock_prisma).revoke(BRAND_ID, "auth-1")

        assert result.status == AuthorizationStatus.REVOKED
        mock_prisma.brandauthorization.update_many.assert_called_once_with(
            where={"id": "auth-1", "brandId": BRAND_ID},
            data={"status": AuthorizationStatus.REVOKED},
        )

    @pytest.mark.asyncio
    async def test_other_brands_authorization_not_found(self, mock_prisma: Mock):
        mock_prisma.brandauthorization.update_many.return_value = 0

        with pytest.raises(PartnerNotFoundError) as exc_info:
            await NetworkService(mock_prisma).set_status(
                BRAND_ID, "auth-other", AuthorizationStatus.ACTIVE
            )

        assert exc_info.value.status_code == 404
        mock_prisma.brandauthorization.find_unique.assert_not_called()
