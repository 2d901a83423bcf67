"""
Tests for DTDCClient in spareflow/domains/courier/client.py

HTTP calls are mocked at httpx.AsyncClient; retry back-off is patched out.
"""

from decimal import Decimal
from typing import Any, List
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from spareflow.domains.courier.client import DTDCClient
from spareflow.domains.courier.exceptions import (
    CourierAuthenticationError,
    CourierNotConfiguredError,
    CourierRequestError,
    CourierUnavailableError,
    CourierValidationError,
)
from spareflow.domains.courier.mapping import map_courier_status, sanitize_phone
from spareflow.domains.courier.types import Address, ConsignmentRequest, CourierStatus

CLIENT_PATH = "spareflow.domains.courier.client"


def response(status_code: int = 200, json: Any = None, content: bytes = b"") -> Mock:
    resp = Mock(spec=httpx.Response)
    resp.status_code = status_code
    resp.content = content
    resp.text = str(json)
    if json is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json
    return resp


def mock_http(responses: List[Any]):
    """Patch httpx.AsyncClient so successive requests return or raise in order."""
    patcher = patch(f"{CLIENT_PATH}.httpx.AsyncClient")
    mock_client_class = patcher.start()
    instance = Mock()
    instance.request = AsyncMock(side_effect=responses)
    mock_client_class.return_value.__aenter__ = AsyncMock(return_value=instance)
    mock_client_class.return_value.__aexit__ = AsyncMock(return_value=False)
    return patcher, instance


@pytest.fixture
def client() -> DTDCClient:
    return DTDCClient(
        api_key="test-key",
        customer_code="GL0001",
        tracking_token="track-token",
        max_retries=3,
    )


@pytest.fixture
def consignment() -> ConsignmentRequest:
    return ConsignmentRequest(
        reference_number="SF-shipment-1",
        consignee=Address(
            name="Northline Distributors",
            phone="(981) 000-0002",
            address="45 Naraina Industrial Estate",
            city="New Delhi",
            state="Delhi",
            pincode="110028",
        ),
        weight=0.05,
        pieces=2,
        declared_value=Decimal("40"),
    )


@pytest.fixture(autouse=True)
def no_sleep():
    with patch(f"{CLIENT_PATH}.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


class TestGenerateAwb:
    @pytest.mark.asyncio
    async def test_successful_booking(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        patcher, http = mock_http(
            [
                response(
                    json={
                        "success": True,
                        "data": [{"success": True, "reference_number": "D12345678"}],
                    }
                )
            ]
        )
        try:
            result = await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert result.awb_number == "D12345678"
        assert result.reference_number == "SF-shipment-1"
        assert "D12345678" in result.tracking_url

        call = http.request.call_args
        assert call[0][0] == "POST"
        assert call[1]["headers"]["api-key"] == "test-key"
        payload = call[1]["json"]["consignments"][0]
        assert payload["customer_code"] == "GL0001"
        assert payload["num_pieces"] == "2"
        # Floors for weight and declared value
        assert payload["weight"] == "0.10"
        assert payload["declared_value"] == "100"
        assert payload["destination_details"]["phone"] == "9810000002"

    @pytest.mark.asyncio
    async def test_rejected_booking_raises(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        patcher, _ = mock_http(
            [
                response(
                    json={
                        "success": True,
                        "data": [{"success": False, "message": "Pincode not serviced"}],
                    }
                )
            ]
        )
        try:
            with pytest.raises(CourierRequestError) as exc_info:
                await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert "Pincode not serviced" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_retries_server_errors_then_succeeds(
        self, client: DTDCClient, consignment: ConsignmentRequest, no_sleep: AsyncMock
    ):
        patcher, http = mock_http(
            [
                response(status_code=503, json={"message": "busy"}),
                httpx.ConnectError("connection refused"),
                response(json={"success": True, "data": [{"awbNumber": "D999"}]}),
            ]
        )
        try:
            result = await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert result.awb_number == "D999"
        assert http.request.call_count == 3
        assert [c[0][0] for c in no_sleep.call_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        patcher, http = mock_http([response(status_code=500, json={})] * 3)
        try:
            with pytest.raises(CourierUnavailableError):
                await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert http.request.call_count == 3

    @pytest.mark.asyncio
    async def test_authentication_failure_not_retried(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        patcher, http = mock_http([response(status_code=401, json={})])
        try:
            with pytest.raises(CourierAuthenticationError):
                await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert http.request.call_count == 1

    @pytest.mark.asyncio
    async def test_client_error_uses_courier_message(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        patcher, _ = mock_http(
            [response(status_code=422, json={"message": "Invalid service type"})]
        )
        try:
            with pytest.raises(CourierRequestError) as exc_info:
                await client.generate_awb(consignment)
        finally:
            patcher.stop()

        assert "Invalid service type" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_missing_credentials(self, consignment: ConsignmentRequest):
        unconfigured = DTDCClient(api_key="", customer_code="")
        unconfigured.api_key = None

        with pytest.raises(CourierNotConfiguredError):
            await unconfigured.generate_awb(consignment)

    @pytest.mark.asyncio
    async def test_incomplete_consignee_rejected_before_request(
        self, client: DTDCClient, consignment: ConsignmentRequest
    ):
        consignment.consignee.phone = "12345"

        with pytest.raises(CourierValidationError) as exc_info:
            await client.generate_awb(consignment)

        assert "phone" in exc_info.value.detail


class TestTrack:
    @pytest.mark.asyncio
    async def test_latest_scan_is_current_status(self, client: DTDCClient):
        patcher, http = mock_http(
            [
                response(
                    json=[
                        {
                            "trackingDetails": [
                                {
                                    "statusCode": "BKD",
                                    "status": "Booked",
                                    "location": "Mumbai",
                                    "statusDateTime": "2024-06-01 10:00",
                                },
                                {
                                    "statusCode": "OFD",
                                    "status": "Out For Delivery",
                                    "location": "New Delhi",
                                    "statusDateTime": "2024-06-03 09:00",
                                },
                            ]
                        }
                    ]
                )
            ]
        )
        try:
            result = await client.track("D12345678")
        finally:
            patcher.stop()

        assert result.current_status == CourierStatus.OUT_FOR_DELIVERY
        assert result.location == "New Delhi"
        assert len(result.history) == 2
        assert http.request.call_args[1]["headers"]["X-Access-Token"] == "track-token"

    @pytest.mark.asyncio
    async def test_no_scans_is_unknown(self, client: DTDCClient):
        patcher, _ = mock_http([response(json=[])])
        try:
            result = await client.track("D12345678")
        finally:
            patcher.stop()

        assert result.current_status == CourierStatus.UNKNOWN
        assert result.description == "No tracking information available"

    @pytest.mark.asyncio
    async def test_non_json_body_raises_courier_error(self, client: DTDCClient):
        patcher, _ = mock_http([response(json=None)])
        try:
            with pytest.raises(CourierRequestError):
                await client.track("D12345678")
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_malformed_record_raises_courier_error(self, client: DTDCClient):
        patcher, _ = mock_http([response(json=["oops"])])
        try:
            with pytest.raises(CourierRequestError):
                await client.track("D12345678")
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_skips_malformed_scans(self, client: DTDCClient):
        patcher, _ = mock_http(
            [
                response(
                    json=[
                        {
                            "trackingDetails": [
                                "garbage",
                                {"statusCode": "DLV", "status": "Delivered"},
                            ]
                        }
                    ]
                )
            ]
        )
        try:
            result = await client.track("D12345678")
        finally:
            patcher.stop()

        assert result.current_status == CourierStatus.DELIVERED
        assert len(result.history) == 1

    @pytest.mark.asyncio
    async def test_requires_tracking_token(self):
        untokened = DTDCClient(api_key="k", customer_code="c")
        untokened.tracking_token = None

        with pytest.raises(CourierNotConfiguredError):
            await untokened.track("D12345678")


class TestOtherOperations:
    @pytest.mark.asyncio
    async def test_cancel_reports_failed_awbs(self, client: DTDCClient):
        patcher, _ = mock_http([response(json={"failed": ["D2"]})])
        try:
            result = await client.cancel(["D1", "D2"])
        finally:
            patcher.stop()

        assert result.cancelled_awbs == ["D1"]
        assert result.failed_awbs == ["D2"]

    @pytest.mark.asyncio
    async def test_fetch_label_returns_pdf_bytes(self, client: DTDCClient):
        patcher, http = mock_http([response(content=b"%PDF-1.4 label")])
        try:
            content = await client.fetch_label("D12345678")
        finally:
            patcher.stop()

        assert content.startswith(b"%PDF")
        assert http.request.call_args[1]["params"]["reference_number"] == "D12345678"

    @pytest.mark.asyncio
    async def test_pincode_serviceable(self, client: DTDCClient):
        patcher, _ = mock_http([response(json={"serviceable": "Y"})])
        try:
            result = await client.check_pincode("110028", "400069")
        finally:
            patcher.stop()

        assert result.serviceable is True
        assert result.estimated_days == 3

    @pytest.mark.asyncio
    async def test_non_json_response_raises(self, client: DTDCClient):
        patcher, _ = mock_http([response(json=None)])
        try:
            with pytest.raises(CourierRequestError):
                await client.check_pincode("110028")
        finally:
            patcher.stop()


class TestMapping:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("In Transit", CourierStatus.IN_TRANSIT),
            ("PICKED_UP", CourierStatus.PICKED_UP),
            ("delivered", CourierStatus.DELIVERED),
            ("RTO", CourierStatus.RETURN_TO_ORIGIN),
            ("Something new", CourierStatus.UNKNOWN),
            (None, CourierStatus.UNKNOWN),
        ],
    )
    def test_map_courier_status(self, raw, expected):
        assert map_courier_status(raw) == expected

    def test_sanitize_phone(self):
        assert sanitize_phone("(981) 000-0002") == "9810000002"
        assert sanitize_phone("98100-00002") == "9810000002"
        assert sanitize_phone("") == ""
