import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from spareflow.core.settings import settings

from .exceptions import (
    CourierAuthenticationError,
    CourierNotConfiguredError,
    CourierRequestError,
    CourierUnavailableError,
)
from .mapping import (
    map_courier_status,
    sanitize_phone,
    tracking_url,
    validate_consignment,
)
from .types import (
    AwbResult,
    CancellationResult,
    ConsignmentRequest,
    CourierStatus,
    PincodeCheckResult,
    TrackingEvent,
    TrackingResult,
)

logger = logging.getLogger(__name__)

MIN_WEIGHT_KG = 0.1
MIN_DECLARED_VALUE = Decimal("100")


class DTDCClient:
    """
    Client for the DTDC customer integration APIs.

    Booking, label, cancellation and tracking calls retry on network errors
    and 5xx responses with exponential back-off. Authentication failures and
    rejected payloads are raised immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        customer_code: Optional[str] = None,
        tracking_token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.api_key = api_key or settings.DTDC_API_KEY
        self.customer_code = customer_code or settings.DTDC_CUSTOMER_CODE
        self.tracking_token = tracking_token or settings.DTDC_TRACKING_ACCESS_TOKEN
        self.timeout = timeout or settings.DTDC_TIMEOUT
        self.max_retries = max(1, max_retries or settings.DTDC_MAX_RETRIES)

        self.softdata_url = (
            f"{settings.DTDC_BASE_URL}/api/customer/integration/consignment/softdata"
        )
        self.label_url = (
            f"{settings.DTDC_BASE_URL}/api/customer/integration/consignment/"
            "shippinglabel/stream"
        )
        self.cancel_url = (
            f"{settings.DTDC_BASE_URL}/api/customer/integration/consignment/cancel"
        )
        self.tracking_url = settings.DTDC_TRACKING_URL
        self.pincode_url = settings.DTDC_PINCODE_URL

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.customer_code)

    def _booking_headers(self) -> Dict[str, str]:
        if not self.is_configured:
            raise CourierNotConfiguredError(
                "DTDC_API_KEY and DTDC_CUSTOMER_CODE must be set"
            )
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "api-key": str(self.api_key),
        }

    async def generate_awb(self, consignment: ConsignmentRequest) -> AwbResult:
        """
        Book a consignment and obtain its AWB number.

        Args:
            consignment: Consignee, weight, pieces and reference details

        Returns:
            AwbResult with the AWB number and public tracking URL

        Raises:
            CourierValidationError: If consignee details are incomplete
            CourierNotConfiguredError: If credentials are missing
            CourierAuthenticationError: If DTDC rejects the credentials
            CourierRequestError: If DTDC rejects the consignment
            CourierUnavailableError: If DTDC cannot be reached after retries
        """
        validate_consignment(consignment)
        headers = self._booking_headers()
        payload = {"consignments": [self._consignment_payload(consignment)]}

        response = await self._request(
            "POST", self.softdata_url, "AWB generation", headers=headers, json=payload
        )
        body = self._json(response)

        records = body.get("data") or []
        first = records[0] if records else {}
        if not body.get("success") or first.get("success") is False:
            message = first.get("message") or body.get("message") or "no AWB returned"
            raise CourierRequestError(f"DTDC did not book the consignment: {message}")

        awb_number = (
            first.get("reference_number")
            or first.get("awbNumber")
            or first.get("referenceNumber")
        )
        if not awb_number:
            raise CourierRequestError("DTDC response did not contain an AWB number")

        logger.info(
            f"DTDC AWB {awb_number} generated for {consignment.reference_number}"
        )
        return AwbResult(
            awb_number=str(awb_number),
            reference_number=consignment.reference_number,
            tracking_url=tracking_url(str(awb_number)),
        )

    async def fetch_label(self, awb_number: str) -> bytes:
        """Download DTDC's own 4x6 PDF label for an AWB."""
        headers = self._booking_headers()
        headers["Accept"] = "application/pdf"
        response = await self._request(
            "GET",
            self.label_url,
            "label download",
            headers=headers,
            params={
                "reference_number": awb_number,
                "label_code": "SHIP_LABEL_4X6",
                "label_format": "pdf",
            },
        )
        return response.content

    async def cancel(self, awb_numbers: List[str]) -> CancellationResult:
        headers = self._booking_headers()
        response = await self._request(
            "POST",
            self.cancel_url,
            "cancellation",
            headers=headers,
            json={"AWBNo": awb_numbers, "customerCode": self.customer_code},
        )
        body = self._json(response)
        failed = [str(awb) for awb in body.get("failed") or []]
        cancelled = body.get("cancelled")
        if cancelled is None:
            cancelled = [awb for awb in awb_numbers if awb not in failed]
        return CancellationResult(
            cancelled_awbs=[str(awb) for awb in cancelled], failed_awbs=failed
        )

    async def track(self, awb_number: str) -> TrackingResult:
        """
        Fetch the scan history of an AWB.

        Raises:
            CourierNotConfiguredError: If no tracking token is configured
        """
        if not self.tracking_token:
            raise CourierNotConfiguredError("DTDC_TRACKING_ACCESS_TOKEN must be set")

        response = await self._request(
            "POST",
            self.tracking_url,
            "tracking",
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-Access-Token": self.tracking_token,
            },
            json={"trkType": "cnno", "strcnno": awb_number, "addtnlDtl": "Y"},
        )
        body = self._parse(response)
        record = body[0] if isinstance(body, list) and body else {}
        if not isinstance(record, dict):
            raise CourierRequestError("DTDC returned an unexpected tracking response")

        history = [
            TrackingEvent(
                scan_code=str(event.get("statusCode") or "UNK"),
                status=map_courier_status(event.get("status")),
                location=event.get("location") or "Unknown",
                timestamp=event.get("statusDateTime") or "",
                description=event.get("statusDescription")
                or event.get("status")
                or "Status update",
            )
            for event in record.get("trackingDetails") or []
            if isinstance(event, dict)
        ]
        if not history:
            return TrackingResult(
                awb_number=awb_number,
                current_status=CourierStatus.UNKNOWN,
                description="No tracking information available",
            )

        latest = history[-1]
        return TrackingResult(
            awb_number=awb_number,
            current_status=latest.status,
            location=latest.location,
            timestamp=latest.timestamp,
            description=latest.description,
            history=history,
        )

    async def check_pincode(
        self, destination_pincode: str, origin_pincode: Optional[str] = None
    ) -> PincodeCheckResult:
        origin = origin_pincode or settings.WAREHOUSE_PINCODE
        response = await self._request(
            "POST",
            self.pincode_url,
            "pincode check",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            json={"orgPincode": origin, "desPincode": destination_pincode},
        )
        body = self._json(response)
        serviceable = body.get("serviceable") in ("Y", "y", True)
        return PincodeCheckResult(
            origin_pincode=origin,
            destination_pincode=destination_pincode,
            serviceable=serviceable,
            estimated_days=(body.get("estimated_days") or 3) if serviceable else None,
        )

    def _consignment_payload(self, consignment: ConsignmentRequest) -> Dict[str, Any]:
        consignee = consignment.consignee
        weight = max(consignment.weight, MIN_WEIGHT_KG)
        declared_value = max(consignment.declared_value, MIN_DECLARED_VALUE)
        reference = consignment.reference_number
        origin = {
            "name": settings.WAREHOUSE_NAME,
            "phone": settings.WAREHOUSE_PHONE,
            "alternate_phone": settings.WAREHOUSE_PHONE,
            "address_line_1": settings.WAREHOUSE_ADDRESS,
            "address_line_2": "",
            "pincode": settings.WAREHOUSE_PINCODE,
            "city": settings.WAREHOUSE_CITY,
            "state": settings.WAREHOUSE_STATE,
        }
        return {
            "customer_code": self.customer_code,
            "service_type_id": settings.DTDC_SERVICE_TYPE,
            "load_type": "NON-DOCUMENT",
            "description": consignment.description,
            "dimension_unit": "cm",
            "length": f"{consignment.length:.1f}",
            "width": f"{consignment.breadth:.1f}",
            "height": f"{consignment.height:.1f}",
            "weight_unit": "kg",
            "weight": f"{weight:.2f}",
            "declared_value": str(declared_value),
            "num_pieces": str(consignment.pieces),
            "commodity_id": settings.DTDC_COMMODITY_ID,
            "origin_details": origin,
            "destination_details": {
                "name": consignee.name[:50],
                "phone": sanitize_phone(consignee.phone),
                "alternate_phone": "",
                "address_line_1": consignee.address[:100],
                "address_line_2": "",
                "pincode": consignee.pincode,
                "city": consignee.city,
                "state": consignee.state,
            },
            "return_details": {
                **origin,
                "city_name": origin["city"],
                "state_name": origin["state"],
            },
            "customer_reference_number": reference,
            "cod_collection_mode": "CASH" if consignment.cod_amount else "",
            "cod_amount": str(consignment.cod_amount) if consignment.cod_amount else "",
            "eway_bill": "",
            "is_risk_surcharge_applicable": "false",
            "invoice_number": reference,
            "invoice_date": date.today().isoformat(),
            "reference_number": reference,
        }

    async def _request(
        self,
        method: str,
        url: str,
        operation: str,
        headers: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        last_error = "no response"

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, headers=headers, json=json, params=params
                    )
            except httpx.RequestError as e:
                last_error = str(e) or type(e).__name__
                logger.warning(
                    f"DTDC {operation} attempt {attempt + 1}/{self.max_retries} "
                    f"failed: {last_error}"
                )
            else:
                if response.status_code in (401, 403):
                    raise CourierAuthenticationError(
                        f"DTDC {operation} authentication failed "
                        f"(HTTP {response.status_code})"
                    )
                if response.status_code >= 500:
                    last_error = f"HTTP {response.status_code}"
                    logger.warning(
                        f"DTDC {operation} attempt {attempt + 1}/{self.max_retries} "
                        f"failed: {last_error}"
                    )
                elif response.status_code >= 400:
                    raise CourierRequestError(
                        f"DTDC rejected {operation}: {self._error_message(response)}"
                    )
                else:
                    return response

            if attempt < self.max_retries - 1:
                await asyncio.sleep(2**attempt)

        raise CourierUnavailableError(
            f"DTDC {operation} failed after {self.max_retries} attempts: {last_error}"
        )

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            raise CourierRequestError("DTDC returned a non-JSON response")

    @classmethod
    def _json(cls, response: httpx.Response) -> Dict[str, Any]:
        body = cls._parse(response)
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text[:200]


def get_courier_client() -> DTDCClient:
    """Courier client dependency for FastAPI dependency injection."""
    return DTDCClient()
