from fastapi import APIRouter, Depends
from prisma.models import User

from spareflow.domains.courier.client import DTDCClient, get_courier_client
from spareflow.domains.courier.types import PincodeCheckRequest, PincodeCheckResult
from spareflow.shared.permissions import Permission, require_permission

router = APIRouter(prefix="/courier", tags=["Courier"])


@router.post(
    "/pincode-check",
    response_model=PincodeCheckResult,
    operation_id="checkPincodeServiceability",
)
async def check_pincode(
    request: PincodeCheckRequest,
    user: User = Depends(require_permission(Permission.ESTIMATE_COST)),
    courier: DTDCClient = Depends(get_courier_client),
) -> PincodeCheckResult:
    """
    Check whether DTDC delivers to a pincode

    The origin defaults to the warehouse pincode.
    """
    return await courier.check_pincode(
        request.destination_pincode, request.origin_pincode
    )
