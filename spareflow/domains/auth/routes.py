# spareflow/domains/auth/routes.py
from fastapi import APIRouter, Depends
from prisma.models import User

from prisma import Prisma
from spareflow.core.database import get_db
from spareflow.domains.auth.dependencies import get_current_user
from spareflow.domains.auth.models import SessionState
from spareflow.domains.auth.service import SessionService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get(
    "/me",
    response_model=SessionState,
    operation_id="getSessionState",
)
async def get_session_state(
    user: User = Depends(get_current_user), db: Prisma = Depends(get_db)
) -> SessionState:
    service = SessionService(db)
    return await service.get_session_state(user)
