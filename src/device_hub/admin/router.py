"""Admin API router."""

from fastapi import APIRouter, Depends

from device_hub.admin.schemas import ResetRequest
from device_hub.common.schemas import MessageResponse
from device_hub.common.security import actor_id_of, authorize
from device_hub.policy import Operation

router = APIRouter()


@router.post("/admin/reset", response_model=MessageResponse)
async def reset(body: ResetRequest, principal=Depends(authorize(Operation.RESET))):
    from device_hub.deps import get_admin_service, get_db

    svc = get_admin_service()
    svc.check_secret(body.admin_secret)
    await svc.reset(get_db(), actor_id=actor_id_of(principal))
    return MessageResponse(message="Storage reset")
