"""Device API router: registration, power control and read views."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from device_hub.audit.schemas import ChainVerification, HistoryEntryResponse, HistoryResponse
from device_hub.common.security import actor_id_of, authorize
from device_hub.devices.schemas import (
    DeviceOverviewResponse,
    DeviceRegisterRequest,
    DeviceResponse,
    DeviceStatusResponse,
    DeviceTokenRequest,
    DeviceTokenResponse,
    PowerRequest,
)
from device_hub.identity.tokens import DEVICE_SCOPE
from device_hub.policy import Operation

router = APIRouter()


def _get_registry():
    from device_hub.deps import get_device_registry
    return get_device_registry()


def _get_queries():
    from device_hub.deps import get_device_queries
    return get_device_queries()


def _get_db():
    from device_hub.deps import get_db
    return get_db()


def _page_size(limit: Optional[int]) -> int:
    from device_hub.common.config import get_settings

    settings = get_settings()
    if limit is None:
        return settings.default_page_size
    return min(limit, settings.max_page_size)


# ── Mutations ──

@router.post("/device/register", response_model=DeviceResponse, status_code=201)
async def register_device(
    body: DeviceRegisterRequest,
    principal=Depends(authorize(Operation.REGISTER)),
):
    registry = _get_registry()
    db = _get_db()
    async with db.get_session() as session:
        device = await registry.register_or_update(
            session, body.enroll_id, body.name, body.value,
            actor_id=actor_id_of(principal),
        )
        return DeviceResponse.model_validate(device)


@router.post("/device/turn-on", response_model=DeviceResponse)
async def turn_on(
    body: PowerRequest,
    principal=Depends(authorize(Operation.TURN_ON)),
):
    registry = _get_registry()
    db = _get_db()
    async with db.get_session() as session:
        device = await registry.turn_on(
            session, body.enroll_id, actor_id=actor_id_of(principal),
        )
        return DeviceResponse.model_validate(device)


@router.post("/device/turn-off", response_model=DeviceResponse)
async def turn_off(
    body: PowerRequest,
    principal=Depends(authorize(Operation.TURN_OFF)),
):
    registry = _get_registry()
    db = _get_db()
    async with db.get_session() as session:
        device = await registry.turn_off(
            session, body.enroll_id, actor_id=actor_id_of(principal),
        )
        return DeviceResponse.model_validate(device)


@router.post("/device/token", response_model=DeviceTokenResponse)
async def issue_device_token(
    body: DeviceTokenRequest,
    _=Depends(authorize(Operation.ISSUE_DEVICE_TOKEN)),
):
    from device_hub.deps import get_identity_service

    svc = get_identity_service()
    token = svc.issue_device_token(body.enroll_id, body.name)
    return DeviceTokenResponse(token=token, expires_in=svc.signer.max_age(DEVICE_SCOPE))


# ── Reads ──

@router.get("/devices", response_model=list[DeviceResponse])
async def list_devices(_=Depends(authorize(Operation.LIST))):
    queries = _get_queries()
    db = _get_db()
    async with db.get_session() as session:
        devices = await queries.list_all(session)
        return [DeviceResponse.model_validate(d) for d in devices]


@router.get("/device/status/{enroll_id}", response_model=DeviceStatusResponse)
async def device_status(enroll_id: str, _=Depends(authorize(Operation.STATUS))):
    queries = _get_queries()
    db = _get_db()
    async with db.get_session() as session:
        device = await queries.status(session, enroll_id)
        return DeviceStatusResponse.model_validate(device)


@router.get("/device/logs/{enroll_id}", response_model=HistoryResponse)
async def device_logs(
    enroll_id: str,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    _=Depends(authorize(Operation.HISTORY)),
):
    queries = _get_queries()
    db = _get_db()
    async with db.get_session() as session:
        rows = await queries.history(
            session, enroll_id, limit=_page_size(limit), offset=offset,
        )
        return HistoryResponse(
            enroll_id=enroll_id,
            entries=[HistoryEntryResponse(**r._asdict()) for r in rows],
        )


@router.get("/device/logs/{enroll_id}/verify", response_model=ChainVerification)
async def verify_device_logs(enroll_id: str, _=Depends(authorize(Operation.HISTORY))):
    queries = _get_queries()
    db = _get_db()
    async with db.get_session() as session:
        result = await queries.verify_history(session, enroll_id)
        return ChainVerification(**result)


@router.get("/device/{enroll_id}", response_model=DeviceOverviewResponse)
async def device_overview(
    enroll_id: str,
    limit: int = Query(10, ge=1),
    _=Depends(authorize(Operation.STATUS)),
):
    queries = _get_queries()
    db = _get_db()
    async with db.get_session() as session:
        view = await queries.overview(session, enroll_id, limit=_page_size(limit))
        return DeviceOverviewResponse(
            device=DeviceResponse.model_validate(view["device"]),
            entries=[HistoryEntryResponse(**r._asdict()) for r in view["entries"]],
        )
