"""Account API router."""

from fastapi import APIRouter

from device_hub.identity.schemas import (
    ActorResponse,
    LoginRequest,
    SignupRequest,
    TokenResponse,
)
from device_hub.identity.tokens import USER_SCOPE

router = APIRouter()


def _get_service():
    from device_hub.deps import get_identity_service
    return get_identity_service()


def _get_db():
    from device_hub.deps import get_db
    return get_db()


@router.post("/user/signup", response_model=ActorResponse, status_code=201)
async def signup(body: SignupRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        actor = await svc.signup(session, body.username, body.email, body.password)
        return ActorResponse.model_validate(actor)


@router.post("/user/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        token = await svc.login(session, body.email, body.password)
    return TokenResponse(token=token, expires_in=svc.signer.max_age(USER_SCOPE))
