from typing import Any

from fastapi import APIRouter, Body, Depends, status

from portal.api.v1.deps import get_auth_service, get_current_user
from portal.schemas.account_schema import AccountOut
from portal.schemas.auth_schema import LoginOut
from portal.schemas.common import MessageOut
from portal.services.auth_services import AuthService

router = APIRouter(tags=["auth"], prefix="/api/v1/auth")


@router.post("/signup", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
async def signup(payload: Any = Body(None),
                 auth_svc: AuthService = Depends(get_auth_service)):
    return await auth_svc.signup(payload)


@router.post("/login", response_model=LoginOut)
async def login(payload: Any = Body(None),
                auth_svc: AuthService = Depends(get_auth_service)):
    return await auth_svc.login(payload)


@router.post("/refresh", response_model=LoginOut)
async def refresh(payload: Any = Body(None),
                  auth_svc: AuthService = Depends(get_auth_service)):
    return await auth_svc.refresh(payload)


@router.post("/logout", response_model=MessageOut)
async def logout(current_user: AccountOut = Depends(get_current_user),
                 auth_svc: AuthService = Depends(get_auth_service)):
    await auth_svc.logout(current_user.id)
    return MessageOut(message="Logged out")


@router.get("/me", response_model=AccountOut)
async def read_current_user(current_user: AccountOut = Depends(get_current_user)):
    return current_user
