from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from portal.api.v1.deps import get_account_service
from portal.schemas.account_schema import AccountOut
from portal.schemas.common import MessageOut, Page
from portal.services.account_service import ACCOUNT_FILTERS, AccountService

router = APIRouter(prefix="/api/v1/users", tags=["users"])

PAGINATION_KEYS = ("page", "limit", "sortBy", "sortOrder")


def pick(params, keys) -> Dict[str, Any]:
    return {key: params[key] for key in keys if key in params}


@router.get("", response_model=Page[AccountOut])
async def list_users(request: Request, svc: AccountService = Depends(get_account_service)):
    params = request.query_params
    return await svc.list_accounts(pick(params, ACCOUNT_FILTERS), pick(params, PAGINATION_KEYS))


@router.get("/{user_id}", response_model=AccountOut)
async def get_user(user_id: str, svc: AccountService = Depends(get_account_service)):
    return await svc.get_account(user_id)


@router.patch("/{user_id}", response_model=AccountOut)
async def update_user(user_id: str,
                      payload: Any = Body(None),
                      svc: AccountService = Depends(get_account_service)):
    return await svc.update_account(user_id, payload)


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(user_id: str, svc: AccountService = Depends(get_account_service)):
    return await svc.delete_account(user_id)


@router.delete("", response_model=MessageOut)
async def delete_users(payload: Any = Body(None),
                       svc: AccountService = Depends(get_account_service)):
    return await svc.delete_accounts(payload)
