from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from portal.api.v1.deps import get_profile_service
from portal.api.v1.endpoints.accounts import PAGINATION_KEYS, pick
from portal.schemas.common import MessageOut, Page
from portal.schemas.profile_schema import ProfileOut
from portal.services.profile_service import PROFILE_FILTERS, ProfileService

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def create_profile(payload: Any = Body(None),
                         svc: ProfileService = Depends(get_profile_service)):
    return await svc.create_profile(payload)


@router.get("", response_model=Page[ProfileOut])
async def list_profiles(request: Request, svc: ProfileService = Depends(get_profile_service)):
    params = request.query_params
    return await svc.list_profiles(pick(params, PROFILE_FILTERS), pick(params, PAGINATION_KEYS))


@router.get("/{profile_id}", response_model=ProfileOut)
async def get_profile(profile_id: str, svc: ProfileService = Depends(get_profile_service)):
    return await svc.get_profile(profile_id)


@router.patch("/{profile_id}", response_model=ProfileOut)
async def update_profile(profile_id: str,
                         payload: Any = Body(None),
                         svc: ProfileService = Depends(get_profile_service)):
    return await svc.update_profile(profile_id, payload)


@router.delete("/{profile_id}", response_model=MessageOut)
async def delete_profile(profile_id: str, svc: ProfileService = Depends(get_profile_service)):
    return await svc.delete_profile(profile_id)


@router.delete("", response_model=MessageOut)
async def delete_profiles(payload: Any = Body(None),
                          svc: ProfileService = Depends(get_profile_service)):
    return await svc.delete_profiles(payload)
