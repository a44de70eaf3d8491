# portal/api/v1/routers.py
from fastapi import APIRouter
from portal.api.v1.endpoints import accounts, auth, profiles

router = APIRouter()

router.include_router(auth.router)
router.include_router(accounts.router)
router.include_router(profiles.router)
