from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from asyncpg import Connection

from portal.core.config import settings
from portal.core.exceptions import TokenInvalidException
from portal.core.security import CredentialService
from portal.db.session import get_db_connection
from portal.repositories.account_repo import AccountRepository
from portal.repositories.profile_repo import ProfileRepository
from portal.schemas.account_schema import AccountOut
from portal.services.account_service import AccountService
from portal.services.auth_services import AuthService
from portal.services.profile_service import ProfileService

bearer_scheme = HTTPBearer(auto_error=False)


def get_account_repo(conn: Connection = Depends(get_db_connection)) -> AccountRepository:
    return AccountRepository(conn)


def get_profile_repo(conn: Connection = Depends(get_db_connection)) -> ProfileRepository:
    return ProfileRepository(conn)


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_auth_service(
        account_repo: AccountRepository = Depends(get_account_repo),
        credentials: CredentialService = Depends(get_credential_service),
) -> AuthService:
    return AuthService(account_repo, credentials)


def get_account_service(account_repo: AccountRepository = Depends(get_account_repo)) -> AccountService:
    return AccountService(account_repo, settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


def get_profile_service(
        profile_repo: ProfileRepository = Depends(get_profile_repo),
        account_repo: AccountRepository = Depends(get_account_repo),
) -> ProfileService:
    return ProfileService(profile_repo, account_repo, settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


async def get_current_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        auth_svc: AuthService = Depends(get_auth_service),
) -> AccountOut:
    if credentials is None:
        raise TokenInvalidException()
    return await auth_svc.current_account(credentials.credentials)
