import logging
from typing import Any, Mapping
from uuid import UUID

from portal.core.exceptions import (
    AccountAlreadyExistsException,
    InternalError,
    InvalidCredentialsException,
    TokenInvalidException,
    wraps_unexpected,
)
from portal.core.security import ACCESS_TOKEN, REFRESH_TOKEN, CredentialService
from portal.repositories.account_repo import AccountRepository
from portal.schemas.account_schema import AccountOut, Role
from portal.schemas.auth_schema import LoginIn, LoginOut, RefreshIn, SignupIn
from portal.schemas.common import validate_payload
from portal.services.query_builder import parse_identifier
from portal.utils.normalize import normalize_email

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, account_repo: AccountRepository, credentials: CredentialService):
        self.account_repo = account_repo
        self.credentials = credentials

    @wraps_unexpected("creating user")
    async def signup(self, payload: Mapping[str, Any]) -> AccountOut:
        user_in = validate_payload(SignupIn, payload)
        email = normalize_email(user_in.email)

        # storage-level UNIQUE(email) still guards against concurrent signups
        if await self.account_repo.get_by_email(email):
            raise AccountAlreadyExistsException()

        created = await self.account_repo.create({
            "first_name": user_in.first_name,
            "last_name": user_in.last_name,
            "email": email,
            "password": self.credentials.hash_password(user_in.password),
            "role": Role.USER.value,
        })
        logger.info("Account %s created", created["id"])
        return AccountOut.model_validate(created)

    @wraps_unexpected("logging in user")
    async def login(self, payload: Mapping[str, Any]) -> LoginOut:
        login_in = validate_payload(LoginIn, payload)
        email = normalize_email(login_in.email)

        account = await self.account_repo.get_by_email_with_secrets(email)
        if not account:
            logger.warning("Rejected login attempt")
            raise InvalidCredentialsException()
        if not self.credentials.verify_password(login_in.password, account["password"]):
            logger.warning("Rejected login attempt")
            raise InvalidCredentialsException()

        return await self._start_session(account)

    @wraps_unexpected("refreshing session")
    async def refresh(self, payload: Mapping[str, Any]) -> LoginOut:
        refresh_in = validate_payload(RefreshIn, payload)
        claims = self.credentials.decode_token(refresh_in.refresh_token, REFRESH_TOKEN)
        account_id = parse_identifier(claims["sub"])
        if account_id is None:
            raise TokenInvalidException()

        account = await self.account_repo.get_by_id_with_secrets(account_id)
        # a rotated or cleared session no longer matches the stored value
        if not account or account.get("refresh_token") != refresh_in.refresh_token:
            raise TokenInvalidException()
        return await self._start_session(account)

    @wraps_unexpected("logging out user")
    async def logout(self, account_id: UUID) -> None:
        await self.account_repo.set_refresh_token(account_id, None)

    @wraps_unexpected("resolving current user")
    async def current_account(self, token: str) -> AccountOut:
        claims = self.credentials.decode_token(token, ACCESS_TOKEN)
        account_id = parse_identifier(claims["sub"])
        if account_id is None:
            raise TokenInvalidException()
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise TokenInvalidException()
        return AccountOut.model_validate(account)

    async def _start_session(self, account: dict) -> LoginOut:
        user = AccountOut.model_validate(account)
        try:
            tokens = self.credentials.issue_tokens(account)
        except Exception:
            logger.exception("Token issuance failed for account %s", account["id"])
            raise InternalError("Failed to generate authentication tokens")

        # only persisted once both tokens exist
        await self.account_repo.set_refresh_token(account["id"], tokens.refresh_token)
        logger.info("Session started for account %s", account["id"])
        return LoginOut(
            user=user,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
