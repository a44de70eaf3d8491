import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from portal.core.config import Settings
from portal.core.exceptions import TokenExpiredException, TokenInvalidException

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class MalformedDigestError(ValueError):
    """The stored digest is not something the hasher can parse."""


class TokenIssueError(RuntimeError):
    """Signing a token failed."""


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _pre_digest(password: str) -> str:
    # bcrypt only reads the first 72 bytes of its input
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class CredentialService:
    """Password hashing plus JWT issuance and verification.

    Built once at start-up from :class:`Settings`; the signing secret is
    handed in here and never read from module state afterwards.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=60),
        refresh_ttl: timedelta = timedelta(days=7),
        bcrypt_rounds: int = 12,
    ):
        if not secret_key:
            raise ValueError("Token signing secret is not configured.")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )

    # ------------------ Passwords ------------------ #

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(_pre_digest(password))

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        if not hashed_password:
            raise MalformedDigestError("Stored password digest is empty.")
        try:
            return self.pwd_context.verify(_pre_digest(plain_password), hashed_password)
        except (ValueError, TypeError) as exc:
            raise MalformedDigestError(str(exc)) from exc

    # ------------------ Tokens ------------------ #

    def _encode(self, claims: dict) -> str:
        try:
            return jwt.encode(claims, self._secret_key, algorithm=self.algorithm)
        except (JWTError, TypeError, ValueError) as exc:
            raise TokenIssueError(str(exc)) from exc

    def create_access_token(self, account_id: str, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        return self._encode({
            "sub": str(account_id),
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN,
            "iat": now,
            "exp": now + self.access_ttl,
        })

    def create_refresh_token(self, account_id: str) -> str:
        now = datetime.now(timezone.utc)
        return self._encode({
            "sub": str(account_id),
            "type": REFRESH_TOKEN,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.refresh_ttl,
        })

    def issue_tokens(self, account: dict) -> TokenPair:
        """Access token carries identity claims; refresh token only the subject."""
        return TokenPair(
            access_token=self.create_access_token(account["id"], account["email"], account["role"]),
            refresh_token=self.create_refresh_token(account["id"]),
        )

    def decode_token(self, token: str, token_type: str = ACCESS_TOKEN) -> dict:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError:
            raise TokenInvalidException()
        if payload.get("type") != token_type or not payload.get("sub"):
            raise TokenInvalidException()
        return payload
