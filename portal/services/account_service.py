import logging
from typing import Any, Mapping, Optional

from portal.core.exceptions import BadRequestError, InternalError, NotFoundError, wraps_unexpected
from portal.repositories.account_repo import AccountRepository
from portal.schemas.account_schema import AccountOut, AccountUpdate
from portal.schemas.common import MessageOut, Page, PageMeta, validate_payload
from portal.services.query_builder import FilterField, build_list_query, parse_identifier
from portal.utils.normalize import normalize_phone

logger = logging.getLogger(__name__)

ACCOUNT_FILTERS = {
    "firstName": FilterField("first_name"),
    "lastName": FilterField("last_name"),
    "phone": FilterField("phone"),
    "email": FilterField("email"),
}

ACCOUNT_SORTS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "role": "role",
}

# may be cleared by sending null
NULLABLE_FIELDS = ("phone", "avatar")


def require_ids(payload: Any, label: str) -> list:
    ids = payload.get("ids") if isinstance(payload, Mapping) else None
    if not isinstance(ids, list) or not ids:
        raise BadRequestError("'ids' must be a non-empty array")
    invalid = [str(i) for i in ids if parse_identifier(i) is None]
    if invalid:
        raise BadRequestError(f"Invalid {label} Id(s): {', '.join(invalid)}")
    return list(dict.fromkeys(parse_identifier(i) for i in ids))


class AccountService:
    def __init__(self, account_repo: AccountRepository, default_limit: int = 10, max_limit: int = 100):
        self.account_repo = account_repo
        self.default_limit = default_limit
        self.max_limit = max_limit

    @staticmethod
    def _account_id(raw: Any):
        account_id = parse_identifier(raw)
        if account_id is None:
            raise BadRequestError("Invalid User ID or format")
        return account_id

    @wraps_unexpected("fetching user")
    async def get_account(self, raw_id: Any) -> AccountOut:
        account = await self.account_repo.get_by_id(self._account_id(raw_id))
        if not account:
            raise NotFoundError("User does not exist")
        return AccountOut.model_validate(account)

    @wraps_unexpected("getting all users")
    async def list_accounts(
        self, filters: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None
    ) -> Page[AccountOut]:
        query = build_list_query(
            filters, ACCOUNT_FILTERS, options, ACCOUNT_SORTS,
            default_limit=self.default_limit, max_limit=self.max_limit,
        )
        records = await self.account_repo.list(query)
        total = await self.account_repo.count(query)
        return Page[AccountOut](
            meta=PageMeta(total=total, page=query.page, limit=query.limit),
            data=[AccountOut.model_validate(r) for r in records],
        )

    @wraps_unexpected("updating user")
    async def update_account(self, raw_id: Any, payload: Mapping[str, Any]) -> AccountOut:
        account_id = self._account_id(raw_id)
        if not isinstance(payload, Mapping):
            raise BadRequestError("Request body must be a JSON object.")
        if "email" in payload:
            raise BadRequestError("You cannot change your registered email")
        if "password" in payload:
            raise BadRequestError("Password cannot be changed through a profile update")

        if not await self.account_repo.get_by_id(account_id):
            raise NotFoundError("User not found")

        update_in = validate_payload(AccountUpdate, payload)
        changes = {
            key: value
            for key, value in update_in.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if changes.get("phone"):
            changes["phone"] = normalize_phone(changes["phone"])

        updated = await self.account_repo.update(account_id, changes)
        if not updated:
            raise NotFoundError("User not found")
        return AccountOut.model_validate(updated)

    @wraps_unexpected("deleting the user")
    async def delete_account(self, raw_id: Any) -> MessageOut:
        account_id = self._account_id(raw_id)
        if not await self.account_repo.get_by_id(account_id):
            raise NotFoundError("User not found")
        await self.account_repo.delete(account_id)
        logger.info("Account %s deleted", account_id)
        return MessageOut(message="User deleted successfully")

    @wraps_unexpected("deleting the users")
    async def delete_accounts(self, payload: Mapping[str, Any]) -> MessageOut:
        account_ids = require_ids(payload, "User")
        existing = await self.account_repo.find_existing_ids(account_ids)
        if len(existing) != len(account_ids):
            raise NotFoundError("One or more user IDs do not exist")

        deleted = await self.account_repo.delete_many(account_ids)
        if deleted != len(account_ids):
            raise InternalError("Some users could not be deleted")
        logger.info("%d accounts deleted", deleted)
        return MessageOut(message=f"{deleted} users deleted successfully")
