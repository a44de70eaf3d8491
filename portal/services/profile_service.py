import logging
from typing import Any, Mapping, Optional

from portal.core.exceptions import BadRequestError, InternalError, NotFoundError, wraps_unexpected
from portal.repositories.account_repo import AccountRepository
from portal.repositories.profile_repo import ProfileRepository
from portal.schemas.common import MessageOut, Page, PageMeta, validate_payload
from portal.schemas.profile_schema import (
    PROFILE_IMMUTABLE_FIELDS,
    ProfileCreate,
    ProfileOut,
    ProfileUpdate,
    check_nid_requirement,
)
from portal.services.account_service import require_ids
from portal.services.query_builder import IDENTIFIER, FilterField, build_list_query, parse_identifier
from portal.utils.normalize import normalize_email

logger = logging.getLogger(__name__)

PROFILE_FILTERS = {
    "userId": FilterField("user_id", IDENTIFIER),
    "name": FilterField("name"),
    "email": FilterField("email"),
    "mobile": FilterField("mobile"),
}

PROFILE_SORTS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
    "email": "email",
    "dob": "dob",
}

NULLABLE_FIELDS = ("nid_no", "breg", "passport", "dep_status")


class ProfileService:
    """Applicant profiles; each one belongs to exactly one account."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        account_repo: AccountRepository,
        default_limit: int = 10,
        max_limit: int = 100,
    ):
        self.profile_repo = profile_repo
        self.account_repo = account_repo
        self.default_limit = default_limit
        self.max_limit = max_limit

    @staticmethod
    def _profile_id(raw: Any):
        profile_id = parse_identifier(raw)
        if profile_id is None:
            raise BadRequestError("Invalid profile ID format")
        return profile_id

    @wraps_unexpected("creating the profile")
    async def create_profile(self, payload: Mapping[str, Any]) -> ProfileOut:
        profile_in = validate_payload(ProfileCreate, payload)

        owner_id = parse_identifier(profile_in.user_id)
        if owner_id is None:
            raise BadRequestError("Invalid userId or format.")
        if not await self.account_repo.exists(owner_id):
            raise NotFoundError("User not found for the provided userId.")

        data = profile_in.model_dump()
        data["user_id"] = owner_id
        data["email"] = normalize_email(data["email"])
        created = await self.profile_repo.create(data)
        logger.info("Profile %s created for account %s", created["id"], owner_id)
        return ProfileOut.model_validate(created)

    @wraps_unexpected("getting all profiles")
    async def list_profiles(
        self, filters: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None
    ) -> Page[ProfileOut]:
        query = build_list_query(
            filters, PROFILE_FILTERS, options, PROFILE_SORTS,
            default_limit=self.default_limit, max_limit=self.max_limit,
        )
        records = await self.profile_repo.list(query)
        total = await self.profile_repo.count(query)
        return Page[ProfileOut](
            meta=PageMeta(total=total, page=query.page, limit=query.limit),
            data=[ProfileOut.model_validate(r) for r in records],
        )

    @wraps_unexpected("fetching the profile")
    async def get_profile(self, raw_id: Any) -> ProfileOut:
        profile = await self.profile_repo.get_by_id(self._profile_id(raw_id))
        if not profile:
            raise NotFoundError("Profile not found")
        return ProfileOut.model_validate(profile)

    @wraps_unexpected("updating the profile")
    async def update_profile(self, raw_id: Any, payload: Mapping[str, Any]) -> ProfileOut:
        profile_id = self._profile_id(raw_id)
        if not isinstance(payload, Mapping):
            raise BadRequestError("Request body must be a JSON object.")
        if any(field in payload for field in PROFILE_IMMUTABLE_FIELDS):
            raise BadRequestError("You cannot update userId")

        update_in = validate_payload(ProfileUpdate, payload)
        changes = {
            key: value
            for key, value in update_in.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if changes.get("email"):
            changes["email"] = normalize_email(changes["email"])

        existing = await self.profile_repo.get_by_id(profile_id)
        if not existing:
            raise NotFoundError("Profile not found")
        merged = {**existing, **changes}
        try:
            check_nid_requirement(merged.get("nid"), merged.get("nid_no"))
        except ValueError as exc:
            raise BadRequestError(str(exc))

        updated = await self.profile_repo.update(profile_id, changes)
        if not updated:
            raise NotFoundError("Profile not found")
        return ProfileOut.model_validate(updated)

    @wraps_unexpected("deleting the profile")
    async def delete_profile(self, raw_id: Any) -> MessageOut:
        profile_id = self._profile_id(raw_id)
        if not await self.profile_repo.get_by_id(profile_id):
            raise NotFoundError("Profile not found")
        await self.profile_repo.delete(profile_id)
        return MessageOut(message="Profile deleted successfully")

    @wraps_unexpected("deleting profiles")
    async def delete_profiles(self, payload: Mapping[str, Any]) -> MessageOut:
        profile_ids = require_ids(payload, "Profile")
        existing = await self.profile_repo.find_existing_ids(profile_ids)
        if len(existing) != len(profile_ids):
            raise NotFoundError("Given Profile IDs do not exist")

        deleted = await self.profile_repo.delete_many(profile_ids)
        if deleted != len(profile_ids):
            raise InternalError("Some Profile could not be deleted")
        logger.info("%d profiles deleted", deleted)
        return MessageOut(message=f"{deleted} Profile deleted successfully")
