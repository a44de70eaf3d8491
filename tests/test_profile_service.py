import uuid

import pytest

from portal.core.exceptions import BadRequestError, NotFoundError


@pytest.fixture()
async def owner(auth_service, signup_payload):
    return await auth_service.signup(signup_payload)


@pytest.fixture()
async def profile(profile_service, profile_payload, owner):
    return await profile_service.create_profile(dict(profile_payload, userId=str(owner.id)))


async def test_create_profile_without_nid_number_when_flag_clear(profile, owner, profile_repo):
    assert profile.user_id == owner.id
    assert profile.nid == "0"
    assert profile.nid_no is None
    assert profile.mobile == profile.confirm_mobile == "8801712345678"
    assert profile.id in profile_repo.rows


async def test_create_profile_requires_nid_number_when_flag_set(profile_service, profile_payload, owner, profile_repo):
    with pytest.raises(BadRequestError):
        await profile_service.create_profile(dict(profile_payload, userId=str(owner.id), nid="1"))

    assert profile_repo.rows == {}


async def test_create_profile_with_nid_number(profile_service, profile_payload, owner):
    created = await profile_service.create_profile(
        dict(profile_payload, userId=str(owner.id), nid="1", nid_no="1234567890")
    )

    assert created.nid_no == "1234567890"


async def test_create_profile_checks_owner(profile_service, profile_payload):
    with pytest.raises(BadRequestError) as bad:
        await profile_service.create_profile(dict(profile_payload, userId="abc"))
    with pytest.raises(NotFoundError):
        await profile_service.create_profile(dict(profile_payload, userId=str(uuid.uuid4())))

    assert bad.value.message == "Invalid userId or format."


async def test_profile_output_uses_public_names(profile):
    dumped = profile.model_dump(by_alias=True, mode="json")

    assert dumped["userId"]
    assert dumped["id"]
    assert "user_id" not in dumped
    assert dumped["present_address"]["postcode"] == "1217"
    assert dumped["ssc"]["result"] == 5.0


async def test_update_rejects_owner_change(profile_service, profile):
    with pytest.raises(BadRequestError) as exc_info:
        await profile_service.update_profile(profile.id, {"userId": str(uuid.uuid4())})

    assert exc_info.value.message == "You cannot update userId"


async def test_partial_update_revalidates_supplied_fields(profile_service, profile):
    with pytest.raises(BadRequestError):
        await profile_service.update_profile(profile.id, {"confirm_mobile": "123"})

    updated = await profile_service.update_profile(profile.id, {"religion": "Hinduism", "mobile": "01812345678"})
    assert updated.religion == "Hinduism"
    assert updated.mobile == "8801812345678"
    assert updated.name == profile.name


async def test_update_checks_nid_rule_against_stored_record(profile_service, profile):
    with pytest.raises(BadRequestError) as exc_info:
        await profile_service.update_profile(profile.id, {"nid": "1"})
    assert "NID number is required" in exc_info.value.message

    updated = await profile_service.update_profile(profile.id, {"nid": "1", "nid_no": "9876543210"})
    assert updated.nid == "1"


async def test_get_and_update_unknown_profile(profile_service):
    with pytest.raises(BadRequestError):
        await profile_service.get_profile("12")
    with pytest.raises(NotFoundError):
        await profile_service.get_profile(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await profile_service.update_profile(uuid.uuid4(), {"religion": "Islam"})


async def test_list_profiles_filters_by_owner(profile_service, profile_repo, profile, owner):
    page = await profile_service.list_profiles({"userId": str(owner.id), "gender": "Male"})

    query = profile_repo.queries[-1]
    assert query.where == "user_id = $1"
    assert query.args == [owner.id]
    assert page.meta.total == 1
    assert page.data[0].id == profile.id


async def test_delete_profiles(profile_service, profile_repo, profile_payload, owner, profile):
    second = await profile_service.create_profile(dict(profile_payload, userId=str(owner.id)))

    single = await profile_service.delete_profile(str(profile.id))
    assert single.message == "Profile deleted successfully"

    with pytest.raises(NotFoundError):
        await profile_service.delete_profiles({"ids": [str(profile.id), str(second.id)]})

    batch = await profile_service.delete_profiles({"ids": [str(second.id)]})
    assert batch.message == "1 Profile deleted successfully"
    assert profile_repo.rows == {}


async def test_profile_email_is_stored_lowercase(profile_service, profile_repo, profile_payload, owner):
    created = await profile_service.create_profile(
        dict(profile_payload, userId=str(owner.id), email="Rahim.Uddin@Mail.COM")
    )
    assert profile_repo.rows[created.id]["email"] == "rahim.uddin@mail.com"

    updated = await profile_service.update_profile(created.id, {"email": "New.Address@Mail.com"})
    assert updated.email == "new.address@mail.com"
