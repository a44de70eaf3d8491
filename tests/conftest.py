import os
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so the environment has to be ready first.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-portal")
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_PORT", "5432")
os.environ.setdefault("DB_NAME", "portal_test")
os.environ.setdefault("DB_USER", "portal")
os.environ.setdefault("DB_PASS", "portal")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import portal.main as main  # noqa: E402
from portal.api.v1.deps import get_account_repo, get_profile_repo  # noqa: E402
from portal.core.exceptions import ConflictError  # noqa: E402
from portal.core.security import CredentialService  # noqa: E402
from portal.services.account_service import AccountService  # noqa: E402
from portal.services.auth_services import AuthService  # noqa: E402
from portal.services.profile_service import ProfileService  # noqa: E402
from portal.utils.normalize import normalize_phone  # noqa: E402

SECRET_COLUMNS = ("password", "refresh_token")


class InMemoryAccountRepository:
    """Stands in for AccountRepository; same coroutine interface, no SQL."""

    def __init__(self):
        self.rows = {}
        self.queries = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _public(row):
        return {k: v for k, v in row.items() if k not in SECRET_COLUMNS}

    def _check_unique(self, data, skip_id=None):
        for row in self.rows.values():
            if row["id"] == skip_id:
                continue
            if data.get("email") and row["email"] == data["email"]:
                raise ConflictError("User already exists")
            if data.get("phone") and row["phone"] == data["phone"]:
                raise ConflictError("Phone number is already in use")

    async def get_by_id(self, account_id):
        row = self.rows.get(account_id)
        return self._public(row) if row else None

    async def get_by_id_with_secrets(self, account_id):
        row = self.rows.get(account_id)
        return dict(row) if row else None

    async def get_by_email(self, email):
        for row in self.rows.values():
            if row["email"] == email:
                return self._public(row)
        return None

    async def get_by_email_with_secrets(self, email):
        for row in self.rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def exists(self, account_id):
        return account_id in self.rows

    async def list(self, query):
        self.queries.append(query)
        ordered = sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)
        window = ordered[query.offset:query.offset + query.limit]
        return [self._public(row) for row in window]

    async def count(self, query):
        return len(self.rows)

    async def create(self, account_in):
        data = dict(account_in)
        if data.get("phone"):
            data["phone"] = normalize_phone(data["phone"])
        self._check_unique(data)
        now = self._tick()
        row = {
            "id": uuid.uuid4(),
            "phone": None,
            "role": "USER",
            "avatar": None,
            "otp": None,
            "refresh_token": None,
            "created_at": now,
            "updated_at": now,
        }
        row.update(data)
        self.rows[row["id"]] = row
        return self._public(row)

    async def update(self, account_id, changes):
        row = self.rows.get(account_id)
        if row is None:
            return None
        data = dict(changes)
        if data.get("phone"):
            data["phone"] = normalize_phone(data["phone"])
        self._check_unique(data, skip_id=account_id)
        row.update(data)
        row["updated_at"] = self._tick()
        return self._public(row)

    async def set_refresh_token(self, account_id, refresh_token):
        if account_id in self.rows:
            self.rows[account_id]["refresh_token"] = refresh_token

    async def find_existing_ids(self, account_ids):
        return [i for i in account_ids if i in self.rows]

    async def delete(self, account_id):
        return self.rows.pop(account_id, None) is not None

    async def delete_many(self, account_ids):
        return sum(1 for i in account_ids if self.rows.pop(i, None) is not None)


class InMemoryProfileRepository:
    def __init__(self):
        self.rows = {}
        self.queries = []

    async def get_by_id(self, profile_id):
        row = self.rows.get(profile_id)
        return dict(row) if row else None

    async def list(self, query):
        self.queries.append(query)
        ordered = sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)
        return [dict(row) for row in ordered[query.offset:query.offset + query.limit]]

    async def count(self, query):
        return len(self.rows)

    async def create(self, profile_in):
        data = dict(profile_in)
        for column in ("mobile", "confirm_mobile"):
            data[column] = normalize_phone(data[column])
        now = datetime.now(timezone.utc)
        row = {"id": uuid.uuid4(), "created_at": now, "updated_at": now}
        row.update(data)
        self.rows[row["id"]] = row
        return dict(row)

    async def update(self, profile_id, changes):
        row = self.rows.get(profile_id)
        if row is None:
            return None
        data = dict(changes)
        for column in ("mobile", "confirm_mobile"):
            if data.get(column):
                data[column] = normalize_phone(data[column])
        row.update(data)
        row["updated_at"] = datetime.now(timezone.utc)
        return dict(row)

    async def find_existing_ids(self, profile_ids):
        return [i for i in profile_ids if i in self.rows]

    async def delete(self, profile_id):
        return self.rows.pop(profile_id, None) is not None

    async def delete_many(self, profile_ids):
        return sum(1 for i in profile_ids if self.rows.pop(i, None) is not None)


@pytest.fixture()
def credentials():
    return CredentialService("test-secret-key-for-portal", bcrypt_rounds=4)


@pytest.fixture()
def account_repo():
    return InMemoryAccountRepository()


@pytest.fixture()
def profile_repo():
    return InMemoryProfileRepository()


@pytest.fixture()
def auth_service(account_repo, credentials):
    return AuthService(account_repo, credentials)


@pytest.fixture()
def account_service(account_repo):
    return AccountService(account_repo)


@pytest.fixture()
def profile_service(profile_repo, account_repo):
    return ProfileService(profile_repo, account_repo)


@pytest.fixture()
def signup_payload():
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "Jane@X.com",
        "password": "Abcdef1!",
    }


@pytest.fixture()
def profile_payload():
    def exam(name, year):
        return {
            "exam": name,
            "roll": "123456",
            "group": "Science",
            "board": "Dhaka",
            "result_type": "GPA",
            "result": 5.0,
            "year": year,
        }

    return {
        "name": "Rahim Uddin",
        "name_bn": "রহিম উদ্দিন",
        "father": "Karim Uddin",
        "father_bn": "করিম উদ্দিন",
        "mother": "Amena Begum",
        "mother_bn": "আমেনা বেগম",
        "dob": date(2001, 5, 14).isoformat(),
        "gender": "Male",
        "nid": "0",
        "breg": "20011234567890123",
        "email": "rahim@mail.com",
        "mobile": "01712345678",
        "confirm_mobile": "+8801712345678",
        "nationality": "Bangladeshi",
        "religion": "Islam",
        "marital_status": "Single",
        "quota": "Non Quota",
        "present_address": {
            "careof": "Karim Uddin",
            "village": "Shantinagar",
            "district": "Dhaka",
            "upazila": "Motijheel",
            "post": "Shantinagar",
            "postcode": "1217",
        },
        "ssc": exam("SSC", "2017"),
        "hsc": exam("HSC", "2019"),
    }


@pytest.fixture()
def client(monkeypatch, account_repo, profile_repo):
    """TestClient wired to the in-memory repositories; no database needed."""

    async def _noop_async(*args, **kwargs):
        return None

    monkeypatch.setattr(main, "connect_db_pool", _noop_async)
    monkeypatch.setattr(main, "close_db_pool", _noop_async)
    main.app.dependency_overrides[get_account_repo] = lambda: account_repo
    main.app.dependency_overrides[get_profile_repo] = lambda: profile_repo

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()
