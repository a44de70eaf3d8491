import uuid

import pytest
from asyncpg import UniqueViolationError

from portal.core.exceptions import ConflictError
from portal.repositories.account_repo import AccountRepository
from portal.repositories.profile_repo import ProfileRepository
from portal.services.query_builder import ListQuery


class RecordingConnection:
    """Just enough of ``asyncpg.Connection`` to capture the SQL a repository sends."""

    def __init__(self, row=None, rows=None, value=None, error=None):
        self.row = row
        self.rows = rows or []
        self.value = value
        self.error = error
        self.calls = []

    def _record(self, sql, args):
        self.calls.append((" ".join(sql.split()), args))
        if self.error is not None:
            raise self.error

    async def fetchrow(self, sql, *args):
        self._record(sql, args)
        return self.row

    async def fetch(self, sql, *args):
        self._record(sql, args)
        return self.rows

    async def fetchval(self, sql, *args):
        self._record(sql, args)
        return self.value

    async def execute(self, sql, *args):
        self._record(sql, args)
        return "UPDATE 1"


def unique_violation(constraint):
    exc = UniqueViolationError("duplicate key value violates unique constraint")
    exc.constraint_name = constraint
    return exc


@pytest.fixture()
def account_row():
    return {"id": uuid.uuid4(), "email": "jane@x.com", "phone": "8801712345678"}


async def test_account_insert_normalizes_phone(account_row):
    conn = RecordingConnection(row=account_row)

    await AccountRepository(conn).create({
        "first_name": "Jane", "email": "jane@x.com", "phone": "+880 1712-345678", "password": "digest",
    })

    sql, args = conn.calls[0]
    assert sql.startswith("INSERT INTO accounts (first_name, email, phone, password) VALUES ($1, $2, $3, $4)")
    assert "password" not in sql.split("RETURNING")[1]
    assert args == ("Jane", "jane@x.com", "8801712345678", "digest")


@pytest.mark.parametrize("constraint, message", [
    ("accounts_email_key", "User already exists"),
    ("accounts_phone_key", "Phone number is already in use"),
])
async def test_account_insert_unique_violation_is_conflict(constraint, message):
    conn = RecordingConnection(error=unique_violation(constraint))

    with pytest.raises(ConflictError) as exc_info:
        await AccountRepository(conn).create({"email": "jane@x.com", "password": "digest"})

    assert exc_info.value.message == message


async def test_account_update_unique_violation_is_conflict():
    conn = RecordingConnection(error=unique_violation("accounts_phone_key"))

    with pytest.raises(ConflictError) as exc_info:
        await AccountRepository(conn).update(uuid.uuid4(), {"phone": "01712345678"})

    assert exc_info.value.status_code == 409
    assert conn.calls[0][1][1] == "8801712345678"


async def test_account_update_stamps_updated_at(account_row):
    conn = RecordingConnection(row=account_row)
    account_id = account_row["id"]

    await AccountRepository(conn).update(account_id, {"first_name": "Janet", "avatar": None})

    sql, args = conn.calls[0]
    assert "SET first_name = $2, avatar = $3, updated_at = now() WHERE id = $1" in sql
    assert args == (account_id, "Janet", None)


async def test_account_update_without_changes_only_reads(account_row):
    conn = RecordingConnection(row=account_row)

    result = await AccountRepository(conn).update(account_row["id"], {})

    assert result == account_row
    assert conn.calls[0][0].startswith("SELECT")


async def test_unknown_account_column_never_reaches_the_database():
    conn = RecordingConnection()

    with pytest.raises(ValueError):
        await AccountRepository(conn).create({"email": "jane@x.com", "is_admin": True})

    assert conn.calls == []


async def test_account_listing_binds_filters_then_window():
    conn = RecordingConnection(rows=[])
    query = ListQuery(where="email ILIKE $1", args=["%jane%"], page=3, limit=5)

    await AccountRepository(conn).list(query)

    sql, args = conn.calls[0]
    assert "WHERE email ILIKE $1 ORDER BY created_at DESC, id DESC LIMIT $2 OFFSET $3" in sql
    assert args == ("%jane%", 5, 10)


async def test_bulk_lookup_and_delete_use_uuid_arrays():
    ids = [uuid.uuid4(), uuid.uuid4()]
    conn = RecordingConnection(rows=[{"id": ids[0]}])
    repo = AccountRepository(conn)

    assert await repo.find_existing_ids(ids) == [ids[0]]
    assert await repo.delete_many(ids) == 1
    assert all("ANY($1::uuid[])" in sql for sql, _ in conn.calls)


async def test_profile_insert_normalizes_both_mobiles():
    profile_id = uuid.uuid4()
    conn = RecordingConnection(row={"id": profile_id})

    await ProfileRepository(conn).create({
        "name": "Rahim Uddin", "mobile": "01712345678", "confirm_mobile": "+8801712345678",
    })

    sql, args = conn.calls[0]
    assert sql.startswith("INSERT INTO profiles (name, mobile, confirm_mobile)")
    assert args == ("Rahim Uddin", "8801712345678", "8801712345678")


async def test_profile_update_rejects_unknown_columns():
    conn = RecordingConnection()

    with pytest.raises(ValueError):
        await ProfileRepository(conn).update(uuid.uuid4(), {"id": uuid.uuid4()})

    assert conn.calls == []
