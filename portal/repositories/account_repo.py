from typing import List, Optional
from uuid import UUID

from asyncpg import Connection, UniqueViolationError

from portal.core.exceptions import ConflictError
from portal.services.query_builder import ListQuery
from portal.utils.normalize import normalize_phone

# password and refresh_token are only read on request
PUBLIC_COLUMNS = "id, first_name, last_name, email, phone, role, avatar, otp, created_at, updated_at"

WRITABLE_COLUMNS = ("first_name", "last_name", "email", "phone", "role", "avatar", "otp",
                    "password", "refresh_token")


def _conflict(exc: UniqueViolationError) -> ConflictError:
    if "phone" in (exc.constraint_name or ""):
        return ConflictError("Phone number is already in use")
    return ConflictError("User already exists")


def _prepare(data: dict) -> dict:
    unknown = set(data) - set(WRITABLE_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown account columns: {', '.join(sorted(unknown))}")
    prepared = dict(data)
    if prepared.get("phone"):
        prepared["phone"] = normalize_phone(prepared["phone"])
    return prepared


class AccountRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_id(self, account_id: UUID) -> Optional[dict]:
        sql = f"SELECT {PUBLIC_COLUMNS} FROM accounts WHERE id = $1;"
        record = await self.conn.fetchrow(sql, account_id)
        return dict(record) if record else None

    async def get_by_id_with_secrets(self, account_id: UUID) -> Optional[dict]:
        sql = f"SELECT {PUBLIC_COLUMNS}, password, refresh_token FROM accounts WHERE id = $1;"
        record = await self.conn.fetchrow(sql, account_id)
        return dict(record) if record else None

    async def get_by_email(self, email: str) -> Optional[dict]:
        sql = f"SELECT {PUBLIC_COLUMNS} FROM accounts WHERE email = $1;"
        record = await self.conn.fetchrow(sql, email)
        return dict(record) if record else None

    async def get_by_email_with_secrets(self, email: str) -> Optional[dict]:
        sql = f"SELECT {PUBLIC_COLUMNS}, password, refresh_token FROM accounts WHERE email = $1;"
        record = await self.conn.fetchrow(sql, email)
        return dict(record) if record else None

    async def exists(self, account_id: UUID) -> bool:
        sql = "SELECT EXISTS(SELECT 1 FROM accounts WHERE id = $1);"
        return await self.conn.fetchval(sql, account_id)

    async def list(self, query: ListQuery) -> List[dict]:
        n = len(query.args)
        sql = f"""
            SELECT {PUBLIC_COLUMNS} FROM accounts
            WHERE {query.where}
            ORDER BY {query.order_by}
            LIMIT ${n + 1} OFFSET ${n + 2};
        """
        records = await self.conn.fetch(sql, *query.args, query.limit, query.offset)
        return [dict(record) for record in records]

    async def count(self, query: ListQuery) -> int:
        sql = f"SELECT COUNT(*) FROM accounts WHERE {query.where};"
        return await self.conn.fetchval(sql, *query.args)

    async def create(self, account_in: dict) -> dict:
        data = _prepare(account_in)
        columns = list(data)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        sql = f"""
            INSERT INTO accounts ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING {PUBLIC_COLUMNS};
        """
        try:
            record = await self.conn.fetchrow(sql, *data.values())
        except UniqueViolationError as exc:
            raise _conflict(exc)
        return dict(record)

    async def update(self, account_id: UUID, changes: dict) -> Optional[dict]:
        data = _prepare(changes)
        if not data:
            return await self.get_by_id(account_id)
        assignments = [f"{column} = ${i}" for i, column in enumerate(data, start=2)]
        assignments.append("updated_at = now()")
        sql = f"""
            UPDATE accounts SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING {PUBLIC_COLUMNS};
        """
        try:
            record = await self.conn.fetchrow(sql, account_id, *data.values())
        except UniqueViolationError as exc:
            raise _conflict(exc)
        return dict(record) if record else None

    async def set_refresh_token(self, account_id: UUID, refresh_token: Optional[str]) -> None:
        sql = "UPDATE accounts SET refresh_token = $2 WHERE id = $1;"
        await self.conn.execute(sql, account_id, refresh_token)

    async def find_existing_ids(self, account_ids: List[UUID]) -> List[UUID]:
        sql = "SELECT id FROM accounts WHERE id = ANY($1::uuid[]);"
        records = await self.conn.fetch(sql, account_ids)
        return [record["id"] for record in records]

    async def delete(self, account_id: UUID) -> bool:
        sql = "DELETE FROM accounts WHERE id = $1 RETURNING id;"
        return await self.conn.fetchval(sql, account_id) is not None

    async def delete_many(self, account_ids: List[UUID]) -> int:
        sql = "DELETE FROM accounts WHERE id = ANY($1::uuid[]) RETURNING id;"
        records = await self.conn.fetch(sql, account_ids)
        return len(records)
