from typing import List, Optional
from uuid import UUID

from asyncpg import Connection

from portal.services.query_builder import ListQuery
from portal.utils.normalize import normalize_phone

PROFILE_COLUMNS = (
    "user_id", "name", "name_bn", "father", "father_bn", "mother", "mother_bn",
    "dob", "gender", "nid", "nid_no", "breg", "passport", "email", "mobile",
    "confirm_mobile", "nationality", "religion", "marital_status", "quota",
    "dep_status", "present_address", "ssc", "hsc",
)

PHONE_COLUMNS = ("mobile", "confirm_mobile")


def _prepare(data: dict) -> dict:
    unknown = set(data) - set(PROFILE_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown profile columns: {', '.join(sorted(unknown))}")
    prepared = dict(data)
    for column in PHONE_COLUMNS:
        if prepared.get(column):
            prepared[column] = normalize_phone(prepared[column])
    return prepared


class ProfileRepository:
    """asyncpg access to ``profiles``; address and exam records are JSONB."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_id(self, profile_id: UUID) -> Optional[dict]:
        sql = "SELECT * FROM profiles WHERE id = $1;"
        record = await self.conn.fetchrow(sql, profile_id)
        return dict(record) if record else None

    async def list(self, query: ListQuery) -> List[dict]:
        n = len(query.args)
        sql = f"""
            SELECT * FROM profiles
            WHERE {query.where}
            ORDER BY {query.order_by}
            LIMIT ${n + 1} OFFSET ${n + 2};
        """
        records = await self.conn.fetch(sql, *query.args, query.limit, query.offset)
        return [dict(record) for record in records]

    async def count(self, query: ListQuery) -> int:
        sql = f"SELECT COUNT(*) FROM profiles WHERE {query.where};"
        return await self.conn.fetchval(sql, *query.args)

    async def create(self, profile_in: dict) -> dict:
        data = _prepare(profile_in)
        columns = list(data)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        sql = f"""
            INSERT INTO profiles ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, *data.values())
        if not record:
            raise Exception("Failed to insert profile.")
        return dict(record)

    async def update(self, profile_id: UUID, changes: dict) -> Optional[dict]:
        data = _prepare(changes)
        if not data:
            return await self.get_by_id(profile_id)
        assignments = [f"{column} = ${i}" for i, column in enumerate(data, start=2)]
        assignments.append("updated_at = now()")
        sql = f"""
            UPDATE profiles SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, profile_id, *data.values())
        return dict(record) if record else None

    async def find_existing_ids(self, profile_ids: List[UUID]) -> List[UUID]:
        sql = "SELECT id FROM profiles WHERE id = ANY($1::uuid[]);"
        records = await self.conn.fetch(sql, profile_ids)
        return [record["id"] for record in records]

    async def delete(self, profile_id: UUID) -> bool:
        sql = "DELETE FROM profiles WHERE id = $1 RETURNING id;"
        return await self.conn.fetchval(sql, profile_id) is not None

    async def delete_many(self, profile_ids: List[UUID]) -> int:
        sql = "DELETE FROM profiles WHERE id = ANY($1::uuid[]) RETURNING id;"
        records = await self.conn.fetch(sql, profile_ids)
        return len(records)
