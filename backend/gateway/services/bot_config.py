"""
Bot configuration repository.

Records are never physically removed: deletion flips ``is_active`` and
every normal lookup filters inactive records out.
"""

import json
import math
import secrets
import string
import time
from datetime import datetime, timezone

import aiosqlite

from gateway.errors import DuplicateBotError, ImmutableFieldError
from gateway.logging import get_logger
from gateway.models import (
    BotConfig,
    BotConfigCreate,
    BotConfigUpdate,
    BotPage,
    Pagination,
)

logger = get_logger('services.bot_config')

_ID_ALPHABET = string.digits + string.ascii_lowercase
_LIST_COLUMNS = ("allowed_origins", "allowed_topics", "restrictions", "personality_traits")
_NULLABLE_COLUMNS = {"industry", "website_url", "support_email", "business_hours"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_bot_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"bot_{int(time.time() * 1000)}_{suffix}"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_bot(row: dict) -> BotConfig:
    return BotConfig(
        bot_id=row["bot_id"],
        company_name=row["company_name"],
        industry=row.get("industry"),
        allowed_origins=json.loads(row["allowed_origins"]),
        tone=row["tone"],
        primary_role=row["primary_role"],
        allowed_topics=json.loads(row["allowed_topics"]),
        restrictions=json.loads(row["restrictions"]),
        website_url=row.get("website_url"),
        support_email=row.get("support_email"),
        business_hours=row.get("business_hours"),
        max_response_length=row["max_response_length"],
        language=row["language"],
        personality_traits=json.loads(row["personality_traits"]),
        fallback_message=row["fallback_message"],
        greeting_message=row["greeting_message"],
        created_by=row["created_by"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _to_column(name: str, value):
    if name in _LIST_COLUMNS:
        return json.dumps([getattr(item, "value", item) for item in value])
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return getattr(value, "value", value)


class BotConfigService:
    """Service for bot configuration CRUD."""

    def __init__(self, db_path: str, default_created_by: str = "admin"):
        self.db_path = db_path
        self.default_created_by = default_created_by

    async def _get_db(self) -> aiosqlite.Connection:
        db = await aiosqlite.connect(self.db_path)
        db.row_factory = aiosqlite.Row
        return db

    async def _fetch_bot(self, bot_id: str, active_only: bool) -> BotConfig | None:
        query = "SELECT * FROM bot_configs WHERE bot_id = ?"
        if active_only:
            query += " AND is_active = 1"
        db = await self._get_db()
        try:
            cursor = await db.execute(query, (bot_id,))
            row = await cursor.fetchone()
            return _row_to_bot(dict(row)) if row else None
        finally:
            await db.close()

    async def get_bot(self, bot_id: str) -> BotConfig | None:
        return await self._fetch_bot(bot_id, active_only=True)

    async def get_bot_any(self, bot_id: str) -> BotConfig | None:
        """Privileged lookup that also returns soft-deleted records."""
        return await self._fetch_bot(bot_id, active_only=False)

    async def create_bot(self, data: BotConfigCreate) -> BotConfig:
        now = _now()
        bot = BotConfig(
            **data.model_dump(exclude={"bot_id", "created_by"}),
            bot_id=data.bot_id or generate_bot_id(),
            created_by=data.created_by or self.default_created_by,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        columns = list(BotConfig.model_fields)
        values = [_to_column(name, getattr(bot, name)) for name in columns]

        db = await self._get_db()
        try:
            await db.execute(
                f"INSERT INTO bot_configs ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )
            await db.commit()
        except aiosqlite.IntegrityError as exc:
            if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                raise DuplicateBotError() from exc
            raise
        finally:
            await db.close()

        logger.info(f"Created bot: {bot.company_name} ({bot.bot_id})")
        return bot

    async def update_bot(self, bot_id: str, data: BotConfigUpdate) -> BotConfig | None:
        existing = await self.get_bot(bot_id)
        if not existing:
            return None

        changes = data.model_dump(exclude_unset=True)
        for immutable in ("bot_id", "created_by"):
            if immutable in changes:
                if changes[immutable] != getattr(existing, immutable):
                    raise ImmutableFieldError()
                del changes[immutable]

        fields: dict = {}
        for name, value in changes.items():
            if value is None and name not in _NULLABLE_COLUMNS:
                continue
            fields[name] = _to_column(name, getattr(data, name))

        if not fields:
            return existing

        fields["updated_at"] = _now()
        set_clause = ", ".join(f"{k} = ?" for k in fields)
        params = list(fields.values()) + [bot_id]

        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE bot_configs SET {set_clause} WHERE bot_id = ? AND is_active = 1", params
            )
            await db.commit()
        finally:
            await db.close()

        logger.info(f"Updated bot {bot_id}: {', '.join(sorted(k for k in fields if k != 'updated_at'))}")
        return await self.get_bot(bot_id)

    async def soft_delete_bot(self, bot_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "UPDATE bot_configs SET is_active = 0, updated_at = ? WHERE bot_id = ? AND is_active = 1",
                (_now(), bot_id),
            )
            await db.commit()
            deleted = cursor.rowcount > 0
        finally:
            await db.close()

        if deleted:
            logger.info(f"Soft-deleted bot {bot_id}")
        return deleted

    async def list_bots(
        self,
        page: int = 1,
        limit: int = 10,
        company_name: str | None = None,
    ) -> BotPage:
        where = "is_active = 1"
        params: list = []
        if company_name:
            where += " AND LOWER(company_name) LIKE ? ESCAPE '\\'"
            params.append(f"%{_escape_like(company_name.lower())}%")

        db = await self._get_db()
        try:
            cursor = await db.execute(f"SELECT COUNT(*) FROM bot_configs WHERE {where}", params)
            total = (await cursor.fetchone())[0]
            cursor = await db.execute(
                f"SELECT * FROM bot_configs WHERE {where} "
                "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit],
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()

        return BotPage(
            bots=[_row_to_bot(dict(r)) for r in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )
