"""
Waitlist Service Data Repository

Data access layer - PostgreSQL (asyncpg)
Implements WaitlistRepositoryProtocol from protocols.py
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from core.config_manager import ConfigManager
from core.postgres_client import AsyncPostgresClient

from .models import ClassSession, WaitlistEntry, WaitlistStatus

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class WaitlistRepository:
    """Waitlist repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[AsyncPostgresClient] = None):
        if config is None:
            config = ConfigManager("waitlist_service")

        self.db = db or AsyncPostgresClient.from_config(config, user_id="waitlist_service")
        self.schema = "classes"
        self.sessions_table = "class_sessions"
        self.types_table = "class_types"
        self.waitlist_table = "class_waitlist"

    async def initialize(self):
        """Initialize database connection and ensure the classes schema exists"""
        try:
            await self.db.connect()
            await self.db.apply_migrations(MIGRATIONS_DIR)
            logger.info("Waitlist repository initialized with PostgreSQL")
        except Exception as e:
            logger.error(f"Error initializing waitlist repository: {e}")
            raise

    async def close(self):
        await self.db.close()
        logger.info("Waitlist repository database connection closed")

    # ====================
    # Sessions
    # ====================

    async def get_session(self, session_id: str) -> Optional[ClassSession]:
        try:
            query = f'''
                SELECT s.session_id, s.session_date, s.start_time,
                       s.current_enrollment, s.max_capacity, t.name AS class_name
                FROM {self.schema}.{self.sessions_table} s
                LEFT JOIN {self.schema}.{self.types_table} t ON t.class_type_id = s.class_type_id
                WHERE s.session_id = $1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[session_id])

            if not result:
                return None
            return ClassSession(
                session_id=str(result["session_id"]),
                class_name=result.get("class_name"),
                session_date=result["session_date"],
                start_time=result["start_time"],
                current_enrollment=result.get("current_enrollment") or 0,
                max_capacity=result["max_capacity"],
            )

        except Exception as e:
            logger.error(f"Error getting session {session_id}: {e}")
            raise

    # ====================
    # Waitlist
    # ====================

    async def get_next_waiting(
        self,
        session_id: str,
        exclude_entry_ids: Sequence[str] = (),
    ) -> Optional[WaitlistEntry]:
        """Lowest position still waiting; FIFO order comes from the query"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.waitlist_table}
                WHERE session_id = $1
                  AND status = 'waiting'
                  AND NOT (entry_id = ANY($2::text[]))
                ORDER BY position ASC
                LIMIT 1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[session_id, list(exclude_entry_ids)])

            return self._row_to_entry(result) if result else None

        except Exception as e:
            logger.error(f"Error getting next waiting entry for session {session_id}: {e}")
            raise

    async def mark_notified(
        self,
        entry_id: str,
        notified_at: datetime,
        claim_expires_at: datetime,
    ) -> Optional[WaitlistEntry]:
        """Claim the row only if it is still waiting"""
        try:
            query = f'''
                UPDATE {self.schema}.{self.waitlist_table}
                SET status = 'notified', notified_at = $2, claim_expires_at = $3, updated_at = $2
                WHERE entry_id = $1 AND status = 'waiting'
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[entry_id, notified_at, claim_expires_at])

            return self._row_to_entry(result) if result else None

        except Exception as e:
            logger.error(f"Error marking waitlist entry {entry_id} notified: {e}")
            raise

    async def list_expired_claims(self, now: datetime) -> List[WaitlistEntry]:
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.waitlist_table}
                WHERE status = 'notified' AND claim_expires_at < $1
                ORDER BY claim_expires_at ASC
            '''

            async with self.db:
                results = await self.db.query(query, params=[now])

            return [self._row_to_entry(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing expired waitlist claims: {e}")
            raise

    async def mark_expired(self, entry_id: str) -> Optional[WaitlistEntry]:
        try:
            query = f'''
                UPDATE {self.schema}.{self.waitlist_table}
                SET status = 'expired', updated_at = $2
                WHERE entry_id = $1 AND status = 'notified'
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[entry_id, datetime.now(timezone.utc)])

            return self._row_to_entry(result) if result else None

        except Exception as e:
            logger.error(f"Error expiring waitlist entry {entry_id}: {e}")
            raise

    async def list_entries(self, session_id: str) -> List[WaitlistEntry]:
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.waitlist_table}
                WHERE session_id = $1
                ORDER BY position ASC
            '''

            async with self.db:
                results = await self.db.query(query, params=[session_id])

            return [self._row_to_entry(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing waitlist for session {session_id}: {e}")
            raise

    def _row_to_entry(self, row: Dict[str, Any]) -> WaitlistEntry:
        return WaitlistEntry(
            entry_id=str(row["entry_id"]),
            session_id=str(row["session_id"]),
            user_id=str(row["user_id"]),
            position=row["position"],
            status=WaitlistStatus(row["status"]),
            notified_at=row.get("notified_at"),
            claim_expires_at=row.get("claim_expires_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["WaitlistRepository"]
