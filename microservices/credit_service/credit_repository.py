"""
Credit Service Data Repository

Data access layer - PostgreSQL (asyncpg)
Implements CreditRepositoryProtocol from protocols.py
"""

import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.config_manager import ConfigManager
from core.postgres_client import AsyncPostgresClient

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class CreditRepository:
    """Credit service data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[AsyncPostgresClient] = None):
        if config is None:
            config = ConfigManager("credit_service")

        self.db = db or AsyncPostgresClient.from_config(config, user_id="credit_service")
        self.schema = "credit"
        self.grants_table = "credit_grants"
        # Owned by membership_service, read only here
        self.members_table = "membership.members"

    async def initialize(self):
        """Initialize database connection and ensure the credit schema exists"""
        try:
            await self.db.connect()
            await self.db.apply_migrations(MIGRATIONS_DIR)
            logger.info("Credit repository initialized with PostgreSQL")
        except Exception as e:
            logger.error(f"Error initializing credit repository: {e}")
            raise

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Credit repository database connection closed")

    # ====================
    # Members
    # ====================

    async def list_active_members(self) -> List[Dict[str, Any]]:
        """Active members with a linked user account"""
        try:
            query = f'''
                SELECT member_id, user_id, membership_type, membership_start_date
                FROM {self.members_table}
                WHERE status = 'active'
                  AND user_id IS NOT NULL
                  AND membership_start_date IS NOT NULL
                ORDER BY member_id
            '''

            async with self.db:
                results = await self.db.query(query)

            return [self._row_to_dict(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing active members: {e}")
            raise

    # ====================
    # Credit Grants
    # ====================

    async def get_existing_credit_types(self, member_id: str, cycle_start: date) -> List[str]:
        """Credit types already granted for (member, cycle_start)"""
        try:
            query = f'''
                SELECT credit_type FROM {self.schema}.{self.grants_table}
                WHERE member_id = $1 AND cycle_start = $2
            '''

            async with self.db:
                results = await self.db.query(query, params=[member_id, cycle_start])

            return [r["credit_type"] for r in results]

        except Exception as e:
            logger.error(f"Error reading grants for member {member_id} cycle {cycle_start}: {e}")
            raise

    async def insert_grants(self, grants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert a member's grant batch in one transaction.

        The unique key (member_id, credit_type, cycle_start) makes a concurrent
        or repeated run a no-op for rows that already exist.
        """
        if not grants:
            return []

        query = f'''
            INSERT INTO {self.schema}.{self.grants_table} (
                grant_id, member_id, user_id, credit_type, credits_total,
                credits_remaining, cycle_start, cycle_end, expires_at, source, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            ON CONFLICT (member_id, credit_type, cycle_start) DO NOTHING
            RETURNING *
        '''
        now = datetime.now(timezone.utc)
        inserted: List[Dict[str, Any]] = []

        try:
            async with self.db.transaction() as conn:
                for grant in grants:
                    row = await conn.fetchrow(
                        query,
                        grant.get("grant_id") or f"grant_{uuid.uuid4().hex[:16]}",
                        grant["member_id"],
                        grant.get("user_id"),
                        grant["credit_type"],
                        grant["credits_total"],
                        grant.get("credits_remaining", grant["credits_total"]),
                        grant["cycle_start"],
                        grant["cycle_end"],
                        grant["expires_at"],
                        grant.get("source", "cycle"),
                        now,
                    )
                    if row:
                        inserted.append(self._row_to_dict(dict(row)))

            return inserted

        except Exception as e:
            member_id = grants[0].get("member_id")
            logger.error(f"Error inserting grants for member {member_id}: {e}", exc_info=True)
            raise

    async def get_member_credits(self, member_id: str, as_of: datetime) -> List[Dict[str, Any]]:
        """Unexpired grants for a member"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.grants_table}
                WHERE member_id = $1 AND expires_at >= $2
                ORDER BY expires_at ASC, credit_type ASC
            '''

            async with self.db:
                results = await self.db.query(query, params=[member_id, as_of])

            return [self._row_to_dict(r) for r in results]

        except Exception as e:
            logger.error(f"Error getting credits for member {member_id}: {e}")
            raise

    # ====================
    # Helpers
    # ====================

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert database row to dictionary"""
        if not row:
            return {}

        result = {}
        for key, value in row.items():
            if isinstance(value, uuid.UUID):
                result[key] = str(value)
            else:
                result[key] = value
        return result


__all__ = ["CreditRepository"]
