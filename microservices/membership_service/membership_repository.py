"""
Membership Service Data Repository

Data access layer - PostgreSQL (asyncpg)
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.config_manager import ConfigManager
from core.postgres_client import AsyncPostgresClient

from .models import Member, MemberStatus, MemberStatusHistory, TransitionSource

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Columns that may be written alongside a status change
UPDATABLE_FIELDS = (
    "subscription_ref",
    "customer_ref",
    "billing_type",
    "is_founding_member",
    "gender",
    "activated_at",
    "membership_start_date",
)


class MembershipRepository:
    """Membership service data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[AsyncPostgresClient] = None):
        if config is None:
            config = ConfigManager("membership_service")

        self.db = db or AsyncPostgresClient.from_config(config, user_id="membership_service")
        self.schema = "membership"
        self.members_table = "members"
        self.history_table = "member_status_history"

    async def initialize(self):
        """Initialize database connection and ensure the membership schema exists"""
        try:
            await self.db.connect()
            await self.db.apply_migrations(MIGRATIONS_DIR)
            logger.info("Membership repository initialized with PostgreSQL")
        except Exception as e:
            logger.error(f"Error initializing membership repository: {e}")
            raise

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Membership repository database connection closed")

    # ====================
    # Members
    # ====================

    async def get_member(self, member_id: str) -> Optional[Member]:
        """Get member by ID"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.members_table}
                WHERE member_id = $1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[member_id])

            return self._row_to_member(result) if result else None

        except Exception as e:
            logger.error(f"Error getting member {member_id}: {e}")
            raise

    async def get_member_by_subscription(self, subscription_ref: str) -> Optional[Member]:
        """Get member by payment processor subscription ID"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.members_table}
                WHERE subscription_ref = $1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[subscription_ref])

            return self._row_to_member(result) if result else None

        except Exception as e:
            logger.error(f"Error getting member by subscription {subscription_ref}: {e}")
            raise

    async def update_status(
        self,
        member_id: str,
        expected_status: MemberStatus,
        new_status: MemberStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Member]:
        """
        Change status only if it still equals expected_status.

        Returns None when another writer changed the row first.
        """
        try:
            now = datetime.now(timezone.utc)
            params: List[Any] = [new_status.value, now, member_id, expected_status.value]
            set_clauses = ["status = $1", "updated_at = $2"]

            for key, value in (fields or {}).items():
                if key not in UPDATABLE_FIELDS:
                    raise ValueError(f"Field cannot be updated with status: {key}")
                params.append(value)
                set_clauses.append(f"{key} = ${len(params)}")

            query = f'''
                UPDATE {self.schema}.{self.members_table}
                SET {", ".join(set_clauses)}
                WHERE member_id = $3 AND status = $4
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=params)

            return self._row_to_member(result) if result else None

        except Exception as e:
            logger.error(f"Error updating status for member {member_id}: {e}")
            raise

    async def set_annual_fee_paid(self, member_id: str, paid_at: datetime) -> Optional[Member]:
        """Keep the latest annual fee payment; GREATEST ignores a NULL column"""
        try:
            query = f'''
                UPDATE {self.schema}.{self.members_table}
                SET annual_fee_paid_at = GREATEST(annual_fee_paid_at, $1),
                    updated_at = $2
                WHERE member_id = $3
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(
                    query, params=[paid_at, datetime.now(timezone.utc), member_id]
                )

            return self._row_to_member(result) if result else None

        except Exception as e:
            logger.error(f"Error recording annual fee for member {member_id}: {e}")
            raise

    # ====================
    # History
    # ====================

    async def add_status_history(
        self,
        member_id: str,
        from_status: Optional[MemberStatus],
        to_status: MemberStatus,
        source: str,
        reason: Optional[str] = None,
    ) -> None:
        """Record status change"""
        try:
            query = f'''
                INSERT INTO {self.schema}.{self.history_table} (
                    history_id, member_id, from_status, to_status, source, reason, created_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7)
            '''
            params = [
                f"mhist_{uuid.uuid4().hex[:16]}",
                member_id,
                from_status.value if from_status else None,
                to_status.value,
                source,
                reason,
                datetime.now(timezone.utc),
            ]

            async with self.db:
                await self.db.execute(query, params=params)

        except Exception as e:
            logger.error(f"Error adding status history: {e}")
            raise

    async def get_status_history(self, member_id: str, limit: int = 50) -> List[MemberStatusHistory]:
        """Get status history, newest first"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.history_table}
                WHERE member_id = $1
                ORDER BY created_at DESC
                LIMIT $2
            '''

            async with self.db:
                results = await self.db.query(query, params=[member_id, limit])

            return [self._row_to_history(row) for row in results]

        except Exception as e:
            logger.error(f"Error getting status history: {e}")
            raise

    # ====================
    # Helpers
    # ====================

    def _row_to_member(self, row: Dict[str, Any]) -> Member:
        """Convert database row to Member model"""
        return Member(
            id=row.get("id"),
            member_id=str(row.get("member_id")),
            user_id=row.get("user_id"),
            status=MemberStatus(row.get("status", "pending_activation")),
            membership_type=row.get("membership_type"),
            membership_start_date=row.get("membership_start_date"),
            annual_fee_paid_at=row.get("annual_fee_paid_at"),
            subscription_ref=row.get("subscription_ref"),
            customer_ref=row.get("customer_ref"),
            billing_type=row.get("billing_type"),
            is_founding_member=bool(row.get("is_founding_member", False)),
            gender=row.get("gender"),
            activated_at=row.get("activated_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def _row_to_history(self, row: Dict[str, Any]) -> MemberStatusHistory:
        """Convert database row to MemberStatusHistory model"""
        from_status = row.get("from_status")
        return MemberStatusHistory(
            history_id=row.get("history_id"),
            member_id=row.get("member_id"),
            from_status=MemberStatus(from_status) if from_status else None,
            to_status=MemberStatus(row.get("to_status")),
            source=TransitionSource(row.get("source")),
            reason=row.get("reason"),
            created_at=row.get("created_at"),
        )


__all__ = ["MembershipRepository"]
