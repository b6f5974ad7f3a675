"""
Freeze Service Data Repository

Data access layer - PostgreSQL (asyncpg)
Implements FreezeRepositoryProtocol from protocols.py
"""

import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import asyncpg

from core.config_manager import ConfigManager
from core.postgres_client import AsyncPostgresClient

from .models import FreezeRequest, FreezeStatus
from .protocols import DuplicateFreezeRequestError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Columns that may be written alongside a status change
UPDATABLE_FIELDS = (
    "reviewed_by",
    "reviewed_at",
    "rejection_reason",
    "actual_start_date",
    "actual_end_date",
    "fee_paid",
    "payment_reference",
)


class FreezeRepository:
    """Freeze service data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[AsyncPostgresClient] = None):
        if config is None:
            config = ConfigManager("freeze_service")

        self.db = db or AsyncPostgresClient.from_config(config, user_id="freeze_service")
        self.schema = "freeze"
        self.table = "freeze_requests"

    async def initialize(self):
        """Initialize database connection and ensure the freeze schema exists"""
        try:
            await self.db.connect()
            await self.db.apply_migrations(MIGRATIONS_DIR)
            logger.info("Freeze repository initialized with PostgreSQL")
        except Exception as e:
            logger.error(f"Error initializing freeze repository: {e}")
            raise

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Freeze repository database connection closed")

    # ====================
    # Reads
    # ====================

    async def get_freeze(self, freeze_id: str) -> Optional[FreezeRequest]:
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.table}
                WHERE freeze_id = $1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[freeze_id])

            return self._row_to_freeze(result) if result else None

        except Exception as e:
            logger.error(f"Error getting freeze {freeze_id}: {e}")
            raise

    async def list_for_member_year(
        self,
        member_id: str,
        year: int,
        exclude_statuses: Sequence[FreezeStatus] = (),
    ) -> List[FreezeRequest]:
        """Freeze requests of a member for one freeze_year"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.table}
                WHERE member_id = $1
                  AND freeze_year = $2
                  AND NOT (status = ANY($3::text[]))
                ORDER BY created_at ASC
            '''
            excluded = [s.value for s in exclude_statuses]

            async with self.db:
                results = await self.db.query(query, params=[member_id, year, excluded])

            return [self._row_to_freeze(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing freezes for member {member_id} year {year}: {e}")
            raise

    async def get_outstanding(self, member_id: str) -> Optional[FreezeRequest]:
        """Pending or approved request of a member"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.table}
                WHERE member_id = $1 AND status IN ('pending', 'approved')
                ORDER BY created_at DESC
                LIMIT 1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[member_id])

            return self._row_to_freeze(result) if result else None

        except Exception as e:
            logger.error(f"Error getting outstanding freeze for member {member_id}: {e}")
            raise

    async def list_due_expirations(self, today: date) -> List[FreezeRequest]:
        """Active freezes whose period has ended"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.table}
                WHERE status = 'active' AND actual_end_date <= $1
                ORDER BY actual_end_date ASC
            '''

            async with self.db:
                results = await self.db.query(query, params=[today])

            return [self._row_to_freeze(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing due freeze expirations: {e}")
            raise

    async def list_freezes(
        self,
        status: Optional[FreezeStatus] = None,
        member_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[FreezeRequest]:
        """Admin listing"""
        try:
            conditions = []
            params: List[Any] = []

            if status:
                params.append(status.value)
                conditions.append(f"status = ${len(params)}")
            if member_id:
                params.append(member_id)
                conditions.append(f"member_id = ${len(params)}")

            where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            params.extend([limit, offset])

            query = f'''
                SELECT * FROM {self.schema}.{self.table}
                {where_clause}
                ORDER BY created_at DESC
                LIMIT ${len(params) - 1} OFFSET ${len(params)}
            '''

            async with self.db:
                results = await self.db.query(query, params=params)

            return [self._row_to_freeze(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing freezes: {e}")
            raise

    # ====================
    # Writes
    # ====================

    async def create_freeze(self, data: Dict[str, Any]) -> FreezeRequest:
        """Insert a pending request"""
        freeze_id = data.get("freeze_id") or f"frz_{uuid.uuid4().hex[:16]}"
        now = datetime.now(timezone.utc)

        query = f'''
            INSERT INTO {self.schema}.{self.table} (
                freeze_id, member_id, user_id, requested_start_date, requested_end_date,
                duration_months, reason, status, freeze_year, freeze_fee_total,
                fee_paid, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
            RETURNING *
        '''
        params = [
            freeze_id,
            data["member_id"],
            data.get("user_id"),
            data["requested_start_date"],
            data["requested_end_date"],
            data["duration_months"],
            data.get("reason"),
            FreezeStatus.PENDING.value,
            data["freeze_year"],
            data["freeze_fee_total"],
            False,
            now,
            now,
        ]

        try:
            async with self.db:
                result = await self.db.query_row(query, params=params)
        except asyncpg.exceptions.UniqueViolationError as e:
            raise DuplicateFreezeRequestError(
                f"Member {data['member_id']} already has an outstanding freeze request"
            ) from e
        except Exception as e:
            logger.error(f"Error creating freeze request: {e}", exc_info=True)
            raise

        if not result:
            raise Exception("Failed to create freeze request")
        return self._row_to_freeze(result)

    async def update_status(
        self,
        freeze_id: str,
        expected_statuses: Sequence[FreezeStatus],
        new_status: FreezeStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[FreezeRequest]:
        """Conditional status change; None when the row was not in an expected status"""
        try:
            params: List[Any] = [
                new_status.value,
                datetime.now(timezone.utc),
                freeze_id,
                [s.value for s in expected_statuses],
            ]
            set_clauses = ["status = $1", "updated_at = $2"]

            for key, value in (fields or {}).items():
                if key not in UPDATABLE_FIELDS:
                    raise ValueError(f"Field cannot be updated: {key}")
                params.append(value)
                set_clauses.append(f"{key} = ${len(params)}")

            query = f'''
                UPDATE {self.schema}.{self.table}
                SET {", ".join(set_clauses)}
                WHERE freeze_id = $3 AND status = ANY($4::text[])
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=params)

            return self._row_to_freeze(result) if result else None

        except Exception as e:
            logger.error(f"Error updating freeze {freeze_id}: {e}")
            raise

    # ====================
    # Helpers
    # ====================

    def _row_to_freeze(self, row: Dict[str, Any]) -> FreezeRequest:
        """Convert database row to FreezeRequest model"""
        return FreezeRequest(
            id=row.get("id"),
            freeze_id=row.get("freeze_id"),
            member_id=str(row.get("member_id")),
            user_id=row.get("user_id"),
            requested_start_date=row.get("requested_start_date"),
            requested_end_date=row.get("requested_end_date"),
            duration_months=int(row.get("duration_months")),
            reason=row.get("reason"),
            status=FreezeStatus(row.get("status")),
            freeze_year=int(row.get("freeze_year")),
            freeze_fee_total=row.get("freeze_fee_total"),
            fee_paid=bool(row.get("fee_paid", False)),
            payment_reference=row.get("payment_reference"),
            reviewed_by=row.get("reviewed_by"),
            reviewed_at=row.get("reviewed_at"),
            rejection_reason=row.get("rejection_reason"),
            actual_start_date=row.get("actual_start_date"),
            actual_end_date=row.get("actual_end_date"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["FreezeRepository"]
