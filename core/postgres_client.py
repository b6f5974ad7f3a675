"""
PostgreSQL Client for Club Microservices

Thin async wrapper over an asyncpg connection pool.
Provides service discovery integration and a consistent database access pattern.

Usage:
    from core.postgres_client import AsyncPostgresClient

    db = AsyncPostgresClient.from_config(config_manager)

    # Execute queries
    async with db:
        rows = await db.query("SELECT * FROM credit.credit_grants WHERE member_id = $1", [member_id])

    # Idempotent schema setup from a service's migrations/ directory
    await db.apply_migrations(Path(__file__).parent / "migrations")

    # Multi-statement unit of work
    async with db.transaction() as conn:
        await conn.execute("UPDATE ...", ...)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

logger = logging.getLogger(__name__)


class AsyncPostgresClient:
    """
    Async PostgreSQL client backed by an asyncpg pool.

    The pool is created lazily on first use (or explicitly via connect()),
    so constructing a repository never opens a network connection.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "club",
        username: str = "postgres",
        password: str = "",
        min_size: int = 1,
        max_size: int = 10,
        user_id: Optional[str] = None,
    ):
        self.host = host
        self.port = port
        self.database = database
        self.username = username
        self.password = password
        self.min_size = min_size
        self.max_size = max_size
        self.user_id = user_id or "club"
        self._pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_config(cls, config, user_id: Optional[str] = None) -> "AsyncPostgresClient":
        """Build a client from a ConfigManager"""
        infra = config.get_infra_config()
        host, port = config.discover_service(
            service_name="postgres_service",
            default_host=infra.postgres_host,
            default_port=infra.postgres_port,
            env_host_key="POSTGRES_HOST",
            env_port_key="POSTGRES_PORT",
        )
        logger.info(f"Connecting to PostgreSQL at {host}:{port}/{infra.postgres_db}")
        return cls(
            host=host,
            port=port,
            database=infra.postgres_db,
            username=infra.postgres_user,
            password=infra.postgres_password,
            min_size=infra.postgres_min_pool,
            max_size=infra.postgres_max_pool,
            user_id=user_id,
        )

    async def connect(self) -> None:
        """Create the connection pool if it does not exist yet"""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            host=self.host,
            port=self.port,
            database=self.database,
            user=self.username,
            password=self.password,
            min_size=self.min_size,
            max_size=self.max_size,
        )
        logger.info(f"PostgreSQL pool ready for {self.user_id}: {self.host}:{self.port}/{self.database}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Pool stays open for the process lifetime; close() releases it.
        return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return all rows as dicts"""
        await self.connect()
        async with self._pool.acquire() as conn:
            records = await conn.fetch(sql, *(params or []))
        return [dict(r) for r in records]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return the first row, or None"""
        await self.connect()
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(sql, *(params or []))
        return dict(record) if record else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute a statement and return the command status (e.g. 'UPDATE 1')"""
        await self.connect()
        async with self._pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    async def apply_migrations(self, directory: Path) -> List[str]:
        """
        Run every .sql file in directory, in file name order.

        The files hold idempotent DDL (CREATE ... IF NOT EXISTS), so this runs
        on every service start. Returns the applied file names.
        """
        applied = []
        for path in sorted(Path(directory).glob("*.sql")):
            await self.execute(path.read_text(encoding="utf-8"))
            applied.append(path.name)
            logger.info(f"Applied schema file {path.name} for {self.user_id}")
        return applied

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block inside one transaction"""
        await self.connect()
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> Dict[str, Any]:
        """Check database health"""
        try:
            row = await self.query_row("SELECT 1 AS ok")
            return {"healthy": bool(row and row.get("ok") == 1)}
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    async def close(self):
        """Close the connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.user_id}")


__all__ = ["AsyncPostgresClient"]
