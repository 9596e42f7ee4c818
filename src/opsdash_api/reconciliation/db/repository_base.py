"""
Base Repository

Base class shared by the opsdash repositories.
Concrete repositories inherit from this class and add domain-specific queries.
"""

SCHEMA = "opsdash"


class BaseRepository:
    """
    Base repository holding the pool and the qualified table name.

    The pool is anything exposing ``acquire()`` as an async context manager
    (an asyncpg.Pool or a DomainDBPool).
    """

    def __init__(self, pool, table_name: str, id_column: str = "id"):
        """
        Initialize base repository.

        Args:
            pool: asyncpg connection pool
            table_name: Database table name (without schema prefix)
            id_column: Primary key column name
        """
        self.pool = pool
        self.table = table_name
        self.id_col = id_column

    @property
    def qualified_table(self) -> str:
        return f"{SCHEMA}.{self.table}"

    async def count(self) -> int:
        """Total number of rows in the table."""
        async with self.pool.acquire() as conn:
            return await conn.fetchval(f"SELECT COUNT(*) FROM {self.qualified_table}")
