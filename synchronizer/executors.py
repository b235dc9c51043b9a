"""
Query executors: the only way the synchronizer talks to a database.

An executor is bound to one database and offers two operations:

- ``execute_read(query)`` returns the result rows with positional access
- ``execute_write(statement)`` runs a statement and raises on failure

The synchronizer accepts anything with this shape, which keeps it
independent of drivers and lets tests hand in fakes.
"""

from typing import Any, Optional, Protocol, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
import asyncio
import logging

logger = logging.getLogger(__name__)

Row = Sequence[Any]

# Statements are complete SQL text with literals inlined, so the driver must
# not look for parameter markers in them
_NO_PARAMETERS = {"no_parameters": True}


class QueryExecutor(Protocol):
    """Read/write capability for one database"""

    async def execute_read(self, query: str) -> Sequence[Row]:
        ...

    async def execute_write(self, statement: str) -> None:
        ...


class SQLAlchemyExecutor:
    """
    Executor backed by one long-lived SQLAlchemy async connection.
    
    The connection runs in AUTOCOMMIT mode: every write is committed on
    its own and every read sees the latest committed data. Calls are
    serialized through a lock, since a DBAPI connection cannot run two
    statements at once.
    """
    
    def __init__(self, engine: AsyncEngine, name: str):
        self.engine = engine
        self.name = name
        self._connection: Optional[AsyncConnection] = None
        self._lock = asyncio.Lock()
    
    @property
    def connected(self) -> bool:
        return self._connection is not None
    
    async def connect(self) -> None:
        """Open the connection if it is not open yet"""
        if self._connection is not None:
            return
        connection = await self.engine.connect()
        self._connection = await connection.execution_options(isolation_level="AUTOCOMMIT")
        logger.info(f"Connected to {self.name} database")
    
    async def close(self) -> None:
        """Close the connection and dispose of the engine"""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        await self.engine.dispose()
        logger.info(f"Disconnected from {self.name} database")
    
    async def execute_read(self, query: str) -> Sequence[Tuple[Any, ...]]:
        async with self._lock:
            await self.connect()
            logger.debug(f"[{self.name}] {query}")
            result = await self._connection.exec_driver_sql(
                query, execution_options=_NO_PARAMETERS
            )
            return [tuple(row) for row in result.fetchall()]
    
    async def execute_write(self, statement: str) -> None:
        async with self._lock:
            await self.connect()
            logger.debug(f"[{self.name}] {statement}")
            await self._connection.exec_driver_sql(
                statement, execution_options=_NO_PARAMETERS
            )
