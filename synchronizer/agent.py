"""
Sync agent: owns the two database connections and drives a synchronizer.

Typical use mirrors the lifecycle of a long-running sync service:

    agent = SyncAgent(config)
    await agent.connect()
    agent.sync()          # initial catch-up pass in the background
    await agent.hold()    # wait for it to finish
    agent.live_sync()     # then keep syncing every config.sync_interval
    ...
    agent.stop_sync()
    await agent.disconnect()
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from core.database import create_engine_for
from core.exceptions import DatabaseConnectionError, SchedulerError
from schemas.connection import AgentConfig, DatabaseConfig
from synchronizer.engine import DBSynchronizer
from synchronizer.executors import SQLAlchemyExecutor

logger = logging.getLogger(__name__)


class SyncAgent:
    """
    Lifecycle coordinator for one source/destination pair.
    
    Responsibilities:
    - Open and close both connections
    - Hand the connections to a fresh synchronizer per ``sync`` or
      ``live_sync`` call
    - Make sure only the current synchronizer uses the connections
    """
    
    def __init__(self, config: AgentConfig):
        self.config = config
        self.db_map = config.db_map
        self.sync_interval = config.sync_interval
        self.source: Optional[SQLAlchemyExecutor] = None
        self.destination: Optional[SQLAlchemyExecutor] = None
        self.synchronizer: Optional[DBSynchronizer] = None
        self._sync_task: Optional[asyncio.Task] = None
    
    @property
    def connected(self) -> bool:
        return self.source is not None and self.destination is not None
    
    def set_sync_interval(self, sync_interval: int):
        """Period used by the next ``live_sync`` call"""
        if sync_interval <= 0:
            raise SchedulerError(
                "Sync interval must be positive",
                context={"sync_interval": sync_interval}
            )
        self.sync_interval = sync_interval
    
    async def _open(self, name: str, db_config: DatabaseConfig) -> SQLAlchemyExecutor:
        executor = SQLAlchemyExecutor(create_engine_for(db_config.render_url()), name)
        try:
            await executor.connect()
        except Exception as e:
            await executor.engine.dispose()
            raise DatabaseConnectionError(
                f"Failed to connect to {name} database",
                context={"database": name, "location": db_config.describe()},
                original_exception=e
            )
        return executor
    
    async def connect(self):
        """Connect to the source and destination databases"""
        if self.connected:
            return
        logger.info(
            f"Connecting: {self.config.source.describe()} -> "
            f"{self.config.destination.describe()}"
        )
        source = await self._open("source", self.config.source)
        try:
            destination = await self._open("destination", self.config.destination)
        except DatabaseConnectionError:
            await source.close()
            raise
        self.source = source
        self.destination = destination
    
    async def disconnect(self):
        """
        Stop syncing and close both connections.
        
        A statement in flight is allowed to finish first.
        """
        logger.info("Disconnecting...")
        if self.synchronizer is not None:
            self.synchronizer.stop_sync()
            await self.synchronizer.join()
        if self._sync_task is not None and not self._sync_task.done():
            await asyncio.wait([self._sync_task])
        for executor in (self.destination, self.source):
            if executor is not None:
                await executor.close()
        self.source = None
        self.destination = None
        logger.info("Disconnected.")
    
    def _new_synchronizer(self) -> DBSynchronizer:
        if not self.connected:
            raise DatabaseConnectionError("Agent is not connected; call connect() first")
        if self.synchronizer is not None:
            # Connections belong to exactly one synchronizer at a time
            self.synchronizer.stop_sync()
        self.synchronizer = DBSynchronizer(self.source, self.destination, self.db_map)
        return self.synchronizer
    
    def sync(self) -> asyncio.Task:
        """
        Start one synchronization pass in the background.
        
        Use this for the first sync, or after a long pause, before
        ``live_sync``. Await ``hold`` to wait for the pass.
        """
        synchronizer = self._new_synchronizer()
        self._sync_task = asyncio.create_task(synchronizer.sync())
        return self._sync_task
    
    async def hold(self) -> Optional[Dict[str, Any]]:
        """Wait for the pass started by ``sync`` and return its statistics"""
        if self._sync_task is None:
            return None
        return await self._sync_task
    
    def live_sync(self):
        """Sync every ``sync_interval`` seconds until ``stop_sync``"""
        synchronizer = self._new_synchronizer()
        synchronizer.live_sync(self.sync_interval)
    
    def stop_sync(self):
        """Stop the current synchronizer after its in-flight statement"""
        if self.synchronizer is not None:
            self.synchronizer.stop_sync()
