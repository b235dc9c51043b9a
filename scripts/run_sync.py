"""
Script to synchronize the configured databases until interrupted
"""

import asyncio
import signal
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import DatabaseConnectionError, MappingError
from core.logging import setup_logging
from dmml.parser import load_dbmap
from schemas.connection import AgentConfig, DatabaseConfig
from synchronizer.agent import SyncAgent

logger = logging.getLogger(__name__)


async def run_sync(dmml_file: str):
    """Initial pass, then live sync until SIGINT/SIGTERM"""
    
    try:
        db_map = load_dbmap(dmml_file)
    except MappingError as e:
        logger.error(f"Cannot load database map: {e}")
        sys.exit(1)
    
    config = AgentConfig(
        source=DatabaseConfig.from_url(settings.SOURCE_DATABASE_URL),
        destination=DatabaseConfig.from_url(settings.DEST_DATABASE_URL),
        db_map=db_map,
        sync_interval=settings.SYNC_INTERVAL_SECONDS,
    )
    agent = SyncAgent(config)
    
    try:
        await agent.connect()
    except DatabaseConnectionError as e:
        logger.error(str(e))
        sys.exit(1)
    
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    
    try:
        agent.sync()
        result = await agent.hold()
        logger.info(f"Initial sync finished: {result}")
        
        agent.live_sync()
        logger.info(f"Live sync every {agent.sync_interval}s, press Ctrl+C to stop")
        await stop.wait()
    finally:
        agent.stop_sync()
        await agent.disconnect()


if __name__ == "__main__":
    setup_logging()
    dmml_file = sys.argv[1] if len(sys.argv) > 1 else settings.DMML_FILE
    if not dmml_file:
        logger.error("No DMML file given (argument or DMML_FILE setting)")
        sys.exit(1)
    asyncio.run(run_sync(dmml_file))
