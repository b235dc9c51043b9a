"""
Async engine creation for the source and destination databases
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool
import logging

logger = logging.getLogger(__name__)


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine bound to one database"""
    logger.debug(f"Creating engine for {url.split('@')[-1]}")
    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,  # The engine's single worker is the only caller
        future=True
    )
