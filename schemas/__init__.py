"""
Pydantic schemas for sync agent configuration.

Schemas:
    connection: DatabaseConfig (one database) and AgentConfig (source,
        destination, database map and sync interval)

Usage:
    from schemas.connection import AgentConfig, DatabaseConfig

Example:
    config = AgentConfig(
        source=DatabaseConfig.from_url("mysql+aiomysql://u:p@db1:3306/shop"),
        destination=DatabaseConfig.from_url("mysql+aiomysql://u:p@db2:3306/mirror"),
        db_map=load_dbmap("shop.dmml"),
        sync_interval=30,
    )
"""

from schemas.connection import AgentConfig, DatabaseConfig

__all__ = [
    "AgentConfig",
    "DatabaseConfig",
]
