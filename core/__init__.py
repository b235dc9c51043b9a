"""
Core utilities and configuration for the database synchronizer.

This package provides foundational components used throughout the project:

Modules:
    config: Application configuration and environment variable management
    database: Async engine creation for the source and destination databases
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_engine_for
    from core.exceptions import InvalidMappingFileError, MappingFileNotFoundError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()
    
    # Engine for the source database
    engine = create_engine_for(settings.SOURCE_DATABASE_URL)
"""

__all__ = [
    "settings",
    "create_engine_for",
    "setup_logging",
    # Exceptions
    "DBSyncException",
    "MappingError",
    "MappingFileNotFoundError",
    "InvalidMappingFileError",
    "QueryExecutionError",
    "ReadQueryError",
    "WriteStatementError",
    "DatabaseConnectionError",
    "SchedulerError",
]
