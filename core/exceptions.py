"""
Custom exceptions for the database synchronizer with structured error context.

This module provides the exception hierarchy used by the DMML parser, the
synchronization engine and the sync agent. Each exception includes context
information for debugging and logging.

Exception Hierarchy:
    DBSyncException (base)
    ├── MappingError
    │   ├── MappingFileNotFoundError
    │   └── InvalidMappingFileError
    ├── QueryExecutionError
    │   ├── ReadQueryError
    │   └── WriteStatementError
    ├── DatabaseConnectionError
    └── SchedulerError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class DBSyncException(Exception):
    """
    Base exception for all synchronizer errors.
    
    Attributes:
        message: Human-readable error message
        context: Additional context information (table, statement, token, etc.)
        original_exception: The original exception that was caught (if any)
    """
    
    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)
        
        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()
        
        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception
    
    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"
        
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"
        
        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"
        
        return base_msg
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Mapping Errors
# ============================================================================

class MappingError(DBSyncException):
    """Base exception for database map loading failures."""
    pass


class MappingFileNotFoundError(MappingError):
    """
    Exception raised when the DMML file cannot be located or opened.
    
    Raised before any tokenization takes place.
    
    Context should include:
        - file_path: Path that was requested
    """
    pass


class InvalidMappingFileError(MappingError):
    """
    Exception raised when DMML text violates the grammar.
    
    Only the first violation is reported; no partial map is returned.
    
    Context should include:
        - position: Index of the offending token (or of end of input)
        - expected: The literal or element that was expected
        - found: The token that was read (None at end of input)
    """
    pass


# ============================================================================
# Query Execution Errors
# ============================================================================

class QueryExecutionError(DBSyncException):
    """Base exception for statements that failed against either database."""
    pass


class ReadQueryError(QueryExecutionError):
    """
    Exception raised when a read query fails.
    
    Context should include:
        - table_name: Table being read
        - query: The query text
        - database: "source" or "destination"
    """
    pass


class WriteStatementError(QueryExecutionError):
    """
    Exception raised when an insert statement fails.
    
    Context should include:
        - table_name: Destination table
        - statement: The statement text
        - row_index: Index of the row within the table's result set
    """
    pass


# ============================================================================
# Lifecycle Errors
# ============================================================================

class DatabaseConnectionError(DBSyncException):
    """
    Exception raised when the agent cannot open a database connection.
    
    Context should include:
        - database: "source" or "destination"
        - host: Host the agent tried to reach
    """
    pass


class SchedulerError(DBSyncException):
    """Exception raised when repeating sync cannot be started."""
    pass
