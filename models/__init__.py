"""
Database map models.

This package defines the in-memory mapping between two databases:

Models:
    base: Shared enums (AttributeType, SyncStatus)
    mapping: AttributeMap, TableMap and DBMap

Design:
    All models are frozen Pydantic models. A DBMap is assembled once,
    either programmatically or by the DMML parser, and is read-only for
    the lifetime of the synchronizer that uses it. ``add_table_map`` and
    ``add_attribute_map`` return new values instead of mutating.

Usage:
    from models.base import AttributeType
    from models.mapping import AttributeMap, TableMap, DBMap

Example:
    table_map = TableMap(
        source_table="orders",
        destination_table="orders_copy",
        source_timestamp_attribute="updated_at",
        destination_timestamp_attribute="synced_at",
    ).add_attribute_map(
        AttributeMap(
            source_attribute="id",
            destination_attribute="order_id",
            attribute_type=AttributeType.NUMERICAL,
        )
    )
    db_map = DBMap().add_table_map(table_map)
"""

from models.base import AttributeType, SyncStatus
from models.mapping import AttributeMap, TableMap, DBMap

__all__ = [
    "AttributeType",
    "SyncStatus",
    "AttributeMap",
    "TableMap",
    "DBMap",
]
