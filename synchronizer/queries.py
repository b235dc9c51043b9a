"""
SQL text generation for one table map.

Statements are built by string concatenation so that the generated text is
exactly what the database map describes, e.g.

    select id, status from orders where updated_at > '2024-01-01 00:00:00'
    insert into orders_copy(order_id,status) values (42,'shipped')

Values are inlined without escaping. A value containing a single quote
breaks the statement, and untrusted source data can inject SQL. Production
deployments that cannot trust their source rows should switch these
builders to parameterized statements.
"""

from typing import Any, Optional, Sequence
from models.base import AttributeType
from models.mapping import AttributeMap, TableMap

# Lower bound used while the destination table is still empty
MIN_TIMESTAMP = "0000-00-00 00:00:00"

NULL_LITERAL = "null"


def _as_text(value: Any) -> str:
    # Binary columns are read as UTF-8 text, not as a bytes repr
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def build_last_sync_timestamp_query(table_map: TableMap) -> str:
    """Query for the destination high-water mark"""
    return (
        f"select max({table_map.destination_timestamp_attribute}) "
        f"from {table_map.destination_table}"
    )


def last_sync_timestamp_from_rows(rows: Sequence[Sequence[Any]]) -> str:
    """
    Extract the high-water mark from the rows of the max() query.
    
    No row, or a NULL aggregate, means nothing has been synced yet.
    """
    last_sync_timestamp: Optional[Any] = None
    for row in rows:
        last_sync_timestamp = row[0] if row else None
    if last_sync_timestamp is None:
        return MIN_TIMESTAMP
    return _as_text(last_sync_timestamp)


def build_select_query(table_map: TableMap, last_sync_timestamp: str) -> str:
    """Select the mapped source columns of rows newer than the high-water mark"""
    columns = ", ".join(table_map.source_attributes)
    return (
        f"select {columns} from {table_map.source_table} "
        f"where {table_map.source_timestamp_attribute} > '{last_sync_timestamp}'"
    )


def format_value(value: Any, attribute_type: AttributeType) -> str:
    """Render one value as a SQL literal"""
    text = NULL_LITERAL if value is None else _as_text(value)
    if attribute_type == AttributeType.STRING:
        return f"'{text}'"
    return text


def build_insert_statement(table_map: TableMap, row: Sequence[Any]) -> str:
    """
    Insert one source row into the destination table.
    
    Column i of ``row`` is written to destination attribute i.
    
    Raises:
        ValueError: If the row has fewer columns than the table map
    """
    attribute_maps: Sequence[AttributeMap] = table_map.attribute_maps
    if len(row) < len(attribute_maps):
        raise ValueError(
            f"Row has {len(row)} columns, table map {table_map.source_table} "
            f"expects {len(attribute_maps)}"
        )
    columns = ",".join(table_map.destination_attributes)
    values = ",".join(
        format_value(row[i], attribute_map.attribute_type)
        for i, attribute_map in enumerate(attribute_maps)
    )
    return f"insert into {table_map.destination_table}({columns}) values ({values})"
