"""
Pytest configuration and fixtures
"""

import re
import pytest
from typing import Any, Dict, Optional, Sequence, Union
from unittest.mock import AsyncMock
from models.base import AttributeType
from models.mapping import AttributeMap, TableMap, DBMap

_FROM_TABLE = re.compile(r"\bfrom (\S+)")

ReadResult = Union[Sequence[Sequence[Any]], Exception]


def _make_executor(
    reads: Optional[Dict[str, ReadResult]] = None,
    write_side_effect=None
) -> AsyncMock:
    """
    Executor double.
    
    ``reads`` maps a table name to the rows returned by any query on that
    table, or to an exception the query raises. Unknown tables return no
    rows.
    """
    reads = reads or {}
    
    async def execute_read(query: str):
        table = _FROM_TABLE.search(query).group(1)
        result = reads.get(table, [])
        if isinstance(result, Exception):
            raise result
        return list(result)
    
    executor = AsyncMock()
    executor.execute_read = AsyncMock(side_effect=execute_read)
    executor.execute_write = AsyncMock(side_effect=write_side_effect)
    return executor


@pytest.fixture
def make_executor():
    """Factory for executor doubles, see _make_executor"""
    return _make_executor


@pytest.fixture
def orders_table_map():
    """orders -> orders_copy with a numeric and a string column"""
    return TableMap(
        source_table="orders",
        destination_table="orders_copy",
        source_timestamp_attribute="updated_at",
        destination_timestamp_attribute="synced_at",
        attribute_maps=(
            AttributeMap(
                source_attribute="id",
                destination_attribute="order_id",
                attribute_type=AttributeType.NUMERICAL
            ),
            AttributeMap(
                source_attribute="status",
                destination_attribute="status",
                attribute_type=AttributeType.STRING
            ),
        )
    )


@pytest.fixture
def customers_table_map():
    """customers -> customers_copy, timestamp column copied across"""
    return TableMap(
        source_table="customers",
        destination_table="customers_copy",
        source_timestamp_attribute="modified",
        destination_timestamp_attribute="modified",
        attribute_maps=(
            AttributeMap(
                source_attribute="name",
                destination_attribute="full_name",
                attribute_type=AttributeType.STRING
            ),
            AttributeMap(
                source_attribute="modified",
                destination_attribute="modified",
                attribute_type=AttributeType.STRING
            ),
        )
    )


@pytest.fixture
def db_map(orders_table_map, customers_table_map):
    return DBMap(table_maps=(orders_table_map, customers_table_map))


@pytest.fixture
def sample_dmml():
    """DMML describing the db_map fixture"""
    return """
<databasemap>
  <tablemap>
    <source> orders </source>
    <dest> orders_copy </dest>
    <sourcetimestamp> updated_at </sourcetimestamp>
    <desttimestamp> synced_at </desttimestamp>
    <attrmap>
      <source> id </source>
      <dest> order_id </dest>
      <type> NUMERICAL </type>
    </attrmap>
    <attrmap>
      <source> status </source>
      <dest> status </dest>
      <type> STRING </type>
    </attrmap>
  </tablemap>
  <tablemap>
    <source> customers </source>
    <dest> customers_copy </dest>
    <sourcetimestamp> modified </sourcetimestamp>
    <desttimestamp> modified </desttimestamp>
    <attrmap>
      <source> name </source>
      <dest> full_name </dest>
      <type> STRING </type>
    </attrmap>
    <attrmap>
      <source> modified </source>
      <dest> modified </dest>
      <type> STRING </type>
    </attrmap>
  </tablemap>
</databasemap>
"""
