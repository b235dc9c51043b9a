"""
Immutable database map: which source tables and columns feed which
destination tables and columns.
"""

from typing import Tuple
from pydantic import BaseModel, validator
from models.base import AttributeType


def _check_identifier(value: str) -> str:
    # DMML is whitespace-tokenized, so names can never carry whitespace
    if not value:
        raise ValueError("identifier cannot be empty")
    if any(ch.isspace() for ch in value):
        raise ValueError(f"identifier {value!r} cannot contain whitespace")
    return value


class AttributeMap(BaseModel):
    """One source column mapped to one destination column."""

    source_attribute: str
    destination_attribute: str
    attribute_type: AttributeType

    @validator("source_attribute", "destination_attribute")
    def check_identifier(cls, v):
        return _check_identifier(v)

    class Config:
        frozen = True


class TableMap(BaseModel):
    """
    One source table mapped to one destination table.
    
    The order of ``attribute_maps`` is the column order of both the
    generated SELECT and the generated INSERT.
    """

    source_table: str
    destination_table: str
    source_timestamp_attribute: str
    destination_timestamp_attribute: str
    attribute_maps: Tuple[AttributeMap, ...] = ()

    @validator(
        "source_table",
        "destination_table",
        "source_timestamp_attribute",
        "destination_timestamp_attribute",
    )
    def check_identifier(cls, v):
        return _check_identifier(v)

    class Config:
        frozen = True

    def add_attribute_map(self, attribute_map: AttributeMap) -> "TableMap":
        """Return a copy with ``attribute_map`` appended"""
        return self.model_copy(
            update={"attribute_maps": self.attribute_maps + (attribute_map,)}
        )

    @property
    def source_attributes(self) -> Tuple[str, ...]:
        return tuple(a.source_attribute for a in self.attribute_maps)

    @property
    def destination_attributes(self) -> Tuple[str, ...]:
        return tuple(a.destination_attribute for a in self.attribute_maps)


class DBMap(BaseModel):
    """Ordered table maps; the order is the sync order within a pass."""

    table_maps: Tuple[TableMap, ...] = ()

    class Config:
        frozen = True

    def add_table_map(self, table_map: TableMap) -> "DBMap":
        """Return a copy with ``table_map`` appended"""
        return self.model_copy(update={"table_maps": self.table_maps + (table_map,)})
