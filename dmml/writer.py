"""
Serialize a DBMap back into DMML text
"""

from pathlib import Path
from typing import List, Union
import logging

from models.mapping import AttributeMap, DBMap, TableMap

logger = logging.getLogger(__name__)

INDENT = "  "


def _element(tag: str, value: str, depth: int) -> str:
    return f"{INDENT * depth}<{tag}> {value} </{tag}>"


def _attrmap_lines(attribute_map: AttributeMap) -> List[str]:
    return [
        f"{INDENT * 2}<attrmap>",
        _element("source", attribute_map.source_attribute, 3),
        _element("dest", attribute_map.destination_attribute, 3),
        _element("type", attribute_map.attribute_type.value, 3),
        f"{INDENT * 2}</attrmap>",
    ]


def _tablemap_lines(table_map: TableMap) -> List[str]:
    lines = [
        f"{INDENT}<tablemap>",
        _element("source", table_map.source_table, 2),
        _element("dest", table_map.destination_table, 2),
        _element("sourcetimestamp", table_map.source_timestamp_attribute, 2),
        _element("desttimestamp", table_map.destination_timestamp_attribute, 2),
    ]
    for attribute_map in table_map.attribute_maps:
        lines.extend(_attrmap_lines(attribute_map))
    lines.append(f"{INDENT}</tablemap>")
    return lines


def dump_dbmap(db_map: DBMap) -> str:
    """Render ``db_map`` as DMML, one tag per line."""
    lines = ["<databasemap>"]
    for table_map in db_map.table_maps:
        lines.extend(_tablemap_lines(table_map))
    lines.append("</databasemap>")
    return "\n".join(lines) + "\n"


def write_dbmap(db_map: DBMap, path: Union[str, Path]) -> Path:
    """Write ``db_map`` to ``path`` as DMML and return the path."""
    path = Path(path)
    path.write_text(dump_dbmap(db_map), encoding="utf-8")
    logger.info(f"Wrote {len(db_map.table_maps)} table maps to {path}")
    return path
