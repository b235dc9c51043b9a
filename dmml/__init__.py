"""
DMML (database map markup) reading and writing.

Modules:
    parser: DMML text or file -> DBMap, with strict first-violation validation
    writer: DBMap -> DMML text or file

Usage:
    from dmml import load_dbmap, dump_dbmap

Example:
    db_map = load_dbmap("/etc/dbsync/orders.dmml")
    print(dump_dbmap(db_map))
"""

from dmml.parser import DMMLParser, load_dbmap, parse_dbmap
from dmml.writer import dump_dbmap, write_dbmap

__all__ = [
    "DMMLParser",
    "load_dbmap",
    "parse_dbmap",
    "dump_dbmap",
    "write_dbmap",
]
