"""
DMML parser: builds a DBMap from database map markup.

DMML is tokenized on whitespace only, so table and attribute names can
never contain whitespace. The grammar is strict and order-sensitive:

    databasemap  := "<databasemap>" tablemap* "</databasemap>"
    tablemap     := "<tablemap>" source dest sourcets destts attrmap* "</tablemap>"
    source       := "<source>" TOKEN "</source>"
    dest         := "<dest>" TOKEN "</dest>"
    sourcets     := "<sourcetimestamp>" TOKEN "</sourcetimestamp>"
    destts       := "<desttimestamp>" TOKEN "</desttimestamp>"
    attrmap      := "<attrmap>" source dest type "</attrmap>"
    type         := "<type>" ("STRING"|"NUMERICAL") "</type>"

Parsing is recursive descent with one token of lookahead. The first
violation raises InvalidMappingFileError; there is no recovery and no
partial result.
"""

from pathlib import Path
from typing import List, Optional, TextIO, Union
import logging

from core.exceptions import InvalidMappingFileError, MappingFileNotFoundError
from models.base import AttributeType
from models.mapping import AttributeMap, DBMap, TableMap

logger = logging.getLogger(__name__)

DATABASEMAP_OPEN = "<databasemap>"
DATABASEMAP_CLOSE = "</databasemap>"
TABLEMAP_OPEN = "<tablemap>"
TABLEMAP_CLOSE = "</tablemap>"
ATTRMAP_OPEN = "<attrmap>"
ATTRMAP_CLOSE = "</attrmap>"
SOURCE = "source"
DEST = "dest"
SOURCE_TIMESTAMP = "sourcetimestamp"
DEST_TIMESTAMP = "desttimestamp"
TYPE = "type"

MappingSource = Union[str, Path, TextIO]


class _TokenStream:
    """Whitespace-split tokens with a read position."""

    def __init__(self, text: str):
        self.tokens: List[str] = text.split()
        self.position = 0

    def peek(self) -> Optional[str]:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def advance(self, expected: str) -> str:
        token = self.peek()
        if token is None:
            self.fail(expected, "premature end of input")
        self.position += 1
        return token

    def expect(self, literal: str) -> None:
        token = self.advance(literal)
        if token != literal:
            self.position -= 1
            self.fail(literal, f"expected {literal}")

    def fail(self, expected: str, reason: str):
        raise InvalidMappingFileError(
            f"Invalid database map: {reason}",
            context={
                "position": self.position,
                "expected": expected,
                "found": self.peek(),
            }
        )


class DMMLParser:
    """
    Recursive-descent parser over one DMML document.
    
    Each ``_parse_*`` method consumes exactly the tokens of its grammar
    rule and returns the model it describes.
    """

    def __init__(self, text: str):
        self.stream = _TokenStream(text)

    def parse(self) -> DBMap:
        db_map = self._parse_databasemap()
        if self.stream.peek() is not None:
            # Nothing, not even another <tablemap>, may follow the root
            self.stream.fail("end of input", f"unexpected token after {DATABASEMAP_CLOSE}")
        return db_map

    def _parse_databasemap(self) -> DBMap:
        self.stream.expect(DATABASEMAP_OPEN)
        db_map = DBMap()
        while True:
            token = self.stream.peek()
            if token == DATABASEMAP_CLOSE:
                self.stream.advance(DATABASEMAP_CLOSE)
                return db_map
            if token == TABLEMAP_OPEN:
                db_map = db_map.add_table_map(self._parse_tablemap())
                continue
            if token is None:
                self.stream.fail(DATABASEMAP_CLOSE, "premature end of input")
            self.stream.fail(
                f"{TABLEMAP_OPEN} or {DATABASEMAP_CLOSE}", f"unexpected token {token}"
            )

    def _parse_tablemap(self) -> TableMap:
        self.stream.expect(TABLEMAP_OPEN)
        table_map = TableMap(
            source_table=self._parse_element(SOURCE),
            destination_table=self._parse_element(DEST),
            source_timestamp_attribute=self._parse_element(SOURCE_TIMESTAMP),
            destination_timestamp_attribute=self._parse_element(DEST_TIMESTAMP),
        )
        while True:
            token = self.stream.peek()
            if token == TABLEMAP_CLOSE:
                self.stream.advance(TABLEMAP_CLOSE)
                return table_map
            if token == ATTRMAP_OPEN:
                table_map = table_map.add_attribute_map(self._parse_attrmap())
                continue
            if token is None:
                self.stream.fail(TABLEMAP_CLOSE, "premature end of input")
            self.stream.fail(
                f"{ATTRMAP_OPEN} or {TABLEMAP_CLOSE}", f"unexpected token {token}"
            )

    def _parse_attrmap(self) -> AttributeMap:
        self.stream.expect(ATTRMAP_OPEN)
        attribute_map = AttributeMap(
            source_attribute=self._parse_element(SOURCE),
            destination_attribute=self._parse_element(DEST),
            attribute_type=self._parse_type(),
        )
        self.stream.expect(ATTRMAP_CLOSE)
        return attribute_map

    def _parse_type(self) -> AttributeType:
        self.stream.expect(f"<{TYPE}>")
        literal = self.stream.advance("STRING or NUMERICAL")
        try:
            attribute_type = AttributeType(literal)
        except ValueError:
            self.stream.position -= 1
            self.stream.fail("STRING or NUMERICAL", f"unrecognized type {literal}")
        self.stream.expect(f"</{TYPE}>")
        return attribute_type

    def _parse_element(self, tag: str) -> str:
        """<tag> TOKEN </tag>"""
        self.stream.expect(f"<{tag}>")
        value = self.stream.advance(f"{tag} name")
        self.stream.expect(f"</{tag}>")
        return value


def parse_dbmap(text: str) -> DBMap:
    """Parse DMML text into a DBMap."""
    return DMMLParser(text).parse()


def load_dbmap(source: MappingSource) -> DBMap:
    """
    Load a DBMap from a DMML file.
    
    Args:
        source: Path to the file, or an already-opened text stream
        
    Returns:
        DBMap with tables and attributes in file order
        
    Raises:
        MappingFileNotFoundError: If the path cannot be opened
        InvalidMappingFileError: On the first grammar violation
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with open(path, encoding="utf-8") as f:
                text = _read(f, str(path))
        except OSError as e:
            raise MappingFileNotFoundError(
                f"DMML file not found: {path}",
                context={"file_path": str(path)},
                original_exception=e
            )
        name = str(path)
    else:
        text = _read(source, getattr(source, "name", "<stream>"))
        name = getattr(source, "name", "<stream>")
    
    db_map = parse_dbmap(text)
    logger.info(f"Loaded database map from {name}: {len(db_map.table_maps)} table maps")
    return db_map


def _read(stream: TextIO, name: str) -> str:
    try:
        return stream.read()
    except UnicodeDecodeError as e:
        raise InvalidMappingFileError(
            "Invalid database map: file is not valid text",
            context={"file_path": name},
            original_exception=e
        )
