"""
Unit tests for DMML parsing and writing
"""

import io
import pytest
from unittest.mock import patch
from core.exceptions import InvalidMappingFileError, MappingFileNotFoundError
from dmml.parser import load_dbmap, parse_dbmap
from dmml.writer import dump_dbmap, write_dbmap
from models.base import AttributeType
from models.mapping import DBMap

MINIMAL_TABLE = (
    "<tablemap> <source> a </source> <dest> b </dest> "
    "<sourcetimestamp> ts </sourcetimestamp> <desttimestamp> ts </desttimestamp> "
)
ATTRMAP = "<attrmap> <source> x </source> <dest> y </dest> <type> STRING </type> </attrmap> "


class TestParseValid:
    """Test parsing of well-formed DMML"""
    
    def test_parse_sample(self, sample_dmml, db_map):
        assert parse_dbmap(sample_dmml) == db_map
    
    def test_parse_keeps_file_order(self, sample_dmml):
        result = parse_dbmap(sample_dmml)
        
        assert [t.source_table for t in result.table_maps] == ["orders", "customers"]
        orders = result.table_maps[0]
        assert orders.source_attributes == ("id", "status")
        assert orders.destination_attributes == ("order_id", "status")
        assert [a.attribute_type for a in orders.attribute_maps] == [
            AttributeType.NUMERICAL,
            AttributeType.STRING,
        ]
    
    def test_empty_database_map(self):
        assert parse_dbmap("<databasemap> </databasemap>") == DBMap()
    
    def test_table_without_attributes(self):
        result = parse_dbmap(f"<databasemap> {MINIMAL_TABLE} </tablemap> </databasemap>")
        
        assert len(result.table_maps) == 1
        assert result.table_maps[0].attribute_maps == ()
    
    def test_any_whitespace_separates_tokens(self):
        text = f"<databasemap>\n\t{MINIMAL_TABLE}\n{ATTRMAP}\r\n</tablemap></databasemap>"
        # "</tablemap></databasemap>" is one token, so this must fail
        with pytest.raises(InvalidMappingFileError):
            parse_dbmap(text)
        
        text = f"<databasemap>\n\t{MINIMAL_TABLE}\n{ATTRMAP}\r\n</tablemap>\t\t</databasemap>\n"
        assert parse_dbmap(text).table_maps[0].source_attributes == ("x",)


class TestRoundTrip:
    """Test that written DMML parses back to the same map"""
    
    def test_dump_then_parse(self, db_map):
        assert parse_dbmap(dump_dbmap(db_map)) == db_map
    
    def test_parse_dump_parse(self, sample_dmml):
        first = parse_dbmap(sample_dmml)
        
        assert parse_dbmap(dump_dbmap(first)) == first
    
    def test_write_then_load(self, db_map, tmp_path):
        path = write_dbmap(db_map, tmp_path / "map.dmml")
        
        assert load_dbmap(path) == db_map
    
    def test_dump_empty_map(self):
        assert dump_dbmap(DBMap()) == "<databasemap>\n</databasemap>\n"


class TestParseInvalid:
    """Test that every grammar violation is rejected"""
    
    @pytest.mark.parametrize("text", [
        "",
        "   \n ",
        "<databasemap>",
        "<database> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE}",
        f"<databasemap> {MINIMAL_TABLE} </tablemap>",
        f"<databasemap> {MINIMAL_TABLE} {ATTRMAP}",
        f"<databasemap> {MINIMAL_TABLE} </table> </databasemap>",
        "<databasemap> <tablemap> <dest> b </dest> </tablemap> </databasemap>",
        "<databasemap> <tablemap> <source> a </dest> </tablemap> </databasemap>",
        "<databasemap> <tablemap> <source> a </source> <dest> b </dest> "
        "<desttimestamp> ts </desttimestamp> </tablemap> </databasemap>",
        "<databasemap> <tablemap> <source> a",
        f"<databasemap> {MINIMAL_TABLE} <attrmap> <source> x </source> <dest> y </dest> "
        "<type> TEXT </type> </attrmap> </tablemap> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE} <attrmap> <source> x </source> <dest> y </dest> "
        "<type> string </type> </attrmap> </tablemap> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE} <attrmap> <source> x </source> <dest> y </dest> "
        "</attrmap> </tablemap> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE} <attrmap> <source> x </source> <dest> y </dest> "
        "<type> STRING </type> </tablemap> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE} <attrmap> <dest> y </dest> <source> x </source> "
        "<type> STRING </type> </attrmap> </tablemap> </databasemap>",
        f"<databasemap> {MINIMAL_TABLE} <unknown> </tablemap> </databasemap>",
        "<databasemap> orders </databasemap>",
        f"{MINIMAL_TABLE} </tablemap>",
        f"<databasemap> </databasemap> {MINIMAL_TABLE} </tablemap>",
        "<databasemap> </databasemap> </databasemap>",
    ])
    def test_invalid_text_raises(self, text):
        with pytest.raises(InvalidMappingFileError):
            parse_dbmap(text)
    
    def test_first_violation_is_reported(self):
        text = (
            f"<databasemap> {MINIMAL_TABLE} <attrmap> <source> x </source> "
            "<dest> y </dest> <type> BLOB </type> </attrmap> </oops>"
        )
        
        with pytest.raises(InvalidMappingFileError) as exc_info:
            parse_dbmap(text)
        
        context = exc_info.value.context
        assert context["found"] == "BLOB"
        assert context["expected"] == "STRING or NUMERICAL"
    
    def test_truncation_reports_end_of_input(self):
        with pytest.raises(InvalidMappingFileError) as exc_info:
            parse_dbmap("<databasemap> <tablemap> <source>")
        
        assert exc_info.value.context["found"] is None
        assert exc_info.value.context["position"] == 3
    
    def test_every_truncation_of_valid_text_fails(self, sample_dmml):
        tokens = sample_dmml.split()
        
        for end in range(len(tokens)):
            with pytest.raises(InvalidMappingFileError):
                parse_dbmap(" ".join(tokens[:end]))


class TestLoad:
    """Test loading from paths and streams"""
    
    def test_load_from_path_string(self, sample_dmml, db_map, tmp_path):
        path = tmp_path / "sample.dmml"
        path.write_text(sample_dmml)
        
        assert load_dbmap(str(path)) == db_map
    
    def test_load_from_stream(self, sample_dmml, db_map):
        assert load_dbmap(io.StringIO(sample_dmml)) == db_map
    
    def test_missing_file_raises_not_found(self, tmp_path):
        with pytest.raises(MappingFileNotFoundError) as exc_info:
            load_dbmap(tmp_path / "missing.dmml")
        
        assert exc_info.value.context["file_path"].endswith("missing.dmml")
    
    def test_missing_file_is_not_tokenized(self, tmp_path):
        with patch("dmml.parser.DMMLParser") as mock_parser:
            with pytest.raises(MappingFileNotFoundError):
                load_dbmap(tmp_path / "missing.dmml")
        
        mock_parser.assert_not_called()
    
    def test_directory_raises_not_found(self, tmp_path):
        with pytest.raises(MappingFileNotFoundError):
            load_dbmap(tmp_path)
    
    def test_invalid_file_raises_invalid(self, tmp_path):
        path = tmp_path / "broken.dmml"
        path.write_text("<databasemap> <tablemap>")
        
        with pytest.raises(InvalidMappingFileError):
            load_dbmap(path)
    
    def test_binary_file_raises_invalid(self, tmp_path):
        path = tmp_path / "binary.dmml"
        path.write_bytes(b"\xff\xfe\x00<databasemap>")
        
        with pytest.raises(InvalidMappingFileError):
            load_dbmap(path)
