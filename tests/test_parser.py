"""
Tests for the schematic schema parser
"""

import io
import struct
import logging

import pytest

from schematic_decoder.errors import MalformedLength, SchemaViolation, TruncatedInput
from schematic_decoder.nbt import TagKind, TagReader
from schematic_decoder.schematic import (
    DOCUMENT_FIELDS,
    ENTITY_FIELDS,
    EntityRecord,
    ParserState,
    SchematicParser,
)

from .builders import (
    BYTE_ARRAY,
    INT,
    STRING,
    build_schematic,
    byte_array_tag,
    compound,
    int_tag,
    short_tag,
    string_tag,
    tag_header,
)


def parser_for(raw: bytes, **kwargs) -> SchematicParser:
    return SchematicParser(TagReader(io.BytesIO(raw)), **kwargs)


def parse(raw: bytes, **kwargs):
    return parser_for(raw, **kwargs).parse()


class TestValidDocuments:
    """Test decoding of well-formed documents"""

    def test_fields(self):
        blocks = bytes(range(24))
        raw = build_schematic(2, 3, 4, blocks=blocks, offsets=(-3, 7, 65536))
        schematic = parse(raw)

        assert schematic.width == 2
        assert schematic.length == 3
        assert schematic.height == 4
        assert schematic.materials == 'Alpha'
        assert schematic.blocks == blocks
        assert schematic.data is None
        assert (schematic.we_offset_x, schematic.we_offset_y, schematic.we_offset_z) == (-3, 7, 65536)
        assert schematic.entities == ()

    def test_extension_buffer(self):
        raw = build_schematic(1, 1, 2, blocks=b'\x01\x02', data=b'\x00\x03')
        assert parse(raw).data == b'\x00\x03'

    def test_member_order_does_not_matter(self):
        members = (
            byte_array_tag('Blocks', b'\x05') +
            string_tag('Materials', 'Alpha') +
            short_tag('Height', 1) +
            short_tag('Length', 1) +
            short_tag('Width', 1)
        )
        schematic = parse(compound('Schematic', members))
        assert schematic.material_at(0, 0, 0) == 5

    def test_optional_members_default(self):
        schematic = parse(compound('Schematic', string_tag('Materials', 'Alpha')))
        assert schematic.width == schematic.length == schematic.height == 0
        assert schematic.blocks == b''
        assert schematic.we_offset_x == 0

    def test_empty_entities(self):
        raw = build_schematic(1, 1, 1, entities=[])
        assert parse(raw).entities == ()

    def test_entities_without_members(self):
        raw = build_schematic(1, 1, 1, entities=[b'', b''])
        assert parse(raw).entities == (EntityRecord(), EntityRecord())

    def test_trailing_bytes_are_not_read(self):
        raw = build_schematic(1, 1, 1) + b'garbage'
        reader = TagReader(io.BytesIO(raw))
        SchematicParser(reader).parse()
        assert reader.offset == len(raw) - len(b'garbage')

    def test_duplicate_field_keeps_later_value(self, caplog):
        raw = build_schematic(1, 1, 1, extra=int_tag('WEOffsetX', 9))
        with caplog.at_level(logging.WARNING):
            schematic = parse(raw)
        assert schematic.we_offset_x == 9
        assert 'Duplicate document field WEOffsetX' in caplog.text


class TestSchemaViolations:
    """Test rejection of documents that do not match the schema"""

    def test_root_must_be_compound(self):
        raw = tag_header(STRING, 'Schematic') + b'\x00\x00'
        with pytest.raises(SchemaViolation) as excinfo:
            parse(raw)
        assert excinfo.value.kind == TagKind.STRING

    def test_root_end_tag(self):
        with pytest.raises(SchemaViolation):
            parse(b'\x00')

    def test_root_name(self):
        with pytest.raises(SchemaViolation) as excinfo:
            parse(build_schematic(1, 1, 1, root_name='Structure'))
        assert excinfo.value.name == 'Structure'

    def test_unknown_field(self):
        raw = build_schematic(1, 1, 1, extra=string_tag('TileEntities', 'x'))
        with pytest.raises(SchemaViolation) as excinfo:
            parse(raw)
        assert excinfo.value.name == 'TileEntities'
        assert 'Unknown document field' in str(excinfo.value)

    def test_wrong_field_kind(self):
        members = tag_header(INT, 'Width') + b'\x00\x00\x00\x01' + string_tag('Materials', 'Alpha')
        with pytest.raises(SchemaViolation) as excinfo:
            parse(compound('Schematic', members))
        assert excinfo.value.name == 'Width'
        assert excinfo.value.kind == TagKind.INT

    def test_entities_must_be_list(self):
        raw = build_schematic(1, 1, 1, extra=compound('Entities', b''))
        with pytest.raises(SchemaViolation):
            parse(raw)

    @pytest.mark.parametrize('materials', ['Classic', 'alpha', ''])
    def test_unsupported_materials(self, materials):
        with pytest.raises(SchemaViolation) as excinfo:
            parse(build_schematic(1, 1, 1, materials=materials))
        assert excinfo.value.name == 'Materials'

    def test_missing_materials(self):
        members = short_tag('Width', 0)
        with pytest.raises(SchemaViolation):
            parse(compound('Schematic', members))

    def test_blocks_length_mismatch(self):
        with pytest.raises(SchemaViolation) as excinfo:
            parse(build_schematic(2, 2, 2, blocks=bytes(7)))
        assert excinfo.value.name == 'Blocks'

    def test_missing_blocks_for_nonempty_volume(self):
        members = short_tag('Width', 1) + short_tag('Length', 1) + short_tag('Height', 1)
        members += string_tag('Materials', 'Alpha')
        with pytest.raises(SchemaViolation):
            parse(compound('Schematic', members))

    def test_data_length_mismatch(self):
        with pytest.raises(SchemaViolation) as excinfo:
            parse(build_schematic(2, 1, 1, blocks=bytes(2), data=bytes(3)))
        assert excinfo.value.name == 'Data'

    def test_negative_dimension(self):
        with pytest.raises(SchemaViolation) as excinfo:
            parse(build_schematic(-1, 1, 1, blocks=b''))
        assert excinfo.value.name == 'Width'

    def test_malformed_array_length_names_field(self):
        members = string_tag('Materials', 'Alpha') + tag_header(BYTE_ARRAY, 'Data') + struct.pack('>i', -4)
        with pytest.raises(MalformedLength) as excinfo:
            parse(compound('Schematic', members))
        assert excinfo.value.name == 'Data'
        assert excinfo.value.kind == TagKind.BYTE_ARRAY
        assert excinfo.value.length == -4

    def test_entity_with_member_is_rejected(self):
        raw = build_schematic(1, 1, 1, entities=[string_tag('id', 'Zombie')])
        with pytest.raises(SchemaViolation) as excinfo:
            parse(raw)
        assert excinfo.value.name == 'id'
        assert 'Unknown entity field' in str(excinfo.value)

    def test_entity_element_must_be_compound(self):
        members = build_schematic(1, 1, 1)[:-1]
        raw = members + tag_header(9, 'Entities') + b'\x08\x00\x00' + b'\x00'
        with pytest.raises(SchemaViolation):
            parse(raw)


class TestEntityFields:
    """Test extending the entity member table"""

    def test_registered_entity_field(self):
        entity_fields = ENTITY_FIELDS.copy()
        entity_fields.register('id', TagKind.STRING, 'id', lambda p: p.reader.read_length_prefixed_string())
        raw = build_schematic(1, 1, 1, entities=[string_tag('id', 'Zombie'), b''])

        schematic = parse(raw, entity_fields=entity_fields)

        assert schematic.entities == (EntityRecord('Zombie'), EntityRecord(''))
        assert 'id' not in ENTITY_FIELDS

    def test_default_tables(self):
        assert len(ENTITY_FIELDS) == 0
        assert DOCUMENT_FIELDS.list_supported_fields() == {
            'Width': 'SHORT',
            'Length': 'SHORT',
            'Height': 'SHORT',
            'Materials': 'STRING',
            'Blocks': 'BYTE_ARRAY',
            'Data': 'BYTE_ARRAY',
            'WEOffsetX': 'INT',
            'WEOffsetY': 'INT',
            'WEOffsetZ': 'INT',
            'Entities': 'LIST',
        }


class TestParserState:
    """Test the per-document state machine"""

    def test_done_after_success(self):
        parser = parser_for(build_schematic(1, 1, 1))
        assert parser.state is ParserState.EXPECT_ROOT
        parser.parse()
        assert parser.state is ParserState.DONE

    def test_failed_after_error(self):
        parser = parser_for(build_schematic(1, 1, 1)[:10])
        with pytest.raises(TruncatedInput):
            parser.parse()
        assert parser.state is ParserState.FAILED

    def test_variant_check_failure(self):
        parser = parser_for(build_schematic(1, 1, 1, materials='Classic'))
        with pytest.raises(SchemaViolation):
            parser.parse()
        assert parser.state is ParserState.FAILED

    def test_parser_is_single_use(self):
        parser = parser_for(build_schematic(1, 1, 1))
        parser.parse()
        with pytest.raises(RuntimeError):
            parser.parse()
