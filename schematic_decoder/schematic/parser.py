"""Schematic document parser."""
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging

from ..errors import DecodeError, MalformedLength, SchemaViolation
from ..nbt.constants import TagKind
from ..nbt.reader import TagReader
from .registry import FieldRegistry
from .volume import EntityRecord, Schematic

logger = logging.getLogger(__name__)

ROOT_TAG_NAME = 'Schematic'
SUPPORTED_MATERIALS = 'Alpha'


class ParserState(Enum):
    """Progress of a single document parse."""
    EXPECT_ROOT = auto()
    READING_FIELDS = auto()
    VARIANT_CHECK = auto()
    DONE = auto()
    FAILED = auto()


def _build_document_fields() -> FieldRegistry:
    fields = FieldRegistry('document')
    fields.register('Width', TagKind.SHORT, 'width', lambda p: p.reader.read_i16_be())
    fields.register('Length', TagKind.SHORT, 'length', lambda p: p.reader.read_i16_be())
    fields.register('Height', TagKind.SHORT, 'height', lambda p: p.reader.read_i16_be())
    fields.register('Materials', TagKind.STRING, 'materials',
                    lambda p: p.reader.read_length_prefixed_string())
    fields.register('Blocks', TagKind.BYTE_ARRAY, 'blocks', lambda p: p.reader.read_byte_array())
    fields.register('Data', TagKind.BYTE_ARRAY, 'data', lambda p: p.reader.read_byte_array())
    fields.register('WEOffsetX', TagKind.INT, 'we_offset_x', lambda p: p.reader.read_i32_be())
    fields.register('WEOffsetY', TagKind.INT, 'we_offset_y', lambda p: p.reader.read_i32_be())
    fields.register('WEOffsetZ', TagKind.INT, 'we_offset_z', lambda p: p.reader.read_i32_be())
    fields.register('Entities', TagKind.LIST, 'entities', lambda p: tuple(p.parse_entity_list()))
    return fields


# No entity members are decoded yet; any member tag is rejected
DOCUMENT_FIELDS = _build_document_fields()
ENTITY_FIELDS = FieldRegistry('entity')


class SchematicParser:
    """Recursive descent parser for the schematic compound.

    One parser decodes one document. Any error leaves it in the FAILED
    state and the parser cannot be reused.
    """

    def __init__(self,
                 reader: TagReader,
                 document_fields: Optional[FieldRegistry] = None,
                 entity_fields: Optional[FieldRegistry] = None):
        """Initialize schematic parser.

        Args:
            reader: Tag reader positioned at the root tag
            document_fields: Root member table, defaults to DOCUMENT_FIELDS
            entity_fields: Entity member table, defaults to ENTITY_FIELDS
        """
        self.reader = reader
        self.document_fields = document_fields if document_fields is not None else DOCUMENT_FIELDS
        self.entity_fields = entity_fields if entity_fields is not None else ENTITY_FIELDS
        self.state = ParserState.EXPECT_ROOT

    def parse(self) -> Schematic:
        """Parse the document, tracking parser state."""
        if self.state != ParserState.EXPECT_ROOT:
            raise RuntimeError(f"Parser already used (state {self.state.name})")
        try:
            return self.parse_document()
        except DecodeError:
            self.state = ParserState.FAILED
            raise

    def _read_fields(self, registry: FieldRegistry, context: str) -> Dict[str, Any]:
        """Read named tags until END, dispatching each through registry."""
        values: Dict[str, Any] = {}
        while True:
            start = self.reader.offset
            kind, name = self.reader.read_tag_header()
            if kind == TagKind.END:
                return values

            spec = registry.get(name)
            if spec is None:
                raise SchemaViolation(
                    f"Unknown {context} field: {name}", offset=start, name=name, kind=kind
                )
            if kind != spec.kind:
                raise SchemaViolation(
                    f"{context.capitalize()} field {name} must be {spec.kind.name}, got {kind.name}",
                    offset=start, name=name, kind=kind
                )
            if spec.attribute in values:
                logger.warning(f"Duplicate {context} field {name}, keeping the later value")

            logger.debug(f"Reading {context} field {name} ({kind.name})")
            try:
                values[spec.attribute] = spec.read(self)
            except MalformedLength as e:
                # The reader does not know which field it was reading
                if e.name is None:
                    e.name, e.kind = name, kind
                raise

    def parse_document(self) -> Schematic:
        """Parse the root compound into a Schematic.

        Raises:
            SchemaViolation: If the root tag, a member, or the material
                variant does not match the schematic schema
            TruncatedInput: If the stream ends early
        """
        kind, name = self.reader.read_tag_header()
        if kind != TagKind.COMPOUND:
            raise SchemaViolation(
                f"Top level tag must be COMPOUND, got {kind.name}", offset=0, name=name, kind=kind
            )
        if name != ROOT_TAG_NAME:
            raise SchemaViolation(
                f"Unexpected root tag name '{name}', want '{ROOT_TAG_NAME}'",
                offset=0, name=name, kind=kind
            )

        self.state = ParserState.READING_FIELDS
        values = self._read_fields(self.document_fields, 'document')

        self.state = ParserState.VARIANT_CHECK
        materials = values.get('materials')
        if materials != SUPPORTED_MATERIALS:
            raise SchemaViolation(
                f"Materials must have '{SUPPORTED_MATERIALS}' value, got '{materials}'",
                offset=self.reader.offset, name='Materials', kind=TagKind.STRING
            )
        values.setdefault('blocks', b'')
        self._validate_volume(values)

        schematic = Schematic(**values)
        self.state = ParserState.DONE
        logger.debug(
            f"Decoded schematic {schematic.width}x{schematic.height}x{schematic.length} "
            f"with {len(schematic.entities)} entities"
        )
        return schematic

    def _validate_volume(self, values: Dict[str, Any]):
        """Check dimensions and buffer lengths agree."""
        for attribute, tag_name in (('width', 'Width'), ('length', 'Length'), ('height', 'Height')):
            if values.get(attribute, 0) < 0:
                raise SchemaViolation(
                    f"{tag_name} must not be negative, got {values[attribute]}",
                    offset=self.reader.offset, name=tag_name, kind=TagKind.SHORT
                )
            values.setdefault(attribute, 0)

        expected = values['width'] * values['length'] * values['height']
        for attribute, tag_name in (('blocks', 'Blocks'), ('data', 'Data')):
            buffer = values.get(attribute)
            if buffer is not None and len(buffer) != expected:
                raise SchemaViolation(
                    f"{tag_name} holds {len(buffer)} bytes, expected {expected} "
                    f"for {values['width']}x{values['height']}x{values['length']}",
                    offset=self.reader.offset, name=tag_name, kind=TagKind.BYTE_ARRAY
                )

    def parse_entity_list(self) -> List[EntityRecord]:
        """Parse entity compounds until an END kind byte."""
        entities = []
        while True:
            start = self.reader.offset
            kind = self.reader.read_tag_kind()
            if kind == TagKind.END:
                return entities
            if kind != TagKind.COMPOUND:
                raise SchemaViolation(
                    f"Entity list element must be COMPOUND, got {kind.name}",
                    offset=start, name='Entities', kind=kind
                )
            entities.append(self.parse_entity())

    def parse_entity(self) -> EntityRecord:
        """Parse the members of one entity compound."""
        values = self._read_fields(self.entity_fields, 'entity')
        return EntityRecord(**values)
