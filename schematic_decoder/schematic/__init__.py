"""Schematic schema parsing."""
from .parser import (
    DOCUMENT_FIELDS,
    ENTITY_FIELDS,
    ROOT_TAG_NAME,
    SUPPORTED_MATERIALS,
    ParserState,
    SchematicParser,
)
from .registry import FieldRegistry, FieldSpec
from .volume import EntityRecord, Schematic

__all__ = [
    'DOCUMENT_FIELDS',
    'ENTITY_FIELDS',
    'ROOT_TAG_NAME',
    'SUPPORTED_MATERIALS',
    'ParserState',
    'SchematicParser',
    'FieldRegistry',
    'FieldSpec',
    'EntityRecord',
    'Schematic'
]
