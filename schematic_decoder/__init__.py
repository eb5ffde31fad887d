# schematic_decoder/__init__.py
"""Reader for gzip compressed .schematic volumes."""
from .decoder import decode, decode_file
from .errors import (
    DecodeError,
    MalformedLength,
    SchemaViolation,
    TransportError,
    TruncatedInput,
)
from .schematic import EntityRecord, Schematic

__version__ = '0.1.0'

__all__ = [
    'decode',
    'decode_file',
    'DecodeError',
    'MalformedLength',
    'SchemaViolation',
    'TransportError',
    'TruncatedInput',
    'EntityRecord',
    'Schematic'
]
