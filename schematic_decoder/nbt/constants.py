# schematic_decoder/nbt/constants.py
from enum import IntEnum


class TagKind(IntEnum):
    """Tag kind discriminators as they appear on the wire."""
    END = 0          # Closes a compound or entity list, carries no name
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
