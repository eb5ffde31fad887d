"""Named binary tag reading."""
from .constants import TagKind
from .reader import TagReader, MAX_ARRAY_LENGTH

__all__ = [
    'TagKind',
    'TagReader',
    'MAX_ARRAY_LENGTH'
]
