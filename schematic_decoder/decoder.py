"""Schematic decode entry point."""
from typing import BinaryIO, Optional, Union
import gzip
import io
import logging
import os

from .errors import TransportError
from .nbt.reader import MAX_ARRAY_LENGTH, TagReader
from .schematic.parser import SchematicParser
from .schematic.volume import Schematic

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO]


def _decode_stream(stream: BinaryIO, compressed: bool, max_array_length: int) -> Schematic:
    if not compressed:
        return SchematicParser(TagReader(stream, max_array_length=max_array_length)).parse()
    # Closing the gzip wrapper leaves the caller's stream open
    with gzip.GzipFile(fileobj=stream, mode='rb') as unpacked:
        reader = TagReader(unpacked, max_array_length=max_array_length)
        schematic = SchematicParser(reader).parse()
        trailing = reader.skip_remaining()
        if trailing:
            logger.warning(f"Ignoring {trailing} bytes after the root tag")
        return schematic


def decode(source: Source,
           compressed: bool = True,
           max_array_length: Optional[int] = None) -> Schematic:
    """
    Decode a schematic from a path, a bytes object or a binary stream

    Args:
        source: File path, raw bytes, or readable binary stream
        compressed: Whether the source is gzip compressed
        max_array_length: Override for the byte array length limit

    Returns:
        Schematic: The decoded volume

    Raises:
        TransportError: If the source cannot be opened or decompressed
        TruncatedInput: If the tag stream ends early
        SchemaViolation: If the document does not match the schematic schema
    """
    if max_array_length is None:
        max_array_length = MAX_ARRAY_LENGTH

    if isinstance(source, (bytes, bytearray, memoryview)):
        return _decode_stream(io.BytesIO(bytes(source)), compressed, max_array_length)

    if isinstance(source, (str, os.PathLike)):
        try:
            f = open(source, 'rb')
        except OSError as e:
            raise TransportError(f"Cannot open {source}: {e}") from e
        logger.debug(f"Decoding {source}")
        with f:
            return _decode_stream(f, compressed, max_array_length)

    return _decode_stream(source, compressed, max_array_length)


def decode_file(path: Union[str, os.PathLike], compressed: bool = True) -> Schematic:
    """Decode a schematic file from disk."""
    return decode(os.fspath(path), compressed=compressed)
