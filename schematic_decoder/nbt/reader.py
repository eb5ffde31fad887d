"""Big-endian tag reader over a decompressed byte stream."""
from typing import BinaryIO, Dict, Optional, Tuple, Union
import logging
import zlib

from construct import (
    Construct,
    Float32b,
    Float64b,
    Int8sb,
    Int8ub,
    Int16sb,
    Int16ub,
    Int32sb,
    Int64sb,
)

from ..errors import MalformedLength, SchemaViolation, TransportError, TruncatedInput
from .constants import TagKind

logger = logging.getLogger(__name__)

# Upper bound for byte array length prefixes (256 MiB)
MAX_ARRAY_LENGTH = 1 << 28

KIND_FORMAT = Int8ub
STRING_LENGTH_FORMAT = Int16ub
ARRAY_LENGTH_FORMAT = Int32sb

SCALAR_FORMATS: Dict[TagKind, Construct] = {
    TagKind.BYTE: Int8sb,
    TagKind.SHORT: Int16sb,
    TagKind.INT: Int32sb,
    TagKind.LONG: Int64sb,
    TagKind.FLOAT: Float32b,
    TagKind.DOUBLE: Float64b,
}


class TagReader:
    """Cursor over a tag stream.

    The reader consumes exactly the bytes each value needs and never looks
    ahead. Short reads surface as TruncatedInput, failures of the underlying
    stream (for example a corrupt gzip envelope) as TransportError.
    """

    def __init__(self, stream: BinaryIO, max_array_length: int = MAX_ARRAY_LENGTH):
        """Initialize tag reader.

        Args:
            stream: Binary stream yielding raw (decompressed) tag data
            max_array_length: Largest byte array length prefix accepted
        """
        self.stream = stream
        self.max_array_length = max_array_length
        self._offset = 0

    @property
    def offset(self) -> int:
        """Number of bytes consumed so far."""
        return self._offset

    def _read_chunk(self, size: int, requested: int, received: int) -> bytes:
        """Single read from the stream, with transport errors translated."""
        try:
            chunk = self.stream.read(size)
        except EOFError as e:
            raise TruncatedInput(
                f"Input ended while reading {requested} bytes: {e}",
                offset=self._offset, requested=requested, received=received
            ) from e
        except (OSError, zlib.error) as e:
            raise TransportError(f"Failed to read from source: {e}", offset=self._offset) from e
        return chunk or b''

    def _read_exact(self, size: int) -> bytes:
        """Read exactly size bytes, looping over partial reads until EOF."""
        data = bytearray()
        while len(data) < size:
            chunk = self._read_chunk(size - len(data), size, len(data))
            if not chunk:
                raise TruncatedInput(
                    f"Expected {size} bytes, got {len(data)}",
                    offset=self._offset, requested=size, received=len(data)
                )
            data += chunk
        self._offset += size
        return bytes(data)

    def skip_remaining(self, chunk_size: int = 1 << 16) -> int:
        """Read the stream to EOF, returning the number of bytes skipped.

        Reading to the end makes the gzip transport verify its trailer.
        """
        skipped = 0
        while True:
            chunk = self._read_chunk(chunk_size, chunk_size, 0)
            if not chunk:
                return skipped
            skipped += len(chunk)

    def _read_format(self, fmt: Construct) -> Union[int, float]:
        return fmt.parse(self._read_exact(fmt.sizeof()))

    def read_u16_be(self) -> int:
        """Read an unsigned 16-bit integer."""
        return self._read_format(STRING_LENGTH_FORMAT)

    def read_i16_be(self) -> int:
        """Read a signed 16-bit integer."""
        return self._read_format(Int16sb)

    def read_i32_be(self) -> int:
        """Read a signed 32-bit integer."""
        return self._read_format(Int32sb)

    def read_scalar(self, kind: TagKind) -> Union[int, float]:
        """Read the payload of a fixed-width scalar tag.

        Args:
            kind: One of BYTE, SHORT, INT, LONG, FLOAT or DOUBLE

        Raises:
            SchemaViolation: If kind has no fixed-width payload
        """
        fmt = SCALAR_FORMATS.get(kind)
        if fmt is None:
            raise SchemaViolation(
                f"Tag kind {kind.name} is not a scalar",
                offset=self._offset, kind=kind
            )
        return self._read_format(fmt)

    def read_length_prefixed_string(self) -> str:
        """Read a u16 length followed by that many bytes of text."""
        length = self.read_u16_be()
        return self._read_exact(length).decode('utf-8', 'replace')

    def read_byte_array(self) -> bytes:
        """Read an i32 length followed by that many raw bytes.

        Raises:
            MalformedLength: If the length is negative or above max_array_length
        """
        start = self._offset
        length = self._read_format(ARRAY_LENGTH_FORMAT)
        if length < 0:
            raise MalformedLength(f"Negative byte array length {length}", offset=start, length=length)
        if length > self.max_array_length:
            raise MalformedLength(
                f"Byte array length {length} exceeds limit {self.max_array_length}",
                offset=start, length=length
            )
        return self._read_exact(length)

    def read_tag_kind(self) -> TagKind:
        """Read a single kind discriminator byte."""
        start = self._offset
        value = self._read_format(KIND_FORMAT)
        try:
            return TagKind(value)
        except ValueError:
            raise SchemaViolation(f"Unknown tag kind {value}", offset=start, kind=value) from None

    def read_tag_header(self) -> Tuple[TagKind, Optional[str]]:
        """Read a tag kind and, unless it is END, the tag name."""
        kind = self.read_tag_kind()
        if kind == TagKind.END:
            return kind, None
        name = self.read_length_prefixed_string()
        logger.debug(f"Tag header {kind.name} '{name}' at byte {self._offset}")
        return kind, name
