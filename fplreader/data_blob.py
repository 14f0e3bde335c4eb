# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Shared string area of an FPL playlist

Every variable-length string in an FPL file (track paths, field names
and field values) lives in one data area stored near the start of the
file. Chunk headers and key tables refer to those strings by byte
offset into that area.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import BinaryIO

import chardet

from fplreader.exceptions import (
    OffsetOutOfRangeError,
    TruncatedInputError,
    UnterminatedStringError,
)

logger = logging.getLogger(__name__)


def read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """
    Read exactly size bytes from stream.

    Args:
        stream: Binary file object positioned at the field
        size: Number of bytes to read
        what: Field description used in the error message

    Returns:
        The bytes read

    Raises:
        TruncatedInputError: If fewer than size bytes are available
    """
    data = stream.read(size)
    if len(data) != size:
        raise TruncatedInputError(
            f"Unexpected end of file reading {what}: "
            f"needed {size} bytes, got {len(data)}"
        )
    return data


def read_u32(stream: BinaryIO, what: str) -> int:
    """Read one little-endian unsigned 32-bit integer."""
    return struct.unpack('<I', read_exact(stream, 4, what))[0]


class DataBlob:
    """
    Immutable byte buffer holding all strings referenced by offset.

    The blob is loaded once per file and then shared read-only by
    every attribute lookup for that file. All reads are bounds checked.
    """

    def __init__(self, data: bytes, encoding: str = 'utf-8'):
        """
        Initialize the blob.

        Args:
            data: Raw data area bytes
            encoding: Text encoding of the stored strings (foobar2000 writes UTF-8)
        """
        self._data = bytes(data)
        self.encoding = encoding

    @classmethod
    def load(cls, stream: BinaryIO, encoding: str = 'utf-8') -> 'DataBlob':
        """
        Read the data area size and then the data area itself.

        Args:
            stream: Binary file object positioned after the signature
            encoding: Text encoding of the stored strings

        Returns:
            Loaded DataBlob

        Raises:
            TruncatedInputError: If the size field or the area is cut short
        """
        data_sz = read_u32(stream, 'data area size')
        logger.debug("size of primary data area = %d bytes", data_sz)
        data = read_exact(stream, data_sz, 'data area')
        return cls(data, encoding=encoding)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read_bytes(self, offset: int) -> bytes:
        """
        Return the raw bytes of the NUL-terminated string at offset.

        Raises:
            OffsetOutOfRangeError: If offset is not inside the blob
            UnterminatedStringError: If no NUL byte follows offset
        """
        if offset < 0 or offset >= len(self._data):
            raise OffsetOutOfRangeError(
                f"String offset {offset} is outside the data area (size {len(self._data)})"
            )
        end = self._data.find(b'\x00', offset)
        if end == -1:
            raise UnterminatedStringError(
                f"String at offset {offset} is not NUL-terminated before end of data area"
            )
        return self._data[offset:end]

    def read_cstring(self, offset: int) -> str:
        """
        Decode the NUL-terminated string at offset.

        Strings that are not valid in the blob's encoding (older
        playlists saved with a legacy code page) are decoded with the
        encoding chardet detects for them.

        Args:
            offset: Byte offset into the blob

        Returns:
            Decoded string (copied out of the blob)
        """
        raw = self.read_bytes(offset)
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError:
            detected = chardet.detect(raw)
            guess = detected.get('encoding') or self.encoding
            logger.debug(
                "string at offset %d is not %s, decoding as %s (confidence %.2f)",
                offset, self.encoding, guess, detected.get('confidence') or 0.0,
            )
            try:
                return raw.decode(guess, errors='replace')
            except LookupError:
                return raw.decode(self.encoding, errors='replace')
