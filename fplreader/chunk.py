# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
FPL track chunk reader

Each playlist entry is stored as a fixed 68-byte chunk header followed
by a variable-length key table of 32-bit words.

Chunk header layout (all little-endian):
- reserved1 (u32, meaning unknown)
- filename_offset (u32, offset into the data area)
- subsong_index (u32)
- file_size (u32)
- reserved2, reserved3, reserved4 (u32, meaning unknown)
- duration (8 bytes, IEEE-754 double)
- replay gain album/track, album peak/track peak (4 x f32)
- key_table_len (u32)
- primary_key_count (u32)
- secondary_key_count (u32)
- secondary_key_table_offset (u32)

Copyright 2025 DNAi inc.
"""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional, Sequence, Tuple

from fplreader.data_blob import read_exact
from fplreader.exceptions import FormatError, KeyTableIndexError, TruncatedInputError

logger = logging.getLogger(__name__)

CHUNK_HEADER_FORMAT = '<7I8s4f4I'
CHUNK_HEADER_SIZE = struct.calcsize(CHUNK_HEADER_FORMAT)  # 68

# Upper bound on key_table_len; anything larger means the stream is out of step
MAX_KEY_TABLE_LEN = 512

# primary_key_count, secondary_key_count and secondary_key_table_offset are
# counted in key_table_len but live in the header
KEY_TABLE_HEADER_WORDS = 3


@dataclass(frozen=True)
class ChunkHeader:
    """
    Fixed-layout header describing one playlist track.

    The reserved fields are carried through unchanged; their meaning
    is unknown.
    """

    reserved1: int
    filename_offset: int
    subsong_index: int
    file_size: int
    reserved2: int
    reserved3: int
    reserved4: int
    duration_raw: bytes
    replaygain_album_db: float
    replaygain_track_db: float
    replaygain_album_peak_db: float
    replaygain_track_peak_db: float
    key_table_len: int
    primary_key_count: int
    secondary_key_count: int
    secondary_key_table_offset: int

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ChunkHeader':
        """Unpack a 68-byte chunk header."""
        return cls(*struct.unpack(CHUNK_HEADER_FORMAT, data))

    @property
    def duration_seconds(self) -> float:
        # Stored as raw bytes so the double is never subject to struct alignment
        return struct.unpack('<d', self.duration_raw)[0]

    @property
    def attribute_count(self) -> int:
        return self.primary_key_count + self.secondary_key_count

    @property
    def real_key_count(self) -> int:
        """Number of key table words that follow the header."""
        return self.key_table_len - KEY_TABLE_HEADER_WORDS

    def validate(self) -> None:
        """
        Check the key table length against the format bounds.

        Raises:
            FormatError: If key_table_len is above 512 or below 3
        """
        if self.key_table_len > MAX_KEY_TABLE_LEN:
            raise FormatError(
                f"keys_dex > {MAX_KEY_TABLE_LEN} (keys_dex = {self.key_table_len}). "
                "Chunk stream is out of step with the file."
            )
        if self.key_table_len < KEY_TABLE_HEADER_WORDS:
            raise FormatError(
                f"keys_dex < {KEY_TABLE_HEADER_WORDS} (keys_dex = {self.key_table_len}). "
                "Adjusted key count would be negative."
            )


class KeyTable:
    """
    The 32-bit words following a chunk header.

    Every access goes through word(), which checks the index.
    """

    def __init__(self, words: Sequence[int]):
        self.words: Tuple[int, ...] = tuple(words)

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self):
        return iter(self.words)

    def __repr__(self) -> str:
        return f"KeyTable({list(self.words)!r})"

    def word(self, index: int, what: str = 'key table word') -> int:
        """
        Return the word at index.

        Raises:
            KeyTableIndexError: If index is outside the table
        """
        if index < 0 or index >= len(self.words):
            raise KeyTableIndexError(
                f"{what} index {index} is outside the key table ({len(self.words)} words)"
            )
        return self.words[index]


def read_key_table(stream: BinaryIO, count: int) -> KeyTable:
    """Read count little-endian u32 words."""
    data = read_exact(stream, count * 4, f"key table ({count} words)")
    return KeyTable(struct.unpack(f'<{count}I', data))


def read_chunk(stream: BinaryIO) -> Optional[Tuple[ChunkHeader, KeyTable]]:
    """
    Read one chunk header and its key table.

    Args:
        stream: Binary file object positioned at a chunk boundary

    Returns:
        (ChunkHeader, KeyTable), or None if the stream ends exactly
        at the chunk boundary

    Raises:
        TruncatedInputError: If the header or key table is cut short
        FormatError: If key_table_len is out of bounds
    """
    data = stream.read(CHUNK_HEADER_SIZE)
    if not data:
        return None
    if len(data) != CHUNK_HEADER_SIZE:
        raise TruncatedInputError(
            f"Unexpected end of file reading chunk header: "
            f"needed {CHUNK_HEADER_SIZE} bytes, got {len(data)}"
        )

    header = ChunkHeader.from_bytes(data)
    logger.debug(
        "chunk: filename_offset=%d subsong=%d file_size=%d duration=%.2f "
        "reserved=(%#010x, %#010x, %#010x, %#010x)",
        header.filename_offset, header.subsong_index, header.file_size,
        header.duration_seconds, header.reserved1, header.reserved2,
        header.reserved3, header.reserved4,
    )
    logger.debug(
        "chunk: replaygain album=%.2f track=%.2f album_peak=%.2f track_peak=%.2f",
        header.replaygain_album_db, header.replaygain_track_db,
        header.replaygain_album_peak_db, header.replaygain_track_peak_db,
    )
    logger.debug(
        "chunk: keys_dex=%d key_primary=%d key_second=%d key_sec_offset=%d",
        header.key_table_len, header.primary_key_count,
        header.secondary_key_count, header.secondary_key_table_offset,
    )

    header.validate()
    key_table = read_key_table(stream, header.real_key_count)
    return header, key_table
