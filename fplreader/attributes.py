# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Track attribute resolution

A track's key table packs two kinds of attributes:

- Primary keys: (numeric key, field name offset) pairs at word indices
  (2*i, 2*i+1). The value offset is not stored next to the pair; it is
  found in the value block that follows all primary pairs, at word
  index 1 + numeric_key + 2 * primary_key_count.
- Secondary keys: (field name offset, value offset) pairs starting at
  word index secondary_key_table_offset, with no numeric key.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from fplreader.chunk import ChunkHeader, KeyTable
from fplreader.data_blob import DataBlob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeRecord:
    """
    One metadata field of a track.

    numeric_key is set for primary attributes and None for secondary ones.
    """

    numeric_key: Optional[int]
    field_name: str
    value: str

    @property
    def is_primary(self) -> bool:
        return self.numeric_key is not None


@dataclass(frozen=True)
class TrackRecord:
    """
    A decoded playlist entry.

    Example:
        >>> track.get_attribute('Artist')
        'Boards of Canada'
        >>> track.find_attribute('comment') is None
        True
    """

    index: int
    filename: str
    header: ChunkHeader
    attributes: Tuple[AttributeRecord, ...]

    def find_attribute(self, name: str) -> Optional[str]:
        """
        Look up an attribute value by field name.

        Matching is case-insensitive and the first record in emission
        order wins (primary attributes come before secondary ones).

        Args:
            name: Field name, e.g. 'title' or 'album artist'

        Returns:
            The value, or None if the track has no such field
        """
        wanted = name.lower()
        for attribute in self.attributes:
            if attribute.field_name.lower() == wanted:
                return attribute.value
        return None

    def get_attribute(self, name: str, default: str = '') -> str:
        """
        Look up an attribute value, returning default (empty string) if absent.
        """
        value = self.find_attribute(name)
        return default if value is None else value

    def iter_attributes(self, primary: Optional[bool] = None) -> Iterator[AttributeRecord]:
        """Iterate attributes, optionally only primary (True) or secondary (False)."""
        for attribute in self.attributes:
            if primary is None or attribute.is_primary == primary:
                yield attribute

    def as_dict(self) -> dict:
        """Return the track as plain data; duplicate field names keep the first value."""
        fields = {}
        for attribute in self.attributes:
            fields.setdefault(attribute.field_name, attribute.value)
        return {
            'index': self.index,
            'filename': self.filename,
            'subsong_index': self.header.subsong_index,
            'file_size': self.file_size,
            'duration': self.duration_seconds,
            'replaygain_album_db': self.header.replaygain_album_db,
            'replaygain_track_db': self.header.replaygain_track_db,
            'replaygain_album_peak_db': self.header.replaygain_album_peak_db,
            'replaygain_track_peak_db': self.header.replaygain_track_peak_db,
            'attributes': fields,
        }

    @property
    def file_size(self) -> int:
        return self.header.file_size

    @property
    def duration_seconds(self) -> float:
        return self.header.duration_seconds


def _resolve_primary(header: ChunkHeader, key_table: KeyTable, blob: DataBlob) -> Iterator[AttributeRecord]:
    value_block_start = 1 + header.primary_key_count * 2
    for i in range(header.primary_key_count):
        numeric_key = key_table.word(2 * i, 'primary key')
        field_name = blob.read_cstring(key_table.word(2 * i + 1, 'primary field name'))
        # The key itself, not i, selects the slot in the value block
        value_offset = key_table.word(value_block_start + numeric_key, 'primary value')
        yield AttributeRecord(numeric_key, field_name, blob.read_cstring(value_offset))


def _resolve_secondary(header: ChunkHeader, key_table: KeyTable, blob: DataBlob) -> Iterator[AttributeRecord]:
    start = header.secondary_key_table_offset
    for i in range(header.secondary_key_count):
        name_offset = key_table.word(start + 2 * i, 'secondary field name')
        value_offset = key_table.word(start + 2 * i + 1, 'secondary value')
        yield AttributeRecord(None, blob.read_cstring(name_offset), blob.read_cstring(value_offset))


def resolve_attributes(header: ChunkHeader, key_table: KeyTable, blob: DataBlob) -> Tuple[AttributeRecord, ...]:
    """
    Translate a key table into attribute records.

    Primary attributes are emitted first, then secondary ones, each in
    table order.

    Args:
        header: The track's chunk header (supplies the key counts)
        key_table: The track's key table
        blob: The file's data area

    Returns:
        Tuple of primary_key_count + secondary_key_count records

    Raises:
        KeyTableIndexError: If a computed word index is outside the table
        OffsetOutOfRangeError: If a string offset is outside the blob
        UnterminatedStringError: If a string is not NUL-terminated
    """
    attributes = tuple(_resolve_primary(header, key_table, blob)) + \
        tuple(_resolve_secondary(header, key_table, blob))

    if logger.isEnabledFor(logging.DEBUG):
        for attribute in attributes:
            key = -1 if attribute.numeric_key is None else attribute.numeric_key
            logger.debug('  "%s" (key = %d) = "%s"', attribute.field_name, key, attribute.value)

    return attributes


def resolve_track(index: int, header: ChunkHeader, key_table: KeyTable, blob: DataBlob) -> TrackRecord:
    """Resolve the filename and attributes of one chunk into a TrackRecord."""
    filename = blob.read_cstring(header.filename_offset)
    return TrackRecord(
        index=index,
        filename=filename,
        header=header,
        attributes=resolve_attributes(header, key_table, blob),
    )
