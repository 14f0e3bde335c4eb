# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
FPL playlist decoder

Walks an FPL file from its signature to the last track chunk and
produces a one-shot stream of events:

- TrackDecoded for every track that resolves
- TrackFailed for a track that could not be resolved (skip policy only)
- EndOfPlaylist exactly once, after the last track

File layout (all integers little-endian):
- 16-byte signature
- u32 data area size, followed by the data area
- u32 track count
- per track: 68-byte chunk header + key table

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, Optional, Union

from fplreader.attributes import TrackRecord, resolve_track
from fplreader.chunk import read_chunk
from fplreader.data_blob import DataBlob, read_exact, read_u32
from fplreader.exceptions import (
    DecoderStateError,
    FormatError,
    OffsetOutOfRangeError,
    PlaylistReadError,
    UnsupportedFormatError,
    UnterminatedStringError,
)

logger = logging.getLogger(__name__)

# Signature at the start of every foobar2000 FPL playlist
FPL_MAGIC = bytes([
    0xE1, 0xA0, 0x9C, 0x91, 0xF8, 0x3C, 0x77, 0x42,
    0x85, 0x2C, 0x3B, 0xCC, 0x14, 0x01, 0xD3, 0xF2,
])
FPL_MAGIC_SIZE = len(FPL_MAGIC)

ERROR_POLICIES = ('raise', 'skip')


class DecoderState(Enum):
    START = 'start'
    BLOB_LOADED = 'blob_loaded'
    TRACK_COUNT_KNOWN = 'track_count_known'
    ITERATING = 'iterating'
    DONE = 'done'


@dataclass(frozen=True)
class TrackDecoded:
    track: TrackRecord


@dataclass(frozen=True)
class TrackFailed:
    index: int
    error: PlaylistReadError


@dataclass(frozen=True)
class EndOfPlaylist:
    track_count: int
    tracks_decoded: int
    tracks_failed: int
    truncated: bool


DecodeEvent = Union[TrackDecoded, TrackFailed, EndOfPlaylist]


class PlaylistDecoder:
    """
    Decoder for one FPL playlist stream.

    The decoder owns no file handle; the caller opens the stream and
    keeps it open until the event stream is drained.

    Example:
        >>> with open('Default.fpl', 'rb') as f:
        ...     for track in PlaylistDecoder(f).tracks():
        ...         print(track.filename, track.get_attribute('title'))
    """

    def __init__(
        self,
        stream: BinaryIO,
        strict_signature: bool = True,
        on_error: str = 'raise',
        encoding: str = 'utf-8'
    ):
        """
        Initialize the decoder.

        Args:
            stream: Binary file object positioned at the start of the playlist
            strict_signature: If True, reject files whose signature is not FPL_MAGIC;
                             if False, only log a warning
            on_error: 'raise' aborts on the first error; 'skip' reports unresolvable
                     tracks as TrackFailed events and keeps going
            encoding: Text encoding of strings in the data area
        """
        if on_error not in ERROR_POLICIES:
            raise ValueError(f"Unknown error policy: {on_error}. Expected one of {', '.join(ERROR_POLICIES)}")

        self.stream = stream
        self.strict_signature = strict_signature
        self.on_error = on_error
        self.encoding = encoding

        self.state = DecoderState.START
        self.signature: Optional[bytes] = None
        self.blob: Optional[DataBlob] = None
        self.track_count: Optional[int] = None
        self._consumed = False

    def _read_signature(self) -> None:
        self.signature = read_exact(self.stream, FPL_MAGIC_SIZE, 'signature')
        if self.signature != FPL_MAGIC:
            if self.strict_signature:
                raise UnsupportedFormatError(
                    f"Invalid FPL file: unexpected signature {self.signature.hex()}"
                )
            logger.warning("signature %s does not match FPL signature, continuing", self.signature.hex())

    def read_preamble(self) -> None:
        """
        Read the signature, data area and track count.

        Called by events() when needed; calling it directly lets the
        caller inspect blob and track_count before iterating.
        """
        if self.state is not DecoderState.START:
            return

        self._read_signature()
        self.blob = DataBlob.load(self.stream, encoding=self.encoding)
        self.state = DecoderState.BLOB_LOADED

        self.track_count = read_u32(self.stream, 'track count')
        logger.debug("There are %d items in the playlist.", self.track_count)
        self.state = DecoderState.TRACK_COUNT_KNOWN

    def events(self) -> Iterator[DecodeEvent]:
        """
        Decode the playlist lazily.

        Yields:
            TrackDecoded / TrackFailed per track, then one EndOfPlaylist

        Raises:
            DecoderStateError: If the decoder has already been drained
            TruncatedInputError: If a fixed-size field is cut short
            FormatError: On a corrupt chunk header (policy 'raise')
            OffsetOutOfRangeError, UnterminatedStringError: On a bad
                string reference (policy 'raise')
        """
        if self._consumed:
            raise DecoderStateError("Playlist decoder has already been consumed")
        self._consumed = True
        return self._iterate()

    def _iterate(self) -> Iterator[DecodeEvent]:
        self.read_preamble()
        self.state = DecoderState.ITERATING

        decoded = 0
        failed = 0
        truncated = False
        index = 0

        while index < self.track_count:
            offset = self.stream.tell() if self.stream.seekable() else -1
            logger.debug("Reading track info at index %d, start offset 0x%08X", index, offset)

            try:
                chunk = read_chunk(self.stream)
            except FormatError as exc:
                if self.on_error == 'raise':
                    raise
                logger.error("track %d: %s", index, exc.message)
                failed += 1
                yield TrackFailed(index, exc)
                break

            if chunk is None:
                truncated = True
                logger.warning(
                    "playlist ended after %d of %d tracks", index, self.track_count
                )
                break

            header, key_table = chunk
            logger.debug("track %d has %d attribute fields", index, header.attribute_count)

            try:
                track = resolve_track(index, header, key_table, self.blob)
            except (OffsetOutOfRangeError, UnterminatedStringError) as exc:
                if self.on_error == 'raise':
                    raise
                logger.error("track %d: %s", index, exc.message)
                failed += 1
                yield TrackFailed(index, exc)
            else:
                logger.debug("track %d filename = \"%s\"", index, track.filename)
                decoded += 1
                yield TrackDecoded(track)

            index += 1

        self.state = DecoderState.DONE
        yield EndOfPlaylist(
            track_count=self.track_count,
            tracks_decoded=decoded,
            tracks_failed=failed,
            truncated=truncated,
        )

    def tracks(self) -> Iterator[TrackRecord]:
        """Yield only the decoded TrackRecords."""
        for event in self.events():
            if isinstance(event, TrackDecoded):
                yield event.track
