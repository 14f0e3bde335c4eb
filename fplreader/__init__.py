# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
fplreader - foobar2000 FPL playlist reader

Decodes foobar2000's binary .fpl playlists into track records
(path, size, duration, replay gain and tag attributes) and renders
them as CSV, Rhythmbox XML, SQL, M3U or JSON.

The format is undocumented; all parsing is done by reading the binary
structures directly.

Copyright 2025 DNAi inc.
"""

__version__ = "0.10.0"
__author__ = "DNAi inc."

from fplreader.exceptions import (
    FPLReaderError,
    PlaylistReadError,
    PlaylistWriteError,
    TruncatedInputError,
    FormatError,
    OffsetOutOfRangeError,
    KeyTableIndexError,
    UnterminatedStringError,
    UnsupportedFormatError,
    DecoderStateError,
)
from fplreader.data_blob import DataBlob
from fplreader.chunk import ChunkHeader, KeyTable, read_chunk
from fplreader.attributes import AttributeRecord, TrackRecord, resolve_attributes
from fplreader.decoder import (
    FPL_MAGIC,
    PlaylistDecoder,
    DecoderState,
    TrackDecoded,
    TrackFailed,
    EndOfPlaylist,
)
from fplreader.core import FPLReader
from fplreader.renderers import RENDERERS, Renderer, get_renderer, render_playlist
from fplreader.playlist_utils import (
    has_fpl_signature,
    batch_read_playlists,
    get_playlist_summary,
)

__all__ = [
    "FPLReader",
    "FPLReaderError",
    "PlaylistReadError",
    "PlaylistWriteError",
    "TruncatedInputError",
    "FormatError",
    "OffsetOutOfRangeError",
    "KeyTableIndexError",
    "UnterminatedStringError",
    "UnsupportedFormatError",
    "DecoderStateError",
    "DataBlob",
    "ChunkHeader",
    "KeyTable",
    "read_chunk",
    "AttributeRecord",
    "TrackRecord",
    "resolve_attributes",
    "FPL_MAGIC",
    "PlaylistDecoder",
    "DecoderState",
    "TrackDecoded",
    "TrackFailed",
    "EndOfPlaylist",
    "RENDERERS",
    "Renderer",
    "get_renderer",
    "render_playlist",
    "has_fpl_signature",
    "batch_read_playlists",
    "get_playlist_summary",
]
