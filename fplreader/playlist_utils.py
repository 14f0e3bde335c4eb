# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Playlist utility functions for common operations.

This module provides utility functions for batch decoding, quick
signature checks and playlist summaries.

Copyright 2025 DNAi inc.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from pathlib import Path

from fplreader.attributes import TrackRecord
from fplreader.core import FPLReader
from fplreader.decoder import FPL_MAGIC, FPL_MAGIC_SIZE
from fplreader.renderers import album_artist_for


def has_fpl_signature(file_path: Union[str, Path]) -> bool:
    """
    Check whether a file starts with the FPL signature without decoding it.

    Args:
        file_path: Path to the file to check

    Returns:
        True if the first 16 bytes are the FPL signature

    Example:
        >>> if has_fpl_signature('Default.fpl'):
        ...     tracks = FPLReader('Default.fpl').get_tracks()
    """
    path = Path(file_path)
    if not path.is_file():
        return False
    with open(path, 'rb') as f:
        return f.read(FPL_MAGIC_SIZE) == FPL_MAGIC


def batch_read_playlists(
    file_paths: Iterable[Union[str, Path]],
    options: Optional[Dict[str, Any]] = None,
    error_handler: Optional[Callable[[Path, Exception], None]] = None
) -> Dict[Path, List[TrackRecord]]:
    """
    Decode several playlists one after another.

    Each file gets its own reader and decoder, so files are independent.

    Args:
        file_paths: Playlist paths to decode
        options: FPLReader options applied to every file
        error_handler: Optional callback (path, exception). Without one,
                      the first error propagates.

    Returns:
        Dictionary mapping each successfully decoded path to its tracks

    Example:
        >>> results = batch_read_playlists(['a.fpl', 'b.fpl'])
        >>> len(results[Path('a.fpl')])
        12
    """
    results = {}

    for file_path in file_paths:
        path = Path(file_path)
        try:
            with FPLReader(path, options=options) as reader:
                results[path] = reader.get_tracks()
        except Exception as e:
            if error_handler is None:
                raise
            error_handler(path, e)

    return results


def get_playlist_summary(tracks: Iterable[TrackRecord]) -> Dict[str, Any]:
    """
    Summarize decoded tracks.

    Args:
        tracks: Decoded tracks

    Returns:
        Dictionary with track count, total duration, total file size,
        and the number of distinct album artist/album pairs
    """
    track_count = 0
    total_duration = 0.0
    total_size = 0
    albums = set()

    for track in tracks:
        track_count += 1
        total_duration += track.duration_seconds
        total_size += track.file_size
        album = track.get_attribute('album')
        if album:
            albums.add((album_artist_for(track).lower(), album.lower()))

    return {
        'track_count': track_count,
        'total_duration': total_duration,
        'total_size': total_size,
        'album_count': len(albums),
    }
