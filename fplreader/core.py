# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Core FPLReader class

This module provides the main API for reading foobar2000 FPL playlists
from disk and rendering them. It wraps PlaylistDecoder with file
handling and an options dictionary.

Copyright 2025 DNAi inc.
"""

import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, TextIO, Union

from fplreader.attributes import TrackRecord
from fplreader.decoder import FPL_MAGIC_SIZE, EndOfPlaylist, PlaylistDecoder, TrackDecoded
from fplreader.exceptions import UnsupportedFormatError
from fplreader.format_detector import FormatDetector
from fplreader.renderers import get_renderer, render_playlist

logger = logging.getLogger(__name__)


class FPLReader:
    """
    Main class for reading foobar2000 FPL playlists.

    Example:
        >>> with FPLReader('Default.fpl') as reader:
        ...     for track in reader.iter_tracks():
        ...         print(track.filename, track.get_attribute('title'))
        ...     reader.render('csv', sys.stdout)
    """

    def __init__(self, file_path: Union[str, Path], options: Optional[Dict[str, Any]] = None):
        """
        Initialize FPLReader with a playlist file.

        Args:
            file_path: Path to the .fpl file
            options: Option overrides (see available_options())

        Raises:
            FileNotFoundError: If the file does not exist
            UnsupportedFormatError: If StrictSignature is on and neither the extension
                                    nor the signature identify an FPL file
            ValueError: If an option name or value is invalid
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        self.options: Dict[str, Any] = {}
        self._initialize_default_options()
        for option_name, value in (options or {}).items():
            self.set_option(option_name, value)

        # Lenient mode leaves the signature to the decoder, which only warns
        if self.get_option('StrictSignature'):
            with open(self.file_path, 'rb') as f:
                head = f.read(FPL_MAGIC_SIZE)
            detected = FormatDetector.detect_format(file_path=str(self.file_path), file_data=head)
            if not FormatDetector.is_supported_format(detected):
                raise UnsupportedFormatError(
                    f"Unsupported playlist format: {self.file_path.name}. Expected a foobar2000 .fpl playlist"
                )

        self._stream: Optional[BinaryIO] = None
        self.last_summary: Optional[EndOfPlaylist] = None
        self.tracks_written = 0
        self._preamble: Dict[str, Any] = {}

    @staticmethod
    def available_options() -> Dict[str, Dict[str, Any]]:
        """
        Return a dictionary of available options.

        Returns:
            Dictionary mapping option names to their description, type and default
        """
        return {
            'StrictSignature': {
                'description': ('Reject files whose 16-byte signature is not the FPL signature; '
                                'when off, any file is decoded and a mismatch is only logged'),
                'type': 'bool',
                'default': True,
            },
            'OnTrackError': {
                'description': "Per-track error policy: 'raise' aborts, 'skip' reports and continues",
                'type': 'str',
                'default': 'raise',
                'choices': ('raise', 'skip'),
            },
            'Encoding': {
                'description': 'Text encoding of strings in the data area',
                'type': 'str',
                'default': 'utf-8',
            },
            'ForwardSlash': {
                'description': 'Transform backslashes in output paths to forward slashes',
                'type': 'bool',
                'default': False,
            },
            'WinDrive': {
                'description': 'CSV: write the Windows drive letter to the option1 column',
                'type': 'bool',
                'default': False,
            },
            'AlbumOnly': {
                'description': 'CSV: write only rows with a new album artist/album pair',
                'type': 'bool',
                'default': False,
            },
            'SQLTable': {
                'description': 'SQL: table or database.table for INSERT statements',
                'type': 'str',
                'default': 'fplreader',
            },
        }

    def _initialize_default_options(self) -> None:
        for option_name, option_info in self.available_options().items():
            if 'default' in option_info:
                self.options[option_name] = option_info['default']

    def set_option(self, option_name: str, value: Any) -> None:
        """
        Set an option value.

        Args:
            option_name: Name of the option (e.g., 'OnTrackError', 'SQLTable')
            value: Value to set for the option

        Raises:
            ValueError: If the option name is not recognized or the value is invalid
        """
        available = self.available_options()
        if option_name not in available:
            raise ValueError(f"Unknown option: {option_name}. Use available_options() to see valid options.")

        option_info = available[option_name]
        expected_type = option_info.get('type')
        if expected_type == 'bool' and not isinstance(value, bool):
            if isinstance(value, str):
                value = value.lower() in ('true', '1', 'yes', 'on')
            else:
                value = bool(value)
        elif expected_type == 'int' and not isinstance(value, int):
            try:
                value = int(value)
            except (ValueError, TypeError):
                raise ValueError(f"Option {option_name} requires int value, got {type(value).__name__}")
        elif expected_type == 'str' and not isinstance(value, str):
            raise ValueError(f"Option {option_name} requires str value, got {type(value).__name__}")

        choices = option_info.get('choices')
        if choices and value not in choices:
            raise ValueError(f"Option {option_name} must be one of {', '.join(choices)}, got {value!r}")

        self.options[option_name] = value

    def get_option(self, option_name: str, default: Any = None) -> Any:
        """
        Get an option value.

        Args:
            option_name: Name of the option
            default: Default value if option is not set

        Returns:
            Option value or default if not set
        """
        return self.options.get(option_name, default)

    def _make_decoder(self, stream: BinaryIO) -> PlaylistDecoder:
        return PlaylistDecoder(
            stream,
            strict_signature=self.get_option('StrictSignature'),
            on_error=self.get_option('OnTrackError'),
            encoding=self.get_option('Encoding'),
        )

    def decoder(self) -> PlaylistDecoder:
        """
        Open the playlist and return a fresh decoder for it.

        The file stays open until close() or the end of the with block.
        Calling decoder() again closes the previous decoder's file.
        """
        self.close()
        self._stream = open(self.file_path, 'rb')
        logger.debug("Opening FPL file \"%s\"", self.file_path)
        return self._make_decoder(self._stream)

    def _remember(self, decoder: PlaylistDecoder) -> None:
        self._preamble = {
            'FPL:Signature': decoder.signature.hex() if decoder.signature is not None else None,
            'FPL:DataSize': decoder.blob.size if decoder.blob is not None else None,
            'FPL:TrackCount': decoder.track_count,
        }

    def iter_tracks(self) -> Iterator[TrackRecord]:
        """
        Decode the playlist lazily, yielding each TrackRecord in file order.

        Each call reads through its own file handle, so several
        iterations over the same reader may run interleaved.
        """
        with open(self.file_path, 'rb') as stream:
            decoder = self._make_decoder(stream)
            try:
                for event in decoder.events():
                    if isinstance(event, EndOfPlaylist):
                        self.last_summary = event
                    elif isinstance(event, TrackDecoded):
                        yield event.track
            finally:
                self._remember(decoder)

    def get_tracks(self) -> List[TrackRecord]:
        """Decode the whole playlist into a list."""
        return list(self.iter_tracks())

    def get_all_metadata(self) -> Dict[str, Any]:
        """
        Decode the playlist and return file-level values.

        Returns:
            Dictionary with signature, data area size, declared track
            count and the number of tracks decoded
        """
        tracks = self.get_tracks()
        metadata = {
            'File:FileName': self.file_path.name,
            'File:FileType': 'FPL',
            'File:FileSize': self.file_path.stat().st_size,
        }
        metadata.update(self._preamble)
        metadata['FPL:TracksDecoded'] = len(tracks)
        if self.last_summary is not None:
            metadata['FPL:TracksFailed'] = self.last_summary.tracks_failed
            metadata['FPL:Truncated'] = self.last_summary.truncated
        return metadata

    def render(self, format_name: str, output: TextIO) -> Optional[EndOfPlaylist]:
        """
        Decode the playlist and write it to output in the given format.

        Args:
            format_name: Output format (csv, xml, sqlfile, m3u, m3u-noext, json, null)
            output: Text stream to write to

        Returns:
            The EndOfPlaylist summary event. The number of tracks the
            renderer actually wrote is left in tracks_written.
        """
        renderer = get_renderer(
            format_name,
            output,
            forward_slash=self.get_option('ForwardSlash'),
            windrive=self.get_option('WinDrive'),
            album_only=self.get_option('AlbumOnly'),
            sql_table=self.get_option('SQLTable'),
        )
        with open(self.file_path, 'rb') as stream:
            decoder = self._make_decoder(stream)
            try:
                self.last_summary = render_playlist(decoder.events(), renderer)
            finally:
                self._remember(decoder)
                self.tracks_written = renderer.tracks_written
        return self.last_summary

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
