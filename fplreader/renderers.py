# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Playlist output renderers

Each renderer turns decoded tracks into one text format. Rendering has
three phases: write_header() once, write_track() per track, and
write_footer() once at end of playlist. Renderers may keep state
between calls (album de-duplication, collected JSON records).

Supported formats: null, csv, xml (Rhythmbox), sqlfile, m3u, m3u-noext, json.

Copyright 2025 DNAi inc.
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional, TextIO, Type
from xml.sax.saxutils import escape as xml_text

from fplreader.attributes import TrackRecord
from fplreader.decoder import DecodeEvent, EndOfPlaylist, TrackDecoded
from fplreader.escaping import escape_str, to_forward_slashes, xml_escape_path
from fplreader.exceptions import PlaylistWriteError

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')

FILE_URL_PREFIX = 'file://'

CSV_COLUMNS = (
    'filename', 'title', 'artist', 'album_artist', 'album', 'tracknum', 'genre',
    'year', 'duration', 'bitrate', 'codec', 'codec_profile', 'filesize', 'option1',
)

# Rhythmbox needs these; FPL files carry no equivalent
RHYTHMDB_MTIME = 1269409449
RHYTHMDB_LAST_SEEN = 1291856711


def leading_int(text: str) -> int:
    """Parse the leading integer of text like C atoi(); 0 if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def album_artist_for(track: TrackRecord) -> str:
    """Album artist, falling back to artist when shorter than 3 characters."""
    album_artist = track.get_attribute('album artist')
    if len(album_artist) < 3:
        return track.get_attribute('artist')
    return album_artist


class Renderer:
    """
    Base renderer.

    Subclasses override the three phase methods they need.
    """

    name = ''

    def __init__(
        self,
        output: TextIO,
        forward_slash: bool = False,
        windrive: bool = False,
        album_only: bool = False,
        sql_table: str = 'fplreader'
    ):
        """
        Initialize a renderer.

        Args:
            output: Text stream to write to
            forward_slash: Transform backslashes to forward slashes
            windrive: CSV: put the drive letter in the option1 column
            album_only: CSV: only write rows whose album artist/album differ from the previous row
            sql_table: SQL: table (or database.table) for INSERT statements
        """
        self.output = output
        self.forward_slash = forward_slash
        self.windrive = windrive
        self.album_only = album_only
        self.sql_table = sql_table
        self.tracks_written = 0

    def _write(self, text: str) -> None:
        try:
            self.output.write(text)
        except OSError as exc:
            raise PlaylistWriteError(f"Failed to write {self.name} output: {exc}") from exc

    def escape(self, text: str) -> str:
        return escape_str(text, forward_slash=self.forward_slash)

    def write_header(self) -> None:
        pass

    def write_track(self, track: TrackRecord) -> None:
        pass

    def write_footer(self) -> None:
        pass


class NullRenderer(Renderer):
    """Writes nothing."""

    name = 'null'


class CSVRenderer(Renderer):
    """Comma-separated dump with one row per track."""

    name = 'csv'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._last_album_artist: Optional[str] = None
        self._last_album: Optional[str] = None

    def write_header(self) -> None:
        self._write(', '.join(CSV_COLUMNS) + '\n')

    def write_track(self, track: TrackRecord) -> None:
        filename = self.escape(track.filename)
        album_artist = self.escape(album_artist_for(track))
        album = self.escape(track.get_attribute('album'))

        if self.album_only:
            if album_artist == self._last_album_artist and album == self._last_album:
                return
        self._last_album_artist = album_artist
        self._last_album = album

        # drive letter of "file://C:\..."
        option1 = filename[7].upper() if self.windrive and len(filename) > 7 else ''

        quoted = [
            filename,
            self.escape(track.get_attribute('title')),
            self.escape(track.get_attribute('artist')),
            album_artist,
            album,
            self.escape(track.get_attribute('tracknumber')),
            self.escape(track.get_attribute('genre')),
            self.escape(track.get_attribute('date')),
        ]
        row = ','.join(f'"{value}"' for value in quoted)
        row += f",{track.duration_seconds:.2f},{leading_int(track.get_attribute('bitrate'))}"
        row += f',"{self.escape(track.get_attribute("codec"))}"'
        row += f',"{self.escape(track.get_attribute("codec_profile"))}"'
        row += f',{track.file_size},"{option1}"\n'

        self._write(row)
        self.tracks_written += 1


class XMLRenderer(Renderer):
    """Rhythmbox-compatible rhythmdb XML."""

    name = 'xml'

    def write_header(self) -> None:
        self._write('<?xml version="1.0" standalone="yes"?>\n')
        self._write('<rhythmdb version="1.7">\n')

    def write_track(self, track: TrackRecord) -> None:
        location = xml_escape_path(track.filename)
        mountpoint = FILE_URL_PREFIX + location[7:9]

        def element(tag: str, value: Any) -> str:
            return f"    <{tag}>{xml_text(str(value))}</{tag}>\n"

        # Rhythmbox has no album artist element, so only artist is written
        lines = [
            '  <entry type="song">\n',
            element('title', track.get_attribute('title')),
            element('genre', track.get_attribute('genre')),
            element('artist', track.get_attribute('artist')),
            element('album', track.get_attribute('album')),
            element('track-number', track.get_attribute('tracknumber')),
            element('duration', f"{track.duration_seconds:.0f}"),
            element('file-size', track.file_size),
            element('location', location),
            element('mountpoint', mountpoint),
            element('mtime', RHYTHMDB_MTIME),
            element('last-seen', RHYTHMDB_LAST_SEEN),
            element('bitrate', leading_int(track.get_attribute('bitrate'))),
            element('date', 0),
            element('mimetype', 'application/x-id3'),
            '  </entry>\n',
        ]
        self._write(''.join(lines))
        self.tracks_written += 1

    def write_footer(self) -> None:
        self._write('</rhythmdb>\n')


class SQLFileRenderer(Renderer):
    """INSERT statements for a SQL client."""

    name = 'sqlfile'

    def write_track(self, track: TrackRecord) -> None:
        strings = [
            self.escape(track.filename),
            self.escape(track.get_attribute('title')),
            self.escape(track.get_attribute('artist')),
            self.escape(album_artist_for(track)),
            self.escape(track.get_attribute('album')),
            self.escape(track.get_attribute('tracknumber')),
            self.escape(track.get_attribute('genre')),
            self.escape(track.get_attribute('date')),
        ]
        values = '0,' + ','.join(f'"{value}"' for value in strings)
        values += f",{track.duration_seconds:.2f},{leading_int(track.get_attribute('bitrate'))}"
        values += f',"{self.escape(track.get_attribute("codec"))}"'
        values += f',"{self.escape(track.get_attribute("codec_profile"))}"'
        values += f',{track.file_size}'

        self._write(f"INSERT INTO {self.sql_table} VALUES({values});\n")
        self.tracks_written += 1


class M3URenderer(Renderer):
    """Extended M3U with duration, artist and title."""

    name = 'm3u'
    extended = True

    def path_for(self, track: TrackRecord) -> str:
        path = track.filename
        if path.startswith(FILE_URL_PREFIX):
            path = path[len(FILE_URL_PREFIX):]
        if self.forward_slash:
            path = to_forward_slashes(path)
        return path

    def write_header(self) -> None:
        if self.extended:
            self._write('#EXTM3U\n')

    def write_track(self, track: TrackRecord) -> None:
        path = self.path_for(track)
        if self.extended:
            artist = track.get_attribute('artist')
            title = track.get_attribute('title') or path.replace('\\', '/').rsplit('/', 1)[-1]
            display = f"{artist} - {title}" if artist else title
            self._write(f"#EXTINF:{round(track.duration_seconds)},{display}\n")
        self._write(path + '\n')
        self.tracks_written += 1


class M3UNoExtRenderer(M3URenderer):
    """Plain M3U, one path per line."""

    name = 'm3u-noext'
    extended = False


class JSONRenderer(Renderer):
    """JSON array of track objects, written when the playlist ends."""

    name = 'json'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._records: List[Dict[str, Any]] = []

    def write_track(self, track: TrackRecord) -> None:
        record = track.as_dict()
        if self.forward_slash:
            record['filename'] = to_forward_slashes(record['filename'])
        self._records.append(record)
        self.tracks_written += 1

    def write_footer(self) -> None:
        self._write(json.dumps(self._records, indent=2, ensure_ascii=False) + '\n')


RENDERERS: Dict[str, Type[Renderer]] = {
    cls.name: cls
    for cls in (NullRenderer, CSVRenderer, XMLRenderer, SQLFileRenderer,
                M3URenderer, M3UNoExtRenderer, JSONRenderer)
}


def get_renderer(format_name: str, output: TextIO, **options) -> Renderer:
    """
    Create the renderer registered under format_name.

    Args:
        format_name: One of RENDERERS' keys
        output: Text stream to write to
        **options: Renderer keyword options (forward_slash, windrive, album_only, sql_table)

    Raises:
        ValueError: If the format is unknown
    """
    try:
        renderer_class = RENDERERS[format_name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown output format: {format_name}. "
            f"Supported formats: {', '.join(sorted(RENDERERS))}"
        )
    return renderer_class(output, **options)


def render_playlist(events: Iterable[DecodeEvent], renderer: Renderer) -> Optional[EndOfPlaylist]:
    """
    Drive a renderer from a decoder's event stream.

    The header is written before the first event is pulled, each
    TrackDecoded is written as it arrives, and EndOfPlaylist triggers
    the footer.

    Returns:
        The EndOfPlaylist event, or None if the stream ended without one
    """
    renderer.write_header()
    for event in events:
        if isinstance(event, TrackDecoded):
            renderer.write_track(event.track)
        elif isinstance(event, EndOfPlaylist):
            renderer.write_footer()
            return event
    return None
