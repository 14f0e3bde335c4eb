import io
from pathlib import Path

import pytest

from fplreader import FPLReader, __version__
from fplreader.exceptions import OffsetOutOfRangeError, UnsupportedFormatError
from fplreader.format_detector import FormatDetector
from fplreader.decoder import FPL_MAGIC
from fplreader.playlist_utils import batch_read_playlists, get_playlist_summary, has_fpl_signature

from fpl_builder import BlobBuilder, build_playlist, chunk_bytes, track_chunk


def test_version():
    assert __version__ == '0.10.0'


def test_get_tracks(sample_fpl):
    with FPLReader(sample_fpl) as reader:
        tracks = reader.get_tracks()
    assert [t.get_attribute('title') for t in tracks] == ['Roygbiv', 'Talk "live"']


def test_get_all_metadata(sample_fpl, sample_fpl_bytes):
    metadata = FPLReader(sample_fpl).get_all_metadata()
    assert metadata['File:FileType'] == 'FPL'
    assert metadata['File:FileSize'] == len(sample_fpl_bytes)
    assert metadata['FPL:Signature'] == FPL_MAGIC.hex()
    assert metadata['FPL:TrackCount'] == 2
    assert metadata['FPL:TracksDecoded'] == 2
    assert metadata['FPL:TracksFailed'] == 0
    assert metadata['FPL:Truncated'] is False


def test_render_uses_options(sample_fpl):
    output = io.StringIO()
    reader = FPLReader(sample_fpl, options={'SQLTable': 'music_db.fpl', 'ForwardSlash': 'yes'})
    summary = reader.render('sqlfile', output)
    assert summary.tracks_decoded == 2
    assert output.getvalue().startswith('INSERT INTO music_db.fpl VALUES(0,"file://C:/Music/')


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FPLReader(tmp_path / 'missing.fpl')


def test_not_an_fpl_file(tmp_path):
    path = tmp_path / 'notes.txt'
    path.write_text('hello')
    with pytest.raises(UnsupportedFormatError):
        FPLReader(path)


def test_signature_detected_without_extension(tmp_path, sample_fpl_bytes):
    path = tmp_path / 'playlist.bin'
    path.write_bytes(sample_fpl_bytes)
    assert len(FPLReader(path).get_tracks()) == 2


def test_default_options(sample_fpl):
    reader = FPLReader(sample_fpl)
    assert reader.get_option('StrictSignature') is True
    assert reader.get_option('OnTrackError') == 'raise'
    assert reader.get_option('SQLTable') == 'fplreader'
    assert reader.get_option('Missing', 'fallback') == 'fallback'


def test_set_option_validation(sample_fpl):
    reader = FPLReader(sample_fpl)
    reader.set_option('AlbumOnly', 'true')
    assert reader.get_option('AlbumOnly') is True
    reader.set_option('WinDrive', 0)
    assert reader.get_option('WinDrive') is False
    with pytest.raises(ValueError, match='Unknown option'):
        reader.set_option('Colour', 'red')
    with pytest.raises(ValueError):
        reader.set_option('OnTrackError', 'ignore')
    with pytest.raises(ValueError):
        reader.set_option('SQLTable', 5)


def _playlist_with_broken_track(tmp_path) -> Path:
    blob = BlobBuilder()
    chunks = [
        track_chunk(blob, 'ok.mp3', primary=[('title', 'Fine')]),
        chunk_bytes(99_999, []),
    ]
    path = tmp_path / 'broken.fpl'
    path.write_bytes(build_playlist(blob.bytes(), chunks))
    return path


def test_skip_policy_through_reader(tmp_path):
    path = _playlist_with_broken_track(tmp_path)

    with pytest.raises(OffsetOutOfRangeError):
        FPLReader(path).get_tracks()

    reader = FPLReader(path, options={'OnTrackError': 'skip'})
    assert [t.filename for t in reader.get_tracks()] == ['ok.mp3']
    assert reader.last_summary.tracks_failed == 1


def test_lenient_signature_option(tmp_path):
    blob = BlobBuilder()
    chunks = [track_chunk(blob, 'a.mp3')]
    path = tmp_path / 'odd.fpl'
    path.write_bytes(build_playlist(blob.bytes(), chunks, magic=b'\xff' * 16))

    with pytest.raises(UnsupportedFormatError):
        FPLReader(path).get_tracks()
    assert len(FPLReader(path, options={'StrictSignature': False}).get_tracks()) == 1


def test_format_detector():
    assert FormatDetector.detect_format(file_path='Default.FPL') == 'FPL'
    assert FormatDetector.detect_format(file_data=FPL_MAGIC + b'rest') == 'FPL'
    assert FormatDetector.detect_format(file_path='a.m3u', file_data=b'#EXTM3U') is None
    assert FormatDetector.is_supported_format('fpl')
    assert not FormatDetector.is_supported_format(None)


def test_has_fpl_signature(tmp_path, sample_fpl):
    other = tmp_path / 'other.fpl'
    other.write_bytes(b'\x00' * 32)
    assert has_fpl_signature(sample_fpl)
    assert not has_fpl_signature(other)
    assert not has_fpl_signature(tmp_path / 'absent.fpl')


def test_batch_read_playlists(tmp_path, sample_fpl):
    broken = _playlist_with_broken_track(tmp_path)
    errors = []

    results = batch_read_playlists(
        [sample_fpl, broken],
        error_handler=lambda path, exc: errors.append((path, type(exc))),
    )

    assert list(results) == [sample_fpl]
    assert len(results[sample_fpl]) == 2
    assert errors == [(broken, OffsetOutOfRangeError)]


def test_batch_read_playlists_propagates_without_handler(tmp_path):
    with pytest.raises(OffsetOutOfRangeError):
        batch_read_playlists([_playlist_with_broken_track(tmp_path)])


def test_playlist_summary(sample_fpl):
    summary = get_playlist_summary(FPLReader(sample_fpl).iter_tracks())
    assert summary == {
        'track_count': 2,
        'total_duration': 211.5,
        'total_size': 12345678 + 2048,
        'album_count': 1,
    }


def test_empty_data_area_reports_zero_size(tmp_path):
    path = tmp_path / 'empty.fpl'
    path.write_bytes(build_playlist(b'', []))

    metadata = FPLReader(path).get_all_metadata()

    assert metadata['FPL:DataSize'] == 0
    assert metadata['FPL:TrackCount'] == 0
    assert metadata['FPL:TracksDecoded'] == 0


def _three_track_playlist(tmp_path) -> Path:
    blob = BlobBuilder()
    chunks = [track_chunk(blob, f'{i}.mp3', primary=[('title', f'Track {i}')]) for i in range(3)]
    path = tmp_path / 'three.fpl'
    path.write_bytes(build_playlist(blob.bytes(), chunks))
    return path


def test_interleaved_iteration(tmp_path):
    reader = FPLReader(_three_track_playlist(tmp_path))

    pairs = list(zip(reader.iter_tracks(), reader.iter_tracks()))

    assert [(a.filename, b.filename) for a, b in pairs] == [
        ('0.mp3', '0.mp3'), ('1.mp3', '1.mp3'), ('2.mp3', '2.mp3'),
    ]


def test_metadata_while_iterating(tmp_path):
    reader = FPLReader(_three_track_playlist(tmp_path))
    tracks = reader.iter_tracks()

    first = next(tracks)
    metadata = reader.get_all_metadata()
    rest = list(tracks)

    assert first.filename == '0.mp3'
    assert metadata['FPL:TracksDecoded'] == 3
    assert [t.filename for t in rest] == ['1.mp3', '2.mp3']


def test_render_reports_tracks_written(sample_fpl):
    reader = FPLReader(sample_fpl)
    reader.render('m3u-noext', io.StringIO())
    assert reader.tracks_written == 2


def test_lenient_accepts_unknown_extension_and_signature(tmp_path):
    blob = BlobBuilder()
    chunks = [track_chunk(blob, 'a.mp3')]
    path = tmp_path / 'playlist.bak'
    path.write_bytes(build_playlist(blob.bytes(), chunks, magic=b'\xff' * 16))

    with pytest.raises(UnsupportedFormatError):
        FPLReader(path)
    tracks = FPLReader(path, options={'StrictSignature': 'false'}).get_tracks()
    assert [t.filename for t in tracks] == ['a.mp3']
