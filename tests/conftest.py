import pytest

from fpl_builder import BlobBuilder, build_playlist, track_chunk


ROYGBIV = 'file://C:\\Music\\Boards of Canada\\Roygbiv.flac'
TALK = 'file://D:\\Podcasts\\Talk show.mp3'


@pytest.fixture
def sample_fpl_bytes() -> bytes:
    blob = BlobBuilder()
    chunks = [
        track_chunk(
            blob, ROYGBIV,
            primary=[
                ('artist', 'Boards of Canada'),
                ('title', 'Roygbiv'),
                ('album', 'Music Has the Right to Children'),
                ('tracknumber', '17'),
                ('date', '1998'),
                ('genre', 'IDM'),
            ],
            secondary=[
                ('codec', 'FLAC'),
                ('bitrate', '1020'),
                ('codec_profile', ''),
            ],
            file_size=12345678,
            duration=150.5,
            subsong=0,
            replaygain=(-6.5, -7.25, 0.5, 0.75),
            reserved=(1, 2, 3, 4),
        ),
        track_chunk(
            blob, TALK,
            primary=[
                ('title', 'Talk "live"'),
                ('artist', 'Someone'),
            ],
            secondary=[
                ('bitrate', '128 kbps'),
                ('codec', 'MP3'),
            ],
            file_size=2048,
            duration=61.0,
        ),
    ]
    return build_playlist(blob.bytes(), chunks)


@pytest.fixture
def sample_fpl(tmp_path, sample_fpl_bytes):
    path = tmp_path / 'Default.fpl'
    path.write_bytes(sample_fpl_bytes)
    return path
