import io
import struct

import pytest

from fplreader.chunk import CHUNK_HEADER_SIZE, ChunkHeader, KeyTable, read_chunk
from fplreader.exceptions import FormatError, KeyTableIndexError, TruncatedInputError

from fpl_builder import chunk_bytes


def test_header_is_68_bytes():
    assert CHUNK_HEADER_SIZE == 68
    assert len(chunk_bytes(0, [])) == 68


def test_read_chunk_fields():
    data = chunk_bytes(
        5, [10, 11, 12],
        primary_count=1, secondary_count=0, secondary_offset=3,
        file_size=4096, duration=201.25, subsong=2,
        replaygain=(-6.5, -7.25, 0.5, 0.75),
        reserved=(0xDEADBEEF, 7, 8, 9),
    )
    header, key_table = read_chunk(io.BytesIO(data))

    assert header.filename_offset == 5
    assert header.subsong_index == 2
    assert header.file_size == 4096
    assert header.duration_seconds == 201.25
    assert header.replaygain_album_db == -6.5
    assert header.replaygain_track_db == -7.25
    assert header.replaygain_album_peak_db == 0.5
    assert header.replaygain_track_peak_db == 0.75
    assert (header.reserved1, header.reserved2, header.reserved3, header.reserved4) == (0xDEADBEEF, 7, 8, 9)
    assert header.key_table_len == 6
    assert header.real_key_count == 3
    assert header.attribute_count == 1
    assert list(key_table) == [10, 11, 12]


def test_duration_is_kept_as_raw_bytes():
    header, _ = read_chunk(io.BytesIO(chunk_bytes(0, [], duration=3.5)))
    assert header.duration_raw == struct.pack('<d', 3.5)


def test_minimum_key_table_len_reads_no_words():
    stream = io.BytesIO(chunk_bytes(0, [], key_table_len=3) + b'next')
    header, key_table = read_chunk(stream)
    assert header.real_key_count == 0
    assert len(key_table) == 0
    assert stream.read() == b'next'


def test_key_table_len_512_is_accepted():
    words = list(range(509))
    header, key_table = read_chunk(io.BytesIO(chunk_bytes(0, words)))
    assert header.key_table_len == 512
    assert len(key_table) == 509


def test_key_table_len_513_is_format_error():
    with pytest.raises(FormatError, match='keys_dex > 512'):
        read_chunk(io.BytesIO(chunk_bytes(0, list(range(510)))))


@pytest.mark.parametrize('key_table_len', [0, 1, 2])
def test_key_table_len_below_three_is_format_error(key_table_len):
    with pytest.raises(FormatError):
        read_chunk(io.BytesIO(chunk_bytes(0, [], key_table_len=key_table_len)))


def test_clean_eof_returns_none():
    assert read_chunk(io.BytesIO(b'')) is None


def test_partial_header_is_truncated():
    with pytest.raises(TruncatedInputError, match='chunk header'):
        read_chunk(io.BytesIO(chunk_bytes(0, [])[:40]))


def test_partial_key_table_is_truncated():
    data = chunk_bytes(0, [1, 2, 3, 4])
    with pytest.raises(TruncatedInputError, match='key table'):
        read_chunk(io.BytesIO(data[:-2]))


def test_key_table_word_bounds():
    table = KeyTable([1, 2])
    assert table.word(1) == 2
    with pytest.raises(KeyTableIndexError):
        table.word(2)
    with pytest.raises(KeyTableIndexError):
        table.word(-1)


def test_header_roundtrip_from_bytes():
    header = ChunkHeader.from_bytes(chunk_bytes(9, [], file_size=1)[:68])
    assert header.filename_offset == 9
    assert header.file_size == 1
