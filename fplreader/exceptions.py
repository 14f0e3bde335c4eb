# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for fplreader

This module defines custom exceptions for the fplreader library.

Copyright 2025 DNAi inc.
"""


class FPLReaderError(Exception):
    """
    Base exception for all fplreader errors.

    All fplreader exceptions inherit from this class, allowing
    catch-all error handling for any playlist-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class PlaylistReadError(FPLReaderError):
    """
    Raised when a playlist cannot be decoded.

    Specific failures are reported through the subclasses below.
    """
    pass


class TruncatedInputError(PlaylistReadError):
    """
    Raised when the file ends before a fixed-size field is fully read.

    The stream position cannot be recovered, so this is fatal for
    the whole decode.
    """
    pass


class FormatError(PlaylistReadError):
    """
    Raised when a chunk header violates a sanity invariant.

    This exception is raised when:
    - key_table_len is larger than 512
    - key_table_len is smaller than the 3 words already read

    The format has no resync marker, so decoding stops.
    """
    pass


class OffsetOutOfRangeError(PlaylistReadError):
    """
    Raised when an offset points outside the data blob.
    """
    pass


class KeyTableIndexError(OffsetOutOfRangeError):
    """
    Raised when a computed word index falls outside a track's key table.
    """
    pass


class UnterminatedStringError(PlaylistReadError):
    """
    Raised when a string in the data blob has no NUL terminator.
    """
    pass


class UnsupportedFormatError(PlaylistReadError):
    """
    Raised when the file is not a recognised FPL playlist.

    This exception is raised when:
    - The 16-byte signature does not match and strict checking is on
    - Neither the extension nor the signature identify an FPL file
    """
    pass


class PlaylistWriteError(FPLReaderError):
    """
    Raised when rendered output cannot be written.
    """
    pass


class DecoderStateError(FPLReaderError):
    """
    Raised when a playlist decoder is drained a second time.
    """
    pass
