# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Playlist format detector

This module detects foobar2000 FPL playlists from their file
signature and extension.

Copyright 2025 DNAi inc.
"""

from typing import Optional, Dict
from pathlib import Path

from fplreader.decoder import FPL_MAGIC


class FormatDetector:
    """
    Detects playlist formats from file signatures and extensions.
    """

    # Format signatures (magic numbers)
    FORMAT_SIGNATURES: Dict[bytes, str] = {
        FPL_MAGIC: 'FPL',
    }

    # Extension to format mapping
    EXTENSION_FORMATS: Dict[str, str] = {
        '.fpl': 'FPL',
    }

    @classmethod
    def detect_format(cls, file_path: Optional[str] = None, file_data: Optional[bytes] = None) -> Optional[str]:
        """
        Detect playlist format from file path and/or data.

        The signature is checked first when data is given, since
        playlists are sometimes saved without the .fpl extension.

        Args:
            file_path: Path to file
            file_data: File data (at least the first 16 bytes)

        Returns:
            Format name or None if not detected
        """
        if file_data:
            for signature, format_name in cls.FORMAT_SIGNATURES.items():
                if file_data.startswith(signature):
                    return format_name

        if file_path:
            ext = Path(file_path).suffix.lower()
            if ext in cls.EXTENSION_FORMATS:
                return cls.EXTENSION_FORMATS[ext]

        return None

    @classmethod
    def is_supported_format(cls, format_name: Optional[str]) -> bool:
        """
        Check if a detected format can be decoded.

        Args:
            format_name: Format name

        Returns:
            True if format is supported
        """
        if not format_name:
            return False
        return format_name.upper() in set(cls.FORMAT_SIGNATURES.values())
