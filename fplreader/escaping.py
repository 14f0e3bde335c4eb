# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
String escaping for rendered playlist output

Copyright 2025 DNAi inc.
"""

WHITESPACE = '\t\n\r '
QUOTED_CHARS = '"\'\\'


def escape_str(text: str, forward_slash: bool = False) -> str:
    """
    Escape a value for a double-quoted CSV field or SQL string literal.

    Quotes, apostrophes and backslashes are backslash-escaped. Leading
    whitespace is dropped and runs of tabs, newlines and spaces collapse
    to a single space.

    Args:
        text: Raw attribute value or path
        forward_slash: If True, backslashes become '/' instead of being escaped

    Returns:
        Escaped string
    """
    out = []
    white = 0
    for i, char in enumerate(text):
        if char in QUOTED_CHARS:
            white = 0
            if forward_slash and char == '\\':
                out.append('/')
            else:
                out.append('\\' + char)
        elif char in WHITESPACE:
            white += 1
            # all characters so far were whitespace, or this extends a run
            if i == white - 1 or white > 1:
                continue
            out.append(' ')
        else:
            white = 0
            out.append(char)
    return ''.join(out)


def xml_escape_path(text: str) -> str:
    """
    Convert a Windows path or file URL for the XML location element.

    Spaces become %20 and backslashes become forward slashes. XML
    entity escaping is applied separately when the element is written.
    """
    return text.replace(' ', '%20').replace('\\', '/')


def to_forward_slashes(text: str) -> str:
    """Replace backslashes with forward slashes."""
    return text.replace('\\', '/')
