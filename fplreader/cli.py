# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for fplreader

Reads a foobar2000 FPL playlist and writes it as CSV, Rhythmbox XML,
SQL INSERT statements, M3U or JSON.

Copyright 2025 DNAi inc.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fplreader import __version__
from fplreader.core import FPLReader
from fplreader.exceptions import FPLReaderError, FormatError

logger = logging.getLogger('fplreader')

EXIT_OK = 0
EXIT_DECODE_ERROR = 1
EXIT_FORMAT_ERROR = 250
EXIT_IO_ERROR = 255


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fplreader',
        description='Parse foobar2000 FPL binary playlists and write them in other formats.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  fplreader Default.fpl out.csv -csv -albonly
  fplreader Default.fpl out.xml -xml -fslash
  fplreader Default.fpl out.sql -sql_file music_db.tracks
  fplreader Default.fpl -m3u
""",
    )
    parser.add_argument('fpl_file', help='FPL playlist to read')
    parser.add_argument('output_file', nargs='?', help='File to write (default: standard output)')

    formats = parser.add_mutually_exclusive_group()
    formats.add_argument('-csv', dest='format', action='store_const', const='csv', help='Enable CSV output mode')
    formats.add_argument('-xml', dest='format', action='store_const', const='xml',
                         help='Enable XML output mode (Rhythmbox-compatible schema)')
    formats.add_argument('-m3u', dest='format', action='store_const', const='m3u',
                         help='Enable M3U extended playlist generation')
    formats.add_argument('-m3u-noext', dest='format', action='store_const', const='m3u-noext',
                         help='Enable M3U filename-only playlist generation')
    formats.add_argument('-json', dest='format', action='store_const', const='json', help='Enable JSON output mode')
    formats.add_argument('-sql_file', metavar='TABLE',
                         help='Enable SQL file output; INSERT rows into TABLE (or database.table)')

    parser.add_argument('-fslash', action='store_true', help='Transform backslash (\\) to forward slash (/)')
    parser.add_argument('-windrive', action='store_true', help='CSV: output drive letter to the option1 field')
    parser.add_argument('-albonly', action='store_true', help='CSV: output one row per album artist/album only')
    parser.add_argument('-lenient', action='store_true', help='Do not reject files with an unexpected signature')
    parser.add_argument('-skip-errors', dest='skip_errors', action='store_true',
                        help='Skip tracks with broken string references instead of aborting')
    parser.add_argument('-verbose', action='store_true', help='Enable verbose output on stderr')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line interface.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    format_name = 'sqlfile' if args.sql_file else (args.format or 'null')
    options = {
        'StrictSignature': not args.lenient,
        'OnTrackError': 'skip' if args.skip_errors else 'raise',
        'ForwardSlash': args.fslash,
        'WinDrive': args.windrive,
        'AlbumOnly': args.albonly,
    }
    if args.sql_file:
        options['SQLTable'] = args.sql_file

    if args.verbose:
        if args.albonly:
            logger.debug("albonly enabled. Outputting only unique albums.")
        if args.windrive:
            logger.debug("windrive enabled. Outputting drive letter to option1 field.")

    output = None
    try:
        with FPLReader(args.fpl_file, options=options) as reader:
            if args.output_file:
                logger.debug("Opening output file \"%s\"", args.output_file)
                output = open(Path(args.output_file), 'w', encoding='utf-8', newline='')
            summary = reader.render(format_name, output or sys.stdout)
    except FormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FORMAT_ERROR
    except FPLReaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    finally:
        if output is not None:
            output.close()

    if summary is not None:
        logger.info(
            "Complete! %d of %d tracks decoded, %d written as %s (%d failed)%s",
            summary.tracks_decoded, summary.track_count, reader.tracks_written,
            format_name, summary.tracks_failed,
            ', playlist truncated' if summary.truncated else '',
        )
        if summary.tracks_failed:
            print(f"Warning: {summary.tracks_failed} track(s) could not be decoded", file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
