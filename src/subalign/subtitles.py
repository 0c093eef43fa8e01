"""
Subtitle processing module for parsing and serializing SRT cue blocks.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .logging import get_logger


# Blocks are separated by one or more blank (or whitespace-only) lines
BLOCK_SEPARATOR = re.compile( r'\n\s*\n' );

# "00:01:02,345 --> 00:01:04,000" (',' or '.' before the milliseconds)
TIME_RANGE_PATTERN = re.compile(
    r'(\d{2}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2}[,.]\d{3})'
);

TIME_PART_SEPARATOR = re.compile( r'[:|,.]' );

LEADING_INTEGER = re.compile( r'^\s*([+-]?\d+)' );


@dataclass( frozen=True )
class CueEntry:
    """Represents a single subtitle cue with timing and text."""

    index: int;           # Cue ordinal as found in the source
    start_time: str;      # Formatted start timestamp, e.g. "00:00:01,000"
    end_time: str;        # Formatted end timestamp
    start_time_ms: int;   # Start time in milliseconds (canonical for comparison)
    end_time_ms: int;     # End time in milliseconds
    text: str;            # Cue text, may span several lines

    def __repr__( self ):
        return f"CueEntry(index={self.index}, {self.start_time} --> {self.end_time}, text='{self.text[:30]}')";


def _leading_int( value: str ) -> Optional[int]:
    """Read the integer at the start of a string ("12abc" -> 12), or None."""
    match = LEADING_INTEGER.match( value );
    if not match:
        return None;
    return int( match.group( 1 ) );


def time_to_ms( time_str: str ) -> int:
    """
    Convert an SRT timestamp into milliseconds.

    Malformed timestamps (fewer than four components, or a component that
    is not a number) yield 0 instead of raising.

    Args:
        time_str: Timestamp like "01:02:03,456" or "01:02:03.456"

    Returns:
        Milliseconds since the start of the track
    """
    parts = TIME_PART_SEPARATOR.split( time_str.strip() );
    if len( parts ) < 4:
        return 0;

    values = [ _leading_int( part ) for part in parts[:4] ];
    if any( value is None for value in values ):
        return 0;

    hours, minutes, seconds, milliseconds = values;
    return hours * 3600000 + minutes * 60000 + seconds * 1000 + milliseconds;


def parse_subtitles( content: str ) -> List[CueEntry]:
    """
    Parse SRT text into CueEntry objects.

    Blocks with fewer than three lines or without a valid time range line
    are dropped. A non-numeric ordinal is replaced by a synthetic one
    (1 + number of cues accepted so far). Source order is kept.

    Args:
        content: Raw subtitle text

    Returns:
        List of CueEntry objects
    """
    logger = get_logger();

    if content.startswith( "\ufeff" ):
        content = content[1:];

    normalized = content.replace( "\r\n", "\n" ).replace( "\r", "\n" );
    blocks = BLOCK_SEPARATOR.split( normalized );

    entries = [];
    dropped = 0;

    for block in blocks:
        lines = block.strip().split( "\n" );
        if len( lines ) < 3:
            if block.strip():
                dropped += 1;
            continue;

        time_match = TIME_RANGE_PATTERN.search( lines[1] );
        if not time_match:
            dropped += 1;
            logger.debug( f"Dropping block with malformed time line: '{lines[1][:40]}'" );
            continue;

        index = _leading_int( lines[0] );
        if index is None:
            index = len( entries ) + 1;

        start_time = time_match.group( 1 );
        end_time = time_match.group( 2 );

        entries.append( CueEntry(
            index=index,
            start_time=start_time,
            end_time=end_time,
            start_time_ms=time_to_ms( start_time ),
            end_time_ms=time_to_ms( end_time ),
            text="\n".join( lines[2:] )
        ) );

    if dropped:
        logger.debug( f"Dropped {dropped} malformed subtitle block(s)" );
    logger.debug( f"Parsed {len( entries )} subtitle entries" );

    return entries;


def serialize_subtitles( entries: List[CueEntry] ) -> str:
    """
    Serialize cue entries back into SRT text.

    Ordinals are always renumbered from 1; the stored start/end strings are
    written as-is. Blocks are separated by a blank line, with no trailing
    separator after the last block.
    """
    blocks = [
        f"{number}\n{entry.start_time} --> {entry.end_time}\n{entry.text}"
        for number, entry in enumerate( entries, 1 )
    ];
    return "\n\n".join( blocks );


def validate_subtitle_file( subtitle_file: Path ) -> bool:
    """
    Validate subtitle file format and existence.

    Args:
        subtitle_file: Path to subtitle file

    Returns:
        True if valid SRT file, False otherwise
    """
    logger = get_logger();

    if not subtitle_file.exists():
        logger.error( f"Subtitle file not found: {subtitle_file}" );
        return False;

    if not subtitle_file.is_file():
        logger.error( f"Subtitle path is not a file: {subtitle_file}" );
        return False;

    # Check file extension
    if subtitle_file.suffix.lower() != '.srt':
        logger.error( f"Only .srt files are supported, got: {subtitle_file.suffix}" );
        return False;

    return True;


def read_subtitle_file( subtitle_file: Path ) -> Optional[Tuple[str, str]]:
    """
    Read a subtitle file into text.

    Args:
        subtitle_file: Path to SRT file

    Returns:
        Tuple of (content, file_name), or None if the file is not usable
    """
    subtitle_file = Path( subtitle_file );
    if not validate_subtitle_file( subtitle_file ):
        return None;

    logger = get_logger();
    logger.info( f"Reading subtitle file: {subtitle_file}" );

    try:
        content = subtitle_file.read_text( encoding="utf-8-sig", errors="replace" );
    except OSError as e:
        logger.error( f"Failed to read subtitle file: {e}" );
        return None;

    return content, subtitle_file.name;


def write_subtitle_file( entries: List[CueEntry], output_file: Path ) -> Path:
    """Write serialized entries to disk as UTF-8 and return the path."""
    output_file = Path( output_file );
    output_file.write_text( serialize_subtitles( entries ), encoding="utf-8" );
    get_logger().info( f"Wrote {len( entries )} subtitle entries to {output_file}" );
    return output_file;
