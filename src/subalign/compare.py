"""
Comparison of a translated subtitle track against the original timeline.

Each original cue is paired with a translated cue (by ordinal first, then by
start-time proximity) and classified as aligned, drifted or missing.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .subtitles import CueEntry
from .logging import get_logger


MATCH_TOLERANCE_MS = 20;     # Drift below this is rounding noise
FALLBACK_WINDOW_MS = 500;    # Max start distance for a proximity pairing


class ErrorType( str, Enum ):
    """Classification of a comparison result."""

    MISSING = "MISSING";
    TIME_MISMATCH = "TIME_MISMATCH";
    NONE = "NONE";


@dataclass( frozen=True )
class ComparisonResult:
    """Pairing of one original cue with its translated counterpart."""

    original: CueEntry;                # Reference cue
    translated: Optional[CueEntry];    # Paired candidate cue (None when missing)
    is_match: bool;                    # Both drifts below tolerance
    time_diff_start: int;              # translated - original start (ms)
    time_diff_end: int;                # translated - original end (ms)
    error_type: ErrorType;

    def __repr__( self ):
        status = "✓" if self.is_match else "✗";
        return f"ComparisonResult({status} #{self.original.index}, " \
               f"start={self.time_diff_start:+d}ms, end={self.time_diff_end:+d}ms, {self.error_type.value})";


class CueComparator:
    """
    Matcher for pairing original and translated cues.

    Pairing rules per original cue:
    1. First translated cue with the same ordinal
    2. Otherwise first translated cue whose start is within the fallback window
    3. Otherwise the cue is reported as MISSING
    """

    def __init__( self, match_tolerance_ms: int = MATCH_TOLERANCE_MS, fallback_window_ms: int = FALLBACK_WINDOW_MS ):
        self.logger = get_logger();
        self.match_tolerance_ms = match_tolerance_ms;
        self.fallback_window_ms = fallback_window_ms;

    def find_counterpart( self, original: CueEntry, candidates: List[CueEntry] ) -> Optional[CueEntry]:
        """
        Find the translated cue paired with an original cue.

        Args:
            original: Reference cue
            candidates: Translated cues in track order

        Returns:
            Paired CueEntry or None if nothing qualifies
        """
        for candidate in candidates:
            if candidate.index == original.index:
                return candidate;

        # Ordinal drifted; fall back to start time proximity
        for candidate in candidates:
            if abs( candidate.start_time_ms - original.start_time_ms ) < self.fallback_window_ms:
                return candidate;

        return None;

    def compare_entry( self, original: CueEntry, candidates: List[CueEntry] ) -> ComparisonResult:
        """Classify a single original cue against the translated track."""
        translated = self.find_counterpart( original, candidates );

        if translated is None:
            return ComparisonResult(
                original=original,
                translated=None,
                is_match=False,
                time_diff_start=0,
                time_diff_end=0,
                error_type=ErrorType.MISSING
            );

        diff_start = translated.start_time_ms - original.start_time_ms;
        diff_end = translated.end_time_ms - original.end_time_ms;
        is_match = abs( diff_start ) < self.match_tolerance_ms and abs( diff_end ) < self.match_tolerance_ms;

        return ComparisonResult(
            original=original,
            translated=translated,
            is_match=is_match,
            time_diff_start=diff_start,
            time_diff_end=diff_end,
            error_type=ErrorType.NONE if is_match else ErrorType.TIME_MISMATCH
        );

    def compare( self, reference: List[CueEntry], candidate: List[CueEntry] ) -> List[ComparisonResult]:
        """
        Compare a translated track against the reference track.

        Args:
            reference: Original cues (authoritative timing)
            candidate: Translated cues

        Returns:
            One ComparisonResult per reference cue, in reference order
        """
        if not reference:
            return [];

        results = [ self.compare_entry( original, candidate ) for original in reference ];

        stats = calculate_stats( results );
        self.logger.debug( f"Compared {stats['total']} cues: {stats['matched']} aligned, " \
                           f"{stats['time_mismatches']} drifted, {stats['missing']} missing" );

        return results;


def compare_tracks( reference: List[CueEntry], candidate: List[CueEntry] ) -> List[ComparisonResult]:
    """Compare two tracks with the default tolerances."""
    return CueComparator().compare( reference, candidate );


def filter_mismatches( results: List[ComparisonResult] ) -> List[ComparisonResult]:
    """Get only the results that are not aligned."""
    return [ result for result in results if not result.is_match ];


def calculate_stats( results: List[ComparisonResult] ) -> dict:
    """Calculate summary statistics about a comparison."""
    total = len( results );
    mismatches = len( filter_mismatches( results ) );
    missing = len( [ result for result in results if result.error_type is ErrorType.MISSING ] );

    match_rate = round( ( total - mismatches ) / total * 100, 1 ) if total else 0.0;

    stats = {
        'total': total,
        'matched': total - mismatches,
        'mismatches': mismatches,
        'missing': missing,
        'time_mismatches': mismatches - missing,
        'match_rate': match_rate
    };

    return stats;
