"""
Console report of comparison results using Rich tables.
"""
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .compare import ComparisonResult, ErrorType, filter_mismatches
from .subtitles import CueEntry
from .logging import get_logger


DRIFT_LABEL_MIN_MS = 10;   # Smaller drifts are not labelled
CHART_LIMIT = 100;

ROW_STYLES = {
    ErrorType.MISSING: "red",
    ErrorType.TIME_MISMATCH: "yellow",
    ErrorType.NONE: "green",
};


def format_drift( diff_ms: int ) -> Optional[str]:
    """Label a drift like "+120ms" / "-45ms", or None when it is negligible."""
    if abs( diff_ms ) < DRIFT_LABEL_MIN_MS:
        return None;
    return f"+{diff_ms}ms" if diff_ms > 0 else f"{diff_ms}ms";


def drift_chart_data( results: List[ComparisonResult], limit: int = CHART_LIMIT ) -> List[dict]:
    """Start drift per cue for the first `limit` results."""
    return [
        {
            'name': f"#{result.original.index}",
            'diff': abs( result.time_diff_start ),
            'status': "match" if result.is_match else "mismatch"
        }
        for result in results[:limit]
    ];


class ResultsReport:
    """Renders comparison results and summaries to the console."""

    def __init__( self, console: Console = None ):
        self.logger = get_logger();
        self.console = console or self.logger.console;

    @staticmethod
    def _translated_cell( entry: CueEntry ) -> Text:
        """Timing line, then the first text line bold and any further lines dim."""
        cell = Text( f"{entry.start_time} → {entry.end_time}" );
        for number, line in enumerate( entry.text.split( "\n" ) ):
            cell.append( "\n" );
            cell.append( line, style="bold" if number == 0 else "dim italic" );
        return cell;

    def build_table( self, results: List[ComparisonResult] ) -> Table:
        table = Table( title="Original vs Translated", show_lines=True );
        table.add_column( "#", justify="right", style="dim" );
        table.add_column( "Original" );
        table.add_column( "Translated" );
        table.add_column( "Drift", justify="right" );
        table.add_column( "Status" );

        for result in results:
            original = result.original;
            style = ROW_STYLES[result.error_type];

            original_cell = f"{original.start_time} → {original.end_time}\n{original.text}";

            if result.translated is not None:
                translated_cell = self._translated_cell( result.translated );
            else:
                translated_cell = Text( "(missing)", style="red" );

            labels = [ label for label in ( format_drift( result.time_diff_start ), format_drift( result.time_diff_end ) ) if label ];

            table.add_row(
                str( original.index ),
                original_cell,
                translated_cell,
                " / ".join( labels ),
                Text( result.error_type.value, style=style )
            );

        return table;

    def display_results( self, results: List[ComparisonResult], only_mismatches: bool = False ):
        """
        Display comparison results to console.

        Args:
            results: List of ComparisonResult objects
            only_mismatches: If True, hide aligned cues
        """
        if only_mismatches:
            results = filter_mismatches( results );

        if not results:
            self.console.print( "No entries" if not only_mismatches else "No entries: every cue is aligned" );
            return;

        self.console.print( self.build_table( results ) );

    def display_summary( self, stats: dict ):
        """Display summary statistics of a comparison."""
        if not stats or not stats.get( 'total' ):
            self.logger.warning( "No entries to summarize" );
            return;

        self.logger.info( "=== ALIGNMENT SUMMARY ===" );
        self.logger.info( f"Original cues: {stats['total']}" );
        self.logger.info( f"Aligned: {stats['matched']} ({stats['match_rate']:.1f}%)" );
        self.logger.info( f"Drifted: {stats['time_mismatches']}" );
        self.logger.info( f"Missing: {stats['missing']}" );

    def display_drift_chart( self, results: List[ComparisonResult], width: int = 40 ):
        """Display a bar per cue showing its absolute start drift."""
        data = drift_chart_data( results );
        if not data:
            return;

        largest = max( point['diff'] for point in data ) or 1;

        self.console.print( f"Start drift (first {len( data )} cues)" );
        for point in data:
            bar = "█" * max( 0, round( point['diff'] / largest * width ) );
            style = "dim" if point['status'] == "match" else "yellow";
            self.console.print( Text( f"{point['name']:>6} " ) + Text( bar, style=style ) + Text( f" {point['diff']}ms" ) );
