"""
Test cases for console reporting helpers.
"""
import pytest
from pathlib import Path
import sys

from rich.console import Console

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subalign.subtitles import CueEntry
from subalign.compare import compare_tracks
from subalign.report import ResultsReport, format_drift, drift_chart_data


def cue( index, start_ms, end_ms, text="line" ):
    """Build a CueEntry from millisecond times."""
    def fmt( ms ):
        return f"{ms // 3600000:02d}:{ms // 60000 % 60:02d}:{ms // 1000 % 60:02d},{ms % 1000:03d}";
    return CueEntry( index, fmt( start_ms ), fmt( end_ms ), start_ms, end_ms, text );


REFERENCE = [ cue( 1, 0, 1000, "One" ), cue( 2, 2000, 3000, "Two" ), cue( 3, 9000, 9500, "Three" ) ];
CANDIDATE = [ cue( 1, 5, 1000, "Uno" ), cue( 2, 2250, 2900, "Dos" ) ];


class TestFormatDrift:
    """Test drift labels."""

    def test_small_drift_unlabelled( self ):
        assert format_drift( 0 ) is None;
        assert format_drift( 9 ) is None;
        assert format_drift( -9 ) is None;

    def test_labels( self ):
        assert format_drift( 10 ) == "+10ms";
        assert format_drift( 250 ) == "+250ms";
        assert format_drift( -100 ) == "-100ms";


class TestDriftChartData:
    """Test chart data extraction."""

    def test_chart_points( self ):
        data = drift_chart_data( compare_tracks( REFERENCE, CANDIDATE ) );

        assert data == [
            { 'name': "#1", 'diff': 5, 'status': "match" },
            { 'name': "#2", 'diff': 250, 'status': "mismatch" },
            { 'name': "#3", 'diff': 0, 'status': "mismatch" },
        ];

    def test_chart_limit( self ):
        reference = [ cue( i, i * 1000, i * 1000 + 500 ) for i in range( 1, 151 ) ];

        assert len( drift_chart_data( compare_tracks( reference, reference ) ) ) == 100;
        assert len( drift_chart_data( compare_tracks( reference, reference ), limit=10 ) ) == 10;


class TestResultsReport:
    """Test console rendering."""

    def _render( self, **kwargs ):
        console = Console( record=True, width=160 );
        report = ResultsReport( console=console );
        report.display_results( compare_tracks( REFERENCE, CANDIDATE ), **kwargs );
        return console.export_text();

    def test_display_results( self ):
        output = self._render();

        assert "TIME_MISMATCH" in output;
        assert "MISSING" in output;
        assert "(missing)" in output;
        assert "+250ms" in output;
        assert "-100ms" in output;

    def test_display_only_mismatches( self ):
        output = self._render( only_mismatches=True );

        assert "Uno" not in output;
        assert "Dos" in output;

    def test_translated_cell_styles_first_line( self ):
        cell = ResultsReport._translated_cell( cue( 1, 0, 1000, "你好！\nHello there!" ) );

        assert cell.plain == "00:00:00,000 → 00:00:01,000\n你好！\nHello there!";
        assert [ str( span.style ) for span in cell.spans ] == [ "bold", "dim italic" ];

    def test_display_no_entries( self ):
        console = Console( record=True, width=120 );

        ResultsReport( console=console ).display_results( [] );

        assert "No entries" in console.export_text();

    def test_drift_chart( self ):
        console = Console( record=True, width=120 );

        ResultsReport( console=console ).display_drift_chart( compare_tracks( REFERENCE, CANDIDATE ) );

        output = console.export_text();
        assert "#2" in output;
        assert "250ms" in output;


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
