"""
Test cases for timing overrides and the correction store.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subalign.subtitles import CueEntry
from subalign.compare import ErrorType, compare_tracks
from subalign.corrections import CorrectionStore, CueOverride, merge_overrides, override_from_result


def cue( index, start_ms, end_ms, text="line" ):
    """Build a CueEntry from millisecond times."""
    def fmt( ms ):
        return f"{ms // 3600000:02d}:{ms // 60000 % 60:02d}:{ms // 1000 % 60:02d},{ms % 1000:03d}";
    return CueEntry( index, fmt( start_ms ), fmt( end_ms ), start_ms, end_ms, text );


REFERENCE = [ cue( 1, 0, 1000, "One" ), cue( 2, 2000, 3000, "Two" ), cue( 3, 4000, 5000, "Three" ) ];


class TestMergeOverrides:
    """Test merging overrides into a translated track."""

    def test_merge_replaces_times_keeps_text( self ):
        raw = [ cue( 1, 0, 1000, "Uno" ), cue( 2, 2500, 3500, "Dos" ) ];
        override = CueOverride( 2, "00:00:02,000", "00:00:03,000", 2000, 3000 );

        merged = merge_overrides( raw, { 2: override } );

        assert merged[0] is raw[0];
        assert merged[1] == CueEntry( 2, "00:00:02,000", "00:00:03,000", 2000, 3000, "Dos" );
        assert raw[1].start_time_ms == 2500;

    def test_merge_text_override( self ):
        raw = [ cue( 4, 0, 1000, "Text" ) ];
        override = CueOverride( 4, "00:00:00,000", "00:00:01,000", 0, 1000, text="" );

        assert merge_overrides( raw, { 4: override } )[0].text == "";

    def test_merge_preserves_length_and_order( self ):
        raw = [ cue( 3, 4000, 5000 ), cue( 1, 0, 1000 ), cue( 2, 2000, 3000 ) ];
        override = CueOverride( 1, "00:00:00,100", "00:00:01,100", 100, 1100 );

        merged = merge_overrides( raw, { 1: override } );

        assert [ entry.index for entry in merged ] == [ 3, 1, 2 ];
        assert merged[1].start_time_ms == 100;

    def test_merge_without_overrides( self ):
        raw = [ cue( 1, 0, 1000 ) ];

        merged = merge_overrides( raw, {} );

        assert merged == raw;
        assert merged is not raw;

    def test_later_override_wins_for_same_target( self ):
        raw = [ cue( 5, 0, 1000 ) ];
        first = CueOverride( 5, "00:00:00,100", "00:00:01,100", 100, 1100 );
        second = CueOverride( 5, "00:00:00,200", "00:00:01,200", 200, 1200 );

        assert merge_overrides( raw, { 1: first, 2: second } )[0].start_time_ms == 200;


class TestOverrideFromResult:
    """Test override construction from comparison results."""

    def test_matched_candidate( self ):
        result = compare_tracks( REFERENCE, [ cue( 2, 2400, 3400, "Dos" ) ] )[1];

        override = override_from_result( result );

        assert override.target_index == 2;
        assert override.start_time == "00:00:02,000";
        assert override.end_time_ms == 3000;
        assert override.text is None;

    def test_missing_candidate_placeholder( self ):
        result = compare_tracks( REFERENCE, [] )[0];

        override = override_from_result( result );

        assert override.target_index == 1;
        assert override.text == "";


class TestCorrectionStore:
    """Test single and bulk sync."""

    def test_apply_single_fixes_mismatch( self ):
        candidate = [ cue( 1, 0, 1000 ), cue( 2, 2600, 3700, "Dos" ), cue( 3, 4000, 5000 ) ];
        store = CorrectionStore();

        store.apply_single( 2, compare_tracks( REFERENCE, candidate ) );
        result = compare_tracks( REFERENCE, store.merge( candidate ) )[1];

        assert result.is_match;
        assert result.time_diff_start == 0;
        assert result.time_diff_end == 0;
        assert result.translated.text == "Dos";

    def test_apply_single_replaces_existing( self ):
        store = CorrectionStore();
        results = compare_tracks( REFERENCE, [ cue( 1, 300, 1300 ) ] );

        store.apply_single( 1, results );
        store.apply_single( 1, results );

        assert len( store ) == 1;
        assert 1 in store;

    def test_apply_single_unknown_index( self ):
        store = CorrectionStore();

        assert store.apply_single( 42, compare_tracks( REFERENCE, [] ) ) is None;
        assert len( store ) == 0;
        assert store.version == 0;

    def test_apply_single_missing_records_placeholder( self ):
        candidate = [ cue( 1, 0, 1000 ) ];
        store = CorrectionStore();

        override = store.apply_single( 3, compare_tracks( REFERENCE, candidate ) );

        assert override.text == "";
        assert store.merge( candidate ) == candidate;

    def test_apply_single_fallback_pair( self ):
        candidate = [ cue( 1, 0, 1000 ), cue( 8, 2300, 3300, "Dos" ), cue( 3, 4000, 5000 ) ];
        store = CorrectionStore();

        store.apply_single( 2, compare_tracks( REFERENCE, candidate ) );
        result = compare_tracks( REFERENCE, store.merge( candidate ) )[1];

        assert result.is_match;
        assert result.translated.index == 8;

    def test_latest_apply_single_wins_for_shared_target( self ):
        """Two originals paired with the same translated cue: the latest sync wins."""
        reference = [ cue( 1, 0, 1000, "One" ), cue( 2, 300, 1300, "Two" ) ];
        candidate = [ cue( 2, 200, 1200, "Dos" ) ];
        results = compare_tracks( reference, candidate );
        store = CorrectionStore();

        store.apply_single( 2, results );
        store.apply_single( 1, results );
        assert store.merge( candidate )[0].start_time_ms == 0;

        store.apply_single( 2, results );
        assert store.merge( candidate )[0].start_time_ms == 300;
        assert list( store.overrides ) == [ 1, 2 ];

    def test_apply_all( self ):
        candidate = [
            cue( 1, 50, 1050, "Uno" ),
            cue( 9, 2200, 3100, "Dos" ),
            cue( 3, 4000, 5000, "Tres" ),
        ];
        reference = REFERENCE + [ cue( 4, 8000, 9000, "Four" ) ];
        store = CorrectionStore();

        before = compare_tracks( reference, candidate );
        applied = store.apply_all( before );
        after = compare_tracks( reference, store.merge( candidate ) );

        assert applied == 2;
        assert sorted( store.overrides ) == [ 1, 2 ];
        for previous, result in zip( before, after ):
            if previous.translated is not None:
                assert result.is_match;
        assert after[3].error_type is ErrorType.MISSING;

    def test_apply_all_nothing_to_do( self ):
        store = CorrectionStore();

        assert store.apply_all( compare_tracks( REFERENCE, list( REFERENCE ) ) ) == 0;
        assert store.version == 0;

    def test_apply_all_keeps_previous_overrides( self ):
        candidate = [ cue( 1, 300, 1300 ), cue( 2, 2000, 3000 ) ];
        store = CorrectionStore();
        store.apply_single( 3, compare_tracks( REFERENCE, candidate ) );

        store.apply_all( compare_tracks( REFERENCE, candidate ) );

        assert sorted( store.overrides ) == [ 1, 3 ];

    def test_overrides_snapshot_is_a_copy( self ):
        store = CorrectionStore();
        store.apply_single( 1, compare_tracks( REFERENCE, [ cue( 1, 300, 1300 ) ] ) );

        snapshot = store.overrides;
        snapshot.clear();

        assert len( store ) == 1;

    def test_clear( self ):
        store = CorrectionStore();
        store.apply_single( 1, compare_tracks( REFERENCE, [ cue( 1, 300, 1300 ) ] ) );

        store.clear();

        assert len( store ) == 0;
        assert store.get( 1 ) is None;


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
