"""
Alignment session: the original track, the translated track and the user's corrections.
"""
from pathlib import Path
from typing import Callable, List, Optional

from .subtitles import CueEntry, parse_subtitles, serialize_subtitles, read_subtitle_file, write_subtitle_file
from .compare import CueComparator, ComparisonResult, calculate_stats, filter_mismatches
from .corrections import CorrectionStore, CueOverride
from .backup import BackupManager
from .logging import get_logger


DEFAULT_EXPORT_NAME = "subtitles.srt";


class SubtitleTrack:
    """A loaded subtitle file: its name and parsed cues."""

    def __init__( self, name: Optional[str], entries: List[CueEntry] ):
        self.name = name;
        self.entries = entries;

    def __len__( self ):
        return len( self.entries );


class SyncSession:
    """
    Single in-memory alignment session.

    The only mutation paths are load_reference, load_candidate, apply_single,
    apply_all and reset. Everything else (merged translated track, comparison
    results, statistics) is derived from those inputs and memoized on a
    version counter.
    """

    def __init__( self, comparator: CueComparator = None, backup_dir: Path = None ):
        self.logger = get_logger();
        self.comparator = comparator or CueComparator();
        self.backup_dir = backup_dir;

        self.reference: Optional[SubtitleTrack] = None;
        self.candidate: Optional[SubtitleTrack] = None;
        self.corrections = CorrectionStore();

        self._input_version = 0;
        self._cache = {};

    # --- Inputs -------------------------------------------------------------

    def load_reference( self, content: str, name: Optional[str] = None ) -> int:
        """Replace the original (timing reference) track. Returns cue count."""
        self.reference = SubtitleTrack( name, parse_subtitles( content ) );
        self._input_version += 1;
        self.logger.info( f"Loaded original track {name or '<text>'}: {len( self.reference )} cues" );
        return len( self.reference );

    def load_candidate( self, content: str, name: Optional[str] = None ) -> int:
        """Replace the translated track. Existing corrections are kept."""
        self.candidate = SubtitleTrack( name, parse_subtitles( content ) );
        self._input_version += 1;
        self.logger.info( f"Loaded translated track {name or '<text>'}: {len( self.candidate )} cues" );
        return len( self.candidate );

    def load_reference_file( self, path: Path ) -> bool:
        """Read and load the original track from disk."""
        loaded = read_subtitle_file( path );
        if loaded is None:
            return False;
        content, name = loaded;
        self.load_reference( content, name );
        return True;

    def load_candidate_file( self, path: Path ) -> bool:
        """Read and load the translated track from disk."""
        loaded = read_subtitle_file( path );
        if loaded is None:
            return False;
        content, name = loaded;
        self.load_candidate( content, name );
        return True;

    def reset( self ):
        """Drop both tracks and all corrections."""
        self.reference = None;
        self.candidate = None;
        self.corrections.clear();
        self._input_version += 1;
        self._cache = {};
        self.logger.info( "Session reset" );

    @property
    def is_ready( self ) -> bool:
        return self.reference is not None and self.candidate is not None;

    # --- Derived state ------------------------------------------------------

    def _memoized( self, key: str, compute: Callable ):
        version = ( self._input_version, self.corrections.version );
        cached = self._cache.get( key );
        if cached is not None and cached[0] == version:
            return cached[1];
        value = compute();
        self._cache[key] = ( version, value );
        return value;

    @property
    def reference_entries( self ) -> List[CueEntry]:
        return list( self.reference.entries ) if self.reference else [];

    @property
    def raw_candidate_entries( self ) -> List[CueEntry]:
        return list( self.candidate.entries ) if self.candidate else [];

    @property
    def candidate_entries( self ) -> List[CueEntry]:
        """Translated track with corrections merged in."""
        return list( self._memoized(
            "candidate",
            lambda: self.corrections.merge( self.candidate.entries if self.candidate else [] )
        ) );

    @property
    def results( self ) -> List[ComparisonResult]:
        """Comparison of the merged translated track against the original."""
        return list( self._memoized(
            "results",
            lambda: self.comparator.compare( self.reference_entries, self.candidate_entries )
        ) );

    @property
    def mismatches( self ) -> List[ComparisonResult]:
        return filter_mismatches( self.results );

    @property
    def stats( self ) -> dict:
        return dict( self._memoized( "stats", lambda: calculate_stats( self.results ) ) );

    # --- Corrections --------------------------------------------------------

    def apply_single( self, reference_index: int ) -> Optional[CueOverride]:
        """Snap the translated counterpart of one original cue onto its timing."""
        return self.corrections.apply_single( reference_index, self.results );

    def apply_all( self ) -> int:
        """Snap every drifted cue with a translated counterpart onto the original timing."""
        return self.corrections.apply_all( self.results );

    # --- Export -------------------------------------------------------------

    def export_filename( self ) -> str:
        name = self.candidate.name if self.candidate else None;
        return f"Synced_{name or DEFAULT_EXPORT_NAME}";

    def export_text( self ) -> Optional[str]:
        """Serialized corrected translated track, or None when there is nothing to export."""
        entries = self.candidate_entries;
        if not entries:
            return None;
        return serialize_subtitles( entries );

    def save_export( self, output_dir: Path, dry_run: bool = False ) -> Optional[Path]:
        """
        Write the corrected translated track to output_dir.

        An existing export with the same name is backed up first.

        Args:
            output_dir: Directory to write Synced_<name> into
            dry_run: If True, only report the would-be path

        Returns:
            Path to the export file, or None if there was nothing to export
        """
        output_dir = Path( output_dir );
        if output_dir.exists() and not output_dir.is_dir():
            raise ValueError( f"Output path is not a directory: {output_dir}" );

        if not self.candidate_entries:
            self.logger.warning( "No translated entries to export" );
            return None;

        output_file = output_dir / self.export_filename();

        if dry_run:
            self.logger.info( f"Dry run: Would save synced subtitles to {output_file}" );
            return output_file;

        output_dir.mkdir( parents=True, exist_ok=True );
        if output_file.exists():
            backup_dir = self.backup_dir or output_dir / "backup";
            BackupManager( backup_dir ).create_backup( output_file );

        write_subtitle_file( self.candidate_entries, output_file );

        return output_file;
