"""
CLI entry point for SubAlign with argument parsing and environment variable loading.
"""
import argparse
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from .logging import setup_logging
from .compare import MATCH_TOLERANCE_MS, FALLBACK_WINDOW_MS


class SubAlignCLI:
    """
    Command line interface for SubAlign timeline alignment.

    Supports command line arguments with environment variable defaults
    for thresholds and the export directory.
    """

    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;

    def _create_parser( self ):
        """Create argument parser with all SubAlign options."""
        parser = argparse.ArgumentParser(
            prog="subalign",
            description="Align a translated subtitle track to the timing of the original track",
            epilog="Environment variables: SUBALIGN_MATCH_TOLERANCE_MS, SUBALIGN_FALLBACK_WINDOW_MS, " \
                   "SUBALIGN_OUTPUT_DIR, SUBALIGN_LOG_DIR"
        );

        # Required arguments
        parser.add_argument(
            "--ref", "--original", "-r",
            required=True,
            type=Path,
            dest="reference",
            help="Path to the original subtitle file (.srt), used as the timing reference"
        );

        parser.add_argument(
            "--sub", "--translated", "-s",
            required=True,
            type=Path,
            dest="candidate",
            help="Path to the translated subtitle file (.srt) to correct"
        );

        # Corrections
        parser.add_argument(
            "--sync",
            type=int,
            action="append",
            default=[],
            metavar="INDEX",
            help="Snap the translation of original cue INDEX to the original timing (repeatable)"
        );

        parser.add_argument(
            "--sync-all",
            action="store_true",
            help="Snap every drifted cue to the original timing"
        );

        # Optional parameters
        parser.add_argument(
            "--output-dir", "-o",
            type=Path,
            default=None,
            help="Directory for the Synced_<name> export (default: next to the translated file)"
        );

        parser.add_argument(
            "--match-tolerance",
            type=int,
            default=None,
            help=f"Drift in ms below which cues count as aligned (default: {MATCH_TOLERANCE_MS})"
        );

        parser.add_argument(
            "--fallback-window",
            type=int,
            default=None,
            help=f"Max start distance in ms for pairing cues whose numbering drifted (default: {FALLBACK_WINDOW_MS})"
        );

        # Mode flags
        parser.add_argument(
            "--only-mismatches",
            action="store_true",
            help="Only list cues that are drifted or missing"
        );

        parser.add_argument(
            "--chart",
            action="store_true",
            help="Show a start drift bar chart for the first 100 cues"
        );

        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Perform analysis and corrections without writing the export file"
        );

        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );

        return parser;

    def _load_environment( self ):
        """Load environment variables from .env file and system."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );

        self.env_match_tolerance = os.getenv( "SUBALIGN_MATCH_TOLERANCE_MS" );
        self.env_fallback_window = os.getenv( "SUBALIGN_FALLBACK_WINDOW_MS" );
        self.env_output_dir = os.getenv( "SUBALIGN_OUTPUT_DIR" );
        self.env_log_dir = os.getenv( "SUBALIGN_LOG_DIR" );

    def _resolve_settings( self, errors: list ):
        """Fill unset options from the environment, then from defaults."""
        if self.args.match_tolerance is None:
            self.args.match_tolerance = self._env_int( "SUBALIGN_MATCH_TOLERANCE_MS", self.env_match_tolerance, MATCH_TOLERANCE_MS, errors );

        if self.args.fallback_window is None:
            self.args.fallback_window = self._env_int( "SUBALIGN_FALLBACK_WINDOW_MS", self.env_fallback_window, FALLBACK_WINDOW_MS, errors );

        if self.args.output_dir is None:
            self.args.output_dir = Path( self.env_output_dir ) if self.env_output_dir else self.args.candidate.parent;

    @staticmethod
    def _env_int( name: str, value, default: int, errors: list ) -> int:
        if not value:
            return default;
        try:
            return int( value );
        except ValueError:
            errors.append( f"{name} must be an integer, got: {value}" );
            return default;

    def _validate_arguments( self ):
        """Validate parsed arguments and environment setup."""
        errors = [];

        self._resolve_settings( errors );

        for label, path in ( ( "Original", self.args.reference ), ( "Translated", self.args.candidate ) ):
            if not path.exists():
                errors.append( f"{label} subtitle file not found: {path}" );
            elif path.suffix.lower() != ".srt":
                errors.append( f"Only .srt subtitle files are supported, got: {path.suffix}" );

        if self.args.match_tolerance < 1:
            errors.append( "Match tolerance must be at least 1 ms" );

        if self.args.fallback_window < 1:
            errors.append( "Fallback window must be at least 1 ms" );

        if self.args.output_dir.exists() and not self.args.output_dir.is_dir():
            errors.append( f"Output path is not a directory: {self.args.output_dir}" );

        return errors;

    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_args( argv );

        # Load environment variables (.env may choose the log directory)
        self._load_environment();

        # Setup logging based on debug flag
        self.logger = setup_logging( debug=self.args.debug, logs_dir=self.env_log_dir );

        # Validate everything
        errors = self._validate_arguments();
        if errors:
            self.logger.error( "Configuration errors:" );
            for error in errors:
                self.logger.error( f"  - {error}" );
            sys.exit( 1 );

        self.logger.info( "SubAlign v0.1.0 starting..." );
        self.logger.info( f"Original: {self.args.reference}" );
        self.logger.info( f"Translated: {self.args.candidate}" );
        self.logger.debug( f"Match tolerance: {self.args.match_tolerance}ms, " \
                           f"fallback window: {self.args.fallback_window}ms" );

        return self.args;


def run( args, logger ) -> int:
    """Run one alignment session for parsed arguments. Returns an exit status."""
    from .compare import CueComparator;
    from .report import ResultsReport;
    from .session import SyncSession;

    session = SyncSession(
        comparator=CueComparator(
            match_tolerance_ms=args.match_tolerance,
            fallback_window_ms=args.fallback_window
        )
    );

    if not session.load_reference_file( args.reference ) or not session.load_candidate_file( args.candidate ):
        return 1;

    if not session.reference_entries:
        logger.error( "No subtitle entries could be read from the original file" );
        return 1;

    report = ResultsReport();
    report.display_results( session.results, only_mismatches=args.only_mismatches );
    if args.chart:
        report.display_drift_chart( session.results );
    report.display_summary( session.stats );

    if not args.sync and not args.sync_all:
        return 0;

    for index in args.sync:
        session.apply_single( index );
    if args.sync_all:
        session.apply_all();

    logger.info( "=== AFTER CORRECTIONS ===" );
    report.display_summary( session.stats );

    output_file = session.save_export( args.output_dir, dry_run=args.dry_run );
    if output_file is None:
        logger.warning( "Nothing was exported: the translated file has no entries" );

    return 0;


def main( argv=None ):
    """Main entry point for the SubAlign CLI."""
    cli = SubAlignCLI();
    args = cli.parse_args( argv );

    try:
        status = run( args, cli.logger );
    except KeyboardInterrupt:
        cli.logger.warning( "Interrupted by user" );
        sys.exit( 130 );
    except Exception as e:
        cli.logger.error( f"Unexpected error: {e}" );
        if args.debug:
            raise;
        sys.exit( 1 );

    if status:
        sys.exit( status );


if __name__ == "__main__":
    main();
