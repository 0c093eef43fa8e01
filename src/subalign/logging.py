"""
Logging system for SubAlign with 5MB truncation check and Rich integration.
"""
import os
import logging
import shutil
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler


MAX_LOG_BYTES = 5 * 1024 * 1024;  # 5MB


class SubAlignLogger:
    """
    Custom logger for SubAlign with automatic log rotation and Rich display.

    Features:
    - 5MB size check on startup, rotates if exceeded
    - Rich console output with colors
    - File logging with rotation
    - INFO default, DEBUG with --debug flag
    - Log directory taken from SUBALIGN_LOG_DIR (default: logs)
    """

    def __init__( self, name: str = "subalign", debug: bool = False, logs_dir: Path = None ):
        self.name = name;
        self.debug_mode = debug;
        self.console = Console();

        if logs_dir is None:
            logs_dir = Path( os.getenv( "SUBALIGN_LOG_DIR", "logs" ) );
        self._open_log_dir( logs_dir );

    def _open_log_dir( self, logs_dir: Path ):
        """Point file logging at logs_dir, creating it if needed."""
        self.logs_dir = Path( logs_dir );
        self.logs_dir.mkdir( parents=True, exist_ok=True );

        self.log_file = self.logs_dir / f"{self.name}.log";

        # Check and rotate if log file >5MB on startup
        self._check_and_rotate_on_startup();

        # Setup logger
        self.logger = self._setup_logger();

    def set_logs_dir( self, logs_dir: Path ):
        """Move file logging to another directory after the logger has been created."""
        if Path( logs_dir ) == self.logs_dir:
            return;
        self._open_log_dir( logs_dir );

    def _check_and_rotate_on_startup( self ):
        """Check log file size on startup and rotate if >5MB."""
        if self.log_file.exists():
            file_size = self.log_file.stat().st_size;
            if file_size > MAX_LOG_BYTES:
                # Create timestamp-named backup
                timestamp = datetime.now().isoformat().replace( ":", "-" );
                backup_name = self.logs_dir / f"{self.name}.{timestamp}.log";

                shutil.move( str( self.log_file ), str( backup_name ) );
                self.console.print( f"Rotated log file to {backup_name}" );

    def _setup_logger( self ):
        """Setup logger with Rich console and file handlers."""
        logger = logging.getLogger( self.name );
        logger.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        logger.propagate = False;

        # Clear existing handlers
        for handler in logger.handlers[:]:
            handler.close();
            logger.removeHandler( handler );

        # Rich console handler
        console_handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=self.debug_mode
        );
        console_handler.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        console_handler.setFormatter( logging.Formatter( "%(message)s" ) );
        logger.addHandler( console_handler );

        # File handler with rotation
        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=5,
            encoding="utf-8"
        );
        file_handler.setLevel( logging.DEBUG );
        file_handler.setFormatter( logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ) );
        logger.addHandler( file_handler );

        return logger;

    def set_debug( self, debug: bool ):
        """Switch console verbosity after the logger has been created."""
        self.debug_mode = debug;
        level = logging.DEBUG if debug else logging.INFO;
        self.logger.setLevel( level );
        for handler in self.logger.handlers:
            if isinstance( handler, RichHandler ):
                handler.setLevel( level );

    def debug( self, message, **kwargs ):
        """Log debug message."""
        self.logger.debug( message, **kwargs );

    def info( self, message, **kwargs ):
        """Log info message."""
        self.logger.info( message, **kwargs );

    def warning( self, message, **kwargs ):
        """Log warning message."""
        self.logger.warning( message, **kwargs );

    def error( self, message, **kwargs ):
        """Log error message."""
        self.logger.error( message, **kwargs );


# Global logger instance
_logger = None;


def get_logger( debug: bool = False ) -> SubAlignLogger:
    """Get the global SubAlign logger instance."""
    global _logger;
    if _logger is None:
        _logger = SubAlignLogger( debug=debug );
    elif debug and not _logger.debug_mode:
        _logger.set_debug( True );
    return _logger;


def setup_logging( debug: bool = False, logs_dir: Path = None ):
    """
    Setup logging for the application.

    logs_dir re-points file logging when the logger already exists.
    """
    logger = get_logger( debug=debug );
    if logs_dir:
        logger.set_logs_dir( logs_dir );
    return logger;
