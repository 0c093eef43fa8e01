"""
Backup utility for exported subtitle files, with size-based retention.
"""
import glob
import shutil
from datetime import datetime
from pathlib import Path
from typing import List

from .logging import get_logger


class BackupManager:
    """
    Keeps timestamped copies of export files before they are overwritten.

    Rules:
    - Files <150KB: Keep up to 50 copies
    - Files ≥150KB: Keep up to 25 copies
    - ISO-8601 timestamped copies
    """

    def __init__( self, backup_dir: Path = None ):
        self.logger = get_logger();
        self.backup_dir = Path( backup_dir ) if backup_dir else Path( "backup" );

        # Size thresholds in bytes
        self.size_threshold = 150 * 1024;  # 150KB
        self.max_small_files = 50;         # <150KB files
        self.max_large_files = 25;         # ≥150KB files

    def get_backup_filename( self, original_file: Path ) -> str:
        """
        Generate backup filename with ISO-8601 timestamp.

        Args:
            original_file: Path to original file

        Returns:
            Backup filename with timestamp
        """
        timestamp = datetime.now().isoformat( timespec="microseconds" ).replace( ":", "-" );
        return f"{original_file.stem}.{timestamp}{original_file.suffix}";

    def get_existing_backups( self, original_file: Path ) -> List[Path]:
        """Get existing backup files for the original file, oldest first."""
        if not self.backup_dir.exists():
            return [];

        backup_pattern = f"{glob.escape( original_file.stem )}.????-??-??T??-??-??*{original_file.suffix}";

        # Timestamped names sort chronologically
        return sorted( self.backup_dir.glob( backup_pattern ), key=lambda p: p.name );

    def apply_retention_policy( self, original_file: Path ):
        """Remove the oldest backups beyond the size-dependent limit."""
        backups = self.get_existing_backups( original_file );
        if not backups:
            return;

        current_size = original_file.stat().st_size if original_file.exists() else 0;
        max_backups = self.max_small_files if current_size < self.size_threshold else self.max_large_files;

        if len( backups ) <= max_backups:
            return;

        backups_to_remove = backups[:-max_backups];
        for backup_path in backups_to_remove:
            try:
                backup_path.unlink();
                self.logger.debug( f"Removed old backup: {backup_path.name}" );
            except OSError as e:
                self.logger.warning( f"Could not remove backup {backup_path}: {e}" );

        self.logger.info( f"Removed {len( backups_to_remove )} old backup(s) to enforce retention policy" );

    def create_backup( self, file_path: Path ) -> Path:
        """
        Create backup of file with timestamp and apply retention policy.

        Args:
            file_path: Path to file to backup

        Returns:
            Path to created backup file
        """
        file_path = Path( file_path );
        if not file_path.exists():
            raise FileNotFoundError( f"File to backup not found: {file_path}" );

        self.backup_dir.mkdir( parents=True, exist_ok=True );
        backup_path = self.backup_dir / self.get_backup_filename( file_path );

        try:
            shutil.copy2( file_path, backup_path );
            self.logger.info( f"Created backup: {backup_path.name}" );
        except OSError as e:
            raise RuntimeError( f"Failed to create backup: {e}" ) from e;

        self.apply_retention_policy( file_path );

        return backup_path;
