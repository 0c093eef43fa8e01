"""
Timing corrections: overrides that force translated cues onto the original timeline.
"""
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .compare import ComparisonResult
from .subtitles import CueEntry
from .logging import get_logger


@dataclass( frozen=True )
class CueOverride:
    """
    Stored timing correction for one translated cue.

    Time fields are always present. text is None when the translated cue's
    own text should be kept; the gap placeholder for a missing cue uses "".
    """

    target_index: int;       # Ordinal of the translated cue to correct
    start_time: str;
    end_time: str;
    start_time_ms: int;
    end_time_ms: int;
    text: Optional[str] = None;

    def apply_to( self, entry: CueEntry ) -> CueEntry:
        """Return a copy of entry with this override's fields merged in."""
        return replace(
            entry,
            start_time=self.start_time,
            end_time=self.end_time,
            start_time_ms=self.start_time_ms,
            end_time_ms=self.end_time_ms,
            text=entry.text if self.text is None else self.text
        );


def override_from_result( result: ComparisonResult ) -> CueOverride:
    """
    Build the override that snaps a result's translated cue to the original timing.

    A result without a translated cue produces an empty-text placeholder
    targeting the original ordinal.
    """
    original = result.original;

    if result.translated is None:
        return CueOverride(
            target_index=original.index,
            start_time=original.start_time,
            end_time=original.end_time,
            start_time_ms=original.start_time_ms,
            end_time_ms=original.end_time_ms,
            text=""
        );

    return CueOverride(
        target_index=result.translated.index,
        start_time=original.start_time,
        end_time=original.end_time,
        start_time_ms=original.start_time_ms,
        end_time_ms=original.end_time_ms
    );


def merge_overrides( raw_candidate: List[CueEntry], overrides: Dict[int, CueOverride] ) -> List[CueEntry]:
    """
    Merge overrides into the raw translated track.

    Every cue whose ordinal is targeted by an override gets the override's
    fields; other cues pass through. Length and order are preserved and the
    inputs are not modified.

    Args:
        raw_candidate: Translated cues as parsed
        overrides: Mapping of original ordinal -> CueOverride

    Returns:
        New list of CueEntry objects
    """
    if not overrides:
        return list( raw_candidate );

    # Later insertions win when two overrides target the same cue
    by_target = {};
    for override in overrides.values():
        by_target[override.target_index] = override;

    merged = [];
    for entry in raw_candidate:
        override = by_target.get( entry.index );
        merged.append( override.apply_to( entry ) if override else entry );

    return merged;


class CorrectionStore:
    """
    Session-scoped store of timing overrides keyed by original cue ordinal.

    Mutations replace the whole mapping in one assignment so a reader never
    sees a partially applied bulk sync.
    """

    def __init__( self ):
        self.logger = get_logger();
        self._overrides: Dict[int, CueOverride] = {};
        self.version = 0;  # Bumped on every change

    def __len__( self ):
        return len( self._overrides );

    def __contains__( self, reference_index: int ):
        return reference_index in self._overrides;

    def get( self, reference_index: int ) -> Optional[CueOverride]:
        return self._overrides.get( reference_index );

    @property
    def overrides( self ) -> Dict[int, CueOverride]:
        """Snapshot copy of the current overrides."""
        return dict( self._overrides );

    def _commit( self, overrides: Dict[int, CueOverride] ):
        self._overrides = overrides;
        self.version += 1;

    def apply_single( self, reference_index: int, results: List[ComparisonResult] ) -> Optional[CueOverride]:
        """
        Create or replace the override for one original cue.

        Args:
            reference_index: Ordinal of the original cue to sync
            results: Current comparison results

        Returns:
            The stored CueOverride, or None if no original cue has that ordinal
        """
        result = next( ( r for r in results if r.original.index == reference_index ), None );
        if result is None:
            self.logger.warning( f"No original cue #{reference_index} to sync" );
            return None;

        override = override_from_result( result );

        # Re-inserting moves the key last so this sync wins over older ones
        overrides = dict( self._overrides );
        overrides.pop( reference_index, None );
        overrides[reference_index] = override;
        self._commit( overrides );

        if result.translated is None:
            self.logger.info( f"Cue #{reference_index} has no translation; recorded an empty placeholder" );
        else:
            self.logger.info( f"Synced cue #{reference_index} to {override.start_time} --> {override.end_time}" );

        return override;

    def apply_all( self, results: List[ComparisonResult] ) -> int:
        """
        Sync every drifted cue that has a translated counterpart.

        Missing cues are skipped. The new mapping is committed in a single step.

        Returns:
            Number of overrides created or replaced
        """
        overrides = dict( self._overrides );
        applied = 0;

        for result in results:
            if result.is_match or result.translated is None:
                continue;
            overrides[result.original.index] = override_from_result( result );
            applied += 1;

        if applied:
            self._commit( overrides );

        self.logger.info( f"Bulk sync applied {applied} correction(s)" );
        return applied;

    def merge( self, raw_candidate: List[CueEntry] ) -> List[CueEntry]:
        """Merge the current overrides into a raw translated track."""
        return merge_overrides( raw_candidate, self._overrides );

    def clear( self ):
        """Discard all overrides."""
        if self._overrides:
            self.logger.debug( f"Discarding {len( self._overrides )} correction(s)" );
        self._commit( {} );
