"""
In-memory shared playback state
Owned by a SessionCoordinator, never a module global
"""
import time
from dataclasses import dataclass, asdict
from typing import Optional

from .protocol import SyncAction, PLAY, PAUSE, now_ms


@dataclass
class PlaybackState:
    """Current video and its play/pause position as last written"""
    video_id: str = ""
    loaded: bool = False
    is_playing: bool = False
    # Position at last_update, not extrapolated
    position: float = 0.0
    last_update: float = 0.0

    def load(self, video_id: str, now: Optional[float] = None) -> None:
        """Replace the current video; most recent load wins"""
        self.video_id = video_id
        self.loaded = True
        self.is_playing = False
        self.position = 0.0
        self.last_update = time.time() if now is None else now

    def apply_sync(self, action: str, position: float,
                   action_timestamp: Optional[float] = None,
                   now: Optional[float] = None) -> None:
        """
        Record a play/pause/seek action

        The client timestamp is not used for ordering: a stale update that
        arrives late overwrites a newer one. Seek is stored as paused at the
        new position.
        """
        self.position = position
        self.last_update = time.time() if now is None else now
        self.is_playing = action == PLAY

    def snapshot(self) -> dict:
        return asdict(self)

    def resume_snapshot_for(self, observer_now: float) -> Optional[SyncAction]:
        """
        Sync a newly joined participant should apply, or None if nothing loaded

        Args:
            observer_now: Server time in epoch seconds

        Returns:
            'play' at the position projected to observer_now, or 'pause' at
            the stored position
        """
        if not self.loaded:
            return None

        timestamp = now_ms(observer_now)
        if self.is_playing:
            elapsed = observer_now - self.last_update
            return SyncAction(PLAY, self.position + elapsed, timestamp)
        return SyncAction(PAUSE, self.position, timestamp)
