"""
Session coordinator: participant tracking, state transitions and fan-out
"""
import asyncio
import json
import logging
import time
from typing import Callable, Dict, Optional

from .protocol import (
    PLAY, SyncAction,
    load_video_message, sync_message, user_count_message,
)
from .state import PlaybackState

logger = logging.getLogger("watchsync")

# Seconds a single channel write may take before it is abandoned
SEND_TIMEOUT = 5.0


class SessionCoordinator:
    """
    Owns one shared PlaybackState and the channels of everyone watching it

    A channel is anything with an awaitable send_str(), normally an aiohttp
    WebSocketResponse. Each event is handled to completion, broadcasts
    included, before the next one starts. Writes are bounded by send_timeout
    so a stalled reader cannot hold up the session.
    """

    def __init__(self, state: Optional[PlaybackState] = None,
                 clock: Callable[[], float] = time.time,
                 send_timeout: float = SEND_TIMEOUT):
        self.state = state if state is not None else PlaybackState()
        self.clock = clock
        self.send_timeout = send_timeout
        # participant_id -> channel
        self.participants: Dict[str, object] = {}
        self._lock = asyncio.Lock()

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    # ============================================================
    # CONNECTION LIFECYCLE
    # ============================================================

    async def on_connect(self, participant_id: str, channel) -> None:
        """Register a participant and bring it up to date"""
        async with self._lock:
            self.participants[participant_id] = channel
            logger.info("👋 Participant connected: %s (total: %d)",
                        participant_id, self.participant_count)

            if self.state.loaded:
                await self._send(participant_id, channel,
                                 json.dumps(load_video_message(self.state.video_id)))

                # A paused newcomer already sits at the loaded position
                resume = self.state.resume_snapshot_for(self.clock())
                if resume is not None and resume.action == PLAY:
                    await self._send(participant_id, channel,
                                     json.dumps(sync_message(resume)))

            await self._broadcast_count()

    async def on_disconnect(self, participant_id: str) -> None:
        async with self._lock:
            self.participants.pop(participant_id, None)
            logger.info("👋 Participant disconnected: %s (remaining: %d)",
                        participant_id, self.participant_count)
            await self._broadcast_count()

    # ============================================================
    # PLAYBACK EVENTS
    # ============================================================

    async def on_load_video(self, video_id: str) -> None:
        """Load a new shared video and announce it to everyone, sender included"""
        async with self._lock:
            self.state.load(video_id, now=self.clock())
            logger.info("🎬 Video loaded: %s", video_id)
            await self.broadcast(load_video_message(video_id))

    async def on_sync(self, sync: SyncAction) -> None:
        """
        Apply a play/pause/seek and forward it unmodified to everyone

        Receivers compensate for network delay from the embedded timestamp.
        """
        async with self._lock:
            self.state.apply_sync(sync.action, sync.time, sync.timestamp,
                                  now=self.clock())
            logger.info("⏯️ Video sync: %s at %.2fs", sync.action, sync.time)
            await self.broadcast(sync_message(sync))

    # ============================================================
    # FAN-OUT
    # ============================================================

    async def broadcast(self, message: dict) -> None:
        """Send a message to every participant; one bad channel doesn't stop the rest"""
        if not self.participants:
            return

        data = json.dumps(message)
        await asyncio.gather(
            *(self._send(participant_id, channel, data)
              for participant_id, channel in list(self.participants.items())),
            return_exceptions=True,
        )

    async def _broadcast_count(self) -> None:
        await self.broadcast(user_count_message(self.participant_count))

    async def _send(self, participant_id: str, channel, data: str) -> None:
        try:
            await asyncio.wait_for(channel.send_str(data), self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Send to %s timed out after %.1fs", participant_id, self.send_timeout)
        except Exception as e:
            # Removal happens through on_disconnect when the transport closes
            logger.debug("Failed to send to %s: %s", participant_id, e)
