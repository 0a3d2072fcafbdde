"""
WebSocket message format for watchsync
Every frame is a JSON object with a "type" field
"""
import json
import math
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

# Message types
LOAD_VIDEO = "loadVideo"
VIDEO_SYNC = "videoSync"
USER_COUNT = "userCount"
PING = "ping"
PONG = "pong"

# Sync actions
PLAY = "play"
PAUSE = "pause"
SEEK = "seek"
SYNC_ACTIONS = (PLAY, PAUSE, SEEK)

Number = Union[int, float]


class WatchSyncError(Exception):
    """Base error for watchsync"""


class ProtocolError(WatchSyncError):
    """Inbound frame could not be understood"""


@dataclass
class SyncAction:
    """A play/pause/seek at `time` seconds, observed at `timestamp` epoch ms"""
    action: str
    time: Number
    timestamp: Number

    def to_dict(self) -> dict:
        return {"action": self.action, "time": self.time, "timestamp": self.timestamp}


@dataclass
class InboundMessage:
    type: str
    video_id: Optional[str] = None
    sync: Optional[SyncAction] = None


def now_ms(now: Optional[float] = None) -> int:
    """Epoch milliseconds for `now` (epoch seconds), default the current time"""
    return int((time.time() if now is None else now) * 1000)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN and Infinity have no JSON encoding
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def parse_sync(data: Any) -> SyncAction:
    if not isinstance(data, dict):
        raise ProtocolError("videoSync data must be an object")

    action = data.get("action")
    if action not in SYNC_ACTIONS:
        raise ProtocolError(f"unknown sync action: {action!r}")

    for field in ("time", "timestamp"):
        if not _is_number(data.get(field)):
            raise ProtocolError(f"videoSync {field} must be a number")

    return SyncAction(action, data["time"], data["timestamp"])


def _reject_constant(name: str):
    raise ProtocolError(f"non-finite number: {name}")


def parse_message(raw: str) -> InboundMessage:
    """
    Decode one text frame from a participant

    Raises:
        ProtocolError: if the frame is not a well-formed message
    """
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        raise ProtocolError(f"invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ProtocolError("message must be a JSON object")

    msg_type = payload.get("type")
    if msg_type == PING:
        return InboundMessage(PING)

    if msg_type == LOAD_VIDEO:
        video_id = payload.get("videoId")
        if not isinstance(video_id, str):
            raise ProtocolError("loadVideo requires a string videoId")
        return InboundMessage(LOAD_VIDEO, video_id=video_id)

    if msg_type == VIDEO_SYNC:
        return InboundMessage(VIDEO_SYNC, sync=parse_sync(payload.get("data")))

    raise ProtocolError(f"unknown message type: {msg_type!r}")


def load_video_message(video_id: str) -> dict:
    return {"type": LOAD_VIDEO, "videoId": video_id}


def sync_message(sync: SyncAction) -> dict:
    return {"type": VIDEO_SYNC, "data": sync.to_dict()}


def user_count_message(count: int) -> dict:
    return {"type": USER_COUNT, "count": count}


def compensated_position(sync: SyncAction, receiver_now_ms: Number) -> float:
    """
    Position a receiver should seek to for an incoming sync

    Only 'play' is advanced by the network delay; pause and seek land on the
    exact broadcast time. Assumes participant clocks are comparable.
    """
    if sync.action == PLAY:
        return sync.time + (receiver_now_ms - sync.timestamp) / 1000
    return sync.time
