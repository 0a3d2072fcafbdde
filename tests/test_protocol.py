"""Tests for frame parsing and receiver-side delay compensation."""
import json

import pytest

from watchsync.protocol import (
    ProtocolError, SyncAction, WatchSyncError,
    compensated_position, now_ms, parse_message, sync_message,
)


class TestParseMessage:

    def test_load_video(self):
        msg = parse_message(json.dumps({"type": "loadVideo", "videoId": "abc123"}))
        assert msg.type == "loadVideo"
        assert msg.video_id == "abc123"

    def test_sync_keeps_values_as_sent(self):
        raw = json.dumps({
            "type": "videoSync",
            "data": {"action": "seek", "time": 42.5, "timestamp": 1700000000123},
        })
        msg = parse_message(raw)
        assert msg.sync == SyncAction("seek", 42.5, 1700000000123)
        assert sync_message(msg.sync)["data"] == {
            "action": "seek", "time": 42.5, "timestamp": 1700000000123,
        }

    def test_json_ping(self):
        assert parse_message('{"type": "ping"}').type == "ping"

    def test_negative_time_passes_through(self):
        raw = json.dumps({"type": "videoSync",
                          "data": {"action": "pause", "time": -1, "timestamp": 0}})
        assert parse_message(raw).sync.time == -1

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2, 3]",
        '{"type": "dance"}',
        '{"type": "loadVideo"}',
        '{"type": "loadVideo", "videoId": 7}',
        '{"type": "videoSync"}',
        '{"type": "videoSync", "data": {"action": "rewind", "time": 1, "timestamp": 1}}',
        '{"type": "videoSync", "data": {"action": "play", "time": "1", "timestamp": 1}}',
        '{"type": "videoSync", "data": {"action": "play", "time": 1}}',
        '{"type": "videoSync", "data": {"action": "play", "time": true, "timestamp": 1}}',
        '{"type": "videoSync", "data": {"action": "play", "time": NaN, "timestamp": 1}}',
        '{"type": "videoSync", "data": {"action": "play", "time": Infinity, "timestamp": 1}}',
        '{"type": "videoSync", "data": {"action": "seek", "time": 1, "timestamp": -Infinity}}',
        '{"type": "videoSync", "data": {"action": "pause", "time": 1e400, "timestamp": 1}}',
    ])
    def test_malformed_frames_rejected(self, raw):
        with pytest.raises(ProtocolError):
            parse_message(raw)

    def test_protocol_error_is_watchsync_error(self):
        assert issubclass(ProtocolError, WatchSyncError)


class TestCompensatedPosition:

    def test_play_advances_by_network_delay(self):
        sync = SyncAction("play", 10.0, 1_000_000)
        assert compensated_position(sync, 1_001_500) == pytest.approx(11.5)

    @pytest.mark.parametrize("action", ["pause", "seek"])
    def test_pause_and_seek_land_exactly(self, action):
        sync = SyncAction(action, 42.5, 1_000_000)
        assert compensated_position(sync, 1_009_000) == 42.5


def test_now_ms_converts_seconds():
    assert now_ms(1_700_000_005.25) == 1_700_000_005_250
    assert isinstance(now_ms(), int)
