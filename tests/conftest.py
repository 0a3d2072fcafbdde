"""Shared fixtures for watchsync tests."""
import asyncio
import json

import pytest

from watchsync.coordinator import SessionCoordinator


class FakeChannel:
    """Records every frame written to it."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_str(self, data):
        if self.fail:
            raise ConnectionResetError("channel closed")
        self.sent.append(json.loads(data))

    def of_type(self, msg_type):
        return [m for m in self.sent if m["type"] == msg_type]


class StalledChannel:
    """A reader whose writes never complete."""

    async def send_str(self, data):
        await asyncio.Event().wait()


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def coordinator(clock):
    return SessionCoordinator(clock=clock)


@pytest.fixture
def make_channel():
    return FakeChannel


@pytest.fixture
def stalled_channel():
    return StalledChannel()
