"""
watchsync - keep everyone's video player on the same frame
"""
from .coordinator import SessionCoordinator
from .state import PlaybackState

__all__ = ["SessionCoordinator", "PlaybackState"]
