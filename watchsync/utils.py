"""
Utility functions for participant IDs and video URLs
"""
import random
import re
import string
from typing import Optional

_VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=)([^&\s]+)"),
    re.compile(r"(?:youtube\.com/embed/)([^&\s]+)"),
    re.compile(r"(?:youtu\.be/)([^&\s]+)"),
    re.compile(r"(?:youtube\.com/v/)([^&\s]+)"),
    re.compile(r"(?:youtube\.com/live/)([^&\s]+)"),
]


def generate_participant_id(length: int = 9) -> str:
    """Generate a random participant ID"""
    alphabet = string.ascii_lowercase + string.digits
    return "viewer_" + "".join(random.choice(alphabet) for _ in range(length))


def extract_video_id(url: str) -> Optional[str]:
    """Pull the YouTube video ID out of a share/watch/embed URL, or None"""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None
