"""Device operations for avswitcher.

Public API:
    VideoSwitcher -- Routing, front-panel lock and signal queries
    ViaClient -- VIA collaboration endpoint queries
"""

from avswitcher.devices.via import ViaClient
from avswitcher.devices.videoswitcher import VideoSwitcher

__all__ = ["VideoSwitcher", "ViaClient"]
