"""
SpeechDesk UI Module

This module contains the Qt integration for the startup core.
"""

from speechdesk.ui.readiness_bridge import ReadinessSignalBridge

__all__ = [
    "ReadinessSignalBridge"
]
