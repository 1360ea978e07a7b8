"""
SpeechDesk Services Package

This package contains the startup services: ffmpeg probing, voice loading
and readiness coordination.
"""

# Import services without causing circular imports
__all__ = [
    'FFmpegProbe', 'VoiceLoader', 'ReadinessCoordinator', 'AsyncProcessRunner'
]

def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == 'FFmpegProbe':
        from .capability_probe import FFmpegProbe
        return FFmpegProbe
    elif name == 'VoiceLoader':
        from .voice_loader import VoiceLoader
        return VoiceLoader
    elif name == 'ReadinessCoordinator':
        from .readiness_coordinator import ReadinessCoordinator
        return ReadinessCoordinator
    elif name == 'AsyncProcessRunner':
        from .process_runner import AsyncProcessRunner
        return AsyncProcessRunner
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
