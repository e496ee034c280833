"""
Services module for the recording session state machine.
"""

from .recording_session import (
    RecordingContextError,
    RecordingControls,
    RecordingSessionProvider,
    use_recording
)
from .recording_reducer import recording_reducer, replay_commands

__all__ = [
    "RecordingContextError",
    "RecordingControls",
    "RecordingSessionProvider",
    "use_recording",
    "recording_reducer",
    "replay_commands"
]
