"""Core data models for the recording session."""

from .recording_models import (
    GeneratedTest,
    HealingConfig,
    HealingStrategy,
    RecordingState,
    SessionStatus,
    TestMetadata,
    TestStep,
    Viewport
)

__all__ = [
    "GeneratedTest",
    "HealingConfig",
    "HealingStrategy",
    "RecordingState",
    "SessionStatus",
    "TestMetadata",
    "TestStep",
    "Viewport"
]
