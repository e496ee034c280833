"""
Command variants accepted by the recording session.

Every mutation of the session goes through one of these commands. Anything
non-deterministic (fresh ids, wall-clock time) is captured when the command
is built, so folding the same commands over the same initial state always
yields the same result.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Union

from src.backend.core.models.recording_models import (
    RESERVED_STEP_KEYS,
    TestStep,
    Viewport,
)


IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


def new_id() -> str:
    return str(uuid.uuid4())


def epoch_millis(when: datetime) -> int:
    return int(when.timestamp() * 1000)


@dataclass(frozen=True)
class StartRecording:
    test_id: str
    test_name: str
    url: str
    started_at: datetime
    viewport: Viewport = field(default_factory=Viewport)

    @classmethod
    def create(cls, test_name: str, url: str, viewport: Optional[Viewport] = None,
               id_factory: IdFactory = new_id, clock: Clock = datetime.now) -> 'StartRecording':
        return cls(
            test_id=id_factory(),
            test_name=test_name,
            url=url,
            started_at=clock(),
            viewport=viewport or Viewport()
        )


@dataclass(frozen=True)
class PauseRecording:
    pass


@dataclass(frozen=True)
class StopRecording:
    pass


@dataclass(frozen=True)
class AddStep:
    step: TestStep

    @classmethod
    def create(cls, payload: Mapping[str, Any], id_factory: IdFactory = new_id,
               clock: Clock = datetime.now) -> 'AddStep':
        """Wrap a caller payload into a step with a fresh id and timestamp."""
        now = clock()
        data = {k: v for k, v in payload.items() if k not in RESERVED_STEP_KEYS}
        return cls(step=TestStep(id=id_factory(), timestamp=epoch_millis(now), payload=data))


@dataclass(frozen=True)
class RemoveStep:
    step_id: str


@dataclass(frozen=True)
class UpdateStep:
    step_id: str
    updates: Mapping[str, Any]

    def __post_init__(self):
        object.__setattr__(self, "updates", MappingProxyType(dict(self.updates)))


@dataclass(frozen=True)
class ClearSteps:
    pass


@dataclass(frozen=True)
class UpdateHealingConfig:
    changes: Mapping[str, Any]

    def __post_init__(self):
        object.__setattr__(self, "changes", MappingProxyType(dict(self.changes)))


RecordingCommand = Union[
    StartRecording,
    PauseRecording,
    StopRecording,
    AddStep,
    RemoveStep,
    UpdateStep,
    ClearSteps,
    UpdateHealingConfig,
]


def describe_command(command: RecordingCommand) -> Dict[str, Any]:
    """Short loggable summary of a command."""
    summary: Dict[str, Any] = {"command": type(command).__name__}
    if isinstance(command, StartRecording):
        summary.update(test_name=command.test_name, url=command.url)
    elif isinstance(command, AddStep):
        summary["step_id"] = command.step.id
    elif isinstance(command, (RemoveStep, UpdateStep)):
        summary["step_id"] = command.step_id
    elif isinstance(command, UpdateHealingConfig):
        summary["fields"] = sorted(command.changes)
    return summary
