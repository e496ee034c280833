"""
Recording session container and command facade.

The ``RecordingSessionProvider`` is created once where the application is
assembled and handed to every consumer. It owns the only reference to the
session state; consumers read ``state`` and mutate it exclusively through
``RecordingControls``, whose methods each dispatch one command.

Using the facade without a provider, or after the provider's scope has
closed, is a wiring defect and raises ``RecordingContextError``.
"""

from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple

from src.backend.core.config import settings
from src.backend.core.config_loader import load_initial_healing_config
from src.backend.core.logging_config import get_recording_logger
from src.backend.core.models.recording_models import (
    HealingConfig,
    RecordingState,
    Viewport,
)
from .recording_commands import (
    AddStep,
    ClearSteps,
    IdFactory,
    Clock,
    PauseRecording,
    RecordingCommand,
    RemoveStep,
    StartRecording,
    StopRecording,
    UpdateHealingConfig,
    UpdateStep,
    describe_command,
    new_id,
)
from .recording_reducer import recording_reducer


class RecordingContextError(RuntimeError):
    """Raised when session state is used outside a live RecordingSessionProvider."""
    pass


class RecordingSessionProvider:
    """Owns the recording session state and applies commands to it in order.

    The provider is a context manager; state can only be read and commands
    only dispatched while it is open. Dispatch is synchronous and expects a
    single writer, so no locking is done here.
    """

    def __init__(self, healing_config: Optional[HealingConfig] = None):
        self._initial_state = RecordingState(healing_config=healing_config or HealingConfig())
        self._state = self._initial_state
        self._history: List[RecordingCommand] = []
        self._open = False
        self.logger = get_recording_logger("session")

    @classmethod
    def from_settings(cls, config_path: Optional[str] = None) -> 'RecordingSessionProvider':
        """Build a provider seeded with the healing policy from configuration."""
        return cls(healing_config=load_initial_healing_config(config_path))

    def __enter__(self) -> 'RecordingSessionProvider':
        self._open = True
        self.logger.debug("Recording session provider opened")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._open = False
        self.logger.debug("Recording session provider closed")

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def initial_state(self) -> RecordingState:
        return self._initial_state

    @property
    def state(self) -> RecordingState:
        self._ensure_open("state")
        return self._state

    @property
    def history(self) -> Tuple[RecordingCommand, ...]:
        """Commands applied since the last start, in dispatch order.

        Each ``StartRecording`` discards the earlier journal and moves
        ``initial_state`` to the state it was applied to, so replaying
        ``history`` over ``initial_state`` always yields ``state``.
        """
        return tuple(self._history)

    def dispatch(self, command: RecordingCommand) -> RecordingState:
        """Apply ``command`` and return the new session state."""
        self._ensure_open(type(command).__name__)
        if isinstance(command, StartRecording):
            self._initial_state = self._state
            self._history.clear()
        self._state = recording_reducer(self._state, command)
        self._history.append(command)

        test = self._state.current_test
        logger = self.logger.bind(
            session_id=test.id if test else None,
            test_case=test.name if test else None
        )
        summary = describe_command(command)
        logger.log_command(summary.pop("command"), self._state.status.value,
                           step_count=len(self._state.steps), **summary)
        return self._state

    def _ensure_open(self, what: str) -> None:
        if not self._open:
            raise RecordingContextError(
                f"{what} must be used within an open RecordingSessionProvider"
            )


class RecordingControls:
    """Command facade over a RecordingSessionProvider.

    Every method dispatches exactly one command and returns the full
    updated state.
    """

    def __init__(self, provider: Optional[RecordingSessionProvider],
                 id_factory: IdFactory = new_id, clock: Clock = datetime.now,
                 viewport: Optional[Viewport] = None):
        if provider is None:
            raise RecordingContextError(
                "RecordingControls must be used within a RecordingSessionProvider"
            )
        self.provider = provider
        self.id_factory = id_factory
        self.clock = clock
        self.viewport = viewport or Viewport(
            width=settings.RECORDING_VIEWPORT_WIDTH,
            height=settings.RECORDING_VIEWPORT_HEIGHT
        )

    @property
    def state(self) -> RecordingState:
        return self.provider.state

    # Session controller

    def start_recording(self, test_name: str, url: str) -> RecordingState:
        return self.provider.dispatch(StartRecording.create(
            test_name, url, viewport=self.viewport,
            id_factory=self.id_factory, clock=self.clock
        ))

    def pause_recording(self) -> RecordingState:
        """Toggle the paused flag.

        The toggle applies even when nothing is being recorded; callers
        are expected to pair pause and resume while recording.
        """
        if not self.provider.state.is_recording:
            self.provider.logger.warning("pause_recording called while not recording")
        return self.provider.dispatch(PauseRecording())

    def stop_recording(self) -> RecordingState:
        return self.provider.dispatch(StopRecording())

    # Step ledger

    def add_step(self, step: Mapping[str, Any]) -> RecordingState:
        return self.provider.dispatch(AddStep.create(step, id_factory=self.id_factory, clock=self.clock))

    def remove_step(self, step_id: str) -> RecordingState:
        return self.provider.dispatch(RemoveStep(step_id))

    def update_step(self, step_id: str, updates: Mapping[str, Any]) -> RecordingState:
        return self.provider.dispatch(UpdateStep(step_id, updates))

    def clear_steps(self) -> RecordingState:
        return self.provider.dispatch(ClearSteps())

    # Healing policy store

    def update_healing_config(self, config: Mapping[str, Any]) -> RecordingState:
        return self.provider.dispatch(UpdateHealingConfig(config))


def use_recording(provider: Optional[RecordingSessionProvider], **kwargs: Any) -> RecordingControls:
    """Return controls bound to ``provider``, failing fast if it is not open."""
    if provider is None or not provider.is_open:
        raise RecordingContextError(
            "use_recording must be used within a RecordingSessionProvider"
        )
    return RecordingControls(provider, **kwargs)
