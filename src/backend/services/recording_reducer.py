"""
Pure transition functions for the recording session.

Each command variant has exactly one handler. Handlers take the current
state and the command and return a new state; they never read the clock,
generate ids or touch anything outside their arguments.
"""

from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional, Type

from src.backend.core.models.recording_models import (
    GeneratedTest,
    RecordingState,
    TestMetadata,
)
from .recording_commands import (
    AddStep,
    ClearSteps,
    PauseRecording,
    RecordingCommand,
    RemoveStep,
    StartRecording,
    StopRecording,
    UpdateHealingConfig,
    UpdateStep,
)


# Session controller

def _start_recording(state: RecordingState, command: StartRecording) -> RecordingState:
    test = GeneratedTest(
        id=command.test_id,
        name=command.test_name,
        description=f"Generated test for {command.url}",
        metadata=TestMetadata(
            url=command.url,
            viewport=command.viewport,
            created_at=command.started_at,
            last_modified=command.started_at
        )
    )
    return replace(state, is_recording=True, is_paused=False, current_test=test, steps=())


def _pause_recording(state: RecordingState, command: PauseRecording) -> RecordingState:
    # Bare toggle, applied whether or not a recording is running.
    return replace(state, is_paused=not state.is_paused)


def _stop_recording(state: RecordingState, command: StopRecording) -> RecordingState:
    return replace(state, is_recording=False, is_paused=False)


# Step ledger: only `steps` changes here.

def _add_step(state: RecordingState, command: AddStep) -> RecordingState:
    return replace(state, steps=state.steps + (command.step,))


def _remove_step(state: RecordingState, command: RemoveStep) -> RecordingState:
    if state.find_step(command.step_id) is None:
        return state
    return replace(state, steps=tuple(s for s in state.steps if s.id != command.step_id))


def _update_step(state: RecordingState, command: UpdateStep) -> RecordingState:
    if state.find_step(command.step_id) is None:
        return state
    return replace(
        state,
        steps=tuple(
            step.merged(command.updates) if step.id == command.step_id else step
            for step in state.steps
        )
    )


def _clear_steps(state: RecordingState, command: ClearSteps) -> RecordingState:
    return replace(state, steps=())


# Healing policy store

def _update_healing_config(state: RecordingState, command: UpdateHealingConfig) -> RecordingState:
    return replace(state, healing_config=state.healing_config.merged(command.changes))


TRANSITIONS: Dict[Type, Callable[[RecordingState, RecordingCommand], RecordingState]] = {
    StartRecording: _start_recording,
    PauseRecording: _pause_recording,
    StopRecording: _stop_recording,
    AddStep: _add_step,
    RemoveStep: _remove_step,
    UpdateStep: _update_step,
    ClearSteps: _clear_steps,
    UpdateHealingConfig: _update_healing_config,
}


def recording_reducer(state: RecordingState, command: RecordingCommand) -> RecordingState:
    """Apply one command to ``state`` and return the resulting state.

    Raises:
        TypeError: If ``command`` is not one of the recording commands
    """
    handler = TRANSITIONS.get(type(command))
    if handler is None:
        raise TypeError(f"Unsupported recording command: {type(command).__name__}")
    return handler(state, command)


def replay_commands(commands: Iterable[RecordingCommand],
                    initial_state: Optional[RecordingState] = None) -> RecordingState:
    """Fold ``commands`` over ``initial_state`` (defaults to a fresh session)."""
    state = initial_state if initial_state is not None else RecordingState()
    for command in commands:
        state = recording_reducer(state, command)
    return state
