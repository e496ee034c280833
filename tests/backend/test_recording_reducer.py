"""Unit tests for the pure recording transitions."""

import pytest
from datetime import datetime

from src.backend.core.models.recording_models import (
    HealingConfig,
    RecordingState,
    TestStep,
    Viewport
)
from src.backend.services.recording_commands import (
    AddStep,
    ClearSteps,
    PauseRecording,
    RemoveStep,
    StartRecording,
    StopRecording,
    UpdateHealingConfig,
    UpdateStep,
    describe_command,
    epoch_millis
)
from src.backend.services.recording_reducer import recording_reducer, replay_commands


STARTED_AT = datetime(2024, 1, 1, 12, 0, 0)


def start_command(test_id="t1", name="Login flow", url="https://app.test/login"):
    return StartRecording(test_id=test_id, test_name=name, url=url, started_at=STARTED_AT)


def add_command(step_id, **payload):
    return AddStep(TestStep(id=step_id, timestamp=1000, payload=payload))


class TestSessionController:
    """Test start/pause/stop transitions."""

    def test_start_creates_test_draft(self):
        state = recording_reducer(RecordingState(), start_command())

        assert state.is_recording is True
        assert state.is_paused is False
        assert state.current_test.id == "t1"
        assert state.current_test.name == "Login flow"
        assert state.current_test.description == "Generated test for https://app.test/login"
        assert state.current_test.metadata.url == "https://app.test/login"
        assert state.current_test.metadata.viewport == Viewport(1920, 1080)
        assert state.current_test.metadata.created_at == STARTED_AT
        assert state.current_test.metadata.last_modified == STARTED_AT

    def test_start_resets_ledger_and_replaces_test(self):
        state = replay_commands([start_command(), add_command("s1"), add_command("s2")])
        restarted = recording_reducer(state, start_command(test_id="t2", name="t2", url="http://b"))

        assert len(restarted.steps) == 0
        assert restarted.current_test.id != state.current_test.id

    def test_start_from_paused_state_resumes_recording(self):
        state = replay_commands([start_command(), PauseRecording(), start_command(test_id="t2")])

        assert state.is_recording is True
        assert state.is_paused is False

    def test_start_keeps_healing_config(self):
        initial = RecordingState(healing_config=HealingConfig(max_retry_attempts=9))

        assert recording_reducer(initial, start_command()).healing_config.max_retry_attempts == 9

    def test_pause_toggles(self):
        recording = recording_reducer(RecordingState(), start_command())
        paused = recording_reducer(recording, PauseRecording())
        resumed = recording_reducer(paused, PauseRecording())

        assert paused.is_paused is True
        assert resumed.is_paused is recording.is_paused

    def test_pause_flips_even_when_not_recording(self):
        state = recording_reducer(RecordingState(), PauseRecording())

        assert state.is_paused is True
        assert state.is_recording is False

    def test_stop_keeps_test_and_steps(self):
        state = replay_commands([start_command(), add_command("s1"), PauseRecording(), StopRecording()])

        assert state.is_recording is False
        assert state.is_paused is False
        assert state.current_test.id == "t1"
        assert state.step_ids == ["s1"]


class TestStepLedger:
    """Test add/remove/update/clear transitions."""

    def test_add_appends_in_call_order(self):
        state = replay_commands([add_command("s1"), add_command("s2"), add_command("s3")])

        assert state.step_ids == ["s1", "s2", "s3"]

    def test_add_does_not_deduplicate(self):
        state = replay_commands([add_command("s1", action="click"), add_command("s2", action="click")])

        assert len(state.steps) == 2

    def test_remove_preserves_relative_order(self):
        state = replay_commands([add_command("s1"), add_command("s2"), add_command("s3"), RemoveStep("s2")])

        assert state.step_ids == ["s1", "s3"]

    def test_remove_unknown_id_is_noop(self):
        state = replay_commands([add_command("s1"), add_command("s2")])
        after = recording_reducer(state, RemoveStep("nonexistent-id"))

        assert after is state
        assert after.step_ids == ["s1", "s2"]

    def test_update_merges_fields_in_place(self):
        state = replay_commands([
            add_command("s1", action="click", selector="#a"),
            add_command("s2", action="type", selector="#user", value="alice"),
            UpdateStep("s2", {"value": "bob", "id": "other"})
        ])

        assert state.step_ids == ["s1", "s2"]
        assert state.steps[1]["value"] == "bob"
        assert state.steps[1]["selector"] == "#user"
        assert state.steps[0]["selector"] == "#a"

    def test_update_unknown_id_is_noop(self):
        state = replay_commands([add_command("s1", action="click")])

        assert recording_reducer(state, UpdateStep("missing", {"action": "hover"})) is state

    def test_clear_keeps_lifecycle_and_test(self):
        state = replay_commands([start_command(), add_command("s1"), PauseRecording()])
        cleared = recording_reducer(state, ClearSteps())

        assert cleared.steps == ()
        assert cleared.is_recording is True
        assert cleared.is_paused is True
        assert cleared.current_test == state.current_test

    def test_ledger_ops_do_not_touch_lifecycle(self):
        state = replay_commands([start_command(), StopRecording()])
        after = replay_commands([add_command("s1"), UpdateStep("s1", {"x": 1}), RemoveStep("s1")], state)

        assert after.is_recording is False
        assert after.current_test == state.current_test

    def test_ledger_ops_work_while_idle(self):
        state = replay_commands([add_command("s1")])

        assert state.current_test is None
        assert state.step_ids == ["s1"]


class TestHealingPolicyStore:
    """Test healing config updates."""

    def test_merge_purity(self):
        before = RecordingState()
        after = recording_reducer(before, UpdateHealingConfig({"confidence_threshold": 0.9}))

        assert after.healing_config.confidence_threshold == 0.9
        assert after.healing_config.enabled_strategies == before.healing_config.enabled_strategies
        assert after.healing_config.max_retry_attempts == before.healing_config.max_retry_attempts
        assert after.healing_config.fallback_timeout == before.healing_config.fallback_timeout

    def test_successive_merges_accumulate(self):
        state = replay_commands([
            UpdateHealingConfig({"max_retry_attempts": 5}),
            UpdateHealingConfig({"fallback_timeout": 100})
        ])

        assert state.healing_config.max_retry_attempts == 5
        assert state.healing_config.fallback_timeout == 100

    def test_update_leaves_session_alone(self):
        state = replay_commands([start_command(), add_command("s1")])
        after = recording_reducer(state, UpdateHealingConfig({"max_retry_attempts": 0}))

        assert after.steps == state.steps
        assert after.current_test == state.current_test
        assert after.is_recording is True


class TestReducer:
    """Test dispatch and replay."""

    def test_unknown_command_rejected(self):
        with pytest.raises(TypeError):
            recording_reducer(RecordingState(), object())

    def test_replay_is_deterministic(self):
        commands = [
            start_command(),
            add_command("s1", action="click"),
            PauseRecording(),
            UpdateHealingConfig({"confidence_threshold": 0.5}),
            UpdateStep("s1", {"selector": "#go"})
        ]

        assert replay_commands(commands) == replay_commands(commands)

    def test_replay_does_not_mutate_initial_state(self):
        initial = RecordingState()
        replay_commands([start_command(), add_command("s1")], initial)

        assert initial == RecordingState()

    def test_add_step_command_assigns_id_and_timestamp(self):
        command = AddStep.create({"action": "click", "id": "caller-id", "timestamp": 1},
                                 id_factory=lambda: "generated", clock=lambda: STARTED_AT)

        assert command.step.id == "generated"
        assert command.step.timestamp == epoch_millis(STARTED_AT)
        assert dict(command.step.payload) == {"action": "click"}

    def test_commands_copy_caller_mappings(self):
        updates = {"value": "bob"}
        changes = {"max_retry_attempts": 4}
        update_step = UpdateStep("s1", updates)
        update_config = UpdateHealingConfig(changes)

        updates["value"] = "mallory"
        changes["max_retry_attempts"] = 99

        assert update_step.updates["value"] == "bob"
        assert update_config.changes["max_retry_attempts"] == 4
        with pytest.raises(TypeError):
            update_step.updates["value"] = "eve"

    def test_describe_command(self):
        assert describe_command(RemoveStep("s1")) == {"command": "RemoveStep", "step_id": "s1"}
        assert describe_command(UpdateHealingConfig({"b": 1, "a": 2}))["fields"] == ["a", "b"]
        assert describe_command(start_command())["url"] == "https://app.test/login"
