"""Adversarial tests — attempts to run stages out of order.

These tests verify that:
1. A later stage cannot start before the one before it has passed
2. Terminal states cannot be exited
3. Nothing runs after a failure
"""

from __future__ import annotations

import pytest

from pagesmith.core.run_ledger import RunLedger
from pagesmith.core.stage_machine import InvalidTransitionError, StageMachine
from pagesmith.models.stages import BUILD_STAGE_IDS, PUBLISH_STAGE_IDS, StageState

FULL_PLAN = BUILD_STAGE_IDS + PUBLISH_STAGE_IDS


@pytest.fixture
def machine(tmp_path) -> StageMachine:
    return StageMachine(RunLedger(tmp_path / "ledger.db"), "ps-adversarial-sm", FULL_PLAN)


class TestOrderBypass:
    def test_cannot_deploy_first(self, machine: StageMachine):
        with pytest.raises(InvalidTransitionError):
            machine.transition("deploy", StageState.RUNNING)

    def test_cannot_start_while_previous_running(self, machine: StageMachine):
        machine.transition("resolve", StageState.RUNNING)
        with pytest.raises(InvalidTransitionError, match="resolve is running"):
            machine.transition("configure", StageState.RUNNING)

    def test_cannot_upload_after_skipped_stage(self, machine: StageMachine):
        for sid in BUILD_STAGE_IDS:
            machine.transition(sid, StageState.RUNNING)
            machine.transition(sid, StageState.PASSED)
        machine.transition("stage", StageState.SKIPPED)
        with pytest.raises(InvalidTransitionError, match="stage is skipped"):
            machine.transition("upload", StageState.RUNNING)


class TestTerminalStates:
    @pytest.mark.parametrize("terminal", [StageState.PASSED, StageState.FAILED])
    def test_cannot_leave_terminal_state(self, machine: StageMachine, terminal: StageState):
        machine.transition("resolve", StageState.RUNNING)
        machine.transition("resolve", terminal)
        for target in StageState:
            with pytest.raises(InvalidTransitionError):
                machine.transition("resolve", target)

    def test_nothing_runs_after_failure(self, machine: StageMachine):
        machine.transition("resolve", StageState.RUNNING)
        machine.transition("resolve", StageState.FAILED)
        for sid in FULL_PLAN[1:]:
            assert machine.get_state(sid) == StageState.SKIPPED
            with pytest.raises(InvalidTransitionError):
                machine.transition(sid, StageState.RUNNING)
