"""Stage state machine for a linear run.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Stages start strictly in plan order; a stage cannot run until the one
  before it has passed
- On failure, every later stage in the plan is marked SKIPPED
- Every transition recorded in the run ledger
"""

from __future__ import annotations

from pagesmith.core.run_ledger import RunLedger
from pagesmith.models.ledger import LedgerEntry
from pagesmith.models.stages import VALID_TRANSITIONS, StageState


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class StageMachine:
    """Tracks and records stage states for one run.

    Parameters
    ----------
    ledger:
        Ledger that receives every transition.
    run_id:
        The run being tracked.
    plan:
        Stage ids in execution order.
    build_version:
        Site revision stamped on each ledger entry.
    """

    def __init__(
        self,
        ledger: RunLedger,
        run_id: str,
        plan: list[str],
        *,
        build_version: str = "0000000",
    ) -> None:
        self._ledger = ledger
        self.run_id = run_id
        self.plan = list(plan)
        self.build_version = build_version
        self.generator_version = ""
        self._states: dict[str, StageState] = {
            sid: StageState.NOT_STARTED for sid in self.plan
        }

    @classmethod
    def rebuild(cls, ledger: RunLedger, run_id: str) -> "StageMachine":
        """Reconstruct a machine from ledger entries (read-only use)."""
        entries = ledger.get_run_entries(run_id)
        plan: list[str] = []
        for entry in entries:
            if entry.stage_id not in plan:
                plan.append(entry.stage_id)
        machine = cls(ledger, run_id, plan)
        for entry in entries:
            _, to_state = entry.state_transition.split("->", 1)
            machine._states[entry.stage_id] = StageState(to_state)
            machine.build_version = entry.build_version
            if entry.generator_version:
                machine.generator_version = entry.generator_version
        return machine

    def get_state(self, stage_id: str) -> StageState:
        return self._states[stage_id]

    def get_all_states(self) -> dict[str, StageState]:
        return dict(self._states)

    def can_start(self, stage_id: str) -> tuple[bool, str]:
        """Whether *stage_id* may enter RUNNING, and why not if it can't."""
        if stage_id not in self._states:
            return False, f"{stage_id} is not part of this run"
        current = self._states[stage_id]
        if current != StageState.NOT_STARTED:
            return False, f"{stage_id} is {current.value}"
        idx = self.plan.index(stage_id)
        if idx > 0:
            before = self.plan[idx - 1]
            if self._states[before] != StageState.PASSED:
                return False, f"{before} is {self._states[before].value}"
        return True, ""

    def transition(
        self,
        stage_id: str,
        target_state: StageState,
        *,
        input_hash: str = "",
        output_hash: str = "",
        artifact_references: list[str] | None = None,
        detail: str = "",
    ) -> LedgerEntry:
        """Move a stage to *target_state* and record it.

        Entering FAILED skips every stage after it in the plan.
        """
        if stage_id not in self._states:
            raise InvalidTransitionError(f"{stage_id} is not part of run {self.run_id}")
        current = self._states[stage_id]
        allowed = VALID_TRANSITIONS.get(current, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {stage_id} from {current.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        if target_state == StageState.RUNNING:
            ok, reason = self.can_start(stage_id)
            if not ok:
                raise InvalidTransitionError(f"Cannot start {stage_id}: {reason}")

        sealed = self._record(
            stage_id,
            current,
            target_state,
            input_hash=input_hash,
            output_hash=output_hash,
            artifact_references=artifact_references or [],
            detail=detail,
        )
        self._states[stage_id] = target_state

        if target_state == StageState.FAILED:
            self.skip_remaining(after=stage_id, reason=f"{stage_id} failed")
        return sealed

    def skip_remaining(self, *, after: str | None = None, reason: str = "") -> list[str]:
        """Mark not-started stages (after *after*, or all) as SKIPPED."""
        start = self.plan.index(after) + 1 if after else 0
        skipped: list[str] = []
        for sid in self.plan[start:]:
            if self._states[sid] == StageState.NOT_STARTED:
                self._record(sid, StageState.NOT_STARTED, StageState.SKIPPED, detail=reason)
                self._states[sid] = StageState.SKIPPED
                skipped.append(sid)
        return skipped

    def _record(
        self,
        stage_id: str,
        current: StageState,
        target: StageState,
        **fields,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            run_id=self.run_id,
            stage_id=stage_id,
            state_transition=f"{current.value}->{target.value}",
            build_version=self.build_version,
            generator_version=self.generator_version,
            **fields,
        )
        return self._ledger.append(entry)

    @property
    def succeeded(self) -> bool:
        return all(s == StageState.PASSED for s in self._states.values())
