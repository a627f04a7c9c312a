"""Abstract base stage with an enforced lifecycle.

Every concrete stage inherits from BaseStage and implements only
``execute()``. The ``run_stage()`` wrapper is **not overridable** — it
enforces the canonical ordering:

    compute_input_hash -> execute -> compute_output_hash -> record

so every stage's inputs and outputs end up hashed into the run ledger
regardless of subclass behaviour.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, final

from pagesmith.core.hasher import compute_input_hash, compute_output_hash

logger = logging.getLogger(__name__)


class StageExecutionError(RuntimeError):
    """Raised when a stage's execute() method fails.

    ``cause`` is the original exception; its class tells which failure
    category (dependency, content, publish) stopped the run.
    """

    def __init__(self, stage_id: str, cause: BaseException) -> None:
        super().__init__(f"Stage {stage_id} failed: {cause}")
        self.stage_id = stage_id
        self.cause = cause


class BaseStage(abc.ABC):
    """Abstract base for all pipeline stages.

    Subclasses **must** implement ``stage_id``, ``display_name`` and
    ``execute(run_context)``. They **may** override ``hash_inputs`` to
    choose what goes into the input hash. They **must not** override
    ``run_stage()``.
    """

    @property
    @abc.abstractmethod
    def stage_id(self) -> str:
        """Unique stage identifier (e.g. ``'generate'``)."""
        ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str:
        """Human-readable name shown by ``pagesmith status``."""
        ...

    @abc.abstractmethod
    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Execute the stage's core logic.

        Parameters
        ----------
        run_context:
            Mutable dict carrying run-wide state: ``run_id``, settings,
            collaborators, and prior stage results under ``stage_results``.

        Returns
        -------
        dict:
            Result for this stage. Keys starting with ``_`` are excluded
            from the output hash (timestamps, paths that vary per run).
        """
        ...

    def hash_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Inputs folded into the input hash; prior stage outputs by default."""
        return {
            "prior_output_hashes": {
                sid: res.get("_output_hash", "")
                for sid, res in run_context.get("stage_results", {}).items()
            },
        }

    # ------------------------------------------------------------------
    # Lifecycle — NOT overridable
    # ------------------------------------------------------------------

    @final
    def run_stage(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Execute the full stage lifecycle.  **Do not override.**

        Returns the result dict produced by ``execute()``, augmented with
        ``_input_hash`` and ``_output_hash``.
        """
        try:
            input_hash = compute_input_hash(self.stage_id, self.hash_inputs(run_context))
            logger.info("%s [%s] input_hash=%s", self.display_name, self.stage_id, input_hash[:12])
            result = self.execute(run_context)
        except Exception as exc:
            logger.error("%s [%s] failed: %s", self.display_name, self.stage_id, exc)
            raise StageExecutionError(self.stage_id, exc) from exc

        hashable = {k: v for k, v in result.items() if not k.startswith("_")}
        output_hash = compute_output_hash(self.stage_id, hashable)
        logger.info("%s [%s] output_hash=%s", self.display_name, self.stage_id, output_hash[:12])

        result["_input_hash"] = input_hash
        result["_output_hash"] = output_hash
        run_context.setdefault("stage_results", {})[self.stage_id] = result
        return result

    def __repr__(self) -> str:
        return f"<{type(self).__name__} stage_id={self.stage_id!r}>"
