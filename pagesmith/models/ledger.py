"""Run ledger entry model (append-only, hash-chained).

One entry per stage state transition. ``pagesmith status`` is a projection
of these entries.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntry(BaseModel):
    """A single entry in the run ledger."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    run_id: str
    stage_id: str
    state_transition: str  # "from_state->to_state", e.g. "not_started->running"
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    input_hash: str = ""
    output_hash: str = ""
    artifact_references: list[str] = []
    build_version: str = "0000000"
    generator_version: str = ""
    detail: str = ""  # error message for failed transitions
    previous_entry_hash: str = ""
    entry_hash: str = ""  # computed on append, seals this entry
