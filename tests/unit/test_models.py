"""Tests for the frozen data models."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest
from pydantic import ValidationError

from pagesmith.models import (
    BUILD_STAGE_IDS,
    PIPELINE_STAGES,
    PUBLISH_STAGE_IDS,
    BuildConfiguration,
    Document,
    RunConfig,
    StageState,
    VALID_TRANSITIONS,
)


class TestStagePlan:
    def test_linear_order(self):
        assert [sd.ordinal for sd in PIPELINE_STAGES] == list(range(len(PIPELINE_STAGES)))
        assert BUILD_STAGE_IDS == ["resolve", "configure", "generate"]
        assert PUBLISH_STAGE_IDS == ["stage", "upload", "deploy"]

    def test_terminal_states_have_no_exits(self):
        for state in (StageState.PASSED, StageState.FAILED, StageState.SKIPPED):
            assert VALID_TRANSITIONS[state] == set()


class TestBuildConfiguration:
    def test_frozen(self):
        config = BuildConfiguration()
        with pytest.raises(ValidationError):
            config.publish_dir = Path("elsewhere")

    def test_generator_env_overrides(self):
        config = BuildConfiguration(base_url="https://a.example/")
        env = config.generator_env(publish_dir=Path("/out"), base_url="https://b.example/")
        assert env == {"HUGO_PUBLISHDIR": "/out", "HUGO_BASEURL": "https://b.example/"}

    def test_empty_base_url_omitted(self):
        assert "HUGO_BASEURL" not in BuildConfiguration().generator_env()


class TestRunConfig:
    def test_defaults(self):
        rc = RunConfig()
        assert rc.run_id.startswith("ps-")
        assert rc.build_version == "0000000"
        assert [sd.stage_id for sd in rc.stage_plan] == BUILD_STAGE_IDS + PUBLISH_STAGE_IDS


class TestDocument:
    def test_slug(self):
        assert Document(path=PurePosixPath("posts/hello.md"), title="Hello").slug == "hello"
        assert Document(path=PurePosixPath("posts/trip/index.md"), title="Trip").slug == "trip"
