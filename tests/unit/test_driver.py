"""Tests for BuildDriver — stage sequencing, ledger records, failure handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from pagesmith.config import BuildSettings
from pagesmith.core.driver import UNKNOWN_BUILD_VERSION, BuildDriver, detect_build_version
from pagesmith.core.generator import GenerationError
from pagesmith.core.packaging import OutputMissingError
from pagesmith.models.stages import BUILD_STAGE_IDS, PUBLISH_STAGE_IDS, StageState
from pagesmith.stages import StageExecutionError


@pytest.fixture
def driver(settings: BuildSettings, generator) -> BuildDriver:
    return BuildDriver(settings, generator=generator, build_version="1a2b3c4")


class TestDetectBuildVersion:
    def test_not_a_checkout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
        assert detect_build_version(tmp_path) == UNKNOWN_BUILD_VERSION


class TestBuild:
    def test_run_id_format(self, driver: BuildDriver):
        assert driver.run_id.startswith("ps-")
        assert driver.run_config.build_version == "1a2b3c4"

    def test_build_passes_all_build_stages(self, driver: BuildDriver, write_post):
        write_post("x", title="X")
        publish_dir = driver.build()

        assert publish_dir == driver.build_config.publish_dir
        assert (publish_dir / "x" / "index.html").exists()
        assert driver.get_states() == {sid: StageState.PASSED for sid in BUILD_STAGE_IDS}
        assert driver.verify_chain()

    def test_ledger_records_versions(self, driver: BuildDriver):
        driver.build()
        entries = driver.ledger.get_run_entries(driver.run_id)
        assert {e.build_version for e in entries} == {"1a2b3c4"}
        passed = [e for e in entries if e.state_transition == "running->passed"]
        assert all(e.generator_version == "0.121.2" for e in passed)

    def test_generation_failure(self, settings: BuildSettings, failing_generator):
        driver = BuildDriver(settings, generator=failing_generator)
        with pytest.raises(StageExecutionError) as excinfo:
            driver.build()

        assert excinfo.value.stage_id == "generate"
        assert isinstance(excinfo.value.cause, GenerationError)
        states = driver.get_states()
        assert states["resolve"] == StageState.PASSED
        assert states["generate"] == StageState.FAILED
        failed = driver.ledger.get_run_entries(driver.run_id)[-1]
        assert "single.html" in failed.detail

    def test_theme_path_reaches_generator(self, driver: BuildDriver, generator, site_dir: Path):
        driver.build()
        (call,) = generator.calls
        assert call["env"]["HUGO_MODULE_IMPORTS_PATH"] == str(site_dir / "themes" / "papermod")
        assert call["env"]["HUGO_BASEURL"] == driver.transport.site_url()


class TestPublish:
    def test_run_pipeline(self, driver: BuildDriver, write_post, tmp_path: Path):
        write_post("x", title="X")
        deployment = driver.run_pipeline()

        assert deployment.artifact_name == "github-pages"
        assert (tmp_path / "deploy" / "x" / "index.html").exists()
        assert driver.stage_machine is not None and driver.stage_machine.succeeded
        assert list(driver.get_states()) == BUILD_STAGE_IDS + PUBLISH_STAGE_IDS

    def test_publish_existing_output(self, settings: BuildSettings, write_post, generator):
        write_post("x", title="X")
        BuildDriver(settings, generator=generator).build()

        publisher = BuildDriver(settings, generator=generator)
        deployment = publisher.publish()
        assert deployment.url == publisher.transport.site_url()
        assert list(publisher.get_states()) == PUBLISH_STAGE_IDS

    def test_publish_without_output(self, driver: BuildDriver, tmp_path: Path):
        with pytest.raises(StageExecutionError) as excinfo:
            driver.publish()
        assert isinstance(excinfo.value.cause, OutputMissingError)
        assert driver.get_states()["upload"] == StageState.SKIPPED
        assert not (tmp_path / "deploy").exists()

    def test_publish_releases_group_on_failure(self, driver: BuildDriver):
        with pytest.raises(StageExecutionError):
            driver.publish()
        with driver.concurrency_group() as group:
            assert group.held
