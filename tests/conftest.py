from datetime import datetime, timedelta
from pathlib import Path

import pytest

from dockbuilder.managers.image.base import ImageBuildError, ImageTagError, ProjectMetadata
from dockbuilder.managers.image.context import BuildContextFactory
from dockbuilder.managers.image.target import BuildConfig, ImageTarget

FIXED_TIME = datetime(2026, 3, 1, 12, 0, 0)


class RecordingBuildService:
    """Fake build service that records every call and can simulate failures."""

    def __init__(self, fail_build=(), fail_tag=()):
        self.calls = []
        self.fail_build = set(fail_build)
        self.fail_tag = set(fail_tag)

    def build(self, target, pull_policy, context):
        self.calls.append(("build", target.name, pull_policy, context))
        if target.name in self.fail_build:
            raise ImageBuildError(f"build failed: {target.name}", target.name)

    def tag(self, name, target):
        self.calls.append(("tag", name))
        if name in self.fail_tag:
            raise ImageTagError(f"tag failed: {name}", name)

    @property
    def sequence(self):
        return [(call[0], call[1]) for call in self.calls]


def make_clock(start=FIXED_TIME):
    """Clock returning a strictly increasing instant on every call."""
    state = {"now": start - timedelta(seconds=1)}

    def clock():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    return clock


@pytest.fixture
def project(tmp_path: Path) -> ProjectMetadata:
    return ProjectMetadata(group_id="g", artifact_id="a", version="v", base_dir=tmp_path)


@pytest.fixture
def build_service() -> RecordingBuildService:
    return RecordingBuildService()


@pytest.fixture
def context_factory(project) -> BuildContextFactory:
    return BuildContextFactory(project, clock=make_clock())


@pytest.fixture
def make_target(tmp_path: Path):
    """Factory for validated image targets with a Dockerfile on disk."""

    def _make(name, skip=False, pull_policy=None, tags=(), build=True):
        if not build:
            return ImageTarget(name=name)
        dockerfile = tmp_path / name.replace("/", "_").replace(":", "_") / "Dockerfile"
        dockerfile.parent.mkdir(parents=True, exist_ok=True)
        dockerfile.write_text("FROM alpine:3.19\n")
        config = BuildConfig(dockerfile=str(dockerfile), skip=skip, pull_policy=pull_policy, tags=tuple(tags))
        return ImageTarget(name=name, build_config=config.validate(tmp_path))

    return _make
