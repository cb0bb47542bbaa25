from unittest.mock import MagicMock

import docker
import pytest

from dockbuilder.constants import TIMESTAMP_LABEL
from dockbuilder.managers.image.base import ImageBuildError, ImageConfigError, ImageTagError
from dockbuilder.managers.image.build import ImageBuilder
from dockbuilder.managers.image.context import BuildContextFactory
from dockbuilder.managers.image.tag import ImageTagger
from dockbuilder.managers.image.target import BuildConfig, ImageTarget
from dockbuilder.managers.image.utils import extract_base_images, parse_image_name
from dockbuilder.managers.image_manager import ImageManager

from tests.conftest import FIXED_TIME


@pytest.fixture
def docker_client():
    client = MagicMock()
    client.api.build.return_value = iter([{"stream": "Step 1/1 : FROM alpine:3.19\n"}, {"status": "done"}])
    return client


@pytest.fixture
def context(context_factory):
    return context_factory.create()


class TestImageBuilder:
    def test_build_invokes_engine(self, docker_client, make_target, context):
        target = make_target("one")
        ImageBuilder(docker_client).build(target, "Never", context)

        kwargs = docker_client.api.build.call_args.kwargs
        assert kwargs["path"] == target.build_config.context_dir
        assert kwargs["dockerfile"] == "Dockerfile"
        assert kwargs["tag"] == "one"
        assert kwargs["labels"] == {TIMESTAMP_LABEL: FIXED_TIME.isoformat()}
        assert kwargs["pull"] is False
        assert kwargs["rm"] is True
        assert kwargs["forcerm"] is False
        docker_client.images.pull.assert_not_called()

    def test_build_args_merged_with_target_precedence(self, docker_client, tmp_path, project):
        (tmp_path / "Dockerfile").write_text("FROM scratch\n")
        config = BuildConfig(dockerfile="Dockerfile", args={"A": "target", "C": "3"}).validate(tmp_path)
        target = ImageTarget(name="one", build_config=config)
        context = BuildContextFactory(project, build_args={"A": "global", "B": "2"}, clock=lambda: FIXED_TIME).create()

        ImageBuilder(docker_client).build(target, None, context)
        assert docker_client.api.build.call_args.kwargs["buildargs"] == {"A": "target", "B": "2", "C": "3"}

    def test_pulls_missing_base_image(self, docker_client, make_target, context):
        docker_client.images.get.side_effect = docker.errors.ImageNotFound("missing")
        ImageBuilder(docker_client).build(make_target("one"), "IfNotPresent", context)
        docker_client.images.pull.assert_called_once_with("alpine", tag="3.19")

    def test_present_base_image_not_pulled(self, docker_client, make_target, context):
        ImageBuilder(docker_client).build(make_target("one"), "IfNotPresent", context)
        docker_client.images.pull.assert_not_called()
        docker_client.images.get.assert_called_once_with("alpine:3.19")

    def test_always_pulls(self, docker_client, make_target, context):
        ImageBuilder(docker_client).build(make_target("one"), "Always", context)
        docker_client.images.pull.assert_called_once_with("alpine", tag="3.19")
        docker_client.images.get.assert_not_called()

    def test_never_skips_local_lookup(self, docker_client, make_target, context):
        ImageBuilder(docker_client).build(make_target("one"), "Never", context)
        docker_client.images.get.assert_not_called()
        docker_client.images.pull.assert_not_called()

    def test_auto_pull_used_without_policy(self, docker_client, make_target, context):
        ImageBuilder(docker_client, auto_pull="always").build(make_target("one"), None, context)
        docker_client.images.pull.assert_called_once()

    def test_pull_failure(self, docker_client, make_target, context):
        docker_client.images.pull.side_effect = docker.errors.APIError("denied")
        with pytest.raises(ImageBuildError):
            ImageBuilder(docker_client).build(make_target("one"), "Always", context)
        docker_client.api.build.assert_not_called()

    def test_error_in_build_stream(self, docker_client, make_target, context):
        docker_client.api.build.return_value = iter([{"stream": "Step 1/2"}, {"error": "boom"}])
        with pytest.raises(ImageBuildError, match="boom") as excinfo:
            ImageBuilder(docker_client).build(make_target("one"), "Never", context)
        assert excinfo.value.image_name == "one"

    def test_engine_api_error(self, docker_client, make_target, context):
        docker_client.api.build.side_effect = docker.errors.APIError("daemon gone")
        with pytest.raises(ImageBuildError):
            ImageBuilder(docker_client).build(make_target("one"), "Never", context)

    def test_invalid_policy_rejected_by_engine(self, docker_client, make_target, context):
        with pytest.raises(ImageConfigError):
            ImageBuilder(docker_client).build(make_target("one"), "Sometimes", context)
        docker_client.api.build.assert_not_called()

    def test_missing_dockerfile(self, docker_client, tmp_path, context):
        config = BuildConfig(dockerfile="missing/Dockerfile").validate(tmp_path)
        with pytest.raises(ImageBuildError):
            ImageBuilder(docker_client).build(ImageTarget(name="one", build_config=config), None, context)

    def test_unvalidated_config(self, docker_client, context):
        target = ImageTarget(name="one", build_config=BuildConfig(dockerfile="Dockerfile"))
        with pytest.raises(ImageBuildError):
            ImageBuilder(docker_client).build(target, None, context)


class TestImageTagger:
    def test_tag_all(self):
        client = MagicMock()
        image = client.images.get.return_value
        image.tag.return_value = True

        added = ImageTagger(client).tag_all("registry:5000/acme/web:1.0", ["latest", "stable"])
        assert added == ["registry:5000/acme/web:latest", "registry:5000/acme/web:stable"]
        image.tag.assert_any_call("registry:5000/acme/web", tag="latest")
        image.tag.assert_any_call("registry:5000/acme/web", tag="stable")

    def test_engine_refuses_tag(self):
        client = MagicMock()
        client.images.get.return_value.tag.return_value = False
        with pytest.raises(ImageTagError):
            ImageTagger(client).tag("acme/web:1.0", "acme/web:latest")

    def test_missing_image(self):
        client = MagicMock()
        client.images.get.side_effect = docker.errors.ImageNotFound("missing")
        with pytest.raises(ImageTagError):
            ImageTagger(client).tag("acme/web:1.0", "acme/web:latest")


class TestImageManager:
    def test_tag_without_configured_tags_is_noop(self, make_target):
        client = MagicMock()
        ImageManager(docker_client=client).tag("one", make_target("one"))
        client.images.get.assert_not_called()

    def test_tag_applies_configured_tags(self, make_target):
        client = MagicMock()
        client.images.get.return_value.tag.return_value = True
        ImageManager(docker_client=client).tag("acme/web:1.0", make_target("acme/web:1.0", tags=["latest"]))
        client.images.get.return_value.tag.assert_called_once_with("acme/web", tag="latest")

    def test_build_delegates_to_builder(self, docker_client, make_target, context):
        ImageManager(docker_client=docker_client).build(make_target("one"), "Never", context)
        docker_client.api.build.assert_called_once()


class TestUtils:
    @pytest.mark.parametrize("name, expected", [
        ("alpine", ("alpine", "latest")),
        ("alpine:3.19", ("alpine", "3.19")),
        ("localhost:5000/web", ("localhost:5000/web", "latest")),
        ("localhost:5000/web:1.0", ("localhost:5000/web", "1.0")),
    ])
    def test_parse_image_name(self, name, expected):
        assert parse_image_name(name) == expected

    def test_extract_base_images_multistage(self):
        content = (
            "ARG BASE=python:3.12\n"
            "FROM --platform=linux/amd64 golang:1.22 AS builder\n"
            "FROM builder AS test\n"
            "FROM ${BASE}\n"
            "from alpine:3.19\n"
            "FROM scratch\n"
            "FROM alpine:3.19\n"
        )
        assert extract_base_images(content) == ["golang:1.22", "alpine:3.19"]
