"""镜像构建相关功能"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import docker
from docker.client import DockerClient
from loguru import logger

from ...constants import TIMESTAMP_LABEL
from .base import ImageBuildError
from .context import BuildContext
from .pull import ImagePullManager
from .target import BuildConfig, ImageTarget
from .utils import extract_base_images, parse_image_name


class ImageBuilder:
    """镜像构建器类"""

    def __init__(self, docker_client: DockerClient, auto_pull: Optional[str] = None) -> None:
        """
        初始化镜像构建器

        Args:
            docker_client: Docker客户端实例
            auto_pull: 旧的 autoPull 配置，未指定拉取策略时使用
        """
        self.docker_client = docker_client
        self.auto_pull = auto_pull

    def build(self, target: ImageTarget, pull_policy: Optional[str], context: BuildContext) -> None:
        """
        构建Docker镜像

        Args:
            target: 要构建的镜像
            pull_policy: 基础镜像拉取策略
            context: 本次运行的构建上下文

        Raises:
            ImageBuildError: 构建失败时抛出
            ImageConfigError: 拉取策略无效时抛出
        """
        build_config = target.build_config
        if build_config is None or not build_config.validated:
            raise ImageBuildError(f"镜像 {target.name} 没有已校验的构建配置", target.name)

        dockerfile_path = Path(build_config.dockerfile_path)
        if not dockerfile_path.exists():
            raise ImageBuildError(f"Dockerfile不存在: {dockerfile_path}", target.name)

        pull_manager = ImagePullManager(pull_policy, self.auto_pull)
        self._pull_base_images(target, dockerfile_path, pull_manager)

        build_args = {**context.build_args, **build_config.args}
        logger.info(f"开始构建镜像 {target.description}...")
        try:
            self._build_with_progress(target, build_config, build_args, context)
        except docker.errors.APIError as e:
            raise ImageBuildError(f"构建镜像 {target.name} 失败: {e}", target.name) from e
        logger.success(f"镜像 {target.name} 构建成功")

    def _pull_base_images(self, target: ImageTarget, dockerfile_path: Path, pull_manager: ImagePullManager) -> None:
        """按拉取策略拉取Dockerfile中的基础镜像"""
        for image in self._base_images(dockerfile_path):
            try:
                if not pull_manager.should_pull(lambda: self._image_present(image)):
                    continue
                repository, tag = parse_image_name(image)
                logger.info(f"拉取基础镜像 {image} (策略: {pull_manager.policy})")
                self.docker_client.images.pull(repository, tag=tag)
            except docker.errors.APIError as e:
                raise ImageBuildError(f"拉取基础镜像 {image} 失败: {e}", target.name) from e

    @staticmethod
    def _base_images(dockerfile_path: Path) -> List[str]:
        return extract_base_images(dockerfile_path.read_text(encoding="utf-8"))

    def _image_present(self, image: str) -> bool:
        try:
            self.docker_client.images.get(image)
            return True
        except docker.errors.ImageNotFound:
            return False

    def _build_with_progress(
        self, target: ImageTarget, build_config: BuildConfig, build_args: Dict[str, str], context: BuildContext
    ) -> None:
        """
        构建镜像并显示进度

        Raises:
            ImageBuildError: 构建输出中包含错误时抛出
        """
        context_dir = build_config.context_dir
        dockerfile = build_config.dockerfile_path
        # Dockerfile在上下文目录内时使用相对路径
        if os.path.commonpath([context_dir, dockerfile]) == context_dir:
            dockerfile = os.path.relpath(dockerfile, context_dir)

        build_result = self.docker_client.api.build(
            path=context_dir,
            dockerfile=dockerfile,
            tag=target.name,
            buildargs=build_args,
            labels={TIMESTAMP_LABEL: context.timestamp.isoformat()},
            nocache=build_config.no_cache,
            rm=build_config.cleanup != "none",
            forcerm=build_config.cleanup == "remove",
            pull=False,
            decode=True,
        )

        # 处理构建输出
        for line in build_result:
            if "stream" in line:
                log_line = line["stream"].strip()
                if log_line:
                    logger.debug(log_line)
            elif "error" in line:
                raise ImageBuildError(f"构建镜像 {target.name} 失败: {line['error'].strip()}", target.name)
            elif "status" in line:
                logger.debug(line["status"])
