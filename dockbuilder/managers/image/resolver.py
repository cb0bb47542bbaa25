"""镜像构建目标解析"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from loguru import logger

from ...constants import DEFAULT_DOCKERFILE_PROBES
from .base import ImageConfigError, ProjectMetadata
from .target import BuildConfig, ImageTarget


class ImageTargetResolver:
    """解析一次运行要处理的镜像列表"""

    def __init__(
        self,
        project: ProjectMetadata,
        configured_images: Iterable[Union[ImageTarget, Mapping[str, Any]]] = (),
        name: Optional[str] = None,
        probes: Sequence[str] = DEFAULT_DOCKERFILE_PROBES,
    ) -> None:
        """
        初始化解析器

        Args:
            project: 项目元数据
            configured_images: 显式配置的镜像（ImageTarget 或配置文件中的字典），按配置顺序
            name: 自动探测到Dockerfile时使用的镜像名
            probes: 按顺序探测的Dockerfile相对路径
        """
        self.project = project
        self.configured_images = tuple(configured_images)
        self.name = name
        self.probes = tuple(probes)

    def resolve(self) -> List[ImageTarget]:
        """
        返回按顺序处理的镜像列表

        有显式配置时按配置顺序返回，所有构建配置都在返回前完成校验；
        否则尝试按约定位置自动探测Dockerfile，找不到时返回空列表。

        Returns:
            List[ImageTarget]: 镜像列表

        Raises:
            ImageConfigError: 任一镜像配置无效时抛出
        """
        if self.configured_images:
            return [self._prepare(item) for item in self.configured_images]

        dockerfile = self.find_default_dockerfile()
        if dockerfile is None:
            logger.debug(f"未配置镜像，且在 {self.project.base_dir} 下未找到Dockerfile")
            return []

        name = self.name or self.project.default_image_name
        build_config = BuildConfig(dockerfile=str(dockerfile)).validate(self.project.base_dir)
        logger.info(f"使用自动探测到的 {dockerfile} 构建镜像 {name}")
        return [ImageTarget(name=name, build_config=build_config)]

    def _prepare(self, item: Union[ImageTarget, Mapping[str, Any]]) -> ImageTarget:
        """解析配置字典，或校验尚未校验的构建配置"""
        if not isinstance(item, ImageTarget):
            return ImageTarget.from_dict(item, self.project.base_dir)

        build_config = item.build_config
        if build_config is None or build_config.validated:
            return item
        try:
            return replace(item, build_config=build_config.validate(self.project.base_dir))
        except ImageConfigError as e:
            raise ImageConfigError(f"镜像 {item.name} 的构建配置无效: {e}") from e

    def find_default_dockerfile(self) -> Optional[Path]:
        """按顺序探测约定位置，返回第一个存在的Dockerfile"""
        base_dir = Path(self.project.base_dir)
        for probe in self.probes:
            candidate = base_dir / probe
            if candidate.exists():
                return candidate
        return None
