"""镜像标签管理相关功能"""

from typing import Iterable, List

import docker
from docker.client import DockerClient
from loguru import logger

from .base import ImageTagError
from .utils import parse_image_name


class ImageTagger:
    """镜像标签管理器类"""

    def __init__(self, docker_client: DockerClient) -> None:
        """
        初始化镜像标签管理器

        Args:
            docker_client: Docker客户端实例
        """
        self.docker_client = docker_client

    def tag(self, source_tag: str, new_tag: str) -> None:
        """
        为镜像添加新标签

        Args:
            source_tag: 源镜像标签
            new_tag: 新标签，格式为 "仓库名:标签"

        Raises:
            ImageTagError: 添加标签失败时抛出
        """
        repository, tag = parse_image_name(new_tag)
        try:
            image = self.docker_client.images.get(source_tag)
            if not image.tag(repository, tag=tag):
                raise ImageTagError(f"为镜像 {source_tag} 添加标签 {new_tag} 失败", source_tag)
        except docker.errors.APIError as e:
            raise ImageTagError(f"为镜像 {source_tag} 添加标签 {new_tag} 失败: {e}", source_tag) from e
        logger.success(f"已为镜像 {source_tag} 添加标签 {new_tag}")

    def tag_all(self, image_name: str, tags: Iterable[str]) -> List[str]:
        """
        为镜像添加同一仓库下的多个标签

        Args:
            image_name: 已构建的镜像名称
            tags: 标签列表

        Returns:
            List[str]: 添加的完整标签

        Raises:
            ImageTagError: 任一标签添加失败时抛出
        """
        repository, _ = parse_image_name(image_name)
        added = []
        for tag in tags:
            new_tag = f"{repository}:{tag}"
            self.tag(image_name, new_tag)
            added.append(new_tag)
        return added
