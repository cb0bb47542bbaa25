"""镜像管理器类 - 门面模式实现"""

from typing import Optional

from docker.client import DockerClient
from loguru import logger

from .base_manager import BaseManager
from .image.build import ImageBuilder
from .image.context import BuildContext
from .image.tag import ImageTagger
from .image.target import ImageTarget


class ImageManager(BaseManager):
    """镜像管理器类，基于Docker引擎实现构建服务"""

    def __init__(self, docker_client: Optional[DockerClient] = None, auto_pull: Optional[str] = None) -> None:
        """
        初始化镜像管理器

        Args:
            docker_client: Docker客户端实例，默认从环境变量创建
            auto_pull: 旧的 autoPull 配置
        """
        super().__init__(docker_client)

        # 初始化子组件
        self.builder = ImageBuilder(self.docker_client, auto_pull)
        self.tagger = ImageTagger(self.docker_client)

    def build(self, target: ImageTarget, pull_policy: Optional[str], context: BuildContext) -> None:
        """
        构建Docker镜像

        Args:
            target: 要构建的镜像
            pull_policy: 基础镜像拉取策略
            context: 本次运行的构建上下文

        Raises:
            ImageBuildError: 构建失败时抛出
        """
        self.builder.build(target, pull_policy, context)

    def tag(self, name: str, target: ImageTarget) -> None:
        """
        为已构建的镜像添加构建配置中的额外标签

        Args:
            name: 已构建的镜像名称
            target: 镜像目标

        Raises:
            ImageTagError: 添加标签失败时抛出
        """
        tags = target.build_config.tags if target.build_config else ()
        if not tags:
            logger.debug(f"{target.description} 没有配置额外标签")
            return
        self.tagger.tag_all(name, tags)
