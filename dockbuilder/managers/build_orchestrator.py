"""构建编排器"""

from typing import Optional

from loguru import logger

from .config_manager import RunConfiguration
from .image.base import BuildService, ProjectMetadata, RunReport, TargetOutcome, TargetStatus
from .image.context import BuildContext, BuildContextFactory
from .image.pull import PullPolicyResolver
from .image.resolver import ImageTargetResolver
from .image.target import ImageTarget


class BuildOrchestrator:
    """按顺序构建并标记镜像，遇到第一个失败即停止"""

    def __init__(
        self,
        build_service: BuildService,
        project: ProjectMetadata,
        context_factory: Optional[BuildContextFactory] = None,
    ) -> None:
        """
        初始化构建编排器

        Args:
            build_service: 构建服务
            project: 项目元数据
            context_factory: 构建上下文工厂，默认按运行配置创建
        """
        self.build_service = build_service
        self.project = project
        self.context_factory = context_factory

    def run(self, config: RunConfiguration) -> RunReport:
        """
        执行一次构建

        Args:
            config: 运行配置

        Returns:
            RunReport: 各镜像的处理结果

        Raises:
            ConfigurationError: 配置无效或时间戳写入失败时抛出
            ImageBuildError: 镜像构建失败时抛出
            ImageTagError: 镜像标签失败时抛出
        """
        report = RunReport()
        if config.skip_build:
            logger.info("已跳过构建")
            return report

        resolver = ImageTargetResolver(self.project, config.images, config.name)
        targets = resolver.resolve()
        if not targets:
            logger.info("没有需要构建的镜像")
            return report

        pull_resolver = PullPolicyResolver(config.image_pull_policy)
        context_factory = self.context_factory or BuildContextFactory(
            self.project, config.output_dir, config.build_args
        )

        for target in targets:
            build_config = target.build_config
            if build_config is None:
                logger.debug(f"{target.description} 没有构建配置，忽略")
                report.outcomes.append(TargetOutcome(target, TargetStatus.NOT_BUILDABLE))
                continue
            if build_config.skip:
                logger.info(f"{target.description} : 跳过构建")
                report.outcomes.append(TargetOutcome(target, TargetStatus.SKIPPED))
                continue

            # 上下文只在第一个需要构建的镜像处创建一次
            if report.context is None:
                report.context = context_factory.create()
            report.outcomes.append(self._build_and_tag(target, pull_resolver, report.context, config.skip_tag))

        return report

    def _build_and_tag(
        self, target: ImageTarget, pull_resolver: PullPolicyResolver, context: BuildContext, skip_tag: bool
    ) -> TargetOutcome:
        pull_policy = pull_resolver.resolve(target.build_config)
        self.build_service.build(target, pull_policy, context)
        if skip_tag:
            return TargetOutcome(target, TargetStatus.BUILT, pull_policy)
        self.build_service.tag(target.name, target)
        return TargetOutcome(target, TargetStatus.BUILT, pull_policy, tagged=True)
