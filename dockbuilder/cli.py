"""CLI命令行接口模块"""

import sys
from typing import List, Optional

import typer
from loguru import logger

from dockbuilder import cli_utils, configure_logger
from dockbuilder.managers.build_orchestrator import BuildOrchestrator
from dockbuilder.managers.image.base import DockBuilderError
from dockbuilder.managers.image.pull import PullPolicyResolver
from dockbuilder.managers.image.resolver import ImageTargetResolver

# 创建CLI应用
app = typer.Typer(
    help="Docker镜像构建编排工具",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich"
)

@app.command("build")
def build_images(
    project_dir: str = typer.Argument(None, help="项目目录路径"),
    skip_build: bool = typer.Option(False, "--skip-build", envvar="DOCKBUILDER_SKIP_BUILD", help="跳过整个构建"),
    skip_tag: bool = typer.Option(False, "--skip-tag", envvar="DOCKBUILDER_SKIP_TAG", help="构建后不添加额外标签"),
    name: Optional[str] = typer.Option(None, "-n", "--name", envvar="DOCKBUILDER_NAME", help="自动探测到Dockerfile时使用的镜像名"),
    pull_policy: Optional[str] = typer.Option(None, "--pull-policy", envvar="DOCKBUILDER_PULL_POLICY", help="全局镜像拉取策略：Always、IfNotPresent、Never"),
    build_args: List[str] = typer.Option([], "--build-arg", help="构建参数，格式：KEY=VALUE"),
    debug: bool = typer.Option(False, "--debug", help="输出调试日志")
):
    """构建并标记Docker镜像"""
    if debug:
        configure_logger("DEBUG")
    try:
        project, run_config = cli_utils.load_project(
            project_dir,
            skip_build=skip_build or None,
            skip_tag=skip_tag or None,
            name=name,
            image_pull_policy=pull_policy,
            build_args=cli_utils.parse_build_args(build_args) or None,
        )

        # 跳过构建时不解析镜像配置，也不连接Docker
        if run_config.skip_build:
            logger.info("已跳过构建")
            return

        orchestrator = BuildOrchestrator(cli_utils.get_build_service(run_config.auto_pull), project)
        report = orchestrator.run(run_config)
        if report.is_empty:
            logger.warning("没有找到需要构建的镜像")
            return
        logger.success(f"构建完成：已构建 {len(report.built)} 个镜像，跳过 {len(report.skipped)} 个")
    except DockBuilderError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

@app.command("targets")
def list_targets(
    project_dir: str = typer.Argument(None, help="项目目录路径"),
    name: Optional[str] = typer.Option(None, "-n", "--name", envvar="DOCKBUILDER_NAME", help="自动探测到Dockerfile时使用的镜像名"),
    pull_policy: Optional[str] = typer.Option(None, "--pull-policy", envvar="DOCKBUILDER_PULL_POLICY", help="全局镜像拉取策略")
):
    """列出将要处理的镜像，不执行构建"""
    try:
        project, run_config = cli_utils.load_project(project_dir, name=name, image_pull_policy=pull_policy)
        targets = ImageTargetResolver(project, run_config.images, run_config.name).resolve()
        if not targets:
            logger.warning("没有找到需要构建的镜像")
            return

        pull_resolver = PullPolicyResolver(run_config.image_pull_policy)
        for target in targets:
            build_config = target.build_config
            if build_config is None:
                logger.info(f"{target.description}: 无构建配置")
            elif build_config.skip:
                logger.info(f"{target.description}: 已跳过")
            else:
                policy = pull_resolver.resolve(build_config) or "默认"
                logger.info(f"{target.description}: {build_config.dockerfile_path} (拉取策略: {policy})")
    except DockBuilderError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

def main():
    """主入口函数"""
    app()

if __name__ == "__main__":
    main()
