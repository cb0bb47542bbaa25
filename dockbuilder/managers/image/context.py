"""构建上下文"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from loguru import logger

from ...constants import DEFAULT_FILES, DEFAULT_OUTPUT_DIR, DEFAULT_SOURCE_DIR, ERROR_MESSAGES
from ...time_utils import store_build_timestamp
from .base import ConfigurationError, ProjectMetadata


@dataclass(frozen=True)
class BuildContext:
    """一次运行内所有镜像共享的只读构建上下文"""

    timestamp: datetime
    base_dir: Path
    source_dir: Path
    output_dir: Path
    build_args: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def timestamp_file(self) -> Path:
        return self.output_dir / DEFAULT_FILES["timestamp_file"]


class BuildContextFactory:
    """构建上下文工厂"""

    def __init__(
        self,
        project: ProjectMetadata,
        output_dir: Optional[Union[str, Path]] = None,
        build_args: Optional[Dict[str, str]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        初始化构建上下文工厂

        Args:
            project: 项目元数据
            output_dir: 输出目录，默认为项目目录下的 target/docker
            build_args: 全局构建参数
            clock: 获取当前时间的函数
        """
        self.project = project
        base_dir = Path(project.base_dir)
        self.output_dir = base_dir / output_dir if output_dir else base_dir / DEFAULT_OUTPUT_DIR
        self.build_args = dict(build_args or {})
        self.clock = clock

    def create(self) -> BuildContext:
        """
        创建构建上下文并写入时间戳文件

        时间总是取当前时间，不读取之前运行留下的时间戳文件。

        Returns:
            BuildContext: 新的构建上下文

        Raises:
            ConfigurationError: 时间戳文件写入失败时抛出
        """
        base_dir = Path(self.project.base_dir)
        context = BuildContext(
            timestamp=self.clock(),
            base_dir=base_dir,
            source_dir=base_dir / DEFAULT_SOURCE_DIR,
            output_dir=self.output_dir,
            build_args=dict(self.build_args),
        )
        try:
            store_build_timestamp(context.timestamp_file, context.timestamp)
        except OSError as e:
            raise ConfigurationError(ERROR_MESSAGES["timestamp_write"].format(context.timestamp_file, e)) from e
        logger.debug(f"构建时间戳 {context.timestamp.isoformat()} 已写入 {context.timestamp_file}")
        return context
