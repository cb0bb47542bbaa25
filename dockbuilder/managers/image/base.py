"""镜像构建基础类型定义"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from .context import BuildContext
    from .target import ImageTarget


class DockBuilderError(Exception):
    """所有应用错误的基类"""
    pass


class ConfigurationError(DockBuilderError):
    """配置错误，在任何构建开始前中止运行"""
    pass


class ImageConfigError(ConfigurationError):
    """镜像构建配置无效或不一致"""
    pass


class ImageBuildError(DockBuilderError):
    """镜像构建错误"""

    def __init__(self, message: str, image_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.image_name = image_name


class ImageTagError(DockBuilderError):
    """镜像标签错误"""

    def __init__(self, message: str, image_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.image_name = image_name


@dataclass(frozen=True)
class ProjectMetadata:
    """项目元数据，提供镜像命名所需的 group/artifact/version 和项目目录"""

    group_id: str
    artifact_id: str
    version: str
    base_dir: Path

    @property
    def default_image_name(self) -> str:
        """由项目信息生成的镜像名，格式为 group/artifact:version"""
        return f"{self.group_id}/{self.artifact_id}:{self.version}"


class BuildService(Protocol):
    """
    镜像构建服务接口

    build 和 tag 都是阻塞调用，失败时抛出 ImageBuildError / ImageTagError。
    """

    def build(self, target: "ImageTarget", pull_policy: Optional[str], context: "BuildContext") -> None:
        ...

    def tag(self, name: str, target: "ImageTarget") -> None:
        ...


class TargetStatus(Enum):
    """单个镜像在一次运行中的处理结果"""

    BUILT = "built"
    SKIPPED = "skipped"
    NOT_BUILDABLE = "not_buildable"


@dataclass(frozen=True)
class TargetOutcome:
    """单个镜像的处理记录"""

    target: "ImageTarget"
    status: TargetStatus
    pull_policy: Optional[str] = None
    tagged: bool = False


@dataclass
class RunReport:
    """一次运行的处理结果汇总，失败不会出现在这里而是直接抛出"""

    outcomes: List[TargetOutcome] = field(default_factory=list)
    context: Optional["BuildContext"] = None

    def _with_status(self, status: TargetStatus) -> Tuple["ImageTarget", ...]:
        return tuple(o.target for o in self.outcomes if o.status is status)

    @property
    def built(self) -> Tuple["ImageTarget", ...]:
        return self._with_status(TargetStatus.BUILT)

    @property
    def skipped(self) -> Tuple["ImageTarget", ...]:
        return self._with_status(TargetStatus.SKIPPED)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes
