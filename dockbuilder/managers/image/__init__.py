"""Docker镜像构建相关功能模块

该子包包含镜像目标解析、拉取策略、构建上下文以及构建和标签的引擎实现。
"""

from .base import (
    BuildService,
    ConfigurationError,
    DockBuilderError,
    ImageBuildError,
    ImageConfigError,
    ImageTagError,
    ProjectMetadata,
    RunReport,
    TargetOutcome,
    TargetStatus,
)
from .build import ImageBuilder
from .context import BuildContext, BuildContextFactory
from .pull import ImagePullManager, PullPolicyResolver, resolve_pull_policy
from .resolver import ImageTargetResolver
from .tag import ImageTagger
from .target import BuildConfig, ImageTarget
from .utils import extract_base_images, parse_image_name

__all__ = [
    "BuildService",
    "ConfigurationError",
    "DockBuilderError",
    "ImageBuildError",
    "ImageConfigError",
    "ImageTagError",
    "ProjectMetadata",
    "RunReport",
    "TargetOutcome",
    "TargetStatus",
    "ImageBuilder",
    "BuildContext",
    "BuildContextFactory",
    "ImagePullManager",
    "PullPolicyResolver",
    "resolve_pull_policy",
    "ImageTargetResolver",
    "ImageTagger",
    "BuildConfig",
    "ImageTarget",
    "extract_base_images",
    "parse_image_name",
]
