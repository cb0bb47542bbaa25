"""镜像构建目标的数据定义与校验"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ...constants import CLEANUP_MODES, DEFAULT_FILES, ERROR_MESSAGES
from .base import ImageConfigError

BUILD_CONFIG_KEYS: Tuple[str, ...] = (
    "dockerfile",
    "dockerfile_dir",
    "context_dir",
    "pull_policy",
    "skip",
    "tags",
    "args",
    "no_cache",
    "cleanup",
)
IMAGE_KEYS: Tuple[str, ...] = ("name", "alias", "build")
# 值必须为字符串（或未配置）的构建配置项
STR_CONFIG_KEYS: Tuple[str, ...] = ("dockerfile", "dockerfile_dir", "context_dir", "pull_policy", "cleanup")


def _resolve(base: Union[str, Path], path: str) -> str:
    return str(Path(path) if os.path.isabs(path) else Path(base) / path)


def _check_optional_str(key: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ImageConfigError(f"配置项类型错误: {key} 应为 str")


@dataclass(frozen=True)
class BuildConfig:
    """单个镜像的构建配置"""

    dockerfile: Optional[str] = None
    dockerfile_dir: Optional[str] = None
    context_dir: Optional[str] = None
    pull_policy: Optional[str] = None
    skip: bool = False
    tags: Tuple[str, ...] = ()
    args: Dict[str, str] = field(default_factory=dict, compare=False)
    no_cache: bool = False
    cleanup: str = "try"
    validated: bool = field(default=False, compare=False)

    @property
    def dockerfile_path(self) -> Optional[str]:
        """校验后的Dockerfile绝对路径"""
        return self.dockerfile if self.validated else None

    def validate(self, base_dir: Union[str, Path]) -> "BuildConfig":
        """
        规范化并校验构建配置

        显式的 dockerfile 优先；dockerfile_dir 表示包含 Dockerfile 的目录；
        两者都未配置时使用 context_dir 下的 Dockerfile。

        Args:
            base_dir: 项目目录，相对路径以此为基准

        Returns:
            BuildConfig: 规范化后的新配置

        Raises:
            ImageConfigError: 配置无效或不一致时抛出
        """
        for key in STR_CONFIG_KEYS:
            _check_optional_str(key, getattr(self, key))
        if self.dockerfile and self.dockerfile_dir:
            raise ImageConfigError(ERROR_MESSAGES["dockerfile_conflict"])
        if self.cleanup not in CLEANUP_MODES:
            raise ImageConfigError(
                ERROR_MESSAGES["invalid_cleanup"].format(self.cleanup, ", ".join(CLEANUP_MODES))
            )
        for tag in self.tags:
            if not isinstance(tag, str) or not tag.strip():
                raise ImageConfigError(ERROR_MESSAGES["invalid_tag"].format(tag))

        context_dir = _resolve(base_dir, self.context_dir) if self.context_dir else None
        if self.dockerfile:
            dockerfile = _resolve(context_dir or base_dir, self.dockerfile)
        elif self.dockerfile_dir:
            dockerfile_dir = _resolve(base_dir, self.dockerfile_dir)
            dockerfile = os.path.join(dockerfile_dir, DEFAULT_FILES["dockerfile"])
            context_dir = context_dir or dockerfile_dir
        elif context_dir:
            dockerfile = os.path.join(context_dir, DEFAULT_FILES["dockerfile"])
        else:
            raise ImageConfigError(ERROR_MESSAGES["dockerfile_missing"])

        return replace(
            self,
            dockerfile=dockerfile,
            dockerfile_dir=None,
            context_dir=context_dir or os.path.dirname(dockerfile),
            tags=tuple(tag.strip() for tag in self.tags),
            args={str(k): str(v) for k, v in self.args.items()},
            validated=True,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildConfig":
        """
        从配置字典创建构建配置（未校验）

        Raises:
            ImageConfigError: 包含未知配置项或类型错误时抛出
        """
        if not isinstance(data, Mapping):
            raise ImageConfigError("构建配置应为字典")
        unknown = set(data) - set(BUILD_CONFIG_KEYS)
        if unknown:
            raise ImageConfigError(f"未知的构建配置项: {', '.join(sorted(unknown))}")

        for key in ("skip", "no_cache"):
            if key in data and not isinstance(data[key], bool):
                raise ImageConfigError(f"配置项类型错误: {key} 应为 bool")
        for key in STR_CONFIG_KEYS:
            _check_optional_str(key, data.get(key))
        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise ImageConfigError("配置项类型错误: tags 应为 list")
        args = data.get("args") or {}
        if not isinstance(args, dict):
            raise ImageConfigError("配置项类型错误: args 应为 dict")

        return cls(
            dockerfile=data.get("dockerfile"),
            dockerfile_dir=data.get("dockerfile_dir"),
            context_dir=data.get("context_dir"),
            pull_policy=data.get("pull_policy"),
            skip=data.get("skip", False),
            tags=tuple(tags),
            args=dict(args),
            no_cache=data.get("no_cache", False),
            cleanup=data.get("cleanup", "try"),
        )


@dataclass(frozen=True)
class ImageTarget:
    """一次运行中要处理的镜像"""

    name: str
    build_config: Optional[BuildConfig] = None
    alias: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ImageConfigError(ERROR_MESSAGES["empty_image_name"])

    @property
    def description(self) -> str:
        """用于日志的镜像描述，例如 "[web] acme/web:1.0" """
        return f"[{self.alias}] {self.name}" if self.alias else f"[{self.name}]"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base_dir: Union[str, Path]) -> "ImageTarget":
        """
        解析配置文件中的单个镜像并立即校验其构建配置

        Args:
            data: images 列表中的一项
            base_dir: 项目目录

        Returns:
            ImageTarget: 镜像目标

        Raises:
            ImageConfigError: 配置无效时抛出
        """
        if not isinstance(data, Mapping):
            raise ImageConfigError("镜像配置应为字典")
        unknown = set(data) - set(IMAGE_KEYS)
        if unknown:
            raise ImageConfigError(f"未知的镜像配置项: {', '.join(sorted(unknown))}")

        name = data.get("name")
        if not isinstance(name, str):
            raise ImageConfigError(ERROR_MESSAGES["empty_image_name"])
        _check_optional_str("alias", data.get("alias"))

        build_config = None
        if data.get("build") is not None:
            try:
                build_config = BuildConfig.from_dict(data["build"]).validate(base_dir)
            except ImageConfigError as e:
                raise ImageConfigError(f"镜像 {name} 的构建配置无效: {e}") from e

        return cls(name=name, build_config=build_config, alias=data.get("alias"))
