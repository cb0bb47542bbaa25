"""配置管理器类"""

import copy
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union, cast

import yaml
from loguru import logger

from ..constants import (
    CONFIG_FILE_NAMES,
    DEFAULT_GROUP,
    DEFAULT_PROJECT_CONFIG,
    DEFAULT_VERSION,
    DefaultProjectConfig,
)
from .image.base import ConfigurationError, ProjectMetadata
from .image.target import ImageTarget


class ConfigError(ConfigurationError):
    """配置错误"""

    pass


ValidationStructure = Dict[str, Union[Type[Any], Tuple[Type[Any], ...], "ValidationStructure"]]

def generate_validation_structure(config_template: Dict[str, Any]) -> ValidationStructure:
    """
    从配置模板生成验证结构

    Args:
        config_template: 配置模板

    Returns:
        ValidationStructure: 验证结构
    """
    validation_structure: ValidationStructure = {}

    for key, value in config_template.items():
        if isinstance(value, dict) and value:
            validation_structure[key] = generate_validation_structure(value)
        elif value is None:
            # 未设置的默认值允许为空或字符串
            validation_structure[key] = (str, type(None))
        else:
            validation_structure[key] = type(value)

    return validation_structure


@dataclass(frozen=True)
class RunConfiguration:
    """一次运行的不可变配置"""

    skip_build: bool = False
    skip_tag: bool = False
    name: Optional[str] = None
    image_pull_policy: Optional[str] = None
    auto_pull: Optional[str] = None
    # ImageTarget 或配置文件中尚未解析的镜像字典，由 ImageTargetResolver 统一解析校验
    images: Tuple[Union[ImageTarget, Mapping[str, Any]], ...] = ()
    build_args: Dict[str, str] = field(default_factory=dict, compare=False)
    output_dir: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> "RunConfiguration":
        """返回应用了覆盖值的新配置，值为None的覆盖项被忽略"""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "build_args" in changes:
            changes["build_args"] = {**self.build_args, **changes["build_args"]}
        return replace(self, **changes)


def find_project_dir(start: Optional[Union[str, Path]] = None) -> Path:
    """
    从指定目录开始向上查找包含配置文件的目录

    Args:
        start: 起始目录，默认为当前目录

    Returns:
        Path: 找到的项目目录，如果未找到则返回起始目录
    """
    origin = Path(start).resolve() if start else Path.cwd()
    current = origin
    while True:
        if any((current / name).exists() for name in CONFIG_FILE_NAMES):
            return current
        if current == current.parent:
            return origin
        current = current.parent


class ConfigManager:
    """配置管理器类，负责加载项目配置并生成运行配置"""

    project_dir: Path
    config: DefaultProjectConfig
    REQUIRED_CONFIG_FIELDS: ValidationStructure

    def __init__(self, project_dir: Optional[Union[str, Path]] = None, config: Optional[Dict[str, Any]] = None) -> None:
        """
        初始化配置管理器

        Args:
            project_dir: 项目目录路径，默认为当前目录
            config: 已有的项目配置，默认为None
        """
        self.project_dir = Path(project_dir).resolve() if project_dir else Path.cwd()
        self.config = self._merge_defaults(config or {})

        # 初始化验证结构
        self.REQUIRED_CONFIG_FIELDS = generate_validation_structure(cast(Dict[str, Any], DEFAULT_PROJECT_CONFIG))

    @staticmethod
    def _merge_defaults(config_updates: Dict[str, Any]) -> DefaultProjectConfig:
        config = copy.deepcopy(cast(Dict[str, Any], DEFAULT_PROJECT_CONFIG))

        # 递归更新配置
        def recursive_update(current, updates):
            for key, value in updates.items():
                if key in current and isinstance(value, dict) and isinstance(current[key], dict) and current[key]:
                    recursive_update(current[key], value)
                else:
                    current[key] = value

        recursive_update(config, config_updates)
        return cast(DefaultProjectConfig, config)

    def find_config_file(self) -> Optional[Path]:
        """返回项目目录下第一个存在的配置文件"""
        for name in CONFIG_FILE_NAMES:
            candidate = self.project_dir / name
            if candidate.exists():
                return candidate
        return None

    def load_config(self) -> DefaultProjectConfig:
        """
        加载配置文件，文件不存在时使用默认配置

        Returns:
            DefaultProjectConfig: 加载的配置

        Raises:
            ConfigError: 配置加载或验证失败时抛出
        """
        config_file = self.find_config_file()
        if config_file is None:
            logger.debug(f"{self.project_dir} 下没有配置文件，使用默认配置")
            self.config = self._merge_defaults({})
            return self.config

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                if config_file.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"解析配置文件 {config_file} 失败: {e}") from e
        except OSError as e:
            raise ConfigError(f"读取配置文件 {config_file} 失败: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"配置文件 {config_file} 的顶层应为字典")

        logger.debug(f"已加载配置文件 {config_file}")
        self.config = self._merge_defaults(data)
        self.validate_config()
        return self.config

    def validate_config(self) -> None:
        """
        验证配置的完整性和正确性

        Raises:
            ConfigError: 配置验证失败时抛出
        """
        self._validate_config_structure(cast(Dict[str, Any], self.config), self.REQUIRED_CONFIG_FIELDS)

    def _validate_config_structure(self, config: Dict[str, Any], required: ValidationStructure, path: str = "") -> None:
        """
        递归验证配置结构

        Args:
            config: 要验证的配置
            required: 必需的配置结构
            path: 当前配置项路径，用于错误消息

        Raises:
            ConfigError: 配置结构验证失败时抛出
        """
        unknown = set(config) - set(required)
        if unknown:
            raise ConfigError(f"未知的配置项: {', '.join(path + key for key in sorted(unknown))}")

        for key, value_type in required.items():
            value = config[key]
            if isinstance(value_type, dict):
                if not isinstance(value, dict):
                    raise ConfigError(f"配置项类型错误: {path}{key} 应为字典")
                self._validate_config_structure(value, value_type, f"{path}{key}.")
            elif not isinstance(value, value_type):
                raise ConfigError(f"配置项类型错误: {path}{key}")

    def get_project(self) -> ProjectMetadata:
        """
        获取项目元数据，未配置的字段使用默认值

        Returns:
            ProjectMetadata: 项目元数据
        """
        project = self.config["project"]
        return ProjectMetadata(
            group_id=project["group"] or DEFAULT_GROUP,
            artifact_id=project["artifact"] or self.project_dir.name.lower(),
            version=project["version"] or DEFAULT_VERSION,
            base_dir=self.project_dir,
        )

    def get_run_configuration(self, **overrides: Any) -> RunConfiguration:
        """
        根据配置生成运行配置

        镜像列表保持配置文件中的原始字典，解析和校验推迟到构建前由
        ImageTargetResolver 完成，跳过构建时不会触碰任何镜像配置。

        Args:
            **overrides: 覆盖配置文件的值（命令行参数），值为None的项被忽略

        Returns:
            RunConfiguration: 运行配置
        """
        build = self.config["build"]
        return RunConfiguration(
            skip_build=build["skip"],
            skip_tag=build["skip_tag"],
            name=build["name"],
            image_pull_policy=build["pull_policy"],
            auto_pull=build["auto_pull"],
            images=tuple(copy.deepcopy(item) for item in self.config["images"]),
            build_args={str(k): str(v) for k, v in build["args"].items()},
            output_dir=build["output_dir"],
        ).with_overrides(**overrides)
