"""构建管理器模块

该模块包含配置加载、镜像构建服务和构建编排器。
"""

from .base_manager import BaseManager
from .build_orchestrator import BuildOrchestrator
from .config_manager import ConfigError, ConfigManager, RunConfiguration, find_project_dir
from .image_manager import ImageManager

__all__ = [
    "BaseManager",
    "BuildOrchestrator",
    "ConfigManager",
    "ConfigError",
    "ImageManager",
    "RunConfiguration",
    "find_project_dir",
]
