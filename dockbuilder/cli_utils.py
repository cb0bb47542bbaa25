"""CLI工具模块，包含CLI命令行接口的辅助函数"""

from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .constants import ERROR_MESSAGES
from .managers.config_manager import ConfigManager, RunConfiguration, find_project_dir
from .managers.image.base import ConfigurationError, ProjectMetadata
from .managers.image_manager import ImageManager


def load_project(project_dir: Optional[str] = None, **overrides: Any) -> Tuple[ProjectMetadata, RunConfiguration]:
    """
    加载项目配置

    未指定目录时从当前目录开始向上查找配置文件。

    Args:
        project_dir: 项目目录路径
        **overrides: 覆盖配置文件的命令行参数，值为None的项被忽略

    Returns:
        Tuple[ProjectMetadata, RunConfiguration]: 项目元数据和运行配置

    Raises:
        ConfigError: 配置无效时抛出
    """
    config_manager = ConfigManager(project_dir or find_project_dir())
    config_manager.load_config()
    return config_manager.get_project(), config_manager.get_run_configuration(**overrides)


def parse_build_args(build_args: List[str]) -> Dict[str, str]:
    """
    解析 KEY=VALUE 形式的构建参数，忽略格式错误的项

    Args:
        build_args: 构建参数列表

    Returns:
        Dict[str, str]: 构建参数
    """
    build_args_dict = {}
    for arg in build_args:
        try:
            key, value = arg.split("=", 1)
            build_args_dict[key.strip()] = value.strip()
        except ValueError:
            logger.warning(f"警告：忽略无效的构建参数 '{arg}'，正确格式为 KEY=VALUE")
    return build_args_dict


def get_build_service(auto_pull: Optional[str] = None) -> ImageManager:
    """
    创建基于Docker引擎的构建服务

    Raises:
        ConfigurationError: 无法连接Docker守护进程时抛出
    """
    image_manager = ImageManager(auto_pull=auto_pull)
    if not image_manager.check_docker_connection():
        raise ConfigurationError(ERROR_MESSAGES["docker_connection"].format("ping 失败"))
    return image_manager
