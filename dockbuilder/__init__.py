"""Docker镜像构建编排工具包"""

# 导入loguru并配置logger
from loguru import logger

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"


def configure_logger(level: str = "INFO") -> None:
    """重新配置日志输出级别"""
    # 移除默认处理器
    logger.remove()
    # 添加标准输出处理器
    logger.add(
        sink=lambda msg: print(msg, end=""),  # 使用标准输出
        format=LOG_FORMAT,
        colorize=True,
        level=level,
    )


configure_logger()

# 导入其他模块
from .cli import app, main
from .managers import BuildOrchestrator, ConfigManager, ImageManager, RunConfiguration

__version__ = "0.1.0"

__all__ = [
    "logger",
    "configure_logger",
    "app",
    "main",
    "BuildOrchestrator",
    "ConfigManager",
    "ImageManager",
    "RunConfiguration",
]
