"""时间工具函数模块"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union


def to_epoch_millis(moment: datetime) -> int:
    """将时间转换为毫秒级时间戳"""
    return int(moment.timestamp() * 1000)


def store_build_timestamp(path: Union[str, Path], moment: datetime) -> Path:
    """
    将构建时间写入时间戳文件，供下游工具读取

    Args:
        path: 时间戳文件路径
        moment: 构建时间

    Returns:
        Path: 写入的文件路径

    Raises:
        OSError: 目录创建或写入失败时抛出
    """
    marker = Path(path)
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.write_text(f"{to_epoch_millis(moment)}\n", encoding="utf-8")
    return marker


def read_build_timestamp(path: Union[str, Path]) -> Optional[datetime]:
    """
    读取之前写入的构建时间

    构建流程本身不使用该值，仅供增量复制等下游逻辑使用。

    Args:
        path: 时间戳文件路径

    Returns:
        Optional[datetime]: 文件不存在或内容无效时返回None
    """
    marker = Path(path)
    if not marker.exists():
        return None
    try:
        millis = int(marker.read_text(encoding="utf-8").strip())
    except ValueError:
        return None
    return datetime.fromtimestamp(millis / 1000)
