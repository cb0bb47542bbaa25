"""镜像拉取策略"""

from typing import Callable, Optional

from loguru import logger

from ...constants import (
    AUTO_PULL_MAPPING,
    DEFAULT_PULL_POLICY,
    ERROR_MESSAGES,
    PULL_POLICIES,
    PULL_POLICY_ALWAYS,
    PULL_POLICY_IF_NOT_PRESENT,
)
from .base import ImageConfigError
from .target import BuildConfig


def resolve_pull_policy(build_config: Optional[BuildConfig], global_default: Optional[str]) -> Optional[str]:
    """
    计算镜像的有效拉取策略

    镜像自身配置的策略优先于全局默认值。这里不校验策略是否合法，
    由构建服务负责。

    Args:
        build_config: 镜像构建配置，可为None
        global_default: 全局默认策略

    Returns:
        Optional[str]: 有效的拉取策略
    """
    if build_config is not None and build_config.pull_policy is not None:
        return build_config.pull_policy
    return global_default


class PullPolicyResolver:
    """绑定了全局默认策略的拉取策略解析器"""

    def __init__(self, global_default: Optional[str] = None) -> None:
        self.global_default = global_default

    def resolve(self, build_config: Optional[BuildConfig]) -> Optional[str]:
        return resolve_pull_policy(build_config, self.global_default)


class ImagePullManager:
    """将拉取策略转换为Docker引擎的拉取行为"""

    def __init__(self, policy: Optional[str] = None, auto_pull: Optional[str] = None) -> None:
        """
        初始化拉取管理器

        Args:
            policy: 拉取策略（Always、IfNotPresent、Never，不区分大小写）
            auto_pull: 旧的 autoPull 配置，仅在未指定策略时使用

        Raises:
            ImageConfigError: 策略无效时抛出
        """
        self.policy = self._normalize(policy, auto_pull)

    @staticmethod
    def _normalize(policy: Optional[str], auto_pull: Optional[str]) -> str:
        if policy is None:
            if auto_pull is None:
                return DEFAULT_PULL_POLICY
            mapped = AUTO_PULL_MAPPING.get(str(auto_pull).strip().lower())
            if mapped is None:
                raise ImageConfigError(f"无效的 auto_pull 配置: {auto_pull}")
            logger.debug(f"auto_pull={auto_pull} 映射为拉取策略 {mapped}")
            return mapped

        if not isinstance(policy, str):
            raise ImageConfigError(
                ERROR_MESSAGES["invalid_pull_policy"].format(policy, ", ".join(PULL_POLICIES))
            )
        for known in PULL_POLICIES:
            if known.lower() == policy.strip().lower():
                return known
        raise ImageConfigError(
            ERROR_MESSAGES["invalid_pull_policy"].format(policy, ", ".join(PULL_POLICIES))
        )

    def should_pull(self, is_present: Callable[[], bool]) -> bool:
        """
        判断是否需要拉取基础镜像

        仅在 IfNotPresent 策略下才查询本地镜像。

        Args:
            is_present: 查询基础镜像在本地是否已存在的函数

        Returns:
            bool: 是否需要拉取
        """
        if self.policy == PULL_POLICY_ALWAYS:
            return True
        if self.policy == PULL_POLICY_IF_NOT_PRESENT:
            return not is_present()
        return False
