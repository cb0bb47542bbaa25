"""常量配置模块"""

from typing import Any, Dict, List, Optional, Tuple, TypedDict

# 文件相关
class DefaultFiles(TypedDict):
    dockerfile: str
    config_file: str
    timestamp_file: str

DEFAULT_FILES: DefaultFiles = {
    "dockerfile": "Dockerfile",
    "config_file": "dockbuilder.json",
    "timestamp_file": "build.timestamp",
}

# 支持的配置文件名，按顺序查找
CONFIG_FILE_NAMES: Tuple[str, ...] = (
    DEFAULT_FILES["config_file"],
    "dockbuilder.yml",
    "dockbuilder.yaml",
)

# 未配置镜像时按顺序探测的Dockerfile位置（相对于项目目录），第一个存在的生效
DEFAULT_DOCKERFILE_PROBES: Tuple[str, ...] = (
    "Dockerfile",
    "src/main/docker/Dockerfile",
)

# 构建上下文的约定目录
DEFAULT_SOURCE_DIR: str = "src/main/docker"
DEFAULT_OUTPUT_DIR: str = "target/docker"

# 项目默认配置
class ProjectConfig(TypedDict):
    group: Optional[str]
    artifact: Optional[str]
    version: Optional[str]

class BuildSection(TypedDict):
    skip: bool
    skip_tag: bool
    name: Optional[str]
    pull_policy: Optional[str]
    auto_pull: Optional[str]
    args: Dict[str, str]
    output_dir: Optional[str]

class DefaultProjectConfig(TypedDict):
    project: ProjectConfig
    build: BuildSection
    images: List[Dict[str, Any]]

DEFAULT_PROJECT_CONFIG: DefaultProjectConfig = {
    "project": {
        "group": None,  # 将使用 DEFAULT_GROUP
        "artifact": None,  # 将使用目录名
        "version": None,  # 将使用 DEFAULT_VERSION
    },
    "build": {
        "skip": False,
        "skip_tag": False,
        "name": None,  # 仅用于自动探测到的镜像
        "pull_policy": None,
        "auto_pull": None,
        "args": {},
        "output_dir": None,  # 将使用 DEFAULT_OUTPUT_DIR
    },
    "images": [],
}

DEFAULT_GROUP: str = "library"
DEFAULT_VERSION: str = "latest"

# 镜像拉取策略
PULL_POLICY_ALWAYS: str = "Always"
PULL_POLICY_IF_NOT_PRESENT: str = "IfNotPresent"
PULL_POLICY_NEVER: str = "Never"
PULL_POLICIES: Tuple[str, ...] = (PULL_POLICY_ALWAYS, PULL_POLICY_IF_NOT_PRESENT, PULL_POLICY_NEVER)
DEFAULT_PULL_POLICY: str = PULL_POLICY_IF_NOT_PRESENT

# autoPull 旧配置到拉取策略的映射
AUTO_PULL_MAPPING: Dict[str, str] = {
    "on": PULL_POLICY_IF_NOT_PRESENT,
    "true": PULL_POLICY_IF_NOT_PRESENT,
    "once": PULL_POLICY_IF_NOT_PRESENT,
    "off": PULL_POLICY_NEVER,
    "false": PULL_POLICY_NEVER,
    "always": PULL_POLICY_ALWAYS,
}

# 构建后的容器清理模式
CLEANUP_MODES: Tuple[str, ...] = ("try", "remove", "none")

# 写入镜像的标签
TIMESTAMP_LABEL: str = "dockbuilder.build.timestamp"

# 错误消息
class ErrorMessages(TypedDict):
    docker_connection: str
    dockerfile_conflict: str
    dockerfile_missing: str
    invalid_cleanup: str
    invalid_tag: str
    invalid_pull_policy: str
    empty_image_name: str
    timestamp_write: str

ERROR_MESSAGES: ErrorMessages = {
    "docker_connection": "无法连接到Docker守护进程: {}",
    "dockerfile_conflict": "dockerfile 与 dockerfile_dir 不能同时配置",
    "dockerfile_missing": "未配置 dockerfile、dockerfile_dir 或 context_dir",
    "invalid_cleanup": "无效的 cleanup 模式 '{}'，可选值: {}",
    "invalid_tag": "无效的标签: {!r}",
    "invalid_pull_policy": "无效的镜像拉取策略 '{}'，可选值: {}",
    "empty_image_name": "镜像名称不能为空",
    "timestamp_write": "无法写入构建时间戳文件 {}: {}",
}
