"""镜像管理工具函数"""

import re
from typing import List, Tuple

FROM_PATTERN = re.compile(r"^\s*FROM\s+(?:--\S+\s+)*(\S+)(?:\s+AS\s+(\S+))?", re.IGNORECASE)


def parse_image_name(image_name: str) -> Tuple[str, str]:
    """
    解析镜像名称，分离仓库名和标签

    Args:
        image_name: 镜像名称，格式为 "仓库名:标签"，仓库名可包含带端口的注册表地址

    Returns:
        Tuple[str, str]: 仓库名和标签
    """
    name, _, digest = image_name.partition("@")
    if digest:
        return name, digest
    last_slash = image_name.rfind("/")
    last_colon = image_name.rfind(":")
    if last_colon > last_slash:
        return image_name[:last_colon], image_name[last_colon + 1:]
    return image_name, "latest"


def extract_base_images(dockerfile_content: str) -> List[str]:
    """
    从Dockerfile中提取基础镜像

    跳过 scratch、引用前面构建阶段的镜像以及包含构建参数变量的镜像。

    Args:
        dockerfile_content: Dockerfile内容

    Returns:
        List[str]: 去重后的基础镜像，保持出现顺序
    """
    stages = set()
    images: List[str] = []
    for line in dockerfile_content.splitlines():
        match = FROM_PATTERN.match(line)
        if not match:
            continue
        image, stage = match.group(1), match.group(2)
        if image.lower() != "scratch" and image not in stages and "$" not in image and image not in images:
            images.append(image)
        if stage:
            stages.add(stage)
    return images
