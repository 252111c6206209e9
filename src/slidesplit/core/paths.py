"""路径工具：集中处理默认输出目录。"""

from __future__ import annotations

import os
from pathlib import Path


OUTPUT_ROOT_ENV_KEY = "SLIDESPLIT_OUTPUT_ROOT"


def default_output_dir(video_path: str | Path) -> Path:
    """默认输出到 `<视频文件名>_slides`，设置环境变量时放到指定根目录下。"""

    stem = Path(video_path).stem or "output"
    name = f"{stem}_slides"
    env_value = os.getenv(OUTPUT_ROOT_ENV_KEY)
    if env_value:
        return Path(env_value).expanduser().resolve() / name
    return Path(name)
