"""异常分类：解码失败、上游不变量破坏与取消信号。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SlidesplitError(RuntimeError):
    """项目内可预期错误的基类，CLI 统一捕获后以退出码 1 结束。"""


class DecodeError(SlidesplitError):
    """单帧像素无法读取或计算指纹，整次运行随之失败。"""

    def __init__(self, index: int, source_path: str | Path | None, reason: Optional[str] = None) -> None:
        self.index = index
        self.source_path = Path(source_path) if source_path is not None else None
        self.reason = reason
        message = f"第 {index} 帧解码失败: {self.source_path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvariantViolation(SlidesplitError):
    """帧序列或聚类划分不满足前置条件，说明上游抽帧步骤存在缺陷。"""


class CancellationSignal(Exception):
    """调用方请求提前终止；不是失败，因此不继承 SlidesplitError。"""
