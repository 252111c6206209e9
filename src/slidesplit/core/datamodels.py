"""核心数据结构：帧、指纹、聚类与幻灯片，全部不可变。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .errors import InvariantViolation


@dataclass(frozen=True, slots=True)
class Frame:
    """外部抽帧得到的单帧描述，像素本身只通过 source_path 访问。"""

    index: int
    timestamp: float
    source_path: Path


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """定长感知哈希，按位存成整数，比较时取汉明距离。"""

    bits: int
    width: int = 64

    @classmethod
    def from_bits(cls, bits: Iterable[bool]) -> "Fingerprint":
        """按高位在前的顺序打包布尔序列。"""

        value = 0
        width = 0
        for bit in bits:
            value = (value << 1) | (1 if bit else 0)
            width += 1
        return cls(bits=value, width=width)

    def distance(self, other: "Fingerprint") -> int:
        if self.width != other.width:
            raise ValueError(f"指纹位宽不一致: {self.width} != {other.width}")
        return (self.bits ^ other.bits).bit_count()

    def to_hex(self) -> str:
        digits = max((self.width + 3) // 4, 1)
        return f"{self.bits:0{digits}x}"


@dataclass(frozen=True, slots=True)
class Cluster:
    """连续帧区间（闭区间），代表一张稳定的幻灯片。"""

    start_index: int
    end_index: int
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def frame_count(self) -> int:
        return self.end_index - self.start_index + 1

    def indices(self) -> range:
        return range(self.start_index, self.end_index + 1)

    def merged_with(self, other: "Cluster") -> "Cluster":
        """与相邻聚类合并，返回覆盖二者的新区间。"""

        first, second = (self, other) if self.start_index <= other.start_index else (other, self)
        if first.end_index + 1 != second.start_index:
            raise InvariantViolation(
                f"聚类不相邻，无法合并: [{first.start_index},{first.end_index}] + "
                f"[{second.start_index},{second.end_index}]"
            )
        return Cluster(
            start_index=first.start_index,
            end_index=second.end_index,
            start_time=first.start_time,
            end_time=second.end_time,
        )


@dataclass(frozen=True, slots=True)
class Slide:
    """最终聚类加上代表帧索引，交给编码阶段写出图片。"""

    slide_id: int
    cluster: Cluster
    representative_index: int


def validate_frames(frames: Sequence[Frame]) -> None:
    """检查索引从 0 开始连续、时间戳非负且单调不减。"""

    previous_ts = 0.0
    for position, frame in enumerate(frames):
        if frame.index != position:
            raise InvariantViolation(f"帧索引不连续: 位置 {position} 上的索引为 {frame.index}")
        if frame.timestamp < 0:
            raise InvariantViolation(f"第 {frame.index} 帧时间戳为负: {frame.timestamp}")
        if frame.timestamp < previous_ts:
            raise InvariantViolation(
                f"第 {frame.index} 帧时间戳倒退: {frame.timestamp} < {previous_ts}"
            )
        previous_ts = frame.timestamp


def check_partition(clusters: Sequence[Cluster], frame_count: int) -> None:
    """校验聚类有序、首尾相接且恰好覆盖 [0, frame_count - 1]。"""

    if frame_count == 0:
        if clusters:
            raise InvariantViolation("空帧序列不应产生聚类")
        return
    if not clusters:
        raise InvariantViolation(f"{frame_count} 帧未产生任何聚类")

    expected_start = 0
    for cluster in clusters:
        if cluster.start_index != expected_start:
            raise InvariantViolation(
                f"聚类起点应为 {expected_start}，实际为 {cluster.start_index}"
            )
        if cluster.end_index < cluster.start_index:
            raise InvariantViolation(
                f"空聚类: [{cluster.start_index},{cluster.end_index}]"
            )
        expected_start = cluster.end_index + 1
    if expected_start != frame_count:
        raise InvariantViolation(f"聚类覆盖到 {expected_start - 1}，应覆盖到 {frame_count - 1}")
