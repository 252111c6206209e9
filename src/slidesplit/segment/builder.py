"""初始聚类：锚点策略的单次前向扫描，以及合并后的微切分修复。"""

from __future__ import annotations

from typing import List, Protocol, Sequence

from slidesplit.core.config import SegmentConfig
from slidesplit.core.datamodels import Cluster

from .types import FingerprintedFrame


class ClusteringStrategy(Protocol):
    """聚类策略接口：输入有序指纹序列，输出有序且完整覆盖的划分。"""

    strategy_name: str

    def build(self, samples: Sequence[FingerprintedFrame]) -> List[Cluster]:
        ...


class AnchorClusterer:
    """以聚类首帧指纹为锚点，距离不超过阈值的后续帧并入当前聚类。

    锚点在聚类内部不更新，聚类内每一帧都与首帧比较，而不是与前一帧比较。
    """

    strategy_name = "anchor"

    def __init__(self, distance_threshold: int) -> None:
        if distance_threshold < 0:
            raise ValueError("distance_threshold must be non-negative")
        self.distance_threshold = distance_threshold

    def build(self, samples: Sequence[FingerprintedFrame]) -> List[Cluster]:
        if not samples:
            return []

        clusters: List[Cluster] = []
        start = 0
        anchor = samples[0].fingerprint
        for idx in range(1, len(samples)):
            # 距离恰好等于阈值时仍算同一聚类
            if samples[idx].fingerprint.distance(anchor) <= self.distance_threshold:
                continue
            clusters.append(_span(samples, start, idx - 1))
            start = idx
            anchor = samples[idx].fingerprint
        clusters.append(_span(samples, start, len(samples) - 1))
        return clusters


def cluster_frames(samples: Sequence[FingerprintedFrame], distance_threshold: int) -> List[Cluster]:
    """锚点策略的快捷入口。"""

    return AnchorClusterer(distance_threshold).build(samples)


def create_strategy(config: SegmentConfig) -> ClusteringStrategy:
    """根据配置创建聚类策略，目前只有锚点策略。"""

    name = config.strategy.lower()
    if name == "anchor":
        return AnchorClusterer(config.distance_threshold)
    raise ValueError(f"未知聚类策略: {config.strategy}")


def join_micro_splits(
    clusters: Sequence[Cluster],
    samples: Sequence[FingerprintedFrame],
    distance_threshold: int,
) -> List[Cluster]:
    """相邻聚类的交界帧几乎相同（不超过阈值一半）时视为误切，合并回去。"""

    if not clusters:
        return []
    limit = distance_threshold // 2
    joined: List[Cluster] = [clusters[0]]
    for cluster in clusters[1:]:
        last = joined[-1]
        boundary = samples[last.end_index].fingerprint.distance(samples[cluster.start_index].fingerprint)
        if boundary <= limit:
            joined[-1] = last.merged_with(cluster)
        else:
            joined.append(cluster)
    return joined


def _span(samples: Sequence[FingerprintedFrame], start: int, end: int) -> Cluster:
    return Cluster(
        start_index=start,
        end_index=end,
        start_time=samples[start].timestamp,
        end_time=samples[end].timestamp,
    )
