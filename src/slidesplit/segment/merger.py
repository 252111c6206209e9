"""短聚类合并：把持续时间不足的过渡片段并入相邻的稳定聚类。"""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

from slidesplit.core.datamodels import Cluster

from .types import FingerprintedFrame

MergePolicy = Literal["forward", "nearest"]


def merge_short_clusters(
    clusters: Sequence[Cluster],
    min_stable_seconds: float,
    *,
    policy: MergePolicy = "forward",
    samples: Optional[Sequence[FingerprintedFrame]] = None,
) -> List[Cluster]:
    """返回新的聚类列表，除非只剩一个聚类，否则每个聚类时长都不小于阈值。

    - forward: 短聚类优先并入后一个，末尾的短聚类并入前一个；
    - nearest: 中间的短聚类并入交界指纹更接近的一侧（相等时取前一个），需要传入 samples。
    对自身输出再次执行不会产生变化。
    """

    if min_stable_seconds < 0:
        raise ValueError("min_stable_seconds must be non-negative")
    if len(clusters) <= 1:
        return list(clusters)
    if policy == "forward":
        return _merge_forward(clusters, min_stable_seconds)
    if policy == "nearest":
        if samples is None:
            raise ValueError("nearest 合并策略需要提供指纹序列")
        return _merge_nearest(clusters, min_stable_seconds, samples)
    raise ValueError(f"未知合并策略: {policy}")


def _merge_forward(clusters: Sequence[Cluster], min_stable_seconds: float) -> List[Cluster]:
    merged: List[Cluster] = []
    i = 0
    total = len(clusters)
    while i < total:
        current = clusters[i]
        while current.duration < min_stable_seconds and i + 1 < total:
            i += 1
            current = current.merged_with(clusters[i])
        merged.append(current)
        i += 1

    # 只有最后一段可能仍然过短，且此时它后面已没有聚类
    if len(merged) > 1 and merged[-1].duration < min_stable_seconds:
        tail = merged.pop()
        merged[-1] = merged[-1].merged_with(tail)
    return merged


def _merge_nearest(
    clusters: Sequence[Cluster],
    min_stable_seconds: float,
    samples: Sequence[FingerprintedFrame],
) -> List[Cluster]:
    result = list(clusters)
    i = 0
    while len(result) > 1 and i < len(result):
        current = result[i]
        if current.duration >= min_stable_seconds:
            i += 1
            continue
        if i == 0:
            target = 1
        elif i == len(result) - 1:
            target = i - 1
        else:
            d_prev = samples[current.start_index].fingerprint.distance(
                samples[result[i - 1].end_index].fingerprint
            )
            d_next = samples[current.end_index].fingerprint.distance(
                samples[result[i + 1].start_index].fingerprint
            )
            target = i - 1 if d_prev <= d_next else i + 1
        lo = min(i, target)
        result[lo : lo + 2] = [result[lo].merged_with(result[lo + 1])]
        i = lo
    return result
