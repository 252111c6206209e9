"""封装从帧描述到幻灯片列表的流程。"""

from __future__ import annotations

import threading
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from slidesplit.core.config import SegmentConfig
from slidesplit.core.datamodels import Frame, Slide, check_partition, validate_frames
from slidesplit.core.errors import CancellationSignal

from .builder import ClusteringStrategy, create_strategy, join_micro_splits
from .fingerprint import fingerprint_frame
from .merger import merge_short_clusters
from .pipeline import FingerprintFn, fingerprint_frames
from .selector import build_slides


@dataclass(slots=True)
class SegmentResult:
    """单次运行的切分结果，便于后续统计。"""

    slides: List[Slide] = field(default_factory=list)
    frame_count: int = 0
    raw_cluster_count: int = 0
    strategy_name: str = "anchor"


def segment_frames(
    frames: Sequence[Frame],
    config: SegmentConfig,
    *,
    executor: Executor,
    strategy: ClusteringStrategy | None = None,
    fingerprint_fn: FingerprintFn = fingerprint_frame,
    cancel_event: Optional[threading.Event] = None,
) -> SegmentResult:
    """主入口：校验 -> 并行指纹 -> 初始聚类 -> 短聚类合并 -> 选代表帧。"""

    validate_frames(frames)
    strategy = strategy or create_strategy(config)
    if not frames:
        return SegmentResult(strategy_name=strategy.strategy_name)

    samples = fingerprint_frames(
        frames,
        executor,
        fingerprint_fn=fingerprint_fn,
        cancel_event=cancel_event,
    )

    raw_clusters = strategy.build(samples)
    check_partition(raw_clusters, len(samples))

    clusters = merge_short_clusters(
        raw_clusters,
        config.min_stable_seconds,
        policy=config.merge_policy,
        samples=samples,
    )
    if config.join_micro_splits:
        clusters = join_micro_splits(clusters, samples, config.distance_threshold)
    check_partition(clusters, len(samples))

    if cancel_event is not None and cancel_event.is_set():
        raise CancellationSignal("切分已被调用方取消")

    return SegmentResult(
        slides=build_slides(clusters),
        frame_count=len(samples),
        raw_cluster_count=len(raw_clusters),
        strategy_name=strategy.strategy_name,
    )
