"""端到端最小流水测试，使用 stub 指纹函数代替真实图片读取。"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from slidesplit.core import CancellationSignal, Cluster, Fingerprint, Frame, InvariantViolation, check_partition
from slidesplit.core.config import SegmentConfig
from slidesplit.segment import segment_frames
from slidesplit.segment.merger import merge_short_clusters

FAR = (1 << 64) - 1


def make_frames(count: int, step: float = 1.0):
    return [Frame(index=i, timestamp=i * step, source_path=Path(f"frame_{i:06d}.png")) for i in range(count)]


def table_fn(table):
    def _fingerprint(frame: Frame) -> Fingerprint:
        return Fingerprint(bits=table[frame.index])

    return _fingerprint


def run(frames, hashes, **cfg):
    config = SegmentConfig(**cfg)
    with ThreadPoolExecutor(max_workers=4) as executor:
        return segment_frames(frames, config, executor=executor, fingerprint_fn=table_fn(hashes))


def spans(result):
    return [(s.cluster.start_index, s.cluster.end_index) for s in result.slides]


def test_no_frames_no_slides() -> None:
    result = run([], [])

    assert result.slides == []
    assert result.frame_count == 0


def test_single_frame_single_slide() -> None:
    result = run(make_frames(1), [0xBEEF])

    assert spans(result) == [(0, 0)]
    assert result.slides[0].representative_index == 0


def test_identical_frames_single_cluster() -> None:
    result = run(make_frames(10), [0x42] * 10, distance_threshold=4)

    assert spans(result) == [(0, 9)]
    assert result.raw_cluster_count == 1


def test_alternating_frames_without_minimum() -> None:
    result = run(make_frames(10), [0, FAR] * 5, distance_threshold=4, min_stable_seconds=0.0)

    assert spans(result) == [(i, i) for i in range(10)]


def test_alternating_frames_with_high_minimum() -> None:
    result = run(make_frames(10), [0, FAR] * 5, distance_threshold=4, min_stable_seconds=60.0)

    assert spans(result) == [(0, 9)]
    assert result.raw_cluster_count == 10
    assert result.slides[0].representative_index == 4


def test_short_transition_merges_into_next_slide() -> None:
    # 三段原始聚类，时长 5s / 0.2s / 5s
    timestamps = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 5.5, 5.7, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0]
    frames = [Frame(index=i, timestamp=ts, source_path=Path(f"f{i}.png")) for i, ts in enumerate(timestamps)]
    hashes = [0] * 6 + [0x00FF_00FF] * 2 + [FAR] * 6

    result = run(frames, hashes, distance_threshold=4, min_stable_seconds=1.0)

    assert result.raw_cluster_count == 3
    assert spans(result) == [(0, 5), (6, 13)]


def test_dense_index_precondition() -> None:
    frames = make_frames(3)
    frames[1] = Frame(index=5, timestamp=1.0, source_path=Path("x.png"))

    with pytest.raises(InvariantViolation):
        run(frames, [0, 0, 0])


def test_cancelled_before_start() -> None:
    cancel = threading.Event()
    cancel.set()

    with ThreadPoolExecutor(max_workers=2) as executor:
        with pytest.raises(CancellationSignal):
            segment_frames(
                make_frames(4),
                SegmentConfig(),
                executor=executor,
                fingerprint_fn=table_fn([0] * 4),
                cancel_event=cancel,
            )


def test_custom_strategy_is_used() -> None:
    class EverySecondFrame:
        strategy_name = "pairs"

        def build(self, samples):
            clusters = []
            for start in range(0, len(samples), 2):
                end = min(start + 1, len(samples) - 1)
                clusters.append(
                    Cluster(
                        start_index=start,
                        end_index=end,
                        start_time=samples[start].timestamp,
                        end_time=samples[end].timestamp,
                    )
                )
            return clusters

    config = SegmentConfig(min_stable_seconds=0.0, join_micro_splits=False)
    with ThreadPoolExecutor(max_workers=2) as executor:
        result = segment_frames(
            make_frames(5),
            config,
            executor=executor,
            strategy=EverySecondFrame(),
            fingerprint_fn=table_fn([0] * 5),
        )

    assert result.strategy_name == "pairs"
    assert spans(result) == [(0, 1), (2, 3), (4, 4)]


@pytest.mark.parametrize("seed", range(25))
def test_random_sequences_keep_invariants(seed) -> None:
    rng = random.Random(seed)
    count = rng.randint(1, 40)
    palette = [rng.getrandbits(64) for _ in range(4)]
    hashes = []
    while len(hashes) < count:
        hashes.extend([rng.choice(palette) ^ rng.getrandbits(3)] * rng.randint(1, 6))
    hashes = hashes[:count]
    timestamps = []
    current = 0.0
    for _ in range(count):
        timestamps.append(current)
        current += rng.choice([0.0, 0.25, 0.5, 1.0])
    frames = [Frame(index=i, timestamp=ts, source_path=Path(f"f{i}.png")) for i, ts in enumerate(timestamps)]
    minimum = rng.choice([0.0, 0.5, 1.0, 3.0])
    policy = rng.choice(["forward", "nearest"])

    result = run(
        frames,
        hashes,
        distance_threshold=rng.randint(0, 12),
        min_stable_seconds=minimum,
        merge_policy=policy,
    )
    clusters = [slide.cluster for slide in result.slides]

    check_partition(clusters, count)
    covered = [idx for cluster in clusters for idx in cluster.indices()]
    assert covered == list(range(count))
    if len(clusters) > 1:
        assert all(cluster.duration >= minimum for cluster in clusters)
    assert merge_short_clusters(clusters, minimum) == clusters
    for slide in result.slides:
        assert slide.cluster.start_index <= slide.representative_index <= slide.cluster.end_index
