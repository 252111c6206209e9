"""幻灯片切分模块，聚合指纹计算、聚类、合并与代表帧选择。"""

from .builder import AnchorClusterer, ClusteringStrategy, cluster_frames, create_strategy, join_micro_splits
from .fingerprint import compute_fingerprint, fingerprint_frame
from .merger import merge_short_clusters
from .pipeline import create_worker_pool, fingerprint_frames
from .selector import build_slides, select_representative
from .slides import SegmentResult, segment_frames
from .types import FingerprintedFrame

__all__ = [
    "segment_frames",
    "SegmentResult",
    "FingerprintedFrame",
    "compute_fingerprint",
    "fingerprint_frame",
    "fingerprint_frames",
    "create_worker_pool",
    "ClusteringStrategy",
    "AnchorClusterer",
    "cluster_frames",
    "create_strategy",
    "join_micro_splits",
    "merge_short_clusters",
    "select_representative",
    "build_slides",
]
