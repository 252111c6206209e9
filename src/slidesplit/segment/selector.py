"""代表帧选择：取聚类时间上居中的帧。"""

from __future__ import annotations

from typing import List, Sequence

from slidesplit.core.datamodels import Cluster, Slide


def select_representative(cluster: Cluster) -> int:
    # 偶数帧时取靠前的那一帧
    return cluster.start_index + (cluster.end_index - cluster.start_index) // 2


def build_slides(clusters: Sequence[Cluster]) -> List[Slide]:
    return [
        Slide(slide_id=slide_id, cluster=cluster, representative_index=select_representative(cluster))
        for slide_id, cluster in enumerate(clusters)
    ]
