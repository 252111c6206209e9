"""聚类阶段内部使用的结构体。"""

from __future__ import annotations

from dataclasses import dataclass

from slidesplit.core.datamodels import Fingerprint, Frame


@dataclass(frozen=True, slots=True)
class FingerprintedFrame:
    """帧描述加上指纹，便于后续聚类直接消费。"""

    frame: Frame
    fingerprint: Fingerprint

    @property
    def index(self) -> int:
        return self.frame.index

    @property
    def timestamp(self) -> float:
        return self.frame.timestamp
