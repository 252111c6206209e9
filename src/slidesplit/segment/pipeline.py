"""指纹流水线：线程池并行计算，按帧索引写回预分配的槽位。"""

from __future__ import annotations

import os
import threading
from concurrent.futures import FIRST_EXCEPTION, Executor, Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from slidesplit.core.datamodels import Fingerprint, Frame
from slidesplit.core.errors import CancellationSignal, DecodeError

from .fingerprint import fingerprint_frame
from .types import FingerprintedFrame

FingerprintFn = Callable[[Frame], Fingerprint]


@contextmanager
def create_worker_pool(max_workers: Optional[int] = None) -> Iterator[ThreadPoolExecutor]:
    """创建调用方持有的线程池，任何退出路径都会关闭并丢弃排队任务。"""

    workers = max_workers or os.cpu_count() or 1
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="slidesplit-fp")
    try:
        yield executor
    except BaseException:
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    else:
        executor.shutdown(wait=True)


def fingerprint_frames(
    frames: Sequence[Frame],
    executor: Executor,
    *,
    fingerprint_fn: FingerprintFn = fingerprint_frame,
    cancel_event: Optional[threading.Event] = None,
    poll_interval: float = 0.05,
) -> List[FingerprintedFrame]:
    """并行计算所有帧的指纹，返回按 index 递增排列的结果。

    完成顺序不影响输出顺序；任一帧失败则丢弃全部结果并抛出 DecodeError，
    cancel_event 被置位时抛出 CancellationSignal。
    """

    if not frames:
        return []
    _raise_if_cancelled(cancel_event)

    slots: List[Optional[Fingerprint]] = [None] * len(frames)
    futures: Dict[Future[Fingerprint], int] = {}
    for position, frame in enumerate(frames):
        futures[executor.submit(fingerprint_fn, frame)] = position

    pending = set(futures)
    try:
        while pending:
            _raise_if_cancelled(cancel_event)
            done, pending = wait(pending, timeout=poll_interval, return_when=FIRST_EXCEPTION)
            for future in sorted(done, key=futures.__getitem__):
                position = futures[future]
                slots[position] = _collect(future, frames[position])
        _raise_if_cancelled(cancel_event)
    except BaseException:
        for future in pending:
            future.cancel()
        raise

    return [
        FingerprintedFrame(frame=frame, fingerprint=fingerprint)  # type: ignore[arg-type]
        for frame, fingerprint in zip(frames, slots)
    ]


def _collect(future: Future[Fingerprint], frame: Frame) -> Fingerprint:
    try:
        return future.result()
    except DecodeError:
        raise
    except Exception as exc:
        raise DecodeError(frame.index, frame.source_path, str(exc)) from exc


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancellationSignal("指纹计算已被调用方取消")
