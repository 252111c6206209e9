"""
Run orchestration: temp frame directory, worker pool ownership, slide writing.
"""
from __future__ import annotations

import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from slidesplit.core import PipelineConfig, get_logger
from slidesplit.export import ImageFormat, SlideWriter, keep_raw_frames
from slidesplit.extract import ensure_ffmpeg, extract_frames, load_frame_directory
from slidesplit.segment import create_worker_pool, segment_frames

logger = get_logger(__name__)


@dataclass(slots=True)
class RunSummary:
    out_dir: Path
    frame_count: int = 0
    raw_cluster_count: int = 0
    slide_paths: List[Path] = field(default_factory=list)

    @property
    def slide_count(self) -> int:
        return len(self.slide_paths)


def extract_slides(
    video_path: Path,
    out_dir: Path,
    config: PipelineConfig,
    *,
    cancel_event: Optional[threading.Event] = None,
) -> RunSummary:
    """Extract frames with ffmpeg into a temp dir, then segment and write slides."""
    if not video_path.exists():
        raise FileNotFoundError(f"输入视频不存在: {video_path}")
    ffmpeg_bin = ensure_ffmpeg(config.extract.ffmpeg_bin)

    logger.info("Creating output directory: %s", out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    # The temp directory is removed on every exit path, including cancellation.
    with tempfile.TemporaryDirectory(prefix="slidesplit_frames_") as tmpdir:
        frames_dir = Path(tmpdir)
        extract_frames(video_path, frames_dir, config.segment.fps, ffmpeg_bin=ffmpeg_bin)
        summary = split_frame_directory(frames_dir, out_dir, config, cancel_event=cancel_event)
        if config.output.keep_temps:
            keep_raw_frames(frames_dir, out_dir)
    return summary


def split_frame_directory(
    frames_dir: Path,
    out_dir: Path,
    config: PipelineConfig,
    *,
    cancel_event: Optional[threading.Event] = None,
) -> RunSummary:
    """Segment an already extracted frame directory and write one image per slide."""
    _warn_if_lossy(config)
    seg_cfg = config.segment
    frames = load_frame_directory(frames_dir, seg_cfg.fps)
    if not frames:
        logger.warning("No frames found in %s, nothing to write.", frames_dir)
        return RunSummary(out_dir=out_dir)

    logger.info(
        "Segmenting %d frames (threshold=%d, min_stable_seconds=%.2f, policy=%s)",
        len(frames),
        seg_cfg.distance_threshold,
        seg_cfg.min_stable_seconds,
        seg_cfg.merge_policy,
    )
    with create_worker_pool(seg_cfg.max_workers) as executor:
        result = segment_frames(frames, seg_cfg, executor=executor, cancel_event=cancel_event)
    logger.info(
        "Initial clustering produced %d clusters, %d after merging",
        result.raw_cluster_count,
        len(result.slides),
    )

    writer = SlideWriter(config.output)
    paths = writer.write(result.slides, frames, out_dir)
    logger.info("Wrote %d slide(s) to %s", len(paths), out_dir)
    return RunSummary(
        out_dir=out_dir,
        frame_count=result.frame_count,
        raw_cluster_count=result.raw_cluster_count,
        slide_paths=paths,
    )


def _warn_if_lossy(config: PipelineConfig) -> None:
    fmt = ImageFormat(config.output.image_format)
    if not fmt.is_lossless(config.output.webp_lossless):
        logger.warning("%s output is not lossless; use png/tiff/bmp or --webp-lossless for lossless slides.", fmt.value)
