from __future__ import annotations

# 本模块负责抽帧（外部协作方）：
# 1) 定位 ffmpeg 可执行文件（显式配置或 PATH）；
# 2) 用 ffmpeg-python 按目标 FPS 抽出无损 PNG，文件名 frame_%06d.png；
# 3) 扫描抽帧目录，按文件名中的序号排序并生成连续索引的 Frame 列表。

import re
import shutil
from pathlib import Path
from typing import List, Optional

import ffmpeg

from slidesplit.core import Frame, get_logger
from slidesplit.core.errors import SlidesplitError

logger = get_logger(__name__)

FRAME_PATTERN = "frame_%06d.png"
IMAGE_SUFFIXES = {".png", ".webp", ".tif", ".tiff", ".bmp", ".jpg", ".jpeg"}
_INDEX_RE = re.compile(r"_(\d+)$")


class FFmpegNotFoundError(SlidesplitError):
    """找不到 ffmpeg 可执行文件。"""


class FrameExtractionError(SlidesplitError):
    """ffmpeg 抽帧失败，消息中附带 stderr 便于排查。"""


def ensure_ffmpeg(ffmpeg_bin: Optional[str] = None) -> str:
    """返回可用的 ffmpeg 路径：优先显式配置，其次 PATH。"""

    candidate = ffmpeg_bin or "ffmpeg"
    resolved = shutil.which(candidate)
    if resolved is None:
        raise FFmpegNotFoundError(f"未找到 ffmpeg: {candidate}，请安装或通过 SLIDESPLIT_FFMPEG_BIN 指定")
    logger.debug("Using ffmpeg binary: %s", resolved)
    return resolved


def build_extract_stream(video_path: Path, out_dir: Path, fps: float):
    """构建抽帧命令：fps 滤镜 + 可变帧率输出，避免重复帧。"""

    if fps <= 0:
        raise ValueError("fps must be positive")
    pattern = out_dir / FRAME_PATTERN
    stream = ffmpeg.input(str(video_path)).filter("fps", fps=fps)
    stream = ffmpeg.output(
        stream,
        str(pattern),
        vsync="vfr",
        compression_level=9,
    )
    stream = stream.global_args("-hide_banner", "-loglevel", "error")
    return ffmpeg.overwrite_output(stream)


def extract_frames(
    video_path: str | Path,
    out_dir: str | Path,
    fps: float,
    *,
    ffmpeg_bin: str,
) -> Path:
    """执行抽帧，返回帧目录。"""

    video = Path(video_path)
    target = Path(out_dir)
    if not video.exists():
        raise FileNotFoundError(f"输入视频不存在: {video}")
    target.mkdir(parents=True, exist_ok=True)

    logger.info("Extracting frames at %s fps to %s", fps, target)
    stream = build_extract_stream(video, target, fps)
    try:
        stream.run(cmd=ffmpeg_bin, quiet=True, capture_stdout=True, capture_stderr=True)
    except ffmpeg.Error as e:  # pragma: no cover - 依赖环境 ffmpeg
        error_msg = f"ffmpeg 抽帧失败: {video}"
        if e.stderr:
            error_msg += f"\nffmpeg stderr 输出:\n{e.stderr.decode('utf-8', errors='replace')}"
        raise FrameExtractionError(error_msg) from e
    logger.info("Frame extraction completed")
    return target


def load_frame_directory(directory: str | Path, fps: float) -> List[Frame]:
    """扫描抽帧目录，按文件名末尾序号排序，时间戳按 index / fps 换算。"""

    if fps <= 0:
        raise ValueError("fps must be positive")

    root = Path(directory)
    numbered = []
    for path in root.iterdir():
        if not path.is_file() or path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        match = _INDEX_RE.search(path.stem)
        if match is None:
            logger.debug("Skipping file without frame number: %s", path.name)
            continue
        numbered.append((int(match.group(1)), path))

    numbered.sort(key=lambda item: item[0])
    for (number, first), (next_number, second) in zip(numbered, numbered[1:]):
        if number == next_number:
            # 同一序号对应多个文件时顺序无法确定
            raise FrameExtractionError(f"帧序号 {number} 重复: {first.name} 与 {second.name}")
    frames = [
        Frame(index=index, timestamp=index / fps, source_path=path)
        for index, (_, path) in enumerate(numbered)
    ]
    logger.info("Found %d frame files in %s", len(frames), root)
    return frames
