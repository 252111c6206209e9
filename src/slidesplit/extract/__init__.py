"""抽帧协作方：ffmpeg 定位、抽帧与帧目录扫描。"""

from .frames import (
    FFmpegNotFoundError,
    FrameExtractionError,
    build_extract_stream,
    ensure_ffmpeg,
    extract_frames,
    load_frame_directory,
)

__all__ = [
    "FFmpegNotFoundError",
    "FrameExtractionError",
    "build_extract_stream",
    "ensure_ffmpeg",
    "extract_frames",
    "load_frame_directory",
]
