from __future__ import annotations

# 本模块负责写出幻灯片（外部协作方）：
# 1) 根据代表帧索引找到抽帧文件并用 OpenCV 读取；
# 2) 按配置的格式编码（PNG/TIFF/BMP 无损，WebP 可选无损，JPEG 有损）；
# 3) 先写入 out_dir 下的临时目录，全部成功后再按 slide_{NN}.{ext} 命名移动到位；可选保留原始抽帧。

import os
import shutil
import tempfile
from enum import Enum
from pathlib import Path
from typing import List, Sequence

import cv2

from slidesplit.core import Frame, Slide, get_logger
from slidesplit.core.config import OutputConfig
from slidesplit.core.errors import SlidesplitError

logger = get_logger(__name__)

RAW_FRAMES_DIR = "frames_raw"


class SlideWriteError(SlidesplitError):
    """代表帧读取或编码写出失败。"""


class ImageFormat(str, Enum):
    PNG = "png"
    WEBP = "webp"
    TIFF = "tiff"
    BMP = "bmp"
    JPG = "jpg"
    JPEG = "jpeg"

    @property
    def extension(self) -> str:
        return "jpg" if self in (ImageFormat.JPG, ImageFormat.JPEG) else self.value

    def is_lossless(self, webp_lossless: bool = False) -> bool:
        if self is ImageFormat.WEBP:
            return webp_lossless
        return self in (ImageFormat.PNG, ImageFormat.TIFF, ImageFormat.BMP)


class SlideWriter:
    """写出器：把每张幻灯片的代表帧编码到输出目录。"""

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self.image_format = ImageFormat(config.image_format)

    def encode_params(self) -> List[int]:
        fmt = self.image_format
        if fmt is ImageFormat.PNG:
            return [cv2.IMWRITE_PNG_COMPRESSION, 9]
        if fmt is ImageFormat.WEBP:
            # 质量大于 100 时 libwebp 走无损模式
            return [cv2.IMWRITE_WEBP_QUALITY, 101 if self.config.webp_lossless else 95]
        if fmt in (ImageFormat.JPG, ImageFormat.JPEG):
            return [cv2.IMWRITE_JPEG_QUALITY, 95]
        return []

    def write(self, slides: Sequence[Slide], frames: Sequence[Frame], out_dir: Path) -> List[Path]:
        """写出全部幻灯片，返回输出路径列表（与 slides 顺序一致）。

        先编码到 out_dir 下的临时目录，全部成功后再移动到位；任一张失败时
        out_dir 中不会留下本次的 slide 文件。
        """

        out_dir.mkdir(parents=True, exist_ok=True)
        ext = self.image_format.extension
        params = self.encode_params()
        written: List[Path] = []
        with tempfile.TemporaryDirectory(prefix=".slides_", dir=out_dir) as tmp:
            staging = Path(tmp)
            staged: List[Path] = []
            for slide in slides:
                source = frames[slide.representative_index].source_path
                name = f"slide_{slide.slide_id:02d}.{ext}"
                image = cv2.imread(str(source), cv2.IMREAD_UNCHANGED)
                if image is None:
                    raise SlideWriteError(f"无法读取代表帧 {slide.representative_index}: {source}")
                logger.debug(
                    "Writing slide %d from frame %d to %s",
                    slide.slide_id,
                    slide.representative_index,
                    name,
                )
                if not cv2.imwrite(str(staging / name), image, params):
                    raise SlideWriteError(f"写出幻灯片失败: {out_dir / name}")
                staged.append(staging / name)
            for path in staged:
                target = out_dir / path.name
                os.replace(path, target)
                written.append(target)
        return written


def keep_raw_frames(frames_dir: Path, out_dir: Path) -> Path:
    """把临时抽帧复制到 out_dir/frames_raw，返回目标目录。"""

    keep_path = out_dir / RAW_FRAMES_DIR
    keep_path.mkdir(parents=True, exist_ok=True)
    copied = 0
    for source in sorted(frames_dir.iterdir()):
        if source.is_file() and source.suffix:
            shutil.copy2(source, keep_path / source.name)
            copied += 1
    logger.info("Kept %d raw frames in %s", copied, keep_path)
    return keep_path
