"""幻灯片写出测试。"""

from pathlib import Path

import cv2
import numpy as np
import pytest

from slidesplit.core import Cluster, Frame, Slide
from slidesplit.core.config import OutputConfig
from slidesplit.export.writer import ImageFormat, SlideWriteError, SlideWriter, keep_raw_frames


def _write_frames(directory: Path, count: int):
    frames = []
    for i in range(count):
        image = np.full((16, 24, 3), i * 40, dtype=np.uint8)
        path = directory / f"frame_{i + 1:06d}.png"
        cv2.imwrite(str(path), image)
        frames.append(Frame(index=i, timestamp=float(i), source_path=path))
    return frames


def _slide(slide_id: int, start: int, end: int, rep: int) -> Slide:
    cluster = Cluster(start_index=start, end_index=end, start_time=float(start), end_time=float(end))
    return Slide(slide_id=slide_id, cluster=cluster, representative_index=rep)


def test_image_format_extensions_and_losslessness() -> None:
    assert ImageFormat("jpeg").extension == "jpg"
    assert ImageFormat("tiff").extension == "tiff"
    assert ImageFormat.PNG.is_lossless()
    assert not ImageFormat.JPG.is_lossless()
    assert not ImageFormat.WEBP.is_lossless()
    assert ImageFormat.WEBP.is_lossless(webp_lossless=True)


def test_write_png_slides_preserves_pixels(tmp_path: Path) -> None:
    frames = _write_frames(tmp_path, 4)
    out_dir = tmp_path / "out"
    slides = [_slide(0, 0, 1, 0), _slide(1, 2, 3, 2)]

    paths = SlideWriter(OutputConfig()).write(slides, frames, out_dir)

    assert [p.name for p in paths] == ["slide_00.png", "slide_01.png"]
    written = cv2.imread(str(paths[1]))
    assert np.array_equal(written, cv2.imread(str(frames[2].source_path)))


def test_write_jpeg_uses_jpg_extension(tmp_path: Path) -> None:
    frames = _write_frames(tmp_path, 1)

    paths = SlideWriter(OutputConfig(image_format="jpeg")).write([_slide(0, 0, 0, 0)], frames, tmp_path / "out")

    assert paths[0].name == "slide_00.jpg"
    assert cv2.imread(str(paths[0])) is not None


def test_webp_params_follow_lossless_flag() -> None:
    lossy = SlideWriter(OutputConfig(image_format="webp")).encode_params()
    lossless = SlideWriter(OutputConfig(image_format="webp", webp_lossless=True)).encode_params()

    assert lossy == [cv2.IMWRITE_WEBP_QUALITY, 95]
    assert lossless == [cv2.IMWRITE_WEBP_QUALITY, 101]


def test_unreadable_representative_raises(tmp_path: Path) -> None:
    broken = tmp_path / "frame_000001.png"
    broken.write_bytes(b"garbage")
    frames = [Frame(index=0, timestamp=0.0, source_path=broken)]

    with pytest.raises(SlideWriteError):
        SlideWriter(OutputConfig()).write([_slide(0, 0, 0, 0)], frames, tmp_path / "out")


def test_keep_raw_frames_copies_files(tmp_path: Path) -> None:
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    _write_frames(frames_dir, 3)

    keep = keep_raw_frames(frames_dir, tmp_path / "out")

    assert keep == tmp_path / "out" / "frames_raw"
    assert sorted(p.name for p in keep.iterdir()) == [
        "frame_000001.png",
        "frame_000002.png",
        "frame_000003.png",
    ]


def test_failed_slide_leaves_no_partial_output(tmp_path: Path) -> None:
    frames = _write_frames(tmp_path, 4)
    frames[2].source_path.write_bytes(b"garbage")
    out_dir = tmp_path / "out"
    slides = [_slide(0, 0, 1, 0), _slide(1, 2, 3, 2)]

    with pytest.raises(SlideWriteError):
        SlideWriter(OutputConfig()).write(slides, frames, out_dir)

    assert list(out_dir.iterdir()) == []
