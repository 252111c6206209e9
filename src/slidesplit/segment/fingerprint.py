"""感知哈希：灰度缩放 -> DCT -> 低频块与均值比较。"""

from __future__ import annotations

import cv2
import numpy as np
from numpy.typing import NDArray

from slidesplit.core.datamodels import Fingerprint, Frame
from slidesplit.core.errors import DecodeError

HASH_SIZE = 8


def compute_fingerprint(image: NDArray[np.uint8], hash_size: int = HASH_SIZE) -> Fingerprint:
    """对已解码像素计算 hash_size x hash_size 位的 DCT 指纹。

    结果只取决于像素值，与图片文件格式无关；同样的输入总得到同样的位。
    """

    if image.size == 0:
        raise ValueError("图像为空，无法计算指纹")
    gray = _to_gray(image)
    side = hash_size * 2
    resized = cv2.resize(gray, (side, side), interpolation=cv2.INTER_AREA)
    coeffs = cv2.dct(np.float32(resized))
    low = coeffs[:hash_size, :hash_size]
    return Fingerprint.from_bits((low > low.mean()).flatten().tolist())


def fingerprint_frame(frame: Frame) -> Fingerprint:
    """读取单帧文件并计算指纹，读不到像素时抛出 DecodeError。"""

    image = cv2.imread(str(frame.source_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise DecodeError(frame.index, frame.source_path, "无法读取图像")
    try:
        return compute_fingerprint(image)
    except (cv2.error, ValueError) as exc:
        raise DecodeError(frame.index, frame.source_path, str(exc)) from exc


def _to_gray(image: NDArray[np.uint8]) -> NDArray[np.uint8]:
    if image.ndim == 2:
        return image
    channels = image.shape[2]
    if channels == 1:
        return image[..., 0]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
