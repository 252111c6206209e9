"""配置加载工具，集中管理仓内/环境参数。"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Literal, Mapping, MutableMapping, Optional, Sequence, Tuple

import yaml
from pydantic import BaseModel, Field

CONFIG_ENV_KEY = "SLIDESPLIT_CONFIG_PATH"

MAX_DISTANCE_THRESHOLD = 64


class SegmentConfig(BaseModel):
    """指纹聚类相关参数，默认值与命令行保持一致。"""

    fps: float = Field(2.0, gt=0, description="抽帧采样率，同时用于换算时间戳")
    distance_threshold: int = Field(10, ge=0, le=MAX_DISTANCE_THRESHOLD)
    min_stable_seconds: float = Field(1.0, ge=0)
    merge_policy: Literal["forward", "nearest"] = "forward"
    join_micro_splits: bool = True
    strategy: Literal["anchor"] = "anchor"
    max_workers: Optional[int] = Field(None, ge=1)


class OutputConfig(BaseModel):
    """输出图片格式，jpg/jpeg 为有损格式。"""

    image_format: Literal["png", "webp", "tiff", "bmp", "jpg", "jpeg"] = "png"
    webp_lossless: bool = False
    keep_temps: bool = False


class ExtractConfig(BaseModel):
    """抽帧阶段参数，ffmpeg_bin 为空时从 PATH 查找。"""

    ffmpeg_bin: Optional[str] = None


class PipelineConfig(BaseModel):
    """聚合各阶段配置。"""

    segment: SegmentConfig = Field(default_factory=SegmentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    raw: Dict[str, Any] = Field(default_factory=dict, description="原始配置字典，便于调试。")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        # 保留原始配置便于后续 diff/日志输出
        if not self.raw:
            self.raw = self.to_raw_dict()

    def to_raw_dict(self) -> Dict[str, Any]:
        """导出基础 dict，供日志输出使用。"""

        return {
            "segment": self.segment.model_dump(),
            "output": self.output.model_dump(),
            "extract": self.extract.model_dump(),
        }

    def with_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> "PipelineConfig":
        """按 section 覆盖字段并重新校验，None 值视为未指定。"""

        data = self.to_raw_dict()
        for section, values in overrides.items():
            for key, value in values.items():
                if value is not None:
                    data.setdefault(section, {})[key] = value
        return PipelineConfig.model_validate({**data, "raw": data})


def _default_config_path() -> Path:
    return Path(__file__).resolve().parents[3] / "configs" / "baseline.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"配置文件 {path} 内容需为字典")
        return data


ENV_OVERRIDE_MAP: Dict[str, Tuple[Sequence[str], Callable[[str], Any]]] = {
    "SLIDESPLIT_FPS": (("segment", "fps"), float),
    "SLIDESPLIT_DISTANCE_THRESHOLD": (("segment", "distance_threshold"), int),
    "SLIDESPLIT_MIN_STABLE_SECONDS": (("segment", "min_stable_seconds"), float),
    "SLIDESPLIT_FFMPEG_BIN": (("extract", "ffmpeg_bin"), str),
}


def _apply_env_overrides(data: MutableMapping[str, Any], env: Mapping[str, str]) -> None:
    for env_key, (path, caster) in ENV_OVERRIDE_MAP.items():
        if env_key in env:
            _set_nested_value(data, path, caster(env[env_key]))


def _set_nested_value(target: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    cursor: MutableMapping[str, Any] = target
    *parents, last = path
    for key in parents:
        if key not in cursor or not isinstance(cursor[key], MutableMapping):
            cursor[key] = {}
        cursor = cursor[key]  # type: ignore[assignment]
    cursor[last] = value


def load_config(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> PipelineConfig:
    """加载配置：优先显式路径，其次环境变量，最后回退默认 baseline。"""

    env_map = env if env is not None else os.environ
    config_path = path or env_map.get(CONFIG_ENV_KEY)
    target_path = Path(config_path).expanduser() if config_path else _default_config_path()
    data = _load_yaml(target_path)
    _apply_env_overrides(data, env_map)

    cfg = PipelineConfig.model_validate({**data, "raw": data})
    return cfg
