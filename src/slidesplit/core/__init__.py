"""核心模块入口，聚合数据模型、异常与配置加载工具供各步骤复用。"""

from .datamodels import Cluster, Fingerprint, Frame, Slide, check_partition, validate_frames
from .errors import CancellationSignal, DecodeError, InvariantViolation, SlidesplitError
from .config import PipelineConfig, load_config
from .logging_utils import get_logger, setup_logging
from .paths import default_output_dir

__all__ = [
    "Cluster",
    "Fingerprint",
    "Frame",
    "Slide",
    "check_partition",
    "validate_frames",
    "CancellationSignal",
    "DecodeError",
    "InvariantViolation",
    "SlidesplitError",
    "PipelineConfig",
    "load_config",
    "get_logger",
    "setup_logging",
    "default_output_dir",
]
