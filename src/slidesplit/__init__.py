"""slidesplit：从屏幕录制或演示视频中按画面稳定区间提取幻灯片。"""

__version__ = "0.1.0"
