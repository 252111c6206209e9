from .writer import ImageFormat, SlideWriteError, SlideWriter, keep_raw_frames

__all__ = ["ImageFormat", "SlideWriteError", "SlideWriter", "keep_raw_frames"]
