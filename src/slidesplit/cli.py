"""slidesplit Typer CLI：从视频或已抽好的帧目录中提取幻灯片。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from slidesplit.core import CancellationSignal, PipelineConfig, SlidesplitError, default_output_dir, load_config, setup_logging
from slidesplit.runner import RunSummary, extract_slides, split_frame_directory

app = typer.Typer(help="slidesplit：按画面稳定区间提取视频中的幻灯片")

CANCELLED_EXIT_CODE = 130


@app.callback()
def main() -> None:
    """slidesplit 顶层 CLI，占位以展示子命令列表。"""

    return None


def _resolve_config(config_path: Optional[Path]) -> PipelineConfig:
    try:
        return load_config(config_path) if config_path else load_config()
    except (ValidationError, ValueError) as exc:
        typer.echo(f"配置无效：{exc}", err=True)
        raise typer.Exit(code=1) from exc


def _apply_overrides(
    cfg: PipelineConfig,
    *,
    fps: Optional[float],
    threshold: Optional[int],
    min_stable_seconds: Optional[float],
    merge_policy: Optional[str],
    workers: Optional[int],
    image_format: Optional[str],
    webp_lossless: Optional[bool],
    keep_temps: Optional[bool],
) -> PipelineConfig:
    try:
        return cfg.with_overrides(
            {
                "segment": {
                    "fps": fps,
                    "distance_threshold": threshold,
                    "min_stable_seconds": min_stable_seconds,
                    "merge_policy": merge_policy,
                    "max_workers": workers,
                },
                "output": {
                    "image_format": image_format.lower() if image_format else None,
                    "webp_lossless": webp_lossless,
                    "keep_temps": keep_temps,
                },
            }
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _report(summary: RunSummary) -> None:
    count = summary.slide_count
    typer.echo(f"完成：{summary.frame_count} 帧 -> {count} 张幻灯片，输出到 {summary.out_dir}")


@app.command("extract")
def extract_cmd(
    video: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="输入视频路径"),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", "-o", help="输出目录，默认 <视频名>_slides"),
    fps: Optional[float] = typer.Option(None, "--fps", help="去重前的抽帧采样率"),
    threshold: Optional[int] = typer.Option(None, "--threshold", help="区分幻灯片的汉明距离阈值 (0-64)"),
    min_stable_seconds: Optional[float] = typer.Option(None, "--min-stable-seconds", help="幻灯片最短稳定时长（秒）"),
    merge_policy: Optional[str] = typer.Option(None, "--merge-policy", help="短聚类合并策略：forward/nearest"),
    workers: Optional[int] = typer.Option(None, "--workers", help="指纹计算线程数，默认 CPU 核数"),
    image_format: Optional[str] = typer.Option(None, "--format", help="输出格式：png/webp/tiff/bmp/jpg/jpeg"),
    webp_lossless: Optional[bool] = typer.Option(None, "--webp-lossless/--no-webp-lossless", help="WebP 使用无损模式"),
    keep_temps: Optional[bool] = typer.Option(None, "--keep-temps/--no-keep-temps", help="保留原始抽帧到 frames_raw"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="自定义配置文件"),
    log_level: str = typer.Option("INFO", "--log-level", "-v", help="日志级别"),
) -> None:
    """用 ffmpeg 抽帧后切分，并写出每张幻灯片的代表帧。"""

    setup_logging(log_level)
    cfg = _apply_overrides(
        _resolve_config(config_path),
        fps=fps,
        threshold=threshold,
        min_stable_seconds=min_stable_seconds,
        merge_policy=merge_policy,
        workers=workers,
        image_format=image_format,
        webp_lossless=webp_lossless,
        keep_temps=keep_temps,
    )
    target = out_dir or default_output_dir(video)
    _run(lambda: extract_slides(video, target, cfg))


@app.command("split-frames")
def split_frames_cmd(
    frames_dir: Path = typer.Argument(..., exists=True, file_okay=False, resolve_path=True, help="已抽好的帧目录（文件名以 _序号 结尾）"),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", "-o", help="输出目录，默认 <目录名>_slides"),
    fps: Optional[float] = typer.Option(None, "--fps", help="抽帧时使用的采样率，用于换算时间戳"),
    threshold: Optional[int] = typer.Option(None, "--threshold", help="区分幻灯片的汉明距离阈值 (0-64)"),
    min_stable_seconds: Optional[float] = typer.Option(None, "--min-stable-seconds", help="幻灯片最短稳定时长（秒）"),
    merge_policy: Optional[str] = typer.Option(None, "--merge-policy", help="短聚类合并策略：forward/nearest"),
    workers: Optional[int] = typer.Option(None, "--workers", help="指纹计算线程数，默认 CPU 核数"),
    image_format: Optional[str] = typer.Option(None, "--format", help="输出格式：png/webp/tiff/bmp/jpg/jpeg"),
    webp_lossless: Optional[bool] = typer.Option(None, "--webp-lossless/--no-webp-lossless", help="WebP 使用无损模式"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="自定义配置文件"),
    log_level: str = typer.Option("INFO", "--log-level", "-v", help="日志级别"),
) -> None:
    """对已有帧目录执行切分，跳过 ffmpeg 抽帧。"""

    setup_logging(log_level)
    cfg = _apply_overrides(
        _resolve_config(config_path),
        fps=fps,
        threshold=threshold,
        min_stable_seconds=min_stable_seconds,
        merge_policy=merge_policy,
        workers=workers,
        image_format=image_format,
        webp_lossless=webp_lossless,
        keep_temps=None,
    )
    target = out_dir or default_output_dir(frames_dir)
    _run(lambda: split_frame_directory(frames_dir, target, cfg))


def _run(job) -> None:
    try:
        summary = job()
    except (CancellationSignal, KeyboardInterrupt) as exc:
        typer.echo("已取消", err=True)
        raise typer.Exit(code=CANCELLED_EXIT_CODE) from exc
    except (SlidesplitError, FileNotFoundError) as exc:
        typer.echo(f"处理失败：{exc}", err=True)
        raise typer.Exit(code=1) from exc
    _report(summary)


if __name__ == "__main__":  # pragma: no cover
    app()
