#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Frame feature analyzer - CLI entry point

Flow: parse arguments -> build config -> build analyzer -> analyze each image
and write its JSON report. All exceptions are handled at the entry point so
exit codes and logging stay consistent.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .config import EngineConfig, get_default_config, load_config_from_file
from .insight import build_generator
from .pipeline_runner import FrameAnalyzer
from .utils import ensure_dir, setup_logger


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="frame-features",
        description="Frame Feature Analyzer - composition, color, element and effect features for a single frame",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  frame-features -i frames/shot01.png -o shot01_analysis.json

  # Several frames into a directory, native resolution
  frame-features -i frames/*.png -o reports/ --canvas native

  # With AI insight (needs ANTHROPIC_API_KEY)
  frame-features -i frames/shot01.png -o reports/ --insight
        """
    )

    parser.add_argument(
        "-i", "--images",
        nargs="+",
        required=True,
        help="Image files to analyze"
    )

    parser.add_argument(
        "-o", "--output",
        default="output",
        help="Output JSON file (single image) or directory (default: output)"
    )

    parser.add_argument(
        "--config",
        help="JSON configuration file"
    )

    parser.add_argument(
        "--canvas",
        help="Analysis canvas WIDTHxHEIGHT, or 'native' to keep the image size (default: 1920x1080)"
    )

    parser.add_argument(
        "--insight",
        action="store_true",
        help="Enable AI insight via the Anthropic API"
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Analyzer worker threads (1 = sequential)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write DEBUG logs to this file"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="DEBUG level console logging"
    )

    parser.add_argument(
        "--step-debug",
        action="store_true",
        help="Log a summary after each analysis stage"
    )

    return parser.parse_args(argv)


def parse_canvas(value: str) -> Optional[Tuple[int, int]]:
    """'1920x1080' -> (1920, 1080); 'native' -> None."""
    if value.strip().lower() == "native":
        return None
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"Invalid canvas '{value}'. Expected WIDTHxHEIGHT or 'native'")
    width, height = int(parts[0]), int(parts[1])
    if width < 1 or height < 1:
        raise ValueError(f"Invalid canvas '{value}'. Dimensions must be positive")
    return width, height


def build_config(args) -> EngineConfig:
    """Config file (or defaults) with command line overrides applied."""
    config = load_config_from_file(args.config) if args.config else get_default_config()

    if args.canvas:
        config.source.canvas_size = parse_canvas(args.canvas)
    if args.workers is not None:
        if args.workers < 1:
            raise ValueError("--workers must be at least 1")
        config.max_workers = args.workers
    config.insight.enabled = config.insight.enabled and args.insight

    return config


def resolve_output_paths(images: List[str], output: str) -> List[Path]:
    """One JSON path per image."""
    output_path = Path(output)
    if output_path.suffix.lower() == ".json":
        if len(images) > 1:
            raise ValueError("A .json output path takes a single image; pass a directory for several")
        return [output_path]

    ensure_dir(output_path)
    return [output_path / f"{Path(image).stem}_analysis.json" for image in images]


def build_step_hook(args):
    """Stage logger for --step-debug."""
    if not args.step_debug:
        return None

    def step_hook(stage: str, payload: Dict[str, Any]) -> None:
        if stage == "features":
            features = payload.get("features", {})
            logger.info(f"[Step] features {payload.get('width')}x{payload.get('height')} | {', '.join(features)}")
        elif stage == "insight":
            logger.info(f"[Step] insight after {payload.get('attempts')} attempt(s)")
        elif stage == "cache":
            state = "hit" if payload.get("hit") else "stored"
            logger.info(f"[Step] cache {state}: {payload.get('cache_key')}")
        else:
            logger.info(f"[Step] stage done: {stage}")

    return step_hook


def run_analysis(args) -> List[str]:
    """Analyze every image and return the written report paths."""
    config = build_config(args)
    output_paths = resolve_output_paths(args.images, args.output)
    generator = build_generator(config.insight)

    logger.info("Starting Frame Feature Analyzer")
    logger.info(f"Images: {args.images}")

    written = []
    with FrameAnalyzer(config, insight_generator=generator, step_hook=build_step_hook(args)) as analyzer:
        for i, (image, output_path) in enumerate(zip(args.images, output_paths), 1):
            logger.info(f"[{i}/{len(args.images)}] {Path(image).name}")
            result = analyzer.analyze_image_file(image)
            for rec in result.recommendations:
                logger.info(f"  [{rec.priority.value}] {rec.type}: {rec.message}")
            written.append(analyzer.export(result, output_path))

    logger.success(f"✓ Analysis complete! {len(written)} report(s) written")
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the exit code."""
    args = parse_args(argv)
    setup_logger(log_file=args.log_file, level="DEBUG" if args.verbose else "INFO")

    try:
        run_analysis(args)
        return 0
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}")
        import traceback
        logger.debug(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
