#!/usr/bin/env python3
"""
Compose a lesson video from a lesson script.

Usage:
    python scripts/compose_lesson.py <lesson.json> [--video-name NAME] [--output-dir DIR]
                                     [--render-backend thread|process]

Example:
    python scripts/compose_lesson.py lessons/photosynthesis.json --video-name photosynthesis
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project/backend to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
backend_path = os.path.join(project_root, "project", "backend")
sys.path.insert(0, backend_path)

from shared.errors import PipelineError
from shared.logging import get_logger
from modules.compositor import CompositorConfig, load_lesson, process

logger = get_logger("compose_lesson")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compose a narrated lesson video from a lesson script")
    parser.add_argument("lesson", type=Path, help="Path to the lesson script (JSON)")
    parser.add_argument("--video-name", default=None, help="Output video name without extension (default: lesson file name)")
    parser.add_argument("--output-dir", type=Path, default=None, help="Workspace and output directory (default: OUTPUT_DIR)")
    parser.add_argument(
        "--render-backend",
        choices=["thread", "process"],
        default=None,
        help="Run slide renders in threads or in separate processes"
    )
    parser.add_argument(
        "--pad-buffers",
        action="store_true",
        help="Cover the lead-in and trailing buffers with frames"
    )
    return parser.parse_args(argv)


async def compose(args: argparse.Namespace) -> int:
    lesson = load_lesson(args.lesson)

    overrides = {}
    if args.render_backend:
        overrides["render_backend"] = args.render_backend
    if args.pad_buffers:
        overrides["pad_timeline_buffers"] = True
    config = CompositorConfig(**overrides)

    video_name = args.video_name or args.lesson.stem
    result = await process(lesson, output_dir=args.output_dir, video_name=video_name, config=config)

    print("=" * 80)
    print(f"Video created: {result.output_path}")
    print("=" * 80)
    print(f"Duration:        {result.target_duration:.2f}s ({result.total_frames} frames @ {result.fps} fps)")
    print(f"Scenes:          {result.scene_count}")
    print(f"Unique renders:  {result.unique_renders} ({result.reused_scenes} scenes reused a render)")
    print(f"Failed renders:  {result.failed_renders}")
    print(f"Audio tracks:    {result.audio_tracks} ({result.silent_scenes} silent scenes)")
    print(f"Total time:      {result.timings.get('total', 0.0):.2f}s")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(compose(args))
    except PipelineError as e:
        logger.error(f"Lesson composition failed: {e.message}", extra={"lesson": str(args.lesson), "run_id": e.run_id})
        print(f"❌ ERROR: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
